from typing import Dict


class StoreHubError(Exception):
    """Base class for every failure the app knows how to surface."""


class FormValidationError(StoreHubError):
    """
    Raised when raw form input cannot become an entity.
    errors maps a form field to the message shown next to it.
    """

    def __init__(self, errors: Dict[str, str]):
        super().__init__("; ".join(f"{k}: {v}" for k, v in errors.items()))
        self.errors = errors


class DuplicateEmailError(StoreHubError):
    def __init__(self, email: str):
        super().__init__(f"Email already registered: {email}")
        self.email = email


class InvalidCredentialsError(StoreHubError):
    def __init__(self):
        super().__init__("Invalid email or password.")


class UserNotFoundError(StoreHubError, LookupError):
    def __init__(self, user_id: str):
        super().__init__(f"No user with id {user_id}")
        self.user_id = user_id


class StorageError(StoreHubError):
    """Storage medium failed (disk error, quota exceeded, unserializable value)."""


class AssistantError(StoreHubError):
    pass
