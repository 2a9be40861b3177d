# src/storehub/db/repositories.py
from __future__ import annotations

from typing import Callable, Generic, List, Optional, TypeVar

from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from storehub.db.database import DurableStore
from storehub.db.models import SEED_ADMIN, CartItem, Product, User
from storehub.errors import (
    DuplicateEmailError,
    InvalidCredentialsError,
    UserNotFoundError,
)
from storehub.utils.logger import get_logger
from storehub.utils.pure import filter_products

_logger = get_logger(__name__)

T = TypeVar("T")

KEY_PREFIX = "storehub."
USERS_KEY = KEY_PREFIX + "users"
SESSION_KEY = KEY_PREFIX + "current-session"
PRODUCTS_KEY = KEY_PREFIX + "products"
CART_KEY = KEY_PREFIX + "cart"


# ---------------------------
# Base repositories
# ---------------------------


class Repository(Generic[T]):
    """
    Sole owner of one store key.

    The whole value is written back after every mutation; there is no dirty
    tracking. persist() never raises: failures go to on_persist_failure.
    """

    key: str

    def __init__(
        self,
        store: DurableStore,
        adapter: TypeAdapter,
        default: Callable[[], T],
        on_persist_failure: Optional[Callable[[str], None]] = None,
    ):
        self._store = store
        self._adapter = adapter
        self._default = default
        self._on_persist_failure = on_persist_failure
        self._value: Optional[T] = None
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    def initialize(self) -> T:
        """Load the key, or fall back to the default if absent or unreadable."""
        if self._initialized:
            raise RuntimeError(f"Repository '{self.key}' already initialized.")
        raw = self._store.read(self.key)
        if raw is None:
            self._value = self._default()
        else:
            try:
                self._value = self._adapter.validate_json(raw)
            except ValidationError as e:
                _logger.warning(
                    f"Discarding unreadable '{self.key}' ({e.error_count()} errors)."
                )
                self._value = self._default()
        self._initialized = True
        _logger.debug(f"Loaded '{self.key}'.")
        return self._value

    def _require(self) -> T:
        if not self._initialized:
            raise RuntimeError(f"Repository '{self.key}' used before initialize().")
        return self._value

    def _serialize(self) -> str:
        return self._adapter.dump_json(self._value).decode("utf-8")

    def persist(self) -> bool:
        try:
            ok = self._store.write(self.key, self._serialize())
        except PydanticSerializationError as e:
            _logger.error(f"Could not serialize '{self.key}': {e}")
            ok = False
        if not ok and self._on_persist_failure:
            self._on_persist_failure(self.key)
        return ok


class CollectionRepository(Repository[List[T]]):
    def get_all(self) -> List[T]:
        return list(self._require())

    def __len__(self) -> int:
        return len(self._require())

    def _append(self, item: T) -> T:
        self._require().append(item)
        self.persist()
        return item


# ---------------------------
# Users & Session
# ---------------------------


class UsersRepository(CollectionRepository[User]):
    key = USERS_KEY

    def __init__(self, store: DurableStore, on_persist_failure=None):
        super().__init__(
            store,
            TypeAdapter(List[User]),
            lambda: [SEED_ADMIN],
            on_persist_failure,
        )

    def find_by_id(self, user_id: str) -> Optional[User]:
        return next((u for u in self._require() if u.id == user_id), None)

    def email_taken(self, email: str) -> bool:
        """Case-sensitive, same as login."""
        return any(u.email == email for u in self._require())

    def register(self, candidate: User) -> User:
        """Append a new user. Raises DuplicateEmailError without mutating."""
        if self.email_taken(candidate.email):
            raise DuplicateEmailError(candidate.email)
        return self._append(candidate)

    def authenticate(self, email: str, password: str) -> User:
        """Exact match on both fields. No hashing, no throttling."""
        for user in self._require():
            if user.email == email and user.password == password:
                return user
        raise InvalidCredentialsError()

    def update_by_id(self, user: User) -> User:
        users = self._require()
        for i, existing in enumerate(users):
            if existing.id == user.id:
                users[i] = user
                self.persist()
                return user
        raise UserNotFoundError(user.id)


class SessionRepository(Repository[Optional[User]]):
    """Current authenticated identity. Absent key means logged out."""

    key = SESSION_KEY

    def __init__(self, store: DurableStore, on_persist_failure=None):
        super().__init__(
            store, TypeAdapter(Optional[User]), lambda: None, on_persist_failure
        )

    @property
    def current(self) -> Optional[User]:
        return self._require()

    def set(self, user: User) -> None:
        self._require()
        self._value = user
        self.persist()

    def clear(self) -> None:
        self._require()
        self._value = None
        self.persist()

    def persist(self) -> bool:
        if self._value is not None:
            return super().persist()
        ok = self._store.delete(self.key)
        if not ok and self._on_persist_failure:
            self._on_persist_failure(self.key)
        return ok


# ---------------------------
# Products
# ---------------------------


class ProductsRepository(CollectionRepository[Product]):
    key = PRODUCTS_KEY

    def __init__(self, store: DurableStore, on_persist_failure=None):
        super().__init__(
            store, TypeAdapter(List[Product]), list, on_persist_failure
        )

    def find_by_id(self, product_id: str) -> Optional[Product]:
        return next((p for p in self._require() if p.id == product_id), None)

    def upsert(self, product: Product) -> Product:
        """Replace the product with the same id in place, otherwise append."""
        products = self._require()
        for i, existing in enumerate(products):
            if existing.id == product.id:
                products[i] = product
                self.persist()
                return product
        return self._append(product)

    def list_matching(self, search_text: str, category: str) -> List[Product]:
        return filter_products(self._require(), search_text, category)


# ---------------------------
# Cart
# ---------------------------


class CartRepository(CollectionRepository[CartItem]):
    """
    Ordered cart lines. Every add is a new line holding a copy of the product,
    so later catalog edits never reach items already in the cart.
    """

    key = CART_KEY

    def __init__(self, store: DurableStore, on_persist_failure=None):
        super().__init__(
            store, TypeAdapter(List[CartItem]), list, on_persist_failure
        )

    def add_item(self, product: Product) -> CartItem:
        return self._append(CartItem(product=product, quantity=1))

    def remove_at(self, index: int) -> Optional[CartItem]:
        """Remove the line at index; out of range is a silent no-op."""
        items = self._require()
        if not 0 <= index < len(items):
            return None
        removed = items.pop(index)
        self.persist()
        return removed

    def clear(self) -> None:
        self._require().clear()
        self.persist()

    def count(self) -> int:
        return len(self._require())

    def total(self) -> float:
        return round(sum(item.subtotal for item in self._require()), 2)
