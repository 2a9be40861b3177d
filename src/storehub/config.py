# runtime settings, read from the environment once at startup
import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_DB_PATH = "data/storehub.sqlite"
DEFAULT_QUOTA_BYTES = 5 * 1024 * 1024  # same order as a browser's localStorage
DEFAULT_TOAST_TTL = 3.5
DEFAULT_ASSISTANT_MODEL = "gemini-3-flash-preview"


@dataclass(frozen=True)
class Settings:
    db_path: str = DEFAULT_DB_PATH
    quota_bytes: int = DEFAULT_QUOTA_BYTES
    toast_ttl: float = DEFAULT_TOAST_TTL
    assistant_model: str = DEFAULT_ASSISTANT_MODEL
    api_key: Optional[str] = None
    debug: bool = False


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def load_settings() -> Settings:
    """Build Settings from STOREHUB_* variables, falling back to defaults."""
    return Settings(
        db_path=os.getenv("STOREHUB_DB_PATH") or DEFAULT_DB_PATH,
        quota_bytes=int(_env_float("STOREHUB_QUOTA_BYTES", DEFAULT_QUOTA_BYTES)),
        toast_ttl=_env_float("STOREHUB_TOAST_TTL", DEFAULT_TOAST_TTL),
        assistant_model=os.getenv("STOREHUB_ASSISTANT_MODEL")
        or DEFAULT_ASSISTANT_MODEL,
        api_key=os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY") or None,
        debug=bool(os.getenv("DEBUG")),
    )
