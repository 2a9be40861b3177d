# provide dataclass models

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal, Optional, Tuple, get_args

Category = Literal[
    "games", "accounts", "skins", "giftcards", "services", "discord", "brawlhalla"
]
CategoryFilter = Literal[
    "all", "games", "accounts", "skins", "giftcards", "services", "discord", "brawlhalla"
]
Severity = Literal["success", "error", "info"]

CATEGORIES: Tuple[str, ...] = get_args(Category)
CATEGORY_FILTERS: Tuple[str, ...] = get_args(CategoryFilter)


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    seller: str
    category: Category
    price: float
    rating: float = 5.0
    sales: int = 0
    description: str = ""
    original_price: Optional[float] = None  # "was" price, shown struck through
    image_emoji: str = "Gamepad"  # fallback icon key when no image is set
    image_url: Optional[str] = None
    image_data: Optional[str] = None  # data: URI, exclusive with image_url
    verified: bool = False
    out_of_stock: bool = False
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def image_ref(self) -> Optional[str]:
        return self.image_url or self.image_data

    @property
    def discount_percent(self) -> Optional[int]:
        # original_price >= price is assumed, never enforced
        if not self.original_price or self.original_price <= self.price:
            return None
        return round((1 - self.price / self.original_price) * 100)


@dataclass(frozen=True)
class User:
    id: str
    name: str
    email: str  # login key
    password: str  # cleartext, see DESIGN.md
    is_admin: bool = False
    photo_url: Optional[str] = None
    photo_data: Optional[str] = None

    @property
    def photo_ref(self) -> Optional[str]:
        return self.photo_url or self.photo_data


@dataclass(frozen=True)
class CartItem:
    product: Product  # copy taken when the item was added
    quantity: int = 1

    @property
    def subtotal(self) -> float:
        return self.product.price * self.quantity


@dataclass(frozen=True)
class Toast:
    id: str
    message: str
    severity: Severity = "success"


@dataclass(frozen=True)
class ChatEntry:
    role: Literal["user", "assistant"]
    text: str
    is_error: bool = False


SEED_ADMIN = User(
    id="admin-id",
    name="Administrator",
    email="admin",
    password="0110",
    is_admin=True,
)
