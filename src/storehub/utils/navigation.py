from dataclasses import dataclass
from enum import Enum
from typing import Optional

from storehub.db.models import CATEGORY_FILTERS, Product


class Modal(str, Enum):
    NONE = "none"
    LOGIN = "login"
    REGISTER = "register"
    PROFILE = "profile"
    CART = "cart"
    PRODUCT_FORM = "productForm"
    CHAT = "chat"
    TERMS = "terms"
    HOW_IT_WORKS = "howItWorks"
    DETAILS = "details"


class ViewMode(str, Enum):
    HOME = "home"
    CATEGORY_LISTING = "category-listing"


@dataclass
class NavigationState:
    """
    Which screen and overlay are active, plus the transient filters.

    Only plain transitions live here. Transitions that depend on the session
    or touch repositories are on AppState.
    """

    view: ViewMode = ViewMode.HOME
    modal: Modal = Modal.NONE
    category: str = "all"
    search_query: str = ""
    editing_product: Optional[Product] = None
    selected_product: Optional[Product] = None

    def open(self, modal: Modal) -> None:
        self.modal = Modal(modal)

    def close(self) -> None:
        """Always allowed, from any modal."""
        self.modal = Modal.NONE
        self.editing_product = None
        self.selected_product = None

    def show_details(self, product: Product) -> None:
        self.selected_product = product
        self.modal = Modal.DETAILS

    def edit_product(self, product: Optional[Product] = None) -> None:
        """None opens the form for a new product."""
        self.editing_product = product
        self.modal = Modal.PRODUCT_FORM

    def set_search(self, text: str) -> None:
        self.search_query = text or ""

    def set_category(self, category: str) -> None:
        if category not in CATEGORY_FILTERS:
            raise ValueError(f"Unknown category: {category}")
        self.category = category

    def go_home(self) -> None:
        self.view = ViewMode.HOME

    def open_catalog(self) -> None:
        self.view = ViewMode.CATEGORY_LISTING
