from __future__ import annotations

import asyncio
from typing import List, Optional

from storehub.db.database import DurableStore
from storehub.db.models import ChatEntry, Product, User
from storehub.db.repositories import (
    CartRepository,
    ProductsRepository,
    SessionRepository,
    UsersRepository,
)
from storehub.errors import (
    DuplicateEmailError,
    InvalidCredentialsError,
    UserNotFoundError,
)
from storehub.services.assistant import AssistantService, ProductSummary
from storehub.utils.logger import get_logger
from storehub.utils.navigation import Modal, NavigationState
from storehub.utils.pure import filter_products
from storehub.utils.toasts import ToastQueue

_logger = get_logger(__name__)

ASSISTANT_OFFLINE_TEXT = "The assistant is offline right now."
ASSISTANT_ERROR_TEXT = "Could not reach the assistant. Please try again later."
STORAGE_WARNING_TEXT = "Could not save your data. Changes will be kept until you quit."


class AppState:
    """
    Centralized application state, owned by the app and handed to screens.

    Fields:
      - users, session, products, cart: repositories, each persisting its key
      - nav: active view, modal and filters (not persisted)
      - toasts: transient notifications (not persisted)
      - chat: assistant conversation for this run (not persisted)

    Actions that span several entities, or need the session as a precondition,
    are methods here. Repositories do no authorization of their own.
    """

    def __init__(
        self,
        store: DurableStore,
        toasts: Optional[ToastQueue] = None,
        assistant: Optional[AssistantService] = None,
    ):
        self.store = store
        self.users = UsersRepository(store, self._handle_persist_failure)
        self.session = SessionRepository(store, self._handle_persist_failure)
        self.products = ProductsRepository(store, self._handle_persist_failure)
        self.cart = CartRepository(store, self._handle_persist_failure)
        self.nav = NavigationState()
        self.toasts = toasts if toasts is not None else ToastQueue()
        self.assistant = assistant if assistant is not None else AssistantService()
        self.chat: List[ChatEntry] = []
        self._storage_warned = False

    # ---------------------------
    # Startup & storage failures
    # ---------------------------

    def initialize(self) -> None:
        """Load every repository once, then drop a session whose user is gone."""
        self.users.initialize()
        self.session.initialize()
        self.products.initialize()
        self.cart.initialize()

        current = self.session.current
        if current is not None and self.users.find_by_id(current.id) is None:
            _logger.warning(f"Session user {current.id} no longer exists; logging out.")
            self.session.clear()

        if getattr(self.store, "memory_only", False):
            self._warn_storage()
        _logger.info(
            f"State loaded: {len(self.users)} users, {len(self.products)} products, "
            f"{self.cart.count()} cart items."
        )

    def _handle_persist_failure(self, key: str) -> None:
        _logger.debug(f"Persist failed for '{key}'.")
        self._warn_storage()

    def _warn_storage(self) -> None:
        # once per run, not once per failed write
        if self._storage_warned:
            return
        self._storage_warned = True
        self.toasts.enqueue(STORAGE_WARNING_TEXT, "error")

    # ---------------------------
    # Derived state
    # ---------------------------

    @property
    def current_user(self) -> Optional[User]:
        return self.session.current

    @property
    def is_admin(self) -> bool:
        user = self.session.current
        return bool(user and user.is_admin)

    def visible_products(self) -> List[Product]:
        """Recomputed on every call from products, search text and category."""
        return filter_products(
            self.products.get_all(), self.nav.search_query, self.nav.category
        )

    # ---------------------------
    # Navigation
    # ---------------------------

    def open_modal(self, modal: Modal) -> None:
        if modal is Modal.PROFILE:
            self.open_profile()
        elif modal is Modal.PRODUCT_FORM:
            self.open_product_form()
        else:
            self.nav.open(modal)

    def close_modal(self) -> None:
        self.nav.close()

    def set_search(self, text: str) -> None:
        self.nav.set_search(text)

    def select_category(self, category: str) -> None:
        self.nav.set_category(category)
        self.toasts.enqueue(f"Showing: {category}", "info")

    def show_details(self, product: Product) -> None:
        self.nav.show_details(product)

    def open_profile(self) -> None:
        if self.session.current is None:
            self.nav.open(Modal.LOGIN)
            return
        self.nav.open(Modal.PROFILE)

    def open_product_form(self, product: Optional[Product] = None) -> bool:
        if not self.is_admin:
            self.toasts.enqueue("Only administrators can edit products.", "error")
            return False
        self.nav.edit_product(product)
        return True

    # ---------------------------
    # Cart
    # ---------------------------

    def add_to_cart(self, product: Product) -> bool:
        """Auth-gated: without a session the cart is untouched and login opens."""
        if self.session.current is None:
            self.nav.open(Modal.LOGIN)
            self.toasts.enqueue("Log in to add items to your cart.", "error")
            return False
        self.cart.add_item(product)
        self.toasts.enqueue("Added to cart!")
        if self.nav.modal is Modal.DETAILS:
            self.nav.close()
        return True

    def remove_from_cart(self, index: int) -> bool:
        return self.cart.remove_at(index) is not None

    def checkout(self) -> bool:
        if not self.cart.count():
            self.toasts.enqueue("Cart is empty.", "error")
            return False
        total = self.cart.total()
        self.cart.clear()
        self.nav.close()
        self.toasts.enqueue(f"Order processed! Total ${total:.2f}")
        return True

    # ---------------------------
    # Accounts
    # ---------------------------

    def login(self, email: str, password: str) -> bool:
        try:
            user = self.users.authenticate(email, password)
        except InvalidCredentialsError:
            self.toasts.enqueue("Invalid email or password.", "error")
            return False
        self.session.set(user)
        self.nav.close()
        self.toasts.enqueue(f"Welcome back, {user.name}!")
        return True

    def register(self, candidate: User) -> bool:
        """Register and log in. A duplicate email keeps the register modal open."""
        try:
            user = self.users.register(candidate)
        except DuplicateEmailError:
            self.nav.open(Modal.REGISTER)
            self.toasts.enqueue("That email is already registered.", "error")
            return False
        self.session.set(user)
        self.nav.close()
        self.toasts.enqueue("Account created!")
        return True

    def update_profile(self, user: User) -> Optional[User]:
        """
        Users first, then the session if it is the same identity. An unknown
        user aborts before either key is written.
        """
        try:
            saved = self.users.update_by_id(user)
        except UserNotFoundError:
            self.toasts.enqueue("Profile no longer exists.", "error")
            return None
        current = self.session.current
        if current is not None and current.id == saved.id:
            self.session.set(saved)
        self.nav.close()
        self.toasts.enqueue("Profile updated.")
        return saved

    def logout(self) -> None:
        self.session.clear()
        self.nav.close()
        self.toasts.enqueue("Signed out.", "info")

    # ---------------------------
    # Catalog
    # ---------------------------

    def save_product(self, product: Product) -> bool:
        if not self.is_admin:
            self.toasts.enqueue("Only administrators can edit products.", "error")
            return False
        self.products.upsert(product)
        self.nav.close()
        self.toasts.enqueue("Catalog updated.")
        return True

    # ---------------------------
    # Assistant
    # ---------------------------

    async def ask_assistant(self, query: str) -> Optional[ChatEntry]:
        """
        Append the question, await the assistant, append exactly one reply.
        Assistant failures never leave this method. Cancellation still
        records an error entry before it propagates.
        """
        query = (query or "").strip()
        if not query:
            return None
        self.chat.append(ChatEntry(role="user", text=query))
        summaries = [ProductSummary.from_product(p) for p in self.products.get_all()]
        try:
            text = await self.assistant.get_product_recommendations(query, summaries)
        except asyncio.CancelledError:
            _logger.warning("Assistant call cancelled.")
            self.chat.append(
                ChatEntry(role="assistant", text=ASSISTANT_ERROR_TEXT, is_error=True)
            )
            raise
        except Exception:
            _logger.exception("Assistant call failed.")
            reply = ChatEntry(role="assistant", text=ASSISTANT_ERROR_TEXT, is_error=True)
        else:
            reply = ChatEntry(role="assistant", text=text or ASSISTANT_OFFLINE_TEXT)
        self.chat.append(reply)
        return reply

    def dismiss_toasts(self) -> int:
        """Dismiss every visible toast ahead of its timer; returns how many."""
        return sum(self.toasts.dismiss(t.id) for t in self.toasts.entries)

    def close(self) -> None:
        self.toasts.close()
