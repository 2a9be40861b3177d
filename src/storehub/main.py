from typing import Dict, Optional, Type

from textual import on
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import LoadingIndicator

from storehub.config import Settings, load_settings
from storehub.db.database import SqliteStore
from storehub.db.models import Toast
from storehub.services.assistant import AssistantService
from storehub.utils.logger import get_logger, set_debug
from storehub.utils.messages import QuitRequestedMessage, StateChangedMessage
from storehub.utils.navigation import Modal
from storehub.utils.state import AppState
from storehub.utils.toasts import ToastQueue
from storehub.views.base_screen import BaseScreen
from storehub.views.modal_auth import LoginModal, RegisterModal
from storehub.views.modal_cart import CartModal
from storehub.views.modal_chat import ChatModal
from storehub.views.modal_dialog import InfoModal, StoreModal
from storehub.views.modal_prod_detail import ProductDetailModal
from storehub.views.modal_product_form import ProductFormModal
from storehub.views.modal_profile import ProfileModal
from storehub.views.scr_storefront import StorefrontScreen

_logger = get_logger(__name__)

TOAST_SEVERITY = {"success": "information", "info": "information", "error": "error"}


class StoreHubApp(App):
    """
    Terminal storefront. The app owns the AppState; screens read and mutate it
    through self.app.state and post StateChangedMessage afterwards.
    """

    TITLE = "StoreHub"

    BINDINGS = [
        Binding("ctrl+k", "open_cart", "Cart", show=True),
        Binding("ctrl+g", "open_chat", "Assistant", show=True),
        Binding("ctrl+t", "dismiss_toasts", "Dismiss", show=False),
    ]

    CSS_PATH = "styles/storehub.tcss"

    MODAL_SCREENS: Dict[Modal, Type[StoreModal]] = {
        Modal.LOGIN: LoginModal,
        Modal.REGISTER: RegisterModal,
        Modal.PROFILE: ProfileModal,
        Modal.CART: CartModal,
        Modal.PRODUCT_FORM: ProductFormModal,
        Modal.CHAT: ChatModal,
        Modal.DETAILS: ProductDetailModal,
    }

    state: AppState

    def __init__(self, settings: Optional[Settings] = None, state: Optional[AppState] = None):
        super().__init__()
        settings = settings or load_settings()
        set_debug(settings.debug)
        self.state = state if state is not None else AppState(
            SqliteStore(settings.db_path, settings.quota_bytes),
            toasts=ToastQueue(settings.toast_ttl),
            assistant=AssistantService(settings.api_key, settings.assistant_model),
        )

    def compose(self) -> ComposeResult:
        yield LoadingIndicator()

    async def on_mount(self) -> None:
        self.state.toasts.add_listener(self.show_toast)
        self.state.initialize()
        await self.push_screen(StorefrontScreen())

    def on_unmount(self) -> None:
        self.state.close()

    def show_toast(self, toast: Toast) -> None:
        self.notify(
            toast.message,
            severity=TOAST_SEVERITY[toast.severity],
            timeout=self.state.toasts.ttl,
        )

    def build_modal(self, modal: Modal) -> StoreModal:
        if modal in (Modal.TERMS, Modal.HOW_IT_WORKS):
            return InfoModal(modal)
        return self.MODAL_SCREENS[modal]()

    def sync_modal(self) -> None:
        """Make the top screen match state.nav.modal."""
        wanted = self.state.nav.modal
        if isinstance(self.screen, StoreModal):
            if self.screen.MODAL is wanted:
                return
            self.pop_screen()
        if wanted is not Modal.NONE:
            self.push_screen(self.build_modal(wanted))

    def base_screen(self) -> Optional[BaseScreen]:
        for screen in reversed(self.screen_stack):
            if isinstance(screen, BaseScreen):
                return screen
        return None

    @on(StateChangedMessage)
    def handle_state_changed(self) -> None:
        self.sync_modal()
        screen = self.base_screen()
        if screen is not None:
            screen.refresh_state()

    @on(QuitRequestedMessage)
    def handle_quit(self) -> None:
        self.exit()

    def action_open_cart(self) -> None:
        self.state.open_modal(Modal.CART)
        self.post_message(StateChangedMessage())

    def action_open_chat(self) -> None:
        self.state.open_modal(Modal.CHAT)
        self.post_message(StateChangedMessage())

    def action_dismiss_toasts(self) -> None:
        self.state.dismiss_toasts()
        self.clear_notifications()


def main() -> None:
    app = StoreHubApp()
    app.run()


if __name__ == "__main__":
    main()
