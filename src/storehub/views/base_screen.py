from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.screen import Screen
from textual.widgets import Button, Footer, Header, Label, ListItem, ListView, Markdown

from storehub.utils.messages import StateChangedMessage
from storehub.utils.navigation import Modal
from storehub.utils.pure import generate_markdown_table
from storehub.views.modal_dialog import QuitDialogModal

MENU = {
    "home": "Home",
    "catalog": "Full Catalog",
    "cart": "Cart",
    "chat": "Assistant",
    "howItWorks": "How it works",
    "terms": "Terms",
}


class Sidebar(Container):
    def compose(self) -> ComposeResult:
        yield Label("User Info", id="label-info-1")
        yield Markdown("", id="md-userinfo")
        yield Button("Log in", id="btn-login", variant="primary")
        yield Button("Sign up", id="btn-register")
        yield Button("Profile", id="btn-profile")
        yield Label("Menu", id="label-info-2")
        yield ListView(
            *[ListItem(Label(v), id="list-menu-item-" + k) for k, v in MENU.items()],
            id="list-menu",
        )

    def on_mount(self) -> None:
        self.refresh_user()

    def refresh_user(self) -> None:
        state = self.app.state
        user = state.current_user
        if user:
            table_rows = [
                ["Name", user.name],
                ["Email", user.email],
                ["Role", "Administrator" if user.is_admin else "Member"],
                ["Cart", f"{state.cart.count()} item(s)"],
            ]
        else:
            table_rows = [["Guest", "not logged in"], ["Cart", f"{state.cart.count()} item(s)"]]
        self.query_one(Markdown).update(
            generate_markdown_table(["", ""], table_rows, ["l", "l"])
        )
        self.query_one("#btn-login").display = user is None
        self.query_one("#btn-register").display = user is None
        self.query_one("#btn-profile").display = user is not None

    def on_list_view_selected(self, event: ListView.Selected) -> None:
        selected = event.item.id.removeprefix("list-menu-item-")
        state = self.app.state
        if selected == "home":
            state.nav.go_home()
        elif selected == "catalog":
            state.nav.open_catalog()
        else:
            state.open_modal(Modal(selected))
        self.app.post_message(StateChangedMessage())

    @on(Button.Pressed, "#btn-login")
    def handle_login(self) -> None:
        self.app.state.open_modal(Modal.LOGIN)
        self.app.post_message(StateChangedMessage())

    @on(Button.Pressed, "#btn-register")
    def handle_register(self) -> None:
        self.app.state.open_modal(Modal.REGISTER)
        self.app.post_message(StateChangedMessage())

    @on(Button.Pressed, "#btn-profile")
    def handle_profile(self) -> None:
        self.app.state.open_profile()
        self.app.post_message(StateChangedMessage())


class BaseScreen(Screen):
    """
    Inherited by full screens: header, footer, sidebar and quit binding.
    """

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit App", show=True),
    ]

    def __init__(self, sub_title: str = "", show_sidebar: bool = True):
        super().__init__()
        self.sub_title = sub_title
        self._show_sidebar = show_sidebar

    def compose(self) -> ComposeResult:
        if self._show_sidebar:
            yield Sidebar()
        yield Header()
        yield Footer(show_command_palette=False)

    def refresh_state(self) -> None:
        """Re-render from AppState; called by the app after every action."""
        for sidebar in self.query(Sidebar):
            sidebar.refresh_user()

    @work()
    async def action_quit(self):
        await self.app.push_screen_wait(QuitDialogModal())
