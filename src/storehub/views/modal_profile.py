from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, Input, Label

from storehub.errors import FormValidationError
from storehub.utils.forms import parse_profile
from storehub.utils.navigation import Modal
from storehub.views.modal_dialog import DialogModal, StoreModal


class ProfileModal(StoreModal):
    MODAL = Modal.PROFILE

    def compose(self) -> ComposeResult:
        user = self.app.state.current_user
        with Vertical(id="div-profile", classes="store-form"):
            yield Label(
                f"Profile ({'Administrator' if user.is_admin else 'Member'})",
                classes="form-title",
            )
            yield Label("Name")
            yield Input(user.name, id="input-name")
            yield Label("", id="err-name", classes="field-error")
            yield Label("Email")
            yield Input(user.email, id="input-email")
            yield Label("", id="err-email", classes="field-error")
            yield Label("Password")
            yield Input(user.password, password=True, id="input-password")
            yield Label("", id="err-password", classes="field-error")
            yield Label("Photo URL")
            yield Input(user.photo_url or "", placeholder="https://...", id="input-photo")
            with Horizontal(classes="form-btns"):
                yield Button("Log out", id="btn-logout", variant="error")
                yield Button("Save", id="btn-save", variant="primary")

    @on(Button.Pressed, "#btn-save")
    def handle_save(self) -> None:
        try:
            edited = parse_profile(
                self.app.state.current_user,
                self.query_one("#input-name", Input).value,
                self.query_one("#input-email", Input).value,
                self.query_one("#input-password", Input).value,
                photo_url=self.query_one("#input-photo", Input).value,
            )
        except FormValidationError as e:
            self.show_errors(e.errors)
            return
        self.app.state.update_profile(edited)
        self.state_changed()

    @on(Button.Pressed, "#btn-logout")
    @work()
    async def handle_logout(self) -> None:
        if not await self.app.push_screen_wait(
            DialogModal(
                "Are you sure you want to log out?",
                primary_text="Yes",
                secondary_text="No",
                tone="warning",
            )
        ):
            return
        self.app.state.logout()
        self.state_changed()
