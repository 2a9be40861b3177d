from textual import on
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.events import Key
from textual.widgets import Button, Input, Label

from storehub.errors import FormValidationError
from storehub.utils.forms import parse_login, parse_registration
from storehub.utils.navigation import Modal
from storehub.views.modal_dialog import StoreModal


class LoginModal(StoreModal):
    """
    Email + password. On success AppState closes the modal.
    """

    MODAL = Modal.LOGIN

    def compose(self) -> ComposeResult:
        with Vertical(id="div-login", classes="store-form"):
            yield Label("Log in", classes="form-title")
            yield Label("Email")
            yield Input(placeholder="user@example.com", id="input-email")
            yield Label("", id="err-email", classes="field-error")
            yield Label("Password")
            yield Input(placeholder="*********", password=True, id="input-password")
            yield Label("", id="err-password", classes="field-error")
            with Horizontal(classes="form-btns"):
                yield Button("Create account", id="btn-goto-register")
                yield Button("Log in", id="btn-login", variant="primary")

    def on_mount(self):
        self.query_one("#input-email").focus()

    def on_key(self, event: Key) -> None:
        if event.key == "enter" and self.focused == self.query_one("#input-password"):
            self.handle_login_submit()

    @on(Button.Pressed, "#btn-login")
    def handle_login_submit(self) -> None:
        email = self.query_one("#input-email", Input).value
        password = self.query_one("#input-password", Input).value
        try:
            email, password = parse_login(email, password)
        except FormValidationError as e:
            self.show_errors(e.errors)
            return
        self.show_errors({})

        if not self.app.state.login(email, password):
            input_password = self.query_one("#input-password", Input)
            input_password.value = ""
            input_password.focus()
            input_password.add_class("-invalid")
        self.state_changed()

    @on(Button.Pressed, "#btn-goto-register")
    def handle_goto_register(self) -> None:
        self.app.state.open_modal(Modal.REGISTER)
        self.state_changed()


class RegisterModal(StoreModal):
    """
    New account. Logs the user in right away (login-on-register).
    """

    MODAL = Modal.REGISTER

    def compose(self) -> ComposeResult:
        with Vertical(id="div-reg", classes="store-form"):
            yield Label("Create account", classes="form-title")
            yield Label("Name")
            yield Input(placeholder="Jane Doe", id="input-name")
            yield Label("", id="err-name", classes="field-error")
            yield Label("Email")
            yield Input(placeholder="user@example.com", id="input-email")
            yield Label("", id="err-email", classes="field-error")
            yield Label("Password")
            yield Input(placeholder="*********", password=True, id="input-password")
            yield Label("", id="err-password", classes="field-error")
            with Horizontal(classes="form-btns"):
                yield Button("I have an account", id="btn-goto-login")
                yield Button("Register", id="btn-reg", variant="primary")

    def on_mount(self):
        self.query_one("#input-name").focus()

    def on_key(self, event: Key) -> None:
        if event.key == "enter" and self.focused == self.query_one("#input-password"):
            self.handle_registration_submit()

    @on(Button.Pressed, "#btn-reg")
    def handle_registration_submit(self) -> None:
        try:
            candidate = parse_registration(
                self.query_one("#input-name", Input).value,
                self.query_one("#input-email", Input).value,
                self.query_one("#input-password", Input).value,
            )
        except FormValidationError as e:
            self.show_errors(e.errors)
            return
        self.show_errors({})

        if not self.app.state.register(candidate):
            self.query_one("#input-email", Input).add_class("-invalid")
            self.query_one("#input-email", Input).focus()
        self.state_changed()

    @on(Button.Pressed, "#btn-goto-login")
    def handle_goto_login(self) -> None:
        self.app.state.open_modal(Modal.LOGIN)
        self.state_changed()
