from typing import ClassVar, Dict, Literal, Mapping, Tuple, override

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal, VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label, Markdown

from storehub.utils.messages import QuitRequestedMessage, StateChangedMessage
from storehub.utils.navigation import Modal


class DialogModal(ModalScreen[bool]):
    """
    A simple yes/no dialog box. Not tied to nav.modal; used for confirmations.
    """

    VARIANT_MAP: Dict[
        str, Tuple[Literal["primary", "default", "success", "warning", "error"], ...]
    ] = {
        "default": ("primary", "default"),
        "positive": ("success", "default"),
        "warning": ("warning", "default"),
        "error": ("error", "primary"),
    }

    def __init__(
        self,
        caption: str,
        primary_text: str = "OK",
        secondary_text: str = "",
        tone: Literal["default", "positive", "warning", "error"] = "default",
    ):
        super().__init__()
        self.caption = caption
        self.primary_text = primary_text
        self.secondary_text = secondary_text
        self.tone = tone

    def compose(self) -> ComposeResult:
        with Container(id="div-dialog"):
            yield Label(self.caption, id="caption")
            with Horizontal(id="dialog"):
                if self.secondary_text:
                    yield Button(
                        self.secondary_text,
                        variant=DialogModal.VARIANT_MAP[self.tone][1],
                        id="btn-secondary",
                    )
                yield Button(
                    self.primary_text,
                    variant=DialogModal.VARIANT_MAP[self.tone][0],
                    id="btn-primary",
                )

    def on_mount(self):
        # destructive dialogs focus the safe button
        if not self.secondary_text or not self.tone == "error":
            self.query_one("#btn-primary").focus()
        else:
            self.query_one("#btn-secondary").focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-primary":
            self.dismiss(True)
        if event.button.id == "btn-secondary":
            self.dismiss(False)


class QuitDialogModal(DialogModal):
    def __init__(self):
        super().__init__("Are you sure you want to quit?", "Yes", "No", "error")

    @override
    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-primary":
            self.app.post_message(QuitRequestedMessage())
            self.dismiss(True)
        else:
            self.dismiss(False)


class StoreModal(ModalScreen[None]):
    """
    Base for overlays that mirror nav.modal.
    Closing goes through AppState so the state machine stays the source of truth.
    """

    MODAL: ClassVar[Modal] = Modal.NONE

    BINDINGS = [Binding("escape", "close", "Close", show=True)]

    def action_close(self) -> None:
        self.app.state.close_modal()
        self.state_changed()

    def state_changed(self) -> None:
        self.app.post_message(StateChangedMessage())

    def show_errors(self, errors: Mapping[str, str]) -> None:
        """Inline validation: fill #err-<field> labels, mark #input-<field>."""
        for label in self.query(".field-error"):
            label.update("")
        for inp in self.query(Input):
            inp.remove_class("-invalid")
        for field, message in errors.items():
            for label in self.query(f"#err-{field}"):
                label.update(message)
            for inp in self.query(f"#input-{field}"):
                inp.add_class("-invalid")


TERMS_MD = """\
## Terms of Use

- Digital goods are delivered to the account used at checkout.
- Accounts are personal; keep your password to yourself.
- Orders are final once processed.
"""

HOW_IT_WORKS_MD = """\
## How it works

1. **Browse** the catalog or ask the assistant for a recommendation.
2. **Log in** and add items to your cart.
3. **Check out** and receive your items instantly.
"""


class InfoModal(StoreModal):
    """Static text overlay (terms, how it works)."""

    TEXTS = {Modal.TERMS: TERMS_MD, Modal.HOW_IT_WORKS: HOW_IT_WORKS_MD}

    def __init__(self, modal: Modal):
        super().__init__()
        self.MODAL = modal

    def compose(self) -> ComposeResult:
        with VerticalScroll(id="div-info"):
            yield Markdown(self.TEXTS[self.MODAL])
            yield Button("Close", id="btn-close", variant="primary")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-close":
            self.action_close()
