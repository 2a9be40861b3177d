from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.widgets import Button, Input, Label, Static

from storehub.db.models import ChatEntry
from storehub.utils.navigation import Modal
from storehub.views.modal_dialog import StoreModal


class ChatBubble(Static):
    def __init__(self, entry: ChatEntry):
        classes = f"chat-{entry.role}" + (" chat-error" if entry.is_error else "")
        super().__init__(entry.text, classes=classes, markup=False)


class ChatModal(StoreModal):
    """
    Assistant chat. Each question runs in its own worker so the UI stays
    responsive while the model answers.
    """

    MODAL = Modal.CHAT

    def compose(self) -> ComposeResult:
        with Vertical(id="div-chat"):
            yield Label("Assistant", classes="form-title")
            yield VerticalScroll(id="vertscroll-chat")
            with Horizontal(id="hort-chat-input"):
                yield Input(placeholder="Ask the assistant...", id="input-chat")
                yield Button("Send", id="btn-send", variant="primary")

    async def on_mount(self) -> None:
        history = self.query_one("#vertscroll-chat")
        await history.mount_all([ChatBubble(e) for e in self.app.state.chat])
        history.scroll_end(animate=False)
        self.query_one("#input-chat").focus()

    @on(Input.Submitted, "#input-chat")
    @on(Button.Pressed, "#btn-send")
    def handle_send(self) -> None:
        chat_input = self.query_one("#input-chat", Input)
        query = chat_input.value.strip()
        if not query:
            return
        chat_input.value = ""
        self.ask(query)

    @work()
    async def ask(self, query: str) -> None:
        history = self.query_one("#vertscroll-chat")
        await history.mount(ChatBubble(ChatEntry(role="user", text=query)))
        history.scroll_end(animate=False)

        # owned by the app so closing this modal does not cancel the call;
        # the reply is in state.chat when the modal is reopened
        call = self.app.run_worker(
            self.app.state.ask_assistant(query), group="assistant", exit_on_error=False
        )
        reply = await call.wait()
        if reply is not None:
            await history.mount(ChatBubble(reply))
            history.scroll_end(animate=False)
