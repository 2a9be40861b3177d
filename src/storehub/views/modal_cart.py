from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, DataTable, Label, Rule

from storehub.utils.navigation import Modal
from storehub.utils.pure import format_price
from storehub.views.modal_dialog import DialogModal, StoreModal


class CartModal(StoreModal):
    """
    Cart lines in insertion order. Duplicates are separate rows and are
    removed by position.
    """

    MODAL = Modal.CART

    def compose(self) -> ComposeResult:
        with Vertical(id="div-cart"):
            yield Label("Cart", classes="form-title")
            yield DataTable(id="table-cart")
            yield Label("Total: $0.00", id="label-cart-total")
            yield Rule(line_style="dashed")
            with Horizontal(classes="form-btns"):
                yield Button("Remove item", id="btn-remove")
                yield Button("Checkout", id="btn-checkout", variant="primary")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("#", "Product", "Seller", "Qty", "Price")
        self.refresh_cart()
        table.focus()

    def refresh_cart(self) -> None:
        cart = self.app.state.cart
        table = self.query_one(DataTable)
        table.clear()
        for i, item in enumerate(cart.get_all()):
            table.add_row(
                str(i + 1),
                item.product.name,
                item.product.seller,
                str(item.quantity),
                format_price(item.subtotal),
            )
        self.query_one("#label-cart-total", Label).update(
            f"Total: {format_price(cart.total())}"
        )
        self.query_one("#btn-checkout", Button).disabled = not cart.count()
        self.query_one("#btn-remove", Button).disabled = not cart.count()

    @on(Button.Pressed, "#btn-remove")
    def handle_remove(self) -> None:
        table = self.query_one(DataTable)
        if self.app.state.remove_from_cart(table.cursor_row):
            self.app.state.toasts.enqueue("Item removed from cart.", "info")
        self.refresh_cart()
        self.state_changed()

    @on(Button.Pressed, "#btn-checkout")
    @work()
    async def handle_checkout(self) -> None:
        if not await self.app.push_screen_wait(
            DialogModal(
                f"Place order for {format_price(self.app.state.cart.total())}?",
                primary_text="Yes",
                secondary_text="No",
                tone="positive",
            )
        ):
            return
        self.app.state.checkout()
        self.state_changed()
