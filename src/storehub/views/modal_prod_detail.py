from textual import on
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, MarkdownViewer

from storehub.db.models import Product
from storehub.utils.navigation import Modal
from storehub.utils.pure import format_price, generate_markdown_table
from storehub.views.modal_dialog import StoreModal


def product_markdown(prod: Product) -> str:
    price = format_price(prod.price)
    if prod.discount_percent:
        price += f" ~~{format_price(prod.original_price)}~~ (-{prod.discount_percent}%)"
    rows = [
        ["Category", prod.category],
        ["Seller", prod.seller + (" ✔" if prod.verified else "")],
        ["Price", price],
        ["Rating", f"{prod.rating:.1f} / 5"],
        ["Sales", prod.sales],
        ["Availability", "Out of stock" if prod.out_of_stock else "In stock"],
    ]
    if prod.image_url:
        rows.append(["Image", prod.image_url])
    md = f"### {prod.name}\n\n"
    md += generate_markdown_table(["Attribute", "Value"], rows, ["l", "l"])
    if prod.description:
        md += f"\n\n{prod.description}"
    return md


class ProductDetailModal(StoreModal):
    """
    Shows nav.selected_product. Adding to cart goes through the auth gate
    and closes this modal on success.
    """

    MODAL = Modal.DETAILS

    def compose(self) -> ComposeResult:
        with Vertical(id="div-prod-detail"):
            yield MarkdownViewer("", show_table_of_contents=False)
            with Horizontal(classes="form-btns"):
                yield Button("Go Back", id="btn-quit")
                yield Button("Add to Cart", id="btn-addcart", variant="primary")

    async def on_mount(self):
        prod = self.app.state.nav.selected_product
        await self.query_one(MarkdownViewer).document.update(product_markdown(prod))

        if prod.out_of_stock:
            order_btn = self.query_one("#btn-addcart", Button)
            order_btn.label = "Out of Stock"
            order_btn.disabled = True
            order_btn.variant = "warning"

    @on(Button.Pressed, "#btn-quit")
    def handle_quit(self):
        self.action_close()

    @on(Button.Pressed, "#btn-addcart")
    def handle_addcart(self):
        self.app.state.add_to_cart(self.app.state.nav.selected_product)
        self.state_changed()
