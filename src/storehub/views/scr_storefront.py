from typing import List, Optional

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import DataTable, Input, Label, Select

from storehub.db.models import CATEGORY_FILTERS, Product
from storehub.utils.messages import StateChangedMessage
from storehub.utils.navigation import ViewMode
from storehub.utils.pure import format_price
from storehub.views.base_screen import BaseScreen

FEATURED_COUNT = 8


class StorefrontScreen(BaseScreen):
    """
    Product listing. Home shows the first few matches as featured items,
    the catalog view shows every match.
    """

    BINDINGS = [
        Binding("a", "add_to_cart", "Add to Cart", show=True),
        Binding("e", "edit_product", "Edit", show=True),
        Binding("n", "new_product", "New Product", show=True),
        Binding("c", "toggle_catalog", "Home/Catalog", show=True),
    ]

    def __init__(self):
        super().__init__(sub_title="Digital Goods Hub")
        self._rows: List[Product] = []

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical(id="div-storefront"):
            with Horizontal(id="hort-filters"):
                yield Input(
                    id="input-search", placeholder="Start typing to search products..."
                )
                yield Select(
                    [(c, c) for c in CATEGORY_FILTERS],
                    value="all",
                    allow_blank=False,
                    id="select-category",
                )
            yield Label("", id="label-listing-title")
            yield DataTable(id="table-products")
            yield Label("", id="label-empty")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Name", "Category", "Seller", "Price", "Was", "Rating", "Stock")
        self.refresh_state()
        self.query_one("#input-search").focus()

    def refresh_state(self) -> None:
        super().refresh_state()
        state = self.app.state
        products = state.visible_products()
        if state.nav.view is ViewMode.HOME:
            title = "Featured"
            products = products[:FEATURED_COUNT]
        else:
            title = "Catalog"
        self._rows = products
        self.refresh_bindings()

        self.query_one("#label-listing-title", Label).update(
            f"{title} ({state.nav.category}) - {len(products)} product(s)"
        )
        table = self.query_one(DataTable)
        table.clear()
        for p in products:
            table.add_row(
                p.name,
                p.category,
                p.seller + (" ✔" if p.verified else ""),
                format_price(p.price),
                format_price(p.original_price) if p.discount_percent else "",
                f"{p.rating:.1f}",
                "out" if p.out_of_stock else "yes",
            )
        self.query_one("#label-empty", Label).update(
            "" if products else "No products match your search."
        )

    def selected_product(self) -> Optional[Product]:
        table = self.query_one(DataTable)
        if not self._rows or not 0 <= table.cursor_row < len(self._rows):
            return None
        return self._rows[table.cursor_row]

    def changed(self) -> None:
        self.app.post_message(StateChangedMessage())

    def on_input_changed(self, message: Input.Changed) -> None:
        if message.input.id == "input-search":
            self.app.state.set_search(message.value)
            self.refresh_state()

    def on_select_changed(self, message: Select.Changed) -> None:
        if message.select.id == "select-category":
            if message.value == self.app.state.nav.category:
                return
            self.app.state.select_category(message.value)
            self.refresh_state()

    def on_data_table_row_selected(self, message: DataTable.RowSelected) -> None:
        product = self.selected_product()
        if product:
            self.app.state.show_details(product)
            self.changed()

    def check_action(self, action: str, parameters: tuple) -> Optional[bool]:
        if action in ("edit_product", "new_product"):
            return self.app.state.is_admin
        return True

    def action_add_to_cart(self) -> None:
        product = self.selected_product()
        if product:
            self.app.state.add_to_cart(product)
            self.changed()

    def action_edit_product(self) -> None:
        product = self.selected_product()
        if product:
            self.app.state.open_product_form(product)
            self.changed()

    def action_new_product(self) -> None:
        self.app.state.open_product_form(None)
        self.changed()

    def action_toggle_catalog(self) -> None:
        if self.app.state.nav.view is ViewMode.HOME:
            self.app.state.nav.open_catalog()
        else:
            self.app.state.nav.go_home()
        self.refresh_state()
