from __future__ import annotations

from textual import on
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.validation import Number
from textual.widgets import Button, Input, Label, Select, Switch, TextArea

from storehub.db.models import CATEGORIES
from storehub.errors import FormValidationError
from storehub.utils.forms import DEFAULT_SELLER, parse_product_form
from storehub.utils.navigation import Modal
from storehub.views.modal_dialog import StoreModal


class ProductFormModal(StoreModal):
    """
    Admin create/edit form for nav.editing_product (None = new product).
    """

    MODAL = Modal.PRODUCT_FORM

    def compose(self) -> ComposeResult:
        prod = self.app.state.nav.editing_product
        with VerticalScroll(id="div-prod-form", classes="store-form"):
            yield Label(
                "Edit product" if prod else "New product", classes="form-title"
            )
            yield Label("Name")
            yield Input(
                prod.name if prod else "",
                placeholder="Valorant Account",
                id="input-name",
            )
            yield Label("", id="err-name", classes="field-error")
            yield Label("Seller")
            yield Input(prod.seller if prod else DEFAULT_SELLER, id="input-seller")
            yield Label("Category")
            yield Select(
                [(c, c) for c in CATEGORIES],
                value=prod.category if prod else CATEGORIES[0],
                allow_blank=False,
                id="input-category",
            )
            yield Label("", id="err-category", classes="field-error")
            with Horizontal():
                with Vertical():
                    yield Label("Price ($)")
                    yield Input(
                        f"{prod.price:.2f}" if prod else "",
                        placeholder="0.00",
                        type="number",
                        validators=[Number(minimum=0.0)],
                        id="input-price",
                    )
                    yield Label("", id="err-price", classes="field-error")
                with Vertical():
                    yield Label("Original price ($)")
                    yield Input(
                        f"{prod.original_price:.2f}"
                        if prod and prod.original_price
                        else "",
                        placeholder="leave blank for no discount",
                        type="number",
                        id="input-original_price",
                    )
                    yield Label("", id="err-original_price", classes="field-error")
                with Vertical():
                    yield Label("Rating (0-5)")
                    yield Input(
                        f"{prod.rating:.1f}" if prod else "5.0",
                        type="number",
                        validators=[Number(minimum=0.0, maximum=5.0)],
                        id="input-rating",
                    )
                    yield Label("", id="err-rating", classes="field-error")
            yield Label("Image URL")
            yield Input(
                (prod.image_url or "") if prod else "",
                placeholder="https://...",
                id="input-image_url",
            )
            yield Label("Description")
            yield TextArea(prod.description if prod else "", id="input-description")
            with Horizontal(classes="switches"):
                yield Label("Out of stock")
                yield Switch(prod.out_of_stock if prod else False, id="switch-out-of-stock")
                yield Label("Verified seller")
                yield Switch(prod.verified if prod else False, id="switch-verified")
            with Horizontal(classes="form-btns"):
                yield Button("Cancel", id="btn-cancel")
                yield Button("Save", id="btn-save", variant="primary")

    def on_mount(self) -> None:
        self.query_one("#input-name").focus()

    def form_data(self) -> dict:
        data = {
            field: self.query_one(f"#input-{field}", Input).value
            for field in ("name", "seller", "price", "original_price", "rating", "image_url")
        }
        data["category"] = self.query_one("#input-category", Select).value
        data["description"] = self.query_one("#input-description", TextArea).text
        data["out_of_stock"] = self.query_one("#switch-out-of-stock", Switch).value
        data["verified"] = self.query_one("#switch-verified", Switch).value
        # uploaded image data is kept; this form only edits URLs
        existing = self.app.state.nav.editing_product
        data["image_data"] = existing.image_data if existing else None
        return data

    @on(Button.Pressed, "#btn-save")
    def handle_save(self) -> None:
        existing = self.app.state.nav.editing_product
        try:
            product = parse_product_form(self.form_data(), existing)
        except FormValidationError as e:
            self.show_errors(e.errors)
            return
        self.app.state.save_product(product)
        self.state_changed()

    @on(Button.Pressed, "#btn-cancel")
    def handle_cancel(self) -> None:
        self.action_close()
