# turn raw form input into entities, or raise FormValidationError
import dataclasses
import uuid
from datetime import datetime
from typing import Dict, Mapping, Optional

from storehub.db.models import CATEGORIES, Product, User
from storehub.errors import FormValidationError

DEFAULT_SELLER = "StoreHub Official"


def new_id() -> str:
    return uuid.uuid4().hex


def _required(errors: Dict[str, str], field: str, value: Optional[str]) -> str:
    if not value or not value.strip():
        errors[field] = "This field is required."
        return ""
    return value


def _parse_float(
    errors: Dict[str, str],
    field: str,
    raw: object,
    minimum: Optional[float] = None,
    maximum: Optional[float] = None,
) -> Optional[float]:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        errors[field] = "Must be a number."
        return None
    if value != value:  # NaN
        errors[field] = "Must be a number."
        return None
    if minimum is not None and value < minimum:
        errors[field] = f"Must be at least {minimum:g}."
    elif maximum is not None and value > maximum:
        errors[field] = f"Must be at most {maximum:g}."
    return value


def parse_login(email: str, password: str) -> tuple[str, str]:
    """Credentials are passed through untouched; matching is exact."""
    errors: Dict[str, str] = {}
    _required(errors, "email", email)
    _required(errors, "password", password)
    if errors:
        raise FormValidationError(errors)
    return email, password


def parse_registration(name: str, email: str, password: str) -> User:
    errors: Dict[str, str] = {}
    _required(errors, "name", name)
    _required(errors, "email", email)
    _required(errors, "password", password)
    if errors:
        raise FormValidationError(errors)
    return User(
        id=new_id(), name=name.strip(), email=email, password=password, is_admin=False
    )


def parse_profile(
    user: User,
    name: str,
    email: str,
    password: str,
    photo_url: Optional[str] = None,
    photo_data: Optional[str] = None,
) -> User:
    """
    Edited copy of user. id and is_admin never change here.
    A new photo URL drops embedded photo data and vice versa.
    """
    errors: Dict[str, str] = {}
    _required(errors, "name", name)
    _required(errors, "email", email)
    _required(errors, "password", password)
    if errors:
        raise FormValidationError(errors)

    photo_url = (photo_url or "").strip() or None
    if photo_url:
        photo_data = None
    elif photo_data:
        photo_url = None
    else:
        photo_url, photo_data = user.photo_url, user.photo_data

    return dataclasses.replace(
        user,
        name=name.strip(),
        email=email,
        password=password,
        photo_url=photo_url,
        photo_data=photo_data,
    )


def parse_product_form(
    data: Mapping[str, object], existing: Optional[Product] = None
) -> Product:
    """
    Build a Product from form fields.

    Editing keeps id, sales and created_at of the existing product.
    original_price of 0 or blank means "no discount".
    """
    errors: Dict[str, str] = {}

    name = _required(errors, "name", str(data.get("name") or ""))
    seller = str(data.get("seller") or "").strip() or DEFAULT_SELLER

    category = str(data.get("category") or "")
    if category not in CATEGORIES:
        errors["category"] = "Pick a category."

    price = _parse_float(errors, "price", data.get("price"), minimum=0)
    if price is None and "price" not in errors:
        errors["price"] = "This field is required."

    original_price = _parse_float(
        errors, "original_price", data.get("original_price"), minimum=0
    )
    rating = _parse_float(errors, "rating", data.get("rating"), 0, 5)

    if errors:
        raise FormValidationError(errors)

    image_url = str(data.get("image_url") or "").strip() or None
    image_data = None if image_url else (str(data.get("image_data") or "") or None)

    return Product(
        id=existing.id if existing else new_id(),
        name=name.strip(),
        seller=seller,
        category=category,
        price=price,
        original_price=original_price or None,
        rating=5.0 if rating is None else rating,
        sales=existing.sales if existing else 0,
        description=str(data.get("description") or "").strip(),
        image_emoji=str(data.get("image_emoji") or "")
        or (existing.image_emoji if existing else "Gamepad"),
        image_url=image_url,
        image_data=image_data,
        verified=bool(data.get("verified", existing.verified if existing else False)),
        out_of_stock=bool(data.get("out_of_stock", False)),
        created_at=existing.created_at if existing else datetime.now(),
    )
