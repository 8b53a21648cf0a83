"""Shape validation for the checkout body.

Only structure and types are checked here; whether the referenced products,
variants and toppings exist and can be sold is the pricing engine's job.
"""
from __future__ import annotations

import re
from dataclasses import dataclass

from ..errors import ValidationError

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


@dataclass(frozen=True)
class LineRequest:
    product_id: int
    quantity: int
    variant_id: int | None = None
    topping_ids: tuple[int, ...] = ()
    sugar_level: str | None = None
    spice_level: str | None = None
    note: str | None = None


@dataclass(frozen=True)
class CheckoutRequest:
    phone: str
    location_text: str
    items: tuple[LineRequest, ...]
    notes: str | None = None
    payee_name: str | None = None
    payee_email: str | None = None


def _is_int(v) -> bool:
    return isinstance(v, int) and not isinstance(v, bool)


def _req_str(data: dict, key: str, label: str | None = None) -> str:
    v = data.get(key)
    if not isinstance(v, str) or not v.strip():
        raise ValidationError(f"{label or key} is required")
    return v.strip()


def _opt_str(data: dict, key: str, label: str | None = None) -> str | None:
    v = data.get(key)
    if v is None:
        return None
    if not isinstance(v, str):
        raise ValidationError(f"{label or key} must be a string")
    return v.strip() or None


def _opt_int(data: dict, key: str, label: str) -> int | None:
    v = data.get(key)
    if v is None:
        return None
    if not _is_int(v):
        raise ValidationError(f"{label} must be an integer")
    return v


def _topping_ids(raw, label: str) -> tuple[int, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise ValidationError(f"{label} must be a list")
    ids = []
    for j, t in enumerate(raw):
        # accept bare ids or {"topping_id": n}
        tid = t.get("topping_id") if isinstance(t, dict) else t
        if not _is_int(tid):
            raise ValidationError(f"{label}[{j}] must be a topping id")
        ids.append(tid)
    return tuple(ids)


def _parse_line(raw, i: int) -> LineRequest:
    label = f"items[{i}]"
    if not isinstance(raw, dict):
        raise ValidationError(f"{label} must be an object")

    product_id = raw.get("product_id")
    if not _is_int(product_id):
        raise ValidationError(f"{label}.product_id must be an integer")

    quantity = raw.get("quantity")
    if not _is_int(quantity) or quantity < 1:
        raise ValidationError(f"{label}.quantity must be an integer >= 1")

    return LineRequest(
        product_id=product_id,
        quantity=quantity,
        variant_id=_opt_int(raw, "variant_id", f"{label}.variant_id"),
        topping_ids=_topping_ids(raw.get("toppings"), f"{label}.toppings"),
        sugar_level=_opt_str(raw, "sugar_level", f"{label}.sugar_level"),
        spice_level=_opt_str(raw, "spice_level", f"{label}.spice_level"),
        note=_opt_str(raw, "note", f"{label}.note"),
    )


def parse_checkout_payload(data) -> CheckoutRequest:
    if not isinstance(data, dict):
        raise ValidationError("request body must be a JSON object")

    phone = _req_str(data, "phone")
    location_text = _req_str(data, "location_text")

    items = data.get("items")
    if not isinstance(items, list) or not items:
        raise ValidationError("items must be a non-empty list")

    payee_email = _opt_str(data, "payee_email")
    if payee_email and not _EMAIL_RE.match(payee_email):
        raise ValidationError("payee_email must be a valid email address")

    return CheckoutRequest(
        phone=phone,
        location_text=location_text,
        items=tuple(_parse_line(raw, i) for i, raw in enumerate(items)),
        notes=_opt_str(data, "notes"),
        payee_name=_opt_str(data, "payee_name"),
        payee_email=payee_email,
    )
