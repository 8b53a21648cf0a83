"""Checkout pricing and validation.

``price_checkout`` is pure: it works on whatever objects are in the
``CatalogLookup`` (ORM rows in production, plain namespaces in tests) and
never touches the session. ``load_catalog_for`` is the only DB-facing part.

Free topping rule: the first topping in the order the customer submitted
them is free, every later one is charged at its base price. It is not the
cheapest topping that is free.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Union

from ..errors import ValidationError
from ..model import Product, ProductVariant, Topping
from ..utils.money import ghs_float
from .checkout_request import LineRequest


@dataclass(frozen=True)
class DirectPrice:
    unit_pesewas: int
    variant_id = None
    variant_label = None


@dataclass(frozen=True)
class VariantPrice:
    variant_id: int
    variant_label: str
    unit_pesewas: int


PriceSource = Union[DirectPrice, VariantPrice]


@dataclass(frozen=True)
class PricedTopping:
    topping_id: int
    topping_name: str
    topping_base_pesewas: int
    price_applied_pesewas: int


@dataclass(frozen=True)
class PricedLine:
    product_id: int
    product_name: str
    price: PriceSource
    quantity: int
    toppings: tuple[PricedTopping, ...] = ()
    sugar_level: str | None = None
    spice_level: str | None = None
    note: str | None = None

    @property
    def unit_pesewas(self) -> int:
        return self.price.unit_pesewas

    @property
    def variant_id(self):
        return self.price.variant_id

    @property
    def variant_label(self):
        return self.price.variant_label

    @property
    def toppings_pesewas(self) -> int:
        return sum(t.price_applied_pesewas for t in self.toppings)

    @property
    def line_total_pesewas(self) -> int:
        return (self.unit_pesewas + self.toppings_pesewas) * self.quantity


@dataclass(frozen=True)
class PricedCart:
    lines: tuple[PricedLine, ...]

    @property
    def total_pesewas(self) -> int:
        return sum(line.line_total_pesewas for line in self.lines)

    @property
    def total_ghs(self) -> float:
        return ghs_float(self.total_pesewas)


@dataclass
class CatalogLookup:
    products: dict = field(default_factory=dict)
    variants: dict = field(default_factory=dict)
    toppings: dict = field(default_factory=dict)


def _resolve_price(line: LineRequest, product, lookup: CatalogLookup) -> PriceSource:
    if line.variant_id is not None:
        variant = lookup.variants.get(line.variant_id)
        if variant is None or variant.product_id != product.id:
            raise ValidationError(f"Variant {line.variant_id} is not valid for {product.name}")
        return VariantPrice(
            variant_id=variant.id,
            variant_label=variant.label,
            unit_pesewas=int(variant.price_pesewas),
        )
    if product.price_pesewas is None:
        raise ValidationError(f"{product.name} requires a variant selection")
    return DirectPrice(unit_pesewas=int(product.price_pesewas))


def _price_toppings(topping_ids: Iterable[int], lookup: CatalogLookup) -> tuple[PricedTopping, ...]:
    priced = []
    for idx, tid in enumerate(topping_ids):
        topping = lookup.toppings.get(tid)
        if topping is None:
            raise ValidationError(f"Topping {tid} not found")
        if not topping.is_active:
            raise ValidationError(f'Topping "{topping.name}" is not available')
        if not topping.in_stock:
            raise ValidationError(f'Topping "{topping.name}" is out of stock')
        base = int(topping.price_pesewas)
        priced.append(PricedTopping(
            topping_id=topping.id,
            topping_name=topping.name,
            topping_base_pesewas=base,
            price_applied_pesewas=0 if idx == 0 else base,
        ))
    return tuple(priced)


def price_line(line: LineRequest, lookup: CatalogLookup) -> PricedLine:
    product = lookup.products.get(line.product_id)
    if product is None:
        raise ValidationError(f"Product {line.product_id} not found")
    if not product.is_active:
        raise ValidationError(f"{product.name} is not available")
    if not product.in_stock:
        raise ValidationError(f"{product.name} is out of stock")
    if line.quantity < 1:
        raise ValidationError(f"Quantity for {product.name} must be at least 1")

    return PricedLine(
        product_id=product.id,
        product_name=product.name,
        price=_resolve_price(line, product, lookup),
        quantity=line.quantity,
        toppings=_price_toppings(line.topping_ids, lookup),
        sugar_level=line.sugar_level,
        spice_level=line.spice_level,
        note=line.note,
    )


def price_checkout(lines: Iterable[LineRequest], lookup: CatalogLookup) -> PricedCart:
    lines = tuple(lines)
    if not lines:
        raise ValidationError("items must be a non-empty list")
    return PricedCart(lines=tuple(price_line(line, lookup) for line in lines))


def load_catalog_for(lines: Iterable[LineRequest]) -> CatalogLookup:
    """Fetch every product, variant and topping the lines reference, in three queries."""
    lines = tuple(lines)
    product_ids = {l.product_id for l in lines}
    variant_ids = {l.variant_id for l in lines if l.variant_id is not None}
    topping_ids = {tid for l in lines for tid in l.topping_ids}

    lookup = CatalogLookup()
    if product_ids:
        lookup.products = {p.id: p for p in Product.query.filter(Product.id.in_(product_ids)).all()}
    if variant_ids:
        lookup.variants = {
            v.id: v for v in ProductVariant.query.filter(ProductVariant.id.in_(variant_ids)).all()
        }
    if topping_ids:
        lookup.toppings = {t.id: t for t in Topping.query.filter(Topping.id.in_(topping_ids)).all()}
    return lookup
