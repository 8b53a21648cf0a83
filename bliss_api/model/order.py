from ..extensions import db
from ..utils.dates import utcnow, iso
from ..utils.money import ghs_float

# fulfilment
ORDER_PENDING = "pending"
ORDER_CONFIRMED = "confirmed"
ORDER_CANCELLED = "cancelled"
# statuses an admin may set by hand
ADMIN_ORDER_STATUSES = ("pending", "preparing", "ready", "delivered", "cancelled")

# payment lifecycle
PAYMENT_UNPAID = "unpaid"
PAYMENT_PAID = "paid"
PAYMENT_FAILED = "failed"


class Order(db.Model):
    __tablename__ = "orders"

    id = db.Column(db.Integer, primary_key=True)
    phone = db.Column(db.String(50), nullable=False, index=True)
    location_text = db.Column(db.Text, nullable=False)
    notes = db.Column(db.Text)

    total_pesewas = db.Column(db.Integer, nullable=False)

    status = db.Column(db.String(20), nullable=False, default=ORDER_PENDING, index=True)
    payment_status = db.Column(db.String(20), nullable=False, default=PAYMENT_UNPAID, index=True)

    # idempotency reference shared with Hubtel
    client_reference = db.Column(db.String(32), nullable=False, unique=True, index=True)
    hubtel_checkout_id = db.Column(db.String(64))

    created_at = db.Column(db.DateTime, default=utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    items = db.relationship(
        "OrderItem",
        backref="order",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="OrderItem.id.asc()",
    )

    @property
    def total_ghs(self):
        return ghs_float(self.total_pesewas)

    def as_status(self):
        return {
            "order_id": self.id,
            "status": self.status,
            "payment_status": self.payment_status,
            "total_ghs": self.total_ghs,
            "created_at": iso(self.created_at),
        }

    def as_api(self):
        return {
            "id": self.id,
            "phone": self.phone,
            "location_text": self.location_text,
            "notes": self.notes,
            "total_pesewas": self.total_pesewas,
            "total_ghs": self.total_ghs,
            "status": self.status,
            "payment_status": self.payment_status,
            "client_reference": self.client_reference,
            "hubtel_checkout_id": self.hubtel_checkout_id,
            "items": [i.as_api() for i in self.items],
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }


class OrderItem(db.Model):
    __tablename__ = "order_items"

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False, index=True)

    # not FK constraints: the snapshot must outlive catalog edits
    product_id = db.Column(db.Integer, nullable=False, index=True)
    variant_id = db.Column(db.Integer, nullable=True)
    product_name = db.Column(db.String(255), nullable=False)
    variant_label = db.Column(db.String(120))

    unit_pesewas = db.Column(db.Integer, nullable=False)
    quantity = db.Column(db.Integer, nullable=False)

    sugar_level = db.Column(db.String(50))
    spice_level = db.Column(db.String(50))
    note = db.Column(db.Text)

    toppings = db.relationship(
        "OrderItemTopping",
        backref="order_item",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="OrderItemTopping.id.asc()",
    )

    def as_api(self):
        return {
            "product_id": self.product_id,
            "variant_id": self.variant_id,
            "product_name": self.product_name,
            "variant_label": self.variant_label,
            "unit_pesewas": self.unit_pesewas,
            "quantity": self.quantity,
            "sugar_level": self.sugar_level,
            "spice_level": self.spice_level,
            "note": self.note,
            "toppings": [t.as_api() for t in self.toppings],
        }


class OrderItemTopping(db.Model):
    __tablename__ = "order_item_toppings"

    id = db.Column(db.Integer, primary_key=True)
    order_item_id = db.Column(db.Integer, db.ForeignKey("order_items.id"), nullable=False, index=True)
    topping_id = db.Column(db.Integer, nullable=False)
    topping_name = db.Column(db.String(120), nullable=False)
    topping_base_pesewas = db.Column(db.Integer, nullable=False)
    price_applied_pesewas = db.Column(db.Integer, nullable=False)

    def as_api(self):
        return {
            "topping_id": self.topping_id,
            "topping_name": self.topping_name,
            "topping_base_pesewas": self.topping_base_pesewas,
            "price_applied_pesewas": self.price_applied_pesewas,
        }
