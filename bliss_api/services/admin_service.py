from ..errors import ValidationError
from ..extensions import db
from ..model import Order
from ..model.order import ADMIN_ORDER_STATUSES


def set_flag(model, obj_id: int, field: str, value):
    if not isinstance(value, bool):
        raise ValidationError(f"{field} must be a boolean")
    obj = db.get_or_404(model, obj_id)
    setattr(obj, field, value)
    db.session.commit()
    return obj


def update_order_status(order_id: int, status) -> Order:
    status = (status or "").strip().lower() if isinstance(status, str) else None
    if status not in ADMIN_ORDER_STATUSES:
        raise ValidationError(f"status must be one of: {', '.join(ADMIN_ORDER_STATUSES)}")
    order = db.get_or_404(Order, order_id)
    order.status = status
    db.session.commit()
    return order


def list_orders(status=None, payment_status=None, phone=None):
    q = Order.query
    if status:         q = q.filter(Order.status == status)
    if payment_status: q = q.filter(Order.payment_status == payment_status)
    if phone:          q = q.filter(Order.phone == phone)
    return q.order_by(Order.created_at.desc(), Order.id.desc())
