# bliss_api/admin/routes.py
from flask import request

from ..model import Product, Topping
from ..services import admin_service
from ..utils.api import ok
from ..utils.decorators import admin_required
from . import bp

# ------------------------ helpers ------------------------
def _to_int(v, default=None):
    try:
        return int(v)
    except (TypeError, ValueError):
        return default

def _paginate(query, page, per_page):
    page = max(_to_int(page, 1), 1)
    per_page = min(max(_to_int(per_page, 20), 1), 100)
    items = query.paginate(page=page, per_page=per_page, error_out=False)
    return {
        "meta": {
            "page": items.page,
            "pages": items.pages or 1,
            "per_page": per_page,
            "total": items.total,
        },
        "items": items.items,
    }

def _body():
    return request.get_json(silent=True) or {}

# ------------------------ ORDERS ------------------------

@bp.get("/orders")
@admin_required
def list_orders():
    """
    Query params:
      - page, per_page
      - status=pending|confirmed|preparing|ready|delivered|cancelled
      - payment_status=unpaid|paid|failed
      - phone=024...
    """
    q = admin_service.list_orders(
        status=request.args.get("status"),
        payment_status=request.args.get("payment_status"),
        phone=request.args.get("phone"),
    )
    page = _paginate(q, request.args.get("page"), request.args.get("per_page"))
    return ok("orders", {"meta": page["meta"], "orders": [o.as_api() for o in page["items"]]})

@bp.patch("/orders/<int:order_id>/status")
@admin_required
def update_order_status(order_id):
    order = admin_service.update_order_status(order_id, _body().get("status"))
    return ok("order status updated", {"order": order.as_api()})

# ------------------------ CATALOG TOGGLES ------------------------

@bp.patch("/products/<int:product_id>/stock")
@admin_required
def toggle_product_stock(product_id):
    p = admin_service.set_flag(Product, product_id, "in_stock", _body().get("in_stock"))
    return ok("product updated", {"product": p.as_admin()})

@bp.patch("/products/<int:product_id>/active")
@admin_required
def toggle_product_active(product_id):
    p = admin_service.set_flag(Product, product_id, "is_active", _body().get("is_active"))
    return ok("product updated", {"product": p.as_admin()})

@bp.patch("/toppings/<int:topping_id>/stock")
@admin_required
def toggle_topping_stock(topping_id):
    t = admin_service.set_flag(Topping, topping_id, "in_stock", _body().get("in_stock"))
    return ok("topping updated", {"topping": t.as_admin()})

@bp.patch("/toppings/<int:topping_id>/active")
@admin_required
def toggle_topping_active(topping_id):
    t = admin_service.set_flag(Topping, topping_id, "is_active", _body().get("is_active"))
    return ok("topping updated", {"topping": t.as_admin()})
