# bliss_api/orders/routes.py
from flask import current_app, request

from ..services.order_service import OrderService
from ..utils.api import ok
from . import bp

def _service() -> OrderService:
    cfg = current_app.config
    return OrderService(
        current_app.extensions["hubtel"],
        tx_timeout_ms=cfg.get("ORDER_TX_TIMEOUT_MS", 30000),
        shop_name=cfg.get("SHOP_NAME", "Bubble Bliss"),
    )

@bp.post("/checkout")
def checkout():
    """
    Body:
      phone, location_text, notes?, payee_name?, payee_email?,
      items: [{product_id, variant_id?, quantity, toppings: [topping_id, ...],
               sugar_level?, spice_level?, note?}, ...]
    """
    payload = request.get_json(silent=True)
    result = _service().checkout(payload)
    resp = ok("Proceed to payment.", result, status=201)
    resp.headers["X-Order-Id"] = str(result["order_id"])
    return resp

@bp.post("/callback")
def payment_callback():
    # Hubtel gets a 200 no matter what, otherwise it keeps retrying
    payload = request.get_json(silent=True) or {}
    return ok("received", _service().handle_payment_callback(payload))

@bp.get("/<reference>/status")
def order_status(reference):
    return ok("order status", _service().get_order_status(reference))
