"""Checkout, payment callback and order status.

Checkout runs in two phases because Hubtel sits outside our transaction:

1. a ``CheckoutAttempt`` row is committed, then Hubtel is asked to open a
   checkout session;
2. only once Hubtel accepts is the order written, in one bounded
   transaction that also closes the attempt.

If phase 2 fails the attempt stays ``accepted`` and the reconciliation
sweep (``services/reconciliation.py``) reports the orphaned session.
"""
from __future__ import annotations

import logging
import uuid
from time import monotonic

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from ..errors import OrderNotFound, OrderPersistenceError, PaymentGatewayError
from ..extensions import db
from ..model import CheckoutAttempt, Order, OrderItem, OrderItemTopping
from ..model.checkout_attempt import (
    ATTEMPT_ACCEPTED,
    ATTEMPT_COMPLETED,
    ATTEMPT_INITIATING,
    ATTEMPT_REJECTED,
)
from ..model.order import (
    ORDER_CANCELLED,
    ORDER_CONFIRMED,
    ORDER_PENDING,
    PAYMENT_FAILED,
    PAYMENT_PAID,
    PAYMENT_UNPAID,
)
from ..utils.money import D, round_money, to_ghs
from .checkout_request import CheckoutRequest, parse_checkout_payload
from .hubtel import HubtelClient
from .pricing import PricedCart, load_catalog_for, price_checkout

log = logging.getLogger(__name__)

SUCCESS_STATUS = "Success"
DEFAULT_TX_TIMEOUT_MS = 30000


def new_client_reference() -> str:
    return uuid.uuid4().hex[:32]


def _pick(data: dict, *keys):
    """First present key wins; Hubtel sends both PascalCase and camelCase."""
    for k in keys:
        if data.get(k) is not None:
            return data[k]
    return None


class OrderService:
    def __init__(self, gateway: HubtelClient, tx_timeout_ms: int = DEFAULT_TX_TIMEOUT_MS,
                 shop_name: str = "Bubble Bliss"):
        self.gateway = gateway
        self.tx_timeout_ms = tx_timeout_ms
        self.shop_name = shop_name

    # ---- checkout ----------------------------------------------------------

    def checkout(self, payload) -> dict:
        req = parse_checkout_payload(payload)
        cart = price_checkout(req.items, load_catalog_for(req.items))

        client_reference = new_client_reference()
        log.info(
            "Checkout priced",
            extra={"extra": {"client_reference": client_reference,
                             "total_pesewas": cart.total_pesewas,
                             "lines": len(cart.lines)}},
        )

        attempt = self._open_attempt(client_reference, cart, req)

        try:
            session = self.gateway.initiate_checkout(
                total_amount=cart.total_ghs,
                description=f"{self.shop_name} Order",
                client_reference=client_reference,
                payee_mobile_number=req.phone,
                payee_name=req.payee_name,
                payee_email=req.payee_email,
            )
        except PaymentGatewayError as e:
            attempt.state = ATTEMPT_REJECTED
            attempt.error = e.message
            db.session.commit()
            raise

        attempt.state = ATTEMPT_ACCEPTED
        attempt.hubtel_checkout_id = session.checkout_id
        db.session.commit()

        order = self.persist_order(cart, req, client_reference, session.checkout_id, attempt=attempt)
        log.info(
            "Order #%s created, awaiting payment", order.id,
            extra={"extra": {"order_id": order.id, "client_reference": client_reference}},
        )

        return {
            "order_id": order.id,
            "client_reference": client_reference,
            "total_ghs": cart.total_ghs,
            "total_pesewas": cart.total_pesewas,
            "checkout_url": session.checkout_url,
            "checkout_direct_url": session.checkout_direct_url,
            "message": "Proceed to payment.",
        }

    def _open_attempt(self, client_reference: str, cart: PricedCart, req: CheckoutRequest) -> CheckoutAttempt:
        attempt = CheckoutAttempt(
            client_reference=client_reference,
            total_pesewas=cart.total_pesewas,
            phone=req.phone,
            state=ATTEMPT_INITIATING,
        )
        db.session.add(attempt)
        db.session.commit()
        return attempt

    # ---- persistence -------------------------------------------------------

    def persist_order(self, cart: PricedCart, req: CheckoutRequest, client_reference: str,
                      checkout_id: str | None, attempt: CheckoutAttempt | None = None) -> Order:
        """Write order, items and toppings as one unit, or nothing at all."""
        started = monotonic()
        try:
            if db.session.get_bind().dialect.name == "postgresql":
                db.session.execute(text(f"SET LOCAL statement_timeout = {int(self.tx_timeout_ms)}"))

            order = Order(
                phone=req.phone,
                location_text=req.location_text,
                notes=req.notes,
                total_pesewas=cart.total_pesewas,
                status=ORDER_PENDING,
                payment_status=PAYMENT_UNPAID,
                client_reference=client_reference,
                hubtel_checkout_id=checkout_id,
            )
            for line in cart.lines:
                item = OrderItem(
                    product_id=line.product_id,
                    variant_id=line.variant_id,
                    product_name=line.product_name,
                    variant_label=line.variant_label,
                    unit_pesewas=line.unit_pesewas,
                    quantity=line.quantity,
                    sugar_level=line.sugar_level,
                    spice_level=line.spice_level,
                    note=line.note,
                )
                item.toppings = [
                    OrderItemTopping(
                        topping_id=t.topping_id,
                        topping_name=t.topping_name,
                        topping_base_pesewas=t.topping_base_pesewas,
                        price_applied_pesewas=t.price_applied_pesewas,
                    )
                    for t in line.toppings
                ]
                order.items.append(item)
            db.session.add(order)

            if attempt is not None:
                attempt.state = ATTEMPT_COMPLETED
            db.session.flush()

            elapsed_ms = (monotonic() - started) * 1000
            if elapsed_ms > self.tx_timeout_ms:
                raise OrderPersistenceError(
                    f"order transaction took {elapsed_ms:.0f}ms (limit {self.tx_timeout_ms}ms)"
                )
            db.session.commit()
        except OrderPersistenceError:
            db.session.rollback()
            log.error("Order write for %s timed out; Hubtel session %s has no local order",
                      client_reference, checkout_id)
            raise
        except SQLAlchemyError as e:
            db.session.rollback()
            log.exception("Order write for %s failed; Hubtel session %s has no local order",
                          client_reference, checkout_id)
            raise OrderPersistenceError(f"order transaction failed: {e}") from e
        return order

    # ---- Hubtel callback ---------------------------------------------------

    def handle_payment_callback(self, body) -> dict:
        log.info("Hubtel callback received: %s", body)
        ack = {"received": True}

        data = _pick(body, "Data", "data") if isinstance(body, dict) else None
        if not isinstance(data, dict):
            log.warning("Callback received with no data payload")
            return ack

        client_reference = _pick(data, "ClientReference", "clientReference")
        status = _pick(data, "Status", "status")
        amount = _pick(data, "Amount", "amount")
        customer_phone = _pick(data, "CustomerPhoneNumber", "customerPhoneNumber")

        if not client_reference:
            log.warning("Callback missing clientReference: %s", data)
            return ack

        order = Order.query.filter_by(client_reference=str(client_reference)).first()
        if not order:
            log.warning("Callback for unknown clientReference: %s", client_reference)
            return ack

        if order.payment_status == PAYMENT_PAID:
            log.info("Order #%s already marked paid, skipping", order.id)
            return ack

        if status == SUCCESS_STATUS:
            if not self._transition(order, PAYMENT_PAID, ORDER_CONFIRMED):
                log.info("Order #%s was marked paid concurrently, skipping", order.id)
                return ack
            log.info("Order #%s marked as paid", order.id)
            self._send_confirmation(order, amount, customer_phone)
        else:
            self._transition(order, PAYMENT_FAILED, ORDER_CANCELLED)
            log.warning("Order #%s payment failed (status: %s)", order.id, status)

        return ack

    def _transition(self, order: Order, payment_status: str, status: str) -> bool:
        # the "not yet paid" guard lives in the UPDATE itself so duplicate
        # deliveries racing each other flip the order at most once
        updated = (
            Order.query
            .filter(Order.id == order.id, Order.payment_status != PAYMENT_PAID)
            .update({"payment_status": payment_status, "status": status},
                    synchronize_session=False)
        )
        db.session.commit()
        db.session.refresh(order)
        return updated == 1

    def _send_confirmation(self, order: Order, amount, customer_phone) -> None:
        try:
            total = round_money(D(amount)) if amount is not None else to_ghs(order.total_pesewas)
        except ArithmeticError:
            total = to_ghs(order.total_pesewas)
        message = (
            f"Thank you for your order at {self.shop_name}!\n"
            f"Order #{order.id} confirmed: GHS {total}.\n"
            "We'll have it ready for you soon!"
        )
        try:
            self.gateway.send_sms(customer_phone or order.phone, message)
        except Exception:
            # the order is already paid; the callback still has to be acknowledged
            log.exception("Confirmation SMS for order #%s failed", order.id)

    # ---- status ------------------------------------------------------------

    def get_order_status(self, client_reference: str) -> dict:
        order = Order.query.filter_by(client_reference=client_reference).first()
        if not order:
            raise OrderNotFound(f"no order for reference {client_reference}")
        return order.as_status()
