"""Sweep for Hubtel sessions that never became local orders.

A checkout attempt is open while it is ``initiating`` or ``accepted``. Once
it is old enough that no request can still be working on it, either an
order exists for its reference (the attempt just missed its final update)
or the session is orphaned. Orphans are flagged with whatever Hubtel says
about them; settling or refunding is done by hand. An attempt Hubtel has
never heard of, with no checkout id of ours, is closed as ``rejected``.
"""
from __future__ import annotations

import logging
from datetime import timedelta

from ..errors import PaymentGatewayError
from ..extensions import db
from ..model import CheckoutAttempt, Order
from ..model.checkout_attempt import (
    ATTEMPT_COMPLETED,
    ATTEMPT_ORPHANED,
    ATTEMPT_REJECTED,
    OPEN_ATTEMPT_STATES,
)
from ..utils.dates import utcnow
from .hubtel import HubtelClient

log = logging.getLogger(__name__)


def reconcile_checkouts(gateway: HubtelClient, older_than: timedelta = timedelta(minutes=30), now=None):
    """Returns one result dict per examined attempt."""
    cutoff = (now or utcnow()) - older_than
    stale = (
        CheckoutAttempt.query
        .filter(CheckoutAttempt.state.in_(OPEN_ATTEMPT_STATES))
        .filter(CheckoutAttempt.created_at < cutoff)
        .order_by(CheckoutAttempt.created_at.asc())
        .all()
    )

    results = []
    for attempt in stale:
        ref = attempt.client_reference
        if db.session.query(Order.id).filter_by(client_reference=ref).first():
            attempt.state = ATTEMPT_COMPLETED
            results.append({"client_reference": ref, "outcome": ATTEMPT_COMPLETED})
            continue

        try:
            provider = gateway.check_status(ref)
        except PaymentGatewayError as e:
            log.warning("Could not check Hubtel status for %s: %s", ref, e.message)
            results.append({"client_reference": ref, "outcome": "unchecked", "error": e.message})
            continue

        if provider is None and not attempt.hubtel_checkout_id:
            # the request died before Hubtel ever opened a session
            attempt.state = ATTEMPT_REJECTED
            attempt.error = "no session at Hubtel"
            log.warning("Checkout attempt %s never reached Hubtel, closing it", ref)
            results.append({"client_reference": ref, "outcome": ATTEMPT_REJECTED})
            continue

        provider_status = (provider or {}).get("status") or "not found"
        attempt.state = ATTEMPT_ORPHANED
        attempt.error = f"no local order; provider status: {provider_status}"
        log.error(
            "Orphaned Hubtel session",
            extra={"extra": {"client_reference": ref,
                             "hubtel_checkout_id": attempt.hubtel_checkout_id,
                             "provider_status": provider_status,
                             "total_pesewas": attempt.total_pesewas}},
        )
        results.append({
            "client_reference": ref,
            "outcome": ATTEMPT_ORPHANED,
            "provider_status": provider_status,
        })

    db.session.commit()
    return results
