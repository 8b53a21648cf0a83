from datetime import timedelta

from bliss_api.extensions import db
from bliss_api.model import CheckoutAttempt
from bliss_api.services.reconciliation import reconcile_checkouts
from bliss_api.utils.dates import utcnow


def _attempt(reference, state="accepted", age=timedelta(hours=2)):
    attempt = CheckoutAttempt(client_reference=reference, total_pesewas=13400, phone="0241234567",
                              state=state, hubtel_checkout_id=f"chk_{reference[:4]}",
                              created_at=utcnow() - age)
    db.session.add(attempt)
    db.session.commit()
    return attempt


def _state(reference):
    db.session.expire_all()
    return CheckoutAttempt.query.filter_by(client_reference=reference).one()


def test_attempt_with_an_order_is_closed(app, gateway, place_order):
    ref = place_order()["client_reference"]
    attempt = _state(ref)
    attempt.state = "accepted"
    attempt.created_at = utcnow() - timedelta(hours=1)
    db.session.commit()

    results = reconcile_checkouts(gateway)

    assert results == [{"client_reference": ref, "outcome": "completed"}]
    assert _state(ref).state == "completed"
    assert gateway.status_lookups == []


def test_orphaned_session_is_flagged_with_provider_status(app, gateway):
    _attempt("b" * 32)

    results = reconcile_checkouts(gateway)

    assert results == [{"client_reference": "b" * 32, "outcome": "orphaned", "provider_status": "Paid"}]
    attempt = _state("b" * 32)
    assert attempt.state == "orphaned"
    assert attempt.error == "no local order; provider status: Paid"
    assert gateway.status_lookups == ["b" * 32]


def test_unreachable_provider_leaves_attempt_open(app, gateway):
    gateway.fail_status = True
    _attempt("c" * 32, state="initiating")

    results = reconcile_checkouts(gateway)

    assert results[0]["outcome"] == "unchecked"
    assert results[0]["error"] == "Could not reach Hubtel"
    assert _state("c" * 32).state == "initiating"


def test_recent_and_closed_attempts_are_left_alone(app, gateway):
    _attempt("d" * 32, age=timedelta(minutes=5))
    _attempt("e" * 32, state="rejected")
    _attempt("f" * 32, state="completed")

    assert reconcile_checkouts(gateway) == []
    assert [_state(r * 32).state for r in "def"] == ["accepted", "rejected", "completed"]


def test_cutoff_is_configurable(app, gateway):
    _attempt("d" * 32, age=timedelta(minutes=5))

    results = reconcile_checkouts(gateway, older_than=timedelta(minutes=1))

    assert [r["client_reference"] for r in results] == ["d" * 32]


def test_attempt_that_never_reached_hubtel_is_rejected(app, gateway):
    gateway.provider_status = None
    attempt = _attempt("a" * 32, state="initiating")
    attempt.hubtel_checkout_id = None
    db.session.commit()

    assert reconcile_checkouts(gateway) == [{"client_reference": "a" * 32, "outcome": "rejected"}]
    assert _state("a" * 32).state == "rejected"
    assert reconcile_checkouts(gateway) == []
    assert gateway.status_lookups == ["a" * 32]


def test_accepted_session_unknown_to_hubtel_is_orphaned(app, gateway):
    gateway.provider_status = None
    _attempt("b" * 32)

    results = reconcile_checkouts(gateway)

    assert results[0]["outcome"] == "orphaned"
    assert _state("b" * 32).error == "no local order; provider status: not found"
