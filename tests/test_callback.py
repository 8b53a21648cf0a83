import pytest
import requests

from bliss_api.config import HubtelSettings
from bliss_api.extensions import db
from bliss_api.model import Order
from bliss_api.services.hubtel import SMS_URL, HubtelClient

from conftest import FakeResponse, FakeSession


def _callback(client, reference, status="Success", **data):
    payload = {
        "ResponseCode": "0000",
        "Status": status,
        "Data": {"ClientReference": reference, "Status": status, **data},
    }
    return client.post("/orders/callback", json=payload)


def _order(reference):
    db.session.expire_all()
    return Order.query.filter_by(client_reference=reference).one()


def test_success_marks_order_paid_and_confirmed(client, gateway, place_order):
    ref = place_order()["client_reference"]

    r = _callback(client, ref, Amount=134, CustomerPhoneNumber="233209999999")

    assert r.status_code == 200
    assert r.get_json()["data"]["received"] is True
    order = _order(ref)
    assert order.payment_status == "paid"
    assert order.status == "confirmed"

    assert len(gateway.sms) == 1
    to, message = gateway.sms[0]
    assert to == "233209999999"
    assert f"Order #{order.id} confirmed" in message
    assert "GHS 134.00" in message


def test_duplicate_success_callback_is_a_noop(client, gateway, place_order):
    ref = place_order()["client_reference"]

    first = _callback(client, ref)
    second = _callback(client, ref)

    assert first.status_code == second.status_code == 200
    assert first.get_json()["data"]["received"] is second.get_json()["data"]["received"] is True
    assert _order(ref).payment_status == "paid"
    assert len(gateway.sms) == 1


def test_confirmation_falls_back_to_order_phone_and_total(client, gateway, place_order):
    ref = place_order()["client_reference"]
    _callback(client, ref)

    to, message = gateway.sms[0]
    assert to == "0241234567"
    assert "GHS 134.00" in message


@pytest.mark.parametrize("status", ["Failed", "Cancelled", "Unpaid", None])
def test_non_success_marks_order_failed_and_cancelled(client, gateway, place_order, status):
    ref = place_order()["client_reference"]

    r = _callback(client, ref, status=status)

    assert r.status_code == 200
    order = _order(ref)
    assert order.payment_status == "failed"
    assert order.status == "cancelled"
    assert gateway.sms == []


def test_failure_after_paid_is_ignored(client, gateway, place_order):
    ref = place_order()["client_reference"]
    _callback(client, ref)
    _callback(client, ref, status="Failed")

    order = _order(ref)
    assert (order.payment_status, order.status) == ("paid", "confirmed")


def test_camel_case_payload_is_accepted(client, gateway, place_order):
    ref = place_order()["client_reference"]
    r = client.post("/orders/callback", json={"data": {"clientReference": ref, "status": "Success",
                                                       "amount": "134.00"}})
    assert r.status_code == 200
    assert _order(ref).payment_status == "paid"


def test_unknown_reference_is_acknowledged_without_effect(client, gateway, place_order):
    ref = place_order()["client_reference"]

    r = _callback(client, "f" * 32)

    assert r.status_code == 200
    assert r.get_json()["data"]["received"] is True
    order = _order(ref)
    assert (order.payment_status, order.status) == ("unpaid", "pending")
    assert Order.query.count() == 1
    assert gateway.sms == []


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"ResponseCode": "0000"},
        {"Data": "oops"},
        {"Data": {"Status": "Success"}},
        {"Data": {"ClientReference": "", "Status": "Success"}},
    ],
)
def test_malformed_callbacks_are_acknowledged(client, gateway, place_order, payload):
    ref = place_order()["client_reference"]

    r = client.post("/orders/callback", json=payload)

    assert r.status_code == 200
    assert r.get_json()["data"]["received"] is True
    assert _order(ref).payment_status == "unpaid"


def test_non_json_callback_is_acknowledged(client, gateway):
    r = client.post("/orders/callback", data="garbage", content_type="text/plain")
    assert r.status_code == 200
    assert r.get_json()["data"]["received"] is True


# ---- confirmation SMS through the real Hubtel client ----------------------

def _real_sms(app, *results):
    session = FakeSession(*results)
    app.extensions["hubtel"] = HubtelClient(HubtelSettings.from_config(app.config), session)
    return session


@pytest.mark.parametrize(
    "sms_result",
    [requests.ConnectionError("smsc down"), FakeResponse(500, text="oops")],
    ids=["unreachable", "http-500"],
)
def test_failed_confirmation_sms_still_acknowledges(app, client, place_order, sms_result):
    ref = place_order()["client_reference"]
    session = _real_sms(app, sms_result)

    r = _callback(client, ref, Amount=134)

    assert r.status_code == 200
    assert r.get_json()["data"]["received"] is True
    order = _order(ref)
    assert (order.payment_status, order.status) == ("paid", "confirmed")
    assert session.calls[0]["url"] == SMS_URL


def test_numeric_customer_phone_gets_confirmation(app, client, place_order):
    ref = place_order()["client_reference"]
    session = _real_sms(app, FakeResponse(201, {"status": 0}))

    r = _callback(client, ref, Amount=134, CustomerPhoneNumber=233241234567)

    assert r.status_code == 200
    assert r.get_json()["data"]["received"] is True
    order = _order(ref)
    assert (order.payment_status, order.status) == ("paid", "confirmed")
    assert session.calls[0]["params"]["to"] == "233241234567"


def test_confirmation_error_does_not_escape_callback(client, gateway, place_order, monkeypatch):
    ref = place_order()["client_reference"]

    def broken(to, message):
        raise RuntimeError("sms client misconfigured")

    monkeypatch.setattr(gateway, "send_sms", broken)
    r = _callback(client, ref)

    assert r.status_code == 200
    assert _order(ref).payment_status == "paid"
