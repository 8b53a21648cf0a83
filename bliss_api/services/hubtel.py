"""Hubtel online checkout and SMS client.

Checkout and status calls authenticate with the API id/key pair, SMS with
the client id/secret pair. All settings come in through ``HubtelSettings``;
nothing here reads the environment.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

import requests

from ..config import HubtelSettings
from ..errors import PaymentGatewayError

log = logging.getLogger(__name__)

CHECKOUT_URL = "https://payproxyapi.hubtel.com/items/initiate"
SMS_URL = "https://smsc.hubtel.com/v1/messages/send"
STATUS_URL = "https://api-txnstatus.hubtel.com/transactions/{merchant}/status"

ACCEPTED_CODE = "0000"
COUNTRY_CODE = "233"
TRUNK_PREFIX = "0"


@dataclass(frozen=True)
class HubtelCheckout:
    checkout_url: str
    checkout_id: str
    client_reference: str
    checkout_direct_url: str | None = None


def normalize_phone(phone) -> str:
    """``024 123 4567`` -> ``233241234567``; already-international numbers pass through."""
    normalized = "".join(str(phone or "").split())
    if normalized.startswith("+"):
        normalized = normalized[1:]
    if normalized.startswith(TRUNK_PREFIX):
        normalized = COUNTRY_CODE + normalized[1:]
    if not normalized.startswith(COUNTRY_CODE):
        normalized = COUNTRY_CODE + normalized
    return normalized


class HubtelClient:
    def __init__(self, settings: HubtelSettings, session: requests.Session | None = None):
        self.settings = settings
        self.session = session or requests.Session()

    @property
    def _checkout_auth(self):
        return (self.settings.api_id, self.settings.api_key)

    @property
    def _sms_auth(self):
        return (self.settings.client_id, self.settings.client_secret)

    # ---- helpers -----------------------------------------------------------

    def _read_json(self, response, what: str) -> dict:
        """Turn a transport-level response into the provider's JSON document.

        Non-2xx, empty and unparseable bodies all surface as the same
        PaymentGatewayError.
        """
        text = response.text or ""
        log.debug("Hubtel %s raw response (%s): %s", what, response.status_code, text)

        if not response.ok or not text:
            log.error("Hubtel %s failed: HTTP %s: %s", what, response.status_code, text)
            raise PaymentGatewayError(f"Hubtel {what} failed with HTTP {response.status_code}")

        try:
            payload = response.json()
        except ValueError:
            log.error("Hubtel %s returned non-JSON response: %s", what, text)
            raise PaymentGatewayError(f"Hubtel {what} returned a non-JSON body") from None

        if not isinstance(payload, dict):
            log.error("Hubtel %s returned unexpected JSON: %s", what, text)
            raise PaymentGatewayError(f"Hubtel {what} returned an unexpected body")
        return payload

    # ---- checkout ----------------------------------------------------------

    def initiate_checkout(
        self,
        *,
        total_amount: float,
        description: str,
        client_reference: str,
        callback_url: str | None = None,
        return_url: str | None = None,
        cancellation_url: str | None = None,
        merchant_account_number: str | None = None,
        payee_name: str | None = None,
        payee_mobile_number: str | None = None,
        payee_email: str | None = None,
    ) -> HubtelCheckout:
        s = self.settings
        body = {
            "totalAmount": total_amount,
            "description": description,
            "callbackUrl": callback_url or s.callback_url,
            "returnUrl": return_url or s.return_url,
            "merchantAccountNumber": merchant_account_number or s.merchant_account,
            "cancellationUrl": cancellation_url or s.cancellation_url,
            "clientReference": client_reference,
        }
        if payee_name:
            body["payeeName"] = payee_name
        if payee_mobile_number:
            body["payeeMobileNumber"] = payee_mobile_number
        if payee_email:
            body["payeeEmail"] = payee_email

        log.info("Initiating Hubtel checkout", extra={"extra": {"client_reference": client_reference}})
        log.debug("Hubtel request body: %s", body)

        try:
            response = self.session.post(
                CHECKOUT_URL,
                json=body,
                auth=self._checkout_auth,
                timeout=s.timeout,
            )
        except requests.RequestException as e:
            log.error("Hubtel API unreachable: %s", e)
            raise PaymentGatewayError("Could not reach Hubtel") from e

        payload = self._read_json(response, "checkout")

        if payload.get("responseCode") != ACCEPTED_CODE:
            log.error("Hubtel checkout rejected: %s", payload)
            raise PaymentGatewayError(f"Hubtel rejected checkout ({payload.get('responseCode')})")

        data = payload.get("data")
        if not isinstance(data, dict) or not data.get("checkoutUrl") or not data.get("checkoutId"):
            log.error("Hubtel checkout accepted without checkout data: %s", payload)
            raise PaymentGatewayError("Hubtel checkout response is missing checkout data")

        return HubtelCheckout(
            checkout_url=data["checkoutUrl"],
            checkout_id=str(data["checkoutId"]),
            client_reference=data.get("clientReference") or client_reference,
            checkout_direct_url=data.get("checkoutDirectUrl"),
        )

    def check_status(self, client_reference: str) -> dict | None:
        """Ask Hubtel what became of a checkout session. Used by the reconciliation sweep.

        Returns ``None`` when Hubtel has no transaction for the reference.
        """
        url = STATUS_URL.format(merchant=self.settings.merchant_account)
        try:
            response = self.session.get(
                url,
                params={"clientReference": client_reference},
                auth=self._checkout_auth,
                timeout=self.settings.timeout,
            )
        except requests.RequestException as e:
            log.error("Hubtel status API unreachable: %s", e)
            raise PaymentGatewayError("Could not reach Hubtel") from e

        if response.status_code == 404:
            log.info("Hubtel has no transaction for %s", client_reference)
            return None

        payload = self._read_json(response, "status")
        if payload.get("responseCode") != ACCEPTED_CODE:
            raise PaymentGatewayError(f"Hubtel status lookup failed ({payload.get('responseCode')})")
        data = payload.get("data")
        return data if isinstance(data, dict) else {}

    # ---- SMS ---------------------------------------------------------------

    def send_sms(self, to: str, message: str) -> bool:
        """Best effort: failures are logged and reported as ``False``, never raised."""
        normalized_to = normalize_phone(to)
        params = {
            "clientid": self.settings.client_id,
            "clientsecret": self.settings.client_secret,
            "from": self.settings.sender_id,
            "to": normalized_to,
            "content": message,
            "registeredDelivery": "true",
        }
        log.info("Sending SMS to %s", normalized_to)

        try:
            response = self.session.get(
                SMS_URL,
                params=params,
                auth=self._sms_auth,
                timeout=self.settings.timeout,
            )
        except requests.RequestException as e:
            # a failed SMS must never break the order flow
            log.error("SMS send error for %s: %s", normalized_to, e)
            return False

        log.debug("SMS response (%s): %s", response.status_code, response.text)
        if not response.ok:
            log.error("SMS send failed for %s: HTTP %s: %s", normalized_to, response.status_code, response.text)
            return False

        log.info("SMS sent successfully to %s", normalized_to)
        return True
