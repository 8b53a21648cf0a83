import logging

from flask import jsonify
from werkzeug.exceptions import HTTPException

from .utils.api import api_error

log = logging.getLogger(__name__)


class BlissError(Exception):
    """Base for errors that map onto an API response.

    ``public_message`` is what the caller sees; when it is ``None`` the
    exception text itself is safe to show.
    """

    status_code = 500
    public_message = None

    def __init__(self, message="", data=None):
        super().__init__(message)
        self.message = message
        self.data = data

    def describe(self):
        return self.public_message or self.message or "Internal server error"


class ValidationError(BlissError, ValueError):
    """Bad, missing, inactive or out-of-stock input. Never retried."""

    status_code = 400


class PaymentGatewayError(BlissError):
    """Hubtel unreachable, non-success, unparseable or rejected."""

    status_code = 502
    public_message = "Payment provider error. Please try again."


class OrderPersistenceError(BlissError):
    status_code = 500
    public_message = "We could not save your order. Please try again."


class OrderNotFound(BlissError):
    status_code = 404
    public_message = "Order not found"


def register_error_handlers(app):
    @app.errorhandler(BlissError)
    def handle_bliss_error(e):
        if e.status_code >= 500:
            log.error("%s: %s", type(e).__name__, e.message)
        r = jsonify(api_error(e.describe(), e.data))
        r.status_code = e.status_code
        return r

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        r = jsonify(api_error(e.description or e.name))
        r.status_code = e.code or 500
        return r
