# bliss_api/model/checkout_attempt.py
from ..extensions import db
from ..utils.dates import utcnow, iso

# initiating -> accepted -> completed
#            \-> rejected          \-> orphaned (found by the sweep)
ATTEMPT_INITIATING = "initiating"
ATTEMPT_ACCEPTED = "accepted"
ATTEMPT_REJECTED = "rejected"
ATTEMPT_COMPLETED = "completed"
ATTEMPT_ORPHANED = "orphaned"

OPEN_ATTEMPT_STATES = (ATTEMPT_INITIATING, ATTEMPT_ACCEPTED)


class CheckoutAttempt(db.Model):
    """One outbound Hubtel checkout, recorded before the call is made.

    An attempt left ``accepted`` means Hubtel holds a session we never
    turned into an order.
    """
    __tablename__ = "checkout_attempts"

    id = db.Column(db.Integer, primary_key=True)
    client_reference = db.Column(db.String(32), nullable=False, unique=True, index=True)
    total_pesewas = db.Column(db.Integer, nullable=False)
    phone = db.Column(db.String(50))
    state = db.Column(db.String(20), nullable=False, default=ATTEMPT_INITIATING, index=True)
    hubtel_checkout_id = db.Column(db.String(64))
    error = db.Column(db.Text)

    created_at = db.Column(db.DateTime, default=utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    def as_api(self):
        return {
            "id": self.id,
            "client_reference": self.client_reference,
            "total_pesewas": self.total_pesewas,
            "phone": self.phone,
            "state": self.state,
            "hubtel_checkout_id": self.hubtel_checkout_id,
            "error": self.error,
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }
