import json
from types import SimpleNamespace

import pytest
from werkzeug.security import generate_password_hash

from bliss_api import create_app
from bliss_api.config import TestConfig
from bliss_api.errors import PaymentGatewayError
from bliss_api.extensions import db
from bliss_api.model import AdminUser, Category, Product, ProductVariant, Topping
from bliss_api.services.hubtel import HubtelCheckout


# ---------------------------------------------------------------------------
# Fakes for the outbound HTTP layer
# ---------------------------------------------------------------------------

class FakeResponse:
    def __init__(self, status_code=200, body=None, text=None):
        self.status_code = status_code
        if text is None:
            text = "" if body is None else json.dumps(body)
        self.text = text

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        return json.loads(self.text)


class FakeSession:
    """Stands in for requests.Session; replays queued responses or exceptions."""

    def __init__(self, *results):
        self.results = list(results)
        self.calls = []

    def _next(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    def post(self, url, **kwargs):
        return self._next("POST", url, **kwargs)

    def get(self, url, **kwargs):
        return self._next("GET", url, **kwargs)


class FakeGateway:
    """In-process HubtelClient double used by the route and service tests."""

    def __init__(self):
        self.checkouts = []
        self.sms = []
        self.status_lookups = []
        self.fail_checkout = False
        self.provider_status = {"status": "Paid"}
        self.fail_status = False

    def initiate_checkout(self, **kwargs):
        self.checkouts.append(kwargs)
        if self.fail_checkout:
            raise PaymentGatewayError("Could not reach Hubtel")
        n = len(self.checkouts)
        return HubtelCheckout(
            checkout_url=f"https://pay.hubtel.test/{n}",
            checkout_id=f"chk_{n}",
            client_reference=kwargs["client_reference"],
            checkout_direct_url=f"https://pay.hubtel.test/direct/{n}",
        )

    def send_sms(self, to, message):
        self.sms.append((to, message))
        return True

    def check_status(self, client_reference):
        self.status_lookups.append(client_reference)
        if self.fail_status:
            raise PaymentGatewayError("Could not reach Hubtel")
        return None if self.provider_status is None else dict(self.provider_status)


# ---------------------------------------------------------------------------
# App fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def app():
    app = create_app(TestConfig)
    ctx = app.app_context()
    ctx.push()
    yield app
    db.session.remove()
    db.drop_all()
    ctx.pop()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def gateway(app):
    fake = FakeGateway()
    app.extensions["hubtel"] = fake
    return fake


@pytest.fixture
def catalog(app):
    drinks = Category(slug="milk-tea", name="Milk Tea", sort_order=1)
    wraps = Category(slug="shawarma", name="Shawarma", sort_order=2)
    db.session.add_all([drinks, wraps])
    db.session.flush()

    milk_tea = Product(slug="brown-sugar-milk", name="Brown Sugar Milk", description="",
                       category_id=drinks.id, price_pesewas=4000, sort_order=1)
    shawarma = Product(slug="chicken-shawarma", name="Chicken Shawarma", description="",
                       category_id=wraps.id, price_pesewas=None, sort_order=1)
    hidden = Product(slug="lotus", name="Lotus", description="", category_id=drinks.id,
                     price_pesewas=5000, is_active=False, sort_order=2)
    sold_out = Product(slug="oreo", name="Oreo", description="", category_id=drinks.id,
                       price_pesewas=5000, in_stock=False, sort_order=3)
    beef = Product(slug="beef-shawarma", name="Beef Shawarma", description="",
                   category_id=wraps.id, price_pesewas=None, sort_order=2)
    db.session.add_all([milk_tea, shawarma, hidden, sold_out, beef])
    db.session.flush()

    medium = ProductVariant(product_id=shawarma.id, key="medium", label="Medium", price_pesewas=5000, sort_order=1)
    large = ProductVariant(product_id=shawarma.id, key="large", label="Large", price_pesewas=6000, sort_order=2)
    beef_large = ProductVariant(product_id=beef.id, key="large", label="Large", price_pesewas=6500, sort_order=1)

    boba = Topping(name="Boba", price_pesewas=500, sort_order=1)
    foam = Topping(name="Cheese Foam", price_pesewas=700, sort_order=2)
    jelly = Topping(name="Jelly", price_pesewas=600, is_active=False, sort_order=3)
    mint = Topping(name="Mint Popping", price_pesewas=600, in_stock=False, sort_order=4)
    db.session.add_all([medium, large, beef_large, boba, foam, jelly, mint])
    db.session.commit()

    return SimpleNamespace(
        milk_tea=milk_tea.id, shawarma=shawarma.id, hidden=hidden.id, sold_out=sold_out.id,
        beef=beef.id, medium=medium.id, large=large.id, beef_large=beef_large.id,
        boba=boba.id, foam=foam.id, jelly=jelly.id, mint=mint.id,
    )


@pytest.fixture
def admin_headers(app, client):
    admin = AdminUser(email="admin@bubblebliss.test", name="Admin",
                      password_hash=generate_password_hash("secret123"))
    db.session.add(admin)
    db.session.commit()
    r = client.post("/admin/auth/login", json={"email": "admin@bubblebliss.test", "password": "secret123"})
    token = r.get_json()["data"]["access_token"]
    return {"Authorization": f"Bearer {token}"}


def checkout_body(catalog, **overrides):
    body = {
        "phone": "0241234567",
        "location_text": "East Legon, near the mall",
        "items": [
            {"product_id": catalog.shawarma, "variant_id": catalog.large, "quantity": 2,
             "toppings": [catalog.boba, catalog.foam], "spice_level": "hot"},
        ],
    }
    body.update(overrides)
    return body


@pytest.fixture
def place_order(client, gateway, catalog):
    """Runs a successful checkout through the API and returns its result data."""
    def _place(**overrides):
        r = client.post("/orders/checkout", json=checkout_body(catalog, **overrides))
        assert r.status_code == 201, r.get_json()
        return r.get_json()["data"]
    return _place


