import os
from dataclasses import dataclass
from datetime import timedelta


def _env_int(name, default):
    try:
        return int(os.environ.get(name, default))
    except (TypeError, ValueError):
        return default


class Config:
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JSON_SORT_KEYS = False
    ENV = os.getenv("FLASK_ENV", "development")

    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY", "dev-secret-change-me")
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(days=1)

    # Checkout uses HUBTEL_API_ID + HUBTEL_API_KEY
    HUBTEL_API_ID = os.environ.get("HUBTEL_API_ID", "")
    HUBTEL_API_KEY = os.environ.get("HUBTEL_API_KEY", "")
    # SMS uses HUBTEL_CLIENT_ID + HUBTEL_CLIENT_SECRET
    HUBTEL_CLIENT_ID = os.environ.get("HUBTEL_CLIENT_ID", "")
    HUBTEL_CLIENT_SECRET = os.environ.get("HUBTEL_CLIENT_SECRET", "")
    HUBTEL_MERCHANT_ACCOUNT = os.environ.get("HUBTEL_MERCHANT_ACCOUNT", "")
    HUBTEL_SENDER_ID = os.environ.get("HUBTEL_SENDER_ID", "BubbleBliss")
    HUBTEL_CALLBACK_URL = os.environ.get(
        "HUBTEL_CALLBACK_URL", "https://PLACEHOLDER.example.com/orders/callback"
    )
    HUBTEL_RETURN_URL = os.environ.get(
        "HUBTEL_RETURN_URL", "https://PLACEHOLDER.example.com/payment/success"
    )
    HUBTEL_CANCEL_URL = os.environ.get(
        "HUBTEL_CANCEL_URL", "https://PLACEHOLDER.example.com/payment/cancelled"
    )
    HUBTEL_TIMEOUT = _env_int("HUBTEL_TIMEOUT", 15)

    ORDER_TX_TIMEOUT_MS = _env_int("ORDER_TX_TIMEOUT_MS", 30000)
    SHOP_NAME = os.environ.get("SHOP_NAME", "Bubble Bliss")

    ADMIN_EMAIL = os.environ.get("ADMIN_EMAIL", "admin@bubblebliss.com")
    ADMIN_PASSWORD = os.environ.get("ADMIN_PASSWORD")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    LOG_DIR = os.environ.get("LOG_DIR")

    @staticmethod
    def init_app(app):
        if not os.getenv("DATABASE_URL"):
            os.makedirs(app.instance_path, exist_ok=True)
            app.config["SQLALCHEMY_DATABASE_URI"] = f"sqlite:///{os.path.join(app.instance_path, 'app.db')}"
        else:
            app.config["SQLALCHEMY_DATABASE_URI"] = os.getenv("DATABASE_URL")


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    JWT_SECRET_KEY = "test-secret-key-with-enough-length-for-hs256"

    HUBTEL_API_ID = "api-id"
    HUBTEL_API_KEY = "api-key"
    HUBTEL_CLIENT_ID = "sms-id"
    HUBTEL_CLIENT_SECRET = "sms-secret"
    HUBTEL_MERCHANT_ACCOUNT = "2020000"
    HUBTEL_SENDER_ID = "BubbleBliss"
    HUBTEL_CALLBACK_URL = "https://shop.test/orders/callback"
    HUBTEL_RETURN_URL = "https://shop.test/payment/success"
    HUBTEL_CANCEL_URL = "https://shop.test/payment/cancelled"
    HUBTEL_TIMEOUT = 5

    ORDER_TX_TIMEOUT_MS = 30000
    ADMIN_EMAIL = "admin@bubblebliss.test"
    ADMIN_PASSWORD = "secret123"
    LOG_DIR = None

    @staticmethod
    def init_app(app):
        pass


@dataclass(frozen=True)
class HubtelSettings:
    """Everything the Hubtel client needs, pulled out of app.config once."""

    api_id: str
    api_key: str
    client_id: str
    client_secret: str
    merchant_account: str
    sender_id: str
    callback_url: str
    return_url: str
    cancellation_url: str
    timeout: int = 15

    @classmethod
    def from_config(cls, config):
        return cls(
            api_id=config.get("HUBTEL_API_ID", ""),
            api_key=config.get("HUBTEL_API_KEY", ""),
            client_id=config.get("HUBTEL_CLIENT_ID", ""),
            client_secret=config.get("HUBTEL_CLIENT_SECRET", ""),
            merchant_account=config.get("HUBTEL_MERCHANT_ACCOUNT", ""),
            sender_id=config.get("HUBTEL_SENDER_ID") or "BubbleBliss",
            callback_url=config.get("HUBTEL_CALLBACK_URL", ""),
            return_url=config.get("HUBTEL_RETURN_URL", ""),
            cancellation_url=config.get("HUBTEL_CANCEL_URL", ""),
            timeout=int(config.get("HUBTEL_TIMEOUT") or 15),
        )
