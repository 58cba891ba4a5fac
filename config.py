import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file)
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./wallet.db")
    DB_ECHO = bool(data.get("DB_ECHO", False))
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")

    # Pricing
    DEFAULT_CURRENCY = data.get("DEFAULT_CURRENCY", "USD")
    DEFAULT_PRICE_BOOK_VERSION = data.get("DEFAULT_PRICE_BOOK_VERSION", "2026-Q1")
    EXECUTIVE_SEARCH_THRESHOLDS = data.get(
        "EXECUTIVE_SEARCH_THRESHOLDS",
        {"USD": 100000, "AUD": 150000, "GBP": 90000, "EUR": 90000, "INR": 2500000},
    )
    EXECUTIVE_SEARCH_DEFAULT_THRESHOLD = data.get("EXECUTIVE_SEARCH_DEFAULT_THRESHOLD", 100000)

    # Commissions
    DEFAULT_COMMISSION_RATE = data.get("DEFAULT_COMMISSION_RATE", "0.20")

    # Ledger Reconciliation
    RECONCILIATION_ENABLED = bool(data.get("RECONCILIATION_ENABLED", True))
    RECONCILIATION_INTERVAL_SECONDS = data.get("RECONCILIATION_INTERVAL_SECONDS", 86400)  # Daily

    # Event Outbox
    OUTBOX_DISPATCH_ENABLED = bool(data.get("OUTBOX_DISPATCH_ENABLED", True))
    OUTBOX_DISPATCH_INTERVAL_SECONDS = data.get("OUTBOX_DISPATCH_INTERVAL_SECONDS", 10)
    OUTBOX_BATCH_SIZE = data.get("OUTBOX_BATCH_SIZE", 100)
    OUTBOX_MAX_ATTEMPTS = data.get("OUTBOX_MAX_ATTEMPTS", 5)
    OUTBOX_CLAIM_SECONDS = data.get("OUTBOX_CLAIM_SECONDS", 60)
    OUTBOX_RETRY_BASE_SECONDS = data.get("OUTBOX_RETRY_BASE_SECONDS", 30)  # doubles per failed attempt
    NOTIFICATION_WEBHOOK = data.get("NOTIFICATION_WEBHOOK", None)
