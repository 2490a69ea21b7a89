"""Process settings read from the environment.

Values are read on every call so tests can override them with monkeypatch.
"""

import os


def default_commission_rate() -> float:
    return float(os.getenv("DEFAULT_COMMISSION_RATE", "10"))


def razorpay_key_secret() -> str:
    return os.getenv("RAZORPAY_KEY_SECRET", "")


def conflict_retry_attempts() -> int:
    return int(os.getenv("CONFLICT_RETRY_ATTEMPTS", "3"))


def order_number_attempts() -> int:
    return int(os.getenv("ORDER_NUMBER_ATTEMPTS", "5"))


def is_production() -> bool:
    return os.environ.get("PROTEAN_ENV") == "production"
