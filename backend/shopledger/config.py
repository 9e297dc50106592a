# backend/shopledger/config.py
from __future__ import annotations
import os


def _int_env(name: str, default: int) -> int:
    return int(os.environ.get(name, default))


def _float_env(name: str, default: float) -> float:
    return float(os.environ.get(name, default))


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/shopledger.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///shopledger.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Bounded wait on row/database locks before a request gives up as Busy
    LOCK_TIMEOUT_SECONDS = _float_env("LOCK_TIMEOUT_SECONDS", 5)
    DB_RETRY_ATTEMPTS = _int_env("DB_RETRY_ATTEMPTS", 3)
    DB_RETRY_BACKOFF_SECONDS = _float_env("DB_RETRY_BACKOFF_SECONDS", 0.1)

    LOW_STOCK_THRESHOLD = _int_env("LOW_STOCK_THRESHOLD", 5)

    # Regional defaults for new businesses, stores and contacts
    DEFAULT_PHONE_COUNTRY_CODE = os.environ.get("DEFAULT_PHONE_COUNTRY_CODE", "+234")
    DEFAULT_COUNTRY = os.environ.get("DEFAULT_COUNTRY", "NG")
    DEFAULT_CURRENCY = os.environ.get("DEFAULT_CURRENCY", "NGN")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    CORS_ALLOWED_ORIGINS = [
        origin.strip()
        for origin in os.environ.get(
            "CORS_ALLOWED_ORIGINS",
            "http://localhost:5173,http://127.0.0.1:5173",
        ).split(",")
        if origin.strip()
    ]


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    DB_RETRY_BACKOFF_SECONDS = 0.01
    LOG_LEVEL = "WARNING"
