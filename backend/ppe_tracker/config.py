# backend/ppe_tracker/config.py
from __future__ import annotations
import os


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/ppe.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///ppe.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Admin panel login. ADMIN_PASSWORD_HASH (bcrypt) wins over the legacy
    # base64 value when both are set.
    ADMIN_USERNAME = os.environ.get("ADMIN_USERNAME", "admin")
    ADMIN_PASSWORD_HASH = os.environ.get("ADMIN_PASSWORD_HASH")
    ADMIN_PASSWORD_BASE64 = os.environ.get("ADMIN_PASSWORD_BASE64")

    # LINE Messaging API push
    LINE_CHANNEL_ACCESS_TOKEN = os.environ.get("LINE_CHANNEL_ACCESS_TOKEN")
    ADMIN_LINE_USER_ID = os.environ.get("ADMIN_LINE_USER_ID")
    LINE_API_BASE = os.environ.get("LINE_API_BASE", "https://api.line.me")
    NOTIFY_TIMEOUT = float(os.environ.get("NOTIFY_TIMEOUT", "10"))

    # Approvals that would drive stock below zero are refused unless enabled
    ALLOW_NEGATIVE_STOCK = _env_bool("ALLOW_NEGATIVE_STOCK", False)

    DASHBOARD_TOP_ITEMS = int(os.environ.get("DASHBOARD_TOP_ITEMS", "5"))
    DASHBOARD_RECENT_LIMIT = int(os.environ.get("DASHBOARD_RECENT_LIMIT", "10"))

    # Uploaded PDFs; relative paths resolve against the instance folder
    DOCUMENTS_DIR = os.environ.get("DOCUMENTS_DIR", "documents")

    CORS_ALLOWED_ORIGINS = os.environ.get("CORS_ALLOWED_ORIGINS", "*")

    API_VERSION = os.environ.get("API_VERSION", "1.4-feedback-added")
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
