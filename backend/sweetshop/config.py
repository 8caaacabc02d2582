# backend/sweetshop/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/sweetshop.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///sweetshop.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    PORT = int(os.environ.get("PORT", "5000"))

    # bcrypt cost factor for password hashes
    BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "12"))

    # Generated invoices/receipts live under DOCUMENTS_DIR/{invoices,receipts}
    DOCUMENTS_DIR = os.environ.get("DOCUMENTS_DIR", os.path.join(os.getcwd(), "documents"))
    PUBLIC_BASE_URL = os.environ.get("PUBLIC_BASE_URL", "http://localhost:5000")
    SHOP_NAME = os.environ.get("SHOP_NAME", "Sweet Shop")

    # WhatsApp Cloud API; messaging is skipped when token or phone number id is missing
    WHATSAPP_API_URL = os.environ.get("WHATSAPP_API_URL", "https://graph.facebook.com/v22.0")
    WHATSAPP_PHONE_NUMBER_ID = os.environ.get("WHATSAPP_PHONE_NUMBER_ID")
    WHATSAPP_API_TOKEN = os.environ.get("WHATSAPP_API_TOKEN")
    WHATSAPP_DEFAULT_COUNTRY_CODE = os.environ.get("WHATSAPP_DEFAULT_COUNTRY_CODE", "91")
    WHATSAPP_TIMEOUT_SECONDS = float(os.environ.get("WHATSAPP_TIMEOUT_SECONDS", "10"))

    # "thread" runs side effects on a pool after commit; "inline" runs them in-request
    SIDE_EFFECTS_MODE = os.environ.get("SIDE_EFFECTS_MODE", "thread")
    SIDE_EFFECTS_MAX_WORKERS = int(os.environ.get("SIDE_EFFECTS_MAX_WORKERS", "4"))
    SIDE_EFFECTS_RETRY_ATTEMPTS = int(os.environ.get("SIDE_EFFECTS_RETRY_ATTEMPTS", "3"))
    SIDE_EFFECTS_BACKOFF_BASE = float(os.environ.get("SIDE_EFFECTS_BACKOFF_BASE", "0.5"))

    CORS_ORIGINS = os.environ.get(
        "CORS_ORIGINS",
        "http://localhost:5173,http://127.0.0.1:5173,http://localhost:4173,http://127.0.0.1:4173",
    )
