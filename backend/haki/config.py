# backend/haki/config.py
from __future__ import annotations
import os


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/haki.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///haki.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Bearer tokens (HS256). Falls back to SECRET_KEY when unset.
    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY") or SECRET_KEY
    JWT_ISSUER = os.environ.get("JWT_ISSUER", "haki-ba-vuong")
    JWT_AUDIENCE = os.environ.get("JWT_AUDIENCE", "haki-ba-vuong-clients")
    JWT_EXPIRES_HOURS = _env_int("JWT_EXPIRES_HOURS", 3)

    OTP_TTL_MINUTES = _env_int("OTP_TTL_MINUTES", 30)

    # bcrypt cost factor; tests lower it for speed
    BCRYPT_ROUNDS = _env_int("BCRYPT_ROUNDS", 12)

    # "smtp" sends real mail, "outbox" keeps messages in memory and logs them
    MAIL_BACKEND = os.environ.get("MAIL_BACKEND", "smtp")
    MAIL_OUTBOX_LIMIT = _env_int("MAIL_OUTBOX_LIMIT", 100)
    MAIL_SERVER = os.environ.get("MAIL_SERVER", "smtp.gmail.com")
    MAIL_PORT = _env_int("MAIL_PORT", 587)
    MAIL_USERNAME = os.environ.get("MAIL_USERNAME", "")
    MAIL_PASSWORD = os.environ.get("MAIL_PASSWORD", "")
    MAIL_SENDER = os.environ.get("MAIL_SENDER", "no-reply@hakibavuong.local")
    MAIL_SENDER_NAME = os.environ.get("MAIL_SENDER_NAME", "Shop Haki Bá Vương")

    # Empty secret disables the reCAPTCHA check on customer register/login
    RECAPTCHA_SECRET_KEY = os.environ.get("RECAPTCHA_SECRET_KEY", "")
    RECAPTCHA_VERIFY_URL = "https://www.google.com/recaptcha/api/siteverify"

    UPLOAD_FOLDER = os.environ.get("UPLOAD_FOLDER", "Images")
    MAX_IMAGE_BYTES = _env_int("MAX_IMAGE_BYTES", 5 * 1024 * 1024)

    CORS_ORIGINS = [
        origin.strip()
        for origin in os.environ.get(
            "CORS_ORIGINS",
            "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173",
        ).split(",")
        if origin.strip()
    ]
