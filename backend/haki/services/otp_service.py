# Overview: Service-layer operations for one-time codes; issue, verify and purge.

"""
OTP Service

Lifecycle per (purpose, email): NoCode -> Issued -> Consumed | Expired.

- Codes are 6 digits in [100000, 999999] from an injectable random source.
- Stored as an HMAC (keyed by SECRET_KEY) so a database read does not reveal
  live codes.
- TTL is OTP_TTL_MINUTES (default 30). Re-issuing overwrites the row.
- verify_and_consume() deletes the row with a conditional DELETE; only the
  request whose DELETE affects the row succeeds, so a code is accepted at
  most once.
- Every failure (unknown key, mismatch, expired) raises the same
  InvalidOtpError message.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets
from datetime import timedelta

from flask import current_app
from sqlalchemy import delete

from ..extensions import db
from ..models import OtpCode
from ..validation import ValidationError
from haki.time_utils import utcnow


# Purposes for back-office users
REGISTER = "register"
LOGIN_2FA = "login_2fa"
RESET_PASSWORD = "reset_password"

# Purposes for storefront customers
CUSTOMER_REGISTER = "customer_register"
CUSTOMER_LOGIN_2FA = "customer_login_2fa"
CUSTOMER_RESET_PASSWORD = "customer_reset_password"

OTP_MIN = 100000
OTP_MAX = 999999

INVALID_OTP_MESSAGE = "Mã OTP không đúng hoặc đã hết hạn."

_random_source = secrets.SystemRandom()


class InvalidOtpError(ValidationError):
    def __init__(self):
        super().__init__(INVALID_OTP_MESSAGE)


def set_random_source(source) -> None:
    """Swap the generator used for new codes (anything with randint(a, b))."""
    global _random_source
    _random_source = source


def generate_code() -> str:
    return str(_random_source.randint(OTP_MIN, OTP_MAX))


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def _hash_code(purpose: str, email: str, code: str) -> str:
    key = current_app.config["SECRET_KEY"].encode("utf-8")
    message = f"{purpose}:{email}:{code}".encode("utf-8")
    return hmac.new(key, message, hashlib.sha256).hexdigest()


def issue(purpose: str, email: str) -> str:
    """Create or overwrite the code for (purpose, email); returns the plaintext."""
    email = _normalize_email(email)
    code = generate_code()
    ttl = timedelta(minutes=current_app.config.get("OTP_TTL_MINUTES", 30))

    row = db.session.query(OtpCode).filter_by(purpose=purpose, email=email).first()
    if row is None:
        row = OtpCode(purpose=purpose, email=email)
        db.session.add(row)
    row.code_hash = _hash_code(purpose, email, code)
    row.expires_at = utcnow() + ttl
    db.session.commit()
    return code


def verify_and_consume(purpose: str, email: str, code: str | None) -> None:
    """Raise InvalidOtpError unless `code` matches a live entry; consume it on success."""
    email = _normalize_email(email)
    submitted = (code or "").strip()
    if not email or not submitted:
        raise InvalidOtpError()

    row = db.session.query(OtpCode).filter_by(purpose=purpose, email=email).first()
    if row is None:
        raise InvalidOtpError()

    if row.expires_at <= utcnow():
        db.session.delete(row)
        db.session.commit()
        raise InvalidOtpError()

    expected = row.code_hash
    if not hmac.compare_digest(expected, _hash_code(purpose, email, submitted)):
        raise InvalidOtpError()

    result = db.session.execute(
        delete(OtpCode)
        .where(OtpCode.id == row.id, OtpCode.code_hash == expected)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.session.rollback()
        raise InvalidOtpError()
    db.session.expunge(row)


def purge_expired() -> int:
    result = db.session.execute(
        delete(OtpCode)
        .where(OtpCode.expires_at <= utcnow())
        .execution_options(synchronize_session=False)
    )
    db.session.commit()
    return result.rowcount
