# Overview: Bearer token issue/decode (HS256 JWT) for users and customers.

"""
Token Service

Claims:
- sub: account id (string)
- email
- kind: "user" | "customer" (ids are per-table, so kind disambiguates)
- role: user role, or "Customer"
- brand_id: only for users attached to a brand
- iss / aud / iat / exp: exp is JWT_EXPIRES_HOURS (3) after issue
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt
from flask import current_app

from ..models import User, Customer
from ..permissions import CUSTOMER


ALGORITHM = "HS256"
KIND_USER = "user"
KIND_CUSTOMER = "customer"


class InvalidTokenError(Exception):
    """Raised for malformed, expired or foreign tokens."""


@dataclass
class TokenClaims:
    subject_id: int
    kind: str
    email: str
    role: str
    brand_id: int | None


def _encode(payload: dict) -> str:
    cfg = current_app.config
    now = datetime.now(timezone.utc)
    payload = {
        **payload,
        "iss": cfg["JWT_ISSUER"],
        "aud": cfg["JWT_AUDIENCE"],
        "iat": now,
        "exp": now + timedelta(hours=cfg["JWT_EXPIRES_HOURS"]),
    }
    return jwt.encode(payload, cfg["JWT_SECRET_KEY"], algorithm=ALGORITHM)


def issue_user_token(user: User) -> str:
    payload = {
        "sub": str(user.id),
        "email": user.email,
        "kind": KIND_USER,
        "role": user.role,
    }
    if user.brand_id is not None:
        payload["brand_id"] = user.brand_id
    return _encode(payload)


def issue_customer_token(customer: Customer) -> str:
    return _encode({
        "sub": str(customer.id),
        "email": customer.email,
        "kind": KIND_CUSTOMER,
        "role": CUSTOMER,
    })


def decode_token(token: str) -> TokenClaims:
    cfg = current_app.config
    try:
        payload = jwt.decode(
            token,
            cfg["JWT_SECRET_KEY"],
            algorithms=[ALGORITHM],
            audience=cfg["JWT_AUDIENCE"],
            issuer=cfg["JWT_ISSUER"],
            options={"require": ["exp", "sub", "iss", "aud"]},
        )
    except jwt.PyJWTError as exc:
        raise InvalidTokenError(str(exc)) from exc

    kind = payload.get("kind")
    if kind not in (KIND_USER, KIND_CUSTOMER):
        raise InvalidTokenError("unknown token kind")
    try:
        subject_id = int(payload["sub"])
    except (TypeError, ValueError) as exc:
        raise InvalidTokenError("invalid subject") from exc

    return TokenClaims(
        subject_id=subject_id,
        kind=kind,
        email=payload.get("email", ""),
        role=payload.get("role", ""),
        brand_id=payload.get("brand_id"),
    )
