# Overview: reCAPTCHA verification for customer register/login.

from __future__ import annotations

import httpx
from flask import current_app

from ..validation import ValidationError


CAPTCHA_FAILED_MESSAGE = "Xác thực reCAPTCHA thất bại."


def verify(token: str | None, remote_ip: str | None = None) -> None:
    """
    Verify a reCAPTCHA response token with Google.

    Disabled (no-op) when RECAPTCHA_SECRET_KEY is empty. Network failures are
    treated as a failed check.
    """
    secret = current_app.config.get("RECAPTCHA_SECRET_KEY")
    if not secret:
        return
    if not token:
        raise ValidationError(CAPTCHA_FAILED_MESSAGE)

    data = {"secret": secret, "response": token}
    if remote_ip:
        data["remoteip"] = remote_ip

    try:
        response = httpx.post(current_app.config["RECAPTCHA_VERIFY_URL"], data=data, timeout=10.0)
        response.raise_for_status()
        result = response.json()
    except (httpx.HTTPError, ValueError):
        current_app.logger.warning("reCAPTCHA verification request failed", exc_info=True)
        raise ValidationError(CAPTCHA_FAILED_MESSAGE)

    if not result.get("success"):
        current_app.logger.info("reCAPTCHA rejected: %s", result.get("error-codes"))
        raise ValidationError(CAPTCHA_FAILED_MESSAGE)
