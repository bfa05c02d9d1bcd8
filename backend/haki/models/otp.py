from __future__ import annotations

from ..extensions import db


class OtpCode(db.Model):
    """
    Short-lived one-time codes keyed by (purpose, email).

    The plaintext code is only ever emailed; the row holds a keyed hash.
    Re-issuing for the same key overwrites the row.
    """
    __tablename__ = "otp_codes"
    __table_args__ = (
        db.UniqueConstraint("purpose", "email", name="uq_otp_codes_purpose_email"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    purpose = db.Column(db.String(40), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    code_hash = db.Column(db.String(64), nullable=False)
    expires_at = db.Column(db.DateTime(timezone=True), nullable=False, index=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
