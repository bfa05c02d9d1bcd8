from __future__ import annotations

from ..extensions import db
from haki.time_utils import to_utc_z


class User(db.Model):
    """
    Back-office accounts: administrators, brand owners and brand staff.

    A brand owner is a User referenced by Brand.owner_id. Staff join a brand
    through brand_id and only gain access once approval_status is Approved.
    """
    __tablename__ = "users"
    __table_args__ = (
        db.Index("ix_users_brand_id", "brand_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), nullable=False, unique=True)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    # Admin | Staff | InventoryManager | BrandManager
    role = db.Column(db.String(32), nullable=False, default="Staff")

    # use_alter breaks the users <-> brands FK cycle for DDL ordering
    brand_id = db.Column(
        db.Integer,
        db.ForeignKey("brands.id", use_alter=True, name="fk_users_brand_id"),
        nullable=True,
    )
    # Pending | Approved | None
    approval_status = db.Column(db.String(16), nullable=True)

    is_email_verified = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    brand = db.relationship("Brand", foreign_keys=[brand_id], backref=db.backref("staff", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "brand_id": self.brand_id,
            "approval_status": self.approval_status,
            "is_email_verified": self.is_email_verified,
            "created_at": to_utc_z(self.created_at),
        }


class Customer(db.Model):
    """Storefront shoppers. Separate identity table from back-office users."""
    __tablename__ = "customers"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), nullable=False, unique=True)
    password_hash = db.Column(db.String(255), nullable=False)
    is_email_verified = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "is_email_verified": self.is_email_verified,
            "created_at": to_utc_z(self.created_at),
        }


class CustomerAddress(db.Model):
    """
    Saved shipping addresses.

    INVARIANT: a customer with any addresses has exactly one is_default row.
    Maintained by address_service, never by direct writes.
    """
    __tablename__ = "customer_addresses"
    __table_args__ = (
        db.Index("ix_customer_addresses_customer", "customer_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=False)
    full_name = db.Column(db.String(120), nullable=False)
    phone = db.Column(db.String(32), nullable=False)
    address = db.Column(db.String(500), nullable=False)
    is_default = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    customer = db.relationship(
        "Customer",
        backref=db.backref("addresses", lazy=True, cascade="all, delete-orphan"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "customer_id": self.customer_id,
            "full_name": self.full_name,
            "phone": self.phone,
            "address": self.address,
            "is_default": self.is_default,
        }
