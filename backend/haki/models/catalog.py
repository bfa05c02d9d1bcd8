from __future__ import annotations

from ..extensions import db
from haki.time_utils import to_utc_z


def money(value) -> float | None:
    return float(value) if value is not None else None


class Brand(db.Model):
    """Tenant. Owns products and receives orders."""
    __tablename__ = "brands"
    __table_args__ = (
        db.Index("ix_brands_owner_id", "owner_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    owner_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    background_color = db.Column(db.String(32), nullable=True)
    background_image_url = db.Column(db.String(500), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    owner = db.relationship("User", foreign_keys=[owner_id], backref=db.backref("owned_brands", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "owner_id": self.owner_id,
            "owner_name": self.owner.name if self.owner else None,
            "background_color": self.background_color,
            "background_image_url": self.background_image_url,
            "created_at": to_utc_z(self.created_at),
        }


class Product(db.Model):
    __tablename__ = "products"
    __table_args__ = (
        db.Index("ix_products_brand_id", "brand_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    brand_id = db.Column(db.Integer, db.ForeignKey("brands.id"), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    price_sell = db.Column(db.Numeric(18, 2), nullable=False)
    price_cost = db.Column(db.Numeric(18, 2), nullable=True)
    image_url = db.Column(db.String(500), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    brand = db.relationship("Brand", backref=db.backref("products", lazy=True))
    inventory = db.relationship(
        "Inventory",
        uselist=False,
        back_populates="product",
        cascade="all, delete-orphan",
    )

    def to_dict(self, include_cost: bool = False) -> dict:
        data = {
            "id": self.id,
            "brand_id": self.brand_id,
            "brand_name": self.brand.name if self.brand else None,
            "name": self.name,
            "description": self.description,
            "price_sell": money(self.price_sell),
            "image_url": self.image_url,
            "stock_quantity": self.inventory.stock_quantity if self.inventory else 0,
            "created_at": to_utc_z(self.created_at),
        }
        if include_cost:
            data["price_cost"] = money(self.price_cost)
        return data


class Inventory(db.Model):
    """
    Current stock for one product (1:1).

    INVARIANT: stock_quantity >= 0. Enforced by the CHECK constraint and by
    the conditional decrement in inventory_service.
    """
    __tablename__ = "inventories"
    __table_args__ = (
        db.CheckConstraint("stock_quantity >= 0", name="ck_inventories_stock_nonnegative"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, unique=True)
    stock_quantity = db.Column(db.Integer, nullable=False, default=0)
    last_updated = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    product = db.relationship("Product", back_populates="inventory")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "product_name": self.product.name if self.product else None,
            "stock_quantity": self.stock_quantity,
            "last_updated": to_utc_z(self.last_updated),
        }
