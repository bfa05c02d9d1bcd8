from __future__ import annotations

from ..extensions import db
from haki.time_utils import to_utc_z
from .catalog import money


PAYMENT_STATUSES = ("Pending", "Completed", "Cancelled")
DELIVERY_STATUSES = ("Pending", "Processing", "Shipped", "Delivered", "Cancelled")


class Cart(db.Model):
    """One cart per customer; deleted when checkout empties it."""
    __tablename__ = "carts"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=False, unique=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    items = db.relationship(
        "CartItem",
        backref="cart",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="CartItem.id",
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "customer_id": self.customer_id,
            "items": [item.to_dict() for item in self.items],
            "created_at": to_utc_z(self.created_at),
        }


class CartItem(db.Model):
    __tablename__ = "cart_items"
    __table_args__ = (
        db.UniqueConstraint("cart_id", "product_id", name="uq_cart_items_cart_product"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    cart_id = db.Column(db.Integer, db.ForeignKey("carts.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)

    product = db.relationship("Product")

    def to_dict(self) -> dict:
        product = self.product
        brand = product.brand if product else None
        return {
            "id": self.id,
            "product_id": self.product_id,
            "product_name": product.name if product else None,
            "price_sell": money(product.price_sell) if product else None,
            "image_url": product.image_url if product else None,
            "quantity": self.quantity,
            "brand_id": brand.id if brand else None,
            "brand_name": brand.name if brand else None,
        }


class Order(db.Model):
    """
    Customer order for a single brand.

    Shipping info is a snapshot; later edits to CustomerAddress never touch it.
    stock_committed records whether inventory was decremented for this order,
    so cancel/delete restore exactly what was taken.
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.Index("ix_orders_brand_created", "brand_id", "created_at"),
        db.Index("ix_orders_customer_id", "customer_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    # Nullable so order history survives customer deletion
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=True)
    brand_id = db.Column(db.Integer, db.ForeignKey("brands.id"), nullable=False)

    total_amount = db.Column(db.Numeric(18, 2), nullable=False)
    payment_status = db.Column(db.String(16), nullable=False, default="Pending")
    delivery_status = db.Column(db.String(16), nullable=False, default="Pending")
    stock_committed = db.Column(db.Boolean, nullable=False, default=False)

    full_name = db.Column(db.String(120), nullable=False)
    phone = db.Column(db.String(32), nullable=False)
    address = db.Column(db.String(500), nullable=False)
    estimated_delivery_date = db.Column(db.DateTime(timezone=True), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=True)

    customer = db.relationship("Customer", backref=db.backref("orders", lazy=True))
    brand = db.relationship("Brand", backref=db.backref("orders", lazy=True))
    items = db.relationship(
        "OrderItem",
        backref="order",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )
    payment = db.relationship(
        "Payment",
        uselist=False,
        back_populates="order",
        cascade="all, delete-orphan",
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "customer_id": self.customer_id,
            "customer_name": self.customer.name if self.customer else None,
            "brand_id": self.brand_id,
            "brand_name": self.brand.name if self.brand else None,
            "total_amount": money(self.total_amount),
            "payment_status": self.payment_status,
            "delivery_status": self.delivery_status,
            "full_name": self.full_name,
            "phone": self.phone,
            "address": self.address,
            "estimated_delivery_date": to_utc_z(self.estimated_delivery_date),
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
            "items": [item.to_dict() for item in self.items],
            "payment": self.payment.to_dict() if self.payment else None,
        }


class OrderItem(db.Model):
    """Line snapshot: name, sell price and cost price frozen at purchase time."""
    __tablename__ = "order_items"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False, index=True)
    product_id = db.Column(
        db.Integer,
        db.ForeignKey("products.id", ondelete="SET NULL"),
        nullable=True,
    )
    product_name = db.Column(db.String(255), nullable=False)
    price = db.Column(db.Numeric(18, 2), nullable=False)
    cost_price = db.Column(db.Numeric(18, 2), nullable=True)
    quantity = db.Column(db.Integer, nullable=False)

    @property
    def line_total(self):
        return self.price * self.quantity

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "product_name": self.product_name,
            "price": money(self.price),
            "quantity": self.quantity,
            "line_total": money(self.line_total),
        }


class Payment(db.Model):
    __tablename__ = "payments"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False, unique=True)
    payment_method = db.Column(db.String(32), nullable=False)
    amount = db.Column(db.Numeric(18, 2), nullable=False)
    status = db.Column(db.String(16), nullable=False, default="Pending")
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=True)

    order = db.relationship("Order", back_populates="payment")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "order_id": self.order_id,
            "payment_method": self.payment_method,
            "amount": money(self.amount),
            "status": self.status,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
