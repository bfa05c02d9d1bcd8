# Overview: Service-layer operations for products; catalog reads, CRUD with paired inventory rows, images.

from __future__ import annotations

from sqlalchemy import update

from ..extensions import db
from ..models import Product, CartItem, OrderItem, User
from ..validation import (
    ModelValidationPolicy,
    NotFoundError,
    ValidationError,
    enforce_rules_product,
    enforce_rules_stock_quantity,
    parse_int,
    validate_payload,
)
from . import inventory_service, upload_service
from .brand_access_service import accessible_brands, get_brand


PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={"name", "description", "price_sell", "price_cost"},
    required_on_create={"name", "price_sell"},
)

PRODUCT_NOT_FOUND_MESSAGE = "Sản phẩm không tồn tại."


def get_product(product_id: int) -> Product:
    product = db.session.get(Product, product_id)
    if product is None:
        raise NotFoundError(PRODUCT_NOT_FOUND_MESSAGE)
    return product


def list_products(brand_id: int | None = None) -> list[Product]:
    query = db.session.query(Product)
    if brand_id is not None:
        query = query.filter(Product.brand_id == brand_id)
    return query.order_by(Product.id).all()


def list_products_for_staff(user: User) -> list[Product]:
    brand_ids = [brand.id for brand in accessible_brands(user, "VIEW_PRODUCTS")]
    if not brand_ids:
        return []
    return (
        db.session.query(Product)
        .filter(Product.brand_id.in_(brand_ids))
        .order_by(Product.id)
        .all()
    )


def create_product(brand_id: int, payload: dict) -> Product:
    """Create product and its 1:1 inventory row (initial stock_quantity defaults to 0)."""
    brand = get_brand(brand_id)
    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
    enforce_rules_product(patch)

    raw_stock = payload.get("stock_quantity")
    stock_quantity = 0 if raw_stock in (None, "") else parse_int(raw_stock, "stock_quantity")
    enforce_rules_stock_quantity(stock_quantity)

    product = Product(brand=brand, **patch)
    db.session.add(product)
    inventory_service.create_inventory(product, stock_quantity)
    db.session.commit()
    return product


def update_product(product: Product, payload: dict) -> Product:
    if "brand_id" in payload and payload["brand_id"] not in (None, product.brand_id):
        raise ValidationError("Không thể chuyển sản phẩm sang thương hiệu khác.")
    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=True)
    enforce_rules_product(patch)
    for key, value in patch.items():
        setattr(product, key, value)
    db.session.commit()
    return product


def delete_product_rows(product: Product) -> str | None:
    """
    Remove a product with its inventory (cascade) and cart lines. Caller commits.

    Order lines keep their frozen snapshot and lose only the product link.
    Returns the product's image URL so the caller can remove the file after commit.
    """
    db.session.execute(
        update(OrderItem)
        .where(OrderItem.product_id == product.id)
        .values(product_id=None)
        .execution_options(synchronize_session="fetch")
    )
    for item in db.session.query(CartItem).filter_by(product_id=product.id).all():
        db.session.delete(item)
    image_url = product.image_url
    db.session.delete(product)
    return image_url


def delete_product(product: Product) -> None:
    image_url = delete_product_rows(product)
    db.session.commit()
    upload_service.delete_image(image_url)


def set_product_image(product: Product, file_storage) -> Product:
    url = upload_service.save_image(file_storage)
    previous = product.image_url
    product.image_url = url
    db.session.commit()
    upload_service.delete_image(previous)
    return product
