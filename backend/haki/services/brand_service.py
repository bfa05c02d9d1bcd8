# Overview: Service-layer operations for brands; CRUD, background styling and teardown.

from __future__ import annotations

from ..extensions import db
from ..models import Brand, User, Product, Order
from ..validation import ModelValidationPolicy, ValidationError, ConflictError, NotFoundError, validate_payload
from . import upload_service
from .brand_access_service import get_brand, is_admin
from .product_service import delete_product_rows


BRAND_POLICY = ModelValidationPolicy(
    writable_fields={"name", "owner_id", "background_color"},
    required_on_create={"name", "owner_id"},
)


def _require_owner(owner_id: int) -> User:
    owner = db.session.get(User, owner_id)
    if owner is None:
        raise NotFoundError("Người dùng không tồn tại.")
    return owner


def list_brands() -> list[Brand]:
    return db.session.query(Brand).order_by(Brand.id).all()


def create_brand(payload: dict) -> Brand:
    patch = validate_payload(model=Brand, payload=payload, policy=BRAND_POLICY, partial=False)
    _require_owner(patch["owner_id"])
    brand = Brand(**patch)
    db.session.add(brand)
    db.session.commit()
    return brand


def update_brand(brand_id: int, payload: dict, actor: User) -> Brand:
    brand = get_brand(brand_id)
    patch = validate_payload(model=Brand, payload=payload, policy=BRAND_POLICY, partial=True)

    if "owner_id" in patch and patch["owner_id"] != brand.owner_id:
        if not is_admin(actor):
            raise ValidationError("Chỉ Admin mới có thể thay đổi chủ thương hiệu.")
        _require_owner(patch["owner_id"])

    for key, value in patch.items():
        setattr(brand, key, value)
    db.session.commit()
    return brand


def set_background_image(brand_id: int, file_storage) -> Brand:
    brand = get_brand(brand_id)
    url = upload_service.save_image(file_storage)
    previous = brand.background_image_url
    brand.background_image_url = url
    db.session.commit()
    upload_service.delete_image(previous)
    return brand


def _delete_brand_rows(brand: Brand) -> list[str]:
    """
    Remove a brand with its catalog and detach its staff. Caller commits.

    Refused while any order references the brand. Returns image URLs to
    clean up after commit.
    """
    if db.session.query(Order.id).filter_by(brand_id=brand.id).first() is not None:
        raise ConflictError(f"Không thể xóa thương hiệu {brand.name} vì đã có đơn hàng.")

    for staff in db.session.query(User).filter_by(brand_id=brand.id).all():
        staff.brand_id = None
        staff.approval_status = None

    images = [brand.background_image_url]
    for product in db.session.query(Product).filter_by(brand_id=brand.id).all():
        images.append(delete_product_rows(product))

    db.session.delete(brand)
    return images


def delete_brand(brand_id: int) -> None:
    brand = get_brand(brand_id)
    try:
        images = _delete_brand_rows(brand)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    for url in images:
        upload_service.delete_image(url)


def delete_owned_brands(user: User) -> list[str]:
    """User teardown: drop every brand the user owns. Caller commits."""
    images = []
    for brand in list(user.owned_brands):
        images.extend(_delete_brand_rows(brand))
    return images
