# Overview: Service-layer operations for saved customer addresses and the single-default rule.

from __future__ import annotations

from ..extensions import db
from ..models import CustomerAddress, Customer
from ..validation import NotFoundError, ValidationError


ADDRESS_NOT_FOUND_MESSAGE = "Địa chỉ không tồn tại."
ADDRESS_INCOMPLETE_MESSAGE = "Vui lòng điền đầy đủ thông tin địa chỉ."

ADDRESS_FIELDS = ("full_name", "phone", "address")


def list_addresses(customer: Customer) -> list[CustomerAddress]:
    return (
        db.session.query(CustomerAddress)
        .filter_by(customer_id=customer.id)
        .order_by(CustomerAddress.is_default.desc(), CustomerAddress.id)
        .all()
    )


def get_address(customer: Customer, address_id: int) -> CustomerAddress:
    address = (
        db.session.query(CustomerAddress)
        .filter_by(id=address_id, customer_id=customer.id)
        .first()
    )
    if address is None:
        raise NotFoundError(ADDRESS_NOT_FOUND_MESSAGE)
    return address


def get_default_address(customer_id: int) -> CustomerAddress | None:
    return (
        db.session.query(CustomerAddress)
        .filter_by(customer_id=customer_id, is_default=True)
        .first()
    )


def _clean_fields(payload: dict) -> dict:
    cleaned = {field: str(payload.get(field) or "").strip() for field in ADDRESS_FIELDS}
    if not all(cleaned.values()):
        raise ValidationError(ADDRESS_INCOMPLETE_MESSAGE)
    return cleaned


def _wants_default(payload: dict) -> bool:
    value = payload.get("is_default")
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValidationError("is_default phải là true/false")
    return value


def _make_default(customer_id: int, address: CustomerAddress) -> None:
    (
        db.session.query(CustomerAddress)
        .filter(CustomerAddress.customer_id == customer_id, CustomerAddress.id != address.id)
        .update({CustomerAddress.is_default: False}, synchronize_session="fetch")
    )
    address.is_default = True


def create_address(customer: Customer, payload: dict) -> CustomerAddress:
    """The first address always becomes the default."""
    fields = _clean_fields(payload)
    make_default = _wants_default(payload)
    has_any = db.session.query(CustomerAddress.id).filter_by(customer_id=customer.id).first() is not None

    address = CustomerAddress(customer_id=customer.id, is_default=False, **fields)
    db.session.add(address)
    db.session.flush()
    if make_default or not has_any:
        _make_default(customer.id, address)
    db.session.commit()
    return address


def update_address(customer: Customer, address_id: int, payload: dict) -> CustomerAddress:
    address = get_address(customer, address_id)
    fields = _clean_fields(payload)
    make_default = _wants_default(payload)
    for key, value in fields.items():
        setattr(address, key, value)
    if make_default:
        _make_default(customer.id, address)
    db.session.commit()
    return address


def delete_address(customer: Customer, address_id: int) -> None:
    """Deleting the default promotes the oldest remaining address."""
    address = get_address(customer, address_id)
    was_default = address.is_default
    db.session.delete(address)
    db.session.flush()

    if was_default:
        successor = (
            db.session.query(CustomerAddress)
            .filter_by(customer_id=customer.id)
            .order_by(CustomerAddress.id)
            .first()
        )
        if successor is not None:
            successor.is_default = True
    db.session.commit()
