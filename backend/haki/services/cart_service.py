# Overview: Service-layer operations for the customer cart.

from __future__ import annotations

from ..extensions import db
from ..models import Cart, CartItem, Customer
from ..validation import NotFoundError, ValidationError, parse_int
from . import inventory_service
from .product_service import get_product


CART_NOT_FOUND_MESSAGE = "Giỏ hàng không tồn tại."
CART_ITEM_NOT_FOUND_MESSAGE = "Mục giỏ hàng không tồn tại."


def find_cart(customer_id: int) -> Cart | None:
    return db.session.query(Cart).filter_by(customer_id=customer_id).first()


def get_or_create_cart(customer: Customer) -> Cart:
    cart = find_cart(customer.id)
    if cart is None:
        cart = Cart(customer_id=customer.id)
        db.session.add(cart)
        db.session.commit()
    return cart


def _positive_quantity(raw) -> int:
    quantity = parse_int(raw, "quantity") if raw is not None else 0
    if quantity <= 0:
        raise ValidationError("Số lượng phải lớn hơn 0.")
    return quantity


def add_item(customer: Customer, product_id, quantity) -> Cart:
    """Add a product or merge into the existing line; both checked against stock."""
    quantity = _positive_quantity(quantity)
    if product_id is None:
        raise ValidationError("Vui lòng chọn sản phẩm.")
    product = get_product(parse_int(product_id, "product_id"))

    stock = inventory_service.get_stock(product.id)
    if stock < quantity:
        raise ValidationError("Số lượng tồn kho không đủ.")

    cart = get_or_create_cart(customer)
    item = db.session.query(CartItem).filter_by(cart_id=cart.id, product_id=product.id).first()
    if item is None:
        db.session.add(CartItem(cart_id=cart.id, product_id=product.id, quantity=quantity))
    else:
        if item.quantity + quantity > stock:
            raise ValidationError("Tổng số lượng vượt quá tồn kho.")
        item.quantity += quantity
    db.session.commit()
    db.session.refresh(cart)
    return cart


def _owned_item(customer: Customer, cart_item_id: int) -> tuple[Cart, CartItem]:
    cart = find_cart(customer.id)
    if cart is None:
        raise NotFoundError(CART_NOT_FOUND_MESSAGE)
    item = db.session.query(CartItem).filter_by(id=cart_item_id, cart_id=cart.id).first()
    if item is None:
        raise NotFoundError(CART_ITEM_NOT_FOUND_MESSAGE)
    return cart, item


def update_item(customer: Customer, cart_item_id: int, quantity) -> Cart:
    quantity = _positive_quantity(quantity)
    cart, item = _owned_item(customer, cart_item_id)
    if inventory_service.get_stock(item.product_id) < quantity:
        raise ValidationError("Số lượng tồn kho không đủ.")
    item.quantity = quantity
    db.session.commit()
    db.session.refresh(cart)
    return cart


def remove_item(customer: Customer, cart_item_id: int) -> Cart:
    cart, item = _owned_item(customer, cart_item_id)
    db.session.delete(item)
    db.session.commit()
    db.session.refresh(cart)
    return cart


def clear_cart(customer: Customer) -> None:
    cart = find_cart(customer.id)
    if cart is None:
        raise NotFoundError(CART_NOT_FOUND_MESSAGE)
    db.session.delete(cart)
    db.session.commit()


def remove_products(customer_id: int, product_ids) -> None:
    """Drop checked-out lines; delete the cart once empty. Caller commits."""
    cart = find_cart(customer_id)
    if cart is None:
        return
    product_ids = set(product_ids)
    for item in list(cart.items):
        if item.product_id in product_ids:
            cart.items.remove(item)
    if not cart.items:
        db.session.delete(cart)
