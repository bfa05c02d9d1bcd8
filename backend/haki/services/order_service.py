# Overview: Service-layer operations for orders; checkout, payment confirmation, cancellation and staff edits.

"""
Order Workflow

Checkout turns the cart lines of one brand into Order + OrderItems + Payment
inside a single transaction:

1. cart must exist and hold items
2. keep only the lines of the requested brand
3. pre-check stock for every line
4. snapshot name / sell price / cost price into OrderItems
5. Payment(amount = total); instant methods (BankCard) complete at once and
   take stock, the rest stay Pending until pay_order()
6. drop the checked-out lines; delete the cart when empty

CONCURRENCY: stock is taken by a conditional UPDATE (see inventory_service),
under BEGIN IMMEDIATE on SQLite and row locks elsewhere, so two checkouts
racing for the last units cannot both succeed.

Order.stock_committed tracks whether stock was taken, so cancel/delete give
back exactly what was removed and a re-paid order never decrements twice.
"""

from __future__ import annotations

from decimal import Decimal

from ..extensions import db
from ..models import Brand, Customer, Order, OrderItem, Payment, PAYMENT_STATUSES, DELIVERY_STATUSES
from ..validation import NotFoundError, ValidationError, parse_int, parse_optional_datetime
from haki.time_utils import utcnow, end_of_day
from . import cart_service, inventory_service
from .address_service import get_address, get_default_address
from .concurrency import begin_write_transaction, lock_for_update, run_with_retry


PENDING = "Pending"
COMPLETED = "Completed"
CANCELLED = "Cancelled"
PROCESSING = "Processing"

PAYMENT_METHODS = ("BankCard", "COD", "BankTransfer")
INSTANT_PAYMENT_METHODS = {"BankCard"}

CUSTOMER_CANCELLABLE = {PENDING, PROCESSING}

EMPTY_CART_MESSAGE = "Giỏ hàng trống hoặc không tồn tại."
ORDER_NOT_FOUND_MESSAGE = "Đơn hàng không tồn tại."


def _order_lines(order: Order) -> list[tuple[int, int, str]]:
    """Stock-bearing lines; snapshot-only lines of deleted products are skipped."""
    return [
        (item.product_id, item.quantity, item.product_name)
        for item in order.items
        if item.product_id is not None
    ]


def _resolve_shipping(customer: Customer, payload: dict) -> dict:
    """Inline fields, else a saved address (address_id), else the default address."""
    address_id = payload.get("address_id")
    if address_id not in (None, ""):
        saved = get_address(customer, parse_int(address_id, "address_id"))
        return {"full_name": saved.full_name, "phone": saved.phone, "address": saved.address}

    inline = {field: str(payload.get(field) or "").strip() for field in ("full_name", "phone", "address")}
    if all(inline.values()):
        return inline
    if any(inline.values()):
        raise ValidationError("Vui lòng điền đầy đủ thông tin giao hàng.")

    default = get_default_address(customer.id)
    if default is None:
        raise ValidationError("Vui lòng điền đầy đủ thông tin giao hàng.")
    return {"full_name": default.full_name, "phone": default.phone, "address": default.address}


def _take_stock(order: Order) -> None:
    if not order.stock_committed:
        lines = _order_lines(order)
        inventory_service.check_available(lines)
        inventory_service.decrement(lines)
        order.stock_committed = True


def _mark_paid(order: Order) -> None:
    now = utcnow()
    order.payment_status = COMPLETED
    if order.delivery_status == PENDING:
        order.delivery_status = PROCESSING
    order.updated_at = now
    if order.payment is not None:
        order.payment.status = COMPLETED
        order.payment.updated_at = now


def _cancel_locked(order: Order) -> None:
    if order.stock_committed:
        inventory_service.restore(
            (item.product_id, item.quantity, item.product_name) for item in order.items
        )
        order.stock_committed = False
    now = utcnow()
    order.payment_status = CANCELLED
    order.delivery_status = CANCELLED
    order.updated_at = now
    if order.payment is not None:
        order.payment.status = CANCELLED
        order.payment.updated_at = now


def _lock_order(order_id: int) -> Order:
    order = lock_for_update(db.session.query(Order).filter_by(id=order_id)).populate_existing().first()
    if order is None:
        raise NotFoundError(ORDER_NOT_FOUND_MESSAGE)
    return order


def _is_cancelled(order: Order) -> bool:
    return order.payment_status == CANCELLED or order.delivery_status == CANCELLED


# -- Customer side --

def checkout(customer: Customer, payload: dict) -> Order:
    """Empty-cart is reported before any other input problem."""
    brand_id = payload.get("brand_id")
    payment_method = str(payload.get("payment_method") or "").strip()

    def _op():
        begin_write_transaction()

        cart = cart_service.find_cart(customer.id)
        if cart is None or not cart.items:
            raise ValidationError(EMPTY_CART_MESSAGE)
        if payment_method not in PAYMENT_METHODS:
            raise ValidationError("Phương thức thanh toán không hợp lệ.")
        shipping = _resolve_shipping(customer, payload)

        brand = None
        if brand_id not in (None, ""):
            brand = db.session.get(Brand, parse_int(brand_id, "brand_id"))
        if brand is None:
            raise ValidationError("Brand không tồn tại.")

        selected = [item for item in cart.items if item.product.brand_id == brand.id]
        if not selected:
            raise ValidationError("Giỏ hàng không có sản phẩm của thương hiệu này.")

        lines = [(item.product_id, item.quantity, item.product.name) for item in selected]
        inventory_service.check_available(lines)

        order = Order(
            customer_id=customer.id,
            brand_id=brand.id,
            payment_status=PENDING,
            delivery_status=PENDING,
            stock_committed=False,
            total_amount=Decimal("0"),
            **shipping,
        )
        total = Decimal("0")
        for item in selected:
            product = item.product
            order.items.append(OrderItem(
                product_id=product.id,
                product_name=product.name,
                price=product.price_sell,
                cost_price=product.price_cost,
                quantity=item.quantity,
            ))
            total += Decimal(product.price_sell) * item.quantity
        order.total_amount = total
        order.payment = Payment(payment_method=payment_method, amount=total, status=PENDING)
        db.session.add(order)
        db.session.flush()

        if payment_method in INSTANT_PAYMENT_METHODS:
            _take_stock(order)
            _mark_paid(order)

        cart_service.remove_products(customer.id, [item.product_id for item in selected])
        db.session.commit()
        return order

    return run_with_retry(_op)


def list_customer_orders(customer: Customer) -> list[Order]:
    return (
        db.session.query(Order)
        .filter_by(customer_id=customer.id)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )


def get_customer_order(customer: Customer, order_id: int) -> Order:
    order = db.session.query(Order).filter_by(id=order_id, customer_id=customer.id).first()
    if order is None:
        raise NotFoundError(ORDER_NOT_FOUND_MESSAGE)
    return order


def cancel_by_customer(customer: Customer, order_id: int) -> Order:
    def _op():
        begin_write_transaction()
        order = _lock_order(order_id)
        if order.customer_id != customer.id:
            raise NotFoundError(ORDER_NOT_FOUND_MESSAGE)
        if _is_cancelled(order) or order.delivery_status not in CUSTOMER_CANCELLABLE:
            raise ValidationError("Chỉ có thể hủy đơn hàng ở trạng thái Pending hoặc Processing.")
        _cancel_locked(order)
        db.session.commit()
        return order

    return run_with_retry(_op)


# -- Brand side --

def get_order(order_id: int) -> Order:
    order = db.session.get(Order, order_id)
    if order is None:
        raise NotFoundError(ORDER_NOT_FOUND_MESSAGE)
    return order


def list_brand_orders(
    brand_id: int,
    payment_status: str | None = None,
    delivery_status: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
) -> list[Order]:
    query = db.session.query(Order).filter(Order.brand_id == brand_id)

    if payment_status:
        if payment_status not in PAYMENT_STATUSES:
            raise ValidationError("Trạng thái thanh toán không hợp lệ.")
        query = query.filter(Order.payment_status == payment_status)
    if delivery_status:
        if delivery_status not in DELIVERY_STATUSES:
            raise ValidationError("Trạng thái giao hàng không hợp lệ.")
        query = query.filter(Order.delivery_status == delivery_status)

    start = parse_optional_datetime(start_date, "start_date")
    end = parse_optional_datetime(end_date, "end_date")
    if start is not None:
        query = query.filter(Order.created_at >= start)
    if end is not None:
        query = query.filter(Order.created_at <= end_of_day(end))

    return query.order_by(Order.created_at.desc(), Order.id.desc()).all()


def pay_order(order_id: int, payment_method: str | None = None) -> Order:
    """
    Confirm payment for a Pending order: take stock, complete payment, start delivery.

    A supplied payment_method replaces the one chosen at checkout. A deferred
    method (COD, BankTransfer) is only recorded and the order stays Pending;
    no method or an instant one (BankCard) completes the payment.
    """
    payment_method = str(payment_method or "").strip() or None
    if payment_method is not None and payment_method not in PAYMENT_METHODS:
        raise ValidationError("Phương thức thanh toán không hợp lệ.")

    def _op():
        begin_write_transaction()
        order = _lock_order(order_id)
        if order.payment_status != PENDING or _is_cancelled(order):
            raise ValidationError("Đơn hàng không ở trạng thái thanh toán Pending.")
        if payment_method:
            if order.payment is None:
                raise ValidationError("Không tìm thấy thông tin thanh toán.")
            order.payment.payment_method = payment_method
            order.payment.updated_at = utcnow()
            if payment_method not in INSTANT_PAYMENT_METHODS:
                order.updated_at = utcnow()
                db.session.commit()
                return order
        _take_stock(order)
        _mark_paid(order)
        if order.customer_id is not None:
            cart_service.remove_products(
                order.customer_id, [item.product_id for item in order.items if item.product_id is not None]
            )
        db.session.commit()
        return order

    return run_with_retry(_op)


def update_order(order_id: int, payload: dict) -> Order:
    """
    Staff edit: shipping snapshot, estimated delivery date and statuses.

    Cancelled (either status) routes through the cancel path; payment
    Completed on an unpaid order routes through the pay path.
    """
    payment_status = payload.get("payment_status")
    delivery_status = payload.get("delivery_status")
    if payment_status is not None and payment_status not in PAYMENT_STATUSES:
        raise ValidationError("Trạng thái thanh toán không hợp lệ.")
    if delivery_status is not None and delivery_status not in DELIVERY_STATUSES:
        raise ValidationError("Trạng thái giao hàng không hợp lệ.")

    shipping = {}
    for field in ("full_name", "phone", "address"):
        if field in payload:
            value = str(payload.get(field) or "").strip()
            if not value:
                raise ValidationError("Vui lòng điền đầy đủ thông tin giao hàng.")
            shipping[field] = value

    has_eta = "estimated_delivery_date" in payload
    eta = parse_optional_datetime(payload.get("estimated_delivery_date"), "estimated_delivery_date")

    def _op():
        begin_write_transaction()
        order = _lock_order(order_id)
        if _is_cancelled(order):
            raise ValidationError("Đơn hàng đã bị hủy.")

        for key, value in shipping.items():
            setattr(order, key, value)
        if has_eta:
            order.estimated_delivery_date = eta

        if CANCELLED in (payment_status, delivery_status):
            _cancel_locked(order)
        else:
            if payment_status == COMPLETED and order.payment_status != COMPLETED:
                _take_stock(order)
                _mark_paid(order)
            elif payment_status is not None:
                order.payment_status = payment_status
                if order.payment is not None:
                    order.payment.status = payment_status
                    order.payment.updated_at = utcnow()
            if delivery_status is not None:
                order.delivery_status = delivery_status

        order.updated_at = utcnow()
        db.session.commit()
        return order

    return run_with_retry(_op)


def delete_order(order_id: int) -> None:
    def _op():
        begin_write_transaction()
        order = _lock_order(order_id)
        if order.delivery_status != PENDING:
            raise ValidationError("Chỉ có thể xóa đơn hàng ở trạng thái Pending.")
        if order.stock_committed:
            inventory_service.restore(
                (item.product_id, item.quantity, item.product_name) for item in order.items
            )
        db.session.delete(order)
        db.session.commit()

    return run_with_retry(_op)
