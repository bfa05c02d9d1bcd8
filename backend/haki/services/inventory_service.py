# Overview: Service-layer operations for inventory; stock reads, manual updates and atomic decrements.

"""
Inventory Service

Stock lives in one row per product (inventories.stock_quantity).

INVARIANT: stock_quantity never goes negative.
- Manual updates reject negative values.
- Checkout/pay decrements are a single conditional UPDATE
  (stock_quantity >= qty in the WHERE clause); a zero rowcount aborts the
  caller's transaction instead of overselling.
"""

from __future__ import annotations

from sqlalchemy import update

from ..extensions import db
from ..models import Inventory, Product
from ..validation import NotFoundError, ValidationError, enforce_rules_stock_quantity
from haki.time_utils import utcnow
from .concurrency import lock_for_update


def get_inventory(product_id: int) -> Inventory:
    inventory = db.session.query(Inventory).filter_by(product_id=product_id).first()
    if not inventory:
        raise NotFoundError("Không tìm thấy tồn kho cho sản phẩm.")
    return inventory


def get_stock(product_id: int) -> int:
    inventory = db.session.query(Inventory).filter_by(product_id=product_id).first()
    return inventory.stock_quantity if inventory else 0


def create_inventory(product: Product, stock_quantity: int = 0) -> Inventory:
    """Create the 1:1 stock row for a new product. Caller commits."""
    enforce_rules_stock_quantity(stock_quantity)
    inventory = Inventory(product=product, stock_quantity=stock_quantity, last_updated=utcnow())
    db.session.add(inventory)
    return inventory


def set_stock(product_id: int, stock_quantity: int) -> Inventory:
    enforce_rules_stock_quantity(stock_quantity)
    inventory = lock_for_update(db.session.query(Inventory).filter_by(product_id=product_id)).first()
    if not inventory:
        raise NotFoundError("Không tìm thấy tồn kho cho sản phẩm.")
    inventory.stock_quantity = stock_quantity
    inventory.last_updated = utcnow()
    db.session.commit()
    return inventory


def _aggregate(lines) -> dict[int, tuple[int, str]]:
    """Collapse (product_id, quantity, name) lines into per-product totals."""
    totals: dict[int, tuple[int, str]] = {}
    for product_id, quantity, name in lines:
        current_qty, _ = totals.get(product_id, (0, name))
        totals[product_id] = (current_qty + quantity, name)
    return totals


def check_available(lines) -> None:
    """
    Pre-check every line before any mutation.

    lines: iterable of (product_id, quantity, product_name).
    Raises ValidationError naming the first product that cannot be covered.
    """
    for product_id, (quantity, name) in _aggregate(lines).items():
        inventory = (
            lock_for_update(db.session.query(Inventory).filter_by(product_id=product_id))
            .populate_existing()
            .first()
        )
        if inventory is None or inventory.stock_quantity < quantity:
            raise ValidationError(f"Sản phẩm {name} không đủ tồn kho.")


def decrement(lines) -> None:
    """
    Take stock for every line inside the caller's transaction.

    Each product is decremented with a conditional UPDATE; if any row does not
    match, ValidationError is raised and the caller must roll back.
    """
    now = utcnow()
    for product_id, (quantity, name) in _aggregate(lines).items():
        result = db.session.execute(
            update(Inventory)
            .where(Inventory.product_id == product_id, Inventory.stock_quantity >= quantity)
            .values(stock_quantity=Inventory.stock_quantity - quantity, last_updated=now)
            .execution_options(synchronize_session="fetch")
        )
        if result.rowcount != 1:
            raise ValidationError(f"Sản phẩm {name} không đủ tồn kho.")


def restore(lines) -> None:
    """Give stock back for cancelled/deleted orders. Missing products are skipped."""
    now = utcnow()
    for product_id, (quantity, _name) in _aggregate(lines).items():
        if product_id is None:
            continue
        db.session.execute(
            update(Inventory)
            .where(Inventory.product_id == product_id)
            .values(stock_quantity=Inventory.stock_quantity + quantity, last_updated=now)
            .execution_options(synchronize_session="fetch")
        )
