# Overview: Service-layer operations for revenue; totals and profit over paid orders.

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from ..extensions import db
from ..models import Brand, Order
from ..models.catalog import money
from ..validation import ValidationError, parse_optional_datetime
from haki.time_utils import end_of_day, to_utc_z
from .order_service import COMPLETED


def _parse_range(start: str | None, end: str | None) -> tuple[datetime | None, datetime | None]:
    start_dt = parse_optional_datetime(start, "start_date")
    end_dt = parse_optional_datetime(end, "end_date")
    if end_dt is not None:
        end_dt = end_of_day(end_dt)
    if start_dt is not None and end_dt is not None and start_dt > end_dt:
        raise ValidationError("Ngày bắt đầu phải trước ngày kết thúc.")
    return start_dt, end_dt


def _paid_orders(brand_id: int, start_dt: datetime | None, end_dt: datetime | None) -> list[Order]:
    query = db.session.query(Order).filter(
        Order.brand_id == brand_id,
        Order.payment_status == COMPLETED,
    )
    if start_dt is not None:
        query = query.filter(Order.created_at >= start_dt)
    if end_dt is not None:
        query = query.filter(Order.created_at <= end_dt)
    return query.order_by(Order.created_at, Order.id).all()


def _summarize(orders: list[Order]) -> dict:
    revenue = Decimal("0")
    cost = Decimal("0")
    items_sold = 0
    for order in orders:
        revenue += Decimal(order.total_amount)
        for item in order.items:
            cost += Decimal(item.cost_price or 0) * item.quantity
            items_sold += item.quantity
    return {
        "total_revenue": revenue,
        "total_profit": revenue - cost,
        "total_items_sold": items_sold,
    }


def brand_revenue(brand: Brand, start: str | None = None, end: str | None = None) -> dict:
    """
    Revenue and profit for one brand over paid orders.

    profit = revenue - sum(cost_price * quantity); a missing cost counts as 0.
    The end date covers its whole day.
    """
    start_dt, end_dt = _parse_range(start, end)
    orders = _paid_orders(brand.id, start_dt, end_dt)
    totals = _summarize(orders)

    return {
        "brand_id": brand.id,
        "brand_name": brand.name,
        "total_revenue": money(totals["total_revenue"]),
        "total_profit": money(totals["total_profit"]),
        "total_items_sold": totals["total_items_sold"],
        "orders": [
            {
                "order_id": order.id,
                "total_amount": money(order.total_amount),
                "created_at": to_utc_z(order.created_at),
                "items": [item.to_dict() for item in order.items],
            }
            for order in orders
        ],
        "start_date": to_utc_z(start_dt),
        "end_date": to_utc_z(end_dt),
    }


def revenue_summary(start: str | None = None, end: str | None = None) -> dict:
    """Per-brand rollup across every brand (admin view)."""
    start_dt, end_dt = _parse_range(start, end)
    rows = []
    grand_revenue = Decimal("0")
    grand_profit = Decimal("0")
    for brand in db.session.query(Brand).order_by(Brand.id).all():
        totals = _summarize(_paid_orders(brand.id, start_dt, end_dt))
        grand_revenue += totals["total_revenue"]
        grand_profit += totals["total_profit"]
        rows.append({
            "brand_id": brand.id,
            "brand_name": brand.name,
            "total_revenue": money(totals["total_revenue"]),
            "total_profit": money(totals["total_profit"]),
            "total_items_sold": totals["total_items_sold"],
        })
    return {
        "brands": rows,
        "total_revenue": money(grand_revenue),
        "total_profit": money(grand_profit),
        "start_date": to_utc_z(start_dt),
        "end_date": to_utc_z(end_dt),
    }
