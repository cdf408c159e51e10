"""Back-office dashboard figures.

Revenue only counts orders whose payment has been collected. Order counts
include every order placed in the window, whatever its status.
"""
from datetime import date, datetime, time, timedelta
from typing import Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from foodcity.models.order import Order, OrderItem, OrderPaymentStatus
from foodcity.models.product import Product
from foodcity.models.user import User, UserRole
from foodcity.services.order_service import serialize_order

DEFAULT_RANGE_DAYS = 30
RECENT_ORDERS_LIMIT = 10
POPULAR_ITEMS_LIMIT = 5


def percentage_change(current: float, previous: float) -> float:
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return round((current - previous) / previous * 100, 2)


def _month_start(day: date) -> datetime:
    return datetime.combine(day.replace(day=1), time.min)


def _previous_month_start(day: date) -> datetime:
    first = day.replace(day=1)
    return datetime.combine((first - timedelta(days=1)).replace(day=1), time.min)


def _window(db: Session, start: datetime, end: datetime) -> Tuple[int, float]:
    """Order count and paid revenue for ``start <= created_at < end``."""
    in_window = (Order.created_at >= start, Order.created_at < end)
    orders = db.query(func.count(Order.id)).filter(*in_window).scalar() or 0
    revenue = db.query(func.sum(Order.total_amount)).filter(
        *in_window,
        Order.payment_status == OrderPaymentStatus.PAID,
    ).scalar() or 0
    return orders, round(float(revenue), 2)


def resolve_range(start_date: Optional[date], end_date: Optional[date], today: date) -> Tuple[datetime, datetime]:
    end_day = end_date or today
    start_day = start_date or (end_day - timedelta(days=DEFAULT_RANGE_DAYS))
    if start_day > end_day:
        start_day, end_day = end_day, start_day
    # End day is inclusive.
    return datetime.combine(start_day, time.min), datetime.combine(end_day + timedelta(days=1), time.min)


def build_dashboard(
    db: Session,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    now: Optional[datetime] = None,
) -> dict:
    now = now or datetime.utcnow()
    today = now.date()
    today_start = datetime.combine(today, time.min)
    tomorrow_start = today_start + timedelta(days=1)
    yesterday_start = today_start - timedelta(days=1)
    month_start = _month_start(today)
    last_month_start = _previous_month_start(today)

    today_orders, today_revenue = _window(db, today_start, tomorrow_start)
    yesterday_orders, yesterday_revenue = _window(db, yesterday_start, today_start)
    month_orders, month_revenue = _window(db, month_start, tomorrow_start)
    last_month_orders, last_month_revenue = _window(db, last_month_start, month_start)

    range_start, range_end = resolve_range(start_date, end_date, today)
    in_range = (Order.created_at >= range_start, Order.created_at < range_end)
    total_orders, total_revenue = _window(db, range_start, range_end)
    paid_orders = db.query(func.count(Order.id)).filter(
        *in_range,
        Order.payment_status == OrderPaymentStatus.PAID,
    ).scalar() or 0

    total_customers = db.query(func.count(User.id)).filter(User.role == UserRole.CUSTOMER).scalar() or 0
    total_products = db.query(func.count(Product.id)).scalar() or 0

    recent_orders = (
        db.query(Order)
        .filter(*in_range)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .limit(RECENT_ORDERS_LIMIT)
        .all()
    )

    quantity_sold = func.sum(OrderItem.quantity)
    popular_items = (
        db.query(
            OrderItem.product_id,
            OrderItem.title,
            quantity_sold.label("quantity"),
            func.sum(OrderItem.quantity * OrderItem.price).label("revenue"),
        )
        .join(Order, Order.id == OrderItem.order_id)
        .filter(*in_range)
        .group_by(OrderItem.product_id, OrderItem.title)
        .order_by(quantity_sold.desc())
        .limit(POPULAR_ITEMS_LIMIT)
        .all()
    )

    status_rows = (
        db.query(Order.status, func.count(Order.id))
        .filter(*in_range)
        .group_by(Order.status)
        .all()
    )
    method_rows = (
        db.query(Order.payment_method, func.count(Order.id), func.sum(Order.total_amount))
        .filter(*in_range)
        .group_by(Order.payment_method)
        .all()
    )

    return {
        "today": {
            "orders": today_orders,
            "revenue": today_revenue,
            "orders_change": percentage_change(today_orders, yesterday_orders),
            "revenue_change": percentage_change(today_revenue, yesterday_revenue),
        },
        "this_month": {
            "orders": month_orders,
            "revenue": month_revenue,
            "orders_change": percentage_change(month_orders, last_month_orders),
            "revenue_change": percentage_change(month_revenue, last_month_revenue),
        },
        "range": {
            "start_date": range_start.date(),
            "end_date": (range_end - timedelta(days=1)).date(),
            "total_orders": total_orders,
            "total_revenue": total_revenue,
            "average_order_value": round(total_revenue / paid_orders, 2) if paid_orders else 0.0,
        },
        "total_customers": total_customers,
        "total_products": total_products,
        "recent_orders": [serialize_order(order) for order in recent_orders],
        "popular_items": [
            {
                "product_id": row.product_id,
                "title": row.title,
                "quantity": int(row.quantity or 0),
                "revenue": round(float(row.revenue or 0), 2),
            }
            for row in popular_items
        ],
        "status_distribution": {order_status.value: count for order_status, count in status_rows},
        "payment_methods": {
            method.value: {"orders": count, "amount": round(float(amount or 0), 2)}
            for method, count, amount in method_rows
        },
    }
