# marketplace/services/analytics/period_service.py

import math
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

from marketplace.models.dashboard_models import PeriodComparison
from marketplace.models.order_models import Order


class Period(str, Enum):
    week = "week"
    month = "month"
    quarter = "quarter"
    year = "year"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Period":
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.month


Window = Tuple[datetime, datetime]


def _now(now: Optional[datetime]) -> datetime:
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now


def _month_start(year: int, month: int, tz) -> datetime:
    # month may run outside 1..12 by one step either way
    while month < 1:
        month += 12
        year -= 1
    while month > 12:
        month -= 12
        year += 1
    return datetime(year, month, 1, tzinfo=tz)


def _unit_start(period: Period, now: datetime) -> datetime:
    if period == Period.month:
        return _month_start(now.year, now.month, now.tzinfo)
    if period == Period.quarter:
        return _month_start(now.year, ((now.month - 1) // 3) * 3 + 1, now.tzinfo)
    return datetime(now.year, 1, 1, tzinfo=now.tzinfo)


def current_window(period: Period, now: Optional[datetime] = None) -> Window:
    """
    [start, now]. week is rolling 7 days; month/quarter/year are calendar
    units to date.
    """
    now = _now(now)
    if period == Period.week:
        return now - timedelta(days=7), now
    return _unit_start(period, now), now


def previous_window(period: Period, now: Optional[datetime] = None) -> Window:
    """
    [start, end) covering the whole preceding unit of the same kind.
    """
    now = _now(now)
    if period == Period.week:
        end = now - timedelta(days=7)
        return end - timedelta(days=7), end

    end = _unit_start(period, now)
    if period == Period.month:
        start = _month_start(end.year, end.month - 1, end.tzinfo)
    elif period == Period.quarter:
        start = _month_start(end.year, end.month - 3, end.tzinfo)
    else:
        start = datetime(end.year - 1, 1, 1, tzinfo=end.tzinfo)
    return start, end


def filter_orders(orders: Sequence[Order], start: datetime, end: datetime, include_end: bool = True) -> List[Order]:
    if include_end:
        return [o for o in orders if start <= o.date <= end]
    return [o for o in orders if start <= o.date < end]


def orders_in_period(orders: Sequence[Order], period: Period, now: Optional[datetime] = None) -> List[Order]:
    start, end = current_window(period, now)
    return filter_orders(orders, start, end)


def orders_in_previous_period(orders: Sequence[Order], period: Period, now: Optional[datetime] = None) -> List[Order]:
    start, end = previous_window(period, now)
    return filter_orders(orders, start, end, include_end=False)


def growth(current: float, previous: float) -> float:
    """
    Percent change. From zero: any gain is +100%, zero-to-zero is 0%.
    """
    if previous > 0:
        return (current - previous) / previous * 100
    return 100.0 if current > 0 else 0.0


def round_half_up(value: float) -> int:
    """Rounds .5 upward: 2.5 -> 3, -2.5 -> -2."""
    return int(math.floor(value + 0.5))


def compare(
    orders: Sequence[Order],
    period: Period,
    revenue_of: Callable[[Sequence[Order]], float],
    customers_of: Callable[[Sequence[Order]], int],
    now: Optional[datetime] = None,
) -> PeriodComparison:
    now = _now(now)
    cur = orders_in_period(orders, period, now)
    prev = orders_in_previous_period(orders, period, now)

    return PeriodComparison(
        revenue=round_half_up(growth(revenue_of(cur), revenue_of(prev))),
        orders=round_half_up(growth(len(cur), len(prev))),
        customers=round_half_up(growth(customers_of(cur), customers_of(prev))),
    )
