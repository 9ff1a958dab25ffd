# marketplace/services/analytics/revenue_service.py
"""
Revenue rollups for the admin and farm-owner dashboards.

Everything here is a pure function of the records passed in. Nothing is
cached between calls, so recomputing over the same orders always yields the
same totals.

Revenue recognition: only delivered orders count toward revenue,
commission and net earnings. Every other status still counts as an order.
"""

from collections import OrderedDict
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence, Set

from marketplace.models.catalog_models import Product
from marketplace.models.dashboard_models import (
    AnalyticsData,
    FarmOrderValues,
    MonthlyPerformance,
    OrderStats,
    PlatformStats,
    ProductPerformance,
    RevenueStats,
)
from marketplace.models.farm_models import FarmOwner
from marketplace.models.order_models import Order, OrderStatus
from marketplace.services.analytics.attribution_service import AttributionService, MatchKind
from marketplace.services.analytics import period_service
from marketplace.services.analytics.period_service import Period

# Platform cut on delivered farm revenue
COMMISSION_RATE = 0.15

# product performance bands (revenue)
HIGH_PERFORMANCE = 500
MEDIUM_PERFORMANCE = 100


def _delivered(orders: Iterable[Order]) -> List[Order]:
    return [o for o in orders if o.status == OrderStatus.delivered]


class RevenueService:

    # -----------------------------
    # Per farm
    # -----------------------------
    @staticmethod
    def farm_order_values(
        order: Order,
        farm: FarmOwner,
        farm_product_ids: Set[str],
        commission_rate: float = COMMISSION_RATE,
    ) -> FarmOrderValues:
        """
        The farm's share of a single order, regardless of its status.
        """
        values = FarmOrderValues(order_id=order.id)

        for item in order.items:
            kind = AttributionService.resolve(item, farm, farm_product_ids)
            if kind is None:
                continue

            item_total = item.line_total
            values.farm_subtotal += item_total
            values.items.append({
                **item.model_dump(),
                "farmName": item.farmName or farm.farm.name,
                "itemTotal": item_total,
                "matchedBy": kind.name,
            })

        values.commission = values.farm_subtotal * commission_rate
        values.net_earnings = values.farm_subtotal - values.commission
        return values

    @staticmethod
    def farm_orders(orders: Sequence[Order], farm: FarmOwner, farm_product_ids: Set[str]) -> List[Order]:
        """Orders holding at least one of the farm's items."""
        return [
            o for o in orders
            if any(AttributionService.is_farm_product(i, farm, farm_product_ids) for i in o.items)
        ]

    @staticmethod
    def farm_revenue_stats(
        orders: Sequence[Order],
        farm: FarmOwner,
        farm_product_ids: Set[str],
        commission_rate: float = COMMISSION_RATE,
    ) -> RevenueStats:
        """
        orders should already be the farm's orders; totalOrders counts all
        of them, money only the delivered ones.
        """
        stats = RevenueStats(total_orders=len(orders))

        delivered = _delivered(orders)
        stats.delivered_orders = len(delivered)
        for order in delivered:
            v = RevenueService.farm_order_values(order, farm, farm_product_ids, commission_rate)
            stats.total_revenue += v.farm_subtotal
            stats.total_commission += v.commission
            stats.net_earnings += v.net_earnings

        return stats

    @staticmethod
    def fallback_matches(orders: Sequence[Order], farm: FarmOwner, farm_product_ids: Set[str]) -> List[str]:
        """Order item ids credited to the farm only through farmName."""
        out = []
        for order in orders:
            for item in order.items:
                if AttributionService.resolve(item, farm, farm_product_ids) == MatchKind.FARM_NAME:
                    out.append(f"{order.id}:{item.id}")
        return out

    # -----------------------------
    # Platform
    # -----------------------------
    @staticmethod
    def product_ids_by_farm(products: Iterable[Product]) -> Dict[str, Set[str]]:
        out: Dict[str, Set[str]] = {}
        for p in products:
            if p.farmId:
                out.setdefault(p.farmId, set()).add(p.id)
        return out

    @staticmethod
    def platform_stats(
        orders: Sequence[Order],
        farms: Sequence[FarmOwner],
        products: Sequence[Product],
        commission_rate: float = COMMISSION_RATE,
    ) -> PlatformStats:
        """
        Platform commission is the sum of per-farm commissions. Each item is
        credited to its single best-matching farm so multi-farm orders are
        never counted twice.
        """
        ids_by_farm = RevenueService.product_ids_by_farm(products)
        stats = PlatformStats(total_orders=len(orders))
        stats.per_farm = OrderedDict((f.id, RevenueStats()) for f in farms)

        for order in orders:
            touched = set()
            for item in order.items:
                farm = AttributionService.resolve_owner(item, farms, ids_by_farm)
                if farm is None:
                    if order.status == OrderStatus.delivered:
                        stats.unattributed_revenue += item.line_total
                    continue

                touched.add(farm.id)
                if order.status != OrderStatus.delivered:
                    continue

                item_total = item.line_total
                commission = item_total * commission_rate
                fs = stats.per_farm[farm.id]
                fs.total_revenue += item_total
                fs.total_commission += commission
                fs.net_earnings += item_total - commission

            for farm_id in touched:
                fs = stats.per_farm[farm_id]
                fs.total_orders += 1
                if order.status == OrderStatus.delivered:
                    fs.delivered_orders += 1

        for fs in stats.per_farm.values():
            stats.farm_revenue += fs.total_revenue
            stats.total_commission += fs.total_commission

        return stats

    @staticmethod
    def order_stats(orders: Sequence[Order]) -> OrderStats:
        delivered = _delivered(orders)
        return OrderStats(
            total_orders=len(orders),
            pending_orders=sum(
                1 for o in orders if o.status in (OrderStatus.pending, OrderStatus.confirmed)
            ),
            completed_orders=len(delivered),
            total_revenue=sum(o.totals.total for o in delivered),
        )

    # -----------------------------
    # Analytics helpers
    # -----------------------------
    @staticmethod
    def customer_count(orders: Iterable[Order]) -> int:
        return len({o.customer_key() for o in orders if o.customer_key()})

    @staticmethod
    def status_breakdown(orders: Iterable[Order]) -> Dict[str, int]:
        counts = {s.value: 0 for s in OrderStatus}
        for o in orders:
            counts[o.status.value] += 1
        return counts

    @staticmethod
    def delivered_revenue(orders: Iterable[Order], farm: FarmOwner, farm_product_ids: Set[str]) -> float:
        return sum(
            RevenueService.farm_order_values(o, farm, farm_product_ids).farm_subtotal
            for o in _delivered(orders)
        )

    @staticmethod
    def category_sales(
        orders: Iterable[Order],
        products_by_id: Dict[str, Product],
        farm: FarmOwner,
        farm_product_ids: Set[str],
    ) -> Dict[str, float]:
        out: Dict[str, float] = {}
        for order in _delivered(orders):
            for item in order.items:
                if not AttributionService.is_farm_product(item, farm, farm_product_ids):
                    continue
                product = products_by_id.get(item.id)
                category = product.category.value if product else "Unknown"
                out[category] = out.get(category, 0.0) + item.line_total
        return out

    @staticmethod
    def monthly_performance(
        orders: Iterable[Order],
        farm: FarmOwner,
        farm_product_ids: Set[str],
        year: int,
    ) -> MonthlyPerformance:
        monthly = MonthlyPerformance()
        for order in orders:
            if order.date.year != year:
                continue
            m = order.date.month - 1
            monthly.orders[m] += 1
            if order.status == OrderStatus.delivered:
                monthly.revenue[m] += RevenueService.farm_order_values(order, farm, farm_product_ids).farm_subtotal
        return monthly

    @staticmethod
    def product_performance(
        orders: Iterable[Order],
        products_by_id: Dict[str, Product],
        farm: FarmOwner,
        farm_product_ids: Set[str],
    ) -> List[ProductPerformance]:
        rows: Dict[str, ProductPerformance] = {}
        for order in _delivered(orders):
            for item in order.items:
                if not AttributionService.is_farm_product(item, farm, farm_product_ids):
                    continue
                row = rows.get(item.id)
                if row is None:
                    product = products_by_id.get(item.id)
                    row = ProductPerformance(
                        id=item.id,
                        name=item.name or (product.name if product else "Unknown Product"),
                        category=product.category.value if product else "Unknown",
                        stock=product.stock if product else 0,
                        price=item.price,
                    )
                    rows[item.id] = row
                row.units_sold += item.quantity
                row.revenue += item.line_total

        for row in rows.values():
            if row.revenue > HIGH_PERFORMANCE:
                row.performance = "High"
            elif row.revenue > MEDIUM_PERFORMANCE:
                row.performance = "Medium"

        return sorted(rows.values(), key=lambda r: r.revenue, reverse=True)

    @staticmethod
    def build_analytics(
        farm_orders: Sequence[Order],
        products: Sequence[Product],
        farm: FarmOwner,
        farm_product_ids: Set[str],
        period: Period = Period.month,
        now: Optional[datetime] = None,
        commission_rate: float = COMMISSION_RATE,
    ) -> AnalyticsData:
        now = now or datetime.now(timezone.utc)
        products_by_id = {p.id: p for p in products}
        in_period = period_service.orders_in_period(farm_orders, period, now)
        delivered_count = len(_delivered(in_period))

        revenue = RevenueService.delivered_revenue(in_period, farm, farm_product_ids)

        data = AnalyticsData(period=period.value)
        data.total_revenue = revenue
        data.total_orders = len(in_period)
        data.avg_order_value = revenue / delivered_count if delivered_count else 0.0
        data.customer_count = RevenueService.customer_count(in_period)
        data.net_earnings = revenue - revenue * commission_rate
        data.category_sales = RevenueService.category_sales(in_period, products_by_id, farm, farm_product_ids)
        data.order_status = RevenueService.status_breakdown(in_period)
        data.monthly = RevenueService.monthly_performance(farm_orders, farm, farm_product_ids, now.year)
        data.product_performance = RevenueService.product_performance(
            in_period, products_by_id, farm, farm_product_ids
        )
        data.comparison = period_service.compare(
            farm_orders,
            period,
            revenue_of=lambda os: RevenueService.delivered_revenue(os, farm, farm_product_ids),
            customers_of=RevenueService.customer_count,
            now=now,
        )
        return data
