# marketplace/services/analytics/dashboard_service.py
"""
Loads records for a dashboard, runs the pure aggregators over them and
returns JSON-ready payloads. Clients poll; refreshAfter tells them how often.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from flask import current_app

from marketplace import records
from marketplace.models.catalog_models import LIVE_STATUSES, ProductStatus
from marketplace.models.farm_models import FarmOwner, FarmStatus
from marketplace.models.order_models import Order
from marketplace.services.analytics.period_service import Period
from marketplace.services.analytics.revenue_service import RevenueService
from marketplace.services.commerce.catalog_service import CatalogService
from marketplace.services.commerce.order_service import OrderService
from marketplace.services.contact.message_service import MessageService
from marketplace.services.farms.farm_service import FarmService


def _refresh_after() -> int:
    return int(current_app.config.get("DASHBOARD_REFRESH_SECONDS", 30))


def _warn_fallbacks(farm: FarmOwner, orders: List[Order], ids) -> None:
    matches = RevenueService.fallback_matches(orders, farm, ids)
    if matches:
        current_app.logger.warning(
            "farm %s: %d order item(s) attributed by farm name only: %s",
            farm.id, len(matches), ", ".join(matches[:10]),
        )


class DashboardService:

    @staticmethod
    def owner_dashboard(farm_id: str) -> Dict[str, Any]:
        farm = FarmService.get_farm(farm_id)
        if not farm:
            return records.not_found("Farm not found")

        products = CatalogService.farm_products(farm.id)
        ids = {p.id for p in products}
        orders = OrderService.farm_orders(farm, ids)
        _warn_fallbacks(farm, orders, ids)

        stats = RevenueService.farm_revenue_stats(orders, farm, ids)
        recent_orders = []
        for order in orders[:5]:
            v = RevenueService.farm_order_values(order, farm, ids)
            recent_orders.append({
                "id": order.id,
                "date": order.date.isoformat(),
                "status": order.status.value,
                "customer": order.userName or order.delivery.location.email,
                "farmSubtotal": round(v.farm_subtotal, 2),
                "commission": round(v.commission, 2),
                "netEarnings": round(v.net_earnings, 2),
                "itemCount": v.item_count,
            })

        return records.ok(
            farm=farm.model_dump(mode="json"),
            stats={
                "totalProducts": len(products),
                "activeProducts": sum(1 for p in products if p.status in LIVE_STATUSES),
                "pendingProducts": sum(1 for p in products if p.status == ProductStatus.pending),
                **stats.to_dict(),
            },
            recentProducts=[p.model_dump(mode="json") for p in products[:5]],
            recentOrders=recent_orders,
            refreshAfter=_refresh_after(),
        )

    @staticmethod
    def owner_analytics(farm_id: str, period: Optional[str] = None,
                        now: Optional[datetime] = None) -> Dict[str, Any]:
        farm = FarmService.get_farm(farm_id)
        if not farm:
            return records.not_found("Farm not found")

        now = now or datetime.now(timezone.utc)
        products = CatalogService.farm_products(farm.id)
        ids = {p.id for p in products}
        orders = OrderService.farm_orders(farm, ids)
        _warn_fallbacks(farm, orders, ids)

        data = RevenueService.build_analytics(orders, products, farm, ids, Period.parse(period), now)
        return records.ok(analytics=data.to_dict(), refreshAfter=_refresh_after())

    @staticmethod
    def admin_dashboard() -> Dict[str, Any]:
        products = CatalogService.all_products()
        orders = OrderService.all_orders()
        farms = FarmService.all_farms()

        platform = RevenueService.platform_stats(orders, farms, products)
        if platform.unattributed_revenue:
            current_app.logger.warning(
                "%.2f of delivered revenue could not be attributed to any farm",
                platform.unattributed_revenue,
            )

        return records.ok(
            products=CatalogService.product_stats(),
            orders=RevenueService.order_stats(orders).to_dict(),
            platform=platform.to_dict(),
            farms={
                "totalFarms": len(farms),
                "activeFarms": sum(1 for f in farms if f.status == FarmStatus.active),
                "suspendedFarms": sum(1 for f in farms if f.status == FarmStatus.suspended),
            },
            orderStatus=RevenueService.status_breakdown(orders),
            messages=MessageService.message_stats(),
            recentOrders=[o.model_dump(mode="json") for o in orders[:5]],
            refreshAfter=_refresh_after(),
        )
