# marketplace/models/dashboard_models.py

from dataclasses import dataclass, asdict, field
from typing import Any, Dict, List


def _money(x: float) -> float:
    return round(float(x or 0), 2)


@dataclass
class FarmOrderValues:
    order_id: str = ""
    farm_subtotal: float = 0.0
    commission: float = 0.0
    net_earnings: float = 0.0
    items: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def item_count(self) -> int:
        return len(self.items)


@dataclass
class RevenueStats:
    total_orders: int = 0
    delivered_orders: int = 0
    total_revenue: float = 0.0
    total_commission: float = 0.0
    net_earnings: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalOrders": self.total_orders,
            "deliveredOrders": self.delivered_orders,
            "totalRevenue": _money(self.total_revenue),
            "totalCommission": _money(self.total_commission),
            "netEarnings": _money(self.net_earnings),
        }


@dataclass
class PlatformStats:
    total_orders: int = 0
    farm_revenue: float = 0.0
    total_commission: float = 0.0
    unattributed_revenue: float = 0.0
    per_farm: Dict[str, RevenueStats] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalOrders": self.total_orders,
            "farmRevenue": _money(self.farm_revenue),
            "totalCommission": _money(self.total_commission),
            "netFarmEarnings": _money(self.farm_revenue - self.total_commission),
            "unattributedRevenue": _money(self.unattributed_revenue),
            "perFarm": {k: v.to_dict() for k, v in self.per_farm.items()},
        }


@dataclass
class OrderStats:
    total_orders: int = 0
    pending_orders: int = 0
    completed_orders: int = 0
    total_revenue: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalOrders": self.total_orders,
            "pendingOrders": self.pending_orders,
            "completedOrders": self.completed_orders,
            "totalRevenue": _money(self.total_revenue),
        }


@dataclass
class PeriodComparison:
    revenue: int = 0
    orders: int = 0
    customers: int = 0


@dataclass
class ProductPerformance:
    id: str
    name: str
    category: str = "Unknown"
    units_sold: int = 0
    revenue: float = 0.0
    stock: int = 0
    price: float = 0.0
    performance: str = "Low"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "unitsSold": self.units_sold,
            "revenue": _money(self.revenue),
            "stock": self.stock,
            "price": _money(self.price),
            "performance": self.performance,
        }


@dataclass
class MonthlyPerformance:
    revenue: List[float] = field(default_factory=lambda: [0.0] * 12)
    orders: List[int] = field(default_factory=lambda: [0] * 12)


@dataclass
class AnalyticsData:
    period: str = "month"
    total_revenue: float = 0.0
    total_orders: int = 0
    avg_order_value: float = 0.0
    customer_count: int = 0
    net_earnings: float = 0.0
    category_sales: Dict[str, float] = field(default_factory=dict)
    order_status: Dict[str, int] = field(default_factory=dict)
    monthly: MonthlyPerformance = field(default_factory=MonthlyPerformance)
    product_performance: List[ProductPerformance] = field(default_factory=list)
    comparison: PeriodComparison = field(default_factory=PeriodComparison)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "period": self.period,
            "totalRevenue": _money(self.total_revenue),
            "totalOrders": self.total_orders,
            "avgOrderValue": _money(self.avg_order_value),
            "customerCount": self.customer_count,
            "netEarnings": _money(self.net_earnings),
            "categorySales": {k: _money(v) for k, v in self.category_sales.items()},
            "orderStatus": dict(self.order_status),
            "monthly": {
                "revenue": [_money(x) for x in self.monthly.revenue],
                "orders": list(self.monthly.orders),
            },
            "productPerformance": [p.to_dict() for p in self.product_performance],
            "comparison": asdict(self.comparison),
        }
