# marketplace/services/commerce/order_service.py

from typing import Any, Dict, Iterable, List, Optional

from marketplace import records
from marketplace.models.farm_models import FarmOwner
from marketplace.models.identity_models import Identity
from marketplace.models.order_models import (
    STATUS_FLOW,
    TERMINAL_STATUSES,
    Order,
    OrderStatus,
)
from marketplace.records import ORDERS, StorageUnavailable
from marketplace.services.analytics.revenue_service import RevenueService


def can_transition(current: OrderStatus, new: OrderStatus) -> bool:
    """Forward along STATUS_FLOW, or to cancelled from any open state."""
    if current in TERMINAL_STATUSES:
        return False
    if new == OrderStatus.cancelled:
        return True
    return STATUS_FLOW.index(new) > STATUS_FLOW.index(current)


def _matches(order: Order, term: str) -> bool:
    loc = order.delivery.location
    haystack = [
        order.id,
        order.userName or "",
        order.userEmail or "",
        f"{loc.firstName} {loc.lastName}",
        loc.email,
    ]
    return any(term in h.lower() for h in haystack)


class OrderService:

    @staticmethod
    def all_orders() -> List[Order]:
        orders = records.load_records(ORDERS, Order)
        return sorted(orders, key=lambda o: o.date, reverse=True)

    @staticmethod
    def list_orders(status: Optional[str] = None, search: Optional[str] = None) -> List[Order]:
        orders = OrderService.all_orders()
        if status and status != "all":
            orders = [o for o in orders if o.status.value == status]
        term = (search or "").strip().lower()
        if term:
            orders = [o for o in orders if _matches(o, term)]
        return orders

    @staticmethod
    def get_order(order_id: str) -> Optional[Order]:
        return records.find_record(ORDERS, Order, {"id": order_id})

    @staticmethod
    def orders_for_user(identity: Identity, search: Optional[str] = None) -> List[Order]:
        if not identity.is_logged_in:
            return []
        mine = [
            o for o in OrderService.all_orders()
            if (identity.user_id and o.userId == identity.user_id)
            or (identity.email and o.userEmail == identity.email)
        ]
        term = (search or "").strip().lower()
        if term:
            mine = [o for o in mine if term in o.id.lower()]
        return mine

    @staticmethod
    def track_order(order_id: str, email: str) -> Optional[Order]:
        """Guest lookup: the order id must come with the email it was placed with."""
        order = OrderService.get_order((order_id or "").strip())
        email = (email or "").strip().lower()
        if not order or not email:
            return None
        known = {(order.delivery.location.email or "").lower(), (order.userEmail or "").lower()}
        return order if email in known else None

    @staticmethod
    def farm_orders(farm: FarmOwner, farm_product_ids: Iterable[str]) -> List[Order]:
        return RevenueService.farm_orders(OrderService.all_orders(), farm, set(farm_product_ids))

    @staticmethod
    def update_status(order_id: str, new_status: str) -> Dict[str, Any]:
        try:
            target = OrderStatus(new_status)
        except ValueError:
            return records.invalid(f"Unknown order status: {new_status}")

        order = OrderService.get_order(order_id)
        if not order:
            return records.not_found("Order not found")

        if not can_transition(order.status, target):
            return records.invalid(f"Cannot change order from {order.status.value} to {target.value}")

        updated = order.model_copy(update={"status": target})
        try:
            records.save_record(ORDERS, updated)
        except StorageUnavailable:
            return records.unavailable()
        return records.ok(order=updated.model_dump(mode="json"))

    @staticmethod
    def cancel_order(order_id: str, identity: Identity) -> Dict[str, Any]:
        order = OrderService.get_order(order_id)
        if not order:
            return records.not_found("Order not found")

        owns = (
            (identity.user_id and order.userId == identity.user_id)
            or (identity.email and order.userEmail == identity.email)
        )
        if identity.role != "admin" and not owns:
            return records.not_found("Order not found")
        return OrderService.update_status(order_id, OrderStatus.cancelled.value)
