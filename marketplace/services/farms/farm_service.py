# marketplace/services/farms/farm_service.py

import random
import string
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from marketplace import records
from marketplace.models.catalog_models import LIVE_STATUSES, Product
from marketplace.models.farm_models import (
    FarmInfo,
    FarmOwner,
    FarmRegisterModel,
    FarmStatus,
    FarmUpdateModel,
    OwnerInfo,
)
from marketplace.models.order_models import Order
from marketplace.records import FARMS, OWNER_PRODUCTS, StorageUnavailable
from marketplace.services.analytics.revenue_service import RevenueService
from marketplace.services.commerce.catalog_service import CatalogService
from marketplace.services.commerce.order_service import OrderService


def _parse_ts(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        ts = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc)


def _product_ts(p: Product) -> Optional[datetime]:
    return _parse_ts(p.submittedDate or p.approvedDate or p.lastUpdated)


def last_activity(products: List[Product], orders: List[Order]) -> Optional[datetime]:
    """Latest product submission or order date, whichever is newer."""
    stamps = [ts for ts in (_product_ts(p) for p in products) if ts]
    stamps += [o.date for o in orders]
    return max(stamps) if stamps else None


class FarmService:

    @staticmethod
    def generate_farm_id(now: datetime) -> str:
        suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
        return f"farm_{int(now.timestamp() * 1000)}_{suffix}"

    # =========================
    # READ
    # =========================
    @staticmethod
    def all_farms() -> List[FarmOwner]:
        return records.load_records(FARMS, FarmOwner, sort=[("registeredAt", -1)])

    @staticmethod
    def get_farm(farm_id: str) -> Optional[FarmOwner]:
        return records.find_record(FARMS, FarmOwner, {"id": farm_id})

    @staticmethod
    def get_by_email(email: str) -> Optional[FarmOwner]:
        email = (email or "").strip().lower()
        if not email:
            return None
        return records.find_record(FARMS, FarmOwner, {"owner.email": email})

    @staticmethod
    def list_farms(status: Optional[str] = None, search: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Admin roster with per-farm product/order counts, delivered revenue
        and last activity.
        """
        farms = FarmService.all_farms()
        if status and status != "all":
            farms = [f for f in farms if f.status.value == status]
        term = (search or "").strip().lower()
        if term:
            farms = [
                f for f in farms
                if term in f.farm.name.lower()
                or term in f.owner.full_name.lower()
                or term in f.owner.email.lower()
            ]

        products = CatalogService.all_products()
        orders = OrderService.all_orders()

        out = []
        for farm in farms:
            farm_products = [p for p in products if p.farmId == farm.id]
            ids = {p.id for p in farm_products}
            farm_orders = RevenueService.farm_orders(orders, farm, ids)
            stats = RevenueService.farm_revenue_stats(farm_orders, farm, ids)
            active = last_activity(farm_products, farm_orders)

            out.append({
                **farm.model_dump(mode="json"),
                "totalProducts": len(farm_products),
                "activeProducts": sum(1 for p in farm_products if p.status in LIVE_STATUSES),
                **stats.to_dict(),
                "lastActivity": active.isoformat() if active else None,
                "recentProducts": [
                    p.model_dump(mode="json")
                    for p in sorted(
                        farm_products,
                        key=lambda p: _product_ts(p) or datetime.min.replace(tzinfo=timezone.utc),
                        reverse=True,
                    )[:3]
                ],
                # farm_orders keeps OrderService's newest-first order
                "recentOrders": [o.model_dump(mode="json") for o in farm_orders[:3]],
            })
        return out

    # =========================
    # WRITE
    # =========================
    @staticmethod
    def _save(farm: FarmOwner) -> Dict[str, Any]:
        try:
            records.save_record(FARMS, farm)
        except StorageUnavailable:
            return records.unavailable()
        return records.ok(farm=farm.model_dump(mode="json"))

    @staticmethod
    def register_farm(payload: Dict[str, Any], now: Optional[datetime] = None) -> Dict[str, Any]:
        now = now or datetime.now(timezone.utc)
        try:
            data = FarmRegisterModel.model_validate(payload or {})
        except ValidationError as e:
            return records.invalid(records.first_error(e))

        if FarmService.get_by_email(data.email):
            return records.invalid("A farm is already registered with this email")

        farm = FarmOwner(
            id=FarmService.generate_farm_id(now),
            farm=FarmInfo(
                name=data.farmName,
                type=data.farmType,
                location=data.farmLocation,
                avatar=data.avatar,
            ),
            owner=OwnerInfo(
                firstName=data.firstName,
                lastName=data.lastName,
                email=data.email,
                phone=data.phone,
            ),
            status=FarmStatus.active,
            registeredAt=now.isoformat(),
        )
        return FarmService._save(farm)

    @staticmethod
    def update_farm(farm_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        farm = FarmService.get_farm(farm_id)
        if not farm:
            return records.not_found("Farm not found")

        try:
            data = FarmUpdateModel.model_validate(payload or {})
        except ValidationError as e:
            return records.invalid(records.first_error(e))

        if data.email and data.email != farm.owner.email:
            other = FarmService.get_by_email(data.email)
            if other and other.id != farm.id:
                return records.invalid("A farm is already registered with this email")

        farm_changes = {
            "name": data.farmName,
            "type": data.farmType,
            "location": data.farmLocation,
        }
        owner_changes = {
            "firstName": data.firstName,
            "lastName": data.lastName,
            "phone": data.phone,
            "email": data.email,
        }
        for changes in (farm_changes, owner_changes):
            for key in [k for k, v in changes.items() if v is None]:
                del changes[key]
            for key, v in list(changes.items()):
                changes[key] = v.strip() if isinstance(v, str) else v

        if farm_changes.get("name") == "":
            return records.invalid("Farm name is required")

        updated = farm.model_copy(update={
            "farm": farm.farm.model_copy(update=farm_changes),
            "owner": farm.owner.model_copy(update=owner_changes),
            "status": data.status or farm.status,
        })
        return FarmService._save(updated)

    @staticmethod
    def set_status(farm_id: str, status: FarmStatus) -> Dict[str, Any]:
        farm = FarmService.get_farm(farm_id)
        if not farm:
            return records.not_found("Farm not found")
        return FarmService._save(farm.model_copy(update={"status": status}))

    @staticmethod
    def suspend_farm(farm_id: str) -> Dict[str, Any]:
        return FarmService.set_status(farm_id, FarmStatus.suspended)

    @staticmethod
    def activate_farm(farm_id: str) -> Dict[str, Any]:
        return FarmService.set_status(farm_id, FarmStatus.active)

    @staticmethod
    def delete_farm(farm_id: str) -> Dict[str, Any]:
        """Removes the farm and its unapproved submissions; orders are kept."""
        farm = FarmService.get_farm(farm_id)
        if not farm:
            return records.not_found("Farm not found")

        pending_ids = [p.id for p in CatalogService.submitted_products(farm_id)]
        try:
            records.delete_records(OWNER_PRODUCTS, pending_ids)
            records.delete_record(FARMS, farm_id)
        except StorageUnavailable:
            return records.unavailable()
        return records.ok(deleted=farm_id)
