# marketplace/services/commerce/catalog_service.py

import random
import string
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Set

from pydantic import ValidationError

from marketplace import records
from marketplace.models.catalog_models import (
    LIVE_STATUSES,
    Product,
    ProductStatus,
    ProductSubmitModel,
    ProductUpdateModel,
)
from marketplace.models.farm_models import FarmOwner, FarmStatus
from marketplace.records import OWNER_PRODUCTS, PRODUCTS, StorageUnavailable


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _dedupe(products: Iterable[Product]) -> List[Product]:
    seen = set()
    out = []
    for p in products:
        if p.id in seen:
            continue
        seen.add(p.id)
        out.append(p)
    return out


class CatalogService:
    """
    Products live in two collections: owner submissions awaiting review
    (owner_products) and the approved/platform catalog (products). Any view
    of "all products" is their union, de-duplicated by id with the approved
    copy winning.
    """

    # =========================
    # ID GENERATORS
    # =========================
    @staticmethod
    def generate_product_id():
        now = datetime.now(timezone.utc)
        suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
        return f"owner-product-{int(now.timestamp() * 1000)}-{suffix}"

    # =========================
    # READ
    # =========================
    @staticmethod
    def approved_products() -> List[Product]:
        return records.load_records(PRODUCTS, Product)

    @staticmethod
    def submitted_products(farm_id: Optional[str] = None) -> List[Product]:
        query = {"farmId": farm_id} if farm_id else None
        return records.load_records(OWNER_PRODUCTS, Product, query=query, sort=[("submittedDate", -1)])

    @staticmethod
    def all_products() -> List[Product]:
        return _dedupe(CatalogService.approved_products() + CatalogService.submitted_products())

    @staticmethod
    def active_products() -> List[Product]:
        return [p for p in CatalogService.approved_products() if p.is_live]

    @staticmethod
    def get_product(product_id: str) -> Optional[Product]:
        return (
            records.find_record(PRODUCTS, Product, {"id": product_id})
            or records.find_record(OWNER_PRODUCTS, Product, {"id": product_id})
        )

    @staticmethod
    def farm_products(farm_id: str) -> List[Product]:
        approved = records.load_records(PRODUCTS, Product, query={"farmId": farm_id})
        return _dedupe(approved + CatalogService.submitted_products(farm_id))

    @staticmethod
    def farm_product_ids(farm_id: str) -> Set[str]:
        return {p.id for p in CatalogService.farm_products(farm_id)}

    @staticmethod
    def pending_products() -> List[Product]:
        return [p for p in CatalogService.submitted_products() if p.status == ProductStatus.pending]

    @staticmethod
    def product_stats() -> Dict[str, int]:
        approved = CatalogService.approved_products()
        return {
            "totalProducts": len(approved),
            "activeProducts": sum(1 for p in approved if p.status == ProductStatus.active),
            "pendingCount": len(CatalogService.pending_products()),
            "farmProducts": sum(1 for p in approved if p.farmId),
        }

    # =========================
    # OWNER
    # =========================
    @staticmethod
    def submit_product(farm: FarmOwner, payload: Dict[str, Any]) -> Dict[str, Any]:
        if farm.status == FarmStatus.suspended:
            return records.invalid("Suspended farms cannot add new products")

        try:
            data = ProductSubmitModel.model_validate(payload or {})
        except ValidationError as e:
            return records.invalid("Please fill in all required fields with valid data. " + records.first_error(e))

        now = _now_iso()
        product = Product(
            id=CatalogService.generate_product_id(),
            status=ProductStatus.pending,
            farmId=farm.id,
            farmName=farm.farm.name,
            submittedDate=now,
            lastUpdated=now,
            **data.model_dump(),
        )
        try:
            records.save_record(OWNER_PRODUCTS, product)
        except StorageUnavailable:
            return records.unavailable()
        return records.ok(product=product.model_dump(mode="json"))

    @staticmethod
    def delete_owner_product(farm_id: str, product_id: str) -> Dict[str, Any]:
        product = CatalogService.get_product(product_id)
        if not product or product.farmId != farm_id:
            return records.not_found("Product not found")
        return CatalogService.delete_product(product_id)

    # =========================
    # ADMIN
    # =========================
    @staticmethod
    def _pending(product_id: str) -> Optional[Product]:
        p = records.find_record(OWNER_PRODUCTS, Product, {"id": product_id})
        if p and p.status == ProductStatus.pending:
            return p
        return None

    @staticmethod
    def approve_product(product_id: str) -> Dict[str, Any]:
        product = CatalogService._pending(product_id)
        if not product:
            return records.not_found("Product not found or already processed.")

        now = _now_iso()
        approved = product.model_copy(update={
            "status": ProductStatus.active,
            "approvedDate": now,
            "lastUpdated": now,
        })
        try:
            records.save_record(PRODUCTS, approved)
            records.delete_record(OWNER_PRODUCTS, product_id)
        except StorageUnavailable:
            return records.unavailable()
        return records.ok(product=approved.model_dump(mode="json"))

    @staticmethod
    def reject_product(product_id: str, reason: str) -> Dict[str, Any]:
        reason = (reason or "").strip()
        if not reason:
            return records.invalid("Please provide a rejection reason.")

        product = CatalogService._pending(product_id)
        if not product:
            return records.not_found("Product not found or already processed.")

        rejected = product.model_copy(update={
            "status": ProductStatus.rejected,
            "rejectionReason": reason,
            "lastUpdated": _now_iso(),
        })
        try:
            records.save_record(OWNER_PRODUCTS, rejected)
        except StorageUnavailable:
            return records.unavailable()
        return records.ok(product=rejected.model_dump(mode="json"))

    @staticmethod
    def set_status(product_id: str, status: str) -> Dict[str, Any]:
        if status not in (ProductStatus.active.value, ProductStatus.inactive.value):
            return records.invalid("Status must be active or inactive")

        product = records.find_record(PRODUCTS, Product, {"id": product_id})
        if not product:
            return records.not_found("Product not found")

        updated = product.model_copy(update={"status": ProductStatus(status), "lastUpdated": _now_iso()})
        try:
            records.save_record(PRODUCTS, updated)
        except StorageUnavailable:
            return records.unavailable()
        return records.ok(product=updated.model_dump(mode="json"))

    @staticmethod
    def bulk_set_status(product_ids: List[str], status: str) -> Dict[str, Any]:
        if not product_ids:
            return records.invalid("Please select at least one product to update.")
        updated = []
        for pid in product_ids:
            out = CatalogService.set_status(pid, status)
            if out.get("error") in ("validation", "storage"):
                return out
            if out["ok"]:
                updated.append(pid)
        return records.ok(updated=updated)

    @staticmethod
    def delete_product(product_id: str) -> Dict[str, Any]:
        try:
            n = records.delete_records(PRODUCTS, [product_id])
            n += records.delete_records(OWNER_PRODUCTS, [product_id])
        except StorageUnavailable:
            return records.unavailable()
        if not n:
            return records.not_found("Product not found")
        return records.ok()

    @staticmethod
    def bulk_delete(product_ids: List[str]) -> Dict[str, Any]:
        if not product_ids:
            return records.invalid("Please select at least one product to delete.")
        try:
            n = records.delete_records(PRODUCTS, product_ids)
            n += records.delete_records(OWNER_PRODUCTS, product_ids)
        except StorageUnavailable:
            return records.unavailable()
        if not n:
            return records.not_found("Product not found")
        return records.ok(deleted=n)

    @staticmethod
    def update_product(product_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Admin edit of name, description, category, price, stock, images and
        status. Catalog products may move between live and inactive; a
        submission's status only changes through approve/reject.
        """
        collection = PRODUCTS
        product = records.find_record(PRODUCTS, Product, {"id": product_id})
        if not product:
            collection = OWNER_PRODUCTS
            product = records.find_record(OWNER_PRODUCTS, Product, {"id": product_id})
        if not product:
            return records.not_found("Product not found")

        try:
            data = ProductUpdateModel.model_validate({**product.model_dump(), **(payload or {})})
        except ValidationError as e:
            return records.invalid(records.first_error(e, with_field=False))

        if collection == PRODUCTS:
            if data.status not in LIVE_STATUSES | {ProductStatus.inactive}:
                return records.invalid("Status must be active or inactive")
        elif data.status != product.status:
            return records.invalid("Use approve or reject to change a submitted product's status")

        updated = product.model_copy(update={**data.model_dump(), "lastUpdated": _now_iso()})
        try:
            records.save_record(collection, updated)
        except StorageUnavailable:
            return records.unavailable()
        return records.ok(product=updated.model_dump(mode="json"))
