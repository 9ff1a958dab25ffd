# marketplace/services/commerce/promo_service.py

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import ValidationError

from marketplace import records
from marketplace.models.promo_models import (
    PromoCode,
    PromoResult,
    PromoSaveModel,
    PromoType,
)
from marketplace.models.validators import is_valid_promo_code, normalize_promo_code
from marketplace.records import PROMO_CODES, StorageUnavailable


def _now() -> datetime:
    return datetime.now(timezone.utc)


class PromoService:

    # =========================
    # PURE PRICING
    # =========================
    @staticmethod
    def compute_discount(promo: PromoCode, subtotal: float) -> float:
        if promo.type == PromoType.percentage:
            return subtotal * (promo.value / 100)
        if promo.type == PromoType.fixed:
            return min(promo.value, subtotal)
        return 0.0

    @staticmethod
    def evaluate(promo: Optional[PromoCode], subtotal: float, now: Optional[datetime] = None) -> PromoResult:
        """
        First failing check wins: unknown/disabled, not started, expired,
        below minimum order, usage exhausted.
        """
        now = now or _now()

        if promo is None or not promo.enabled:
            return PromoResult(valid=False, message="Invalid promo code")

        if promo.is_scheduled(now):
            return PromoResult(
                valid=False,
                message=f"Promo code starts on {promo.startDate.strftime('%d %b %Y')}",
                code=promo.code,
            )

        if promo.is_expired(now):
            return PromoResult(valid=False, message="Promo code has expired", code=promo.code)

        if promo.minOrder and subtotal < promo.minOrder:
            return PromoResult(
                valid=False,
                message=f"Minimum order of ${promo.minOrder:.2f} required",
                code=promo.code,
            )

        if promo.maxUses and promo.usedCount >= promo.maxUses:
            return PromoResult(valid=False, message="Promo code usage limit reached", code=promo.code)

        return PromoResult(
            valid=True,
            discount=max(0.0, PromoService.compute_discount(promo, subtotal)),
            freeShipping=promo.type == PromoType.free_shipping,
            code=promo.code,
        )

    # =========================
    # READ
    # =========================
    @staticmethod
    def list_codes():
        return records.load_records(PROMO_CODES, PromoCode, sort=[("createdAt", -1)])

    @staticmethod
    def get_code(code: str) -> Optional[PromoCode]:
        code = normalize_promo_code(code)
        if not code:
            return None
        return records.find_record(PROMO_CODES, PromoCode, {"code": code})

    @staticmethod
    def get_by_id(promo_id: str) -> Optional[PromoCode]:
        return records.find_record(PROMO_CODES, PromoCode, {"id": promo_id})

    # =========================
    # CHECKOUT
    # =========================
    @staticmethod
    def quote(code: str, subtotal: float, now: Optional[datetime] = None) -> PromoResult:
        """Validate and price without touching usedCount."""
        return PromoService.evaluate(PromoService.get_code(code), subtotal, now)

    @staticmethod
    def apply(code: str, subtotal: float, order_id: Optional[str] = None,
              now: Optional[datetime] = None) -> PromoResult:
        """
        Validate, price and count one use of the code.

        With an order_id the use is recorded against that order and a repeat
        application for the same order is not counted again. Without one,
        every call counts.
        """
        promo = PromoService.get_code(code)
        result = PromoService.evaluate(promo, subtotal, now)
        if not result.valid:
            return result

        if order_id is None:
            query = {"id": promo.id}
            update = {"$inc": {"usedCount": 1}}
        else:
            query = {"id": promo.id, "redeemedOrders": {"$ne": order_id}}
            update = {"$inc": {"usedCount": 1}, "$push": {"redeemedOrders": order_id}}

        try:
            records.update_fields(PROMO_CODES, query, update)
        except StorageUnavailable:
            return PromoResult(valid=False, message="Promo code could not be applied right now", code=promo.code)
        return result

    # =========================
    # ADMIN
    # =========================
    @staticmethod
    def _validate(data: PromoSaveModel, editing_id: Optional[str] = None) -> Optional[str]:
        if not is_valid_promo_code(data.code):
            return "Promo code must contain only letters and numbers"

        existing = PromoService.get_code(data.code)
        if existing and existing.id != editing_id:
            return "Promo code already exists"

        if data.type == PromoType.percentage and not (1 <= data.value <= 100):
            return "Percentage must be between 1 and 100"
        if data.type == PromoType.fixed and data.value <= 0:
            return "Fixed amount must be greater than 0"

        if data.startDate and data.expiryDate and data.startDate >= data.expiryDate:
            return "Expiry date must be after start date"
        return None

    @staticmethod
    def _parse_payload(payload: Dict[str, Any]):
        payload = dict(payload or {})
        payload["code"] = normalize_promo_code(payload.get("code") or "")
        for key in ("minOrder", "maxUses", "startDate", "expiryDate"):
            if payload.get(key) in ("", None):
                payload[key] = None
        try:
            data = PromoSaveModel.model_validate(payload)
        except ValidationError as e:
            return None, records.first_error(e)
        if data.type == PromoType.free_shipping:
            data.value = 0
        return data, None

    @staticmethod
    def create_code(payload: Dict[str, Any], now: Optional[datetime] = None) -> Dict[str, Any]:
        now = now or _now()
        data, err = PromoService._parse_payload(payload)
        if err:
            return records.invalid(err)

        err = PromoService._validate(data)
        if err:
            return records.invalid(err)

        promo = PromoCode(
            id=f"promo_{int(now.timestamp() * 1000)}",
            startDate=data.startDate or now,
            usedCount=0,
            createdAt=now.isoformat(),
            updatedAt=now.isoformat(),
            **data.model_dump(exclude={"startDate"}),
        )
        try:
            records.save_record(PROMO_CODES, promo)
        except StorageUnavailable:
            return records.unavailable()
        return records.ok(promo=promo.to_public(now))

    @staticmethod
    def update_code(promo_id: str, payload: Dict[str, Any], now: Optional[datetime] = None) -> Dict[str, Any]:
        now = now or _now()
        promo = PromoService.get_by_id(promo_id)
        if not promo:
            return records.not_found("Promo code not found")

        data, err = PromoService._parse_payload(payload)
        if err:
            return records.invalid(err)
        err = PromoService._validate(data, editing_id=promo.id)
        if err:
            return records.invalid(err)

        updated = promo.model_copy(update={**data.model_dump(), "updatedAt": now.isoformat()})
        try:
            records.save_record(PROMO_CODES, updated)
        except StorageUnavailable:
            return records.unavailable()
        return records.ok(promo=updated.to_public(now))

    @staticmethod
    def set_enabled(promo_id: str, enabled: bool) -> Dict[str, Any]:
        promo = PromoService.get_by_id(promo_id)
        if not promo:
            return records.not_found("Promo code not found")
        updated = promo.model_copy(update={"enabled": bool(enabled), "updatedAt": _now().isoformat()})
        try:
            records.save_record(PROMO_CODES, updated)
        except StorageUnavailable:
            return records.unavailable()
        return records.ok(promo=updated.to_public())

    @staticmethod
    def delete_code(promo_id: str) -> Dict[str, Any]:
        try:
            deleted = records.delete_record(PROMO_CODES, promo_id)
        except StorageUnavailable:
            return records.unavailable()
        if not deleted:
            return records.not_found("Promo code not found")
        return records.ok()
