# marketplace/models/promo_models.py

from datetime import datetime, timezone
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class PromoType(str, Enum):
    percentage = "percentage"
    fixed = "fixed"
    free_shipping = "free_shipping"


class PromoStatus(str, Enum):
    active = "active"
    inactive = "inactive"
    scheduled = "scheduled"
    expired = "expired"


def _aware(v: Optional[datetime]) -> Optional[datetime]:
    if v is not None and v.tzinfo is None:
        return v.replace(tzinfo=timezone.utc)
    return v


class PromoCode(BaseModel):
    """
    Stored promo code. Only the admin on/off switch (enabled) is persisted;
    status is always computed from it and the date window.
    """
    id: str = Field(..., min_length=1)
    code: str = Field(..., min_length=1)
    type: PromoType
    value: float = Field(0, ge=0)
    minOrder: Optional[float] = Field(None, ge=0)
    maxUses: Optional[int] = Field(None, ge=1)
    usedCount: int = Field(0, ge=0)
    startDate: Optional[datetime] = None
    expiryDate: Optional[datetime] = None
    enabled: bool = True
    description: str = ""
    redeemedOrders: List[str] = Field(default_factory=list)
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _legacy_status(cls, data: Any) -> Any:
        # older documents stored status instead of the enabled switch
        if isinstance(data, dict) and "enabled" not in data and "status" in data:
            data = dict(data)
            data["enabled"] = data.pop("status") != PromoStatus.inactive.value
        return data

    @field_validator("startDate", "expiryDate")
    @classmethod
    def _tz(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _aware(v)

    def is_scheduled(self, now: datetime) -> bool:
        return self.startDate is not None and self.startDate > now

    def is_expired(self, now: datetime) -> bool:
        return self.expiryDate is not None and self.expiryDate < now

    def status_at(self, now: Optional[datetime] = None) -> PromoStatus:
        now = now or datetime.now(timezone.utc)
        if not self.enabled:
            return PromoStatus.inactive
        if self.is_expired(now):
            return PromoStatus.expired
        if self.is_scheduled(now):
            return PromoStatus.scheduled
        return PromoStatus.active

    def to_public(self, now: Optional[datetime] = None) -> dict:
        d = self.model_dump(mode="json", exclude={"redeemedOrders"})
        d["status"] = self.status_at(now).value
        return d


class PromoSaveModel(BaseModel):
    """Admin create/update payload."""
    code: str
    type: PromoType
    value: float = 0
    minOrder: Optional[float] = Field(None, ge=0)
    maxUses: Optional[int] = Field(None, ge=1)
    startDate: Optional[datetime] = None
    expiryDate: Optional[datetime] = None
    enabled: bool = True
    description: str = ""

    @field_validator("startDate", "expiryDate")
    @classmethod
    def _tz(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _aware(v)


class PromoResult(BaseModel):
    """Outcome of validating a code against a subtotal."""
    valid: bool
    message: str = ""
    discount: float = 0
    freeShipping: bool = False
    code: Optional[str] = None
