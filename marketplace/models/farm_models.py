# marketplace/models/farm_models.py

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from marketplace.models.validators import is_valid_email


class FarmStatus(str, Enum):
    active = "active"
    suspended = "suspended"
    inactive = "inactive"


class FarmInfo(BaseModel):
    name: str = Field(..., min_length=1)
    type: str = ""
    location: str = ""
    avatar: Optional[str] = None


class OwnerInfo(BaseModel):
    firstName: str = ""
    lastName: str = ""
    email: str = ""
    phone: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.firstName} {self.lastName}".strip()


class FarmOwner(BaseModel):
    """
    One owner record == one storefront farm. Products and order items point
    at it through farmId (or, for legacy data, farmName).
    """
    id: str = Field(..., min_length=1)
    farm: FarmInfo
    owner: OwnerInfo = Field(default_factory=OwnerInfo)
    status: FarmStatus = FarmStatus.active
    registeredAt: Optional[str] = None

    @property
    def name(self) -> str:
        return self.farm.name


class FarmRegisterModel(BaseModel):
    farmName: str
    farmType: str
    farmLocation: str
    avatar: Optional[str] = None
    firstName: str
    lastName: str
    email: str
    phone: str

    @field_validator("farmName", "farmType", "farmLocation", "firstName", "lastName", "phone")
    @classmethod
    def _required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("field is required")
        return v

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        v = (v or "").strip().lower()
        if not is_valid_email(v):
            raise ValueError("Please enter a valid email address")
        return v


class FarmUpdateModel(BaseModel):
    farmName: Optional[str] = None
    farmType: Optional[str] = None
    farmLocation: Optional[str] = None
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    status: Optional[FarmStatus] = None

    @field_validator("email")
    @classmethod
    def _email(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip().lower()
        if not is_valid_email(v):
            raise ValueError("Please enter a valid email address")
        return v
