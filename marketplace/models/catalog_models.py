# marketplace/models/catalog_models.py

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class ProductCategory(str, Enum):
    fruit = "fruit"
    vegetable = "vegetable"
    seed = "seed"
    meat = "meat"
    equipment = "equipment"
    dairy = "dairy"
    grains = "grains"


class ProductStatus(str, Enum):
    pending = "pending"
    active = "active"
    approved = "approved"
    rejected = "rejected"
    inactive = "inactive"


# Statuses under which a product is live on the storefront
LIVE_STATUSES = {ProductStatus.active, ProductStatus.approved}


class Product(BaseModel):
    """
    A catalog product. farmId None means the platform itself sells it.
    """
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    category: ProductCategory
    farmId: Optional[str] = None
    status: ProductStatus = ProductStatus.pending
    stock: int = Field(0, ge=0)

    farmName: Optional[str] = None
    description: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    rejectionReason: Optional[str] = None
    submittedDate: Optional[str] = None
    approvedDate: Optional[str] = None
    lastUpdated: Optional[str] = None

    @property
    def is_live(self) -> bool:
        return self.status in LIVE_STATUSES


class ProductSubmitModel(BaseModel):
    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    category: ProductCategory
    price: float = Field(..., gt=0)
    stock: int = Field(..., ge=0)
    images: List[str] = Field(..., min_length=1)


class ProductUpdateModel(BaseModel):
    """Admin edit form. Validated over the stored product, so omitted fields keep their value."""
    name: str
    description: str
    category: ProductCategory
    price: float
    stock: int = Field(0, ge=0)
    images: List[str]
    status: ProductStatus

    @field_validator("name", "description", mode="before")
    @classmethod
    def _required(cls, v) -> str:
        v = str(v or "").strip()
        if not v:
            raise ValueError("Please fill in all required fields with valid data")
        return v

    @field_validator("price")
    @classmethod
    def _price(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Please fill in all required fields with valid data")
        return v

    @field_validator("images")
    @classmethod
    def _images(cls, v: List[str]) -> List[str]:
        v = [i for i in v if i and i.strip()]
        if not v:
            raise ValueError("Please upload at least one product image")
        return v
