# marketplace/models/order_models.py

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from marketplace.models.validators import is_valid_email


class OrderStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    processing = "processing"
    shipped = "shipped"
    delivered = "delivered"
    cancelled = "cancelled"


# Forward progression; cancelled sits outside it
STATUS_FLOW = [
    OrderStatus.pending,
    OrderStatus.confirmed,
    OrderStatus.processing,
    OrderStatus.shipped,
    OrderStatus.delivered,
]
TERMINAL_STATUSES = {OrderStatus.delivered, OrderStatus.cancelled}


class PaymentMethod(str, Enum):
    cash = "cash"
    digital = "digital"
    card = "card"


class DeliveryOption(str, Enum):
    standard = "standard"
    express = "express"


class OrderItem(BaseModel):
    id: str = Field(..., min_length=1)  # product id
    name: str = ""
    price: float = Field(..., ge=0)
    quantity: int = Field(1, ge=1)
    farmId: Optional[str] = None
    farmName: Optional[str] = None

    @property
    def line_total(self) -> float:
        return self.price * self.quantity


class Address(BaseModel):
    firstName: str = ""
    lastName: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    city: str = ""
    zipCode: str = ""
    country: str = ""
    instructions: str = ""


class Delivery(BaseModel):
    location: Address = Field(default_factory=Address)
    option: DeliveryOption = DeliveryOption.standard
    fee: float = Field(0, ge=0)


class Totals(BaseModel):
    subtotal: float = 0
    tax: float = 0
    delivery: float = 0
    discount: float = 0
    total: float = 0


class Order(BaseModel):
    id: str = Field(..., min_length=1)
    date: datetime
    items: List[OrderItem] = Field(default_factory=list)
    status: OrderStatus = OrderStatus.pending
    delivery: Delivery = Field(default_factory=Delivery)
    totals: Totals = Field(default_factory=Totals)
    paymentMethod: PaymentMethod = PaymentMethod.cash
    promoCode: Optional[str] = None

    userId: Optional[str] = None
    userEmail: Optional[str] = None
    userName: Optional[str] = None

    @field_validator("date")
    @classmethod
    def _aware(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    def customer_key(self) -> Optional[str]:
        """Identifier used for distinct-customer counts."""
        return self.delivery.location.email or self.userEmail or self.userId or None


class Cart(BaseModel):
    id: str = Field(..., min_length=1)  # user id, or a guest cart id
    items: List[OrderItem] = Field(default_factory=list)
    updatedAt: Optional[str] = None

    @field_validator("items", mode="before")
    @classmethod
    def _drop_invalid(cls, v):
        # carts written by older clients may hold junk entries
        out = []
        for raw in v or []:
            try:
                out.append(OrderItem.model_validate(raw))
            except ValueError:
                continue
        return out

    @property
    def subtotal(self) -> float:
        return sum(i.line_total for i in self.items)

    @property
    def total_items(self) -> int:
        return sum(i.quantity for i in self.items)


class DeliveryLocationModel(BaseModel):
    """Checkout form payload for the delivery step."""
    firstName: str = Field(..., min_length=1)
    lastName: str = Field(..., min_length=1)
    email: str
    phone: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    zipCode: str = ""
    country: str = ""
    instructions: str = ""

    @field_validator("firstName", "lastName", "phone", "address", "city")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("field is required")
        return v

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        v = (v or "").strip()
        if not is_valid_email(v):
            raise ValueError("Please enter a valid email address")
        return v
