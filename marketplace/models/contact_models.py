# marketplace/models/contact_models.py

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from marketplace.models.validators import is_valid_email


class ContactMessage(BaseModel):
    id: str = Field(..., min_length=1)
    name: str
    email: str
    subject: str
    message: str
    date: Optional[str] = None
    read: bool = False
    readDate: Optional[str] = None


class ContactSubmitModel(BaseModel):
    name: str = Field("", validate_default=True)
    email: str = Field("", validate_default=True)
    subject: str = Field("", validate_default=True)
    message: str = Field("", validate_default=True)

    @field_validator("name", "subject", "message", mode="before")
    @classmethod
    def _required(cls, v) -> str:
        v = str(v or "").strip()
        if not v:
            raise ValueError("Please fill in all required fields.")
        return v

    @field_validator("email", mode="before")
    @classmethod
    def _email(cls, v) -> str:
        v = str(v or "").strip()
        if not v:
            raise ValueError("Please fill in all required fields.")
        if not is_valid_email(v):
            raise ValueError("Please enter a valid email address.")
        return v
