# marketplace/models/identity_models.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class Identity:
    is_logged_in: bool = False
    user_id: Optional[str] = None
    role: str = "guest"
    email: str = ""
    first_name: str = ""
    last_name: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @classmethod
    def guest(cls) -> "Identity":
        return cls()
