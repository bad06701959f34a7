from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: a profile row.

    Plain data object, no DB access here.
    """

    user_id: int
    name: str
    email: str
    password_hash: str
    role: Role
    department: Optional[str] = None
    phone_number: Optional[str] = None
    birthday: Optional[date] = None
    avatar: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def initials(self) -> str:
        return "".join(part[0] for part in self.name.split() if part)[:2].upper()

    def to_public_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
            "department": self.department,
            "phone_number": self.phone_number,
            "birthday": self.birthday.isoformat() if self.birthday else None,
            "avatar": self.avatar,
            "initials": self.initials,
        }
