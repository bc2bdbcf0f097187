# docbook/schemas/shared.py
import re
from enum import Enum

from pydantic import BaseModel

from docbook.core.identity import ProviderUser

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class Role(str, Enum):
    patient = "patient"
    doctor = "doctor"


def normalize_email(value: str) -> str:
    value = value.strip().lower()
    if not EMAIL_PATTERN.match(value):
        raise ValueError("must be a valid email address")
    return value


class UserOut(BaseModel):
    id: str
    email: str
    name: str
    role: Role

    @classmethod
    def from_provider(cls, user: ProviderUser) -> "UserOut":
        """Normalize a provider user; name and role live in the account metadata."""
        metadata = user.user_metadata or {}
        try:
            role = Role(metadata.get("role") or Role.patient)
        except ValueError:
            role = Role.patient
        return cls(
            id=user.id,
            email=user.email or "",
            name=metadata.get("name") or "",
            role=role,
        )
