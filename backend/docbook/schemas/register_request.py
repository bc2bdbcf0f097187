# docbook/schemas/register_request.py
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from docbook.schemas.shared import Role, normalize_email


class RegisterRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str
    password: Annotated[str, Field(min_length=6)]
    name: str
    role: Role = Role.patient
    # optional profile fields the signup form collects
    phone: Optional[str] = None
    date_of_birth: Optional[str] = Field(default=None, alias="dateOfBirth")

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str) -> str:
        return normalize_email(value)

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    def metadata(self) -> dict:
        """Account metadata stored with the provider."""
        data = {"name": self.name, "role": self.role.value}
        if self.phone:
            data["phone"] = self.phone
        if self.date_of_birth:
            data["dateOfBirth"] = self.date_of_birth
        return data
