from __future__ import annotations
from typing import Optional

from pydantic import BaseModel, ConfigDict

from docbook.schemas.shared import UserOut


class AuthResponse(BaseModel):
    model_config = ConfigDict(
        extra='forbid',
    )
    message: str
    user: Optional[UserOut] = None
