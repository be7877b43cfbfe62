"""User session model."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class UserRole(str, Enum):
    """User role enumeration."""

    ADMIN = "ADMIN"
    STAFF = "STAFF"
    CUSTOMER = "CUSTOMER"


class UserSession(BaseModel):
    """Authenticated user passed explicitly into booking and payment flows."""

    model_config = ConfigDict(frozen=True)

    user_id: int = Field(gt=0)
    role: UserRole
    access_token: str = Field(default="", repr=False)
    full_name: Optional[str] = Field(default=None, max_length=100)

    def auth_headers(self) -> dict[str, str]:
        """Authorization header for backend API calls."""
        if not self.access_token:
            return {}
        return {"Authorization": f"Bearer {self.access_token}"}
