"""Actor (role context) model for studioboard."""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class ActorRole(str, Enum):
    """Role under which a board action is attempted."""
    ADMIN = "admin"
    USER = "user"


# Back-office roles that get the unrestricted (admin) transition policy
ADMIN_ROLES = {"admin", "manager"}


class Actor(BaseModel):
    """The user acting on the board."""

    user_id: str = Field(..., description="Id of the acting user")
    role: ActorRole = Field(ActorRole.USER, description="Transition policy role")
    name: Optional[str] = Field(None, description="Display name")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True

    @property
    def is_admin(self) -> bool:
        return self.role == ActorRole.ADMIN

    @classmethod
    def from_claims(cls, claims: dict) -> "Actor":
        """Build an actor from decoded token claims.

        Tokens carry `userType` (user, customer, coworker, admin) and, for staff,
        an optional `role`. Either one naming an admin role selects the admin
        policy; every other combination gets the user policy.
        """
        user_id = claims.get("userId") or claims.get("sub")
        if not user_id:
            raise ValueError("Token claims carry no user id")

        declared = {str(claims.get("userType", "")).lower(), str(claims.get("role", "")).lower()}
        role = ActorRole.ADMIN if declared & ADMIN_ROLES else ActorRole.USER
        return cls(user_id=str(user_id), role=role, name=claims.get("name"))
