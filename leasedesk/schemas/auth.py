"""Pydantic schemas for login and the current user."""

from pydantic import BaseModel, Field

from leasedesk.models import User, UserRole
from leasedesk.schemas.common import CamelModel


class LoginRequest(BaseModel):
    """Login form body."""

    login: str = Field(..., min_length=1, max_length=120)
    password: str = Field(..., min_length=1, max_length=512)


class PublicUser(CamelModel):
    """The user as exposed to the web client."""

    id: str
    login: str
    display_name: str
    role: UserRole

    @classmethod
    def from_user(cls, user: User) -> "PublicUser":
        return cls(
            id=str(user.id),
            login=user.login,
            display_name=user.display_name,
            role=user.role,
        )


class AuthUserResponse(CamelModel):
    user: PublicUser


class MessageResponse(BaseModel):
    message: str
