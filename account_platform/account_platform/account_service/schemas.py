from datetime import datetime
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from typing import Any, Optional


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserLogin(CamelModel):
    user_name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class RefreshTokenRequest(CamelModel):
    refresh_token: Optional[str] = None


class ChangePasswordRequest(CamelModel):
    old_password: Optional[str] = None
    new_password: Optional[str] = None


class AccountOut(CamelModel):
    """Sanitized account: never carries the password hash or refresh token."""
    id: str
    user_name: str
    full_name: str
    email: str
    avatar_image: Optional[str] = None
    cover_image: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_user(cls, user) -> "AccountOut":
        return cls(
            id=user.id,
            user_name=user.user_name,
            full_name=user.full_name,
            email=user.email,
            avatar_image=user.avatar_image,
            cover_image=user.cover_image,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class ApiResponse(BaseModel):
    statusCode: int
    data: Any = None
    message: str = "Success"
    success: bool = True
