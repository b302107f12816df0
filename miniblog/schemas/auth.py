"""Request/response schemas for login, token refresh and password change."""

from datetime import datetime

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Credentials for login."""

    username: str = ""
    password: str = ""


class LoginResponse(BaseModel):
    """Bearer token returned after successful login."""

    token: str = Field(..., description="JWT access token")
    expire_at: datetime = Field(..., description="Token expiry (UTC)")


class RefreshTokenRequest(BaseModel):
    pass


class RefreshTokenResponse(BaseModel):
    token: str
    expire_at: datetime


class ChangePasswordRequest(BaseModel):
    user_id: str = ""
    old_password: str = ""
    new_password: str = ""


class ChangePasswordResponse(BaseModel):
    pass
