"""
Auth Schemas.

Sign-up / sign-in payloads and the session returned to clients.
Email and password rules are enforced by AuthService so that each
failure carries its own error code.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class Credentials(BaseModel):
    """Email and password for sign-up or sign-in."""

    email: str = Field(..., max_length=320, examples=["ada@example.com"])
    password: str = Field(..., max_length=128)


class SessionResponse(BaseModel):
    """An authenticated session."""

    access_token: str
    token_type: str = "bearer"
    user_id: str
    email: str


class UserResponse(BaseModel):
    """Public view of a user account."""

    id: str
    email: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
