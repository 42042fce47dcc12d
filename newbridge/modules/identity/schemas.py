"""Pydantic v2 schemas for sign-in endpoints."""

from pydantic import BaseModel, Field

from newbridge.modules.access.schemas import PrincipalResponse


class AdminLoginRequest(BaseModel):
    password: str = Field(..., min_length=1, max_length=512)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class SessionResponse(BaseModel):
    """Principal and access returned after a sign-in has been recorded."""

    principal: PrincipalResponse
    tracked: bool
