from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=255, description="Username")
    password: str = Field(..., min_length=6, max_length=100, description="Password")
    tenant_id: Optional[str] = Field(None, description="Optional tenant ID for context")


class SessionUser(BaseModel):
    id: str
    username: str
    tenant_id: Optional[str] = None
    tenant_name: Optional[str] = None
    roles: list[str]
    permissions: list[str]
    last_login: Optional[datetime] = None


class Token(BaseModel):
    access_token: str = Field(..., min_length=32, description="Access token string.")
    token_type: str = Field("Bearer", pattern="^Bearer$", description="Type of the token, always 'Bearer'.")
    expires_in: Optional[int] = Field(None, description="Time in seconds before token expires.")


class LoginResponse(Token):
    user: SessionUser
