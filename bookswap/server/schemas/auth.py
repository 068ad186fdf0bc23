from datetime import datetime

from pydantic import BaseModel, EmailStr, Field


# ---- 请求 ----

class SignupRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="显示名称")
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128, description="密码（6-128位）")


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


# ---- 响应 ----

class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    created_at: datetime

    model_config = {"from_attributes": True}


class LoginResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    expires_in: int = Field(description="过期时间（秒）")
    user: UserResponse


class SignupResponse(BaseModel):
    message: str
    user: UserResponse


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    detail: str
    code: str | None = None
