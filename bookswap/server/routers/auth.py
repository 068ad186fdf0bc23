from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bookswap.server.database import get_db
from bookswap.server.models.user import User
from bookswap.server.schemas.auth import (
    SignupRequest,
    LoginRequest,
    LoginResponse,
    SignupResponse,
    MessageResponse,
    UserResponse,
)
from bookswap.server.services.auth_service import (
    register_user,
    authenticate_user,
    build_token,
    revoke_token,
)
from bookswap.server.utils.deps import get_current_user, get_token_payload

router = APIRouter(prefix="/auth", tags=["认证"])


@router.post("/signup", response_model=SignupResponse, status_code=201, summary="用户注册")
async def signup(body: SignupRequest, db: AsyncSession = Depends(get_db)):
    """注册账号；不会自动登录，客户端需再调用 /auth/login"""
    user = await register_user(db, body.name, body.email, body.password)
    return SignupResponse(message="Account created", user=UserResponse.model_validate(user))


@router.post("/login", response_model=LoginResponse, summary="用户登录")
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    """邮箱 + 密码登录，返回 Token 和用户信息"""
    user = await authenticate_user(db, body.email, body.password)
    return LoginResponse(user=UserResponse.model_validate(user), **build_token(user.id))


@router.get("/profile", response_model=UserResponse, summary="获取当前用户")
async def profile(current_user: User = Depends(get_current_user)):
    """根据 Token 返回当前登录用户信息"""
    return UserResponse.model_validate(current_user)


@router.post("/logout", response_model=MessageResponse, summary="登出")
async def logout(
    payload: dict = Depends(get_token_payload),
    db: AsyncSession = Depends(get_db),
):
    """作废当前 Token"""
    await revoke_token(db, payload)
    return MessageResponse(message="Logged out")
