from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bookswap.server.models.revoked_token import RevokedToken
from bookswap.server.models.user import User
from bookswap.server.utils.errors import ServiceError
from bookswap.server.utils.security import hash_password, verify_password, create_access_token
from bookswap.server.config import settings


class AuthError(ServiceError):
    """认证业务异常"""

    def __init__(self, detail: str, status_code: int = 400, code: str = "AUTH_ERROR"):
        super().__init__(detail, status_code, code)


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    """根据邮箱查找用户"""
    result = await db.execute(select(User).where(User.email == email.lower()))
    return result.scalar_one_or_none()


async def get_user_by_id(db: AsyncSession, user_id: str) -> User | None:
    """根据 ID 查找用户"""
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def register_user(db: AsyncSession, name: str, email: str, password: str) -> User:
    """注册新用户，返回 User 实例。邮箱重复时抛 AuthError。"""
    existing = await get_user_by_email(db, email)
    if existing:
        raise AuthError("Email already registered", status_code=409, code="CONFLICT")

    user = User(
        name=name,
        email=email.lower(),
        password_hash=hash_password(password),
    )
    db.add(user)
    await db.flush()  # 获取 id 等默认值，但不 commit（由 get_db 统一提交）
    await db.refresh(user)
    return user


async def authenticate_user(db: AsyncSession, email: str, password: str) -> User:
    """验证邮箱+密码，返回 User。失败抛 AuthError。"""
    user = await get_user_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        raise AuthError("Invalid email or password", status_code=401)
    return user


def build_token(user_id: str) -> dict:
    """生成 Token 及过期信息"""
    return {
        "token": create_access_token(user_id),
        "token_type": "bearer",
        "expires_in": settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    }


async def is_token_revoked(db: AsyncSession, jti: str) -> bool:
    result = await db.execute(select(RevokedToken).where(RevokedToken.jti == jti))
    return result.scalar_one_or_none() is not None


async def revoke_token(db: AsyncSession, payload: dict) -> None:
    """登出：记录 jti，之后携带该 Token 的请求一律 401"""
    if await is_token_revoked(db, payload["jti"]):
        return
    db.add(RevokedToken(jti=payload["jti"], user_id=payload["sub"]))
    await db.flush()
