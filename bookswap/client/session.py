"""
会话存储

进程级会话只有两个阶段：
- loading：启动时校验已保存凭据，尚未完成
- ready：校验结束，匿名或已登录

依赖会话做权限判断的组件必须先 await wait_ready()。
凭据只由本模块写入，传输层通过 credentials() 读取。
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from pydantic import ValidationError as SchemaError

from bookswap.client.errors import (
    AuthError,
    BookSwapError,
    ConflictError,
    InvalidResponseError,
    ValidationError,
)
from bookswap.client.models import User
from bookswap.client.token_store import TokenStore, MemoryTokenStore
from bookswap.client.transport import ApiTransport

logger = logging.getLogger(__name__)


class SessionPhase(str, Enum):
    LOADING = "loading"
    READY = "ready"


@dataclass(frozen=True)
class SessionState:
    phase: SessionPhase
    user: User | None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None


# ──────────── 登录响应的显式分支 ────────────

@dataclass(frozen=True)
class TokenWithUser:
    token: str
    user: User


@dataclass(frozen=True)
class TokenOnly:
    token: str


LoginOutcome = TokenWithUser | TokenOnly


def parse_login_response(data: Any) -> LoginOutcome:
    """
    {token, user} → TokenWithUser
    {token}       → TokenOnly（需再拉取 profile）
    其他情况（包括只有 user 没有 token）一律视为失败
    """
    if not isinstance(data, dict):
        raise AuthError("Invalid login response: expected an object")

    token = data.get("token")
    if not isinstance(token, str) or not token:
        raise AuthError("Invalid login response: missing token")

    user = data.get("user")
    if user:
        try:
            return TokenWithUser(token=token, user=User.model_validate(user))
        except SchemaError as e:
            raise AuthError(f"Invalid login response: malformed user ({e.error_count()} errors)") from e
    return TokenOnly(token=token)


class SessionStore:
    """持有 Bearer 凭据与当前用户，负责登录 / 注册 / 登出 / 启动恢复"""

    def __init__(self, transport: ApiTransport, token_store: TokenStore | None = None):
        self.transport = transport
        self.token_store = token_store or MemoryTokenStore()
        self._token: str | None = None
        self._user: User | None = None
        self._phase = SessionPhase.LOADING
        self._ready = asyncio.Event()
        self._listeners: list[Callable[[SessionState], None]] = []

        transport.credentials = lambda: self._token
        transport.on_unauthorized = self._handle_unauthorized

    # ─── 状态 ──────────────────────────────

    @property
    def phase(self) -> SessionPhase:
        return self._phase

    @property
    def user(self) -> User | None:
        return self._user

    @property
    def state(self) -> SessionState:
        return SessionState(phase=self._phase, user=self._user)

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None

    async def wait_ready(self) -> SessionState:
        await self._ready.wait()
        return self.state

    def require_user(self) -> User:
        """受保护操作的守卫：loading 或匿名时拒绝"""
        if self._phase is not SessionPhase.READY:
            raise AuthError("Session is still loading")
        if self._user is None:
            raise AuthError("Login required")
        return self._user

    def subscribe(self, listener: Callable[[SessionState], None]) -> Callable[[], None]:
        """订阅会话变化，返回取消订阅函数"""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        state = self.state
        for listener in list(self._listeners):
            listener(state)

    def _set_session(self, token: str | None, user: User | None) -> None:
        self._token = token
        self._user = user
        self._notify()

    def _clear(self) -> None:
        self.token_store.clear()
        self._set_session(None, None)

    def _mark_ready(self) -> None:
        self._phase = SessionPhase.READY
        self._ready.set()
        self._notify()

    def _handle_unauthorized(self) -> None:
        """受保护接口返回 401：凭据已失效"""
        if self._token is None:
            return
        logger.info("凭据已失效，清除本地会话")
        self._clear()

    # ─── 启动恢复 ──────────────────────────

    async def restore_session(self) -> SessionState:
        """
        进程启动时调用一次。已保存的凭据必须经 profile 校验才被信任；
        校验失败则丢弃凭据并回到匿名。
        """
        token = self.token_store.load()
        try:
            if token:
                user = await self._fetch_profile_with(token)
                # 校验期间已登录则以新会话为准
                if self._token is None:
                    self._set_session(token, user)
        except Exception as e:
            if self._token is None:
                logger.warning(f"恢复会话失败，已清除本地凭据: {e}")
                self._clear()
            else:
                logger.info(f"恢复会话失败，保留校验期间建立的新会话: {e}")
        finally:
            if self._phase is not SessionPhase.READY:
                self._mark_ready()
        return self.state

    async def fetch_profile(self) -> User:
        data = await self.transport.get("/auth/profile")
        return User.model_validate(data)

    # ─── 登录 / 注册 / 登出 ─────────────────

    async def login(self, email: str, password: str) -> User:
        try:
            data = await self.transport.post(
                "/auth/login", json={"email": email, "password": password}, auth=False
            )
            outcome = parse_login_response(data)
            if isinstance(outcome, TokenWithUser):
                user = outcome.user
            else:
                user = await self._fetch_profile_with(outcome.token)
        except InvalidResponseError as e:
            logger.error(f"登录失败: {e}")
            raise AuthError(e.detail, status_code=e.status_code) from e
        except BookSwapError as e:
            logger.error(f"登录失败: {e}")
            raise

        self.token_store.save(outcome.token)
        self._set_session(outcome.token, user)
        self._mark_ready()
        return user

    async def _fetch_profile_with(self, token: str) -> User:
        """用尚未确认的 Token 拉取 profile；校验通过前不写入会话"""
        data = await self.transport.get(
            "/auth/profile", headers={"Authorization": f"Bearer {token}"}, auth=False
        )
        try:
            return User.model_validate(data)
        except SchemaError as e:
            raise AuthError("Invalid profile response") from e

    async def signup(self, name: str, email: str, password: str) -> None:
        """创建账号，不自动登录"""
        try:
            await self.transport.post(
                "/auth/signup",
                json={"name": name, "email": email, "password": password},
                auth=False,
            )
        except (ConflictError, ValidationError) as e:
            logger.error(f"注册失败: {e}")
            raise AuthError(e.detail, status_code=e.status_code, code=e.code) from e
        except BookSwapError as e:
            logger.error(f"注册失败: {e}")
            raise

    async def logout(self) -> None:
        """通知服务端为尽力而为；本地会话无论如何都会清除"""
        try:
            if self._token:
                await self.transport.post("/auth/logout")
        except Exception as e:
            logger.error(f"登出接口调用失败: {e}")
        finally:
            self._clear()
