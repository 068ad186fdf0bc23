"""BookSwap API 客户端：会话、书籍目录、换书请求"""

import httpx

from bookswap.client.catalog import BookCatalog, BookFilter, CatalogView, OwnerScope, search_books
from bookswap.client.config import ClientConfig, config
from bookswap.client.dashboard import DashboardSnapshot, load_dashboard
from bookswap.client.errors import (
    AuthError,
    AuthorizationError,
    BookSwapError,
    ConflictError,
    InvalidStateError,
    InvalidResponseError,
    NetworkError,
    NotFoundError,
    ValidationError,
)
from bookswap.client.models import Book, BookFields, RequestViews, SwapRequest, User
from bookswap.client.session import SessionPhase, SessionState, SessionStore
from bookswap.client.swap_requests import RequestManager
from bookswap.client.token_store import FileTokenStore, MemoryTokenStore, TokenStore
from bookswap.client.transport import ApiTransport


class BookSwapClient:
    """把传输层、会话、目录和请求管理组装在一起"""

    def __init__(
        self,
        config: ClientConfig | None = None,
        token_store: TokenStore | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.transport = ApiTransport(config, transport=transport)
        self.session = SessionStore(
            self.transport,
            token_store or FileTokenStore(self.transport.config.token_file),
        )
        self.catalog = BookCatalog(self.transport, self.session)
        self.requests = RequestManager(self.transport, self.session)

    async def start(self) -> SessionState:
        """进程启动：恢复会话"""
        return await self.session.restore_session()

    async def dashboard(self) -> DashboardSnapshot:
        return await load_dashboard(self.catalog, self.requests)

    async def aclose(self) -> None:
        await self.transport.aclose()

    async def __aenter__(self) -> "BookSwapClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


__all__ = [
    "ApiTransport",
    "AuthError",
    "AuthorizationError",
    "Book",
    "BookCatalog",
    "BookFields",
    "BookFilter",
    "BookSwapClient",
    "BookSwapError",
    "CatalogView",
    "ClientConfig",
    "ConflictError",
    "DashboardSnapshot",
    "FileTokenStore",
    "InvalidResponseError",
    "InvalidStateError",
    "MemoryTokenStore",
    "NetworkError",
    "NotFoundError",
    "OwnerScope",
    "RequestManager",
    "RequestViews",
    "SessionPhase",
    "SessionState",
    "SessionStore",
    "SwapRequest",
    "TokenStore",
    "User",
    "ValidationError",
    "config",
    "load_dashboard",
    "search_books",
]
