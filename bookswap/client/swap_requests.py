"""
换书请求生命周期管理

- 每次修改成功后整体重新拉取 GET /requests，不做增量合并
- 修改失败不触碰本地视图
- 本地已知的请求先用 bookswap.lifecycle 预检；状态单调，
  本地看到的终态一定也是服务端的终态，最终仍以服务端裁决为准
"""

import logging

from bookswap.client.errors import (
    AuthorizationError,
    BookSwapError,
    ConflictError,
    InvalidStateError,
)
from bookswap.client.models import Book, RequestViews, SwapRequest, User
from bookswap.client.session import SessionStore
from bookswap.client.transport import ApiTransport
from bookswap.lifecycle import (
    ActionNotPermitted,
    InvalidTransition,
    RequestAction,
    allowed_actions,
    check_transition,
    role_of,
)

logger = logging.getLogger(__name__)


class RequestManager:

    def __init__(self, transport: ApiTransport, session: SessionStore):
        self.transport = transport
        self.session = session
        self._views = RequestViews()

    # ─── 视图 ──────────────────────────────

    @property
    def views(self) -> RequestViews:
        return self._views

    @property
    def incoming(self) -> list[SwapRequest]:
        return list(self._views.incoming)

    @property
    def outgoing(self) -> list[SwapRequest]:
        return list(self._views.outgoing)

    def find(self, request_id: str) -> SwapRequest | None:
        return self._views.find(request_id)

    async def _require_user(self) -> User:
        await self.session.wait_ready()
        return self.session.require_user()

    async def refresh(self) -> RequestViews:
        """整体拉取，成功后一次性替换视图"""
        await self._require_user()
        data = await self.transport.get("/requests")
        views = RequestViews(
            incoming=data.get("incoming") or [],
            outgoing=data.get("outgoing") or [],
        )
        self._views = views
        return views

    async def list_incoming(self) -> list[SwapRequest]:
        """当前用户的书收到的全部请求"""
        return list((await self.refresh()).incoming)

    async def list_outgoing(self) -> list[SwapRequest]:
        """当前用户发起的全部请求"""
        return list((await self.refresh()).outgoing)

    async def _refresh_after_mutation(self) -> None:
        # 修改已成功，刷新失败只记录，保留旧视图
        try:
            await self.refresh()
        except BookSwapError as e:
            logger.warning(f"刷新换书请求列表失败: {e}")

    # ─── 状态机 ────────────────────────────

    def actions_for(self, request: SwapRequest) -> frozenset[RequestAction]:
        """当前用户对该请求可执行的操作，用于展示按钮"""
        user = self.session.user
        if user is None:
            return frozenset()
        role = role_of(user.id, request.book.owner_id, request.requester.id)
        return allowed_actions(request.status, role)

    def _precheck(self, user: User, request_id: str, action: RequestAction) -> None:
        known = self.find(request_id)
        if known is None:
            return
        role = role_of(user.id, known.book.owner_id, known.requester.id)
        try:
            check_transition(known.status, action, role)
        except ActionNotPermitted as e:
            raise AuthorizationError(e.detail, status_code=403, code="FORBIDDEN") from e
        except InvalidTransition as e:
            raise InvalidStateError(e.detail, status_code=409, code="INVALID_STATE") from e

    async def create(self, book: Book | str) -> SwapRequest:
        """对他人的书发起请求，初始状态 pending"""
        user = await self._require_user()
        if isinstance(book, Book):
            if book.owner.id == user.id:
                raise ConflictError("You cannot request your own book", status_code=409, code="CONFLICT")
            book_id = book.id
        else:
            book_id = book

        data = await self.transport.post(f"/books/{book_id}/request")
        created = SwapRequest.model_validate(data)
        await self._refresh_after_mutation()
        return created

    async def _transition(self, request_id: str, action: RequestAction) -> None:
        user = await self._require_user()
        self._precheck(user, request_id, action)

        if action is RequestAction.CANCEL:
            await self.transport.delete(f"/requests/{request_id}")
        else:
            status = "accepted" if action is RequestAction.ACCEPT else "declined"
            await self.transport.patch(f"/requests/{request_id}", json={"status": status})
        await self._refresh_after_mutation()

    async def accept(self, request_id: str) -> None:
        await self._transition(request_id, RequestAction.ACCEPT)

    async def decline(self, request_id: str) -> None:
        await self._transition(request_id, RequestAction.DECLINE)

    async def cancel(self, request_id: str) -> None:
        await self._transition(request_id, RequestAction.CANCEL)
