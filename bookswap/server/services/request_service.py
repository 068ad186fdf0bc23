"""
换书请求生命周期

状态迁移规则统一由 bookswap.lifecycle 裁决：
- accept / decline 仅限书籍 owner，且请求须为 pending
- cancel 仅限请求发起人，且请求须为 pending（取消 = 删除记录）
"""

import logging

from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from bookswap.enums import RequestStatus
from bookswap.lifecycle import (
    RequestAction,
    ActionNotPermitted,
    InvalidTransition,
    check_transition,
    role_of,
)
from bookswap.server.models.book import Book
from bookswap.server.models.swap_request import SwapRequest
from bookswap.server.services.book_service import get_book
from bookswap.server.utils.errors import ServiceError

logger = logging.getLogger(__name__)


class RequestError(ServiceError):
    pass


def _with_relations(stmt):
    return stmt.options(
        selectinload(SwapRequest.book).selectinload(Book.owner),
        selectinload(SwapRequest.requester),
    ).execution_options(populate_existing=True)


async def get_request(db: AsyncSession, request_id: str) -> SwapRequest:
    result = await db.execute(
        _with_relations(select(SwapRequest).where(SwapRequest.id == request_id))
    )
    req = result.scalar_one_or_none()
    if not req:
        raise RequestError("Request not found", 404, "NOT_FOUND")
    return req


async def create_request(db: AsyncSession, book_id: str, requester_id: str) -> SwapRequest:
    """非 owner 发起换书请求，初始状态 pending"""
    book = await get_book(db, book_id)
    if book.owner_id == requester_id:
        raise RequestError("You cannot request your own book", 409, "CONFLICT")

    existing = await db.execute(
        select(SwapRequest.id).where(
            SwapRequest.book_id == book_id,
            SwapRequest.requester_id == requester_id,
            SwapRequest.status == RequestStatus.PENDING.value,
        )
    )
    if existing.first() is not None:
        raise RequestError("You already have a pending request for this book", 409, "CONFLICT")

    req = SwapRequest(
        book_id=book_id,
        requester_id=requester_id,
        status=RequestStatus.PENDING.value,
    )
    db.add(req)
    try:
        # 并发下由部分唯一索引兜底
        await db.flush()
    except IntegrityError:
        raise RequestError("You already have a pending request for this book", 409, "CONFLICT")

    logger.info(f"[换书请求] 创建 {req.id}: book={book_id} requester={requester_id}")
    return await get_request(db, req.id)


async def list_requests(db: AsyncSession, user_id: str) -> tuple[list[SwapRequest], list[SwapRequest]]:
    """返回 (incoming, outgoing)：incoming = 我的书收到的请求，outgoing = 我发起的请求"""
    incoming = await db.execute(
        _with_relations(
            select(SwapRequest)
            .join(Book, Book.id == SwapRequest.book_id)
            .where(Book.owner_id == user_id)
            .order_by(SwapRequest.created_at.desc(), SwapRequest.id)
        )
    )
    outgoing = await db.execute(
        _with_relations(
            select(SwapRequest)
            .where(SwapRequest.requester_id == user_id)
            .order_by(SwapRequest.created_at.desc(), SwapRequest.id)
        )
    )
    return list(incoming.scalars().all()), list(outgoing.scalars().all())


async def _apply(db: AsyncSession, request_id: str, actor_id: str, action: RequestAction) -> SwapRequest | None:
    req = await get_request(db, request_id)
    role = role_of(actor_id, req.book.owner_id, req.requester_id)
    try:
        target = check_transition(RequestStatus(req.status), action, role)
    except ActionNotPermitted as e:
        raise RequestError(e.detail, 403, "FORBIDDEN")
    except InvalidTransition as e:
        raise RequestError(e.detail, 409, "INVALID_STATE")

    if target is None:
        await db.execute(delete(SwapRequest).where(SwapRequest.id == request_id))
        await db.flush()
        logger.info(f"[换书请求] {request_id} 已取消")
        return None

    req.status = target.value
    await db.flush()
    logger.info(f"[换书请求] {request_id}: pending -> {target.value}")
    return await get_request(db, request_id)


async def respond_to_request(
    db: AsyncSession, request_id: str, actor_id: str, status: RequestStatus
) -> SwapRequest:
    """owner 接受或拒绝"""
    action = {
        RequestStatus.ACCEPTED: RequestAction.ACCEPT,
        RequestStatus.DECLINED: RequestAction.DECLINE,
    }.get(RequestStatus(status))
    if action is None:
        raise RequestError(f"Unsupported status: {status}")
    return await _apply(db, request_id, actor_id, action)


async def cancel_request(db: AsyncSession, request_id: str, actor_id: str) -> None:
    """发起人撤回 pending 请求"""
    await _apply(db, request_id, actor_id, RequestAction.CANCEL)
