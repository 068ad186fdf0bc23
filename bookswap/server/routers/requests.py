from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from bookswap.enums import RequestStatus
from bookswap.server.database import get_db
from bookswap.server.models.user import User
from bookswap.server.schemas.swap_request import (
    RequestListResponse,
    RequestStatusUpdate,
    SwapRequestResponse,
)
from bookswap.server.services.request_service import (
    list_requests,
    respond_to_request,
    cancel_request,
)
from bookswap.server.utils.deps import get_current_user

router = APIRouter(prefix="/requests", tags=["换书请求"])


@router.get("", response_model=RequestListResponse, summary="我的换书请求")
async def list_mine(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """incoming：别人对我的书发起的请求；outgoing：我发起的请求"""
    incoming, outgoing = await list_requests(db, current_user.id)
    return RequestListResponse(
        incoming=[SwapRequestResponse.model_validate(r) for r in incoming],
        outgoing=[SwapRequestResponse.model_validate(r) for r in outgoing],
    )


@router.patch("/{request_id}", response_model=SwapRequestResponse, summary="接受 / 拒绝")
async def respond(
    request_id: str,
    body: RequestStatusUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    req = await respond_to_request(db, request_id, current_user.id, RequestStatus(body.status))
    return SwapRequestResponse.model_validate(req)


@router.delete("/{request_id}", status_code=204, summary="撤回请求")
async def cancel(
    request_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await cancel_request(db, request_id, current_user.id)
    return Response(status_code=204)
