from datetime import datetime
from typing import Literal

from pydantic import BaseModel

from bookswap.enums import RequestStatus
from bookswap.server.schemas.book import OwnerSummary


class RequestStatusUpdate(BaseModel):
    """owner 只能把 pending 改为 accepted / declined"""

    status: Literal["accepted", "declined"]


class RequestBookSummary(BaseModel):
    id: str
    title: str
    author: str
    image: str | None
    owner_id: str
    owner: OwnerSummary

    model_config = {"from_attributes": True}


class SwapRequestResponse(BaseModel):
    id: str
    status: RequestStatus
    book: RequestBookSummary
    requester: OwnerSummary
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class RequestListResponse(BaseModel):
    incoming: list[SwapRequestResponse]
    outgoing: list[SwapRequestResponse]
