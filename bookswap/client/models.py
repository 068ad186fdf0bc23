"""客户端视图模型：只描述服务端返回的数据，不做缓存合并"""

from datetime import datetime

from pydantic import BaseModel, Field

from bookswap.enums import BookCondition, RequestStatus


class User(BaseModel):
    id: str
    name: str
    email: str


class Book(BaseModel):
    id: str
    title: str
    author: str
    condition: BookCondition
    description: str = ""
    image: str | None = None
    owner: User
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def owner_id(self) -> str:
        return self.owner.id


class BookFields(BaseModel):
    """上架时的必填字段"""

    title: str = Field(..., min_length=1)
    author: str = Field(..., min_length=1)
    condition: BookCondition
    description: str


class RequestBook(BaseModel):
    id: str
    title: str
    author: str
    image: str | None = None
    owner_id: str
    owner: User | None = None


class SwapRequest(BaseModel):
    id: str
    status: RequestStatus
    book: RequestBook
    requester: User
    created_at: datetime
    updated_at: datetime | None = None


class RequestViews(BaseModel):
    """GET /requests 的一次完整快照"""

    incoming: list[SwapRequest] = Field(default_factory=list)
    outgoing: list[SwapRequest] = Field(default_factory=list)

    def find(self, request_id: str) -> SwapRequest | None:
        for req in (*self.incoming, *self.outgoing):
            if req.id == request_id:
                return req
        return None
