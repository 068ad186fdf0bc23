from datetime import datetime

from pydantic import BaseModel, Field

from bookswap.enums import BookCondition


class OwnerSummary(BaseModel):
    id: str
    name: str
    email: str

    model_config = {"from_attributes": True}


class BookUpdateRequest(BaseModel):
    """PATCH /books/{id}：只更新传入的字段"""

    title: str | None = Field(None, min_length=1, max_length=255)
    author: str | None = Field(None, min_length=1, max_length=255)
    condition: BookCondition | None = None
    description: str | None = Field(None, max_length=5000)


class BookResponse(BaseModel):
    id: str
    title: str
    author: str
    condition: BookCondition
    description: str
    image: str | None
    owner_id: str
    owner: OwnerSummary
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
