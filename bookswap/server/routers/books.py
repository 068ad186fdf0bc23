from typing import Literal

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Response, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from bookswap.enums import BookCondition
from bookswap.server.database import get_db
from bookswap.server.models.user import User
from bookswap.server.schemas.book import BookResponse, BookUpdateRequest
from bookswap.server.schemas.swap_request import SwapRequestResponse
from bookswap.server.services.book_service import (
    list_books,
    get_book,
    create_book,
    update_book,
    delete_book,
)
from bookswap.server.services.request_service import create_request
from bookswap.server.utils.deps import get_current_user, get_optional_user

router = APIRouter(prefix="/books", tags=["书籍"])


@router.get("", response_model=list[BookResponse], summary="书籍列表")
async def list_all(
    owner: Literal["me"] | None = Query(None, description="owner=me 只看自己的书"),
    current_user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    owner_id = None
    if owner == "me":
        if current_user is None:
            raise HTTPException(
                status_code=401,
                detail="Not authenticated",
                headers={"WWW-Authenticate": "Bearer"},
            )
        owner_id = current_user.id
    books = await list_books(db, owner_id)
    return [BookResponse.model_validate(b) for b in books]


@router.get("/{book_id}", response_model=BookResponse, summary="书籍详情")
async def detail(book_id: str, db: AsyncSession = Depends(get_db)):
    """含 owner 信息"""
    return BookResponse.model_validate(await get_book(db, book_id))


@router.post("", response_model=BookResponse, status_code=201, summary="上架书籍")
async def create(
    title: str = Form(...),
    author: str = Form(...),
    condition: BookCondition = Form(...),
    description: str = Form(...),
    image: UploadFile | None = File(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """multipart 表单上架，封面可选"""
    book = await create_book(
        db,
        current_user.id,
        title=title,
        author=author,
        condition=condition,
        description=description,
        image=image,
    )
    return BookResponse.model_validate(book)


@router.patch("/{book_id}", response_model=BookResponse, summary="编辑书籍")
async def update(
    book_id: str,
    body: BookUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    book = await update_book(db, book_id, current_user.id, body.model_dump(exclude_unset=True))
    return BookResponse.model_validate(book)


@router.delete("/{book_id}", status_code=204, summary="下架书籍")
async def remove(
    book_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await delete_book(db, book_id, current_user.id)
    return Response(status_code=204)


@router.post("/{book_id}/request", response_model=SwapRequestResponse, status_code=201, summary="申请换书")
async def request_book(
    book_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """对他人的书发起换书请求"""
    req = await create_request(db, book_id, current_user.id)
    return SwapRequestResponse.model_validate(req)
