"""书籍上架 / 编辑 / 下架，写操作仅限 owner"""

from fastapi import UploadFile
from sqlalchemy import select, func, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from bookswap.enums import BookCondition, RequestStatus
from bookswap.server.models.book import Book
from bookswap.server.models.swap_request import SwapRequest
from bookswap.server.utils.errors import ServiceError
from bookswap.server.utils.uploads import save_image, remove_image


class BookError(ServiceError):
    pass


async def list_books(db: AsyncSession, owner_id: str | None = None) -> list[Book]:
    """全部书籍，或指定 owner 的书籍；新上架在前"""
    stmt = select(Book).options(selectinload(Book.owner))
    if owner_id is not None:
        stmt = stmt.where(Book.owner_id == owner_id)
    result = await db.execute(stmt.order_by(Book.created_at.desc(), Book.id))
    return list(result.scalars().all())


async def get_book(db: AsyncSession, book_id: str) -> Book:
    result = await db.execute(
        select(Book)
        .options(selectinload(Book.owner))
        .where(Book.id == book_id)
        .execution_options(populate_existing=True)
    )
    book = result.scalar_one_or_none()
    if not book:
        raise BookError("Book not found", 404, "NOT_FOUND")
    return book


async def _get_owned_book(db: AsyncSession, book_id: str, user_id: str) -> Book:
    """获取书籍并校验归属"""
    book = await get_book(db, book_id)
    if book.owner_id != user_id:
        raise BookError("Only the owner can modify this book", 403, "FORBIDDEN")
    return book


async def create_book(
    db: AsyncSession,
    owner_id: str,
    title: str,
    author: str,
    condition: BookCondition,
    description: str,
    image: UploadFile | None = None,
) -> Book:
    """上架书籍，调用者即 owner"""
    title, author = title.strip(), author.strip()
    if not title or not author:
        raise BookError("Title and author are required")

    image_url = await save_image(image) if image is not None else None
    book = Book(
        title=title,
        author=author,
        condition=BookCondition(condition).value,
        description=description.strip(),
        image=image_url,
        owner_id=owner_id,
    )
    db.add(book)
    await db.flush()
    return await get_book(db, book.id)


async def update_book(db: AsyncSession, book_id: str, user_id: str, fields: dict) -> Book:
    book = await _get_owned_book(db, book_id, user_id)
    for key, value in fields.items():
        if value is None:
            continue
        if key == "condition":
            value = BookCondition(value).value
        elif isinstance(value, str):
            value = value.strip()
            if not value and key in ("title", "author"):
                raise BookError(f"{key.capitalize()} cannot be blank")
        setattr(book, key, value)
    await db.flush()
    return book


async def delete_book(db: AsyncSession, book_id: str, user_id: str) -> None:
    """
    下架书籍。
    仍有 pending 请求时拒绝（409），已结束的请求随书一并删除。
    """
    book = await _get_owned_book(db, book_id, user_id)

    pending = await db.scalar(
        select(func.count(SwapRequest.id)).where(
            SwapRequest.book_id == book_id,
            SwapRequest.status == RequestStatus.PENDING.value,
        )
    )
    if pending:
        raise BookError(
            f"Book has {pending} pending request(s); resolve them before deleting",
            409,
            "CONFLICT",
        )

    image = book.image
    await db.execute(delete(SwapRequest).where(SwapRequest.book_id == book_id))
    await db.execute(delete(Book).where(Book.id == book_id))
    await db.flush()
    remove_image(image)
