"""书籍目录访问：按归属范围列出、详情、上架、编辑、下架，以及纯客户端的文本搜索"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from bookswap.client.models import Book, BookFields, User
from bookswap.client.session import SessionStore
from bookswap.client.transport import ApiTransport


class OwnerScope(str, Enum):
    ME = "me"
    ALL = "all"


@dataclass
class BookFilter:
    owner_scope: OwnerScope = OwnerScope.ALL

    def to_params(self) -> dict[str, str]:
        if OwnerScope(self.owner_scope) is OwnerScope.ME:
            return {"owner": "me"}
        return {}


def search_books(books: Iterable[Book], query: str) -> list[Book]:
    """标题或作者包含 query（不区分大小写）；空查询返回全部"""
    needle = (query or "").strip().lower()
    if not needle:
        return list(books)
    return [
        b for b in books
        if needle in b.title.lower() or needle in b.author.lower()
    ]


def resolve_image_url(image: str | None, base_url: str) -> str | None:
    """服务端返回的相对路径拼上静态资源地址，绝对 URL 原样返回"""
    if not image:
        return None
    if image.startswith(("http://", "https://", "data:")):
        return image
    return f"{base_url.rstrip('/')}/{image.lstrip('/')}"


def is_owner(book: Book, user: User | None) -> bool:
    return user is not None and book.owner.id == user.id


class BookCatalog:

    def __init__(self, transport: ApiTransport, session: SessionStore):
        self.transport = transport
        self.session = session

    async def list(self, filter: BookFilter | None = None) -> list[Book]:
        filter = filter or BookFilter()
        await self.session.wait_ready()
        if OwnerScope(filter.owner_scope) is OwnerScope.ME:
            self.session.require_user()
        data = await self.transport.get("/books", params=filter.to_params())
        return [Book.model_validate(b) for b in data]

    async def get(self, book_id: str) -> Book:
        data = await self.transport.get(f"/books/{book_id}")
        return Book.model_validate(data)

    async def create(
        self,
        fields: BookFields,
        image: tuple[str, bytes, str] | None = None,
    ) -> Book:
        """
        multipart 上架，调用者成为 owner。
        image 为 (文件名, 内容, MIME 类型)。
        """
        await self.session.wait_ready()
        self.session.require_user()
        form = {
            "title": fields.title,
            "author": fields.author,
            "condition": fields.condition.value,
            "description": fields.description,
        }
        files = {"image": image} if image is not None else None
        data = await self.transport.post("/books", data=form, files=files)
        return Book.model_validate(data)

    async def update(self, book_id: str, **fields) -> Book:
        """只有 owner 可以编辑，越权由服务端返回 AuthorizationError"""
        await self.session.wait_ready()
        self.session.require_user()
        payload = {k: (v.value if isinstance(v, Enum) else v) for k, v in fields.items() if v is not None}
        data = await self.transport.patch(f"/books/{book_id}", json=payload)
        return Book.model_validate(data)

    async def delete(self, book_id: str) -> None:
        """仍有未处理请求时服务端返回 ConflictError，由调用方展示"""
        await self.session.wait_ready()
        self.session.require_user()
        await self.transport.delete(f"/books/{book_id}")

    def image_url(self, book: Book) -> str | None:
        return resolve_image_url(book.image, self.transport.config.asset_base_url)


@dataclass
class CatalogView:
    """
    浏览页状态：最近一次拉取的列表 + 搜索词。
    visible 每次访问都从两者重新计算，不缓存。
    """

    catalog: BookCatalog
    filter: BookFilter = field(default_factory=BookFilter)
    books: list[Book] = field(default_factory=list)
    query: str = ""

    async def refresh(self) -> list[Book]:
        self.books = await self.catalog.list(self.filter)
        return self.visible

    def set_query(self, query: str) -> list[Book]:
        self.query = query
        return self.visible

    @property
    def visible(self) -> list[Book]:
        return search_books(self.books, self.query)
