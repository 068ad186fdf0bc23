import asyncio
from dataclasses import dataclass

from bookswap.client.catalog import BookCatalog, BookFilter, OwnerScope
from bookswap.client.models import Book, SwapRequest
from bookswap.client.swap_requests import RequestManager
from bookswap.enums import RequestStatus


@dataclass(frozen=True)
class DashboardSnapshot:
    my_books: list[Book]
    incoming: list[SwapRequest]
    outgoing: list[SwapRequest]

    @property
    def pending_incoming(self) -> int:
        return sum(1 for r in self.incoming if r.status == RequestStatus.PENDING)


async def load_dashboard(catalog: BookCatalog, requests: RequestManager) -> DashboardSnapshot:
    """我的书籍与换书请求并发拉取；任一失败则整体失败"""
    my_books, views = await asyncio.gather(
        catalog.list(BookFilter(owner_scope=OwnerScope.ME)),
        requests.refresh(),
    )
    return DashboardSnapshot(
        my_books=my_books,
        incoming=list(views.incoming),
        outgoing=list(views.outgoing),
    )
