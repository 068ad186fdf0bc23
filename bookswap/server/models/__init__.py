from bookswap.server.models.user import User
from bookswap.server.models.book import Book
from bookswap.server.models.swap_request import SwapRequest
from bookswap.server.models.revoked_token import RevokedToken

__all__ = [
    "User",
    "Book",
    "SwapRequest",
    "RevokedToken",
]
