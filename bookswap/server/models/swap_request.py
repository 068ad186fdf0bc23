import uuid
from datetime import datetime

from sqlalchemy import String, DateTime, ForeignKey, Index, Enum as SAEnum, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bookswap.enums import RequestStatus
from bookswap.server.database import Base


class SwapRequest(Base):
    __tablename__ = "swap_requests"
    __table_args__ = (
        # 同一 (book, requester) 最多一条 pending 请求
        Index(
            "ix_swap_requests_one_pending",
            "book_id",
            "requester_id",
            unique=True,
            sqlite_where=text("status = 'pending'"),
        ),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    book_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("books.id"), nullable=False, index=True
    )
    requester_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(
        SAEnum(*[s.value for s in RequestStatus], name="request_status"),
        default=RequestStatus.PENDING.value,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # 关联
    book = relationship("Book", back_populates="requests")
    requester = relationship("User")
