from datetime import datetime

from sqlalchemy import String, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from bookswap.server.database import Base


class RevokedToken(Base):
    """登出后作废的 Token（按 jti 记录）"""

    __tablename__ = "revoked_tokens"

    jti: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False)
    revoked_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow
    )
