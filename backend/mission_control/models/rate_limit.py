"""
Fixed-window rate limit state.

One row per limiter key — the tenant id, or the literal anonymous key when
no tenant was resolved. The row holds the start of the current 60 s window
and the number of requests admitted inside it.

Rows are only touched by mission_control.services.rate_limiter, inside a
single transaction per check.
"""

from sqlalchemy import BigInteger, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from mission_control.core.database import Base


class RateLimitWindow(Base):
    """Per-key request counter for the current fixed window."""

    __tablename__ = "rate_limit_windows"

    key: Mapped[str] = mapped_column(
        String(255),
        primary_key=True,
    )
    window_start_ms: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
    )
    count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    def __repr__(self) -> str:
        return (
            f"<RateLimitWindow key={self.key!r} "
            f"start={self.window_start_ms} count={self.count}>"
        )
