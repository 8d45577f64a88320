"""
API token model — bearer credential that attributes webhook calls to a tenant.

Security notes:
  • Plaintext tokens are NEVER stored. Only a SHA-256 hex digest is persisted.
  • `token_prefix` keeps the first 8 characters for display in the UI;
    it is never enough to authenticate (lookup is by full digest).
  • `revoked_at` is a soft-revoke marker — once set it is never cleared
    and the row is never deleted (audit trail).
  • Timestamps are epoch milliseconds.
"""

import uuid

from sqlalchemy import BigInteger, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from mission_control.core.database import Base


class ApiToken(Base):
    """Hashed API token owned by one tenant."""

    __tablename__ = "api_tokens"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    token_hash: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
        index=True,
    )
    token_prefix: Mapped[str] = mapped_column(
        String(8),
        nullable=False,
    )
    tenant_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
    )
    name: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    created_at: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
    )
    last_used_at: Mapped[int | None] = mapped_column(
        BigInteger,
        nullable=True,
    )
    revoked_at: Mapped[int | None] = mapped_column(
        BigInteger,
        nullable=True,
    )

    @property
    def is_revoked(self) -> bool:
        return self.revoked_at is not None

    def __repr__(self) -> str:
        return (
            f"<ApiToken id={self.id!s:.8} prefix={self.token_prefix!r} "
            f"tenant={self.tenant_id!r} revoked={self.is_revoked}>"
        )
