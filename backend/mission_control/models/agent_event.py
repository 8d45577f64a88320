"""
Agent event model — one inbound OpenClaw webhook event.

`tenant_id` is the tenant resolved by the gateway (NULL for anonymous
deliveries when auth is not required). NULL-tenant rows are "unscoped" and
only visible while unscoped access is allowed.

`payload` is the body exactly as delivered, minus the injected tenantId.
"""

import uuid
from typing import Any

from sqlalchemy import JSON, BigInteger, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from mission_control.core.database import Base


class AgentEvent(Base):
    """Webhook event recorded for the dashboard feed."""

    __tablename__ = "agent_events"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    tenant_id: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        index=True,
    )
    event_type: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
    )
    payload: Mapped[dict[str, Any]] = mapped_column(
        JSON,
        nullable=False,
    )
    received_at: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return (
            f"<AgentEvent id={self.id!s:.8} tenant={self.tenant_id!r} "
            f"type={self.event_type!r}>"
        )
