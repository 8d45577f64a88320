"""
Event ingestion — the downstream collaborator of the webhook gateway.

The gateway hands over the delivered body verbatim plus a `tenantId` key
(None for anonymous deliveries). This default implementation records the
event; richer business side effects (agents, tasks, activities) plug in
behind the same EventSink signature.

Read helpers apply the tenant access rule to every row they return.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Awaitable, Callable
from typing import Any

from sqlalchemy import ColumnElement, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from mission_control.auth.errors import EventNotFound
from mission_control.auth.tenant import TenantFilter
from mission_control.core.clock import now_ms
from mission_control.models.agent_event import AgentEvent

logger = logging.getLogger(__name__)

TENANT_FIELD = "tenantId"

# (session, event) -> None
EventSink = Callable[[AsyncSession, dict[str, Any]], Awaitable[None]]


async def receive_agent_event(session: AsyncSession, event: dict[str, Any]) -> None:
    """Persist one forwarded webhook event."""
    payload = dict(event)
    tenant_id = payload.pop(TENANT_FIELD, None)
    event_type = payload.get("type")

    record = AgentEvent(
        tenant_id=tenant_id,
        event_type=event_type[:100] if isinstance(event_type, str) else None,
        payload=payload,
        received_at=now_ms(),
    )
    session.add(record)
    await session.commit()
    logger.debug("Recorded agent event %s for tenant %s", record.id, tenant_id)


def _visible_to(tenant_filter: TenantFilter) -> ColumnElement[bool] | None:
    """SQL form of can_access_tenant_record()."""
    clauses = []
    if tenant_filter.tenant_id:
        clauses.append(AgentEvent.tenant_id == tenant_filter.tenant_id)
    if tenant_filter.allow_unscoped:
        clauses.append(AgentEvent.tenant_id.is_(None))
    if not clauses:
        return None
    return or_(*clauses)


async def list_agent_events(
    session: AsyncSession,
    tenant_filter: TenantFilter,
    limit: int = 50,
) -> list[AgentEvent]:
    """Events the caller may see, newest first."""
    condition = _visible_to(tenant_filter)
    if condition is None:
        return []

    stmt = (
        select(AgentEvent)
        .where(condition)
        .order_by(AgentEvent.received_at.desc(), AgentEvent.id)
        .limit(limit)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_agent_event(
    session: AsyncSession,
    tenant_filter: TenantFilter,
    event_id: uuid.UUID | str,
) -> AgentEvent:
    """One event, or NotFound when missing, malformed or outside the caller's scope."""
    try:
        event_id = uuid.UUID(str(event_id))
    except ValueError:
        raise EventNotFound() from None

    record = await session.get(AgentEvent, event_id)
    if record is None or not tenant_filter.can_access(record.tenant_id):
        raise EventNotFound()
    return record
