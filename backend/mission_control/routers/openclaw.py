"""
OpenClaw router — webhook ingestion and the event feed it produces.

POST /openclaw/event
  1. Authenticates via optional API token (mandatory when auth is required).
  2. Enforces the per-tenant fixed-window rate limit.
  3. Forwards the JSON body, tagged with the tenant, to event ingestion.
  4. Always answers `{ok, error?}` — 200 / 400 / 401 / 403 / 429 / 500.

GET /openclaw/events, GET /openclaw/events/{event_id}
  Session-authenticated reads, filtered by the tenant access rule.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Header, Query, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from mission_control.auth.dependencies import get_tenant_filter, get_webhook_gateway
from mission_control.auth.tenant import TenantFilter
from mission_control.core.database import get_db_session
from mission_control.models.agent_event import AgentEvent
from mission_control.schemas.events import AgentEventResponse, WebhookResponse
from mission_control.services.event_ingestion import get_agent_event, list_agent_events
from mission_control.services.gateway import WebhookGateway

logger = logging.getLogger(__name__)

router = APIRouter(tags=["OpenClaw"])

# Type aliases for cleaner signatures
DbSession = Annotated[AsyncSession, Depends(get_db_session)]
Gateway = Annotated[WebhookGateway, Depends(get_webhook_gateway)]
Scope = Annotated[TenantFilter, Depends(get_tenant_filter)]


@router.post(
    "/event",
    response_model=WebhookResponse,
    summary="Receive an OpenClaw agent event",
    description=(
        "Accepts an arbitrary JSON object from the automation tool, "
        "attributes it to the tenant owning the bearer token, and forwards "
        "it to event ingestion. Rate limited per tenant."
    ),
    responses={
        400: {"model": WebhookResponse},
        401: {"model": WebhookResponse},
        403: {"model": WebhookResponse},
        429: {"model": WebhookResponse},
        500: {"model": WebhookResponse},
    },
)
async def receive_event(
    request: Request,
    session: DbSession,
    gateway: Gateway,
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> JSONResponse:
    result = await gateway.handle(session, authorization, request.body)
    return JSONResponse(status_code=result.status_code, content=result.body())


@router.get(
    "/events",
    response_model=list[AgentEventResponse],
    summary="List recorded agent events",
)
async def list_events(
    session: DbSession,
    scope: Scope,
    limit: int = Query(default=50, ge=1, le=200),
) -> list[AgentEvent]:
    return await list_agent_events(session, scope, limit=limit)


@router.get(
    "/events/{event_id}",
    response_model=AgentEventResponse,
    summary="Fetch one recorded agent event",
)
async def get_event(
    event_id: str,
    session: DbSession,
    scope: Scope,
) -> AgentEvent:
    return await get_agent_event(session, scope, event_id)
