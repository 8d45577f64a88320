"""
FastAPI dependencies for tenant identity and webhook admission.

Interactive routes (token management, event reads):
  1. Extract Bearer token from Authorization header
  2. Verify it as a session JWT → SessionIdentity (or None)
  3. Resolve tenant id from the session subject
  4. Combine with TenantPolicy into a TenantFilter

Webhook route:
  get_webhook_gateway() assembles a WebhookGateway from the injected
  policy, clock, event sink and usage recorder. Each piece is its own
  dependency so tests can swap it via app.dependency_overrides.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Annotated

from fastapi import Depends, Header

from mission_control.auth.session import SessionIdentity, decode_session_token
from mission_control.auth.tenant import (
    TenantFilter,
    TenantPolicy,
    require_tenant_id,
    resolve_tenant_id,
)
from mission_control.core.clock import now_ms
from mission_control.core.config import Settings, get_settings
from mission_control.core.database import async_session_factory
from mission_control.services.event_ingestion import EventSink, receive_agent_event
from mission_control.services.gateway import (
    GatewayConfig,
    WebhookGateway,
    extract_bearer_token,
)
from mission_control.services.token_store import TokenUsageRecorder

AppSettings = Annotated[Settings, Depends(get_settings)]

# One recorder per process — holds references to in-flight usage stamps
usage_recorder = TokenUsageRecorder(async_session_factory)


# ── Tenant identity ─────────────────────────────────────────
async def get_session_identity(
    settings: AppSettings,
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> SessionIdentity | None:
    """Verified session claims, or None for anonymous callers."""
    token = extract_bearer_token(authorization)
    if token is None:
        return None
    return decode_session_token(
        token, settings.SESSION_SECRET_KEY, settings.SESSION_ALGORITHM
    )


Identity = Annotated[SessionIdentity | None, Depends(get_session_identity)]


def get_tenant_policy(settings: AppSettings) -> TenantPolicy:
    return TenantPolicy(auth_required=settings.MISSION_CONTROL_AUTH_REQUIRED)


async def get_tenant_filter(
    identity: Identity,
    policy: Annotated[TenantPolicy, Depends(get_tenant_policy)],
) -> TenantFilter:
    """Scope of records visible to the caller."""
    return TenantFilter(
        tenant_id=resolve_tenant_id(session=identity),
        allow_unscoped=policy.allow_unscoped(),
    )


async def get_current_tenant(identity: Identity) -> str:
    """Tenant id of the caller — raises Unauthenticated if there is none."""
    return require_tenant_id(resolve_tenant_id(session=identity))


# ── Webhook gateway ─────────────────────────────────────────
def get_gateway_config(settings: AppSettings) -> GatewayConfig:
    return GatewayConfig.from_settings(settings)


def get_usage_recorder() -> TokenUsageRecorder:
    return usage_recorder


def get_event_sink() -> EventSink:
    return receive_agent_event


def get_clock() -> Callable[[], int]:
    return now_ms


def get_webhook_gateway(
    config: Annotated[GatewayConfig, Depends(get_gateway_config)],
    recorder: Annotated[TokenUsageRecorder, Depends(get_usage_recorder)],
    event_sink: Annotated[EventSink, Depends(get_event_sink)],
    clock: Annotated[Callable[[], int], Depends(get_clock)],
) -> WebhookGateway:
    return WebhookGateway(
        config=config,
        usage_recorder=recorder,
        event_sink=event_sink,
        clock=clock,
    )
