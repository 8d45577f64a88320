"""
OpenClaw webhook gateway — admission pipeline for POST /openclaw/event.

Per request:
  1. Extract "Bearer <token>" (absence is not an error)
  2. Token present → hash, look up; unknown or revoked → 403
     valid → tenant = token.tenant_id, stamp last_used_at (detached)
  3. auth required and no tenant → 401
  4. Fixed-window rate limit keyed by tenant (or "anonymous") → 429
  5. Parse JSON object body, forward body + tenantId to the event sink → 200

Security:
  • Unknown and revoked tokens both answer "Invalid token" — callers cannot
    tell a never-issued secret from a revoked one.
  • Plaintext tokens are NEVER logged.

Policy (auth_required, limit) and the clock are injected at construction
so both scoping modes can run side by side.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from fastapi import status
from sqlalchemy.ext.asyncio import AsyncSession

from mission_control.auth.errors import (
    AuthorizationRequired,
    EventIngestionFailed,
    InvalidEventBody,
    InvalidToken,
    MissionControlError,
    RateLimitExceeded,
)
from mission_control.auth.hashing import hash_api_token
from mission_control.auth.tenant import resolve_tenant_id
from mission_control.core.clock import now_ms
from mission_control.core.config import Settings
from mission_control.services.event_ingestion import (
    TENANT_FIELD,
    EventSink,
    receive_agent_event,
)
from mission_control.services.rate_limiter import (
    DEFAULT_LIMIT,
    check_and_increment,
    effective_limit,
    limiter_key,
)
from mission_control.services.token_store import TokenUsageRecorder, lookup_token_by_hash

logger = logging.getLogger(__name__)

BEARER_SCHEME = "bearer"


@dataclass(frozen=True, slots=True)
class GatewayConfig:
    """Admission policy for the webhook route."""

    auth_required: bool = False
    rate_limit_per_minute: int = DEFAULT_LIMIT

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "rate_limit_per_minute", effective_limit(self.rate_limit_per_minute)
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> GatewayConfig:
        return cls(
            auth_required=settings.MISSION_CONTROL_AUTH_REQUIRED,
            rate_limit_per_minute=settings.MISSION_CONTROL_RATE_LIMIT_PER_MINUTE,
        )


@dataclass(frozen=True, slots=True)
class GatewayResponse:
    """Outcome of one webhook delivery — rendered as `{ok, error?}`."""

    status_code: int
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def from_error(cls, exc: MissionControlError) -> GatewayResponse:
        return cls(status_code=exc.status_code, error=str(exc))

    def body(self) -> dict[str, Any]:
        if self.error is None:
            return {"ok": True}
        return {"ok": False, "error": self.error}


def extract_bearer_token(authorization: str | None) -> str | None:
    """Token from an `Authorization: Bearer <token>` header, else None."""
    if not authorization:
        return None

    parts = authorization.split(" ", maxsplit=1)
    if len(parts) != 2 or parts[0].lower() != BEARER_SCHEME:
        return None

    token = parts[1].strip()
    return token or None


def parse_event_body(raw_body: bytes) -> dict[str, Any]:
    """Decode the webhook body. Anything but a JSON object is rejected."""
    try:
        body = json.loads(raw_body)
    except (ValueError, UnicodeDecodeError) as exc:
        raise InvalidEventBody() from exc

    if not isinstance(body, dict):
        raise InvalidEventBody()
    return body


class WebhookGateway:
    """Composes token store, tenant resolver and rate limiter for one route."""

    def __init__(
        self,
        config: GatewayConfig,
        usage_recorder: TokenUsageRecorder,
        event_sink: EventSink = receive_agent_event,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.config = config
        self.usage_recorder = usage_recorder
        self.event_sink = event_sink
        self.clock = clock

    async def handle(
        self,
        session: AsyncSession,
        authorization: str | None,
        read_body: Callable[[], Awaitable[bytes]],
    ) -> GatewayResponse:
        """Run the admission pipeline for one delivery."""
        try:
            tenant_id = await self._authenticate(session, authorization)
            await self._admit(session, tenant_id)
            event = parse_event_body(await read_body())
        except MissionControlError as exc:
            return GatewayResponse.from_error(exc)

        # ── Forward ─────────────────────────────────────────
        forwarded = {**event, TENANT_FIELD: tenant_id}
        try:
            await self.event_sink(session, forwarded)
        except Exception:
            await session.rollback()
            logger.exception("Event ingestion failed for tenant %s", tenant_id)
            return GatewayResponse.from_error(EventIngestionFailed())

        return GatewayResponse(status_code=status.HTTP_200_OK)

    async def _authenticate(
        self,
        session: AsyncSession,
        authorization: str | None,
    ) -> str | None:
        """Resolve the acting tenant from the bearer token, if any."""
        raw_token = extract_bearer_token(authorization)
        tenant_id: str | None = None

        if raw_token is not None:
            api_token = await lookup_token_by_hash(session, hash_api_token(raw_token))
            if api_token is None or api_token.is_revoked:
                logger.info("Rejected webhook delivery: invalid token")
                raise InvalidToken()

            tenant_id = resolve_tenant_id(token=api_token)
            self.usage_recorder.schedule(api_token.id)

        if self.config.auth_required and not tenant_id:
            logger.info("Rejected webhook delivery: authorization required")
            raise AuthorizationRequired()

        return tenant_id

    async def _admit(self, session: AsyncSession, tenant_id: str | None) -> None:
        key = limiter_key(tenant_id)
        admitted = await check_and_increment(
            session, key, self.config.rate_limit_per_minute, self.clock()
        )
        if not admitted:
            logger.warning("Rate limit exceeded for %s", key)
            raise RateLimitExceeded()
