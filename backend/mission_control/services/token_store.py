"""
API token store — the only code that writes the api_tokens table.

Operations:
  • create_api_token   — issue a token for the caller's tenant (plaintext returned once)
  • list_api_tokens    — non-revoked tokens of one tenant
  • revoke_api_token   — soft-revoke, idempotent, tenant-checked
  • lookup_token_by_hash — trusted gateway path only, never exposed to users
  • mark_token_used    — stamp last_used_at

Usage stamps are best effort: TokenUsageRecorder runs them as detached
tasks on their own session so a failure can never fail the webhook call.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from mission_control.auth.errors import TokenNotFound
from mission_control.auth.hashing import display_prefix, generate_api_token
from mission_control.auth.tenant import require_tenant_id
from mission_control.core.clock import now_ms
from mission_control.models.api_token import ApiToken

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CreatedToken:
    """Result of token creation — the only place the plaintext ever appears."""

    token: str
    token_id: uuid.UUID
    token_prefix: str
    created_at: int


async def create_api_token(
    session: AsyncSession,
    tenant_id: str | None,
    name: str | None = None,
    now: int | None = None,
) -> CreatedToken:
    """Issue a new token owned by `tenant_id`. Raises Unauthenticated without one."""
    owner = require_tenant_id(tenant_id)
    raw_token, token_hash = generate_api_token()
    created_at = now if now is not None else now_ms()

    api_token = ApiToken(
        token_hash=token_hash,
        token_prefix=display_prefix(raw_token),
        tenant_id=owner,
        name=name,
        created_at=created_at,
    )
    session.add(api_token)
    await session.commit()

    logger.info(
        "Issued API token %s (prefix=%s) for tenant %s",
        api_token.id, api_token.token_prefix, owner,
    )
    return CreatedToken(
        token=raw_token,
        token_id=api_token.id,
        token_prefix=api_token.token_prefix,
        created_at=created_at,
    )


async def list_api_tokens(session: AsyncSession, tenant_id: str | None) -> list[ApiToken]:
    """Non-revoked tokens owned by the caller's tenant, oldest first."""
    owner = require_tenant_id(tenant_id)
    stmt = (
        select(ApiToken)
        .where(ApiToken.tenant_id == owner, ApiToken.revoked_at.is_(None))
        .order_by(ApiToken.created_at, ApiToken.id)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def revoke_api_token(
    session: AsyncSession,
    tenant_id: str | None,
    token_id: uuid.UUID | str,
    now: int | None = None,
) -> ApiToken:
    """
    Soft-revoke a token.

    Tokens of other tenants, and ids that are not UUIDs, are reported as
    missing. Revoking twice is a no-op: the WHERE revoked_at IS NULL
    guard keeps the first timestamp.
    """
    owner = require_tenant_id(tenant_id)
    try:
        token_id = uuid.UUID(str(token_id))
    except ValueError:
        raise TokenNotFound() from None

    api_token = await session.get(ApiToken, token_id)
    if api_token is None or api_token.tenant_id != owner:
        raise TokenNotFound()

    if api_token.revoked_at is None:
        await session.execute(
            update(ApiToken)
            .where(ApiToken.id == token_id, ApiToken.revoked_at.is_(None))
            .values(revoked_at=now if now is not None else now_ms())
        )
        await session.commit()
        await session.refresh(api_token)
        logger.info("Revoked API token %s for tenant %s", token_id, owner)

    return api_token


async def lookup_token_by_hash(session: AsyncSession, token_hash: str) -> ApiToken | None:
    """Exact-match lookup by digest. Returns revoked tokens too — callers decide."""
    stmt = select(ApiToken).where(ApiToken.token_hash == token_hash)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def mark_token_used(
    session: AsyncSession,
    token_id: uuid.UUID,
    now: int | None = None,
) -> None:
    """Stamp last_used_at. Revoked tokens are left untouched."""
    await session.execute(
        update(ApiToken)
        .where(ApiToken.id == token_id, ApiToken.revoked_at.is_(None))
        .values(last_used_at=now if now is not None else now_ms())
    )
    await session.commit()


class TokenUsageRecorder:
    """
    Fire-and-forget last_used_at stamps.

    Each stamp runs as its own asyncio task with its own session; errors
    are logged and dropped. Pending tasks are kept referenced until done.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._session_factory = session_factory
        self._clock = clock
        self._pending: set[asyncio.Task[None]] = set()

    def schedule(self, token_id: uuid.UUID) -> None:
        """Record usage in the background; never raises."""
        try:
            task = asyncio.create_task(self._record(token_id, self._clock()))
        except Exception:
            logger.exception("Could not schedule usage stamp for token %s", token_id)
            return
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _record(self, token_id: uuid.UUID, used_at: int) -> None:
        try:
            async with self._session_factory() as session:
                await mark_token_used(session, token_id, used_at)
        except Exception:
            logger.exception("Failed to record usage for token %s", token_id)

    async def wait_idle(self) -> None:
        """Wait for all scheduled stamps (shutdown and tests)."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
