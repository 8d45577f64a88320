"""
Database-backed fixed-window rate limiter.

Admission control per limiter key (tenant id, or ANONYMOUS_KEY) using a
single row in rate_limit_windows.

Design decisions:
  • Fixed 60 s windows anchored at the first request of the window —
    no sliding, no carry-over of unused quota.
  • Check BEFORE increment — rejected requests (429) don't consume quota.
  • Every decision is one conditional UPDATE (compare-and-swap) judged by
    its rowcount, so the store itself serializes concurrent checks on any
    dialect, SQLite included. Different keys never contend.
  • A lost race on the first INSERT for a key surfaces as IntegrityError;
    the check is retried once against the row the winner created.
"""

from __future__ import annotations

import logging

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from mission_control.core.config import DEFAULT_RATE_LIMIT_PER_MINUTE
from mission_control.models.rate_limit import RateLimitWindow

logger = logging.getLogger(__name__)

WINDOW_MS = 60_000
ANONYMOUS_KEY = "anonymous"
DEFAULT_LIMIT = DEFAULT_RATE_LIMIT_PER_MINUTE


def limiter_key(tenant_id: str | None) -> str:
    """Key under which a caller's window is tracked."""
    return tenant_id or ANONYMOUS_KEY


def effective_limit(limit: int | None) -> int:
    """Invalid or non-positive limits fall back to the default."""
    if limit is None or limit <= 0:
        return DEFAULT_LIMIT
    return limit


async def _swap(session: AsyncSession, stmt) -> bool:
    result = await session.execute(stmt.execution_options(synchronize_session=False))
    return result.rowcount == 1


async def _check_and_increment_once(
    session: AsyncSession,
    key: str,
    limit: int,
    now: int,
) -> bool:
    stale_before = now - WINDOW_MS

    # ── Window rolled over — restart it with this request ───
    rolled = await _swap(
        session,
        update(RateLimitWindow)
        .where(
            RateLimitWindow.key == key,
            RateLimitWindow.window_start_ms <= stale_before,
        )
        .values(window_start_ms=now, count=1),
    )
    if rolled:
        await session.commit()
        return True

    # ── Live window with quota left ─────────────────────────
    counted = await _swap(
        session,
        update(RateLimitWindow)
        .where(
            RateLimitWindow.key == key,
            RateLimitWindow.window_start_ms > stale_before,
            RateLimitWindow.count < limit,
        )
        .values(count=RateLimitWindow.count + 1),
    )
    if counted:
        await session.commit()
        return True

    # ── Over quota — leave the row untouched ────────────────
    existing = await session.scalar(
        select(RateLimitWindow.key).where(RateLimitWindow.key == key)
    )
    if existing is not None:
        await session.rollback()
        return False

    # ── First request for this key ──────────────────────────
    session.add(RateLimitWindow(key=key, window_start_ms=now, count=1))
    await session.commit()
    return True


async def check_and_increment(
    session: AsyncSession,
    key: str,
    limit: int,
    now: int,
) -> bool:
    """
    Admit or reject one request for `key` at time `now` (epoch ms).

    Returns True when admitted (and counted), False when rejected.
    """
    limit = effective_limit(limit)
    try:
        return await _check_and_increment_once(session, key, limit, now)
    except IntegrityError:
        await session.rollback()
        logger.debug("Concurrent window creation for %s — retrying", key)
        return await _check_and_increment_once(session, key, limit, now)
