"""
Dev bootstrap script — issue credentials for a tenant for local development.

Usage:
    python -m scripts.bootstrap_dev [tenant_id] [token_name]

This will:
  1. Generate an API token owned by the tenant (for OpenClaw webhooks)
  2. Sign a session JWT for the tenant (for /tokens and /openclaw/events)
  3. Print both ONCE — the API token plaintext is never stored

Run `alembic upgrade head` first so the tables exist.
"""

import asyncio
import sys

from mission_control.auth.session import issue_session_token
from mission_control.core.config import settings
from mission_control.core.database import async_session_factory, engine
from mission_control.services.token_store import create_api_token


async def main(tenant_id: str, token_name: str) -> None:
    async with async_session_factory() as session:
        created = await create_api_token(session, tenant_id, token_name)

    session_token = issue_session_token(
        tenant_id, settings.SESSION_SECRET_KEY, settings.SESSION_ALGORITHM
    )

    # ── Print results ───────────────────────────────────────
    print()
    print("=" * 60)
    print("  Dev Bootstrap Complete")
    print("=" * 60)
    print()
    print(f"  Tenant:       {tenant_id}")
    print(f"  Token ID:     {created.token_id}")
    print()
    print(f"  API Token:    {created.token}")
    print(f"  Session JWT:  {session_token}")
    print()
    print("  ⚠  Copy the API token now — it will NEVER be shown again.")
    print("=" * 60)
    print()

    await engine.dispose()


if __name__ == "__main__":
    args = sys.argv[1:]
    asyncio.run(
        main(
            tenant_id=args[0] if args else "dev-tenant",
            token_name=args[1] if len(args) > 1 else "dev",
        )
    )
