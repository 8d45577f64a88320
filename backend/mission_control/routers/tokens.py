"""
API token management — session-authenticated, scoped to the caller's tenant.

POST /tokens                    — issue a token (plaintext returned once)
GET  /tokens                    — list non-revoked tokens
POST /tokens/{token_id}/revoke  — soft-revoke (idempotent)
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from mission_control.auth.dependencies import get_current_tenant
from mission_control.core.database import get_db_session
from mission_control.models.api_token import ApiToken
from mission_control.schemas.tokens import (
    ApiTokenCreate,
    ApiTokenCreateResponse,
    ApiTokenResponse,
    OkResponse,
)
from mission_control.services.token_store import (
    CreatedToken,
    create_api_token,
    list_api_tokens,
    revoke_api_token,
)

router = APIRouter(tags=["Tokens"])

DbSession = Annotated[AsyncSession, Depends(get_db_session)]
Tenant = Annotated[str, Depends(get_current_tenant)]


@router.post(
    "",
    response_model=ApiTokenCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Issue an API token",
)
async def create_token(
    payload: ApiTokenCreate,
    session: DbSession,
    tenant_id: Tenant,
) -> CreatedToken:
    """
    The plaintext token is in this response and nowhere else —
    only its SHA-256 digest is stored.
    """
    return await create_api_token(session, tenant_id, payload.name)


@router.get(
    "",
    response_model=list[ApiTokenResponse],
    summary="List active API tokens",
)
async def list_tokens(session: DbSession, tenant_id: Tenant) -> list[ApiToken]:
    return await list_api_tokens(session, tenant_id)


@router.post(
    "/{token_id}/revoke",
    response_model=OkResponse,
    summary="Revoke an API token",
)
async def revoke_token(
    token_id: str,
    session: DbSession,
    tenant_id: Tenant,
) -> OkResponse:
    await revoke_api_token(session, tenant_id, token_id)
    return OkResponse()
