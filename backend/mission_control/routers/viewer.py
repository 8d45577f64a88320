"""GET /viewer — the caller's tenant, session profile and scoping mode."""

from typing import Annotated

from fastapi import APIRouter, Depends

from mission_control.auth.dependencies import get_session_identity, get_tenant_filter
from mission_control.auth.session import SessionIdentity
from mission_control.auth.tenant import TenantFilter
from mission_control.schemas.events import ViewerResponse

router = APIRouter(tags=["Tenant"])


@router.get("", response_model=ViewerResponse, summary="Describe the current caller")
async def get_viewer(
    scope: Annotated[TenantFilter, Depends(get_tenant_filter)],
    identity: Annotated[SessionIdentity | None, Depends(get_session_identity)],
) -> ViewerResponse:
    return ViewerResponse(
        tenant_id=scope.tenant_id,
        email=identity.email if identity else None,
        name=identity.name if identity else None,
        allow_unscoped=scope.allow_unscoped,
    )
