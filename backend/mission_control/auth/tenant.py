"""
Tenant resolution and record-level authorization.

Identity vs. policy:
  • resolve_tenant_id() decides WHO is acting — token tenant first,
    then session subject, else nobody.
  • TenantPolicy decides what "nobody" may see. With auth not required,
    records without a tenant are "unscoped" and readable by anyone;
    with auth required they are readable by no one.

can_access_tenant_record() is the one rule every read/write path over
tenant-scoped records must apply.
"""

from __future__ import annotations

from dataclasses import dataclass

from mission_control.auth.errors import Unauthenticated
from mission_control.auth.session import SessionIdentity
from mission_control.models.api_token import ApiToken


@dataclass(frozen=True, slots=True)
class TenantPolicy:
    """Process-wide scoping mode, injected rather than read from the environment."""

    auth_required: bool = False

    def allow_unscoped(self) -> bool:
        return not self.auth_required


@dataclass(frozen=True, slots=True)
class TenantFilter:
    """What a caller may see: its own tenant, plus unscoped rows if allowed."""

    tenant_id: str | None
    allow_unscoped: bool

    def can_access(self, record_tenant_id: str | None) -> bool:
        return can_access_tenant_record(
            record_tenant_id, self.tenant_id, self.allow_unscoped
        )


def resolve_tenant_id(
    session: SessionIdentity | None = None,
    token: ApiToken | None = None,
) -> str | None:
    """Acting tenant: a validated token wins over the session subject."""
    if token is not None:
        return token.tenant_id
    if session is not None:
        return session.subject
    return None


def require_tenant_id(tenant_id: str | None) -> str:
    """Raise Unauthenticated when no tenant could be resolved."""
    if not tenant_id:
        raise Unauthenticated()
    return tenant_id


def can_access_tenant_record(
    record_tenant_id: str | None,
    tenant_id: str | None,
    allow_unscoped: bool,
) -> bool:
    """
    Decision table:
        record tagged   → allowed only for the same tenant
        record untagged → allowed only while unscoped access is on
    """
    if record_tenant_id:
        return record_tenant_id == tenant_id
    return allow_unscoped
