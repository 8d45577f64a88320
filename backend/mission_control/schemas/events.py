"""Pydantic v2 schemas for webhook responses and recorded agent events."""

from __future__ import annotations

import uuid
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class WebhookResponse(BaseModel):
    """Body of every /openclaw/event response."""

    ok: bool
    error: str | None = Field(
        default=None,
        examples=["Invalid token"],
    )


class AgentEventResponse(BaseModel):
    """A recorded webhook event as visible to its tenant."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    tenant_id: str | None
    event_type: str | None
    payload: dict[str, Any]
    received_at: int = Field(description="Epoch milliseconds.")


class ViewerResponse(BaseModel):
    """Who the caller is, from the tenant resolver's point of view."""

    tenant_id: str | None
    email: str | None = None
    name: str | None = None
    allow_unscoped: bool
