"""
Pydantic v2 schemas for API token management.

Separation:
  • ApiTokenCreate         — what the CLIENT sends (just an optional label).
  • ApiTokenCreateResponse — returned ONCE on creation, includes the plaintext.
  • ApiTokenResponse       — listing view; never the plaintext, never the hash.
"""

from __future__ import annotations

import uuid

from pydantic import BaseModel, ConfigDict, Field


class ApiTokenCreate(BaseModel):
    """Payload accepted by POST /tokens."""

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(
        default=None,
        max_length=255,
        examples=["openclaw-prod"],
        description="Human label for the token.",
    )


class ApiTokenCreateResponse(BaseModel):
    """Issued token — the only response that ever carries the plaintext."""

    model_config = ConfigDict(from_attributes=True)

    token: str = Field(description="Plaintext token. Shown once, never again.")
    token_id: uuid.UUID
    token_prefix: str
    created_at: int = Field(description="Epoch milliseconds.")


class ApiTokenResponse(BaseModel):
    """Token metadata for listings."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    token_prefix: str
    name: str | None
    created_at: int
    last_used_at: int | None


class OkResponse(BaseModel):
    ok: bool = True
