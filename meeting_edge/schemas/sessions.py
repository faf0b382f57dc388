"""Pydantic schemas for the session write path."""

from __future__ import annotations

from pydantic import BaseModel, Field


class PublishSessionResponse(BaseModel):
    """Confirmation returned after a session record was stored."""

    message: str = Field(
        ..., description="Human-readable confirmation."
    )
    token: str = Field(
        ..., description="Access token; read the record with ?group_id=...&token=..."
    )
