"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Body of every 400 response."""

    error: str = Field(..., description="Human readable failure reason.")


class HealthResponse(BaseModel):
    status: str = "ok"
