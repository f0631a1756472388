"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class ArchiveStatus(BaseModel):
    """State of the raw log and of the last archival actions."""

    log_open: bool
    last_write: int = Field(..., ge=0, description="Unix time of the last raw log write.")
    last_move: int = Field(..., ge=0, description="Unix time of the last daily move.")
    last_snapshot: int = Field(..., ge=0, description="Unix time of the last snapshot copy.")
    last_error: Optional[str] = None


class ServiceStatus(BaseModel):
    """Summary of the in-memory sensor store."""

    host: str
    sensor_count: int = Field(..., ge=0)
    location_count: int = Field(..., ge=0)
    event_count: int = Field(..., ge=0)
    event_capacity: int = Field(..., ge=1)
    archive: ArchiveStatus
