"""HTTP route definitions for the service."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from app.schemas import ArchiveStatus, ServiceStatus
from services.sensor_service import SensorService, build_default_service

router = APIRouter()

_JSON = "application/json"


def get_service() -> SensorService:
    return build_default_service()


@router.get(
    "/sensor/current",
    summary="Latest value of every sensor, grouped by location.",
)
async def sensor_current(service: SensorService = Depends(get_service)) -> Response:
    return Response(content=service.renderer.latest(), media_type=_JSON)


@router.get(
    "/sensor/recent",
    summary="Most recent sensor updates, newest first.",
)
async def sensor_recent(
    limit: Optional[int] = Query(None, ge=1, description="Maximum number of events."),
    service: SensorService = Depends(get_service),
) -> Response:
    return Response(content=service.renderer.recent(limit=limit), media_type=_JSON)


@router.get(
    "/sensor/history",
    summary="Dates for which an archive file is available.",
)
async def sensor_history(service: SensorService = Depends(get_service)) -> Response:
    return Response(content=service.renderer.history(), media_type=_JSON)


@router.get(
    "/sensor/status",
    response_model=ServiceStatus,
    summary="Store and archival status.",
)
async def sensor_status(service: SensorService = Depends(get_service)) -> ServiceStatus:
    scheduler = service.status()
    return ServiceStatus(
        host=service.renderer.host,
        sensor_count=len(service.store),
        location_count=len(service.store.locations()),
        event_count=len(service.store.ring),
        event_capacity=service.store.ring.capacity,
        archive=ArchiveStatus(
            log_open=scheduler.log_open,
            last_write=scheduler.last_write,
            last_move=scheduler.last_move,
            last_snapshot=scheduler.last_snapshot,
            last_error=scheduler.last_error,
        ),
    )


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /sensor/current for the latest readings."}
