from __future__ import annotations

from datetime import datetime
from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from services.sensor_service import SensorService, build_default_service


templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))


def _localtime(timestamp: int) -> str:
    return datetime.fromtimestamp(timestamp).strftime("%Y-%m-%d %H:%M:%S")


templates.env.filters["localtime"] = _localtime


def get_service() -> SensorService:
    return build_default_service()


router = APIRouter(include_in_schema=False)


@router.get("/ui", name="ui_index", response_class=HTMLResponse)
async def ui_index(
    request: Request,
    service: SensorService = Depends(get_service),
) -> HTMLResponse:
    store = service.store
    groups = [(location, store.records_in(location)) for location in store.locations()]
    return templates.TemplateResponse(
        request,
        "ui/index.html",
        {
            "host": service.renderer.host,
            "groups": groups,
            "history": service.archive.list_dates(),
        },
    )
