from __future__ import annotations
import asyncio
import logging
import time
from contextlib import asynccontextmanager, suppress
from typing import AsyncIterator

from fastapi import FastAPI

from app.api import router
from app.web import router as web_router
from logging_config import configure_logging
from services.sensor_service import SensorService, build_default_service
from settings import get_settings

logger = logging.getLogger(__name__)


async def _tick_loop(service: SensorService, interval: float) -> None:
    while True:
        try:
            service.background(time.time())
        except Exception:  # noqa: BLE001 - keep ticking after a failed pass
            logger.exception("Background tick failed")
        await asyncio.sleep(interval)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    service = build_default_service()
    ticker = asyncio.create_task(_tick_loop(service, get_settings().tick_interval))
    try:
        yield
    finally:
        ticker.cancel()
        with suppress(asyncio.CancelledError):
            await ticker
        service.shutdown()
        build_default_service.cache_clear()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="House Sensor",
        description="Latest sensor readings, recent updates and archive listing.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(router)
    app.include_router(web_router)
    return app

app = create_app()
