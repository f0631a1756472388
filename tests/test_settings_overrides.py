from __future__ import annotations

from typing import Iterable

from services.sensor_service import build_default_service
from settings import get_settings


def _clear_caches(caches: Iterable) -> None:
    for cache in caches:
        cache.cache_clear()


def test_defaults_apply_without_environment(monkeypatch) -> None:
    for name in (
        "HOUSESENSOR_CONFIG",
        "HOUSESENSOR_LOG_PATH",
        "HOUSESENSOR_ARCHIVE_DIR",
        "HOUSESENSOR_EVENT_DEPTH",
        "HOUSESENSOR_QUIET_PERIOD",
        "HOUSESENSOR_HOST",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()

    try:
        settings = get_settings()
        assert settings.config_path == "/etc/house/sensor.config"
        assert settings.raw_log_path == "/dev/shm/housesensor.csv"
        assert settings.archive_dir == "/var/lib/house/sensor"
        assert settings.event_depth == 8192
        assert settings.quiet_period == 10
        assert settings.host_name is None
        assert settings.log_level == "INFO"
    finally:
        get_settings.cache_clear()


def test_invalid_numbers_fall_back_to_defaults(monkeypatch) -> None:
    monkeypatch.setenv("HOUSESENSOR_EVENT_DEPTH", "-4")
    monkeypatch.setenv("HOUSESENSOR_QUIET_PERIOD", "soon")
    monkeypatch.setenv("HOUSESENSOR_TICK_INTERVAL", "   ")
    get_settings.cache_clear()

    try:
        settings = get_settings()
        assert settings.event_depth == 8192
        assert settings.quiet_period == 10
        assert settings.tick_interval == 1.0
    finally:
        get_settings.cache_clear()


def test_environment_overrides_apply(monkeypatch, tmp_path) -> None:
    config_path = tmp_path / "sensor.config"
    config_path.write_text("w1 28-0001 kitchen temp Celsius\n")
    raw_log = tmp_path / "shm" / "raw.csv"
    archive_dir = tmp_path / "archive"

    monkeypatch.setenv("HOUSESENSOR_CONFIG", str(config_path))
    monkeypatch.setenv("HOUSESENSOR_LOG_PATH", str(raw_log))
    monkeypatch.setenv("HOUSESENSOR_ARCHIVE_DIR", str(archive_dir))
    monkeypatch.setenv("HOUSESENSOR_ARCHIVE_EXT", ".log")
    monkeypatch.setenv("HOUSESENSOR_EVENT_DEPTH", "32")
    monkeypatch.setenv("HOUSESENSOR_HOST", "custom-host")
    monkeypatch.setenv("HOUSESENSOR_W1_ROOT", str(tmp_path / "w1"))
    monkeypatch.setenv("LOG_LEVEL", "debug")

    caches = (get_settings, build_default_service)
    _clear_caches(caches)

    service = build_default_service()

    try:
        assert get_settings().log_level == "DEBUG"
        assert len(service.store) == 1
        assert service.raw_log.path == raw_log
        assert service.archive.root_path == archive_dir
        assert service.archive.extension == "log"
        assert service.store.ring.capacity == 32
        assert service.renderer.host == "custom-host"
        assert len(service.producers) == 1
    finally:
        service.shutdown()
        _clear_caches(caches)
