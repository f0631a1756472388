from pathlib import Path
from typing import Iterator, List

import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from datastore.sensor_config import parse_config
from services.sensor_service import SensorService

_CONFIG = [
    "OPTION w1.scan.period 10\n",
    "w1 28-0001 kitchen temp Celsius\n",
    "w1 28-0002 garage temp\n",
]


@pytest.fixture
def service(tmp_path: Path) -> SensorService:
    return SensorService(
        config=parse_config(_CONFIG),
        raw_log_path=tmp_path / "shm" / "raw.csv",
        archive_dir=tmp_path / "archive",
        event_depth=8,
        host="test-host",
    )


@pytest.fixture
def api_client(service: SensorService, monkeypatch) -> Iterator[TestClient]:
    built: List[SensorService] = []

    def build_test_service(config_path: str | None = None) -> SensorService:
        built.append(service)
        return service

    build_test_service.cache_clear = built.clear  # type: ignore[attr-defined]

    monkeypatch.setattr("app.main.build_default_service", build_test_service)
    monkeypatch.setattr("app.api.build_default_service", build_test_service)
    monkeypatch.setattr("app.web.build_default_service", build_test_service)

    app = create_app()
    with TestClient(app) as client:
        yield client


def test_current_view(api_client: TestClient, service: SensorService) -> None:
    service.store.set("w1", "28-0001", "21.5")

    response = api_client.get("/sensor/current")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/json")
    payload = response.json()
    assert payload["host"] == "test-host"
    kitchen = payload["sensor"]["kitchen"]
    assert kitchen[0]["name"] == "temp"
    assert kitchen[0]["value"] == 21.5
    assert kitchen[0]["unit"] == "Celsius"
    assert kitchen[0]["timestamp"] > 0
    assert payload["sensor"]["garage"] == [{"name": "temp", "value": None}]


def test_recent_view_with_limit(api_client: TestClient, service: SensorService) -> None:
    service.store.set("w1", "28-0001", "20")
    service.store.set("w1", "28-0002", "hot")

    response = api_client.get("/sensor/recent", params={"limit": 1})

    assert response.status_code == 200
    recent = response.json()["sensor"]["recent"]
    assert len(recent) == 1
    assert recent[0]["location"] == "garage"
    assert recent[0]["value"] == "hot"


def test_recent_rejects_invalid_limit(api_client: TestClient) -> None:
    response = api_client.get("/sensor/recent", params={"limit": 0})

    assert response.status_code == 422


def test_history_view(api_client: TestClient, service: SensorService) -> None:
    (service.archive.root_path / "2024-03-01.csv").write_text("x")

    response = api_client.get("/sensor/history")

    assert response.status_code == 200
    assert response.json()["sensor"]["history"] == ["2024-03-01"]


def test_status_endpoint(api_client: TestClient, service: SensorService) -> None:
    service.store.set("w1", "28-0002", "19")

    response = api_client.get("/sensor/status")

    assert response.status_code == 200
    payload = response.json()
    assert payload["host"] == "test-host"
    assert payload["sensor_count"] == 2
    assert payload["location_count"] == 2
    assert payload["event_count"] == 1
    assert payload["event_capacity"] == 8
    assert payload["archive"]["log_open"] is True
    assert payload["archive"]["last_error"] is None


def test_health_and_root(api_client: TestClient) -> None:
    assert api_client.get("/health").json() == {"status": "ok"}
    assert api_client.get("/").json()["status"] == "ok"


def test_ui_page(api_client: TestClient, service: SensorService) -> None:
    service.store.set("w1", "28-0001", "21.5")

    response = api_client.get("/ui")

    assert response.status_code == 200
    assert "kitchen" in response.text
    assert "21.5" in response.text
    assert "never" in response.text


def test_lifespan_closes_raw_log(service: SensorService, monkeypatch) -> None:
    def build_test_service(config_path: str | None = None) -> SensorService:
        return service

    build_test_service.cache_clear = lambda: None  # type: ignore[attr-defined]
    monkeypatch.setattr("app.main.build_default_service", build_test_service)

    app = create_app()
    with TestClient(app):
        service.store.set("w1", "28-0001", "21.5")
        assert service.raw_log.is_open

    assert not service.raw_log.is_open
