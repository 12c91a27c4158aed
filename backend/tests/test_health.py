from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from app.api.routes import health


def test_health_endpoints(client):
    assert client.get("/api/health").json() == {"status": "ok"}

    live = client.get("/api/health/live")
    assert live.status_code == 200
    assert live.json()["status"] == "ok"

    ready = client.get("/api/health/ready")
    assert ready.status_code in {200, 503}
    assert "database" in ready.json()


def test_ready_reports_schema(client, engine, monkeypatch):
    monkeypatch.setattr(health, "engine", engine)

    ready = client.get("/api/health/ready")

    assert ready.status_code == 200
    database = ready.json()["database"]
    assert database["ok"] is True
    assert database["schema_ok"] is True


def test_ready_is_degraded_without_tables(client, monkeypatch):
    empty = create_engine("sqlite+pysqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    monkeypatch.setattr(health, "engine", empty)

    ready = client.get("/api/health/ready")

    assert ready.status_code == 503
    payload = ready.json()
    assert payload["status"] == "degraded"
    assert "timetable_slots" in payload["database"]["missing_tables"]
    empty.dispose()
