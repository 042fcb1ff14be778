from __future__ import annotations

from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from dash_backend.core.config import settings
from dash_backend.db import Base
from dash_backend.db.deps import get_db
from dash_backend.db.models import Plan
from dash_backend.main import app
from dash_backend.services import plan_store


@pytest.fixture()
def client(monkeypatch):
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )

    @event.listens_for(engine, "connect")
    def set_fk(conn, record):  # pragma: no cover
        cursor = conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    Base.metadata.create_all(bind=engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    monkeypatch.setattr(settings, "debug", True)
    with TestClient(app) as test_client:
        yield test_client, TestingSessionLocal
    app.dependency_overrides.clear()


def _seed_plan(session_factory, duration_weeks=4):
    session = session_factory()
    try:
        plan = plan_store.create_plan(
            session,
            name="Four Weeks",
            description=None,
            duration_weeks=duration_weeks,
            import_date=date(2024, 1, 3),
        )
        session.commit()
        return plan.id
    finally:
        session.close()


def test_jobs_config(client):
    test_client, _ = client
    resp = test_client.get("/jobs")
    assert resp.status_code == 200
    body = resp.json()
    assert "scheduler_enabled" in body
    assert body["schedule"]["week_progression_day"] == settings.week_progression_day
    assert body["request_id"]


def test_week_progression_run_now(client):
    test_client, session_factory = client
    plan_id = _seed_plan(session_factory)

    resp = test_client.post("/jobs/week-progression", json={"today": "2024-01-10"})

    assert resp.status_code == 200
    data = resp.json()
    assert data["job"] == "week_progression"
    assert data["plans_checked"] == 1
    assert data["plans_advanced"] == 1
    assert data["request_id"]

    session = session_factory()
    try:
        assert session.get(Plan, plan_id).current_week == 2
    finally:
        session.close()


def test_week_progression_forbidden_outside_debug(client, monkeypatch):
    test_client, _ = client
    monkeypatch.setattr(settings, "debug", False)
    resp = test_client.post("/jobs/week-progression", json={})
    assert resp.status_code == 403
