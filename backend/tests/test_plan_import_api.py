from __future__ import annotations

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from dash_backend.core.config import settings
from dash_backend.db import Base
from dash_backend.db.deps import get_db
from dash_backend.db.models import Domain, Plan, Playbook, Task
from dash_backend.main import app
from dash_backend.services import domain_store

PLAN_YAML = """\
dash_version: 1
plan:
  name: Calm Evenings
  duration_weeks: 2
domains:
  - type: evening
    trigger_time: 9:30
    playbooks:
      - name: Wind down
        tasks:
          - title: Phone in the other room
            duration: 1
          - title: Read fiction
            duration: 500
"""


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
    monkeypatch.setattr(settings, "notifications_enabled", False)
    with TestClient(app) as test_client:
        yield test_client, TestingSessionLocal
    app.dependency_overrides.clear()


def _validated_plan(client: TestClient) -> dict:
    response = client.post("/imports/validate", json={"text": PLAN_YAML})
    assert response.status_code == 200
    return response.json()["plan"]


def _seed_evening(session_factory, task_count: int = 3):
    session = session_factory()
    try:
        domain = domain_store.create_domain(session, "evening", "22:00")
        playbook = domain_store.create_playbook(
            session,
            domain_id=domain.id,
            name="Old evening",
            plan_id=None,
            week_start=None,
            week_end=None,
            active_days=None,
            import_source=None,
        )
        for index in range(task_count):
            domain_store.create_task(
                session,
                playbook_id=playbook.id,
                title=f"Old {index}",
                description=None,
                duration_minutes=5,
                sort_order=index,
            )
        domain_store.update_domain_active_playbook(session, domain.id, playbook.id)
        session.commit()
        return domain.id
    finally:
        session.close()


def test_validate_returns_preview_and_issues(client):
    test_client, _ = client
    response = test_client.post("/imports/validate", json={"text": PLAN_YAML}, headers={"X-Request-Id": "req-1"})

    assert response.status_code == 200
    assert response.headers["X-Request-Id"] == "req-1"
    body = response.json()
    assert body["success"] is True
    assert body["error_message"] is None
    assert body["request_id"] == "req-1"
    assert body["issue_counts"] == {"error": 0, "warning": 2, "info": 0}
    assert [issue["field"] for issue in body["issues"]] == [
        "domains[0].playbooks[0].tasks[1].duration",
        "domains[0].playbooks[0]",
    ]
    assert body["issues"][0]["fixed_value"] == 120
    domain = body["plan"]["domains"][0]
    assert domain["trigger_time"] == "09:30"
    assert [task["duration_minutes"] for task in domain["playbooks"][0]["tasks"]] == [1, 120]


def test_validate_reports_failures_in_body(client):
    test_client, _ = client
    response = test_client.post("/imports/validate", json={"text": "dash_version: 3\nplan: {name: x}\n"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is False
    assert body["plan"] is None
    assert body["issue_counts"]["error"] == 2
    assert {issue["field"] for issue in body["issues"]} == {"dash_version", "domains"}


def test_validate_reports_parse_errors(client):
    test_client, _ = client
    body = test_client.post("/imports/validate", json={"text": "plan: [oops\n"}).json()
    assert body["success"] is False
    assert body["issues"] == []
    assert body["error_message"].startswith("Could not parse YAML")


def test_validate_returns_issues_for_binary_scalars(client):
    test_client, _ = client
    text = PLAN_YAML.replace("duration: 1\n", "duration: !!binary /w==\n")

    response = test_client.post("/imports/validate", json={"text": text})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    [binary_issue] = [i for i in body["issues"] if i["field"] == "domains[0].playbooks[0].tasks[0].duration"]
    assert binary_issue["severity"] == "info"
    assert binary_issue["original_value"] == repr(b"\xff")
    assert binary_issue["fixed_value"] == 5


def test_validate_rejects_blank_text(client):
    test_client, _ = client
    response = test_client.post("/imports/validate", json={"text": "   "})
    assert response.status_code == 422


def test_conflicts_then_replace(client):
    test_client, session_factory = client
    domain_id = _seed_evening(session_factory)
    plan = _validated_plan(test_client)

    conflicts = test_client.post("/imports/conflicts", json={"plan": plan})
    assert conflicts.status_code == 200
    assert conflicts.json()["conflicts"] == [
        {
            "domain_type": "evening",
            "existing_playbook_name": "Old evening",
            "existing_playbook_count": 1,
            "new_playbook_count": 1,
        }
    ]

    saved = test_client.post("/imports/save", json={"plan": plan, "resolutions": {"evening": "replace"}})
    assert saved.status_code == 200
    body = saved.json()
    assert body["success"] is True
    assert body["domains_created"] == 0
    assert body["playbooks_created"] == 1
    assert body["tasks_created"] == 2
    assert body["notifications"] == [
        {"domain_type": "evening", "status": "skipped", "reason": "notifications disabled"}
    ]

    session = session_factory()
    try:
        domain = session.get(Domain, domain_id)
        assert domain.trigger_time == "09:30"
        assert session.query(Playbook).count() == 1
        assert session.query(Task).count() == 2
        assert session.query(Plan).count() == 1
    finally:
        session.close()

    plan_response = test_client.get(f"/plans/{body['plan_id']}")
    assert plan_response.status_code == 200
    assert plan_response.json()["name"] == "Calm Evenings"
    assert plan_response.json()["current_week"] == 1


def test_save_with_everything_skipped(client):
    test_client, session_factory = client
    _seed_evening(session_factory)
    plan = _validated_plan(test_client)

    body = test_client.post("/imports/save", json={"plan": plan, "resolutions": {"evening": "skip"}}).json()

    assert body["success"] is False
    assert body["plan_id"] is None
    assert body["error"] == "All domains were skipped. Nothing to import."
    assert body["notifications"] == []


def test_save_rejects_out_of_bounds_plan(client):
    test_client, _ = client
    plan = _validated_plan(test_client)
    plan["domains"][0]["playbooks"][0]["tasks"][0]["duration_minutes"] = 500

    response = test_client.post("/imports/save", json={"plan": plan})
    assert response.status_code == 422


def test_save_rejects_unknown_resolution(client):
    test_client, _ = client
    plan = _validated_plan(test_client)
    response = test_client.post("/imports/save", json={"plan": plan, "resolutions": {"evening": "merge"}})
    assert response.status_code == 422


def test_prompts_endpoint(client):
    test_client, _ = client

    fresh = test_client.get("/imports/prompts").json()
    assert fresh["context"] == "fresh"
    assert "dash_version: 1" in fresh["prompt"]
    assert len(fresh["suggestions"]) == 6

    goal = test_client.get("/imports/prompts", params={"goal": "Run a 5k by June"}).json()
    assert "Run a 5k by June" in goal["prompt"]

    quick = test_client.get("/imports/prompts", params={"context": "quick"}).json()
    assert quick["context"] == "quick"
    assert quick["prompt"] != fresh["prompt"]

    assert test_client.get("/imports/prompts", params={"context": "other"}).status_code == 422


def test_unknown_plan_returns_404(client):
    test_client, _ = client
    response = test_client.get(f"/plans/{uuid4()}")
    assert response.status_code == 404
