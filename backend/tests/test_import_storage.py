from __future__ import annotations

import json

import pytest
from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from dash_backend.db import Base
from dash_backend.db.models import Domain, Plan, Playbook, Task
from dash_backend.services import domain_store
from dash_backend.services.import_conflicts import detect_conflicts
from dash_backend.services.import_types import ParsedDomain, ParsedPlan, ParsedPlaybook, ParsedTask
from dash_backend.services.import_writer import ALL_SKIPPED_MESSAGE, save_parsed_plan


@pytest.fixture()
def db_session():
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

    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


def _tasks(count, prefix="Task"):
    return [ParsedTask(title=f"{prefix} {i + 1}", description=None, duration_minutes=5) for i in range(count)]


def _domain(domain_type, *playbooks, trigger_time="07:00"):
    return ParsedDomain(type=domain_type, trigger_time=trigger_time, playbooks=list(playbooks))


def _playbook(name, task_count=1, **kwargs):
    return ParsedPlaybook(
        name=name,
        week_start=kwargs.get("week_start"),
        week_end=kwargs.get("week_end"),
        active_days=kwargs.get("active_days"),
        tasks=_tasks(task_count, prefix=name),
    )


def _plan(*domains, name="Imported", duration_weeks=None):
    return ParsedPlan(
        name=name,
        description=None,
        created_date="2024-01-01",
        duration_weeks=duration_weeks,
        domains=list(domains),
    )


def _seed_domain(db, domain_type, playbook_name="Existing", task_count=3, active=True):
    domain = domain_store.create_domain(db, domain_type, "06:30")
    playbook = domain_store.create_playbook(
        db,
        domain_id=domain.id,
        name=playbook_name,
        plan_id=None,
        week_start=None,
        week_end=None,
        active_days=None,
        import_source=None,
    )
    for index in range(task_count):
        domain_store.create_task(
            db,
            playbook_id=playbook.id,
            title=f"Old {index}",
            description=None,
            duration_minutes=5,
            sort_order=index,
        )
    if active:
        domain_store.update_domain_active_playbook(db, domain.id, playbook.id)
    db.commit()
    return domain, playbook


def _snapshot(db):
    return (
        sorted((str(d.id), d.type, d.trigger_time, str(d.active_playbook_id)) for d in db.query(Domain).all()),
        sorted((str(p.id), str(p.domain_id), p.name) for p in db.query(Playbook).all()),
        sorted((str(t.id), str(t.playbook_id), t.title) for t in db.query(Task).all()),
    )


def test_no_conflicts_for_empty_store(db_session):
    assert detect_conflicts(db_session, _plan(_domain("morning", _playbook("A")))) == []


def test_conflict_reported_for_domain_with_active_playbook(db_session):
    _seed_domain(db_session, "morning", playbook_name="Old Morning")
    _seed_domain(db_session, "evening", active=False)

    plan = _plan(
        _domain("morning", _playbook("A"), _playbook("B")),
        _domain("evening", _playbook("C")),
        _domain("exercise", _playbook("D")),
    )
    conflicts = detect_conflicts(db_session, plan)

    assert len(conflicts) == 1
    conflict = conflicts[0]
    assert conflict.domain_type == "morning"
    assert conflict.existing_playbook_name == "Old Morning"
    assert conflict.existing_playbook_count == 1
    assert conflict.new_playbook_count == 2


def test_conflict_reports_repeated_type_once_with_last_entry(db_session):
    _seed_domain(db_session, "exercise")
    plan = _plan(
        _domain("exercise", _playbook("A")),
        _domain("exercise", _playbook("B"), _playbook("C"), _playbook("D")),
    )
    [conflict] = detect_conflicts(db_session, plan)
    assert conflict.new_playbook_count == 3


def test_conflict_detection_does_not_write(db_session):
    _seed_domain(db_session, "morning")
    _seed_domain(db_session, "evening", active=False)
    before = _snapshot(db_session)

    detect_conflicts(db_session, _plan(_domain("morning", _playbook("A")), _domain("evening", _playbook("B"))))
    db_session.commit()

    assert _snapshot(db_session) == before


def test_save_creates_domains_playbooks_and_tasks(db_session):
    plan = _plan(
        _domain("morning", _playbook("Week 1", 2, week_start=1, week_end=1), _playbook("Week 2", 3, week_start=2)),
        _domain("evening", _playbook("Nightly", 1, active_days=["mon", "tue"]), trigger_time="21:15"),
        name="Two Domains",
        duration_weeks=2,
    )

    result = save_parsed_plan(db_session, plan)

    assert result.success is True
    assert result.error is None
    assert result.domains_created == 2
    assert result.playbooks_created == 3
    assert result.tasks_created == 6
    assert result.saved_domain_types == ["morning", "evening"]

    stored_plan = db_session.get(Plan, result.plan_id)
    assert stored_plan.name == "Two Domains"
    assert stored_plan.duration_weeks == 2
    assert stored_plan.current_week == 1
    assert stored_plan.import_source == "chatgpt"

    morning = domain_store.get_domain_by_type(db_session, "morning")
    playbooks = domain_store.list_playbooks_for_domain(db_session, morning.id)
    assert [p.name for p in playbooks] == ["Week 1", "Week 2"]
    assert morning.active_playbook_id == playbooks[0].id
    assert all(p.plan_id == result.plan_id for p in playbooks)
    assert [t.title for t in playbooks[1].tasks] == ["Week 2 1", "Week 2 2", "Week 2 3"]
    assert [t.sort_order for t in playbooks[1].tasks] == [0, 1, 2]

    evening = domain_store.get_domain_by_type(db_session, "evening")
    assert evening.trigger_time == "21:15"
    [nightly] = domain_store.list_playbooks_for_domain(db_session, evening.id)
    assert nightly.active_days == ["mon", "tue"]


def test_active_days_column_stores_sql_null_for_every_day(db_session):
    plan = _plan(
        _domain("morning", _playbook("Daily"), _playbook("Weekdays", active_days=["mon", "fri"])),
    )
    assert save_parsed_plan(db_session, plan).success is True

    rows = dict(db_session.execute(text("SELECT name, active_days FROM playbooks")).all())

    assert rows["Daily"] is None
    assert json.loads(rows["Weekdays"]) == ["mon", "fri"]


def test_replace_removes_previous_playbook_and_tasks(db_session):
    domain, old_playbook = _seed_domain(db_session, "morning", task_count=3)
    old_playbook_id = old_playbook.id

    result = save_parsed_plan(
        db_session,
        _plan(_domain("morning", _playbook("Fresh", 5), trigger_time="06:00")),
        {"morning": "replace"},
    )

    assert result.success is True
    assert result.domains_created == 0
    assert result.playbooks_created == 1
    assert result.tasks_created == 5

    db_session.expire_all()
    assert db_session.get(Playbook, old_playbook_id) is None
    assert db_session.query(Task).filter(Task.playbook_id == old_playbook_id).count() == 0
    assert db_session.query(Task).count() == 5
    stored = db_session.get(Domain, domain.id)
    assert stored.trigger_time == "06:00"
    assert domain_store.get_playbook_by_id(db_session, stored.active_playbook_id).name == "Fresh"


def test_skip_leaves_domain_untouched(db_session):
    _seed_domain(db_session, "morning")
    before = _snapshot(db_session)

    result = save_parsed_plan(
        db_session,
        _plan(_domain("morning", _playbook("New")), _domain("exercise", _playbook("Run"))),
        {"morning": "skip"},
    )

    assert result.success is True
    assert result.domains_created == 1
    assert result.saved_domain_types == ["exercise"]
    morning_rows = [row for row in _snapshot(db_session)[0] if row[1] == "morning"]
    assert morning_rows == before[0]


def test_skipping_everything_writes_nothing(db_session):
    result = save_parsed_plan(
        db_session,
        _plan(_domain("morning", _playbook("A")), _domain("evening", _playbook("B"))),
        {"morning": "skip", "evening": "skip"},
    )

    assert result.success is False
    assert result.error == ALL_SKIPPED_MESSAGE
    assert result.plan_id is None
    assert (result.domains_created, result.playbooks_created, result.tasks_created) == (0, 0, 0)
    assert db_session.query(Plan).count() == 0
    assert db_session.query(Domain).count() == 0


def test_repeated_domain_type_keeps_last_entry(db_session):
    plan = _plan(
        _domain("exercise", _playbook("First", 2), trigger_time="06:00"),
        _domain("exercise", _playbook("Second", 1), trigger_time="18:00"),
    )

    result = save_parsed_plan(db_session, plan)

    assert result.success is True
    assert result.domains_created == 1
    assert result.playbooks_created == 2
    assert result.saved_domain_types == ["exercise"]
    assert db_session.query(Domain).count() == 1
    exercise = domain_store.get_domain_by_type(db_session, "exercise")
    assert exercise.trigger_time == "18:00"
    assert [p.name for p in domain_store.list_playbooks_for_domain(db_session, exercise.id)] == ["Second"]
    assert domain_store.get_playbook_by_id(db_session, exercise.active_playbook_id).name == "Second"


def test_failure_reports_committed_counts(db_session, monkeypatch):
    real_create_task = domain_store.create_task

    def flaky_create_task(db, **kwargs):
        if kwargs["title"].startswith("Broken"):
            raise RuntimeError("disk full")
        return real_create_task(db, **kwargs)

    monkeypatch.setattr(domain_store, "create_task", flaky_create_task)

    plan = _plan(
        _domain("morning", _playbook("Good", 2)),
        _domain("evening", _playbook("Broken", 2)),
    )
    result = save_parsed_plan(db_session, plan)

    assert result.success is False
    assert result.error == "disk full"
    assert result.plan_id is not None
    assert result.domains_created == 1
    assert result.playbooks_created == 1
    assert result.tasks_created == 2
    assert result.saved_domain_types == ["morning"]

    assert domain_store.get_domain_by_type(db_session, "morning") is not None
    assert domain_store.get_domain_by_type(db_session, "evening") is None
    assert db_session.query(Task).count() == 2
