from __future__ import annotations

import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator
from uuid import UUID, uuid4

import pytest
from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session, sessionmaker

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import workers.tasks as tasks
from catalog.errors import ValidationError
from shared.models import AdTemplate, Base, ImportBatch, ImportStatus, User

CSV_TEXT = (
    "TemplateName,PrimaryText,Headline,CTA,Industry,Goal\n"
    "Pizza Deal,Get 50% off,Hot Pizza,Sign Up,Food,Leads\n"
    "Glow Up,Bridal makeup,Look great,book now,Beauty,Bookings\n"
    "Broken,Body,Head,subscribe,Food,Leads\n"
)


@pytest.fixture()
def session_factory(monkeypatch: pytest.MonkeyPatch) -> sessionmaker:
    engine = create_engine("sqlite:///:memory:", future=True)
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine, expire_on_commit=False, future=True)

    @contextmanager
    def fake_session() -> Iterator[Session]:
        with factory() as session:
            yield session

    monkeypatch.setattr(tasks, "get_sync_session", fake_session)
    yield factory
    engine.dispose()


def _owner(factory: sessionmaker) -> UUID:
    with factory() as session:
        user = User(id=uuid4(), email="ops@example.com", password_hash="hash")
        session.add(user)
        session.commit()
        return user.id


def test_import_task_returns_summary(session_factory: sessionmaker) -> None:
    owner_id = _owner(session_factory)

    summary = tasks.import_csv_task.run(CSV_TEXT, str(owner_id))

    assert summary["imported"] == 2
    assert summary["invalid"] == 1
    assert summary["duplicates"] == 0
    assert summary["message"] == "Import complete. 2 templates imported, 1 skipped."
    assert summary["skipped"][0]["row"] == 4

    with session_factory() as session:
        batch = session.get(ImportBatch, UUID(summary["batch_id"]))
        assert batch.status is ImportStatus.COMPLETED
        assert batch.requested_by == owner_id
        assert batch.source == "worker"
        categories = sorted(row.category.value for row in session.scalars(select(AdTemplate)))
        assert categories == ["RESTAURANT", "SALON"]


def test_import_task_without_requester(session_factory: sessionmaker) -> None:
    summary = tasks.import_csv_task.run(CSV_TEXT)
    with session_factory() as session:
        assert session.get(ImportBatch, UUID(summary["batch_id"])).requested_by is None


def test_import_task_rejects_empty_csv(session_factory: sessionmaker) -> None:
    with pytest.raises(ValidationError):
        tasks.import_csv_task.run("TemplateName,PrimaryText,Headline,CTA,Industry,Goal\n")
