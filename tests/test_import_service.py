"""Tests for bulk cut import from the cuts sheet CSV."""
import io

from sqlmodel import Session, select

from tippool.infra.db.uow import UnitOfWork
from tippool.models.cut import Allocation, Cut, CutStatus
from tippool.services.import_service import ImportService

HEADER = (
    "CutID,ShiftID,Date,StartTime,EndTime,Roster (comma-separated),"
    "Stripe Tips in this Cut ($),Notes\n"
)


def _import(csv_text: str):
    with UnitOfWork() as uow:
        return ImportService(uow).import_csv(csv_text)


def _cuts(engine) -> dict[str, Cut]:
    with Session(engine) as s:
        return {c.code: c for c in s.exec(select(Cut)).all()}


def test_import_creates_open_and_closed_cuts(use_test_engine):
    summary = _import(
        HEADER
        + 'CUT-001,S1,2026-10-17,18:00,23:30,"Ana, Ben, Cara",10.00,busy night\n'
        + 'CUT-002,S2,2026-10-18,18:00,,"Ana, Ben",,\n'
    )
    assert summary.created == 2
    assert summary.errors == []

    cuts = _cuts(use_test_engine)
    closed = cuts["CUT-001"]
    assert closed.status == CutStatus.CLOSED
    assert closed.tips_cents == 1000
    assert closed.per_person_cents == 333
    assert closed.notes == "busy night"

    still_open = cuts["CUT-002"]
    assert still_open.status == CutStatus.OPEN
    assert still_open.tips_cents is None
    assert still_open.notes is None

    with Session(use_test_engine) as s:
        allocations = s.exec(select(Allocation).where(Allocation.cut_id == closed.id)).all()
    assert [a.participant_name for a in allocations] == ["Ana", "Ben", "Cara"]


def test_reimport_updates_open_and_leaves_closed_alone(use_test_engine):
    _import(
        HEADER
        + 'CUT-001,S1,2026-10-17,18:00,23:30,"Ana, Ben",10.00,\n'
        + 'CUT-002,S2,2026-10-18,18:00,,"Ana",,\n'
    )
    summary = _import(
        HEADER
        + 'CUT-001,S1,2026-10-17,18:00,23:59,"Ana, Ben, Cara",99.00,\n'
        + 'CUT-002,S2,2026-10-18,18:00,22:00,"Ana, Dev",5.01,\n'
    )
    assert summary.unchanged == 1
    assert summary.updated == 1

    cuts = _cuts(use_test_engine)
    assert cuts["CUT-001"].tips_cents == 1000
    assert cuts["CUT-001"].people_count == 2
    assert cuts["CUT-002"].status == CutStatus.CLOSED
    assert cuts["CUT-002"].per_person_cents == 250
    assert cuts["CUT-002"].roster_text == "Ana, Dev"

    with Session(use_test_engine) as s:
        assert len(s.exec(select(Allocation)).all()) == 4


def test_bad_rows_are_reported_not_fatal(use_test_engine):
    summary = _import(
        HEADER
        + ',S1,2026-10-17,18:00,,"Ana",,\n'
        + 'CUT-003,S1,2026-10-17,18:00,23:00,"Ana",ten dollars,\n'
        + 'CUT-004,S1,2026-10-17,18:00,,"Ana",,\n'
    )
    assert summary.created == 1
    assert [(e.row, e.code) for e in summary.errors] == [(1, None), (2, "CUT-003")]
    assert set(_cuts(use_test_engine)) == {"CUT-004"}


def test_empty_csv_imports_nothing(use_test_engine):
    summary = _import("")
    assert summary.created == 0
    assert summary.errors == []


def test_import_endpoint_accepts_upload(client):
    csv_bytes = (HEADER + 'CUT-010,S1,2026-10-17,18:00,23:30,"Ana, Ben",20,\n').encode()
    resp = client.post(
        "/imports/cuts",
        files={"file": ("cuts.csv", io.BytesIO(csv_bytes), "text/csv")},
    )
    assert resp.status_code == 200
    assert resp.json()["created"] == 1

    detail = client.get("/cuts/CUT-010").json()
    assert detail["cut"]["per_person_cents"] == 1000
    assert len(detail["allocations"]) == 2
