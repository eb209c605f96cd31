"""Bulk import of cuts from the shift sheet's CSV export.

Rows are upserted by CutID. A row with an EndTime closes its cut and
generates allocations the same way an interactive close does. Cuts that are
already closed in the store keep their allocations and are left untouched.
"""
from __future__ import annotations
import io
import logging
from typing import Any
import httpx
import pandas as pd
from tippool.config import settings
from tippool.domain.exceptions import InvalidInputError
from tippool.domain.money import to_cents
from tippool.domain.roster import parse_roster
from tippool.domain.shares import split_tips
from tippool.infra.db.uow import UnitOfWork
from tippool.infra.db.repositories.cut_repository import CutRepository
from tippool.models.cut import Cut, CutStatus
from tippool.services.cuts_service import close_with_allocations
from tippool.api.schemas.imports import ImportRowError, ImportSummary

logger = logging.getLogger(__name__)

COL_CODE = "CutID"
COL_SHIFT = "ShiftID"
COL_DATE = "Date"
COL_START = "StartTime"
COL_END = "EndTime"
COL_ROSTER = "Roster (comma-separated)"
COL_TIPS = "Stripe Tips in this Cut ($)"
COL_NOTES = "Notes"


def fetch_csv_text(url: str, timeout: float = 30.0) -> str:
    """Download a published CSV (e.g. a spreadsheet's "publish to web" link)."""
    resp = httpx.get(url, timeout=timeout, follow_redirects=True)
    resp.raise_for_status()
    return resp.text


def read_rows(csv_text: str) -> list[dict[str, str]]:
    if not csv_text.strip():
        return []
    frame = pd.read_csv(
        io.StringIO(csv_text), dtype=str, keep_default_na=False, skip_blank_lines=True,
    )
    frame.columns = [str(c).strip() for c in frame.columns]
    return frame.to_dict(orient="records")


def _cell(row: dict[str, Any], column: str) -> str:
    value = row.get(column)
    return "" if value is None else str(value).strip()


class ImportService:
    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def import_csv(self, csv_text: str) -> ImportSummary:
        return self.import_rows(read_rows(csv_text))

    def import_rows(self, rows: list[dict[str, Any]]) -> ImportSummary:
        summary = ImportSummary()
        repo = CutRepository(self._uow.session)

        for index, row in enumerate(rows, start=1):
            code = _cell(row, COL_CODE)
            if not code:
                summary.errors.append(ImportRowError(row=index, error=f"missing {COL_CODE}"))
                continue
            try:
                tips_cents = to_cents(_cell(row, COL_TIPS))
            except InvalidInputError as exc:
                summary.errors.append(ImportRowError(row=index, code=code, error=exc.message))
                continue

            cut = repo.get_by_code(code)
            if cut is not None and cut.status == CutStatus.CLOSED:
                summary.unchanged += 1
                continue

            roster_text = _cell(row, COL_ROSTER)
            end_time = _cell(row, COL_END) or None
            notes = _cell(row, COL_NOTES) or None

            if cut is None:
                cut = repo.create(
                    code=code,
                    shift_id=_cell(row, COL_SHIFT),
                    date=_cell(row, COL_DATE),
                    start_time=_cell(row, COL_START),
                    roster_text=roster_text,
                    notes=notes,
                )
                summary.created += 1
            else:
                cut.roster_text = roster_text
                cut.notes = notes
                repo.save(cut)
                summary.updated += 1

            if end_time:
                self._close(cut, end_time=end_time, tips_cents=tips_cents)

        self._uow.commit()
        logger.info(
            "Imported cuts: %d created, %d updated, %d unchanged, %d errors",
            summary.created, summary.updated, summary.unchanged, len(summary.errors),
        )
        return summary

    def _close(self, cut: Cut, *, end_time: str, tips_cents: int) -> None:
        names = list(parse_roster(cut.roster_text, settings.ROSTER_DELIMITER))
        close_with_allocations(
            self._uow, cut,
            end_time=end_time,
            tips_cents=tips_cents,
            names=names,
            split=split_tips(tips_cents, len(names)),
        )
