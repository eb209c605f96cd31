"""Cut and Allocation tables."""
from __future__ import annotations
from datetime import datetime
from enum import Enum
from sqlmodel import Field
from tippool.models.base import TimestampMixin


class CutStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


class PayoutStatus(str, Enum):
    PENDING = "pending"
    TRANSFERRED = "transferred"
    FAILED = "failed"
    SKIPPED = "skipped"


class Cut(TimestampMixin, table=True):
    id: int | None = Field(default=None, primary_key=True)
    code: str = Field(index=True, unique=True)
    shift_id: str
    date: str
    start_time: str
    end_time: str | None = None
    roster_text: str = ""
    tips_cents: int | None = None
    people_count: int | None = None
    per_person_cents: int | None = None
    status: CutStatus = Field(default=CutStatus.OPEN)
    notes: str | None = None


class Allocation(TimestampMixin, table=True):
    id: int | None = Field(default=None, primary_key=True)
    cut_id: int = Field(foreign_key="cut.id", index=True)
    participant_name: str
    payout_destination: str | None = None
    payout_cents: int
    payout_status: PayoutStatus = Field(default=PayoutStatus.PENDING)

    # Outcome of the most recent settlement run
    transfer_id: str | None = None
    status_reason: str | None = None
    attempts: int = 0
    settled_at: datetime | None = None
