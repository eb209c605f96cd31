"""Cut DTOs: pure Pydantic, zero ORM imports."""
from __future__ import annotations
from datetime import datetime
from decimal import Decimal
from enum import Enum
from pydantic import BaseModel, Field, field_validator


class CutStatusDTO(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


class PayoutStatusDTO(str, Enum):
    PENDING = "pending"
    TRANSFERRED = "transferred"
    FAILED = "failed"
    SKIPPED = "skipped"


class CutOpen(BaseModel):
    code: str = Field(min_length=3)
    shift_id: str = Field(min_length=1)
    date: str = Field(min_length=1)
    start_time: str = Field(min_length=1)
    roster_text: str = ""
    notes: str | None = None

    @field_validator("code", "shift_id", "date", "start_time")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()


class CutClose(BaseModel):
    end_time: str = Field(min_length=1)
    tips: Decimal = Field(ge=0, decimal_places=2, description="Total tips in major currency units")

    @field_validator("end_time")
    @classmethod
    def end_time_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("end_time must not be blank")
        return v.strip()


class CutRead(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    code: str
    shift_id: str
    date: str
    start_time: str
    end_time: str | None = None
    roster_text: str
    tips_cents: int | None = None
    people_count: int | None = None
    per_person_cents: int | None = None
    status: CutStatusDTO
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class AllocationRead(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    cut_id: int
    participant_name: str
    payout_destination: str | None = None
    payout_cents: int
    payout_status: PayoutStatusDTO
    transfer_id: str | None = None
    status_reason: str | None = None
    attempts: int = 0
    settled_at: datetime | None = None


class CutDetail(BaseModel):
    cut: CutRead
    allocations: list[AllocationRead]


class CutCloseResponse(CutDetail):
    remainder_cents: int


class CutList(BaseModel):
    items: list[CutRead]
    total: int
