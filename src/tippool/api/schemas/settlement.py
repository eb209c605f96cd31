"""Settlement DTOs: pure Pydantic, zero ORM imports."""
from __future__ import annotations
from pydantic import BaseModel
from tippool.api.schemas.cuts import PayoutStatusDTO


class ExecuteRequest(BaseModel):
    memo: str | None = None


class SettlementResult(BaseModel):
    allocation_id: int
    participant_name: str
    payout_cents: int
    status: PayoutStatusDTO
    transfer_id: str | None = None
    reason: str | None = None
    attempted: bool


class SettlementReport(BaseModel):
    cut_code: str
    results: list[SettlementResult]
    transferred: int
    failed: int
    skipped: int
