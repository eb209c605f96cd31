"""Repository for Allocation records. No business logic; caller owns the transaction."""
from __future__ import annotations
from sqlalchemy import func
from sqlmodel import Session, col, select
from tippool.models.cut import Allocation, PayoutStatus


class AllocationRepository:
    def __init__(self, session: Session) -> None:
        self._s = session

    def list_by_cut(self, cut_id: int) -> list[Allocation]:
        return list(self._s.exec(
            select(Allocation).where(Allocation.cut_id == cut_id).order_by(col(Allocation.id))
        ).all())

    def count_by_cut(self, cut_id: int) -> int:
        return self._s.exec(
            select(func.count()).select_from(Allocation).where(Allocation.cut_id == cut_id)
        ).one()

    def create_many(
        self, *, cut_id: int, entries: list[tuple[str, str | None]], payout_cents: int,
    ) -> list[Allocation]:
        """Insert one pending allocation per ``(participant_name, destination)`` pair."""
        allocations = [
            Allocation(
                cut_id=cut_id,
                participant_name=name,
                payout_destination=destination,
                payout_cents=payout_cents,
                payout_status=PayoutStatus.PENDING,
            )
            for name, destination in entries
        ]
        self._s.add_all(allocations)
        self._s.flush()
        return allocations

    def save(self, allocation: Allocation) -> Allocation:
        self._s.add(allocation)
        self._s.flush()
        return allocation
