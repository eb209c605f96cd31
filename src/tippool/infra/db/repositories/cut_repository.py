"""Repository for Cut records. No business logic; caller owns the transaction."""
from __future__ import annotations
from sqlalchemy import func
from sqlmodel import Session, col, select
from tippool.models.cut import Cut, CutStatus


class CutRepository:
    def __init__(self, session: Session) -> None:
        self._s = session

    def get_by_id(self, cut_id: int) -> Cut | None:
        return self._s.get(Cut, cut_id)

    def get_by_code(self, code: str) -> Cut | None:
        return self._s.exec(select(Cut).where(Cut.code == code)).first()

    def list_all(
        self, *, status: CutStatus | None = None, limit: int = 100, offset: int = 0,
    ) -> list[Cut]:
        stmt = select(Cut)
        if status:
            stmt = stmt.where(Cut.status == status)
        stmt = stmt.order_by(col(Cut.id).desc()).offset(offset).limit(limit)
        return list(self._s.exec(stmt).all())

    def count(self, *, status: CutStatus | None = None) -> int:
        stmt = select(func.count()).select_from(Cut)
        if status:
            stmt = stmt.where(Cut.status == status)
        return self._s.exec(stmt).one()

    def create(
        self,
        *,
        code: str,
        shift_id: str,
        date: str,
        start_time: str,
        roster_text: str,
        notes: str | None = None,
    ) -> Cut:
        cut = Cut(
            code=code,
            shift_id=shift_id,
            date=date,
            start_time=start_time,
            roster_text=roster_text,
            notes=notes,
            status=CutStatus.OPEN,
        )
        self._s.add(cut)
        self._s.flush()  # unique constraint on code fires here
        return cut

    def save(self, cut: Cut) -> Cut:
        self._s.add(cut)
        self._s.flush()
        return cut
