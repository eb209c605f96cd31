"""Repository for the payout directory. No business logic; caller owns the transaction."""
from __future__ import annotations
from sqlalchemy import func
from sqlmodel import Session, col, select
from tippool.models.payee import Payee


class PayeeRepository:
    def __init__(self, session: Session) -> None:
        self._s = session

    def get_by_email(self, email: str) -> Payee | None:
        return self._s.exec(select(Payee).where(Payee.email == email)).first()

    def find_by_name(self, name: str) -> Payee | None:
        """First directory entry with this exact name, preferring one that has a destination."""
        return self._s.exec(
            select(Payee)
            .where(Payee.name == name)
            .order_by(col(Payee.payout_destination).is_(None), col(Payee.id))
        ).first()

    def count(self) -> int:
        return self._s.exec(select(func.count()).select_from(Payee)).one()

    def list_all(self, limit: int = 100, offset: int = 0) -> list[Payee]:
        return list(self._s.exec(
            select(Payee).order_by(col(Payee.name)).offset(offset).limit(limit)
        ).all())

    def upsert(self, *, name: str, email: str, payout_destination: str | None) -> tuple[Payee, bool]:
        """Insert or update keyed by email. Returns ``(payee, created)``.

        An omitted destination keeps the one already on file.
        """
        payee = self.get_by_email(email)
        created = payee is None
        if payee is None:
            payee = Payee(name=name, email=email, payout_destination=payout_destination)
        else:
            payee.name = name
            if payout_destination:
                payee.payout_destination = payout_destination
        self._s.add(payee)
        self._s.flush()
        return payee, created
