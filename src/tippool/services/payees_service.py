"""Payout directory use-case service."""
from __future__ import annotations
import logging
from tippool.infra.db.uow import UnitOfWork
from tippool.infra.db.repositories.payee_repository import PayeeRepository
from tippool.api.schemas.payees import PayeeList, PayeeRead, PayeeUpsert, PayeeUpsertResponse

logger = logging.getLogger(__name__)


class PayeesService:
    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def upsert_payee(self, payload: PayeeUpsert) -> PayeeUpsertResponse:
        repo = PayeeRepository(self._uow.session)
        payee, created = repo.upsert(
            name=payload.name,
            email=payload.email,
            payout_destination=payload.payout_destination,
        )
        self._uow.commit()
        logger.info("%s payee %s", "Added" if created else "Updated", payee.email)
        return PayeeUpsertResponse(payee=PayeeRead.model_validate(payee), created=created)

    def list_payees(self, limit: int = 100, offset: int = 0) -> PayeeList:
        repo = PayeeRepository(self._uow.session)
        payees = repo.list_all(limit=limit, offset=offset)
        return PayeeList(
            items=[PayeeRead.model_validate(p) for p in payees],
            total=repo.count(),
        )
