"""Payout directory endpoints."""
from fastapi import APIRouter, Depends
from tippool.api.deps import get_uow
from tippool.api.schemas.payees import PayeeList, PayeeUpsert, PayeeUpsertResponse
from tippool.infra.db.uow import UnitOfWork
from tippool.services.payees_service import PayeesService

router = APIRouter(prefix="/payees", tags=["payees"])


@router.put("", response_model=PayeeUpsertResponse)
def upsert_payee(payload: PayeeUpsert, uow: UnitOfWork = Depends(get_uow)) -> PayeeUpsertResponse:
    return PayeesService(uow).upsert_payee(payload)


@router.get("", response_model=PayeeList)
def list_payees(
    limit: int = 100, offset: int = 0, uow: UnitOfWork = Depends(get_uow),
) -> PayeeList:
    return PayeesService(uow).list_payees(limit=limit, offset=offset)
