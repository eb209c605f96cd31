"""Settlement endpoints."""
from typing import Callable
from fastapi import APIRouter, Depends
from tippool.api.deps import get_provider_factory, get_uow
from tippool.api.schemas.settlement import ExecuteRequest, SettlementReport
from tippool.infra.db.uow import UnitOfWork
from tippool.infra.payments.provider import TransferProvider
from tippool.services.settlement_service import SettlementService

router = APIRouter(prefix="/cuts/{code}", tags=["settlement"])


@router.post("/execute", response_model=SettlementReport)
def execute(
    code: str,
    payload: ExecuteRequest | None = None,
    uow: UnitOfWork = Depends(get_uow),
    provider_factory: Callable[[], TransferProvider] = Depends(get_provider_factory),
) -> SettlementReport:
    memo = payload.memo if payload else None
    return SettlementService(uow, provider_factory=provider_factory).execute(code, memo=memo)
