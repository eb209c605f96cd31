"""Cut lifecycle endpoints."""
from fastapi import APIRouter, Depends
from tippool.api.deps import get_uow
from tippool.api.schemas.cuts import (
    CutClose, CutCloseResponse, CutDetail, CutList, CutOpen, CutRead, CutStatusDTO,
)
from tippool.domain.money import to_cents
from tippool.infra.db.uow import UnitOfWork
from tippool.services.cuts_service import CutsService

router = APIRouter(prefix="/cuts", tags=["cuts"])


@router.post("", response_model=CutRead, status_code=201)
def open_cut(payload: CutOpen, uow: UnitOfWork = Depends(get_uow)) -> CutRead:
    return CutsService(uow).open_cut(payload)


@router.get("", response_model=CutList)
def list_cuts(
    status: CutStatusDTO | None = None,
    limit: int = 100,
    offset: int = 0,
    uow: UnitOfWork = Depends(get_uow),
) -> CutList:
    return CutsService(uow).list_cuts(status=status, limit=limit, offset=offset)


@router.get("/{code}", response_model=CutDetail)
def get_cut(code: str, uow: UnitOfWork = Depends(get_uow)) -> CutDetail:
    return CutsService(uow).get_cut(code)


@router.post("/{code}/close", response_model=CutCloseResponse)
def close_cut(
    code: str, payload: CutClose, uow: UnitOfWork = Depends(get_uow),
) -> CutCloseResponse:
    return CutsService(uow).close_cut(
        code, end_time=payload.end_time, tips_cents=to_cents(payload.tips),
    )
