"""Bulk import endpoints."""
from fastapi import APIRouter, Depends, File, UploadFile
from tippool.api.deps import get_uow
from tippool.api.schemas.imports import ImportSummary
from tippool.infra.db.uow import UnitOfWork
from tippool.services.import_service import ImportService

router = APIRouter(prefix="/imports", tags=["imports"])


@router.post("/cuts", response_model=ImportSummary)
def import_cuts(
    file: UploadFile = File(...), uow: UnitOfWork = Depends(get_uow),
) -> ImportSummary:
    text = file.file.read().decode("utf-8-sig")
    return ImportService(uow).import_csv(text)
