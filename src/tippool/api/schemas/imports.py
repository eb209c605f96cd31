"""Bulk import DTOs: pure Pydantic, zero ORM imports."""
from __future__ import annotations
from pydantic import BaseModel


class ImportRowError(BaseModel):
    row: int
    code: str | None = None
    error: str


class ImportSummary(BaseModel):
    created: int = 0
    updated: int = 0
    unchanged: int = 0
    errors: list[ImportRowError] = []
