"""Payout directory DTOs: pure Pydantic, zero ORM imports."""
from __future__ import annotations
from datetime import datetime
from pydantic import BaseModel, Field, field_validator


class PayeeUpsert(BaseModel):
    name: str
    email: str = Field(pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    payout_destination: str | None = Field(default=None, min_length=5)

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("name must not be empty")
        return v.strip()

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class PayeeRead(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    name: str
    email: str
    payout_destination: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PayeeUpsertResponse(BaseModel):
    payee: PayeeRead
    created: bool


class PayeeList(BaseModel):
    items: list[PayeeRead]
    total: int
