"""Payout directory: who gets paid where."""
from __future__ import annotations
from sqlmodel import Field
from tippool.models.base import TimestampMixin


class Payee(TimestampMixin, table=True):
    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    email: str = Field(index=True, unique=True)
    payout_destination: str | None = None
