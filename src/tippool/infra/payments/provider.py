"""Payout provider protocol.

Settlement only needs one call: move N cents to a destination and get back
the provider's transfer id. Implementations raise ``ProviderError`` on any
failure, including transport errors.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class TransferRequest:
    amount_cents: int
    destination: str
    currency: str
    idempotency_key: str
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class TransferReceipt:
    transfer_id: str


@runtime_checkable
class TransferProvider(Protocol):
    """Anything that can create a transfer to a payout destination."""

    def create_transfer(self, request: TransferRequest) -> TransferReceipt:
        """Create the transfer or raise ``ProviderError``."""
        ...
