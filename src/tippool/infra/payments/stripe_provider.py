"""Stripe Connect transfers through the Stripe SDK."""
from __future__ import annotations

from typing import Any, Callable

import stripe

from tippool.domain.exceptions import ProviderError
from tippool.infra.payments.provider import TransferReceipt, TransferRequest


class StripeTransferProvider:
    """Creates transfers to connected accounts.

    *create* defaults to ``stripe.Transfer.create``; tests pass a stand-in
    with the same keyword signature.
    """

    def __init__(
        self,
        secret_key: str,
        *,
        create: Callable[..., Any] | None = None,
    ) -> None:
        if not secret_key:
            raise ValueError("Stripe secret key is required")
        self._api_key = secret_key
        self._create = create or stripe.Transfer.create

    def create_transfer(self, request: TransferRequest) -> TransferReceipt:
        try:
            transfer = self._create(
                api_key=self._api_key,
                idempotency_key=request.idempotency_key,
                amount=request.amount_cents,
                currency=request.currency,
                destination=request.destination,
                metadata=dict(request.metadata),
            )
        except stripe.StripeError as exc:
            raise ProviderError(exc.user_message or str(exc), code=exc.code) from exc

        transfer_id = getattr(transfer, "id", None)
        if not transfer_id:
            raise ProviderError("Transfer response did not include an id")
        return TransferReceipt(transfer_id=transfer_id)
