"""FastAPI dependencies."""
from __future__ import annotations
from functools import lru_cache
from typing import Callable, Generator
from tippool.config import settings
from tippool.domain.exceptions import ProviderError
from tippool.infra.db.uow import UnitOfWork
from tippool.infra.payments.provider import TransferProvider
from tippool.infra.payments.stripe_provider import StripeTransferProvider


def get_uow() -> Generator[UnitOfWork, None, None]:
    """Yield one UnitOfWork per request; commit/rollback in __exit__."""
    with UnitOfWork() as uow:
        yield uow


@lru_cache(maxsize=1)
def stripe_provider() -> StripeTransferProvider:
    secret = settings.STRIPE_SECRET_KEY.get_secret_value() if settings.STRIPE_SECRET_KEY else ""
    if not secret:
        raise ProviderError("STRIPE_SECRET_KEY is not configured")
    return StripeTransferProvider(secret)


def get_provider_factory() -> Callable[[], TransferProvider]:
    """Provider is built only when a settlement run has transfers to send.

    Tests override this dependency with a factory returning a fake.
    """
    return stripe_provider
