from tippool.infra.payments.provider import TransferProvider, TransferReceipt, TransferRequest
from tippool.infra.payments.stripe_provider import StripeTransferProvider

__all__ = ["TransferProvider", "TransferReceipt", "TransferRequest", "StripeTransferProvider"]
