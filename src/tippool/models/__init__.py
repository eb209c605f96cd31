"""ORM table models. Importing this package registers every table mapper."""
from tippool.models.base import TimestampMixin
from tippool.models.cut import Allocation, Cut, CutStatus, PayoutStatus
from tippool.models.payee import Payee

__all__ = ["TimestampMixin", "Cut", "CutStatus", "Allocation", "PayoutStatus", "Payee"]
