"""Settlement use-case service: pay out a closed cut's allocations.

Each allocation is settled on its own. A provider failure is recorded on
that allocation and the run moves on; it never stops or rolls back the
others. Allocations already transferred are reported as-is and not paid
again, so re-running a partially failed settlement only retries what is
left.
"""
from __future__ import annotations
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable
from datetime import datetime, timezone
from tippool.config import settings
from tippool.domain.exceptions import InvalidStateError, NotFoundError, ProviderError
from tippool.infra.db.uow import UnitOfWork
from tippool.infra.db.repositories.cut_repository import CutRepository
from tippool.infra.db.repositories.allocation_repository import AllocationRepository
from tippool.infra.db.repositories.payee_repository import PayeeRepository
from tippool.infra.payments.provider import TransferProvider, TransferReceipt, TransferRequest
from tippool.models.cut import Allocation, Cut, CutStatus, PayoutStatus
from tippool.api.schemas.cuts import PayoutStatusDTO
from tippool.api.schemas.settlement import SettlementReport, SettlementResult

logger = logging.getLogger(__name__)

NO_DESTINATION = "no destination"
ZERO_AMOUNT = "zero amount"


@dataclass
class _Outcome:
    receipt: TransferReceipt | None = None
    error: str | None = None


def idempotency_key(cut_code: str, allocation_id: int) -> str:
    """One key per allocation for its whole life.

    A timed-out attempt may still have paid; resending under the same key
    makes the provider answer with that transfer instead of paying again.
    """
    return f"tippool-{cut_code}-{allocation_id}"


class SettlementService:
    def __init__(
        self,
        uow: UnitOfWork,
        provider: TransferProvider | None = None,
        *,
        provider_factory: Callable[[], TransferProvider] | None = None,
        currency: str | None = None,
        max_workers: int | None = None,
    ) -> None:
        self._uow = uow
        if provider is None and provider_factory is None:
            raise ValueError("provider or provider_factory is required")
        self._provider = provider
        self._provider_factory = provider_factory
        self._currency = currency or settings.CURRENCY
        self._max_workers = max(1, max_workers or settings.SETTLEMENT_MAX_WORKERS)

    def execute(self, code: str, memo: str | None = None) -> SettlementReport:
        cut = CutRepository(self._uow.session).get_by_code(code)
        if cut is None:
            raise NotFoundError(f"Cut {code} not found")
        if cut.status != CutStatus.CLOSED:
            raise InvalidStateError(f"Cut {code} must be closed before settlement")

        allocations = AllocationRepository(self._uow.session).list_by_cut(cut.id)
        payees = PayeeRepository(self._uow.session)

        results: dict[int, SettlementResult] = {}
        pending: list[tuple[Allocation, TransferRequest]] = []

        for alloc in allocations:
            if alloc.payout_status == PayoutStatus.TRANSFERRED:
                results[alloc.id] = self._result(alloc, attempted=False)
                continue

            if not alloc.payout_destination:
                # Payee may have registered after the cut was closed.
                payee = payees.find_by_name(alloc.participant_name)
                if payee is not None and payee.payout_destination:
                    alloc.payout_destination = payee.payout_destination

            if not alloc.payout_destination:
                self._mark(alloc, PayoutStatus.SKIPPED, reason=NO_DESTINATION)
                results[alloc.id] = self._result(alloc, attempted=False)
                continue
            if alloc.payout_cents <= 0:
                self._mark(alloc, PayoutStatus.SKIPPED, reason=ZERO_AMOUNT)
                results[alloc.id] = self._result(alloc, attempted=False)
                continue

            alloc.attempts += 1
            pending.append((alloc, self._request_for(cut, alloc, memo)))

        if pending:
            self._resolve_provider()
        outcomes = self._dispatch([request for _, request in pending])

        for (alloc, _), outcome in zip(pending, outcomes):
            if outcome.receipt is not None:
                self._mark(
                    alloc, PayoutStatus.TRANSFERRED, transfer_id=outcome.receipt.transfer_id,
                )
                logger.info(
                    "Transferred %d cents to %s for cut %s (%s)",
                    alloc.payout_cents, alloc.participant_name, cut.code,
                    outcome.receipt.transfer_id,
                )
            else:
                self._mark(alloc, PayoutStatus.FAILED, reason=outcome.error)
            results[alloc.id] = self._result(alloc, attempted=True)

        self._uow.commit()

        ordered = [results[a.id] for a in allocations]
        report = SettlementReport(
            cut_code=cut.code,
            results=ordered,
            transferred=sum(1 for r in ordered if r.status == PayoutStatusDTO.TRANSFERRED),
            failed=sum(1 for r in ordered if r.status == PayoutStatusDTO.FAILED),
            skipped=sum(1 for r in ordered if r.status == PayoutStatusDTO.SKIPPED),
        )
        logger.info(
            "Settled cut %s: %d transferred, %d failed, %d skipped",
            cut.code, report.transferred, report.failed, report.skipped,
        )
        return report

    # ------------------------------------------------------------------
    # Provider calls
    # ------------------------------------------------------------------

    def _resolve_provider(self) -> TransferProvider:
        """Build the provider on first use; a run with nothing to send never needs one."""
        if self._provider is None:
            self._provider = self._provider_factory()
        return self._provider

    def _dispatch(self, requests: list[TransferRequest]) -> list[_Outcome]:
        """Run every request, returning outcomes in request order."""
        if self._max_workers == 1 or len(requests) <= 1:
            return [self._attempt(r) for r in requests]
        with ThreadPoolExecutor(max_workers=min(self._max_workers, len(requests))) as pool:
            return list(pool.map(self._attempt, requests))

    def _attempt(self, request: TransferRequest) -> _Outcome:
        try:
            return _Outcome(receipt=self._provider.create_transfer(request))
        except ProviderError as exc:
            logger.warning(
                "Transfer to %s failed (%s): %s",
                request.destination, request.idempotency_key, exc.message,
            )
            return _Outcome(error=exc.message)
        except Exception as exc:
            logger.exception("Transfer to %s raised unexpectedly", request.destination)
            return _Outcome(error=str(exc) or exc.__class__.__name__)

    def _request_for(self, cut: Cut, alloc: Allocation, memo: str | None) -> TransferRequest:
        return TransferRequest(
            amount_cents=alloc.payout_cents,
            destination=alloc.payout_destination,
            currency=self._currency,
            idempotency_key=idempotency_key(cut.code, alloc.id),
            metadata={
                "cut_code": cut.code,
                "participant_name": alloc.participant_name,
                "memo": memo or "",
            },
        )

    # ------------------------------------------------------------------
    # Bookkeeping
    # ------------------------------------------------------------------

    @staticmethod
    def _mark(
        alloc: Allocation,
        status: PayoutStatus,
        *,
        reason: str | None = None,
        transfer_id: str | None = None,
    ) -> None:
        alloc.payout_status = status
        alloc.status_reason = reason
        alloc.transfer_id = transfer_id
        alloc.settled_at = datetime.now(timezone.utc)

    @staticmethod
    def _result(alloc: Allocation, *, attempted: bool) -> SettlementResult:
        return SettlementResult(
            allocation_id=alloc.id,
            participant_name=alloc.participant_name,
            payout_cents=alloc.payout_cents,
            status=PayoutStatusDTO(alloc.payout_status.value),
            transfer_id=alloc.transfer_id,
            reason=alloc.status_reason,
            attempted=attempted,
        )
