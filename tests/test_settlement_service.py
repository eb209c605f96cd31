"""Tests for settlement: per-allocation isolation, skips, and re-runs."""
import pytest
from sqlmodel import Session, select

from tippool.api.schemas.cuts import CutOpen
from tippool.api.schemas.payees import PayeeUpsert
from tippool.domain.exceptions import InvalidStateError, NotFoundError, ProviderError
from tippool.infra.db.uow import UnitOfWork
from tippool.infra.payments.provider import TransferReceipt, TransferRequest
from tippool.models.cut import Allocation, PayoutStatus
from tippool.services.cuts_service import CutsService
from tippool.services.payees_service import PayeesService
from tippool.services.settlement_service import SettlementService


def _payee(name: str, destination: str) -> None:
    with UnitOfWork() as uow:
        PayeesService(uow).upsert_payee(PayeeUpsert(
            name=name, email=f"{name.lower()}@example.com", payout_destination=destination,
        ))


def _closed_cut(roster: str, tips_cents: int, code: str = "CUT-001") -> None:
    with UnitOfWork() as uow:
        svc = CutsService(uow)
        svc.open_cut(CutOpen(
            code=code, shift_id="SHIFT-1", date="2026-10-17",
            start_time="18:00", roster_text=roster,
        ))
        svc.close_cut(code, end_time="23:30", tips_cents=tips_cents)


def _execute(provider, code: str = "CUT-001", memo: str | None = None, **kwargs):
    with UnitOfWork() as uow:
        return SettlementService(uow, provider, currency="usd", **kwargs).execute(code, memo=memo)


def _statuses(engine) -> dict[str, PayoutStatus]:
    with Session(engine) as s:
        return {a.participant_name: a.payout_status for a in s.exec(select(Allocation)).all()}


def test_execute_transfers_each_allocation(use_test_engine, fake_provider):
    _payee("Ana", "acct_ana001")
    _payee("Ben", "acct_ben001")
    _closed_cut("Ana, Ben", 1000)

    report = _execute(fake_provider, memo="Friday close")

    assert [r.status for r in report.results] == ["transferred", "transferred"]
    assert report.transferred == 2
    assert all(r.transfer_id for r in report.results)
    assert all(r.attempted for r in report.results)

    first = fake_provider.requests[0]
    assert first.amount_cents == 500
    assert first.currency == "usd"
    assert first.metadata == {
        "cut_code": "CUT-001", "participant_name": "Ana", "memo": "Friday close",
    }
    assert _statuses(use_test_engine) == {
        "Ana": PayoutStatus.TRANSFERRED, "Ben": PayoutStatus.TRANSFERRED,
    }


def test_missing_destination_is_skipped_but_sibling_is_paid(use_test_engine, fake_provider):
    _payee("Ben", "acct_ben001")
    _closed_cut("Ana, Ben", 1000)

    report = _execute(fake_provider)

    ana, ben = report.results
    assert ana.status == "skipped"
    assert ana.reason == "no destination"
    assert ana.attempted is False
    assert ben.status == "transferred"
    assert fake_provider.destinations == ["acct_ben001"]


def test_zero_amount_is_skipped(use_test_engine, fake_provider):
    _payee("Ana", "acct_ana001")
    _closed_cut("Ana", 0)

    report = _execute(fake_provider)

    assert report.results[0].status == "skipped"
    assert report.results[0].reason == "zero amount"
    assert fake_provider.requests == []


def test_provider_failure_is_isolated(use_test_engine, fake_provider):
    _payee("Ana", "acct_ana001")
    _payee("Ben", "acct_ben001")
    _closed_cut("Ana, Ben", 1000)
    fake_provider.failures["acct_ana001"] = "Insufficient funds in platform balance"

    report = _execute(fake_provider)

    ana, ben = report.results
    assert ana.status == "failed"
    assert ana.reason == "Insufficient funds in platform balance"
    assert ana.transfer_id is None
    assert ben.status == "transferred"
    assert ben.transfer_id is not None
    assert _statuses(use_test_engine) == {
        "Ana": PayoutStatus.FAILED, "Ben": PayoutStatus.TRANSFERRED,
    }


def test_unexpected_exception_is_recorded_as_failure(use_test_engine):
    class ExplodingProvider:
        def create_transfer(self, request):
            raise RuntimeError("connection reset")

    _payee("Ana", "acct_ana001")
    _closed_cut("Ana", 100)

    report = _execute(ExplodingProvider())

    assert report.results[0].status == "failed"
    assert report.results[0].reason == "connection reset"


def test_execute_on_open_cut_raises_without_provider_calls(use_test_engine, fake_provider):
    with UnitOfWork() as uow:
        CutsService(uow).open_cut(CutOpen(
            code="CUT-001", shift_id="SHIFT-1", date="2026-10-17",
            start_time="18:00", roster_text="Ana",
        ))

    with pytest.raises(InvalidStateError):
        _execute(fake_provider)
    assert fake_provider.requests == []


def test_execute_unknown_cut_raises(use_test_engine, fake_provider):
    with pytest.raises(NotFoundError):
        _execute(fake_provider, code="NOPE")


def test_rerun_retries_failed_and_leaves_transferred_alone(use_test_engine, fake_provider):
    _payee("Ana", "acct_ana001")
    _payee("Ben", "acct_ben001")
    _closed_cut("Ana, Ben", 1000)
    fake_provider.failures["acct_ana001"] = "Account not ready"
    first = _execute(fake_provider)
    ben_transfer = first.results[1].transfer_id

    fake_provider.failures.clear()
    second = _execute(fake_provider)

    ana, ben = second.results
    assert ana.status == "transferred"
    assert ana.attempted is True
    assert ben.status == "transferred"
    assert ben.attempted is False
    assert ben.transfer_id == ben_transfer
    assert fake_provider.destinations == ["acct_ana001", "acct_ben001", "acct_ana001"]

    # a retry reuses the allocation's key
    keys = [r.idempotency_key for r in fake_provider.requests if r.destination == "acct_ana001"]
    assert keys == ["tippool-CUT-001-1", "tippool-CUT-001-1"]


def test_payee_registered_after_close_is_paid_on_execute(use_test_engine, fake_provider):
    _closed_cut("Ana", 700)
    assert _execute(fake_provider).results[0].status == "skipped"

    _payee("Ana", "acct_ana001")
    report = _execute(fake_provider)

    assert report.results[0].status == "transferred"
    assert fake_provider.destinations == ["acct_ana001"]


def test_parallel_settlement_keeps_allocation_order(use_test_engine, fake_provider):
    names = [f"P{i}" for i in range(8)]
    for name in names:
        _payee(name, f"acct_{name.lower()}xx")
    _closed_cut(", ".join(names), 8000)
    fake_provider.failures["acct_p3xx"] = "declined"

    report = _execute(fake_provider, max_workers=4)

    assert [r.participant_name for r in report.results] == names
    assert [r.status for r in report.results].count("transferred") == 7
    assert report.results[3].status == "failed"
    assert report.failed == 1


class IdempotentProvider:
    """Replays the stored transfer for a repeated key, like Stripe does.

    The first call records the transfer and then times out, so the caller
    never sees the receipt for a payment that did go through.
    """

    def __init__(self) -> None:
        self.transfers: dict[str, TransferReceipt] = {}
        self.calls = 0

    def create_transfer(self, request: TransferRequest) -> TransferReceipt:
        self.calls += 1
        if request.idempotency_key in self.transfers:
            return self.transfers[request.idempotency_key]
        receipt = TransferReceipt(transfer_id=f"tr_paid_{len(self.transfers) + 1}")
        self.transfers[request.idempotency_key] = receipt
        if self.calls == 1:
            raise ProviderError("Request timed out", code="ReadTimeout")
        return receipt


def test_rerun_after_timeout_does_not_pay_twice(use_test_engine):
    _payee("Ana", "acct_ana001")
    _closed_cut("Ana", 500)
    provider = IdempotentProvider()

    first = _execute(provider)
    assert first.results[0].status == "failed"

    second = _execute(provider)

    assert provider.calls == 2
    assert list(provider.transfers) == ["tippool-CUT-001-1"]
    assert second.results[0].status == "transferred"
    assert second.results[0].transfer_id == "tr_paid_1"
    with Session(use_test_engine) as s:
        alloc = s.exec(select(Allocation)).one()
    assert alloc.transfer_id == "tr_paid_1"
    assert alloc.attempts == 2


def test_provider_is_not_built_when_nothing_needs_a_transfer(use_test_engine):
    _closed_cut("Ana, Ben", 1000)

    def no_key():
        raise ProviderError("STRIPE_SECRET_KEY is not configured")

    with UnitOfWork() as uow:
        report = SettlementService(uow, provider_factory=no_key).execute("CUT-001")

    assert [r.status for r in report.results] == ["skipped", "skipped"]
    assert _statuses(use_test_engine) == {"Ana": PayoutStatus.SKIPPED, "Ben": PayoutStatus.SKIPPED}


def test_provider_factory_error_surfaces_when_a_transfer_is_needed(use_test_engine):
    _payee("Ana", "acct_ana001")
    _closed_cut("Ana", 500)

    def no_key():
        raise ProviderError("STRIPE_SECRET_KEY is not configured")

    with pytest.raises(ProviderError), UnitOfWork() as uow:
        SettlementService(uow, provider_factory=no_key).execute("CUT-001")
    assert _statuses(use_test_engine) == {"Ana": PayoutStatus.PENDING}


def test_service_requires_a_provider_or_factory(use_test_engine):
    with UnitOfWork() as uow, pytest.raises(ValueError):
        SettlementService(uow)
