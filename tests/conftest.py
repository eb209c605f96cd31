"""Shared test fixtures.

  use_test_engine  : redirects UoW + infra layer to a temp-file SQLite DB.
  fake_provider    : in-memory TransferProvider that records every call.
  client           : FastAPI TestClient wired to the test engine and fake provider.
"""
import threading
import pytest
from sqlmodel import SQLModel, create_engine

from tippool.domain.exceptions import ProviderError
from tippool.infra.payments.provider import TransferReceipt, TransferRequest


class FakeTransferProvider:
    """Test double: succeeds unless the destination is listed in *failures*."""

    def __init__(self, failures: dict[str, str] | None = None) -> None:
        self.failures = dict(failures or {})
        self.requests: list[TransferRequest] = []
        self._lock = threading.Lock()

    def create_transfer(self, request: TransferRequest) -> TransferReceipt:
        with self._lock:
            self.requests.append(request)
            n = len(self.requests)
        if request.destination in self.failures:
            raise ProviderError(self.failures[request.destination])
        return TransferReceipt(transfer_id=f"tr_test_{n}")

    @property
    def destinations(self) -> list[str]:
        return [r.destination for r in self.requests]


@pytest.fixture
def use_test_engine(tmp_path, monkeypatch):
    """Monkeypatch infra/db engine references to an isolated temp-file SQLite DB."""
    db_path = tmp_path / "test_tippool.db"
    test_engine = create_engine(
        f"sqlite:///{db_path}", echo=False, connect_args={"check_same_thread": False},
    )

    import tippool.models  # noqa: F401  register all ORM mappers
    SQLModel.metadata.create_all(test_engine)

    monkeypatch.setattr("tippool.infra.db.engine.engine", test_engine)
    monkeypatch.setattr("tippool.infra.db.uow.engine", test_engine)

    yield test_engine

    SQLModel.metadata.drop_all(test_engine)
    test_engine.dispose()


@pytest.fixture
def fake_provider():
    return FakeTransferProvider()


@pytest.fixture
def client(use_test_engine, fake_provider):
    """FastAPI TestClient backed by the isolated test engine and fake provider."""
    from fastapi.testclient import TestClient
    from tippool.api.app import create_app
    from tippool.api.deps import get_provider_factory

    app = create_app()
    app.dependency_overrides[get_provider_factory] = lambda: (lambda: fake_provider)
    with TestClient(app) as c:
        yield c
