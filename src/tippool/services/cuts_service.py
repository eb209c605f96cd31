"""Cut lifecycle use-case service: open, close, read.

Close is a one-way transition. A second close on the same cut is rejected
instead of inserting another batch of allocations.
"""
from __future__ import annotations
import logging
from sqlalchemy.exc import IntegrityError
from tippool.config import settings
from tippool.domain.exceptions import (
    DuplicateCodeError, InvalidInputError, InvalidStateError, NotFoundError,
)
from tippool.domain.roster import parse_roster
from tippool.domain.shares import Split, split_tips
from tippool.infra.db.uow import UnitOfWork
from tippool.infra.db.repositories.cut_repository import CutRepository
from tippool.infra.db.repositories.allocation_repository import AllocationRepository
from tippool.infra.db.repositories.payee_repository import PayeeRepository
from tippool.models.cut import Cut, CutStatus
from tippool.api.schemas.cuts import (
    AllocationRead, CutCloseResponse, CutDetail, CutList, CutOpen, CutRead, CutStatusDTO,
)

logger = logging.getLogger(__name__)


class CutsService:
    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def _get_cut(self, code: str) -> Cut:
        cut = CutRepository(self._uow.session).get_by_code(code)
        if cut is None:
            raise NotFoundError(f"Cut {code} not found")
        return cut

    def open_cut(self, payload: CutOpen) -> CutRead:
        repo = CutRepository(self._uow.session)
        if repo.get_by_code(payload.code) is not None:
            raise DuplicateCodeError(f"Cut {payload.code} already exists")
        try:
            cut = repo.create(
                code=payload.code,
                shift_id=payload.shift_id,
                date=payload.date,
                start_time=payload.start_time,
                roster_text=payload.roster_text,
                notes=payload.notes,
            )
        except IntegrityError:
            # Lost a race with a concurrent open of the same code.
            self._uow.rollback()
            raise DuplicateCodeError(f"Cut {payload.code} already exists") from None
        self._uow.commit()
        logger.info("Opened cut %s for shift %s", cut.code, cut.shift_id)
        return CutRead.model_validate(cut)

    def close_cut(self, code: str, *, end_time: str, tips_cents: int) -> CutCloseResponse:
        if tips_cents < 0:
            raise InvalidInputError("tips must be non-negative")
        cut = self._get_cut(code)
        if cut.status == CutStatus.CLOSED:
            raise InvalidStateError(f"Cut {code} is already closed")

        names = list(parse_roster(cut.roster_text, settings.ROSTER_DELIMITER))
        split = split_tips(tips_cents, len(names))
        allocations = close_with_allocations(
            self._uow, cut, end_time=end_time, tips_cents=tips_cents, names=names, split=split,
        )
        self._uow.commit()

        logger.info(
            "Closed cut %s: %d people x %d cents (remainder %d of %d)",
            cut.code, split.people_count, split.per_person_cents,
            split.remainder_cents, tips_cents,
        )
        return CutCloseResponse(
            cut=CutRead.model_validate(cut),
            allocations=[AllocationRead.model_validate(a) for a in allocations],
            remainder_cents=split.remainder_cents,
        )

    def get_cut(self, code: str) -> CutDetail:
        cut = self._get_cut(code)
        allocations = AllocationRepository(self._uow.session).list_by_cut(cut.id)
        return CutDetail(
            cut=CutRead.model_validate(cut),
            allocations=[AllocationRead.model_validate(a) for a in allocations],
        )

    def list_cuts(
        self, *, status: CutStatusDTO | None = None, limit: int = 100, offset: int = 0,
    ) -> CutList:
        repo = CutRepository(self._uow.session)
        model_status = CutStatus(status.value) if status else None
        cuts = repo.list_all(status=model_status, limit=limit, offset=offset)
        return CutList(
            items=[CutRead.model_validate(c) for c in cuts],
            total=repo.count(status=model_status),
        )


def close_with_allocations(
    uow: UnitOfWork,
    cut: Cut,
    *,
    end_time: str,
    tips_cents: int,
    names: list[str],
    split: Split,
):
    """Mark *cut* closed and insert one pending allocation per roster name.

    Flushes but does not commit: the caller commits the cut update and the
    allocations together.
    """
    payees = PayeeRepository(uow.session)
    entries: list[tuple[str, str | None]] = []
    for name in names:
        payee = payees.find_by_name(name)
        entries.append((name, payee.payout_destination if payee else None))

    cut.end_time = end_time
    cut.tips_cents = tips_cents
    cut.people_count = split.people_count
    cut.per_person_cents = split.per_person_cents
    cut.status = CutStatus.CLOSED
    CutRepository(uow.session).save(cut)

    return AllocationRepository(uow.session).create_many(
        cut_id=cut.id, entries=entries, payout_cents=split.per_person_cents,
    )
