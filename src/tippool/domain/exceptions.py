class TipPoolError(Exception):
    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class NotFoundError(TipPoolError):
    """Requested cut or allocation does not exist."""


class ConflictError(TipPoolError):
    """Operation conflicts with existing state."""


class DuplicateCodeError(ConflictError):
    """A cut with this code already exists."""


class InvalidStateError(ConflictError):
    """Operation requires the cut to be in a different lifecycle state."""


class InvalidInputError(TipPoolError):
    """Malformed input that passed request parsing (amounts, required fields)."""


class ProviderError(TipPoolError):
    """The payout provider rejected or failed a transfer attempt."""

    def __init__(self, message: str, code: str | None = None) -> None:
        self.code = code
        super().__init__(message)
