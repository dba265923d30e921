"""Error kinds raised by the planner."""


class JogFileError(Exception):
    """Base class for all planner errors."""

    pass


class NotFound(JogFileError):
    """Raised when a referenced task or template has no record."""

    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} not found: {record_id}")


class ValidationFailure(JogFileError):
    """Raised for bad user input or an invalid state transition."""

    pass


class AmbiguousSchedule(ValidationFailure):
    """Raised when a recurrence pattern cannot be evaluated without guessing."""

    pass


class StoreFailure(JogFileError):
    """Raised by store adapters when a read or write fails."""

    pass
