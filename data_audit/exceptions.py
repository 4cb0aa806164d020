from __future__ import annotations


class AuditError(RuntimeError):
    """Base class for failures raised while maintaining audit fields."""


class AuditPreconditionError(AuditError):
    """Raised when an update is audited on a record that was never audited on insert."""

    def __init__(self, record: object, missing: list[str]) -> None:
        super().__init__(
            f"Cannot audit update of {type(record).__name__}: "
            f"creation fields were never populated ({', '.join(missing)})"
        )
        self.record = record
        self.missing = missing


class AuditorUnavailableError(AuditError):
    """Raised when the actor resolver does not yield a usable identifier."""


class WriteOnceViolationError(AuditError):
    """Raised when creation audit fields of a persisted record were changed."""

    def __init__(self, record: object, fields: list[str]) -> None:
        super().__init__(
            f"Creation audit fields of {type(record).__name__} are write-once: {', '.join(fields)}"
        )
        self.record = record
        self.fields = fields
