"""Audit field population for insert and update writes.

:class:`AuditFieldPopulator` fills ``created_at``, ``created_by``,
``modified_at`` and ``modified_by`` on any record exposing those attributes.
The storage layer calls :meth:`AuditFieldPopulator.on_insert` before the first
durable write of a record and :meth:`AuditFieldPopulator.on_update` before each
later one, passing the actor resolver for the write.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Protocol, TypeVar

from data_audit.exceptions import AuditorUnavailableError, AuditPreconditionError

logger = logging.getLogger(__name__)

AuditorResolver = Callable[[], Optional[str]]
Clock = Callable[[], datetime]

CREATION_FIELDS = ("created_at", "created_by")
AUDIT_FIELDS = CREATION_FIELDS + ("modified_at", "modified_by")


class Auditable(Protocol):
    created_at: Optional[datetime]
    created_by: Optional[str]
    modified_at: Optional[datetime]
    modified_by: Optional[str]


RecordT = TypeVar("RecordT", bound=Auditable)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime; naive values are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _truncate(value: datetime, resolution: timedelta) -> datetime:
    if resolution <= timedelta(microseconds=1):
        return value
    epoch = datetime(1970, 1, 1, tzinfo=timezone.utc)
    return value - ((value - epoch) % resolution)


class AuditFieldPopulator:
    """Computes and assigns audit field values for insert and update writes.

    Args:
        clock: Zero-argument callable returning the current time. Defaults to UTC now.
        resolution: Granularity timestamps are truncated to. ``modified_at`` is
            bumped by one unit whenever the clock would not move it forward.
    """

    def __init__(
        self,
        clock: Optional[Clock] = None,
        resolution: timedelta = timedelta(microseconds=1),
    ) -> None:
        if resolution <= timedelta(0):
            raise ValueError("Timestamp resolution must be positive.")
        self._clock = clock or utc_now
        self._resolution = resolution

    @property
    def resolution(self) -> timedelta:
        return self._resolution

    def now(self) -> datetime:
        return _truncate(as_utc(self._clock()), self._resolution)

    def on_insert(self, record: RecordT, auditor_resolver: AuditorResolver) -> RecordT:
        """Populate all four audit fields of a record that is about to be inserted."""
        actor = _resolve_actor(auditor_resolver)
        timestamp = self.now()

        record.created_at = timestamp
        record.created_by = actor
        record.modified_at = timestamp
        record.modified_by = actor
        logger.debug("Audited insert of %s by %s at %s", type(record).__name__, actor, timestamp)
        return record

    def on_update(self, record: RecordT, auditor_resolver: AuditorResolver) -> RecordT:
        """Refresh the modification fields of a record that is about to be updated.

        Raises:
            AuditPreconditionError: If the record's creation fields were never set.
        """
        missing = [name for name in CREATION_FIELDS if getattr(record, name, None) is None]
        if missing:
            raise AuditPreconditionError(record, missing)

        actor = _resolve_actor(auditor_resolver)
        timestamp = self.now()
        previous = getattr(record, "modified_at", None) or record.created_at
        previous = as_utc(previous)
        if timestamp <= previous:
            timestamp = previous + self._resolution

        record.modified_at = timestamp
        record.modified_by = actor
        logger.debug("Audited update of %s by %s at %s", type(record).__name__, actor, timestamp)
        return record


def _resolve_actor(auditor_resolver: AuditorResolver) -> str:
    actor = auditor_resolver()
    if actor is None or not str(actor).strip():
        raise AuditorUnavailableError("Actor resolver did not return an auditor identifier.")
    return str(actor)


_default_populator = AuditFieldPopulator()


def on_insert(record: RecordT, auditor_resolver: AuditorResolver) -> RecordT:
    return _default_populator.on_insert(record, auditor_resolver)


def on_update(record: RecordT, auditor_resolver: AuditorResolver) -> RecordT:
    return _default_populator.on_update(record, auditor_resolver)
