from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import inspect, select
from sqlalchemy.orm import Session

from data_audit.auditing import AUDIT_FIELDS, CREATION_FIELDS, AuditFieldPopulator, AuditorResolver
from data_audit.config import get_settings
from data_audit.exceptions import WriteOnceViolationError
from data_audit.models import User

logger = logging.getLogger(__name__)


def build_populator() -> AuditFieldPopulator:
    return AuditFieldPopulator(resolution=get_settings().audit_resolution)


def _ensure_required(user: User) -> None:
    for field in ("name", "username"):
        value = getattr(user, field)
        if value is None or not str(value).strip():
            raise ValueError(f"{field} is required")


def _clear_audit_fields(user: User) -> None:
    for name in AUDIT_FIELDS:
        setattr(user, name, None)


def _changed_creation_fields(user: User) -> list[str]:
    state = inspect(user)
    return [name for name in CREATION_FIELDS if state.attrs[name].history.deleted]


class UserRepository:
    """Persists users, auditing every write through the populator.

    New users are audited as inserts and persistent users as updates; the
    populator runs inside the same session transaction as the write.
    """

    def __init__(
        self,
        session: Session,
        auditor_resolver: AuditorResolver,
        populator: Optional[AuditFieldPopulator] = None,
    ) -> None:
        self.session = session
        self.auditor_resolver = auditor_resolver
        self.populator = populator or build_populator()

    def with_auditor(self, auditor_resolver: AuditorResolver) -> "UserRepository":
        return UserRepository(self.session, auditor_resolver, self.populator)

    def save(self, user: User) -> User:
        state = inspect(user)
        is_new = state.transient or state.pending
        try:
            _ensure_required(user)
            if is_new:
                self.populator.on_insert(user, self.auditor_resolver)
            else:
                changed = _changed_creation_fields(user)
                if changed:
                    raise WriteOnceViolationError(user, changed)
                self.populator.on_update(user, self.auditor_resolver)
            self.session.add(user)
            self.session.commit()
        except Exception:
            self.session.rollback()
            if is_new:
                _clear_audit_fields(user)
            raise

        self.session.refresh(user)
        if is_new:
            logger.info("Created user %s by %s", user.id, user.created_by)
        else:
            logger.info("Updated user %s by %s", user.id, user.modified_by)
        return user

    def find_one(self, user_id: int) -> Optional[User]:
        return self.session.get(User, user_id)

    def find_all(self) -> list[User]:
        return list(self.session.execute(select(User).order_by(User.username)).scalars())

    def exists_by_username(self, username: str, exclude_id: Optional[int] = None) -> bool:
        statement = select(User.id).where(User.username == username)
        if exclude_id is not None:
            statement = statement.where(User.id != exclude_id)
        return self.session.execute(statement.limit(1)).first() is not None

    def delete(self, user: User) -> None:
        user_id = user.id
        self.session.delete(user)
        self.session.commit()
        logger.info("Deleted user %s", user_id)
