from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from data_audit.auditing import AuditFieldPopulator
from data_audit.auditor import FixedAuditorResolver
from data_audit.exceptions import AuditorUnavailableError, WriteOnceViolationError
from data_audit.models import User
from data_audit.repositories import UserRepository


@pytest.fixture
def repository(db_session) -> UserRepository:
    return UserRepository(db_session, FixedAuditorResolver("Mr. Auditor"))


@pytest.fixture
def user(repository: UserRepository) -> User:
    user = repository.save(User(name="Rashidi Zin", username="rashidi.zin"))

    assert user.created_at is not None
    assert user.modified_at is not None
    assert user.created_by == "Mr. Auditor"
    assert user.modified_by == "Mr. Auditor"
    return user


def test_save_new_user_populates_audit_fields(user: User) -> None:
    assert user.id is not None
    assert user.created_at == user.modified_at


def test_update_keeps_created_and_advances_modified(repository: UserRepository, user: User) -> None:
    created = user.created_at
    modified = user.modified_at

    user.username = "rashidi"
    repository.save(user)

    updated = repository.find_one(user.id)
    assert updated.username == "rashidi"
    assert updated.created_at == created
    assert updated.created_by == "Mr. Auditor"
    assert updated.modified_at > modified
    assert updated.modified_by == "Mr. Auditor"


def test_update_with_other_auditor(repository: UserRepository, user: User) -> None:
    user.name = "Rashidi"
    repository.with_auditor(FixedAuditorResolver("Other Auditor")).save(user)

    updated = repository.find_one(user.id)
    assert updated.modified_by == "Other Auditor"
    assert updated.created_by == "Mr. Auditor"


def test_repeated_saves_advance_modified_under_frozen_clock(db_session) -> None:
    frozen = datetime(2026, 10, 19, 10, 0, tzinfo=timezone.utc)
    repository = UserRepository(
        db_session,
        FixedAuditorResolver("Mr. Auditor"),
        AuditFieldPopulator(clock=lambda: frozen),
    )
    user = repository.save(User(name="Rashidi Zin", username="rashidi.zin"))

    repository.save(user)
    first = user.modified_at
    repository.save(user)
    second = user.modified_at

    assert user.created_at < first < second
    assert second - first == timedelta(microseconds=1)


def test_creation_fields_are_write_once(repository: UserRepository, user: User) -> None:
    user.created_by = "Intruder"

    with pytest.raises(WriteOnceViolationError) as excinfo:
        repository.save(user)

    assert excinfo.value.fields == ["created_by"]
    assert repository.find_one(user.id).created_by == "Mr. Auditor"


def test_blank_business_attributes_are_rejected(repository: UserRepository) -> None:
    with pytest.raises(ValueError, match="username is required"):
        repository.save(User(name="Rashidi Zin", username="   "))

    assert repository.find_all() == []


def test_resolver_failure_is_propagated_and_nothing_is_written(db_session) -> None:
    def failing_resolver() -> str:
        raise LookupError("no security context")

    repository = UserRepository(db_session, failing_resolver)
    user = User(name="Rashidi Zin", username="rashidi.zin")

    with pytest.raises(LookupError):
        repository.save(user)

    assert user.created_at is None
    assert db_session.execute(select(User)).first() is None


def test_missing_auditor_is_rejected(db_session) -> None:
    repository = UserRepository(db_session, lambda: None)

    with pytest.raises(AuditorUnavailableError):
        repository.save(User(name="Rashidi Zin", username="rashidi.zin"))


def test_unaudited_writes_fail_at_the_database(db_session) -> None:
    db_session.add(User(name="Rashidi Zin", username="rashidi.zin"))

    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()


def test_find_all_orders_by_username(repository: UserRepository) -> None:
    repository.save(User(name="Zed", username="zed"))
    repository.save(User(name="Amy", username="amy"))

    assert [user.username for user in repository.find_all()] == ["amy", "zed"]


def test_exists_by_username_excludes_given_id(repository: UserRepository, user: User) -> None:
    assert repository.exists_by_username("rashidi.zin")
    assert not repository.exists_by_username("rashidi.zin", exclude_id=user.id)
    assert not repository.exists_by_username("someone.else")


def test_delete_removes_user(repository: UserRepository, user: User) -> None:
    user_id = user.id

    repository.delete(user)

    assert repository.find_one(user_id) is None


def test_failed_insert_leaves_audit_fields_unset(repository: UserRepository, user: User) -> None:
    duplicate = User(name="Someone Else", username="rashidi.zin")

    with pytest.raises(IntegrityError):
        repository.save(duplicate)

    assert duplicate.created_at is None
    assert duplicate.created_by is None
    assert duplicate.modified_at is None
    assert duplicate.modified_by is None
    assert [stored.username for stored in repository.find_all()] == ["rashidi.zin"]
