import argparse

from sqlalchemy.exc import IntegrityError

from data_audit.auditor import FixedAuditorResolver
from data_audit.database import SessionLocal
from data_audit.models import User
from data_audit.repositories import UserRepository


def create_user(name: str, username: str, auditor: str | None = None) -> User | None:
    with SessionLocal() as session:
        repository = UserRepository(session, FixedAuditorResolver(auditor))
        if repository.exists_by_username(username):
            print(f"User already exists: {username}")
            return None

        try:
            user = repository.save(User(name=name, username=username))
        except IntegrityError as exc:
            raise RuntimeError(f"Failed to create user due to integrity error: {exc}") from exc

        print(f"Created user {user.id} ({user.username}) by {user.created_by} at {user.created_at}")
        return user


def main() -> None:
    parser = argparse.ArgumentParser(description="Create an audited user in the database.")
    parser.add_argument("--name", required=True, help="Full name of the user")
    parser.add_argument("--username", required=True, help="Username for the new user")
    parser.add_argument(
        "--auditor",
        default=None,
        help="Actor recorded as creator (defaults to the configured auditor)",
    )

    args = parser.parse_args()
    create_user(name=args.name, username=args.username, auditor=args.auditor)


if __name__ == "__main__":
    main()
