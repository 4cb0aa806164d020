from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from data_audit.auditor import HeaderAuditorResolver, get_auditor_resolver
from data_audit.database import get_db
from data_audit.exceptions import AuditError
from data_audit.models import User
from data_audit.repositories import UserRepository
from data_audit.schemas import UserCreate, UserRead, UserUpdate

router = APIRouter(prefix="/users", tags=["Users"])


def get_user_repository(
    db: Session = Depends(get_db),
    auditor: HeaderAuditorResolver = Depends(get_auditor_resolver),
) -> UserRepository:
    return UserRepository(db, auditor)


def _get_user_or_404(user_id: int, repository: UserRepository) -> User:
    user = repository.find_one(user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


def _ensure_unique_username(
    username: str | None, repository: UserRepository, user_id: int | None = None
) -> None:
    if not username:
        return
    if repository.exists_by_username(username, exclude_id=user_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username already in use",
        )


def _save(user: User, repository: UserRepository) -> User:
    try:
        return repository.save(user)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    except AuditError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except IntegrityError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username already in use",
        ) from exc


@router.post("", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def create_user(
    payload: UserCreate, repository: UserRepository = Depends(get_user_repository)
) -> UserRead:
    _ensure_unique_username(payload.username, repository)

    user = User(**payload.model_dump())
    return _save(user, repository)


@router.get("", response_model=list[UserRead])
def list_users(repository: UserRepository = Depends(get_user_repository)) -> list[UserRead]:
    return repository.find_all()


@router.get("/{user_id}", response_model=UserRead)
def get_user(user_id: int, repository: UserRepository = Depends(get_user_repository)) -> UserRead:
    return _get_user_or_404(user_id, repository)


@router.put("/{user_id}", response_model=UserRead)
def update_user(
    user_id: int,
    payload: UserUpdate,
    repository: UserRepository = Depends(get_user_repository),
) -> UserRead:
    user = _get_user_or_404(user_id, repository)

    update_data = payload.model_dump(exclude_unset=True)
    if "username" in update_data:
        _ensure_unique_username(update_data["username"], repository, user_id=user_id)

    for field, value in update_data.items():
        setattr(user, field, value)

    return _save(user, repository)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: int, repository: UserRepository = Depends(get_user_repository)) -> None:
    user = _get_user_or_404(user_id, repository)
    repository.delete(user)
