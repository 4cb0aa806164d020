from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from data_audit.database import Base


class AuditMixin:
    """Audit columns maintained by :class:`data_audit.auditing.AuditFieldPopulator`."""

    created_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=False, active_history=True
    )
    created_by: Mapped[Optional[str]] = mapped_column(
        String(255), nullable=False, active_history=True
    )
    modified_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=False)
    modified_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=False)


class User(Base, AuditMixin):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    username: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)

    def __repr__(self) -> str:
        return f"User(id={self.id!r}, username={self.username!r})"
