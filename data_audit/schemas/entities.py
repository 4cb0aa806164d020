from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _require_text(value: Optional[str], field_name: str) -> Optional[str]:
    if value is None:
        return value
    stripped = value.strip()
    if not stripped:
        raise ValueError(f"{field_name} is required")
    return stripped


class AuditSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    created_at: datetime
    created_by: str
    modified_at: datetime
    modified_by: str


class UserBase(BaseModel):
    name: str = Field(..., max_length=200)
    username: str = Field(..., max_length=200)

    @field_validator("name", "username")
    @classmethod
    def _not_blank(cls, value: str, info) -> str:
        return _require_text(value, info.field_name)


class UserCreate(UserBase):
    pass


class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=200)
    username: Optional[str] = Field(None, max_length=200)

    @field_validator("name", "username")
    @classmethod
    def _not_blank(cls, value: Optional[str], info) -> Optional[str]:
        return _require_text(value, info.field_name)


class UserRead(UserBase, AuditSchema):
    id: int
