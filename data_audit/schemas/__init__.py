from data_audit.schemas.entities import AuditSchema, UserCreate, UserRead, UserUpdate

__all__ = ["AuditSchema", "UserCreate", "UserRead", "UserUpdate"]
