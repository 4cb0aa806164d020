from data_audit.models.entities import AuditMixin, User

__all__ = ["AuditMixin", "User"]
