from yardsync.protocols.audit import AuditLog
from yardsync.protocols.store import EntityStore, OrderBy, QueryFilter

__all__ = ["AuditLog", "EntityStore", "OrderBy", "QueryFilter"]
