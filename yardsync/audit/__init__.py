from yardsync.audit.recorder import AUDIT_COLLECTION, AuditRecorder

__all__ = ["AUDIT_COLLECTION", "AuditRecorder"]
