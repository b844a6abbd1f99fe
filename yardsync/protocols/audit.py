from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from yardsync.models.audit import AuditAction, AuditEntry
from yardsync.models.context import OperatorContext


@runtime_checkable
class AuditLog(Protocol):
    async def log(
        self,
        context: OperatorContext,
        action: AuditAction,
        entity_type: str,
        entity_id: str,
        description: str,
        metadata: dict[str, Any] | None = None,
    ) -> AuditEntry: ...

    async def get_all(self) -> list[AuditEntry]: ...


__all__ = ["AuditLog"]
