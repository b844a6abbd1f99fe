"""Append-only audit log kept in the store's ``auditEntries`` collection."""

from __future__ import annotations

import logging
from typing import Any

from yardsync.models.audit import AuditAction, AuditEntry
from yardsync.models.context import OperatorContext
from yardsync.protocols.store import EntityStore, OrderBy, QueryFilter

AUDIT_COLLECTION = "auditEntries"

logger = logging.getLogger(__name__)


class AuditRecorder:
    def __init__(self, store: EntityStore) -> None:
        self._store = store

    async def log(
        self,
        context: OperatorContext,
        action: AuditAction,
        entity_type: str,
        entity_id: str,
        description: str,
        metadata: dict[str, Any] | None = None,
    ) -> AuditEntry:
        entry = AuditEntry(
            user_id=context.user_id,
            user_name=context.user_name,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            description=description,
            metadata=metadata,
        )
        await self._store.save(AUDIT_COLLECTION, entry.to_record())
        logger.debug("audit %s %s/%s: %s", action.value, entity_type, entity_id, description)
        return entry

    async def get_all(self) -> list[AuditEntry]:
        records = await self._store.query(
            AUDIT_COLLECTION, QueryFilter(order_by=OrderBy(field="timestamp"))
        )
        return [AuditEntry.model_validate(r) for r in records]


__all__ = ["AUDIT_COLLECTION", "AuditRecorder"]
