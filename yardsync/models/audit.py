"""Append-only audit entries as stored in the ``auditEntries`` collection."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from yardsync.models.context import utc_now


class AuditAction(str, Enum):
    create = "CREATE"
    update = "UPDATE"
    delete = "DELETE"
    archive = "ARCHIVE"
    status_transition = "STATUS_TRANSITION"
    approve = "APPROVE"
    freeze = "FREEZE"
    generate_document = "GENERATE_DOCUMENT"
    amendment = "AMENDMENT"
    emergency_unlock = "EMERGENCY_UNLOCK"
    import_ = "IMPORT"


class AuditEntry(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    timestamp: datetime = Field(default_factory=utc_now)
    # Mirrors ``timestamp``; kept so entries satisfy the generic entity shape.
    created_at: datetime | None = None
    user_id: str
    user_name: str
    action: AuditAction
    entity_type: str
    entity_id: str
    description: str
    before: dict[str, Any] | None = None
    after: dict[str, Any] | None = None
    metadata: dict[str, Any] | None = None

    @model_validator(mode="after")
    def _default_created_at(self) -> AuditEntry:
        if self.created_at is None:
            self.created_at = self.timestamp
        return self

    def to_record(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


__all__ = ["AuditAction", "AuditEntry"]
