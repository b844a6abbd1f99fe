from __future__ import annotations

import pytest
from yardsync.audit.recorder import AuditRecorder
from yardsync.models.context import OperatorContext
from yardsync.persistence.memory_store import InMemoryEntityStore
from yardsync.sync.service import SyncService


@pytest.fixture
def store() -> InMemoryEntityStore:
    return InMemoryEntityStore()


@pytest.fixture
def operator() -> OperatorContext:
    return OperatorContext(user_id="test-user", user_name="Test User")


@pytest.fixture
def service(store: InMemoryEntityStore) -> SyncService:
    return SyncService(store)


@pytest.fixture
def audited_service(store: InMemoryEntityStore) -> SyncService:
    return SyncService(store, audit=AuditRecorder(store))
