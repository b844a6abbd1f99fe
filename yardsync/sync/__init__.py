"""Export/import synchronization engine."""

from yardsync.sync.archive import read_bundle, write_bundle
from yardsync.sync.collections import COLLECTIONS, get_descriptor, order_collections
from yardsync.sync.exporter import export_data
from yardsync.sync.importer import import_data
from yardsync.sync.manifest import build_manifest
from yardsync.sync.preview import preview_import
from yardsync.sync.protection import is_protected
from yardsync.sync.service import SyncService
from yardsync.sync.validator import validate_export_data

__all__ = [
    "COLLECTIONS",
    "SyncService",
    "build_manifest",
    "export_data",
    "get_descriptor",
    "import_data",
    "is_protected",
    "order_collections",
    "preview_import",
    "read_bundle",
    "validate_export_data",
    "write_bundle",
]
