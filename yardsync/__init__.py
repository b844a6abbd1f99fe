"""yardsync: export/import synchronization engine for the yard data store."""

__version__ = "4.0.0"

__all__ = ["__version__"]
