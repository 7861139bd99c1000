"""
Storage module with abstraction layer.

This module provides:
- SnapshotAdapter interface: Abstract base class for snapshot backends
- JsonFileAdapter: JSON file implementation (default)
- Data models: LinkRecord, StoreState and the snapshot schema

To add a new snapshot backend:
1. Create a new adapter class inheriting from SnapshotAdapter
2. Implement all abstract methods
3. Update get_snapshot_adapter() in json_adapter.py to return the new adapter
"""

from shortener.db.interface import SnapshotAdapter
from shortener.db.json_adapter import JsonFileAdapter, get_snapshot_adapter
from shortener.db.models import LinkRecord, SnapshotDocument, StoreState

__all__ = [
    "SnapshotAdapter",
    "JsonFileAdapter",
    "get_snapshot_adapter",
    "LinkRecord",
    "SnapshotDocument",
    "StoreState",
]
