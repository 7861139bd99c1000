"""
JSON File Snapshot Adapter

This module implements the SnapshotAdapter interface with a single JSON file.

Key characteristics:
- One file, fully overwritten on each flush
- Writes go to a temporary file in the same directory which is then renamed
  over the snapshot, so a crash mid-write leaves the previous snapshot intact
- Reads validate the whole document before anything is handed to the store
"""

import os
import tempfile
from contextlib import suppress
from pathlib import Path
from typing import Union

from pydantic import ValidationError

from shortener.core.exceptions import SnapshotReadError, SnapshotWriteError
from shortener.db.interface import SnapshotAdapter
from shortener.db.models import SnapshotDocument


class JsonFileAdapter(SnapshotAdapter):
    """
    Snapshot adapter backed by a JSON file.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def read(self) -> SnapshotDocument:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise SnapshotReadError(self.describe(), "Snapshot file not found", e)
        except (OSError, UnicodeDecodeError) as e:
            raise SnapshotReadError(self.describe(), "Snapshot file unreadable", e)

        if not raw.strip():
            raise SnapshotReadError(self.describe(), "Snapshot file is empty")

        try:
            return SnapshotDocument.model_validate_json(raw)
        except ValidationError as e:
            raise SnapshotReadError(self.describe(), "Snapshot file is not a valid snapshot", e)

    def write(self, document: SnapshotDocument) -> None:
        payload = document.to_json()
        directory = self.path.parent
        tmp_path = None

        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                dir=directory,
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except OSError as e:
            if tmp_path is not None:
                with suppress(OSError):
                    os.unlink(tmp_path)
            raise SnapshotWriteError(self.describe(), "Failed to write snapshot", e)

    def describe(self) -> str:
        return str(self.path)


def get_snapshot_adapter(snapshot_path: Union[str, Path]) -> SnapshotAdapter:
    """
    Factory function to get the snapshot adapter.

    Currently returns JsonFileAdapter. To use a different backend,
    return a different adapter here.

    Args:
        snapshot_path: Location of the snapshot file

    Returns:
        SnapshotAdapter instance
    """
    return JsonFileAdapter(snapshot_path)
