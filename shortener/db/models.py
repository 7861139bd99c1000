"""
Data Models for the URL Shortener Service

This module defines:
- LinkRecord: the per-link record held in memory (target URL, clicks, creation time)
- StoreState: a detached copy of the complete link store state
- SnapshotDocument: the Pydantic schema of the on-disk snapshot

Design Decisions:
- In-memory records are plain dataclasses; only the link store mutates them
- The snapshot schema is validated with Pydantic so a truncated or hand-edited
  file is rejected as a whole instead of half-loaded
- Snapshot keys are camelCase and timestamps are epoch milliseconds, so the
  file layout stays stable across versions
"""

import time
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from pydantic import BaseModel, ConfigDict, Field


def now_millis() -> int:
    """Current time as integer epoch milliseconds."""
    return time.time_ns() // 1_000_000


@dataclass
class LinkRecord:
    """
    A shortened link.

    Fields:
    - long_url: The original URL the short code redirects to
    - clicks: Number of times the short code was resolved (never decreases)
    - created_at: Creation time in epoch milliseconds
    """
    long_url: str
    clicks: int = 0
    created_at: int = field(default_factory=now_millis)

    def copy(self) -> "LinkRecord":
        return LinkRecord(self.long_url, self.clicks, self.created_at)


@dataclass
class StoreState:
    """Detached copy of the link store maps and counter."""
    long_to_short: Dict[str, str] = field(default_factory=dict)
    short_to_record: Dict[str, LinkRecord] = field(default_factory=dict)
    counter: int = 0


class RecordDocument(BaseModel):
    """Snapshot form of a LinkRecord."""
    model_config = ConfigDict(populate_by_name=True)

    long_url: str = Field(..., alias="longUrl")
    clicks: int = Field(default=0, ge=0)
    created_at: int = Field(..., alias="createdAt", ge=0)


class SnapshotDocument(BaseModel):
    """
    Snapshot file layout.

    {
      "longToShort": [[longUrl, shortCode], ...],
      "shortToRecord": [[shortCode, {"longUrl": ..., "clicks": N, "createdAt": ms}], ...],
      "counter": N
    }
    """
    model_config = ConfigDict(populate_by_name=True)

    long_to_short: List[Tuple[str, str]] = Field(default_factory=list, alias="longToShort")
    short_to_record: List[Tuple[str, RecordDocument]] = Field(..., alias="shortToRecord")
    counter: int = Field(..., ge=0)

    @classmethod
    def from_state(cls, state: StoreState) -> "SnapshotDocument":
        return cls(
            long_to_short=list(state.long_to_short.items()),
            short_to_record=[
                (
                    code,
                    RecordDocument(
                        long_url=record.long_url,
                        clicks=record.clicks,
                        created_at=record.created_at,
                    ),
                )
                for code, record in state.short_to_record.items()
            ],
            counter=state.counter,
        )

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)
