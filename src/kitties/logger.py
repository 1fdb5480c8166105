"""Event log - single record of every committed kitty event.

Events are kept in memory and, when an output file is configured, also
appended to a JSONL file (one JSON object per line). Every entry carries
a monotonic 'sequence' plus the block number and extrinsic index of the
call that produced it.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .events import KittyEvent

logger = logging.getLogger(__name__)


class EventLogger:
    """Records committed events in order."""

    output_path: Path | None
    default_recent: int
    _entries: list[dict[str, Any]]
    _sequence: int

    def __init__(self, output_file: str | None = None, default_recent: int = 50) -> None:
        """Initialize the event logger.

        Args:
            output_file: Optional JSONL path. The file is truncated on init.
            default_recent: How many entries read_recent() returns by default
        """
        self.default_recent = default_recent
        self._entries = []
        self._sequence = 0
        self.output_path = Path(output_file) if output_file else None
        if self.output_path is not None:
            self.output_path.parent.mkdir(parents=True, exist_ok=True)
            self.output_path.write_text("")

    def log(self, event_type: str, data: dict[str, Any]) -> dict[str, Any]:
        """Append an entry. All entries include a monotonic 'sequence' field."""
        self._sequence += 1
        entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "sequence": self._sequence,
            "event_type": event_type,
            **data,
        }
        self._entries.append(entry)
        if self.output_path is not None:
            with open(self.output_path, "a") as f:
                f.write(json.dumps(entry) + "\n")
        return entry

    def log_event(self, event: KittyEvent, block_number: int, extrinsic_index: int) -> None:
        """Record a committed kitty event with its execution position."""
        self.log(event.event_type, {
            "block_number": block_number,
            "extrinsic_index": extrinsic_index,
            **event.to_dict(),
        })
        logger.debug("Event %s at %d/%d", event.event_type, block_number, extrinsic_index)

    def entries(self, event_type: str | None = None) -> list[dict[str, Any]]:
        """All recorded entries, optionally filtered by event type."""
        if event_type is None:
            return list(self._entries)
        return [e for e in self._entries if e["event_type"] == event_type]

    def last(self) -> dict[str, Any] | None:
        return self._entries[-1] if self._entries else None

    def read_recent(self, n: int | None = None) -> list[dict[str, Any]]:
        """Read the last N entries (default_recent when N is None)."""
        if n is None:
            n = self.default_recent
        if n <= 0:
            return []
        return self._entries[-n:]

    def read_file(self) -> list[dict[str, Any]]:
        """Parse the JSONL output file. Empty when no file is configured."""
        if self.output_path is None or not self.output_path.exists():
            return []
        lines = [line for line in self.output_path.read_text().split("\n") if line]
        return [json.loads(line) for line in lines]
