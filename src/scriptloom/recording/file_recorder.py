"""File-based change journal.

One JSONL file per editing session, one change event per line.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from scriptloom.events import ChangeEvent, ChangeKind


@dataclass
class FileEventRecorder:
    """Append-only JSONL journal of change events."""

    path: Path

    def __post_init__(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)

    @classmethod
    def for_session(cls, journal_dir: Path, session_id: str) -> FileEventRecorder:
        return cls(journal_dir / f"{session_id}.jsonl")

    def append(self, event: ChangeEvent) -> None:
        """Append an event."""

        line = json.dumps(event.model_dump(mode="json", exclude_none=True), ensure_ascii=False)
        with self.path.open("a", encoding="utf-8") as f:
            f.write(line + "\n")


def iter_events(path: Path, kinds: set[ChangeKind] | None = None) -> list[ChangeEvent]:
    """Load journaled events, optionally keeping only some kinds."""

    events: list[ChangeEvent] = []
    if not path.exists():
        return events
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line:
            continue
        event = ChangeEvent.model_validate_json(line)
        if kinds is None or event.kind in kinds:
            events.append(event)
    return events
