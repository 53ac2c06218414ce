"""Change event model used for the editing journal.

Every change the arbiter accepts, rejects or suppresses is described by a :class:`ChangeEvent`.
Events can be recorded to JSONL so an editing session can be inspected later.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class ChangeSource(str, Enum):
    """Which editor produced a change."""

    STRUCTURED = "structured"
    TEXT = "text"


class ChangeKind(str, Enum):
    """What happened to a change."""

    STRUCTURED_EDIT = "structured_edit"
    EDIT_REJECTED = "edit_rejected"
    ECHO_SUPPRESSED = "echo_suppressed"
    TEXT_ACCEPTED = "text_accepted"
    TEXT_REJECTED = "text_rejected"
    TEXT_SUPERSEDED = "text_superseded"
    METADATA_UPDATED = "metadata_updated"


class ChangeEvent(BaseModel):
    """A single change in an editing session."""

    session_id: str
    seq: int = Field(ge=1)
    ts: datetime = Field(default_factory=datetime.utcnow)

    source: ChangeSource | None = None
    kind: ChangeKind

    data: str | dict | list | None = None
