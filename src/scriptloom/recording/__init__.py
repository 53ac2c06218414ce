"""Change journal recorders."""

from __future__ import annotations

from scriptloom.recording.file_recorder import FileEventRecorder, iter_events

__all__ = ["FileEventRecorder", "iter_events"]
