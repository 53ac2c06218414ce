"""Synchronization between the structured editor and the text editor."""

from __future__ import annotations

from scriptloom.sync.arbiter import ArbiterState, EditSourceArbiter

__all__ = ["ArbiterState", "EditSourceArbiter"]
