"""Editable site script document."""

from __future__ import annotations

from scriptloom.document.results import EditErrorKind, EditResult
from scriptloom.document.wrapper import ScriptDocument, parse_action

__all__ = ["EditErrorKind", "EditResult", "ScriptDocument", "parse_action"]
