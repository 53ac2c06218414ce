"""ScriptLoom: dual-view editing core for site script action trees."""

from __future__ import annotations

from scriptloom.codec import CanonicalCodec
from scriptloom.document import EditResult, ScriptDocument
from scriptloom.models import ActionNode, SiteScript
from scriptloom.session import EditingSession
from scriptloom.sync import ArbiterState, EditSourceArbiter

__all__ = [
    "ActionNode",
    "ArbiterState",
    "CanonicalCodec",
    "EditResult",
    "EditSourceArbiter",
    "EditingSession",
    "ScriptDocument",
    "SiteScript",
]

__version__ = "0.1.0"
