"""Exception types.

Recoverable editing problems are returned as :class:`scriptloom.document.results.EditResult`
signals. Only the conditions below are raised.
"""

from __future__ import annotations


class ScriptLoomError(Exception):
    """Base class for ScriptLoom errors."""


class InvalidScriptError(ScriptLoomError, ValueError):
    """Raised when canonical content is not a structurally valid site script."""


class IdentityCorruptionError(ScriptLoomError):
    """Raised when identity bookkeeping is inconsistent; the editing session must abort."""
