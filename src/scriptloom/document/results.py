"""Result signals returned by document edit operations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from scriptloom.document.wrapper import ScriptDocument

EditErrorKind = Literal[
    "not_found",
    "index_out_of_bounds",
    "invalid_text",
    "structural_violation",
]


@dataclass(frozen=True)
class EditResult:
    """Outcome of an edit.

    On failure ``document`` is the unchanged input document and ``error`` names the problem.
    ``identity`` is the node the edit created or addressed.
    """

    document: ScriptDocument
    error: EditErrorKind | None = None
    message: str | None = None
    identity: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
