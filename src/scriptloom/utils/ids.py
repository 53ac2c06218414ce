"""ID utilities.

Node identities only need to be unique among values issued by this process. A single
module-level counter backs every generator, so two generators never hand out the same value.
"""

from __future__ import annotations

import itertools

_counter = itertools.count(1)


def format_identity(n: int, prefix: str = "action_") -> str:
    """Format a numeric counter to a node identity.

    Uses zero-padded numbers (e.g., ``action_0001``) so identities sort naturally in logs.
    """

    return f"{prefix}{n:04d}"


def child_prefix(parent_identity: str) -> str:
    """Prefix for identities minted under a parent node (cosmetic only)."""

    return f"{parent_identity}/"


class IdentityKeyGenerator:
    """Issue opaque, never-reused identities for action nodes."""

    def __init__(self, prefix: str = "action_") -> None:
        self.prefix = prefix

    def next(self, prefix: str | None = None) -> str:  # noqa: A003
        """Return a fresh identity.

        Args:
            prefix: Optional cosmetic prefix, e.g. from :func:`child_prefix`.
        """

        return format_identity(next(_counter), prefix or self.prefix)


default_keys = IdentityKeyGenerator()
