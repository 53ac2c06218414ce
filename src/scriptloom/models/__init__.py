"""Pydantic models used across the project."""

from __future__ import annotations

from scriptloom.models.action import ActionNode
from scriptloom.models.schema import PropertySchema, VerbSchema
from scriptloom.models.script import SiteScript

__all__ = [
    "ActionNode",
    "PropertySchema",
    "SiteScript",
    "VerbSchema",
]
