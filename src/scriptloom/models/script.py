"""Site script record models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SiteScript(BaseModel):
    """A site script record as exchanged with the persistence layer.

    Field aliases follow the persisted record (``Id``, ``Title``, ...); ``content`` holds the
    canonical content object, never a serialized string.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str | None = Field(default=None, alias="Id")
    title: str = Field(default="", alias="Title")
    description: str = Field(default="", alias="Description")
    version: int = Field(default=1, ge=0, alias="Version")
    content: dict[str, Any] = Field(default_factory=lambda: {"actions": []}, alias="Content")
