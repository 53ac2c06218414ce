"""Shared fixtures."""

from __future__ import annotations

from typing import Any

import pytest

from scriptloom.codec import CanonicalCodec
from scriptloom.config import Settings
from scriptloom.schema.catalog import SchemaCatalog
from scriptloom.schema.gate import CatalogSchemaGate

CATALOG: dict[str, Any] = {
    "actions": [
        {
            "verb": "setTitle",
            "title": "Set title",
            "properties": {"title": {"type": "string", "title": "Title"}},
            "required": ["title"],
        },
        {
            "verb": "applyTheme",
            "title": "Apply a theme",
            "properties": {"themeName": {"type": "string", "title": "Theme name"}},
            "required": ["themeName"],
        },
        {
            "verb": "createSPList",
            "title": "Create a list",
            "description": "Creates a list with fields and views",
            "properties": {
                "listName": {"type": "string", "title": "List name"},
                "templateType": {"type": "number", "title": "Template type", "default": 100},
            },
            "required": ["listName"],
            "subactions": ["setDescription", "addSPField"],
        },
    ],
    "subactions": [
        {
            "verb": "setDescription",
            "title": "Set description",
            "properties": {"description": {"type": "string", "title": "Description"}},
            "required": ["description"],
        },
        {
            "verb": "addSPField",
            "title": "Add a field",
            "properties": {
                "fieldType": {"type": "string", "title": "Field type", "enum": ["Text", "Number"]},
                "displayName": {"type": "string", "title": "Display name"},
                "isRequired": {"type": "boolean", "title": "Is required"},
            },
            "required": ["fieldType", "displayName"],
        },
    ],
}

LIST_SCRIPT: dict[str, Any] = {
    "$schema": "schema.json",
    "actions": [
        {"verb": "setTitle", "title": "Contoso"},
        {
            "verb": "createSPList",
            "listName": "Customers",
            "templateType": 100,
            "subactions": [
                {"verb": "setDescription", "description": "All customers"},
                {"verb": "addSPField", "fieldType": "Text", "displayName": "Name", "isRequired": True},
            ],
        },
        {"verb": "applyTheme", "themeName": "Blue"},
    ],
    "bindata": {},
    "version": 1,
}


@pytest.fixture
def catalog() -> SchemaCatalog:
    return SchemaCatalog.from_mapping(CATALOG)


@pytest.fixture
def gate(catalog: SchemaCatalog) -> CatalogSchemaGate:
    return CatalogSchemaGate(catalog)


@pytest.fixture
def codec(gate: CatalogSchemaGate) -> CanonicalCodec:
    return CanonicalCodec(gate)


@pytest.fixture
def settings() -> Settings:
    return Settings(debounce_ms=20)
