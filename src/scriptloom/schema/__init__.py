"""Site script schema catalog and validation gate."""

from __future__ import annotations

from pathlib import Path

from scriptloom.schema.builtin import builtin_catalog
from scriptloom.schema.catalog import SchemaCatalog
from scriptloom.schema.gate import CatalogSchemaGate, SchemaGate

__all__ = [
    "CatalogSchemaGate",
    "SchemaCatalog",
    "SchemaGate",
    "builtin_catalog",
    "load_gate",
]


def load_gate(catalog_path: Path | None = None) -> CatalogSchemaGate:
    """Build a gate from a catalog file, or from the built-in catalog."""

    catalog = SchemaCatalog.load(catalog_path) if catalog_path is not None else builtin_catalog()
    return CatalogSchemaGate(catalog)
