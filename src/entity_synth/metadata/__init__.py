"""
Catalog introspection module.

Provides the catalog facade contract, an in-memory snapshot catalog for
offline runs, and the MySQL information_schema reader.
"""

from entity_synth.metadata.catalog import Catalog, SnapshotCatalog
from entity_synth.metadata.mysql import MySQLCatalog

__all__ = [
    "Catalog",
    "SnapshotCatalog",
    "MySQLCatalog",
]
