"""
Catalog facade contract and the in-memory snapshot catalog.

Subclasses provide three primitives (table list, columns, outgoing foreign
keys); the structural point queries used by the inference engine are
answered here, once, on top of the normalized records.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import yaml

from entity_synth.errors import ConfigError, SchemaNotFound
from entity_synth.models import Column, ForeignKeyEdge, KeyClass, Table

logger = logging.getLogger(__name__)


class Catalog(ABC):
    """
    Read-only view over a database catalog.

    All lookups are scoped to one schema. Implementations must return the
    same table order for repeated calls within a run.
    """

    @abstractmethod
    def list_tables(self) -> List[str]:
        """Return all table names in a stable order."""

    @abstractmethod
    def columns_of(self, table: str) -> List[Column]:
        """Return a table's columns in ordinal order."""

    @abstractmethod
    def foreign_keys_of(self, table: str) -> List[ForeignKeyEdge]:
        """Return the foreign keys whose source is ``table``."""

    def get_column(self, table: str, column: str) -> Column:
        """Get one column, raising SchemaNotFound if it does not exist."""
        for col in self.columns_of(table):
            if col.name == column:
                return col
        raise SchemaNotFound(table, column)

    def is_join_table(self, table: str) -> bool:
        """
        Structural join-table heuristic.

        True when the table has exactly two MUL-keyed columns and at most two
        PRI-keyed ones. This is approximate: a table with two foreign keys
        and payload columns also qualifies.
        """
        columns = self.columns_of(table)
        foreign_keys = [c for c in columns if c.key_class == KeyClass.MULTIPLE]
        primary_keys = [c for c in columns if c.key_class == KeyClass.PRIMARY]
        return len(foreign_keys) == 2 and len(primary_keys) <= 2

    def is_column_unique(self, table: str, column: str) -> bool:
        """True if the column is keyed UNI or PRI."""
        key_class = self.get_column(table, column).key_class
        return key_class in (KeyClass.UNIQUE, KeyClass.PRIMARY)

    def has_foreign_key_to(self, table: str, target_table: str) -> bool:
        """True if ``table`` has at least one foreign key into ``target_table``."""
        return any(fk.target_table == target_table for fk in self.foreign_keys_of(table))

    def secondary_foreign_key_column(
        self,
        table: str,
        excluding: Optional[str] = None,
    ) -> Optional[str]:
        """
        Return a foreign key column other than the first one found.

        With ``excluding`` set, returns the first foreign key column that is
        not ``excluding``, so either side of a join table gets its opposite.
        Returns None when the table has fewer than two foreign key columns.
        """
        fk_columns: List[str] = []
        for fk in self.foreign_keys_of(table):
            if fk.source_column not in fk_columns:
                fk_columns.append(fk.source_column)

        if len(fk_columns) < 2:
            return None
        if excluding is None:
            return fk_columns[1]
        for name in fk_columns:
            if name != excluding:
                return name
        return None

    def get_table(self, table: str) -> Table:
        """Assemble a Table snapshot from the primitives."""
        return Table(
            name=table,
            columns=list(self.columns_of(table)),
            foreign_keys=list(self.foreign_keys_of(table)),
        )

    def snapshot(self) -> SnapshotCatalog:
        """Freeze the current catalog contents into a SnapshotCatalog."""
        return SnapshotCatalog(self.get_table(name) for name in self.list_tables())


class SnapshotCatalog(Catalog):
    """
    In-memory catalog over a fixed set of Table records.

    Used for offline generation from a YAML snapshot and in tests. Table
    order is the order the records were supplied in.
    """

    def __init__(self, tables: Iterable[Table]):
        self._tables: Dict[str, Table] = {}
        for table in tables:
            if table.name in self._tables:
                raise ConfigError(f"Duplicate table in snapshot: {table.name}")
            self._tables[table.name] = table

    def _require(self, table: str) -> Table:
        try:
            return self._tables[table]
        except KeyError:
            raise SchemaNotFound(table) from None

    def list_tables(self) -> List[str]:
        return list(self._tables)

    def columns_of(self, table: str) -> List[Column]:
        return list(self._require(table).columns)

    def foreign_keys_of(self, table: str) -> List[ForeignKeyEdge]:
        return list(self._require(table).foreign_keys)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"tables": [t.to_dict() for t in self._tables.values()]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> SnapshotCatalog:
        """Create from dictionary."""
        return cls(Table.from_dict(t) for t in data.get("tables", []))

    def to_yaml(self, path: Path) -> Path:
        """Write the snapshot as YAML."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.safe_dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)
        logger.info(f"Wrote catalog snapshot with {len(self._tables)} tables to {path}")
        return path

    @classmethod
    def from_yaml(cls, path: Path) -> SnapshotCatalog:
        """Load a snapshot written by ``to_yaml``."""
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"Catalog snapshot not found: {path}")

        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}

        try:
            catalog = cls.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigError(f"Invalid catalog snapshot {path}: {e}") from e

        logger.info(f"Loaded catalog snapshot with {len(catalog.list_tables())} tables from {path}")
        return catalog
