"""
Exception hierarchy for entity_synth.

Every error aborts the whole generation run; the CLI reports it and exits
non-zero. Nothing is written to disk when any of these is raised.
"""

from __future__ import annotations

from typing import Optional

from entity_synth.models import ForeignKeyEdge


class EntitySynthError(Exception):
    """Base class for all entity_synth errors."""


class ConfigError(EntitySynthError):
    """Connection or run settings are missing or invalid."""


class CatalogUnavailable(EntitySynthError):
    """The metadata source could not be reached or timed out."""


class SchemaNotFound(EntitySynthError):
    """A referenced table or column does not exist in the catalog."""

    def __init__(self, table: str, column: Optional[str] = None):
        self.table = table
        self.column = column
        if column is None:
            message = f"Table not found in catalog: {table}"
        else:
            message = f"Column not found in catalog: {table}.{column}"
        super().__init__(message)


class DanglingReference(EntitySynthError):
    """A foreign key targets a table outside the known table set."""

    def __init__(self, edge: ForeignKeyEdge):
        self.edge = edge
        super().__init__(
            f"Foreign key {edge.constraint_name} on {edge.source_table}.{edge.source_column} "
            f"references unknown table {edge.target_table}"
        )


class InvariantViolation(EntitySynthError):
    """Internal misuse of the registry or builder; indicates a bug."""


class GenerationCancelled(EntitySynthError):
    """The run was cancelled between two tables."""

    def __init__(self, next_table: Optional[str] = None):
        self.next_table = next_table
        suffix = f" before table {next_table}" if next_table else ""
        super().__init__(f"Generation cancelled{suffix}")
