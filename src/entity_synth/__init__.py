"""
Entity Synth - Model Generator for Relational Schemas

Reads a database catalog and synthesizes data-access model classes with
their inferred relationships.

Features:
- Relationship inference from foreign keys (hasOne, hasMany, belongsTo,
  belongsToMany via join tables)
- MySQL information_schema reader with bounded retries and timeouts
- Offline generation from YAML catalog snapshots
- sequelize-typescript model and init-models output
"""

__version__ = "0.1.0"
__author__ = "Entity Synth Team"

from entity_synth.models import (
    Column,
    ConnectionConfig,
    EntityDescription,
    FieldType,
    ForeignKeyEdge,
    KeyClass,
    Relationship,
    RelationshipKind,
    Table,
)
from entity_synth.errors import (
    CatalogUnavailable,
    ConfigError,
    DanglingReference,
    EntitySynthError,
    GenerationCancelled,
    InvariantViolation,
    SchemaNotFound,
)
from entity_synth.metadata import Catalog, MySQLCatalog, SnapshotCatalog
from entity_synth.discovery import RelationshipInferrer
from entity_synth.builder import EntityBuilder
from entity_synth.registry import RelationshipRegistry
from entity_synth.pipeline import GenerationPipeline, GenerationResult
from entity_synth.output import OutputWriter, TypeScriptEmitter

__all__ = [
    # Core models
    "Column",
    "ConnectionConfig",
    "EntityDescription",
    "FieldType",
    "ForeignKeyEdge",
    "KeyClass",
    "Relationship",
    "RelationshipKind",
    "Table",
    # Errors
    "CatalogUnavailable",
    "ConfigError",
    "DanglingReference",
    "EntitySynthError",
    "GenerationCancelled",
    "InvariantViolation",
    "SchemaNotFound",
    # Catalog
    "Catalog",
    "MySQLCatalog",
    "SnapshotCatalog",
    # Engine
    "RelationshipInferrer",
    "EntityBuilder",
    "RelationshipRegistry",
    "GenerationPipeline",
    "GenerationResult",
    # Output
    "OutputWriter",
    "TypeScriptEmitter",
]
