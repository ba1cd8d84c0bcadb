"""
Core data models for the entity_synth package.

Defines the catalog records (tables, columns, foreign keys), the inferred
relationships, and the normalized entity descriptions handed to the
code emitters.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from sqlalchemy.engine import URL

from entity_synth.naming import to_field_name


class KeyClass(str, Enum):
    """Catalog key classification of a column (MySQL COLUMN_KEY)."""
    PRIMARY = "PRI"
    UNIQUE = "UNI"
    MULTIPLE = "MUL"      # Non-unique index, what MySQL reports for FK columns
    NONE = ""


class DefaultKind(str, Enum):
    """How a column default was reported by the catalog."""
    NONE = "none"         # No default at all
    NULL = "null"         # Explicit NULL literal
    LITERAL = "literal"   # Any other raw default expression


class RelationshipKind(str, Enum):
    """Relationship kinds, valued by their association method names."""
    ONE_TO_ONE = "hasOne"
    ONE_TO_MANY = "hasMany"
    MANY_TO_ONE = "belongsTo"
    MANY_TO_MANY = "belongsToMany"

    @property
    def is_collection(self) -> bool:
        return self in (RelationshipKind.ONE_TO_MANY, RelationshipKind.MANY_TO_MANY)


class FieldType(str, Enum):
    """Scalar field types an entity column can resolve to."""
    INTEGER = "integer"
    TEXT = "text"
    DATEONLY = "dateonly"
    DATE = "date"
    TIME = "time"
    FLOAT = "float"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    JSON = "json"
    UUID = "uuid"


@dataclass
class Column:
    """A single column as reported by the catalog."""
    name: str
    raw_type: str
    nullable: bool = True
    is_primary_key: bool = False
    is_auto_increment: bool = False
    key_class: KeyClass = KeyClass.NONE
    default_kind: DefaultKind = DefaultKind.NONE
    default_value: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "raw_type": self.raw_type,
            "nullable": self.nullable,
            "is_primary_key": self.is_primary_key,
            "is_auto_increment": self.is_auto_increment,
            "key_class": self.key_class.value,
            "default_kind": self.default_kind.value,
            "default_value": self.default_value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Column:
        """Create from dictionary."""
        key_class = KeyClass(data.get("key_class", ""))
        return cls(
            name=data["name"],
            raw_type=data.get("raw_type", "varchar"),
            nullable=data.get("nullable", True),
            is_primary_key=data.get("is_primary_key", key_class == KeyClass.PRIMARY),
            is_auto_increment=data.get("is_auto_increment", False),
            key_class=key_class,
            default_kind=DefaultKind(data.get("default_kind", "none")),
            default_value=data.get("default_value"),
        )


@dataclass(frozen=True)
class ForeignKeyEdge:
    """A directed single-column foreign key reference."""
    source_table: str
    source_column: str
    target_table: str
    target_column: str
    constraint_name: str

    def __str__(self) -> str:
        return (
            f"{self.source_table}.{self.source_column} -> "
            f"{self.target_table}.{self.target_column} ({self.constraint_name})"
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "source_table": self.source_table,
            "source_column": self.source_column,
            "target_table": self.target_table,
            "target_column": self.target_column,
            "constraint_name": self.constraint_name,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], source_table: Optional[str] = None) -> ForeignKeyEdge:
        """Create from dictionary (source_table may come from the owning table)."""
        source = data.get("source_table", source_table)
        return cls(
            source_table=source,
            source_column=data["source_column"],
            target_table=data["target_table"],
            target_column=data.get("target_column", "id"),
            constraint_name=data.get(
                "constraint_name", f"fk_{source}_{data['source_column']}"
            ),
        )


@dataclass
class Table:
    """Immutable snapshot of one table read from the catalog."""
    name: str
    columns: List[Column] = field(default_factory=list)
    foreign_keys: List[ForeignKeyEdge] = field(default_factory=list)

    @property
    def column_names(self) -> List[str]:
        """Return list of column names."""
        return [c.name for c in self.columns]

    def get_column(self, name: str) -> Optional[Column]:
        """Get column by exact name."""
        for col in self.columns:
            if col.name == name:
                return col
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "columns": [c.to_dict() for c in self.columns],
            "foreign_keys": [
                {k: v for k, v in fk.to_dict().items() if k != "source_table"}
                for fk in self.foreign_keys
            ],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Table:
        """Create from dictionary."""
        name = data["name"]
        return cls(
            name=name,
            columns=[Column.from_dict(c) for c in data.get("columns", [])],
            foreign_keys=[
                ForeignKeyEdge.from_dict(fk, source_table=name)
                for fk in data.get("foreign_keys", [])
            ],
        )


@dataclass
class Relationship:
    """A foreign key edge with its inferred kind and derived naming."""
    edge: ForeignKeyEdge
    kind: RelationshipKind
    target_entity: str
    property_name: str
    through: Optional[str] = None       # belongsToMany only
    other_key: Optional[str] = None     # belongsToMany only
    fallback_reason: Optional[str] = None

    @property
    def is_collection(self) -> bool:
        return self.kind.is_collection

    @property
    def foreign_key(self) -> str:
        return self.edge.source_column

    def options(self) -> Dict[str, Any]:
        """
        Association options, in the order the emitters render them.

        Keys name model attributes (normalized field names), which the
        emitted ``field:`` mapping ties back to the database columns.
        """
        opts: Dict[str, Any] = {"foreignKey": to_field_name(self.edge.source_column)}
        if self.kind == RelationshipKind.MANY_TO_MANY:
            opts["through"] = self.through
            opts["otherKey"] = to_field_name(self.other_key) if self.other_key else None
        return opts

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "edge": self.edge.to_dict(),
            "kind": self.kind.value,
            "target_entity": self.target_entity,
            "property_name": self.property_name,
            "through": self.through,
            "other_key": self.other_key,
            "fallback_reason": self.fallback_reason,
        }


@dataclass
class EntityField:
    """A column with its normalized field name and resolved type."""
    column: Column
    field_name: str
    field_type: FieldType


@dataclass
class EntityDescription:
    """Normalized in-memory description of one table, ready for emission."""
    table_name: str
    entity_name: str
    fields: List[EntityField] = field(default_factory=list)
    relationships: List[Relationship] = field(default_factory=list)
    references: List[str] = field(default_factory=list)

    @property
    def primary_key_fields(self) -> List[EntityField]:
        return [f for f in self.fields if f.column.is_primary_key]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "table_name": self.table_name,
            "entity_name": self.entity_name,
            "fields": [
                {
                    "column": f.column.name,
                    "field_name": f.field_name,
                    "field_type": f.field_type.value,
                }
                for f in self.fields
            ],
            "relationships": [r.to_dict() for r in self.relationships],
            "references": list(self.references),
        }


@dataclass
class ConnectionConfig:
    """Connection descriptor for a live MySQL catalog."""
    database: str
    host: str = "localhost"
    port: int = 3306
    user: str = "root"
    password: Optional[str] = None
    timeout: float = 10.0           # Seconds, applied to every catalog call
    max_attempts: int = 3           # Connection retries, bounded
    backoff_initial: float = 0.5
    backoff_max: float = 8.0

    def __post_init__(self):
        if isinstance(self.port, str):
            self.port = int(self.port)

    def url(self) -> URL:
        """SQLAlchemy URL for the PyMySQL driver."""
        return URL.create(
            "mysql+pymysql",
            username=self.user,
            password=self.password,
            host=self.host,
            port=self.port,
            database=self.database,
        )

    def connect_args(self) -> Dict[str, int]:
        """PyMySQL timeouts (whole seconds, at least one)."""
        seconds = max(1, int(round(self.timeout)))
        return {
            "connect_timeout": seconds,
            "read_timeout": seconds,
            "write_timeout": seconds,
        }

    def describe(self) -> str:
        """Connection target without credentials, for logs."""
        return f"{self.user}@{self.host}:{self.port}/{self.database}"

