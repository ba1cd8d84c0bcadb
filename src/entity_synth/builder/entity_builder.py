"""
Entity Model Builder - combines columns and relationships into an
EntityDescription with normalized names and resolved field types.
"""

from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import Dict, List, Sequence

from entity_synth.errors import InvariantViolation
from entity_synth.models import (
    Column,
    EntityDescription,
    EntityField,
    FieldType,
    Relationship,
)
from entity_synth.naming import to_entity_name, to_field_name

logger = logging.getLogger(__name__)


# MySQL raw type mapping
MYSQL_TYPE_MAP = {
    "int": FieldType.INTEGER,
    "integer": FieldType.INTEGER,
    "smallint": FieldType.INTEGER,
    "mediumint": FieldType.INTEGER,
    "bigint": FieldType.INTEGER,
    "year": FieldType.INTEGER,
    "varchar": FieldType.TEXT,
    "char": FieldType.TEXT,
    "text": FieldType.TEXT,
    "tinytext": FieldType.TEXT,
    "mediumtext": FieldType.TEXT,
    "longtext": FieldType.TEXT,
    "enum": FieldType.TEXT,
    "set": FieldType.TEXT,
    "date": FieldType.DATEONLY,
    "datetime": FieldType.DATE,
    "timestamp": FieldType.DATE,
    "time": FieldType.TIME,
    "float": FieldType.FLOAT,
    "double": FieldType.FLOAT,
    "real": FieldType.FLOAT,
    "decimal": FieldType.DECIMAL,
    "numeric": FieldType.DECIMAL,
    "boolean": FieldType.BOOLEAN,
    "bool": FieldType.BOOLEAN,
    "tinyint": FieldType.BOOLEAN,  # MySQL convention for flags
    "bit": FieldType.BOOLEAN,
    "json": FieldType.JSON,
    "jsonb": FieldType.JSON,
    "uuid": FieldType.UUID,
}

_LENGTH_SUFFIX = re.compile(r"\(.*\)")
_TRAILING_ID = re.compile(r"Id$")


def map_field_type(raw_type: str) -> FieldType:
    """Map a raw catalog type to a FieldType; unknown types become TEXT."""
    base = _LENGTH_SUFFIX.sub("", raw_type or "").strip().lower()
    # "int unsigned", "double precision"
    base = base.split(" ")[0] if base else base
    mapped = MYSQL_TYPE_MAP.get(base)
    if mapped is None:
        logger.debug(f"Unknown raw type {raw_type!r}, defaulting to text")
        return FieldType.TEXT
    return mapped


class EntityBuilder:
    """Builds EntityDescriptions. Stateless; ``build`` is a pure function."""

    def build(
        self,
        table: str,
        columns: Sequence[Column],
        relationships: Sequence[Relationship],
    ) -> EntityDescription:
        """
        Build the entity description for one table.

        Args:
            table: Catalog table name
            columns: Columns in ordinal order
            relationships: Classified relationships in catalog order

        Returns:
            EntityDescription with fields, relationships and references
        """
        entity_name = to_entity_name(table)

        fields = [
            EntityField(
                column=col,
                field_name=to_field_name(col.name),
                field_type=map_field_type(col.raw_type),
            )
            for col in columns
        ]
        self._check_unique_fields(table, fields)

        resolved = self._disambiguate(entity_name, fields, list(relationships))

        references: List[str] = []
        for rel in resolved:
            if rel.target_entity != entity_name and rel.target_entity not in references:
                references.append(rel.target_entity)

        return EntityDescription(
            table_name=table,
            entity_name=entity_name,
            fields=fields,
            relationships=resolved,
            references=references,
        )

    def _check_unique_fields(self, table: str, fields: List[EntityField]) -> None:
        seen: Dict[str, str] = {}
        for f in fields:
            if f.field_name in seen:
                raise InvariantViolation(
                    f"Columns {seen[f.field_name]!r} and {f.column.name!r} of {table} "
                    f"both normalize to field {f.field_name!r}"
                )
            seen[f.field_name] = f.column.name

    def _disambiguate(
        self,
        entity_name: str,
        fields: List[EntityField],
        relationships: List[Relationship],
    ) -> List[Relationship]:
        """
        Make property names unique within the entity.

        Column fields keep their names. A relationship whose property is
        already taken, by a field or an earlier relationship, is prefixed
        with its foreign key field name minus a trailing ``Id``
        (``created_by_id`` -> ``createdByUser``, ``author`` -> ``authorAuthor``).
        """
        taken = {f.field_name for f in fields}
        resolved: List[Relationship] = []
        for rel in relationships:
            if rel.property_name in taken:
                prefix = _TRAILING_ID.sub("", to_field_name(rel.foreign_key))
                candidate = prefix + rel.property_name[:1].upper() + rel.property_name[1:]
                if not prefix or candidate in taken:
                    raise InvariantViolation(
                        f"Cannot derive a unique property name on {entity_name} "
                        f"for {rel.edge}"
                    )
                logger.debug(f"Renamed {entity_name}.{rel.property_name} to {candidate}")
                rel = replace(rel, property_name=candidate)
            taken.add(rel.property_name)
            resolved.append(rel)
        return resolved
