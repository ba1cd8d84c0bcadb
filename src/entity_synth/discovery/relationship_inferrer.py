"""
Relationship Inferrer - Classifies every foreign key edge of a table.

Each outgoing edge gets exactly one relationship kind. The checks run in
a fixed order and the first match wins:

1. Join table (two MUL keys, at most two PRI keys) -> belongsToMany
2. Unique or primary source column                  -> hasOne
3. Target has a foreign key back to the source      -> hasMany
4. Otherwise                                        -> belongsTo

Composite and self-referencing foreign keys are outside what this
heuristic models; they fall back to belongsTo with a logged warning and
a ``fallback_reason`` on the relationship.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Iterable, List, Optional

from entity_synth.errors import DanglingReference
from entity_synth.metadata.catalog import Catalog
from entity_synth.models import ForeignKeyEdge, Relationship, RelationshipKind
from entity_synth.naming import lower_first, pluralize, to_entity_name

logger = logging.getLogger(__name__)

THROUGH_SEPARATOR = "_"
COMPOSITE_FALLBACK = "composite foreign key"
SELF_REFERENCE_FALLBACK = "self reference"


class RelationshipInferrer:
    """
    Infers relationship kinds from catalog structure.

    Classification for one table may consult metadata of another (the
    reverse-edge check), so the inferrer is given the full table set up
    front and validates every edge target against it.
    """

    def __init__(self, catalog: Catalog, tables: Optional[Iterable[str]] = None):
        """
        Initialize the inferrer.

        Args:
            catalog: Catalog facade to query
            tables: Known table set (defaults to the catalog's table list)
        """
        self.catalog = catalog
        self.tables = set(tables if tables is not None else catalog.list_tables())

    def classify_table(self, source_table: str) -> List[Relationship]:
        """Classify every outgoing foreign key of a table, in catalog order."""
        edges = self.catalog.foreign_keys_of(source_table)
        relationships = [self.classify(source_table, edge) for edge in edges]
        logger.debug(f"Classified {len(relationships)} relationships for {source_table}")
        return relationships

    def classify(self, source_table: str, edge: ForeignKeyEdge) -> Relationship:
        """
        Classify a single foreign key edge.

        Args:
            source_table: Table owning the foreign key
            edge: The foreign key edge to classify

        Returns:
            Relationship with kind, target entity and property name

        Raises:
            DanglingReference: If the edge targets a table outside the table set
        """
        if edge.target_table not in self.tables:
            raise DanglingReference(edge)

        if self._is_composite(source_table, edge):
            return self._fallback(edge, COMPOSITE_FALLBACK)

        if self.catalog.is_join_table(source_table):
            return self._build(
                edge,
                RelationshipKind.MANY_TO_MANY,
                through=self._through_name(source_table, edge),
                other_key=self.catalog.secondary_foreign_key_column(
                    source_table, excluding=edge.source_column
                ),
            )

        if self.catalog.is_column_unique(source_table, edge.source_column):
            return self._build(edge, RelationshipKind.ONE_TO_ONE)

        if edge.target_table == source_table:
            return self._fallback(edge, SELF_REFERENCE_FALLBACK)

        if self.catalog.has_foreign_key_to(edge.target_table, source_table):
            return self._build(edge, RelationshipKind.ONE_TO_MANY)

        return self._build(edge, RelationshipKind.MANY_TO_ONE)

    def _is_composite(self, source_table: str, edge: ForeignKeyEdge) -> bool:
        counts = Counter(fk.constraint_name for fk in self.catalog.foreign_keys_of(source_table))
        return counts[edge.constraint_name] > 1

    def _through_name(self, join_table: str, edge: ForeignKeyEdge) -> str:
        """
        Through-table name for a join table's many-to-many pair.

        The two endpoint tables are sorted so both directions of the pair
        agree on the same name.
        """
        endpoints = [
            fk.target_table
            for fk in self.catalog.foreign_keys_of(join_table)
            if fk.source_column != edge.source_column
        ]
        other = endpoints[0] if endpoints else edge.target_table
        return THROUGH_SEPARATOR.join(sorted([edge.target_table, other]))

    def _fallback(self, edge: ForeignKeyEdge, reason: str) -> Relationship:
        logger.warning(f"Unsupported foreign key shape ({reason}), using belongsTo: {edge}")
        return self._build(edge, RelationshipKind.MANY_TO_ONE, fallback_reason=reason)

    def _build(
        self,
        edge: ForeignKeyEdge,
        kind: RelationshipKind,
        through: Optional[str] = None,
        other_key: Optional[str] = None,
        fallback_reason: Optional[str] = None,
    ) -> Relationship:
        target_entity = to_entity_name(edge.target_table)
        property_name = property_name_for(target_entity, kind)
        logger.debug(f"{edge} classified as {kind.value} ({property_name})")
        return Relationship(
            edge=edge,
            kind=kind,
            target_entity=target_entity,
            property_name=property_name,
            through=through,
            other_key=other_key,
            fallback_reason=fallback_reason,
        )


def property_name_for(target_entity: str, kind: RelationshipKind) -> str:
    """Attachment property name: lower-camel target, pluralized for collections."""
    name = lower_first(target_entity)
    return pluralize(name) if kind.is_collection else name
