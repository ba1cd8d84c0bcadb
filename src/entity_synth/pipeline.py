"""
Generation pipeline - one sequential pass over every table of a catalog.

Each table is fetched, classified and built completely before its
relationships are written to the registry, so a failure or cancellation
never leaves a partial registry entry behind.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import List, Optional

from entity_synth.builder import EntityBuilder
from entity_synth.discovery import RelationshipInferrer
from entity_synth.errors import GenerationCancelled
from entity_synth.metadata.catalog import Catalog
from entity_synth.models import EntityDescription
from entity_synth.registry import RelationshipRegistry

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    """Entities in processing order plus the sealed registry."""
    entities: List[EntityDescription] = field(default_factory=list)
    registry: RelationshipRegistry = field(default_factory=RelationshipRegistry)

    @property
    def relationship_count(self) -> int:
        return sum(len(e.relationships) for e in self.entities)

    def get_entity(self, entity_name: str) -> Optional[EntityDescription]:
        for entity in self.entities:
            if entity.entity_name == entity_name:
                return entity
        return None


class GenerationPipeline:
    """
    Runs catalog -> inference -> build -> registry for every table.

    Usage:
        with MySQLCatalog(config) as catalog:
            result = GenerationPipeline(catalog).run()
        OutputWriter(output_dir).write(result)
    """

    def __init__(
        self,
        catalog: Catalog,
        builder: Optional[EntityBuilder] = None,
        cancel_event: Optional[threading.Event] = None,
    ):
        """
        Initialize the pipeline.

        Args:
            catalog: Catalog facade to read from
            builder: Entity builder (default EntityBuilder())
            cancel_event: Set from another thread to stop between tables
        """
        self.catalog = catalog
        self.builder = builder or EntityBuilder()
        self.cancel_event = cancel_event or threading.Event()

    def run(self) -> GenerationResult:
        """Process every table and seal the registry. Any error aborts the run."""
        tables = self.catalog.list_tables()
        logger.info(f"Generating entities for {len(tables)} tables")

        inferrer = RelationshipInferrer(self.catalog, tables)
        result = GenerationResult()

        for table in tables:
            if self.cancel_event.is_set():
                raise GenerationCancelled(table)

            entity = self.process_table(table, inferrer)
            result.registry.record(entity.entity_name, entity.relationships)
            result.entities.append(entity)
            logger.info(
                f"Built {entity.entity_name} from {table}: "
                f"{len(entity.fields)} fields, {len(entity.relationships)} relationships"
            )

        result.registry.seal()
        return result

    def process_table(self, table: str, inferrer: RelationshipInferrer) -> EntityDescription:
        """Build one table's entity without touching shared state."""
        columns = self.catalog.columns_of(table)
        relationships = inferrer.classify_table(table)
        return self.builder.build(table, columns, relationships)
