"""Entity model building: naming, type resolution and entity assembly."""

from entity_synth.builder.entity_builder import MYSQL_TYPE_MAP, EntityBuilder, map_field_type

__all__ = [
    "EntityBuilder",
    "MYSQL_TYPE_MAP",
    "map_field_type",
]
