"""
Relationship discovery from catalog foreign keys.

Usage:
    from entity_synth.discovery import RelationshipInferrer

    inferrer = RelationshipInferrer(catalog)
    relationships = inferrer.classify_table("book")
"""

from entity_synth.discovery.relationship_inferrer import RelationshipInferrer, property_name_for

__all__ = [
    "RelationshipInferrer",
    "property_name_for",
]
