"""
Output module for rendering and writing generated model sources.

Supports:
- sequelize-typescript model classes and init-models.ts
"""

from entity_synth.output.typescript import TypeScriptEmitter
from entity_synth.output.writer import OutputWriter

__all__ = [
    "OutputWriter",
    "TypeScriptEmitter",
]
