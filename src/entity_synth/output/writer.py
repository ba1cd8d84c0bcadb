"""
Output Writer - writes the rendered artifacts of a generation run.

Output Structure:
    <output_dir>/
    ├── Author.model.ts     # One model class per entity
    ├── Book.model.ts
    ├── init-models.ts      # Aggregate registry with every association
    └── manifest.json       # Entity -> file, relationship counts
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Optional

from entity_synth.output.typescript import REGISTRY_FILE, TypeScriptEmitter
from entity_synth.pipeline import GenerationResult

logger = logging.getLogger(__name__)

MANIFEST_FILE = "manifest.json"


class OutputWriter:
    """
    Writes entity and registry artifacts for a completed run.

    Everything is rendered in memory first; files are only written once
    every artifact rendered successfully.
    """

    def __init__(self, output_dir: Path, emitter: Optional[TypeScriptEmitter] = None):
        """
        Initialize the output writer.

        Args:
            output_dir: Directory to write into (created if missing)
            emitter: Source renderer (default TypeScriptEmitter())
        """
        self.output_dir = Path(output_dir)
        self.emitter = emitter or TypeScriptEmitter()

    def render(self, result: GenerationResult) -> Dict[str, str]:
        """Render every artifact to a {file name: content} mapping."""
        contents: Dict[str, str] = {}

        for entity in result.entities:
            contents[self.emitter.file_name(entity)] = self.emitter.render_entity(entity)

        entity_names = [e.entity_name for e in result.entities]
        contents[REGISTRY_FILE] = self.emitter.render_registry(
            entity_names, result.registry.consume()
        )
        contents[MANIFEST_FILE] = self._render_manifest(result)
        return contents

    def write(self, result: GenerationResult) -> Dict[str, Path]:
        """
        Render and write all artifacts.

        Args:
            result: Completed run with a sealed registry

        Returns:
            Dict of file name -> written path
        """
        contents = self.render(result)

        self.output_dir.mkdir(parents=True, exist_ok=True)
        output_paths: Dict[str, Path] = {}
        for file_name, content in contents.items():
            path = self.output_dir / file_name
            path.write_text(content, encoding="utf-8")
            output_paths[file_name] = path

        logger.info(f"Wrote {len(output_paths)} files to {self.output_dir}")
        return output_paths

    def _render_manifest(self, result: GenerationResult) -> str:
        manifest = {
            "registry": REGISTRY_FILE,
            "entities": [
                {
                    "entity": entity.entity_name,
                    "table": entity.table_name,
                    "file": self.emitter.file_name(entity),
                    "fields": len(entity.fields),
                    "relationships": [
                        {
                            "kind": rel.kind.value,
                            "target": rel.target_entity,
                            "property": rel.property_name,
                            "options": rel.options(),
                        }
                        for rel in entity.relationships
                    ],
                }
                for entity in result.entities
            ],
        }
        return json.dumps(manifest, indent=2) + "\n"
