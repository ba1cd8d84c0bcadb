"""
sequelize-typescript emitter.

Renders one ``<Entity>.model.ts`` class per entity and the aggregate
``init-models.ts`` that registers every model and wires the associations.
Output depends only on its input, so unchanged schemas render
byte-identical files.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Sequence, Tuple

from entity_synth.models import (
    DefaultKind,
    EntityDescription,
    EntityField,
    FieldType,
    Relationship,
    RelationshipKind,
)

logger = logging.getLogger(__name__)

HEADER = "// Auto-generated by entity_synth. Do not edit by hand."
REGISTRY_FILE = "init-models.ts"

# FieldType -> sequelize DataType member
DATA_TYPES = {
    FieldType.INTEGER: "INTEGER",
    FieldType.TEXT: "STRING",
    FieldType.DATEONLY: "DATEONLY",
    FieldType.DATE: "DATE",
    FieldType.TIME: "TIME",
    FieldType.FLOAT: "FLOAT",
    FieldType.DECIMAL: "DECIMAL",
    FieldType.BOOLEAN: "BOOLEAN",
    FieldType.JSON: "JSON",
    FieldType.UUID: "UUID",
}

# FieldType -> TypeScript property type
TS_TYPES = {
    FieldType.INTEGER: "number",
    FieldType.TEXT: "string",
    FieldType.DATEONLY: "string",
    FieldType.DATE: "Date",
    FieldType.TIME: "string",
    FieldType.FLOAT: "number",
    FieldType.DECIMAL: "number",
    FieldType.BOOLEAN: "boolean",
    FieldType.JSON: "object",
    FieldType.UUID: "string",
}

DECORATORS = {
    RelationshipKind.ONE_TO_ONE: "HasOne",
    RelationshipKind.ONE_TO_MANY: "HasMany",
    RelationshipKind.MANY_TO_ONE: "BelongsTo",
    RelationshipKind.MANY_TO_MANY: "BelongsToMany",
}


def render_options(options: Dict[str, Any]) -> str:
    """Render association options as a TypeScript object literal."""
    return json.dumps(options, separators=(", ", ": "))


class TypeScriptEmitter:
    """Renders EntityDescriptions into sequelize-typescript source files."""

    def file_name(self, entity: EntityDescription) -> str:
        return f"{entity.entity_name}.model.ts"

    def render_entity(self, entity: EntityDescription) -> str:
        """Render the model class for one entity."""
        decorators = ["Table", "Column", "Model", "DataType"]
        for rel in entity.relationships:
            name = DECORATORS[rel.kind]
            if name not in decorators:
                decorators.append(name)

        lines: List[str] = [HEADER, ""]
        lines.append(f"import {{ {', '.join(decorators)} }} from 'sequelize-typescript';")
        if any(f.column.default_kind == DefaultKind.LITERAL for f in entity.fields):
            lines.append("import { Sequelize } from 'sequelize-typescript';")
        for ref in entity.references:
            lines.append(f"import {ref} from './{ref}.model';")
        lines.append("")

        lines.append(f"@Table({{ tableName: '{entity.table_name}', timestamps: true }})")
        lines.append(f"export default class {entity.entity_name} extends Model {{")

        members = [self._render_field(f) for f in entity.fields]
        members.extend(self._render_relationship(r) for r in entity.relationships)
        lines.append("\n\n".join(members))

        lines.append("}")
        lines.append("")
        return "\n".join(lines)

    def _render_field(self, entity_field: EntityField) -> str:
        col = entity_field.column
        options = [
            f"type: DataType.{DATA_TYPES[entity_field.field_type]}",
            f"allowNull: {'true' if col.nullable else 'false'}",
        ]
        if col.name != entity_field.field_name:
            options.append(f"field: '{col.name}'")
        if col.is_primary_key:
            options.append("primaryKey: true")
        if col.is_auto_increment:
            options.append("autoIncrement: true")
        if col.default_kind == DefaultKind.LITERAL:
            options.append(f"defaultValue: Sequelize.literal({json.dumps(col.default_value)})")
        elif col.default_kind == DefaultKind.NULL and col.nullable:
            options.append("defaultValue: null")

        body = ",\n    ".join(options)
        ts_type = TS_TYPES[entity_field.field_type]
        return (
            f"  @Column({{\n    {body}\n  }})\n"
            f"  declare {entity_field.field_name}: {ts_type};"
        )

    def _render_relationship(self, rel: Relationship) -> str:
        decorator = DECORATORS[rel.kind]
        ts_type = f"{rel.target_entity}[]" if rel.is_collection else rel.target_entity
        return (
            f"  @{decorator}(() => {rel.target_entity}, {render_options(rel.options())})\n"
            f"  declare {rel.property_name}: {ts_type};"
        )

    def render_registry(
        self,
        entity_names: Sequence[str],
        entries: Sequence[Tuple[str, List[Relationship]]],
    ) -> str:
        """
        Render init-models.ts.

        Args:
            entity_names: Every generated entity, in processing order
            entries: Consumed registry entries, in write order
        """
        lines: List[str] = [HEADER, ""]
        lines.append("import { Sequelize } from 'sequelize-typescript';")
        for name in entity_names:
            lines.append(f"import {name} from './{name}.model';")
        lines.append("")

        model_list = ",\n".join(f"    {name}" for name in entity_names)

        lines.append("export async function initModels(sequelize: Sequelize) {")
        lines.append(f"  sequelize.addModels([\n{model_list}\n  ]);")
        lines.append("")
        lines.append("  await sequelize.authenticate();")
        lines.append("  await sequelize.sync();")
        lines.append("")
        lines.append("  // Associations")
        for entity_name, relationships in entries:
            for rel in relationships:
                lines.append(
                    f"  {entity_name}.{rel.kind.value}({rel.target_entity}, "
                    f"{render_options(rel.options())});"
                )
        lines.append("")
        lines.append(f"  return {{\n{model_list}\n  }};")
        lines.append("}")
        lines.append("")
        lines.append("export type Models = Awaited<ReturnType<typeof initModels>>;")
        lines.append("")
        return "\n".join(lines)
