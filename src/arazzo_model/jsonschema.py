"""JSON Schema of Arazzo descriptions."""

from functools import cache
from json import dumps
from typing import TYPE_CHECKING

from pydantic.json_schema import GenerateJsonSchema, JsonSchemaValue

from arazzo_model.schema import Document

if TYPE_CHECKING:
    from pydantic_core import core_schema as core

#: Marker of field schemas shared through a named definition.
SHARED_MARKER = 'x-ref'


class SchemaGenerator(GenerateJsonSchema):
    """JSON Schema generator for the description model.

    Field schemas carrying an `x-ref` marker (the element description,
    for example) are emitted once under `$defs` and linked from every
    model using them. The marker itself is not part of the output.
    """

    @classmethod
    @cache
    def make_schema(cls, indent: int | str | None = 4) -> str:
        """Serialize the JSON Schema of `Document`.

        Args:
            indent: JSON indentation, `None` for a single line.

        Returns:
            JSON Schema text with sorted keys.
        """
        schema = Document.model_json_schema(
            by_alias=True,
            schema_generator=cls,
            union_format='primitive_type_array',
        )

        schema.update({
            'title': 'Arazzo',
            'description': 'JSON Schema for Arazzo workflow descriptions',
            '$schema': cls.schema_dialect,
        })

        return dumps(schema, ensure_ascii=False, sort_keys=True, indent=indent)

    def generate_inner(self, schema: 'core.CoreSchema') -> JsonSchemaValue:
        """Generate a schema, hoisting marked schemas into `$defs`."""
        json_schema = super().generate_inner(schema)

        ref_id = json_schema.get(SHARED_MARKER)
        if not ref_id:
            return json_schema

        ref_def, ref_link = self.get_cache_defs_ref_schema(ref_id)
        self.definitions[ref_def] = {
            key: value
            for key, value in json_schema.items()
            if key != SHARED_MARKER
        }

        return ref_link
