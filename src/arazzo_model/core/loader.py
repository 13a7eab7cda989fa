"""YAML loader for description documents.

The loader decodes YAML (and therefore JSON) documents into the generic
value tree consumed by the parser. Compared to `yaml.SafeLoader` it:

- rejects keys repeated within one mapping instead of silently keeping
  the last value;
- keeps timestamps as plain strings, so every decoded scalar is a JSON
  value.
"""

from collections.abc import Hashable
from typing import TYPE_CHECKING, Any

from yaml import SafeLoader
from yaml.constructor import ConstructorError, SafeConstructor
from yaml.nodes import MappingNode

if TYPE_CHECKING:
    from yaml.nodes import Node

MERGE_TAG = 'tag:yaml.org,2002:merge'
TIMESTAMP_TAG = 'tag:yaml.org,2002:timestamp'


class DescriptionLoader(SafeLoader):
    """Safe YAML loader with duplicate key detection."""

    def construct_mapping(self, node: 'Node', deep: bool = False) -> dict[Any, Any]:
        """Construct a mapping, rejecting repeated keys.

        Raises:
            ConstructorError: If a key appears twice in the mapping.
        """
        if isinstance(node, MappingNode):
            seen = {}
            for key_node, _ in node.value:
                if key_node.tag == MERGE_TAG:
                    continue

                key = self.construct_object(key_node, deep=deep)
                if not isinstance(key, Hashable):
                    continue

                if key in seen:
                    raise ConstructorError(
                        'while constructing a mapping', node.start_mark,
                        f'found duplicate key {key!r}', key_node.start_mark,
                    )
                seen[key] = key_node

        return super().construct_mapping(node, deep=deep)


DescriptionLoader.add_constructor(TIMESTAMP_TAG, SafeConstructor.construct_yaml_str)
