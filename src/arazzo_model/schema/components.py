"""Components registry.

Components hold named elements shared across the workflows of a single
description: input schemas, parameters, success actions and failure
actions. Workflows and steps point into the registry with reusable
objects; input schemas are referenced with JSON Schema `$ref` pointers
of the form `#/components/inputs/<name>`.
"""

from collections.abc import Mapping
from typing import Any

from pydantic import Field, field_validator
from pydantic_core import PydanticCustomError

from arazzo_model.errors import DanglingReferenceError
from arazzo_model.expressions import ComponentReference, ContextExpression
from arazzo_model.models import SchemaModel
from arazzo_model.names import LookupKey  # noqa: TC001
from arazzo_model.values import SEQUENCES, JsonValue

from .actions import FailureAction, SuccessAction  # noqa: TC001
from .parameters import Parameter
from .reusable import ParameterReference, ReusableObject

#: Registry field name per reference kind.
REGISTRIES = {
    'inputs': 'inputs',
    'parameters': 'parameters',
    'successActions': 'success_actions',
    'failureActions': 'failure_actions',
}


class Components(SchemaModel):
    """Reusable elements of a description."""

    inputs: dict[LookupKey, dict[str, JsonValue]] | None = Field(
        default=None,
        title='Reusable input schemas',
        description='JSON Schemas referenced from workflow inputs. Stored verbatim.',
    )

    parameters: dict[LookupKey, Parameter] | None = Field(
        default=None,
        title='Reusable parameters',
    )

    success_actions: dict[LookupKey, SuccessAction] | None = Field(
        default=None,
        title='Reusable success actions',
    )

    failure_actions: dict[LookupKey, FailureAction] | None = Field(
        default=None,
        title='Reusable failure actions',
    )

    @field_validator('inputs', 'parameters', 'success_actions', 'failure_actions', mode='before')
    @classmethod
    def check_unique_keys(cls, value: Any) -> Any:  # noqa: ANN401
        """Accept ordered key-value pairs, rejecting repeated keys."""
        if not isinstance(value, SEQUENCES):
            return value

        pairs = {}
        for item in value:
            if not isinstance(item, SEQUENCES) or len(item) != 2:  # noqa: PLR2004
                return value

            key, entry = item
            if not isinstance(key, str):
                raise PydanticCustomError(
                    'TypeMismatch',
                    'Registry key must be a string, got {type}',
                    {'type': type(key).__name__},
                )

            if key in pairs:
                raise PydanticCustomError(
                    'DuplicateEntry',
                    "Duplicate registry key '{key}'",
                    {'key': key},
                )
            pairs[key] = entry

        return pairs

    def get_registry(self, kind: str) -> Mapping[str, Any]:
        """Get a registry by reference kind (`parameters`, `successActions`, ...)."""
        return getattr(self, REGISTRIES[kind]) or {}

    def resolve(self, reference: str) -> Any:  # noqa: ANN401
        """Resolve a `$components.<kind>.<name>` reference.

        Args:
            reference: Component reference.

        Returns:
            The registered element.

        Raises:
            DanglingReferenceError: If the reference is malformed or the
                element is not registered.
        """
        try:
            reference = ComponentReference.parse(reference)

        except PydanticCustomError as base:
            raise DanglingReferenceError(reference) from base

        registry = self.get_registry(reference.kind)
        if reference.name not in registry:
            raise DanglingReferenceError(reference)

        return registry[reference.name]

    def resolve_object(self, item: ReusableObject) -> Any:  # noqa: ANN401
        """Resolve a reusable object, applying a parameter value override.

        Raises:
            DanglingReferenceError: If the reference does not resolve.
        """
        element = self.resolve(item.reference)

        if isinstance(item, ParameterReference) and item.value is not None:
            value = item.value
            if ContextExpression.match(value):
                value = ContextExpression.parse(value)
            return element.model_copy(update={'value': value})

        return element
