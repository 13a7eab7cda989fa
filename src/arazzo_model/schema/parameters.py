"""Parameter and request body definitions.

A parameter passes a value to an operation or to a sub-workflow. Values
are either literals or runtime expressions: string values matching the
expression grammar are stored as `ContextExpression` instances, anything
else is kept as a literal.

Operation parameters are unique by the combination of `name` and `in`.
Workflow inputs have no transport location, so parameters of workflow
steps and workflow-level parameters may omit `in`.
"""

from typing import Literal

from pydantic import Field, field_validator

from arazzo_model.expressions import ContextExpression
from arazzo_model.models import SchemaModel
from arazzo_model.names import JSON_POINTER_PATTERN, JsonPointer, XPathExpression  # noqa: TC001
from arazzo_model.values import JsonValue, Scalar  # noqa: TC001

from .reusable import ParameterReference, reusable

#: Transport location of an operation parameter.
type ParameterLocation = Literal['path', 'query', 'header', 'cookie', 'body']


def _parse_value[T](value: T) -> T | ContextExpression:
    """Store expression-shaped strings as runtime expressions."""
    if ContextExpression.match(value):
        return ContextExpression.parse(value)

    return value


class Parameter(SchemaModel):
    """Parameter with an optional location."""

    name: str = Field(
        min_length=1,
        title='Parameter name',
    )

    location: ParameterLocation | None = Field(
        default=None,
        alias='in',
        title='Parameter location',
        description=(
            'Transport location of the parameter. Required for operation '
            'steps, omitted for workflow inputs.'
        ),
    )

    value: JsonValue = Field(
        title='Parameter value',
        description='Literal value or runtime expression.',
    )

    @field_validator('value', mode='after')
    @classmethod
    def parse_expression(cls, value: JsonValue) -> JsonValue:
        """Store expression-shaped strings as runtime expressions."""
        return _parse_value(value)

    @property
    def is_expression(self) -> bool:
        """Whether the value is a runtime expression."""
        return isinstance(self.value, ContextExpression)

    @property
    def key(self) -> tuple[str, str | None]:
        """Identity of the parameter within one list."""
        return self.name, self.location


class LocatedParameter(Parameter):
    """Parameter of an operation step, `in` is required."""

    location: ParameterLocation = Field(
        alias='in',
        title='Parameter location',
        description='Transport location of the parameter.',
    )


#: Inline parameter or a reference to a reusable one.
ParameterItem = reusable(Parameter, ParameterReference, 'Parameter')

#: Inline located parameter or a reference to a reusable one.
LocatedParameterItem = reusable(LocatedParameter, ParameterReference, 'LocatedParameter')


class PayloadReplacement(SchemaModel):
    """Replacement of a single location inside a request payload."""

    target: JsonPointer | XPathExpression = Field(
        union_mode='left_to_right',
        title='Replacement target',
        description='JSON Pointer or XPath expression selecting the value to replace.',
    )

    value: Scalar = Field(
        title='Replacement value',
        description='Literal value or runtime expression.',
    )

    @field_validator('value', mode='after')
    @classmethod
    def parse_expression(cls, value: Scalar) -> Scalar:
        """Store expression-shaped strings as runtime expressions."""
        return _parse_value(value)

    @property
    def target_kind(self) -> Literal['pointer', 'xpath']:
        """Syntax of the replacement target."""
        if JSON_POINTER_PATTERN.match(self.target):
            return 'pointer'

        return 'xpath'


class RequestBody(SchemaModel):
    """Request body passed by a step to an operation."""

    content_type: str | None = Field(
        default=None,
        title='Content type',
        examples=[
            'application/json',
        ],
    )

    payload: JsonValue = Field(
        default=None,
        title='Payload',
        description='Request body content. May embed runtime expressions.',
    )

    replacements: tuple[PayloadReplacement, ...] | None = Field(
        default=None,
        title='Payload replacements',
        description='Locations inside the payload set from runtime values.',
    )
