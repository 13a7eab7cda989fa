"""Criterion definitions.

A criterion is an unevaluated boolean assertion on runtime state. It is
used as a step success criterion and to gate success and failure actions.

Criteria are tagged by `type` (`simple` when absent). JSONPath and XPath
criteria additionally carry an expression version, given either with the
shorthand `type: jsonpath` (default version) or with an expression type
object `type: {type: xpath, version: xpath-30}`.
"""

from collections.abc import Mapping
from typing import TYPE_CHECKING, Annotated, Any, ClassVar, Literal

from pydantic import Field, model_serializer, model_validator
from pydantic_core import PydanticCustomError

from arazzo_model.expressions import ContextExpression  # noqa: TC001
from arazzo_model.models import SchemaModel, tagged, variant
from arazzo_model.names import JsonPath, Regex, XPathExpression  # noqa: TC001

if TYPE_CHECKING:
    from pydantic import SerializerFunctionWrapHandler

CRITERION_VARIANTS = {
    'simple': 'SimpleCriterion',
    'regex': 'RegexCriterion',
    'jsonpath': 'JsonPathCriterion',
    'xpath': 'XPathCriterion',
}

JSONPATH_DEFAULT_VERSION = 'draft-goessner-dispatch-jsonpath-00'
XPATH_DEFAULT_VERSION = 'default'

_CONTEXT_DESCRIPTION = (
    'Runtime expression selecting the value the condition is applied to, '
    'for example `$response.body`.'
)


class BaseCriterion(SchemaModel):
    """Base class for criteria."""

    condition: str = Field(
        min_length=1,
        title='Condition',
        description='Condition to apply. Stored verbatim, never evaluated.',
    )


class SimpleCriterion(BaseCriterion):
    """Simple condition combining literals, operators and expressions.

    For example `$statusCode == 200`. The context is optional.
    """

    type: Literal['simple'] = 'simple'

    context: ContextExpression | None = Field(
        default=None,
        title='Criterion context',
        description=_CONTEXT_DESCRIPTION,
    )


class RegexCriterion(BaseCriterion):
    """Regular expression applied to the context value."""

    type: Literal['regex']
    condition: Regex = Field(min_length=1, title='Regular expression')

    context: ContextExpression = Field(
        title='Criterion context',
        description=_CONTEXT_DESCRIPTION,
    )


class VersionedCriterion(BaseCriterion):
    """Base class for criteria carrying an expression version.

    The expression type object form is unpacked on input and restored
    on output, so both forms parse into the same model.
    """

    default_version: ClassVar[str]

    type: str
    version: str

    context: ContextExpression = Field(
        title='Criterion context',
        description=_CONTEXT_DESCRIPTION,
    )

    @model_validator(mode='before')
    @classmethod
    def unpack_expression_type(cls, data: Any) -> Any:  # noqa: ANN401
        """Unpack an expression type object into type and version."""
        if not isinstance(data, Mapping):
            return data

        if 'version' in data:
            raise PydanticCustomError(
                'UnexpectedField',
                'Expression version must be given inside the `type` object',
            )

        kind = data.get('type')
        if not isinstance(kind, Mapping):
            return data

        if unknown := sorted(set(kind) - {'type', 'version'}):
            raise PydanticCustomError(
                'UnexpectedField',
                'Unexpected expression type fields: {fields}',
                {'fields': ', '.join(map(str, unknown))},
            )

        if 'version' not in kind:
            raise PydanticCustomError(
                'MissingField',
                'Expression type object requires a `version`',
            )

        return {
            **data,
            'type': kind.get('type'),
            'version': kind['version'],
        }

    @model_serializer(mode='wrap')
    def pack_expression_type(self, handler: 'SerializerFunctionWrapHandler') -> dict[str, Any]:
        """Write non-default versions back as an expression type object."""
        data = handler(self)
        data.pop('version', None)

        if self.version != self.default_version:
            data['type'] = {
                'type': self.type,
                'version': self.version,
            }

        return data


class JsonPathCriterion(VersionedCriterion):
    """JSONPath expression applied to the context value."""

    default_version = JSONPATH_DEFAULT_VERSION

    type: Literal['jsonpath']
    condition: JsonPath = Field(min_length=1, title='JSONPath expression')

    version: Literal['draft-goessner-dispatch-jsonpath-00'] = Field(
        default=JSONPATH_DEFAULT_VERSION,
        title='JSONPath version',
    )


class XPathCriterion(VersionedCriterion):
    """XPath expression applied to the context value.

    The `default` version stands for XPath 3.1.
    """

    default_version = XPATH_DEFAULT_VERSION

    type: Literal['xpath']
    condition: XPathExpression = Field(min_length=1, title='XPath expression')

    version: Literal['default', 'xpath-30', 'xpath-20', 'xpath-10'] = Field(
        default=XPATH_DEFAULT_VERSION,
        title='XPath version',
    )


def criterion_kind(value: Any) -> str | None:  # noqa: ANN401
    """Select a criterion variant by its `type` (`simple` by default)."""
    if not isinstance(value, Mapping):
        return CRITERION_VARIANTS['simple']

    kind = value.get('type', 'simple')
    if isinstance(kind, Mapping):
        kind = kind.get('type')

    if not isinstance(kind, str):
        return None

    return CRITERION_VARIANTS.get(kind)


#: Any criterion, discriminated by `type`.
Criterion = Annotated[
    tagged(SimpleCriterion)
    | tagged(RegexCriterion)
    | tagged(JsonPathCriterion)
    | tagged(XPathCriterion),
    variant(criterion_kind, message='Unsupported criterion type'),
]
