"""Runtime expressions and references.

A runtime expression is a `$`-prefixed string referring to a value that
only becomes available while a workflow runs (an HTTP message part, a
workflow input, a previous step output, and so on). Expressions are never
evaluated here: they are parsed against the expression grammar once, at
construction time, and are then carried around as validated strings.

Each position of the description accepts a subset of expression roots.
The position-tagged subclasses below encode those subsets, so a consumer
knows which root forms are legal wherever an expression is stored.
"""

from re import ASCII
from re import compile as regexp
from typing import TYPE_CHECKING, Annotated, ClassVar

from pydantic import AfterValidator, Field, model_serializer, model_validator
from pydantic_core import PydanticCustomError, core_schema

from arazzo_model.models import SchemaModel
from arazzo_model.names import IDENTIFIER_PATTERN, JsonPointer

if TYPE_CHECKING:
    from typing import Any, Self

    from pydantic import GetCoreSchemaHandler, GetJsonSchemaHandler
    from pydantic.json_schema import JsonSchemaValue

_IDENTIFIER = r'[A-Za-z0-9_\-]+'
_LOOKUP_KEY = r'[A-Za-z0-9.\-_]+'
_NAME = r'[^\s#]+'
_TOKEN = r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+"
_POINTER = r'(#(/([^~/]|~[01])*)*)?'
_SOURCE = rf'(header\.{_TOKEN}|query\.{_NAME}|path\.{_NAME}|body{_POINTER})'

#: Expression grammar per root, matched against the text after `$`.
EXPRESSION_GRAMMAR = {
    'url': regexp(r'url'),
    'method': regexp(r'method'),
    'statusCode': regexp(r'statusCode'),
    'request': regexp(rf'request\.{_SOURCE}'),
    'response': regexp(rf'response\.{_SOURCE}'),
    'message': regexp(rf'message\.{_SOURCE}'),
    'inputs': regexp(rf'inputs\.{_NAME}{_POINTER}'),
    'outputs': regexp(rf'outputs\.{_NAME}{_POINTER}'),
    'steps': regexp(rf'steps\.{_IDENTIFIER}\.outputs\.{_NAME}{_POINTER}'),
    'workflows': regexp(rf'workflows\.{_IDENTIFIER}\.(inputs|outputs)\.{_NAME}{_POINTER}'),
    'sourceDescriptions': regexp(rf'sourceDescriptions\.{_IDENTIFIER}\.\S+'),
    'components': regexp(
        rf'components\.(inputs|parameters|successActions|failureActions)\.{_LOOKUP_KEY}',
    ),
}

#: Compiled pattern extracting the root of an expression.
ROOT_PATTERN = regexp(r'^\$(?P<root>[A-Za-z]+)', flags=ASCII)


class RuntimeExpression(str):
    """Validated runtime expression.

    Instances can only be obtained through `parse`, which checks the
    whole string against the expression grammar. Once constructed, the
    grammar invariant holds for the lifetime of the value.
    """

    __slots__ = ()

    #: Expression roots accepted by this class.
    roots: ClassVar[frozenset[str]] = frozenset(EXPRESSION_GRAMMAR)

    @classmethod
    def parse(cls, value: str) -> 'Self':
        """Parse a string into an expression.

        Args:
            value: Candidate expression text.

        Returns:
            The validated expression.

        Raises:
            PydanticCustomError: `PatternViolation` if the text is not
                an expression accepted by this class.
        """
        if isinstance(value, cls):
            return value

        root = ROOT_PATTERN.match(value)
        if not root:
            raise PydanticCustomError(
                'PatternViolation',
                "Runtime expression must start with `$` and a root name, got '{expression}'",
                {'expression': value},
            )

        if root['root'] not in cls.roots:
            raise PydanticCustomError(
                'PatternViolation',
                'Expression root `${root}` is not allowed here, expected one of: {roots}',
                {'root': root['root'], 'roots': ', '.join(sorted(cls.roots))},
            )

        grammar = EXPRESSION_GRAMMAR.get(root['root'])
        if grammar is None or not grammar.fullmatch(value, 1):
            raise PydanticCustomError(
                'PatternViolation',
                "Malformed runtime expression '{expression}'",
                {'expression': value},
            )

        return cls(value)

    @classmethod
    def match(cls, value: object) -> bool:
        """Check whether a value is an expression accepted by this class."""
        if not isinstance(value, str):
            return False

        try:
            cls.parse(value)

        except PydanticCustomError:
            return False

        return True

    @property
    def root(self) -> str:
        """Expression root name without the leading `$`."""
        return self.parts[0]

    @property
    def parts(self) -> tuple[str, ...]:
        """Dot-separated segments of the expression before any pointer."""
        head, _, _ = self[1:].partition('#')
        return tuple(head.split('.'))

    @property
    def pointer(self) -> str | None:
        """JSON Pointer fragment of a body or value reference."""
        _, separator, pointer = self.partition('#')
        if not separator:
            return None

        return pointer

    @classmethod
    def __get_pydantic_core_schema__(cls, source: type,
                                     handler: 'GetCoreSchemaHandler') -> core_schema.CoreSchema:
        """Validate strings through `parse` and serialize as plain strings."""
        return core_schema.no_info_after_validator_function(
            cls.parse,
            core_schema.str_schema(),
            serialization=core_schema.plain_serializer_function_ser_schema(str),
        )

    @classmethod
    def __get_pydantic_json_schema__(cls, schema: core_schema.CoreSchema,
                                     handler: 'GetJsonSchemaHandler') -> 'JsonSchemaValue':
        """Describe expressions as `$`-prefixed strings."""
        return {
            'type': 'string',
            'pattern': rf'^\$({"|".join(sorted(cls.roots))})',
            'description': (cls.__doc__ or '').split('\n', 1)[0],
        }


class ContextExpression(RuntimeExpression):
    """Runtime expression evaluated against the current execution state."""

    __slots__ = ()

    roots = frozenset(EXPRESSION_GRAMMAR) - {'components'}


class StepExpression(RuntimeExpression):
    """Runtime expression producing a step output."""

    __slots__ = ()

    roots = frozenset(EXPRESSION_GRAMMAR) - {'components'}

    @property
    def step_id(self) -> str | None:
        """Identifier of the step this expression reads, if any."""
        if self.root != 'steps':
            return None

        return self.parts[1]


class WorkflowExpression(StepExpression):
    """Runtime expression producing a workflow output."""

    __slots__ = ()

    roots = frozenset({'inputs', 'steps', 'workflows', 'sourceDescriptions'})


class SourceExpression(RuntimeExpression):
    """Reference into a source description.

    Has the form `$sourceDescriptions.<name>.<target>` where the target is
    an operation or workflow identifier, or a source field such as `url`.
    """

    __slots__ = ()

    roots = frozenset({'sourceDescriptions'})

    @property
    def source_name(self) -> str:
        """Name of the referenced source description."""
        return self[1:].split('.', 2)[1]

    @property
    def target(self) -> str:
        """Referenced element inside the source description."""
        return self[1:].split('.', 2)[2]


class ComponentReference(RuntimeExpression):
    """Reference into a components registry.

    Has the form `$components.<kind>.<name>`.
    """

    __slots__ = ()

    roots = frozenset({'components'})

    @property
    def kind(self) -> str:
        """Registry name (`parameters`, `successActions`, ...)."""
        return self.parts[1]

    @property
    def name(self) -> str:
        """Key of the referenced entry."""
        return self[1:].split('.', 2)[2]


def _bare_or_source(kind: str, pattern: 'Any' = None) -> AfterValidator:  # noqa: ANN401
    """Build a validator for id-or-expression references.

    Args:
        kind: Human-readable name of the referenced element.
        pattern: Optional compiled pattern for bare identifiers.

    Returns:
        Validator returning a `SourceExpression` for `$`-prefixed values
        and the plain identifier otherwise.
    """
    def validate(value: str) -> str:
        if value.startswith('$'):
            return SourceExpression.parse(value)

        if pattern is not None and not pattern.match(value):
            raise PydanticCustomError(
                'PatternViolation',
                "Invalid {kind} '{value}'",
                {'kind': kind, 'value': value},
            )

        return value

    return AfterValidator(validate)


WorkflowReference = Annotated[
    str, Field(
        min_length=1,
        title='Workflow reference',
        description=(
            'Identifier of a workflow of this description, or a '
            '`$sourceDescriptions.<name>.<workflowId>` expression '
            'referencing a workflow of another Arazzo description.'
        ),
        examples=[
            'loginUser',
            '$sourceDescriptions.auth.loginUser',
        ],
    ),
    _bare_or_source('workflow identifier', IDENTIFIER_PATTERN),
]

OperationReference = Annotated[
    str, Field(
        min_length=1,
        title='Operation reference',
        description=(
            'Operation identifier, or a '
            '`$sourceDescriptions.<name>.<operationId>` expression. '
            'The expression form is mandatory when more than one '
            'API description is referenced.'
        ),
        examples=[
            'findPetsByStatus',
            '$sourceDescriptions.petStore.findPetsByStatus',
        ],
    ),
    _bare_or_source('operation identifier'),
]


def is_bare(reference: str | None) -> bool:
    """Check whether a workflow or operation reference is a bare identifier."""
    return reference is not None and not isinstance(reference, SourceExpression)


class OperationPath(SchemaModel):
    """Operation addressed by a source description and a JSON Pointer.

    Written in documents as a single string
    `{$sourceDescriptions.<name>.url}#/paths/...`.
    """

    source: SourceExpression
    path: JsonPointer

    @model_validator(mode='before')
    @classmethod
    def parse_string(cls, data: object) -> object:
        """Split the single-string form into source and pointer."""
        if isinstance(data, cls):
            return data

        if not isinstance(data, str):
            raise PydanticCustomError(
                'TypeMismatch',
                'Operation path must be a string',
            )

        start, end = data.find('{'), data.find('}')
        if start != 0 or end < start + 2:
            raise PydanticCustomError(
                'MalformedOperationPath',
                'Operation path must have the form `{<source expression>}<json pointer>`, '
                "got '{value}'",
                {'value': data},
            )

        return {
            'source': data[start + 1:end],
            'path': data[end + 1:],
        }

    @model_serializer(mode='plain')
    def to_string(self) -> str:
        """Serialize back to the single-string form."""
        return f'{{{self.source}}}{self.path}'

    def __str__(self) -> str:
        """String representation."""
        return self.to_string()

    @classmethod
    def __get_pydantic_json_schema__(cls, schema: core_schema.CoreSchema,
                                     handler: 'GetJsonSchemaHandler') -> 'JsonSchemaValue':
        """Describe operation paths in their single-string form."""
        return {
            'type': 'string',
            'title': 'Operation path',
            'pattern': r'^\{\$sourceDescriptions\.[^}]+\}',
            'examples': [
                '{$sourceDescriptions.petStore.url}#/paths/~1pet~1findByStatus/get',
            ],
        }
