"""Names and opaque string types of the description format.

This module defines base name patterns and strongly-typed aliases used to
validate identifiers, lookup keys and pointers.

The rules defined here form part of the public format contract and are
relied upon by the parser, the cross-reference checks and IDE tooling.
"""

from re import ASCII
from re import compile as regexp
from typing import Annotated

from pydantic import Field

#: Base pattern for workflow and step identifiers.
_IDENTIFIER_PATTERN = r'[A-Za-z0-9_\-]+'

#: Base pattern for keys of named maps (outputs, components).
_LOOKUP_KEY_PATTERN = r'[A-Za-z0-9.\-_]+'

#: Base pattern for JSON Pointers, plain or in URI fragment form.
_JSON_POINTER_PATTERN = r'#?(/([^~/]|~[01])*)*'

IDENTIFIER_PATTERN = regexp(rf'^{_IDENTIFIER_PATTERN}$', flags=ASCII)
JSON_POINTER_PATTERN = regexp(rf'^{_JSON_POINTER_PATTERN}$')


LookupKey = Annotated[
    str, Field(
        pattern=rf'^{_LOOKUP_KEY_PATTERN}$',
        title='Lookup key',
        description=(
            'Key of a named map such as outputs or component registries. '
            'Keys are limited to ASCII letters, digits, dots, '
            'hyphens and underscores.'
        ),
        examples=[
            'petId',
            'pagination.next-page_1',
        ],
    ),
]

WorkflowId = Annotated[
    str, Field(
        pattern=rf'^{_IDENTIFIER_PATTERN}$',
        title='Workflow identifier',
        description=(
            'Unique case-sensitive name of a workflow within the description. '
            'Identifiers are limited to ASCII letters, digits, hyphens '
            'and underscores.'
        ),
        examples=[
            'loginUser',
            'apply-coupon',
        ],
    ),
]

StepId = Annotated[
    str, Field(
        pattern=rf'^{_IDENTIFIER_PATTERN}$',
        title='Step identifier',
        description=(
            'Unique case-sensitive name of a step within its workflow. '
            'Identifiers are limited to ASCII letters, digits, hyphens '
            'and underscores.'
        ),
        examples=[
            'find-pet',
            'placeOrder',
        ],
    ),
]

JsonPointer = Annotated[
    str, Field(
        pattern=rf'^{_JSON_POINTER_PATTERN}$',
        title='JSON Pointer',
        description=(
            'JSON Pointer (RFC 6901), optionally in URI fragment form '
            'with a leading `#`.'
        ),
        examples=[
            '/pets/0/name',
            '#/paths/~1pet~1findByStatus/get',
        ],
    ),
]

Markdown = Annotated[
    str, Field(
        title='Markdown text',
        description='Free-form text. CommonMark syntax may be used.',
    ),
]

RelativeUrl = Annotated[
    str, Field(
        title='URI reference',
        description='URI reference that may be relative to the description.',
        examples=[
            './petstore.openapi.yaml',
        ],
    ),
]

JsonPath = Annotated[
    str, Field(
        title='JSONPath expression',
        description='JSONPath expression. Stored verbatim, never evaluated.',
        examples=[
            '$.pets[?(@.status == "available")]',
        ],
    ),
]

XPathExpression = Annotated[
    str, Field(
        title='XPath expression',
        description='XPath expression. Stored verbatim, never evaluated.',
        examples=[
            '/pets/pet[1]/name',
        ],
    ),
]

Regex = Annotated[
    str, Field(
        title='Regular expression',
        description='Regular expression. Stored verbatim, never evaluated.',
        examples=[
            '^2[0-9]{2}$',
        ],
    ),
]
