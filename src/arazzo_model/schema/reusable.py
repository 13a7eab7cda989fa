"""Reusable object references.

A reusable object stands in place of an inline parameter or action and
points into the components registry of the same description through
a `$components.<kind>.<name>` expression. References are resolved with
`Components.resolve`; the parser checks that every reference resolves.
"""

from collections.abc import Mapping
from typing import TYPE_CHECKING, Annotated, Any, ClassVar

from pydantic import Discriminator, Field, model_validator
from pydantic_core import PydanticCustomError

from arazzo_model.expressions import ComponentReference  # noqa: TC001
from arazzo_model.models import SchemaModel, tagged
from arazzo_model.values import JsonValue  # noqa: TC001

if TYPE_CHECKING:
    from typing import Self


class ReusableObject(SchemaModel):
    """Base class for references into the components registry."""

    #: Registry the reference must point into.
    component: ClassVar[str]

    reference: ComponentReference = Field(
        title='Component reference',
        description='Expression of the form `$components.<kind>.<name>`.',
        examples=[
            '$components.parameters.page',
        ],
    )

    @model_validator(mode='after')
    def check_component(self) -> 'Self':
        """Require the reference to point into the expected registry."""
        if self.reference.kind != self.component:
            raise PydanticCustomError(
                'PatternViolation',
                'Reference must point into `$components.{component}`, got {reference}',
                {'component': self.component, 'reference': str(self.reference)},
            )

        return self


class ParameterReference(ReusableObject):
    """Reference to a reusable parameter.

    The optional value overrides the value of the referenced parameter.
    """

    component = 'parameters'

    value: JsonValue = Field(
        default=None,
        title='Value override',
    )


class SuccessActionReference(ReusableObject):
    """Reference to a reusable success action."""

    component = 'successActions'


class FailureActionReference(ReusableObject):
    """Reference to a reusable failure action."""

    component = 'failureActions'


def reusable(inline: Any, reference: type[ReusableObject], tag: str) -> Any:  # noqa: ANN401
    """Build an inline-or-reference union.

    Mappings carrying a `reference` key are validated as references,
    anything else as the inline element.

    Args:
        inline: Inline element type.
        reference: Reference model for the same slot.
        tag: Union tag of the inline element.

    Returns:
        An annotated discriminated union type.
    """
    def discriminate(value: Any) -> str:  # noqa: ANN401
        if isinstance(value, ReusableObject):
            return reference.__name__

        if isinstance(value, Mapping) and 'reference' in value:
            return reference.__name__

        return tag

    return Annotated[
        tagged(inline, tag) | tagged(reference),
        Discriminator(discriminate),
    ]
