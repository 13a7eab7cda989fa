"""Base Pydantic models for description elements.

This module defines the foundational model classes used by all Arazzo
structures. Models are immutable and closed: a parsed description is a
read-only tree and unknown fields are rejected.

It also provides the small toolkit used to build discriminated unions
with callable discriminators: every union member is tagged with its class
name, and the set of known tags is recorded so that validation error
locations can be mapped back onto the raw document.
"""

from collections.abc import Callable, Mapping
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict

from arazzo_model.names import Markdown  # noqa: TC001

#: Tags of every union member declared through `tagged`.
#: Pydantic inserts them into error locations of discriminated unions.
UNION_TAGS: set[str] = set()


class SchemaModel(BaseModel):
    """Base immutable model for all description elements.

    This class serves as the root for all Pydantic models representing
    Arazzo constructs such as workflows, steps, actions and criteria.

    Design principles enforced by this model:
        - Immutability: elements cannot be modified after creation.
          A validated description is a read-only tree that can be shared
          between threads without synchronization.
        - Strict schema validation: unknown or extra fields are rejected
          to avoid silent errors caused by typos.
        - Document naming: fields are declared in snake case and are read
          from (and written to) their camel case document names.

    All description models must inherit from this class.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        frozen=True,
        extra='forbid',
    )


class DescribedMixin(SchemaModel):
    """Mixin providing element self-documentation.

    The field defined in this model does not affect execution semantics
    and is used purely for descriptive purposes.
    """

    description: Markdown | None = Field(
        default=None,
        title='Description',
        description=(
            'Detailed human-readable description of the element. '
            'CommonMark syntax may be used for rich text representation.'
        ),
        json_schema_extra={
            'x-ref': 'DescribedModelDescription',
        },
    )


class SettingsModel(BaseSettings):
    """Base immutable model for runtime settings.

    This class serves as the root for all settings models responsible for
    resolving runtime configuration (for example, environment variables
    or local overrides).

    Design principles enforced by this model:
        - Immutability: resolved settings cannot be modified after creation.
        - Tolerant schema handling: unknown or extra fields are ignored.
          This allows the surrounding environment to contain unrelated
          variables without breaking configuration resolution.
    """

    model_config = SettingsConfigDict(
        frozen=True,
        extra='ignore',
    )


def tagged(model: Any, tag: str | None = None) -> Any:  # noqa: ANN401
    """Mark a union member with a discriminator tag.

    Args:
        model: Union member type (a model class or an annotated union).
        tag: Tag name. Defaults to the model class name.

    Returns:
        The annotated member type.
    """
    name = tag or model.__name__
    UNION_TAGS.add(name)

    return Annotated[model, Tag(name)]


def variant(choices: Callable[[Any], str | None], *,
            message: str) -> Discriminator:
    """Build a callable discriminator for a tagged union.

    Model instances are always discriminated by their class name,
    so the same callable works for validation and serialization.

    Args:
        choices: Callable selecting a tag for raw (non-model) input.
        message: Error message used when no variant matches.

    Returns:
        A discriminator reporting unknown variants as `InvalidVariant`.
    """
    def discriminate(value: Any) -> str | None:  # noqa: ANN401
        if isinstance(value, BaseModel):
            return type(value).__name__
        return choices(value)

    return Discriminator(
        discriminate,
        custom_error_type='InvalidVariant',
        custom_error_message=message,
    )


def get_tag(value: Any, field: str,  # noqa: ANN401
            variants: Mapping[str, str]) -> str | None:
    """Select a variant tag by the string value of a field.

    Args:
        value: Raw element data.
        field: Name of the field holding the variant name.
        variants: Mapping of variant names to union tags.

    Returns:
        The union tag, or `None` for unknown or non-string names.
    """
    kind = value.get(field) if isinstance(value, Mapping) else None
    if not isinstance(kind, str):
        return None

    return variants.get(kind)
