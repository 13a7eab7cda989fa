"""Description document root.

Defines the top-level document model: metadata, referenced source
descriptions, workflows and reusable components.
"""

from typing import Any, Literal

from pydantic import AnyUrl, Field, field_validator
from pydantic_core import PydanticCustomError

from arazzo_model.models import DescribedMixin, SchemaModel
from arazzo_model.names import RelativeUrl  # noqa: TC001

from .components import Components  # noqa: TC001
from .workflows import Workflow  # noqa: TC001

#: Supported versions of the description format.
SPEC_VERSION_PATTERN = r'^1\.0\.\d+(-.+)?$'


class Info(DescribedMixin):
    """Metadata about the description."""

    title: str = Field(
        min_length=1,
        title='Title',
        description='Human-readable title of the description.',
    )

    summary: str | None = Field(
        default=None,
        title='Summary',
    )

    version: str = Field(
        min_length=1,
        title='Document version',
        description='Version of the description document (not of the format).',
    )


class SourceDescription(SchemaModel):
    """Named reference to an API description or another Arazzo description."""

    name: str = Field(
        min_length=1,
        title='Source name',
        description=(
            'Unique name of the source description. '
            'Should match `[A-Za-z0-9_\\-]+` to be usable in expressions.'
        ),
    )

    url: AnyUrl | RelativeUrl = Field(
        union_mode='left_to_right',
        title='Source URL',
        description='Absolute URL, or URI reference relative to the description.',
    )

    type: Literal['openapi', 'arazzo'] | None = Field(
        default=None,
        title='Source type',
    )

    @field_validator('url', mode='before')
    @classmethod
    def check_url_type(cls, value: Any) -> Any:  # noqa: ANN401
        """Reject non-string URLs before union matching."""
        if not isinstance(value, (str, AnyUrl)):
            raise PydanticCustomError(
                'TypeMismatch',
                'Source URL must be a string',
            )

        return value


class Document(SchemaModel):
    """Arazzo description."""

    spec_version: str = Field(
        alias='arazzo',
        pattern=SPEC_VERSION_PATTERN,
        title='Format version',
        examples=[
            '1.0.1',
        ],
    )

    info: Info

    source_descriptions: tuple[SourceDescription, ...] = Field(
        min_length=1,
        title='Source descriptions',
    )

    workflows: tuple[Workflow, ...] = Field(
        min_length=1,
        title='Workflows',
    )

    components: Components | None = Field(
        default=None,
        title='Components',
    )

    def dump(self) -> dict[str, Any]:
        """Serialize back to the generic value form.

        Parsing the result yields a document equal to this one.
        """
        return self.model_dump(
            mode='json',
            by_alias=True,
            exclude_defaults=True,
        )

    def get_workflow(self, workflow_id: str) -> Workflow | None:
        """Find a workflow by identifier."""
        for workflow in self.workflows:
            if workflow.workflow_id == workflow_id:
                return workflow

        return None

    def get_source(self, name: str) -> SourceDescription | None:
        """Find a source description by name."""
        for source in self.source_descriptions:
            if source.name == name:
                return source

        return None

    @property
    def arazzo_sources(self) -> tuple[SourceDescription, ...]:
        """Source descriptions of type `arazzo`."""
        return tuple(
            source
            for source in self.source_descriptions
            if source.type == 'arazzo'
        )
