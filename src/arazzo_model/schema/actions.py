"""Success and failure action definitions.

Actions describe what happens once the outcome of a step is known:

- `end` finishes the workflow and returns control to the caller with
  the applicable outputs;
- `goto` transfers control one way to another step of the workflow or
  to another workflow;
- `retry` (failure only) runs a referenced step or workflow and then
  retries the current step.

Actions are evaluated in declaration order; the first action whose
criteria all hold is taken. Actions without criteria always apply.
"""

from collections.abc import Mapping
from typing import TYPE_CHECKING, Annotated, Literal

from pydantic import Field, model_validator
from pydantic_core import PydanticCustomError

from arazzo_model.expressions import WorkflowReference  # noqa: TC001
from arazzo_model.models import SchemaModel, get_tag, tagged, variant
from arazzo_model.names import StepId  # noqa: TC001

from .criteria import Criterion  # noqa: TC001

if TYPE_CHECKING:
    from typing import Any, Self

ACTION_VARIANTS = {
    'end': 'EndAction',
    'goto': 'GotoAction',
    'retry': 'RetryAction',
}


class BaseAction(SchemaModel):
    """Base class for success and failure actions."""

    name: str = Field(
        min_length=1,
        title='Action name',
        description=(
            'Name of the action. Step actions override workflow actions '
            'with the same name.'
        ),
    )

    criteria: tuple[Criterion, ...] | None = Field(
        default=None,
        title='Action criteria',
        description=(
            'Assertions that must all hold for the action to be taken. '
            'An action without criteria always applies.'
        ),
    )


class TargetMixin(SchemaModel):
    """Mixin for actions transferring control to a step or a workflow.

    `stepId` and `workflowId` are mutually exclusive. Bare workflow
    identifiers refer to workflows of the same description.
    """

    step_id: StepId | None = Field(
        default=None,
        title='Target step',
        description='Identifier of a step of the current workflow.',
    )

    workflow_id: WorkflowReference | None = Field(
        default=None,
        title='Target workflow',
        description='Reference of the workflow to transfer control to.',
    )

    @model_validator(mode='after')
    def check_target(self) -> 'Self':
        """Require exactly one target."""
        if self.step_id is not None and self.workflow_id is not None:
            raise PydanticCustomError(
                'MutualExclusionViolation',
                '`stepId` and `workflowId` are mutually exclusive',
            )

        if self.target is None:
            raise PydanticCustomError(
                'MutualExclusionViolation',
                'Exactly one of `stepId` or `workflowId` is required',
            )

        return self

    @property
    def target(self) -> str | None:
        """The step or workflow control is transferred to."""
        if self.step_id is not None:
            return self.step_id

        return self.workflow_id


class EndAction(BaseAction):
    """End the workflow and return to the caller."""

    type: Literal['end'] = Field(title='Action type')


class GotoAction(TargetMixin, BaseAction):
    """Transfer control to a step or a workflow."""

    type: Literal['goto'] = Field(title='Action type')


class RetryAction(TargetMixin, BaseAction):
    """Retry the current step.

    The referenced step or workflow runs first and the current step is
    retried afterwards. The retry limit must be exhausted before
    any subsequent failure action in the list is considered.
    """

    type: Literal['retry'] = Field(title='Action type')

    retry_after: float | None = Field(
        default=None,
        ge=0,
        title='Retry delay',
        description='Seconds to wait before the step is retried.',
    )

    retry_limit: int = Field(
        default=1,
        ge=0,
        title='Retry limit',
        description='Maximum number of attempts. A single retry by default.',
    )


def action_kind(value: 'Any') -> str | None:  # noqa: ANN401
    """Select an action variant by its `type`.

    Actions without a type are reported as end actions missing the field.
    """
    if not isinstance(value, Mapping) or value.get('type') is None:
        return ACTION_VARIANTS['end']

    return get_tag(value, 'type', ACTION_VARIANTS)


#: Action taken on step success, discriminated by `type`.
SuccessAction = Annotated[
    tagged(EndAction)
    | tagged(GotoAction),
    variant(action_kind, message='Unsupported success action type'),
]

#: Action taken on step failure, discriminated by `type`.
FailureAction = Annotated[
    tagged(EndAction)
    | tagged(GotoAction)
    | tagged(RetryAction),
    variant(action_kind, message='Unsupported failure action type'),
]
