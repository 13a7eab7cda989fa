"""Workflow definitions.

A workflow is an ordered sequence of steps together with the defaults
its steps inherit: success actions, failure actions and parameters.

Inheritance follows the override-not-remove rule: every workflow-level
entry applies to every step; a step may redefine an entry with the same
name (and, for parameters, the same location) but can never drop one.
The `effective_*` helpers compute the merged lists an executor would
use for a step.
"""

from typing import TYPE_CHECKING

from pydantic import Field

from arazzo_model.expressions import WorkflowExpression, WorkflowReference  # noqa: TC001
from arazzo_model.models import DescribedMixin
from arazzo_model.names import LookupKey, WorkflowId  # noqa: TC001
from arazzo_model.values import JsonValue  # noqa: TC001

from .components import Components
from .parameters import Parameter, ParameterItem  # noqa: TC001
from .reusable import ReusableObject
from .steps import FailureActionItem, InvocationStep, Step, SuccessActionItem  # noqa: TC001

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .actions import FailureAction, SuccessAction


class Workflow(DescribedMixin):
    """Named, ordered sequence of steps."""

    workflow_id: WorkflowId = Field(
        title='Workflow identifier',
        description='Identifier of the workflow, unique within the description.',
    )

    summary: str | None = Field(
        default=None,
        title='Summary',
    )

    inputs: dict[str, JsonValue] | None = Field(
        default=None,
        title='Workflow inputs',
        description='JSON Schema of the workflow inputs. Stored verbatim.',
    )

    depends_on: tuple[WorkflowReference, ...] | None = Field(
        default=None,
        title='Workflow dependencies',
        description='Workflows that must complete before this one runs.',
    )

    steps: tuple[Step, ...] = Field(
        min_length=1,
        title='Workflow steps',
    )

    success_actions: tuple[SuccessActionItem, ...] | None = Field(
        default=None,
        title='Default success actions',
        description='Success actions inherited by every step.',
    )

    failure_actions: tuple[FailureActionItem, ...] | None = Field(
        default=None,
        title='Default failure actions',
        description='Failure actions inherited by every step.',
    )

    outputs: dict[LookupKey, WorkflowExpression] | None = Field(
        default=None,
        title='Workflow outputs',
        description='Named values returned to the caller.',
    )

    parameters: tuple[ParameterItem, ...] | None = Field(
        default=None,
        title='Default parameters',
        description='Parameters inherited by every invocation step.',
    )

    @property
    def step_ids(self) -> tuple[str, ...]:
        """Identifiers of all steps in order."""
        return tuple(step.step_id for step in self.steps)

    def get_step(self, step_id: str) -> Step | None:
        """Find a step by identifier."""
        for step in self.steps:
            if step.step_id == step_id:
                return step

        return None

    def effective_parameters(self, step: Step,
                             components: 'Components | None' = None) -> tuple[Parameter, ...]:
        """Merge workflow parameters into the parameters of a step.

        Step parameters come first. A workflow parameter is inherited
        unless the step defines one with the same name and location.
        When either side has no location, a step parameter overrides the
        workflow parameter with the same name.

        Args:
            step: Step of this workflow.
            components: Registry used to resolve reusable parameters.

        Returns:
            Resolved parameters applying to the step.

        Raises:
            DanglingReferenceError: If a reference does not resolve.
        """
        own: tuple[Parameter, ...] = ()
        if isinstance(step, InvocationStep):
            own = tuple(_resolve_all(step.parameters, components))

        names = {parameter.name for parameter in own}
        unlocated = {parameter.name for parameter in own if parameter.location is None}
        keys = {parameter.key for parameter in own}

        inherited = tuple(
            parameter
            for parameter in _resolve_all(self.parameters, components)
            if parameter.key not in keys
            and not (parameter.location is None and parameter.name in names)
            and parameter.name not in unlocated
        )

        return own + inherited

    def effective_success_actions(self, step: Step,
                                  components: 'Components | None' = None) -> tuple['SuccessAction', ...]:
        """Merge workflow success actions into the actions of a step.

        Step actions come first, followed by the workflow actions whose
        names the step does not redefine.

        Raises:
            DanglingReferenceError: If a reference does not resolve.
        """
        return _merge_actions(
            _resolve_all(step.on_success, components),
            _resolve_all(self.success_actions, components),
        )

    def effective_failure_actions(self, step: Step,
                                  components: 'Components | None' = None) -> tuple['FailureAction', ...]:
        """Merge workflow failure actions into the actions of a step.

        Step actions come first, followed by the workflow actions whose
        names the step does not redefine.

        Raises:
            DanglingReferenceError: If a reference does not resolve.
        """
        return _merge_actions(
            _resolve_all(step.on_failure, components),
            _resolve_all(self.failure_actions, components),
        )


def _resolve_all(items: 'Iterable | None',
                 components: 'Components | None') -> 'Iterable':
    """Resolve reusable objects of a list through the registry."""
    for item in items or ():
        if isinstance(item, ReusableObject):
            yield (components or Components()).resolve_object(item)
        else:
            yield item


def _merge_actions(own: 'Iterable', inherited: 'Iterable') -> tuple:
    """Merge two action lists by name, own actions first."""
    own = tuple(own)
    names = {action.name for action in own}

    return own + tuple(
        action
        for action in inherited
        if action.name not in names
    )
