"""Step definitions.

A step is one unit of work inside a workflow. Its shape is selected by
the reference field it carries, checked in this order:

1. `operationId` - invoke an operation by identifier;
2. `operationPath` - invoke an operation by source and JSON Pointer;
3. `workflowId` - invoke another workflow;
4. none of them - a static step carrying only assertions, actions
   and outputs.

At most one reference field may be present. Fields contradicting the
selected shape (for example, a request body on a workflow step) are
reported as an ambiguous step shape.
"""

from collections.abc import Mapping
from typing import Annotated, Any, ClassVar

from pydantic import Field, model_validator
from pydantic_core import PydanticCustomError

from arazzo_model.expressions import (  # noqa: TC001
    OperationPath,
    OperationReference,
    StepExpression,
    WorkflowReference,
)
from arazzo_model.models import DescribedMixin, tagged, variant
from arazzo_model.names import LookupKey, StepId  # noqa: TC001

from .actions import FailureAction, SuccessAction
from .criteria import Criterion  # noqa: TC001
from .parameters import LocatedParameterItem, ParameterItem, RequestBody  # noqa: TC001
from .reusable import FailureActionReference, SuccessActionReference, reusable

#: Reference fields in dispatch order with the step shape they select.
STEP_VARIANTS = {
    'operationId': 'OperationIdStep',
    'operationPath': 'OperationPathStep',
    'workflowId': 'WorkflowStep',
}

#: Inline success action or a reference to a reusable one.
SuccessActionItem = reusable(SuccessAction, SuccessActionReference, 'SuccessAction')

#: Inline failure action or a reference to a reusable one.
FailureActionItem = reusable(FailureAction, FailureActionReference, 'FailureAction')


class BaseStep(DescribedMixin):
    """Base class for all step shapes."""

    #: Fields that contradict this step shape.
    contradicting_fields: ClassVar[tuple[str, ...]] = ()

    step_id: StepId = Field(
        title='Step identifier',
        description='Identifier of the step, unique within its workflow.',
    )

    success_criteria: tuple[Criterion, ...] | None = Field(
        default=None,
        title='Success criteria',
        description='Assertions that must all hold for the step to succeed.',
    )

    on_success: tuple[SuccessActionItem, ...] | None = Field(
        default=None,
        title='Success actions',
        description=(
            'Actions considered in order when the step succeeds. '
            'They override workflow success actions with the same name.'
        ),
    )

    on_failure: tuple[FailureActionItem, ...] | None = Field(
        default=None,
        title='Failure actions',
        description=(
            'Actions considered in order when the step fails. '
            'They override workflow failure actions with the same name.'
        ),
    )

    outputs: dict[LookupKey, StepExpression] | None = Field(
        default=None,
        title='Step outputs',
        description='Named values produced by the step.',
    )

    @model_validator(mode='before')
    @classmethod
    def check_shape(cls, data: Any) -> Any:  # noqa: ANN401
        """Reject conflicting reference fields and contradicting fields."""
        if not isinstance(data, Mapping):
            return data

        references = [name for name in STEP_VARIANTS if name in data]
        if len(references) > 1:
            raise PydanticCustomError(
                'MutualExclusionViolation',
                'Step must reference only one of `operationId`, `operationPath` '
                'or `workflowId`, got: {fields}',
                {'fields': ', '.join(references)},
            )

        if contradicting := [name for name in cls.contradicting_fields if name in data]:
            raise PydanticCustomError(
                'AmbiguousStepShape',
                '{shape} can not have: {fields}',
                {'shape': cls.__name__, 'fields': ', '.join(contradicting)},
            )

        return data


class StaticStep(BaseStep):
    """Step without an invocation target."""

    contradicting_fields = ('parameters', 'requestBody')


class InvocationStep(BaseStep):
    """Base class for steps invoking an operation or a workflow."""

    parameters: tuple[ParameterItem, ...] | None = Field(
        default=None,
        title='Step parameters',
        description=(
            'Parameters passed to the invoked operation or workflow. '
            'They override workflow parameters with the same name and location.'
        ),
    )

    @property
    def target(self) -> str:
        """Reference of the invoked operation or workflow."""
        raise NotImplementedError


class OperationStep(InvocationStep):
    """Base class for steps invoking an operation."""

    parameters: tuple[LocatedParameterItem, ...] | None = Field(
        default=None,
        title='Operation parameters',
        description=(
            'Parameters passed to the operation, each with a location. '
            'They override workflow parameters with the same name and location.'
        ),
    )

    request_body: RequestBody | None = Field(
        default=None,
        title='Request body',
    )


class OperationIdStep(OperationStep):
    """Step invoking an operation by identifier."""

    operation_id: OperationReference

    @property
    def target(self) -> str:
        """Reference of the invoked operation."""
        return self.operation_id


class OperationPathStep(OperationStep):
    """Step invoking an operation by source description and JSON Pointer."""

    operation_path: OperationPath

    @property
    def target(self) -> str:
        """Reference of the invoked operation."""
        return str(self.operation_path)


class WorkflowStep(InvocationStep):
    """Step invoking another workflow.

    Parameters map to the inputs of the invoked workflow and carry
    no location.
    """

    contradicting_fields = ('requestBody',)

    workflow_id: WorkflowReference

    @property
    def target(self) -> str:
        """Reference of the invoked workflow."""
        return self.workflow_id


def step_shape(value: Any) -> str:  # noqa: ANN401
    """Select a step shape by the first reference field present."""
    if isinstance(value, Mapping):
        for name, tag in STEP_VARIANTS.items():
            if name in value:
                return tag

    return 'StaticStep'


#: Any step, discriminated by its reference field.
Step = Annotated[
    tagged(StaticStep)
    | tagged(OperationIdStep)
    | tagged(OperationPathStep)
    | tagged(WorkflowStep),
    variant(step_shape, message='Unsupported step shape'),
]
