"""Cross-reference resolution of validated descriptions.

Defines a parser mixin walking a structurally valid document and checking
that every reference points at something defined in the same document:
reusable components, step and workflow targets, source description names,
step outputs and reusable input schemas.

References into external descriptions (bare operation identifiers and
everything behind a source description name) are never followed.
"""

from typing import TYPE_CHECKING, Any

from arazzo_model.errors import DanglingReferenceError, ErrorKind, Issue
from arazzo_model.expressions import SourceExpression, is_bare
from arazzo_model.schema import (
    Components,
    GotoAction,
    OperationIdStep,
    OperationPathStep,
    OperationStep,
    RetryAction,
    ReusableObject,
    WorkflowStep,
)
from arazzo_model.values import MAPPINGS, SEQUENCES

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from arazzo_model.errors import IssuePath
    from arazzo_model.schema import Document, Step, Workflow

#: Prefix of JSON Schema references to reusable inputs.
INPUTS_REF_PREFIX = '#/components/inputs/'


def _dangling(path: 'IssuePath', message: str) -> Issue:
    """Build a dangling reference issue."""
    return Issue(
        path=path,
        kind=ErrorKind.DANGLING_REFERENCE,
        message=message,
    )


class ReferenceResolverMixin:
    """Mixin providing cross-reference checks for parsed documents.

    Every check yields `DanglingReference` issues; deciding whether they
    are errors or warnings is left to the parser.
    """

    @classmethod
    def check_references(cls, document: 'Document') -> 'Iterator[Issue]':
        """Check every reference of a document.

        Args:
            document: Structurally valid document.

        Yields:
            Issues in document order.
        """
        components = document.components or Components()
        workflow_ids = {workflow.workflow_id for workflow in document.workflows}
        source_names = {source.name for source in document.source_descriptions}

        context = {
            'components': components,
            'workflows': workflow_ids,
            'sources': source_names,
        }

        for index, workflow in enumerate(document.workflows):
            yield from cls.check_workflow(workflow, ('workflows', index), **context)

        for field, registry in (('successActions', components.success_actions),
                                ('failureActions', components.failure_actions)):
            for key, action in (registry or {}).items():
                yield from cls.check_target(
                    action, ('components', field, key),
                    workflows=workflow_ids,
                    sources=source_names,
                )

    @classmethod
    def check_workflow(cls, workflow: 'Workflow', path: 'IssuePath', *,
                       components: Components, workflows: set[str],
                       sources: set[str]) -> 'Iterator[Issue]':
        """Check the references of a single workflow."""
        steps = set(workflow.step_ids)

        for index, reference in enumerate(workflow.depends_on or ()):
            yield from cls.check_workflow_reference(
                reference, (*path, 'dependsOn', index),
                workflows=workflows,
                sources=sources,
            )

        yield from cls.check_inputs(workflow.inputs, (*path, 'inputs'), components)

        for field, actions in (('successActions', workflow.success_actions),
                               ('failureActions', workflow.failure_actions)):
            yield from cls.check_actions(
                actions, (*path, field),
                components=components,
                steps=steps,
                workflows=workflows,
                sources=sources,
            )

        yield from cls.check_parameters(
            workflow.parameters, (*path, 'parameters'),
            components=components,
            located=False,
        )
        yield from cls.check_inherited_locations(workflow, path, components)

        for index, step in enumerate(workflow.steps):
            yield from cls.check_step(
                step, (*path, 'steps', index),
                components=components,
                steps=steps,
                workflows=workflows,
                sources=sources,
            )

        for key, expression in (workflow.outputs or {}).items():
            output_path = (*path, 'outputs', key)
            if expression.step_id is not None and expression.step_id not in steps:
                yield _dangling(output_path, f'Unknown step {expression.step_id!r}')

            elif expression.root == 'workflows' and expression.parts[1] not in workflows:
                yield _dangling(output_path, f'Unknown workflow {expression.parts[1]!r}')

            elif expression.root == 'sourceDescriptions':
                yield from cls.check_source(SourceExpression.parse(expression), output_path, sources)

    @classmethod
    def check_step(cls, step: 'Step', path: 'IssuePath', *,
                   components: Components, steps: set[str],
                   workflows: set[str], sources: set[str]) -> 'Iterator[Issue]':
        """Check the references of a single step."""
        if isinstance(step, WorkflowStep):
            yield from cls.check_workflow_reference(
                step.workflow_id, (*path, 'workflowId'),
                workflows=workflows,
                sources=sources,
            )

        elif isinstance(step, OperationPathStep):
            yield from cls.check_source(
                step.operation_path.source, (*path, 'operationPath'), sources,
            )

        elif isinstance(step, OperationIdStep) and not is_bare(step.operation_id):
            yield from cls.check_source(step.operation_id, (*path, 'operationId'), sources)

        if isinstance(step, OperationStep | WorkflowStep):
            yield from cls.check_parameters(
                step.parameters, (*path, 'parameters'),
                components=components,
                located=isinstance(step, OperationStep),
            )

        for field, actions in (('onSuccess', step.on_success),
                               ('onFailure', step.on_failure)):
            yield from cls.check_actions(
                actions, (*path, field),
                components=components,
                steps=steps,
                workflows=workflows,
                sources=sources,
            )

        for key, expression in (step.outputs or {}).items():
            if expression.step_id is not None and expression.step_id not in steps:
                yield _dangling((*path, 'outputs', key), f'Unknown step {expression.step_id!r}')

    @classmethod
    def check_actions(cls, actions: 'Iterable | None', path: 'IssuePath', *,
                      components: Components, steps: set[str],
                      workflows: set[str], sources: set[str]) -> 'Iterator[Issue]':
        """Check a list of actions, resolving reusable ones."""
        for index, action in enumerate(actions or ()):
            item_path = (*path, index)

            if isinstance(action, ReusableObject):
                try:
                    action = components.resolve(action.reference)  # noqa: PLW2901

                except DanglingReferenceError as error:
                    yield _dangling((*item_path, 'reference'), error.message)
                    continue

            else:
                yield from cls.check_target(
                    action, item_path,
                    workflows=workflows,
                    sources=sources,
                )

            if (isinstance(action, GotoAction | RetryAction)
                    and action.step_id is not None and action.step_id not in steps):
                yield _dangling(item_path, f'Unknown step {action.step_id!r}')

    @classmethod
    def check_target(cls, action: Any, path: 'IssuePath', *,  # noqa: ANN401
                     workflows: set[str], sources: set[str]) -> 'Iterator[Issue]':
        """Check the workflow target of a goto or retry action."""
        if isinstance(action, GotoAction | RetryAction) and action.workflow_id is not None:
            yield from cls.check_workflow_reference(
                action.workflow_id, (*path, 'workflowId'),
                workflows=workflows,
                sources=sources,
            )

    @classmethod
    def check_workflow_reference(cls, reference: str, path: 'IssuePath', *,
                                 workflows: set[str], sources: set[str]) -> 'Iterator[Issue]':
        """Check a bare workflow identifier or a source expression."""
        if isinstance(reference, SourceExpression):
            yield from cls.check_source(reference, path, sources)

        elif reference not in workflows:
            yield _dangling(path, f'Unknown workflow {reference!r}')

    @classmethod
    def check_source(cls, expression: SourceExpression, path: 'IssuePath',
                     sources: set[str]) -> 'Iterator[Issue]':
        """Check the source description name of an expression."""
        if expression.source_name not in sources:
            yield _dangling(path, f'Unknown source description {expression.source_name!r}')

    @classmethod
    def check_parameters(cls, parameters: 'Iterable | None', path: 'IssuePath', *,
                         components: Components, located: bool) -> 'Iterator[Issue]':
        """Check reusable parameters of a list.

        Parameters of operation steps must have a location, including
        the ones taken from the components registry.
        """
        for index, parameter in enumerate(parameters or ()):
            if not isinstance(parameter, ReusableObject):
                continue

            item_path = (*path, index)
            try:
                resolved = components.resolve_object(parameter)

            except DanglingReferenceError as error:
                yield _dangling((*item_path, 'reference'), error.message)
                continue

            if located and resolved.location is None:
                yield Issue(
                    path=(*item_path, 'reference'),
                    kind=ErrorKind.MISSING_FIELD,
                    message=f'Parameter {resolved.name!r} of an operation step requires a location',
                )

    @classmethod
    def check_inherited_locations(cls, workflow: 'Workflow', path: 'IssuePath',
                                  components: Components) -> 'Iterator[Issue]':
        """Check location-less workflow parameters inherited by operation steps.

        Reusable workflow parameters are checked against every operation
        step. Inline ones are checked on the raw document, except against
        steps using reusable parameters, whose names are only known here.
        """
        operation_steps = [step for step in workflow.steps if isinstance(step, OperationStep)]
        referencing_steps = [
            step
            for step in operation_steps
            if any(isinstance(parameter, ReusableObject) for parameter in step.parameters or ())
        ]

        for index, parameter in enumerate(workflow.parameters or ()):
            if isinstance(parameter, ReusableObject):
                try:
                    resolved = components.resolve_object(parameter)

                except DanglingReferenceError:
                    continue

                steps, field = operation_steps, 'reference'

            else:
                resolved, steps, field = parameter, referencing_steps, 'in'

            if resolved.location is not None:
                continue

            inheriting = [
                step.step_id
                for step in steps
                if resolved.name not in cls.get_parameter_names(step, components)
            ]
            if inheriting:
                yield Issue(
                    path=(*path, 'parameters', index, field),
                    kind=ErrorKind.MISSING_FIELD,
                    message=(
                        f'Parameter {resolved.name!r} requires a location, '
                        f'it is inherited by operation steps: {", ".join(inheriting)}'
                    ),
                )

    @staticmethod
    def get_parameter_names(step: OperationStep, components: Components) -> set[str]:
        """Collect the names of the resolvable parameters of a step."""
        names = set()
        for parameter in step.parameters or ():
            if isinstance(parameter, ReusableObject):
                try:
                    parameter = components.resolve_object(parameter)  # noqa: PLW2901

                except DanglingReferenceError:
                    continue

            names.add(parameter.name)

        return names

    @classmethod
    def check_inputs(cls, schema: Any, path: 'IssuePath',  # noqa: ANN401
                     components: Components) -> 'Iterator[Issue]':
        """Check `$ref` pointers to reusable input schemas."""
        if isinstance(schema, MAPPINGS):
            for key, value in schema.items():
                if key == '$ref' and isinstance(value, str) and value.startswith(INPUTS_REF_PREFIX):
                    name = value.removeprefix(INPUTS_REF_PREFIX)
                    if name not in (components.inputs or {}):
                        yield _dangling((*path, key), f'Unknown input schema {name!r}')
                else:
                    yield from cls.check_inputs(value, (*path, key), components)

        elif isinstance(schema, SEQUENCES):
            for index, value in enumerate(schema):
                yield from cls.check_inputs(value, (*path, index), components)
