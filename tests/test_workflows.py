"""Tests for workflow models and inheritance of workflow defaults."""

from typing import Any

import pydantic
import pytest

from arazzo_model.errors import DanglingReferenceError
from arazzo_model.schema import Components, EndAction, GotoAction, RetryAction, Workflow

COMPONENTS = Components.model_validate({
    'parameters': {
        'page': {'name': 'page', 'in': 'query', 'value': 1},
        'token': {'name': 'token', 'value': '$inputs.token'},
    },
    'successActions': {
        'done': {'name': 'done', 'type': 'end'},
    },
    'failureActions': {
        'retryLater': {'name': 'retryLater', 'type': 'retry', 'stepId': 'check', 'retryAfter': 5},
        'giveUp': {'name': 'giveUp', 'type': 'end'},
    },
})


def make_workflow(**fields: Any) -> Workflow:  # noqa: ANN401
    """Build a workflow with a static step and an operation step."""
    return Workflow.model_validate({
        'workflowId': 'w1',
        'steps': [
            {'stepId': 'check'},
            {'stepId': 'find-pets', 'operationId': 'findPets'},
        ],
        **fields,
    })


def test_workflow() -> None:
    """Validate a workflow and look up its steps."""
    workflow = make_workflow(
        summary='Find pets',
        inputs={'type': 'object', 'properties': {'status': {'type': 'string'}}},
        dependsOn=['loginUser', '$sourceDescriptions.auth.loginUser'],
        outputs={'pets': '$steps.find-pets.outputs.pets'},
    )

    assert workflow.step_ids == ('check', 'find-pets')
    assert workflow.get_step('find-pets').operation_id == 'findPets'
    assert workflow.get_step('unknown') is None
    assert workflow.success_actions is None
    assert workflow.inputs['properties']['status'] == {'type': 'string'}


@pytest.mark.parametrize('fields, error_type', (
    pytest.param(
        {'steps': []},
        'too_short',
        id='no steps',
    ),
    pytest.param(
        {'outputs': {'bad key!': '$steps.check.outputs.x'}},
        'string_pattern_mismatch',
        id='bad output key',
    ),
    pytest.param(
        {'outputs': {'status': '$response.body'}},
        'PatternViolation',
        id='response in workflow output',
    ),
    pytest.param(
        {'workflowId': 'find pets'},
        'string_pattern_mismatch',
        id='bad workflow identifier',
    ),
    pytest.param(
        {'failureActions': [{'name': 'again', 'type': 'retry', 'stepId': 'check', 'retryLimit': -1}]},
        'greater_than_equal',
        id='negative retry limit',
    ),
    pytest.param(
        {'successActions': [{'name': 'again', 'type': 'retry'}]},
        'InvalidVariant',
        id='retry as success action',
    ),
))
def test_invalid_workflow(fields: dict[str, Any], error_type: str) -> None:
    """Reject malformed workflows."""
    with pytest.raises(pydantic.ValidationError) as error:
        make_workflow(**fields)

    assert error.value.errors()[0]['type'] == error_type


def test_valid_output_key() -> None:
    """Accept output keys made of letters, digits, dots, hyphens and underscores."""
    workflow = make_workflow(outputs={'bad.key-1_ok': '$steps.check.outputs.x'})

    assert workflow.outputs == {'bad.key-1_ok': '$steps.check.outputs.x'}


def test_effective_success_actions() -> None:
    """Let step actions override workflow actions by name."""
    workflow = make_workflow(
        successActions=[
            {'name': 'next', 'type': 'goto', 'stepId': 'find-pets'},
            {'reference': '$components.successActions.done'},
        ],
        steps=[
            {
                'stepId': 'check',
                'onSuccess': [
                    {'name': 'done', 'type': 'goto', 'workflowId': 'w2'},
                ],
            },
            {'stepId': 'find-pets', 'operationId': 'findPets'},
        ],
    )

    check, find_pets = workflow.steps

    actions = workflow.effective_success_actions(check, COMPONENTS)

    assert [action.name for action in actions] == ['done', 'next']
    assert isinstance(actions[0], GotoAction)
    assert actions[0].workflow_id == 'w2'

    actions = workflow.effective_success_actions(find_pets, COMPONENTS)

    assert [action.name for action in actions] == ['next', 'done']
    assert isinstance(actions[1], EndAction)


def test_effective_failure_actions() -> None:
    """Inherit every workflow failure action a step does not redefine."""
    workflow = make_workflow(
        failureActions=[
            {'reference': '$components.failureActions.retryLater'},
            {'reference': '$components.failureActions.giveUp'},
        ],
        steps=[
            {
                'stepId': 'check',
                'onFailure': [
                    {'name': 'retryLater', 'type': 'retry', 'stepId': 'find-pets', 'retryLimit': 3},
                ],
            },
        ],
    )

    actions = workflow.effective_failure_actions(workflow.steps[0], COMPONENTS)

    assert [action.name for action in actions] == ['retryLater', 'giveUp']
    assert isinstance(actions[0], RetryAction)
    assert actions[0].retry_limit == 3  # noqa: PLR2004
    assert actions[0].retry_after is None


def test_effective_actions_without_defaults() -> None:
    """Return no actions when neither the workflow nor the step defines any."""
    workflow = make_workflow()

    assert workflow.effective_success_actions(workflow.steps[0]) == ()
    assert workflow.effective_failure_actions(workflow.steps[0]) == ()


def test_effective_parameters() -> None:
    """Let step parameters override workflow parameters by name and location."""
    workflow = make_workflow(
        parameters=[
            {'name': 'page', 'in': 'query', 'value': 2},
            {'name': 'limit', 'in': 'query', 'value': 20},
            {'name': 'limit', 'in': 'header', 'value': 10},
            {'reference': '$components.parameters.token', 'value': 'secret'},
        ],
        steps=[
            {'stepId': 'check'},
            {
                'stepId': 'find-pets',
                'operationId': 'findPets',
                'parameters': [
                    {'name': 'limit', 'in': 'query', 'value': 50},
                    {'name': 'token', 'in': 'header', 'value': '$inputs.token'},
                    {'reference': '$components.parameters.page', 'value': 3},
                ],
            },
        ],
    )

    check, find_pets = workflow.steps

    parameters = workflow.effective_parameters(find_pets, COMPONENTS)

    assert [(parameter.name, parameter.location, parameter.value) for parameter in parameters] == [
        ('limit', 'query', 50),
        ('token', 'header', '$inputs.token'),
        ('page', 'query', 3),
        ('limit', 'header', 10),
    ]

    parameters = workflow.effective_parameters(check, COMPONENTS)

    assert [parameter.name for parameter in parameters] == ['page', 'limit', 'limit', 'token']
    assert parameters[-1].value == 'secret'


def test_effective_parameters_unlocated_override() -> None:
    """Let a step parameter without location override a workflow parameter by name."""
    workflow = make_workflow(
        parameters=[
            {'name': 'page', 'in': 'query', 'value': 2},
            {'name': 'limit', 'in': 'query', 'value': 20},
        ],
        steps=[
            {
                'stepId': 'run-search',
                'workflowId': 'searchPets',
                'parameters': [{'name': 'page', 'value': 5}],
            },
        ],
    )

    parameters = workflow.effective_parameters(workflow.steps[0])

    assert [(parameter.name, parameter.location, parameter.value) for parameter in parameters] == [
        ('page', None, 5),
        ('limit', 'query', 20),
    ]


def test_effective_parameters_dangling() -> None:
    """Fail on references missing from the registry."""
    workflow = make_workflow(parameters=[{'reference': '$components.parameters.missing'}])

    with pytest.raises(DanglingReferenceError, match=r'missing'):
        workflow.effective_parameters(workflow.steps[1], COMPONENTS)
