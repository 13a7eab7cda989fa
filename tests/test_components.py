"""Tests for the components registry."""

import pydantic
import pytest

from arazzo_model.errors import DanglingReferenceError
from arazzo_model.expressions import ContextExpression
from arazzo_model.schema import (
    Components,
    EndAction,
    LocatedParameter,
    Parameter,
    ParameterReference,
    RetryAction,
)

COMPONENTS = {
    'inputs': {
        'pet_input': {
            'type': 'object',
            'properties': {'petId': {'type': 'integer'}},
        },
    },
    'parameters': {
        'page': {'name': 'page', 'in': 'query', 'value': 1},
        'api.key': {'name': 'X-Api-Key', 'in': 'header', 'value': '$inputs.apiKey'},
    },
    'successActions': {
        'done': {'name': 'done', 'type': 'end'},
    },
    'failureActions': {
        'retryLater': {'name': 'retryLater', 'type': 'retry', 'workflowId': 'loginUser', 'retryAfter': 1},
    },
}


@pytest.mark.parametrize('reference, model', (
    pytest.param('$components.parameters.page', Parameter, id='parameter'),
    pytest.param('$components.parameters.api.key', Parameter, id='dotted key'),
    pytest.param('$components.successActions.done', EndAction, id='success action'),
    pytest.param('$components.failureActions.retryLater', RetryAction, id='failure action'),
    pytest.param('$components.inputs.pet_input', dict, id='input schema'),
))
def test_resolve(reference: str, model: type) -> None:
    """Resolve references into every registry."""
    components = Components.model_validate(COMPONENTS)

    assert isinstance(components.resolve(reference), model)


@pytest.mark.parametrize('reference', (
    pytest.param('$components.parameters.limit', id='unknown key'),
    pytest.param('$components.successActions.retryLater', id='wrong registry'),
    pytest.param('$components.schemas.pet', id='unknown registry'),
    pytest.param('#/components/parameters/page', id='not an expression'),
))
def test_resolve_dangling(reference: str) -> None:
    """Fail on references that do not resolve."""
    components = Components.model_validate(COMPONENTS)

    with pytest.raises(DanglingReferenceError) as error:
        components.resolve(reference)

    assert error.value.reference == reference


def test_resolve_empty() -> None:
    """Fail on every reference into an empty registry."""
    with pytest.raises(DanglingReferenceError, match=r'does not resolve'):
        Components().resolve('$components.parameters.page')


@pytest.mark.parametrize('value, expected', (
    pytest.param(None, 1, id='no override'),
    pytest.param(5, 5, id='literal override'),
    pytest.param('$inputs.page', '$inputs.page', id='expression override'),
))
def test_resolve_parameter_value(value: object, expected: object) -> None:
    """Apply the value override of a parameter reference."""
    components = Components.model_validate(COMPONENTS)
    reference = ParameterReference.model_validate({
        'reference': '$components.parameters.page',
        'value': value,
    })

    parameter = components.resolve_object(reference)

    assert isinstance(parameter, LocatedParameter | Parameter)
    assert parameter.name == 'page'
    assert parameter.location == 'query'
    assert parameter.value == expected
    assert parameter.is_expression is isinstance(expected, str)
    assert components.parameters['page'].value == 1


def test_resolve_parameter_expression() -> None:
    """Keep expression values of registered parameters."""
    components = Components.model_validate(COMPONENTS)

    parameter = components.resolve('$components.parameters.api.key')

    assert isinstance(parameter.value, ContextExpression)


def test_ordered_pairs() -> None:
    """Accept registries given as ordered key-value pairs."""
    components = Components.model_validate({
        'successActions': [
            ['done', {'name': 'done', 'type': 'end'}],
            ['next', {'name': 'next', 'type': 'goto', 'stepId': 's2'}],
        ],
    })

    assert list(components.success_actions) == ['done', 'next']


def test_ordered_pairs_duplicate() -> None:
    """Reject keys repeated within one registry."""
    with pytest.raises(pydantic.ValidationError) as error:
        Components.model_validate({
            'parameters': [
                ['page', {'name': 'page', 'in': 'query', 'value': 1}],
                ['page', {'name': 'page', 'in': 'query', 'value': 2}],
            ],
        })

    assert error.value.errors()[0]['type'] == 'DuplicateEntry'


@pytest.mark.parametrize('content, error_type', (
    pytest.param(
        {'parameters': {'bad key!': {'name': 'page', 'value': 1}}},
        'string_pattern_mismatch',
        id='bad key',
    ),
    pytest.param(
        {'successActions': {'again': {'name': 'again', 'type': 'retry'}}},
        'InvalidVariant',
        id='retry as success action',
    ),
    pytest.param(
        {'schemas': {}},
        'extra_forbidden',
        id='unknown registry',
    ),
    pytest.param(
        {'parameters': [[['page'], {'name': 'page', 'in': 'query', 'value': 1}]]},
        'TypeMismatch',
        id='unhashable pair key',
    ),
    pytest.param(
        {'failureActions': [[7, {'name': 'giveUp', 'type': 'end'}]]},
        'TypeMismatch',
        id='numeric pair key',
    ),
))
def test_invalid_components(content: dict, error_type: str) -> None:
    """Reject malformed registries."""
    with pytest.raises(pydantic.ValidationError) as error:
        Components.model_validate(content)

    assert error.value.errors()[0]['type'] == error_type
