"""Tests for parameter, request body and reusable object models."""

from typing import Any

import pydantic
import pytest

from arazzo_model.expressions import ContextExpression
from arazzo_model.schema import (
    FailureActionReference,
    LocatedParameter,
    Parameter,
    ParameterReference,
    PayloadReplacement,
    RequestBody,
    SuccessActionReference,
)
from arazzo_model.schema.parameters import LocatedParameterItem, ParameterItem


@pytest.mark.parametrize('value, is_expression', (
    pytest.param('$inputs.petId', True, id='expression'),
    pytest.param('$response.body#/id', True, id='expression with pointer'),
    pytest.param('available', False, id='string literal'),
    pytest.param('$not an expression', False, id='dollar literal'),
    pytest.param(42, False, id='number literal'),
    pytest.param({'status': '$inputs.status'}, False, id='object literal'),
    pytest.param(None, False, id='null literal'),
))
def test_parameter_value(value: Any, is_expression: bool) -> None:  # noqa: ANN401
    """Tell expression values from literal values."""
    parameter = Parameter.model_validate({'name': 'status', 'value': value})

    assert parameter.is_expression is is_expression
    assert isinstance(parameter.value, ContextExpression) is is_expression
    assert parameter.value == value
    assert parameter.key == ('status', None)


def test_located_parameter() -> None:
    """Read the location from the `in` field."""
    parameter = LocatedParameter.model_validate({
        'name': 'X-Api-Key',
        'in': 'header',
        'value': '$inputs.apiKey',
    })

    assert parameter.location == 'header'
    assert parameter.key == ('X-Api-Key', 'header')
    assert parameter.model_dump(by_alias=True, exclude_defaults=True) == {
        'name': 'X-Api-Key',
        'in': 'header',
        'value': '$inputs.apiKey',
    }


@pytest.mark.parametrize('model, content, error_type', (
    pytest.param(
        LocatedParameter,
        {'name': 'page', 'value': 1},
        'missing',
        id='located without location',
    ),
    pytest.param(
        Parameter,
        {'name': 'page', 'in': 'fragment', 'value': 1},
        'literal_error',
        id='unknown location',
    ),
    pytest.param(
        Parameter,
        {'name': 'page'},
        'missing',
        id='no value',
    ),
    pytest.param(
        Parameter,
        {'name': '', 'value': 1},
        'string_too_short',
        id='empty name',
    ),
    pytest.param(
        Parameter,
        {'name': 'page', 'location': 'query', 'value': 1},
        'extra_forbidden',
        id='field name instead of alias',
    ),
))
def test_invalid_parameter(model: type, content: dict[str, Any], error_type: str) -> None:
    """Reject malformed parameters."""
    with pytest.raises(pydantic.ValidationError) as error:
        model.model_validate(content)

    assert error.value.errors()[0]['type'] == error_type


@pytest.mark.parametrize('adapter, content, model', (
    pytest.param(
        ParameterItem,
        {'name': 'page', 'value': 1},
        Parameter,
        id='inline parameter',
    ),
    pytest.param(
        ParameterItem,
        {'reference': '$components.parameters.page', 'value': 2},
        ParameterReference,
        id='parameter reference',
    ),
    pytest.param(
        LocatedParameterItem,
        {'name': 'page', 'in': 'query', 'value': 1},
        LocatedParameter,
        id='inline located parameter',
    ),
    pytest.param(
        LocatedParameterItem,
        {'reference': '$components.parameters.page'},
        ParameterReference,
        id='located parameter reference',
    ),
))
def test_parameter_item(adapter: Any, content: dict[str, Any], model: type) -> None:  # noqa: ANN401
    """Dispatch inline parameters and references."""
    item = pydantic.TypeAdapter(adapter).validate_python(content)

    assert type(item) is model


@pytest.mark.parametrize('model, reference, error_type', (
    pytest.param(
        ParameterReference,
        '$components.successActions.notify',
        'PatternViolation',
        id='parameter into actions',
    ),
    pytest.param(
        SuccessActionReference,
        '$components.failureActions.retry',
        'PatternViolation',
        id='success into failure actions',
    ),
    pytest.param(
        FailureActionReference,
        '$inputs.retry',
        'PatternViolation',
        id='not a component',
    ),
    pytest.param(
        FailureActionReference,
        '$components.failureActions.bad key',
        'PatternViolation',
        id='bad key',
    ),
))
def test_invalid_reference(model: type, reference: str, error_type: str) -> None:
    """Reject references into the wrong registry."""
    with pytest.raises(pydantic.ValidationError) as error:
        model.model_validate({'reference': reference})

    assert error.value.errors()[0]['type'] == error_type


def test_action_reference_value() -> None:
    """Only parameter references accept a value override."""
    with pytest.raises(pydantic.ValidationError) as error:
        SuccessActionReference.model_validate({
            'reference': '$components.successActions.notify',
            'value': 1,
        })

    assert error.value.errors()[0]['type'] == 'extra_forbidden'


@pytest.mark.parametrize('target, target_kind', (
    pytest.param('/petId', 'pointer', id='pointer'),
    pytest.param('#/pets/0/id', 'pointer', id='fragment pointer'),
    pytest.param('', 'pointer', id='whole document'),
    pytest.param('/pet/tags/0/name', 'pointer', id='nested pointer'),
    pytest.param('count(//pet)', 'xpath', id='xpath function'),
    pytest.param('/pet[@id="1"]/~name', 'xpath', id='xpath with tilde'),
))
def test_payload_replacement(target: str, target_kind: str) -> None:
    """Detect the syntax of replacement targets."""
    replacement = PayloadReplacement.model_validate({
        'target': target,
        'value': '$inputs.petId',
    })

    assert replacement.target == target
    assert replacement.target_kind == target_kind
    assert isinstance(replacement.value, ContextExpression)


def test_request_body() -> None:
    """Validate a request body with replacements."""
    body = RequestBody.model_validate({
        'contentType': 'application/json',
        'payload': {'petId': 0, 'tags': ['cat']},
        'replacements': [
            {'target': '/petId', 'value': '$steps.find-pet.outputs.my_pet_id'},
            {'target': '/quantity', 'value': 1},
        ],
    })

    assert body.content_type == 'application/json'
    assert body.payload == {'petId': 0, 'tags': ['cat']}
    assert len(body.replacements) == 2  # noqa: PLR2004
    assert body.replacements[1].value == 1


def test_invalid_replacement_value() -> None:
    """Reject structured replacement values."""
    with pytest.raises(pydantic.ValidationError):
        PayloadReplacement.model_validate({'target': '/pet', 'value': {'id': 1}})
