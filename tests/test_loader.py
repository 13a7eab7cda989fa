"""Tests for document decoding."""

from typing import TYPE_CHECKING

import pytest
import yaml

from arazzo_model.core import DocumentParser
from arazzo_model.errors import DescriptionError, LoaderError
from arazzo_model.schema import OperationIdStep, OperationPathStep, RetryAction

if TYPE_CHECKING:
    from pathlib import Path

    from arazzo_model.core import DescriptionLoader


@pytest.mark.parametrize('content, expected', (
    pytest.param(
        'date: 2024-05-01\n',
        {'date': '2024-05-01'},
        id='date',
    ),
    pytest.param(
        'created: 2024-05-01T10:00:00Z\n',
        {'created': '2024-05-01T10:00:00Z'},
        id='timestamp',
    ),
    pytest.param(
        'version: 1.0.1\n',
        {'version': '1.0.1'},
        id='version',
    ),
    pytest.param(
        '{"name": "petStore", "type": "openapi"}',
        {'name': 'petStore', 'type': 'openapi'},
        id='json',
    ),
    pytest.param(
        'base: &base {in: query}\n'
        'page:\n'
        '  <<: *base\n'
        '  name: page\n',
        {'base': {'in': 'query'}, 'page': {'in': 'query', 'name': 'page'}},
        id='merge key',
    ),
))
def test_loader(loader: 'type[DescriptionLoader]', content: str, expected: dict) -> None:
    """Decode YAML and JSON into plain values."""
    assert yaml.load(content, Loader=loader) == expected  # noqa: S506


@pytest.mark.parametrize('content', (
    pytest.param(
        'name: petStore\n'
        'name: petShop\n',
        id='top level',
    ),
    pytest.param(
        'workflows:\n'
        '  - workflowId: w1\n'
        '    steps: []\n'
        '    workflowId: w2\n',
        id='nested',
    ),
    pytest.param(
        '{"name": "petStore", "name": "petShop"}',
        id='json',
    ),
))
def test_duplicate_keys(parser: DocumentParser, content: str) -> None:
    """Reject keys repeated within one mapping."""
    with pytest.raises(LoaderError, match=r'found duplicate key') as error:
        parser.parse_text(content)

    assert error.value.context['line_num'] is not None


def test_syntax_error(parser: DocumentParser) -> None:
    """Report YAML syntax errors with their position."""
    content = (
        'arazzo: 1.0.1\n'
        'info:\n'
        '  title: [unclosed\n'
    )

    with pytest.raises(LoaderError, match=r'^Invalid YAML') as error:
        parser.parse_text(content)

    assert 'line' in str(error.value)


def test_unprintable_character(parser: DocumentParser) -> None:
    """Report characters YAML does not allow."""
    content = (
        'arazzo: 1.0.1\n'
        'info: \x07\n'
    )

    with pytest.raises(LoaderError, match=r'special characters are not allowed') as error:
        parser.parse_text(content, filename='flows.arazzo.yaml')

    assert error.value.context['filename'] == 'flows.arazzo.yaml'
    assert 'in "flows.arazzo.yaml"' in str(error.value)


def test_invalid_encoding(parser: DocumentParser, tmp_path: 'Path') -> None:
    """Report files that are not valid UTF-8."""
    path = tmp_path / 'flows.arazzo.yaml'
    path.write_bytes(b'arazzo: "\xff\xfe"\n')

    with pytest.raises(LoaderError, match=r'^Invalid encoding') as error:
        parser.parse_file(path)

    assert error.value.context['filename'] == str(path)
    assert isinstance(error.value.__cause__, UnicodeDecodeError)


def test_parse_text(parser: DocumentParser) -> None:
    """Decode and validate a document given as text."""
    content = (
        'arazzo: 1.0.1\n'
        'info:\n'
        '  title: Pet store flows\n'
        '  version: 1.0.0\n'
        'sourceDescriptions:\n'
        '  - name: petStore\n'
        '    url: ./openapi.yaml\n'
        'workflows:\n'
        '  - workflowId: w1\n'
        '    steps:\n'
        '      - stepId: s1\n'
        '        operationPath: "{$sourceDescriptions.petStore.url}#/paths/~1pets/get"\n'
    )

    document = parser.parse_text(content)

    assert str(document.source_descriptions[0].url) == './openapi.yaml'
    assert isinstance(document.workflows[0].steps[0], OperationPathStep)


def test_parse_text_invalid(parser: DocumentParser) -> None:
    """Carry the file name and the raw data of an invalid document."""
    content = (
        'arazzo: 1.0.1\n'
        'info:\n'
        '  title: Pet store flows\n'
    )

    with pytest.raises(DescriptionError) as error:
        parser.parse_text(content, filename='flows.arazzo.yaml')

    assert error.value.context['filename'] == 'flows.arazzo.yaml'
    assert error.value.data == {'arazzo': '1.0.1', 'info': {'title': 'Pet store flows'}}
    assert 'in "flows.arazzo.yaml"' in str(error.value)


def test_parse_file(parser: DocumentParser, example_path: 'Path') -> None:
    """Decode and validate a description file."""
    document = parser.parse_file(example_path)

    assert document.info.title == 'A pet purchasing workflow'
    assert [workflow.workflow_id for workflow in document.workflows] == ['loginUser', 'applyCoupon']

    workflow = document.get_workflow('applyCoupon')
    step = workflow.get_step('find-pet')

    assert isinstance(step, OperationIdStep)

    actions = workflow.effective_failure_actions(step, document.components)

    assert [action.name for action in actions] == ['retryLater', 'abandon']
    assert isinstance(actions[0], RetryAction)
    assert actions[0].retry_limit == 3  # noqa: PLR2004

    parameters = workflow.effective_parameters(step, document.components)

    assert [(parameter.name, parameter.location) for parameter in parameters] == [
        ('pet_tags', 'query'),
        ('page', 'query'),
    ]


def test_parse_missing_file(parser: DocumentParser, tmp_path: 'Path') -> None:
    """Propagate file system errors."""
    with pytest.raises(FileNotFoundError):
        parser.parse_file(tmp_path / 'missing.arazzo.yaml')
