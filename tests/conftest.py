"""Tests configurations and fixtures."""

from copy import deepcopy
from pathlib import Path
from typing import TYPE_CHECKING, Any

import pytest

from arazzo_model.core import DescriptionLoader, DocumentParser
from arazzo_model.settings import ParserSettings

if TYPE_CHECKING:
    from collections.abc import Callable

EXAMPLES_PATH = Path(__file__).parent / 'examples'

MINIMAL_DOCUMENT = {
    'arazzo': '1.0.1',
    'info': {
        'title': 'Pet store flows',
        'version': '1.0.0',
    },
    'sourceDescriptions': [{
        'name': 'petStore',
        'url': 'https://x/openapi.yaml',
        'type': 'openapi',
    }],
    'workflows': [{
        'workflowId': 'w1',
        'steps': [{
            'stepId': 's1',
        }],
    }],
}


@pytest.fixture
def loader() -> type[DescriptionLoader]:
    """Provide a per-test subclass of the description loader."""
    class Loader(DescriptionLoader):
        pass

    return Loader


@pytest.fixture
def parser(loader: type[DescriptionLoader]) -> DocumentParser:
    """Provide a strict parser independent of the environment."""
    settings = ParserSettings(strict=True, max_depth=128)

    return DocumentParser(loader, settings=settings)


@pytest.fixture
def relaxed_parser(loader: type[DescriptionLoader]) -> DocumentParser:
    """Provide a relaxed parser independent of the environment."""
    settings = ParserSettings(strict=False, max_depth=128)

    return DocumentParser(loader, settings=settings)


@pytest.fixture
def make_document() -> 'Callable[..., dict[str, Any]]':
    """Provide a factory of minimal raw documents.

    The returned factory builds a fresh copy of a minimal valid document
    with a single workflow holding a single static step. Keyword
    arguments replace top-level fields; `workflow` and `step` update the
    first workflow and its first step.
    """
    def make(*, workflow: dict | None = None, step: dict | None = None,
             **fields: Any) -> dict[str, Any]:  # noqa: ANN401
        document = deepcopy(MINIMAL_DOCUMENT)
        document['workflows'][0].update(workflow or {})
        document['workflows'][0]['steps'][0].update(step or {})
        document.update(deepcopy(fields))

        return document

    return make


@pytest.fixture
def example_path() -> Path:
    """Path of the sample description."""
    return EXAMPLES_PATH / 'pet-coupons.arazzo.yaml'
