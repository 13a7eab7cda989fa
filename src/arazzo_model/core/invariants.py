"""Document-wide invariants checked on the raw document.

Uniqueness and ambiguity rules span several elements, so they can not be
expressed by a single model. They are checked on the raw document tree,
independently of model validation, which lets the parser report them
together with every structural issue of the same document.
"""

from typing import TYPE_CHECKING, Any

from pydantic import TypeAdapter, ValidationError

from arazzo_model.errors import ErrorKind, Issue
from arazzo_model.schema.steps import FailureActionItem, SuccessActionItem
from arazzo_model.values import MAPPINGS, SEQUENCES

if TYPE_CHECKING:
    from collections.abc import Iterator

    from arazzo_model.errors import IssuePath

SUCCESS_ACTIONS = TypeAdapter(SuccessActionItem)
FAILURE_ACTIONS = TypeAdapter(FailureActionItem)


def _entries(value: Any) -> 'Iterator[tuple[int, dict]]':  # noqa: ANN401
    """Iterate over mapping items of a raw sequence with their indices."""
    if not isinstance(value, SEQUENCES):
        return

    for index, item in enumerate(value):
        if isinstance(item, MAPPINGS):
            yield index, item


def _is_bare(value: Any) -> bool:  # noqa: ANN401
    """Check whether a raw reference is a bare identifier."""
    return isinstance(value, str) and not value.startswith('$')


def check_unique(items: Any, field: str, path: 'IssuePath',  # noqa: ANN401
                 label: str) -> 'Iterator[Issue]':
    """Report repeated values of a field across a list of elements.

    Every repetition after the first occurrence is reported, pointing
    at the repeated field.

    Args:
        items: Raw list of elements.
        field: Field that must be unique.
        path: Path of the list.
        label: Human-readable name of the field.

    Yields:
        A `DuplicateEntry` issue per repetition.
    """
    seen = set()

    for index, item in _entries(items):
        value = item.get(field)
        if not isinstance(value, str):
            continue

        if value in seen:
            yield Issue(
                path=(*path, index, field),
                kind=ErrorKind.DUPLICATE_ENTRY,
                message=f'Duplicate {label} {value!r}',
            )
        seen.add(value)


def check_actions(items: Any, path: 'IssuePath',  # noqa: ANN401
                  adapter: TypeAdapter) -> 'Iterator[Issue]':
    """Report structurally equal actions within one list.

    Actions are compared after validation, so omitted defaults do not
    make two actions different. Invalid actions are skipped; model
    validation reports them.

    Args:
        items: Raw list of actions.
        path: Path of the list.
        adapter: Validator of a single list item.

    Yields:
        A `DuplicateEntry` issue per repeated action.
    """
    seen = []

    for index, item in _entries(items):
        try:
            action = adapter.validate_python(item)

        except ValidationError:
            continue

        if action in seen:
            name = getattr(action, 'name', None) or getattr(action, 'reference', '')
            yield Issue(
                path=(*path, index),
                kind=ErrorKind.DUPLICATE_ENTRY,
                message=f'Duplicate action {str(name)!r}',
            )
        seen.append(action)


def check_parameters(items: Any, path: 'IssuePath') -> 'Iterator[Issue]':  # noqa: ANN401
    """Report parameters repeating a name and location within one list.

    References to reusable parameters are unique by reference.

    Args:
        items: Raw list of parameters.
        path: Path of the list.

    Yields:
        A `DuplicateEntry` issue per repeated parameter.
    """
    seen = set()

    for index, item in _entries(items):
        if isinstance(reference := item.get('reference'), str):
            key = ('$ref', reference)
            label = reference
        elif isinstance(name := item.get('name'), str):
            location = item.get('in')
            key = (name, location if isinstance(location, str) else None)
            label = f'{name} in {location}' if key[1] else name
        else:
            continue

        if key in seen:
            yield Issue(
                path=(*path, index),
                kind=ErrorKind.DUPLICATE_ENTRY,
                message=f'Duplicate parameter {label!r}',
            )
        seen.add(key)


def check_locations(workflow: dict, path: 'IssuePath') -> 'Iterator[Issue]':
    """Report location-less workflow parameters inherited by operation steps.

    A workflow parameter without `in` is only usable by workflow steps,
    unless every operation step overrides it with a parameter of the
    same name. Steps using reusable parameters are checked once
    references resolve.

    Args:
        workflow: Raw workflow.
        path: Path of the workflow.

    Yields:
        A `MissingField` issue per inherited parameter.
    """
    steps = []
    for _, step in _entries(workflow.get('steps')):
        if 'operationId' not in step and 'operationPath' not in step:
            continue

        parameters = [parameter for _, parameter in _entries(step.get('parameters'))]
        if any('reference' in parameter for parameter in parameters):
            continue

        names = {
            name
            for parameter in parameters
            if isinstance(name := parameter.get('name'), str)
        }
        steps.append((step.get('stepId'), names))

    for index, parameter in _entries(workflow.get('parameters')):
        name = parameter.get('name')
        if not isinstance(name, str) or 'in' in parameter:
            continue

        inheriting = [str(step_id) for step_id, names in steps if name not in names]
        if inheriting:
            yield Issue(
                path=(*path, 'parameters', index, 'in'),
                kind=ErrorKind.MISSING_FIELD,
                message=(
                    f'Parameter {name!r} requires a location, '
                    f'it is inherited by operation steps: {", ".join(inheriting)}'
                ),
            )


def check_ambiguity(data: dict) -> 'Iterator[Issue]':
    """Report bare references that must be written as expressions.

    With two or more Arazzo source descriptions, workflows of other
    descriptions can only be told apart with
    `$sourceDescriptions.<name>.<workflowId>`. With two or more API
    source descriptions, the same holds for operation identifiers.

    Args:
        data: Raw document.

    Yields:
        An `AmbiguousReference` issue per bare reference.
    """
    sources = [source.get('type') for _, source in _entries(data.get('sourceDescriptions'))]
    workflows_ambiguous = sources.count('arazzo') > 1
    operations_ambiguous = len(sources) - sources.count('arazzo') > 1

    if not (workflows_ambiguous or operations_ambiguous):
        return

    def check_element(element: dict, element_path: 'IssuePath') -> 'Iterator[Issue]':
        if workflows_ambiguous and _is_bare(element.get('workflowId')):
            yield Issue(
                path=(*element_path, 'workflowId'),
                kind=ErrorKind.AMBIGUOUS_REFERENCE,
                message=(
                    'Workflow must be referenced with a `$sourceDescriptions` '
                    'expression when several Arazzo sources are defined'
                ),
            )

        if operations_ambiguous and _is_bare(element.get('operationId')):
            yield Issue(
                path=(*element_path, 'operationId'),
                kind=ErrorKind.AMBIGUOUS_REFERENCE,
                message=(
                    'Operation must be referenced with a `$sourceDescriptions` '
                    'expression when several API sources are defined'
                ),
            )

    for index, workflow in _entries(data.get('workflows')):
        path = ('workflows', index)
        for field in ('successActions', 'failureActions'):
            for action_index, action in _entries(workflow.get(field)):
                yield from check_element(action, (*path, field, action_index))

        for step_index, step in _entries(workflow.get('steps')):
            step_path = (*path, 'steps', step_index)
            yield from check_element(step, step_path)
            for field in ('onSuccess', 'onFailure'):
                for action_index, action in _entries(step.get(field)):
                    yield from check_element(action, (*step_path, field, action_index))

    components = data.get('components')
    if isinstance(components, MAPPINGS):
        for field in ('successActions', 'failureActions'):
            for key, action in _registry_items(components.get(field)):
                yield from check_element(action, ('components', field, *key))


def _registry_items(registry: Any) -> 'Iterator[tuple[tuple[str | int, ...], dict]]':  # noqa: ANN401
    """Iterate over mapping entries of a raw registry with their relative paths.

    Registries are either mappings or sequences of key-value pairs.
    """
    if isinstance(registry, MAPPINGS):
        for key, entry in registry.items():
            if isinstance(entry, MAPPINGS):
                yield (key,), entry

    elif isinstance(registry, SEQUENCES):
        for index, item in enumerate(registry):
            if not isinstance(item, SEQUENCES) or len(item) != 2:  # noqa: PLR2004
                continue
            if isinstance(item[1], MAPPINGS):
                yield (index, 1), item[1]


def check_invariants(data: Any) -> 'Iterator[Issue]':  # noqa: ANN401
    """Check document-wide invariants on a raw document.

    Args:
        data: Raw document.

    Yields:
        Issues in document order of the checked lists.
    """
    if not isinstance(data, MAPPINGS):
        return

    yield from check_unique(
        data.get('sourceDescriptions'), 'name',
        ('sourceDescriptions',), 'source description name',
    )
    yield from check_unique(
        data.get('workflows'), 'workflowId',
        ('workflows',), 'workflow identifier',
    )

    for index, workflow in _entries(data.get('workflows')):
        path = ('workflows', index)

        yield from check_unique(
            workflow.get('steps'), 'stepId',
            (*path, 'steps'), 'step identifier',
        )
        yield from check_actions(workflow.get('successActions'), (*path, 'successActions'), SUCCESS_ACTIONS)
        yield from check_actions(workflow.get('failureActions'), (*path, 'failureActions'), FAILURE_ACTIONS)
        yield from check_parameters(workflow.get('parameters'), (*path, 'parameters'))
        yield from check_locations(workflow, path)

        for step_index, step in _entries(workflow.get('steps')):
            step_path = (*path, 'steps', step_index)

            yield from check_actions(step.get('onSuccess'), (*step_path, 'onSuccess'), SUCCESS_ACTIONS)
            yield from check_actions(step.get('onFailure'), (*step_path, 'onFailure'), FAILURE_ACTIONS)
            yield from check_parameters(step.get('parameters'), (*step_path, 'parameters'))

    yield from check_ambiguity(data)
