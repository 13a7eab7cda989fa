"""Conversion of Pydantic validation errors into description issues.

Pydantic error locations describe the model tree: they contain union tags
and other schema labels that do not exist in the document. Locations are
rebuilt here against the raw document, so every issue path is made of
document keys and indices only.
"""

from typing import TYPE_CHECKING, Any

from arazzo_model.errors import ErrorKind, Issue
from arazzo_model.models import UNION_TAGS
from arazzo_model.values import MAPPINGS, SEQUENCES

if TYPE_CHECKING:
    from collections.abc import Iterator

    from pydantic import ValidationError
    from pydantic_core import ErrorDetails

    from arazzo_model.errors import IssuePath

#: Labels Pydantic inserts into locations of dictionary keys,
#: generic JSON values and plain unions.
SCHEMA_LABELS = frozenset({
    '[key]',
    'list',
    'dict',
    'str',
    'bool',
    'int',
    'float',
    'none',
    'NoneType',
})

#: Issue kinds per Pydantic error type.
ERROR_KINDS = {
    'missing': ErrorKind.MISSING_FIELD,
    'too_short': ErrorKind.MISSING_FIELD,
    'extra_forbidden': ErrorKind.UNEXPECTED_FIELD,
    'string_pattern_mismatch': ErrorKind.PATTERN_VIOLATION,
    'string_too_short': ErrorKind.MISSING_FIELD,
    'greater_than': ErrorKind.RANGE_VIOLATION,
    'greater_than_equal': ErrorKind.RANGE_VIOLATION,
    'less_than': ErrorKind.RANGE_VIOLATION,
    'less_than_equal': ErrorKind.RANGE_VIOLATION,
    'literal_error': ErrorKind.INVALID_VARIANT,
    'enum': ErrorKind.INVALID_VARIANT,
    'union_tag_invalid': ErrorKind.INVALID_VARIANT,
    'union_tag_not_found': ErrorKind.INVALID_VARIANT,
}

_MISSING = object()


def locate_path(data: Any, location: tuple[int | str, ...]) -> 'IssuePath':  # noqa: ANN401
    """Rebuild an error location as a document path.

    Segments found in the raw data are kept. The first segment naming a
    field missing from a mapping is kept as well and ends the path.
    Schema labels (union tags and similar) are dropped.

    Args:
        data: Raw document data.
        location: Pydantic error location.

    Returns:
        Path made of document keys and indices.
    """
    path: list[int | str] = []
    current = data

    for key in location:
        if isinstance(current, MAPPINGS) and key in current:
            path.append(key)
            current = current[key]
        elif (isinstance(current, SEQUENCES) and isinstance(key, int)
              and 0 <= key < len(current)):
            path.append(key)
            current = current[key]
        elif (isinstance(current, MAPPINGS) and isinstance(key, str)
              and key not in UNION_TAGS and key not in SCHEMA_LABELS):
            path.append(key)
            current = _MISSING

    return tuple(path)


def get_kind(error: 'ErrorDetails') -> ErrorKind:
    """Map a Pydantic error type onto an issue kind."""
    kind = error['type']
    if kind in ErrorKind:
        return ErrorKind(kind)

    return ERROR_KINDS.get(kind, ErrorKind.TYPE_MISMATCH)


def get_message(error: 'ErrorDetails', path: 'IssuePath') -> str:
    """Build the issue message for a Pydantic error."""
    if error['type'] == 'missing' and path:
        return f'Field {path[-1]!r} is required'

    if error['type'] == 'extra_forbidden' and path:
        return f'Unexpected field {path[-1]!r}'

    if error['type'] == 'too_short':
        return 'At least one entry is required'

    return error['msg']


def iter_issues(error: 'ValidationError', data: Any) -> 'Iterator[Issue]':  # noqa: ANN401
    """Convert a validation error into issues.

    Errors reported once per member of a plain union collapse into one
    issue per path and kind.

    Args:
        error: Pydantic validation error.
        data: Raw data passed to validation.

    Yields:
        Issues in Pydantic reporting order.
    """
    seen = set()

    for item in error.errors(include_url=False, include_input=False):
        path = locate_path(data, item['loc'])
        kind = get_kind(item)
        if (path, kind) in seen:
            continue

        seen.add((path, kind))
        yield Issue(
            path=path,
            kind=kind,
            message=get_message(item, path),
        )
