"""Generic value types of the description format.

This module defines the recursive value type used for embedded JSON Schema
blocks, payloads and literal parameter values, together with the helpers
that inspect raw (not yet validated) document trees.
"""

from typing import Any

from pydantic import JsonValue

#: A value as produced by a document decoder prior to validation.
type RawValue = Any

#: Literal scalar accepted where a runtime expression may also appear.
type Scalar = str | int | float | bool | None

MAPPINGS = (dict,)
SCALARS = (str, bytes, int, float, bool)
SEQUENCES = (list, tuple)

__all__ = (
    'MAPPINGS',
    'SCALARS',
    'SEQUENCES',
    'JsonValue',
    'RawValue',
    'Scalar',
    'measure_depth',
)


def measure_depth(value: RawValue, limit: int | None = None) -> int:
    """Measure the nesting depth of a raw value.

    The tree is walked iteratively, so adversarial inputs cannot exhaust
    the interpreter stack. Scalars have depth 0, an empty container has
    depth 1.

    Args:
        value: Raw value to inspect.
        limit: Optional depth at which measuring stops early.

    Returns:
        The nesting depth, or `limit + 1` if the limit was exceeded.
    """
    deepest = 0
    pending = [(value, 1)]

    while pending:
        item, depth = pending.pop()
        if isinstance(item, MAPPINGS):
            children = item.values()
        elif isinstance(item, SEQUENCES):
            children = item
        else:
            continue

        deepest = max(deepest, depth)
        if limit is not None and deepest > limit:
            return deepest

        pending.extend((child, depth + 1) for child in children)

    return deepest
