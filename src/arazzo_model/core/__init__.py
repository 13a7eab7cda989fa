"""Description decoding, validation and reference resolution.

This module defines the infrastructure turning raw documents into
validated description models.

It provides:
- a safe YAML loader rejecting repeated mapping keys;
- mapping of Pydantic validation errors onto description issues;
- document-wide invariants checked on the raw tree;
- resolution of references within a description.

The primary public entry point is `DocumentParser`, which decodes
YAML or JSON content and validates it into a `Document`.
"""

from .loader import DescriptionLoader
from .parser import DocumentParser, ValidationResult

__all__ = (
    'DescriptionLoader',
    'DocumentParser',
    'ValidationResult',
)
