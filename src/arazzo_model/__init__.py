"""Object model and validator for Arazzo workflow descriptions.

The `arazzo_model` package turns Arazzo documents (YAML or JSON) into
an immutable, fully validated object model.

Key features:
- typed models for every description element, with closed discriminated
  unions for criteria, actions, parameters and steps;
- parse-time validation of runtime expressions against their grammar;
- collection of every validation issue of a document, not just the first;
- resolution of references to steps, workflows, sources and components;
- serialization back to the generic value form.

Expressions are validated but never evaluated: executing workflows is
left to the consumers of the model.
"""

from .core import DocumentParser
from .errors import ArazzoError, DescriptionError, ErrorKind, Issue, LoaderError, ReferenceWarning
from .schema import Document

__all__ = (
    'ArazzoError',
    'DescriptionError',
    'Document',
    'DocumentParser',
    'ErrorKind',
    'Issue',
    'LoaderError',
    'ReferenceWarning',
)
