"""Description parser and validator.

This module defines the high-level parser turning decoded documents into
validated `Document` models.

Validation runs in two phases:
- structural validation: Pydantic model validation together with the
  document-wide invariants checked on the raw tree. Every issue of this
  phase is collected, not just the first one;
- reference resolution: only for structurally valid documents. In strict
  mode unresolved references are issues; in relaxed mode they are emitted
  as `ReferenceWarning` and the document is returned.
"""

from pathlib import Path
from typing import TYPE_CHECKING
from warnings import warn

from pydantic import ValidationError
from yaml import load
from yaml.error import YAMLError

from arazzo_model.errors import DescriptionError, ErrorKind, Issue, LoaderError, ReferenceWarning
from arazzo_model.schema import Document
from arazzo_model.settings import ParserSettings
from arazzo_model.values import measure_depth

from .invariants import check_invariants
from .issues import iter_issues
from .loader import DescriptionLoader
from .references import ReferenceResolverMixin

if TYPE_CHECKING:
    from io import TextIOBase

    from yaml import BaseLoader

    from arazzo_model.values import RawValue

#: Validation result: the document (if valid) and every issue found.
type ValidationResult = tuple[Document | None, tuple[Issue, ...]]


class DocumentParser(ReferenceResolverMixin):
    """Arazzo description parser.

    This class is responsible for:
    - decoding YAML and JSON documents with the description loader;
    - validating decoded documents into immutable `Document` models;
    - collecting every issue of a document in a single pass;
    - resolving references within the document.

    The parser holds no per-document state and can be reused.
    """

    def __init__(self, loader: type['BaseLoader'] = DescriptionLoader, *,
                 strict: bool | None = None,
                 max_depth: int | None = None,
                 settings: ParserSettings | None = None) -> None:
        """Initialize the description parser.

        Options not given explicitly are taken from the settings, which
        are resolved from the environment by default.

        Args:
            loader: YAML loader class used to decode documents.
            strict: Whether unresolved references are validation issues
                instead of warnings.
            max_depth: Maximum nesting depth of a raw document.
            settings: Parser settings.
        """
        if settings is None:
            settings = ParserSettings()

        self.loader = loader
        self.strict_mode = settings.strict if strict is None else strict
        self.max_depth = settings.max_depth if max_depth is None else max_depth

    def validate(self, data: 'RawValue') -> ValidationResult:
        """Validate a decoded document.

        A document is never returned together with issues: either the
        document is valid and the issue list is empty, or no document is
        returned.

        Args:
            data: Decoded document (mappings, sequences and scalars).

        Returns:
            A tuple consisting of:
            - the validated document, or `None`;
            - every issue found.
        """
        if measure_depth(data, self.max_depth) > self.max_depth:
            return None, (
                Issue(
                    kind=ErrorKind.DEPTH_EXCEEDED,
                    message=f'Document is nested deeper than {self.max_depth} levels',
                ),
            )

        document, issues = None, []

        try:
            document = Document.model_validate(data)

        except ValidationError as base:
            issues.extend(iter_issues(base, data))

        issues.extend(check_invariants(data))

        if document is None or issues:
            return None, tuple(issues)

        for issue in self.check_references(document):
            if self.strict_mode or issue.kind != ErrorKind.DANGLING_REFERENCE:
                issues.append(issue)
            else:
                warn(str(issue), ReferenceWarning, stacklevel=2)

        if issues:
            return None, tuple(issues)

        return document, ()

    def parse(self, data: 'RawValue', *, filename: str | None = None) -> Document:
        """Validate a decoded document.

        Args:
            data: Decoded document.
            filename: Name of the source file, used in error messages.

        Returns:
            The validated document.

        Raises:
            DescriptionError: If validation fails. The error carries
                every issue found.
        """
        document, issues = self.validate(data)
        if document is None:
            raise DescriptionError(issues, data=data, filename=filename)

        return document

    def parse_text(self, content: 'TextIOBase | str', *,
                   filename: str | None = None) -> Document:
        """Decode and validate a YAML or JSON document.

        Args:
            content: Document text as a string or a file-like object.
            filename: Name of the source file, used in error messages.

        Returns:
            The validated document.

        Raises:
            LoaderError: If the content can not be decoded.
            DescriptionError: If validation fails.
        """
        try:
            data = load(content, Loader=self.loader)  # noqa: S506

        except YAMLError as base:
            raise LoaderError.from_yaml_error(base, filename=filename) from base

        except UnicodeDecodeError as base:
            raise LoaderError.from_decode_error(base, filename=filename) from base

        return self.parse(data, filename=filename)

    def parse_file(self, path: Path | str) -> Document:
        """Decode and validate a description file.

        Args:
            path: Path of the description file.

        Returns:
            The validated document.

        Raises:
            OSError: If the file can not be read.
            LoaderError: If the content can not be decoded.
            DescriptionError: If validation fails.
        """
        path = Path(path)
        with path.open(encoding='utf-8') as content:
            return self.parse_text(content, filename=str(path))
