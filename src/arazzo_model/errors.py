"""Core exception hierarchy and validation issues.

This module defines the machine-readable issue kinds reported by the
validator, the `Issue` record carrying a single defect, and the error and
warning types used across the library to report decoding failures,
invalid descriptions and unresolved references.
"""

from enum import StrEnum
from os import linesep
from typing import TYPE_CHECKING, Any, TypedDict

from pydantic import Field
from yaml import dump
from yaml.error import MarkedYAMLError, YAMLError
from yaml.reader import ReaderError

from arazzo_model.models import SchemaModel
from arazzo_model.values import MAPPINGS, SCALARS, SEQUENCES

if TYPE_CHECKING:
    from collections.abc import Iterable
    from typing import Self

SNIPPET_ELLIPSIS = f' ...{linesep}'
SNIPPET_INDENT = 2

FORMAT_REPLACER = '<runtime object>'
FORMAT_FILENAME = '<unicode string>'
FORMAT_INDENT = 4


class ErrorKind(StrEnum):
    """Machine-readable kind of a validation issue."""

    MISSING_FIELD = 'MissingField'
    UNEXPECTED_FIELD = 'UnexpectedField'
    TYPE_MISMATCH = 'TypeMismatch'
    PATTERN_VIOLATION = 'PatternViolation'
    MUTUAL_EXCLUSION_VIOLATION = 'MutualExclusionViolation'
    RANGE_VIOLATION = 'RangeViolation'
    DUPLICATE_ENTRY = 'DuplicateEntry'
    AMBIGUOUS_STEP_SHAPE = 'AmbiguousStepShape'
    AMBIGUOUS_REFERENCE = 'AmbiguousReference'
    MALFORMED_OPERATION_PATH = 'MalformedOperationPath'
    DANGLING_REFERENCE = 'DanglingReference'
    INVALID_VARIANT = 'InvalidVariant'
    DEPTH_EXCEEDED = 'DepthExceeded'


#: Path of a value inside a document: mapping keys and sequence indices.
type IssuePath = tuple[str | int, ...]


class Issue(SchemaModel):
    """A single validation defect."""

    path: IssuePath = Field(
        default=(),
        title='Issue path',
        description='Keys and indices leading from the document root to the value.',
    )

    kind: ErrorKind = Field(
        title='Issue kind',
    )

    message: str = Field(
        title='Issue message',
        description='Human-readable description of the defect.',
    )

    @property
    def location(self) -> str:
        """Dotted location, for example `workflows[1].workflowId`."""
        location = ''
        for key in self.path:
            if isinstance(key, int):
                location += f'[{key}]'
            elif location:
                location += f'.{key}'
            else:
                location = key

        return location or '<root>'

    @property
    def pointer(self) -> str:
        """JSON Pointer to the offending value."""
        return ''.join(
            '/' + str(key).replace('~', '~0').replace('/', '~1')
            for key in self.path
        )

    def __str__(self) -> str:
        """Issue as `location: message [kind]`."""
        return f'{self.location}: {self.message} [{self.kind}]'


class ErrorContext(TypedDict, total=False):
    """Container describing contextual information for error formatting.

    All fields are optional; the formatter adapts output based on
    provided values.
    """

    #: Name of the source file where the error occurred.
    filename: str | None

    #: Line number in the source file.
    line_num: int | None
    #: Column number in the source file.
    column_num: int | None

    #: Underlying exception that triggered formatting.
    error: Exception | None

    #: Raw element associated with the error.
    element: Any


class ErrorFormatter:
    """Utility class for formatting description errors.

    This formatter is responsible for producing human-readable
    error messages with optional source location and YAML-based
    contextual snippets.
    """

    @classmethod
    def format(cls, message: str, context: ErrorContext | None = None) -> str:
        """Format an error message using contextual information.

        Args:
            message: Base human-readable error message.
            context: Optional error context with location and data.

        Returns:
            A fully formatted error message suitable for display.
        """
        if not context:
            return message

        message += linesep
        message += cls.get_location_string(context, indent=FORMAT_INDENT)
        message += cls.get_snippet_string(context, indent=FORMAT_INDENT * 2)

        return message

    @classmethod
    def get_location_string(cls, context: ErrorContext, *,
                            indent: str | int | None = None) -> str:
        """Format source location information.

        Args:
            context: Error context containing location metadata.
            indent: Optional indentation (string or number of spaces).

        Returns:
            A formatted location string including filename, line
            and column numbers when available.
        """
        indent = cls._ensure_indent(indent)

        filename = context.get('filename')
        if not filename:
            filename = FORMAT_FILENAME

        message = f'{indent}in "{filename}"'
        if (line_num := context.get('line_num')) is not None:
            line_num += 1
            message += f', line {line_num}'
            if (column_num := context.get('column_num')) is not None:
                column_num += 1
                message += f', column {column_num}'
        message += linesep

        return message

    @classmethod
    def get_snippet_string(cls, context: ErrorContext, *,
                           indent: str | int | None = None) -> str:
        """Generate a formatted snippet illustrating the error context.

        Args:
            context: Error context containing element or exception data.
            indent: Optional indentation (string or number of spaces).

        Returns:
            A formatted multi-line snippet string, or an empty string
            if no snippet data is available.
        """
        indent = cls._ensure_indent(indent)

        if (error := context.get('error')) and isinstance(error, MarkedYAMLError):
            snippet = error.problem_mark.get_snippet(indent=0) or ''
            return cls._make_indent(snippet, indent)

        if (element := context.get('element')) is not None:
            return cls._make_snippet(element, indent)

        return ''

    @classmethod
    def _make_snippet(cls, element: Any, indent: str) -> str:  # noqa: ANN401
        """Build a YAML-based snippet for an element.

        Args:
            element: Element associated with the error.
            indent: String indentation prefix.

        Returns:
            A formatted snippet string.
        """
        snippet = f'{indent}{SNIPPET_ELLIPSIS}'
        snippet += cls._make_yaml(element, indent)
        snippet += linesep

        return snippet

    @classmethod
    def _filter_unsafe(cls, value: Any) -> Any:  # noqa: ANN401
        """Recursively sanitize values for safe YAML serialization.

        Non-scalar and non-container objects are replaced with
        a placeholder.

        Args:
            value: Arbitrary value to sanitize.

        Returns:
            A YAML-safe representation of the value.
        """
        if value is None or isinstance(value, SCALARS):
            return value

        if isinstance(value, MAPPINGS):
            return {
                key: cls._filter_unsafe(item)
                for key, item in value.items()
            }

        if isinstance(value, SEQUENCES):
            return [
                cls._filter_unsafe(item)
                for item in value
            ]

        return FORMAT_REPLACER

    @classmethod
    def _make_yaml(cls, value: Any, indent: str = '') -> str:  # noqa: ANN401
        """Serialize a value to a YAML-formatted string.

        Args:
            value: Arbitrary value to serialize.
            indent: Optional indentation prefix.

        Returns:
            A YAML-formatted string representation of the value.
        """
        data = dump(
            cls._filter_unsafe(value),
            indent=SNIPPET_INDENT,
            sort_keys=False,
        )

        return cls._make_indent(data, indent)

    @staticmethod
    def _make_indent(value: str, indent: str) -> str:
        """Apply indentation to a multi-line string.

        Empty or whitespace-only lines are omitted.
        """
        if not indent:
            return value

        return linesep.join(
            f'{indent}{line}'
            for line in value.splitlines()
            if line.strip()
        )

    @staticmethod
    def _ensure_indent(indent: str | int | None = None) -> str:
        """Normalize indentation given as a string or a number of spaces."""
        if isinstance(indent, int) and indent > 0:
            return ' ' * indent

        if isinstance(indent, str):
            return indent

        return ''

    @staticmethod
    def locate(data: Any, path: 'IssuePath') -> Any:  # noqa: ANN401
        """Extract the minimal raw fragment an issue path points at.

        Path segments missing from the data (for example, the name of
        a required field) stop the walk; the fragment of the deepest
        existing container is returned instead.

        Args:
            data: Raw document data.
            path: Issue path.

        Returns:
            A single-entry mapping or sequence wrapping the located
            value, or `None` if the path does not enter the data.
        """
        container, last_key, last_item = None, None, data

        for key in path:
            if isinstance(last_item, MAPPINGS) and key in last_item:
                container, last_key, last_item = last_item, key, last_item[key]
            elif (isinstance(last_item, SEQUENCES) and isinstance(key, int)
                  and 0 <= key < len(last_item)):
                container, last_key, last_item = last_item, key, last_item[key]
            else:
                break

        if isinstance(container, MAPPINGS):
            return {last_key: last_item}

        if isinstance(container, SEQUENCES):
            return [last_item]

        return None


class ReferenceWarning(UserWarning):
    """Warning emitted for unresolved references in relaxed mode.

    A dangling reference does not prevent a description from being
    returned when the parser runs in relaxed mode.
    """


class ArazzoError(Exception, ErrorFormatter):
    """Base exception for all arazzo-model errors.

    All custom exceptions raised by the library inherit from this class
    to allow unified error handling by callers.
    """

    def __init__(self, message: str, *,
                 context: ErrorContext | None = None) -> None:
        """Initialize an error.

        Args:
            message: Human-readable error description.
            context: Error context containing optional location and data.
        """
        self.message = message
        self.context = context

        super().__init__(message)

    def __str__(self) -> str:
        """Formatted message with location and snippet."""
        return self.format(self.message, self.context)


class LoaderError(ArazzoError):
    """Error raised when a document cannot be decoded.

    Covers syntax errors, unreadable characters, invalid encodings and
    mapping keys repeated within one mapping.
    """

    @classmethod
    def from_yaml_error(cls, error: YAMLError, *,
                        filename: str | None = None) -> 'Self':
        """Create a loader error from a YAML parsing failure.

        Args:
            error: Exception raised by the YAML reader, parser or constructor.
            filename: Name of the source file, preferred over the stream name.

        Returns:
            LoaderError carrying the failure position when it is known.
        """
        error_context = ErrorContext(error=error, filename=filename)

        if isinstance(error, MarkedYAMLError):
            problem = error.problem
            if (mark := error.problem_mark or error.context_mark) is not None:
                error_context.update(
                    filename=filename or mark.name,
                    line_num=mark.line,
                    column_num=mark.column,
                )

        elif isinstance(error, ReaderError):
            problem = f'{error.reason} at position {error.position}'
            error_context.update(filename=filename or error.name)

        else:
            problem = str(error)

        message = 'Invalid YAML'
        if problem:
            message += f'{linesep}{' ' * FORMAT_INDENT}{problem}'

        return cls(message, context=error_context)

    @classmethod
    def from_decode_error(cls, error: UnicodeDecodeError, *,
                          filename: str | None = None) -> 'Self':
        """Create a loader error from a content that is not valid UTF-8."""
        message = f'Invalid encoding{linesep}{' ' * FORMAT_INDENT}{error.reason} at byte {error.start}'

        return cls(message, context=ErrorContext(error=error, filename=filename))


class DescriptionError(ArazzoError):
    """Error raised when a description fails validation.

    Carries every issue found in the document, not just the first one.
    """

    def __init__(self, issues: 'Iterable[Issue]', *,
                 data: Any = None,  # noqa: ANN401
                 filename: str | None = None) -> None:
        """Initialize a description error.

        Args:
            issues: Validation issues.
            data: Raw document data used to render snippets.
            filename: Name of the source file.
        """
        self.issues = tuple(issues)
        self.data = data

        count = len(self.issues)
        message = f'{count} validation issue{'' if count == 1 else 's'}'

        super().__init__(message, context=ErrorContext(filename=filename))

    def __str__(self) -> str:
        """Summary line followed by every issue with its snippet."""
        message = self.message + linesep
        message += self.get_location_string(self.context or {}, indent=FORMAT_INDENT)

        for issue in self.issues:
            message += f'{' ' * FORMAT_INDENT}{issue}{linesep}'
            element = self.locate(self.data, issue.path)
            if element is not None:
                message += self._make_snippet(element, ' ' * FORMAT_INDENT * 2)

        return message.rstrip()

    @property
    def kinds(self) -> tuple[ErrorKind, ...]:
        """Kinds of all issues in reporting order."""
        return tuple(issue.kind for issue in self.issues)


class DanglingReferenceError(ArazzoError):
    """Error raised when a reference does not resolve to a component."""

    def __init__(self, reference: str) -> None:
        """Initialize a dangling reference error.

        Args:
            reference: The unresolved reference.
        """
        self.reference = reference

        super().__init__(f'Reference {reference!r} does not resolve')
