"""Core exception hierarchy.

This module defines the error types raised while reading suites, building
tasks, creating browser sessions and executing tasks. Errors carry enough
context (file, task position, task kind and the offending declaration) to
render a readable report.
"""

from os import linesep
from typing import TYPE_CHECKING, Any, TypedDict

from yaml import dump
from yaml.error import MarkedYAMLError

if TYPE_CHECKING:
    from typing import Self

if TYPE_CHECKING:
    from little_sister.names import TaskKind

SNIPPET_ELLIPSIS = f' ...{linesep}'
SNIPPET_INDENT = 2

FORMAT_REPLACER = '<runtime object>'
FORMAT_FILENAME = '<unicode string>'
FORMAT_INDENT = 4

SCALARS = (str, bytes, int, float, bool)
MAPPINGS = (dict,)
SEQUENCES = (list, tuple, set)


class ErrorContext(TypedDict, total=False):
    """Container describing contextual information for error formatting.

    All fields are optional; the formatter adapts output based on
    provided values.
    """

    #: Name of the suite file where the error occurred.
    filename: str | None

    #: Line number in the source file.
    line_num: int | None
    #: Column number in the source file.
    column_num: int | None

    #: Position of the task in the suite.
    task_num: int | None

    #: Underlying exception that triggered formatting.
    error: Exception | None

    #: Offending task declaration.
    declaration: Any


class ErrorFormatter:
    """Utility class for formatting runner errors.

    Produces human-readable error messages with optional source location
    and a YAML snippet of the offending declaration.
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

        location = cls.get_location_string(context, indent=FORMAT_INDENT)
        snippet = cls.get_snippet_string(context, indent=FORMAT_INDENT * 2)
        if not location and not snippet:
            return message

        return f'{message}{linesep}{location}{snippet}'

    @classmethod
    def get_location_string(cls, context: ErrorContext, *,
                            indent: str | int | None = None) -> str:
        """Format source and task location information.

        Args:
            context: Error context containing location metadata.
            indent: Optional indentation (string or number of spaces).

        Returns:
            A formatted location string, or an empty string if the
            context holds no location at all.
        """
        indent = cls._ensure_indent(indent)

        filename = context.get('filename')
        task_num = context.get('task_num')
        line_num = context.get('line_num')
        if not filename and task_num is None and line_num is None:
            return ''

        message = f'{indent}in "{filename or FORMAT_FILENAME}"'
        if line_num is not None:
            message += f', line {line_num + 1}'
            if (column_num := context.get('column_num')) is not None:
                message += f', column {column_num + 1}'
        message += linesep

        if task_num is not None:
            message += f'{indent}on task {task_num + 1}{linesep}'

        return message

    @classmethod
    def get_snippet_string(cls, context: ErrorContext, *,
                           indent: str | int | None = None) -> str:
        """Generate a formatted snippet illustrating the error context.

        Args:
            context: Error context containing declaration or YAML error data.
            indent: Optional indentation (string or number of spaces).

        Returns:
            A formatted multi-line snippet, or an empty string if no
            snippet data is available.
        """
        indent = cls._ensure_indent(indent)

        error = context.get('error')
        if isinstance(error, MarkedYAMLError) and error.problem_mark:
            snippet = error.problem_mark.get_snippet(indent=0) or ''
            return cls._make_indent(snippet, indent)

        if declaration := context.get('declaration'):
            snippet = f'{indent}{SNIPPET_ELLIPSIS}'
            snippet += cls._make_yaml(declaration, indent)
            return snippet + linesep

        return ''

    @classmethod
    def _filter_unsafe(cls, value: Any) -> Any:  # noqa: ANN401
        """Recursively sanitize values for safe YAML serialization.

        Args:
            value: Arbitrary value to sanitize.

        Returns:
            A YAML-safe representation of the value.
        """
        if value is None or isinstance(value, SCALARS):
            return value

        if isinstance(value, MAPPINGS):
            return {
                cls._filter_unsafe(key): cls._filter_unsafe(item)
                for key, item in value.items()
            }

        if isinstance(value, SEQUENCES):
            return [cls._filter_unsafe(item) for item in value]

        return FORMAT_REPLACER

    @classmethod
    def _make_yaml(cls, value: Any, indent: str = '') -> str:  # noqa: ANN401
        """Serialize a value to an indented YAML string.

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
            allow_unicode=True,
        )

        return cls._make_indent(data, indent)

    @staticmethod
    def _make_indent(value: str, indent: str) -> str:
        """Apply indentation to a multi-line string, dropping blank lines."""
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


class SisterError(Exception, ErrorFormatter):
    """Base exception for all little-sister errors."""

    def __init__(self, message: str, *,
                 context: ErrorContext | None = None) -> None:
        """Initialize an error.

        Args:
            message: Human-readable error description.
            context: Optional error context.
        """
        self.message = message
        self.context = context

        super().__init__(message)

    def __str__(self) -> str:
        """String representation."""
        return self.format(self.message, self.context)


class ConfigurationError(SisterError):
    """Error raised when driver settings cannot be read or validated."""


class SessionCreationError(SisterError):
    """Error raised when a browser session cannot be established.

    This error is fatal to the whole run: no task is executed.
    """


class TaskError(SisterError):
    """Error terminating a suite run.

    Carries the task kind, when known, and the offending declaration,
    when the error was detected while building a task.
    """

    def __init__(self, message: str, *,
                 kind: 'TaskKind | None' = None,
                 declaration: Any = None,  # noqa: ANN401
                 context: ErrorContext | None = None) -> None:
        """Initialize a task error.

        Args:
            message: Human-readable error description.
            kind: Kind of the task that failed.
            declaration: Offending declaration, if any.
            context: Optional location context.
        """
        self.kind = kind
        self.declaration = declaration

        if declaration is not None:
            context = ErrorContext({**(context or {}), 'declaration': declaration})

        super().__init__(message, context=context)

    def __str__(self) -> str:
        """Render as `<KIND>: <message>` followed by location and snippet."""
        label = self.kind.label if self.kind else 'NONE'
        return self.format(f'{label}: {self.message}', self.context)


class DeclarationError(TaskError):
    """Error raised while building tasks from a suite document.

    Declaration errors always abort the suite before any browser
    interaction takes place.
    """

    def locate(self, *, filename: str | None = None,
               task_num: int | None = None,
               kind: 'TaskKind | None' = None,
               declaration: Any = None) -> 'Self':  # noqa: ANN401
        """Return a copy of this error enriched with location data.

        Values already present on the error take precedence.

        Args:
            filename: Suite file name.
            task_num: Position of the task in the suite.
            kind: Kind of the task being built.
            declaration: Offending declaration.

        Returns:
            A new error instance of the same type.
        """
        context = ErrorContext({**(self.context or {})})
        if filename and not context.get('filename'):
            context['filename'] = filename
        if task_num is not None and context.get('task_num') is None:
            context['task_num'] = task_num

        return type(self)(
            self.message,
            kind=self.kind or kind,
            declaration=self.declaration if self.declaration is not None else declaration,
            context=context,
        )

    @classmethod
    def from_yaml_error(cls, error: MarkedYAMLError, *,
                        filename: str | None = None) -> 'Self':
        """Create a declaration error from a YAML parsing failure.

        Args:
            error: Exception raised by the YAML parser.
            filename: Suite file name.

        Returns:
            DeclarationError keeping the position of the YAML problem.
        """
        context = ErrorContext(filename=filename, error=error)
        if mark := error.problem_mark:
            context['line_num'] = mark.line
            context['column_num'] = mark.column

        message = 'Unable to deserialize file'
        if error.problem:
            message += f'{linesep}{" " * FORMAT_INDENT}{error.problem}'

        return cls(message, context=context)


class DriverError(TaskError):
    """Error raised by the browser driver during task execution.

    Driver errors abort the remaining tasks of their own suite only.
    """
