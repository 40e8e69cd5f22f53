"""Base task definitions.

Defines the foundational schema for executable tasks. A task is built once
from a declaration (`{name: ..., <kind>: <body>}`), validated eagerly and
immutable afterwards. At execution time it receives the suite session,
resolves its string fields against the session variables and drives the
browser through the session driver.

This module also provides the helpers used by concrete tasks to validate
their declaration bodies with uniform error messages.
"""

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from time import perf_counter
from typing import TYPE_CHECKING, Any, ClassVar, Self

from pydantic import Field

from little_sister.errors import DeclarationError, DriverError
from little_sister.models import SchemaModel
from little_sister.names import NAME_KEY, TaskKind

from .results import TaskOk, ValidationResult

if TYPE_CHECKING:
    from little_sister.session import Session

#: A raw task declaration as read from a suite document.
type Declaration = Mapping[Any, Any]


def task_name(declaration: Declaration) -> str:
    """Extract and validate the task name of a declaration.

    Args:
        declaration: Raw task declaration.

    Returns:
        The non-empty task name.

    Raises:
        DeclarationError: If the name is missing, not a string or empty.
    """
    if NAME_KEY not in declaration:
        raise DeclarationError('Malformed Task')

    name = declaration[NAME_KEY]
    if not isinstance(name, str):
        raise DeclarationError('Task name is not a string')

    if not name:
        raise DeclarationError('Task name can`t be empty')

    return name


def task_body(declaration: Declaration, key: str) -> Mapping[Any, Any]:
    """Extract the mapping body of a declaration.

    Args:
        declaration: Raw task declaration.
        key: Kind key holding the body.

    Returns:
        The non-empty body mapping.

    Raises:
        DeclarationError: If the body is missing, not a mapping or empty.
    """
    if key not in declaration:
        raise DeclarationError('Malformed Task')

    body = declaration[key]
    if not isinstance(body, Mapping):
        raise DeclarationError('Task data is Malformed')

    if not body:
        raise DeclarationError('Task data is empty')

    return body


def string_field(body: Mapping[Any, Any], key: str) -> str:
    """Extract a required non-empty string field of a task body.

    Args:
        body: Task body mapping.
        key: Field name.

    Returns:
        The field value.

    Raises:
        DeclarationError: If the field is missing, not a string or empty.
    """
    if key not in body:
        raise DeclarationError(f'{key} field not found')

    value = body[key]
    if not isinstance(value, str):
        raise DeclarationError(f'{key} is not a string')

    if not value:
        raise DeclarationError(f'{key} is empty')

    return value


class BaseTask(SchemaModel):
    """Base class for executable tasks.

    Concrete tasks declare their `kind`, parse their declaration body in
    `parse` and implement `execute`. The set of concrete tasks is closed
    and registered in `little_sister.tasks.TASK_TYPES`.
    """

    #: Kind of the task, equal to its declaration key.
    kind: ClassVar[TaskKind]

    name: str = Field(
        min_length=1,
        title='Task name',
        description='Human-readable name reported with the task outcome.',
    )

    @classmethod
    def build(cls, declaration: Declaration) -> Self:
        """Build a task from its declaration.

        Args:
            declaration: Raw task declaration.

        Returns:
            A validated, immutable task.

        Raises:
            DeclarationError: If the declaration is invalid. The error
                carries the task kind and the offending declaration.
        """
        try:
            name = task_name(declaration)
            fields = cls.parse(declaration)

        except DeclarationError as base:
            raise base.locate(kind=cls.kind, declaration=dict(declaration)) from base

        return cls(name=name, **fields)

    @classmethod
    def parse(cls, declaration: Declaration) -> dict[str, Any]:
        """Validate the declaration body and return the task fields.

        Args:
            declaration: Raw task declaration.

        Returns:
            Keyword arguments for the task model, except `name`.

        Raises:
            DeclarationError: If the body is invalid.
        """
        raise NotImplementedError

    async def execute(self, session: 'Session') -> TaskOk:
        """Execute the task against a session.

        Args:
            session: Session of the running suite.

        Returns:
            The successful task outcome.

        Raises:
            TaskError: If the task fails.
        """
        raise NotImplementedError

    def done(self, started: float,
             result: tuple[ValidationResult, ...] | None = None) -> TaskOk:
        """Build the successful outcome of this task.

        Args:
            started: `perf_counter` value taken when the task started.
            result: Validation results, for Validate tasks.

        Returns:
            The task outcome.
        """
        return TaskOk(
            name=self.name,
            kind=self.kind,
            duration=perf_counter() - started,
            result=result,
        )

    @contextmanager
    def driver_errors(self, prefix: str | None = None) -> Iterator[None]:
        """Attach the task kind to driver errors raised in the block.

        Args:
            prefix: Optional message prefix, joined with the driver message.

        Raises:
            DriverError: Re-raised with the task kind.
        """
        try:
            yield

        except DriverError as base:
            message = base.message
            if prefix:
                message = f'{prefix}: {message}'
            raise DriverError(message, kind=self.kind) from base
