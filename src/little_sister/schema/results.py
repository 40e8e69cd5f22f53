"""Task and suite outcome models.

Successful tasks produce a `TaskOk`; Validate tasks additionally produce one
`ValidationResult` per expectation leaf. The suite runner folds these
outcomes into a `SuiteSummary` per suite file.
"""

from enum import StrEnum
from os import linesep
from pathlib import Path  # noqa: TC003

from pydantic import Field

from little_sister.models import SchemaModel
from little_sister.names import TaskKind  # noqa: TC001


class Outcome(StrEnum):
    """Outcome of a single validation."""

    SUCCESS = 'success'
    FAILED = 'failed'


class ValidationResult(SchemaModel):
    """Outcome of one expectation leaf of a Validate task."""

    outcome: Outcome
    message: str

    @classmethod
    def compare(cls, subject: str, expected: str, actual: str) -> 'ValidationResult':
        """Compare a live value with its expectation by exact string equality.

        Args:
            subject: Human-readable name of the compared value.
            expected: Resolved expected value.
            actual: Value read from the driver.

        Returns:
            A successful or failed validation result.
        """
        if expected == actual:
            return cls(
                outcome=Outcome.SUCCESS,
                message=f'Pass: {subject} is {expected}',
            )

        return cls(
            outcome=Outcome.FAILED,
            message=f'Fail: {subject} expected {expected!r} but was {actual!r}',
        )


class TaskOk(SchemaModel):
    """Successful task outcome."""

    name: str = Field(
        title='Task name',
        description='Name of the executed task.',
    )

    kind: TaskKind = Field(
        title='Task kind',
        description='Kind of the executed task.',
    )

    duration: float = Field(
        ge=0,
        title='Duration',
        description='Wall-clock execution time in seconds.',
    )

    result: tuple[ValidationResult, ...] | None = Field(
        default=None,
        title='Validation results',
        description='Results of a Validate task; `None` for any other kind.',
    )

    def __str__(self) -> str:
        """Render as `<KIND>: <name> [<duration>s]`."""
        return f'{self.kind.label}: {self.name} [{self.duration:.3f}s]'


class SuiteSummary(SchemaModel):
    """Aggregated outcome of one suite file."""

    path: Path = Field(
        title='Suite path',
        description='Path of the suite file.',
    )

    outcomes: tuple[TaskOk, ...] = Field(
        default=(),
        title='Task outcomes',
        description='Outcomes of the completed tasks, in order.',
    )

    results: tuple[ValidationResult, ...] = Field(
        default=(),
        title='Validation results',
        description='All validation results reported by the suite.',
    )

    error: str | None = Field(
        default=None,
        title='Error',
        description='Formatted error that terminated the suite, if any.',
    )

    task_count: int = Field(
        default=0,
        ge=0,
        title='Completed tasks',
        description='Number of tasks completed successfully.',
    )

    duration: float = Field(
        default=0.0,
        ge=0,
        title='Duration',
        description='Wall-clock execution time of the suite in seconds.',
    )

    @property
    def success(self) -> int:
        """Return the number of successful validations."""
        return sum(1 for result in self.results if result.outcome == Outcome.SUCCESS)

    @property
    def failures(self) -> tuple[ValidationResult, ...]:
        """Return the failed validations."""
        return tuple(result for result in self.results if result.outcome == Outcome.FAILED)

    @property
    def passed(self) -> bool:
        """Return whether the suite completed without error or failed validation."""
        return self.error is None and not self.failures

    def __str__(self) -> str:
        """Render a human-readable report of the suite."""
        if self.error is not None:
            return f'Test results: {self.path}, Reason: {self.error}'

        report = (
            f'Test results: {self.path}, Success: {self.success}, '
            f'failed {len(self.failures)} [{self.duration:.3f}s]'
        )
        for failure in self.failures:
            report += f'{linesep} - {failure.message}'

        return report
