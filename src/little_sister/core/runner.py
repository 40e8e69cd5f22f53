"""Suite runner and worker pool.

Every suite file runs in isolation: it is parsed, gets its own browser
session and its own event loop, and folds into its own `SuiteSummary`.
Many suites are spread over a fixed pool of worker threads.
"""

from asyncio import run
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from logging import getLogger
from time import perf_counter
from typing import TYPE_CHECKING, Self

from little_sister.errors import TaskError
from little_sister.names import TaskKind
from little_sister.schema import SuiteSummary
from little_sister.session import Session

from .executor import Executor
from .parser import SuiteParser

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping
    from concurrent.futures import Future
    from pathlib import Path
    from types import TracebackType

    from little_sister.schema import TaskOk, ValidationResult
    from little_sister.settings import DriverSettings

    from .parser import Suite

logger = getLogger(__name__)

#: File name patterns of suite documents.
SUITE_PATTERNS = ('*.yml', '*.yaml')


def find_suites(path: 'Path') -> list['Path']:
    """List suite files below a directory, recursively and sorted."""
    return sorted({
        candidate
        for pattern in SUITE_PATTERNS
        for candidate in path.rglob(pattern)
        if candidate.is_file()
    })


def collect_results(suite: 'Suite', outcomes: 'Iterable[TaskOk]') -> tuple['ValidationResult', ...]:
    """Collect the validation results reported by a suite.

    When the suite declares a `validate` filter, only the named Validate
    tasks contribute.
    """
    results = []
    for outcome in outcomes:
        if outcome.kind != TaskKind.VALIDATE or not outcome.result:
            continue
        if suite.validate_tasks is not None and outcome.name not in suite.validate_tasks:
            continue
        results.extend(outcome.result)

    return tuple(results)


class SuitePool:
    """Fixed-size pool of suite workers."""

    def __init__(self, size: int) -> None:
        """Initialize the pool.

        Args:
            size: Number of worker threads.

        Raises:
            ValueError: If `size` is lower than 1.
        """
        if size < 1:
            raise ValueError('Pool size must be at least 1')

        self.size = size
        self._executor = ThreadPoolExecutor(
            max_workers=size,
            thread_name_prefix='suite',
        )

    def execute[T](self, job: 'Callable[[], T]') -> 'Future[T]':
        """Enqueue a job without blocking."""
        return self._executor.submit(job)

    def shutdown(self, cancel_pending: bool = False) -> None:
        """Stop accepting jobs and join every worker.

        Args:
            cancel_pending: Whether to cancel jobs not started yet.
        """
        self._executor.shutdown(wait=True, cancel_futures=cancel_pending)

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: type[BaseException] | None,
                 exc_value: BaseException | None,
                 traceback: 'TracebackType | None') -> None:
        self.shutdown(cancel_pending=exc_type is not None)


class SuiteRunner:
    """Runner of suite files."""

    def __init__(self, settings: 'DriverSettings',
                 variables: 'Mapping[str, str] | None' = None,
                 parser: SuiteParser | None = None) -> None:
        """Initialize the runner.

        Args:
            settings: Driver settings used for every session.
            variables: Variable overrides seeded into every suite.
            parser: Suite parser; defaults to the built-in vocabulary.
        """
        self.settings = settings
        self.variables = dict(variables or {})
        self.parser = parser or SuiteParser()

    async def run_suite(self, path: 'Path') -> SuiteSummary:
        """Parse and execute one suite file.

        Args:
            path: Path of the suite file.

        Returns:
            The suite summary; declaration and task failures are reported
            in `SuiteSummary.error`.

        Raises:
            SessionCreationError: If no browser session can be created.
        """
        logger.info('running suite %s', path)
        started = perf_counter()

        try:
            suite = self.parser.parse_file(path)
        except TaskError as error:
            logger.error('suite %s is invalid: %s', path, error.message)
            return SuiteSummary(path=path, error=str(error), duration=perf_counter() - started)

        session = await Session.open(self.settings)
        executor = Executor(suite.tasks)

        error = None
        try:
            await executor.execute(session, self.variables)
        except TaskError as failure:
            error = str(failure)

        summary = SuiteSummary(
            path=path,
            outcomes=tuple(executor.results),
            results=collect_results(suite, executor.results),
            error=error,
            task_count=len(executor.results),
            duration=perf_counter() - started,
        )

        logger.info('suite %s finished: %d task(s), %s', path, summary.task_count,
                    'passed' if summary.passed else 'failed')
        return summary

    def run_file(self, path: 'Path') -> SuiteSummary:
        """Run one suite file on a fresh event loop."""
        return run(self.run_suite(path))

    def run_directory(self, path: 'Path', workers: int | None = None) -> list[SuiteSummary]:
        """Run every suite file below a directory.

        Args:
            path: Directory holding `*.yml` and `*.yaml` suites.
            workers: Pool size; defaults to the configured workers.

        Returns:
            Summaries in file order.

        Raises:
            SessionCreationError: If a session cannot be created; pending
                suites are cancelled and running ones complete first.
        """
        suites = find_suites(path)
        logger.info('found %d suite(s) in %s', len(suites), path)

        with SuitePool(workers or self.settings.workers) as pool:
            futures = [pool.execute(partial(self.run_file, suite)) for suite in suites]
            return [future.result() for future in futures]
