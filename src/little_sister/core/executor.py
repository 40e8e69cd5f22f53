"""Session executor.

Threads one session through the tasks of a suite strictly in order. The
first failing task stops the suite: the driver is released on a best-effort
basis and the error is re-raised, while the outcomes of the completed tasks
stay available in `Executor.results`.
"""

from logging import getLogger
from typing import TYPE_CHECKING

from little_sister.errors import DriverError, TaskError
from little_sister.session import SessionState

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from little_sister.schema import BaseTask, TaskOk
    from little_sister.session import Session

logger = getLogger(__name__)


class Executor:
    """Sequential executor of a task sequence."""

    def __init__(self, tasks: 'Sequence[BaseTask]') -> None:
        """Initialize the executor.

        Args:
            tasks: Validated tasks, as produced by the suite parser.
        """
        self.tasks = tuple(tasks)
        self.results: list[TaskOk] = []

    async def execute(self, session: 'Session',
                      variables: 'Mapping[str, str] | None' = None) -> list['TaskOk']:
        """Execute every task against a session.

        Args:
            session: Session of the suite; its driver is released when the
                suite ends, successfully or not.
            variables: Bindings seeded before the first task.

        Returns:
            Outcomes of the executed tasks, in order.

        Raises:
            TaskError: On the first failing task.
        """
        self.results = []

        if variables:
            session.variables.update(variables)

        session.state = SessionState.RUNNING

        for position, task in enumerate(self.tasks):
            session.position = position

            try:
                outcome = await self.run_task(task, session)

            except TaskError as error:
                session.state = SessionState.FAILED
                logger.error('task %d %r failed: %s', position + 1, task.name, error.message)
                await self.release(session)
                raise

            self.results.append(outcome)
            logger.debug('task %d finished: %s', position + 1, outcome)

            if session.state == SessionState.CLOSED:
                skipped = len(self.tasks) - position - 1
                if skipped:
                    logger.warning('session closed, %d remaining task(s) skipped', skipped)
                break

        return self.results

    @staticmethod
    async def run_task(task: 'BaseTask', session: 'Session') -> 'TaskOk':
        """Execute one task with unified error handling.

        Raises:
            TaskError: Propagated as-is.
            DriverError: Wrapping any other exception, with the task kind.
        """
        logger.debug('running %s task %r', task.kind.label, task.name)

        try:
            return await task.execute(session)

        except TaskError:
            raise

        except Exception as base:
            raise DriverError(f'{base!r}', kind=task.kind) from base

    @staticmethod
    async def release(session: 'Session') -> None:
        """Release the session driver, logging any failure."""
        try:
            await session.release()

        except Exception as error:  # noqa: BLE001
            logger.warning('unable to release browser session: %r', error)
