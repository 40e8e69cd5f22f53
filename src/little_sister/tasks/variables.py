"""Variable binding task."""

from time import perf_counter
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import Field

from little_sister.errors import DeclarationError
from little_sister.names import TaskKind
from little_sister.schema import BaseTask, task_body

if TYPE_CHECKING:
    from little_sister.schema import Declaration, TaskOk
    from little_sister.session import Session


class SetVars(BaseTask):
    """Bind variables for the remaining tasks of the suite.

    Values are stored as declared; placeholders inside them are not
    resolved. A binding overwrites an earlier one with the same name.
    """

    kind: ClassVar[TaskKind] = TaskKind.SET_VARS

    variables: dict[str, str] = Field(
        title='Variables',
        description='Flat mapping of variable names to values.',
    )

    @classmethod
    def parse(cls, declaration: 'Declaration') -> dict[str, Any]:
        body = task_body(declaration, cls.kind)

        for key, value in body.items():
            if not isinstance(key, str):
                raise DeclarationError(f'Variable name is not a string: {key}')
            if not isinstance(value, str):
                raise DeclarationError(f'Variable value is not a string: {key}')

        return {'variables': dict(body)}

    async def execute(self, session: 'Session') -> 'TaskOk':
        started = perf_counter()
        session.variables.update(self.variables)
        return self.done(started)
