"""Concrete task kinds.

The task vocabulary is closed: `TASK_TYPES` maps every declaration key to
the class building and executing that kind of task.
"""

from typing import TYPE_CHECKING

from .capture import Cookie, Screenshot
from .interaction import Click, SendKey
from .navigation import Close, Link
from .validation import Expectation, Validate
from .variables import SetVars
from .waiting import Wait

if TYPE_CHECKING:
    from little_sister.names import TaskKind
    from little_sister.schema import BaseTask

#: Closed registry of task classes keyed by their kind.
TASK_TYPES: 'dict[TaskKind, type[BaseTask]]' = {
    task.kind: task
    for task in (
        Link,
        Click,
        SendKey,
        Close,
        Wait,
        Screenshot,
        Cookie,
        SetVars,
        Validate,
    )
}

__all__ = (
    'TASK_TYPES',
    'Click',
    'Close',
    'Cookie',
    'Expectation',
    'Link',
    'Screenshot',
    'SendKey',
    'SetVars',
    'Validate',
    'Wait',
)
