"""Task, locator and result schema.

Defines immutable Pydantic models describing tasks, element locators and
task/suite outcomes. Concrete task kinds live in `little_sister.tasks`.
"""

from .elements import Element, LocatorKind
from .results import Outcome, SuiteSummary, TaskOk, ValidationResult
from .tasks import BaseTask, Declaration, string_field, task_body, task_name

__all__ = (
    'BaseTask',
    'Declaration',
    'Element',
    'LocatorKind',
    'Outcome',
    'SuiteSummary',
    'TaskOk',
    'ValidationResult',
    'string_field',
    'task_body',
    'task_name',
)
