"""Suite parsing, execution and scheduling."""

from .executor import Executor
from .parser import Suite, SuiteParser
from .runner import SuitePool, SuiteRunner

__all__ = (
    'Executor',
    'Suite',
    'SuitePool',
    'SuiteRunner',
    'SuiteParser',
)
