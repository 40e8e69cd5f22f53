"""Task names, keys and placeholder syntax.

This module defines the closed vocabulary of task kinds and the patterns
used by the variable resolver. The values defined here form the public
contract of suite documents.
"""

from enum import StrEnum
from re import ASCII
from re import compile as regexp

#: Base pattern for variable identifiers.
#: Identifiers start with a letter or underscore and may contain letters,
#: digits and underscores.
_NAME_PATTERN = r'[a-zA-Z_]\w*'

#: Compiled pattern for `{name}` and `{name|default}` placeholders.
PLACEHOLDER_PATTERN = regexp(
    rf'\{{(?P<name>{_NAME_PATTERN})(?:\|(?P<default>[^{{}}]*))?\}}',
    flags=ASCII,
)

#: Key holding the task name in every declaration.
NAME_KEY = 'name'


class TaskKind(StrEnum):
    """Closed vocabulary of task kinds.

    Values are the declaration keys used in suite documents.
    """

    LINK = 'link'
    CLICK = 'click'
    SEND_KEY = 'send_key'
    CLOSE = 'close'
    WAIT = 'wait'
    SCREENSHOT = 'screenshot'
    COOKIE = 'cookie'
    SET_VARS = 'set_vars'
    VALIDATE = 'validate'

    @property
    def label(self) -> str:
        """Return the upper-case label used in reports."""
        return self.name
