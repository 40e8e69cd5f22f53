"""Variable bindings and placeholder substitution.

Task fields may embed `{name}` placeholders, replaced by the bound value
when present and left as-is otherwise, and `{name|default}` placeholders,
replaced by the default when `name` is not bound.
"""

from typing import TYPE_CHECKING

from little_sister.names import PLACEHOLDER_PATTERN

if TYPE_CHECKING:
    from collections.abc import Mapping
    from re import Match


def resolve_variables(text: str, variables: 'Mapping[str, str]') -> str:
    """Substitute placeholders in a text.

    Every placeholder is replaced at most once and the substituted text is
    not scanned again, so bound values may safely contain braces.

    Args:
        text: Text with optional placeholders.
        variables: Variable bindings.

    Returns:
        The text with all resolvable placeholders substituted.
    """
    def replace(match: 'Match[str]') -> str:
        name = match['name']
        if name in variables:
            return variables[name]

        if match['default'] is not None:
            return match['default']

        return match[0]

    return PLACEHOLDER_PATTERN.sub(replace, text)


class Variables(dict[str, str]):
    """Variable bindings of a running suite.

    Bindings are seeded from caller overrides and extended by `set_vars`
    tasks; a later binding of the same name overwrites the earlier one.
    """

    def resolve(self, text: str) -> str:
        """Resolve placeholders of a text against these bindings.

        Args:
            text: Text with optional placeholders.

        Returns:
            The resolved text.
        """
        return resolve_variables(text, self)
