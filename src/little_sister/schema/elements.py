"""Element locator definitions.

A locator identifies one live UI element by a strategy (`id`, `xPath`,
`className`) and a value. Locators are declared as a sub-document holding
exactly one strategy key.
"""

from collections.abc import Mapping
from enum import StrEnum
from typing import Any, Self

from pydantic import Field

from little_sister.errors import DeclarationError
from little_sister.models import SchemaModel
from little_sister.variables import resolve_variables

#: Key of the locator sub-document in task bodies.
ELEMENT_KEY = 'element'


class LocatorKind(StrEnum):
    """Supported locator strategies keyed by their declaration name."""

    ID = 'id'
    XPATH = 'xPath'
    CLASSNAME = 'className'


class Element(SchemaModel):
    """Locator of a single UI element."""

    kind: LocatorKind = Field(
        title='Locator strategy',
        description='Strategy used by the driver to find the element.',
    )

    value: str = Field(
        min_length=1,
        title='Locator value',
        description=(
            'Identifier, XPath expression or class name of the element. '
            'May contain variable placeholders resolved at execution time.'
        ),
    )

    def __str__(self) -> str:
        """Render as `Type: <KIND>, Value: <value>`."""
        return f'Type: {self.kind.name}, Value: {self.value}'

    def resolve(self, variables: Mapping[str, str]) -> Self:
        """Return a copy of this locator with placeholders substituted.

        Args:
            variables: Variable bindings of the running suite.

        Returns:
            A resolved locator.
        """
        return self.model_copy(update={
            'value': resolve_variables(self.value, variables),
        })

    @classmethod
    def from_body(cls, body: Mapping[Any, Any]) -> Self:
        """Build a locator from the `element` entry of a task body.

        Args:
            body: Task body holding an `element` sub-document.

        Returns:
            A validated locator.

        Raises:
            DeclarationError: If the locator is missing or malformed.
        """
        if ELEMENT_KEY not in body:
            raise DeclarationError('No element found')

        return cls.from_declaration(body[ELEMENT_KEY])

    @classmethod
    def from_declaration(cls, element: Any) -> Self:  # noqa: ANN401
        """Build a locator from its sub-document.

        Args:
            element: Mapping with exactly one strategy key.

        Returns:
            A validated locator.

        Raises:
            DeclarationError: If the locator is malformed.
        """
        if not isinstance(element, Mapping):
            raise DeclarationError('Invalid element structure')

        if not element:
            raise DeclarationError('Element is empty')

        if len(element) > 1:
            raise DeclarationError('Multiple elements are not supported')

        (key, value), = element.items()

        if not isinstance(value, str):
            raise DeclarationError('Element: Value is not a string')
        if not value:
            raise DeclarationError('Element: Value can`t be empty')

        if not isinstance(key, str):
            raise DeclarationError('Element: Key is not a string')
        if not key:
            raise DeclarationError('Element: Key can`t be empty')

        try:
            kind = LocatorKind(key)
        except ValueError as base:
            raise DeclarationError(f'Unknown Element Type: {key}') from base

        return cls(kind=kind, value=value)
