"""Suite document parser.

Turns a YAML suite document into an ordered, validated sequence of tasks.
Every declaration is built before any browser interaction takes place, so
a suite either parses completely or not at all.

A suite document looks like:

```yaml
meta_data:
  owner: qa
tasks:
  - name: open home page
    link:
      url: https://example.com/
  - name: check title
    validate:
      element:
        id: title
      expect:
        text: Example Domain
validate:
  - check title
```
"""

from collections.abc import Mapping
from os import linesep
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import Field, ValidationError
from yaml import YAMLError, safe_load
from yaml.error import MarkedYAMLError

from little_sister.errors import FORMAT_INDENT, DeclarationError, ErrorContext
from little_sister.models import SchemaModel
from little_sister.names import NAME_KEY, TaskKind
from little_sister.schema import BaseTask  # noqa: TC001
from little_sister.tasks import TASK_TYPES, Close

if TYPE_CHECKING:
    from io import TextIOBase

    from little_sister.schema import Declaration

#: Declaration of the Close task appended to suites not ending with one.
CLOSING_DECLARATION = {
    NAME_KEY: 'closing web driver session',
    TaskKind.CLOSE.value: True,
}


class SuiteDocument(SchemaModel):
    """Raw shape of a suite document."""

    tasks: list[Any] = Field(
        title='Tasks',
        description='Ordered task declarations.',
    )

    meta_data: dict[str, Any] = Field(
        default_factory=dict,
        title='Metadata',
        description='Free-form suite metadata.',
    )

    validate_tasks: list[str] | None = Field(
        default=None,
        alias='validate',
        title='Reported validations',
        description='Names of the Validate tasks reported in the summary.',
    )


class Suite(SchemaModel):
    """Parsed suite ready for execution."""

    path: Path | None = Field(
        default=None,
        title='Suite path',
        description='Path of the suite file, if parsed from a file.',
    )

    meta_data: dict[str, Any] = Field(
        default_factory=dict,
        title='Metadata',
        description='Free-form suite metadata.',
    )

    tasks: tuple[BaseTask, ...] = Field(
        title='Tasks',
        description='Validated tasks; always starts with a Link and ends with a Close.',
    )

    validate_tasks: tuple[str, ...] | None = Field(
        default=None,
        title='Reported validations',
        description='Names of the Validate tasks reported in the summary.',
    )


class SuiteParser:
    """Parser of suite documents into task sequences."""

    def __init__(self, registry: 'Mapping[str, type[BaseTask]] | None' = None) -> None:
        """Initialize the parser.

        Args:
            registry: Task classes keyed by declaration key. Defaults to
                the built-in task vocabulary.
        """
        self.registry = TASK_TYPES if registry is None else registry

    def parse_file(self, path: Path) -> Suite:
        """Read and parse a suite file.

        Args:
            path: Path to the YAML suite file.

        Returns:
            The parsed suite.

        Raises:
            DeclarationError: If the file cannot be read or is invalid.
        """
        try:
            content = path.read_text(encoding='utf-8')

        except (OSError, UnicodeDecodeError) as base:
            raise DeclarationError(
                'Unable to read file',
                context=ErrorContext(filename=str(path)),
            ) from base

        return self.parse(content, path=path)

    def parse(self, content: 'TextIOBase | str', *, path: Path | None = None) -> Suite:
        """Parse a suite document.

        Args:
            content: YAML content as a string or file-like object.
            path: Optional path of the suite file, used in errors.

        Returns:
            The parsed suite.

        Raises:
            DeclarationError: If the document or any declaration is
                invalid, or the task sequence breaks its invariants.
        """
        filename = str(path) if path is not None else None
        document = self.load(content, filename=filename)

        tasks = [
            self.build(declaration, task_num=position, filename=filename)
            for position, declaration in enumerate(document.tasks)
        ]

        if not tasks:
            raise DeclarationError(
                'First Task not found',
                context=ErrorContext(filename=filename),
            )

        if tasks[0].kind != TaskKind.LINK:
            raise DeclarationError(
                'First Task should be a Link',
                kind=tasks[0].kind,
                declaration=document.tasks[0],
                context=ErrorContext(filename=filename, task_num=0),
            )

        if tasks[-1].kind != TaskKind.CLOSE:
            tasks.append(Close.build(CLOSING_DECLARATION))

        validate_tasks = None
        if document.validate_tasks is not None:
            validate_tasks = self.check_filter(document.validate_tasks, tasks, filename=filename)

        return Suite(
            path=path,
            meta_data=document.meta_data,
            tasks=tuple(tasks),
            validate_tasks=validate_tasks,
        )

    def load(self, content: 'TextIOBase | str', *,
             filename: str | None = None) -> SuiteDocument:
        """Deserialize a suite document.

        Raises:
            DeclarationError: If the content is not a valid suite document.
        """
        context = ErrorContext(filename=filename)

        try:
            data = safe_load(content)

        except MarkedYAMLError as base:
            raise DeclarationError.from_yaml_error(base, filename=filename) from base

        except YAMLError as base:
            raise DeclarationError('Unable to deserialize file', context=context) from base

        try:
            return SuiteDocument.model_validate(data)

        except ValidationError as base:
            problems = linesep.join(
                f'{" " * FORMAT_INDENT}{".".join(map(str, error["loc"])) or "document"}: {error["msg"]}'
                for error in base.errors()
            )
            raise DeclarationError(
                f'Unable to deserialize file{linesep}{problems}',
                context=context,
            ) from base

    def build(self, declaration: Any, *, task_num: int,  # noqa: ANN401
              filename: str | None = None) -> BaseTask:
        """Build one task from its declaration.

        Raises:
            DeclarationError: If the declaration is invalid; the error
                carries the file name and the task position.
        """
        try:
            return self.resolve(declaration).build(declaration)

        except DeclarationError as base:
            raise base.locate(
                filename=filename,
                task_num=task_num,
                declaration=declaration,
            ) from base

    def resolve(self, declaration: Any) -> type[BaseTask]:  # noqa: ANN401
        """Select the task class of a declaration.

        Raises:
            DeclarationError: If the declaration shape or kind is invalid.
        """
        if not isinstance(declaration, Mapping) or len(declaration) != 2 or NAME_KEY not in declaration:
            raise DeclarationError('Task data is Malformed')

        key, = (key for key in declaration if key != NAME_KEY)
        if not isinstance(key, str) or key not in self.registry:
            raise DeclarationError(f'Unknown Task Type: {key}')

        return self.registry[key]

    @staticmethod
    def check_filter(names: list[str], tasks: list[BaseTask], *,
                     filename: str | None = None) -> tuple[str, ...]:
        """Check that the `validate` filter names existing Validate tasks.

        Raises:
            DeclarationError: If a name matches no Validate task.
        """
        known = {
            task.name
            for task in tasks
            if task.kind == TaskKind.VALIDATE
        }

        for name in names:
            if name not in known:
                raise DeclarationError(
                    f'Unknown validate task: {name}',
                    context=ErrorContext(filename=filename),
                )

        return tuple(names)
