"""Command-line interface of little-sister.

Runs a single suite file, printing every completed task, or a directory of
suites on a worker pool, printing one summary per file. The process exits
with status 1 when any suite fails or cannot run.
"""

from logging import basicConfig, getLevelNamesMapping
from pathlib import Path
from typing import TYPE_CHECKING, NoReturn

from click import BadParameter, Choice, echo, group, option
from click import Path as PathParam

from little_sister.core import SuiteParser, SuiteRunner
from little_sister.errors import ConfigurationError, SessionCreationError
from little_sister.settings import BROWSER_ALIASES, Browser, load_settings

if TYPE_CHECKING:
    from click import Context, Parameter

    from little_sister.schema import SuiteSummary

LOG_FORMAT = '%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s'

TaskPath = PathParam(exists=True, readable=True, path_type=Path)

ConfigPath = PathParam(
    exists=True,
    dir_okay=False,
    readable=True,
    path_type=Path,
)


def fail(message: str, cause: BaseException | None = None) -> NoReturn:
    """Print an error and exit with status 1."""
    echo(message, err=True)
    raise SystemExit(1) from cause


def parse_variables(context: 'Context', parameter: 'Parameter',
                    values: tuple[str, ...]) -> dict[str, str]:
    """Parse repeated `key=value` options into variable bindings.

    Raises:
        BadParameter: If an item has no `=` or an empty key.
    """
    variables = {}
    for item in values:
        key, separator, value = item.partition('=')
        if not separator or not key:
            raise BadParameter(f'expected key=value, got {item!r}', context, parameter)
        variables[key] = value

    return variables


@group(help='YAML-declared browser task runner.')
def cli() -> None:
    """Root CLI group of little-sister."""
    return None


@cli.command(
    name='run',
    help='Run a suite file (-t) or every suite of a directory (-d).',
)
@option('-t', '--task-path', type=TaskPath, help='Suite file to run.')
@option('-d', '--task-suite', type=TaskPath, help='Directory of suites to run.')
@option('-c', '--config-path', type=ConfigPath, help='YAML driver config file.')
@option(
    '-b', '--browser',
    type=Choice(
        [*(browser.value for browser in Browser), *BROWSER_ALIASES],
        case_sensitive=False,
    ),
    help='Browser engine.',
)
@option('-s', '--server-url', help='WebSocket endpoint of a Playwright server.')
@option('-p', '--port', type=int, help='Port of a local Playwright server.')
@option('--headless/--headed', default=None, help='Run the local browser without a window.')
@option('-w', '--workers', type=int, help='Number of suites run concurrently.')
@option(
    '-v', '--var', 'variables',
    multiple=True,
    callback=parse_variables,
    help='Variable override as key=value; repeatable.',
)
@option(
    '--log-level',
    type=Choice(list(getLevelNamesMapping()), case_sensitive=False),
    default='WARNING',
    show_default=True,
    help='Logging level.',
)
def run_command(task_path: Path | None, task_suite: Path | None,  # noqa: PLR0913
                config_path: Path | None, browser: str | None,
                server_url: str | None, port: int | None,
                headless: bool | None, workers: int | None,
                variables: dict[str, str], log_level: str) -> None:
    """Run suites and exit with their overall status."""
    basicConfig(level=log_level.upper(), format=LOG_FORMAT)

    if (task_path is None) == (task_suite is None):
        fail('Exactly one of --task-path or --task-suite is required')

    if task_suite is not None and task_suite.is_file():
        fail('Task path can`t be a File')

    if task_path is not None and task_path.is_dir():
        fail('Task path can`t be a directory')

    try:
        settings = load_settings(
            config_path,
            browser=browser,
            server_url=server_url,
            port=port,
            headless=headless,
            workers=workers,
        )
    except ConfigurationError as error:
        fail(str(error), error)

    runner = SuiteRunner(settings, variables, SuiteParser())

    try:
        if task_path is not None:
            passed = run_file(runner, task_path)
        else:
            passed = run_directory(runner, task_suite, settings.workers)

    except SessionCreationError as error:
        fail(str(error), error)

    if not passed:
        raise SystemExit(1)


def run_file(runner: SuiteRunner, path: Path) -> bool:
    """Run one suite, printing every completed task and the summary."""
    summary = runner.run_file(path)
    for outcome in summary.outcomes:
        echo(str(outcome))

    report(summary)
    return summary.passed


def run_directory(runner: SuiteRunner, path: Path, workers: int) -> bool:
    """Run a directory of suites, printing one summary per file."""
    summaries = runner.run_directory(path, workers)
    for summary in summaries:
        report(summary)

    return all(summary.passed for summary in summaries)


def report(summary: 'SuiteSummary') -> None:
    """Print a suite summary."""
    echo(str(summary), err=not summary.passed)


if __name__ == '__main__':
    cli()
