"""Tests for suite runs and the worker pool."""

import threading
from typing import TYPE_CHECKING

import pytest

from little_sister.core import SuitePool, SuiteRunner
from little_sister.errors import DriverError, SessionCreationError
from little_sister.names import TaskKind
from little_sister.settings import DriverSettings

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from pytest_mock import MockType


TEST_SUITE_CONTENT = '''
tasks:
  - name: open home page
    link:
      url: https://example.com/
  - name: check title
    validate:
      element:
        id: title
      expect:
        text: Example
  - name: check footer
    validate:
      element:
        id: footer
      expect:
        text: Example
'''

TEST_FILTERED_SUITE_CONTENT = TEST_SUITE_CONTENT + '''
validate:
  - check footer
'''

TEST_INVALID_SUITE_CONTENT = '''
tasks:
  - name: press login
    click:
      element:
        id: login
'''


def make_suite(tasks: int) -> str:
    """Render a suite with a Link followed by `tasks - 1` SetVars."""
    content = 'tasks:\n  - {name: open, link: {url: "https://example.com/"}}\n'
    for index in range(1, tasks):
        content += f'  - {{name: step {index}, set_vars: {{step: "{index}"}}}}\n'
    return content


def test_run_file(write_suite: 'Callable[[str, str], Path]',
                  patch_session: 'MockType', driver: 'MockType') -> None:
    """Summarize a successful suite."""
    driver.text.return_value = 'Example'
    path = write_suite('home.yml', TEST_SUITE_CONTENT)

    summary = SuiteRunner(DriverSettings()).run_file(path)

    assert summary.path == path
    assert summary.error is None
    assert summary.task_count == 4
    assert summary.success == 2
    assert summary.passed
    assert [outcome.kind for outcome in summary.outcomes] == [
        TaskKind.LINK,
        TaskKind.VALIDATE,
        TaskKind.VALIDATE,
        TaskKind.CLOSE,
    ]
    patch_session.assert_called_once()
    driver.quit.assert_awaited_once()


def test_run_file_with_filter(write_suite: 'Callable[[str, str], Path]',
                              patch_session: 'MockType', driver: 'MockType') -> None:
    """Report only the validations named by the filter."""
    driver.text.side_effect = ['Example', 'Other']
    path = write_suite('home.yml', TEST_FILTERED_SUITE_CONTENT)

    summary = SuiteRunner(DriverSettings()).run_file(path)

    assert summary.success == 0
    assert [failure.message for failure in summary.failures] == [
        "Fail: Text expected 'Example' but was 'Other'",
    ]
    assert not summary.passed
    assert 'Success: 0, failed 1' in str(summary)


def test_run_file_task_error(write_suite: 'Callable[[str, str], Path]',
                             patch_session: 'MockType', driver: 'MockType') -> None:
    """Report task failures in the summary."""
    driver.find.side_effect = DriverError('Unable to find element - Type: ID, Value: title')
    path = write_suite('home.yml', TEST_SUITE_CONTENT)

    summary = SuiteRunner(DriverSettings()).run_file(path)

    assert summary.error is not None
    assert summary.error.startswith('VALIDATE: Unable to find element')
    assert summary.task_count == 1
    assert not summary.passed
    assert str(summary).startswith(f'Test results: {path}, Reason: VALIDATE:')
    driver.quit.assert_awaited_once()


def test_run_file_declaration_error(write_suite: 'Callable[[str, str], Path]',
                                    patch_session: 'MockType') -> None:
    """Never open a session for an invalid suite."""
    path = write_suite('bad.yml', TEST_INVALID_SUITE_CONTENT)

    summary = SuiteRunner(DriverSettings()).run_file(path)

    assert summary.error is not None
    assert 'First Task should be a Link' in summary.error
    patch_session.assert_not_called()


def test_run_file_seeds_variables(write_suite: 'Callable[[str, str], Path]',
                                  patch_session: 'MockType', driver: 'MockType') -> None:
    """Seed overrides into every suite."""
    path = write_suite('home.yml', 'tasks:\n  - {name: open, link: {url: "https://{host}/"}}\n')

    SuiteRunner(DriverSettings(), {'host': 'staging.example.com'}).run_file(path)

    driver.goto.assert_awaited_once_with('https://staging.example.com/')


def test_run_directory(write_suite: 'Callable[[str, str], Path]', tmp_path: 'Path',
                       patch_session: 'MockType', driver: 'MockType') -> None:
    """Run independent suites on a pool of two workers."""
    paths = [
        write_suite('a.yml', make_suite(1)),
        write_suite('b.yaml', make_suite(2)),
        write_suite('nested/c.yml', make_suite(3)),
        write_suite('nested/d.yml', make_suite(4)),
        write_suite('e.yml', TEST_INVALID_SUITE_CONTENT),
    ]
    write_suite('notes.txt', 'not a suite')

    summaries = SuiteRunner(DriverSettings()).run_directory(tmp_path, workers=2)

    assert [summary.path for summary in summaries] == sorted(paths)
    assert sum(summary.task_count for summary in summaries) == 2 + 3 + 4 + 5
    assert [summary.passed for summary in summaries] == [True, True, False, True, True]
    assert patch_session.call_count == 4
    assert driver.quit.await_count == 4


def test_run_directory_session_error(write_suite: 'Callable[[str, str], Path]',
                                     tmp_path: 'Path', patch_session: 'MockType') -> None:
    """Abort the whole run when no session can be created."""
    patch_session.side_effect = SessionCreationError('Unable to create browser session')
    for name in ('a.yml', 'b.yml', 'c.yml'):
        write_suite(name, make_suite(1))

    with pytest.raises(SessionCreationError):
        SuiteRunner(DriverSettings()).run_directory(tmp_path, workers=1)


def test_pool_runs_jobs() -> None:
    """Run every job and join the workers on exit."""
    names = set()
    lock = threading.Lock()

    def job(value: int) -> int:
        with lock:
            names.add(threading.current_thread().name)
        return value * 2

    with SuitePool(2) as pool:
        futures = [pool.execute(lambda value=value: job(value)) for value in range(5)]

    assert [future.result() for future in futures] == [0, 2, 4, 6, 8]
    assert all(name.startswith('suite') for name in names)
    assert len(names) <= 2


def test_pool_cancels_pending_jobs() -> None:
    """Cancel jobs not started yet while a running job finishes."""
    started = threading.Event()
    release = threading.Event()
    cancelled = threading.Event()

    def blocker() -> None:
        started.set()
        release.wait(5)

    pool = SuitePool(1)
    running = pool.execute(blocker)
    pending = pool.execute(lambda: None)
    pending.add_done_callback(lambda _: cancelled.set())
    assert started.wait(5)

    stopper = threading.Thread(target=pool.shutdown, kwargs={'cancel_pending': True})
    stopper.start()

    assert cancelled.wait(5)
    assert not running.done()

    release.set()
    stopper.join(5)

    assert not stopper.is_alive()
    assert pending.cancelled()
    assert running.result() is None


@pytest.mark.parametrize('size', (0, -1))
def test_pool_invalid_size(size: int) -> None:
    """Reject pools without workers."""
    with pytest.raises(ValueError, match=r'at least 1'):
        SuitePool(size)
