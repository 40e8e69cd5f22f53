"""Tests for suite document parsing."""

from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from little_sister.core import SuiteParser
from little_sister.errors import DeclarationError
from little_sister.names import TaskKind
from little_sister.tasks import Click, Close, Link, Validate

if TYPE_CHECKING:
    from pyfakefs.fake_filesystem import FakeFilesystem


TEST_SUITE_CONTENT = '''
meta_data:
  owner: qa
tasks:
  - name: open home page
    link:
      url: https://{host|example.com}/
  - name: press login
    click:
      element:
        id: login
  - name: check title
    validate:
      element:
        xPath: //h1
      expect:
        text: Welcome
validate:
  - check title
'''

TEST_SUITE_CLOSED_CONTENT = '''
tasks:
  - name: open home page
    link:
      url: https://example.com/
  - name: done
    close: yes
'''

TEST_SUITE_CLOSED_EARLY_CONTENT = '''
tasks:
  - name: open home page
    link:
      url: https://example.com/
  - name: done
    close: yes
  - name: press login
    click:
      element:
        id: login
'''

TEST_INVALID_YAML = '''
tasks:
  - name: open home page
    link: [
'''


def test_parse_suite() -> None:
    """Parse a suite and append the terminal Close."""
    suite = SuiteParser().parse(TEST_SUITE_CONTENT)

    assert [type(task) for task in suite.tasks] == [Link, Click, Validate, Close]
    assert suite.tasks[-1].name == 'closing web driver session'
    assert suite.meta_data == {'owner': 'qa'}
    assert suite.validate_tasks == ('check title',)
    assert suite.path is None


def test_parse_suite_with_close() -> None:
    """Keep a declared terminal Close without adding another one."""
    suite = SuiteParser().parse(TEST_SUITE_CLOSED_CONTENT)

    assert [task.kind for task in suite.tasks] == [TaskKind.LINK, TaskKind.CLOSE]
    assert suite.tasks[-1].name == 'done'


def test_parse_suite_with_early_close() -> None:
    """Append a Close when the declared one is not the last task."""
    suite = SuiteParser().parse(TEST_SUITE_CLOSED_EARLY_CONTENT)

    assert [task.kind for task in suite.tasks] == [
        TaskKind.LINK,
        TaskKind.CLOSE,
        TaskKind.CLICK,
        TaskKind.CLOSE,
    ]


def test_parse_file(fs: 'FakeFilesystem') -> None:
    """Parse a suite file and keep its path."""
    fs.create_file('suites/login.yml', contents=TEST_SUITE_CONTENT)

    suite = SuiteParser().parse_file(Path('suites/login.yml'))

    assert suite.path == Path('suites/login.yml')
    assert len(suite.tasks) == 4


def test_parse_file_not_found(fs: 'FakeFilesystem') -> None:
    """Report unreadable files with their name."""
    with pytest.raises(DeclarationError, match=r'Unable to read file') as error:
        SuiteParser().parse_file(Path('missing.yml'))

    assert 'in "missing.yml"' in str(error.value)


def test_parse_invalid_yaml() -> None:
    """Report YAML errors with their position."""
    with pytest.raises(DeclarationError, match=r'Unable to deserialize file') as error:
        SuiteParser().parse(TEST_INVALID_YAML)

    assert error.value.context is not None
    assert error.value.context.get('line_num') is not None


@pytest.mark.parametrize('content', (
    pytest.param('', id='empty document'),
    pytest.param('- name: a\n', id='list document'),
    pytest.param('meta_data: {}\n', id='missing tasks'),
    pytest.param('tasks: {}\n', id='tasks not a list'),
    pytest.param('tasks: []\nextra: 1\n', id='unknown top-level key'),
    pytest.param('tasks: []\nvalidate: check\n', id='filter not a list'),
))
def test_parse_invalid_document(content: str) -> None:
    """Reject documents of the wrong shape."""
    with pytest.raises(DeclarationError, match=r'Unable to deserialize file'):
        SuiteParser().parse(content)


def test_parse_empty_tasks() -> None:
    """Require at least one task."""
    with pytest.raises(DeclarationError, match=r'First Task not found'):
        SuiteParser().parse('tasks: []\n')


def test_parse_first_task_not_link() -> None:
    """Require the first task to open a page."""
    content = '''
tasks:
  - name: press login
    click:
      element:
        id: login
'''

    with pytest.raises(DeclarationError) as error:
        SuiteParser().parse(content)

    assert error.value.message == 'First Task should be a Link'
    assert error.value.kind == TaskKind.CLICK
    assert error.value.declaration == {'name': 'press login', 'click': {'element': {'id': 'login'}}}


@pytest.mark.parametrize('declaration, expect_message, kind', (
    pytest.param("'just text'", 'Task data is Malformed', None, id='scalar'),
    pytest.param('{name: a}', 'Task data is Malformed', None, id='name only'),
    pytest.param('{name: a, link: {url: b}, click: {}}', 'Task data is Malformed', None, id='two kinds'),
    pytest.param('{title: a, link: {url: b}}', 'Task data is Malformed', None, id='no name'),
    pytest.param('{name: a, jump: {}}', 'Unknown Task Type: jump', None, id='unknown kind'),
    pytest.param('{name: a, 1: {}}', 'Unknown Task Type: 1', None, id='non-string kind'),
    pytest.param('{name: 1, link: {url: b}}', 'Task name is not a string', TaskKind.LINK, id='name type'),
    pytest.param("{name: '', link: {url: b}}", 'Task name can`t be empty', TaskKind.LINK, id='empty name'),
    pytest.param('{name: a, link: }', 'Task data is Malformed', TaskKind.LINK, id='null body'),
    pytest.param('{name: a, link: {}}', 'Task data is empty', TaskKind.LINK, id='empty body'),
    pytest.param('{name: a, link: {href: b}}', 'url field not found', TaskKind.LINK, id='missing url'),
))
def test_parse_invalid_declaration(declaration: str, expect_message: str,
                                   kind: TaskKind | None) -> None:
    """Reject invalid declarations with their position and kind."""
    content = f'tasks:\n  - {{name: start, link: {{url: x}}}}\n  - {declaration}\n'

    with pytest.raises(DeclarationError) as error:
        SuiteParser().parse(content)

    assert error.value.message == expect_message
    assert error.value.kind == kind
    assert error.value.context is not None
    assert error.value.context.get('task_num') == 1
    assert 'on task 2' in str(error.value)


def test_parse_unknown_validate_filter() -> None:
    """Reject filters naming no Validate task."""
    content = '''
tasks:
  - name: open home page
    link:
      url: https://example.com/
validate:
  - open home page
'''

    with pytest.raises(DeclarationError, match=r'Unknown validate task: open home page'):
        SuiteParser().parse(content)


def test_parse_with_custom_registry() -> None:
    """Restrict the vocabulary through the registry."""
    parser = SuiteParser({TaskKind.LINK: Link, TaskKind.CLOSE: Close})

    with pytest.raises(DeclarationError, match=r'Unknown Task Type: click'):
        parser.parse(TEST_SUITE_CONTENT)
