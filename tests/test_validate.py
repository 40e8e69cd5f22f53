"""Tests for the Validate task."""

import asyncio
from typing import TYPE_CHECKING, Any

import pytest

from little_sister.errors import DeclarationError, DriverError
from little_sister.names import TaskKind
from little_sister.schema import Outcome, ValidationResult
from little_sister.tasks import Validate

if TYPE_CHECKING:
    from pytest_mock import MockType

    from little_sister.session import Session


def make_validate(expect: Any) -> Validate:  # noqa: ANN401
    """Build a Validate task over the `#banner` element."""
    return Validate.build({
        'name': 'check banner',
        'validate': {'element': {'id': 'banner'}, 'expect': expect},
    })


def test_validate_build() -> None:
    """Keep non-empty clauses in string form."""
    task = make_validate({
        'text': 'Hello',
        'innerHtml': '',
        'css': {'width': 100, 'opacity': 0.5, 'color': ''},
        'property': {'value': 'x', 'scale': 2.0},
    })

    assert task.expect.text == 'Hello'
    assert task.expect.inner_html is None
    assert task.expect.css == {'width': '100', 'opacity': '0.5'}
    assert task.expect.properties == {'value': 'x', 'scale': '2'}


@pytest.mark.parametrize('body, expect_message', (
    pytest.param({'element': {'id': 'a'}}, 'expect field not found', id='missing expect'),
    pytest.param({'element': {'id': 'a'}, 'expect': 'Hello'}, 'expect is not a map', id='expect type'),
    pytest.param({'expect': {'text': 'a'}}, 'No element found', id='missing element'),
    pytest.param({'element': {'id': 'a'}, 'expect': {'title': 'a'}}, 'Unknown expectation: title', id='unknown'),
    pytest.param({'element': {'id': 'a'}, 'expect': {'text': 1}}, 'text is not a string', id='text type'),
    pytest.param({'element': {'id': 'a'}, 'expect': {'css': 'red'}}, 'css is not a map', id='css type'),
    pytest.param(
        {'element': {'id': 'a'}, 'expect': {'property': {'checked': True}}},
        'property value is not a string or number: checked',
        id='boolean property',
    ),
    pytest.param({'element': {'id': 'a'}, 'expect': {}}, 'Validate requires at least one expectation', id='empty'),
    pytest.param(
        {'element': {'id': 'a'}, 'expect': {'text': '', 'innerHtml': '', 'css': {}}},
        'Validate requires at least one expectation',
        id='all clauses empty',
    ),
))
def test_validate_build_errors(body: dict[str, Any], expect_message: str) -> None:
    """Reject invalid Validate declarations."""
    with pytest.raises(DeclarationError) as error:
        Validate.build({'name': 'check', 'validate': body})

    assert error.value.message == expect_message
    assert error.value.kind == TaskKind.VALIDATE


def test_validate_skips_empty_clauses(session: 'Session', driver: 'MockType') -> None:
    """Emit one result per non-empty leaf only."""
    driver.css_value.side_effect = ['1', '3']
    task = make_validate({'text': '', 'innerHtml': '', 'css': {'a': 1, 'b': 2}})

    outcome = asyncio.run(task.execute(session))

    assert outcome.result == (
        ValidationResult(outcome=Outcome.SUCCESS, message='Pass: css a is 1'),
        ValidationResult(outcome=Outcome.FAILED, message="Fail: css b expected '2' but was '3'"),
    )
    driver.text.assert_not_awaited()
    driver.inner_html.assert_not_awaited()


def test_validate_all_clauses(session: 'Session', driver: 'MockType') -> None:
    """Compare every clause with resolved expectations."""
    session.variables['user'] = 'alice'
    driver.text.return_value = 'Hello, alice'
    driver.inner_html.return_value = '<b>Hello</b>'
    driver.css_value.return_value = 'block'
    driver.property_value.return_value = 'false'

    task = make_validate({
        'text': 'Hello, {user}',
        'innerHtml': '<b>Hello</b>',
        'css': {'display': 'block'},
        'property': {'disabled': 'true'},
    })

    outcome = asyncio.run(task.execute(session))

    assert outcome.kind == TaskKind.VALIDATE
    assert [result.message for result in outcome.result or ()] == [
        'Pass: Text is Hello, alice',
        'Pass: innerHtml is <b>Hello</b>',
        'Pass: css display is block',
        "Fail: property disabled expected 'true' but was 'false'",
    ]
    driver.css_value.assert_awaited_once_with(driver.find.return_value, 'display')
    driver.property_value.assert_awaited_once_with(driver.find.return_value, 'disabled')


def test_validate_element_not_found(session: 'Session', driver: 'MockType') -> None:
    """Fail the task when the element is missing."""
    driver.find.side_effect = DriverError('Unable to find element - Type: ID, Value: banner')
    task = make_validate({'text': 'Hello'})

    with pytest.raises(DriverError, match=r'^VALIDATE: Unable to find element'):
        asyncio.run(task.execute(session))


def test_validate_integral_float_expectation(session: 'Session', driver: 'MockType') -> None:
    """Render declared numbers the way live values are rendered."""
    driver.property_value.return_value = '1'
    task = make_validate({'property': {'scale': 1.0}})

    outcome = asyncio.run(task.execute(session))

    assert outcome.result == (
        ValidationResult(outcome=Outcome.SUCCESS, message='Pass: property scale is 1'),
    )
