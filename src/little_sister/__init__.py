"""YAML-declared browser task runner.

The `little_sister` package reads task suites written in YAML, validates
them into an ordered sequence of typed tasks and drives a browser session
through that sequence, reporting structured pass/fail outcomes.

Key features:
- a closed vocabulary of browser tasks (link, click, send_key, wait, ...);
- fail-fast validation of suites before any browser session exists;
- `{name}` / `{name|default}` variable substitution at execution time;
- concurrent execution of suite directories on a fixed worker pool.
"""
