"""Test suite for the little-sister package.

This package contains unit and integration tests validating suite
parsing, task construction and execution, session handling, the worker
pool and the command-line interface.
"""
