"""Test suite for the pytest-cucu package.

This package contains unit and integration tests validating
specification parsing, step resolution, hook and outline handling,
execution semantics, the command-line runner, and pytest integration.
"""
