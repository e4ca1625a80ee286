"""Test configuration and fixtures for the person API."""

from tests.fixtures import *  # noqa: F401,F403
