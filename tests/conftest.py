"""Shared test fixtures for the gleaner test suite."""

import os

import pytest

from gleaner.host import ReactorIndex
from gleaner.registry import CoordinateRegistry
from tests.fakes import FakeRepository


# Keep the developer's environment out of settings-driven tests
for _key in [k for k in os.environ if k.startswith("GLEANER_")]:
    del os.environ[_key]


@pytest.fixture
def registry():
    return CoordinateRegistry()


@pytest.fixture
def empty_reactor():
    return ReactorIndex()


@pytest.fixture
def repository():
    """Repository that resolves nothing until told otherwise."""
    return FakeRepository()
