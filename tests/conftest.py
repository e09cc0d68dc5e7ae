"""Shared fixtures for blueprintmodel tests."""
import pytest

from blueprintmodel.registry import Registry


@pytest.fixture
def registry():
    """Declare blueprints into a private registry for the duration of a test."""
    with Registry(label='test') as scoped:
        yield scoped
