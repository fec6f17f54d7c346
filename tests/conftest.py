# tests/conftest.py
import pytest

from physical.units.registry import DEFAULT_REGISTRY as _ureg
from physical.units.registry import _bootstrap_default_registry


@pytest.fixture(scope="session")
def ureg():
    return _ureg


@pytest.fixture()
def fresh_registry():
    """Fully bootstrapped registry that has not been frozen yet."""
    return _bootstrap_default_registry()
