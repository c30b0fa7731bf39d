import pytest
from pathlib import Path

from builders import observer_pattern, observer_system

RESOURCES = Path(__file__).parent / "resources"
PROJECT_ROOT = Path(__file__).parent.parent


@pytest.fixture
def resources():
    """Directory of the sample XMI models and templates"""
    return RESOURCES


@pytest.fixture
def project_root():
    return PROJECT_ROOT


@pytest.fixture
def observer():
    """Observer pattern graph with its node and relation rules"""
    return observer_pattern()


@pytest.fixture
def observer_sut():
    """System graph containing exactly one Observer occurrence"""
    return observer_system()
