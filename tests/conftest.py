"""
Shared fixtures for all mongrep tests.

Provides:
- An in-memory database double (tests/fixtures/memory_collection.py)
- Test model classes and a models namespace
- Registry isolation between tests
"""

import sys
from pathlib import Path
from types import SimpleNamespace
from typing import Dict, List, Optional

import pytest

sys.path.insert(0, str(Path(__file__).parent))

from fixtures.memory_collection import MemoryDatabase  # noqa: E402

from mongrep import Model, MongoModel, Repository, reset_models_namespace  # noqa: E402


# ==============================================================================
# Configuration
# ==============================================================================

def pytest_configure(config):
    config.addinivalue_line(
        "markers", "integration: requires a MongoDB server (set MONGODB_URI)"
    )


# ==============================================================================
# Models
# ==============================================================================

class Item(Model):
    sku: str
    quantity: int = 1


class Test(MongoModel):
    one: Optional[str] = None
    two: Optional[int] = None


class ShoppingCart(MongoModel):
    owner: str
    items: List[Item] = []
    by_slot: Dict[str, Item] = {}
    address: Optional[Dict[str, str]] = None


MODELS = SimpleNamespace(Test=Test, ShoppingCart=ShoppingCart, Item=Item)


class Tests(Repository):
    pass


class ShoppingCarts(Repository):
    pass


# ==============================================================================
# Fixtures
# ==============================================================================

@pytest.fixture(autouse=True)
def isolate_models_namespace():
    """Every test starts without a registered models namespace."""
    reset_models_namespace()
    yield
    reset_models_namespace()


@pytest.fixture
def models():
    return MODELS


@pytest.fixture
def memory_database():
    return MemoryDatabase()


@pytest.fixture
def tests_repository(memory_database, models):
    return Tests(memory_database, models=models)


@pytest.fixture
def carts_repository(memory_database, models):
    return ShoppingCarts(memory_database, models=models)
