"""
Repository Pattern for MongoDB

Typed, composable data access over pymongo: build queries with Query,
run them through a Repository and iterate the lazy QueryResult of models.

Public API:
- Repository / ReadOnlyRepository: CRUD base classes bound by name
- Query: immutable, composable filter
- QueryResult: lazy result, always releases its cursor
- Model / MongoModel: validating pydantic models flattening to documents
- set_models_namespace(): register where model classes live

Usage:
    import mongrep
    from myapp import models

    mongrep.set_models_namespace(models)

    class ShoppingCarts(mongrep.Repository):
        pass

    carts = ShoppingCarts(mongrep.get_database())
    for cart in carts.find({"owner": "ann"}).limit(10):
        ...
"""

from .config import MongrepConfig, get_database, reset_client
from .errors import (
    ConfigurationError,
    DocumentExistsError,
    DocumentNotFoundError,
    InvalidOptionError,
    InvalidQueryError,
    MongrepError,
    UnpersistedModelError,
    WriteError,
    is_duplicate_key_error,
)
from .logger import get_logger, setup_logging
from .model import Model, MongoModel
from .query import Query
from .query_result import QueryResult
from .read_only import ReadOnlyRepository
from .registry import models_namespace, reset_models_namespace, set_models_namespace
from .repository import Repository

__version__ = "0.1.0"

__all__ = [
    # Repositories
    "Repository",
    "ReadOnlyRepository",
    # Queries and results
    "Query",
    "QueryResult",
    # Models
    "Model",
    "MongoModel",
    "set_models_namespace",
    "models_namespace",
    "reset_models_namespace",
    # Configuration and logging
    "MongrepConfig",
    "get_database",
    "reset_client",
    "setup_logging",
    "get_logger",
    # Errors
    "MongrepError",
    "ConfigurationError",
    "InvalidQueryError",
    "InvalidOptionError",
    "DocumentNotFoundError",
    "UnpersistedModelError",
    "DocumentExistsError",
    "WriteError",
    "is_duplicate_key_error",
]
