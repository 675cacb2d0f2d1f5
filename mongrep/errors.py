"""
Error types raised by mongrep.

Every error carries the context needed to identify the failing operation
(collection name, offending query or model) as attributes, not only in the
message.
"""

from typing import Any, Optional

from pymongo.errors import DuplicateKeyError, OperationFailure

# Server message prefix for unique index violations
DUPLICATE_KEY_MARKER = "E11000"
DUPLICATE_KEY_CODE = 11000


class MongrepError(Exception):
    """Base class for all mongrep errors."""


class ConfigurationError(MongrepError, RuntimeError):
    """Raised when the models namespace is unset or lacks a model."""

    def __init__(self, message: str, model_name: Optional[str] = None):
        self.model_name = model_name
        super().__init__(message)


class InvalidQueryError(MongrepError, TypeError):
    """Raised when find() ends up with something that is not a Query."""

    def __init__(self, query: Any):
        self.query_type = type(query)
        super().__init__(f"Invalid type for query ({self.query_type.__name__})")


class InvalidOptionError(MongrepError, ValueError):
    """Raised when a recognized find option has an unusable value."""

    def __init__(self, option: str, value: Any, reason: str):
        self.option = option
        self.value = value
        super().__init__(f"Invalid value for option '{option}' ({value!r}): {reason}")


class DocumentNotFoundError(MongrepError, LookupError):
    """Raised when a lookup or a write matched no document."""

    def __init__(self, collection: str, query: Any = None):
        self.collection = collection
        self.query = query
        super().__init__(f"No document in '{collection}' matching {query!r}")


class UnpersistedModelError(MongrepError, ValueError):
    """Raised when update/delete is given a model without an id."""

    def __init__(self, model: Any):
        self.model = model
        super().__init__(f"{type(model).__name__} is not yet persisted (no _id)")


class DocumentExistsError(MongrepError, ValueError):
    """Raised when an insert collides with an existing document."""

    def __init__(self, collection: str, document_id: Any = None):
        self.collection = collection
        self.document_id = document_id
        super().__init__(
            f"Document with _id {document_id!r} already exists in '{collection}'"
        )


class WriteError(MongrepError, PermissionError):
    """Raised by read-only repositories on every write."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__("this repository is read-only")


def is_duplicate_key_error(error: Exception) -> bool:
    """
    Check whether a driver error is a unique index violation.

    Error codes have shifted between server versions, so the message prefix
    is checked as well as the code.
    """
    if isinstance(error, DuplicateKeyError):
        return True
    if not isinstance(error, OperationFailure):
        return False
    if error.code == DUPLICATE_KEY_CODE:
        return True
    details = error.details or {}
    message = details.get("errmsg") or str(error)
    return message.startswith(DUPLICATE_KEY_MARKER)
