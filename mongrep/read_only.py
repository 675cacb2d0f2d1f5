"""
Read-only repositories.

Mix ReadOnlyRepository in front of Repository to reject every write:

    class Reports(ReadOnlyRepository, Repository):
        pass
"""

from typing import Any

from .errors import WriteError


class ReadOnlyRepository:
    """Mixin overriding the write methods of Repository."""

    def insert(self, *args: Any, **kwargs: Any):
        """Always raises WriteError."""
        raise WriteError("insert")

    def update(self, *args: Any, **kwargs: Any):
        """Always raises WriteError."""
        raise WriteError("update")

    def delete(self, *args: Any, **kwargs: Any):
        """Always raises WriteError."""
        raise WriteError("delete")
