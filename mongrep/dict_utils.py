"""Helpers for working with nested document dicts."""

from typing import Any, Dict, Iterable, Mapping

_MISSING = object()


def _lookup(document: Mapping[str, Any], path: str) -> Any:
    level: Any = document
    for part in path.split("."):
        if not isinstance(level, Mapping):
            raise TypeError(
                f"Cannot resolve '{path}': '{part}' is looked up on a "
                f"{type(level).__name__}, not a mapping"
            )
        if part not in level:
            return _MISSING
        level = level[part]
    return level


def slice_with_dot_notation(document: Mapping[str, Any], keys: Iterable[Any]) -> Dict[str, Any]:
    """
    Select the given keys from a document, following dot notation.

    Keys are stringified. Keys missing from the document are left out.

    Example:
        slice_with_dot_notation({"foo": {"bar": "foobar"}, "bar": "foo"}, ["foo.bar"])
        # {"foo.bar": "foobar"}

    Raises:
        TypeError: If a path descends into a value that is not a mapping
    """
    result: Dict[str, Any] = {}
    for key in keys:
        key = str(key)
        value = _lookup(document, key)
        if value is not _MISSING:
            result[key] = value
    return result
