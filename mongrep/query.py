"""
Composable MongoDB query fragments.

A Query wraps a filter dict and combines with other queries without ever
mutating either side:

    first = Query({"name": "test", "value": 5})
    second = Query({"value": 6})
    (first & second).to_dict()   # {"name": "test", "value": 6}
    (first | second).to_dict()   # {"$or": [{...first...}, {"value": 6}]}

Note the asymmetry between `&` / where() and and_(): the former merge the
two filters key by key, the latter builds an explicit "$and" node. Both are
kept because they select different documents when the same key appears on
both sides.
"""

import copy
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Union


class Query:
    """An immutable MongoDB filter."""

    __slots__ = ("_query",)

    def __init__(self, query: Optional[Mapping[str, Any]] = None):
        object.__setattr__(self, "_query", copy.deepcopy(dict(query or {})))

    def __setattr__(self, name, value):
        raise AttributeError("Query is immutable")

    def __reduce__(self):
        return (type(self), (self._query,))

    def __and__(self, other: Union["Query", Mapping[str, Any]]) -> "Query":
        """Shallow merge; keys of `other` win, nested values are replaced."""
        other_filter = _filter_of(other)
        if other_filter is None:
            return NotImplemented
        return type(self)({**self._query, **other_filter})

    def __or__(self, other: Union["Query", Mapping[str, Any]]) -> "Query":
        """Wrap both filters in a new "$or" node (never flattened)."""
        other_filter = _filter_of(other)
        if other_filter is None:
            return NotImplemented
        return type(self)({"$or": [self._query, other_filter]})

    def merge(self, other: Union["Query", Mapping[str, Any]]) -> "Query":
        """Method form of `&`."""
        return self & other

    def where(self, query: Mapping[str, Any]) -> "Query":
        """
        Merge a filter dict into this query.

        Mainly for use in Repository.find with a transform:

            repo.find(transform=lambda q: q.where({"name": "a"}).or_({"name": "b"}))
        """
        return self & type(self)(query)

    def or_(self, query: Mapping[str, Any]) -> "Query":
        """Combine with a filter dict through "$or"."""
        return self | type(self)(query)

    def and_(self, query: Mapping[str, Any]) -> "Query":
        """
        Combine with a filter dict through an explicit "$and" node.

        Unlike where(), conditions on the same key are both kept:

            Query({"foo": {"bar": 1}}).and_({"foo": {"foo": 2}}).to_dict()
            # {"$and": [{"foo": {"bar": 1}}, {"foo": {"foo": 2}}]}
        """
        return type(self)({"$and": [dict(self._query), dict(query)]})

    def to_dict(self) -> Mapping[str, Any]:
        """Read-only view of a private copy of the filter."""
        return MappingProxyType(copy.deepcopy(self._query))

    def as_filter(self) -> Dict[str, Any]:
        """Plain dict copy suitable for passing to the driver."""
        return copy.deepcopy(self._query)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Query):
            return NotImplemented
        return self._query == other._query

    __hash__ = None

    def __repr__(self) -> str:
        return f"Query({self._query!r})"


def _filter_of(value: Any) -> Optional[Dict[str, Any]]:
    if isinstance(value, Query):
        return value._query
    if isinstance(value, Mapping):
        return dict(value)
    return None
