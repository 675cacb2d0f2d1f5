"""
Lazy collection views over pymongo.

pymongo executes find() and aggregate() as soon as they are called and its
cursors cannot be counted afterwards, so these views hold the query until it
is iterated. A view opens at most one server cursor and close() releases it;
close() is safe to call repeatedly, after exhaustion, or before iteration.
"""

import logging
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

from pymongo.collection import Collection

logger = logging.getLogger(__name__)

SortSpec = Union[Mapping[str, int], Sequence[Tuple[str, int]]]

# find() options that count_documents() accepts under the same name
_COUNT_OPTIONS = ("collation", "hint", "session", "comment")


def sort_as_list(spec: SortSpec) -> List[Tuple[str, int]]:
    """Normalize a sort spec to the (field, direction) pairs find() expects."""
    if isinstance(spec, Mapping):
        return list(spec.items())
    return [tuple(pair) for pair in spec]


def sort_as_dict(spec: SortSpec) -> Dict[str, int]:
    """Normalize a sort spec to the ordered dict a $sort stage expects."""
    return dict(spec)


class _View:
    """Shared cursor lifecycle for find and aggregation views."""

    def __init__(self, collection: Collection):
        self.collection = collection
        self._cursor = None

    def _open(self):
        raise NotImplementedError

    def __iter__(self) -> Iterator[Dict[str, Any]]:
        self.close()
        self._cursor = self._open()
        return iter(self._cursor)

    def close(self) -> None:
        """Release the server cursor, if one was opened."""
        if self._cursor is not None:
            self._cursor.close()
            self._cursor = None
            logger.debug(f"Closed cursor on {self.collection.name}")


class FindView(_View):
    """
    A find() that has not been sent yet.

    Modifiers return a new view, leaving this one untouched.
    """

    def __init__(
        self,
        collection: Collection,
        filter: Optional[Mapping[str, Any]] = None,
        **options: Any,
    ):
        super().__init__(collection)
        self.filter = dict(filter or {})
        self.options = options

    def _with(self, **changes: Any) -> "FindView":
        return FindView(self.collection, self.filter, **{**self.options, **changes})

    def limit(self, count: int) -> "FindView":
        return self._with(limit=count)

    def skip(self, count: int) -> "FindView":
        return self._with(skip=count)

    def sort(self, spec: SortSpec) -> "FindView":
        return self._with(sort=sort_as_list(spec))

    def projection(self, spec: Mapping[str, Any]) -> "FindView":
        return self._with(projection=dict(spec))

    def count(self) -> int:
        """Count matching documents with the options count_documents shares with find."""
        kwargs = {name: self.options[name] for name in _COUNT_OPTIONS if name in self.options}
        if "max_time_ms" in self.options:
            kwargs["maxTimeMS"] = self.options["max_time_ms"]
        if self.options.get("skip"):
            kwargs["skip"] = self.options["skip"]
        if self.options.get("limit"):
            kwargs["limit"] = self.options["limit"]
        return self.collection.count_documents(self.filter, **kwargs)

    def _open(self):
        logger.debug(f"find on {self.collection.name}: {self.filter!r} {self.options!r}")
        return self.collection.find(self.filter, **self.options)

    def __repr__(self) -> str:
        return f"FindView({self.collection.name!r}, {self.filter!r}, {self.options!r})"


class AggregationView(_View):
    """
    An aggregation pipeline that has not been sent yet.

    `pipeline` is a plain list and may be extended until iteration starts.
    """

    def __init__(
        self,
        collection: Collection,
        pipeline: Optional[Sequence[Mapping[str, Any]]] = None,
        **options: Any,
    ):
        super().__init__(collection)
        self.pipeline: List[Dict[str, Any]] = [dict(stage) for stage in pipeline or []]
        self.options = options

    def count(self) -> int:
        """Run the pipeline with a trailing $count stage."""
        stages = self.pipeline + [{"$count": "count"}]
        cursor = self.collection.aggregate(stages, **self.options)
        try:
            for document in cursor:
                return document["count"]
            return 0
        finally:
            cursor.close()

    def _open(self):
        logger.debug(f"aggregate on {self.collection.name}: {self.pipeline!r}")
        return self.collection.aggregate(self.pipeline, **self.options)

    def __repr__(self) -> str:
        return f"AggregationView({self.collection.name!r}, {self.pipeline!r})"
