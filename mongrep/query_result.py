"""
Lazy query results.

QueryResult owns a collection view and turns its raw documents into models
one at a time. The view is closed exactly once per terminal access: after
count(), after full iteration, when iteration is stopped early, and when an
error escapes the iteration (the error is re-raised after the close).

A QueryResult must not be iterated by more than one consumer at a time;
concurrent iteration is undefined behaviour.
"""

from typing import Any, Callable, Generic, Iterator, List, Mapping, Optional, TypeVar

from .cursor import AggregationView, SortSpec, sort_as_dict

T = TypeVar("T")


class QueryResult(Generic[T]):
    """
    Iterable of models backed by a single query.

    Attributes:
        view: The FindView or AggregationView this result owns
        model_factory: Callable turning one raw document into one model
    """

    def __init__(self, view: Any, model_factory: Callable[[Mapping[str, Any]], T]):
        self.view = view
        self.model_factory = model_factory

    # ── MODIFIERS ─────────────────────────────────────────

    def _modify(self, method: str, stage: str, param: Any) -> "QueryResult[T]":
        if isinstance(self.view, AggregationView):
            self.view.pipeline.append({f"${stage}": param})
        else:
            self.view = getattr(self.view, method)(param)
        return self

    def limit(self, count: int) -> "QueryResult[T]":
        return self._modify("limit", "limit", count)

    def skip(self, count: int) -> "QueryResult[T]":
        return self._modify("skip", "skip", count)

    def sort(self, spec: SortSpec) -> "QueryResult[T]":
        if isinstance(self.view, AggregationView):
            spec = sort_as_dict(spec)
        return self._modify("sort", "sort", spec)

    def projection(self, spec: Mapping[str, Any]) -> "QueryResult[T]":
        return self._modify("projection", "project", spec)

    project = projection

    # ── TERMINALS ─────────────────────────────────────────

    def count(self) -> int:
        """Number of documents in this result. Closes the view."""
        try:
            return self.view.count()
        finally:
            self.view.close()

    def _generate(self) -> Iterator[T]:
        try:
            for document in self.view:
                yield self.model_factory(document)
        finally:
            self.view.close()

    def __iter__(self) -> Iterator[T]:
        return self._generate()

    def each(self, consumer: Optional[Callable[[T], Any]] = None) -> Optional[Iterator[T]]:
        """
        Iterate over the result.

        Without a consumer a lazy generator is returned. With a consumer every
        model is passed to it inline and None is returned.
        """
        if consumer is None:
            return self._generate()
        models = self._generate()
        try:
            for model in models:
                consumer(model)
        finally:
            # the generator is pinned by the traceback if the consumer raised
            models.close()
        return None

    def first(self) -> Optional[T]:
        """The first model, or None. Only one document is materialized."""
        models = self._generate()
        try:
            return next(models, None)
        finally:
            models.close()

    def to_list(self) -> List[T]:
        return list(self._generate())

    def __repr__(self) -> str:
        return f"QueryResult({self.view!r})"
