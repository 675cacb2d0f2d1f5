"""
Repository base class.

A repository is bound to one MongoDB collection and one model class, both
derived from the repository's class name:

    class ShoppingCarts(Repository):
        pass

    carts = ShoppingCarts(database)
    carts.collection_name      # "shopping_carts"
    carts.model_class          # models_namespace.ShoppingCart

Reads return lazy QueryResults of models; writes take models and translate
"nothing matched" and duplicate-key failures into mongrep errors.

Error Handling:
- Fail-fast: no retries, every failure propagates to the caller
- Driver errors other than duplicate keys propagate unchanged
"""

from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from inflection import singularize, underscore
from pymongo.database import Database
from pymongo.errors import OperationFailure
from pymongo.results import DeleteResult, InsertOneResult, UpdateResult

from .cursor import AggregationView, FindView, sort_as_list
from .dict_utils import slice_with_dot_notation
from .errors import (
    DocumentExistsError,
    DocumentNotFoundError,
    InvalidOptionError,
    InvalidQueryError,
    UnpersistedModelError,
    is_duplicate_key_error,
)
from .logger import get_logger
from .query import Query
from .query_result import QueryResult
from .registry import resolve_model

QueryInput = Union[Mapping[str, Any], Query, None]
QueryTransform = Callable[[Query], Any]


def normalize_find_options(options: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """
    Validate the recognized find options and map them to pymongo arguments.

    Recognized: limit (positive int), skip (non-negative int), sort (mapping
    or list of (field, direction) pairs), projection / project (mapping).
    Any other key is passed to Collection.find unchanged.

    Raises:
        InvalidOptionError: If a recognized option has an unusable value
    """
    normalized: Dict[str, Any] = {}
    for key, value in (options or {}).items():
        if key == "limit":
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise InvalidOptionError(key, value, "expected a positive integer")
            normalized["limit"] = value
        elif key == "skip":
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise InvalidOptionError(key, value, "expected a non-negative integer")
            normalized["skip"] = value
        elif key == "sort":
            if isinstance(value, (str, bytes)) or not isinstance(value, (Mapping, Sequence)):
                raise InvalidOptionError(key, value, "expected a field-to-direction mapping")
            normalized["sort"] = sort_as_list(value)
        elif key in ("projection", "project"):
            if not isinstance(value, Mapping):
                raise InvalidOptionError(key, value, "expected a field inclusion mapping")
            normalized["projection"] = dict(value)
        else:
            normalized[key] = value
    return normalized


class Repository:
    """
    Base class for all repositories.

    Subclass it with the plural name of the model; override the derived
    names with the `__collection_name__` / `__model__` class attributes.

    Attributes:
        collection: The pymongo Collection, resolved once at construction
    """

    __collection_name__: Optional[str] = None
    __model__: Optional[type] = None

    def __init__(self, database: Database, models: Optional[Any] = None):
        """
        Bind the repository to its collection.

        Args:
            database: pymongo Database (anything supporting database[name])
            models: Models namespace; the registered one is used if omitted
        """
        self._models = models
        self.collection = database[self.collection_name]
        self.logger = get_logger(__name__, collection=self.collection_name)

    @property
    def collection_name(self) -> str:
        """Underscored class name, e.g. ShoppingCarts -> shopping_carts."""
        return self.__collection_name__ or underscore(type(self).__name__)

    @property
    def model_class(self) -> type:
        """
        Model class for this repository, e.g. ShoppingCarts -> ShoppingCart.

        Raises:
            ConfigurationError: If the models namespace is unset or lacks it
        """
        if self.__model__ is not None:
            return self.__model__
        return resolve_model(singularize(type(self).__name__), self._models)

    # ── READ ──────────────────────────────────────────────

    def find(
        self,
        query: QueryInput = None,
        options: Optional[Mapping[str, Any]] = None,
        transform: Optional[QueryTransform] = None,
    ) -> QueryResult:
        """
        Find documents matching a query.

        Args:
            query: Filter dict or Query (empty query if omitted)
            options: Find options (limit, skip, sort, projection, ...)
            transform: Called with the Query; its return value is used instead

        Returns:
            Lazy QueryResult of models

        Raises:
            InvalidQueryError: If the final query is not a Query
            InvalidOptionError: If a recognized option is malformed

        Example:
            carts.find({"owner": "ann"}, {"limit": 1})
            carts.find(transform=lambda q: q.where({"owner": "ann"}).or_({"owner": "bob"}))
        """
        query_object = self._build_query(query, transform)
        view = FindView(self.collection, query_object.as_filter(), **normalize_find_options(options))
        self.logger.debug(f"find {query_object!r}")
        return QueryResult(view, self._model_factory())

    def find_one(
        self,
        query: QueryInput = None,
        options: Optional[Mapping[str, Any]] = None,
        transform: Optional[QueryTransform] = None,
    ) -> Any:
        """
        Find the first document matching a query.

        Same arguments as find().

        Raises:
            DocumentNotFoundError: If no document matches
        """
        query_object = self._build_query(query, transform)
        model = self.find(query_object, options).first()
        if model is None:
            raise DocumentNotFoundError(self.collection_name, query_object.as_filter())
        return model

    def aggregate(self, pipeline: Sequence[Mapping[str, Any]], **options: Any) -> QueryResult:
        """
        Run an aggregation pipeline, producing models.

        limit/skip/sort/projection on the result append pipeline stages.
        """
        view = AggregationView(self.collection, pipeline, **options)
        self.logger.debug(f"aggregate {view.pipeline!r}")
        return QueryResult(view, self._model_factory())

    def distinct(self, field: str) -> List[Any]:
        """
        Distinct values of a field (dot notation allowed) over the collection.
        """
        return self.collection.distinct(field)

    # ── CREATE ────────────────────────────────────────────

    def insert(self, model: Any) -> InsertOneResult:
        """
        Insert a model as a new document.

        Returns:
            The driver's InsertOneResult

        Raises:
            DocumentExistsError: If a document with the same _id exists
            OperationFailure: Any other driver failure, unchanged
        """
        document = model.to_dict()
        try:
            result = self.collection.insert_one(document)
        except OperationFailure as error:
            if not is_duplicate_key_error(error):
                raise
            self.logger.warning(f"insert rejected, duplicate _id {document.get('_id')!r}")
            raise DocumentExistsError(self.collection_name, document.get("_id")) from error
        self.logger.debug(f"inserted {result.inserted_id!r}")
        return result

    # ── UPDATE ────────────────────────────────────────────

    def update(self, model: Any, fields: Optional[Iterable[str]] = None) -> UpdateResult:
        """
        Write a model back to its document.

        Args:
            model: Persisted model (must have an id)
            fields: Field paths to $set (dot notation allowed). The whole
                document is replaced if omitted.

        Returns:
            The driver's UpdateResult

        Raises:
            UnpersistedModelError: If the model has no id
            DocumentNotFoundError: If no document has the model's id
        """
        self._check_persistence(model)
        id_query = self._id_query(model)
        document = model.to_dict()
        document.pop("_id", None)

        if fields is None:
            result = self.collection.replace_one(id_query, document)
        else:
            update = {"$set": slice_with_dot_notation(document, fields)}
            result = self.collection.update_one(id_query, update)

        if result.matched_count == 0:
            self.logger.warning(f"update matched nothing for {id_query!r}")
            raise DocumentNotFoundError(self.collection_name, id_query)
        return result

    # ── DELETE ────────────────────────────────────────────

    def delete(self, model: Any) -> DeleteResult:
        """
        Delete a model's document.

        Raises:
            UnpersistedModelError: If the model has no id
            DocumentNotFoundError: If no document has the model's id
        """
        self._check_persistence(model)
        id_query = self._id_query(model)
        result = self.collection.delete_one(id_query)
        if result.deleted_count == 0:
            self.logger.warning(f"delete matched nothing for {id_query!r}")
            raise DocumentNotFoundError(self.collection_name, id_query)
        return result

    # ── HELPERS ───────────────────────────────────────────

    def _build_query(self, query: QueryInput, transform: Optional[QueryTransform]) -> Query:
        if query is None:
            query_object = Query()
        elif isinstance(query, Query):
            query_object = query
        elif isinstance(query, Mapping):
            query_object = Query(query)
        else:
            raise InvalidQueryError(query)

        if transform is not None:
            query_object = transform(query_object)
        if not isinstance(query_object, Query):
            raise InvalidQueryError(query_object)
        return query_object

    def _model_factory(self) -> Callable[[Mapping[str, Any]], Any]:
        model_class = self.model_class
        return getattr(model_class, "from_document", model_class)

    @staticmethod
    def _id_query(model: Any) -> Dict[str, Any]:
        return {"_id": model.id}

    @staticmethod
    def _check_persistence(model: Any) -> None:
        identity = getattr(model, "id", None)
        if identity is None or identity == "":
            raise UnpersistedModelError(model)
