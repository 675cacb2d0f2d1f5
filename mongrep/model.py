"""
Document models.

Models are pydantic models, validated on construction and on assignment,
that flatten into plain dicts (nested models, lists of models and dicts of
models included) for submission to MongoDB. MongoModel adds the `_id`
identity field, exposed as `id`.

    class Cart(MongoModel):
        owner: str
        items: List[Item] = []

    cart = Cart(owner="ann")
    cart.is_persisted     # False
    cart.to_dict()        # {"owner": "ann", "items": []}
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Type, TypeVar, Union, get_args, get_origin

from pydantic import BaseModel, ConfigDict, Field, create_model

M = TypeVar("M", bound="Model")


class Model(BaseModel):
    """
    Base class for all models.

    Raw documents are validated on construction; nested documents are
    accepted as dicts for model-typed fields. Assignments are validated too.
    """

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    @classmethod
    def from_document(cls: Type[M], document: Mapping[str, Any]) -> M:
        """Build a model from a raw document as returned by the driver."""
        return cls.model_validate(dict(document))

    def to_dict(self) -> Dict[str, Any]:
        """Recursively convert the model into plain dicts and lists."""
        return self.model_dump(by_alias=True)

    @classmethod
    def partial(cls, *fields: str, **nested: Any) -> Type["Model"]:
        """
        Build a model class holding only some of this model's fields.

        Positional arguments name plain fields. Keyword arguments name fields
        whose model type should itself be narrowed; this works through
        List[...], Dict[..., ...] and Optional[...] annotations.

            Order.partial("total", customer=["name"], lines=["sku"])
        """
        definitions: Dict[str, Tuple[Any, Any]] = {}
        for name in list(fields) + list(nested):
            try:
                info = cls.model_fields[name]
            except KeyError:
                raise AttributeError(f"{cls.__name__} has no field '{name}'") from None

            annotation = info.annotation
            if name in nested:
                annotation = _partial_annotation(annotation, nested[name])

            options: Dict[str, Any] = {"alias": info.alias}
            if info.default_factory is not None:
                options["default_factory"] = info.default_factory
            elif not info.is_required():
                options["default"] = info.default
            definitions[name] = (annotation, Field(**options))

        labels = [repr(name) for name in fields] + [f"{name}={nested[name]!r}" for name in nested]
        class_name = f"{cls.__name__}.Partial[{', '.join(labels)}]"
        return create_model(class_name, __base__=Model, **definitions)


def _partial_annotation(annotation: Any, fields: Union[Sequence[str], Mapping[str, Any]]) -> Any:
    if isinstance(annotation, type) and issubclass(annotation, Model):
        if isinstance(fields, Mapping):
            return annotation.partial(**fields)
        return annotation.partial(*fields)

    origin = get_origin(annotation)
    args = get_args(annotation)
    if origin is list:
        return List[_partial_annotation(args[0], fields)]
    if origin is dict:
        return Dict[args[0], _partial_annotation(args[1], fields)]
    if origin is Union or (origin is not None and type(None) in args):
        narrowed = tuple(
            arg if arg is type(None) else _partial_annotation(arg, fields) for arg in args
        )
        return Union[narrowed]
    raise TypeError(f"Cannot build a partial type out of {annotation!r}")


class MongoModel(Model):
    """
    Base class for models stored as MongoDB documents.

    The identity lives in `_id` on the document and in `id` on the model. It
    is None until the document has been persisted.
    """

    id: Optional[Any] = Field(default=None, alias="_id")

    @property
    def is_persisted(self) -> bool:
        return self.id is not None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a document, leaving out an unset `_id`."""
        document = super().to_dict()
        if document.get("_id") is None:
            document.pop("_id", None)
        return document
