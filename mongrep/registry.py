"""
Process-wide models namespace.

Repositories look their model class up by name in a namespace: a module, any
object with model classes as attributes, or a mapping of names to classes.
A namespace can also be passed to each repository directly, which takes
precedence over the one registered here.
"""

import logging
from typing import Any, Mapping, Optional

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

_models_namespace: Optional[Any] = None


def set_models_namespace(namespace: Any) -> None:
    """Register the namespace where model classes are defined."""
    global _models_namespace
    _models_namespace = namespace
    logger.debug(f"Models namespace set to {namespace!r}")


def models_namespace() -> Any:
    """
    Get the registered models namespace.

    Raises:
        ConfigurationError: If no namespace was registered
    """
    if _models_namespace is None:
        raise ConfigurationError("models namespace is unset")
    return _models_namespace


def reset_models_namespace() -> None:
    """Forget the registered namespace."""
    global _models_namespace
    _models_namespace = None


def resolve_model(name: str, namespace: Optional[Any] = None) -> Any:
    """
    Look a model class up by name.

    Args:
        name: Class name, e.g. "ShoppingCart"
        namespace: Namespace to search; the registered one if omitted

    Raises:
        ConfigurationError: If there is no namespace or it lacks the name
    """
    namespace = namespace if namespace is not None else models_namespace()
    if isinstance(namespace, Mapping):
        model = namespace.get(name)
    else:
        model = getattr(namespace, name, None)
    if model is None:
        raise ConfigurationError(
            f"model '{name}' not found in models namespace {namespace!r}",
            model_name=name,
        )
    return model
