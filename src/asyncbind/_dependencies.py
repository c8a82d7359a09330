from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Any, TypeVar


if TYPE_CHECKING:
    from collections.abc import Callable

    F = TypeVar("F", bound=Callable[..., Any])


REQUIRES_ATTR = "__requires__"

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


def requires(*names: str) -> Callable[[F], F]:
    """Declare the services a factory depends on, in the order it receives them.

    The declaration replaces parameter-name introspection for that factory:

      @requires("db", "cache")
      def make_repo(database, cache_client): ...
    """

    def decorate(factory: F) -> F:
        setattr(factory, REQUIRES_ATTR, tuple(names))
        return factory

    return decorate


def declared_dependencies(factory: Callable[..., Any]) -> list[str] | None:
    declared = getattr(factory, REQUIRES_ATTR, None)
    if declared is None:
        return None
    return list(declared)


def positional_parameters(factory: Callable[..., Any]) -> list[str]:
    """Names of the positional parameters of `factory`, in declaration order.

    Classes are inspected through their constructor (without `self`).
    `*args`, `**kwargs` and keyword-only parameters are not dependencies.
    """
    try:
        sig = inspect.signature(factory)
    except (TypeError, ValueError):
        # builtins without introspectable signature
        return []

    return [p.name for p in sig.parameters.values() if p.kind in _POSITIONAL]


def names_for(factory: Callable[..., Any], *, drop_last: bool = False) -> list[str]:
    """Service names to resolve before invoking `factory`.

    An explicit `requires` declaration is returned verbatim. Otherwise the
    positional parameter names are used, without the last one when
    `drop_last` is set (that parameter receives the completion callback).
    """
    declared = declared_dependencies(factory)
    if declared is not None:
        return declared

    names = positional_parameters(factory)
    if drop_last:
        return names[:-1]
    return names
