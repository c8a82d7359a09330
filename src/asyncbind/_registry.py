from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Mapping

    from ._container import Container

    # Canonical factory shape: every registration variant is normalized into it.
    AsyncFactory = Callable[[Container], Awaitable[Any]]


_KNOWN_OPTIONS = frozenset({"singleton", "interfaces"})


@dataclass(frozen=True)
class RegistrationConfig:
    singleton: bool = True
    interfaces: tuple[str, ...] = ()

    @classmethod
    def from_options(cls, options: Mapping[str, Any] | None = None, **overrides: Any) -> RegistrationConfig:
        """Merge `options` and keyword `overrides` (keywords win) over the defaults.

        Unknown keys are ignored.
        """
        merged = {**(options or {}), **overrides}

        unknown = sorted(set(merged) - _KNOWN_OPTIONS)
        if unknown:
            logger.debug("Ignoring unknown registration options: %s", ", ".join(unknown))

        interfaces = merged.get("interfaces") or ()
        if isinstance(interfaces, str):
            interfaces = (interfaces,)

        return cls(singleton=bool(merged.get("singleton", True)), interfaces=tuple(interfaces))


@dataclass(frozen=True)
class Registration:
    factory: AsyncFactory
    config: RegistrationConfig


class Registry:
    """Service name -> registration, and interface name -> implementing service names."""

    def __init__(self) -> None:
        self._services: dict[str, Registration] = {}
        self._interfaces: dict[str, list[str]] = {}
        self._lock = threading.RLock()

    def add(self, name: str, registration: Registration) -> None:
        with self._lock:
            if name in self._services:
                logger.debug("Replacing registration for service %r", name)
            self._services[name] = registration

            # re-registering appends again: duplicates are kept in registration order
            for interface in registration.config.interfaces:
                self._interfaces.setdefault(interface, []).append(name)

    def get(self, name: str) -> Registration | None:
        return self._services.get(name)

    def implementations(self, interface: str) -> list[str]:
        with self._lock:
            return list(self._interfaces.get(interface, ()))

    def __contains__(self, name: object) -> bool:
        return name in self._services
