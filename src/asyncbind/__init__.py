"""Asynchronous, name-based dependency injection container.

Services are registered under string names and resolved on `asyncio`;
a factory's dependencies are inferred from its parameter names (or declared
with `requires`) and resolved before it runs.

Exports:
- `Container`: registry and resolution engine (`register*`, `resolve`, `call`).
- `requires`: decorator declaring a factory's dependencies explicitly.
- `RegistrationConfig`: per-registration options (`singleton`, `interfaces`).
- `AsyncBindError`, `RegistrationError`, `ResolutionError`,
  `UnknownServiceError`, `FactoryError`: raised by registration and resolution.
"""

from ._container import Container
from ._dependencies import names_for, requires
from ._errors import AsyncBindError, FactoryError, RegistrationError, ResolutionError, UnknownServiceError
from ._registry import RegistrationConfig


__all__ = [
    "AsyncBindError",
    "Container",
    "FactoryError",
    "RegistrationConfig",
    "RegistrationError",
    "ResolutionError",
    "UnknownServiceError",
    "names_for",
    "requires",
]
