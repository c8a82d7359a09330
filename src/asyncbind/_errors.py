from __future__ import annotations


class AsyncBindError(Exception):
    """Base class for every error raised by the container."""


class RegistrationError(AsyncBindError, ValueError):
    """A registration call was rejected before any asynchronous work started."""


class ResolutionError(AsyncBindError, RuntimeError):
    pass


class UnknownServiceError(ResolutionError):
    """The name is neither a registered service nor an interface with implementations."""

    def __init__(self, name: object) -> None:
        super().__init__(f"unknown service or interface {name}")
        self.name = name


class FactoryError(ResolutionError):
    """A callback-style factory reported a failure that is not an exception instance."""

    def __init__(self, error: object) -> None:
        super().__init__(f"factory reported an error: {error!r}")
        self.error = error
