from __future__ import annotations

import asyncio
import inspect
import logging
import threading
from typing import TYPE_CHECKING, Any, overload

from ._dependencies import declared_dependencies, names_for, positional_parameters
from ._errors import FactoryError, RegistrationError, UnknownServiceError
from ._registry import Registration, RegistrationConfig, Registry


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable, Coroutine, Mapping, Sequence

    from ._registry import AsyncFactory

    Setup = Callable[["Container"], object]


class Container:
    """Asynchronous DI container keyed by service name.

    - register callback-style, coroutine, sync, constructor factories or instances
    - dependencies are taken from parameter names or a `requires` declaration
    - lifetimes: singleton (default) / transient
    - interfaces group several services, resolved together as a list.
    """

    def __init__(self, setup: Setup | None = None) -> None:
        self._registry = Registry()
        self._instances: dict[str, object] = {}

        if setup is not None:
            setup(self)

    def register(
        self,
        name: str,
        factory: Callable[..., Any],
        options: Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> None:
        """Register a factory that reports its result through a trailing callback.

        The last positional parameter receives `done(error, value=None)`; the
        leading ones are dependencies, resolved by name before the call.

        Example:
          def make_repo(db, done):
              done(None, Repo(db))

          container.register("repo", make_repo, singleton=False)

        """
        _validate_name(name)
        _validate_factory(factory)

        params = positional_parameters(factory)
        if not params:
            msg = "the factory function needs at least 1 argument (callback)"
            raise RegistrationError(msg)

        if len(params) == 1 and declared_dependencies(factory) is None:
            produce = _callback_factory(factory)
        else:
            produce = _injecting_callback_factory(factory)

        self._add(name, produce, options, kwargs)

    def register_async(
        self,
        name: str,
        factory: Callable[..., Coroutine[Any, Any, Any]],
        options: Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> None:
        """Register an `async def` factory; its parameters are dependencies, its return value the service."""
        _validate_name(name)
        _validate_factory(factory)

        if not inspect.iscoroutinefunction(factory):
            msg = "the factory function must be a coroutine function"
            raise RegistrationError(msg)

        async def produce(container: Container) -> object:
            args = await container.resolve(names_for(factory))
            return await factory(*args)

        self._add(name, produce, options, kwargs)

    def register_sync(
        self,
        name: str,
        factory: Callable[..., Any],
        options: Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> None:
        """Register a plain function whose return value is the service."""
        _validate_name(name)
        _validate_factory(factory)

        if inspect.iscoroutinefunction(factory):
            msg = "the factory function is a coroutine function, use `register_async`"
            raise RegistrationError(msg)

        async def produce(container: Container) -> object:
            args = await container.resolve(names_for(factory))
            return factory(*args)

        self._add(name, produce, options, kwargs)

    def register_ctor(
        self,
        name: str,
        cls: type,
        options: Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> None:
        """Register a class; resolved dependencies become its constructor arguments."""
        _validate_name(name)

        if not inspect.isclass(cls):
            msg = "the constructor must be a class"
            raise RegistrationError(msg)

        async def produce(container: Container) -> object:
            args = await container.resolve(names_for(cls))
            return cls(*args)

        self._add(name, produce, options, kwargs)

    def register_instance(
        self,
        name: str,
        instance: object,
        options: Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> None:
        """Register a pre-built instance. Every resolution returns that same object."""
        _validate_name(name)

        if instance is None:
            msg = "instance is required"
            raise RegistrationError(msg)

        async def produce(container: Container) -> object:
            return instance

        self._add(name, produce, options, kwargs)

    def is_registered(self, name: str) -> bool:
        return name in self._registry

    def implementations(self, interface: str) -> list[str]:
        """Service names declaring `interface`, in registration order."""
        return self._registry.implementations(interface)

    def _add(
        self,
        name: str,
        produce: AsyncFactory,
        options: Mapping[str, Any] | None,
        overrides: dict[str, Any],
    ) -> None:
        config = RegistrationConfig.from_options(options, **overrides)
        self._registry.add(name, Registration(factory=produce, config=config))
        logger.debug("Registered service %r (singleton=%s, interfaces=%s)", name, config.singleton, config.interfaces)

    @overload
    async def resolve(self, name: str) -> Any: ...

    @overload
    async def resolve(self, name: Sequence[str]) -> list[Any]: ...

    async def resolve(self, name: str | Sequence[str]) -> Any:
        """Resolve a service name, an interface name or a list of names.

        - list/tuple: every name is resolved concurrently, results keep the input order.
        - registered service: cached singleton, or a fresh value from its factory.
        - interface: the list of its implementations, even when there is only one.
        - anything else: `UnknownServiceError`.
        The first failure among several names fails the whole call.
        """
        if isinstance(name, (list, tuple)):
            return await self._resolve_many(name)

        reg = self._registry.get(name)

        if reg is None:
            implementations = self._registry.implementations(name)
            if implementations:
                return await self._resolve_many(implementations)

            # never fail before yielding to the loop
            await asyncio.sleep(0)
            raise UnknownServiceError(name)

        if reg.config.singleton and name in self._instances:
            return self._instances[name]

        logger.debug("Invoking factory for service %r", name)
        instance = await reg.factory(self)

        if reg.config.singleton:
            # concurrent first resolutions may both get here; the last write is kept
            logger.debug("Caching singleton %r", name)
            self._instances[name] = instance

        return instance

    async def _resolve_many(self, names: Sequence[str]) -> list[Any]:
        if not names:
            return []
        return list(await asyncio.gather(*(self.resolve(n) for n in names)))

    async def call(self, factory: Callable[..., Any]) -> Any:
        """Invoke a callback-style function with its dependencies injected.

        The dependencies are resolved first; if any fails, `factory` is not called.
        The value `factory` passes to its trailing callback is returned.
        """
        args = await self.resolve(names_for(factory, drop_last=True))
        return await _complete(factory, args)


class Completion:
    """The `done(error, value=None)` callback handed to callback-style factories.

    Settles `future` on its loop, so it may be called from any thread.
    Only the first call counts.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop, future: asyncio.Future[Any], factory: object) -> None:
        self._loop = loop
        self._future = future
        self._factory = factory
        self._called = False
        self._lock = threading.Lock()

    @property
    def called(self) -> bool:
        return self._called

    def __call__(self, error: object = None, value: object = None) -> None:
        with self._lock:
            if self._called:
                logger.warning("Completion callback of %r invoked more than once; ignoring", self._factory)
                return
            self._called = True

        self._loop.call_soon_threadsafe(self._settle, error, value)

    def _settle(self, error: object, value: object) -> None:
        if self._future.done():
            # cancelled while waiting
            return

        if error is None:
            self._future.set_result(value)
        elif isinstance(error, BaseException):
            self._future.set_exception(error)
        else:
            self._future.set_exception(FactoryError(error))


async def _complete(factory: Callable[..., Any], args: Sequence[Any]) -> Any:
    loop = asyncio.get_running_loop()
    future = loop.create_future()
    done = Completion(loop, future, factory)

    try:
        factory(*args, done)
    except Exception as exc:
        if done.called:
            logger.warning("Factory %r raised after completing; exception dropped", factory, exc_info=exc)
        else:
            done(exc)

    return await future


def _callback_factory(factory: Callable[..., Any]) -> AsyncFactory:
    async def produce(container: Container) -> object:
        return await _complete(factory, ())

    return produce


def _injecting_callback_factory(factory: Callable[..., Any]) -> AsyncFactory:
    async def produce(container: Container) -> object:
        return await container.call(factory)

    return produce


def _validate_name(name: object) -> None:
    if not name or not isinstance(name, str):
        msg = "name is required"
        raise RegistrationError(msg)


def _validate_factory(factory: object) -> None:
    if not callable(factory):
        msg = "the factory function is required"
        raise RegistrationError(msg)
