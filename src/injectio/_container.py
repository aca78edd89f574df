from __future__ import annotations

import functools
import logging
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any, TypeVar, overload

from ._bindings import GLOBAL_CONTEXT, BindContext, BindingBuilder, BindingRegistry
from ._declarations import ConfigurationPoint, InitializerPoint, InjectionPoint
from ._errors import UnresolvedConfigurationError
from ._registries import (
    DECLARED_TYPE,
    AutoWireRegistry,
    ConfigurationRegistry,
    ConfigurationValueStore,
    InitializerRegistry,
    InjectionRegistry,
)


logger = logging.getLogger(__name__)

T = TypeVar("T")

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from ._bindings import FactoryFn

    ClassDecorator = Callable[[type[T]], type[T]]

# Instance whose autowired __init__ wrappers must not trigger resolution
# (set while the container or an outer wrapper is constructing it).
_wiring: ContextVar[object | None] = ContextVar("injectio_wiring", default=None)


class Container:
    """Minimal DI container.

    - bind keys (classes or strings) to values, factories, instances or singletons
    - field injection, configuration values and initializer hooks
    - autowired classes that wire themselves on direct construction

    All registries are owned by the container; build a fresh one per
    application (or per test).
    """

    def __init__(self, *, lock_singletons: bool = False) -> None:
        self.bindings = BindingRegistry()
        self.injections = InjectionRegistry()
        self.configurations = ConfigurationRegistry()
        self.initializers = InitializerRegistry()
        self.values = ConfigurationValueStore()
        self.autowired = AutoWireRegistry()
        self._lock_singletons = lock_singletons

    @overload
    def bind(self, key: str) -> BindingBuilder[Any]: ...

    @overload
    def bind(self, key: type[T]) -> BindingBuilder[T]: ...

    def bind(self, key: type[T] | str) -> BindingBuilder[Any]:
        """Start a binding for `key`.

        Example:
          container.bind(Clock).singleton(SystemClock)
          container.bind("db").factory(lambda ctx: connect())

        """
        return BindingBuilder(key, self.bindings, self, lock_singletons=self._lock_singletons)

    @overload
    def get(self, key: type[T]) -> T: ...

    @overload
    def get(self, key: str) -> Any: ...

    def get(self, key: type[T] | str) -> Any:
        """Resolve `key` through its binding, in the global context."""
        return self.bindings.get(key, GLOBAL_CONTEXT)

    def is_bound(self, key: object) -> bool:
        return key in self.bindings

    def create_instance(self, cls: type[T], *args: Any, **kwargs: Any) -> T:
        """Construct `cls` with the given arguments and resolve it.

        Autowired classes are built with their wiring suppressed so that the
        instance goes through exactly one resolution pass.
        """
        if self._is_autowired(cls):
            instance = _construct_unwired(cls, args, kwargs)
        else:
            instance = cls(*args, **kwargs)
        return self.resolve_injections(instance, cls)

    def resolve_injections(self, instance: T, target: type | None) -> T:
        """Fill injection and configuration points of `instance` and run its initializers.

        Every class of `target`'s MRO is visited in turn. Fields are assigned
        from the most derived class towards the root, initializers are called
        from the root towards the most derived class.
        """
        if target is None:
            return instance
        return self._resolve_level(instance, target.__mro__, 0)

    def _resolve_level(self, instance: Any, chain: tuple[type, ...], index: int) -> Any:
        if index >= len(chain) or instance is None:
            return instance

        level = chain[index]
        context = BindContext(type(instance).__name__)

        for field, key in self.injections.entries(level):
            setattr(instance, field, self.bindings.get(key, context))

        for field, config_key in self.configurations.entries(level):
            if config_key not in self.values:
                raise UnresolvedConfigurationError(config_key, field, context.name)
            setattr(instance, field, self.values[config_key])

        instance = self._resolve_level(instance, chain, index + 1)

        method_name = self.initializers.get(level)
        if method_name is not None:
            method = getattr(instance, method_name, None)
            if method is not None:
                method()

        return instance

    def configure(self, key: str, value: Any) -> None:
        """Set a configuration value; only resolutions after this call see it."""
        self.values.set(key, value)

    def configure_many(self, values: Mapping[str, Any]) -> None:
        self.values.update(values)

    def is_configured(self, key: str) -> bool:
        return key in self.values

    # Declarations

    def inject(self, key: type | str = DECLARED_TYPE) -> Any:
        """Declare an injected attribute.

        Without `key`, the attribute's type annotation is used as binding key.

        Example:
          class Repo:
              db: Database = container.inject()
              cache = container.inject("cache")

        """
        return InjectionPoint(self.injections, key)

    def configuration(self, key: str) -> Any:
        """Declare an attribute filled from the configuration value `key`."""
        return ConfigurationPoint(self.configurations, key)

    def initializer(self, fn: Callable[..., Any]) -> Any:
        """Mark a zero-argument method to run once the instance is resolved."""
        return InitializerPoint(self.initializers, fn)

    @overload
    def singleton(self, cls: type[T], /) -> type[T]: ...

    @overload
    def singleton(
        self,
        cls: None = ...,
        /,
        *,
        args: tuple[Any, ...] = ...,
        kwargs: Mapping[str, Any] | None = ...,
    ) -> ClassDecorator[Any]: ...

    def singleton(
        self,
        cls: type[T] | None = None,
        /,
        *,
        args: tuple[Any, ...] = (),
        kwargs: Mapping[str, Any] | None = None,
    ) -> Any:
        """Class decorator binding the class to itself as a singleton."""

        def decorator(target: type[T]) -> type[T]:
            self.bind(target).singleton(target, *args, **(kwargs or {}))
            return target

        return decorator if cls is None else decorator(cls)

    @overload
    def instance(self, cls: type[T], /) -> type[T]: ...

    @overload
    def instance(
        self,
        cls: None = ...,
        /,
        *,
        args: tuple[Any, ...] = ...,
        kwargs: Mapping[str, Any] | None = ...,
    ) -> ClassDecorator[Any]: ...

    def instance(
        self,
        cls: type[T] | None = None,
        /,
        *,
        args: tuple[Any, ...] = (),
        kwargs: Mapping[str, Any] | None = None,
    ) -> Any:
        """Class decorator binding the class to itself, built anew on every request."""

        def decorator(target: type[T]) -> type[T]:
            self.bind(target).instance(target, *args, **(kwargs or {}))
            return target

        return decorator if cls is None else decorator(cls)

    def factory(self, fn: FactoryFn[Any]) -> ClassDecorator[Any]:
        """Class decorator binding the class to `fn`."""

        def decorator(target: type[T]) -> type[T]:
            self.bind(target).factory(fn)
            return target

        return decorator

    def bind_as(self, key: type | str) -> ImplementationBinder:
        """Bind `key` to the decorated implementation class.

        Example:
          @container.bind_as(Storage).singleton
          class DiskStorage(Storage): ...

        """
        return ImplementationBinder(self, key)

    def autowire(self, cls: type[T]) -> type[T]:
        """Make direct construction of `cls` resolve the new instance.

        ``cls()`` runs the original ``__init__`` and then resolves the
        instance starting at `cls`. Going through `create_instance` (or a
        binding) still resolves only once.
        """
        original_init = cls.__init__
        container = self

        @functools.wraps(original_init)
        def __init__(self: Any, *args: Any, **kwargs: Any) -> None:
            if _wiring.get() is self:
                original_init(self, *args, **kwargs)
                return

            token = _wiring.set(self)
            try:
                original_init(self, *args, **kwargs)
            finally:
                _wiring.reset(token)
            container.resolve_injections(self, cls)

        self.autowired.mark(cls)
        cls.__init__ = __init__  # type: ignore[method-assign]
        logger.debug("Autowiring %s", cls.__name__)
        return cls

    def _is_autowired(self, cls: type) -> bool:
        return any(level in self.autowired for level in cls.__mro__)


class ImplementationBinder:
    """Class decorators returned by `Container.bind_as`."""

    def __init__(self, container: Container, key: type | str) -> None:
        self._container = container
        self._key = key

    def singleton(self, cls: type[T]) -> type[T]:
        self._container.bind(self._key).singleton(cls)
        return cls

    def instance(self, cls: type[T]) -> type[T]:
        self._container.bind(self._key).instance(cls)
        return cls

    def factory(self, fn: FactoryFn[Any]) -> ClassDecorator[Any]:
        if not callable(fn):
            msg = f"Factory must be callable, got {type(fn).__name__}"
            raise TypeError(msg)

        def decorator(cls: type[T]) -> type[T]:
            self._container.bind(self._key).factory(fn)
            return cls

        return decorator


def _construct_unwired(cls: type[T], args: tuple[Any, ...], kwargs: dict[str, Any]) -> T:
    new = cls.__new__
    instance = new(cls) if new is object.__new__ else new(cls, *args, **kwargs)
    if not isinstance(instance, cls):
        return instance

    token = _wiring.set(instance)
    try:
        type(instance).__init__(instance, *args, **kwargs)
    finally:
        _wiring.reset(token)
    return instance
