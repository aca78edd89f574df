from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, Protocol, TypeVar

from ._errors import UnresolvedBindingError


logger = logging.getLogger(__name__)

T = TypeVar("T")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Mapping

    BindingKey = type[Any] | str
    FactoryFn = Callable[["BindContext"], T]


class InstanceCreator(Protocol):
    def create_instance(self, cls: type[T], *args: Any, **kwargs: Any) -> T: ...


@dataclass(frozen=True)
class BindContext:
    """Diagnostic information about who requested a binding.

    `name` is the class name of the instance being resolved, or ``"global"``
    for requests made directly on the container.
    """

    name: str


GLOBAL_CONTEXT = BindContext("global")

_UNSET = object()


def key_name(key: object) -> str:
    if isinstance(key, str):
        return key
    return getattr(key, "__name__", repr(key))


class Binding(ABC, Generic[T]):
    """Strategy producing a value for a binding key."""

    @abstractmethod
    def get(self, context: BindContext) -> T: ...


class ValueBinding(Binding[T]):
    def __init__(self, value: T) -> None:
        self._value = value

    def get(self, context: BindContext) -> T:
        return self._value


class FactoryBinding(Binding[T]):
    def __init__(self, fn: FactoryFn[T]) -> None:
        self._fn = fn

    def get(self, context: BindContext) -> T:
        return self._fn(context)


class _ConstructingBinding(Binding[T]):
    """Base for bindings that build `cls` through the container.

    Constructor arguments captured at binding time are forwarded verbatim to
    every construction.
    """

    def __init__(
        self,
        creator: InstanceCreator,
        cls: type[T],
        args: tuple[Any, ...] = (),
        kwargs: Mapping[str, Any] | None = None,
    ) -> None:
        self._creator = creator
        self._cls = cls
        self._args = tuple(args)
        self._kwargs = dict(kwargs or {})

    def _create(self) -> T:
        return self._creator.create_instance(self._cls, *self._args, **self._kwargs)


class InstanceBinding(_ConstructingBinding[T]):
    def get(self, context: BindContext) -> T:
        return self._create()


class SingletonBinding(_ConstructingBinding[T]):
    """Lazily constructs `cls` once and caches it.

    Without a lock two threads hitting the first `get` at the same time may
    both construct; the last write wins and both see a complete instance.
    """

    def __init__(
        self,
        creator: InstanceCreator,
        cls: type[T],
        args: tuple[Any, ...] = (),
        kwargs: Mapping[str, Any] | None = None,
        *,
        lock: threading.RLock | None = None,
    ) -> None:
        super().__init__(creator, cls, args, kwargs)
        self._lock = lock
        self._instance: Any = _UNSET

    def get(self, context: BindContext) -> T:
        if self._instance is not _UNSET:
            return self._instance

        if self._lock is None:
            self._instance = self._build()
            return self._instance

        with self._lock:
            if self._instance is _UNSET:
                self._instance = self._build()
        return self._instance

    def _build(self) -> T:
        logger.debug("Constructing singleton %s", self._cls.__name__)
        return self._create()


class BindingRegistry:
    """Binding key -> Binding. Re-registering a key replaces its binding."""

    def __init__(self) -> None:
        self._bindings: dict[Any, Binding[Any]] = {}

    def set(self, key: BindingKey, binding: Binding[Any]) -> None:
        if key in self._bindings:
            logger.debug("Rebinding %s to %s", key_name(key), type(binding).__name__)
        else:
            logger.debug("Binding %s to %s", key_name(key), type(binding).__name__)
        self._bindings[key] = binding

    def lookup(self, key: BindingKey) -> Binding[Any] | None:
        return self._bindings.get(key)

    def get(self, key: BindingKey, context: BindContext) -> Any:
        binding = self._bindings.get(key)
        if binding is None:
            raise UnresolvedBindingError(key_name(key), context.name)
        return binding.get(context)

    def __contains__(self, key: object) -> bool:
        return key in self._bindings

    def __len__(self) -> int:
        return len(self._bindings)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._bindings)


class BindingBuilder(Generic[T]):
    """Fluent entry point returned by `Container.bind`.

    Every method creates a binding, registers it under the builder's key and
    returns it.

    Example:
      container.bind(Clock).singleton(SystemClock)
      container.bind("retries").value(3)

    """

    def __init__(
        self,
        key: BindingKey,
        registry: BindingRegistry,
        creator: InstanceCreator,
        *,
        lock_singletons: bool = False,
    ) -> None:
        self._key = key
        self._registry = registry
        self._creator = creator
        self._lock_singletons = lock_singletons

    def value(self, value: T) -> Binding[T]:
        return self._register(ValueBinding(value))

    def singleton(self, cls: type[T], *args: Any, **kwargs: Any) -> Binding[T]:
        lock = threading.RLock() if self._lock_singletons else None
        return self._register(SingletonBinding(self._creator, cls, args, kwargs, lock=lock))

    def instance(self, cls: type[T], *args: Any, **kwargs: Any) -> Binding[T]:
        return self._register(InstanceBinding(self._creator, cls, args, kwargs))

    def factory(self, fn: FactoryFn[T]) -> Binding[T]:
        if not callable(fn):
            msg = f"Factory for {key_name(self._key)} must be callable, got {type(fn).__name__}"
            raise TypeError(msg)
        return self._register(FactoryBinding(fn))

    def _register(self, binding: Binding[T]) -> Binding[T]:
        self._registry.set(self._key, binding)
        return binding
