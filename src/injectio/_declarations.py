from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from ._bindings import key_name


if TYPE_CHECKING:
    from collections.abc import Callable

    from ._registries import ConfigurationRegistry, InitializerRegistry, InjectionRegistry


F = TypeVar("F", bound="Callable[..., Any]")


class _FieldPoint(ABC):
    """Class-attribute marker that records itself on the owning class.

    Until the container assigns the attribute on an instance, reading it there
    raises `AttributeError`.
    """

    kind = "field"

    def __init__(self, key: Any) -> None:
        self.key = key
        self.owner: type | None = None
        self.name: str | None = None

    def __set_name__(self, owner: type, name: str) -> None:
        self.owner = owner
        self.name = name
        self._record(owner, name)

    @abstractmethod
    def _record(self, owner: type, name: str) -> None: ...

    def __get__(self, instance: object, owner: type | None = None) -> Any:
        if instance is None:
            return self
        owner_name = self.owner.__name__ if self.owner is not None else type(instance).__name__
        msg = f"{self.kind.capitalize()} attribute {self.name} of {owner_name} has not been resolved yet"
        raise AttributeError(msg)

    def __repr__(self) -> str:
        return f"<{self.kind} {self.name} -> {key_name(self.key)}>"


class InjectionPoint(_FieldPoint):
    kind = "injected"

    def __init__(self, registry: InjectionRegistry, key: Any) -> None:
        super().__init__(key)
        self._registry = registry

    def _record(self, owner: type, name: str) -> None:
        self._registry.get_or_create(owner)[name] = self.key


class ConfigurationPoint(_FieldPoint):
    kind = "configured"

    def __init__(self, registry: ConfigurationRegistry, key: str) -> None:
        super().__init__(key)
        self._registry = registry

    def _record(self, owner: type, name: str) -> None:
        self._registry.get_or_create(owner)[name] = self.key


class InitializerPoint(Generic[F]):
    """Wraps a method until its class is created, then puts the function back."""

    def __init__(self, registry: InitializerRegistry, fn: F) -> None:
        if not callable(fn):
            msg = f"Initializer must be a callable, got {type(fn).__name__}"
            raise TypeError(msg)
        self._registry = registry
        self._fn = fn

    def __set_name__(self, owner: type, name: str) -> None:
        self._registry.set(owner, name)
        setattr(owner, name, self._fn)
