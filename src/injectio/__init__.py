"""Minimal runtime dependency injection container.

Bind keys (classes or strings) to values, factories, fresh instances or lazy
singletons, declare injected and configured attributes on classes, and let the
container build fully wired objects.

Exports:
- `Container`: owns the registries and resolves bindings, configuration values
  and initializer hooks across a class's whole MRO.
- `BindContext`: diagnostic context passed to factory bindings.
- `Binding` and its variants: `ValueBinding`, `FactoryBinding`,
  `SingletonBinding`, `InstanceBinding`.
- `ResolutionError` and its subclasses raised when a key or configuration value
  cannot be resolved.
"""

from ._bindings import (
    BindContext,
    Binding,
    BindingBuilder,
    FactoryBinding,
    InstanceBinding,
    SingletonBinding,
    ValueBinding,
)
from ._container import Container
from ._errors import (
    InjectionDeclarationError,
    ResolutionError,
    UnresolvedBindingError,
    UnresolvedConfigurationError,
)


__all__ = [
    "BindContext",
    "Binding",
    "BindingBuilder",
    "Container",
    "FactoryBinding",
    "InjectionDeclarationError",
    "InstanceBinding",
    "ResolutionError",
    "SingletonBinding",
    "UnresolvedBindingError",
    "UnresolvedConfigurationError",
    "ValueBinding",
]
