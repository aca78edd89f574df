from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING, Any, get_type_hints

from ._errors import InjectionDeclarationError


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping


class _DeclaredType:
    def __repr__(self) -> str:
        return "<declared type>"


# Injection key meaning "use the field's annotation on the owning class".
DECLARED_TYPE: Any = _DeclaredType()


class _PerTypeRegistry:
    """Per-class accumulator of field name -> key.

    Entries are kept on the exact class that declared them; nothing is
    inherited or flattened onto subclasses.
    """

    def __init__(self) -> None:
        self._entries: dict[type, dict[str, Any]] = {}

    def get_or_create(self, cls: type) -> dict[str, Any]:
        return self._entries.setdefault(cls, {})

    def entries(self, cls: type) -> list[tuple[str, Any]]:
        return list(self._entries.get(cls, {}).items())

    def __contains__(self, cls: object) -> bool:
        return bool(self._entries.get(cls))  # type: ignore[arg-type]


class InjectionRegistry(_PerTypeRegistry):
    """Field name -> binding key, per declaring class."""

    def entries(self, cls: type) -> list[tuple[str, Any]]:
        fields = self._entries.get(cls)
        if not fields:
            return []

        for field, key in list(fields.items()):
            if key is DECLARED_TYPE:
                fields[field] = _declared_type(cls, field)

        return list(fields.items())


class ConfigurationRegistry(_PerTypeRegistry):
    """Field name -> configuration key, per declaring class."""


class InitializerRegistry:
    """Class -> name of the zero-argument method run after resolution."""

    def __init__(self) -> None:
        self._methods: dict[type, str] = {}

    def set(self, cls: type, method_name: str) -> None:
        self._methods[cls] = method_name

    def get(self, cls: type) -> str | None:
        return self._methods.get(cls)

    def __contains__(self, cls: object) -> bool:
        return cls in self._methods


class ConfigurationValueStore:
    """Flat configuration key -> value mapping. `None` is a valid value."""

    def __init__(self) -> None:
        self._values: dict[str, Any] = {}

    def set(self, key: str, value: Any) -> None:
        logger.debug("Configuring %s", key)
        self._values[key] = value

    def update(self, values: Mapping[str, Any]) -> None:
        for key, value in values.items():
            self.set(key, value)

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)


class AutoWireRegistry:
    """Classes whose ``__init__`` resolves the instance on direct construction."""

    def __init__(self) -> None:
        self._classes: set[type] = set()

    def mark(self, cls: type) -> None:
        self._classes.add(cls)

    def __contains__(self, cls: object) -> bool:
        return cls in self._classes


def _declared_type(cls: type, field: str) -> type:
    try:
        annotations = inspect.get_annotations(cls)
    except NameError as exc:
        logger.warning("'%s' name error retrieving %s (%s) annotations", exc.name, cls.__name__, cls.__qualname__)
        msg = f"Cannot evaluate the annotations of class {cls.__name__}: {exc}"
        raise InjectionDeclarationError(msg) from exc

    if field not in annotations:
        msg = f"Injected attribute {field} on class {cls.__name__} has no binding key and no type annotation"
        raise InjectionDeclarationError(msg)

    # Evaluate this field alone; other annotations on the class may only
    # resolve under TYPE_CHECKING.
    holder = type(cls.__name__, (), {"__annotations__": {field: annotations[field]}, "__module__": cls.__module__})
    try:
        hints = get_type_hints(holder, localns=dict(vars(cls)))
    except NameError as exc:
        logger.warning("'%s' name error retrieving %s (%s) type hints", exc.name, cls.__name__, cls.__qualname__)
        msg = f"Cannot evaluate the annotation of injected attribute {field} on class {cls.__name__}: {exc}"
        raise InjectionDeclarationError(msg) from exc

    return hints[field]
