from __future__ import annotations


class ResolutionError(RuntimeError):
    pass


class UnresolvedBindingError(ResolutionError):
    """No binding is registered for the requested key."""

    def __init__(self, key_name: str, context_name: str) -> None:
        self.key_name = key_name
        self.context_name = context_name
        super().__init__(f"Cannot resolve binding {key_name} in context of class {context_name}")


class UnresolvedConfigurationError(ResolutionError):
    """A configuration point refers to a key that was never configured."""

    def __init__(self, key: str, field: str, context_name: str) -> None:
        self.key = key
        self.field = field
        self.context_name = context_name
        super().__init__(
            f"Cannot resolve configuration key {key} bound to attribute {field} in context of class {context_name}"
        )


class InjectionDeclarationError(ResolutionError):
    """An injection point has no explicit key and no usable type annotation."""
