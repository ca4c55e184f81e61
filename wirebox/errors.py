"""Exceptions raised by the container and by service validation."""

from __future__ import annotations

from typing import Any

__all__ = [
    "KangaruError",
    "ServiceError",
    "SuppliedNotFound",
    "AbstractNotFound",
    "NotInvokableError",
]


def _name(value: Any) -> str:
    return getattr(value, "__qualname__", None) or getattr(value, "__name__", None) or repr(value)


class KangaruError(Exception):
    """Base class of every error raised by the package."""


class ServiceError(KangaruError, TypeError):
    """A service definition cannot be used as requested."""

    DEFAULT_REASON = "An unknown error has occurred."

    def __init__(self, definition: Any, reason: str | None = None, arguments: tuple = ()) -> None:
        self.definition = definition
        self.reason = reason or self.DEFAULT_REASON
        self.arguments = tuple(arguments)
        super().__init__(f"{_name(definition)}: {self.reason}")


class SuppliedNotFound(KangaruError, LookupError):
    """A supplied service was requested before an instance was given to the container."""

    def __init__(self, definition: Any = None) -> None:
        self.definition = definition
        if definition is None:
            message = "No instance of the supplied service was found."
        else:
            message = f"No instance of the supplied service {_name(definition)} was found."
        super().__init__(message)


class AbstractNotFound(KangaruError, LookupError):
    """An abstract service was requested while no implementation is known."""

    def __init__(self, definition: Any = None) -> None:
        self.definition = definition
        if definition is None:
            message = "No implementation of the abstract service was found."
        else:
            message = f"No implementation of the abstract service {_name(definition)} was found."
        super().__init__(message)


class NotInvokableError(KangaruError, TypeError):
    """A function cannot be called with services deduced from its parameters."""

    DEFAULT_REASON = (
        "The function sent is not invokable. Ensure to include all services definitions "
        "you need and that received parameters are correct."
    )

    def __init__(self, function: Any, reason: str | None = None) -> None:
        self.function = function
        self.reason = reason or self.DEFAULT_REASON
        super().__init__(f"{_name(function)}: {self.reason}")