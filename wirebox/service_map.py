"""The service map: from a service type to the definition that provides it.

Mappings are registered under a map tag.  A lookup tries the tags it is given
in order, then the empty map (:data:`EMPTY_MAP`), then untagged mappings.
Within one tag the most derived registered base of the requested type wins;
a mapping to ``None`` or to a definition that cannot produce the requested
type makes the lookup fall through to the next tag.
"""

from __future__ import annotations

import enum
from typing import Any, Callable, Iterable

from .definitions import Service

__all__ = [
    "EMPTY_MAP",
    "IndirectMap",
    "register_mapping",
    "mapped_service",
    "is_complete_map",
]


class _MapTag(enum.Enum):
    EMPTY = "empty"


EMPTY_MAP = _MapTag.EMPTY
"""Tag of the empty map, preferred over untagged mappings."""

_registry: dict[tuple[Any, Any], Any] = {}


class IndirectMap:
    """A mapping that yields a definition for the exact type that was requested."""

    def __init__(self, template: type | Callable[[Any], Any]) -> None:
        self.template = template

    def mapped_service(self, service_type: Any) -> Any:
        """Return the definition that provides ``service_type``."""
        if isinstance(self.template, type) and issubclass(self.template, Service):
            return self.template[service_type]
        return self.template(service_type)

    def __repr__(self) -> str:
        return f"IndirectMap({self.template!r})"


def register_mapping(service_type: Any, definition: Any, map_tag: Any = None) -> Any:
    """Map ``service_type`` to ``definition`` under ``map_tag``; None means untagged."""
    _registry[(map_tag, service_type)] = definition
    return definition


def _normalise(maps: Any) -> tuple:
    if maps is None:
        return ()
    if isinstance(maps, (tuple, list)):
        return tuple(maps)
    return (maps,)


def _lookup_chain(maps: Iterable[Any]) -> list[Any]:
    chain: list[Any] = []
    for tag in (*maps, EMPTY_MAP, None):
        if tag not in chain:
            chain.append(tag)
    return chain


def _candidates(service_type: Any) -> tuple:
    if isinstance(service_type, type):
        return service_type.__mro__
    return (service_type,)


def _produces(definition: Any, requested: Any) -> bool:
    if not (isinstance(definition, type) and issubclass(definition, Service)):
        return False
    provided = definition.service_type
    if provided is None:
        return True
    if isinstance(provided, type) and isinstance(requested, type):
        return issubclass(provided, requested)
    return provided == requested


def _resolve(tag: Any, service_type: Any) -> Any:
    for base in _candidates(service_type):
        key = (tag, base)
        if key in _registry:
            entry = _registry[key]
            break
    else:
        return None
    if entry is None:
        return None
    if isinstance(entry, IndirectMap):
        if base is not service_type:
            return None
        entry = entry.mapped_service(service_type)
    return entry if _produces(entry, service_type) else None


def mapped_service(service_type: Any, maps: Any = ()) -> Any:
    """Return the definition mapped to ``service_type``, trying ``maps`` in order."""
    for tag in _lookup_chain(_normalise(maps)):
        definition = _resolve(tag, service_type)
        if definition is not None:
            return definition
    raise LookupError(f"no service definition is mapped to {service_type!r}")


def is_complete_map(maps: Any, service_type: Any) -> bool:
    """Whether ``service_type`` resolves to a definition through ``maps``."""
    try:
        mapped_service(service_type, maps)
    except LookupError:
        return False
    return True