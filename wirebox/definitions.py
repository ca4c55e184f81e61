"""Service definitions, tag types and the traits that describe them.

A service definition is a class deriving from :class:`Service`.  It names
the type it produces (``service_type``), the definitions of the services it
depends on (``dependencies``), the functions to call once it is built
(``autocall``) and, for polymorphic services, the definitions it overrides.

Definitions can be spelled either with class keywords::

    class Logger(SingleService, service_type=FileLogger, dependencies=(Config,)):
        pass

or with subscription, which yields a cached definition class::

    SingleService[FileLogger, Config]
"""

from __future__ import annotations

from typing import Any, Callable, ClassVar

__all__ = [
    "Single",
    "Polymorphic",
    "Final",
    "Supplied",
    "Abstract",
    "Service",
    "SingleService",
    "SharedService",
    "UniqueService",
    "ExternService",
    "ExternSharedService",
    "Method",
    "Invoke",
    "parent_types",
    "default_type",
    "has_default",
    "is_single",
    "is_abstract_service",
    "is_supplied_service",
    "is_final_service",
    "is_polymorphic",
    "is_overridden_by",
    "is_override_convertible",
    "is_default_overrides_abstract",
]


class Single:
    """Tag: the container keeps one shared instance of the service."""


class Polymorphic:
    """Tag: the service may be overridden by other definitions."""


class Final:
    """Tag: the service may not be overridden."""


class Supplied:
    """Tag: the service is never built by the container, only given to it."""


class Abstract(Polymorphic, Single):
    """Tag: the service has no implementation of its own."""


_specialisations: dict[tuple[type, Any], type] = {}


def _type_name(value: Any) -> str:
    return getattr(value, "__qualname__", None) or repr(value)


class Service:
    """A definition that builds a new instance every time it is requested."""

    service_type: ClassVar[Any] = None
    dependencies: ClassVar[tuple] = ()
    autocall: ClassVar[tuple] = ()
    autocall_maps: ClassVar[tuple] = ()
    overrides: ClassVar[tuple] = ()
    default_service: ClassVar[Any] = None

    def __init_subclass__(
        cls,
        *,
        service_type: Any = None,
        dependencies: Any = None,
        autocall: Any = None,
        autocall_maps: Any = None,
        overrides: Any = None,
        default_service: Any = None,
        **kwargs: Any,
    ) -> None:
        super().__init_subclass__(**kwargs)
        if service_type is not None:
            cls.service_type = service_type
        if dependencies is not None:
            cls.dependencies = tuple(dependencies)
        if autocall is not None:
            cls.autocall = tuple(autocall)
        if autocall_maps is not None:
            cls.autocall_maps = tuple(autocall_maps)
        if overrides is not None:
            cls.overrides = tuple(overrides)
        if default_service is not None:
            cls.default_service = default_service

    def __class_getitem__(cls, item: Any) -> type:
        """Return the cached definition producing ``item``.

        A tuple subscript names the produced type first and its dependencies
        after it.
        """
        key = (cls, item)
        cached = _specialisations.get(key)
        if cached is not None:
            return cached
        if isinstance(item, tuple):
            if not item:
                raise TypeError("a service definition needs a service type")
            produced, *deps = item
        else:
            produced, deps = item, []
        name = f"{cls.__name__}[{', '.join(_type_name(v) for v in (produced, *deps))}]"
        definition = type(cls)(
            name,
            (cls,),
            {"__module__": cls.__module__, "__qualname__": name},
            service_type=produced,
            dependencies=tuple(deps),
        )
        return _specialisations.setdefault(key, definition)

    def __init__(self, instance: Any) -> None:
        self.instance = instance

    @classmethod
    def construct(cls, *args: Any) -> "Service":
        """Build the definition from the injected services followed by extra arguments."""
        if cls.service_type is None:
            raise TypeError(f"{cls.__name__} does not name a service type")
        return cls(cls.service_type(*args))

    def forward(self) -> Any:
        """Return the service held by this definition."""
        return self.instance

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.instance!r})"


class SingleService(Single, Service):
    """A definition whose single instance is shared by the container."""


class SharedService(Single, Service):
    """A single definition whose instance is handed out as a shared reference."""


class UniqueService(Service):
    """A definition that hands out a new, exclusively owned instance each time."""


class ExternService(Supplied, SingleService):
    """A single definition holding an instance that was built elsewhere."""

    @classmethod
    def construct(cls, *args: Any) -> "Service":
        """Wrap the one supplied instance."""
        if len(args) != 1:
            raise TypeError(f"{cls.__name__} takes exactly one instance")
        return cls(args[0])


class ExternSharedService(Supplied, SharedService):
    """A shared definition holding an instance that was built elsewhere."""

    @classmethod
    def construct(cls, *args: Any) -> "Service":
        """Wrap the one supplied instance."""
        if len(args) != 1:
            raise TypeError(f"{cls.__name__} takes exactly one instance")
        return cls(args[0])


class Method:
    """A function called on a freshly built service, the service first."""

    __slots__ = ("function",)

    def __init__(self, function: Any) -> None:
        self.function = function

    @property
    def is_callable(self) -> bool:
        return callable(self.function)

    def __call__(self, service: Any, *args: Any) -> Any:
        if not callable(self.function):
            raise TypeError(f"{self.function!r} is not callable")
        return self.function(service, *args)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Method) and other.function == self.function

    def __hash__(self) -> int:
        return hash((Method, id(self.function)))

    def __repr__(self) -> str:
        return f"Method({self.function!r})"


class Invoke:
    """An autocall entry that names the definitions injected into its method."""

    __slots__ = ("method", "definitions")

    def __init__(self, method: Method | Callable[..., Any], *definitions: type) -> None:
        self.method = method if isinstance(method, Method) else Method(method)
        self.definitions = definitions

    def __eq__(self, other: object) -> bool:
        return (
            isinstance(other, Invoke)
            and other.method == self.method
            and other.definitions == self.definitions
        )

    def __hash__(self) -> int:
        return hash((Invoke, self.method, self.definitions))

    def __repr__(self) -> str:
        names = ", ".join(_type_name(d) for d in self.definitions)
        return f"Invoke({self.method!r}{', ' if names else ''}{names})"


def _is_subclass(definition: Any, tag: type) -> bool:
    return isinstance(definition, type) and issubclass(definition, tag)


def parent_types(definition: Any) -> tuple:
    """Definitions that ``definition`` overrides."""
    return tuple(getattr(definition, "overrides", ()) or ())


def default_type(definition: Any) -> Any:
    """Default implementation of an abstract definition, or None."""
    return getattr(definition, "default_service", None)


def has_default(definition: Any) -> bool:
    return default_type(definition) is not None


def is_single(definition: Any) -> bool:
    return _is_subclass(definition, Single)


def is_abstract_service(definition: Any) -> bool:
    return _is_subclass(definition, Abstract)


def is_supplied_service(definition: Any) -> bool:
    return _is_subclass(definition, Supplied)


def is_final_service(definition: Any) -> bool:
    return _is_subclass(definition, Final)


def is_polymorphic(definition: Any) -> bool:
    return _is_subclass(definition, Polymorphic) or bool(parent_types(definition))


def is_overridden_by(service: Any, overrider: Any) -> bool:
    """Whether ``overrider`` lists ``service`` among the definitions it overrides."""
    return service in parent_types(overrider)


def _convertible(source: Any, target: Any) -> bool:
    if source is None or target is None:
        return True
    if isinstance(source, type) and isinstance(target, type):
        return issubclass(source, target)
    return source == target


def is_override_convertible(definition: Any) -> bool:
    """Whether the produced type can stand in for every overridden service type."""
    produced = getattr(definition, "service_type", None)
    return all(
        _convertible(produced, getattr(parent, "service_type", None))
        for parent in parent_types(definition)
    )


def is_default_overrides_abstract(definition: Any) -> bool:
    """Whether the default implementation, if any, overrides ``definition``."""
    return not has_default(definition) or is_overridden_by(definition, default_type(definition))