"""Checks that a service definition can be built, with its whole dependency graph."""

from __future__ import annotations

from dataclasses import dataclass
from types import FunctionType, MethodType
from typing import Any, Callable

from .definitions import (
    ExternService,
    ExternSharedService,
    Invoke,
    Method,
    Service,
    default_type,
    has_default,
    is_abstract_service,
    is_default_overrides_abstract,
    is_final_service,
    is_override_convertible,
    is_polymorphic,
    is_single,
    is_supplied_service,
    parent_types,
)
from .errors import ServiceError
from .service_map import is_complete_map, mapped_service

__all__ = ["is_service_valid", "is_construction_valid", "check_service"]

_NOT_A_SERVICE = "The type sent to the container is not a service."
_CIRCULAR = "The service depends on itself through its dependencies."
_OVERRIDES_NON_SERVICE = (
    "The service is overriding a non service type. Be careful to only list services in overrides "
    "and not the injected types."
)
_OVERRIDES_NON_POLYMORPHIC = (
    "An overridden service is not polymorphic, it therefore cannot be overridden. "
    "The overridden service should be abstract or extend Polymorphic."
)
_OVERRIDES_FINAL = (
    "An overridden service is marked as final, thus this service cannot override it. "
    "The overridden service should be polymorphic or abstract and not be final."
)
_OVERRIDE_NOT_CONVERTIBLE = (
    "The service injected type cannot be converted to the overriding type. "
    "Check if the service is overriding the right service and if types are compatible."
)
_ABSTRACT_FINAL = "An abstract service cannot be final."
_DEFAULT_ON_CONCRETE = "Non-abstract service cannot have a default implementation."
_DEFAULT_NOT_SERVICE = (
    "The default implementation of this abstract service is not a well defined service. "
    "Please check that it exposes a valid service definition interface."
)
_DEFAULT_NOT_OVERRIDING = (
    "The default implementation of this abstract service is not overriding that abstract service. "
    "Ensure that the default implementation really overrides this abstract service."
)
_DEFAULT_INVALID = "The default implementation of this abstract service is not valid:"
_DEPENDENCY_NOT_SERVICE = (
    "A dependency or one of their dependencies is not a service. "
    "Be sure to use the service definition in the list of dependencies of that service."
)
_DEPENDENCY_INVALID = "A dependency of this service is not valid:"
_SINGLE_WITH_ARGUMENTS = (
    "A single service is shared and cannot receive arguments when requested. "
    "Use emplace to construct it with arguments."
)
_ABSTRACT_CONSTRUCTION = "An abstract service cannot be constructed."
_NO_SERVICE_TYPE = "The service definition does not name a service type to construct."
_NOT_CONSTRUCTIBLE = (
    "The service type is not constructible given its dependencies. "
    "Check if dependencies are configured correctly and if the service has the required constructor."
)
_NOT_CONSTRUCTIBLE_WITH_ARGUMENTS = (
    "The service type is not constructible given its dependencies and passed arguments. "
    "Ensure that dependencies are correctly configured and you pass the right set of parameters."
)
_AUTOCALL_NOT_CALLABLE = "An autocall entry is not a callable function."
_AUTOCALL_ARITY = "An autocall function cannot be called with the service and the services listed for it."
_AUTOCALL_UNDEDUCIBLE = "An autocall function has a parameter whose service cannot be deduced."
_AUTOCALL_UNMAPPED = (
    "The service has problem with autocall. The service map can be incomplete. "
    "Check if all required services are included and if every services are valid."
)
_AUTOCALL_INJECTED_INVALID = "A service injected in an autocall function is not valid:"

_EMPTY = object()
_CO_VARARGS = 0x04


@dataclass(frozen=True)
class _Parameter:
    name: str
    required: bool
    annotation: Any


@dataclass(frozen=True)
class _Signature:
    positional: tuple[_Parameter, ...]
    varargs: bool = False
    required_keywords: bool = False

    def accepts(self, count: int) -> bool:
        if self.required_keywords:
            return False
        required = sum(1 for parameter in self.positional if parameter.required)
        if count < required:
            return False
        return self.varargs or count <= len(self.positional)


# Extern services are built from exactly one supplied instance.
_ONE_INSTANCE = _Signature((_Parameter("instance", True, _EMPTY),))


def _is_definition(value: Any) -> bool:
    return isinstance(value, type) and issubclass(value, Service)


def _construct_target(definition: type) -> Callable[..., Any] | _Signature | None:
    construct = definition.construct
    function = getattr(construct, "__func__", None)
    if function is Service.construct.__func__:
        return definition.service_type
    if function in (ExternService.construct.__func__, ExternSharedService.construct.__func__):
        return _ONE_INSTANCE
    return construct


def _from_function(function: FunctionType, skip: int) -> _Signature:
    while isinstance(getattr(function, "__wrapped__", None), FunctionType):
        function = function.__wrapped__
    code = function.__code__
    count = code.co_argcount
    names = code.co_varnames[:count]
    defaults = function.__defaults__ or ()
    first_optional = count - len(defaults)
    annotations = getattr(function, "__annotations__", None) or {}
    positional = tuple(
        _Parameter(name, index < first_optional, annotations.get(name, _EMPTY))
        for index, name in enumerate(names)
    )
    keyword_names = code.co_varnames[count:count + code.co_kwonlyargcount]
    keyword_defaults = function.__kwdefaults__ or {}
    required_keywords = any(name not in keyword_defaults for name in keyword_names)
    return _Signature(positional[skip:], bool(code.co_flags & _CO_VARARGS), required_keywords)


def _signature(target: Any) -> _Signature | None:
    if isinstance(target, _Signature):
        return target
    if isinstance(target, FunctionType):
        return _from_function(target, 0)
    if isinstance(target, MethodType):
        function = target.__func__
        return _from_function(function, 1) if isinstance(function, FunctionType) else None
    if isinstance(target, type):
        init = getattr(target, "__init__", None)
        if isinstance(init, FunctionType):
            return _from_function(init, 1)
        new = getattr(target, "__new__", None)
        if isinstance(new, FunctionType):
            return _from_function(new, 1)
        if init is object.__init__ and new is object.__new__:
            return _Signature(())
        return None
    call = getattr(type(target), "__call__", None)
    if isinstance(call, FunctionType):
        return _from_function(call, 1)
    return None


def _accepts(target: Any, count: int) -> bool:
    signature = _signature(target)
    if signature is None:
        return True
    return signature.accepts(count)


def _nested(definition: Any, reason: str, arguments: tuple, error: ServiceError) -> ServiceError:
    nested = ServiceError(definition, f"{reason} {error.reason}", arguments)
    nested.__cause__ = error
    return nested


def _check_overrides(definition: type, arguments: tuple) -> None:
    parents = parent_types(definition)
    if not all(_is_definition(parent) for parent in parents):
        raise ServiceError(definition, _OVERRIDES_NON_SERVICE, arguments)
    if not all(is_polymorphic(parent) for parent in parents):
        raise ServiceError(definition, _OVERRIDES_NON_POLYMORPHIC, arguments)
    if any(is_final_service(parent) for parent in parents):
        raise ServiceError(definition, _OVERRIDES_FINAL, arguments)
    if not is_override_convertible(definition):
        raise ServiceError(definition, _OVERRIDE_NOT_CONVERTIBLE, arguments)


def _check_abstract(definition: type, arguments: tuple, stack: tuple) -> None:
    abstract = is_abstract_service(definition)
    if abstract and is_final_service(definition):
        raise ServiceError(definition, _ABSTRACT_FINAL, arguments)
    if not has_default(definition):
        return
    if not abstract:
        raise ServiceError(definition, _DEFAULT_ON_CONCRETE, arguments)
    default = default_type(definition)
    if not _is_definition(default):
        raise ServiceError(definition, _DEFAULT_NOT_SERVICE, arguments)
    if not is_default_overrides_abstract(definition):
        raise ServiceError(definition, _DEFAULT_NOT_OVERRIDING, arguments)
    try:
        _check(default, (), emplacing=False, stack=stack)
    except ServiceError as error:
        raise _nested(definition, _DEFAULT_INVALID, arguments, error) from error


def _check_construction(definition: type, arguments: tuple, emplacing: bool) -> None:
    if is_abstract_service(definition):
        if emplacing:
            raise ServiceError(definition, _ABSTRACT_CONSTRUCTION, arguments)
        return
    if is_single(definition) and arguments and not emplacing:
        raise ServiceError(definition, _SINGLE_WITH_ARGUMENTS, arguments)
    if is_supplied_service(definition) and not emplacing:
        return
    target = _construct_target(definition)
    if target is None:
        raise ServiceError(definition, _NO_SERVICE_TYPE, arguments)
    if not _accepts(target, len(definition.dependencies) + len(arguments)):
        reason = _NOT_CONSTRUCTIBLE_WITH_ARGUMENTS if arguments else _NOT_CONSTRUCTIBLE
        raise ServiceError(definition, reason, arguments)


def _injected_annotations(function: Any) -> list[Any] | None:
    """Annotations of the parameters filled by injection, or None if the service cannot be passed."""
    signature = _signature(function)
    if signature is None:
        return []
    positional = signature.positional
    if not positional and not signature.varargs:
        return None
    return [parameter.annotation for parameter in positional[1:] if parameter.required]


def _check_autocall(definition: type, arguments: tuple, stack: tuple) -> None:
    maps = definition.autocall_maps
    for entry in definition.autocall:
        if isinstance(entry, Invoke):
            method, injected = entry.method, entry.definitions
        elif isinstance(entry, Method):
            method, injected = entry, None
        elif callable(entry):
            method, injected = Method(entry), None
        else:
            raise ServiceError(definition, _AUTOCALL_NOT_CALLABLE, arguments)
        if not method.is_callable:
            raise ServiceError(definition, _AUTOCALL_NOT_CALLABLE, arguments)

        if injected is not None:
            if not _accepts(method.function, 1 + len(injected)):
                raise ServiceError(definition, _AUTOCALL_ARITY, arguments)
            targets = list(injected)
        else:
            annotations = _injected_annotations(method.function)
            if annotations is None:
                raise ServiceError(definition, _AUTOCALL_ARITY, arguments)
            targets = []
            for annotation in annotations:
                if annotation is _EMPTY:
                    raise ServiceError(definition, _AUTOCALL_UNDEDUCIBLE, arguments)
                if isinstance(annotation, str):
                    continue
                if not is_complete_map(maps, annotation):
                    raise ServiceError(definition, _AUTOCALL_UNMAPPED, arguments)
                targets.append(mapped_service(annotation, maps))

        for target in targets:
            try:
                _check(target, (), emplacing=False, stack=stack)
            except ServiceError as error:
                raise _nested(definition, _AUTOCALL_INJECTED_INVALID, arguments, error) from error


def _check(definition: Any, arguments: tuple, *, emplacing: bool, stack: tuple) -> None:
    if not _is_definition(definition):
        raise ServiceError(definition, _NOT_A_SERVICE, arguments)
    if definition in stack:
        raise ServiceError(definition, _CIRCULAR, arguments)
    stack = (*stack, definition)

    _check_overrides(definition, arguments)
    _check_abstract(definition, arguments, stack)
    if not all(_is_definition(dependency) for dependency in definition.dependencies):
        raise ServiceError(definition, _DEPENDENCY_NOT_SERVICE, arguments)
    _check_construction(definition, arguments, emplacing)
    _check_autocall(definition, arguments, stack)

    if is_supplied_service(definition) and not emplacing:
        return
    for dependency in definition.dependencies:
        try:
            _check(dependency, (), emplacing=False, stack=stack)
        except ServiceError as error:
            raise _nested(definition, _DEPENDENCY_INVALID, arguments, error) from error


def check_service(definition: Any, *args: Any) -> Any:
    """Return ``definition`` if the container can serve it with ``args``; raise ServiceError otherwise."""
    _check(definition, args, emplacing=False, stack=())
    return definition


def is_service_valid(definition: Any, *args: Any) -> bool:
    """Whether the container can serve ``definition`` when asked with ``args``."""
    try:
        _check(definition, args, emplacing=False, stack=())
    except ServiceError:
        return False
    return True


def is_construction_valid(definition: Any, *args: Any) -> bool:
    """Whether ``definition`` can be constructed in place from its dependencies and ``args``."""
    try:
        _check(definition, args, emplacing=True, stack=())
    except ServiceError:
        return False
    return True