# wirebox

wirebox provides the building blocks of a dependency injection setup: classes
that describe services (*definitions*), a service map that tells which
definition provides a given type, and checks that tell whether a definition,
together with its whole dependency graph, can be built.

## Installing

```
pip install wirebox
```

To run the test suite as well:

```
pip install "wirebox[test]"
pytest
```

## Definitions (`wirebox.definitions`)

A definition is a class deriving from `Service`. It names the type it
produces (`service_type`), the definitions of its dependencies
(`dependencies`), the functions to call once it is built (`autocall`, with
`autocall_maps` for the maps used to deduce their parameters), the
definitions it overrides (`overrides`) and, for abstract services, a
`default_service`.

Definitions can be written with class keywords:

```python
from wirebox.definitions import SingleService

class Config: ...
class FileLogger:
    def __init__(self, config): ...

ConfigDefinition = SingleService[Config]

class LoggerDefinition(SingleService, service_type=FileLogger,
                       dependencies=(ConfigDefinition,)):
    pass
```

or by subscription, `SingleService[FileLogger, ConfigDefinition]`, which names
the produced type first and the dependencies after it. Subscriptions are
cached, so the same subscript always gives the same class.

`Service.construct(*args)` builds a definition by calling `service_type` with
the injected services followed by any extra arguments, and `forward()`
returns the held instance.

| Definition            | Kind                                                  |
|-----------------------|-------------------------------------------------------|
| `Service`             | a new instance each time                              |
| `SingleService`       | one shared instance                                   |
| `SharedService`       | one instance handed out as a shared reference         |
| `UniqueService`       | a new, exclusively owned instance each time           |
| `ExternService`       | single, supplied: wraps exactly one given instance    |
| `ExternSharedService` | shared, supplied: wraps exactly one given instance    |

Marker bases: `Single`, `Supplied`, `Polymorphic`, `Final` and `Abstract`
(which is both `Polymorphic` and `Single`).

`Method(function)` is an autocall entry called with the service first;
`Invoke(method, *definitions)` also names the definitions whose services are
passed to it.

Trait functions answer questions about a definition: `parent_types`,
`default_type`, `has_default`, `is_single`, `is_abstract_service`,
`is_supplied_service`, `is_final_service`, `is_polymorphic` (tagged
`Polymorphic` or overriding something), `is_overridden_by`,
`is_override_convertible` and `is_default_overrides_abstract`.

## Service maps (`wirebox.service_map`)

`register_mapping(service_type, definition, map_tag=None)` records that
`definition` provides `service_type` under `map_tag`; `None` means untagged.

`mapped_service(service_type, maps=())` tries the given tags in order, then
`EMPTY_MAP`, then untagged mappings. Within one tag the most derived
registered base of the requested type wins. A mapping to `None`, or to a
definition that cannot produce the requested type, falls through to the next
tag. When nothing matches it raises `LookupError`.
`is_complete_map(maps, service_type)` tells whether a lookup would succeed.

`IndirectMap(template)` works out the definition from the exact requested
type: with a `Service` subclass as template it returns `template[type]`,
otherwise it calls the template. An indirect mapping only applies to the
type it was registered for, not to subclasses of it.

## Validation (`wirebox.validation`)

* `is_service_valid(definition, *args)`: whether the definition can be served
  when asked with `args`.
* `is_construction_valid(definition, *args)`: whether it can be constructed
  in place from its dependencies and `args`.
* `check_service(definition, *args)`: returns the definition, or raises a
  `ServiceError` saying what is wrong.

The checks cover: non-definitions, circular dependencies, overrides of
non-services, of non-polymorphic or final services and of incompatible types,
final abstract services, defaults on concrete services and invalid defaults,
single services asked for with arguments, constructor arity against
dependencies and arguments, autocall entries that are not callable, do not
match their injected services or have parameters that cannot be mapped, and
all of these again for every dependency.

## Errors (`wirebox.errors`)

All errors derive from `KangaruError`: `ServiceError` (also a `TypeError`,
carrying `definition`, `reason` and `arguments`), `SuppliedNotFound` and
`AbstractNotFound` (also `LookupError`s), and `NotInvokableError` (also a
`TypeError`).

## What this package does not do

wirebox has no container: it does not build services, hold single instances,
run autocalls or inject services into functions. It also has no invokers,
generators or lazy proxies, and no command-line program. It describes
services and checks that they are well formed; building them is left to the
code that uses it.