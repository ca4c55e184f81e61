import pytest

from wirebox.definitions import (
    Abstract,
    ExternService,
    ExternSharedService,
    Final,
    Invoke,
    Method,
    Polymorphic,
    Service,
    SharedService,
    SingleService,
    UniqueService,
    default_type,
    has_default,
    is_abstract_service,
    is_default_overrides_abstract,
    is_final_service,
    is_overridden_by,
    is_override_convertible,
    is_polymorphic,
    is_single,
    is_supplied_service,
    parent_types,
)


class Widget:
    def __init__(self, size=0, label=""):
        self.size = size
        self.label = label


def test_subscription_is_cached():
    assert Service[Widget] is Service[Widget]
    assert Service[Widget] is not SingleService[Widget]
    assert Service[Widget].service_type is Widget
    assert issubclass(SingleService[Widget], SingleService)
    assert is_single(SingleService[Widget])
    assert not is_single(Service[Widget])


def test_subscription_with_dependencies():
    class Dep:
        pass

    definition = Service[Widget, Service[Dep]]
    assert definition.service_type is Widget
    assert definition.dependencies == (Service[Dep],)
    assert parent_types(definition) == ()
    assert not is_single(definition)


def test_keyword_definition():
    class Dep(Service, service_type=Widget):
        pass

    class Definition(SingleService, service_type=Widget, dependencies=[Dep]):
        pass

    assert Definition.service_type is Widget
    assert Definition.dependencies == (Dep,)
    assert Definition.autocall == ()
    assert is_single(Definition)
    assert not is_single(Dep)


def test_construct_and_forward():
    built = Service[Widget].construct(3, "x")
    widget = built.forward()
    assert isinstance(widget, Widget)
    assert (widget.size, widget.label) == (3, "x")
    assert built.forward() is widget


def test_construct_without_service_type_raises():
    class Empty(Service):
        pass

    assert not is_single(Empty)
    assert parent_types(Empty) == ()
    with pytest.raises(TypeError):
        Empty.construct()


def test_single_traits():
    assert is_single(SingleService[Widget])
    assert is_single(SharedService[Widget])
    assert not is_single(Service[Widget])
    assert not is_single(UniqueService[Widget])


def test_extern_service_holds_given_instance():
    widget = Widget()
    assert ExternService[Widget].construct(widget).forward() is widget
    assert ExternSharedService[Widget].construct(widget).forward() is widget
    assert is_supplied_service(ExternService[Widget])
    assert is_single(ExternService[Widget])
    with pytest.raises(TypeError):
        ExternService[Widget].construct()


def test_abstract_and_final_traits():
    class Interface(Abstract, Service, service_type=Widget):
        pass

    class Sealed(Final, SingleService, service_type=Widget):
        pass

    assert is_abstract_service(Interface)
    assert is_single(Interface)
    assert is_polymorphic(Interface)
    assert is_final_service(Sealed)
    assert not is_abstract_service(Sealed)
    assert not is_polymorphic(Sealed)


def test_overrides_make_polymorphic():
    class Base(Polymorphic, SingleService, service_type=Widget):
        pass

    class Special(Widget):
        pass

    class Child(SingleService, service_type=Special, overrides=(Base,)):
        pass

    assert parent_types(Child) == (Base,)
    assert parent_types(Base) == ()
    assert is_polymorphic(Child)
    assert is_overridden_by(Base, Child)
    assert not is_overridden_by(Child, Base)
    assert is_override_convertible(Child)


def test_override_not_convertible():
    class Other:
        pass

    class Base(Polymorphic, SingleService, service_type=Widget):
        pass

    class Wrong(SingleService, service_type=Other, overrides=(Base,)):
        pass

    assert not is_override_convertible(Wrong)


def test_default_service():
    class Interface(Abstract, Service, service_type=Widget):
        pass

    class Impl(SingleService, service_type=Widget, overrides=(Interface,)):
        pass

    class Bad(SingleService, service_type=Widget):
        pass

    class WithDefault(Abstract, Service, service_type=Widget, default_service=Impl):
        pass

    Interface.default_service = Impl
    assert has_default(Interface)
    assert default_type(Interface) is Impl
    assert is_default_overrides_abstract(Interface)

    class BadDefault(Abstract, Service, service_type=Widget, default_service=Bad):
        pass

    assert not is_default_overrides_abstract(BadDefault)
    assert not is_default_overrides_abstract(WithDefault)
    assert not has_default(Bad)
    assert default_type(Bad) is None
    assert is_default_overrides_abstract(Bad)


def test_method_calls_function_with_service():
    calls = []

    class Target:
        def hit(self, value):
            calls.append((self, value))

    target = Target()
    Method(Target.hit)(target, 5)
    assert calls == [(target, 5)]
    assert Method(Target.hit) == Method(Target.hit)


def test_method_on_non_callable():
    method = Method(False)
    assert not method.is_callable
    with pytest.raises(TypeError):
        method(object())


def test_invoke_holds_method_and_definitions():
    def function(service, a, b):
        return (a, b)

    invoke = Invoke(function, Service[Widget], SingleService[Widget])
    assert invoke.method == Method(function)
    assert invoke.definitions == (Service[Widget], SingleService[Widget])
    assert Invoke(Method(function), Service[Widget]) == Invoke(function, Service[Widget])