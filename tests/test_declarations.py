import unittest

import pytest

from injectio import Container, SingletonBinding
from injectio._declarations import _FieldPoint


class TestClassDecorators(unittest.TestCase):
    cont: Container

    def setUp(self):
        self.cont = Container()

    def test_singleton_decorator(self):
        @self.cont.singleton
        class Service: ...

        assert isinstance(self.cont.bindings.lookup(Service), SingletonBinding)
        assert self.cont.get(Service) is self.cont.get(Service)

    def test_singleton_decorator_with_constructor_arguments(self):
        @self.cont.singleton(args=("primary",), kwargs={"size": 4})
        class Pool:
            def __init__(self, name, size=1):
                self.name = name
                self.size = size

        pool = self.cont.get(Pool)
        assert (pool.name, pool.size) == ("primary", 4)

    def test_instance_decorator(self):
        @self.cont.instance
        class Request: ...

        assert self.cont.get(Request) is not self.cont.get(Request)

    def test_instance_decorator_with_constructor_arguments(self):
        @self.cont.instance(args=(3,))
        class Retry:
            def __init__(self, attempts):
                self.attempts = attempts

        assert self.cont.get(Retry).attempts == 3

    def test_factory_decorator(self):
        @self.cont.factory(lambda ctx: "from factory")
        class Service: ...

        assert self.cont.get(Service) == "from factory"

    def test_bind_as_singleton(self):
        class Storage: ...

        @self.cont.bind_as(Storage).singleton
        class DiskStorage(Storage): ...

        storage = self.cont.get(Storage)
        assert isinstance(storage, DiskStorage)
        assert self.cont.get(Storage) is storage
        assert not self.cont.is_bound(DiskStorage)

    def test_bind_as_instance(self):
        class Storage: ...

        @self.cont.bind_as(Storage).instance
        class MemoryStorage(Storage): ...

        assert isinstance(self.cont.get(Storage), MemoryStorage)
        assert self.cont.get(Storage) is not self.cont.get(Storage)

    def test_bind_as_factory(self):
        class Storage: ...

        class NullStorage(Storage): ...

        null = NullStorage()

        @self.cont.bind_as(Storage).factory(lambda ctx: null)
        class Unused(Storage): ...

        assert self.cont.get(Storage) is null

    def test_bind_as_factory_requires_callable(self):
        with pytest.raises(TypeError):
            self.cont.bind_as("storage").factory(None)


class TestFieldDeclarations(unittest.TestCase):
    cont: Container

    def setUp(self):
        self.cont = Container()

    def test_unresolved_field_raises_attribute_error(self):
        c = self.cont

        class Service:
            dep = c.inject("dep")
            url = c.configuration("url")

        svc = Service()

        with pytest.raises(AttributeError):
            svc.dep
        with pytest.raises(AttributeError):
            svc.url
        assert getattr(svc, "dep", None) is None

    def test_markers_record_on_owner_class(self):
        c = self.cont

        class Service:
            dep = c.inject("dep")
            url = c.configuration("url")

        assert c.injections.entries(Service) == [("dep", "dep")]
        assert c.configurations.entries(Service) == [("url", "url")]
        assert Service.dep.owner is Service
        assert Service.dep.name == "dep"

    def test_initializer_decorator_keeps_plain_method(self):
        c = self.cont

        class Service:
            @c.initializer
            def start(self):
                return "started"

        assert c.initializers.get(Service) == "start"
        assert Service().start() == "started"

    def test_initializer_requires_callable(self):
        with pytest.raises(TypeError):
            self.cont.initializer(42)

    def test_explicit_registration_without_decorators(self):
        c = self.cont
        calls = []

        class Service:
            def boot(self):
                calls.append(self.dep)

        c.injections.get_or_create(Service)["dep"] = "dep"
        c.configurations.get_or_create(Service)["env"] = "env"
        c.initializers.set(Service, "boot")
        c.bind("dep").value("d")
        c.configure("env", "prod")

        svc = c.create_instance(Service)

        assert (svc.dep, svc.env) == ("d", "prod")
        assert calls == ["d"]
        assert Service in c.injections
        assert Service in c.initializers

    def test_field_marker_base_cannot_be_instantiated(self):
        with pytest.raises(TypeError):
            _FieldPoint("dep")
