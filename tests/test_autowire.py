import unittest

from injectio import Container


class TestAutoWire(unittest.TestCase):
    cont: Container

    def setUp(self):
        self.cont = Container()
        self.resolutions = []
        self.cont.bind("dep").factory(lambda ctx: self.resolutions.append(ctx.name) or "dep")

    def test_direct_construction_resolves_exactly_once(self):
        c = self.cont
        inits = []

        @c.autowire
        class Service:
            dep = c.inject("dep")

            @c.initializer
            def ready(self):
                inits.append(self.dep)

        svc = Service()

        assert svc.dep == "dep"
        assert self.resolutions == ["Service"]
        assert inits == ["dep"]

    def test_autowire_returns_the_decorated_class(self):
        c = self.cont

        class Service: ...

        assert c.autowire(Service) is Service
        assert Service in c.autowired

    def test_create_instance_of_autowired_class_resolves_exactly_once(self):
        c = self.cont

        @c.autowire
        class Service:
            dep = c.inject("dep")

        svc = c.create_instance(Service)

        assert svc.dep == "dep"
        assert self.resolutions == ["Service"]

    def test_binding_to_autowired_class_resolves_exactly_once(self):
        c = self.cont

        @c.autowire
        class Service:
            dep = c.inject("dep")

        c.bind(Service).instance(Service)
        c.get(Service)
        c.get(Service)

        assert self.resolutions == ["Service", "Service"]

    def test_original_init_runs_with_arguments(self):
        c = self.cont

        @c.autowire
        class Service:
            dep = c.inject("dep")

            def __init__(self, name, *, retries=1):
                self.name = name
                self.retries = retries

        direct = Service("direct", retries=3)
        built = c.create_instance(Service, "built")

        assert (direct.name, direct.retries, direct.dep) == ("direct", 3, "dep")
        assert (built.name, built.retries, built.dep) == ("built", 1, "dep")
        assert self.resolutions == ["Service", "Service"]

    def test_autowired_subclass_of_autowired_base_resolves_once(self):
        c = self.cont
        inits = []

        @c.autowire
        class Base:
            dep = c.inject("dep")

            @c.initializer
            def init_base(self):
                inits.append("base")

        @c.autowire
        class Derived(Base):
            def __init__(self):
                super().__init__()
                self.extra = True

            @c.initializer
            def init_derived(self):
                inits.append("derived")

        obj = Derived()

        assert obj.extra is True
        assert self.resolutions == ["Derived"]
        assert inits == ["base", "derived"]

    def test_create_instance_of_plain_subclass_of_autowired_base_resolves_once(self):
        c = self.cont

        @c.autowire
        class Base:
            dep = c.inject("dep")

        class Derived(Base): ...

        c.create_instance(Derived)

        assert self.resolutions == ["Derived"]

    def test_autowired_instance_constructed_inside_another_init_is_wired(self):
        c = self.cont

        @c.autowire
        class Inner:
            dep = c.inject("dep")

        @c.autowire
        class Outer:
            def __init__(self):
                self.inner = Inner()

        outer = c.create_instance(Outer)

        assert outer.inner.dep == "dep"
        assert self.resolutions == ["Inner"]
