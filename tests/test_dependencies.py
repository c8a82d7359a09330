import pytest

from asyncbind import Container, names_for, requires


def test_names_from_parameters_in_order():
    def factory(db, cache, logger): ...

    assert names_for(factory) == ["db", "cache", "logger"]


def test_drop_last_excludes_callback_parameter():
    def factory(db, cache, done): ...

    assert names_for(factory, drop_last=True) == ["db", "cache"]


def test_drop_last_on_callback_only_factory():
    assert names_for(lambda done: None, drop_last=True) == []


def test_no_parameters():
    assert names_for(lambda: None) == []


def test_declared_dependencies_replace_parameter_names():
    @requires("serviceA", "serviceB")
    def factory(a, b): ...

    assert names_for(factory) == ["serviceA", "serviceB"]


def test_declared_dependencies_are_returned_verbatim_with_drop_last():
    @requires("serviceA")
    def factory(a, done): ...

    assert names_for(factory, drop_last=True) == ["serviceA"]


def test_declared_dependencies_attribute_set_by_hand():
    def factory(x): ...

    factory.__requires__ = ["db"]

    assert names_for(factory) == ["db"]


def test_class_uses_constructor_without_self():
    class Repo:
        def __init__(self, db, cache):
            self.db = db
            self.cache = cache

    assert names_for(Repo) == ["db", "cache"]


def test_variadic_and_keyword_only_parameters_are_skipped():
    def factory(db, *args, timeout=3, **kwargs): ...

    assert names_for(factory) == ["db"]


def test_positional_only_parameters_are_included():
    def factory(db, /, cache): ...

    assert names_for(factory) == ["db", "cache"]


@pytest.mark.asyncio
async def test_factory_receives_declared_services_not_parameter_names():
    c = Container()
    c.register_instance("a", "A")
    c.register_instance("b", "B")
    c.register_instance("serviceA", "declared-A")
    c.register_instance("serviceB", "declared-B")

    @requires("serviceA", "serviceB")
    def make(a, b):
        return (a, b)

    c.register_sync("pair", make)

    assert await c.resolve("pair") == ("declared-A", "declared-B")


@pytest.mark.asyncio
async def test_register_callback_factory_with_declared_dependencies():
    c = Container()
    c.register_instance("db", "database")

    @requires("db")
    def make(database, done):
        done(None, f"repo({database})")

    c.register("repo", make)

    assert await c.resolve("repo") == "repo(database)"


@pytest.mark.asyncio
async def test_declared_empty_list_with_single_callback_parameter():
    c = Container()

    @requires()
    def make(done):
        done(None, "ready")

    c.register("svc", make)

    assert await c.resolve("svc") == "ready"
