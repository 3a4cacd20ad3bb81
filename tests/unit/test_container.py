import pytest

from core.container import Container, get_container, reset_container, singleton


class Closable:
    def __init__(self):
        self.closed = False

    def close(self):
        self.closed = True


def test_singleton_is_created_once():
    container = Container()
    container.register_singleton('service', object)
    assert container.get('service') is container.get('service')


def test_factory_creates_fresh_instances():
    container = Container()
    container.register_factory('service', object)
    assert container.get('service') is not container.get('service')


def test_singleton_decorator_on_factory_registration():
    container = Container()
    container.register_factory('service', singleton(object))
    assert container.get('service') is container.get('service')


def test_registered_instance_wins():
    container = Container()
    instance = object()
    container.register_singleton('service', object)
    container.register_instance('service', instance)
    assert container.get('service') is instance
    assert container.has('service')


def test_unknown_service():
    with pytest.raises(KeyError):
        Container().get('missing')


def test_reset_singleton_recreates():
    container = Container()
    container.register_singleton('service', object)
    first = container.get('service')
    container.reset_singleton('service')
    assert container.get('service') is not first


def test_clear_closes_singletons():
    container = Container()
    resource = Closable()
    container.register_instance('resource', resource)

    container.clear()

    assert resource.closed
    assert not container.has('resource')


def test_global_container_registers_defaults():
    reset_container()
    try:
        container = get_container()
        assert container is get_container()
        for name in ('config', 'database', 'aggregator'):
            assert container.has(name)
    finally:
        reset_container()
