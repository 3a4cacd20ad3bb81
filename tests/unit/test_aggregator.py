import logging

import pytest

from core.aggregator import NewsAggregator
from core.exceptions import DatabaseOperationError, ProviderRequestError
from core.models import Source
from core.providers import (GuardianProvider, NewsApiProvider, NytProvider, ProviderRegistry, get_provider,
                            list_available_providers)
from fakes import FakeProvider, make_article


def articles(prefix, count):
    return [make_article(f"{prefix} {i}", f"https://{prefix}.example/{i}") for i in range(count)]


@pytest.mark.parametrize("max_workers", [1, 4])
def test_results_follow_registration_order(max_workers):
    first = FakeProvider("first", articles("first", 2), delay=0.05)
    second = FakeProvider("second", articles("second", 1))
    aggregator = NewsAggregator([first, second], max_workers=max_workers)

    merged = aggregator.get_articles()

    assert [a.title for a in merged] == ["first 0", "first 1", "second 0"]


@pytest.mark.parametrize("max_workers", [1, 3])
def test_failing_provider_is_isolated(max_workers, caplog):
    caplog.set_level(logging.ERROR, logger="core.aggregator")
    broken = FakeProvider("broken", error=DatabaseOperationError('insert', 'articles', RuntimeError("disk full")))
    healthy = FakeProvider("healthy", articles("healthy", 2))
    unexpected = FakeProvider("unexpected", error=RuntimeError("bug"))
    aggregator = NewsAggregator([broken, healthy, unexpected], max_workers=max_workers)

    merged = aggregator.get_articles()

    assert [a.title for a in merged] == ["healthy 0", "healthy 1"]
    assert "Error fetching articles from broken" in caplog.text
    assert "Error fetching articles from unexpected" in caplog.text


def test_all_providers_failing_gives_empty_list():
    aggregator = NewsAggregator([
        FakeProvider("a", error=ProviderRequestError("a", "https://a.example", "timeout")),
        FakeProvider("b", error=ValueError("bad")),
    ])
    assert aggregator.get_articles() == []
    assert aggregator.search_articles("x") == []
    assert aggregator.get_sources() == []


def test_empty_aggregator():
    assert NewsAggregator().get_articles() == []


def test_params_and_query_are_forwarded():
    provider = FakeProvider("p", articles("p", 1))
    aggregator = NewsAggregator([provider])

    aggregator.get_articles({'country': 'gb'})
    aggregator.search_articles("climate", {'pageSize': 5})
    aggregator.get_sources()

    assert provider.calls == [
        ('fetch_top_articles', {'country': 'gb'}),
        ('search_articles', 'climate', {'pageSize': 5}),
        ('fetch_sources', None),
    ]


def test_get_sources_concatenates():
    aggregator = NewsAggregator()
    aggregator.add_provider(FakeProvider("a", sources=[Source.describe("A One", "a")]))
    aggregator.add_provider(FakeProvider("b", sources=[Source.describe("B One", "b"), Source.describe("B Two", "b")]))

    assert [s.name for s in aggregator.get_sources()] == ["A One", "B One", "B Two"]


def test_providers_property_is_a_copy():
    aggregator = NewsAggregator([FakeProvider("a")])
    aggregator.providers.append(FakeProvider("b"))
    assert len(aggregator.providers) == 1


def test_create_with_default_providers(app_config, recording_database):
    aggregator = NewsAggregator.create_with_default_providers(app_config, recording_database)

    assert [type(p) for p in aggregator.providers] == [NewsApiProvider, GuardianProvider, NytProvider]
    assert aggregator.max_workers == 1
    assert all(p.database is recording_database for p in aggregator.providers)


def test_create_with_selected_provider(app_config, recording_database):
    aggregator = NewsAggregator.create_with_default_providers(app_config, recording_database, keys=['guardian'])
    assert [p.name for p in aggregator.providers] == ["The Guardian"]


def test_registry_lists_builtin_providers_in_order():
    assert list_available_providers() == ['newsapi', 'guardian', 'nyt']


def test_registry_builds_provider_from_config(app_config, recording_database):
    provider = get_provider('guardian', recording_database, app_config.providers)
    assert isinstance(provider, GuardianProvider)
    assert provider.api_key == "guardian-key"

    with pytest.raises(KeyError):
        get_provider('reuters', recording_database, app_config.providers)


def test_registry_default_key_from_class_name():
    registry = ProviderRegistry()
    registry.register_provider(NytProvider)
    assert registry.list_available_providers() == ['nyt']


def test_concurrent_workers_release_their_thread_resources():
    providers = [FakeProvider(f"p{i}", articles(f"p{i}", 1)) for i in range(3)]
    aggregator = NewsAggregator(providers, max_workers=3)

    aggregator.get_articles()
    aggregator.get_articles()

    for provider in providers:
        assert len(provider.released_threads) == 2
        assert "MainThread" not in provider.released_threads


def test_failing_worker_still_releases_thread_resources():
    broken = FakeProvider("broken", error=RuntimeError("bug"))
    aggregator = NewsAggregator([broken, FakeProvider("healthy")], max_workers=2)

    assert aggregator.get_sources() == []
    assert len(broken.released_threads) == 1


def test_sequential_run_keeps_calling_thread_resources():
    provider = FakeProvider("only", articles("only", 1))
    NewsAggregator([provider, FakeProvider("other")]).get_articles()
    assert provider.released_threads == []


def test_close_closes_every_provider():
    providers = [FakeProvider("a"), FakeProvider("b")]
    with NewsAggregator(providers) as aggregator:
        aggregator.get_articles()
    assert all(provider.closed for provider in providers)
