import threading

import pytest

from lolbuild.cache import BuildCache
from lolbuild.constants import MSG_NOT_FOUND, MSG_UPSTREAM
from lolbuild.errors import InvalidRoleError
from lolbuild.models import BuildResult, CounterEntry, FetchResult, ItemSet
from lolbuild.resolvers import (
    BuildResolver,
    CounterResolver,
    ScrapedSource,
    clean_counter_list,
    leagueofgraphs_build_url,
    leagueofgraphs_counters_url,
    mobalytics_build_url,
    mobalytics_counters_url,
)

from .conftest import VERSION, ok
from .pages import LEAGUEOFGRAPHS_BUILD, LEAGUEOFGRAPHS_COUNTERS, MOBALYTICS_BUILD, SOFT_404, mobalytics_counters


class StubRiotSource:
    name = "Riot API (Challenger)"

    def __init__(self, build=None):
        self.build = build
        self.calls = 0

    async def fetch_build(self, champion, role=None):
        self.calls += 1
        return self.build


def test_url_builders():
    assert mobalytics_build_url("kaisa") == "https://mobalytics.gg/lol/champions/kaisa/build"
    assert mobalytics_build_url("kaisa", "middle").endswith("/kaisa/build/mid")
    assert mobalytics_counters_url("kaisa").endswith("/kaisa/counters")
    assert leagueofgraphs_build_url("kaisa", "mid").endswith("/builds/kaisa/middle")
    assert leagueofgraphs_counters_url("kaisa") == "https://www.leagueofgraphs.com/champions/counters/kaisa"


async def test_mobalytics_build_resolved_and_cached(ddragon, fetcher, tmp_path):
    fetcher.responses[mobalytics_build_url("kaisa")] = ok(MOBALYTICS_BUILD)
    cache = BuildCache(tmp_path)
    resolver = BuildResolver(ddragon, fetcher, cache)

    build = await resolver.resolve("Kai'Sa", version=VERSION)
    assert build.success
    assert build.champion == "Kai'Sa"
    assert build.source == "Mobalytics"
    assert build.items.boots == [3006]

    again = await resolver.resolve("kaisa", version=VERSION)
    assert again.success
    assert again.champion == "kaisa"
    assert fetcher.count(mobalytics_build_url("kaisa")) == 1


async def test_falls_back_to_leagueofgraphs(ddragon, fetcher):
    fetcher.responses[mobalytics_build_url("yasuo", "mid")] = ok(SOFT_404)
    fetcher.responses[leagueofgraphs_build_url("yasuo", "mid")] = ok(LEAGUEOFGRAPHS_BUILD)
    resolver = BuildResolver(ddragon, fetcher)

    build = await resolver.resolve("Yasuo", "mid", version=VERSION)
    assert build.success
    assert build.source == "LeagueOfGraphs"


async def test_every_source_404_is_not_found(ddragon, fetcher):
    riot = StubRiotSource()
    resolver = BuildResolver(ddragon, fetcher, riot_source=riot)

    build = await resolver.resolve("Nosuchchamp", version=VERSION)
    assert not build.success
    assert build.error == MSG_NOT_FOUND.format(champion="Nosuchchamp")
    assert riot.calls == 1


async def test_upstream_failure_message(ddragon, fetcher):
    fetcher.responses[mobalytics_build_url("zed")] = FetchResult(error="timeout")
    resolver = BuildResolver(ddragon, fetcher)

    build = await resolver.resolve("Zed", version=VERSION)
    assert not build.success
    assert build.error == MSG_UPSTREAM


async def test_riot_source_is_last_resort(ddragon, fetcher):
    riot_build = BuildResult(success=True, items=ItemSet(core=[3031]), source="Riot API (Challenger)")
    resolver = BuildResolver(ddragon, fetcher, riot_source=StubRiotSource(riot_build))

    build = await resolver.resolve("Zed", "middle", version=VERSION)
    assert build.success
    assert build.source == "Riot API (Challenger)"
    assert build.role == "Middle"


async def test_unknown_role_rejected(ddragon, fetcher):
    with pytest.raises(InvalidRoleError):
        await BuildResolver(ddragon, fetcher).resolve("Zed", "carry", version=VERSION)


def test_clean_counter_list_drops_artifacts_and_caps():
    entries = [CounterEntry("Top"), CounterEntry("x"), CounterEntry("Middle")]
    entries += [CounterEntry(f"Champ{i}") for i in range(15)]
    cleaned = clean_counter_list(entries)

    assert len(cleaned) == 10
    assert cleaned[0].name == "Champ0"
    assert all(e.name.lower() not in ("top", "middle") for e in cleaned)


def test_clean_counter_list_keeps_names_containing_lane_words():
    cleaned = clean_counter_list([CounterEntry("Master Yi"), CounterEntry("Mid")])
    assert [e.name for e in cleaned] == ["Master Yi"]


async def test_counters_from_mobalytics(fetcher):
    fetcher.responses[mobalytics_counters_url("yasuo")] = ok(mobalytics_counters("yasuo"))
    result = await CounterResolver(fetcher).resolve("Yasuo")

    assert result.success
    assert result.champion == "Yasuo"
    assert result.source == "Mobalytics"
    assert [e.name for e in result.easy] == ["Zed", "Ahri"]


async def test_counters_fall_back_to_leagueofgraphs(fetcher):
    fetcher.responses[leagueofgraphs_counters_url("yasuo")] = ok(LEAGUEOFGRAPHS_COUNTERS)
    result = await CounterResolver(fetcher).resolve("Yasuo")

    assert result.success
    assert result.source == "LeagueOfGraphs"
    assert [e.name for e in result.hard] == ["Karma"]


async def test_counters_not_found(fetcher):
    result = await CounterResolver(fetcher).resolve("Nosuchchamp")
    assert not result.success
    assert "Nosuchchamp" in result.error


class ThreadRecordingParser:
    name = "Recording"

    def __init__(self):
        self.threads = []

    def parse(self, html):
        self.threads.append(threading.current_thread())
        return BuildResult(success=True, items=ItemSet(core=[3031]), source="Recording")


async def test_pages_are_parsed_off_the_event_loop(ddragon, fetcher):
    parser = ThreadRecordingParser()
    source = ScrapedSource("Recording", mobalytics_build_url, parser)
    fetcher.responses[mobalytics_build_url("zed")] = ok("<html><body>Zed build</body></html>")

    build = await BuildResolver(ddragon, fetcher, sources=[source]).resolve("Zed", version=VERSION)

    assert build.success
    assert len(parser.threads) == 1
    assert parser.threads[0] is not threading.main_thread()
