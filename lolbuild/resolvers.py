# lolbuild/resolvers.py - Layered build and counter lookup
import asyncio
import logging
from typing import Callable, List, Optional, Sequence, Tuple

from .cache import BuildCache
from .constants import (
    BROWSER_HEADERS,
    COUNTER_ARTIFACTS,
    COUNTER_LIMIT,
    LEAGUEOFGRAPHS_BASE,
    LEAGUEOFGRAPHS_ROLES,
    MOBALYTICS_BASE,
    MOBALYTICS_ROLES,
    MSG_COUNTERS_NOT_FOUND,
    MSG_NOT_FOUND,
    MSG_UPSTREAM,
)
from .errors import InvalidRoleError, NotFoundError, UpstreamError
from .models import BuildResult, CounterEntry, CounterResult
from .parsers import (
    BuildPageParser,
    CounterPageParser,
    LeagueOfGraphsBuildParser,
    LeagueOfGraphsCounterParser,
    MobalyticsBuildParser,
    MobalyticsCounterParser,
    is_not_found_page,
)
from .validators import normalize_champion_name, validate_role

logger = logging.getLogger("red.lolbuild.resolvers")


async def run_blocking(func, *args):
    """Run page parsing in the default executor, off the event loop"""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, func, *args)


def mobalytics_build_url(slug: str, role: Optional[str] = None) -> str:
    url = f"{MOBALYTICS_BASE}/{slug}/build"
    role_slug = MOBALYTICS_ROLES.get((role or "").lower())
    return f"{url}/{role_slug}" if role_slug else url


def mobalytics_counters_url(slug: str) -> str:
    return f"{MOBALYTICS_BASE}/{slug}/counters"


def leagueofgraphs_build_url(slug: str, role: Optional[str] = None) -> str:
    url = f"{LEAGUEOFGRAPHS_BASE}/builds/{slug}"
    role_slug = LEAGUEOFGRAPHS_ROLES.get((role or "").lower())
    return f"{url}/{role_slug}" if role_slug else url


def leagueofgraphs_counters_url(slug: str) -> str:
    return f"{LEAGUEOFGRAPHS_BASE}/counters/{slug}"


class ScrapedSource:
    """A build or counter page: how to address it and how to read it"""

    def __init__(self, name: str, url_for: Callable[..., str], parser):
        self.name = name
        self.url_for = url_for
        self.parser = parser

    async def download(self, fetcher, url: str) -> Tuple[Optional[str], bool]:
        """Returns (html, not_found). html is None on any failure."""
        result = await fetcher.fetch_text(url, headers=BROWSER_HEADERS)
        try:
            result.raise_for_status()
        except NotFoundError as e:
            logger.info(f"{self.name}: {url} -> {e}")
            return None, True
        except UpstreamError as e:
            logger.warning(f"{self.name}: {url} failed ({e})")
            return None, False
        if await run_blocking(is_not_found_page, result.data):
            logger.info(f"{self.name}: {url} is a not-found page")
            return None, True
        return result.data, False


def default_build_sources() -> List[ScrapedSource]:
    return [
        ScrapedSource("Mobalytics", mobalytics_build_url, MobalyticsBuildParser()),
        ScrapedSource("LeagueOfGraphs", leagueofgraphs_build_url, LeagueOfGraphsBuildParser()),
    ]


def default_counter_sources() -> List[ScrapedSource]:
    return [
        ScrapedSource("Mobalytics", mobalytics_counters_url, MobalyticsCounterParser()),
        ScrapedSource("LeagueOfGraphs", leagueofgraphs_counters_url, LeagueOfGraphsCounterParser()),
    ]


class BuildResolver:
    """Disk cache first, then each scraped source, then the Riot API source"""

    def __init__(self, ddragon, fetcher, cache: Optional[BuildCache] = None,
                 sources: Optional[Sequence[ScrapedSource]] = None, riot_source=None):
        self.ddragon = ddragon
        self.fetcher = fetcher
        self.cache = cache
        self.sources = list(sources) if sources is not None else default_build_sources()
        self.riot_source = riot_source

    async def resolve(self, champion: str, role: Optional[str] = None,
                      version: Optional[str] = None) -> BuildResult:
        if role and not validate_role(role):
            raise InvalidRoleError(f"Unknown role `{role}`. Use top, jungle, middle, adc or support.")
        version = version or await self.ddragon.get_latest_version()
        slug = normalize_champion_name(champion)
        if not slug:
            return BuildResult.failure(champion, MSG_NOT_FOUND.format(champion=champion))

        role = role.lower() if role else None
        key = BuildCache.make_key(slug, role)
        if self.cache is not None:
            cached = self.cache.load(key, version)
            if cached is not None:
                cached.champion = champion
                return cached

        all_not_found = True
        for source in self.sources:
            url = source.url_for(slug, role)
            logger.info(f"Fetching build from {url}")
            html, not_found = await source.download(self.fetcher, url)
            build = None
            if html is not None:
                build = await self._parse(source.parser, html)
                # A page that loaded but held no build means no data for this champion
                not_found = build is None
            if build is not None:
                return self._finish(build, champion, role, key, version)
            all_not_found = all_not_found and not_found

        if self.riot_source is not None:
            build = await self.riot_source.fetch_build(champion, role)
            if build is not None:
                return self._finish(build, champion, role, key, version)

        message = MSG_NOT_FOUND if all_not_found else MSG_UPSTREAM
        return BuildResult.failure(champion, message.format(champion=champion))

    @staticmethod
    async def _parse(parser: BuildPageParser, html: str) -> Optional[BuildResult]:
        try:
            return await run_blocking(parser.parse, html)
        except Exception as e:
            logger.error(f"{parser.name} parser failed: {e}", exc_info=True)
            return None

    def _finish(self, build: BuildResult, champion: str, role: Optional[str],
                key: str, version: str) -> BuildResult:
        build.success = True
        build.champion = champion
        build.error = None
        if role and build.role in ("Popular", "Unknown"):
            build.role = role.capitalize()
        if self.cache is not None:
            self.cache.save(key, version, build)
        logger.info(f"Resolved {champion} build from {build.source}")
        return build


def clean_counter_list(entries: List[CounterEntry], limit: int = COUNTER_LIMIT) -> List[CounterEntry]:
    """Drop scraping artifacts and cap the list"""
    cleaned = []
    for entry in entries:
        name = (entry.name or "").strip()
        if len(name) <= 1 or name.lower() in COUNTER_ARTIFACTS:
            continue
        cleaned.append(entry)
    return cleaned[:limit]


class CounterResolver:
    """Mobalytics counters with LeagueOfGraphs as fallback"""

    def __init__(self, fetcher, sources: Optional[Sequence[ScrapedSource]] = None):
        self.fetcher = fetcher
        self.sources = list(sources) if sources is not None else default_counter_sources()

    async def resolve(self, champion: str) -> CounterResult:
        slug = normalize_champion_name(champion)
        if not slug:
            return CounterResult.failure(champion, MSG_COUNTERS_NOT_FOUND.format(champion=champion))

        all_not_found = True
        for source in self.sources:
            url = source.url_for(slug)
            logger.info(f"Fetching counters from {url}")
            html, not_found = await source.download(self.fetcher, url)
            result = None
            if html is not None:
                result = await self._parse(source.parser, html, slug)
                not_found = result is None
            if result is not None:
                result.easy = clean_counter_list(result.easy)
                result.hard = clean_counter_list(result.hard)
                if result.easy or result.hard:
                    result.success = True
                    result.champion = champion
                    return result
                not_found = True
            all_not_found = all_not_found and not_found

        message = MSG_COUNTERS_NOT_FOUND if all_not_found else MSG_UPSTREAM
        return CounterResult.failure(champion, message.format(champion=champion))

    @staticmethod
    async def _parse(parser: CounterPageParser, html: str, slug: str) -> Optional[CounterResult]:
        try:
            return await run_blocking(parser.parse, html, slug)
        except Exception as e:
            logger.error(f"{parser.name} counter parser failed: {e}", exc_info=True)
            return None
