# lolbuild/parsers.py - Page parsers for the scraped build sites
"""
Each parser turns one downloaded page into a BuildResult or CounterResult.

Parsers never raise on odd markup. A category that cannot be read stays
empty, and a page with nothing usable yields None so the resolver can move
on to the next source.
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional

from bs4 import BeautifulSoup

from .constants import BOOTS_IDS, DEFAULT_SPELLS, RUNE_STYLES
from .models import BuildResult, CounterEntry, CounterResult, ItemSet, RuneSelection

logger = logging.getLogger("red.lolbuild.parsers")

STATE_RE = re.compile(r"window\.__PRELOADED_STATE__\s*=\s*(\{[\s\S]*?\});?\s*</script>")
BUILD_MARKER_RE = re.compile(r'"__typename":"LolChampionBuild"')
BUILD_CHUNK_SIZE = 5000


def is_not_found_page(html: str) -> bool:
    """Detect soft 404 pages that are served with HTTP 200"""
    if not html:
        return False
    soup = BeautifulSoup(html, "html.parser")
    title = soup.title.get_text().lower() if soup.title else ""
    if "not found" in title or "404" in title:
        return True
    body = soup.body.get_text(" ").lower() if soup.body else ""
    return "looks like you are lost" in body or "page not found" in body


def extract_preloaded_state(html: str) -> Optional[str]:
    match = STATE_RE.search(html or "")
    return match.group(1) if match else None


def _int_list(raw: str) -> List[int]:
    return [int(n) for n in raw.split(",") if n.strip().isdigit()]


class BuildPageParser:
    """Strategy interface for build pages"""
    name = "unknown"

    def parse(self, html: str) -> Optional[BuildResult]:
        raise NotImplementedError


class CounterPageParser:
    """Strategy interface for counter pages"""
    name = "unknown"

    def parse(self, html: str, slug: str) -> Optional[CounterResult]:
        raise NotImplementedError


class MobalyticsBuildParser(BuildPageParser):
    """Reads LolChampionBuild blocks out of the embedded preloaded state.

    The state blob is large and not always valid JSON, so each build block is
    read with targeted regexes over a fixed-size window after its marker.
    The block with the highest match count wins.
    """

    name = "Mobalytics"

    ITEM_GROUP_RE = r'"type":"{0}"[^}}]*"items":\[([\d,]+)\]'

    def parse(self, html: str) -> Optional[BuildResult]:
        state = extract_preloaded_state(html)
        if state is None:
            logger.info("Mobalytics: __PRELOADED_STATE__ not found")
            return None

        best = None
        best_matches = -1
        for marker in BUILD_MARKER_RE.finditer(state):
            chunk = state[marker.start():marker.start() + BUILD_CHUNK_SIZE]
            stats = re.search(r'"stats":\s*(\{[^}]+\})', chunk)
            if not stats:
                continue
            wins = re.search(r'"wins":\s*(\d+)', stats.group(1))
            matches = re.search(r'"matchCount":\s*(\d+)', stats.group(1))
            if not wins or not matches:
                continue
            match_count = int(matches.group(1))
            if match_count <= 0 or match_count <= best_matches:
                continue

            best_matches = match_count
            best = self._parse_block(chunk, int(wins.group(1)), match_count)

        if best is None:
            logger.info("Mobalytics: no build block with stats")
            return None
        if not best.items.core and not best.runes.perks:
            return None
        return best

    def _parse_block(self, chunk: str, wins: int, match_count: int) -> BuildResult:
        role = re.search(r'"role":"([A-Z]+)"', chunk)
        spells = re.search(r'"spells":\[(\d+),(\d+)\]', chunk)
        perks = re.search(r'"IDs":\[([\d,]+)\]', chunk)
        style = re.search(r'"style":(\d+)', chunk)
        sub_style = re.search(r'"subStyle":(\d+)', chunk)

        items = ItemSet(
            starter=self._item_group(chunk, "Starter"),
            early=self._item_group(chunk, "Early"),
            situational=self._item_group(chunk, "FullBuild"),
        )
        for item_id in self._item_group(chunk, "Core"):
            if item_id in BOOTS_IDS:
                items.boots.append(item_id)
            else:
                items.core.append(item_id)

        return BuildResult(
            success=True,
            role=role.group(1).capitalize() if role else "Popular",
            win_rate=f"{wins / match_count * 100:.1f}%",
            match_count=f"{match_count:,}",
            items=items,
            runes=RuneSelection(
                primary_tree=int(style.group(1)) if style else 0,
                secondary_tree=int(sub_style.group(1)) if sub_style else 0,
                perks=_int_list(perks.group(1)) if perks else [],
            ),
            spells=[int(spells.group(1)), int(spells.group(2))] if spells else list(DEFAULT_SPELLS),
            source=self.name,
        )

    def _item_group(self, chunk: str, group: str) -> List[int]:
        match = re.search(self.ITEM_GROUP_RE.format(group), chunk)
        return _int_list(match.group(1)) if match else []


class MobalyticsCounterParser(CounterPageParser):
    """Reads countersOptions from the apollo cache in the preloaded state"""

    name = "Mobalytics"

    def parse(self, html: str, slug: str) -> Optional[CounterResult]:
        state_text = extract_preloaded_state(html)
        if state_text is None:
            return None
        try:
            state = json.loads(state_text)
        except ValueError:
            logger.warning("Mobalytics: counters state is not valid JSON")
            return None

        dynamic = state.get("lolState", {}).get("apollo", {}).get("dynamic", {})
        champion_key = next(
            (k for k in dynamic if k.startswith("LolChampion:") and f'"slug":"{slug}"' in k),
            None,
        )
        if champion_key is None:
            return None

        champion_data = dynamic[champion_key] or {}
        easy_key = next((k for k in champion_data if "countersOptions" in k and "ASC" in k), None)
        hard_key = next((k for k in champion_data if "countersOptions" in k and "DESC" in k), None)

        easy = self._options(champion_data.get(easy_key)) if easy_key else []
        hard = self._options(champion_data.get(hard_key)) if hard_key else []
        if not easy and not hard:
            return None
        return CounterResult(success=True, easy=easy, hard=hard, source=self.name)

    @staticmethod
    def _options(data: Optional[Dict[str, Any]]) -> List[CounterEntry]:
        entries = []
        for option in (data or {}).get("options") or []:
            slug = option.get("matchupSlug") or ""
            metrics = option.get("counterMetrics") or {}
            wins = metrics.get("wins") or 0
            losses = metrics.get("looses") or metrics.get("losses") or 0
            total = wins + losses
            entries.append(CounterEntry(
                name=slug[:1].upper() + slug[1:] if slug else "Unknown",
                win_rate=f"{wins / total * 100:.1f}%" if total else "N/A",
                games=str(total),
            ))
        return entries


class LeagueOfGraphsBuildParser(BuildPageParser):
    """Reads the stats boxes of a LeagueOfGraphs build page"""

    name = "LeagueOfGraphs"

    def parse(self, html: str) -> Optional[BuildResult]:
        soup = BeautifulSoup(html, "html.parser")
        result = BuildResult(success=True, source=self.name)

        self._parse_meta(soup, result)

        core_row = self._items_after_header(soup, ("Core Items", "Core Build"))
        result.items = ItemSet(
            starter=self._items_after_header(soup, ("Starting", "Starter"))[:3],
            core=[i for i in core_row if i not in BOOTS_IDS][:3],
            boots=self._items_after_header(soup, ("Boots",))[:1]
            or [i for i in core_row if i in BOOTS_IDS][:1],
            situational=self._items_after_header(soup, ("Final Item", "Situational"))[:3],
        )
        result.runes = self._parse_runes(soup)
        spells = self._parse_spells(soup)
        if spells:
            result.spells = spells

        if result.items.is_empty() and not result.runes.perks:
            return None
        return result

    @staticmethod
    def _box_containing(soup: BeautifulSoup, text: str):
        for box in soup.select(".box"):
            if text in box.get_text():
                return box
        return None

    def _parse_meta(self, soup: BeautifulSoup, result: BuildResult):
        box = self._box_containing(soup, "Role")
        if box is None:
            return
        text = box.get_text(" ")
        for label, role in (("Top", "Top"), ("Jungle", "Jungle"), ("Mid", "Mid"),
                            ("ADC", "ADC"), ("Bot", "ADC"), ("Support", "Support")):
            if label in text:
                result.role = role
                break
        win_rate = re.search(r"Winrate:\s*([\d.]+%)", text, re.IGNORECASE)
        if win_rate:
            result.win_rate = win_rate.group(1)
        pick_rate = re.search(r"Popularity:\s*([\d.]+%)", text, re.IGNORECASE)
        if pick_rate:
            result.pick_rate = pick_rate.group(1)

    @staticmethod
    def _items_after_header(soup: BeautifulSoup, keywords) -> List[int]:
        headers = soup.select("h3.box-title, .box-title")
        for keyword in keywords:
            header = next((h for h in headers if keyword in h.get_text().strip()), None)
            if header is None:
                continue
            container = header.find_next_sibling()
            if container is None:
                continue

            ids = []
            for el in container.select("[class*='item-'], img"):
                class_name = " ".join(el.get("class", []))
                class_match = re.search(r"item-(\d+)", class_name)
                if class_match:
                    ids.append(int(class_match.group(1)))
                    continue
                src = el.get("src") or el.get("data-src") or ""
                if "item" in src:
                    src_match = re.search(r"/(\d+)\.png", src)
                    if src_match:
                        ids.append(int(src_match.group(1)))
            # Ordered de-duplication
            return [i for i in dict.fromkeys(ids) if i > 0]
        return []

    def _parse_runes(self, soup: BeautifulSoup) -> RuneSelection:
        box = self._box_containing(soup, "Runes")
        if box is None:
            return RuneSelection()

        selected = []
        for el in box.select("[class*='perk-']"):
            # Unselected runes sit in a faded parent
            parent_style = el.parent.get("style", "") if el.parent else ""
            if "opacity" in parent_style:
                continue
            match = re.search(r"perk-(\d+)", " ".join(el.get("class", [])))
            if match:
                selected.append(int(match.group(1)))

        for img in box.find_all("img"):
            src = img.get("src") or ""
            if "/perks/" in src:
                match = re.search(r"(\d+)\.png", src)
                if match and int(match.group(1)) in RUNE_STYLES:
                    selected.append(int(match.group(1)))

        styles = list(dict.fromkeys(i for i in selected if i in RUNE_STYLES))
        perks = list(dict.fromkeys(i for i in selected if i not in RUNE_STYLES))
        runes = RuneSelection(perks=perks)
        if styles:
            runes.primary_tree = styles[0]
            runes.secondary_tree = styles[1] if len(styles) > 1 else 8000
        return runes

    def _parse_spells(self, soup: BeautifulSoup) -> List[int]:
        box = self._box_containing(soup, "Summoner Spells")
        if box is None:
            return []
        spells = []
        for el in box.select("[class*='spell-']"):
            match = re.search(r"spell-(\d+)", " ".join(el.get("class", [])))
            if match:
                spells.append(int(match.group(1)))
        return list(dict.fromkeys(spells))[:2]


class LeagueOfGraphsCounterParser(CounterPageParser):
    """Reads the 'wins lane against' and 'loses lane against' tables"""

    name = "LeagueOfGraphs"

    def parse(self, html: str, slug: str) -> Optional[CounterResult]:
        soup = BeautifulSoup(html, "html.parser")
        easy, hard = [], []
        for header in soup.find_all("h3"):
            text = header.get_text().strip()
            if "wins lane against" in text:
                target = easy
            elif "loses lane against" in text:
                target = hard
            else:
                continue
            container = header.find_next_sibling()
            if container is None:
                continue
            for link in container.find_all("a"):
                entry = self._entry(link)
                if entry is not None:
                    target.append(entry)

        if not easy and not hard:
            return None
        return CounterResult(success=True, easy=easy, hard=hard, source=self.name)

    @staticmethod
    def _entry(link) -> Optional[CounterEntry]:
        lines = [line.strip() for line in link.get_text().strip().split("\n") if line.strip()]
        if not lines:
            return None

        win_rate = "N/A"
        games = ""
        parent = link.parent
        if parent is not None:
            bar = parent.select_one(".progressBar")
            if bar is not None:
                tip = bar.get("title") or bar.get("data-tip") or ""
                match = re.search(r"([\d.]+%)", tip)
                if match:
                    win_rate = match.group(1)
            games_match = re.search(r"([\d,]+)\s+(?:games|matches)", parent.get_text(" "), re.IGNORECASE)
            if games_match:
                games = games_match.group(1).replace(",", "")
        return CounterEntry(name=lines[0], win_rate=win_rate, games=games)
