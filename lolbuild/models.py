"""
lolbuild/models.py
Data models for scraped builds, counters and fetch results
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field, asdict

from .constants import DEFAULT_SPELLS
from .errors import NotFoundError, UpstreamError


@dataclass
class FetchResult:
    """Outcome of a single HTTP fetch. Never raised, always returned."""
    status: int = 0
    data: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and 200 <= self.status < 300

    @property
    def not_found(self) -> bool:
        """403 and 404 both mean the page does not exist for our purposes"""
        return self.status in (403, 404)

    def raise_for_status(self):
        if self.not_found:
            raise NotFoundError(f"HTTP {self.status}", self.status)
        if not self.ok:
            raise UpstreamError(self.error or f"HTTP {self.status}", self.status or None)


@dataclass
class ItemSet:
    """Item IDs grouped by build stage"""
    starter: List[int] = field(default_factory=list)
    early: List[int] = field(default_factory=list)
    core: List[int] = field(default_factory=list)
    boots: List[int] = field(default_factory=list)
    situational: List[int] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not any((self.starter, self.early, self.core, self.boots, self.situational))

    def all_items(self) -> List[int]:
        return self.starter + self.early + self.core + self.boots + self.situational

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ItemSet":
        return cls(
            starter=[int(i) for i in data.get("starter", [])],
            early=[int(i) for i in data.get("early", [])],
            core=[int(i) for i in data.get("core", [])],
            boots=[int(i) for i in data.get("boots", [])],
            situational=[int(i) for i in data.get("situational", [])],
        )


@dataclass
class RuneSelection:
    """Primary and secondary tree plus every selected perk, shards last"""
    primary_tree: int = 0
    secondary_tree: int = 0
    perks: List[int] = field(default_factory=list)

    @property
    def shards(self) -> List[int]:
        """Stat shards are the last three perks of a full rune page"""
        if len(self.perks) > 6:
            return self.perks[-3:]
        return []

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RuneSelection":
        return cls(
            primary_tree=int(data.get("primary_tree", 0)),
            secondary_tree=int(data.get("secondary_tree", 0)),
            perks=[int(p) for p in data.get("perks", [])],
        )


@dataclass
class BuildResult:
    """A recommended build for one champion and role"""
    success: bool
    champion: str = ""
    role: str = "Popular"
    win_rate: str = "N/A"
    pick_rate: str = "N/A"
    match_count: str = "N/A"
    items: ItemSet = field(default_factory=ItemSet)
    runes: RuneSelection = field(default_factory=RuneSelection)
    spells: List[int] = field(default_factory=lambda: list(DEFAULT_SPELLS))
    source: str = ""
    error: Optional[str] = None

    @classmethod
    def failure(cls, champion: str, error: str) -> "BuildResult":
        return cls(success=False, champion=champion, error=error)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BuildResult":
        return cls(
            success=bool(data.get("success", True)),
            champion=data.get("champion", ""),
            role=data.get("role", "Popular"),
            win_rate=data.get("win_rate", "N/A"),
            pick_rate=data.get("pick_rate", "N/A"),
            match_count=data.get("match_count", "N/A"),
            items=ItemSet.from_dict(data.get("items", {})),
            runes=RuneSelection.from_dict(data.get("runes", {})),
            spells=[int(s) for s in data.get("spells", DEFAULT_SPELLS)],
            source=data.get("source", ""),
            error=data.get("error"),
        )


@dataclass
class CounterEntry:
    """One matchup in a counter list"""
    name: str
    win_rate: str = "N/A"
    games: str = ""


@dataclass
class CounterResult:
    """Easy and hard matchups for one champion"""
    success: bool
    champion: str = ""
    easy: List[CounterEntry] = field(default_factory=list)
    hard: List[CounterEntry] = field(default_factory=list)
    source: str = ""
    error: Optional[str] = None

    @classmethod
    def failure(cls, champion: str, error: str) -> "CounterResult":
        return cls(success=False, champion=champion, error=error)
