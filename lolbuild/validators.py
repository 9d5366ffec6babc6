# lolbuild/validators.py - Input normalization and champion matching
import difflib
import re
import unicodedata
from typing import Iterable, List, Optional

from .constants import AUTOCOMPLETE_LIMIT, VALID_ROLES


def normalize_champion_name(name: str) -> str:
    """Lower-case ASCII form used for URL slugs, cache keys and comparisons

    "Kai'Sa", "kaisa" and "KAI SA" all become "kaisa".
    """
    if not name:
        return ""
    decomposed = unicodedata.normalize("NFKD", name)
    ascii_name = decomposed.encode("ascii", "ignore").decode("ascii")
    return re.sub(r"[^a-z0-9]", "", ascii_name.lower())


def sanitize_input(text: str, max_length: int = 100) -> str:
    """Trim, cap length and strip angle brackets"""
    if not text or not isinstance(text, str):
        return ""
    return re.sub(r"[<>]", "", text.strip()[:max_length])


def validate_role(role: Optional[str]) -> bool:
    return role is not None and role.lower() in VALID_ROLES


def filter_champion_names(names: Iterable[str], query: str,
                          limit: int = AUTOCOMPLETE_LIMIT) -> List[str]:
    """Autocomplete filter: case-insensitive substring, alphabetical, capped"""
    query = (query or "").strip().lower()
    ordered = sorted(set(names), key=str.lower)
    if query:
        ordered = [name for name in ordered if query in name.lower()]
    return ordered[:limit]


def find_champion(name: str, names: Iterable[str]) -> Optional[str]:
    """Return the display name matching the input after normalization"""
    wanted = normalize_champion_name(name)
    if not wanted:
        return None
    for candidate in names:
        if normalize_champion_name(candidate) == wanted:
            return candidate
    return None


def suggest_champions(name: str, names: Iterable[str], limit: int = 5) -> List[str]:
    """Substring matches first, then difflib close matches"""
    names = list(names)
    wanted = normalize_champion_name(name)
    if not wanted:
        return []

    suggestions = []
    for candidate in names:
        normalized = normalize_champion_name(candidate)
        if wanted in normalized or normalized in wanted:
            suggestions.append(candidate)

    if len(suggestions) < limit:
        close = difflib.get_close_matches(name, names, n=limit, cutoff=0.6)
        suggestions.extend(c for c in close if c not in suggestions)

    return suggestions[:limit]
