# lolbuild/constants.py - Constants and configuration
from typing import Dict, FrozenSet, List, Tuple

# Data Dragon
DDRAGON_BASE = "https://ddragon.leagueoflegends.com"
DDRAGON_VERSIONS_URL = f"{DDRAGON_BASE}/api/versions.json"
DDRAGON_FALLBACK_VERSION = "14.1.1"
DDRAGON_LOCALE = "en_US"
VERSION_TTL = 15 * 60  # 15 minutes

# Scraped sites
MOBALYTICS_BASE = "https://mobalytics.gg/lol/champions"
LEAGUEOFGRAPHS_BASE = "https://www.leagueofgraphs.com/champions"

BROWSER_HEADERS: Dict[str, str] = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}

HTTP_TIMEOUT = 10

# Caching
BUILD_CACHE_TTL = 24 * 60 * 60  # 24 hours
IMAGE_CACHE_MAX_AGE = 7 * 24 * 60 * 60  # 7 days
AUTOCOMPLETE_TIMEOUT = 2.5
AUTOCOMPLETE_LIMIT = 25
COUNTER_LIMIT = 10

# Requests per window (requests, seconds), keyed by host
HOST_RATE_LIMITS: Dict[str, List[Tuple[int, int]]] = {
    "mobalytics.gg": [(10, 60)],
    "www.leagueofgraphs.com": [(10, 60)],
    "ddragon.leagueoflegends.com": [(100, 60)],
    "api.riotgames.com": [(20, 1), (100, 120)],
}

# Path fragments per host that bypass throttling (static CDN images)
UNTHROTTLED_PATHS: Dict[str, Tuple[str, ...]] = {
    "ddragon.leagueoflegends.com": ("/img/",),
}

# Role input -> Mobalytics path segment
MOBALYTICS_ROLES: Dict[str, str] = {
    "top": "top",
    "jungle": "jungle",
    "mid": "mid",
    "middle": "mid",
    "adc": "adc",
    "bottom": "adc",
    "bot": "adc",
    "support": "support",
    "sup": "support",
}

# Role input -> LeagueOfGraphs path segment
LEAGUEOFGRAPHS_ROLES: Dict[str, str] = {
    "top": "top",
    "jungle": "jungle",
    "mid": "middle",
    "middle": "middle",
    "adc": "adc",
    "bottom": "adc",
    "bot": "adc",
    "support": "support",
    "sup": "support",
}

ROLE_CHOICES = ("top", "jungle", "middle", "adc", "support")
VALID_ROLES = tuple(MOBALYTICS_ROLES)

# Lane labels that leak into scraped counter lists
COUNTER_ARTIFACTS: FrozenSet[str] = frozenset(
    {"top", "mid", "middle", "jungle", "bot", "bottom", "adc", "support"}
)

BOOTS_IDS: FrozenSet[int] = frozenset({3006, 3009, 3020, 3047, 3111, 3117, 3158})

# Rune trees: Precision, Domination, Sorcery, Inspiration, Resolve
RUNE_STYLES: FrozenSet[int] = frozenset({8000, 8100, 8200, 8300, 8400})

DEFAULT_SPELLS = [4, 12]  # Flash, Teleport

SUMMONER_SPELLS: Dict[int, str] = {
    4: "Flash",
    7: "Heal",
    14: "Ignite",
    12: "Teleport",
    6: "Ghost",
    3: "Exhaust",
    11: "Smite",
    21: "Barrier",
    1: "Cleanse",
}

# Stat shard grid drawn under the secondary tree
SHARD_ROWS: List[List[int]] = [
    [5008, 5005, 5007],
    [5008, 5010, 5001],
    [5001, 5002, 5003],
]
DEFAULT_SHARDS = [5008, 5008, 5002]

SHARD_ICONS: Dict[int, str] = {
    5008: "StatModsAdaptiveForceIcon.png",
    5005: "StatModsAttackSpeedIcon.png",
    5007: "StatModsCDRScalingIcon.png",
    5010: "StatModsMovementSpeedIcon.png",
    5001: "StatModsHealthScalingIcon.png",
    5002: "StatModsArmorIcon.png",
    5003: "StatModsMagicResIcon.png",
    5011: "StatModsTenacityIcon.png",
}

# Riot API (challenger source)
RIOT_PLATFORM = "kr"
RIOT_ROUTING = "asia"
CHALLENGER_SAMPLE_SIZE = 10
CHALLENGER_MATCHES_TO_CHECK = 20
RANKED_SOLO_QUEUE = 420

# Card colours
COLORS = {
    "gold": (200, 170, 110),
    "title": (240, 230, 210),
    "subtitle": (160, 155, 140),
    "separator": (60, 60, 65),
    "item_border": (92, 91, 87),
    "slot_bg": (30, 35, 40),
    "build_bg_top": (17, 19, 31),
    "build_bg_bottom": (10, 11, 18),
    "counter_bg_top": (26, 27, 38),
    "counter_bg_bottom": (15, 16, 22),
    "easy": (74, 222, 128),
    "hard": (248, 113, 113),
    "rank_gold": (255, 215, 0),
    "rank_silver": (192, 192, 192),
    "rank_bronze": (205, 127, 50),
    "rank_other": (74, 74, 74),
}

# Embed colours
EMBED_COLOR_BUILD = 0xC8AA6E
EMBED_COLOR_COUNTER = 0x4ADE80
EMBED_COLOR_ERROR = 0xFF0000
EMBED_COLOR_INFO = 0x0099E1

# User-facing failure messages returned by the resolvers
MSG_NOT_FOUND = "No build data found for {champion}. Check the spelling or try another role."
MSG_COUNTERS_NOT_FOUND = "No counter data found for {champion}."
MSG_UPSTREAM = "Build sites are not responding right now. Please try again later."
