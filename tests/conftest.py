import io

import pytest
from PIL import Image

from lolbuild.constants import DDRAGON_BASE, DDRAGON_LOCALE, DDRAGON_VERSIONS_URL
from lolbuild.ddragon import DataDragonClient, VersionedAssetCache
from lolbuild.models import FetchResult

VERSION = "14.10.1"

CHAMPIONS = {
    "Ahri": {"id": "Ahri", "key": "103", "name": "Ahri"},
    "Kaisa": {"id": "Kaisa", "key": "145", "name": "Kai'Sa"},
    "Karma": {"id": "Karma", "key": "43", "name": "Karma"},
    "MonkeyKing": {"id": "MonkeyKing", "key": "62", "name": "Wukong"},
    "Yasuo": {"id": "Yasuo", "key": "157", "name": "Yasuo"},
    "Zed": {"id": "Zed", "key": "238", "name": "Zed"},
}

ITEMS = {
    "1055": {"name": "Doran's Blade"},
    "2003": {"name": "Health Potion"},
    "3006": {"name": "Berserker's Greaves"},
    "3031": {"name": "Infinity Edge"},
    "3046": {"name": "Phantom Dancer"},
    "3072": {"name": "Bloodthirster"},
    "3153": {"name": "Blade of The Ruined King"},
    "6672": {"name": "Kraken Slayer"},
}

SPELLS = {
    "SummonerFlash": {"key": "4", "name": "Flash", "image": {"full": "SummonerFlash.png"}},
    "SummonerHeal": {"key": "7", "name": "Heal", "image": {"full": "SummonerHeal.png"}},
    "SummonerTeleport": {"key": "12", "name": "Teleport", "image": {"full": "SummonerTeleport.png"}},
}

RUNES = [
    {
        "id": 8000,
        "name": "Precision",
        "icon": "perk-images/Styles/7201_Precision.png",
        "slots": [
            {"runes": [
                {"id": 8005, "name": "Press the Attack", "icon": "perk-images/Styles/Precision/PressTheAttack.png"},
                {"id": 8008, "name": "Lethal Tempo", "icon": "perk-images/Styles/Precision/LethalTempo.png"},
            ]},
            {"runes": [
                {"id": 9111, "name": "Triumph", "icon": "perk-images/Styles/Precision/Triumph.png"},
            ]},
        ],
    },
    {
        "id": 8100,
        "name": "Domination",
        "icon": "perk-images/Styles/7200_Domination.png",
        "slots": [
            {"runes": [
                {"id": 8112, "name": "Electrocute", "icon": "perk-images/Styles/Domination/Electrocute.png"},
            ]},
            {"runes": [
                {"id": 8139, "name": "Taste of Blood", "icon": "perk-images/Styles/Domination/TasteOfBlood.png"},
            ]},
        ],
    },
]


def data_url(filename, version=VERSION):
    return f"{DDRAGON_BASE}/cdn/{version}/data/{DDRAGON_LOCALE}/{filename}"


def png_bytes(size=(8, 8), color=(200, 30, 30, 255)):
    output = io.BytesIO()
    Image.new("RGBA", size, color).save(output, format="PNG")
    return output.getvalue()


def ok(data):
    return FetchResult(status=200, data=data)


def http_error(status):
    return FetchResult(status=status, error=f"HTTP {status}")


class FakeFetcher:
    """Serves canned FetchResults by URL and records every request"""

    def __init__(self, responses=None, default=None):
        self.responses = dict(responses or {})
        self.default = default
        self.calls = []

    async def _get(self, url, headers=None):
        self.calls.append(url)
        if url in self.responses:
            return self.responses[url]
        if self.default is not None:
            return self.default
        return http_error(404)

    async def fetch_text(self, url, headers=None):
        return await self._get(url, headers)

    async def fetch_json(self, url, headers=None):
        return await self._get(url, headers)

    async def fetch_bytes(self, url, headers=None):
        return await self._get(url, headers)

    def count(self, url):
        return self.calls.count(url)


def ddragon_responses(version=VERSION):
    return {
        DDRAGON_VERSIONS_URL: ok([version, "14.9.1"]),
        data_url("champion.json", version): ok({"data": CHAMPIONS}),
        data_url("item.json", version): ok({"data": ITEMS}),
        data_url("summoner.json", version): ok({"data": SPELLS}),
        data_url("runesReforged.json", version): ok(RUNES),
    }


@pytest.fixture
def fetcher():
    return FakeFetcher(ddragon_responses())


@pytest.fixture
def ddragon(fetcher):
    return DataDragonClient(fetcher, VersionedAssetCache())
