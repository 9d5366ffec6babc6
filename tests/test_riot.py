from lolbuild.riot import RiotChallengerSource, participant_to_build

from .conftest import FakeFetcher, ok

LEAGUE_URL = "https://kr.api.riotgames.com/lol/league/v4/challengerleagues/by-queue/RANKED_SOLO_5x5"
IDS_URL = "https://asia.api.riotgames.com/lol/match/v5/matches/by-puuid/p1/ids?queue=420&count=20"
MATCH_URL = "https://asia.api.riotgames.com/lol/match/v5/matches/KR_1"

PARTICIPANT = {
    "puuid": "p1",
    "championName": "Kaisa",
    "teamPosition": "BOTTOM",
    "win": True,
    "item0": 6672,
    "item1": 3006,
    "item2": 3031,
    "item3": 0,
    "item4": 0,
    "item5": 0,
    "item6": 3363,
    "summoner1Id": 4,
    "summoner2Id": 7,
    "perks": {
        "statPerks": {"offense": 5005, "flex": 5008, "defense": 5002},
        "styles": [
            {"style": 8000, "selections": [{"perk": 8008}, {"perk": 9111}, {"perk": 9104}, {"perk": 8014}]},
            {"style": 8100, "selections": [{"perk": 8139}, {"perk": 8135}]},
        ],
    },
}


def test_participant_to_build():
    build = participant_to_build(PARTICIPANT, "Riot API (Challenger)")

    assert build.items.core == [6672, 3031]
    assert build.items.boots == [3006]
    assert build.spells == [4, 7]
    assert build.runes.primary_tree == 8000
    assert build.runes.secondary_tree == 8100
    assert build.runes.shards == [5005, 5008, 5002]
    assert build.role == "Bottom"


def _fetcher():
    return FakeFetcher({
        LEAGUE_URL: ok({"entries": [{"puuid": "p1"}]}),
        IDS_URL: ok(["KR_1"]),
        MATCH_URL: ok({"info": {"participants": [PARTICIPANT]}}),
    })


async def test_no_key_means_no_requests():
    fetcher = _fetcher()

    async def no_key():
        return None

    assert await RiotChallengerSource(fetcher, no_key).fetch_build("Kai'Sa") is None
    assert fetcher.calls == []


async def test_finds_challenger_game():
    async def key():
        return "RGAPI-test"

    build = await RiotChallengerSource(_fetcher(), key).fetch_build("Kai'Sa", "adc")
    assert build is not None
    assert build.source == "Riot API (Challenger)"


async def test_other_champion_not_matched():
    async def key():
        return "RGAPI-test"

    assert await RiotChallengerSource(_fetcher(), key).fetch_build("Zed") is None
