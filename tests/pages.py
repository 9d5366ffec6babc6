"""Trimmed copies of the markup served by the build sites"""

import json


def preloaded(state_text):
    return (
        "<html><head><title>Build</title></head><body><div id='root'></div>"
        f"<script>window.__PRELOADED_STATE__ = {state_text};</script>"
        "</body></html>"
    )


def mobalytics_build_block(role, wins, matches, core, spells=(4, 7)):
    return (
        '{"__typename":"LolChampionBuild","role":"%s","stats":{"wins":%d,"matchCount":%d},'
        '"spells":[%d,%d],"perks":{"IDs":[8008,9111,9104,8014,8139,8135,5005,5008,5002],'
        '"style":8000,"subStyle":8100},"items":[{"type":"Starter","items":[1055,2003]},'
        '{"type":"Core","items":[%s]},{"type":"FullBuild","items":[3072,3046]}]}'
        % (role, wins, matches, spells[0], spells[1], ",".join(str(i) for i in core))
    )


# The less played TOP block comes first, the ADC block has the most games
MOBALYTICS_BUILD = preloaded(
    '{"lolState":{"builds":['
    + mobalytics_build_block("TOP", 10, 20, [3047, 3153])
    + ","
    + mobalytics_build_block("ADC", 520, 1000, [3006, 6672, 3031])
    + "]}}"
)


def mobalytics_counters(slug="yasuo"):
    state = {
        "lolState": {
            "apollo": {
                "dynamic": {
                    'LolChampion:{"slug":"%s"}' % slug: {
                        'countersOptions({"sortBy":"ASC"})': {
                            "options": [
                                {"matchupSlug": "zed", "counterMetrics": {"wins": 60, "looses": 40}},
                                {"matchupSlug": "ahri", "counterMetrics": {"wins": 55, "looses": 45}},
                            ]
                        },
                        'countersOptions({"sortBy":"DESC"})': {
                            "options": [
                                {"matchupSlug": "karma", "counterMetrics": {"wins": 30, "looses": 70}},
                            ]
                        },
                    }
                }
            }
        }
    }
    return preloaded(json.dumps(state))


LEAGUEOFGRAPHS_BUILD = """
<html><head><title>Yasuo Build</title></head><body>
<div class="box"><div>Role</div><div>Mid</div><div>Winrate: 50.5%</div><div>Popularity: 12.3%</div></div>
<div class="box">
  <h3 class="box-title">Starting Items</h3>
  <div><img src="//cdn.leagueofgraphs.com/img/item/1055.png"><img src="//cdn.leagueofgraphs.com/img/item/2003.png"></div>
</div>
<div class="box">
  <h3 class="box-title">Core Items</h3>
  <div>
    <div class="item-3006"></div><div class="item-6672"></div><div class="item-3031"></div>
    <div class="item-3072"></div><div class="item-3046"></div>
  </div>
</div>
<div class="box">
  <h3>Runes</h3>
  <div>
    <img src="//cdn.leagueofgraphs.com/img/perks/8000.png">
    <div><div class="perk-8008"></div></div>
    <div style="opacity: 0.3"><div class="perk-8005"></div></div>
    <img src="//cdn.leagueofgraphs.com/img/perks/8100.png">
    <div><div class="perk-8139"></div></div>
  </div>
</div>
<div class="box">
  <h3>Summoner Spells</h3>
  <div class="spell-4"></div><div class="spell-7"></div>
</div>
</body></html>
"""


def _counter_rows(rows):
    return "".join(
        f'<tr><td><a href="/champions/builds/{name.lower()}">\n{name}\n{lane}\n</a>'
        f'<div class="progressBar" title="{rate} win rate"></div><span>{games} games</span></td></tr>'
        for name, lane, rate, games in rows
    )


LEAGUEOFGRAPHS_COUNTERS = f"""
<html><head><title>Yasuo Counters</title></head><body>
<h3>Yasuo wins lane against</h3>
<table>{_counter_rows([("Zed", "Mid", "54.2%", "1,234"), ("Ahri", "Mid", "52.0%", "800")])}</table>
<h3>Yasuo loses lane against</h3>
<table>{_counter_rows([("Karma", "Mid", "45.0%", "400")])}</table>
</body></html>
"""

SOFT_404 = """
<html><head><title>Mobalytics</title></head>
<body><h1>Oops!</h1><p>Looks like you are lost.</p></body></html>
"""
