import io

import pytest
from PIL import Image, ImageDraw

from lolbuild.cache import ImageCache
from lolbuild.ddragon import DataDragonClient
from lolbuild.constants import COLORS
from lolbuild.imagegen import (
    ITEM_GAP,
    ITEM_SIZE,
    ITEMS_Y,
    LEFT_X,
    MAX_PORTRAITS,
    RUNE_X,
    RUNE_Y,
    SECTION_GAP,
    ImageComposer,
    ellipsize,
    load_font,
)
from lolbuild.models import BuildResult, CounterEntry, CounterResult, FetchResult, ItemSet, RuneSelection

from .conftest import VERSION, FakeFetcher, data_url, ddragon_responses, http_error, ok, png_bytes

SPLASH = DataDragonClient.get_champion_splash_url("Kaisa")


def make_build(situational=()):
    return BuildResult(
        success=True,
        champion="Kai'Sa",
        role="Adc",
        win_rate="52.0%",
        match_count="1,000",
        items=ItemSet(starter=[1055, 2003], core=[6672, 3031], boots=[3006],
                      situational=list(situational)),
        runes=RuneSelection(primary_tree=8000, secondary_tree=8100,
                            perks=[8008, 9111, 8139, 5005, 5008, 5002]),
        spells=[4, 7],
        source="Mobalytics",
    )


def make_counters():
    return CounterResult(
        success=True,
        champion="Kai'Sa",
        easy=[CounterEntry("Zed", "54.2%", "1234"), CounterEntry("Ahri", "52.0%", "800")],
        hard=[CounterEntry("Wukong", "45.0%", "400"), CounterEntry("Unknownchamp", "40.0%")],
        source="Mobalytics",
    )


def decode(data):
    return Image.open(io.BytesIO(data))


@pytest.fixture
def asset_fetcher():
    return FakeFetcher(ddragon_responses(), default=ok(png_bytes()))


async def test_build_card_with_empty_situational(asset_fetcher):
    composer = ImageComposer(DataDragonClient(asset_fetcher), asset_fetcher)
    data = await composer.render_build("Kai'Sa", make_build(), VERSION)

    assert data is not None
    image = decode(data)
    assert image.format == "PNG"
    assert image.size == (1200, 1000)


async def test_build_card_with_full_build(asset_fetcher):
    composer = ImageComposer(DataDragonClient(asset_fetcher), asset_fetcher)
    data = await composer.render_build("Kai'Sa", make_build(situational=[3072, 3046, 3153]), VERSION)
    assert decode(data).size == (1200, 1000)


async def test_missing_icons_leave_empty_slots():
    fetcher = FakeFetcher(ddragon_responses())
    fetcher.responses[SPLASH] = ok(png_bytes((64, 36)))
    composer = ImageComposer(DataDragonClient(fetcher), fetcher)

    data = await composer.render_build("Kai'Sa", make_build(), VERSION)
    assert decode(data).size == (1200, 1000)


async def test_splash_unreachable_still_renders():
    fetcher = FakeFetcher(ddragon_responses(), default=ok(png_bytes()))
    fetcher.responses[SPLASH] = FetchResult(error="timeout")
    composer = ImageComposer(DataDragonClient(fetcher), fetcher)

    assert await composer.render_build("Kai'Sa", make_build(), VERSION) is not None


@pytest.mark.parametrize("status", [403, 404])
async def test_missing_splash_means_no_card(asset_fetcher, status):
    asset_fetcher.responses[SPLASH] = http_error(status)
    composer = ImageComposer(DataDragonClient(asset_fetcher), asset_fetcher)

    assert await composer.render_build("Kai'Sa", make_build(), VERSION) is None
    assert await composer.render_counters("Kai'Sa", make_counters(), VERSION) is None


async def test_rendered_card_is_cached(asset_fetcher, tmp_path):
    cache = ImageCache(tmp_path)
    composer = ImageComposer(DataDragonClient(asset_fetcher), asset_fetcher, cache)
    build = make_build()

    first = await composer.render_build("Kai'Sa", build, VERSION)
    calls = len(asset_fetcher.calls)
    second = await composer.render_build("Kai'Sa", build, VERSION)

    assert first == second
    assert len(asset_fetcher.calls) == calls


async def test_counter_card(asset_fetcher):
    composer = ImageComposer(DataDragonClient(asset_fetcher), asset_fetcher)
    data = await composer.render_counters("Kai'Sa", make_counters(), VERSION)

    image = decode(data)
    assert image.format == "PNG"
    assert image.size == (1400, 1000)


async def test_counter_card_with_one_sided_data(asset_fetcher):
    composer = ImageComposer(DataDragonClient(asset_fetcher), asset_fetcher)
    counters = make_counters()
    counters.hard = []

    assert await composer.render_counters("Kai'Sa", counters, VERSION) is not None


def test_ellipsize_fits_width():
    pen = ImageDraw.Draw(Image.new("RGBA", (10, 10)))
    font = load_font(20)

    text = ellipsize(pen, "A very long champion name indeed", font, 80)
    assert text.endswith("...")
    assert pen.textlength(text, font=font) <= 80
    assert ellipsize(pen, "Zed", font, 80) == "Zed"


def pixel(image, x, y):
    return image.convert("RGB").getpixel((int(x), int(y)))


def spread(rgb):
    return max(rgb) - min(rgb)


def near(rgb, expected, tolerance=30):
    return all(abs(a - b) <= tolerance for a, b in zip(rgb, expected))


async def test_selected_runes_bright_unselected_faded(asset_fetcher):
    composer = ImageComposer(DataDragonClient(asset_fetcher), asset_fetcher)
    image = decode(await composer.render_build("Kai'Sa", make_build(), VERSION))

    # Primary keystone row: Press the Attack (unselected) then Lethal Tempo (selected)
    size, gap = 48, 20
    start_x = RUNE_X + (200 - (2 * size + gap)) / 2
    row_y = RUNE_Y + 50 + 70
    unselected = pixel(image, start_x + size / 2, row_y + size / 2)
    selected = pixel(image, start_x + size + gap + size / 2, row_y + size / 2)

    assert near(selected, (200, 30, 30))
    assert spread(unselected) < 20
    assert sum(unselected) < sum(selected) / 2


async def test_selected_minor_rune_has_gold_ring(asset_fetcher):
    composer = ImageComposer(DataDragonClient(asset_fetcher), asset_fetcher)
    image = decode(await composer.render_build("Kai'Sa", make_build(), VERSION))

    # Triumph sits alone on the second primary row
    cx = RUNE_X + 100
    cy = RUNE_Y + 50 + 70 + 65 + 24
    ring = [pixel(image, cx + dx, cy) for dx in range(25, 30)]
    assert any(near(rgb, COLORS["gold"]) for rgb in ring)


async def test_secondary_keystone_row_not_downloaded(asset_fetcher):
    composer = ImageComposer(DataDragonClient(asset_fetcher), asset_fetcher)
    await composer.render_build("Kai'Sa", make_build(), VERSION)

    assert not any("Electrocute" in url for url in asset_fetcher.calls)
    assert any("TasteOfBlood" in url for url in asset_fetcher.calls)


async def test_unknown_item_leaves_slot_empty(asset_fetcher):
    build = make_build()
    build.items.core = [424242, 3031]
    composer = ImageComposer(DataDragonClient(asset_fetcher), asset_fetcher)

    data = await composer.render_build("Kai'Sa", build, VERSION)
    image = decode(data)

    assert not any("424242" in url for url in asset_fetcher.calls)
    core_y = ITEMS_Y + SECTION_GAP * 2 + 34 + ITEM_SIZE / 2
    empty_slot = pixel(image, LEFT_X + ITEM_SIZE / 2, core_y)
    filled_slot = pixel(image, LEFT_X + ITEM_SIZE + ITEM_GAP + ITEM_SIZE / 2, core_y)
    assert near(filled_slot, (200, 30, 30))
    assert spread(empty_slot) < 20


async def test_counter_card_draws_at_most_ten_portraits_per_side():
    champions = {"Kaisa": {"id": "Kaisa", "key": "145", "name": "Kai'Sa"}}
    for side in ("Easy", "Hard"):
        for i in range(15):
            key = f"{side}{i:02d}"
            champions[key] = {"id": key, "key": str(len(champions)), "name": key}
    responses = ddragon_responses()
    responses[data_url("champion.json")] = ok({"data": champions})
    fetcher = FakeFetcher(responses, default=ok(png_bytes()))

    counters = CounterResult(
        success=True,
        champion="Kai'Sa",
        easy=[CounterEntry(f"Easy{i:02d}", "55.0%") for i in range(15)],
        hard=[CounterEntry(f"Hard{i:02d}", "45.0%") for i in range(15)],
    )
    data = await ImageComposer(DataDragonClient(fetcher), fetcher).render_counters("Kai'Sa", counters, VERSION)

    assert data is not None
    for side in ("Easy", "Hard"):
        portraits = [url for url in fetcher.calls if f"/img/champion/{side}" in url]
        assert len(portraits) == MAX_PORTRAITS
        assert not any(f"{side}1{i}" in url for url in portraits for i in range(5))
