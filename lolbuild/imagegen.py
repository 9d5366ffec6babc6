# lolbuild/imagegen.py - Build and counter summary cards
"""
Summary cards are drawn with Pillow in two phases.

Every remote icon is downloaded first, concurrently, through the fetcher.
Drawing then happens synchronously in a worker thread on the already
decoded images, so a failed icon only leaves its slot empty.

The single hard failure is the champion splash: a 403/404 there means the
champion key is wrong and the card is not produced at all.
"""

import asyncio
import io
import logging
from functools import lru_cache
from typing import Dict, Iterable, List, Optional, Tuple

from PIL import Image, ImageDraw, ImageFilter, ImageFont, ImageOps

from .cache import ImageCache
from .constants import COLORS, DEFAULT_SHARDS, SHARD_ICONS, SHARD_ROWS
from .errors import ImageRenderError
from .models import BuildResult, CounterEntry, CounterResult

logger = logging.getLogger("red.lolbuild.imagegen")

# Build card layout
BUILD_W, BUILD_H = 1200, 1000
BUILD_HEADER_H = 220
PADDING = 30
SEPARATOR_X = 600
LEFT_X = 50
ITEMS_Y = BUILD_HEADER_H + 40
SECTION_GAP = 100
ITEM_SIZE = 64
ITEM_GAP = 12
RUNE_X = SEPARATOR_X + 50
RUNE_Y = BUILD_HEADER_H + 40

# Counter card layout
COUNTER_W, COUNTER_H = 1400, 1000
COUNTER_HEADER_H = 200
COUNTER_PADDING = 40
PORTRAIT = 85
PORTRAIT_ROW_STEP = 125
PORTRAIT_COL_STEP = PORTRAIT + 140
PORTRAITS_PER_ROW = 2
MAX_PORTRAITS = 10

FONT_CANDIDATES = {
    True: [
        "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf",
        "/System/Library/Fonts/Supplemental/Arial Bold.ttf",
        "C:/Windows/Fonts/arialbd.ttf",
        "DejaVuSans-Bold.ttf",
        "arialbd.ttf",
    ],
    False: [
        "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
        "/System/Library/Fonts/Supplemental/Arial.ttf",
        "C:/Windows/Fonts/arial.ttf",
        "DejaVuSans.ttf",
        "arial.ttf",
    ],
}


@lru_cache(maxsize=32)
def load_font(size: int, bold: bool = False):
    """System font with fallbacks, ending at Pillow's bundled font"""
    for font_path in FONT_CANDIDATES[bold]:
        try:
            return ImageFont.truetype(str(font_path), size)
        except OSError:
            continue
    logger.debug(f"No system font found, using default for size {size}")
    return ImageFont.load_default(size=size)


def vertical_gradient(size: Tuple[int, int], top, bottom) -> Image.Image:
    mask = Image.linear_gradient("L").resize(size)
    return Image.composite(Image.new("RGBA", size, bottom), Image.new("RGBA", size, top), mask)


def fade_overlay(size: Tuple[int, int], color, start_alpha: int) -> Image.Image:
    """Solid colour whose alpha ramps from start_alpha at the top to opaque"""
    overlay = Image.new("RGBA", size, color)
    ramp = Image.linear_gradient("L").resize(size)
    overlay.putalpha(ramp.point(lambda v: start_alpha + (255 - start_alpha) * v // 255))
    return overlay


def crop_banner(splash: Image.Image, width: int, height: int) -> Image.Image:
    """Centre strip of the splash scaled to the banner size"""
    src_w, src_h = splash.size
    strip_h = min(src_h, round(height * src_w / width))
    top = (src_h - strip_h) // 2
    return splash.crop((0, top, src_w, top + strip_h)).resize((width, height), Image.LANCZOS)


def faded(icon: Image.Image, opacity: float = 0.2) -> Image.Image:
    """Grayscale copy at reduced opacity, used for unselected runes"""
    gray = ImageOps.grayscale(icon.convert("RGB")).convert("RGBA")
    gray.putalpha(icon.getchannel("A").point(lambda a: int(a * opacity)))
    return gray


def circular(icon: Image.Image, size: int) -> Image.Image:
    icon = icon.resize((size, size), Image.LANCZOS)
    mask = Image.new("L", (size, size), 0)
    ImageDraw.Draw(mask).ellipse((0, 0, size - 1, size - 1), fill=255)
    out = Image.new("RGBA", (size, size), (0, 0, 0, 0))
    out.paste(icon, (0, 0), mask)
    return out


def text_size(draw: ImageDraw.ImageDraw, text: str, font) -> Tuple[int, int]:
    left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
    return right - left, bottom - top


def ellipsize(draw: ImageDraw.ImageDraw, text: str, font, max_width: int) -> str:
    if draw.textlength(text, font=font) <= max_width:
        return text
    while text and draw.textlength(text + "...", font=font) > max_width:
        text = text[:-1]
    return text + "..."


def draw_centered(draw: ImageDraw.ImageDraw, center: Tuple[float, float], text: str, font, fill):
    width, height = text_size(draw, text, font)
    left, top, _, _ = draw.textbbox((0, 0), text, font=font)
    draw.text((center[0] - width / 2 - left, center[1] - height / 2 - top), text, font=font, fill=fill)


def draw_shadowed_text(canvas: Image.Image, xy, text: str, font, fill, blur: int = 4):
    shadow = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
    ImageDraw.Draw(shadow).text((xy[0] + 2, xy[1] + 2), text, font=font, fill=(0, 0, 0, 255))
    canvas.alpha_composite(shadow.filter(ImageFilter.GaussianBlur(blur)))
    ImageDraw.Draw(canvas).text(xy, text, font=font, fill=fill)


def paste(canvas: Image.Image, icon: Image.Image, x: float, y: float, size: int):
    icon = icon.convert("RGBA").resize((size, size), Image.LANCZOS)
    canvas.alpha_composite(icon, (int(x), int(y)))


def encode_png(canvas: Image.Image) -> bytes:
    output = io.BytesIO()
    try:
        canvas.convert("RGB").save(output, format="PNG", optimize=True)
    except (OSError, ValueError) as e:
        raise ImageRenderError(f"PNG encoding failed: {e}") from e
    return output.getvalue()


class ImageComposer:
    """Downloads card assets and renders PNG summary cards"""

    def __init__(self, ddragon, fetcher, image_cache: Optional[ImageCache] = None):
        self.ddragon = ddragon
        self.fetcher = fetcher
        self.image_cache = image_cache

    async def _load_image(self, url: str) -> Tuple[Optional[Image.Image], int]:
        """(image, http status). Image is None on any failure."""
        if not url:
            return None, 0
        result = await self.fetcher.fetch_bytes(url)
        if not result.ok:
            return None, result.status
        try:
            image = Image.open(io.BytesIO(result.data))
            image.load()
            return image.convert("RGBA"), result.status
        except OSError as e:
            logger.warning(f"Undecodable image at {url}: {e}")
            return None, result.status

    async def _load_images(self, urls: Iterable[str]) -> Dict[str, Optional[Image.Image]]:
        unique = [u for u in dict.fromkeys(urls) if u]
        results = await asyncio.gather(*(self._load_image(u) for u in unique))
        return {url: image for url, (image, _status) in zip(unique, results)}

    async def _load_banner(self, champion: str, version: str) -> Tuple[Optional[Image.Image], bool]:
        """(splash, usable). usable is False when the splash is 403/404."""
        key = await self.ddragon.resolve_champion_key(version, champion) or champion
        url = self.ddragon.get_champion_splash_url(key)
        image, status = await self._load_image(url)
        if status in (403, 404):
            logger.error(f"Champion splash not found ({status}): {url}")
            return None, False
        if image is None:
            logger.warning(f"Splash unavailable for {champion}, drawing without banner")
        return image, True

    async def _run(self, func, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func, *args)

    # Build card

    async def render_build(self, champion: str, build: BuildResult, version: str) -> Optional[bytes]:
        """PNG bytes of the build card, or None if the champion splash is missing"""
        role = build.role or "Popular"
        if self.image_cache is not None:
            cached = self.image_cache.get(champion, role, version, build)
            if cached is not None:
                logger.info(f"Using cached card for {champion} {role}")
                return cached

        sections = [
            ("Starter Items", build.items.starter, LEFT_X, ITEMS_Y),
            ("Boots", build.items.boots, LEFT_X + 300, ITEMS_Y),
            ("Early Items", build.items.early, LEFT_X, ITEMS_Y + SECTION_GAP),
            ("Core Items", build.items.core, LEFT_X, ITEMS_Y + SECTION_GAP * 2),
            ("Full Build", build.items.situational, LEFT_X, ITEMS_Y + int(SECTION_GAP * 3.5)),
        ]
        item_urls = {}
        for _, items, _, _ in sections:
            for item_id in items:
                item_urls[item_id] = await self.ddragon.get_item_image_url(version, item_id)
        spell_urls = [await self.ddragon.get_summoner_spell_image_url(version, s) for s in build.spells[:2]]

        runes = await self.ddragon.get_rune_data(version)
        primary = next((t for t in runes if t.get("id") == build.runes.primary_tree), None)
        secondary = next((t for t in runes if t.get("id") == build.runes.secondary_tree), None)
        rune_urls = []
        # The secondary tree has no keystone row on the card
        for tree, first_slot in ((primary, 0), (secondary, 1)):
            if tree:
                rune_urls.append(self.ddragon.get_rune_icon_url(tree["icon"]))
                for slot in tree.get("slots", [])[first_slot:]:
                    rune_urls.extend(self.ddragon.get_rune_icon_url(r["icon"]) for r in slot.get("runes", []))
        shard_urls = {
            shard: self.ddragon.get_stat_shard_image_url(SHARD_ICONS.get(shard, SHARD_ICONS[5008]))
            for row in SHARD_ROWS for shard in row
        }

        (banner, usable), images = await asyncio.gather(
            self._load_banner(champion, version),
            self._load_images(list(item_urls.values()) + spell_urls + rune_urls + list(shard_urls.values())),
        )
        if not usable:
            return None

        try:
            data = await self._run(
                self._draw_build, champion, build, banner, sections, item_urls,
                spell_urls, primary, secondary, shard_urls, images,
            )
        except (ImageRenderError, OSError, ValueError) as e:
            logger.error(f"Failed to render build card for {champion}: {e}", exc_info=True)
            return None

        if self.image_cache is not None:
            self.image_cache.save(champion, role, version, build, data)
        return data

    def _draw_build(self, champion, build, banner, sections, item_urls, spell_urls,
                    primary, secondary, shard_urls, images) -> bytes:
        canvas = vertical_gradient((BUILD_W, BUILD_H), COLORS["build_bg_top"], COLORS["build_bg_bottom"])

        if banner is not None:
            canvas.alpha_composite(crop_banner(banner, BUILD_W, BUILD_HEADER_H))
        canvas.alpha_composite(fade_overlay((BUILD_W, BUILD_HEADER_H), COLORS["build_bg_top"], 102))

        draw_shadowed_text(canvas, (PADDING + 20, 50), champion, load_font(64, True), COLORS["title"])
        subtitle = f"{build.role}  |  Win: {build.win_rate}  |  Pick: {build.pick_rate}"
        draw_shadowed_text(canvas, (PADDING + 24, 140), subtitle, load_font(30), COLORS["subtitle"])

        draw = ImageDraw.Draw(canvas)
        draw.line((SEPARATOR_X, BUILD_HEADER_H + 20, SEPARATOR_X, BUILD_H - 20), fill=COLORS["separator"], width=1)

        # Items
        title_font = load_font(24, True)
        for title, items, x, y in sections:
            if not items:
                continue
            draw.text((x, y), title, font=title_font, fill=COLORS["gold"])
            for index, item_id in enumerate(items):
                icon = images.get(item_urls.get(item_id))
                if icon is None:
                    continue
                cx = x + index * (ITEM_SIZE + ITEM_GAP)
                cy = y + 34
                paste(canvas, icon, cx, cy, ITEM_SIZE)
                draw.rectangle((cx, cy, cx + ITEM_SIZE, cy + ITEM_SIZE), outline=COLORS["item_border"], width=1)

        # Summoner spells
        draw.text((LEFT_X, ITEMS_Y + 500), "Summoner Spells", font=title_font, fill=COLORS["gold"])
        for index, url in enumerate(spell_urls):
            icon = images.get(url)
            if icon is None:
                continue
            sx, sy = LEFT_X + index * 80, ITEMS_Y + 530
            paste(canvas, icon, sx, sy, ITEM_SIZE)
            draw.rectangle((sx, sy, sx + ITEM_SIZE, sy + ITEM_SIZE), outline=COLORS["gold"], width=1)

        # Runes
        draw.text((RUNE_X + 200, RUNE_Y - 30), "Runes", font=load_font(32, True), fill=COLORS["gold"])
        active = set(build.runes.perks)
        if primary:
            self._draw_tree(canvas, primary, RUNE_X, RUNE_Y + 50, active, images,
                            size=48, gap=20, first_slot=0, keystone_row=True)
        if secondary:
            self._draw_tree(canvas, secondary, RUNE_X + 260, RUNE_Y + 50, active, images,
                            size=40, gap=15, first_slot=1, keystone_row=False)
        self._draw_shards(canvas, build, shard_urls, images)

        return encode_png(canvas)

    def _draw_rune(self, canvas, icon, x, y, size, selected, keystone=False):
        draw = ImageDraw.Draw(canvas)
        if not selected:
            paste(canvas, faded(icon), x, y, size)
            return
        if keystone:
            glow = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
            cx, cy, r = x + size / 2, y + size / 2, size / 2 + 6
            ImageDraw.Draw(glow).ellipse((cx - r, cy - r, cx + r, cy + r), fill=COLORS["gold"] + (160,))
            canvas.alpha_composite(glow.filter(ImageFilter.GaussianBlur(8)))
            paste(canvas, icon, x - 5, y - 5, size + 10)
            return
        paste(canvas, icon, x, y, size)
        cx, cy, r = x + size / 2, y + size / 2, size / 2 + 4
        draw.ellipse((cx - r, cy - r, cx + r, cy + r), outline=COLORS["gold"], width=2)

    def _draw_tree(self, canvas, tree, x, y, active, images, size, gap, first_slot, keystone_row):
        tree_icon = images.get(self.ddragon.get_rune_icon_url(tree["icon"]))
        if tree_icon is not None:
            paste(canvas, tree_icon, x + 60, y, 48)

        row_y = y + 70
        for slot_index, slot in enumerate(tree.get("slots", [])):
            if slot_index < first_slot:
                continue
            runes = slot.get("runes", [])
            total_w = len(runes) * size + (len(runes) - 1) * gap
            start_x = x + (200 - total_w) / 2
            for i, rune in enumerate(runes):
                icon = images.get(self.ddragon.get_rune_icon_url(rune["icon"]))
                if icon is None:
                    continue
                self._draw_rune(
                    canvas, icon, start_x + i * (size + gap), row_y, size,
                    selected=rune.get("id") in active,
                    keystone=keystone_row and slot_index == 0,
                )
            row_y += 65

    def _draw_shards(self, canvas, build, shard_urls, images):
        draw = ImageDraw.Draw(canvas)
        chosen = build.runes.shards or DEFAULT_SHARDS
        size, gap = 32, 20
        row_w = 3 * size + 2 * gap
        start_x = RUNE_X + 260 + 84 - row_w / 2
        shard_y = RUNE_Y + 320

        for row_index, row in enumerate(SHARD_ROWS):
            selected_id = chosen[row_index] if row_index < len(chosen) else row[0]
            cy = shard_y + row_index * (size + gap)
            for i, shard in enumerate(row):
                cx = start_x + i * (size + gap)
                selected = shard == selected_id
                center_x, center_y, r = cx + size / 2, cy + size / 2, size / 2 + 4
                draw.ellipse(
                    (center_x - r, center_y - r, center_x + r, center_y + r),
                    fill=COLORS["slot_bg"],
                    outline=COLORS["gold"] if selected else COLORS["separator"],
                    width=2 if selected else 1,
                )
                icon = images.get(shard_urls.get(shard))
                if icon is None:
                    dot = 6
                    draw.ellipse(
                        (center_x - dot, center_y - dot, center_x + dot, center_y + dot),
                        fill=COLORS["gold"] if selected else (85, 85, 85),
                    )
                    continue
                paste(canvas, icon if selected else faded(icon, 0.3), cx + 4, cy + 4, size - 8)

    # Counter card

    async def render_counters(self, champion: str, counters: CounterResult, version: str) -> Optional[bytes]:
        """PNG bytes of the counter card, or None if the champion splash is missing"""
        easy = counters.easy[:MAX_PORTRAITS]
        hard = counters.hard[:MAX_PORTRAITS]

        portrait_urls = {}
        for entry in easy + hard:
            if entry.name in portrait_urls:
                continue
            key = await self.ddragon.resolve_champion_key(version, entry.name)
            if key is None:
                logger.warning(f"No Data Dragon champion for '{entry.name}'")
            portrait_urls[entry.name] = self.ddragon.get_champion_image_url(version, key) if key else ""

        (banner, usable), images = await asyncio.gather(
            self._load_banner(champion, version),
            self._load_images(portrait_urls.values()),
        )
        if not usable:
            return None

        portraits = {name: images.get(url) for name, url in portrait_urls.items()}
        try:
            return await self._run(self._draw_counters, champion, easy, hard, banner, portraits)
        except (ImageRenderError, OSError, ValueError) as e:
            logger.error(f"Failed to render counter card for {champion}: {e}", exc_info=True)
            return None

    def _draw_counters(self, champion: str, easy: List[CounterEntry], hard: List[CounterEntry],
                       banner, portraits) -> bytes:
        canvas = vertical_gradient((COUNTER_W, COUNTER_H), COLORS["counter_bg_top"], COLORS["counter_bg_bottom"])
        if banner is not None:
            canvas.alpha_composite(crop_banner(banner, COUNTER_W, COUNTER_HEADER_H))
        canvas.alpha_composite(fade_overlay((COUNTER_W, COUNTER_HEADER_H), COLORS["counter_bg_top"], 128))

        draw_shadowed_text(canvas, (COUNTER_PADDING + 20, 40), f"{champion} Counter",
                           load_font(52, True), COLORS["title"])
        draw_shadowed_text(canvas, (COUNTER_PADDING + 20, 110), "Who to pick / Who counters you",
                           load_font(22), COLORS["subtitle"])

        draw = ImageDraw.Draw(canvas)
        content_y = COUNTER_HEADER_H + COUNTER_PADDING
        column_w = (COUNTER_W - COUNTER_PADDING * 3) / 2
        separator_x = COUNTER_PADDING + column_w + COUNTER_PADDING
        draw.line((separator_x, content_y, separator_x, COUNTER_H - COUNTER_PADDING),
                  fill=COLORS["separator"], width=2)

        columns = (
            (COUNTER_PADDING, "Easy Matchups", "(You counter them)", COLORS["easy"], easy),
            (separator_x + COUNTER_PADDING, "Hard Matchups", "(They counter you)", COLORS["hard"], hard),
        )
        for x0, title, note, color, entries in columns:
            self._draw_column_title(draw, x0, content_y, title, note, color, easy=entries is easy)
            for index, entry in enumerate(entries):
                row, col = divmod(index, PORTRAITS_PER_ROW)
                x = x0 + col * PORTRAIT_COL_STEP
                y = content_y + 60 + row * PORTRAIT_ROW_STEP
                self._draw_portrait(canvas, x, y, entry, index + 1, color, portraits.get(entry.name))

        return encode_png(canvas)

    @staticmethod
    def _draw_column_title(draw, x, y, title, note, color, easy: bool):
        cx, cy, r = x + 16, y + 22, 12
        draw.ellipse((cx - r, cy - r, cx + r, cy + r), fill=color)
        bg = COLORS["counter_bg_top"]
        if easy:
            draw.line([(x + 10, y + 22), (x + 15, y + 27), (x + 24, y + 17)], fill=bg, width=3)
        else:
            draw.line([(x + 10, y + 16), (x + 22, y + 28)], fill=bg, width=3)
            draw.line([(x + 22, y + 16), (x + 10, y + 28)], fill=bg, width=3)
        draw.text((x + 38, y + 4), title, font=load_font(30, True), fill=color)
        draw.text((x + 38, y + 40), note, font=load_font(16), fill=COLORS["subtitle"])

    @staticmethod
    def _draw_portrait(canvas, x, y, entry: CounterEntry, rank: int, color, portrait):
        draw = ImageDraw.Draw(canvas)
        cx, cy = x + PORTRAIT / 2, y + PORTRAIT / 2
        r = PORTRAIT / 2 + 4
        medal = {1: COLORS["rank_gold"], 2: COLORS["rank_silver"], 3: COLORS["rank_bronze"]}.get(rank)

        halo = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        ImageDraw.Draw(halo).ellipse((cx - r, cy - r, cx + r, cy + r), fill=color + (38,),
                                     outline=medal, width=4 if medal else 0)
        canvas.alpha_composite(halo)

        if portrait is not None:
            canvas.alpha_composite(circular(portrait, PORTRAIT), (int(x), int(y)))
        else:
            r = PORTRAIT / 2
            draw.ellipse((cx - r, cy - r, cx + r, cy + r), fill=COLORS["separator"], outline=color, width=2)

        badge = 28
        bx, by = x - 5, y - 5
        draw.ellipse((bx, by, bx + badge, by + badge), fill=medal or COLORS["rank_other"])
        draw_centered(draw, (bx + badge / 2, by + badge / 2), str(rank), load_font(16, True),
                      (0, 0, 0) if medal else (255, 255, 255))

        name_font = load_font(16, True)
        name = ellipsize(draw, entry.name, name_font, PORTRAIT + 40)
        name_y = y + PORTRAIT + 14
        draw_centered(draw, (cx, name_y), name, name_font, COLORS["title"])

        win_rate = entry.win_rate or "N/A"
        if win_rate != "N/A" and not win_rate.endswith("%"):
            win_rate += "%"
        draw_centered(draw, (cx, name_y + 22), win_rate, load_font(18, True), color)
