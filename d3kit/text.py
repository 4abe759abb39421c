from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from PIL import ImageFont


DEFAULT_FONT_FAMILY = "Liberation Sans"
SANS_FONT_FALLBACK_PATTERNS = ("liberationsans", "dejavusans", "arial", "helvetica")

# Label font sizes are given in points; one point rasterizes to PX_PER_POINT
# pixels and PX_PER_UNIT pixels make one scene unit.
PX_PER_POINT = 10.0
PX_PER_UNIT = 100.0


def measure_text(text: str, font_size: float, *, font_family: str = DEFAULT_FONT_FAMILY) -> tuple[float, float]:
    """Rendered (width, height) of `text` in scene units."""
    w_px, h_px = text_size_px(text, font_size_px=font_size * PX_PER_POINT, font_family=font_family)
    return (w_px / PX_PER_UNIT, h_px / PX_PER_UNIT)


def text_size_px(
    text: str,
    *,
    font_size_px: float,
    font_family: str = DEFAULT_FONT_FAMILY,
) -> tuple[int, int]:
    font = _load_font(font_family=font_family, font_size_px=font_size_px)
    if not text:
        ascent, descent = font.getmetrics()
        return (0, max(1, int(ascent + descent)))
    left, top, right, bottom = font.getbbox(text)
    return (max(0, int(right - left)), max(1, int(bottom - top)))


FONT_DIRS = (
    Path.home() / "Library" / "Fonts",
    Path("/Library/Fonts"),
    Path("/System/Library/Fonts"),
    Path("/usr/share/fonts"),
    Path("/usr/local/share/fonts"),
)


@lru_cache(maxsize=64)
def _load_font(font_family: str, font_size_px: float) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    size = max(1, int(round(font_size_px)))
    font_path = _resolve_font_path(font_family)
    if font_path is not None:
        try:
            return ImageFont.truetype(str(font_path), size=size)
        except OSError:
            pass
    return ImageFont.load_default(size=size)


@lru_cache(maxsize=16)
def _resolve_font_path(font_family: str) -> Path | None:
    """First installed sans font matching `font_family`, then the fallbacks, in that order."""
    stems = {_normalize(path.stem): path for path in _installed_fonts() if "mono" not in path.stem.lower()}
    wanted = _normalize(font_family) or _normalize(DEFAULT_FONT_FAMILY)
    for prefix in (wanted, *map(_normalize, SANS_FONT_FALLBACK_PATTERNS)):
        match = next((path for stem, path in sorted(stems.items()) if stem.startswith(prefix)), None)
        if match is not None:
            return match
    return None


def _installed_fonts() -> list[Path]:
    return [path for base in FONT_DIRS if base.is_dir() for path in base.rglob("*") if path.suffix.lower() in (".ttf", ".otf")]


def _normalize(name: str) -> str:
    return name.strip().lower().replace(" ", "").replace("-", "")
