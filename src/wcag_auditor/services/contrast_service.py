# src/wcag_auditor/services/contrast_service.py
import re
from typing import Optional, Tuple, Union

RGB = Tuple[int, int, int]

_RGB_FUNC = re.compile(r"^rgba?\(\s*([^)]*)\)$", re.IGNORECASE)
_HEX = re.compile(r"^#([0-9a-f]{3}|[0-9a-f]{6})$", re.IGNORECASE)

LARGE_TEXT_PX = 18
LARGE_BOLD_TEXT_PX = 14
BOLD_WEIGHT = 700


def parse_color(value: Optional[str]) -> Optional[RGB]:
    """
    Parses `#rgb`, `#rrggbb`, `rgb()` and `rgba()` into an (r, g, b) tuple.

    Returns None for 'transparent', a fully transparent rgba() value, or
    anything that cannot be parsed. Callers skip such elements.
    """
    if not value:
        return None
    text = value.strip()
    if not text or text.lower() == "transparent":
        return None

    match = _HEX.match(text)
    if match:
        digits = match.group(1)
        if len(digits) == 3:
            digits = "".join(ch * 2 for ch in digits)
        return (int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))

    match = _RGB_FUNC.match(text)
    if match:
        parts = [p.strip() for p in match.group(1).split(",")]
        if len(parts) not in (3, 4):
            return None
        try:
            channels = tuple(int(float(p)) for p in parts[:3])
            alpha = float(parts[3]) if len(parts) == 4 else 1.0
        except ValueError:
            return None
        if alpha == 0:
            return None
        if any(c < 0 or c > 255 for c in channels):
            return None
        return channels

    return None


def _linearize(channel: int) -> float:
    c = channel / 255
    return c / 12.92 if c <= 0.03928 else ((c + 0.055) / 1.055) ** 2.4


def relative_luminance(rgb: RGB) -> float:
    """WCAG 2.x relative luminance of an sRGB color."""
    r, g, b = (_linearize(c) for c in rgb)
    return 0.2126 * r + 0.7152 * g + 0.0722 * b


def contrast_ratio(color_a: RGB, color_b: RGB) -> float:
    """Contrast ratio in the range 1..21, independent of argument order."""
    l_a = relative_luminance(color_a)
    l_b = relative_luminance(color_b)
    lighter, darker = max(l_a, l_b), min(l_a, l_b)
    return (lighter + 0.05) / (darker + 0.05)


def is_large_text(font_size_px: Optional[float], font_weight: Optional[Union[int, str]] = None) -> bool:
    """18px and up, or 14px and up when bold (keyword or numeric weight >= 700)."""
    if font_size_px is None:
        return False
    if font_size_px >= LARGE_TEXT_PX:
        return True
    return font_size_px >= LARGE_BOLD_TEXT_PX and _is_bold(font_weight)


def _is_bold(font_weight: Optional[Union[int, str]]) -> bool:
    if font_weight is None:
        return False
    if isinstance(font_weight, str):
        weight = font_weight.strip().lower()
        if weight in ("bold", "bolder"):
            return True
        try:
            return float(weight) >= BOLD_WEIGHT
        except ValueError:
            return False
    return font_weight >= BOLD_WEIGHT


class ColorCalculator:
    """Stateless facade over the color functions, handed to every rule."""

    def parse_color(self, value: Optional[str]) -> Optional[RGB]:
        return parse_color(value)

    def relative_luminance(self, rgb: RGB) -> float:
        return relative_luminance(rgb)

    def contrast_ratio(self, color_a: RGB, color_b: RGB) -> float:
        return contrast_ratio(color_a, color_b)

    def is_large_text(self, font_size_px: Optional[float], font_weight: Optional[Union[int, str]] = None) -> bool:
        return is_large_text(font_size_px, font_weight)
