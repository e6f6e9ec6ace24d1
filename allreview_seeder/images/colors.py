"""Color helpers for placeholder images."""

from __future__ import annotations

import math


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def hsl_to_hex(hue: float, saturation: float, lightness: float) -> str:
    """Convert HSL (hue in degrees, saturation/lightness in percent) to 'rrggbb'."""
    sat = saturation / 100
    light = lightness / 100
    a = sat * min(light, 1 - light)

    def channel(n: int) -> str:
        k = (n + hue / 30) % 12
        value = light - a * max(min(k - 3, 9 - k, 1), -1)
        return f"{_round_half_up(255 * value):02x}"

    return f"{channel(0)}{channel(8)}{channel(4)}"
