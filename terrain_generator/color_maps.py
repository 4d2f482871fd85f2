# terrain_generator/color_maps.py

"""
================================================================================
HEIGHT COLOR BANDING
================================================================================
Maps normalized heights to RGB colors using a biome's 5-stop ramp and its 4
height thresholds (deep < low < mid < high):

    height < deep          -> pure deep color
    deep <= height < high  -> linear blend of the two stops bounding the band
    height >= high         -> blend from high towards peak, with the blend
                              fraction clamped to [0, 1]

It is designed to be a pure, stateless utility. The scalar and array versions
produce identical values for identical inputs.
================================================================================
"""
import numpy as np

from .biomes import BiomeProfile


def hex_to_rgb(color: int) -> tuple[int, int, int]:
    """Splits a 0xRRGGBB integer into its 0-255 channels."""
    return (color >> 16) & 255, (color >> 8) & 255, color & 255


def lerp_color(c1: int, c2: int, t: float) -> tuple[float, float, float]:
    """Linear interpolation between two 0xRRGGBB colors, returned as floats in [0, 1]."""
    r1, g1, b1 = hex_to_rgb(c1)
    r2, g2, b2 = hex_to_rgb(c2)
    return (
        (r1 + (r2 - r1) * t) / 255,
        (g1 + (g2 - g1) * t) / 255,
        (b1 + (b2 - b1) * t) / 255,
    )


def color_for(height: float, biome: BiomeProfile) -> tuple[float, float, float]:
    """Returns the banded color for a single normalized height."""
    colors, t = biome.colors, biome.thresholds
    if height < t.deep:
        return lerp_color(colors.deep, colors.deep, 0)
    if height < t.low:
        return lerp_color(colors.deep, colors.low, (height - t.deep) / (t.low - t.deep))
    if height < t.mid:
        return lerp_color(colors.low, colors.mid, (height - t.low) / (t.mid - t.low))
    if height < t.high:
        return lerp_color(colors.mid, colors.high, (height - t.mid) / (t.high - t.mid))
    fraction = (height - t.high) / (1 - t.high)
    return lerp_color(colors.high, colors.peak, max(0.0, min(fraction, 1.0)))


def get_height_color_array(heights: np.ndarray, biome: BiomeProfile) -> np.ndarray:
    """
    Converts an array of normalized heights into float RGB colors in [0, 1].
    The output has the input's shape plus a trailing channel axis of size 3.
    """
    h = np.asarray(heights, dtype=np.float64)[..., np.newaxis]
    stops = {name: np.array(hex_to_rgb(value), dtype=np.float64)
             for name, value in biome.colors._asdict().items()}
    t = biome.thresholds

    def blend(c1, c2, fraction):
        return (c1 + (c2 - c1) * fraction) / 255

    peak_fraction = np.clip((h - t.high) / (1 - t.high), 0.0, 1.0)
    colors = np.select(
        [h < t.deep, h < t.low, h < t.mid, h < t.high],
        [
            np.broadcast_to(blend(stops["deep"], stops["deep"], 0), h.shape[:-1] + (3,)),
            blend(stops["deep"], stops["low"], (h - t.deep) / (t.low - t.deep)),
            blend(stops["low"], stops["mid"], (h - t.low) / (t.mid - t.low)),
            blend(stops["mid"], stops["high"], (h - t.mid) / (t.high - t.mid)),
        ],
        default=blend(stops["high"], stops["peak"], peak_fraction)
    )
    return colors


def to_uint8_colors(colors: np.ndarray) -> np.ndarray:
    """Scales float RGB colors in [0, 1] to 0-255 bytes, truncating like a canvas write."""
    return np.floor(np.clip(colors, 0.0, 1.0) * 255).astype(np.uint8)
