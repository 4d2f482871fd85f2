# terrain_generator/biomes.py

"""
================================================================================
BIOME PROFILES
================================================================================
Named parameter bundles governing one terrain "style": height scale, noise
frequency, octave count, a 5-stop color ramp and 4 height thresholds.

The set of biomes is a closed enumeration (BiomeType). Looking up an unknown
name is a checked condition that resolves to the default biome, never a crash.
Profiles are validated when they are registered, not when they are rendered.
================================================================================
"""
import enum
import logging
import math
from typing import NamedTuple

from . import config as DEFAULTS


class BiomeConfigError(ValueError):
    """Raised when a biome profile is registered with invalid parameters."""


class BiomeType(str, enum.Enum):
    GRASSLAND = "grassland"
    DESERT = "desert"
    TUNDRA = "tundra"
    VOLCANIC = "volcanic"
    ALIEN = "alien"
    CANYON = "canyon"


class ColorStops(NamedTuple):
    """Five 0xRRGGBB colors, from the lowest band to the highest."""
    deep: int
    low: int
    mid: int
    high: int
    peak: int


class Thresholds(NamedTuple):
    """Normalized heights separating the color bands. Must be strictly increasing."""
    deep: float
    low: float
    mid: float
    high: float


class BiomeProfile(NamedTuple):
    name: str
    height_scale: float
    noise_scale: float
    octaves: int
    colors: ColorStops
    thresholds: Thresholds
    wire_color: int = 0xFFFFFF


def validate_biome(profile: BiomeProfile) -> BiomeProfile:
    """
    Checks a profile's invariants. Plain tuples for colors or thresholds are
    coerced to ColorStops / Thresholds; an already typed profile is returned
    unchanged.
    """
    try:
        colors = ColorStops(*profile.colors)
        thresholds = Thresholds(*profile.thresholds)
    except TypeError as e:
        raise BiomeConfigError(
            f"Biome '{profile.name}': expected {len(ColorStops._fields)} color stops and "
            f"{len(Thresholds._fields)} thresholds, got {profile.colors!r} and {profile.thresholds!r}"
        ) from e

    if not (profile.height_scale > 0 and math.isfinite(profile.height_scale)):
        raise BiomeConfigError(f"Biome '{profile.name}': height_scale must be > 0, got {profile.height_scale}")
    if not (profile.noise_scale > 0 and math.isfinite(profile.noise_scale)):
        raise BiomeConfigError(f"Biome '{profile.name}': noise_scale must be > 0, got {profile.noise_scale}")
    if int(profile.octaves) != profile.octaves or profile.octaves < 1:
        raise BiomeConfigError(f"Biome '{profile.name}': octaves must be an integer >= 1, got {profile.octaves}")

    for stop, color in zip(ColorStops._fields, colors):
        if not isinstance(color, int) or not 0 <= color <= 0xFFFFFF:
            raise BiomeConfigError(f"Biome '{profile.name}': color stop '{stop}' must be a 0xRRGGBB integer, got {color!r}")

    t = thresholds
    if not all(isinstance(v, (int, float)) and math.isfinite(v) for v in t):
        raise BiomeConfigError(f"Biome '{profile.name}': thresholds must be finite numbers, got {tuple(t)}")
    if not (t.deep < t.low < t.mid < t.high):
        raise BiomeConfigError(f"Biome '{profile.name}': thresholds must be strictly increasing, got {tuple(t)}")
    # The peak band blends over (high, 1.0], so high must leave room below 1.
    if t.high >= DEFAULTS.HEIGHT_MAX:
        raise BiomeConfigError(f"Biome '{profile.name}': high threshold must be below {DEFAULTS.HEIGHT_MAX}, got {t.high}")

    if isinstance(profile.colors, ColorStops) and isinstance(profile.thresholds, Thresholds):
        return profile
    return profile._replace(colors=colors, thresholds=thresholds)


BIOMES: dict[BiomeType, BiomeProfile] = {}


def register_biome(biome_type: BiomeType, profile: BiomeProfile) -> BiomeProfile:
    """Validates a profile and installs it for one of the enumerated biome types."""
    biome_type = BiomeType(biome_type)
    profile = validate_biome(profile)
    BIOMES[biome_type] = profile
    return profile


register_biome(BiomeType.GRASSLAND, BiomeProfile(
    name="Grassland", height_scale=8.0, noise_scale=0.08, octaves=4,
    colors=ColorStops(deep=0x1A472A, low=0x2D5A27, mid=0x4A7C23, high=0x7CB342, peak=0xA5D64A),
    thresholds=Thresholds(deep=-0.3, low=0.0, mid=0.3, high=0.6),
    wire_color=0x1B5E20,
))
register_biome(BiomeType.DESERT, BiomeProfile(
    name="Desert", height_scale=6.0, noise_scale=0.06, octaves=3,
    colors=ColorStops(deep=0x8B4513, low=0xC19A6B, mid=0xD4A574, high=0xE6C99A, peak=0xFAE5C3),
    thresholds=Thresholds(deep=-0.4, low=-0.1, mid=0.2, high=0.5),
    wire_color=0x8B5A2B,
))
register_biome(BiomeType.TUNDRA, BiomeProfile(
    name="Tundra", height_scale=5.0, noise_scale=0.05, octaves=5,
    colors=ColorStops(deep=0x2F4F4F, low=0x607D8B, mid=0x90A4AE, high=0xB0BEC5, peak=0xECEFF1),
    thresholds=Thresholds(deep=-0.35, low=-0.05, mid=0.25, high=0.55),
    wire_color=0x455A64,
))
register_biome(BiomeType.VOLCANIC, BiomeProfile(
    name="Volcanic", height_scale=12.0, noise_scale=0.07, octaves=4,
    colors=ColorStops(deep=0x1A1A1A, low=0x3D2817, mid=0x5D4037, high=0xBF360C, peak=0xFF5722),
    thresholds=Thresholds(deep=-0.4, low=-0.1, mid=0.3, high=0.7),
    wire_color=0xFF3D00,
))
register_biome(BiomeType.ALIEN, BiomeProfile(
    name="Alien World", height_scale=10.0, noise_scale=0.09, octaves=4,
    colors=ColorStops(deep=0x1A0033, low=0x4A0080, mid=0x7B1FA2, high=0x00E676, peak=0x76FF03),
    thresholds=Thresholds(deep=-0.35, low=0.0, mid=0.35, high=0.65),
    wire_color=0x00C853,
))
register_biome(BiomeType.CANYON, BiomeProfile(
    name="Canyon", height_scale=18.0, noise_scale=0.05, octaves=6,
    colors=ColorStops(deep=0x3E2723, low=0x6D4C41, mid=0xA1887F, high=0xD7CCC8, peak=0xFF8A65),
    thresholds=Thresholds(deep=-0.4, low=-0.15, mid=0.2, high=0.55),
    wire_color=0x795548,
))


def resolve_biome_type(name, logger: logging.Logger = None) -> BiomeType:
    """Maps a name to a BiomeType, falling back to the default biome for unknown names."""
    try:
        return BiomeType(name)
    except ValueError:
        (logger or logging.getLogger(__name__)).warning(
            f"Unknown biome '{name}', falling back to '{DEFAULTS.DEFAULT_BIOME}'."
        )
        return BiomeType(DEFAULTS.DEFAULT_BIOME)


def get_biome(biome, logger: logging.Logger = None) -> BiomeProfile:
    """
    Returns the profile for a biome name or BiomeType. A BiomeProfile passed
    directly is validated and returned, so callers can supply custom profiles.
    """
    if isinstance(biome, BiomeProfile):
        return validate_biome(biome)
    return BIOMES[resolve_biome_type(biome, logger)]
