# terrain_generator/config.py

"""
================================================================================
INTERNAL DEFAULT CONFIGURATION
================================================================================
This module contains the default, fallback internal constants for the terrain
generator. These values are used if they are not explicitly provided by the
user's configuration.

DO NOT MODIFY THIS FILE FOR A SPECIFIC RUN.
Instead, pass a configuration dictionary to the TerrainGenerator instance.
================================================================================
"""

# --- Seeding ---
DEFAULT_SEED = "cosmic-landscape-42"
DEFAULT_BIOME = "grassland"

# --- Tile Geometry ---
# Number of segments along one side of a tile. A tile has (resolution + 1)^2 vertices.
DEFAULT_RESOLUTION = 64
# World units spanned by one side of a tile.
DEFAULT_TILE_SIZE = 50.0

# --- Structure Grid (home tile only) ---
DEFAULT_GRID_SIZE = 16
DEFAULT_CELL_SIZE = 3.0
# The normalized height that masked terrain is pulled towards.
DEFAULT_FLATTEN_HEIGHT = 0.0

# --- Fractal Noise ---
FRACTAL_LACUNARITY = 2.0
FRACTAL_PERSISTENCE = 0.5

# One extra single-octave sample at a higher frequency is blended in for fine detail.
DETAIL_NOISE_MULTIPLIER = 3.0
DETAIL_NOISE_WEIGHT = 0.15

# Heights are hard-clamped to this range after fractal composition.
HEIGHT_MIN = -1.0
HEIGHT_MAX = 1.0

# --- Structure Mask ---
# Influence of a padding cell reaches zero at this fraction of the cell size.
MASK_FALLOFF_RADIUS_FACTOR = 0.7

# --- Tile Addressing ---
TILE_SEED_ALPHABET = "abcdefghijklmnopqrstuvwxyz0123456789"
TILE_SEED_LENGTH = 16

# --- Export ---
EXPORT_VERSION = "2.0"
SUPPORTED_EXPORT_VERSIONS = ("2.0",)
