# terrain_generator/tiles.py

"""
================================================================================
TILE ADDRESSING
================================================================================
Deterministic tile identifiers for an unbounded grid of terrain tiles.

The home tile (0, 0) keeps the base seed unchanged. Every other tile gets a
16-character identifier derived from "{base_seed}_tile_{x}_{z}". These tile
seeds are nominal only (exports, multiplayer correlation): terrain is always
generated from the base seed so that neighbouring tiles join seamlessly.
================================================================================
"""
from typing import NamedTuple

from . import config as DEFAULTS
from .hashing import rolling_hash, seed_text


class TileDirection(NamedTuple):
    x: int
    z: int
    name: str


class TileInfo(NamedTuple):
    x: int
    z: int
    name: str
    seed: object


# Row-major from the north-west corner. "C" is the home tile itself.
TILE_DIRECTIONS = {
    "NW": TileDirection(-1, -1, "North-West"),
    "N": TileDirection(0, -1, "North"),
    "NE": TileDirection(1, -1, "North-East"),
    "W": TileDirection(-1, 0, "West"),
    "C": TileDirection(0, 0, "Center"),
    "E": TileDirection(1, 0, "East"),
    "SW": TileDirection(-1, 1, "South-West"),
    "S": TileDirection(0, 1, "South"),
    "SE": TileDirection(1, 1, "South-East"),
}

CENTER_KEY = "C"


def get_tile_seed(base_seed, tile_x: int, tile_z: int):
    """Returns the base seed for the home tile, otherwise a derived 16-character identifier."""
    if tile_x == 0 and tile_z == 0:
        return base_seed

    coord_hash = rolling_hash(f"{seed_text(base_seed)}_tile_{tile_x}_{tile_z}")

    alphabet = DEFAULTS.TILE_SEED_ALPHABET
    base = len(alphabet)
    chars = []
    h = abs(coord_hash)
    for i in range(DEFAULTS.TILE_SEED_LENGTH):
        chars.append(alphabet[h % base])
        # Mix the original (signed) hash back in, shifted further each step.
        h = abs(h // base + (coord_hash >> i))
    return "".join(chars)


def get_adjacent_tile_seeds(base_seed) -> dict[str, TileInfo]:
    """Returns the home tile and its 8 neighbours, keyed by compass label."""
    return {
        key: TileInfo(d.x, d.z, d.name, get_tile_seed(base_seed, d.x, d.z))
        for key, d in TILE_DIRECTIONS.items()
    }


def neighbor_offsets() -> list[tuple[int, int]]:
    """The 9 (dx, dz) offsets with dx, dz in {-1, 0, 1}, centre included."""
    return [(d.x, d.z) for d in TILE_DIRECTIONS.values()]
