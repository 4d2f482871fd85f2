import random

from terrain_generator import config as DEFAULTS
from terrain_generator.tiles import (
    CENTER_KEY, TILE_DIRECTIONS, get_adjacent_tile_seeds, get_tile_seed, neighbor_offsets,
)


def test_home_tile_keeps_the_base_seed():
    for seed in ["abc", "cosmic-landscape-42", "", 1234]:
        assert get_tile_seed(seed, 0, 0) == seed


def test_tile_seed_shape():
    seed = get_tile_seed("abc", 1, -1)
    assert len(seed) == DEFAULTS.TILE_SEED_LENGTH
    assert set(seed) <= set(DEFAULTS.TILE_SEED_ALPHABET)


def test_tile_seed_reference_values():
    assert get_tile_seed("abc", 1, 0) == "kyjhb6ohw4q0oz58"
    assert get_tile_seed(42, 1, 0) == "c4bcmpzmgdbsiwkf"


def test_tile_seed_is_deterministic():
    assert get_tile_seed("abc", 3, 7) == get_tile_seed("abc", 3, 7)
    assert get_tile_seed("abc", 3, 7) != get_tile_seed("abd", 3, 7)


def test_integral_float_seed_matches_int_seed():
    assert get_tile_seed(42.0, 1, 0) == get_tile_seed(42, 1, 0)


def test_neighbour_seeds_are_pairwise_distinct():
    rng = random.Random(20240601)
    alphabet = DEFAULTS.TILE_SEED_ALPHABET
    for _ in range(1000):
        base = "".join(rng.choice(alphabet) for _ in range(rng.randint(1, 20)))
        seeds = [
            get_tile_seed(base, d.x, d.z)
            for key, d in TILE_DIRECTIONS.items() if key != CENTER_KEY
        ]
        assert len(set(seeds)) == 8, base


def test_directions_cover_the_3x3_block():
    offsets = neighbor_offsets()
    assert len(offsets) == 9
    assert set(offsets) == {(dx, dz) for dx in (-1, 0, 1) for dz in (-1, 0, 1)}
    assert TILE_DIRECTIONS[CENTER_KEY].name == "Center"
    assert (TILE_DIRECTIONS["NE"].x, TILE_DIRECTIONS["NE"].z) == (1, -1)
    assert (TILE_DIRECTIONS["SW"].x, TILE_DIRECTIONS["SW"].z) == (-1, 1)


def test_adjacent_tile_seeds():
    tiles = get_adjacent_tile_seeds("abc")
    assert list(tiles) == ["NW", "N", "NE", "W", "C", "E", "SW", "S", "SE"]
    assert tiles["C"].seed == "abc"
    assert tiles["E"].seed == get_tile_seed("abc", 1, 0)
    assert tiles["S"].name == "South"
