import logging

import numpy as np
import pytest

from terrain_generator.biomes import get_biome
from terrain_generator.generator import TerrainGenerator, generate_field, tile_vertex_coordinates, tile_world_coordinates
from terrain_generator.mask import build_mask
from terrain_generator.noise import SeededNoise
from terrain_generator.rng import SeededRNG
from terrain_generator.structures import StructurePlacement
from terrain_generator.tiles import get_tile_seed

SEED = "cosmic-landscape-42"


@pytest.fixture
def logger():
    return logging.getLogger("test-generator")


def _field(tile_x=0, tile_z=0, **kwargs):
    params = dict(seed=SEED, biome_id="grassland", resolution=50, tile_size=50.0,
                  tile_x=tile_x, tile_z=tile_z)
    params.update(kwargs)
    return generate_field(**params)


def test_vertex_coordinates_span_the_tile():
    local_x, local_z = tile_vertex_coordinates(64, 50.0)
    assert local_x.shape == (65, 65)
    assert local_x[0, 0] == -25.0 and local_x[0, -1] == 25.0
    assert local_z[0, 0] == -25.0 and local_z[-1, 0] == 25.0
    # Columns vary along x, rows along z.
    assert np.all(local_x[:, 3] == local_x[0, 3])
    assert np.all(local_z[3, :] == local_z[3, 0])


def test_field_shape_and_ranges():
    field = _field()
    assert field.shape == (51, 51)
    assert field.colors.shape == (51, 51, 3)
    assert field.height.min() >= -1.0 and field.height.max() <= 1.0
    assert np.all(np.isfinite(field.colors))
    assert field.colors.min() >= 0.0 and field.colors.max() <= 1.0
    assert np.array_equal(field.elevation, field.final_height * get_biome("grassland").height_scale)


def test_generation_is_deterministic():
    a = _field(tile_x=-2, tile_z=3, biome_id="canyon")
    b = _field(tile_x=-2, tile_z=3, biome_id="canyon")
    assert np.array_equal(a.height, b.height)
    assert np.array_equal(a.final_height, b.final_height)
    assert np.array_equal(a.colors, b.colors)


def test_heights_match_the_scalar_noise_path():
    field = _field(tile_x=1, tile_z=-1)
    biome = get_biome("grassland")
    noise = SeededNoise(SeededRNG(SEED))
    for row, col in [(0, 0), (10, 37), (50, 50), (25, 3)]:
        expected = noise.terrain_height(
            field.world_x[row, col] * biome.noise_scale,
            field.world_z[row, col] * biome.noise_scale,
            biome.octaves,
        )
        assert field.height[row, col] == expected


def test_tiles_join_seamlessly_east_west():
    home = _field(0, 0)
    east = _field(1, 0)
    assert np.array_equal(home.world_x[:, -1], east.world_x[:, 0])
    assert np.array_equal(home.height[:, -1], east.height[:, 0])
    assert np.array_equal(home.colors[:, -1], east.colors[:, 0])


def test_tiles_join_seamlessly_north_south():
    home = _field(0, 0)
    south = _field(0, 1)
    assert np.array_equal(home.height[-1, :], south.height[0, :])


@pytest.mark.parametrize("tile_size, resolution", [(0.1, 3), (33.3, 7), (17.7, 13), (1 / 3, 5)])
def test_tiles_join_seamlessly_for_inexact_vertex_spacing(tile_size, resolution):
    home = _field(0, 0, tile_size=tile_size, resolution=resolution)
    east = _field(1, 0, tile_size=tile_size, resolution=resolution)
    south = _field(0, 1, tile_size=tile_size, resolution=resolution)
    west = _field(-1, 0, tile_size=tile_size, resolution=resolution)
    assert np.array_equal(home.world_x[:, -1], east.world_x[:, 0])
    assert np.array_equal(home.height[:, -1], east.height[:, 0])
    assert np.array_equal(home.world_z[-1, :], south.world_z[0, :])
    assert np.array_equal(home.height[-1, :], south.height[0, :])
    assert np.array_equal(west.height[:, -1], home.height[:, 0])


def test_world_coordinates_of_the_home_tile_are_its_local_coordinates():
    local_x, local_z = tile_vertex_coordinates(7, 33.3)
    world_x, world_z = tile_world_coordinates(7, 33.3, 0, 0)
    assert np.array_equal(local_x, world_x)
    assert np.array_equal(local_z, world_z)
    shifted_x, _ = tile_world_coordinates(7, 33.3, 2, 0)
    assert np.allclose(shifted_x, local_x + 2 * 33.3)


def test_tiles_use_the_base_seed_not_the_tile_seed():
    east = _field(1, 0)
    assert east.tile_seed == get_tile_seed(SEED, 1, 0)
    reseeded = generate_field(east.tile_seed, "grassland", 50, 50.0, 1, 0)
    assert not np.array_equal(east.height, reseeded.height)


def test_mask_flattens_only_the_home_tile():
    mask = build_mask([StructurePlacement(id="s", type="cuboid", grid_x=0, grid_z=0)], 16)
    home = _field(0, 0, structure_mask=mask, cell_size=3.0, flatten_target=0.25, is_home=True)
    # With resolution == tile_size the vertices sit on integer coordinates;
    # (0..2, 0..2) lie inside the structure's own cell.
    rows = cols = [25, 26, 27]
    for r in rows:
        for c in cols:
            assert home.final_height[r, c] == pytest.approx(0.25)
    assert not np.array_equal(home.final_height, home.height)
    # Far from the structure nothing changes.
    assert np.array_equal(home.final_height[:5, :5], home.height[:5, :5])

    neighbour = _field(1, 0, structure_mask=mask, is_home=False)
    assert np.array_equal(neighbour.final_height, neighbour.height)


def test_mask_may_be_given_as_placements():
    placements = [StructurePlacement(id="s", type="cuboid", grid_x=-2, grid_z=1)]
    from_list = _field(structure_mask=placements, grid_size=16, is_home=True)
    from_mask = _field(structure_mask=build_mask(placements, 16), is_home=True)
    assert np.array_equal(from_list.final_height, from_mask.final_height)


def test_empty_mask_leaves_heights_untouched():
    field = _field(structure_mask=build_mask([], 16), is_home=True)
    assert field.final_height is field.height


def test_invalid_parameters_are_rejected():
    with pytest.raises(ValueError):
        _field(resolution=0)
    with pytest.raises(ValueError):
        _field(tile_size=0.0)
    with pytest.raises(ValueError):
        _field(cell_size=-1.0)


def test_sample_accessor():
    field = _field()
    sample = field.sample(10, 20)
    assert sample.height == field.height[10, 20]
    assert sample.color == tuple(field.colors[10, 20])


def test_generator_consolidates_defaults(logger):
    generator = TerrainGenerator({"seed": "abc", "biome": "desert", "resolution": 16}, logger)
    assert generator.seed == "abc"
    assert generator.biome.name == "Desert"
    assert generator.settings["tile_size"] == 50.0
    assert generator.settings["grid_size"] == 16
    assert generator.tile_seed(0, 0) == "abc"


def test_generator_unknown_biome_falls_back(logger):
    generator = TerrainGenerator({"biome": "swamp"}, logger)
    assert generator.biome.name == "Grassland"


def test_generator_preview_masks_only_the_centre(logger):
    generator = TerrainGenerator({"seed": "abc", "resolution": 24, "tile_size": 48.0}, logger)
    mask = build_mask([StructurePlacement(id="s", type="dome", grid_x=0, grid_z=0)], 16)
    tiles = generator.generate_preview(mask)
    assert list(tiles) == ["NW", "N", "NE", "W", "C", "E", "SW", "S", "SE"]
    assert tiles["C"].is_home
    assert not np.array_equal(tiles["C"].final_height, tiles["C"].height)
    for key, field in tiles.items():
        if key != "C":
            assert not field.is_home
            assert np.array_equal(field.final_height, field.height)
    assert np.array_equal(tiles["C"].height[:, -1], tiles["E"].height[:, 0])
    assert np.array_equal(tiles["NW"].height[-1, :], tiles["W"].height[0, :])


def test_generator_tile_matches_pure_entry_point(logger):
    generator = TerrainGenerator({"seed": "abc", "biome": "alien", "resolution": 20}, logger)
    field = generator.generate_tile(-1, 2)
    expected = generate_field("abc", "alien", 20, 50.0, -1, 2)
    assert np.array_equal(field.colors, expected.colors)


def test_generator_logs_tile_timing_at_info(logger, caplog):
    generator = TerrainGenerator({"seed": "abc", "resolution": 8}, logger)
    with caplog.at_level(logging.INFO, logger="test-generator"):
        generator.generate_tile(1, -1)
    assert any(
        record.levelno == logging.INFO and "Generated tile (1, -1)" in record.getMessage()
        for record in caplog.records
    )
