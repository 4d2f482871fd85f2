import json
import os

from PIL import Image

from bake_tiles import bake_tiles
from terrain_generator.export import create_structure_layer_data, load_structure_layer, save_structure_layer
from terrain_generator.structures import StructurePlacement
from terrain_generator.tiles import get_tile_seed


def _write_config(tmp_path, structures_file=None):
    config = {
        "terrain_generation_parameters": {
            "seed": "bake-test", "biome": "tundra", "resolution": 16, "tile_size": 32.0,
        },
        "structures_file": structures_file,
    }
    path = tmp_path / "config.json"
    path.write_text(json.dumps(config))
    return str(path)


def test_bake_writes_tiles_and_manifest(tmp_path):
    output = tmp_path / "out"
    manifest_path = bake_tiles(_write_config(tmp_path), str(output), processes=1)
    assert manifest_path == os.path.join(str(output), "seed_bake-test", "manifest.json")

    with open(manifest_path) as f:
        manifest = json.load(f)
    assert manifest["base_seed"] == "bake-test"
    assert manifest["biome"] == "Tundra"
    assert list(manifest["tile_map"]) == ["NW", "N", "NE", "W", "C", "E", "SW", "S", "SE"]
    assert manifest["tile_map"]["C"]["tile_seed"] == "bake-test"
    assert manifest["tile_map"]["SE"]["tile_seed"] == get_tile_seed("bake-test", 1, 1)

    base = os.path.dirname(manifest_path)
    for tile in manifest["tile_map"].values():
        for mode in ("terrain", "elevation"):
            png = os.path.join(base, mode, "tiles", f"{tile['hashes'][mode]}.png")
            assert os.path.exists(png)
    terrain_png = os.path.join(base, "terrain", "tiles", f"{manifest['tile_map']['C']['hashes']['terrain']}.png")
    with Image.open(terrain_png) as img:
        assert img.size in ((17, 17), (1, 1))

    export = load_structure_layer(os.path.join(base, manifest["structure_layer"]))
    assert export["structures"] == []


def test_bake_applies_imported_structures(tmp_path):
    placements = [StructurePlacement(id="s1", type="tower", grid_x=0, grid_z=0)]
    structures_path = save_structure_layer(
        create_structure_layer_data("bake-test", 0, 0, placements), str(tmp_path / "layers")
    )
    manifest_path = bake_tiles(_write_config(tmp_path, structures_path), str(tmp_path / "out"), processes=1)
    with open(manifest_path) as f:
        manifest = json.load(f)

    plain_manifest_path = bake_tiles(_plain_config(tmp_path), str(tmp_path / "plain"), processes=1)
    with open(plain_manifest_path) as f:
        plain = json.load(f)

    # Only the home tile differs once structures are applied.
    assert manifest["tile_map"]["C"]["hashes"] != plain["tile_map"]["C"]["hashes"]
    assert manifest["tile_map"]["E"]["hashes"] == plain["tile_map"]["E"]["hashes"]

    export = load_structure_layer(os.path.join(os.path.dirname(manifest_path), manifest["structure_layer"]))
    assert [s.id for s in export["structures"]] == ["s1"]


def _plain_config(tmp_path):
    plain_dir = tmp_path / "plain_cfg"
    plain_dir.mkdir()
    return _write_config(plain_dir)


def test_bake_with_missing_config_returns_none(tmp_path):
    assert bake_tiles(str(tmp_path / "missing.json"), str(tmp_path / "out"), processes=1) is None


def test_bake_keeps_seeds_with_separators_inside_the_output_root(tmp_path):
    config = {"terrain_generation_parameters": {"seed": "a/b", "resolution": 4, "tile_size": 8.0}}
    path = tmp_path / "sep.json"
    path.write_text(json.dumps(config))
    manifest_path = bake_tiles(str(path), str(tmp_path / "out"), processes=1)
    assert manifest_path == os.path.join(str(tmp_path / "out"), "seed_a_b", "manifest.json")
    with open(manifest_path) as f:
        assert json.load(f)["base_seed"] == "a/b"
