# terrain_generator/__init__.py

# This file makes the 'terrain_generator' directory a Python package.
# We can also use it to define the public API of the package.

from .biomes import BiomeProfile, BiomeType, get_biome
from .color_maps import color_for
from .export import create_structure_layer_data, load_structure_layer, save_structure_layer
from .generator import TerrainField, TerrainGenerator, generate_field
from .hashing import seed_hash
from .mask import StructureMask, build_mask
from .noise import SeededNoise
from .rng import SeededRNG
from .structures import StructureLayer, StructureType
from .tiles import get_adjacent_tile_seeds, get_tile_seed

__all__ = [
    "BiomeProfile", "BiomeType", "get_biome",
    "color_for",
    "create_structure_layer_data", "load_structure_layer", "save_structure_layer",
    "TerrainField", "TerrainGenerator", "generate_field",
    "seed_hash",
    "StructureMask", "build_mask",
    "SeededNoise",
    "SeededRNG",
    "StructureLayer", "StructureType",
    "get_adjacent_tile_seeds", "get_tile_seed",
]
