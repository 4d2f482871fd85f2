# terrain_generator/generator.py

"""
================================================================================
CORE TERRAIN GENERATOR
================================================================================
This module contains the TerrainGenerator class and the pure generate_field
entry point, which produce a grid of heights and colors for one terrain tile.

Data Contract:
---------------
- Inputs:
    - A base seed, a biome, a resolution and a tile size.
    - A tile coordinate. (0, 0) is the home tile.
    - Optionally a structure mask, applied only when generating the home tile.
- Outputs:
    - A TerrainField of (resolution + 1)^2 vertices: tile-local and world
      coordinates, the clamped raw height, the masked final height, the scaled
      elevation and float RGB colors.
- Side Effects: Logs messages using the provided logger.
- Invariants:
    - Every call builds its own RNG and permutation table from the BASE seed,
      never a per-tile seed, so each tile is a window into one global noise
      field and neighbouring tiles join seamlessly.
    - Given the same inputs, the output is bit-identical.
================================================================================
"""
import logging
import time
from typing import NamedTuple, Optional

import numpy as np

from . import config as DEFAULTS
from .biomes import BiomeProfile, get_biome
from .color_maps import get_height_color_array
from .mask import StructureMask, apply_mask, build_mask
from .noise import SeededNoise
from .rng import SeededRNG
from .tiles import TILE_DIRECTIONS, get_adjacent_tile_seeds, get_tile_seed


class TerrainSample(NamedTuple):
    height: float
    final_height: float
    color: tuple[float, float, float]


class TerrainField(NamedTuple):
    """The generated vertex grid for one tile. Arrays are indexed [row (z), col (x)]."""
    tile_x: int
    tile_z: int
    tile_seed: object
    is_home: bool
    biome: BiomeProfile
    local_x: np.ndarray
    local_z: np.ndarray
    world_x: np.ndarray
    world_z: np.ndarray
    height: np.ndarray
    final_height: np.ndarray
    elevation: np.ndarray
    colors: np.ndarray

    @property
    def shape(self) -> tuple[int, int]:
        return self.height.shape

    def sample(self, row: int, col: int) -> TerrainSample:
        return TerrainSample(
            float(self.height[row, col]),
            float(self.final_height[row, col]),
            tuple(float(c) for c in self.colors[row, col]),
        )


def tile_vertex_coordinates(resolution: int, tile_size: float) -> tuple[np.ndarray, np.ndarray]:
    """
    Tile-local vertex coordinates, centred on the tile origin and running from
    -tile_size / 2 to +tile_size / 2 inclusive along both axes.
    """
    steps = np.arange(resolution + 1, dtype=np.float64)
    # Multiply before dividing so both edges land exactly on +/- tile_size / 2.
    axis = steps * tile_size / resolution - tile_size / 2
    local_x, local_z = np.meshgrid(axis, axis)
    return local_x, local_z


def tile_world_coordinates(resolution: int, tile_size: float, tile_x: int, tile_z: int) -> tuple[np.ndarray, np.ndarray]:
    """
    World-space vertex coordinates of one tile, computed from the global
    integer vertex index so a shared edge rounds the same way in both tiles.
    """
    steps = np.arange(resolution + 1, dtype=np.float64)
    axis_x = (tile_x * resolution + steps) * tile_size / resolution - tile_size / 2
    axis_z = (tile_z * resolution + steps) * tile_size / resolution - tile_size / 2
    world_x, world_z = np.meshgrid(axis_x, axis_z)
    return world_x, world_z


def generate_field(seed, biome_id, resolution: int, tile_size: float, tile_x: int, tile_z: int,
                   structure_mask=None, grid_size: int = DEFAULTS.DEFAULT_GRID_SIZE,
                   cell_size: float = DEFAULTS.DEFAULT_CELL_SIZE,
                   flatten_target: float = DEFAULTS.DEFAULT_FLATTEN_HEIGHT,
                   is_home: bool = False,
                   lacunarity: float = DEFAULTS.FRACTAL_LACUNARITY,
                   persistence: float = DEFAULTS.FRACTAL_PERSISTENCE,
                   detail_multiplier: float = DEFAULTS.DETAIL_NOISE_MULTIPLIER,
                   detail_weight: float = DEFAULTS.DETAIL_NOISE_WEIGHT,
                   logger: logging.Logger = None) -> TerrainField:
    """
    Generates one tile of terrain.

    Args:
        seed: The BASE seed of the world. Also used for every non-home tile.
        biome_id: A biome name, BiomeType or BiomeProfile. Unknown names fall
            back to the default biome.
        structure_mask: A StructureMask, an iterable of structure placements,
            or None. Only applied when is_home is True.
        grid_size, cell_size: The structure grid geometry. grid_size is used
            only when structure_mask is given as placements.
        flatten_target: The normalized height masked terrain is pulled to.
    """
    if int(resolution) != resolution or resolution < 1:
        raise ValueError(f"resolution must be an integer >= 1, got {resolution}")
    if not tile_size > 0:
        raise ValueError(f"tile_size must be > 0, got {tile_size}")
    if not cell_size > 0:
        raise ValueError(f"cell_size must be > 0, got {cell_size}")

    logger = logger or logging.getLogger(__name__)
    biome = get_biome(biome_id, logger)

    # A fresh RNG and permutation table per call keeps the output a pure
    # function of the inputs, independent of call order.
    rng = SeededRNG(seed)
    noise = SeededNoise(rng)

    local_x, local_z = tile_vertex_coordinates(int(resolution), float(tile_size))
    world_x, world_z = tile_world_coordinates(int(resolution), float(tile_size), int(tile_x), int(tile_z))

    height = noise.terrain_height_grid(
        world_x * biome.noise_scale, world_z * biome.noise_scale, biome.octaves,
        lacunarity=lacunarity, persistence=persistence,
        detail_multiplier=detail_multiplier, detail_weight=detail_weight
    )

    final_height = height
    if is_home and structure_mask is not None:
        if not isinstance(structure_mask, StructureMask):
            structure_mask = build_mask(structure_mask, grid_size)
        if len(structure_mask) > 0:
            influence = structure_mask.influence_grid(local_x, local_z, cell_size)
            final_height = apply_mask(height, influence, flatten_target)
            logger.debug(
                f"Applied structure mask ({len(structure_mask)} cells), "
                f"{int(np.count_nonzero(influence))} vertices influenced."
            )

    return TerrainField(
        tile_x=tile_x,
        tile_z=tile_z,
        tile_seed=get_tile_seed(seed, tile_x, tile_z),
        is_home=is_home,
        biome=biome,
        local_x=local_x,
        local_z=local_z,
        world_x=world_x,
        world_z=world_z,
        height=height,
        final_height=final_height,
        elevation=final_height * biome.height_scale,
        colors=get_height_color_array(final_height, biome),
    )


class TerrainGenerator:
    """
    Generates terrain tiles for one world configuration. This class is
    backend-only and does not handle any visualization.
    """
    def __init__(self, config: dict, logger: logging.Logger):
        """
        Initializes the terrain generator.

        Args:
            config (dict): User-defined parameters to override defaults.
            logger (logging.Logger): The logger instance for all output.
        """
        self.logger = logger
        self.user_config = config
        self.logger.info("TerrainGenerator initializing...")

        # --- Consolidate Configuration ---
        self.settings = {
            'seed': self.user_config.get('seed', DEFAULTS.DEFAULT_SEED),
            'biome': self.user_config.get('biome', DEFAULTS.DEFAULT_BIOME),
            'resolution': self.user_config.get('resolution', DEFAULTS.DEFAULT_RESOLUTION),
            'tile_size': self.user_config.get('tile_size', DEFAULTS.DEFAULT_TILE_SIZE),
            'grid_size': self.user_config.get('grid_size', DEFAULTS.DEFAULT_GRID_SIZE),
            'cell_size': self.user_config.get('cell_size', DEFAULTS.DEFAULT_CELL_SIZE),
            'flatten_height': self.user_config.get('flatten_height', DEFAULTS.DEFAULT_FLATTEN_HEIGHT),
            'lacunarity': self.user_config.get('lacunarity', DEFAULTS.FRACTAL_LACUNARITY),
            'persistence': self.user_config.get('persistence', DEFAULTS.FRACTAL_PERSISTENCE),
            'detail_noise_multiplier': self.user_config.get('detail_noise_multiplier', DEFAULTS.DETAIL_NOISE_MULTIPLIER),
            'detail_noise_weight': self.user_config.get('detail_noise_weight', DEFAULTS.DETAIL_NOISE_WEIGHT),
        }

        # --- Public Properties for easy access ---
        self.seed = self.settings['seed']
        self.biome = get_biome(self.settings['biome'], self.logger)

        self.logger.info(f"TerrainGenerator initialized with seed: {self.seed}")
        self.logger.info(
            f"Biome: {self.biome.name}, resolution: {self.settings['resolution']}, "
            f"tile size: {self.settings['tile_size']}, structure grid: "
            f"{self.settings['grid_size']}x{self.settings['grid_size']} @ {self.settings['cell_size']}"
        )

    def tile_seed(self, tile_x: int, tile_z: int):
        return get_tile_seed(self.seed, tile_x, tile_z)

    def adjacent_tile_seeds(self) -> dict:
        return get_adjacent_tile_seeds(self.seed)

    def generate_tile(self, tile_x: int, tile_z: int, structure_mask: Optional[StructureMask] = None) -> TerrainField:
        """Generates one tile. The mask is only applied if this is the home tile."""
        start_time = time.perf_counter()
        is_home = tile_x == 0 and tile_z == 0
        field = generate_field(
            self.seed, self.biome, self.settings['resolution'], self.settings['tile_size'],
            tile_x, tile_z,
            structure_mask=structure_mask if is_home else None,
            grid_size=self.settings['grid_size'],
            cell_size=self.settings['cell_size'],
            flatten_target=self.settings['flatten_height'],
            is_home=is_home,
            lacunarity=self.settings['lacunarity'],
            persistence=self.settings['persistence'],
            detail_multiplier=self.settings['detail_noise_multiplier'],
            detail_weight=self.settings['detail_noise_weight'],
            logger=self.logger,
        )
        elapsed = time.perf_counter() - start_time
        self.logger.info(f"Generated tile ({tile_x}, {tile_z}) in {elapsed:.3f}s.")
        return field

    def generate_home(self, structure_mask: Optional[StructureMask] = None) -> TerrainField:
        return self.generate_tile(0, 0, structure_mask)

    def generate_preview(self, structure_mask: Optional[StructureMask] = None) -> dict[str, TerrainField]:
        """Generates the home tile and its 8 neighbours, keyed by compass label."""
        start_time = time.perf_counter()
        tiles = {
            key: self.generate_tile(direction.x, direction.z, structure_mask)
            for key, direction in TILE_DIRECTIONS.items()
        }
        self.logger.info(f"Generated {len(tiles)} preview tiles in {time.perf_counter() - start_time:.2f}s.")
        return tiles
