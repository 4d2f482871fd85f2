# terrain_generator/mask.py

"""
================================================================================
STRUCTURE TERRAIN MASK
================================================================================
Builds a falloff-weighted influence field from the structures placed on the
home tile, used to flatten terrain locally around them.

Data Contract:
---------------
- Inputs:
    - structures: placements on an integer grid centred on the tile origin.
      Valid cells run from -grid_size // 2 to grid_size - grid_size // 2 - 1.
    - Tile-local world coordinates, cell size and a flatten target height.
- Outputs:
    - influence in [0, 1]: 1.0 anywhere inside a structure's own cell, decaying
      linearly from a padding cell's centre to 0 at 0.7 x cell size, and 0
      everywhere else (including outside the grid).
- Side Effects: None. A mask is never mutated; it is rebuilt from the full
  structure set whenever that set changes.
================================================================================
"""
import math
from typing import NamedTuple, Optional

import numpy as np

from . import config as DEFAULTS

_CODE_NONE = 0
_CODE_PADDING = 1
_CODE_STRUCTURE = 2


class MaskCell(NamedTuple):
    masked: bool
    is_structure: bool
    structure_id: Optional[str]


def grid_bounds(grid_size: int) -> tuple[int, int]:
    """Inclusive (min, max) grid coordinate on either axis."""
    lo = -(grid_size // 2)
    return lo, lo + grid_size - 1


def _grid_position(structure) -> tuple[int, int]:
    if isinstance(structure, dict):
        return int(structure["gridX"]), int(structure["gridZ"])
    return int(structure.grid_x), int(structure.grid_z)


def _structure_id(structure):
    if isinstance(structure, dict):
        return structure.get("id")
    return structure.id


class StructureMask:
    """An immutable mapping (grid_x, grid_z) -> MaskCell plus influence lookups."""

    def __init__(self, cells: dict, grid_size: int):
        self._cells = dict(cells)
        self.grid_size = grid_size
        self._codes = None

    def __len__(self):
        return len(self._cells)

    def __contains__(self, key):
        return key in self._cells

    def __iter__(self):
        return iter(self._cells)

    def get(self, grid_x: int, grid_z: int) -> Optional[MaskCell]:
        return self._cells.get((grid_x, grid_z))

    @property
    def cells(self) -> dict:
        return dict(self._cells)

    def world_to_cell(self, world_x: float, world_z: float, cell_size: float) -> Optional[tuple[int, int]]:
        """Returns the grid cell containing a tile-local point, or None outside the grid."""
        half_grid = (self.grid_size * cell_size) / 2
        col = math.floor((world_x + half_grid) / cell_size)
        row = math.floor((world_z + half_grid) / cell_size)
        if not (0 <= col < self.grid_size and 0 <= row < self.grid_size):
            return None
        offset = self.grid_size // 2
        return col - offset, row - offset

    def cell_center(self, grid_x: int, grid_z: int, cell_size: float) -> tuple[float, float]:
        half_grid = (self.grid_size * cell_size) / 2
        offset = self.grid_size // 2
        return ((grid_x + 0.5 + offset) * cell_size - half_grid,
                (grid_z + 0.5 + offset) * cell_size - half_grid)

    def influence_at(self, world_x: float, world_z: float, cell_size: float) -> float:
        if not self._cells:
            return 0.0
        cell = self.world_to_cell(world_x, world_z, cell_size)
        if cell is None:
            return 0.0
        data = self._cells.get(cell)
        if data is None or not data.masked:
            return 0.0
        if data.is_structure:
            return 1.0

        center_x, center_z = self.cell_center(cell[0], cell[1], cell_size)
        dx = world_x - center_x
        dz = world_z - center_z
        dist = math.sqrt(dx * dx + dz * dz)
        return max(0.0, 1.0 - dist / (cell_size * DEFAULTS.MASK_FALLOFF_RADIUS_FACTOR))

    def _cell_codes(self) -> np.ndarray:
        # Dense (row, col) lookup of in-grid cells, built lazily on first grid query.
        if self._codes is None:
            codes = np.full((self.grid_size, self.grid_size), _CODE_NONE, dtype=np.int8)
            offset = self.grid_size // 2
            for (gx, gz), data in self._cells.items():
                col, row = gx + offset, gz + offset
                if data.masked and 0 <= col < self.grid_size and 0 <= row < self.grid_size:
                    codes[row, col] = _CODE_STRUCTURE if data.is_structure else _CODE_PADDING
            self._codes = codes
        return self._codes

    def influence_grid(self, world_x: np.ndarray, world_z: np.ndarray, cell_size: float) -> np.ndarray:
        """Vectorized influence_at for arrays of tile-local coordinates."""
        world_x = np.asarray(world_x, dtype=np.float64)
        world_z = np.asarray(world_z, dtype=np.float64)
        influence = np.zeros(world_x.shape)
        if not self._cells:
            return influence

        half_grid = (self.grid_size * cell_size) / 2
        col = np.floor((world_x + half_grid) / cell_size)
        row = np.floor((world_z + half_grid) / cell_size)
        inside = (col >= 0) & (col < self.grid_size) & (row >= 0) & (row < self.grid_size)
        if not np.any(inside):
            return influence

        col_i = col[inside].astype(np.int64)
        row_i = row[inside].astype(np.int64)
        codes = self._cell_codes()[row_i, col_i]

        center_x = (col_i + 0.5) * cell_size - half_grid
        center_z = (row_i + 0.5) * cell_size - half_grid
        dx = world_x[inside] - center_x
        dz = world_z[inside] - center_z
        dist = np.sqrt(dx * dx + dz * dz)
        falloff = np.maximum(0.0, 1.0 - dist / (cell_size * DEFAULTS.MASK_FALLOFF_RADIUS_FACTOR))

        influence[inside] = np.select(
            [codes == _CODE_STRUCTURE, codes == _CODE_PADDING],
            [1.0, falloff],
            default=0.0
        )
        return influence


def build_mask(structures, grid_size: int) -> StructureMask:
    """
    Marks each structure's own cell and its 8 surrounding padding cells.

    Padding shared by two structures is tagged with the later structure in
    iteration order. Padding never overwrites a structure's own cell.
    """
    cells = {}
    for structure in structures:
        gx, gz = _grid_position(structure)
        structure_id = _structure_id(structure)
        for dx in (-1, 0, 1):
            for dz in (-1, 0, 1):
                key = (gx + dx, gz + dz)
                is_structure = dx == 0 and dz == 0
                existing = cells.get(key)
                if not is_structure and existing is not None and existing.is_structure:
                    continue
                cells[key] = MaskCell(True, is_structure, structure_id)
    return StructureMask(cells, grid_size)


def apply_mask(heights: np.ndarray, influence: np.ndarray, flatten_height: float) -> np.ndarray:
    """Blends heights towards the flatten target: h * (1 - i) + target * i where i > 0."""
    heights = np.asarray(heights, dtype=np.float64)
    blended = heights * (1 - influence) + flatten_height * influence
    return np.where(influence > 0, blended, heights)


def flatten_height_at(raw_height: float, influence: float, flatten_height: float) -> float:
    if influence > 0:
        return raw_height * (1 - influence) + flatten_height * influence
    return raw_height
