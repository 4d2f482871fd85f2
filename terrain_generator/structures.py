# terrain_generator/structures.py

"""
================================================================================
STRUCTURE TYPES & PLACEMENT
================================================================================
The structure-type registry (named shapes with default dimensions) and the
StructureLayer, which holds the structures placed on the home tile's grid.

Shape only matters to whatever renders the structures. Terrain masking only
reads each placement's (grid_x, grid_z).
================================================================================
"""
import enum
import logging
import secrets
import time
from typing import NamedTuple, Optional

from . import config as DEFAULTS
from .mask import StructureMask, build_mask, grid_bounds

_ID_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"


class StructureType(str, enum.Enum):
    CUBOID = "cuboid"
    PYRAMID = "pyramid"
    CYLINDER = "cylinder"
    TOWER = "tower"
    DOME = "dome"


class StructureShape(NamedTuple):
    name: str
    icon: str
    color: int
    default_height: Optional[float] = None
    default_width: Optional[float] = None
    default_depth: Optional[float] = None
    default_radius: Optional[float] = None
    segments: Optional[int] = None


STRUCTURE_TYPES: dict[StructureType, StructureShape] = {
    StructureType.CUBOID: StructureShape("Cuboid", "▢", 0x00FFFF, default_height=4, default_width=2, default_depth=2),
    StructureType.PYRAMID: StructureShape("Pyramid", "△", 0xFFFF00, default_height=5, default_width=3, default_depth=3),
    StructureType.CYLINDER: StructureShape("Cylinder", "○", 0xFF00FF, default_height=4, default_radius=1.2, segments=8),
    StructureType.TOWER: StructureShape("Tower", "▣", 0x00FF00, default_height=8, default_width=1.5, default_depth=1.5),
    StructureType.DOME: StructureShape("Dome", "◠", 0xFF8800, default_radius=2, segments=12),
}


class StructurePlacement(NamedTuple):
    id: str
    type: str
    grid_x: int
    grid_z: int
    width: Optional[float] = None
    height: Optional[float] = None
    depth: Optional[float] = None
    radius: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id, "type": self.type, "gridX": self.grid_x, "gridZ": self.grid_z,
            "width": self.width, "height": self.height, "depth": self.depth, "radius": self.radius,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "StructurePlacement":
        try:
            return cls(
                id=str(data["id"]), type=str(data["type"]),
                grid_x=int(data["gridX"]), grid_z=int(data["gridZ"]),
                width=data.get("width"), height=data.get("height"),
                depth=data.get("depth"), radius=data.get("radius"),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Malformed structure record {data!r}: {e}") from e


def get_structure_shape(structure_type) -> StructureShape:
    """Looks up a structure type. Unknown names raise KeyError."""
    try:
        return STRUCTURE_TYPES[StructureType(structure_type)]
    except ValueError:
        raise KeyError(f"Unknown structure type '{structure_type}'") from None


def new_structure_id() -> str:
    token = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"struct-{int(time.time() * 1000)}-{token}"


class StructureLayer:
    """
    The set of structures placed on the home tile. Each grid cell holds at most
    one structure; the mask is rebuilt from scratch whenever the set changes.
    """
    def __init__(self, grid_size: int = DEFAULTS.DEFAULT_GRID_SIZE, structures=None,
                 logger: logging.Logger = None):
        self.grid_size = grid_size
        self.logger = logger or logging.getLogger(__name__)
        self._structures: list[StructurePlacement] = []
        self._mask = None
        for structure in structures or []:
            self.add(structure)

    @property
    def structures(self) -> list[StructurePlacement]:
        return list(self._structures)

    def __len__(self):
        return len(self._structures)

    @property
    def mask(self) -> StructureMask:
        if self._mask is None:
            self._mask = build_mask(self._structures, self.grid_size)
        return self._mask

    def in_bounds(self, grid_x: int, grid_z: int) -> bool:
        lo, hi = grid_bounds(self.grid_size)
        return lo <= grid_x <= hi and lo <= grid_z <= hi

    def find(self, grid_x: int, grid_z: int) -> Optional[StructurePlacement]:
        for structure in self._structures:
            if structure.grid_x == grid_x and structure.grid_z == grid_z:
                return structure
        return None

    def add(self, structure: StructurePlacement) -> StructurePlacement:
        if not self.in_bounds(structure.grid_x, structure.grid_z):
            raise ValueError(
                f"Cell ({structure.grid_x}, {structure.grid_z}) is outside the {self.grid_size}x{self.grid_size} grid"
            )
        if self.find(structure.grid_x, structure.grid_z) is not None:
            raise ValueError(f"Cell ({structure.grid_x}, {structure.grid_z}) is already occupied")
        self._structures.append(structure)
        self._mask = None
        return structure

    def place(self, grid_x: int, grid_z: int, structure_type) -> StructurePlacement:
        """Places a new structure with the type's default dimensions."""
        shape = get_structure_shape(structure_type)
        structure = StructurePlacement(
            id=new_structure_id(), type=StructureType(structure_type).value,
            grid_x=grid_x, grid_z=grid_z,
            width=shape.default_width, height=shape.default_height,
            depth=shape.default_depth, radius=shape.default_radius,
        )
        self.add(structure)
        self.logger.debug(f"Placed {structure.type} '{structure.id}' at ({grid_x}, {grid_z}).")
        return structure

    def remove(self, structure_id: str) -> bool:
        before = len(self._structures)
        self._structures = [s for s in self._structures if s.id != structure_id]
        if len(self._structures) != before:
            self._mask = None
            return True
        return False

    def toggle(self, grid_x: int, grid_z: int, structure_type=None) -> Optional[StructurePlacement]:
        """
        Removes the structure at an occupied cell, otherwise places one of the
        given type. Returns the placed structure, or None if a structure was
        removed or no type was given.
        """
        existing = self.find(grid_x, grid_z)
        if existing is not None:
            self.remove(existing.id)
            self.logger.debug(f"Removed {existing.type} '{existing.id}' at ({grid_x}, {grid_z}).")
            return None
        if structure_type is None:
            return None
        return self.place(grid_x, grid_z, structure_type)

    def clear(self):
        self._structures = []
        self._mask = None
