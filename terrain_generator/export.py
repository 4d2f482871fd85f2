# terrain_generator/export.py

"""
================================================================================
STRUCTURE LAYER EXPORT
================================================================================
A flat, seed-tagged snapshot of the structures placed on a tile:

    {version, baseSeed, tileCoord: {x, z}, tileSeed, timestamp, structures[]}

Importers check `version` and reject anything they do not know rather than
parsing it on a best-effort basis.
================================================================================
"""
import json
import logging
import os
import time

from . import config as DEFAULTS
from .hashing import seed_text
from .structures import StructurePlacement
from .tiles import get_tile_seed

_REQUIRED_FIELDS = ("version", "baseSeed", "tileCoord", "tileSeed", "timestamp", "structures")


class ExportVersionError(ValueError):
    """Raised when an export record carries an unsupported version."""


def create_structure_layer_data(base_seed, tile_x: int, tile_z: int, structures=()) -> dict:
    """Builds the export record for one tile's structures."""
    return {
        "version": DEFAULTS.EXPORT_VERSION,
        "baseSeed": base_seed,
        "tileCoord": {"x": tile_x, "z": tile_z},
        "tileSeed": get_tile_seed(base_seed, tile_x, tile_z),
        "timestamp": int(time.time() * 1000),
        "structures": [
            s.to_dict() if isinstance(s, StructurePlacement) else StructurePlacement.from_dict(s).to_dict()
            for s in structures
        ],
    }


def parse_structure_layer_data(data: dict) -> dict:
    """
    Validates an export record and returns it with `structures` converted to
    StructurePlacement objects.
    """
    if not isinstance(data, dict):
        raise ValueError(f"Export record must be a JSON object, got {type(data).__name__}")
    version = data.get("version")
    if version not in DEFAULTS.SUPPORTED_EXPORT_VERSIONS:
        raise ExportVersionError(
            f"Unsupported export version {version!r}; supported: {', '.join(DEFAULTS.SUPPORTED_EXPORT_VERSIONS)}"
        )
    missing = [field for field in _REQUIRED_FIELDS if field not in data]
    if missing:
        raise ValueError(f"Export record is missing fields: {', '.join(missing)}")

    coord = data["tileCoord"]
    try:
        tile_x, tile_z = int(coord["x"]), int(coord["z"])
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Malformed tileCoord {coord!r}") from e

    parsed = dict(data)
    parsed["tileCoord"] = {"x": tile_x, "z": tile_z}
    parsed["structures"] = [StructurePlacement.from_dict(s) for s in data["structures"]]
    return parsed


_PATH_SEPARATORS = ("/", "\\")


def path_safe_seed(seed) -> str:
    """Formats a seed for use inside a single file or directory name."""
    text = seed_text(seed)
    for sep in _PATH_SEPARATORS:
        text = text.replace(sep, "_")
    return text


def export_filename(base_seed, tile_x: int, tile_z: int) -> str:
    return f"terrain-structures-{path_safe_seed(base_seed)}-tile-{tile_x}-{tile_z}.json"


def save_structure_layer(data: dict, directory: str, logger: logging.Logger = None) -> str:
    """Writes an export record as pretty-printed JSON and returns the file path."""
    logger = logger or logging.getLogger(__name__)
    os.makedirs(directory, exist_ok=True)
    coord = data["tileCoord"]
    path = os.path.join(directory, export_filename(data["baseSeed"], coord["x"], coord["z"]))
    with open(path, 'w') as f:
        json.dump(data, f, indent=2)
    logger.info(f"Saved structure layer ({len(data['structures'])} structures) to: {path}")
    return path


def load_structure_layer(path: str) -> dict:
    """Reads and validates an export record. File and JSON errors propagate."""
    with open(path, 'r') as f:
        data = json.load(f)
    return parse_structure_layer_data(data)
