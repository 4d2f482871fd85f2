# bake_tiles.py

"""
================================================================================
OFFLINE TILE BAKER SCRIPT
================================================================================
This script is a command-line tool for pre-rendering the home terrain tile and
its 8 neighbours to a directory of color images ("baking"), together with a
manifest and the home tile's structure-layer export.

Tiles are generated in parallel worker processes. Every worker builds its own
generator from the same base seed, so the tiles join seamlessly.

Usage:
    python bake_tiles.py --config path/to/your/config.json
================================================================================
"""
import os
import sys
import json
import logging
import argparse
import time
import hashlib
import collections
import multiprocessing
import numpy as np
from PIL import Image
from tqdm import tqdm

# Add project root to Python path to allow importing from terrain_generator
sys.path.append(os.path.abspath(os.path.dirname(__file__)))

from terrain_generator.generator import TerrainGenerator
from terrain_generator import color_maps
from terrain_generator import config as DEFAULTS
from terrain_generator.export import create_structure_layer_data, load_structure_layer, path_safe_seed, save_structure_layer
from terrain_generator.structures import StructureLayer
from terrain_generator.tiles import TILE_DIRECTIONS

VIEW_MODES = ["terrain", "elevation"]


# --- Helper for Uniform Tile Compression ---
def save_tile_surface(color_array: np.ndarray, directory: str, file_hash: str) -> str:
    """
    Saves a tile surface using a tiered, lossless compression strategy with Pillow.
    The color array is (rows, cols, channels), which is what Pillow expects.
    """
    os.makedirs(directory, exist_ok=True)
    file_path = os.path.join(directory, f"{file_hash}.png")

    # Tier 1: Check for perfectly uniform color.
    if (color_array == color_array[0, 0]).all():
        uniform_color = tuple(int(c) for c in color_array[0, 0])
        img = Image.new('RGB', (1, 1), uniform_color)
        img.save(file_path, 'PNG')
        return 'uniform'

    img = Image.fromarray(np.ascontiguousarray(color_array))

    # Tier 2: Low color count, save palettized.
    colors = img.getcolors(257)
    if colors and len(colors) <= 256:
        img = img.quantize(colors=256)
        img.save(file_path, 'PNG')
        return 'palettized'

    # Tier 3: Fallback for high-color tiles (save as standard RGB PNG).
    img.save(file_path, 'PNG')
    return 'full'


def get_elevation_color_array(final_height: np.ndarray) -> np.ndarray:
    """Converts normalized heights [-1, 1] into a grayscale RGB color array."""
    gray_values = np.floor((np.clip(final_height, -1.0, 1.0) + 1.0) / 2.0 * 255).astype(np.uint8)
    return np.stack([gray_values] * 3, axis=-1)


# --- Global variables for worker processes ---
worker_generator = None
worker_mask = None
worker_tile_dirs = {}


def init_worker(config, mask, tile_dirs):
    """Initializes the global state for each worker process."""
    global worker_generator, worker_mask, worker_tile_dirs

    worker_logger = logging.getLogger(f"Worker-{os.getpid()}")
    worker_generator = TerrainGenerator(config=config, logger=worker_logger)
    worker_mask = mask
    worker_tile_dirs = tile_dirs


def process_tile(task):
    """
    Generates and SAVES a single tile. Returns only minimal metadata.
    """
    key, tx, tz = task
    field = worker_generator.generate_tile(tx, tz, worker_mask)

    data_map = {
        "terrain": color_maps.to_uint8_colors(field.colors),
        "elevation": get_elevation_color_array(field.final_height),
    }

    tile_results = {'key': key, 'tx': tx, 'tz': tz, 'tile_seed': field.tile_seed,
                    'hashes': {}, 'compression_types': {}}
    for mode in VIEW_MODES:
        color_array = data_map[mode]
        file_hash = hashlib.md5(color_array.tobytes()).hexdigest()
        tile_results['hashes'][mode] = file_hash
        tile_results['compression_types'][mode] = save_tile_surface(color_array, worker_tile_dirs[mode], file_hash)

    return tile_results


def _load_config(config_path: str, logger: logging.Logger):
    logger.info(f"Loading configuration from: {config_path}")
    try:
        with open(config_path, 'r') as f:
            return json.load(f)
    except (FileNotFoundError, json.JSONDecodeError) as e:
        logger.critical(f"Failed to load or parse config file: {e}")
        return None


# --- Main Baking Function ---
def bake_tiles(config_path: str, output_root: str = "baked_tiles", processes: int = None):
    """
    Loads a configuration, generates the home tile and its neighbours, and saves
    them as PNG images plus a manifest to a structured output directory.
    Returns the manifest path, or None if the configuration could not be loaded.
    """
    logger = logging.getLogger("Baker")

    # 1. --- Load Configuration ---
    config = _load_config(config_path, logger)
    if config is None:
        return None

    gen_params = config.get('terrain_generation_parameters', {})
    seed = gen_params.get('seed', DEFAULTS.DEFAULT_SEED)

    # 2. --- Initialize a main-process generator for shared info ---
    main_generator = TerrainGenerator(config=gen_params, logger=logger)
    grid_size = main_generator.settings['grid_size']

    # 3. --- Load Structures for the home tile ---
    structure_layer = StructureLayer(grid_size=grid_size, logger=logger)
    structures_file = config.get('structures_file')
    if structures_file:
        if not os.path.isabs(structures_file):
            structures_file = os.path.join(os.path.dirname(os.path.abspath(config_path)), structures_file)
        record = load_structure_layer(structures_file)
        for structure in record['structures']:
            structure_layer.add(structure)
        logger.info(f"Loaded {len(structure_layer)} structures from: {structures_file}")
    mask = structure_layer.mask

    # 4. --- Prepare Output Directories ---
    base_output_dir = os.path.join(output_root, f"seed_{path_safe_seed(seed)}")
    # Define the paths, but do not create the directories here.
    # The workers will handle directory creation on-demand.
    tile_dirs = {mode: os.path.join(base_output_dir, mode, "tiles") for mode in VIEW_MODES}

    # 5. --- Main Baking Loop (Parallelized) ---
    tasks = [(key, d.x, d.z) for key, d in TILE_DIRECTIONS.items()]
    num_workers = processes or max(1, min(len(tasks), multiprocessing.cpu_count() - 1))
    logger.info(f"Starting bake of {len(tasks)} tiles using {num_workers} worker process(es)...")

    manifest_tiles = {}
    compression_stats = {mode: collections.Counter() for mode in VIEW_MODES}
    saved_hashes = {mode: set() for mode in VIEW_MODES}
    start_time = time.perf_counter()

    def collect(result):
        manifest_tiles[result['key']] = {
            'x': result['tx'], 'z': result['tz'], 'tile_seed': result['tile_seed'],
            'hashes': result['hashes'],
        }
        for mode in VIEW_MODES:
            file_hash = result['hashes'][mode]
            if file_hash not in saved_hashes[mode]:
                saved_hashes[mode].add(file_hash)
                compression_stats[mode][result['compression_types'][mode]] += 1

    init_args = (gen_params, mask, tile_dirs)
    if num_workers == 1:
        init_worker(*init_args)
        for task in tqdm(tasks, desc="Baking Tiles"):
            collect(process_tile(task))
    else:
        with multiprocessing.Pool(processes=num_workers, initializer=init_worker, initargs=init_args) as pool:
            for result in tqdm(pool.imap_unordered(process_tile, tasks), total=len(tasks), desc="Baking Tiles"):
                collect(result)

    # --- Finalization ---
    export_data = create_structure_layer_data(seed, 0, 0, structure_layer.structures)
    export_path = save_structure_layer(export_data, base_output_dir, logger)

    manifest = {
        'base_seed': seed,
        'biome': main_generator.biome.name,
        'resolution': main_generator.settings['resolution'],
        'tile_size': main_generator.settings['tile_size'],
        'structure_layer': os.path.basename(export_path),
        'tile_map': {key: manifest_tiles[key] for key in TILE_DIRECTIONS},
    }
    manifest_path = os.path.join(base_output_dir, "manifest.json")
    with open(manifest_path, 'w') as f:
        json.dump(manifest, f, indent=2)

    end_time = time.perf_counter()
    logger.info(f"Baking complete! Total time: {end_time - start_time:.2f} seconds.")
    for mode in VIEW_MODES:
        stats = compression_stats[mode]
        logger.info(
            f"  - {mode.capitalize()}: {len(tasks)} total -> {len(saved_hashes[mode])} unique tiles saved "
            f"({stats['uniform']} uniform, {stats['palettized']} palettized, {stats['full']} full)"
        )
    logger.info(f"Baked tiles and manifest.json saved to: {base_output_dir}")
    return manifest_path


# --- Command-Line Interface ---
if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Offline Tile Baker for the procedural terrain generator.")
    parser.add_argument(
        "--config",
        type=str,
        required=True,
        help="Path to the JSON configuration file for the terrain to be baked."
    )
    parser.add_argument(
        "--output",
        type=str,
        default="baked_tiles",
        help="Root directory for baked output."
    )
    parser.add_argument(
        "--processes",
        type=int,
        default=None,
        help="Number of worker processes (default: one per CPU, minus one)."
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        stream=sys.stdout
    )
    bake_tiles(args.config, args.output, args.processes)
