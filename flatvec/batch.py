"""
Batch conversion of a folder of images.

Each image runs in its own worker process; nothing is shared between
images, so one failure never affects another.
"""
import logging
import time
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import asdict
from pathlib import Path
from typing import List, Optional, Set, Tuple

from flatvec.pipeline import FlatColorPipeline
from flatvec.types import FlatvecConfig, VectorizationError

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS = {'.png'}


def get_image_files(folder: Path, extensions: Optional[Set[str]] = None) -> List[Path]:
    """Get all image files from a folder."""
    if extensions is None:
        extensions = DEFAULT_EXTENSIONS

    folder = Path(folder)
    if not folder.exists():
        raise FileNotFoundError(f"Input folder not found: {folder}")

    images = []
    for ext in extensions:
        images.extend(folder.glob(f"*{ext}"))
        images.extend(folder.glob(f"*{ext.upper()}"))

    return sorted(set(images))


def convert_one(
    input_path_str: str,
    output_folder_str: str,
    steps: Optional[int],
    config_values: dict
) -> Tuple[str, str, bool, str]:
    """
    Convert a single image; module-level so it pickles for worker processes.

    Returns:
        Tuple of (input_path_str, output_path_str, success, message)
    """
    input_path = Path(input_path_str)
    output_path = Path(output_folder_str) / f"{input_path.stem}.svg"

    try:
        pipeline = FlatColorPipeline(FlatvecConfig(**config_values))
        pipeline.process(input_path, output_path, steps)
        return str(input_path), str(output_path), True, f"{pipeline.plan.step_count} step(s)"
    except (VectorizationError, OSError, ValueError) as e:
        return str(input_path), str(output_path), False, f"{type(e).__name__}: {str(e)[:200]}"


def batch_convert(
    input_folder: str,
    output_folder: Optional[str] = None,
    steps: Optional[int] = None,
    config: Optional[FlatvecConfig] = None,
    max_workers: int = 4,
    extensions: Optional[Set[str]] = None
) -> dict:
    """
    Convert all images in a folder in parallel.

    Args:
        input_folder: Folder containing images
        output_folder: Folder for SVGs (default: the input folder)
        steps: Requested step count for every image (None = richest plan)
        config: Pipeline configuration shared by all images
        max_workers: Maximum parallel processes
        extensions: File extensions to process (default: .png)

    Returns:
        Dictionary with 'total', 'success', 'failed' and per-image 'results'
    """
    input_path = Path(input_folder)
    output_path = Path(output_folder) if output_folder else input_path

    images = get_image_files(input_path, extensions)
    if not images:
        raise ValueError(f"No images found in: {input_folder}")

    output_path.mkdir(parents=True, exist_ok=True)
    config_values = asdict(config or FlatvecConfig())
    actual_workers = max(1, min(len(images), max_workers))

    logger.info(f"Converting {len(images)} image(s) with {actual_workers} worker(s)")

    results = {
        'total': len(images),
        'success': 0,
        'failed': 0,
        'results': []
    }

    start_time = time.time()

    with ProcessPoolExecutor(max_workers=actual_workers) as executor:
        future_to_image = {
            executor.submit(
                convert_one,
                str(img),
                str(output_path),
                steps,
                config_values
            ): img for img in images
        }

        for i, future in enumerate(as_completed(future_to_image)):
            input_file, output_file, success, message = future.result()

            results['results'].append({
                'input': input_file,
                'output': output_file,
                'success': success,
                'message': message
            })

            if success:
                results['success'] += 1
                status = "[OK]"
            else:
                results['failed'] += 1
                status = "[FAIL]"

            logger.info(f"[{i+1}/{len(images)}] {status} {Path(input_file).name}: {message}")

    results['elapsed'] = time.time() - start_time
    results['results'].sort(key=lambda r: r['input'])
    return results
