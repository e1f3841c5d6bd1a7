"""Command line interface for flatvec."""
import argparse
import logging
import sys
from pathlib import Path

from flatvec.batch import batch_convert, get_image_files
from flatvec.pipeline import FlatColorPipeline
from flatvec.types import FlatvecConfig, VectorizationError


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog='flatvec',
        description='Convert raster images to flat-color SVG'
    )

    parser.add_argument(
        'input',
        type=str,
        help='Input image path, or a folder of PNG images'
    )

    parser.add_argument(
        '-o', '--output',
        type=str,
        help='Output SVG path, or output folder in batch mode (default: next to input)'
    )

    parser.add_argument(
        '--steps',
        type=int,
        choices=[1, 2, 3, 4],
        default=None,
        help='Posterization steps (default: richest plan the image supports)'
    )

    parser.add_argument(
        '--inspect',
        action='store_true',
        help='Print candidate plans instead of converting (per image for a folder)'
    )

    parser.add_argument(
        '--stroke',
        dest='stroke',
        action='store_true',
        default=None,
        help='Always outline shapes in their fill color'
    )

    parser.add_argument(
        '--no-stroke',
        dest='stroke',
        action='store_false',
        help='Never outline shapes (default: outline when steps > 1)'
    )

    parser.add_argument(
        '--no-optimize',
        action='store_true',
        help='Skip SVG minification'
    )

    parser.add_argument(
        '--workers',
        type=int,
        default=4,
        help='Parallel processes in batch mode (default: 4)'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Debug logging'
    )

    return parser


def _inspect_folder(folder: Path, config: FlatvecConfig) -> int:
    """Print the candidate plans of every image in a folder."""
    images = get_image_files(folder)
    if not images:
        print(f"Error: No images found in: {folder}", file=sys.stderr)
        return 1

    failed = 0
    for image in images:
        try:
            plans = FlatColorPipeline(config).inspect(image)
        except (VectorizationError, OSError) as e:
            print(f"[FAIL] {image.name}: {e}", file=sys.stderr)
            failed += 1
            continue
        print(f"{image.name}:")
        for plan in plans:
            print(f"  {plan.step_count}: {' '.join(plan.hexes)}")
    return 0 if failed == 0 else 1


def main(args=None):
    """Main entry point."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    logging.basicConfig(
        level=logging.DEBUG if parsed_args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s'
    )

    input_path = Path(parsed_args.input)
    if not input_path.exists():
        print(f"Error: Input not found: {input_path}", file=sys.stderr)
        return 1

    config = FlatvecConfig(
        stroke=parsed_args.stroke,
        optimize=not parsed_args.no_optimize
    )

    if input_path.is_dir() and parsed_args.inspect:
        return _inspect_folder(input_path, config)

    if input_path.is_dir():
        try:
            results = batch_convert(
                str(input_path),
                parsed_args.output,
                steps=parsed_args.steps,
                config=config,
                max_workers=parsed_args.workers
            )
        except (OSError, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

        for result in results['results']:
            status = "[OK]" if result['success'] else "[FAIL]"
            print(f"{status} {Path(result['input']).name}: {result['message']}")
        print(f"Converted {results['success']}/{results['total']} in {results['elapsed']:.2f}s")
        return 0 if results['failed'] == 0 else 1

    pipeline = FlatColorPipeline(config)

    try:
        if parsed_args.inspect:
            for plan in pipeline.inspect(input_path):
                print(f"{plan.step_count}: {' '.join(plan.hexes)}")
            return 0

        output_path = Path(parsed_args.output) if parsed_args.output else input_path.with_suffix('.svg')
        pipeline.process(input_path, output_path, steps=parsed_args.steps)
        print(f"Wrote {output_path} ({pipeline.plan.step_count} step(s))")
        return 0

    except (VectorizationError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
