#!/usr/bin/env python3
"""
LensTrace - A Python Monte Carlo Path Tracer

Main entry point: renders the random spheres showcase to a PNG.
"""

import argparse
import logging
import sys
import time

import numpy as np

from lenstrace.renderer import Renderer, RenderSettings
from lenstrace.scenes import random_spheres_scene, showcase_camera


def non_negative_int(value: str) -> int:
    """argparse type for seeds and counts that must be >= 0."""
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be a non-negative integer, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    """Command line options, defaulting to RenderSettings values."""
    defaults = RenderSettings(num_workers=1)

    parser = argparse.ArgumentParser(
        description='LensTrace - A Python Monte Carlo Path Tracer',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  python main.py --output image.png
  python main.py --width 400 --samples 20 --workers 8 --executor process
  python main.py --seed 7 --log-level DEBUG
        '''
    )

    parser.add_argument('--width', type=int, default=defaults.width,
                        help=f'Image width (default: {defaults.width})')
    parser.add_argument('--samples', type=int, default=defaults.samples_per_pixel,
                        help=f'Samples per pixel (default: {defaults.samples_per_pixel})')
    parser.add_argument('--depth', type=int, default=defaults.max_depth,
                        help=f'Max ray depth (default: {defaults.max_depth})')
    parser.add_argument('--workers', type=non_negative_int, default=0, help='Number of workers (0=auto)')
    parser.add_argument('--executor', choices=['thread', 'process'], default='process',
                        help='Worker pool type (default: process)')
    parser.add_argument('--seed', type=non_negative_int, default=None, help='Seed for a reproducible render')
    parser.add_argument('--output', type=str, default=defaults.output_path,
                        help=f'Output filename (default: {defaults.output_path})')
    parser.add_argument('--log-level', default='WARNING',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging verbosity (default: WARNING)')
    return parser


def main(argv=None):
    """Main entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s %(name)s %(levelname)s: %(message)s',
    )

    settings = RenderSettings(
        width=args.width,
        samples_per_pixel=args.samples,
        max_depth=args.depth,
        num_workers=args.workers,
        executor=args.executor,
        seed=args.seed,
        output_path=args.output,
    )

    # Print header
    print("=" * 60)
    print("LensTrace Path Tracer")
    print("=" * 60)

    print(f"\nRender Settings:")
    print(f"  Resolution: {settings.width}x{settings.height}")
    print(f"  Samples: {settings.samples_per_pixel}")
    print(f"  Max Depth: {settings.max_depth}")
    print(f"  Workers: {settings.num_workers} ({settings.executor})")

    world = random_spheres_scene(np.random.default_rng(args.seed))
    camera = showcase_camera(settings.aspect_ratio)
    print(f"  Objects in scene: {len(world)}")

    renderer = Renderer(settings)

    last_progress = [0]

    def progress_callback(progress: float):
        pct = int(progress * 100)
        if pct > last_progress[0]:
            last_progress[0] = pct
            bar_len = 40
            filled = int(bar_len * progress)
            bar = '█' * filled + '░' * (bar_len - filled)
            print(f'\rRendering: [{bar}] {pct}%', end='', flush=True)

    renderer.set_progress_callback(progress_callback)

    print("\nStarting raytracing...")
    start_time = time.time()

    image = renderer.render_image(world, camera)

    elapsed = time.time() - start_time
    print(f"\nRaytracing completed in {elapsed:.2f} seconds")

    path = renderer.save_image(image)
    print(f"Saved to: {path}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
