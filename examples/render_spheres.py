#!/usr/bin/env python3
"""Render the four-sphere demo scene.

This script demonstrates end-to-end rendering with the Whitted ray tracer.
It builds the demo scene (ivory, glass, red rubber and mirror spheres lit by
three point lights), renders it band by band with a progress readout, and
saves a PNG. Pressing Ctrl+C cancels the render between bands.

Usage:
    python -m examples.render_spheres [options]

Options:
    --width WIDTH       Image width in pixels (default: 1024)
    --height HEIGHT     Image height in pixels (default: 768)
    --fov DEGREES       Horizontal field of view (default: 72)
    --depth DEPTH       Reflection/refraction depth (default: 4)
    --output OUTPUT     Output file path (default: spheres.png)
    --verbose           Show renderer debug logging
    --quiet             Suppress progress output

Example:
    python -m examples.render_spheres --width 640 --height 480 --depth 3
"""

from __future__ import annotations

import argparse
import logging
import signal
import sys
import threading
import time
from pathlib import Path

import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the four-sphere demo scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=1024,
        help="Image width in pixels (default: 1024)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=768,
        help="Image height in pixels (default: 768)",
    )
    parser.add_argument(
        "--fov",
        type=float,
        default=72.0,
        help="Horizontal field of view in degrees (default: 72)",
    )
    parser.add_argument(
        "--depth",
        type=int,
        default=4,
        help="Reflection/refraction depth (default: 4)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="spheres.png",
        help="Output file path (default: spheres.png)",
    )
    parser.add_argument("--verbose", action="store_true", help="Show renderer debug logging")
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    return parser.parse_args()


def render_spheres(
    width: int = 1024,
    height: int = 768,
    fov: float = 72.0,
    depth: int = 4,
    output_path: str = "spheres.png",
    quiet: bool = False,
) -> Path:
    """Render the demo scene and save to file.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        fov: Horizontal field of view in degrees.
        depth: Recursion bound for secondary rays.
        output_path: Output file path (PNG).
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.

    Raises:
        RenderCancelled: If the render was interrupted.
    """
    # Lazy imports to allow Taichi initialization first
    from whitted.config import RenderConfig
    from whitted.core.frame import render_scene
    from whitted.preview.export import save_png
    from whitted.scene.demo import create_demo_scene

    config = RenderConfig(width=width, height=height, fov=fov, max_depth=depth)
    scene = create_demo_scene()

    if not quiet:
        print(f"Rendering demo scene ({width}x{height}, depth {depth})...")

    start_time = time.time()

    def progress_callback(rows_done: int, total_rows: int) -> None:
        if not quiet:
            progress_pct = (rows_done / total_rows) * 100 if total_rows > 0 else 0
            print(
                f"\r  Progress: {rows_done}/{total_rows} rows ({progress_pct:.1f}%)",
                end="",
                flush=True,
            )

    # Ctrl+C sets the cancel event; the render stops before the next band
    cancel = threading.Event()
    previous_handler = signal.signal(signal.SIGINT, lambda signum, frame: cancel.set())
    try:
        image = render_scene(scene, config, cancel=cancel, callback=progress_callback)
    finally:
        signal.signal(signal.SIGINT, previous_handler)
        if not quiet:
            print()  # Newline after progress

    output_file = Path(output_path)
    save_png(image, output_file)

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    # Initialize Taichi
    # Use GPU if available, fall back to CPU
    try:
        ti.init(arch=ti.gpu)
        if not args.quiet:
            print("Using GPU backend")
    except Exception:
        ti.init(arch=ti.cpu)
        if not args.quiet:
            print("Using CPU backend")

    try:
        render_spheres(
            width=args.width,
            height=args.height,
            fov=args.fov,
            depth=args.depth,
            output_path=args.output,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
