#!/usr/bin/env python3
"""Render the demo sphere scene.

This script renders the demo scene (three colored spheres on a large floor
sphere) for a number of frames and saves the last one as a PNG.

Usage:
    python -m examples.render_spheres [options]

Options:
    --width WIDTH           Image width in pixels (default: 640)
    --height HEIGHT         Image height in pixels (default: 480)
    --samples SAMPLES       Jittered sub-samples per pixel (default: 8)
    --bounces BOUNCES       Mirror bounces after the first hit (default: 4)
    --frames FRAMES         Number of frames to render (default: 1)
    --elapsed-ms MS         Timestamp of the first frame (default: 0)
    --output OUTPUT         Output file path (default: spheres.png)
    --verbose               Log per-frame timings
    --quiet                 Only log errors

Example:
    python -m examples.render_spheres --width 320 --height 240 --frames 10
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import taichi as ti

logger = logging.getLogger("render_spheres")


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the demo sphere scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--width", type=int, default=640, help="Image width in pixels (default: 640)")
    parser.add_argument(
        "--height", type=int, default=480, help="Image height in pixels (default: 480)"
    )
    parser.add_argument(
        "--samples", type=int, default=8, help="Jittered sub-samples per pixel (default: 8)"
    )
    parser.add_argument(
        "--bounces", type=int, default=4, help="Mirror bounces after the first hit (default: 4)"
    )
    parser.add_argument("--frames", type=int, default=1, help="Number of frames (default: 1)")
    parser.add_argument(
        "--elapsed-ms",
        type=float,
        default=0.0,
        help="Timestamp of the first frame in milliseconds (default: 0)",
    )
    parser.add_argument(
        "--output", type=str, default="spheres.png", help="Output file path (default: spheres.png)"
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("--verbose", action="store_true", help="Log per-frame timings")
    verbosity.add_argument("--quiet", action="store_true", help="Only log errors")
    return parser.parse_args()


def configure_logging(verbose: bool, quiet: bool) -> None:
    """Set up root logging for the script."""
    level = logging.INFO
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def render_spheres(
    width: int = 640,
    height: int = 480,
    samples: int = 8,
    bounces: int = 4,
    num_frames: int = 1,
    start_ms: float = 0.0,
    output_path: str = "spheres.png",
) -> Path:
    """Render the demo scene and save the last frame.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from sphere_tracer.core.frame import FrameRenderer
    from sphere_tracer.core.settings import RenderSettings
    from sphere_tracer.preview.export import save_png
    from sphere_tracer.scene.demo import create_demo_scene

    scene = create_demo_scene()
    logger.info("Created demo scene with %d spheres (%dx%d)", len(scene), width, height)

    renderer = FrameRenderer(
        width, height, settings=RenderSettings(samples=samples, max_bounces=bounces)
    )

    start_time = time.time()

    def progress_callback(current: int, target: int) -> None:
        elapsed = time.time() - start_time
        fps = current / elapsed if elapsed > 0 else 0.0
        logger.info("Frame %d/%d (%.1f fps)", current, target, fps)

    renderer.render_frames(num_frames, start_ms=start_ms, callback=progress_callback)

    output_file = Path(output_path)
    save_png(renderer, str(output_file), tone_map="reinhard", gamma=2.2)

    logger.info("Saved to: %s", output_file.absolute())
    logger.info("Total time: %.2fs", time.time() - start_time)
    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()
    configure_logging(args.verbose, args.quiet)

    # Use GPU if available, fall back to CPU
    try:
        ti.init(arch=ti.gpu)
    except Exception:
        logger.warning("GPU backend unavailable, using CPU")
        ti.init(arch=ti.cpu)

    try:
        render_spheres(
            width=args.width,
            height=args.height,
            samples=args.samples,
            bounces=args.bounces,
            num_frames=max(args.frames, 1),
            start_ms=args.elapsed_ms,
            output_path=args.output,
        )
        return 0
    except (ValueError, RuntimeError) as e:
        logger.error("Error: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
