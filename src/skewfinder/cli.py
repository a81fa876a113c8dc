#!/usr/bin/env python
"""
Command-line interface for skewfinder.

Usage:
    skewfinder --input <image_pdf_or_folder> [--output <output_dir>] [options]

Examples:
    # Deskew a scanned page
    skewfinder --input page.png --output ./deskewed

    # Only measure the skew of every page of a PDF, with a JSON report
    skewfinder --input scan.pdf --output ./report --measure-only --report

    # Full-resolution search with the per-angle score trace in the report
    skewfinder --input ./pages --output ./out --search-reduction 1 --report --debug
"""

import sys
import argparse
import logging
import time
from pathlib import Path
from typing import List, Optional

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("skewfinder")


def setup_argparser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        description="skewfinder - Measure and correct the skew of scanned document pages",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Deskew a scanned page:
    skewfinder --input page.png --output ./deskewed

  Measure only, and write a JSON report:
    skewfinder --input scan.pdf --output ./report --measure-only --report

  Include every scored angle in the report:
    skewfinder --input page.png --output ./out --report --debug
        """
    )

    # Required arguments
    parser.add_argument(
        "--input", "-i",
        required=True,
        help="Input image, folder of images, or PDF"
    )

    # Optional arguments
    parser.add_argument(
        "--output", "-o",
        default="./deskewed",
        help="Output directory for deskewed pages and reports (default: ./deskewed)"
    )

    parser.add_argument(
        "--measure-only",
        action="store_true",
        help="Only measure the skew; do not write deskewed pages"
    )

    parser.add_argument(
        "--search-reduction",
        type=int,
        choices=[1, 2, 4],
        default=2,
        help="Reduction factor for the binary search (default: 2)"
    )

    parser.add_argument(
        "--dpi",
        type=int,
        default=300,
        help="DPI for PDF to image conversion (default: 300)"
    )

    parser.add_argument(
        "--threshold",
        type=int,
        default=0,
        help="Binarization threshold, 0 for Otsu (default: 0)"
    )

    parser.add_argument(
        "--report",
        action="store_true",
        help="Write skew_report.json to the output directory"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Include every sweep and search sample in the report"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output"
    )

    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress non-error output"
    )

    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s 1.0.0"
    )

    return parser


def check_dependencies() -> bool:
    """Check if required dependencies are available."""
    missing = []
    optional_missing = []

    try:
        import cv2  # noqa: F401
    except ImportError:
        missing.append("opencv-python")

    try:
        import numpy  # noqa: F401
    except ImportError:
        missing.append("numpy")

    try:
        import pdf2image  # noqa: F401
    except ImportError:
        optional_missing.append("pdf2image (for PDF support)")

    if missing:
        logger.error("Missing required dependencies:")
        for dep in missing:
            logger.error(f"  - {dep}")
        return False

    if optional_missing:
        logger.warning("Missing optional dependencies (some features may be limited):")
        for dep in optional_missing:
            logger.warning(f"  - {dep}")

    return True


def run_pipeline(args) -> int:
    """Measure and deskew every input page."""
    from .config import get_config
    from .skew import find_skew_and_deskew, find_skew_sweep_and_search
    from .utils.images import to_binary, from_binary
    from .utils.io import load_pages, save_image, save_json, ensure_dir

    start_time = time.time()
    config = get_config()

    output_dir = Path(args.output)
    ensure_dir(output_dir)

    input_path = Path(args.input)
    try:
        pages = load_pages(input_path, dpi=args.dpi)
    except (FileNotFoundError, ValueError, RuntimeError) as e:
        logger.error(f"Could not load input: {e}")
        return 1

    if not pages:
        logger.error("No images to process")
        return 1

    logger.info(f"Loaded {len(pages)} page(s)")

    entries = []
    rotated_count = 0
    for name, page in pages:
        binary = to_binary(page, threshold=args.threshold)

        if args.measure_only:
            result = find_skew_sweep_and_search(
                binary,
                sweep_reduction=config.sweep_reduction,
                search_reduction=args.search_reduction,
                sweep_range=config.sweep_range,
                sweep_delta=config.sweep_delta,
                min_search_delta=config.min_search_delta,
                config=config,
            )
            output_path = None
        else:
            deskewed, result = find_skew_and_deskew(binary, args.search_reduction, config)
            output_path = save_image(from_binary(deskewed), output_dir / f"{name}.png")
            if result.should_deskew(config):
                rotated_count += 1

        logger.info(
            f"{name}: angle = {result.angle:.3f} deg, confidence = {result.confidence:.2f} "
            f"({result.status.value})"
        )

        entry = {"page": name, "output": output_path}
        entry.update(result.to_dict(include_samples=args.debug))
        entries.append(entry)

    if args.report:
        report_path = save_json({"pages": entries}, output_dir / "skew_report.json")
        logger.info(f"Saved report: {report_path}")

    elapsed = time.time() - start_time

    if not args.quiet:
        print("\n" + "=" * 60)
        print("SKEW DETECTION COMPLETE")
        print("=" * 60)
        print(f"Source: {input_path}")
        print(f"Output: {output_dir}")
        print(f"Pages processed: {len(entries)}")
        if not args.measure_only:
            print(f"Pages deskewed: {rotated_count}")
        print(f"Processing time: {elapsed:.2f}s")
        print()
        for entry in entries:
            print(f"  {entry['page']}: {entry['angle']:+.3f} deg "
                  f"(confidence {entry['confidence']:.2f}, {entry['status']})")
        print("=" * 60)

    return 0


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    parser = setup_argparser()
    args = parser.parse_args(argv)

    # Configure logging level
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    elif args.quiet:
        logging.getLogger().setLevel(logging.ERROR)

    if not check_dependencies():
        sys.exit(1)

    try:
        exit_code = run_pipeline(args)
        sys.exit(exit_code)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(130)
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        if args.debug:
            raise
        sys.exit(1)


if __name__ == "__main__":
    main()
