#!/usr/bin/env python3
"""Batch recognize text in images."""

import argparse
import asyncio
import json
from pathlib import Path
from typing import List

from omni_ocr import (
    OcrEngine,
    OcrService,
    OcrSettings,
    PatternConfig,
    RecognitionOptions,
    setup_logging,
)


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Batch recognize text in images using the platform OCR engine"
    )

    parser.add_argument(
        "input_dir",
        type=Path,
        help="Input directory containing images"
    )

    parser.add_argument(
        "output_dir",
        type=Path,
        help="Output directory for recognition results"
    )

    parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)"
    )

    parser.add_argument(
        "--pattern",
        default="*.png",
        help="File pattern to match (default: *.png)"
    )

    parser.add_argument(
        "--engine",
        choices=[engine.value for engine in OcrEngine],
        default=OcrEngine.AUTO.value,
        help="OCR engine (default: auto)"
    )

    parser.add_argument(
        "--language",
        help="BCP-47 language tag to recognize"
    )

    parser.add_argument(
        "--try-hard",
        action="store_true",
        help="Use the slower, more accurate recognition profile"
    )

    parser.add_argument(
        "--extract",
        action="append",
        default=[],
        metavar="REGEX",
        help="Regex to extract from recognized text (repeatable)"
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: OMNI_OCR_LOG_LEVEL or INFO)"
    )

    parser.add_argument(
        "--recursive",
        action="store_true",
        help="Process directories recursively"
    )

    return parser.parse_args()


def find_images(input_dir: Path, pattern: str, recursive: bool) -> List[Path]:
    """Find images matching pattern."""
    if recursive:
        return sorted(input_dir.rglob(pattern))
    return sorted(input_dir.glob(pattern))


def build_options(args) -> RecognitionOptions:
    builder = (
        RecognitionOptions.builder()
        .set_language(args.language)
        .set_try_hard(args.try_hard)
    )
    for regex in args.extract:
        builder.add_pattern_config(PatternConfig(regex))
    return builder.build()


async def run(args) -> None:
    """Main recognition loop."""
    args.output_dir.mkdir(parents=True, exist_ok=True)

    images = find_images(args.input_dir, args.pattern, args.recursive)
    if not images:
        print(f"No images found matching '{args.pattern}' in {args.input_dir}")
        return

    service = OcrService.create(OcrSettings(engine=OcrEngine(args.engine)))
    await service.init_async()
    options = build_options(args)

    print(f"Found {len(images)} images to recognize")
    print(f"Engine: {service.adapter.engine.name}")
    print(f"Profile: {'accurate' if args.try_hard else 'fast'}")

    successful = 0
    failed = 0

    try:
        for image_path in images:
            try:
                print(f"\nProcessing: {image_path.name}")
                result = await service.recognize_async(image_path.read_bytes(), options)

                suffix = "json" if args.format == "json" else "txt"
                output_path = args.output_dir / f"{image_path.stem}.{suffix}"
                if args.format == "json":
                    output_path.write_text(json.dumps(result.to_dict(), indent=2))
                else:
                    output_path.write_text(result.all_text)

                print(f"  ✓ {len(result.lines)} lines, saved to: {output_path}")
                if result.matched_values:
                    print(f"  Matches: {', '.join(result.matched_values)}")
                successful += 1

            except Exception as e:
                print(f"  ✗ Error: {e}")
                failed += 1
    finally:
        service.adapter.metrics.log_summary()
        service.dispose()

    # Summary
    print("\n" + "=" * 60)
    print("Recognition Complete")
    print("=" * 60)
    print(f"Successful: {successful}")
    print(f"Failed: {failed}")
    print(f"Total: {len(images)}")


def main():
    args = parse_args()
    setup_logging(log_level=args.log_level)
    asyncio.run(run(args))


if __name__ == "__main__":
    main()
