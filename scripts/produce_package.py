#!/usr/bin/env python3
"""
CLI Script: Produce Package
===========================

Command-line tool that runs the full pipeline for one topic and saves the
resulting content package.

Usage:
    python scripts/produce_package.py --topic "Recent trends in the Korean economy"
    python scripts/produce_package.py -t "AI in education" -l long -o output/package.yaml
"""

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from content_studio import Config, ContentPipeline, LengthTier, get_client, save_package


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Produce a YouTube content package with AI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s -t "Recent trends in the Korean economy"
  %(prog)s -t "AI in education" -l short -o output/package.json
  %(prog)s -t "Space tourism" --config config/defaults.yaml -v
        """,
    )

    parser.add_argument(
        "-t", "--topic",
        required=True,
        help="Topic text (free text, links or notes)",
    )
    parser.add_argument(
        "-l", "--length",
        default=None,
        type=str.upper,
        choices=[tier.value for tier in LengthTier],
        help="Script length tier (default: from config)",
    )

    # Output
    parser.add_argument(
        "-o", "--output",
        help="Output file path, .json or .yaml (default: output/package.json)",
    )

    # Config
    parser.add_argument(
        "--config",
        help="Path to config file",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    return parser.parse_args()


async def main():
    """Main CLI entry point."""
    args = parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not args.topic.strip():
        print("Error: --topic must not be empty")
        sys.exit(1)

    config = Config.load(args.config)

    # Check API key
    if not config.service.api_key and not os.getenv("GEMINI_API_KEY"):
        print("Error: GEMINI_API_KEY environment variable not set")
        print("Get your key at: https://aistudio.google.com/")
        sys.exit(1)

    project_root = Path(__file__).parent.parent
    output_path = Path(args.output) if args.output else project_root / "output" / "package.json"
    length_tier = LengthTier.parse(args.length or config.generation.default_length)

    print("=" * 50)
    print("Content Studio")
    print("=" * 50)
    print(f"\nTopic: {args.topic}")
    print(f"Length: {length_tier.value} (~{length_tier.target_chars} chars)")

    try:
        client = get_client(config.service.provider, config=config)
        async with ContentPipeline(client, config=config) as pipeline:
            completed = await pipeline.run(args.topic, length_tier)
            state = pipeline.state

            print("\n" + "-" * 50)
            print(f"Stage: {state.current_stage.value}")
            if state.research:
                print(f"Sources: {len(state.research.sources)}")
            if state.script:
                print(f"Scene images: {state.images_ready}/{len(state.script.scenes)}")
            if state.thumbnail:
                has_background = "yes" if state.thumbnail.background_image_url else "no"
                print(f"Thumbnail background: {has_background}")
            if state.error_notice:
                print(f"Error: {state.error_notice}")

            saved = save_package(state, output_path)
            print(f"Package saved: {saved}")
            print("=" * 50)

            # Exit code based on status
            sys.exit(0 if completed else 1)

    except KeyboardInterrupt:
        print("\nCancelled")
        sys.exit(130)
    except Exception as e:
        print(f"\nError: {e}")
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
