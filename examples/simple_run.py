#!/usr/bin/env python3
"""
Simple Run Example
==================

Run the pipeline once, print progress from the state store, then retry
any scene image that failed.
"""

import asyncio
import os
from pathlib import Path

# Add project root to path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from content_studio import ContentPipeline, LengthTier, get_client


async def main():
    """Simple pipeline run example."""

    # Check for API key
    if not os.getenv("GEMINI_API_KEY"):
        print("Please set GEMINI_API_KEY environment variable")
        print("Get your key at: https://aistudio.google.com/")
        return

    pipeline = ContentPipeline(get_client("gemini"))

    # Print every stage change
    last_stage = None

    def on_change(state):
        nonlocal last_stage
        if state.current_stage != last_stage:
            last_stage = state.current_stage
            print(f"-> {state.current_stage.value}")

    unsubscribe = pipeline.store.subscribe(on_change)

    print("=== Simple Pipeline Run ===")

    try:
        await pipeline.run("Why the four-day work week is spreading", LengthTier.SHORT)

        state = pipeline.state
        if state.error_notice:
            print(f"Error: {state.error_notice}")
            return

        print(f"\nImages: {state.images_ready}/{len(state.script.scenes)}")

        # Retry scenes without an image
        for index, scene in enumerate(state.script.scenes):
            if not scene.has_image:
                outcome = await pipeline.retry_scene(index)
                status = "ok" if outcome and outcome.succeeded else "failed"
                print(f"Retry scene {index + 1}: {status}")

        print("\nHashtags:", " ".join(state.metadata.hashtags))
        for line in state.thumbnail.copy_variants_a:
            print(f"Thumbnail copy: {line}")

    finally:
        unsubscribe()
        await pipeline.close()


if __name__ == "__main__":
    asyncio.run(main())
