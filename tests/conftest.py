"""Shared fixtures: a fake generation client and sample script builders."""

import asyncio
from typing import Optional

import pytest

from content_studio.api.base import BaseGenerationClient
from content_studio.core.config import Config, set_config, reset_config
from content_studio.core.exceptions import GenerationError
from content_studio.models import (
    GroundingSource,
    LengthTier,
    MetadataResult,
    ResearchResult,
    Scene,
    ScriptResult,
    ThumbnailResult,
)


def make_script(scene_count: int = 12) -> ScriptResult:
    """A script whose scene i has image prompt 'prompt-i'."""
    return ScriptResult(
        raw_script="## Opening\nFull narration text.",
        tts_script="Full narration text.",
        scenes=[
            Scene(id=i + 1, content=f"Scene {i + 1} narration", image_prompt=f"prompt-{i}")
            for i in range(scene_count)
        ],
    )


def image_url_for(prompt: str) -> str:
    return f"data:image/png;base64,{prompt}"


class FakeGenerationClient(BaseGenerationClient):
    """
    In-memory client that records every call.

    Args:
        fail_ops: Operation names that raise GenerationError
        failing_scenes: Scene indices whose image call raises
        empty_scenes: Scene indices whose image call returns ""
        empty_research: Return a research result with no report
        scene_count: Number of scenes in the returned script
    """

    def __init__(
        self,
        fail_ops=(),
        failing_scenes=(),
        empty_scenes=(),
        empty_research: bool = False,
        scene_count: int = 12,
    ):
        self.fail_ops = set(fail_ops)
        self.failing_scenes = set(failing_scenes)
        self.empty_scenes = set(empty_scenes)
        self.empty_research = empty_research
        self.scene_count = scene_count
        self.calls = []
        self.image_counter = 0
        self.image_gate: Optional[asyncio.Event] = None
        self.in_flight = set()
        self.overlapping = []
        self.closed = False

    @property
    def provider_name(self) -> str:
        return "Fake"

    def _record(self, op: str, arg) -> None:
        self.calls.append((op, arg))
        if op in self.fail_ops:
            raise GenerationError(f"{op} failed", stage=op)

    def ops(self):
        return [op for op, _ in self.calls]

    async def research(self, topic: str) -> ResearchResult:
        self._record("research", topic)
        if self.empty_research:
            return ResearchResult(report="")
        return ResearchResult(
            report=f"Report about {topic}",
            sources=[GroundingSource(title="Example", uri="https://example.com")],
        )

    async def script(self, research_report: str, length_tier: LengthTier) -> ScriptResult:
        self._record("script", (research_report, length_tier))
        return make_script(self.scene_count)

    async def image(self, prompt: str) -> str:
        self._record("image", prompt)
        self.image_counter += 1
        if prompt in self.in_flight:
            self.overlapping.append(prompt)
        self.in_flight.add(prompt)
        try:
            if self.image_gate is not None:
                await self.image_gate.wait()
        finally:
            self.in_flight.discard(prompt)

        index = int(prompt.rsplit("-", 1)[1]) if prompt.startswith("prompt-") else None
        if index in self.failing_scenes:
            raise GenerationError(f"image failed for scene {index}", stage="images")
        if index in self.empty_scenes:
            return ""
        return f"{image_url_for(prompt)}#{self.image_counter}"

    async def metadata(self, script_text: str) -> MetadataResult:
        self._record("metadata", script_text)
        return MetadataResult(
            description="Description",
            summary="1\n2\n3\n4",
            hashtags=["#a", "#b"],
            seo_keywords=["k1", "k2"],
            pinned_comment="Hello",
        )

    async def thumbnail(self, script_text: str) -> ThumbnailResult:
        self._record("thumbnail", script_text)
        return ThumbnailResult(
            background_image_url="data:image/png;base64,thumb",
            copy_variants_a=["A1", "A2", "A3"],
            copy_variants_b=["B1", "B2", "B3"],
        )

    async def close(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def default_config():
    """Use built-in defaults instead of any config file on disk."""
    config = Config()
    set_config(config)
    yield config
    reset_config()


@pytest.fixture
def fake_client():
    return FakeGenerationClient()
