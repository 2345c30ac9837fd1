"""
Content Pipeline
================

Main orchestration class: turns one topic into a content package by
running research, script, metadata, thumbnail and scene-image generation
in a fixed order against an injected generation client.
"""

import asyncio
import logging
from typing import Optional, List, Dict, Union

from ..api.base import BaseGenerationClient
from ..core.config import Config, get_config
from ..core.exceptions import ContentStudioError, ValidationError
from ..core.security import sanitize_text
from ..models import (
    LengthTier,
    RUN_ORDER,
    ScriptResult,
    SceneImageOutcome,
    Stage,
    WorkflowState,
)
from .state import WorkflowStateStore

logger = logging.getLogger(__name__)


class ContentPipeline:
    """
    Drives one run at a time and owns the workflow state.

    Handles:
    - Top-level stages as single awaited calls, aborting the run on error
    - A sequential image loop where each scene fails independently
    - User-triggered single-scene retries, serialized per scene index
    - Stage navigation rules while a run is in progress

    Usage:
        async with ContentPipeline(get_client("gemini")) as pipeline:
            await pipeline.run("Recent trends in the Korean economy", LengthTier.MEDIUM)
            print(pipeline.state.to_dict())
    """

    def __init__(
        self,
        client: BaseGenerationClient,
        store: Optional[WorkflowStateStore] = None,
        config: Optional[Config] = None,
    ):
        """
        Initialize the pipeline.

        Args:
            client: Generation client used for every external call
            store: State store (a fresh one is created if omitted)
            config: Configuration (defaults to the global config)
        """
        self.client = client
        self.store = store or WorkflowStateStore()
        self.config = config or get_config()

        # One lock per scene index; never two generations on the same scene
        self._scene_locks: Dict[int, asyncio.Lock] = {}

    @property
    def state(self) -> WorkflowState:
        return self.store.state

    # -------------------------------------------------------------------------
    # Run
    # -------------------------------------------------------------------------

    async def run(
        self,
        topic: str,
        length_tier: Union[LengthTier, str] = LengthTier.MEDIUM,
    ) -> bool:
        """
        Run the full pipeline for a topic.

        Args:
            topic: Free-text topic (text, links, notes)
            length_tier: Script length selector

        Returns:
            True when the run reached the end of the image loop, False when
            it did not start or was aborted
        """
        if not self.begin(topic, length_tier):
            return False
        return await self.execute()

    def begin(
        self,
        topic: str,
        length_tier: Union[LengthTier, str] = LengthTier.MEDIUM,
    ) -> bool:
        """
        Claim the pipeline for a new run without awaiting anything.

        Clears previous results and marks the state as processing, so a
        second request is rejected before ``execute`` is scheduled.

        Returns:
            True when the run was claimed
        """
        try:
            topic = self._validate_topic(topic)
            length_tier = LengthTier.parse(length_tier)
        except ValidationError as e:
            logger.warning(f"Run not started: {e.message}")
            return False

        if self.state.is_processing:
            logger.warning("Run not started: another run is in progress")
            return False

        self._scene_locks = {}
        self.store.update(
            topic=topic,
            length_tier=length_tier,
            research=None,
            script=None,
            metadata=None,
            thumbnail=None,
            error_notice=None,
            is_processing=True,
            current_stage=RUN_ORDER[0],
        )
        logger.info(f"Starting run ({length_tier.value}, {length_tier.target_chars} chars): {topic[:60]}")
        return True

    async def execute(self) -> bool:
        """Run the stages of a claimed run in ``RUN_ORDER``."""
        if not self.state.is_processing:
            logger.warning("Nothing to execute: no run has been started")
            return False

        steps = {
            Stage.RESEARCH: self._research_step,
            Stage.SCRIPT: self._script_step,
            Stage.METADATA: self._metadata_step,
            Stage.THUMBNAIL: self._thumbnail_step,
            Stage.IMAGES: self._images_step,
        }

        try:
            for stage in RUN_ORDER:
                self._enter(stage)
                await steps[stage]()

        except Exception as e:
            logger.error(
                f"Workflow failed during {self.state.current_stage.value}: {e}",
                exc_info=not isinstance(e, ContentStudioError),
            )
            self.store.update(error_notice=self.config.workflow.failure_notice)
            return False

        else:
            return True

        finally:
            self.store.update(is_processing=False)

    def _enter(self, stage: Stage) -> None:
        # Stages only move forward within a run
        current = self.state.current_stage
        if current in RUN_ORDER and RUN_ORDER.index(stage) < RUN_ORDER.index(current):
            raise RuntimeError(f"Stage cannot move back from {current.value} to {stage.value}")
        logger.info(f"Stage: {stage.value}")
        self.store.update(current_stage=stage)

    # -------------------------------------------------------------------------
    # Stages
    # -------------------------------------------------------------------------

    async def _research_step(self) -> None:
        research = await self.client.research(self.state.topic)
        if research.is_empty:
            logger.warning("Research returned an empty report, continuing")
        self.store.update(research=research)

    async def _script_step(self) -> None:
        script = await self.client.script(self.state.research.report, self.state.length_tier)
        self.store.update(script=script)

    async def _metadata_step(self) -> None:
        metadata = await self.client.metadata(self.state.script.tts_script)
        self.store.update(metadata=metadata)

    async def _thumbnail_step(self) -> None:
        thumbnail = await self.client.thumbnail(self.state.script.tts_script)
        self.store.update(thumbnail=thumbnail)

    async def _images_step(self) -> None:
        outcomes = await self._generate_scene_images(self.state.script)
        succeeded = sum(1 for o in outcomes if o.succeeded)
        logger.info(f"Run finished: {succeeded}/{len(outcomes)} scene images generated")

    @staticmethod
    def _validate_topic(topic: Optional[str]) -> str:
        cleaned = sanitize_text(topic or "")
        if not cleaned:
            raise ValidationError(
                "Topic is required",
                field="topic",
                constraint="non-empty",
            )
        return cleaned

    # -------------------------------------------------------------------------
    # Scene Images
    # -------------------------------------------------------------------------

    async def _generate_scene_images(self, script: ScriptResult) -> List[SceneImageOutcome]:
        """Generate every scene image in order; failures never stop the loop."""
        outcomes = []
        total = len(script.scenes)

        for index in range(total):
            logger.info(f"Generating scene image {index + 1}/{total}")
            async with self._scene_lock(index):
                outcomes.append(await self._generate_scene_image(script, index))

        return outcomes

    async def retry_scene(self, index: int) -> Optional[SceneImageOutcome]:
        """
        Regenerate the image for one scene.

        The previous image is kept when the new attempt fails.

        Returns:
            The outcome, or None when nothing was attempted (no script,
            index out of range, or the scene is already generating)
        """
        script = self.state.script
        if script is None:
            logger.warning("Retry ignored: no script yet")
            return None

        if not 0 <= index < len(script.scenes):
            logger.warning(f"Retry ignored: scene index {index} out of range")
            return None

        lock = self._scene_lock(index)
        if lock.locked():
            logger.warning(f"Retry ignored: scene {index} is already generating")
            return None

        async with lock:
            return await self._generate_scene_image(script, index)

    async def _generate_scene_image(self, script: ScriptResult, index: int) -> SceneImageOutcome:
        """One attempt for one scene. Caller holds the scene lock."""
        scene = script.scenes[index]
        scene.is_generating = True
        self.store.publish()

        try:
            image_url = await self.client.image(scene.image_prompt)
        except Exception as e:
            logger.error(f"Failed to generate image for scene {index}: {e}")
            outcome = SceneImageOutcome(index=index, error=str(e))
        else:
            if image_url:
                scene.image_url = image_url
                outcome = SceneImageOutcome(index=index, image_url=image_url)
            else:
                logger.error(f"Failed to generate image for scene {index}: no image returned")
                outcome = SceneImageOutcome(index=index, error="No image returned")
        finally:
            scene.is_generating = False
            self.store.publish()

        return outcome

    def _scene_lock(self, index: int) -> asyncio.Lock:
        if index not in self._scene_locks:
            self._scene_locks[index] = asyncio.Lock()
        return self._scene_locks[index]

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    def navigate(self, stage: Union[Stage, str]) -> bool:
        """
        Select the stage shown to the user.

        While a run is in progress only the active stage can be selected.
        """
        try:
            stage = Stage(stage)
        except ValueError:
            raise ValidationError(f"Unknown stage: {stage}", field="stage", value=stage)

        if self.state.is_processing and stage != self.state.current_stage:
            logger.debug(f"Navigation to {stage.value} blocked while processing")
            return False

        self.store.update(current_stage=stage)
        return True

    def reset(self) -> bool:
        """Start over from an empty INPUT state. Not allowed during a run."""
        if self.state.is_processing:
            logger.warning("Reset ignored: a run is in progress")
            return False

        self._scene_locks = {}
        self.store.reset()
        return True

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def close(self) -> None:
        """Close the generation client."""
        await self.client.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
