"""Tests for the pipeline orchestrator, driven by the fake client."""

import asyncio

import pytest

from content_studio.core.exceptions import ValidationError
from content_studio.models import LengthTier, RUN_ORDER, Stage, WorkflowState
from content_studio.workflow import ContentPipeline

from conftest import FakeGenerationClient, image_url_for


def run(coro):
    return asyncio.run(coro)


class TestRun:
    def test_empty_topic_does_nothing(self, fake_client):
        pipeline = ContentPipeline(fake_client)

        assert run(pipeline.run("")) is False
        assert run(pipeline.run("   \n\t")) is False

        assert pipeline.state == WorkflowState()
        assert fake_client.calls == []

    def test_unknown_length_tier_does_nothing(self, fake_client):
        pipeline = ContentPipeline(fake_client)

        assert run(pipeline.run("topic", "EPIC")) is False
        assert pipeline.state == WorkflowState()

    def test_successful_medium_run(self, fake_client):
        pipeline = ContentPipeline(fake_client)

        assert run(pipeline.run("Korean economy", LengthTier.MEDIUM)) is True

        state = pipeline.state
        assert state.topic == "Korean economy"
        assert state.research.report == "Report about Korean economy"
        assert state.metadata is not None
        assert state.thumbnail.copy_variants_a == ["A1", "A2", "A3"]
        assert state.is_processing is False
        assert state.error_notice is None
        assert state.current_stage is Stage.IMAGES

        scenes = state.script.scenes
        assert len(scenes) == 12
        assert all(not s.is_generating for s in scenes)
        assert all(s.has_image for s in scenes)
        assert state.images_ready == 12

    def test_stage_order_and_inputs(self, fake_client):
        pipeline = ContentPipeline(fake_client)
        stages = []
        pipeline.store.subscribe(
            lambda state: stages.append(state.current_stage)
            if not stages or stages[-1] != state.current_stage else None
        )

        run(pipeline.run("topic", "long"))

        assert stages == list(RUN_ORDER)
        assert stages == [
            Stage.RESEARCH,
            Stage.SCRIPT,
            Stage.METADATA,
            Stage.THUMBNAIL,
            Stage.IMAGES,
        ]
        ops = fake_client.ops()
        assert ops[:4] == ["research", "script", "metadata", "thumbnail"]
        assert ops[4:] == ["image"] * 12
        # Metadata and thumbnail are derived from the TTS script
        assert fake_client.calls[2][1] == "Full narration text."
        assert fake_client.calls[3][1] == "Full narration text."
        assert fake_client.calls[1][1] == ("Report about topic", LengthTier.LONG)

    def test_images_generated_in_order(self, fake_client):
        pipeline = ContentPipeline(fake_client)
        run(pipeline.run("topic"))

        prompts = [arg for op, arg in fake_client.calls if op == "image"]
        assert prompts == [f"prompt-{i}" for i in range(12)]

    def test_is_generating_published_around_each_call(self, fake_client):
        pipeline = ContentPipeline(fake_client)
        flags = []

        def watch(state):
            if state.script and state.current_stage is Stage.IMAGES:
                flags.append(tuple(s.is_generating for s in state.script.scenes))

        pipeline.store.subscribe(watch)
        run(pipeline.run("topic"))

        assert any(f[0] for f in flags)
        assert all(sum(f) <= 1 for f in flags)
        assert not any(flags[-1])

    def test_script_failure_aborts(self, default_config):
        client = FakeGenerationClient(fail_ops={"script"})
        pipeline = ContentPipeline(client)

        assert run(pipeline.run("topic")) is False

        state = pipeline.state
        assert state.research is not None
        assert state.script is None
        assert state.metadata is None
        assert state.thumbnail is None
        assert state.is_processing is False
        assert state.error_notice == default_config.workflow.failure_notice
        assert state.current_stage is Stage.SCRIPT
        assert client.ops() == ["research", "script"]

    def test_thumbnail_failure_keeps_earlier_results(self):
        client = FakeGenerationClient(fail_ops={"thumbnail"})
        pipeline = ContentPipeline(client)

        assert run(pipeline.run("topic")) is False

        state = pipeline.state
        assert state.script is not None
        assert state.metadata is not None
        assert state.thumbnail is None
        assert "image" not in client.ops()
        assert state.is_processing is False

    def test_unexpected_exception_aborts(self):
        class BrokenClient(FakeGenerationClient):
            async def metadata(self, script_text):
                raise KeyError("boom")

        pipeline = ContentPipeline(BrokenClient())

        assert run(pipeline.run("topic")) is False
        assert pipeline.state.error_notice is not None
        assert pipeline.state.is_processing is False

    def test_scene_three_failure_is_isolated(self):
        client = FakeGenerationClient(failing_scenes={3})
        pipeline = ContentPipeline(client)

        assert run(pipeline.run("topic")) is True

        scenes = pipeline.state.script.scenes
        assert scenes[3].image_url is None
        for i, scene in enumerate(scenes):
            if i != 3:
                assert scene.image_url.startswith(image_url_for(f"prompt-{i}"))
            assert scene.is_generating is False
        assert pipeline.state.error_notice is None

    def test_empty_image_counts_as_failure(self):
        client = FakeGenerationClient(empty_scenes={0, 11})
        pipeline = ContentPipeline(client)

        assert run(pipeline.run("topic")) is True
        assert pipeline.state.images_ready == 10

    def test_new_run_clears_previous_results(self):
        client = FakeGenerationClient()
        pipeline = ContentPipeline(client)
        run(pipeline.run("first"))

        client.fail_ops = {"research"}
        run(pipeline.run("second"))

        state = pipeline.state
        assert state.topic == "second"
        assert state.research is None
        assert state.script is None
        assert state.metadata is None

    def test_run_ignored_while_processing(self, fake_client):
        pipeline = ContentPipeline(fake_client)
        pipeline.store.update(is_processing=True)

        assert run(pipeline.run("topic")) is False
        assert fake_client.calls == []

    def test_empty_research_continues(self):
        client = FakeGenerationClient(empty_research=True)
        pipeline = ContentPipeline(client)

        assert run(pipeline.run("topic", LengthTier.SHORT)) is True

        state = pipeline.state
        assert state.research.is_empty
        assert client.calls[1] == ("script", ("", LengthTier.SHORT))
        assert state.error_notice is None
        assert state.images_ready == 12

    def test_begin_claims_the_run(self, fake_client):
        pipeline = ContentPipeline(fake_client)

        assert pipeline.begin("first", "short") is True
        assert pipeline.state.is_processing is True
        assert pipeline.state.current_stage is Stage.RESEARCH
        assert pipeline.begin("second") is False
        assert fake_client.calls == []

        assert run(pipeline.execute()) is True
        assert pipeline.state.topic == "first"
        assert pipeline.state.is_processing is False

    def test_execute_without_begin(self, fake_client):
        pipeline = ContentPipeline(fake_client)

        assert run(pipeline.execute()) is False
        assert fake_client.calls == []

    def test_stage_never_moves_back(self, fake_client):
        pipeline = ContentPipeline(fake_client)
        pipeline.store.update(current_stage=Stage.METADATA)

        with pytest.raises(RuntimeError):
            pipeline._enter(Stage.SCRIPT)
        pipeline._enter(Stage.THUMBNAIL)
        assert pipeline.state.current_stage is Stage.THUMBNAIL


class TestRetryScene:
    def test_retry_overwrites_only_on_success(self):
        client = FakeGenerationClient()
        pipeline = ContentPipeline(client)
        run(pipeline.run("topic"))
        previous = pipeline.state.script.scenes[2].image_url

        client.failing_scenes = {2}
        outcome = run(pipeline.retry_scene(2))
        assert outcome.succeeded is False
        assert outcome.error
        assert pipeline.state.script.scenes[2].image_url == previous

        client.empty_scenes = {2}
        client.failing_scenes = set()
        outcome = run(pipeline.retry_scene(2))
        assert outcome.succeeded is False
        assert pipeline.state.script.scenes[2].image_url == previous

        client.empty_scenes = set()
        outcome = run(pipeline.retry_scene(2))
        assert outcome.succeeded is True
        assert pipeline.state.script.scenes[2].image_url == outcome.image_url
        assert outcome.image_url != previous
        assert pipeline.state.script.scenes[2].is_generating is False

    def test_retry_fills_failed_scene(self):
        client = FakeGenerationClient(failing_scenes={3})
        pipeline = ContentPipeline(client)
        run(pipeline.run("topic"))

        client.failing_scenes = set()
        outcome = run(pipeline.retry_scene(3))

        assert outcome.succeeded
        assert pipeline.state.images_ready == 12

    def test_retry_without_script(self, fake_client):
        pipeline = ContentPipeline(fake_client)
        assert run(pipeline.retry_scene(0)) is None
        assert fake_client.calls == []

    def test_retry_out_of_range(self, fake_client):
        pipeline = ContentPipeline(fake_client)
        run(pipeline.run("topic"))
        count = len(fake_client.calls)

        assert run(pipeline.retry_scene(12)) is None
        assert run(pipeline.retry_scene(-1)) is None
        assert len(fake_client.calls) == count

    def test_concurrent_retry_on_same_scene_rejected(self, fake_client):
        pipeline = ContentPipeline(fake_client)
        run(pipeline.run("topic"))

        async def scenario():
            fake_client.image_gate = asyncio.Event()
            first = asyncio.ensure_future(pipeline.retry_scene(5))
            await asyncio.sleep(0)
            assert pipeline.state.script.scenes[5].is_generating is True

            second = await pipeline.retry_scene(5)
            other = asyncio.ensure_future(pipeline.retry_scene(6))
            await asyncio.sleep(0)

            fake_client.image_gate.set()
            return await first, second, await other

        first, second, other = run(scenario())

        assert first.succeeded
        assert second is None
        assert other.succeeded
        assert pipeline.state.script.scenes[5].is_generating is False

    def test_image_loop_waits_for_retry_on_same_scene(self, fake_client):
        pipeline = ContentPipeline(fake_client)

        async def scenario():
            fake_client.image_gate = asyncio.Event()
            run_task = asyncio.ensure_future(pipeline.run("topic"))
            while "image" not in fake_client.ops():
                await asyncio.sleep(0)

            # Loop is blocked on scene 0; retry scene 1 ahead of it
            retry_task = asyncio.ensure_future(pipeline.retry_scene(1))
            await asyncio.sleep(0)
            assert pipeline.state.script.scenes[1].is_generating is True

            fake_client.image_gate.set()
            return await run_task, await retry_task

        completed, retried = run(scenario())

        assert completed is True
        assert retried.succeeded
        prompts = [arg for op, arg in fake_client.calls if op == "image"]
        assert prompts == ["prompt-0", "prompt-1", "prompt-1"] + [f"prompt-{i}" for i in range(2, 12)]
        assert fake_client.overlapping == []
        assert all(not s.is_generating for s in pipeline.state.script.scenes)
        assert pipeline.state.images_ready == 12


class TestNavigation:
    def test_navigate_when_idle(self, fake_client):
        pipeline = ContentPipeline(fake_client)
        assert pipeline.navigate(Stage.METADATA) is True
        assert pipeline.state.current_stage is Stage.METADATA
        assert pipeline.navigate("script") is True
        assert pipeline.state.current_stage is Stage.SCRIPT

    def test_navigate_blocked_while_processing(self, fake_client):
        pipeline = ContentPipeline(fake_client)
        pipeline.store.update(is_processing=True, current_stage=Stage.SCRIPT)

        assert pipeline.navigate(Stage.RESEARCH) is False
        assert pipeline.navigate(Stage.SCRIPT) is True
        assert pipeline.state.current_stage is Stage.SCRIPT

    def test_navigate_unknown_stage(self, fake_client):
        pipeline = ContentPipeline(fake_client)
        with pytest.raises(ValidationError):
            pipeline.navigate("publish")

    def test_reset(self, fake_client):
        pipeline = ContentPipeline(fake_client)
        run(pipeline.run("topic"))

        assert pipeline.reset() is True
        assert pipeline.state == WorkflowState()

    def test_reset_blocked_while_processing(self, fake_client):
        pipeline = ContentPipeline(fake_client)
        pipeline.store.update(is_processing=True, topic="busy")

        assert pipeline.reset() is False
        assert pipeline.state.topic == "busy"


def test_context_manager_closes_client(fake_client):
    async def scenario():
        async with ContentPipeline(fake_client):
            pass

    run(scenario())
    assert fake_client.closed is True
