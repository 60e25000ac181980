"""Tests for the visualization wizard state machine."""
import asyncio
import base64
import os
import pytest
from types import SimpleNamespace
from unittest.mock import patch, AsyncMock

os.environ.setdefault("GEMINI_API_KEY", "test-key")
os.environ.setdefault("GENERATION_RETRY_BACKOFF_SECONDS", "0")

from renovatepro.agents.generation import GenerationClient, GenerationError, Resolution
from renovatepro.models.project import Project, ProjectSpace
from renovatepro.models.wizard import ProjectInfo, Track, WizardMode
from renovatepro.seed import default_materials
from renovatepro.store import AppContext
from renovatepro.wizard.session import (
    NO_DESCRIPTION_MESSAGE,
    WizardBusyError,
    WizardSession,
    WizardStep,
    WizardValidationError,
)

BEFORE = "data:image/jpeg;base64," + base64.b64encode(b"before-photo").decode()
CUSTOM_IMAGE = "data:image/png;base64,Q1VTVE9N"
AI_IMAGE = "data:image/png;base64,QUk="
VISION = "replace cabinets with white shaker, quartz counters"
CATALOG = default_materials()


class FakeService:
    """Generation service double. Images are keyed off the prompt text."""

    def __init__(self):
        self.analyze = AsyncMock(return_value="Paint the walls sage green.")
        self.smart_describe = AsyncMock(return_value="Scope of work: cabinets, counters.")
        self.generate = AsyncMock(side_effect=self._generate)
        self.refine = AsyncMock(return_value="data:image/png;base64,UkVGSU5FRA==")

    async def _generate(self, image, prompt, resolution=Resolution.R1K):
        return CUSTOM_IMAGE if VISION in prompt else AI_IMAGE


def _session(service=None, vision=VISION, ai_suggestion=""):
    """A new-project session parked at the materials step."""
    session = WizardSession(WizardMode.NEW_PROJECT, service or FakeService())
    session.set_project_info(ProjectInfo(name="Smith Kitchen", client_name="John Smith", quote_amount=25000))
    session.step = WizardStep.SPACE_CAPTURE
    session.set_space_name("Kitchen")
    session.set_before_image(BEFORE)
    session.step = WizardStep.DESCRIPTION
    session.set_descriptions(vision=vision, ai_suggestion=ai_suggestion)
    session.step = WizardStep.MATERIALS
    return session


def _prompts(service):
    return [c.args[1] for c in service.generate.call_args_list]


class TestNavigation:
    @pytest.mark.asyncio
    async def test_new_project_starts_at_project_info(self):
        session = WizardSession(WizardMode.NEW_PROJECT, FakeService())
        assert session.step == WizardStep.PROJECT_INFO
        await session.next_step()
        assert session.step == WizardStep.SPACE_CAPTURE

    def test_add_space_skips_project_info(self):
        session = WizardSession(WizardMode.ADD_SPACE, FakeService(), project_id="p1")
        assert session.step == WizardStep.SPACE_CAPTURE
        session.previous_step()
        assert session.step == WizardStep.SPACE_CAPTURE

    @pytest.mark.asyncio
    async def test_before_photo_required_to_leave_capture(self):
        session = WizardSession(WizardMode.ADD_SPACE, FakeService(), project_id="p1")
        assert not session.can_advance()
        with pytest.raises(WizardValidationError):
            await session.next_step()
        session.set_before_image(BEFORE)
        assert session.can_advance()
        await session.next_step()
        assert session.step == WizardStep.DESCRIPTION

    @pytest.mark.asyncio
    async def test_description_required_to_leave_step_3(self):
        session = WizardSession(WizardMode.ADD_SPACE, FakeService(), project_id="p1")
        session.set_before_image(BEFORE)
        await session.next_step()
        with pytest.raises(WizardValidationError, match="Auto-Analyze"):
            await session.next_step()
        session.set_descriptions(ai_suggestion="Add a skylight.")
        await session.next_step()
        assert session.step == WizardStep.MATERIALS

    def test_actions_checked_against_step(self):
        session = WizardSession(WizardMode.NEW_PROJECT, FakeService())
        with pytest.raises(WizardValidationError):
            session.set_before_image(BEFORE)
        with pytest.raises(WizardValidationError):
            session.select_track(Track.AI)

    def test_clear_before_image(self):
        session = WizardSession(WizardMode.ADD_SPACE, FakeService(), project_id="p1")
        session.set_before_image(BEFORE)
        session.clear_before_image()
        assert session.space.before_image is None

    def test_cancel_marks_session(self):
        session = _session()
        session.cancel()
        assert session.cancelled
        assert not session.loading


class TestDescriptionStep:
    @pytest.mark.asyncio
    async def test_analyze_fills_ai_suggestion(self):
        service = FakeService()
        session = _session(service)
        session.step = WizardStep.DESCRIPTION

        await session.analyze()

        service.analyze.assert_awaited_once_with(BEFORE)
        assert session.ai_suggestion == "Paint the walls sage green."
        assert session.space.description == VISION

    @pytest.mark.asyncio
    async def test_smart_describe_rewrites_vision_in_place(self):
        service = FakeService()
        session = _session(service)
        session.step = WizardStep.DESCRIPTION

        await session.smart_describe()

        service.smart_describe.assert_awaited_once_with(VISION)
        assert session.space.description == "Scope of work: cabinets, counters."

    def test_dictation_appends_to_vision(self):
        session = _session(vision="white cabinets")
        session.step = WizardStep.DESCRIPTION
        session.start_dictation()
        assert session.to_state().listening

        session.dictation.feed("and brass hardware")

        assert session.space.description == "white cabinets and brass hardware"
        assert not session.dictation.listening

    @pytest.mark.asyncio
    async def test_leaving_step_stops_dictation(self):
        session = _session()
        session.step = WizardStep.DESCRIPTION
        session.start_dictation()
        await session.next_step()
        assert not session.dictation.listening


class TestMaterialsStep:
    def test_toggle_twice_restores_empty_selection(self):
        session = _session()
        session.toggle_material(CATALOG[0])
        session.toggle_material(CATALOG[0])
        assert session.space.materials == []

    def test_material_view_follows_filter(self):
        session = _session()
        session.set_material_filter("Paint", "Benjamin Moore")
        session.toggle_material(CATALOG[6])

        view = session.material_view(CATALOG)

        assert view.sub_categories == ["Benjamin Moore", "Sherwin-Williams"]
        assert [m.id for m in view.materials] == ["m7"]
        assert view.selected_ids == ["m7"]

    def test_sub_category_cleared_without_category(self):
        session = _session()
        session.set_material_filter(None, "Quartz")
        assert session.selected_sub_category is None

    @pytest.mark.asyncio
    async def test_selected_materials_reach_prompt(self):
        service = FakeService()
        session = _session(service)
        session.toggle_material(CATALOG[1])
        await session.next_step()
        assert "Calacatta Gold (White quartz with bold grey and gold veining.)" in _prompts(service)[0]


class TestGenerate:
    @pytest.mark.asyncio
    async def test_both_tracks_empty_makes_no_call(self):
        service = FakeService()
        session = _session(service, vision="", ai_suggestion="")

        with pytest.raises(WizardValidationError, match=NO_DESCRIPTION_MESSAGE):
            await session.next_step()

        service.generate.assert_not_awaited()
        assert session.custom_result.image is None
        assert session.ai_result.image is None
        assert session.step == WizardStep.MATERIALS

    @pytest.mark.asyncio
    async def test_custom_only(self):
        service = FakeService()
        session = _session(service)

        await session.next_step()

        assert session.step == WizardStep.PREVIEW
        assert service.generate.await_count == 1
        assert session.custom_result.image == CUSTOM_IMAGE
        assert session.ai_result.image is None
        assert session.active_track == Track.CUSTOM

    @pytest.mark.asyncio
    async def test_ai_only_becomes_active(self):
        session = _session(vision="", ai_suggestion="Add open shelving.")
        await session.generate()
        assert session.ai_result.image == AI_IMAGE
        assert session.active_track == Track.AI

    @pytest.mark.asyncio
    async def test_both_tracks_prefer_custom(self):
        service = FakeService()
        session = _session(service, ai_suggestion="Add open shelving.")

        await session.generate()

        assert service.generate.await_count == 2
        assert session.custom_result.image == CUSTOM_IMAGE
        assert session.ai_result.image == AI_IMAGE
        assert session.active_track == Track.CUSTOM

    @pytest.mark.asyncio
    async def test_first_track_to_land_is_shown_until_custom_arrives(self):
        release_custom = asyncio.Event()
        service = FakeService()

        async def generate(image, prompt, resolution=Resolution.R1K):
            if VISION in prompt:
                await release_custom.wait()
                return CUSTOM_IMAGE
            return AI_IMAGE

        service.generate = AsyncMock(side_effect=generate)
        session = _session(service, ai_suggestion="Add open shelving.")

        task = asyncio.create_task(session.generate())
        for _ in range(5):
            await asyncio.sleep(0)
        assert session.loading
        assert session.active_track == Track.AI

        release_custom.set()
        await task
        assert session.active_track == Track.CUSTOM
        assert not session.loading

    @pytest.mark.asyncio
    async def test_one_track_failing_keeps_the_other(self):
        service = FakeService()

        async def generate(image, prompt, resolution=Resolution.R1K):
            if VISION in prompt:
                raise GenerationError("quota exceeded")
            return AI_IMAGE

        service.generate = AsyncMock(side_effect=generate)
        session = _session(service, ai_suggestion="Add open shelving.")

        await session.generate()

        assert session.active_track == Track.AI
        assert session.custom_result.image is None
        assert "quota exceeded" in session.custom_result.error

    @pytest.mark.asyncio
    async def test_all_tracks_failing_keeps_previous_images(self):
        service = FakeService()
        session = _session(service)
        await session.generate()

        service.generate = AsyncMock(side_effect=GenerationError("down"))
        with pytest.raises(GenerationError):
            await session.generate()

        assert session.custom_result.image == CUSTOM_IMAGE
        assert not session.loading

    @pytest.mark.asyncio
    async def test_missing_image_keeps_previous(self):
        service = FakeService()
        session = _session(service)
        await session.generate()

        service.generate = AsyncMock(return_value=None)
        with pytest.raises(GenerationError, match="No image returned"):
            await session.generate()

        assert session.custom_result.image == CUSTOM_IMAGE
        assert session.custom_result.error == "No image returned"
        assert not session.loading

    @pytest.mark.asyncio
    async def test_one_track_without_image_is_not_an_error(self):
        service = FakeService()

        async def generate(image, prompt, resolution=Resolution.R1K):
            return CUSTOM_IMAGE if VISION in prompt else None

        service.generate = AsyncMock(side_effect=generate)
        session = _session(service, ai_suggestion="Add open shelving.")
        await session.generate()

        assert session.active_track == Track.CUSTOM
        assert session.ai_result.error == "No image returned"

    @pytest.mark.asyncio
    async def test_resolution_forwarded(self):
        service = FakeService()
        session = _session(service)
        session.set_options(resolution=Resolution.R4K)
        await session.generate()
        assert service.generate.call_args.args[2] == Resolution.R4K


class TestConcurrency:
    @pytest.mark.asyncio
    async def test_busy_while_generating(self):
        release = asyncio.Event()
        service = FakeService()

        async def generate(image, prompt, resolution=Resolution.R1K):
            await release.wait()
            return CUSTOM_IMAGE

        service.generate = AsyncMock(side_effect=generate)
        session = _session(service)
        task = asyncio.create_task(session.generate())
        await asyncio.sleep(0)

        with pytest.raises(WizardBusyError):
            await session.generate()
        with pytest.raises(WizardBusyError):
            session.finalize()

        release.set()
        await task

    @pytest.mark.asyncio
    async def test_late_result_after_back_is_discarded(self):
        release = asyncio.Event()
        service = FakeService()

        async def generate(image, prompt, resolution=Resolution.R1K):
            await release.wait()
            return CUSTOM_IMAGE

        service.generate = AsyncMock(side_effect=generate)
        session = _session(service)
        task = asyncio.create_task(session.generate())
        await asyncio.sleep(0)

        session.previous_step()
        release.set()
        await task

        assert session.step == WizardStep.MATERIALS
        assert session.custom_result.image is None
        assert not session.loading

    @pytest.mark.asyncio
    async def test_late_analysis_after_cancel_is_discarded(self):
        release = asyncio.Event()
        service = FakeService()

        async def analyze(image):
            await release.wait()
            return "Late suggestion"

        service.analyze = AsyncMock(side_effect=analyze)
        session = _session(service)
        session.step = WizardStep.DESCRIPTION
        task = asyncio.create_task(session.analyze())
        await asyncio.sleep(0)

        session.cancel()
        release.set()
        await task

        assert session.ai_suggestion == ""

    @pytest.mark.asyncio
    async def test_edits_blocked_while_smart_describe_pending(self):
        release = asyncio.Event()
        service = FakeService()

        async def smart_describe(notes):
            await release.wait()
            return "polished"

        service.smart_describe = AsyncMock(side_effect=smart_describe)
        session = _session(service)
        session.step = WizardStep.DESCRIPTION
        task = asyncio.create_task(session.smart_describe())
        await asyncio.sleep(0)

        with pytest.raises(WizardBusyError):
            session.set_descriptions(vision="user typed newer text")
        with pytest.raises(WizardBusyError):
            session.start_dictation()

        release.set()
        await task
        assert session.space.description == "polished"
        session.set_descriptions(vision="user typed newer text")
        assert session.space.description == "user typed newer text"

    @pytest.mark.asyncio
    async def test_smart_describe_stops_dictation(self):
        session = _session()
        session.step = WizardStep.DESCRIPTION
        session.start_dictation()

        await session.smart_describe()

        assert not session.dictation.listening
        assert not session.dictation.feed("late words")
        assert session.space.description == "Scope of work: cabinets, counters."


class TestRefine:
    @pytest.mark.asyncio
    async def test_refine_touches_only_active_track(self):
        service = FakeService()
        session = _session(service, ai_suggestion="Add open shelving.")
        await session.generate()
        session.select_track(Track.AI)

        result = await session.refine("make the shelving walnut")

        service.refine.assert_awaited_once_with(AI_IMAGE, "make the shelving walnut")
        assert session.ai_result.image == result
        assert session.custom_result.image == CUSTOM_IMAGE
        assert session.refinement_prompt == ""

    @pytest.mark.asyncio
    async def test_refine_needs_instruction(self):
        session = _session()
        await session.generate()
        with pytest.raises(WizardValidationError):
            await session.refine("   ")

    @pytest.mark.asyncio
    async def test_failed_refine_keeps_image(self):
        service = FakeService()
        session = _session(service)
        await session.generate()
        service.refine = AsyncMock(side_effect=GenerationError("down"))

        with pytest.raises(GenerationError):
            await session.refine("brighter")

        assert session.custom_result.image == CUSTOM_IMAGE
        assert session.refinement_prompt == "brighter"
        assert not session.loading

    @pytest.mark.asyncio
    async def test_select_track_requires_image(self):
        session = _session()
        await session.generate()
        with pytest.raises(WizardValidationError):
            session.select_track(Track.AI)


class TestFinalize:
    @pytest.mark.asyncio
    async def test_inactive_track_is_dropped(self):
        session = _session(ai_suggestion="Add open shelving.")
        await session.generate()
        session.select_track(Track.AI)

        project = session.finalize()

        assert isinstance(project, Project)
        assert session.step == WizardStep.COMPLETE
        space = project.spaces[0]
        assert space.after_image == AI_IMAGE
        assert space.description == "Add open shelving."
        assert project.name == "Smith Kitchen"

    @pytest.mark.asyncio
    async def test_requires_generated_image(self):
        service = FakeService()
        service.generate = AsyncMock(return_value=None)
        session = _session(service)
        with pytest.raises(GenerationError):
            await session.generate()
        with pytest.raises(WizardValidationError):
            session.finalize()

    @pytest.mark.asyncio
    async def test_failed_persist_keeps_preview(self):
        session = _session()
        await session.generate()

        def persist(result):
            raise KeyError("project gone")

        with pytest.raises(KeyError):
            session.finalize(persist)
        assert session.step == WizardStep.PREVIEW

        saved = session.finalize(lambda result: result)
        assert saved.spaces[0].after_image == CUSTOM_IMAGE
        assert session.step == WizardStep.COMPLETE

    @pytest.mark.asyncio
    async def test_edit_space_keeps_space_id(self):
        original = ProjectSpace(id="s9", name="Bath", before_image=BEFORE, description="Spa bath")
        session = WizardSession(WizardMode.EDIT_SPACE, FakeService(), project_id="p1", initial_space=original)
        assert session.space is not original
        session.step = WizardStep.MATERIALS

        await session.generate()
        space = session.finalize()

        assert isinstance(space, ProjectSpace)
        assert space.id == "s9"
        assert space.after_image == AI_IMAGE
        assert original.after_image is None


class TestSmithKitchenScenario:
    @pytest.mark.asyncio
    async def test_custom_track_only_is_generated_and_saved(self):
        service = FakeService()
        ctx = AppContext(service)
        session = ctx.start_session(WizardMode.NEW_PROJECT)

        session.set_project_info(ProjectInfo(name="Smith Kitchen", client_name="John Smith", quote_amount=25000))
        await session.next_step()
        session.set_space_name("Kitchen")
        session.set_before_image(BEFORE)
        await session.next_step()
        session.set_descriptions(vision=VISION)
        await session.next_step()
        await session.next_step()

        assert service.generate.await_count == 1
        assert VISION in _prompts(service)[0]
        assert session.ai_result.image is None

        project = ctx.finish_session(session.id)

        assert ctx.projects.get(project.id).name == "Smith Kitchen"
        assert project.client_name == "John Smith"
        assert project.quote_amount == 25000
        assert project.spaces[0].name == "Kitchen"
        assert project.spaces[0].after_image == CUSTOM_IMAGE
        assert session.id not in ctx.sessions


class TestResolutionRouting:
    @pytest.mark.asyncio
    @patch("renovatepro.agents.generation.genai")
    async def test_4k_and_1k_use_different_models(self, mock_genai):
        part = SimpleNamespace(inline_data=SimpleNamespace(data=b"QUJD", mime_type="image/png"))
        response = SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))])
        generate_content = AsyncMock(return_value=response)
        mock_genai.Client.return_value.aio.models.generate_content = generate_content

        session = _session(GenerationClient())
        session.set_options(resolution=Resolution.R4K)
        await session.generate()
        session.set_options(resolution=Resolution.R1K)
        await session.generate()

        first, second = generate_content.call_args_list
        assert first.kwargs["model"] == "gemini-3-pro-image-preview"
        assert second.kwargs["model"] == "gemini-2.5-flash-image"
        assert first.kwargs["contents"][0].text == second.kwargs["contents"][0].text


class TestRegenerate:
    @pytest.mark.asyncio
    async def test_regenerate_replaces_images(self):
        service = FakeService()
        session = _session(service)
        await session.generate()

        service.generate = AsyncMock(return_value="data:image/png;base64,TkVX")
        await session.regenerate()

        assert session.custom_result.image == "data:image/png;base64,TkVX"
        assert session.step == WizardStep.PREVIEW

    @pytest.mark.asyncio
    async def test_regenerate_only_in_preview(self):
        with pytest.raises(WizardValidationError):
            await _session().regenerate()
