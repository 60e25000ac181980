"""Visualization wizard state machine.

Steps:
1. Project info (new-project mode only)
2. Space capture: name plus one before-photo
3. Description: "Your Vision" text and "AI Suggestion" text, gathered side by side
4. Materials: filter and toggle catalog entries
5. Preview & refine: one generation per non-empty track, run concurrently
6. Completion: the active track is persisted, the other one dropped

Every generate/refine/analyze call captures the session's generation token.
Navigation out of the preview, regeneration and cancellation bump the token,
so a response that lands afterwards is discarded instead of overwriting
newer state. While a call is in flight, conflicting actions raise
WizardBusyError.
"""
import asyncio
import time
from datetime import datetime, timezone
from enum import IntEnum
from typing import Callable, Protocol, Sequence
from loguru import logger

from renovatepro.agents.generation import GenerationError, Resolution
from renovatepro.models.material import Material
from renovatepro.models.project import Project, ProjectSpace
from renovatepro.models.shared import new_id
from renovatepro.models.wizard import (
    MaterialView,
    ProjectInfo,
    Track,
    TrackResult,
    WizardMode,
    WizardState,
)
from renovatepro.services.material_filter import (
    filter_materials,
    list_categories,
    list_sub_categories,
    materials_prompt_text,
    toggle_material,
)
from renovatepro.wizard.dictation import DictationCapture, append_transcript

NO_DESCRIPTION_MESSAGE = "Please provide a description or use the Auto-Analyze feature."
PROMPT_TEMPLATE = (
    "Renovation details: {details}. Specific Materials: {materials}. "
    "Ensure high photorealism and correct perspective integration of materials."
)


class WizardStep(IntEnum):
    PROJECT_INFO = 1
    SPACE_CAPTURE = 2
    DESCRIPTION = 3
    MATERIALS = 4
    PREVIEW = 5
    COMPLETE = 6


class WizardValidationError(ValueError):
    """Required input is missing, so the requested transition is blocked."""


class WizardBusyError(RuntimeError):
    """Another generation call is still in flight."""


class GenerationService(Protocol):
    async def analyze(self, image_base64: str) -> str: ...

    async def smart_describe(self, notes: str) -> str: ...

    async def generate(self, image_base64: str, prompt: str, resolution: Resolution = Resolution.R1K) -> str | None: ...

    async def refine(self, image_base64: str, instruction: str) -> str | None: ...


class WizardSession:
    """In-memory state of one pass through the visualization wizard."""

    def __init__(
        self,
        mode: WizardMode,
        service: GenerationService,
        project_id: str | None = None,
        initial_space: ProjectSpace | None = None,
    ):
        self.id = new_id()
        self.mode = WizardMode(mode)
        self.project_id = project_id
        self.service = service
        self.step = WizardStep.PROJECT_INFO if self.mode == WizardMode.NEW_PROJECT else WizardStep.SPACE_CAPTURE
        self.loading = False
        self.cancelled = False
        self.generation_token = 0
        self.last_active = time.monotonic()

        self.project_info = ProjectInfo()
        if self.mode == WizardMode.EDIT_SPACE and initial_space is not None:
            self.space = initial_space.model_copy(deep=True)
        else:
            self.space = ProjectSpace()

        self.ai_suggestion = ""
        # An edited space starts with its saved rendering on the custom track
        self.tracks: dict[Track, TrackResult] = {
            Track.CUSTOM: TrackResult(image=self.space.after_image, text=self.space.description),
            Track.AI: TrackResult(),
        }
        self.active_track = Track.CUSTOM

        self.include_electrical = False
        self.include_plumbing = False
        self.pull_permit = False
        self.resolution = Resolution.R1K
        self.refinement_prompt = ""

        self.selected_category: str | None = None
        self.selected_sub_category: str | None = None

        self.dictation = DictationCapture(self.append_vision_text)

    # ── Derived state ──

    @property
    def first_step(self) -> WizardStep:
        return WizardStep.PROJECT_INFO if self.mode == WizardMode.NEW_PROJECT else WizardStep.SPACE_CAPTURE

    @property
    def custom_result(self) -> TrackResult:
        return self.tracks[Track.CUSTOM]

    @property
    def ai_result(self) -> TrackResult:
        return self.tracks[Track.AI]

    @property
    def active_image(self) -> str | None:
        return self.tracks[self.active_track].image

    @property
    def active_text(self) -> str:
        """Text of the active track: the user's vision or the AI suggestion."""
        if self.active_track == Track.AI:
            return self.ai_suggestion
        return self.space.description

    def track_texts(self) -> dict[Track, str]:
        """Non-empty description tracks, custom first."""
        texts = {}
        if self.space.description.strip():
            texts[Track.CUSTOM] = self.space.description
        if self.ai_suggestion.strip():
            texts[Track.AI] = self.ai_suggestion
        return texts

    def can_advance(self) -> bool:
        if self.step == WizardStep.SPACE_CAPTURE:
            return bool(self.space.before_image)
        if self.step == WizardStep.DESCRIPTION:
            return bool(self.track_texts())
        if self.step == WizardStep.MATERIALS:
            return bool(self.track_texts()) and bool(self.space.before_image)
        return self.step < WizardStep.PREVIEW

    def build_prompt(self, details: str) -> str:
        return PROMPT_TEMPLATE.format(details=details, materials=materials_prompt_text(self.space.materials))

    # ── Guards ──

    def _require_step(self, *steps: WizardStep):
        if self.step not in steps:
            names = ", ".join(s.name.lower() for s in steps)
            raise WizardValidationError(f"Action not available in step {int(self.step)} (expected {names})")

    def _ensure_idle(self):
        if self.loading:
            raise WizardBusyError("A generation request is already in progress")

    def _begin_request(self) -> int:
        self._ensure_idle()
        self.generation_token += 1
        self.loading = True
        return self.generation_token

    def _finish_request(self, token: int) -> bool:
        """Clear the loading flag. Returns False if the request went stale."""
        if token != self.generation_token:
            return False
        self.loading = False
        return True

    def _invalidate_requests(self):
        self.generation_token += 1
        self.loading = False

    # ── Step 1 & 2 ──

    def set_project_info(self, info: ProjectInfo):
        self._require_step(WizardStep.PROJECT_INFO)
        self.project_info = info

    def set_space_name(self, name: str):
        self._require_step(WizardStep.SPACE_CAPTURE)
        self.space.name = name

    def set_before_image(self, data_url: str):
        self._require_step(WizardStep.SPACE_CAPTURE)
        self.space.before_image = data_url

    def clear_before_image(self):
        self._require_step(WizardStep.SPACE_CAPTURE)
        self.space.before_image = None

    # ── Step 3 ──

    def set_descriptions(self, vision: str | None = None, ai_suggestion: str | None = None):
        self._require_step(WizardStep.DESCRIPTION, WizardStep.MATERIALS)
        self._ensure_idle()
        if vision is not None:
            self.space.description = vision
        if ai_suggestion is not None:
            self.ai_suggestion = ai_suggestion

    def append_vision_text(self, fragment: str):
        self.space.description = append_transcript(self.space.description, fragment)

    def start_dictation(self):
        self._require_step(WizardStep.DESCRIPTION)
        self._ensure_idle()
        self.dictation.start()

    async def analyze(self) -> str:
        """Fill the AI suggestion track from the before-photo."""
        self._require_step(WizardStep.DESCRIPTION)
        if not self.space.before_image:
            raise WizardValidationError("A before photo is required for auto-analysis")

        token = self._begin_request()
        try:
            suggestion = await self.service.analyze(self.space.before_image)
        finally:
            fresh = self._finish_request(token)

        if not fresh:
            logger.warning(f"Wizard {self.id}: discarding stale analysis result")
            return self.ai_suggestion
        self.ai_suggestion = suggestion
        return suggestion

    async def smart_describe(self) -> str:
        """Rewrite the user's vision text in place as a structured scope of work."""
        self._require_step(WizardStep.DESCRIPTION)
        token = self._begin_request()
        # Dictation would append to the text that is about to be replaced
        self.dictation.cancel()
        try:
            polished = await self.service.smart_describe(self.space.description)
        finally:
            fresh = self._finish_request(token)

        if not fresh:
            logger.warning(f"Wizard {self.id}: discarding stale smart description")
            return self.space.description
        self.space.description = polished
        return polished

    # ── Step 4 ──

    def set_material_filter(self, category: str | None, sub_category: str | None = None):
        self._require_step(WizardStep.MATERIALS)
        self.selected_category = category or None
        # A sub-category only means something inside a selected category
        self.selected_sub_category = (sub_category or None) if self.selected_category else None

    def toggle_material(self, material: Material):
        self._require_step(WizardStep.MATERIALS)
        self.space.materials = toggle_material(self.space.materials, material)

    def material_view(self, catalog: Sequence[Material]) -> MaterialView:
        return MaterialView(
            categories=list_categories(catalog),
            sub_categories=list_sub_categories(catalog, self.selected_category),
            selected_category=self.selected_category,
            selected_sub_category=self.selected_sub_category,
            materials=filter_materials(catalog, self.selected_category, self.selected_sub_category),
            selected_ids=[m.id for m in self.space.materials],
        )

    # ── Navigation ──

    async def next_step(self):
        """Advance one step. Leaving the materials step triggers generation."""
        if self.step == WizardStep.MATERIALS:
            await self.generate()
            return
        if self.step >= WizardStep.PREVIEW:
            raise WizardValidationError("Use finish to save the visualization")
        if self.step == WizardStep.SPACE_CAPTURE and not self.space.before_image:
            raise WizardValidationError("A before photo is required to continue")
        if self.step == WizardStep.DESCRIPTION and not self.track_texts():
            raise WizardValidationError(NO_DESCRIPTION_MESSAGE)
        self.dictation.cancel()
        self.step = WizardStep(self.step + 1)

    def previous_step(self):
        if self.step == WizardStep.COMPLETE:
            raise WizardValidationError("The wizard is already complete")
        if self.step <= self.first_step:
            return
        if self.step == WizardStep.PREVIEW:
            # Late responses for the preview must not land after leaving it
            self._invalidate_requests()
        self.dictation.cancel()
        self.step = WizardStep(self.step - 1)

    def cancel(self):
        self._invalidate_requests()
        self.dictation.cancel()
        self.cancelled = True
        logger.info(f"Wizard {self.id} cancelled at step {int(self.step)}")

    # ── Step 5 ──

    async def generate(self):
        """Enter (or re-enter) the preview: one generation per non-empty track.

        Tracks resolve independently. The first track to land becomes active
        while waiting; once both have settled, custom wins if it succeeded.
        Raises GenerationError only when every requested track failed, in
        which case previously generated images are left as they were.
        """
        self._require_step(WizardStep.MATERIALS, WizardStep.PREVIEW)
        self._ensure_idle()

        texts = self.track_texts()
        if not texts:
            raise WizardValidationError(NO_DESCRIPTION_MESSAGE)
        if not self.space.before_image:
            raise WizardValidationError("A before photo is required to generate a preview")

        self.step = WizardStep.PREVIEW
        token = self._begin_request()
        before_image = self.space.before_image
        resolution = self.resolution
        succeeded: list[Track] = []

        async def run_track(track: Track, text: str):
            image = await self.service.generate(before_image, self.build_prompt(text), resolution)
            if token != self.generation_token:
                return
            if image is None:
                self.tracks[track].error = "No image returned"
                logger.warning(f"Wizard {self.id}: {track.value} track returned no image")
                return
            self.tracks[track] = TrackResult(image=image, text=text)
            if not succeeded:
                self.active_track = track
            succeeded.append(track)

        logger.info(f"Wizard {self.id}: generating tracks {[t.value for t in texts]} at {resolution.value}")
        try:
            results = await asyncio.gather(
                *(run_track(track, text) for track, text in texts.items()),
                return_exceptions=True,
            )
        finally:
            fresh = self._finish_request(token)

        if not fresh:
            logger.warning(f"Wizard {self.id}: discarding stale generation results")
            return

        errors = []
        for track, result in zip(texts, results):
            if isinstance(result, Exception):
                self.tracks[track].error = str(result)
                errors.append(result)
                logger.error(f"Wizard {self.id}: {track.value} track generation failed: {result}")

        if Track.CUSTOM in succeeded:
            self.active_track = Track.CUSTOM
        elif Track.AI in succeeded:
            self.active_track = Track.AI
        elif errors:
            raise GenerationError("Failed to generate image.") from errors[0]
        else:
            raise GenerationError("No image returned")

    async def regenerate(self):
        """Re-run preview generation; results of the previous run are superseded."""
        self._require_step(WizardStep.PREVIEW)
        await self.generate()

    def select_track(self, track: Track):
        self._require_step(WizardStep.PREVIEW)
        track = Track(track)
        if not self.tracks[track].image:
            raise WizardValidationError(f"No {track.value} preview has been generated")
        self.active_track = track

    def set_options(
        self,
        resolution: Resolution | None = None,
        include_electrical: bool | None = None,
        include_plumbing: bool | None = None,
        pull_permit: bool | None = None,
    ):
        self._require_step(WizardStep.MATERIALS, WizardStep.PREVIEW)
        if resolution is not None:
            self.resolution = Resolution(resolution)
        if include_electrical is not None:
            self.include_electrical = include_electrical
        if include_plumbing is not None:
            self.include_plumbing = include_plumbing
        if pull_permit is not None:
            self.pull_permit = pull_permit

    async def refine(self, instruction: str | None = None) -> str | None:
        """Edit the active track's image; only that track is touched."""
        self._require_step(WizardStep.PREVIEW)
        if instruction is not None:
            self.refinement_prompt = instruction
        instruction = self.refinement_prompt.strip()
        track = self.active_track
        current = self.tracks[track].image
        if not current or not instruction:
            raise WizardValidationError("Refinement needs a generated image and an instruction")

        token = self._begin_request()
        try:
            result = await self.service.refine(current, instruction)
        finally:
            fresh = self._finish_request(token)

        if not fresh:
            logger.warning(f"Wizard {self.id}: discarding stale refinement result")
            return None
        if result:
            self.tracks[track].image = result
        self.refinement_prompt = ""
        return result

    # ── Step 6 ──

    def finalize(self, persist: Callable[[Project | ProjectSpace], Project] | None = None):
        """Persist the active track and move to completion.

        The inactive track is dropped, not merged. New-project mode builds a
        Project holding exactly one space; other modes build the space. When
        ``persist`` is given it receives that result and its return value is
        returned. The session only moves to COMPLETE once ``persist`` succeeds,
        so a failed save leaves it in the preview.
        """
        self._require_step(WizardStep.PREVIEW)
        self._ensure_idle()
        if not self.active_image:
            raise WizardValidationError("Generate a preview before saving")

        final_space = self.space.model_copy(
            update={
                "id": self.space.id or new_id(),
                "description": self.active_text,
                "after_image": self.active_image,
            },
            deep=True,
        )
        if self.mode == WizardMode.NEW_PROJECT:
            result = Project(
                **self.project_info.model_dump(),
                date=datetime.now(timezone.utc).isoformat(),
                spaces=[final_space],
            )
        else:
            result = final_space

        if persist is not None:
            result = persist(result)
        self.step = WizardStep.COMPLETE
        logger.info(f"Wizard {self.id} finished ({self.mode.value}, track={self.active_track.value})")
        return result

    def to_state(self) -> WizardState:
        return WizardState(
            id=self.id,
            mode=self.mode,
            project_id=self.project_id,
            step=int(self.step),
            loading=self.loading,
            project_info=self.project_info,
            space=self.space,
            ai_suggestion=self.ai_suggestion,
            custom=self.custom_result,
            ai=self.ai_result,
            active_track=self.active_track,
            active_image=self.active_image,
            include_electrical=self.include_electrical,
            include_plumbing=self.include_plumbing,
            pull_permit=self.pull_permit,
            resolution=self.resolution,
            refinement_prompt=self.refinement_prompt,
            listening=self.dictation.listening,
            can_advance=self.can_advance(),
        )
