"""Story wizard - stage machine sequencing idea -> outline -> storyboard -> video.

The wizard owns a single in-progress story and exposes one method per user
action. Every provider call goes through a gateway adapter; a Fallback from
any adapter lands on a deterministic placeholder so the user can always keep
progressing. All UI-facing state (selection, editing buffer, progress,
in-flight operations) lives on the explicit ``WizardContext``.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field, replace
from typing import AsyncIterator, Optional

from models.results import FallbackReason, Success
from models.story import (
    ContentClassification,
    NarrationArtifact,
    SceneStep,
    Story,
    StoryboardArtifact,
    VideoArtifact,
    WizardStage,
)
from services.composition_service import CompositionService
from services.image_generation_service import ImageGenerationService
from services.outline_service import OutlineService
from services.placeholders import (
    LOCAL_SYNTHESIS_MESSAGE,
    QUOTA_WARNING,
    STORYBOARD_FAILED_MESSAGE,
    placeholder_outline,
    replacement_description,
    storyboard_placeholder_url,
)
from services.story_repository import StoryRepository
from services.tts_service import NOMINAL_DURATION_SECONDS, TTSService, narration_text
from story_wizard.errors import InvalidTransitionError, OperationInProgressError
from utils.progress import ProgressEstimator

logger = logging.getLogger(__name__)

REGENERATE_QUOTA_WARNING = (
    "Quota limit reached. Please wait a few minutes before trying again, or "
    "request a quota increase in Google Cloud Console."
)

# Backward moves are unconditional; nothing else moves backward
_BACKWARD = {
    WizardStage.OUTLINE: WizardStage.INPUT,
    WizardStage.STORYBOARD: WizardStage.OUTLINE,
    WizardStage.COMPOSER: WizardStage.STORYBOARD,
}

_FORWARD = {
    WizardStage.INPUT: WizardStage.OUTLINE,
    WizardStage.OUTLINE: WizardStage.STORYBOARD,
    WizardStage.STORYBOARD: WizardStage.COMPOSER,
}

# Operations that read the outline; a new outline must not land under them
_OUTLINE_READERS = frozenset(
    {
        "regenerate_step",
        "generate_storyboard",
        "regenerate_storyboard",
        "generate_narration",
        "compose_video",
    }
)


def _conflicts(operation: str) -> frozenset:
    """Operations that may not be outstanding while ``operation`` starts."""
    if operation == "generate_outline":
        return _OUTLINE_READERS
    if operation in _OUTLINE_READERS:
        return frozenset({"generate_outline"})
    return frozenset()


@dataclass
class WizardContext:
    """Everything the wizard knows about the story being built."""

    stage: WizardStage = WizardStage.INPUT
    idea: str = ""
    outline_requested: bool = False
    steps: list[SceneStep] = field(default_factory=list)
    classification: ContentClassification = ContentClassification.NARRATIVE
    storyboard: Optional[StoryboardArtifact] = None
    narration: Optional[NarrationArtifact] = None
    video: Optional[VideoArtifact] = None
    cinematic_mode: bool = False
    selected_step_index: Optional[int] = None
    editing_text: str = ""
    quota_warning: Optional[str] = None
    last_fallback: Optional[FallbackReason] = None
    saved_story_id: Optional[str] = None
    in_flight: set[str] = field(default_factory=set)

    @property
    def narration_decided(self) -> bool:
        """Either narration audio exists or local synthesis was chosen."""
        return self.narration is not None and (
            bool(self.narration.audio_url) or self.narration.use_local_synthesis
        )

    def to_story(self) -> Story:
        """Snapshot for persistence."""
        return Story(
            idea=self.idea,
            classification=self.classification,
            steps=[replace(s) for s in self.steps],
            storyboard=self.storyboard,
            narration=self.narration,
            video=self.video,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "stage": self.stage.value,
            "idea": self.idea,
            "contentType": self.classification.value,
            "steps": [s.to_dict() for s in self.steps],
            "storyboard": self.storyboard.to_dict() if self.storyboard else None,
            "narration": self.narration.to_dict() if self.narration else None,
            "video": self.video.to_dict() if self.video else None,
            "cinematicMode": self.cinematic_mode,
            "selectedStepIndex": self.selected_step_index,
            "editingText": self.editing_text,
            "quotaWarning": self.quota_warning,
            "lastFallback": self.last_fallback.value if self.last_fallback else None,
            "savedStoryId": self.saved_story_id,
            "inFlight": sorted(self.in_flight),
        }


class StoryWizard:
    """Drives a WizardContext through the five wizard stages."""

    def __init__(
        self,
        outline_service: OutlineService,
        image_service: ImageGenerationService,
        tts_service: TTSService,
        composition_service: CompositionService,
        repository: Optional[StoryRepository] = None,
        progress: Optional[ProgressEstimator] = None,
        fallback_delay: float = 0.0,
        voice_id: Optional[str] = None,
    ):
        """Initialize the wizard.

        Args:
            outline_service: Outline and single-step adapter
            image_service: Storyboard adapter
            tts_service: Narration adapter
            composition_service: Video composition adapter
            repository: Where ``save`` persists the story; None skips persistence
            progress: Progress estimator ticked during provider calls
            fallback_delay: Seconds to wait before showing a fallback artifact
            voice_id: Narration voice; None uses the TTS service default
        """
        self.outline_service = outline_service
        self.image_service = image_service
        self.tts_service = tts_service
        self.composition_service = composition_service
        self.repository = repository
        self.progress = progress or ProgressEstimator()
        self.fallback_delay = fallback_delay
        self.voice_id = voice_id
        self.context = WizardContext()

    # =========================================================================
    # Helpers
    # =========================================================================

    @asynccontextmanager
    async def _operation(self, name: str) -> AsyncIterator[WizardContext]:
        """Mark ``name`` in flight and tick progress until every operation resolves.

        The estimator is shared by all operations of the wizard: it starts
        with the first outstanding operation and finishes with the last one.

        Raises:
            OperationInProgressError: If ``name`` or a conflicting operation is
                already outstanding
        """
        ctx = self.context
        if name in ctx.in_flight:
            raise OperationInProgressError(name)
        blocking = ctx.in_flight & _conflicts(name)
        if blocking:
            raise OperationInProgressError(sorted(blocking)[0])

        first = not ctx.in_flight
        ctx.in_flight.add(name)
        if first:
            self.progress.start()
        try:
            yield ctx
        finally:
            ctx.in_flight.discard(name)
            if not ctx.in_flight:
                self.progress.finish()

    async def _pause_before_fallback(self) -> None:
        if self.fallback_delay > 0:
            await asyncio.sleep(self.fallback_delay)

    def _check_step_index(self, index: int) -> None:
        if not 0 <= index < len(self.context.steps):
            raise InvalidTransitionError(
                f"Step index {index} is out of range (outline has {len(self.context.steps)} steps)"
            )

    def snapshot(self) -> dict:
        """Context plus current progress, for clients."""
        data = self.context.to_dict()
        data["progress"] = self.progress.value
        return data

    # =========================================================================
    # Stage navigation
    # =========================================================================

    def go_back(self) -> WizardStage:
        """Move one stage back, keeping every artifact."""
        ctx = self.context
        previous = _BACKWARD.get(ctx.stage)
        if previous is None:
            raise InvalidTransitionError(f"Cannot go back from the {ctx.stage.value} stage")
        logger.info(f"Wizard stage {ctx.stage.value} -> {previous.value}")
        ctx.stage = previous
        return previous

    def go_forward(self) -> WizardStage:
        """Move one stage forward, reusing existing artifacts.

        Raises:
            InvalidTransitionError: If the target stage's artifact is missing
        """
        ctx = self.context
        target = _FORWARD.get(ctx.stage)
        if target is None:
            raise InvalidTransitionError(f"Cannot go forward from the {ctx.stage.value} stage")
        if target == WizardStage.OUTLINE and not ctx.steps:
            raise InvalidTransitionError("Generate an outline first")
        if target in (WizardStage.STORYBOARD, WizardStage.COMPOSER) and ctx.storyboard is None:
            raise InvalidTransitionError("Generate a storyboard first")
        logger.info(f"Wizard stage {ctx.stage.value} -> {target.value}")
        ctx.stage = target
        return target

    # =========================================================================
    # Input and outline
    # =========================================================================

    def set_idea(self, idea: str) -> None:
        """Set the idea; it is frozen once an outline has been requested."""
        if self.context.outline_requested:
            raise InvalidTransitionError("The idea cannot change after an outline was requested")
        self.context.idea = idea

    async def generate_outline(self) -> list[SceneStep]:
        """Expand the idea into an outline and advance to the outline stage."""
        if not self.context.idea.strip():
            raise InvalidTransitionError("An idea is required to generate an outline")
        if self.context.stage not in (WizardStage.INPUT, WizardStage.OUTLINE):
            raise InvalidTransitionError(
                f"Cannot generate an outline from the {self.context.stage.value} stage"
            )

        async with self._operation("generate_outline") as ctx:
            ctx.outline_requested = True
            result = await self.outline_service.generate_outline(ctx.idea.strip())

            if isinstance(result, Success):
                ctx.steps = result.payload.steps
                ctx.classification = result.payload.classification
                ctx.last_fallback = None
            else:
                logger.warning(f"Outline unavailable ({result.reason.value}), using placeholder outline")
                await self._pause_before_fallback()
                ctx.steps = placeholder_outline(ctx.idea)
                ctx.last_fallback = result.reason

            # Artifacts built from a previous outline no longer match it
            ctx.storyboard = None
            ctx.narration = None
            ctx.video = None
            ctx.quota_warning = None
            ctx.selected_step_index = None
            ctx.editing_text = ""
            ctx.stage = WizardStage.OUTLINE

        return ctx.steps

    async def regenerate_step(self, index: int) -> SceneStep:
        """Replace steps[index] with a fresh version; other steps are untouched."""
        self._check_step_index(index)

        async with self._operation("regenerate_step") as ctx:
            current = ctx.steps[index]
            result = await self.outline_service.regenerate_step(
                ctx.idea, index + 1, list(ctx.steps)
            )

            if isinstance(result, Success):
                new_step = replace(result.payload, sequence_number=current.sequence_number)
                ctx.last_fallback = None
            else:
                logger.warning(
                    f"Step {index + 1} regeneration unavailable ({result.reason.value}), "
                    f"using stock description"
                )
                await self._pause_before_fallback()
                new_step = replace(current, description=replacement_description(index))
                ctx.last_fallback = result.reason

            steps = list(ctx.steps)
            steps[index] = new_step
            ctx.steps = steps
            if ctx.selected_step_index == index:
                ctx.editing_text = new_step.description

        return new_step

    def select_step(self, index: int) -> str:
        """Select a step for editing; any unsaved edit of another step is discarded."""
        self._check_step_index(index)
        ctx = self.context
        ctx.selected_step_index = index
        ctx.editing_text = ctx.steps[index].description
        return ctx.editing_text

    def update_edit_buffer(self, text: str) -> None:
        """Change the uncommitted text of the selected step."""
        if self.context.selected_step_index is None:
            raise InvalidTransitionError("Select a step before editing")
        self.context.editing_text = text

    def edit_step(self, index: int, text: str) -> SceneStep:
        """Overwrite the description of the selected step (no provider call)."""
        ctx = self.context
        self._check_step_index(index)
        if ctx.selected_step_index != index:
            raise InvalidTransitionError(f"Step {index + 1} is not selected for editing")

        steps = list(ctx.steps)
        steps[index] = replace(steps[index], description=text)
        ctx.steps = steps
        ctx.editing_text = text
        return steps[index]

    def commit_edit(self) -> SceneStep:
        """Save the editing buffer into the selected step."""
        index = self.context.selected_step_index
        if index is None:
            raise InvalidTransitionError("No step is selected")
        return self.edit_step(index, self.context.editing_text)

    # =========================================================================
    # Storyboard
    # =========================================================================

    async def _request_storyboard(self, ctx: WizardContext, regenerating: bool) -> StoryboardArtifact:
        result = await self.image_service.generate_storyboard(list(ctx.steps), ctx.classification)

        if isinstance(result, Success):
            ctx.quota_warning = None
            ctx.last_fallback = None
            return result.payload

        await self._pause_before_fallback()
        ctx.last_fallback = result.reason
        if result.reason == FallbackReason.QUOTA_EXCEEDED:
            ctx.quota_warning = REGENERATE_QUOTA_WARNING if regenerating else QUOTA_WARNING
        elif not regenerating:
            ctx.quota_warning = None
        logger.warning(f"Storyboard unavailable ({result.reason.value}), using placeholder")

        return result.placeholder or StoryboardArtifact(
            image=storyboard_placeholder_url(ctx.classification, len(ctx.steps)),
            is_placeholder=True,
            quota_exceeded=result.reason == FallbackReason.QUOTA_EXCEEDED,
            message=STORYBOARD_FAILED_MESSAGE,
        )

    async def generate_storyboard(self) -> StoryboardArtifact:
        """Generate the storyboard page and advance to the storyboard stage."""
        if self.context.stage not in (WizardStage.OUTLINE, WizardStage.STORYBOARD):
            raise InvalidTransitionError(
                f"Cannot generate a storyboard from the {self.context.stage.value} stage"
            )
        if not self.context.steps:
            raise InvalidTransitionError("Generate an outline first")

        async with self._operation("generate_storyboard") as ctx:
            ctx.storyboard = await self._request_storyboard(ctx, regenerating=False)
            ctx.stage = WizardStage.STORYBOARD

        return ctx.storyboard

    async def regenerate_storyboard(self) -> StoryboardArtifact:
        """Generate the storyboard again, replacing the current one in place."""
        if self.context.storyboard is None:
            raise InvalidTransitionError("There is no storyboard to regenerate")

        async with self._operation("regenerate_storyboard") as ctx:
            ctx.storyboard = await self._request_storyboard(ctx, regenerating=True)

        return ctx.storyboard

    # =========================================================================
    # Composer
    # =========================================================================

    async def generate_narration(self) -> NarrationArtifact:
        """Produce narration audio, or decide on local synthesis."""
        if not self.context.steps:
            raise InvalidTransitionError("Generate an outline first")

        async with self._operation("generate_narration") as ctx:
            result = await self.tts_service.generate_narration(
                narration_text(ctx.steps), self.voice_id
            )
            if isinstance(result, Success):
                ctx.narration = result.payload
            else:
                logger.warning(f"Narration falls back to local synthesis ({result.reason.value})")
                ctx.narration = result.placeholder or NarrationArtifact(
                    use_local_synthesis=True,
                    duration=NOMINAL_DURATION_SECONDS,
                    message=LOCAL_SYNTHESIS_MESSAGE,
                )

        return ctx.narration

    def toggle_cinematic_mode(self) -> bool:
        """Flip between cinematic and slideshow composition."""
        ctx = self.context
        if ctx.stage != WizardStage.COMPOSER:
            raise InvalidTransitionError("Cinematic mode can only be changed in the composer")
        ctx.cinematic_mode = not ctx.cinematic_mode
        return ctx.cinematic_mode

    async def compose_video(self) -> VideoArtifact:
        """Compose the video from the storyboard and the narration decision."""
        ctx = self.context
        if ctx.storyboard is None:
            raise InvalidTransitionError("A storyboard is required to compose a video")
        if not ctx.narration_decided:
            raise InvalidTransitionError("Generate narration before composing a video")

        async with self._operation("compose_video") as ctx:
            ctx.video = await self.composition_service.compose(
                storyboard_image=ctx.storyboard.image,
                audio_url=ctx.narration.audio_url,
                steps=list(ctx.steps),
                cinematic_mode=ctx.cinematic_mode,
            )

        return ctx.video

    # =========================================================================
    # Completion
    # =========================================================================

    async def save(self) -> Optional[str]:
        """Finish the story and advance to the complete stage.

        Allowed from the composer stage once a video exists, or from the
        storyboard stage once a storyboard exists.

        Returns:
            The story ID from the repository, or None without a repository
        """
        ctx = self.context
        from_composer = ctx.stage == WizardStage.COMPOSER and ctx.video is not None
        from_storyboard = ctx.stage == WizardStage.STORYBOARD and ctx.storyboard is not None
        if not (from_composer or from_storyboard):
            raise InvalidTransitionError(f"Nothing to save from the {ctx.stage.value} stage")

        async with self._operation("save") as ctx:
            if self.repository is not None:
                ctx.saved_story_id = await self.repository.save(ctx.to_story())
            ctx.stage = WizardStage.COMPLETE

        return ctx.saved_story_id

    def reset(self) -> None:
        """Discard the story and return to the input stage."""
        logger.info("Wizard reset")
        self.context = WizardContext()
        self.progress.value = 0
