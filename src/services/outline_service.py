"""Outline generation service - Gemini story outlines and single-step rewrites."""

import asyncio
import json
import logging
from typing import Optional

from google.genai import Client, errors, types

from models.results import AdapterResult, Fallback, FallbackReason, Success
from models.story import (
    MIN_SCENE_COUNT,
    ContentClassification,
    Outline,
    SceneStep,
    StoryMode,
    renumber_steps,
)
from services.placeholders import pad_steps
from services.prompts import (
    OUTLINE_GENERATOR,
    OUTLINE_GENERATOR_CHARACTER,
    PROMPT_VERSIONS,
    STEP_CHARACTER_RULE,
    STEP_REGENERATOR,
    strip_markdown_code_blocks,
)

logger = logging.getLogger(__name__)


class MalformedOutlineError(Exception):
    """Provider reply could not be turned into scene steps."""

    pass


class OutlineService:
    """Generates story outlines and regenerates single steps using Gemini."""

    def __init__(
        self,
        api_key: str,
        model_name: str = "gemini-2.0-flash",
        story_mode: StoryMode = StoryMode.GENERIC,
        client: Optional[Client] = None,
    ):
        """Initialize the outline service.

        Args:
            api_key: Gemini API key. Empty means outline generation is not configured.
            model_name: Gemini model to use
            story_mode: Generic or character-focused storytelling
            client: Pre-built google-genai client (tests inject a mock)
        """
        self.api_key = api_key
        self.model_name = model_name
        self.story_mode = StoryMode(story_mode)
        self.client = client
        if self.client is None and api_key:
            self.client = Client(api_key=api_key)

        logger.info(
            f"Initialized outline service with model: {model_name} (mode={self.story_mode.value})"
        )

    def is_configured(self) -> bool:
        """Check if a Gemini API key is configured."""
        return bool(self.api_key) and self.client is not None

    @property
    def character_focus(self) -> bool:
        return self.story_mode == StoryMode.CHARACTER_FOCUS

    # =========================================================================
    # Prompt construction
    # =========================================================================

    def build_outline_prompt(self, idea: str) -> str:
        """Build the outline instruction embedding the idea."""
        template = OUTLINE_GENERATOR_CHARACTER if self.character_focus else OUTLINE_GENERATOR
        return template.format(idea=idea, min_scenes=MIN_SCENE_COUNT)

    def build_regenerate_prompt(
        self,
        idea: str,
        step_number: int,
        current_steps: list[SceneStep],
    ) -> str:
        """Build the single-step rewrite instruction with the full outline as context."""
        outline_lines = []
        for step in current_steps:
            line = f"Step {step.sequence_number}: {step.title} - {step.description}"
            if step.character_focus:
                line += f" (focus: {step.character_focus})"
            outline_lines.append(line)

        return STEP_REGENERATOR.format(
            idea=idea,
            step_number=step_number,
            outline="\n".join(outline_lines),
            character_rule=STEP_CHARACTER_RULE if self.character_focus else "",
            character_field=', "characterFocus": "..."' if self.character_focus else "",
        )

    # =========================================================================
    # Response parsing
    # =========================================================================

    @staticmethod
    def _load_json(text: Optional[str]) -> dict:
        if not text:
            raise MalformedOutlineError("No content in Gemini response")
        try:
            data = json.loads(strip_markdown_code_blocks(text))
        except json.JSONDecodeError as e:
            raise MalformedOutlineError(f"Gemini reply is not valid JSON: {e}")
        if not isinstance(data, dict):
            raise MalformedOutlineError("Gemini reply is not a JSON object")
        return data

    def parse_outline(self, text: Optional[str]) -> Outline:
        """Parse a Gemini outline reply.

        Guarantees at least MIN_SCENE_COUNT steps numbered 1..N: short
        outlines are padded with generic filler steps after the real ones.

        Raises:
            MalformedOutlineError: If the reply has no usable steps list
        """
        data = self._load_json(text)
        raw_steps = data.get("steps")
        if not isinstance(raw_steps, list):
            raise MalformedOutlineError("Gemini reply has no steps list")

        steps = [
            SceneStep.from_dict(raw, default_number=index + 1)
            for index, raw in enumerate(raw_steps)
            if isinstance(raw, dict)
        ]
        if len(steps) < MIN_SCENE_COUNT:
            logger.warning(
                f"Outline has {len(steps)} steps, padding to {MIN_SCENE_COUNT}"
            )

        return Outline(
            classification=ContentClassification.parse(data.get("contentType")),
            steps=pad_steps(renumber_steps(steps)),
        )

    def parse_step(self, text: Optional[str], step_number: int) -> SceneStep:
        """Parse a Gemini single-step reply; the step keeps its position."""
        data = self._load_json(text)
        raw_step = data.get("step", data)
        if not isinstance(raw_step, dict) or not raw_step.get("description"):
            raise MalformedOutlineError("Gemini reply has no step description")

        step = SceneStep.from_dict(raw_step, default_number=step_number)
        step.sequence_number = step_number
        return step

    # =========================================================================
    # Provider calls
    # =========================================================================

    async def _generate(self, prompt: str) -> Optional[str]:
        # The SDK call is blocking; keep it off the event loop
        response = await asyncio.to_thread(
            self.client.models.generate_content,
            model=self.model_name,
            contents=prompt,
            config=types.GenerateContentConfig(
                response_mime_type="application/json",
                temperature=0.9,
                top_k=40,
                top_p=0.95,
                max_output_tokens=2048,
            ),
        )
        return response.text

    @staticmethod
    def _fallback_for_error(error: Exception) -> Fallback:
        if isinstance(error, MalformedOutlineError):
            return Fallback(FallbackReason.MALFORMED_RESPONSE, message=str(error))
        if isinstance(error, errors.APIError):
            code = getattr(error, "code", None)
            if code in (401, 403):
                return Fallback(FallbackReason.UNAUTHORIZED, message=str(error))
            if code == 429:
                return Fallback(FallbackReason.QUOTA_EXCEEDED, message=str(error))
            return Fallback(FallbackReason.PROVIDER_ERROR, message=str(error))
        return Fallback(FallbackReason.NETWORK_ERROR, message=str(error))

    @staticmethod
    def _log_fallback(action: str, fallback: Fallback, error: Exception) -> None:
        if fallback.reason == FallbackReason.QUOTA_EXCEEDED:
            logger.error(f"Gemini API quota exceeded during {action}: {error}")
        else:
            logger.warning(f"{action.capitalize()} fell back ({fallback.reason.value}): {error}")

    async def generate_outline(self, idea: str) -> AdapterResult[Outline]:
        """Classify an idea and expand it into scene steps.

        Args:
            idea: The user's free-form story idea

        Returns:
            Success(Outline) or Fallback without a placeholder; the caller
            supplies its own placeholder outline.
        """
        if not self.is_configured():
            logger.warning("GEMINI_API_KEY not configured, outline generation unavailable")
            return Fallback(
                FallbackReason.NOT_CONFIGURED,
                message="GEMINI_API_KEY not configured. Set it in your .env file.",
            )

        version_key = "generate_outline_character" if self.character_focus else "generate_outline"
        logger.info(
            f"Generating outline with {self.model_name} (prompt {PROMPT_VERSIONS[version_key]})"
        )

        try:
            text = await self._generate(self.build_outline_prompt(idea))
            outline = self.parse_outline(text)
        except Exception as e:
            fallback = self._fallback_for_error(e)
            self._log_fallback("outline generation", fallback, e)
            return fallback

        logger.info(
            f"Generated {outline.classification.value} outline with {len(outline.steps)} steps"
        )
        return Success(outline)

    async def regenerate_step(
        self,
        idea: str,
        step_number: int,
        current_steps: list[SceneStep],
    ) -> AdapterResult[SceneStep]:
        """Regenerate exactly one step in the context of the whole outline.

        Args:
            idea: The original idea
            step_number: 1-based number of the step to replace
            current_steps: The full current outline

        Returns:
            Success(SceneStep) numbered ``step_number``, or Fallback
        """
        if not self.is_configured():
            logger.warning("GEMINI_API_KEY not configured, step regeneration unavailable")
            return Fallback(
                FallbackReason.NOT_CONFIGURED,
                message="GEMINI_API_KEY not configured. Set it in your .env file.",
            )

        logger.info(
            f"Regenerating step {step_number} (prompt {PROMPT_VERSIONS['regenerate_step']})"
        )

        try:
            prompt = self.build_regenerate_prompt(idea, step_number, current_steps)
            text = await self._generate(prompt)
            step = self.parse_step(text, step_number)
        except Exception as e:
            fallback = self._fallback_for_error(e)
            self._log_fallback(f"step {step_number} regeneration", fallback, e)
            return fallback

        return Success(step)
