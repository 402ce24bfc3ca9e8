"""Image Generation Service - single-page storyboards via Imagen on Vertex AI."""

import logging
import time

import httpx

from models.results import AdapterResult, Fallback, FallbackReason, Success
from models.story import (
    ContentClassification,
    SceneStep,
    StoryboardArtifact,
    StoryMode,
)
from services.placeholders import (
    QUOTA_EXCEEDED_MESSAGE,
    STORYBOARD_FAILED_MESSAGE,
    storyboard_placeholder_url,
)
from services.prompts import (
    AD_PHOTO_STYLE_GUIDE,
    AD_STYLE_GUIDE,
    NARRATIVE_PHOTO_STYLE_GUIDE,
    NARRATIVE_STYLE_GUIDE,
    PROMPT_VERSIONS,
    REAL_PERSON_DIRECTIVE,
    STORYBOARD_PAGE,
)

logger = logging.getLogger(__name__)

IMAGEN_MODEL = "imagen-3.0-generate-001"
STORYBOARD_ASPECT_RATIO = "3:4"


class ImageGenerationServiceError(Exception):
    """Error from image generation service."""

    pass


class MalformedResponseError(ImageGenerationServiceError):
    """Imagen answered with success but without image data."""

    pass


def build_storyboard_prompt(
    steps: list[SceneStep],
    classification: ContentClassification,
    story_mode: StoryMode = StoryMode.GENERIC,
) -> str:
    """Build the combined prompt for one page holding every scene as a panel.

    Args:
        steps: Ordered scene steps, one panel each
        classification: Selects the advertisement or narrative style branch
        story_mode: Character focus switches to photorealistic styles

    Returns:
        The full Imagen prompt
    """
    is_ad = classification == ContentClassification.ADVERTISEMENT
    character_focus = story_mode == StoryMode.CHARACTER_FOCUS

    if character_focus:
        style_guide = AD_PHOTO_STYLE_GUIDE if is_ad else NARRATIVE_PHOTO_STYLE_GUIDE
        layout_look = (
            "Professional, polished commercial photography look"
            if is_ad
            else "Cinematic film still aesthetic"
        )
        artwork_look = "Photorealistic imagery, NO cartoon, NO illustration"
        extra_rules = REAL_PERSON_DIRECTIVE + "\n"
    else:
        style_guide = AD_STYLE_GUIDE if is_ad else NARRATIVE_STYLE_GUIDE
        layout_look = "Professional, polished commercial look" if is_ad else "Comic book page aesthetic"
        artwork_look = (
            "Modern, sleek, gradient-rich illustrations"
            if is_ad
            else "Bold comic-style artwork with vibrant colors"
        )
        extra_rules = ""

    panels = []
    for index, step in enumerate(steps):
        panel = f"Panel {index + 1}: {step.title}\n{step.description}"
        if character_focus and step.character_focus:
            panel += f"\nFocus on: {step.character_focus} (prominent in the foreground)"
        panels.append(panel)

    return STORYBOARD_PAGE.format(
        panel_count=len(steps),
        style_guide=style_guide,
        panels="\n\n".join(panels),
        layout_look=layout_look,
        artwork_look=artwork_look,
        extra_rules=extra_rules,
    )


class ImageGenerationService:
    """Storyboard generation through the Imagen predict endpoint."""

    def __init__(
        self,
        api_key: str = "",
        project_id: str = "your-project-id",
        location: str = "us-central1",
        story_mode: StoryMode = StoryMode.GENERIC,
    ):
        """Initialize the image generation service.

        Args:
            api_key: Imagen API key. Empty means storyboard generation is not configured.
            project_id: Google Cloud project hosting the Imagen model
            location: Google Cloud region
            story_mode: Generic or character-focused storyboard styling
        """
        self.api_key = api_key
        self.project_id = project_id
        self.location = location
        self.story_mode = StoryMode(story_mode)
        # Long timeout for image generation (can take a while)
        self.client = httpx.AsyncClient(timeout=120.0)

    def is_configured(self) -> bool:
        """Check if Imagen API key is configured."""
        return bool(self.api_key)

    @property
    def predict_url(self) -> str:
        return (
            f"https://{self.location}-aiplatform.googleapis.com/v1/projects/{self.project_id}"
            f"/locations/{self.location}/publishers/google/models/{IMAGEN_MODEL}:predict"
        )

    def _placeholder(
        self,
        steps: list[SceneStep],
        classification: ContentClassification,
        quota_exceeded: bool,
        message: str,
    ) -> StoryboardArtifact:
        return StoryboardArtifact(
            image=storyboard_placeholder_url(classification, len(steps)),
            is_placeholder=True,
            quota_exceeded=quota_exceeded,
            message=message,
        )

    @staticmethod
    def _extract_image(result_data: dict) -> str:
        predictions = result_data.get("predictions") if isinstance(result_data, dict) else None
        first = predictions[0] if isinstance(predictions, list) and predictions else {}
        image_data = first.get("bytesBase64Encoded") if isinstance(first, dict) else None
        if not image_data:
            raise MalformedResponseError("No image data in Imagen response")
        mime_type = first.get("mimeType", "image/png")
        return f"data:{mime_type};base64,{image_data}"

    async def generate_storyboard(
        self,
        steps: list[SceneStep],
        classification: ContentClassification,
    ) -> AdapterResult[StoryboardArtifact]:
        """Generate one storyboard page with every scene as a panel.

        Args:
            steps: Ordered scene steps
            classification: Content classification selecting the style branch

        Returns:
            Success(StoryboardArtifact) with an inline image, or Fallback
            carrying a placeholder artifact. Quota exhaustion is flagged on
            the placeholder rather than raised.
        """
        label = "advertisement" if classification == ContentClassification.ADVERTISEMENT else "comic"

        if not self.is_configured():
            logger.error("IMAGEN_API_KEY not found in environment variables")
            return Fallback(
                FallbackReason.NOT_CONFIGURED,
                placeholder=self._placeholder(steps, classification, False, STORYBOARD_FAILED_MESSAGE),
                message="Imagen API key not configured",
            )

        prompt = build_storyboard_prompt(steps, classification, self.story_mode)
        payload = {
            "instances": [{"prompt": prompt}],
            "parameters": {
                "sampleCount": 1,
                "aspectRatio": STORYBOARD_ASPECT_RATIO,
                "safetyFilterLevel": "block_some",
                "personGeneration": "allow_adult",
            },
        }

        logger.info(
            f"Generating {label}-style storyboard with {len(steps)} panels "
            f"(prompt {PROMPT_VERSIONS['storyboard_page']})"
        )
        start_time = time.time()

        try:
            response = await self.client.post(
                self.predict_url,
                params={"key": self.api_key},
                headers={"Content-Type": "application/json"},
                json=payload,
            )

            if response.status_code == 429:
                logger.error("Imagen API quota exceeded")
                return Fallback(
                    FallbackReason.QUOTA_EXCEEDED,
                    placeholder=self._placeholder(steps, classification, True, QUOTA_EXCEEDED_MESSAGE),
                    message=QUOTA_EXCEEDED_MESSAGE,
                )

            response.raise_for_status()
            try:
                result_data = response.json()
            except ValueError as e:
                raise MalformedResponseError(f"Imagen response is not JSON: {e}")
            image = self._extract_image(result_data)

        except MalformedResponseError as e:
            logger.warning(f"Storyboard generation fell back: {e}")
            return Fallback(
                FallbackReason.MALFORMED_RESPONSE,
                placeholder=self._placeholder(steps, classification, False, STORYBOARD_FAILED_MESSAGE),
                message=str(e),
            )
        except httpx.HTTPStatusError as e:
            error_detail = ""
            try:
                error_detail = e.response.json().get("error", {}).get("message", "")
            except Exception:
                error_detail = e.response.text
            error_detail = error_detail or str(e)
            logger.error(f"Imagen API error: {e.response.status_code} {error_detail}")
            return self._error_fallback(steps, classification, FallbackReason.PROVIDER_ERROR, error_detail)
        except httpx.HTTPError as e:
            logger.error(f"Error generating storyboard: {e}")
            return self._error_fallback(steps, classification, FallbackReason.NETWORK_ERROR, str(e))

        generation_time_ms = int((time.time() - start_time) * 1000)
        logger.info(f"Generated {label}-style storyboard in {generation_time_ms}ms")

        return Success(
            StoryboardArtifact(
                image=image,
                is_placeholder=False,
                quota_exceeded=False,
                message=f"{label.capitalize()} storyboard generated successfully",
            )
        )

    def _error_fallback(
        self,
        steps: list[SceneStep],
        classification: ContentClassification,
        reason: FallbackReason,
        detail: str,
    ) -> Fallback:
        """Placeholder fallback; quota wording in the error still counts as quota."""
        lowered = detail.lower()
        if "429" in lowered or "quota" in lowered:
            return Fallback(
                FallbackReason.QUOTA_EXCEEDED,
                placeholder=self._placeholder(steps, classification, True, QUOTA_EXCEEDED_MESSAGE),
                message=QUOTA_EXCEEDED_MESSAGE,
            )
        return Fallback(
            reason,
            placeholder=self._placeholder(steps, classification, False, STORYBOARD_FAILED_MESSAGE),
            message=detail,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()
