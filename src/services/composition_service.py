"""Video composition service - combines storyboard and narration into a video.

Composition is simulated: no frames are rendered. The service validates its
inputs, waits a fixed latency standing in for encoding time and returns a
placeholder video reference. It is the integration point for a real
encoder (Veo for cinematic mode, FFmpeg for slideshows).
"""

import asyncio
import logging
from typing import Optional

from models.story import SceneStep, VideoArtifact, VideoMode

logger = logging.getLogger(__name__)

DEFAULT_SECONDS_PER_SCENE = 5
DEFAULT_LATENCY_SECONDS = 5.0
PLACEHOLDER_VIDEO_URL = "/placeholder-video.mp4"


class CompositionRejectedError(Exception):
    """Raised when a composition request is missing required input."""

    pass


class CompositionService:
    """Simulated video composer."""

    def __init__(
        self,
        seconds_per_scene: int = DEFAULT_SECONDS_PER_SCENE,
        latency_seconds: float = DEFAULT_LATENCY_SECONDS,
    ):
        """Initialize the composition service.

        Args:
            seconds_per_scene: Screen time given to each scene
            latency_seconds: Simulated encoding time before the result is returned
        """
        self.seconds_per_scene = seconds_per_scene
        self.latency_seconds = latency_seconds

    def duration_for(self, scene_count: int) -> int:
        """Video length for a given number of scenes."""
        return scene_count * self.seconds_per_scene

    async def compose(
        self,
        storyboard_image: Optional[str],
        audio_url: Optional[str],
        steps: list[SceneStep],
        cinematic_mode: bool = False,
    ) -> VideoArtifact:
        """Compose a video from the storyboard and optional narration.

        Args:
            storyboard_image: Storyboard reference (data URI or URL); required
            audio_url: Narration audio reference, None when narrated locally
            steps: Ordered scene steps; their count sets the duration
            cinematic_mode: Animated cinematic video instead of a slideshow

        Returns:
            VideoArtifact with a placeholder video reference

        Raises:
            CompositionRejectedError: If the storyboard is missing; raised
                before the simulated latency
        """
        if not storyboard_image or not storyboard_image.strip():
            raise CompositionRejectedError("Storyboard image is required")

        mode = VideoMode.CINEMATIC if cinematic_mode else VideoMode.SLIDESHOW
        logger.info(
            f"Composing video in {'Cinematic (Veo)' if cinematic_mode else 'Slideshow'} mode "
            f"({len(steps)} scenes, narration={'audio' if audio_url else 'browser'})"
        )

        if self.latency_seconds > 0:
            await asyncio.sleep(self.latency_seconds)

        return VideoArtifact(
            video_url=PLACEHOLDER_VIDEO_URL,
            duration=self.duration_for(len(steps)),
            thumbnail_url=storyboard_image,
            mode=mode,
            simulated=True,
            message=(
                "Cinematic video generation with Veo is simulated"
                if cinematic_mode
                else "Slideshow video generated successfully"
            ),
        )
