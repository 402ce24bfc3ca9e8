"""Models for the idea-to-video story wizard."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

MIN_SCENE_COUNT = 5


class ContentClassification(str, Enum):
    """Content type detected from the idea; drives the storyboard style."""

    ADVERTISEMENT = "ad"
    NARRATIVE = "story"

    @classmethod
    def parse(cls, value: Optional[str]) -> "ContentClassification":
        """Lenient parse of a provider or client supplied content type."""
        if value and value.strip().lower() in ("ad", "advertisement", "advert", "commercial"):
            return cls.ADVERTISEMENT
        return cls.NARRATIVE


class StoryMode(str, Enum):
    """Storytelling variant used for outline and storyboard prompts."""

    GENERIC = "generic"
    CHARACTER_FOCUS = "character_focus"


class VideoMode(str, Enum):
    """How the composed video animates the storyboard."""

    CINEMATIC = "cinematic"
    SLIDESHOW = "slideshow"


class WizardStage(str, Enum):
    """Stages of the story wizard."""

    INPUT = "input"
    OUTLINE = "outline"
    STORYBOARD = "storyboard"
    COMPOSER = "composer"
    COMPLETE = "complete"


@dataclass
class SceneStep:
    """A single scene of the outline."""

    sequence_number: int
    title: str
    description: str
    character_focus: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        result = {
            "number": self.sequence_number,
            "title": self.title,
            "description": self.description,
        }
        if self.character_focus:
            result["characterFocus"] = self.character_focus
        return result

    @classmethod
    def from_dict(cls, data: dict, default_number: int = 1) -> "SceneStep":
        """Build a step from provider or client JSON.

        Accepts both the wire keys (``number``, ``characterFocus``) and the
        snake_case field names.
        """
        number = data.get("number", data.get("sequence_number", default_number))
        try:
            number = int(number)
        except (TypeError, ValueError):
            number = default_number
        focus = data.get("characterFocus", data.get("character_focus"))
        return cls(
            sequence_number=number if number >= 1 else default_number,
            title=str(data.get("title", "")).strip(),
            description=str(data.get("description", "")).strip(),
            character_focus=str(focus).strip() if focus else None,
        )


def renumber_steps(steps: list[SceneStep]) -> list[SceneStep]:
    """Return the steps numbered contiguously by position, starting at 1."""
    return [
        SceneStep(
            sequence_number=index + 1,
            title=step.title,
            description=step.description,
            character_focus=step.character_focus,
        )
        for index, step in enumerate(steps)
    ]


@dataclass
class Outline:
    """Result of outline generation: classification plus ordered scenes."""

    classification: ContentClassification
    steps: list[SceneStep]

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "contentType": self.classification.value,
            "steps": [s.to_dict() for s in self.steps],
        }


@dataclass
class StoryboardArtifact:
    """The single composed storyboard page holding every scene as a panel."""

    image: str
    is_placeholder: bool = False
    quota_exceeded: bool = False
    message: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "image": self.image,
            "quotaExceeded": self.quota_exceeded,
            "isPlaceholder": self.is_placeholder,
            "message": self.message,
        }


@dataclass
class NarrationArtifact:
    """Synthesized narration audio, or a marker asking for local synthesis.

    Exactly one of the two representations is active: when
    ``use_local_synthesis`` is set there is no ``audio_url``.
    """

    audio_url: Optional[str] = None
    use_local_synthesis: bool = False
    duration: float = 30.0
    message: Optional[str] = None

    def __post_init__(self):
        if self.use_local_synthesis:
            self.audio_url = None
        elif not self.audio_url:
            self.use_local_synthesis = True

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "audioUrl": self.audio_url,
            "duration": self.duration,
            "useBrowserTTS": self.use_local_synthesis,
            "message": self.message,
        }


@dataclass
class VideoArtifact:
    """Reference to a composed video plus its metadata."""

    video_url: str
    duration: int
    thumbnail_url: str
    mode: VideoMode
    simulated: bool = True
    message: Optional[str] = None

    @property
    def cinematic(self) -> bool:
        return self.mode == VideoMode.CINEMATIC

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "videoUrl": self.video_url,
            "duration": self.duration,
            "thumbnailUrl": self.thumbnail_url,
            "cinematicMode": self.cinematic,
            "mode": self.mode.value,
            "simulated": self.simulated,
            "message": self.message,
        }


@dataclass
class Story:
    """Snapshot of an in-progress story, as handed to persistence."""

    idea: str
    classification: ContentClassification
    steps: list[SceneStep] = field(default_factory=list)
    storyboard: Optional[StoryboardArtifact] = None
    narration: Optional[NarrationArtifact] = None
    video: Optional[VideoArtifact] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "idea": self.idea,
            "contentType": self.classification.value,
            "steps": [s.to_dict() for s in self.steps],
            "storyboard": self.storyboard.to_dict() if self.storyboard else None,
            "narration": self.narration.to_dict() if self.narration else None,
            "video": self.video.to_dict() if self.video else None,
        }
