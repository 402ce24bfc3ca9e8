"""Data models for Storyreel."""
from .results import AdapterResult, Fallback, FallbackReason, Success
from .story import (
    MIN_SCENE_COUNT,
    ContentClassification,
    NarrationArtifact,
    Outline,
    SceneStep,
    Story,
    StoryboardArtifact,
    StoryMode,
    VideoArtifact,
    VideoMode,
    WizardStage,
    renumber_steps,
)

__all__ = [
    "AdapterResult",
    "Fallback",
    "FallbackReason",
    "Success",
    "MIN_SCENE_COUNT",
    "ContentClassification",
    "StoryMode",
    "VideoMode",
    "WizardStage",
    "SceneStep",
    "renumber_steps",
    "Outline",
    "StoryboardArtifact",
    "NarrationArtifact",
    "VideoArtifact",
    "Story",
]
