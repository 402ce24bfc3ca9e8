"""Unit tests for data models."""

import pytest

from models.results import Fallback, FallbackReason, Success
from models.story import (
    ContentClassification,
    NarrationArtifact,
    SceneStep,
    Story,
    VideoArtifact,
    VideoMode,
    renumber_steps,
)


@pytest.mark.unit
class TestContentClassification:
    """Tests for lenient content type parsing."""

    @pytest.mark.parametrize("value", ["ad", "AD", " advertisement ", "commercial"])
    def test_parses_advertisement(self, value):
        assert ContentClassification.parse(value) == ContentClassification.ADVERTISEMENT

    @pytest.mark.parametrize("value", ["story", "narrative", "", None, "poem"])
    def test_anything_else_is_narrative(self, value):
        assert ContentClassification.parse(value) == ContentClassification.NARRATIVE

    def test_wire_values(self):
        assert ContentClassification.ADVERTISEMENT.value == "ad"
        assert ContentClassification.NARRATIVE.value == "story"


@pytest.mark.unit
class TestSceneStep:
    """Tests for SceneStep."""

    def test_to_dict_uses_wire_keys(self):
        step = SceneStep(sequence_number=2, title="Launch", description="Lift off", character_focus="Robot")
        assert step.to_dict() == {
            "number": 2,
            "title": "Launch",
            "description": "Lift off",
            "characterFocus": "Robot",
        }

    def test_to_dict_omits_empty_character_focus(self):
        step = SceneStep(sequence_number=1, title="A", description="B")
        assert "characterFocus" not in step.to_dict()

    def test_from_dict_accepts_wire_keys(self):
        step = SceneStep.from_dict({"number": "3", "title": " T ", "description": "D", "characterFocus": "Hero"})
        assert step.sequence_number == 3
        assert step.title == "T"
        assert step.character_focus == "Hero"

    def test_from_dict_falls_back_to_default_number(self):
        step = SceneStep.from_dict({"number": "abc", "title": "T", "description": "D"}, default_number=4)
        assert step.sequence_number == 4

        step = SceneStep.from_dict({"number": 0, "description": "D"}, default_number=2)
        assert step.sequence_number == 2

    def test_renumber_steps_is_contiguous(self):
        steps = [
            SceneStep(sequence_number=7, title="a", description="x"),
            SceneStep(sequence_number=7, title="b", description="y"),
            SceneStep(sequence_number=1, title="c", description="z"),
        ]
        renumbered = renumber_steps(steps)
        assert [s.sequence_number for s in renumbered] == [1, 2, 3]
        assert [s.title for s in renumbered] == ["a", "b", "c"]
        # Originals untouched
        assert steps[0].sequence_number == 7


@pytest.mark.unit
class TestArtifacts:
    """Tests for storyboard, narration and video artifacts."""

    def test_narration_local_synthesis_has_no_audio(self):
        narration = NarrationArtifact(audio_url="data:audio/mpeg;base64,AAA", use_local_synthesis=True)
        assert narration.audio_url is None
        assert narration.use_local_synthesis is True

    def test_narration_without_audio_means_local_synthesis(self):
        narration = NarrationArtifact()
        assert narration.use_local_synthesis is True
        assert narration.to_dict()["useBrowserTTS"] is True
        assert narration.to_dict()["audioUrl"] is None

    def test_video_to_dict(self):
        video = VideoArtifact(
            video_url="/placeholder-video.mp4",
            duration=25,
            thumbnail_url="data:image/png;base64,AAA",
            mode=VideoMode.SLIDESHOW,
        )
        data = video.to_dict()
        assert data["cinematicMode"] is False
        assert data["mode"] == "slideshow"
        assert data["simulated"] is True
        assert data["duration"] == 25

    def test_story_to_dict_without_artifacts(self, sample_steps):
        story = Story(idea="idea", classification=ContentClassification.NARRATIVE, steps=sample_steps)
        data = story.to_dict()
        assert data["contentType"] == "story"
        assert len(data["steps"]) == 5
        assert data["storyboard"] is None
        assert data["video"] is None


@pytest.mark.unit
class TestAdapterResults:
    """Tests for tagged adapter results."""

    def test_success_is_ok(self):
        assert Success("payload").ok is True

    def test_fallback_is_not_ok(self):
        fallback = Fallback(FallbackReason.QUOTA_EXCEEDED, message="quota")
        assert fallback.ok is False
        assert fallback.placeholder is None
        assert fallback.reason.value == "quota_exceeded"
