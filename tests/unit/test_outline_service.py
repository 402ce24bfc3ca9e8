"""Unit tests for OutlineService (Gemini outline and step regeneration)."""

import json
from unittest.mock import Mock

import pytest
from google.genai import errors

from models.results import Fallback, FallbackReason, Success
from models.story import ContentClassification, StoryMode
from services.outline_service import MalformedOutlineError, OutlineService
from services.placeholders import FILLER_DESCRIPTION


def _api_error(code: int, status: str) -> errors.APIError:
    return errors.APIError(code, {"error": {"code": code, "message": status.lower(), "status": status}})


@pytest.mark.unit
class TestParsing:
    """Reply parsing without any provider call."""

    def test_parse_outline_reads_classification(self, outline_service, outline_reply):
        outline = outline_service.parse_outline(outline_reply(content_type="ad"))
        assert outline.classification == ContentClassification.ADVERTISEMENT
        assert [s.sequence_number for s in outline.steps] == [1, 2, 3, 4, 5]

    def test_parse_outline_strips_code_fences(self, outline_service, outline_reply):
        fenced = f"```json\n{outline_reply()}\n```"
        outline = outline_service.parse_outline(fenced)
        assert len(outline.steps) == 5

    def test_short_outline_is_padded_after_real_steps(self, outline_service, outline_reply):
        outline = outline_service.parse_outline(outline_reply(step_count=3))

        assert len(outline.steps) == 5
        assert outline.steps[0].description == "Scene 1 description"
        assert outline.steps[2].description == "Scene 3 description"
        assert outline.steps[3].title == "Scene 4"
        assert outline.steps[4].description == FILLER_DESCRIPTION

    def test_long_outline_is_kept(self, outline_service, outline_reply):
        outline = outline_service.parse_outline(outline_reply(step_count=8))
        assert [s.sequence_number for s in outline.steps] == list(range(1, 9))

    def test_provider_numbers_are_replaced_by_position(self, outline_service):
        reply = json.dumps(
            {
                "contentType": "story",
                "steps": [{"number": 9, "title": f"t{i}", "description": "d"} for i in range(5)],
            }
        )
        outline = outline_service.parse_outline(reply)
        assert [s.sequence_number for s in outline.steps] == [1, 2, 3, 4, 5]

    @pytest.mark.parametrize("reply", [None, "", "not json", "[1, 2]", '{"contentType": "ad"}'])
    def test_malformed_outline_raises(self, outline_service, reply):
        with pytest.raises(MalformedOutlineError):
            outline_service.parse_outline(reply)

    def test_parse_step_forces_position(self, outline_service):
        reply = json.dumps({"step": {"number": 1, "title": "New", "description": "Fresh take"}})
        step = outline_service.parse_step(reply, step_number=3)
        assert step.sequence_number == 3
        assert step.description == "Fresh take"

    def test_parse_step_without_description_raises(self, outline_service):
        with pytest.raises(MalformedOutlineError):
            outline_service.parse_step(json.dumps({"step": {"title": "Only a title"}}), step_number=1)


@pytest.mark.unit
class TestPrompts:
    """Prompt construction."""

    def test_outline_prompt_embeds_idea_and_minimum(self, outline_service):
        prompt = outline_service.build_outline_prompt("A robot who learns to paint in space")
        assert "A robot who learns to paint in space" in prompt
        assert "at least 5" in prompt

    def test_character_mode_uses_character_prompt(self, mock_gemini_client):
        service = OutlineService(
            api_key="key",
            story_mode=StoryMode.CHARACTER_FOCUS,
            client=mock_gemini_client,
        )
        assert "characterFocus" in service.build_outline_prompt("idea")

    def test_regenerate_prompt_includes_outline_context(self, outline_service, sample_steps):
        prompt = outline_service.build_regenerate_prompt("idea", 2, sample_steps)
        assert "Rewrite step 2" in prompt
        for step in sample_steps:
            assert step.title in prompt


@pytest.mark.unit
@pytest.mark.asyncio
class TestGenerateOutline:
    """Outline generation through the mocked Gemini client."""

    async def test_success(self, outline_service, mock_gemini_client, outline_reply):
        mock_gemini_client.models.generate_content = Mock(return_value=Mock(text=outline_reply("ad")))

        result = await outline_service.generate_outline("Buy our new sneakers")

        assert isinstance(result, Success)
        assert result.payload.classification == ContentClassification.ADVERTISEMENT
        kwargs = mock_gemini_client.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "gemini-2.0-flash"
        assert "Buy our new sneakers" in kwargs["contents"]

    async def test_missing_key_makes_no_call(self, mock_gemini_client):
        service = OutlineService(api_key="", client=None)

        result = await service.generate_outline("idea")

        assert isinstance(result, Fallback)
        assert result.reason == FallbackReason.NOT_CONFIGURED
        assert result.placeholder is None

    @pytest.mark.parametrize(
        "code,status,reason",
        [
            (401, "UNAUTHENTICATED", FallbackReason.UNAUTHORIZED),
            (403, "PERMISSION_DENIED", FallbackReason.UNAUTHORIZED),
            (429, "RESOURCE_EXHAUSTED", FallbackReason.QUOTA_EXCEEDED),
            (500, "INTERNAL", FallbackReason.PROVIDER_ERROR),
        ],
    )
    async def test_api_errors_become_fallbacks(self, outline_service, mock_gemini_client, code, status, reason):
        mock_gemini_client.models.generate_content = Mock(side_effect=_api_error(code, status))

        result = await outline_service.generate_outline("idea")

        assert isinstance(result, Fallback)
        assert result.reason == reason

    async def test_transport_error_is_network_fallback(self, outline_service, mock_gemini_client):
        mock_gemini_client.models.generate_content = Mock(side_effect=ConnectionError("reset"))

        result = await outline_service.generate_outline("idea")

        assert result.reason == FallbackReason.NETWORK_ERROR

    async def test_unparseable_reply_is_malformed_fallback(self, outline_service, mock_gemini_client):
        mock_gemini_client.models.generate_content = Mock(return_value=Mock(text="Sorry, I can't help"))

        result = await outline_service.generate_outline("idea")

        assert result.reason == FallbackReason.MALFORMED_RESPONSE


@pytest.mark.unit
@pytest.mark.asyncio
class TestRegenerateStep:
    """Single-step regeneration."""

    async def test_success_keeps_position(self, outline_service, mock_gemini_client, sample_steps):
        reply = json.dumps({"step": {"number": 1, "title": "Nebula", "description": "A new scene"}})
        mock_gemini_client.models.generate_content = Mock(return_value=Mock(text=reply))

        result = await outline_service.regenerate_step("idea", 4, sample_steps)

        assert isinstance(result, Success)
        assert result.payload.sequence_number == 4
        assert result.payload.title == "Nebula"

    async def test_missing_key(self, sample_steps):
        service = OutlineService(api_key="")
        result = await service.regenerate_step("idea", 1, sample_steps)
        assert result.reason == FallbackReason.NOT_CONFIGURED

    async def test_quota(self, outline_service, mock_gemini_client, sample_steps):
        mock_gemini_client.models.generate_content = Mock(side_effect=_api_error(429, "RESOURCE_EXHAUSTED"))
        result = await outline_service.regenerate_step("idea", 1, sample_steps)
        assert result.reason == FallbackReason.QUOTA_EXCEEDED
