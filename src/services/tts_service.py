"""TTS Service - story narration via ElevenLabs with browser TTS fallback."""

import base64
import logging
from typing import Optional

import httpx

from models.results import AdapterResult, Fallback, FallbackReason, Success
from models.story import NarrationArtifact, SceneStep
from services.placeholders import LOCAL_SYNTHESIS_MESSAGE

logger = logging.getLogger(__name__)

ELEVENLABS_API_BASE = "https://api.elevenlabs.io/v1"
DEFAULT_VOICE_ID = "21m00Tcm4TlvDq8ikWAM"
ELEVENLABS_MODEL_ID = "eleven_multilingual_v2"

# Nominal narration length reported to the client; not measured from the audio
NOMINAL_DURATION_SECONDS = 30.0


def narration_text(steps: list[SceneStep]) -> str:
    """Full story text to narrate, one paragraph per scene in order."""
    paragraphs = []
    for step in steps:
        title = step.title.strip().rstrip(".")
        paragraphs.append(f"{title}. {step.description.strip()}" if title else step.description.strip())
    return "\n\n".join(p for p in paragraphs if p)


class TTSService:
    """HTTP client for ElevenLabs narration.

    Narration failures are never fatal: every failure path, including a
    missing API key, resolves to a marker telling the client to use its own
    speech synthesis.
    """

    def __init__(self, api_key: str = "", default_voice_id: str = ""):
        """Initialize TTS service.

        Args:
            api_key: ElevenLabs API key. Empty means narration uses browser TTS.
            default_voice_id: Voice used when a request does not name one
        """
        self.api_key = api_key
        self.default_voice_id = default_voice_id or DEFAULT_VOICE_ID
        # Long timeout for TTS generation (full stories take a while)
        self.client = httpx.AsyncClient(timeout=120.0)

    def is_configured(self) -> bool:
        """Check if ElevenLabs API key is configured."""
        return bool(self.api_key)

    @staticmethod
    def detect_audio_format(audio_bytes: bytes) -> str:
        """Detect audio format from magic bytes."""
        if len(audio_bytes) >= 12 and audio_bytes[:4] == b"RIFF" and audio_bytes[8:12] == b"WAVE":
            return "wav"
        if audio_bytes[:3] == b"ID3" or (
            len(audio_bytes) >= 2
            and audio_bytes[0] == 0xFF
            and (audio_bytes[1] & 0xE0) == 0xE0
        ):
            return "mp3"
        if audio_bytes[:4] == b"OggS":
            return "ogg"
        return "bin"

    @staticmethod
    def media_type_for_audio_format(audio_format: str) -> str:
        """Map internal audio format to HTTP content-type."""
        return {
            "wav": "audio/wav",
            "mp3": "audio/mpeg",
            "ogg": "audio/ogg",
        }.get(audio_format, "audio/mpeg")

    @staticmethod
    def _local_synthesis(reason: FallbackReason, message: str = "") -> Fallback:
        return Fallback(
            reason,
            placeholder=NarrationArtifact(
                audio_url=None,
                use_local_synthesis=True,
                duration=NOMINAL_DURATION_SECONDS,
                message=LOCAL_SYNTHESIS_MESSAGE,
            ),
            message=message or LOCAL_SYNTHESIS_MESSAGE,
        )

    async def generate_narration(
        self,
        text: str,
        voice_id: Optional[str] = None,
    ) -> AdapterResult[NarrationArtifact]:
        """Synthesize narration for the full story text.

        Args:
            text: Text to narrate
            voice_id: ElevenLabs voice; defaults to the configured voice

        Returns:
            Success(NarrationArtifact) with an inline audio data URI, or a
            Fallback whose placeholder asks for local synthesis.
        """
        if not self.is_configured():
            logger.info("ELEVENLABS_API_KEY not configured, using browser TTS")
            return self._local_synthesis(FallbackReason.NOT_CONFIGURED)

        voice = voice_id or self.default_voice_id
        url = f"{ELEVENLABS_API_BASE}/text-to-speech/{voice}"
        headers = {
            "Content-Type": "application/json",
            "xi-api-key": self.api_key,
        }
        payload = {
            "text": text,
            "model_id": ELEVENLABS_MODEL_ID,
            "voice_settings": {
                "stability": 0.5,
                "similarity_boost": 0.75,
                "style": 0.5,
                "use_speaker_boost": True,
            },
        }

        logger.info(f"Generating narration with ElevenLabs voice {voice} ({len(text)} chars)")

        try:
            response = await self.client.post(url, headers=headers, json=payload)
        except httpx.HTTPError as e:
            logger.warning(f"ElevenLabs request failed, using browser TTS: {e}")
            return self._local_synthesis(FallbackReason.NETWORK_ERROR, str(e))

        if response.status_code in (401, 403):
            # Expected when the key lacks TTS access; not worth an error log
            logger.info("ElevenLabs rejected credentials, using browser TTS")
            return self._local_synthesis(FallbackReason.UNAUTHORIZED)

        if not response.is_success:
            logger.error(f"ElevenLabs API error: {response.status_code} {response.text}")
            return self._local_synthesis(
                FallbackReason.PROVIDER_ERROR,
                f"ElevenLabs API error: {response.status_code}",
            )

        audio_bytes = response.content
        if not audio_bytes:
            logger.warning("ElevenLabs returned empty audio, using browser TTS")
            return self._local_synthesis(FallbackReason.MALFORMED_RESPONSE, "Empty audio response")

        media_type = self.media_type_for_audio_format(self.detect_audio_format(audio_bytes))
        audio_b64 = base64.b64encode(audio_bytes).decode("ascii")

        logger.info(f"Generated narration ({len(audio_bytes)} bytes, {media_type})")
        return Success(
            NarrationArtifact(
                audio_url=f"data:{media_type};base64,{audio_b64}",
                use_local_synthesis=False,
                duration=NOMINAL_DURATION_SECONDS,
                message="Audio narration generated successfully",
            )
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()
