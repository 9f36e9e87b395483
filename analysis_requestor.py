"""
Analysis Requestor.

Sends the uploaded audio plus a fixed instruction to the analysis model in
a single call and normalizes the answer.
"""

import asyncio
import base64
import logging
import time
from typing import Any, List, Optional, cast

import openai

from errors import AnalysisServiceError, ServiceTimeoutError
from models import AnalysisResult, UploadedAudio
from response_normalizer import normalize_analysis
from settings import Settings

logger = logging.getLogger(__name__)

MOODS = ("energetic", "calm", "melancholic", "happy")
GENRES = ("technology", "business", "entertainment", "news")

ANALYSIS_PROMPT = f"""
Analyze this audio file and provide:
1. Main topic/content (2-3 sentences)
2. Mood ({"/".join(MOODS)})
3. Genre ({"/".join(GENRES)})
4. Target audience
5. 3-5 keywords

Format as JSON with the keys "topic", "mood", "genre", "audience" and "keywords" (an array of strings).
"""

OFFLINE_ANALYSIS = AnalysisResult(
    topic="דוגמה: פודקאסט על טכנולוגיה",
    mood="energetic",
    genre="technology",
    audience="Developers and tech enthusiasts",
    keywords=["tech", "ai", "dev"],
)


def offline_analysis(reason: str) -> AnalysisResult:
    logger.warning(f"[offline] {reason} - returning canned analysis")
    return OFFLINE_ANALYSIS


def build_messages(audio_bytes: bytes, mime_type: str) -> List[Any]:
    """Instruction and inline audio as one user turn."""
    audio_base64 = base64.b64encode(audio_bytes).decode("utf-8")
    return cast(
        List[Any],
        [
            {
                "role": "user",
                "content": [
                    {
                        "type": "input_audio",
                        "input_audio": f"data:{mime_type};base64,{audio_base64}",
                    },
                    {"type": "text", "text": ANALYSIS_PROMPT},
                ],
            }
        ],
    )


class AnalysisRequestor:
    """Calls the analysis model for one uploaded file."""

    def __init__(self, settings: Settings, client: Optional[Any] = None):
        self.offline_mode = settings.offline_mode
        self.model = settings.analysis_model
        self.client = client

    def _complete(self, messages: List[Any]) -> Any:
        return self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=0.3,
            max_tokens=1024,
        )

    async def analyze(self, audio: UploadedAudio, mime_type: str) -> AnalysisResult:
        """
        Analyze a stored upload.

        Single attempt, no retries. ``mime_type`` is the (possibly remapped)
        type to forward, not necessarily the declared one.

        Raises:
            ServiceTimeoutError: The call exceeded the request timeout
            AnalysisServiceError: The service call failed
            InvalidModelResponseError: The answer was not a JSON object
            ResponseHandlingError: The answer could not be read from the response
        """
        if self.offline_mode:
            return offline_analysis("Offline mode active, MIME classification skipped")

        with open(audio.storage_path, "rb") as audio_file:
            audio_bytes = audio_file.read()

        logger.info(
            f"Sending audio to model {self.model}, bytes: {len(audio_bytes)}, "
            f"mime sent: {mime_type}"
        )

        api_start = time.time()
        try:
            completion = await asyncio.to_thread(
                self._complete, build_messages(audio_bytes, mime_type)
            )
        except openai.APITimeoutError as e:
            logger.error(f"Analysis request timed out: {e}")
            raise ServiceTimeoutError("analysis") from e
        except openai.OpenAIError as e:
            logger.error(f"Analysis request failed: {e}", exc_info=True)
            raise AnalysisServiceError(str(e)) from e

        logger.info(
            f"Analysis call completed in {round(time.time() - api_start, 2)}s"
        )

        analysis = normalize_analysis(completion)
        logger.info(
            f"Analysis: mood={analysis.mood} genre={analysis.genre} "
            f"keywords={len(analysis.keywords)}"
        )
        return analysis
