"""
Cover Requestor.

Turns an analysis into four cover prompts and asks the image model for one
square image per prompt. Prompts are independent: a failed prompt is
logged and dropped, and only an empty result set fails the request.
"""

import asyncio
import logging
from typing import Any, List, Optional

from errors import MissingAnalysisError, NoCoversGeneratedError
from models import AnalysisResult, CoverImage, CoverPrompt
from settings import Settings

logger = logging.getLogger(__name__)

# 1x1 PNG used for every offline cover
PLACEHOLDER_PNG_BASE64 = (
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR4nGNgYAAAAAMAASsJTYQAAAAASUVORK5CYII="
)

MINIMAL_TITLE = "מינימליסטי ומקצועי"
COLORFUL_TITLE = "צבעוני ואנרגטי"
ARTISTIC_TITLE = "אומנותי ויצירתי"
GENRE_TITLE = "מותאם לז'אנר"

OFFLINE_TITLES = (MINIMAL_TITLE, COLORFUL_TITLE, ARTISTIC_TITLE)


def build_cover_prompts(analysis: AnalysisResult) -> List[CoverPrompt]:
    """The four cover prompts for an analysis, in display order."""
    keywords = ", ".join(analysis.keywords)
    return [
        CoverPrompt(
            title=MINIMAL_TITLE,
            style="minimal/professional",
            prompt_text=(
                "Create a 1:1 2K professional minimalistic podcast cover. "
                f"Topic: {analysis.topic}, Mood: {analysis.mood}, Genre: {analysis.genre}, "
                f"Audience: {analysis.audience}, Keywords: {keywords}"
            ),
        ),
        CoverPrompt(
            title=COLORFUL_TITLE,
            style="colorful/energetic",
            prompt_text=(
                "Create a 1:1 2K colorful and energetic podcast cover. "
                f"Topic: {analysis.topic}, Mood: {analysis.mood}, Genre: {analysis.genre}, "
                f"Audience: {analysis.audience}"
            ),
        ),
        CoverPrompt(
            title=ARTISTIC_TITLE,
            style="artistic/creative",
            prompt_text=(
                "Create a 1:1 2K artistic and creative podcast cover "
                f"inspired by {analysis.topic}"
            ),
        ),
        CoverPrompt(
            title=GENRE_TITLE,
            style="genre-matched",
            prompt_text=(
                f"Create a 1:1 2K cover according to genre: {analysis.genre}, "
                f"Mood: {analysis.mood}, Keywords: {keywords}"
            ),
        ),
    ]


def offline_covers() -> List[CoverImage]:
    logger.warning("[offline] Offline mode active - returning placeholder covers")
    return [CoverImage(title=title, image=PLACEHOLDER_PNG_BASE64) for title in OFFLINE_TITLES]


class CoverRequestor:
    """Fans cover prompts out to the image model."""

    def __init__(self, settings: Settings, client: Optional[Any] = None):
        self.offline_mode = settings.offline_mode
        self.model = settings.image_model
        self.size = settings.image_size
        self.client = client

    def _generate_image(self, prompt: CoverPrompt) -> str:
        response = self.client.images.generate(
            model=self.model,
            prompt=prompt.prompt_text,
            size=self.size,
            n=1,
            response_format="b64_json",
        )
        image_base64 = response.data[0].b64_json
        if not image_base64:
            raise ValueError("Image response contained no b64_json payload")
        return image_base64

    async def _generate_cover(self, prompt: CoverPrompt) -> CoverImage:
        image_base64 = await asyncio.to_thread(self._generate_image, prompt)
        return CoverImage(title=prompt.title, image=image_base64)

    async def generate(self, analysis: AnalysisResult) -> List[CoverImage]:
        """
        Generate covers for an analysis.

        Raises:
            MissingAnalysisError: The analysis has no topic
            NoCoversGeneratedError: Every prompt failed
        """
        if not analysis.topic:
            raise MissingAnalysisError()

        if self.offline_mode:
            return offline_covers()

        prompts = build_cover_prompts(analysis)
        logger.info(f"Generating {len(prompts)} covers with {self.model} ({self.size})")

        outcomes = await asyncio.gather(
            *(self._generate_cover(prompt) for prompt in prompts),
            return_exceptions=True,
        )

        covers: List[CoverImage] = []
        for prompt, outcome in zip(prompts, outcomes):
            if isinstance(outcome, BaseException):
                logger.error(
                    f'Error generating image for prompt "{prompt.title}": {outcome}',
                    exc_info=outcome,
                )
                continue
            covers.append(outcome)

        if not covers:
            raise NoCoversGeneratedError(attempted=len(prompts))

        logger.info(f"Generated {len(covers)}/{len(prompts)} covers")
        return covers
