"""
Type models for the cover studio.

Centralized definitions for the values that flow between the upload,
analysis and cover generation stages.
"""

from dataclasses import dataclass
from typing import Any, List

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


@dataclass(frozen=True)
class UploadedAudio:
    """An accepted upload persisted under the upload directory."""

    storage_path: str
    original_name: str
    declared_mime_type: str
    size_bytes: int


class AnalysisResult(BaseModel):
    """
    Content analysis of one audio file.

    Validated from model output and from the cover request body. Alternate
    key spellings seen in model output are accepted; the exact field name
    always wins over an alias. Unknown keys are ignored.
    """

    model_config = ConfigDict(frozen=True)

    topic: str = Field(
        default="",
        validation_alias=AliasChoices(
            "topic", "Topic", "main_topic", "mainTopic", "Main Topic", "content", "summary"
        ),
    )
    mood: str = Field(default="", validation_alias=AliasChoices("mood", "Mood"))
    genre: str = Field(default="", validation_alias=AliasChoices("genre", "Genre"))
    audience: str = Field(
        default="",
        validation_alias=AliasChoices(
            "audience", "Audience", "target_audience", "targetAudience", "Target Audience"
        ),
    )
    keywords: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("keywords", "Keywords", "tags", "Tags"),
    )

    @field_validator("topic", "mood", "genre", "audience", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> str:
        """Convert value to a stripped string."""
        if value is None:
            return ""
        if isinstance(value, str):
            return value.strip()
        if isinstance(value, list):
            return ", ".join(str(v).strip() for v in value)
        return str(value).strip()

    @field_validator("keywords", mode="before")
    @classmethod
    def coerce_keywords(cls, value: Any) -> List[str]:
        """Convert value to an ordered list of non-empty strings."""
        if value is None:
            return []
        if isinstance(value, str):
            items = value.split(",")
        elif isinstance(value, (list, tuple)):
            items = [str(v) for v in value]
        else:
            return []
        return [item.strip() for item in items if item and item.strip()]


@dataclass(frozen=True)
class CoverPrompt:
    title: str
    style: str
    prompt_text: str


class CoverImage(BaseModel):
    """A generated cover; ``image`` is base64-encoded PNG data."""

    title: str
    image: str
