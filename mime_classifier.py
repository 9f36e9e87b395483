"""
MIME type classification for uploaded audio.

Decides whether a declared type can be forwarded to the analysis service
as-is, must be remapped from a video container to its audio equivalent,
or has to be rejected.
"""

import logging
import mimetypes
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from errors import UnsupportedMediaTypeError

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "audio/mpeg"

ALLOWED_AUDIO_TYPES = frozenset(
    {
        "audio/mpeg",
        "audio/mp3",
        "audio/wav",
        "audio/x-wav",
        "audio/mp4",
        "audio/x-m4a",
        "audio/aac",
        "audio/ogg",
        "audio/webm",
    }
)

# Video containers that commonly carry audio-only payloads
REMAPPABLE_VIDEO_MARKERS = ("mp4", "x-m4v")
REMAPPED_AUDIO_TYPE = "audio/mp4"


class MimeClass(str, Enum):
    AUDIO = "audio"
    REMAPPED_VIDEO = "remapped_video"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class MimeClassification:
    kind: MimeClass
    declared: str
    forward_mime: Optional[str]

    @property
    def accepted(self) -> bool:
        return self.kind is not MimeClass.UNSUPPORTED


def normalize_mime(declared: Optional[str], filename: Optional[str] = None) -> str:
    """Lower-case and strip parameters; fill an empty type from the filename."""
    mime = (declared or "").split(";", 1)[0].strip().lower()
    if mime:
        return mime
    if filename:
        guessed, _ = mimetypes.guess_type(filename)
        if guessed:
            return guessed
    return DEFAULT_MIME_TYPE


def classify(declared: str) -> MimeClassification:
    """Classify an already normalized MIME type."""
    if declared.startswith("audio/") or declared in ALLOWED_AUDIO_TYPES:
        return MimeClassification(MimeClass.AUDIO, declared, declared)

    if declared.startswith("video/") and any(
        marker in declared for marker in REMAPPABLE_VIDEO_MARKERS
    ):
        return MimeClassification(
            MimeClass.REMAPPED_VIDEO, declared, REMAPPED_AUDIO_TYPE
        )

    return MimeClassification(MimeClass.UNSUPPORTED, declared, None)


def resolve_forward_mime(declared: Optional[str], filename: Optional[str] = None) -> str:
    """
    Return the MIME type to send to the analysis service.

    Raises:
        UnsupportedMediaTypeError: The declared type is neither audio nor a
            remappable video container. The error names the declared type.
    """
    mime = normalize_mime(declared, filename)
    result = classify(mime)

    if result.kind is MimeClass.REMAPPED_VIDEO:
        logger.info(
            f"Treating video upload as audio: {result.declared} -> {result.forward_mime}"
        )
    elif result.kind is MimeClass.UNSUPPORTED:
        logger.warning(f"Rejected upload with unsupported type: {declared!r}")
        raise UnsupportedMediaTypeError(declared or mime)

    return result.forward_mime
