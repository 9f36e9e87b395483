"""
Response Normalizer.

Client libraries hand back answers in different shapes. Each extraction
strategy below either yields the answer text or reports that it does not
apply; the first match wins and a generic serialization is the fallback.
The text must then parse as a JSON object, otherwise the raw text is
surfaced to the caller unchanged.
"""

import json
import logging
from typing import Any, Callable, List, Tuple

from errors import InvalidModelResponseError, ResponseHandlingError
from models import AnalysisResult

logger = logging.getLogger(__name__)


class _NotApplicable:
    def __repr__(self) -> str:
        return "NOT_APPLICABLE"


NOT_APPLICABLE = _NotApplicable()

Extractor = Callable[[Any], Any]


def _call_text(accessor: Any) -> Any:
    if callable(accessor):
        value = accessor()
        return value if isinstance(value, str) else NOT_APPLICABLE
    return NOT_APPLICABLE


def from_response_text_accessor(result: Any) -> Any:
    """``result.response.text()``"""
    response = getattr(result, "response", None)
    if response is None:
        return NOT_APPLICABLE
    return _call_text(getattr(response, "text", None))


def from_text_accessor(result: Any) -> Any:
    """``result.text()`` or a ``result.text`` string attribute."""
    if isinstance(result, str):
        return NOT_APPLICABLE
    accessor = getattr(result, "text", None)
    if isinstance(accessor, str):
        return accessor
    return _call_text(accessor)


def from_plain_string(result: Any) -> Any:
    return result if isinstance(result, str) else NOT_APPLICABLE


def _output_item_text(item: Any) -> str:
    if isinstance(item, dict):
        value = item.get("content") or item.get("text")
        if value:
            return value if isinstance(value, str) else json.dumps(value)
        return json.dumps(item, default=str)
    value = getattr(item, "content", None) or getattr(item, "text", None)
    if isinstance(value, str) and value:
        return value
    return _serialize(item)


def from_output_list(result: Any) -> Any:
    """``result.output`` as a list of parts, joined by newlines."""
    output = getattr(result, "output", None)
    if not isinstance(output, list):
        return NOT_APPLICABLE
    return "\n".join(_output_item_text(item) for item in output)


def from_chat_choices(result: Any) -> Any:
    """OpenAI-style ``result.choices[0].message.content``."""
    choices = getattr(result, "choices", None)
    if not isinstance(choices, list) or not choices:
        return NOT_APPLICABLE
    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None)
    return content if isinstance(content, str) else NOT_APPLICABLE


EXTRACTION_STRATEGIES: List[Tuple[str, Extractor]] = [
    ("response.text()", from_response_text_accessor),
    ("text()", from_text_accessor),
    ("string", from_plain_string),
    ("output[]", from_output_list),
    ("choices[0].message", from_chat_choices),
]


def _serialize(result: Any) -> str:
    model_dump = getattr(result, "model_dump", None)
    if callable(model_dump):
        try:
            return json.dumps(model_dump(), default=str)
        except (TypeError, ValueError):
            pass
    try:
        return json.dumps(result, default=str)
    except (TypeError, ValueError):
        return str(result)


def extract_text(result: Any) -> str:
    """
    Pull the answer text out of whatever the client library returned.

    Raises:
        ResponseHandlingError: A response accessor failed while being read
    """
    try:
        for name, strategy in EXTRACTION_STRATEGIES:
            text = strategy(result)
            if text is not NOT_APPLICABLE:
                logger.debug(f"Extracted model text via {name}")
                return text
    except Exception as e:
        logger.error(f"Error processing model response: {e}", exc_info=True)
        raise ResponseHandlingError(f"{type(e).__name__}: {e}") from e
    logger.debug("No known response shape matched, serializing result")
    return _serialize(result)


def _unwrap_code_fence(text: str) -> str:
    # Models often wrap JSON in a ```json fenced block
    fence = text.find("```json")
    if fence != -1:
        start = fence + len("```json")
        end = text.find("```", start)
        return text[start:end if end != -1 else None].strip()
    stripped = text.strip()
    if stripped.startswith("```") and stripped.endswith("```") and len(stripped) > 6:
        return stripped[3:-3].strip()
    return stripped


def parse_structured(text: str) -> dict:
    """
    Parse model text as a JSON object.

    Raises:
        InvalidModelResponseError: The text is not a JSON object. The error
            carries ``text`` exactly as received.
    """
    try:
        parsed = json.loads(_unwrap_code_fence(text))
    except (json.JSONDecodeError, TypeError) as e:
        logger.error(f"Invalid JSON from model: {e}")
        logger.error(f"Raw response: {text}")
        raise InvalidModelResponseError(text, reason=str(e)) from e

    if not isinstance(parsed, dict):
        logger.error(f"Model returned JSON {type(parsed).__name__}, expected object")
        logger.error(f"Raw response: {text}")
        raise InvalidModelResponseError(text, reason="Expected a JSON object")
    return parsed


def normalize_analysis(result: Any) -> AnalysisResult:
    """Extract, parse and map a client response into an AnalysisResult."""
    return AnalysisResult.model_validate(parse_structured(extract_text(result)))
