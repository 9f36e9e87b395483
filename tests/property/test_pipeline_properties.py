"""Property-based tests for classification, normalization and uploads using Hypothesis."""

import asyncio
import io
import json
import os
import tempfile

import pytest
from fastapi import UploadFile
from hypothesis import given, settings as hypothesis_settings, strategies as st
from starlette.datastructures import Headers

from cover_requestor import build_cover_prompts
from errors import InvalidModelResponseError, UnsupportedMediaTypeError, UploadTooLargeError
from mime_classifier import MimeClass, classify, resolve_forward_mime
from models import AnalysisResult
from response_normalizer import parse_structured
from settings import Settings
from uploads import UploadReceiver


subtype_strategy = st.from_regex(r"[a-z0-9][a-z0-9.+-]{0,19}", fullmatch=True)
non_audio_mime_strategy = st.builds(
    lambda top, sub: f"{top}/{sub}",
    st.sampled_from(["application", "text", "image", "video", "font", "model"]),
    subtype_strategy,
).filter(lambda m: not (m.startswith("video/") and ("mp4" in m or "x-m4v" in m)))

safe_chars = st.characters(exclude_characters="`", exclude_categories=("Cs",))
text_strategy = st.text(alphabet=safe_chars, max_size=40)
analysis_strategy = st.fixed_dictionaries(
    {
        "topic": st.text(alphabet=safe_chars, min_size=1, max_size=40).filter(lambda s: s.strip()),
        "mood": text_strategy,
        "genre": text_strategy,
        "audience": text_strategy,
        "keywords": st.lists(st.text(alphabet=safe_chars, min_size=1, max_size=10).filter(lambda s: s.strip() and "," not in s), max_size=5),
    }
)


@pytest.mark.property
@given(mime=non_audio_mime_strategy)
def test_non_audio_types_rejected_naming_type(mime):
    """Property: anything that is not audio and not an MP4-family video is rejected."""
    assert classify(mime).kind is MimeClass.UNSUPPORTED
    with pytest.raises(UnsupportedMediaTypeError) as exc_info:
        resolve_forward_mime(mime)
    assert exc_info.value.details["mimeType"] == mime


@pytest.mark.property
@given(sub=subtype_strategy)
def test_audio_types_forwarded_unchanged(sub):
    assert resolve_forward_mime(f"audio/{sub}") == f"audio/{sub}"


@pytest.mark.property
@given(sub=subtype_strategy)
def test_mp4_family_always_forwarded_as_audio_mp4(sub):
    assert resolve_forward_mime(f"video/{sub}mp4") == "audio/mp4"


@pytest.mark.property
@given(data=analysis_strategy, seed=st.randoms())
def test_analysis_independent_of_key_order(data, seed):
    items = list(data.items())
    seed.shuffle(items)
    assert AnalysisResult.model_validate(dict(items)) == AnalysisResult.model_validate(data)


@pytest.mark.property
@given(data=analysis_strategy)
def test_cover_prompts_fixed_and_deterministic(data):
    analysis = AnalysisResult.model_validate(data)
    prompts = build_cover_prompts(analysis)

    assert len(prompts) == 4
    assert len({p.title for p in prompts}) == 4
    assert prompts == build_cover_prompts(analysis)
    assert prompts[0].prompt_text.endswith("Keywords: " + ", ".join(analysis.keywords))


@pytest.mark.property
@given(data=analysis_strategy)
def test_json_object_round_trips_through_parser(data):
    parsed = parse_structured(json.dumps(data, ensure_ascii=False))
    assert AnalysisResult.model_validate(parsed) == AnalysisResult.model_validate(data)


@pytest.mark.property
@given(text=st.text(max_size=80))
def test_unparseable_text_never_coerced(text):
    """Property: text is either a JSON object or an error carrying the exact text."""
    try:
        parsed = parse_structured(text)
    except InvalidModelResponseError as e:
        assert e.raw == text
    else:
        assert isinstance(parsed, dict)


@pytest.mark.property
@hypothesis_settings(max_examples=25, deadline=None)
@given(limit=st.integers(min_value=1, max_value=4096), excess=st.integers(min_value=1, max_value=4096))
def test_oversize_never_persisted(limit, excess):
    """Property: any upload larger than the ceiling leaves the upload directory empty."""
    with tempfile.TemporaryDirectory() as tmp:
        upload_dir = os.path.join(tmp, "uploads")
        receiver = UploadReceiver(
            Settings(offline_mode=True, upload_dir=upload_dir, max_upload_bytes=limit)
        )
        data = b"x" * (limit + excess)
        upload = UploadFile(
            file=io.BytesIO(data),
            filename="big.mp3",
            headers=Headers({"content-type": "audio/mpeg"}),
        )

        with pytest.raises(UploadTooLargeError):
            asyncio.run(receiver.receive(upload))

        assert not os.path.exists(upload_dir) or os.listdir(upload_dir) == []
