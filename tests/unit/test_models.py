"""Unit tests for AnalysisResult validation."""

import pytest
from pydantic import ValidationError

from models import AnalysisResult


def test_exact_field_beats_alias_regardless_of_order():
    analysis = AnalysisResult.model_validate({"summary": "alias", "topic": "exact"})
    assert analysis.topic == "exact"

    analysis = AnalysisResult.model_validate({"topic": "exact", "summary": "alias"})
    assert analysis.topic == "exact"


def test_aliases_accepted():
    analysis = AnalysisResult.model_validate(
        {"main_topic": "Space", "targetAudience": "Kids", "tags": ["stars"]}
    )
    assert analysis.topic == "Space"
    assert analysis.audience == "Kids"
    assert analysis.keywords == ["stars"]


def test_unknown_keys_ignored():
    analysis = AnalysisResult.model_validate({"topic": "T", "confidence": 0.9})
    assert analysis.model_dump() == {
        "topic": "T",
        "mood": "",
        "genre": "",
        "audience": "",
        "keywords": [],
    }


def test_analysis_is_immutable():
    analysis = AnalysisResult(topic="T")
    with pytest.raises(ValidationError):
        analysis.topic = "changed"


@pytest.mark.parametrize(
    "value,expected",
    [
        (["b", " a ", "", "c"], ["b", "a", "c"]),
        ("one, two ,three", ["one", "two", "three"]),
        (None, []),
        (7, []),
    ],
)
def test_keywords_coerced_in_order(value, expected):
    assert AnalysisResult.model_validate({"topic": "T", "keywords": value}).keywords == expected


@pytest.mark.parametrize(
    "value,expected",
    [(None, ""), ("  padded ", "padded"), (["a", "b"], "a, b"), (3, "3")],
)
def test_text_fields_coerced(value, expected):
    assert AnalysisResult.model_validate({"mood": value}).mood == expected
