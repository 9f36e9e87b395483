import pytest
from types import SimpleNamespace
from unittest.mock import MagicMock

from settings import Settings


VALID_ANALYSIS_JSON = """{
    "topic": "A conversation about building small AI products.",
    "mood": "calm",
    "genre": "technology",
    "audience": "Indie developers",
    "keywords": ["ai", "startups", "product"]
}"""


@pytest.fixture
def upload_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture
def offline_settings(upload_dir):
    """Settings with offline mode forced on."""
    return Settings(
        api_key=None,
        offline_mode=True,
        upload_dir=str(upload_dir),
        static_dir="",
    )


@pytest.fixture
def online_settings(upload_dir):
    """Settings that talk to the (mocked) AI service."""
    return Settings(
        api_key="test-api-key",
        offline_mode=False,
        upload_dir=str(upload_dir),
        static_dir="",
        image_size="1024x1024",
    )


@pytest.fixture
def mp3_bytes():
    """Small payload with an ID3 header."""
    return b"ID3\x04\x00\x00\x00\x00\x00\x00" + b"\x00" * 2048


@pytest.fixture
def wav_bytes():
    """Small payload with a RIFF/WAVE header."""
    return b"RIFF" + b"\x24\x08\x00\x00" + b"WAVE" + b"\x00" * 2048


def make_completion(content):
    """OpenAI-style chat completion carrying ``content``."""
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))]
    )


def make_image_response(b64_json="aW1hZ2U="):
    return SimpleNamespace(data=[SimpleNamespace(b64_json=b64_json)])


@pytest.fixture
def completion_factory():
    return make_completion


@pytest.fixture
def image_response_factory():
    return make_image_response


@pytest.fixture
def mock_ai_client():
    """Mock OpenAI client with a valid analysis and image response."""
    client = MagicMock()
    client.chat.completions.create = MagicMock(
        return_value=make_completion(VALID_ANALYSIS_JSON)
    )
    client.images.generate = MagicMock(return_value=make_image_response())
    return client


@pytest.fixture
def sample_analysis():
    return {
        "topic": "A conversation about building small AI products.",
        "mood": "calm",
        "genre": "technology",
        "audience": "Indie developers",
        "keywords": ["ai", "startups", "product"],
    }
