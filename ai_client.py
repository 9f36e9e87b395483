"""OpenAI-compatible client shared by the analysis and cover stages."""

import logging
from typing import Optional

from openai import OpenAI

from settings import Settings

logger = logging.getLogger(__name__)


def create_client(settings: Settings) -> Optional[OpenAI]:
    """
    Build the client for the configured endpoint.

    Returns None in offline mode; nothing should be contacted then. Retries
    are disabled so a transient failure surfaces on the first attempt.
    """
    if settings.offline_mode:
        return None

    client = OpenAI(
        base_url=settings.base_url,
        api_key=settings.api_key,
        timeout=settings.request_timeout,
        max_retries=0,
        default_headers={
            "HTTP-Referer": "http://localhost:3000",
            "X-Title": "Podcast Cover Studio",
        },
    )
    logger.info(f"Initialized AI client for {settings.base_url}")
    return client
