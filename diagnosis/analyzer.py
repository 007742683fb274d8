# diagnosis/analyzer.py
"""
Pet photo analysis through a hosted vision-language model.

Talks to an OpenAI-compatible chat completions endpoint and turns the
model's free-text reply into a DiagnosisReport.
"""

import json
import logging
import re
from typing import Optional

import httpx
from pydantic import ValidationError

from .config import (
    MAX_TOKENS,
    TEMPERATURE,
    get_model_api_key,
    get_request_timeout,
    get_vision_endpoint,
    get_vision_model,
)
from .errors import (
    DiagnosisConfigurationError,
    UpstreamConnectionError,
    UpstreamModelError,
    UpstreamTimeoutError,
)
from .models import DiagnosisReport
from .prompt import build_prompt

logger = logging.getLogger(__name__)

# First "{" through last "}" across lines
JSON_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")


def build_payload(image_data_url: str, symptoms: Optional[str] = None) -> dict:
    """Chat completions request body for one photo."""
    return {
        "model": get_vision_model(),
        "messages": [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": build_prompt(symptoms)},
                    {
                        "type": "image_url",
                        "image_url": {"url": image_data_url},
                    },
                ],
            }
        ],
        "temperature": TEMPERATURE,
        "max_tokens": MAX_TOKENS,
    }


async def request_completion(image_data_url: str, symptoms: Optional[str] = None) -> str:
    """
    Send the photo to the vision model and return the reply text.

    Raises:
        DiagnosisConfigurationError: If the API key is not set
        UpstreamModelError: If the endpoint returns a non-success status
        UpstreamTimeoutError: If the endpoint does not answer in time
        UpstreamConnectionError: If the endpoint cannot be reached
    """
    api_key = get_model_api_key()
    if not api_key:
        raise DiagnosisConfigurationError("Required environment variables are missing")

    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }
    payload = build_payload(image_data_url, symptoms)

    try:
        async with httpx.AsyncClient(timeout=get_request_timeout()) as client:
            response = await client.post(
                get_vision_endpoint(),
                headers=headers,
                json=payload,
            )
    except httpx.TimeoutException as e:
        logger.error(f"Vision model request timed out: {e}")
        raise UpstreamTimeoutError("Vision model request timeout")
    except httpx.TransportError as e:
        logger.error(f"Vision model unreachable: {e}")
        raise UpstreamConnectionError(f"Vision model network error: {e}", cause=e)

    if response.status_code < 200 or response.status_code >= 300:
        logger.error(f"Vision model returned {response.status_code}")
        raise UpstreamModelError(response.status_code, response.text)

    try:
        data = response.json()
        return data["choices"][0]["message"]["content"] or ""
    except (ValueError, KeyError, IndexError, TypeError) as e:
        # An unexpected envelope is handled like an unparseable reply
        logger.warning(f"Unexpected completion envelope: {e}")
        return ""


def extract_report(content: str) -> Optional[DiagnosisReport]:
    """
    Parse the first brace-delimited JSON object in a model reply.

    Returns:
        The report, or None if no object is found, the JSON is invalid or
        it does not match the report shape
    """
    if not content:
        return None

    match = JSON_OBJECT_PATTERN.search(content)
    if not match:
        logger.warning("No JSON object found in model reply")
        return None

    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        logger.warning(f"Model reply is not valid JSON: {e}")
        return None

    try:
        return DiagnosisReport.model_validate(parsed)
    except ValidationError as e:
        logger.warning(f"Model reply does not match report shape: {e.error_count()} errors")
        return None
