"""Parse model output into a GenerationResult."""

from __future__ import annotations

import json
import logging
import re

from pydantic import ValidationError

from packsmith.errors.exceptions import GenerationError
from packsmith.types import GenerationResult

logger = logging.getLogger(__name__)

_UNPARSEABLE_MESSAGE = (
    "The AI returned a response that couldn't be understood. This can happen with "
    "very complex or ambiguous requests. Please try simplifying your prompt, or try again."
)

# Leading ```json / ``` fence and trailing ``` fence
_OPEN_FENCE = re.compile(r"^```(?:json)?\s*")
_CLOSE_FENCE = re.compile(r"\s*```$")


def parse_generation_response(raw_text: str) -> GenerationResult:
    """Parse JSON output into a GenerationResult.

    Raises GenerationError(reason="unparseable_response") on anything that is
    not a JSON object of the expected shape.
    """
    text = strip_fences(raw_text)
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.error("Failed to parse model response as JSON: %s", e)
        logger.debug("Raw response: %s", raw_text)
        raise GenerationError(_UNPARSEABLE_MESSAGE, reason="unparseable_response", original=e) from e

    if not isinstance(data, dict):
        logger.error("Model response is a %s, not an object", type(data).__name__)
        raise GenerationError(_UNPARSEABLE_MESSAGE, reason="unparseable_response")

    # Optional fields may come back as explicit nulls
    for field in ("files", "assetMappings"):
        if data.get(field) is None:
            data.pop(field, None)

    try:
        return GenerationResult.model_validate(data)
    except ValidationError as e:
        logger.error("Model response does not match the result schema: %s", e)
        raise GenerationError(_UNPARSEABLE_MESSAGE, reason="unparseable_response", original=e) from e


def strip_fences(raw_text: str) -> str:
    text = raw_text.strip()
    text = _OPEN_FENCE.sub("", text)
    text = _CLOSE_FENCE.sub("", text)
    return text.strip()
