"""Cleanup and validation of JSON answers returned by LLMs.

Models asked for JSON still wrap it in markdown fences (```json ... ```) or
emit small syntax slips (trailing commas, missing closing braces).
remove_json_wrapper() strips the fences; parse_json_output() validates the
result against a Pydantic model and retries once on a json_repair'd copy.

## Library Usage

- Pydantic v2 model_validate_json() for parsing and validation
- json_repair.repair_json() for best-effort syntax fixes
"""

from typing import Type, TypeVar

from json_repair import repair_json
from pydantic import BaseModel, ValidationError as PydanticValidationError

from llm_support.shared.logging_utils import setup_logging

T = TypeVar("T", bound=BaseModel)

logger = setup_logging(__name__)

FENCE = "```"


class JsonOutputError(Exception):
    """Raised when model output cannot be turned into the expected shape."""
    pass


def remove_json_wrapper(json_response: str) -> str:
    """Strip the markdown code fence some models put around JSON.

    Args:
        json_response: Raw model output.

    Returns:
        The fenced content, or the stripped input when it has no fence.

    Example:
        >>> remove_json_wrapper('```json\\n{"a": 1}\\n```')
        '{"a": 1}'
    """
    stripped = json_response.strip()
    if not stripped.startswith(FENCE):
        return stripped

    # Remove opening fence (```json or ```)
    first_newline = stripped.find("\n")
    if first_newline == -1:
        stripped = stripped[len(FENCE):]
        if stripped.lower().startswith("json"):
            stripped = stripped[len("json"):]
    else:
        stripped = stripped[first_newline + 1:]

    # Remove closing fence and any commentary after it
    closing = stripped.rfind(FENCE)
    if closing != -1:
        stripped = stripped[:closing]
    return stripped.strip()


def parse_json_output(json_response: str, response_model: Type[T]) -> T:
    """Parse model output into response_model, repairing malformed JSON once.

    Args:
        json_response: Raw model output, possibly fenced.
        response_model: Pydantic BaseModel class describing the answer.

    Returns:
        Validated instance of response_model.

    Raises:
        JsonOutputError: If neither the original nor the repaired text
            validates against response_model.
    """
    content = remove_json_wrapper(json_response)
    try:
        return response_model.model_validate_json(content)
    except PydanticValidationError:
        repaired = repair_json(content, return_objects=False)
        logger.warning(
            f"Repaired malformed JSON from LLM "
            f"({len(content)} -> {len(repaired)} chars)"
        )

    try:
        return response_model.model_validate_json(repaired)
    except PydanticValidationError as exc:
        raise JsonOutputError(
            f"LLM output does not match {response_model.__name__}: {exc}"
        ) from exc
