"""
core.schema.decoder

Turns the text payload of a schema-constrained reply into a validated
record. Decoding is all-or-nothing: either every declared field is
present and well-typed, or SchemaViolationError is raised.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from core.schema.descriptor import ObjectSchema
from exceptions.exceptions import SchemaViolationError


logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


def _extract_json_from_text(text: str) -> str:
    """
    Normalize model text output into a raw JSON string.

    Handles Markdown ```json fenced blocks and extra prose around the JSON
    object by extracting the outermost {...} block from the text.
    """
    text = text.strip()

    # Strip Markdown code fences if present.
    if text.startswith("```"):
        lines = text.splitlines()
        if lines and lines[0].startswith("```"):
            lines = lines[1:]
        if lines and lines[-1].startswith("```"):
            lines = lines[:-1]
        text = "\n".join(lines).strip()

    # Best-effort extraction of the outermost {...} block.
    if not text.startswith("{") and "{" in text and "}" in text:
        start = text.find("{")
        end = text.rfind("}")
        if end > start:
            return text[start : end + 1].strip()

    return text


def _reject_constant(name: str) -> Any:
    # json accepts NaN / Infinity / -Infinity, strict JSON does not.
    raise SchemaViolationError("$", f"non-finite number {name} is not valid JSON")


def decode(
    raw_text: Optional[str],
    schema: ObjectSchema,
    model: Optional[Type[T]] = None,
) -> Any:
    """
    Parse and validate ``raw_text`` against ``schema``.

    Parameters
    ----------
    raw_text : str
        Text payload of the provider reply.
    schema : ObjectSchema
        Descriptor the reply must satisfy.
    model : Type[BaseModel], optional
        Record type to build from the validated payload.

    Returns
    -------
    Any
        - an instance of ``model`` when given
        - otherwise the validated ``dict``

    Raises
    ------
    SchemaViolationError
        If the payload is empty, not parseable, or violates the schema.
    """
    if not raw_text or not raw_text.strip():
        raise SchemaViolationError("$", "empty payload", raw_text)

    cleaned = _extract_json_from_text(raw_text)
    try:
        data = json.loads(cleaned, parse_constant=_reject_constant)
    except json.JSONDecodeError as e:
        raise SchemaViolationError("$", f"payload is not valid JSON ({e})", raw_text) from e
    except SchemaViolationError as e:
        e.raw_text = raw_text
        raise

    try:
        schema.check(data)
    except SchemaViolationError as e:
        e.raw_text = raw_text
        logger.warning("[DECODE] %s rejected: %s", schema.name, e)
        raise

    if model is None:
        return data

    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise SchemaViolationError(schema.name, str(e), raw_text) from e
