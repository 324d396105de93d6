"""
core.request.builder

Assembles one-shot generation requests from an ordered list of parts.

A request is built once per call site and never shared: the builder
always returns a fresh, frozen GenerationRequest.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict

from core.schema.descriptor import ObjectSchema
from exceptions.exceptions import InvalidRequestError


# type "/" subtype, e.g. application/pdf, video/mp4, image/svg+xml
_MEDIA_TYPE_RE = re.compile(r"^[A-Za-z0-9][\w.+-]*/[A-Za-z0-9][\w.+-]*$")


class TextPart(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str

    def to_content(self) -> Dict[str, Any]:
        return {"type": "text", "text": self.text}


class MediaPart(BaseModel):
    """Inline binary payload: base64 data plus its media type."""

    model_config = ConfigDict(frozen=True)

    media_type: str
    data: str

    @property
    def data_url(self) -> str:
        return f"data:{self.media_type};base64,{self.data}"

    def to_content(self) -> Dict[str, Any]:
        # The compatibility endpoint accepts any inline media type as a data URL.
        return {"type": "image_url", "image_url": {"url": self.data_url}}


Part = Union[TextPart, MediaPart]


class GenerationRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    parts: Tuple[Part, ...]
    schema_descriptor: Optional[ObjectSchema] = None
    reasoning_budget: Optional[int] = None

    @property
    def is_structured(self) -> bool:
        return self.schema_descriptor is not None

    def to_content(self) -> List[Dict[str, Any]]:
        """Render the ordered parts as a chat-completions content list."""
        return [part.to_content() for part in self.parts]


def build_request(
    parts: Sequence[Part],
    schema: Optional[ObjectSchema] = None,
    reasoning_budget: Optional[int] = None,
) -> GenerationRequest:
    """Validate the parts and return a new GenerationRequest."""
    if not parts:
        raise InvalidRequestError("at least one part is required")

    for idx, part in enumerate(parts):
        if isinstance(part, MediaPart):
            if not part.media_type or not _MEDIA_TYPE_RE.match(part.media_type):
                raise InvalidRequestError(
                    f"part {idx} has an invalid media type: {part.media_type!r}"
                )
        elif not isinstance(part, TextPart):
            raise InvalidRequestError(
                f"part {idx} is a {type(part).__name__}, expected TextPart or MediaPart"
            )

    if reasoning_budget is not None and reasoning_budget < 0:
        raise InvalidRequestError(f"reasoning budget must be >= 0, got {reasoning_budget}")

    return GenerationRequest(
        parts=tuple(parts),
        schema_descriptor=schema,
        reasoning_budget=reasoning_budget,
    )


def text(value: str) -> TextPart:
    return TextPart(text=value)
