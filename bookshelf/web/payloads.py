"""
Request payloads accepted by the JSON API.

Bodies are decoded strictly: unknown fields and wrongly typed values are
rejected before anything reaches a store. Value rules (rating range,
status names...) are left to the book validators.
"""

import json
from typing import Optional, Type, TypeVar

from flask import request
from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from bookshelf.errors import ValidationError

PayloadT = TypeVar("PayloadT", bound=BaseModel)


class StrictPayload(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)


class AddBookPayload(StrictPayload):
    title: Optional[str] = None
    author: Optional[str] = None
    external_id: Optional[str] = None
    isbn: Optional[str] = None
    status: Optional[str] = None
    type: Optional[str] = None
    rating: Optional[int] = None
    comments: Optional[str] = None
    cover_url: Optional[str] = None
    series: Optional[str] = None
    series_index: Optional[int] = None


class StatusPayload(StrictPayload):
    status: Optional[str] = None


class TypePayload(StrictPayload):
    type: Optional[str] = None


class DetailsPayload(StrictPayload):
    """Partial update; only the fields present in the body are applied."""
    rating: Optional[int] = None
    comments: Optional[str] = None
    series: Optional[str] = None
    series_index: Optional[int] = None


class ShelfPayload(StrictPayload):
    name: Optional[str] = None


def parse_body(payload_cls: Type[PayloadT]) -> PayloadT:
    """
    Decode the current request body into a payload model.

    Oversized bodies are rejected by Flask (MAX_CONTENT_LENGTH) when the
    body is read.

    Args:
        payload_cls: Payload model to validate against

    Returns:
        Validated payload

    Raises:
        ValidationError: With a message naming what is wrong with the body
    """
    raw = request.get_data(cache=True)
    if not raw or not raw.strip():
        raise ValidationError("Request body must not be empty")

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValidationError(
            f"Request body contains badly-formed JSON (at position {e.pos})"
        ) from e
    except ValueError as e:
        raise ValidationError("Request body contains badly-formed JSON") from e

    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")

    try:
        return payload_cls.model_validate(data)
    except PydanticValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(part) for part in error["loc"])
        if error["type"] == "extra_forbidden":
            message = f'Request body contains unknown field "{field}"'
        else:
            message = f'Request body contains an invalid value for the "{field}" field'
        raise ValidationError(message) from e
