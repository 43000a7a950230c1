"""
Turn transport responses into resources or a :class:`RemoteError`.
"""

from __future__ import annotations

import json
import logging
from typing import Type, TypeVar

from .codec import ResourceCodec
from .errors import CodecError, RemoteError
from .models import ApiError
from .transport import TransportResponse

__all__ = ["KNOWN_PLAIN_TEXT_ERRORS", "read_error", "read_response", "remote_error"]

T = TypeVar("T")

# Servers answer some failures with a bare phrase instead of a JSON envelope.
# Matching is on the whole body, case-insensitively.
KNOWN_PLAIN_TEXT_ERRORS = frozenset(
    {
        "unauthorized",
        "forbidden",
        "could not get wallet address",
    }
)


def read_error(body: str, codec: ResourceCodec) -> ApiError:
    """Best-effort :class:`ApiError` from an error body; never raises."""
    text = (body or "").strip()
    if not text:
        return ApiError()
    try:
        payload = json.loads(text)
    except ValueError:
        payload = None

    if isinstance(payload, dict):
        try:
            return codec.from_payload(payload, ApiError, content=text)
        except CodecError:
            logging.debug("Error body is JSON but not an error envelope: %s", text)
            return ApiError()

    phrase = payload.strip() if isinstance(payload, str) else text
    if phrase.lower() in KNOWN_PLAIN_TEXT_ERRORS:
        return ApiError(description=phrase)
    return ApiError()


def remote_error(response: TransportResponse, codec: ResourceCodec) -> RemoteError:
    error = read_error(response.body, codec)
    status = response.status_code
    exc = RemoteError(status, error, headers=response.headers, body=response.body or None)

    if 400 <= status < 500:
        logging.warning("Client error [%s]: %s", status, exc.description)
    elif 500 <= status < 600:
        logging.error("Server error [%s]: %s", status, exc.description)
    else:
        logging.warning("Unexpected HTTP status [%s]: %s", status, exc.description)
    return exc


def read_response(response: TransportResponse, shape: Type[T], codec: ResourceCodec) -> T:
    """Decode a 2xx response into ``shape``; raise :class:`RemoteError` otherwise."""
    if not response.ok:
        raise remote_error(response, codec)
    return codec.decode(response.body, shape)
