"""
Deterministic JSON encoding for signed request bodies.

Two logically identical resources must encode to identical bytes, otherwise
the content digest, and with it the request signature, changes. The codec
therefore fixes a compact separator style, drops ``None`` fields, writes
set-valued fields as lexicographically sorted arrays and formats timestamps
with a single ISO-8601 instant layout.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping, Optional, Type, TypeVar

from .errors import CodecError

__all__ = ["ResourceCodec", "TIMESTAMP_FORMAT"]

T = TypeVar("T")

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.{millis:03d}Z"


@dataclass(frozen=True)
class ResourceCodec:
    ensure_ascii: bool = False

    def encode(self, resource: Any) -> bytes:
        """Encode a model (or plain mapping) into the bytes that get signed."""
        try:
            normalized = self.normalize(resource)
            text = json.dumps(
                normalized,
                separators=(",", ":"),
                ensure_ascii=self.ensure_ascii,
                allow_nan=False,
            )
        except (TypeError, ValueError) as exc:
            raise CodecError(f"Failed to serialize value: '{resource!r}' to JSON.") from exc
        return text.encode("utf-8")

    def encode_text(self, resource: Any) -> str:
        return self.encode(resource).decode("utf-8")

    def decode(self, content: bytes | str, shape: Type[T]) -> T:
        """Decode ``content`` into ``shape``; unknown fields are ignored."""
        text = content.decode("utf-8", errors="replace") if isinstance(content, bytes) else content
        try:
            payload = json.loads(text)
        except ValueError as exc:
            raise CodecError(
                f"Failed to deserialize response to: '{shape.__name__}'.", content=text
            ) from exc
        return self.from_payload(payload, shape, content=text)

    def from_payload(self, payload: Any, shape: Type[T], *, content: Optional[str] = None) -> T:
        if not isinstance(payload, Mapping):
            raise CodecError(
                f"Expected a JSON object for '{shape.__name__}'.",
                content=content if content is not None else repr(payload),
            )
        try:
            return shape.from_payload(payload, self)  # type: ignore[attr-defined]
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise CodecError(
                f"Failed to deserialize response to: '{shape.__name__}': {exc}",
                content=content if content is not None else repr(payload),
            ) from exc

    def normalize(self, value: Any) -> Any:
        """Turn models, enums, sets and timestamps into plain JSON values."""
        if value is None or isinstance(value, (bool, int, float, str)):
            if isinstance(value, Enum):
                return value.value
            return value
        if isinstance(value, Enum):
            return value.value
        if isinstance(value, datetime):
            return self.write_timestamp(value)
        if hasattr(value, "to_payload"):
            return self.normalize(value.to_payload())
        if isinstance(value, Mapping):
            return {
                str(key): self.normalize(item)
                for key, item in value.items()
                if item is not None
            }
        if isinstance(value, (set, frozenset)):
            members = [self.normalize(item) for item in value]
            return sorted(members, key=self._sort_key)
        if isinstance(value, (list, tuple)):
            return [self.normalize(item) for item in value]
        raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")

    def _sort_key(self, member: Any) -> str:
        if isinstance(member, str):
            return member
        return json.dumps(member, separators=(",", ":"), sort_keys=True, ensure_ascii=False)

    def write_timestamp(self, value: datetime) -> str:
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        value = value.astimezone(timezone.utc)
        return value.strftime(TIMESTAMP_FORMAT).format(millis=value.microsecond // 1000)

    def read_timestamp(self, value: Any) -> Optional[datetime]:
        if value is None:
            return None
        if isinstance(value, datetime):
            parsed = value
        else:
            text = str(value).strip()
            if text.endswith(("Z", "z")):
                text = text[:-1] + "+00:00"
            parsed = datetime.fromisoformat(text)
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)
