"""
Single-use builder that turns request facets into a signed, ready-to-send request.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .codec import ResourceCodec
from .config import ClientOptions
from .signature import (
    ALLOWED_METHODS,
    METHOD,
    SIGNATURE_ID,
    TARGET_URI,
    build_signature_base,
    content_digest,
    normalize_target,
    sign_components,
)

__all__ = [
    "ACCEPT_HEADER",
    "APPLICATION_JSON",
    "PreparedRequest",
    "SignedRequestBuilder",
]

ACCEPT_HEADER = "Accept"
CONTENT_TYPE_HEADER = "Content-Type"
CONTENT_DIGEST_HEADER = "Content-Digest"
CONTENT_LENGTH_HEADER = "Content-Length"
AUTHORIZATION_HEADER = "Authorization"
SIGNATURE_INPUT_HEADER = "Signature-Input"
SIGNATURE_HEADER = "Signature"

APPLICATION_JSON = "application/json"

# signature base order; only components that are present are emitted
_COMPONENT_ORDER = (
    METHOD,
    TARGET_URI,
    CONTENT_DIGEST_HEADER,
    CONTENT_LENGTH_HEADER,
    CONTENT_TYPE_HEADER,
    AUTHORIZATION_HEADER,
)


@dataclass(frozen=True)
class PreparedRequest:
    method: str
    url: str
    headers: Mapping[str, str]
    body: Optional[bytes] = None
    timeout: Optional[Tuple[int, int]] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    @classmethod
    def unsigned_get(cls, url: str, options: ClientOptions) -> "PreparedRequest":
        return cls(
            method="GET",
            url=url,
            headers={ACCEPT_HEADER: APPLICATION_JSON},
            timeout=options.timeout,
        )


class SignedRequestBuilder:
    """
    Accumulates method, target, body and token for exactly one request.

    Usage::

        request = (
            SignedRequestBuilder(private_key, key_id, codec)
            .post(grant_request)
            .target(auth_server)
            .bearer_token(token)
            .to_request(options)
        )

    ``to_request`` consumes the builder; any further use raises ``RuntimeError``.
    """

    def __init__(self, private_key: Any, key_id: str, codec: Optional[ResourceCodec] = None) -> None:
        if private_key is None:
            raise ValueError("PrivateKey cannot be null")
        if not key_id or not key_id.strip():
            raise ValueError("KeyId cannot be null or empty")
        self._private_key = private_key
        self._key_id = key_id
        self._codec = codec or ResourceCodec()
        self._components: Dict[str, Any] = {}
        self._body: Optional[bytes] = None
        self._created: Optional[int] = None
        self._signature_params: Optional[str] = None
        self._consumed = False

    def method(self, value: Optional[str]) -> "SignedRequestBuilder":
        self._check_open()
        if value is None or not value.strip():
            raise ValueError("Method cannot be null or empty!")
        if METHOD in self._components:
            raise ValueError(f"Method '{self._components[METHOD]}' already set!")
        method = value.strip().upper()
        if method not in ALLOWED_METHODS:
            raise ValueError(
                f"Method '{value}' is not allowed. Allowed methods are: {', '.join(ALLOWED_METHODS)}"
            )
        self._components[METHOD] = method
        self._invalidate()
        return self

    def get(self) -> "SignedRequestBuilder":
        return self.method("GET")

    def delete(self) -> "SignedRequestBuilder":
        return self.method("DELETE")

    def post(self, body: Any = None) -> "SignedRequestBuilder":
        self.method("POST")
        return self if body is None else self.json_body(body)

    def put(self, body: Any = None) -> "SignedRequestBuilder":
        self.method("PUT")
        return self if body is None else self.json_body(body)

    def target(self, uri: Optional[str]) -> "SignedRequestBuilder":
        self._check_open()
        if TARGET_URI in self._components:
            raise ValueError(f"Target '{self._components[TARGET_URI]}' already set!")
        self._components[TARGET_URI] = normalize_target(uri)
        self._invalidate()
        return self

    def json_body(self, value: Any) -> "SignedRequestBuilder":
        """
        Encode ``value`` and record Content-Type, Content-Length and Content-Digest.

        Strings are taken as already-encoded JSON; anything else goes through
        the codec.
        """
        self._check_open()
        if self._body is not None:
            raise ValueError("Body already set!")
        if value is None:
            raise ValueError("JSON must not be null or empty!")
        if isinstance(value, bytes):
            body = value
        elif isinstance(value, str):
            body = value.encode("utf-8")
        else:
            body = self._codec.encode(value)
        if not body.strip():
            raise ValueError("JSON must not be null or empty!")

        self._body = body
        self._components[CONTENT_DIGEST_HEADER] = content_digest(body)
        self._components[CONTENT_LENGTH_HEADER] = len(body)
        self._components[CONTENT_TYPE_HEADER] = APPLICATION_JSON
        self._invalidate()
        return self

    def bearer_token(self, token: Optional[str]) -> "SignedRequestBuilder":
        self._check_open()
        if token is None or not token.strip():
            raise ValueError("Token must not be null or empty!")
        self._components[AUTHORIZATION_HEADER] = f"GNAP {token}"
        self._invalidate()
        return self

    def finalize(self, created: Optional[int] = None) -> "SignedRequestBuilder":
        """Fix the creation timestamp (defaults to now) and compute signature params."""
        self._check_open()
        self._require(METHOD)
        self._require(TARGET_URI)
        self._created = int(time.time()) if created is None else int(created)
        _, self._signature_params = build_signature_base(
            self._ordered_components(), self._key_id, self._created
        )
        return self

    @property
    def method_value(self) -> str:
        return self._require(METHOD)

    @property
    def target_value(self) -> str:
        return self._require(TARGET_URI)

    @property
    def body(self) -> Optional[bytes]:
        return self._body

    def signature_base(self) -> str:
        self._check_finalized()
        return build_signature_base(self._ordered_components(), self._key_id, self._created)[0]

    def signature(self) -> str:
        return self._sign()[0]

    def signature_input_header(self) -> str:
        self._check_finalized()
        return f"{SIGNATURE_ID}={self._signature_params}"

    def signature_header(self) -> str:
        return f"{SIGNATURE_ID}=:{self.signature()}:"

    def headers(self) -> Dict[str, str]:
        """Headers in wire order; requires :meth:`finalize`."""
        self._check_finalized()
        headers = {ACCEPT_HEADER: APPLICATION_JSON}
        if self._body is not None:
            headers[CONTENT_TYPE_HEADER] = self._components[CONTENT_TYPE_HEADER]
            headers[CONTENT_DIGEST_HEADER] = self._components[CONTENT_DIGEST_HEADER]
        if AUTHORIZATION_HEADER in self._components:
            headers[AUTHORIZATION_HEADER] = self._components[AUTHORIZATION_HEADER]
        headers[SIGNATURE_INPUT_HEADER] = self.signature_input_header()
        headers[SIGNATURE_HEADER] = self.signature_header()
        return headers

    def to_request(self, options: ClientOptions) -> PreparedRequest:
        """Sign (finalizing with the current time if needed) and consume the builder."""
        self._check_open()
        if self._signature_params is None:
            self.finalize()
        request = PreparedRequest(
            method=self.method_value,
            url=self.target_value,
            headers=self.headers(),
            body=self._body,
            timeout=options.timeout,
        )
        self._consumed = True
        return request

    def _ordered_components(self) -> List[Tuple[str, Any]]:
        return [(name, self._components[name]) for name in _COMPONENT_ORDER if name in self._components]

    def _sign(self) -> Tuple[str, str, str]:
        self._check_finalized()
        return sign_components(
            self._ordered_components(), self._private_key, self._key_id, self._created
        )

    def _require(self, key: str) -> Any:
        if key not in self._components:
            raise RuntimeError(f"Parameter '{key}' must be set before continuing!")
        return self._components[key]

    def _invalidate(self) -> None:
        self._signature_params = None
        self._created = None

    def _check_finalized(self) -> None:
        if self._signature_params is None:
            raise RuntimeError("Signature must be finalized before retrieval of signature headers!")

    def _check_open(self) -> None:
        if self._consumed:
            raise RuntimeError("SignedRequestBuilder has already produced a request and cannot be reused.")
