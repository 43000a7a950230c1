"""
HTTP message signatures (RFC 9421 profile used by Open Payments).

The server rebuilds the signature base from the received request, so every
byte produced here has to match its canonicalization: component order, the
lowercase names, the ``/`` appended to query-less targets and the single
``\\n`` separator between lines.
"""

from __future__ import annotations

import base64
import hashlib
from typing import Any, Optional, Sequence, Tuple
from urllib.parse import urlsplit

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from .errors import SigningError

__all__ = [
    "ALLOWED_METHODS",
    "METHOD",
    "SIGNATURE_ID",
    "SIGNATURE_PARAMS",
    "TARGET_URI",
    "build_signature_base",
    "content_digest",
    "load_private_key",
    "normalize_target",
    "sign",
    "sign_components",
    "signature_params",
]

METHOD = "@method"
TARGET_URI = "@target-uri"
SIGNATURE_PARAMS = "@signature-params"
SIGNATURE_ID = "sig1"
DIGEST_ALGORITHM = "sha-512"

ALLOWED_METHODS = ("GET", "POST", "PUT", "DELETE", "HEAD")


def normalize_target(uri: Optional[str]) -> str:
    """Append ``/`` to a target that has neither a query nor a trailing slash."""
    if uri is None or not str(uri).strip():
        raise ValueError("Target URI must not be null!")
    value = str(uri).strip()
    if not urlsplit(value).query and not value.endswith("/"):
        return value + "/"
    return value


def content_digest(body: Optional[bytes]) -> str:
    """Return the ``Content-Digest`` value (``sha-512=:<base64>:``) for ``body``."""
    if body is None or not body.strip():
        raise SigningError("Content must not be null or empty!")
    digest = base64.b64encode(hashlib.sha512(body).digest()).decode("ascii")
    return f"{DIGEST_ALGORITHM}=:{digest}:"


def signature_params(names: Sequence[str], key_id: str, created: int) -> str:
    quoted = " ".join(f'"{name.lower()}"' for name in names)
    return f'({quoted});keyid="{key_id}";created={int(created)}'


def build_signature_base(
    components: Sequence[Tuple[str, Any]],
    key_id: str,
    created: int,
) -> Tuple[str, str]:
    """
    Build the signature base for ``components`` in the given order.

    Returns ``(signature_base, signature_params)``; the params line is the last
    line of the base and also the value of the ``Signature-Input`` header.
    """
    if not key_id or not key_id.strip():
        raise ValueError("KeyId cannot be null or empty")
    names = [name for name, _ in components]
    params = signature_params(names, key_id, created)
    lines = [f'"{name.lower()}": {value}' for name, value in components]
    lines.append(f'"{SIGNATURE_PARAMS}": {params}')
    return "\n".join(lines), params


def sign(signature_base: str, private_key: Any) -> str:
    """Ed25519-sign the UTF-8 bytes of ``signature_base``; returns base64 text."""
    if not isinstance(private_key, Ed25519PrivateKey):
        raise SigningError(
            f"Request signing requires an Ed25519 private key, got {type(private_key).__name__}"
        )
    signature = private_key.sign(signature_base.encode("utf-8"))
    return base64.b64encode(signature).decode("ascii")


def sign_components(
    components: Sequence[Tuple[str, Any]],
    private_key: Any,
    key_id: str,
    created: int,
) -> Tuple[str, str, str]:
    """Return ``(signature, signature_base, signature_params)`` for ``components``."""
    base, params = build_signature_base(components, key_id, created)
    return sign(base, private_key), base, params


def load_private_key(pem: str | bytes, password: Optional[bytes] = None) -> Ed25519PrivateKey:
    """Load a PEM encoded Ed25519 private key (PKCS#8)."""
    data = pem.encode("utf-8") if isinstance(pem, str) else pem
    try:
        key = serialization.load_pem_private_key(data, password=password)
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise SigningError(f"Failed to load private key: {exc}") from exc
    if not isinstance(key, Ed25519PrivateKey):
        raise SigningError(
            f"Request signing requires an Ed25519 private key, got {type(key).__name__}"
        )
    return key

