"""
Configuration objects and helpers for the Interledger client.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from .environment import build_environment
from .errors import SigningError
from .models import WalletAddress
from .signature import load_private_key

__all__ = [
    "ClientConfig",
    "ClientOptions",
    "ClientParameters",
    "ConfigError",
    "load_client_config",
]

_PARAMETER_TO_ENV_KEY = {
    "client_wallet_address": "ILP_CLIENT_WALLET_ADDRESS",
    "key_id": "ILP_KEY_ID",
    "private_key": "ILP_PRIVATE_KEY",
    "private_key_file": "ILP_PRIVATE_KEY_FILE",
    "connect_timeout_seconds": "ILP_CONNECT_TIMEOUT_SECONDS",
    "request_timeout_seconds": "ILP_REQUEST_TIMEOUT_SECONDS",
    "incoming_payment_expiry_seconds": "ILP_INCOMING_PAYMENT_EXPIRY_SECONDS",
}

DEFAULT_CONNECT_TIMEOUT_SECONDS = 10
DEFAULT_REQUEST_TIMEOUT_SECONDS = 10
DEFAULT_INCOMING_PAYMENT_EXPIRY_SECONDS = 10 * 60


class ConfigError(Exception):
    """Raised when the supplied configuration is invalid."""


def _positive_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{field_name} must be a positive integer, got '{value}'")
    try:
        number = int(str(value).strip())
    except ValueError as exc:
        raise ConfigError(f"{field_name} must be a positive integer, got '{value}'") from exc
    if number <= 0:
        raise ConfigError(f"{field_name} must be a positive integer, got {number}")
    return number


@dataclass(frozen=True)
class ClientOptions:
    """Timeouts and incoming payment expiry, all in seconds."""

    connect_timeout: int = DEFAULT_CONNECT_TIMEOUT_SECONDS
    request_timeout: int = DEFAULT_REQUEST_TIMEOUT_SECONDS
    incoming_payment_expiry: int = DEFAULT_INCOMING_PAYMENT_EXPIRY_SECONDS

    def __post_init__(self) -> None:
        for field_name in ("connect_timeout", "request_timeout", "incoming_payment_expiry"):
            object.__setattr__(
                self, field_name, _positive_int(getattr(self, field_name), field_name)
            )

    @property
    def timeout(self) -> Tuple[int, int]:
        """``(connect, read)`` tuple in the form ``requests`` expects."""
        return (self.connect_timeout, self.request_timeout)


@dataclass(frozen=True)
class ClientParameters:
    """
    Explicit parameter bundle for constructing :class:`ClientConfig`.

    Callers can either instantiate this helper or pass the individual keyword
    arguments directly to :func:`load_client_config`.
    """

    client_wallet_address: Optional[str] = None
    key_id: Optional[str] = None
    private_key: Optional[str] = None
    private_key_file: Optional[str] = None
    connect_timeout_seconds: Optional[int | str] = None
    request_timeout_seconds: Optional[int | str] = None
    incoming_payment_expiry_seconds: Optional[int | str] = None

    def as_overrides(self) -> Dict[str, str]:
        overrides: Dict[str, str] = {}
        for field_name, env_key in _PARAMETER_TO_ENV_KEY.items():
            value = getattr(self, field_name)
            if value is None:
                continue
            overrides[env_key] = str(value)
        return overrides


def _collect_parameter_overrides(
    parameters: Optional[ClientParameters],
    explicit: Mapping[str, Any],
) -> Dict[str, str]:
    overrides: Dict[str, str] = {}
    if parameters is not None:
        overrides.update(parameters.as_overrides())

    for key, value in explicit.items():
        if value is None:
            continue
        try:
            env_key = _PARAMETER_TO_ENV_KEY[key]
        except KeyError as exc:
            raise TypeError(f"Unknown client parameter '{key}'") from exc
        overrides[env_key] = str(value)
    return overrides


def _required(values: Mapping[str, str], key: str) -> str:
    value = values.get(key)
    if value is None or not value.strip():
        raise ConfigError(f"{key} must be provided")
    return value.strip()


def _read_private_key(values: Mapping[str, str]) -> Ed25519PrivateKey:
    pem = values.get("ILP_PRIVATE_KEY")
    key_file = values.get("ILP_PRIVATE_KEY_FILE")
    if pem and pem.strip():
        # single-line .env values carry the PEM line breaks as literal "\n"
        pem = pem.strip().replace("\\n", "\n")
    elif key_file and key_file.strip():
        path = Path(key_file.strip()).expanduser()
        try:
            pem = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"ILP_PRIVATE_KEY_FILE cannot be read: {exc}") from exc
    else:
        raise ConfigError("ILP_PRIVATE_KEY or ILP_PRIVATE_KEY_FILE must be provided")

    try:
        return load_private_key(pem)
    except SigningError as exc:
        raise ConfigError(str(exc)) from exc


@dataclass(frozen=True)
class ClientConfig:
    client_wallet: WalletAddress
    key_id: str
    private_key: Ed25519PrivateKey
    options: ClientOptions = ClientOptions()

    def __post_init__(self) -> None:
        if not self.key_id or not self.key_id.strip():
            raise ConfigError("ILP_KEY_ID must not be empty")
        if not isinstance(self.private_key, Ed25519PrivateKey):
            raise ConfigError("The signing key must be an Ed25519 private key")

    def __repr__(self) -> str:
        return (
            f"ClientConfig(client_wallet={self.client_wallet!r}, key_id={self.key_id!r}, "
            f"options={self.options!r})"
        )

    @classmethod
    def from_mapping(cls, values: Mapping[str, str]) -> "ClientConfig":
        try:
            client_wallet = WalletAddress(_required(values, "ILP_CLIENT_WALLET_ADDRESS"))
        except ValueError as exc:
            raise ConfigError(f"ILP_CLIENT_WALLET_ADDRESS is invalid: {exc}") from exc

        key_id = _required(values, "ILP_KEY_ID")
        private_key = _read_private_key(values)

        options = ClientOptions(
            connect_timeout=values.get(
                "ILP_CONNECT_TIMEOUT_SECONDS", str(DEFAULT_CONNECT_TIMEOUT_SECONDS)
            ),
            request_timeout=values.get(
                "ILP_REQUEST_TIMEOUT_SECONDS", str(DEFAULT_REQUEST_TIMEOUT_SECONDS)
            ),
            incoming_payment_expiry=values.get(
                "ILP_INCOMING_PAYMENT_EXPIRY_SECONDS",
                str(DEFAULT_INCOMING_PAYMENT_EXPIRY_SECONDS),
            ),
        )

        return cls(
            client_wallet=client_wallet,
            key_id=key_id,
            private_key=private_key,
            options=options,
        )

    @classmethod
    def from_env(
        cls,
        *,
        env_file: Optional[str] = ".env",
        overrides: Optional[Mapping[str, str]] = None,
        base: Optional[Mapping[str, str]] = None,
        parameters: Optional[ClientParameters] = None,
        **kwargs: Any,
    ) -> "ClientConfig":
        parameter_overrides = _collect_parameter_overrides(parameters, kwargs)
        merged_overrides = dict(overrides or {})
        merged_overrides.update(parameter_overrides)

        environment = build_environment(
            env_file=env_file,
            base=base,
            overrides=merged_overrides,
        )
        return cls.from_mapping(environment.variables)


def load_client_config(
    *,
    env_file: Optional[str] = ".env",
    overrides: Optional[Mapping[str, str]] = None,
    base: Optional[Mapping[str, str]] = None,
    parameters: Optional[ClientParameters] = None,
    client_wallet_address: Optional[str] = None,
    key_id: Optional[str] = None,
    private_key: Optional[str] = None,
    private_key_file: Optional[str] = None,
    connect_timeout_seconds: Optional[int | str] = None,
    request_timeout_seconds: Optional[int | str] = None,
    incoming_payment_expiry_seconds: Optional[int | str] = None,
) -> ClientConfig:
    """
    Convenience wrapper that mirrors :meth:`ClientConfig.from_env`.

    The configuration can be provided entirely through environment variables,
    a ``.env`` file, direct keyword arguments, or any combination of the three.
    """
    return ClientConfig.from_env(
        env_file=env_file,
        overrides=overrides,
        base=base,
        parameters=parameters,
        client_wallet_address=client_wallet_address,
        key_id=key_id,
        private_key=private_key,
        private_key_file=private_key_file,
        connect_timeout_seconds=connect_timeout_seconds,
        request_timeout_seconds=request_timeout_seconds,
        incoming_payment_expiry_seconds=incoming_payment_expiry_seconds,
    )
