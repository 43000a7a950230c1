"""
Public, high-level helpers for running Open Payments third-party payments.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Mapping, Optional

import requests

from .core.client import InterledgerClient
from .core.config import (
    ClientConfig,
    ClientParameters,
    ConfigError,
    load_client_config,
)
from .core.environment import ClientEnvironment, build_environment, load_env_file
from .core.flow import FlowResult, PaymentFlow, PendingAuthorization
from .core.models import MetaData, WalletAddress
from .core.transport import Transport

__all__ = [
    "ClientConfig",
    "ClientEnvironment",
    "ClientParameters",
    "ConfigError",
    "FlowResult",
    "InterledgerClient",
    "PaymentFlow",
    "PendingAuthorization",
    "build_environment",
    "create_interledger_client",
    "finish_payment",
    "load_client_config",
    "load_env_file",
    "start_payment",
]


def _resolve_config(
    config: Optional[ClientConfig],
    *,
    env_file: Optional[str],
    overrides: Optional[Mapping[str, str]],
    base: Optional[Mapping[str, str]],
    parameters: Optional[ClientParameters],
    client_wallet_address: Optional[str],
    key_id: Optional[str],
    private_key: Optional[str],
    private_key_file: Optional[str],
    connect_timeout_seconds: Optional[int | str],
    request_timeout_seconds: Optional[int | str],
    incoming_payment_expiry_seconds: Optional[int | str],
) -> ClientConfig:
    if config is not None:
        extras = (
            overrides,
            base,
            parameters,
            client_wallet_address,
            key_id,
            private_key,
            private_key_file,
            connect_timeout_seconds,
            request_timeout_seconds,
            incoming_payment_expiry_seconds,
        )
        if any(item is not None and item != {} for item in extras):
            raise ValueError(
                "Provide either a pre-built ClientConfig or individual parameters, not both."
            )
        return config
    return load_client_config(
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


def create_interledger_client(
    *,
    config: Optional[ClientConfig] = None,
    session: Optional[requests.Session] = None,
    transport: Optional[Transport] = None,
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
) -> InterledgerClient:
    """
    Construct an :class:`InterledgerClient`.

    Callers can either supply a ready-made :class:`ClientConfig` or let the
    helper assemble one from environment data.
    """
    cfg = _resolve_config(
        config,
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
    return InterledgerClient(cfg, session=session, transport=transport)


def start_payment(
    sender: WalletAddress | str,
    receiver: WalletAddress | str,
    amount: Decimal | str | float | int,
    return_url: str,
    *,
    client: Optional[InterledgerClient] = None,
    config: Optional[ClientConfig] = None,
    session: Optional[requests.Session] = None,
    env_file: Optional[str] = ".env",
    overrides: Optional[Mapping[str, str]] = None,
    nonce: Optional[str] = None,
    metadata: Optional[MetaData] = None,
) -> PendingAuthorization:
    """
    Run the flow up to the interactive grant.

    Send the user to ``pending.redirect_uri`` and keep ``pending`` (see
    :meth:`PendingAuthorization.to_json`) until they come back.
    """
    if client is None:
        client = create_interledger_client(
            config=config, session=session, env_file=env_file, overrides=overrides
        )
    return PaymentFlow(client).start(
        sender, receiver, amount, return_url, nonce=nonce, metadata=metadata
    )


def finish_payment(
    pending: PendingAuthorization | str,
    interact_ref: str,
    *,
    client: Optional[InterledgerClient] = None,
    config: Optional[ClientConfig] = None,
    session: Optional[requests.Session] = None,
    env_file: Optional[str] = ".env",
    overrides: Optional[Mapping[str, str]] = None,
    attempts: int = 10,
    interval: float = 2.0,
) -> FlowResult:
    """
    Resume a flow once the user returned with ``interact_ref``.

    ``pending`` may be the snapshot itself or its JSON text.
    """
    if client is None:
        client = create_interledger_client(
            config=config, session=session, env_file=env_file, overrides=overrides
        )
    if isinstance(pending, str):
        pending = PendingAuthorization.from_json(pending, client.codec)
    return PaymentFlow(client).finish(pending, interact_ref, attempts=attempts, interval=interval)
