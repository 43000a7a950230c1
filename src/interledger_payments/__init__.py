"""
Public facade for the Open Payments third-party payment client.

The module re-exports the most useful pieces for integrators so they can
``from interledger_payments import ...`` without navigating the package.
"""

from .api import create_interledger_client, finish_payment, start_payment
from .core import (
    ClientConfig,
    ClientEnvironment,
    ClientOptions,
    ClientParameters,
    CodecError,
    ConfigError,
    FlowExpiredError,
    FlowResult,
    FlowState,
    FlowStateError,
    GrantDeclinedError,
    InterledgerAmount,
    InterledgerClient,
    InterledgerClientError,
    MetaData,
    MetaDataItem,
    NetworkError,
    PaymentFailedError,
    PaymentFlow,
    PaymentPointer,
    PendingAuthorization,
    RemoteError,
    ResourceCodec,
    SignedRequestBuilder,
    SigningError,
    WalletAddress,
    build_environment,
    load_client_config,
    load_env_file,
)

__all__ = (
    "ClientConfig",
    "ClientEnvironment",
    "ClientOptions",
    "ClientParameters",
    "CodecError",
    "ConfigError",
    "FlowExpiredError",
    "FlowResult",
    "FlowState",
    "FlowStateError",
    "GrantDeclinedError",
    "InterledgerAmount",
    "InterledgerClient",
    "InterledgerClientError",
    "MetaData",
    "MetaDataItem",
    "NetworkError",
    "PaymentFailedError",
    "PaymentFlow",
    "PaymentPointer",
    "PendingAuthorization",
    "RemoteError",
    "ResourceCodec",
    "SignedRequestBuilder",
    "SigningError",
    "WalletAddress",
    "build_environment",
    "create_interledger_client",
    "finish_payment",
    "load_client_config",
    "load_env_file",
    "start_payment",
)
