"""
Core primitives that implement the Open Payments third-party payment flow.
"""

from .client import InterledgerClient, build_resource_url
from .codec import ResourceCodec
from .config import (
    ClientConfig,
    ClientOptions,
    ClientParameters,
    ConfigError,
    load_client_config,
)
from .environment import ClientEnvironment, build_environment, load_env_file
from .errors import (
    CodecError,
    FlowExpiredError,
    FlowStateError,
    GrantDeclinedError,
    InterledgerClientError,
    NetworkError,
    PaymentFailedError,
    RemoteError,
    SigningError,
)
from .flow import FlowResult, PaymentFlow, PendingAuthorization
from .models import (
    AccessAction,
    AccessGrant,
    AccessItemType,
    IncomingPayment,
    InterledgerAmount,
    MetaData,
    MetaDataItem,
    OutgoingPayment,
    Payment,
    PaymentPointer,
    Quote,
    WalletAddress,
)
from .request import PreparedRequest, SignedRequestBuilder
from .signature import content_digest, load_private_key
from .states import FlowState
from .transport import RequestsTransport, Transport, TransportResponse

__all__ = [
    "AccessAction",
    "AccessGrant",
    "AccessItemType",
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
    "IncomingPayment",
    "InterledgerAmount",
    "InterledgerClient",
    "InterledgerClientError",
    "MetaData",
    "MetaDataItem",
    "NetworkError",
    "OutgoingPayment",
    "Payment",
    "PaymentFailedError",
    "PaymentFlow",
    "PaymentPointer",
    "PendingAuthorization",
    "PreparedRequest",
    "Quote",
    "RemoteError",
    "RequestsTransport",
    "ResourceCodec",
    "SignedRequestBuilder",
    "SigningError",
    "Transport",
    "TransportResponse",
    "WalletAddress",
    "build_environment",
    "build_resource_url",
    "content_digest",
    "load_client_config",
    "load_env_file",
    "load_private_key",
]
