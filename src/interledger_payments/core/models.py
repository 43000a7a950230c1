"""
Value objects exchanged with Open Payments wallet, auth and resource servers.

Every model is a frozen dataclass. ``to_payload`` returns the wire mapping
(``None`` values are dropped by the codec) and ``from_payload`` rebuilds the
model from a decoded JSON mapping, ignoring fields it does not know.
"""

from __future__ import annotations

import decimal
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_EVEN, ROUND_HALF_UP
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, FrozenSet, Iterable, Mapping, Optional, Tuple
from urllib.parse import urlsplit

if TYPE_CHECKING:
    from .codec import ResourceCodec

__all__ = [
    "AccessAction",
    "AccessContinue",
    "AccessGrant",
    "AccessInteract",
    "AccessItem",
    "AccessItemType",
    "AccessToken",
    "ApiError",
    "DEFAULT_AMOUNT_SCALE",
    "GrantAccessRequest",
    "ILP_METHOD",
    "IncomingPayment",
    "InteractContinue",
    "InteractFinish",
    "InteractRef",
    "InterledgerAmount",
    "InterledgerMethod",
    "Limits",
    "MetaData",
    "MetaDataItem",
    "OutgoingPayment",
    "OutgoingPaymentRequest",
    "Payment",
    "PaymentPointer",
    "PaymentRequest",
    "Quote",
    "QuoteRequest",
    "WalletAddress",
]

DEFAULT_AMOUNT_SCALE = 2
ILP_METHOD = "ilp"
REDIRECT = "redirect"


def _optional(payload: Mapping[str, Any], key: str, factory, codec: "ResourceCodec"):
    value = payload.get(key)
    if value is None:
        return None
    return factory.from_payload(value, codec)


def _optional_str(payload: Mapping[str, Any], key: str) -> Optional[str]:
    value = payload.get(key)
    return None if value is None else str(value)


def _optional_int(payload: Mapping[str, Any], key: str) -> Optional[int]:
    value = payload.get(key)
    return None if value is None else int(value)


@dataclass(frozen=True)
class WalletAddress:
    """
    URI identifying an Interledger account.

    Payment pointer shorthand (``$host/path``) is expanded to
    ``https://host/path``. Serializes as the bare URI string.
    """

    uri: str

    def __post_init__(self) -> None:
        if self.uri is None:
            raise ValueError("Address cannot be null.")
        value = str(self.uri).strip()
        if value.startswith("$"):
            value = "https://" + value[1:]
        parts = urlsplit(value)
        if not parts.scheme or not parts.netloc:
            raise ValueError(f"Address is not a valid URI: '{self.uri}'.")
        object.__setattr__(self, "uri", value)

    def __str__(self) -> str:
        return self.uri

    def to_payload(self) -> str:
        return self.uri


class AccessAction(str, Enum):
    READ = "read"
    COMPLETE = "complete"
    CREATE = "create"
    READ_ALL = "read-all"
    LIST = "list"
    LIST_ALL = "list-all"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_value(cls, value: str) -> "AccessAction":
        try:
            return _ACTIONS_BY_VALUE[value]
        except KeyError:
            raise ValueError(f"Unknown AccessAction: '{value}'.") from None


_ACTIONS_BY_VALUE = {item.value: item for item in AccessAction}


class AccessItemType(str, Enum):
    INCOMING_PAYMENT = "incoming-payment"
    OUTGOING_PAYMENT = "outgoing-payment"
    QUOTE = "quote"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_value(cls, value: str) -> "AccessItemType":
        try:
            return _ITEM_TYPES_BY_VALUE[value]
        except KeyError:
            raise ValueError(f"Unknown AccessItemType: '{value}'.") from None


_ITEM_TYPES_BY_VALUE = {item.value: item for item in AccessItemType}


@dataclass(frozen=True)
class InterledgerAmount:
    """
    Amount in the smallest unit of an asset.

    ``amount`` is the decimal value times ``10 ** asset_scale`` written as an
    unsigned integer string.
    """

    asset_code: str
    asset_scale: int
    amount: str

    @classmethod
    def build(
        cls,
        amount: Decimal | str | float | int | None,
        asset_code: Optional[str],
        scale: int = DEFAULT_AMOUNT_SCALE,
    ) -> "InterledgerAmount":
        if amount is None:
            raise ValueError("amount cannot be null or empty.")
        if asset_code is None or not asset_code.strip():
            raise ValueError("assetCode cannot be null or empty.")
        if len(asset_code) != 3:
            raise ValueError(
                "assetCode must be 3 characters long / ISO4217 currency code, "
                f"but was: '{asset_code}'."
            )
        if not 0 <= scale <= 255:
            raise ValueError(f"assetScale must be between 0 and 255, got {scale}.")
        return cls(
            asset_code=asset_code,
            asset_scale=scale,
            amount=to_interledger_amount(amount, scale),
        )

    def as_decimal(self) -> Decimal:
        return Decimal(self.amount).scaleb(-self.asset_scale)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "assetCode": self.asset_code,
            "assetScale": self.asset_scale,
            "value": self.amount,
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], codec: "ResourceCodec") -> "InterledgerAmount":
        value = str(payload["value"])
        if not value.isdigit():
            raise ValueError(f"Amount value must be an unsigned integer, got '{value}'.")
        return cls(
            asset_code=payload["assetCode"],
            asset_scale=int(payload["assetScale"]),
            amount=value,
        )


def _to_decimal(amount: Decimal | str | float | int) -> Decimal:
    if isinstance(amount, Decimal):
        return amount
    if isinstance(amount, float):
        # shortest repr, so 12.3456 stays 12.3456 and not its binary expansion
        return Decimal(repr(amount))
    try:
        return Decimal(amount)
    except decimal.InvalidOperation as exc:
        raise ValueError(f"amount is not a valid decimal number: '{amount}'.") from exc


def to_interledger_amount(
    amount: Decimal | str | float | int, scale: int = DEFAULT_AMOUNT_SCALE
) -> str:
    """
    Round ``amount`` to cents (half-up), then scale it by ``10 ** scale``.

    The cents normalization happens even when ``scale`` is not 2.
    """
    value = _to_decimal(amount)
    if not value.is_finite():
        raise ValueError(f"amount must be a finite number, got '{amount}'.")
    if value < 0:
        raise ValueError("amount cannot be negative.")
    with decimal.localcontext() as ctx:
        ctx.prec = max(ctx.prec, len(value.as_tuple().digits) + scale + 4)
        cents = value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        scaled = cents.scaleb(scale).quantize(Decimal(1), rounding=ROUND_HALF_EVEN)
    return format(scaled, "f")


@dataclass(frozen=True)
class Limits:
    receiver: Optional[str] = None
    receive_amount: Optional[InterledgerAmount] = None
    debit_amount: Optional[InterledgerAmount] = None
    interval: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        return {
            "receiver": self.receiver,
            "receiveAmount": self.receive_amount,
            "debitAmount": self.debit_amount,
            "interval": self.interval,
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], codec: "ResourceCodec") -> "Limits":
        return cls(
            receiver=_optional_str(payload, "receiver"),
            receive_amount=_optional(payload, "receiveAmount", InterledgerAmount, codec),
            debit_amount=_optional(payload, "debitAmount", InterledgerAmount, codec),
            interval=_optional_str(payload, "interval"),
        )


@dataclass(frozen=True)
class AccessItem:
    """One requested capability. ``identifier`` and ``limits`` apply to outgoing payments only."""

    type: AccessItemType
    actions: FrozenSet[AccessAction]
    identifier: Optional[str] = None
    limits: Optional[Limits] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "actions", frozenset(self.actions))
        if self.type is not AccessItemType.OUTGOING_PAYMENT and (
            self.identifier is not None or self.limits is not None
        ):
            raise ValueError("identifier and limits are only allowed for outgoing-payment access.")

    @classmethod
    def outgoing(
        cls,
        actions: Iterable[AccessAction],
        identifier: WalletAddress | str,
        debit_amount: InterledgerAmount,
    ) -> "AccessItem":
        return cls(
            type=AccessItemType.OUTGOING_PAYMENT,
            actions=frozenset(actions),
            identifier=str(identifier),
            limits=Limits(debit_amount=debit_amount),
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "actions": self.actions,
            "identifier": self.identifier,
            "limits": self.limits,
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], codec: "ResourceCodec") -> "AccessItem":
        item_type = AccessItemType.from_value(payload["type"])
        # servers echo identifier/limits only for outgoing payments; ignore them elsewhere
        outgoing = item_type is AccessItemType.OUTGOING_PAYMENT
        return cls(
            type=item_type,
            actions=frozenset(AccessAction.from_value(a) for a in payload.get("actions") or ()),
            identifier=_optional_str(payload, "identifier") if outgoing else None,
            limits=_optional(payload, "limits", Limits, codec) if outgoing else None,
        )


@dataclass(frozen=True)
class AccessToken:
    value: Optional[str] = None
    manage: Optional[str] = None
    expires_in: Optional[int] = None
    access: Tuple[AccessItem, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "access", tuple(self.access))

    def to_payload(self) -> Dict[str, Any]:
        return {
            "value": self.value,
            "manage": self.manage,
            "expires_in": self.expires_in,
            "access": self.access or None,
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], codec: "ResourceCodec") -> "AccessToken":
        return cls(
            value=_optional_str(payload, "value"),
            manage=_optional_str(payload, "manage"),
            expires_in=_optional_int(payload, "expires_in"),
            access=tuple(AccessItem.from_payload(item, codec) for item in payload.get("access") or ()),
        )


@dataclass(frozen=True)
class AccessContinue:
    access_token: AccessToken
    uri: str
    wait: Optional[int] = None

    def to_payload(self) -> Dict[str, Any]:
        return {"access_token": self.access_token, "uri": self.uri, "wait": self.wait}

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], codec: "ResourceCodec") -> "AccessContinue":
        return cls(
            access_token=AccessToken.from_payload(payload["access_token"], codec),
            uri=str(payload["uri"]),
            wait=_optional_int(payload, "wait"),
        )


@dataclass(frozen=True)
class AccessGrant:
    access_token: Optional[AccessToken] = None
    continuation: Optional[AccessContinue] = None

    @property
    def token(self) -> Optional[str]:
        if self.access_token is None:
            return None
        return self.access_token.value

    def to_payload(self) -> Dict[str, Any]:
        return {"access_token": self.access_token, "continue": self.continuation}

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], codec: "ResourceCodec") -> "AccessGrant":
        return cls(
            access_token=_optional(payload, "access_token", AccessToken, codec),
            continuation=_optional(payload, "continue", AccessContinue, codec),
        )


@dataclass(frozen=True)
class InteractFinish:
    method: str
    uri: str
    nonce: str

    def to_payload(self) -> Dict[str, Any]:
        return {"method": self.method, "uri": self.uri, "nonce": self.nonce}

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], codec: "ResourceCodec") -> "InteractFinish":
        return cls(method=payload["method"], uri=str(payload["uri"]), nonce=payload["nonce"])


@dataclass(frozen=True)
class AccessInteract:
    start: Tuple[str, ...]
    finish: Optional[InteractFinish] = None

    def to_payload(self) -> Dict[str, Any]:
        return {"start": list(self.start), "finish": self.finish}

    @classmethod
    def redirect(cls, return_url: Optional[str], nonce: Optional[str]) -> "AccessInteract":
        finish = None
        if return_url is not None:
            if not nonce:
                raise ValueError("Nonce cannot be null or empty")
            finish = InteractFinish(method=REDIRECT, uri=str(return_url), nonce=nonce)
        return cls(start=(REDIRECT,), finish=finish)


@dataclass(frozen=True)
class GrantAccessRequest:
    client: WalletAddress
    access_token: AccessToken
    interact: Optional[AccessInteract] = None

    @classmethod
    def build(
        cls,
        client: WalletAddress,
        access_type: AccessItemType,
        actions: Iterable[AccessAction],
    ) -> "GrantAccessRequest":
        item = AccessItem(type=access_type, actions=frozenset(actions))
        return cls(client=client, access_token=AccessToken(access=(item,)))

    @classmethod
    def outgoing(
        cls,
        client: WalletAddress,
        actions: Iterable[AccessAction],
        identifier: WalletAddress | str,
        debit_amount: InterledgerAmount,
    ) -> "GrantAccessRequest":
        item = AccessItem.outgoing(actions, identifier, debit_amount)
        return cls(client=client, access_token=AccessToken(access=(item,)))

    def redirect_interact(self, return_url: Optional[str], nonce: Optional[str]) -> "GrantAccessRequest":
        return GrantAccessRequest(
            client=self.client,
            access_token=self.access_token,
            interact=AccessInteract.redirect(return_url, nonce),
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "client": self.client,
            "access_token": self.access_token,
            "interact": self.interact,
        }


@dataclass(frozen=True)
class InteractRef:
    interact_ref: str

    def __post_init__(self) -> None:
        if not self.interact_ref or not self.interact_ref.strip():
            raise ValueError("interactRef cannot be null or empty.")

    def to_payload(self) -> Dict[str, Any]:
        return {"interact_ref": self.interact_ref}


@dataclass(frozen=True)
class InteractContinue:
    redirect: str
    finish: str

    def to_payload(self) -> Dict[str, Any]:
        return {"redirect": self.redirect, "finish": self.finish}

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], codec: "ResourceCodec") -> "InteractContinue":
        return cls(redirect=str(payload["redirect"]), finish=str(payload["finish"]))


@dataclass(frozen=True)
class OutgoingPayment:
    """Result of the interactive outgoing-payment grant request."""

    continuation: AccessContinue
    interact: Optional[InteractContinue] = None
    access_token: Optional[str] = None

    @property
    def redirect_uri(self) -> Optional[str]:
        return self.interact.redirect if self.interact is not None else None

    def to_payload(self) -> Dict[str, Any]:
        return {
            "continue": self.continuation,
            "interact": self.interact,
            "access_token": self.access_token,
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], codec: "ResourceCodec") -> "OutgoingPayment":
        token = payload.get("access_token")
        if isinstance(token, Mapping):
            token = token.get("value")
        return cls(
            continuation=AccessContinue.from_payload(payload["continue"], codec),
            interact=_optional(payload, "interact", InteractContinue, codec),
            access_token=None if token is None else str(token),
        )


@dataclass(frozen=True)
class PaymentPointer:
    address: str
    asset_code: str
    asset_scale: int
    auth_server: str
    resource_server: str
    public_name: Optional[str] = None

    def __post_init__(self) -> None:
        if not 0 <= self.asset_scale <= 255:
            raise ValueError(f"assetScale must be between 0 and 255, got {self.asset_scale}.")

    @property
    def wallet(self) -> WalletAddress:
        return WalletAddress(self.address)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "id": self.address,
            "publicName": self.public_name,
            "assetCode": self.asset_code,
            "assetScale": self.asset_scale,
            "authServer": self.auth_server,
            "resourceServer": self.resource_server,
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], codec: "ResourceCodec") -> "PaymentPointer":
        return cls(
            address=str(payload["id"]),
            public_name=_optional_str(payload, "publicName"),
            asset_code=payload["assetCode"],
            asset_scale=int(payload["assetScale"]),
            auth_server=str(payload["authServer"]),
            resource_server=str(payload["resourceServer"]),
        )


@dataclass(frozen=True)
class MetaDataItem:
    key: str
    value: Optional[str] = None

    def __str__(self) -> str:
        return f"{self.key}={self.value or ''}"

    def to_payload(self) -> Dict[str, Any]:
        return {"key": self.key, "value": self.value}

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], codec: "ResourceCodec") -> "MetaDataItem":
        return cls(key=payload["key"], value=_optional_str(payload, "value"))


@dataclass(frozen=True)
class MetaData:
    external_id: Optional[str] = None
    value: FrozenSet[MetaDataItem] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", frozenset(self.value))

    def to_payload(self) -> Dict[str, Any]:
        return {"externalId": self.external_id, "value": self.value or None}

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], codec: "ResourceCodec") -> "MetaData":
        items = payload.get("value")
        if not isinstance(items, list):
            # free-form metadata written by other clients
            items = ()
        return cls(
            external_id=_optional_str(payload, "externalId"),
            value=frozenset(MetaDataItem.from_payload(item, codec) for item in items),
        )


@dataclass(frozen=True)
class InterledgerMethod:
    type: str
    ilp_address: str
    shared_secret: str

    def to_payload(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "ilpAddress": self.ilp_address,
            "sharedSecret": self.shared_secret,
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], codec: "ResourceCodec") -> "InterledgerMethod":
        return cls(
            type=payload["type"],
            ilp_address=payload["ilpAddress"],
            shared_secret=payload["sharedSecret"],
        )


@dataclass(frozen=True)
class PaymentRequest:
    """Body of an incoming-payment creation request."""

    wallet_address: str
    incoming_amount: InterledgerAmount
    expires_at: Optional[datetime] = None
    metadata: Optional[MetaData] = None

    @classmethod
    def build(
        cls,
        receiver: PaymentPointer,
        amount: Decimal | str | float | int,
        expires_in_seconds: int,
        *,
        now: Optional[datetime] = None,
        metadata: Optional[MetaData] = None,
    ) -> "PaymentRequest":
        if receiver is None:
            raise ValueError("Missing receiver address.")
        if _to_decimal(amount) <= 0:
            raise ValueError("Amount must be greater than zero.")
        if expires_in_seconds <= 0:
            raise ValueError("expiresInSeconds must be greater than 0.")
        now = now or datetime.now(timezone.utc)
        return cls(
            wallet_address=receiver.address,
            incoming_amount=InterledgerAmount.build(amount, receiver.asset_code, receiver.asset_scale),
            expires_at=now + timedelta(seconds=expires_in_seconds),
            metadata=metadata,
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "walletAddress": self.wallet_address,
            "incomingAmount": self.incoming_amount,
            "expiresAt": self.expires_at,
            "metadata": self.metadata,
        }


@dataclass(frozen=True)
class IncomingPayment:
    id: str
    completed: bool
    wallet_address: str
    received_amount: InterledgerAmount
    incoming_amount: Optional[InterledgerAmount] = None
    methods: Tuple[InterledgerMethod, ...] = ()
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    metadata: Optional[MetaData] = None

    def to_payload(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "completed": self.completed,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "expiresAt": self.expires_at,
            "incomingAmount": self.incoming_amount,
            "methods": list(self.methods),
            "receivedAmount": self.received_amount,
            "walletAddress": self.wallet_address,
            "metadata": self.metadata,
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], codec: "ResourceCodec") -> "IncomingPayment":
        return cls(
            id=str(payload["id"]),
            completed=bool(payload.get("completed", False)),
            wallet_address=str(payload["walletAddress"]),
            received_amount=InterledgerAmount.from_payload(payload["receivedAmount"], codec),
            incoming_amount=_optional(payload, "incomingAmount", InterledgerAmount, codec),
            methods=tuple(InterledgerMethod.from_payload(m, codec) for m in payload.get("methods") or ()),
            created_at=codec.read_timestamp(payload.get("createdAt")),
            updated_at=codec.read_timestamp(payload.get("updatedAt")),
            expires_at=codec.read_timestamp(payload.get("expiresAt")),
            metadata=_optional(payload, "metadata", MetaData, codec),
        )


@dataclass(frozen=True)
class QuoteRequest:
    wallet_address: str
    receiver: str
    method: str = ILP_METHOD

    def to_payload(self) -> Dict[str, Any]:
        return {
            "walletAddress": self.wallet_address,
            "receiver": self.receiver,
            "method": self.method,
        }


@dataclass(frozen=True)
class Quote:
    id: str
    wallet_address: str
    receiver: str
    debit_amount: InterledgerAmount
    receive_amount: InterledgerAmount
    method: str = ILP_METHOD
    created_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and self.expires_at <= now

    def to_payload(self) -> Dict[str, Any]:
        return {
            "createdAt": self.created_at,
            "expiresAt": self.expires_at,
            "debitAmount": self.debit_amount,
            "id": self.id,
            "method": self.method,
            "receiveAmount": self.receive_amount,
            "receiver": self.receiver,
            "walletAddress": self.wallet_address,
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], codec: "ResourceCodec") -> "Quote":
        method = payload.get("method", ILP_METHOD)
        if method != ILP_METHOD:
            raise ValueError(f"Unsupported payment method: '{method}'.")
        return cls(
            id=str(payload["id"]),
            wallet_address=str(payload["walletAddress"]),
            receiver=str(payload["receiver"]),
            debit_amount=InterledgerAmount.from_payload(payload["debitAmount"], codec),
            receive_amount=InterledgerAmount.from_payload(payload["receiveAmount"], codec),
            method=method,
            created_at=codec.read_timestamp(payload.get("createdAt")),
            expires_at=codec.read_timestamp(payload.get("expiresAt")),
        )


@dataclass(frozen=True)
class OutgoingPaymentRequest:
    wallet_address: str
    quote_id: Optional[str] = None
    metadata: Optional[MetaData] = None

    def to_payload(self) -> Dict[str, Any]:
        return {
            "walletAddress": self.wallet_address,
            "quoteId": self.quote_id,
            "metadata": self.metadata,
        }


@dataclass(frozen=True)
class Payment:
    """Outgoing payment as created on the sender's resource server."""

    id: str
    wallet_address: str
    receiver: str
    debit_amount: InterledgerAmount
    receive_amount: InterledgerAmount
    sent_amount: InterledgerAmount
    failed: bool = False
    quote_id: Optional[str] = None
    grant_spent_debit_amount: Optional[InterledgerAmount] = None
    grant_spent_receive_amount: Optional[InterledgerAmount] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    metadata: Optional[MetaData] = None

    def to_payload(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "walletAddress": self.wallet_address,
            "quoteId": self.quote_id,
            "failed": self.failed,
            "receiver": self.receiver,
            "receiveAmount": self.receive_amount,
            "debitAmount": self.debit_amount,
            "sentAmount": self.sent_amount,
            "grantSpentDebitAmount": self.grant_spent_debit_amount,
            "grantSpentReceiveAmount": self.grant_spent_receive_amount,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "metadata": self.metadata,
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], codec: "ResourceCodec") -> "Payment":
        return cls(
            id=str(payload["id"]),
            wallet_address=str(payload["walletAddress"]),
            receiver=str(payload["receiver"]),
            debit_amount=InterledgerAmount.from_payload(payload["debitAmount"], codec),
            receive_amount=InterledgerAmount.from_payload(payload["receiveAmount"], codec),
            sent_amount=InterledgerAmount.from_payload(payload["sentAmount"], codec),
            failed=bool(payload.get("failed") or False),
            quote_id=_optional_str(payload, "quoteId"),
            grant_spent_debit_amount=_optional(payload, "grantSpentDebitAmount", InterledgerAmount, codec),
            grant_spent_receive_amount=_optional(payload, "grantSpentReceiveAmount", InterledgerAmount, codec),
            created_at=codec.read_timestamp(payload.get("createdAt")),
            updated_at=codec.read_timestamp(payload.get("updatedAt")),
            metadata=_optional(payload, "metadata", MetaData, codec),
        )


@dataclass(frozen=True)
class ApiError:
    code: Optional[str] = None
    description: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        return {"error": {"code": self.code, "description": self.description}}

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], codec: "ResourceCodec") -> "ApiError":
        envelope = payload.get("error", payload)
        if not isinstance(envelope, Mapping):
            envelope = {"description": envelope}
        description = envelope.get("description", envelope.get("message"))
        return cls(
            code=_optional_str(envelope, "code"),
            description=None if description is None else str(description),
        )
