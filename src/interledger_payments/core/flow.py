"""
Third-party payment flow: resolve, grant, pay, quote, authorize, finalize, poll.

The flow is split at the interactive redirect. :meth:`PaymentFlow.start`
runs everything up to the outgoing-payment grant and returns a
:class:`PendingAuthorization` snapshot; once the user comes back from the
redirect, :meth:`PaymentFlow.finish` resumes from that snapshot with the
``interact_ref`` the auth server appended to the return URL. The snapshot is
plain data and can be persisted with :meth:`PendingAuthorization.to_json`.
"""

from __future__ import annotations

import logging
import secrets
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from .client import InterledgerClient
from .codec import ResourceCodec
from .errors import FlowExpiredError, FlowStateError, GrantDeclinedError, PaymentFailedError
from .models import (
    AccessGrant,
    IncomingPayment,
    MetaData,
    OutgoingPayment,
    Payment,
    PaymentPointer,
    Quote,
    WalletAddress,
)
from .states import FlowState

__all__ = ["FlowResult", "PaymentFlow", "PendingAuthorization", "ensure_grant_valid", "ensure_quote_valid"]

DEFAULT_POLL_ATTEMPTS = 10
DEFAULT_POLL_INTERVAL_SECONDS = 2.0


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_quote_valid(quote: Quote, now: datetime) -> None:
    if quote.is_expired(now):
        raise FlowExpiredError(f"Quote {quote.id} expired at {quote.expires_at.isoformat()}")


def ensure_grant_valid(grant: AccessGrant, obtained_at: datetime, now: datetime, name: str) -> None:
    """Reject a grant whose ``expires_in`` has elapsed since ``obtained_at``."""
    token = grant.access_token
    if token is None or token.expires_in is None:
        return
    expires_at = obtained_at + timedelta(seconds=token.expires_in)
    if expires_at <= now:
        raise FlowExpiredError(f"{name} grant expired at {expires_at.isoformat()}")


@dataclass(frozen=True)
class PendingAuthorization:
    """Everything needed to resume a flow suspended at the redirect interaction."""

    sender: PaymentPointer
    receiver: PaymentPointer
    incoming_grant: AccessGrant
    incoming_grant_obtained_at: datetime
    incoming_payment: IncomingPayment
    quote: Quote
    outgoing: OutgoingPayment
    return_url: str
    nonce: str
    created_at: datetime

    @property
    def state(self) -> FlowState:
        return FlowState.AWAITING_INTERACTION

    @property
    def redirect_uri(self) -> Optional[str]:
        return self.outgoing.redirect_uri

    def to_payload(self) -> Dict[str, Any]:
        return {
            "state": self.state,
            "sender": self.sender,
            "receiver": self.receiver,
            "incomingGrant": self.incoming_grant,
            "incomingGrantObtainedAt": self.incoming_grant_obtained_at,
            "incomingPayment": self.incoming_payment,
            "quote": self.quote,
            "outgoing": self.outgoing,
            "returnUrl": self.return_url,
            "nonce": self.nonce,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], codec: ResourceCodec) -> "PendingAuthorization":
        state = payload.get("state", FlowState.AWAITING_INTERACTION.value)
        if state != FlowState.AWAITING_INTERACTION.value:
            raise ValueError(f"Snapshot is in state '{state}', expected 'awaiting-interaction'.")
        return cls(
            sender=PaymentPointer.from_payload(payload["sender"], codec),
            receiver=PaymentPointer.from_payload(payload["receiver"], codec),
            incoming_grant=AccessGrant.from_payload(payload["incomingGrant"], codec),
            incoming_grant_obtained_at=codec.read_timestamp(payload["incomingGrantObtainedAt"]),
            incoming_payment=IncomingPayment.from_payload(payload["incomingPayment"], codec),
            quote=Quote.from_payload(payload["quote"], codec),
            outgoing=OutgoingPayment.from_payload(payload["outgoing"], codec),
            return_url=str(payload["returnUrl"]),
            nonce=str(payload["nonce"]),
            created_at=codec.read_timestamp(payload["createdAt"]),
        )

    def to_json(self, codec: Optional[ResourceCodec] = None) -> str:
        return (codec or ResourceCodec()).encode_text(self)

    @classmethod
    def from_json(cls, content: str | bytes, codec: Optional[ResourceCodec] = None) -> "PendingAuthorization":
        return (codec or ResourceCodec()).decode(content, cls)


@dataclass(frozen=True)
class FlowResult:
    state: FlowState
    payment: Payment
    incoming_payment: IncomingPayment
    grant: AccessGrant

    @property
    def completed(self) -> bool:
        return self.state is FlowState.COMPLETED


def _transition(source: FlowState, target: FlowState) -> None:
    logging.info("Payment flow: %s -> %s", source.value, target.value)


class PaymentFlow:
    """
    Sequences :class:`InterledgerClient` calls through the payment states.

    Steps take the values produced by earlier steps and return new values;
    the flow object itself only holds the client and its clock.
    """

    def __init__(
        self,
        client: InterledgerClient,
        *,
        clock: Callable[[], datetime] = _utc_now,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.client = client
        self.clock = clock
        self.sleep = sleep

    def resolve_wallet(self, address: WalletAddress | str) -> PaymentPointer:
        return self.client.get_wallet(address)

    def resolve_wallets(
        self, sender: WalletAddress | str, receiver: WalletAddress | str
    ) -> Tuple[PaymentPointer, PaymentPointer]:
        sender_wallet = self.resolve_wallet(sender)
        receiver_wallet = self.resolve_wallet(receiver)
        _transition(FlowState.START, FlowState.WALLETS_RESOLVED)
        return sender_wallet, receiver_wallet

    def start(
        self,
        sender: WalletAddress | str,
        receiver: WalletAddress | str,
        amount: Decimal | str | float | int,
        return_url: str,
        *,
        nonce: Optional[str] = None,
        metadata: Optional[MetaData] = None,
    ) -> PendingAuthorization:
        """Run steps up to the interactive grant and return the suspended flow."""
        if not return_url:
            raise ValueError("Return URL cannot be null")
        nonce = nonce or secrets.token_urlsafe(16)

        sender_wallet, receiver_wallet = self.resolve_wallets(sender, receiver)

        incoming_grant = self.client.request_incoming_grant(receiver_wallet)
        incoming_grant_obtained_at = self.clock()
        if not incoming_grant.token:
            raise FlowStateError("Incoming payment grant was issued without an access token")
        _transition(FlowState.WALLETS_RESOLVED, FlowState.INCOMING_GRANT_OBTAINED)

        incoming_payment = self.client.create_incoming_payment(
            receiver_wallet, incoming_grant, amount, metadata=metadata, now=self.clock()
        )
        _transition(FlowState.INCOMING_GRANT_OBTAINED, FlowState.INCOMING_PAYMENT_CREATED)

        quote_grant = self.client.request_quote_grant(sender_wallet)
        if not quote_grant.token:
            raise FlowStateError("Quote grant was issued without an access token")
        _transition(FlowState.INCOMING_PAYMENT_CREATED, FlowState.QUOTE_GRANT_OBTAINED)

        quote = self.client.create_quote(quote_grant.token, sender_wallet, incoming_payment)
        _transition(FlowState.QUOTE_GRANT_OBTAINED, FlowState.QUOTE_OBTAINED)

        ensure_quote_valid(quote, self.clock())
        outgoing = self.client.request_outgoing_grant(sender_wallet, quote, return_url, nonce)
        if outgoing.redirect_uri is None:
            raise FlowStateError("Outgoing payment grant did not return an interaction redirect")
        _transition(FlowState.QUOTE_OBTAINED, FlowState.AWAITING_INTERACTION)

        return PendingAuthorization(
            sender=sender_wallet,
            receiver=receiver_wallet,
            incoming_grant=incoming_grant,
            incoming_grant_obtained_at=incoming_grant_obtained_at,
            incoming_payment=incoming_payment,
            quote=quote,
            outgoing=outgoing,
            return_url=str(return_url),
            nonce=nonce,
            created_at=self.clock(),
        )

    def continue_grant(self, pending: PendingAuthorization, interact_ref: str) -> AccessGrant:
        """Exchange the interaction reference for the outgoing-payment grant."""
        ensure_quote_valid(pending.quote, self.clock())
        _transition(FlowState.AWAITING_INTERACTION, FlowState.INTERACTION_RETURNED)
        grant = self.client.continue_grant(pending.outgoing, interact_ref)
        if not grant.token:
            _transition(FlowState.INTERACTION_RETURNED, FlowState.DECLINED)
            raise GrantDeclinedError(
                f"Outgoing payment grant for quote {pending.quote.id} was declined or is invalid"
            )
        _transition(FlowState.INTERACTION_RETURNED, FlowState.GRANT_FINALIZED)
        return grant

    def execute_payment(
        self,
        pending: PendingAuthorization,
        grant: AccessGrant,
        *,
        metadata: Optional[MetaData] = None,
    ) -> Payment:
        ensure_quote_valid(pending.quote, self.clock())
        payment = self.client.create_outgoing_payment(grant, pending.sender, pending.quote, metadata=metadata)
        if payment.failed:
            _transition(FlowState.GRANT_FINALIZED, FlowState.FAILED)
            raise PaymentFailedError(f"Outgoing payment {payment.id} failed")
        _transition(FlowState.GRANT_FINALIZED, FlowState.PAYMENT_EXECUTED)
        return payment

    def poll_incoming_payment(
        self,
        pending: PendingAuthorization,
        *,
        attempts: int = DEFAULT_POLL_ATTEMPTS,
        interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
    ) -> IncomingPayment:
        """
        Re-read the incoming payment until it completes or ``attempts`` run out.

        Returns the last observed payment; callers check ``completed``.
        """
        if attempts < 1:
            raise ValueError("attempts must be at least 1")
        if interval < 0:
            raise ValueError("interval must not be negative")

        incoming = pending.incoming_payment
        for attempt in range(1, attempts + 1):
            ensure_grant_valid(
                pending.incoming_grant, pending.incoming_grant_obtained_at, self.clock(), "Incoming payment"
            )
            incoming = self.client.get_incoming_payment(pending.incoming_payment, pending.incoming_grant)
            if incoming.completed:
                _transition(FlowState.PAYMENT_EXECUTED, FlowState.COMPLETED)
                return incoming
            logging.info(
                "Incoming payment %s not completed yet (attempt %s/%s)", incoming.id, attempt, attempts
            )
            if attempt < attempts:
                self.sleep(interval)
        return incoming

    def finish(
        self,
        pending: PendingAuthorization,
        interact_ref: str,
        *,
        attempts: int = DEFAULT_POLL_ATTEMPTS,
        interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
        metadata: Optional[MetaData] = None,
    ) -> FlowResult:
        """Resume after the redirect: finalize the grant, pay, then poll."""
        grant = self.continue_grant(pending, interact_ref)
        payment = self.execute_payment(pending, grant, metadata=metadata)
        try:
            incoming = self.poll_incoming_payment(pending, attempts=attempts, interval=interval)
        except FlowExpiredError as exc:
            # the outgoing payment already exists, so it is reported instead of EXPIRED
            logging.warning("Stopped polling after outgoing payment %s was created: %s", payment.id, exc)
            return FlowResult(
                state=FlowState.PAYMENT_EXECUTED,
                payment=payment,
                incoming_payment=pending.incoming_payment,
                grant=grant,
            )
        state = FlowState.COMPLETED if incoming.completed else FlowState.PAYMENT_EXECUTED
        return FlowResult(state=state, payment=payment, incoming_payment=incoming, grant=grant)
