"""
HTTP client for Open Payments wallet, auth and resource servers.

Each method performs exactly one request. Everything except wallet
resolution is signed with the client's Ed25519 key.
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional, Type, TypeVar

import requests

from .codec import ResourceCodec
from .config import ClientConfig
from .errors import FlowStateError
from .models import (
    ILP_METHOD,
    AccessAction,
    AccessGrant,
    AccessItemType,
    GrantAccessRequest,
    IncomingPayment,
    InteractRef,
    MetaData,
    OutgoingPayment,
    OutgoingPaymentRequest,
    Payment,
    PaymentPointer,
    PaymentRequest,
    Quote,
    QuoteRequest,
    WalletAddress,
)
from .request import PreparedRequest, SignedRequestBuilder
from .responses import read_response
from .transport import RequestsTransport, Transport

__all__ = ["InterledgerClient", "build_resource_url"]

T = TypeVar("T")

INCOMING_PAYMENT_ACTIONS = frozenset({AccessAction.READ, AccessAction.COMPLETE, AccessAction.CREATE})
QUOTE_ACTIONS = frozenset({AccessAction.READ, AccessAction.CREATE})
OUTGOING_PAYMENT_ACTIONS = frozenset({AccessAction.READ, AccessAction.CREATE})


def build_resource_url(base_uri: str, path: str) -> str:
    if base_uri is None:
        raise ValueError("Base URI cannot be null")
    if path is None:
        raise ValueError("Path cannot be null")
    root = str(base_uri).rstrip("/")
    return root + (path if path.startswith("/") else "/" + path)


def _access_token(grant: Optional[AccessGrant]) -> str:
    if grant is None:
        raise ValueError("AccessGrant cannot be null")
    token = grant.token
    if not token:
        raise FlowStateError("AccessGrant does not carry an access token")
    return token


def _continuation_token(outgoing: OutgoingPayment) -> str:
    if outgoing is None:
        raise ValueError("OutgoingPayment cannot be null")
    token = outgoing.continuation.access_token.value
    if not token:
        raise FlowStateError("OutgoingPayment continuation does not carry an access token")
    return token


class InterledgerClient:
    """
    Signed access to the Open Payments APIs on behalf of ``config.client_wallet``.

    The instance holds only read-only state (config, codec, transport) and can
    serve several independent payment flows.
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        transport: Optional[Transport] = None,
        session: Optional[requests.Session] = None,
        codec: Optional[ResourceCodec] = None,
    ) -> None:
        if config is None:
            raise ValueError("ClientConfig cannot be null")
        if transport is not None and session is not None:
            raise ValueError("Provide either a transport or a session, not both.")
        self.config = config
        self.codec = codec or ResourceCodec()
        self.transport: Transport = transport or RequestsTransport(
            session, default_timeout=config.options.timeout
        )

    @property
    def client_wallet(self) -> WalletAddress:
        return self.config.client_wallet

    def _builder(self) -> SignedRequestBuilder:
        return SignedRequestBuilder(self.config.private_key, self.config.key_id, self.codec)

    def send(self, request: PreparedRequest, shape: Type[T]) -> T:
        response = self.transport.execute(request)
        return read_response(response, shape, self.codec)

    def get_wallet(self, address: WalletAddress | str) -> PaymentPointer:
        if address is None:
            raise ValueError("WalletAddress cannot be null")
        wallet = address if isinstance(address, WalletAddress) else WalletAddress(address)
        logging.info("Resolving wallet address %s", wallet)
        request = PreparedRequest.unsigned_get(wallet.uri, self.config.options)
        return self.send(request, PaymentPointer)

    def request_incoming_grant(self, receiver: PaymentPointer) -> AccessGrant:
        if receiver is None:
            raise ValueError("PaymentPointer receiver cannot be null")
        logging.info("Requesting incoming-payment grant from %s", receiver.auth_server)
        grant_request = GrantAccessRequest.build(
            self.client_wallet, AccessItemType.INCOMING_PAYMENT, INCOMING_PAYMENT_ACTIONS
        )
        request = self._builder().post(grant_request).target(receiver.auth_server).to_request(self.config.options)
        return self.send(request, AccessGrant)

    def create_incoming_payment(
        self,
        receiver: PaymentPointer,
        grant: AccessGrant,
        amount: Decimal | str | float | int,
        *,
        metadata: Optional[MetaData] = None,
        now: Optional[datetime] = None,
    ) -> IncomingPayment:
        if receiver is None:
            raise ValueError("PaymentPointer receiver cannot be null")
        if amount is None:
            raise ValueError("amount cannot be null")
        token = _access_token(grant)
        payment_request = PaymentRequest.build(
            receiver,
            amount,
            self.config.options.incoming_payment_expiry,
            now=now,
            metadata=metadata,
        )
        url = build_resource_url(receiver.resource_server, "/incoming-payments")
        logging.info("Creating incoming payment of %s %s at %s", amount, receiver.asset_code, url)
        request = (
            self._builder()
            .post(payment_request)
            .target(url)
            .bearer_token(token)
            .to_request(self.config.options)
        )
        return self.send(request, IncomingPayment)

    def request_quote_grant(self, sender: PaymentPointer) -> AccessGrant:
        if sender is None:
            raise ValueError("PaymentPointer sender cannot be null")
        logging.info("Requesting quote grant from %s", sender.auth_server)
        grant_request = GrantAccessRequest.build(self.client_wallet, AccessItemType.QUOTE, QUOTE_ACTIONS)
        request = self._builder().post(grant_request).target(sender.auth_server).to_request(self.config.options)
        return self.send(request, AccessGrant)

    def create_quote(self, quote_token: str, sender: PaymentPointer, incoming_payment: IncomingPayment) -> Quote:
        if not quote_token or not quote_token.strip():
            raise ValueError("Quote token cannot be null or empty")
        if sender is None:
            raise ValueError("PaymentPointer sender cannot be null")
        if incoming_payment is None:
            raise ValueError("IncomingPayment cannot be null")
        quote_request = QuoteRequest(
            wallet_address=sender.address,
            receiver=incoming_payment.id,
            method=ILP_METHOD,
        )
        url = build_resource_url(sender.resource_server, "/quotes")
        logging.info("Requesting quote for %s at %s", incoming_payment.id, url)
        request = (
            self._builder()
            .post(quote_request)
            .target(url)
            .bearer_token(quote_token)
            .to_request(self.config.options)
        )
        return self.send(request, Quote)

    def request_outgoing_grant(
        self,
        sender: PaymentPointer,
        quote: Quote,
        return_url: str,
        nonce: str,
    ) -> OutgoingPayment:
        if sender is None:
            raise ValueError("PaymentPointer sender cannot be null")
        if quote is None:
            raise ValueError("Quote cannot be null")
        if not return_url:
            raise ValueError("Return URL cannot be null")
        if not nonce or not nonce.strip():
            raise ValueError("Nonce cannot be null or empty")
        logging.info("Requesting interactive outgoing-payment grant from %s", sender.auth_server)
        grant_request = GrantAccessRequest.outgoing(
            self.client_wallet,
            OUTGOING_PAYMENT_ACTIONS,
            sender.address,
            quote.debit_amount,
        ).redirect_interact(return_url, nonce)
        request = self._builder().post(grant_request).target(sender.auth_server).to_request(self.config.options)
        return self.send(request, OutgoingPayment)

    def continue_grant(self, outgoing: OutgoingPayment, interact_ref: str) -> AccessGrant:
        token = _continuation_token(outgoing)
        ref = InteractRef(interact_ref)
        logging.info("Continuing grant at %s", outgoing.continuation.uri)
        request = (
            self._builder()
            .post(ref)
            .target(outgoing.continuation.uri)
            .bearer_token(token)
            .to_request(self.config.options)
        )
        return self.send(request, AccessGrant)

    def create_outgoing_payment(
        self,
        grant: AccessGrant,
        sender: PaymentPointer,
        quote: Quote,
        *,
        metadata: Optional[MetaData] = None,
    ) -> Payment:
        if sender is None:
            raise ValueError("PaymentPointer sender cannot be null")
        if quote is None:
            raise ValueError("Quote cannot be null")
        token = _access_token(grant)
        payment_request = OutgoingPaymentRequest(
            wallet_address=sender.address,
            quote_id=quote.id,
            metadata=metadata,
        )
        url = build_resource_url(sender.resource_server, "/outgoing-payments")
        logging.info("Creating outgoing payment for quote %s at %s", quote.id, url)
        request = (
            self._builder()
            .post(payment_request)
            .target(url)
            .bearer_token(token)
            .to_request(self.config.options)
        )
        return self.send(request, Payment)

    def get_incoming_payment(self, payment: IncomingPayment, grant: AccessGrant) -> IncomingPayment:
        if payment is None:
            raise ValueError("IncomingPayment cannot be null")
        token = _access_token(grant)
        logging.debug("Fetching incoming payment %s", payment.id)
        request = self._builder().get().target(payment.id).bearer_token(token).to_request(self.config.options)
        return self.send(request, IncomingPayment)
