"""States of the third-party payment flow."""

from __future__ import annotations

from enum import Enum

__all__ = ["FlowState", "TERMINAL_STATES"]


class FlowState(str, Enum):
    START = "start"
    WALLETS_RESOLVED = "wallets-resolved"
    INCOMING_GRANT_OBTAINED = "incoming-grant-obtained"
    INCOMING_PAYMENT_CREATED = "incoming-payment-created"
    QUOTE_GRANT_OBTAINED = "quote-grant-obtained"
    QUOTE_OBTAINED = "quote-obtained"
    AWAITING_INTERACTION = "awaiting-interaction"
    INTERACTION_RETURNED = "interaction-returned"
    GRANT_FINALIZED = "grant-finalized"
    PAYMENT_EXECUTED = "payment-executed"
    COMPLETED = "completed"
    DECLINED = "declined"
    FAILED = "failed"
    EXPIRED = "expired"

    @property
    def terminal(self) -> bool:
        return self in TERMINAL_STATES


TERMINAL_STATES = frozenset(
    {FlowState.COMPLETED, FlowState.DECLINED, FlowState.FAILED, FlowState.EXPIRED}
)
