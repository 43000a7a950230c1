"""
Exception hierarchy raised by the Interledger client and payment flow.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Mapping, Optional

from requests.structures import CaseInsensitiveDict

from .states import FlowState

if TYPE_CHECKING:
    from .models import ApiError

__all__ = [
    "CodecError",
    "FlowExpiredError",
    "FlowStateError",
    "GrantDeclinedError",
    "InterledgerClientError",
    "NetworkError",
    "PaymentFailedError",
    "RemoteError",
    "SigningError",
]


class InterledgerClientError(Exception):
    """Base class for every error surfaced by this package."""


class NetworkError(InterledgerClientError):
    """The transport failed or timed out before a response was received."""


class SigningError(InterledgerClientError):
    """Key material or digest input cannot produce a valid signature."""


class CodecError(InterledgerClientError):
    def __init__(self, message: str, *, content: Optional[str] = None) -> None:
        super().__init__(message)
        self.content = content


class RemoteError(InterledgerClientError):
    """
    A non-2xx response from a wallet, auth or resource server.

    ``description`` is always populated using the
    ``[<status>](<code>) <description>`` layout so callers can log it as-is.
    """

    def __init__(
        self,
        status_code: int,
        error: "ApiError",
        *,
        headers: Optional[Mapping[str, str]] = None,
        body: Optional[str] = None,
    ) -> None:
        self.status_code = status_code
        self.error = error
        self.headers = CaseInsensitiveDict(headers or {})
        self.body = body if body is not None else "[no body]"
        self.description = format_error_description(status_code, error)
        super().__init__(self.description)

    @property
    def code(self) -> Optional[str]:
        return self.error.code


def format_error_description(status_code: int, error: "ApiError") -> str:
    code = error.code if error.code and error.code.strip() else "no code"
    description = (
        error.description
        if error.description and error.description.strip()
        else "no description"
    )
    return f"[{status_code}]({code}) {description}"


class FlowStateError(InterledgerClientError):
    """
    The payment flow cannot advance from its current state.

    ``state`` names the terminal state the flow ended in, or ``None`` when a
    value required by a later step was missing.
    """

    def __init__(self, message: str, *, state: Optional[FlowState] = None) -> None:
        super().__init__(message)
        self.state = state


class GrantDeclinedError(FlowStateError):
    def __init__(self, message: str = "Outgoing payment grant was declined") -> None:
        super().__init__(message, state=FlowState.DECLINED)


class PaymentFailedError(FlowStateError):
    def __init__(self, message: str = "Outgoing payment failed") -> None:
        super().__init__(message, state=FlowState.FAILED)


class FlowExpiredError(FlowStateError):
    def __init__(self, message: str) -> None:
        super().__init__(message, state=FlowState.EXPIRED)
