"""
HTTP transport used to execute prepared requests.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Mapping, Optional, Protocol

import requests
from requests.structures import CaseInsensitiveDict

from .errors import NetworkError
from .request import PreparedRequest

__all__ = [
    "RequestsTransport",
    "Transport",
    "TransportResponse",
    "log_request",
    "log_response",
]

_LOG_SPACE = "    "
_NO_BODY = "<no body>"


@dataclass(frozen=True)
class TransportResponse:
    status_code: int
    url: str
    headers: Mapping[str, str] = field(default_factory=CaseInsensitiveDict)
    body: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class Transport(Protocol):
    def execute(self, request: PreparedRequest) -> TransportResponse:
        ...


def _format_headers(headers: Mapping[str, str]) -> str:
    return "".join(f"\n{_LOG_SPACE}{name}: {value}" for name, value in headers.items())


def log_request(request: PreparedRequest) -> None:
    if not logging.getLogger().isEnabledFor(logging.DEBUG):
        return
    body = request.body.decode("utf-8", errors="replace") if request.body else _NO_BODY
    logging.debug(
        "HTTP Request:  %s %s%s\n%sbody: %s",
        request.method,
        request.url,
        _format_headers(request.headers),
        _LOG_SPACE,
        body,
    )


def log_response(response: TransportResponse) -> None:
    if not logging.getLogger().isEnabledFor(logging.DEBUG):
        return
    logging.debug(
        "HTTP Response: %s %s%s\n%sbody: %s",
        response.status_code,
        response.url,
        _format_headers(response.headers),
        _LOG_SPACE,
        response.body or _NO_BODY,
    )


class RequestsTransport:
    """
    Executes prepared requests over a :class:`requests.Session`.

    Failures to reach the server surface as :class:`NetworkError`; nothing is
    retried here.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        *,
        default_timeout: Optional[tuple[int, int]] = None,
    ) -> None:
        self.session = session or requests.Session()
        self.default_timeout = default_timeout

    def execute(self, request: PreparedRequest) -> TransportResponse:
        log_request(request)
        try:
            response = self.session.request(
                request.method,
                request.url,
                headers=dict(request.headers),
                data=request.body,
                timeout=request.timeout or self.default_timeout,
            )
        except requests.Timeout as exc:
            raise NetworkError(f"Request to {request.url} timed out: {exc}") from exc
        except requests.RequestException as exc:
            raise NetworkError(f"Request to {request.url} failed: {exc}") from exc

        result = TransportResponse(
            status_code=response.status_code,
            url=str(response.url or request.url),
            headers=CaseInsensitiveDict(response.headers),
            body=response.text or "",
        )
        log_response(result)
        return result
