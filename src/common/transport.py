"""
NLU API Transport
=================

This module provides the HTTP transport used to talk to the natural-language
understanding provider. It wraps a ``requests.Session`` and converts every
transport-level failure (connection refused, DNS, timeout, TLS) into a single
``TransportError`` so that callers only deal with one failure type.

Non-success HTTP statuses are *not* raised here: the response is returned as
is and interpreting the status code is left to the caller.

No retries are performed. Callers that need a retry policy must wrap the
transport themselves.
"""

from __future__ import annotations

from typing import Any, Protocol

import requests
import structlog

log = structlog.get_logger(__name__)


class TransportError(Exception):
    """The NLU provider could not be reached (no HTTP response was received)."""


class ClassificationTransport(Protocol):
    """Opaque HTTP-like call used to reach the classification provider."""

    def post(
        self,
        url: str,
        body: dict[str, Any],
        *,
        auth: tuple[str, str] | None = None,
        params: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> requests.Response:
        ...


class RequestsTransport:
    """A transport backed by a shared ``requests.Session``."""

    def __init__(self, timeout: float = 5):
        self.timeout = timeout
        self._session = requests.Session()
        self._session.headers.update(
            {"Content-Type": "application/json", "Accept": "application/json"}
        )

    def post(
        self,
        url: str,
        body: dict[str, Any],
        *,
        auth: tuple[str, str] | None = None,
        params: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> requests.Response:
        """POST a JSON body, raising ``TransportError`` on transport failure."""
        try:
            return self._session.post(
                url,
                json=body,
                auth=auth,
                params=params,
                timeout=timeout if timeout is not None else self.timeout,
            )
        except requests.exceptions.RequestException as e:
            log.warning("NLU request failed", url=url, error=str(e))
            raise TransportError(str(e)) from e

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self._session.close()
