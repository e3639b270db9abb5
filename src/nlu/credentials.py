"""
Credential Validation
=====================

Before a settings save is accepted, the proposed NLU credentials are probed
with the cheapest request the provider supports: a single keyword on a short
fixed sentence. The outcome is mirrored into a process-wide "configured"
flag which the surrounding UI reads to decide whether to nag the admin.

The probe is only run on save, never on read paths.
"""

from __future__ import annotations

from typing import Any, Mapping

import structlog

from common.config import Settings
from common.store import KeyValueStore
from common.transport import ClassificationTransport

from .catalog import coerce_bool
from .errors import AuthFailed, TransportError
from .models import Credentials

log = structlog.get_logger(__name__)

PROBE_TEXT = "Lorem ipsum dolor sit amet."


def probe_body() -> dict[str, Any]:
    """Request body of the credential probe (one keyword, no emotion analysis)."""
    return {
        "text": PROBE_TEXT,
        "language": "en",
        "features": {"keywords": {"emotion": False, "limit": 1}},
    }


def analyze_url(base_url: str) -> str:
    """The analyze endpoint below the configured service URL."""
    return f"{base_url.strip().rstrip('/')}/v1/analyze"


class ConfiguredFlag:
    """Process-wide "credentials are known to work" flag, kept in the store."""

    def __init__(self, store: KeyValueStore, key: str):
        self.store = store
        self.key = key

    def is_set(self) -> bool:
        return coerce_bool(self.store.get(self.key, False))

    def set(self) -> None:
        self.store.set(self.key, True)

    def clear(self) -> None:
        self.store.set(self.key, False)


class CredentialValidator:
    def __init__(
        self,
        transport: ClassificationTransport,
        flag: ConfiguredFlag,
        settings: Settings,
    ):
        self.transport = transport
        self.flag = flag
        self.settings = settings

    def check(self, credentials: Credentials | Mapping[str, Any] | None) -> None:
        """
        Probe the NLU provider with ``credentials``.

        Returns None when the credentials work and raises ``AuthFailed``
        otherwise. Incomplete credentials fail without any network call.
        Either way the configured flag is updated.
        """
        if not isinstance(credentials, Credentials):
            credentials = Credentials.from_dict(credentials)

        if not credentials.complete:
            missing = [
                key for key, value in credentials.to_dict().items() if not value.strip()
            ]
            self.flag.clear()
            log.warning("NLU credentials incomplete", missing=missing)
            raise AuthFailed(f"Missing credentials: {', '.join(missing)}")

        url = analyze_url(credentials.url)
        try:
            response = self.transport.post(
                url,
                probe_body(),
                auth=(credentials.username, credentials.password),
                params={"version": self.settings.WATSON_NLU_VERSION},
                timeout=self.settings.REQUEST_TIMEOUT,
            )
        except TransportError as e:
            self.flag.clear()
            log.warning("NLU credential probe could not reach the provider", url=url)
            raise AuthFailed(f"NLU provider unreachable: {e}") from e

        if not 200 <= response.status_code < 300:
            self.flag.clear()
            log.warning(
                "NLU credential probe rejected",
                url=url,
                status_code=response.status_code,
            )
            raise AuthFailed(f"NLU provider returned HTTP {response.status_code}")

        self.flag.set()
        log.info("NLU credentials verified", url=url)
