"""
Settings Sanitizer
==================

Validates and normalizes a proposed settings update before it is persisted.

The output is always a complete ``NluSettings``: it starts from the settings
currently resolved from storage and overlays the validated fields of the
proposal. A failing credential probe never blocks the save; it only adds a
notice for the admin (and clears the configured flag).

A value counts as *present* in the proposal when its key exists and is not
None, which matches how HTML forms submit unchecked checkboxes (the key is
simply missing).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Mapping
from urllib.parse import urlsplit

import structlog

from .catalog import FEATURES, absint, coerce_bool, split_feature_key
from .credentials import CredentialValidator
from .errors import AuthFailed
from .models import CREDENTIAL_KEYS, Credentials, FeatureSettings, NluSettings
from .registry import PostTypeRegistry
from .resolver import ConfigResolver

log = structlog.get_logger(__name__)

AUTH_FAILED_MESSAGE = "IBM Watson NLU Authentication Failed. Please check credentials."

MAX_THRESHOLD_PERCENT = 100

SCRIPT_STYLE_RE = re.compile(r"<(script|style)[^>]*?>.*?</\1\s*>", re.IGNORECASE | re.DOTALL)
TAG_RE = re.compile(r"<[^>]*>")
CONTROL_RE = re.compile(r"[\x00-\x1f\x7f]")
ALLOWED_URL_SCHEMES = ("http", "https")


@dataclass(frozen=True)
class SettingsNotice:
    """A message for the admin about a settings save (rendered by the UI)."""

    setting: str
    code: str
    message: str
    detail: str = ""
    type: str = "error"


def sanitize_text_field(value: Any) -> str:
    """Strip markup and control characters, collapse whitespace, trim."""
    text = str(value)
    text = SCRIPT_STYLE_RE.sub("", text)
    text = TAG_RE.sub("", text)
    text = CONTROL_RE.sub(" ", text)
    return " ".join(text.split())


def sanitize_url(value: Any) -> str:
    """Return ``value`` as a clean http(s) URL, or "" if it is not one."""
    text = CONTROL_RE.sub("", str(value)).strip().replace(" ", "%20")
    if not text:
        return ""
    parts = urlsplit(text)
    if parts.scheme.lower() not in ALLOWED_URL_SCHEMES or not parts.netloc:
        return ""
    return text


def _present(group: Mapping[str, Any], key: str) -> bool:
    return group.get(key) is not None


def _group(data: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = data.get(name)
    return value if isinstance(value, Mapping) else {}


def _clamp_threshold(value: Any) -> int:
    return min(absint(value), MAX_THRESHOLD_PERCENT)


def _carry_threshold(value: int | None) -> int | None:
    # Stored non-positive thresholds already mean "use the default".
    if value is None or value <= 0:
        return None
    return min(value, MAX_THRESHOLD_PERCENT)


class SettingsSanitizer:
    def __init__(
        self,
        resolver: ConfigResolver,
        validator: CredentialValidator,
        post_types: PostTypeRegistry,
    ):
        self.resolver = resolver
        self.validator = validator
        self.post_types = post_types
        self.notices: list[SettingsNotice] = []

    def sanitize(self, proposed: Mapping[str, Any] | NluSettings | None) -> NluSettings:
        """
        Validate ``proposed`` and merge it over the stored settings.

        Runs the credential probe exactly once, on the proposed credentials.
        Notices from the latest call are available in ``self.notices``.
        """
        self.notices = []
        if isinstance(proposed, NluSettings):
            proposed = proposed.to_dict()
        if not isinstance(proposed, Mapping):
            proposed = {}

        base = self.resolver.snapshot()

        proposed_credentials = _group(proposed, "credentials")
        self._validate_credentials(proposed_credentials)

        settings = NluSettings(
            credentials=self._sanitize_credentials(proposed_credentials, base.credentials),
            post_types=self._sanitize_post_types(_group(proposed, "post_types")),
            features=self._sanitize_features(_group(proposed, "features"), base),
        )
        log.info(
            "Sanitized settings",
            post_types=[name for name, flag in settings.post_types.items() if flag],
            enabled_features=[
                name for name, state in settings.features.items() if state.enabled
            ],
            notices=len(self.notices),
        )
        return settings

    def _validate_credentials(self, proposed: Mapping[str, Any]) -> None:
        candidate = Credentials(
            url=sanitize_url(proposed.get("url") or ""),
            username=sanitize_text_field(proposed.get("username") or ""),
            password=sanitize_text_field(proposed.get("password") or ""),
        )
        try:
            self.validator.check(candidate)
        except AuthFailed as e:
            self.notices.append(
                SettingsNotice(
                    setting="credentials",
                    code="classifai-auth",
                    message=AUTH_FAILED_MESSAGE,
                    detail=e.reason,
                )
            )

    def _sanitize_credentials(
        self, proposed: Mapping[str, Any], base: Credentials
    ) -> Credentials:
        values = base.to_dict()
        for key in CREDENTIAL_KEYS:
            if not _present(proposed, key):
                continue
            if key == "url":
                values[key] = sanitize_url(proposed[key])
            else:
                values[key] = sanitize_text_field(proposed[key])
        return Credentials(**values)

    def _sanitize_post_types(self, proposed: Mapping[str, Any]) -> dict[str, int | None]:
        registered = self.post_types.list_public()
        known = {post_type.name for post_type in registered}
        unknown = sorted(str(name) for name in proposed if name not in known)
        if unknown:
            log.debug("Ignoring unregistered post types", post_types=unknown)

        # None marks an explicit "off", which is not the same as never configured.
        return {
            post_type.name: 1
            if _present(proposed, post_type.name) and coerce_bool(proposed[post_type.name])
            else None
            for post_type in registered
        }

    def _sanitize_features(
        self, proposed: Mapping[str, Any], base: NluSettings
    ) -> dict[str, FeatureSettings]:
        unknown = sorted(str(key) for key in proposed if split_feature_key(str(key)) is None)
        if unknown:
            log.warning("Dropping unknown feature settings", keys=unknown)

        features = {}
        for name, descriptor in FEATURES.items():
            current = base.features.get(name, FeatureSettings())

            enabled = None
            if _present(proposed, descriptor.enabled_key):
                enabled = int(coerce_bool(proposed[descriptor.enabled_key]))

            threshold = _carry_threshold(current.threshold)
            if _present(proposed, descriptor.threshold_key):
                threshold = _clamp_threshold(proposed[descriptor.threshold_key])

            taxonomy = current.taxonomy
            if _present(proposed, descriptor.taxonomy_key):
                taxonomy = sanitize_text_field(proposed[descriptor.taxonomy_key]) or None

            features[name] = FeatureSettings(
                enabled=enabled, threshold=threshold, taxonomy=taxonomy
            )
        return features
