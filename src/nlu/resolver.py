"""
Configuration Resolver
======================

Settings have been stored in two generations over the plugin's lifetime:

- the current schema, under ``Settings.OPTION_NAME``;
- the pre-1.3 schema, under ``Settings.LEGACY_OPTION_NAME``, which older
  installs still carry and which is never written any more.

``ConfigResolver`` answers "what is the value of ``group.key``?" by walking a
fixed precedence chain:

1. the current-schema group, when it is present and non-empty;
2. otherwise the legacy group of the same name;
3. otherwise a built-in default.

The choice between 1 and 2 is made per group and never per key: a group
saved under the current schema shadows its legacy counterpart entirely, so
stale legacy values can never leak into a newer, partially edited group.
When nothing at all has been saved yet every group falls back, which is the
one-time migration read of an upgraded install.

Resolution only ever reads from the store.
"""

from __future__ import annotations

import copy
from typing import Any, Mapping

import structlog

from common.config import Settings
from common.store import KeyValueStore

from .catalog import split_feature_key
from .errors import ConfigMissing
from .models import GROUPS, NluSettings

log = structlog.get_logger(__name__)

LEGACY_CREDENTIAL_KEYS = {
    "watson_url": "url",
    "watson_username": "username",
    "watson_password": "password",
}

REGISTRATION_KEYS = ("email", "license_key")


def _check_group(group: str) -> None:
    if group not in GROUPS:
        raise ValueError(f"Unknown settings group: {group!r}")


def _has_values(value: Mapping[str, Any]) -> bool:
    """True for a non-empty normalized group; a group saved as ``{}`` counts as unsaved."""
    return len(value) > 0


def _normalize_group(group: str, value: Any) -> dict[str, Any]:
    """Bring a stored group into the current key layout."""
    if group == "post_types" and isinstance(value, (list, tuple)):
        # Early installs stored the enabled post types as a plain list.
        return {str(name): 1 for name in value}
    if not isinstance(value, Mapping):
        return {}

    normalized = dict(value)
    if group == "credentials":
        for old_key, new_key in LEGACY_CREDENTIAL_KEYS.items():
            old_value = normalized.pop(old_key, None)
            if old_value not in (None, "") and normalized.get(new_key) in (None, ""):
                normalized[new_key] = old_value
    return normalized


class ConfigResolver:
    """Resolves single settings values across storage generations."""

    def __init__(self, store: KeyValueStore, settings: Settings):
        self.store = store
        self.settings = settings

    def _blob(self, key: str) -> Mapping[str, Any]:
        blob = self.store.get(key)
        if blob is None:
            return {}
        if not isinstance(blob, Mapping):
            log.warning(
                "Stored settings blob is not a mapping; ignoring it",
                option=key,
                blob_type=type(blob).__name__,
            )
            return {}
        return blob

    def group(self, group: str) -> dict[str, Any]:
        """
        Return a copy of the stored group chosen by the precedence chain.

        An empty dict means neither storage generation holds the group.
        """
        _check_group(group)
        current = _normalize_group(group, self._blob(self.settings.OPTION_NAME).get(group))
        if _has_values(current):
            return copy.deepcopy(current)

        legacy = _normalize_group(group, self._blob(self.settings.LEGACY_OPTION_NAME).get(group))
        if _has_values(legacy):
            log.debug("Falling back to legacy settings group", group=group)
            return copy.deepcopy(legacy)
        return {}

    def resolve(self, group: str, key: str) -> Any:
        """
        Return the effective value of ``group.key``.

        Never fails for a missing value: the built-in default is returned
        instead (an empty string for credentials, ``False`` for flags, the
        catalog defaults for feature thresholds and taxonomies).
        """
        try:
            return self._lookup(group, key)
        except ConfigMissing:
            return self.default(group, key)

    def _lookup(self, group: str, key: str) -> Any:
        value = self.group(group).get(key)
        if value is None or value == "":
            raise ConfigMissing(group, key)
        return value

    def default(self, group: str, key: str) -> Any:
        """The built-in default for ``group.key``."""
        _check_group(group)
        if group == "credentials":
            fallbacks = {
                "url": self.settings.WATSON_URL,
                "username": self.settings.WATSON_USERNAME,
                "password": self.settings.WATSON_PASSWORD,
            }
            return fallbacks.get(key, "")
        if group == "post_types":
            return False

        parsed = split_feature_key(key)
        if parsed is None:
            return ""
        descriptor, field = parsed
        if field == "threshold":
            return descriptor.threshold_default
        if field == "taxonomy":
            return descriptor.taxonomy_default
        return False

    def snapshot(self) -> NluSettings:
        """The stored settings as the precedence chain sees them, without defaults."""
        return NluSettings.from_dict({group: self.group(group) for group in GROUPS})

    def registration(self, key: str) -> str:
        """
        Registration details (``email`` or ``license_key``).

        They live in the general plugin settings, which share the legacy key.
        Pre-1.3 installs nested them under a ``registration`` group; a
        top-level value takes precedence.
        """
        if key not in REGISTRATION_KEYS:
            raise ValueError(f"Unknown registration key: {key!r}")

        general = self._blob(self.settings.LEGACY_OPTION_NAME)
        value = general.get(key)
        if value in (None, ""):
            nested = general.get("registration")
            value = nested.get(key) if isinstance(nested, Mapping) else None
        return "" if value is None else str(value)
