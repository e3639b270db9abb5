"""
Settings Model
==============

Typed views over the stored settings blob.

The blob keeps the shape the host platform has always persisted (three
groups of string keys, with ``features`` stored flat as ``category``,
``category_threshold``, ``category_taxonomy`` ...). These dataclasses give
the rest of the code a statically declared structure with exactly one field
per recognised key, and convert to and from that blob.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from .catalog import FEATURES, coerce_bool, parse_int

GROUPS = ("credentials", "post_types", "features")
CREDENTIAL_KEYS = ("url", "username", "password")


@dataclass(frozen=True)
class Credentials:
    url: str = ""
    username: str = ""
    password: str = ""

    @property
    def complete(self) -> bool:
        """True when none of url/username/password is blank."""
        return all(value.strip() for value in (self.url, self.username, self.password))

    def to_dict(self) -> dict[str, str]:
        return {"url": self.url, "username": self.username, "password": self.password}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "Credentials":
        data = data or {}
        return cls(**{key: _str_or_empty(data.get(key)) for key in CREDENTIAL_KEYS})


@dataclass(frozen=True)
class FeatureSettings:
    """
    Stored state of one feature.

    ``None`` means "never configured" and lets the resolver fall through to
    the built-in default; ``enabled`` is otherwise 0 or 1.
    """

    enabled: int | None = None
    threshold: int | None = None
    taxonomy: str | None = None


@dataclass(frozen=True)
class NluSettings:
    """The complete settings aggregate: every group and every catalog feature."""

    credentials: Credentials = field(default_factory=Credentials)
    post_types: dict[str, int | None] = field(default_factory=dict)
    features: dict[str, FeatureSettings] = field(
        default_factory=lambda: {name: FeatureSettings() for name in FEATURES}
    )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the stored blob shape."""
        features: dict[str, Any] = {}
        for name, descriptor in FEATURES.items():
            state = self.features.get(name, FeatureSettings())
            features[descriptor.enabled_key] = state.enabled
            if state.threshold is not None:
                features[descriptor.threshold_key] = state.threshold
            if state.taxonomy is not None:
                features[descriptor.taxonomy_key] = state.taxonomy
        return {
            "credentials": self.credentials.to_dict(),
            "post_types": dict(self.post_types),
            "features": features,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "NluSettings":
        """
        Build the aggregate from a stored blob.

        Keys outside the catalog are ignored and missing features are filled
        with an unconfigured ``FeatureSettings``.
        """
        data = data or {}
        post_types_raw = _mapping_or_empty(data.get("post_types"))
        features_raw = _mapping_or_empty(data.get("features"))

        post_types = {
            str(name): 1 if coerce_bool(value) else None
            for name, value in post_types_raw.items()
        }

        features = {}
        for name, descriptor in FEATURES.items():
            enabled = features_raw.get(descriptor.enabled_key)
            taxonomy = features_raw.get(descriptor.taxonomy_key)
            features[name] = FeatureSettings(
                enabled=None if enabled is None else int(coerce_bool(enabled)),
                threshold=parse_int(features_raw.get(descriptor.threshold_key)),
                taxonomy=str(taxonomy) if taxonomy not in (None, "") else None,
            )

        return cls(
            credentials=Credentials.from_dict(data.get("credentials")),
            post_types=post_types,
            features=features,
        )


def _str_or_empty(value: Any) -> str:
    return "" if value is None else str(value)


def _mapping_or_empty(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}
