"""
Feature Catalog
===============

The four classification features the NLU provider offers, each with its
labels and built-in defaults. The catalog is fixed for the lifetime of the
process; anything outside it is rejected.

This module also owns the value coercions shared by the resolver, the
decision engine and the sanitizer, so that "is this stored value on?" and
"what integer is this?" have exactly one answer each.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any

from .errors import InvalidFeature

FALLBACK_THRESHOLD_PERCENT = 70

TRUTHY_STRINGS = frozenset({"1", "true", "yes", "on"})

LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


@dataclass(frozen=True)
class FeatureDescriptor:
    name: str
    label: str
    threshold_label: str
    taxonomy_label: str
    threshold_default: int
    taxonomy_default: str

    @property
    def enabled_key(self) -> str:
        return self.name

    @property
    def threshold_key(self) -> str:
        return f"{self.name}_threshold"

    @property
    def taxonomy_key(self) -> str:
        return f"{self.name}_taxonomy"


FEATURES: dict[str, FeatureDescriptor] = {
    descriptor.name: descriptor
    for descriptor in (
        FeatureDescriptor(
            name="category",
            label="Category",
            threshold_label="Category Threshold (%)",
            taxonomy_label="Category Taxonomy",
            threshold_default=70,
            taxonomy_default="watson-category",
        ),
        FeatureDescriptor(
            name="keyword",
            label="Keyword",
            threshold_label="Keyword Threshold (%)",
            taxonomy_label="Keyword Taxonomy",
            threshold_default=70,
            taxonomy_default="watson-keyword",
        ),
        FeatureDescriptor(
            name="entity",
            label="Entity",
            threshold_label="Entity Threshold (%)",
            taxonomy_label="Entity Taxonomy",
            threshold_default=70,
            taxonomy_default="watson-entity",
        ),
        FeatureDescriptor(
            name="concept",
            label="Concept",
            threshold_label="Concept Threshold (%)",
            taxonomy_label="Concept Taxonomy",
            threshold_default=70,
            taxonomy_default="watson-concept",
        ),
    )
}

FEATURE_NAMES: tuple[str, ...] = tuple(FEATURES)


def get_feature(name: str) -> FeatureDescriptor:
    """Return the descriptor for ``name`` or raise ``InvalidFeature``."""
    try:
        return FEATURES[name]
    except (KeyError, TypeError):
        raise InvalidFeature(name) from None


def split_feature_key(key: str) -> tuple[FeatureDescriptor, str] | None:
    """
    Map a flat ``features`` key onto its descriptor and field.

    ``"category"`` -> (category, "enabled"), ``"keyword_threshold"`` ->
    (keyword, "threshold"). Returns None for keys outside the catalog.
    """
    if key in FEATURES:
        return FEATURES[key], "enabled"
    name, sep, field = key.rpartition("_")
    if sep and name in FEATURES and field in ("threshold", "taxonomy"):
        return FEATURES[name], field
    return None


def coerce_bool(value: Any) -> bool:
    """
    Strict boolean coercion for loosely typed stored values.

    Only ``True``, the integer ``1`` and the strings "1", "true", "yes" and
    "on" (any case, surrounding whitespace ignored) are true.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value == 1
    if isinstance(value, str):
        return value.strip().lower() in TRUTHY_STRINGS
    return False


def parse_int(value: Any) -> int | None:
    """
    Parse a stored numeric value into an int, or None when it is not numeric.

    Accepts ints, finite floats (truncated) and strings holding either.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            return None
        return int(number) if math.isfinite(number) else None
    return None


def absint(value: Any) -> int:
    """
    Absolute value of the leading integer in ``value``; 0 when there is none.

    ``"85"`` -> 85, ``"-5"`` -> 5, ``"12abc"`` -> 12, ``"abc"`` -> 0.
    """
    number = parse_int(value)
    if number is None and isinstance(value, str):
        match = LEADING_INT_RE.match(value)
        number = int(match.group(1)) if match else None
    if number is None and isinstance(value, bool):
        number = int(value)
    return abs(number) if number is not None else 0
