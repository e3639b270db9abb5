"""
Feature Decision Engine
=======================

Turns resolved settings into one decision per classification feature: is it
enabled, how confident must a result be to be kept, and which taxonomy
receives the terms.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass

import structlog

from .catalog import (
    FALLBACK_THRESHOLD_PERCENT,
    FEATURES,
    FeatureDescriptor,
    coerce_bool,
    get_feature,
    parse_int,
)
from .resolver import ConfigResolver

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ResolvedFeatureDecision:
    feature: str
    enabled: bool
    threshold: float
    taxonomy: str

    def to_dict(self) -> dict:
        return asdict(self)


def _threshold_percent(raw: object, descriptor: FeatureDescriptor) -> int:
    """Pick a usable percentage, clamped to 0..100."""
    for candidate in (raw, descriptor.threshold_default, FALLBACK_THRESHOLD_PERCENT):
        percent = parse_int(candidate)
        if percent is not None and percent > 0:
            return min(percent, 100)
    return FALLBACK_THRESHOLD_PERCENT


class FeatureDecisionEngine:
    def __init__(self, resolver: ConfigResolver):
        self.resolver = resolver

    def decide(self, feature: str) -> ResolvedFeatureDecision:
        """
        Resolve the decision for one catalog feature.

        Raises ``InvalidFeature`` for names outside the catalog.
        """
        descriptor = get_feature(feature)

        enabled = coerce_bool(self.resolver.resolve("features", descriptor.enabled_key))

        raw_threshold = self.resolver.resolve("features", descriptor.threshold_key)
        percent = _threshold_percent(raw_threshold, descriptor)
        if parse_int(raw_threshold) != percent:
            log.debug(
                "Adjusted feature threshold",
                feature=feature,
                stored=raw_threshold,
                effective_percent=percent,
            )

        taxonomy = self.resolver.resolve("features", descriptor.taxonomy_key)
        if not isinstance(taxonomy, str) or not taxonomy.strip():
            taxonomy = descriptor.taxonomy_default

        return ResolvedFeatureDecision(
            feature=feature,
            enabled=enabled,
            threshold=percent / 100,
            taxonomy=taxonomy.strip(),
        )

    def decide_all(self) -> dict[str, ResolvedFeatureDecision]:
        """Decisions for every catalog feature, in catalog order."""
        return {name: self.decide(name) for name in FEATURES}

    def enabled_features(self) -> list[str]:
        return [name for name, decision in self.decide_all().items() if decision.enabled]
