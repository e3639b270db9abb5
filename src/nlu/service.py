"""
NLU Settings Service
====================

Wires the resolver, decision engine, credential validator and sanitizer
around one key-value store, and exposes the operations the admin UI and the
classification pipeline call:

- ``save`` runs one resolve -> sanitize -> persist round trip;
- ``supported_post_types`` lists the post types to classify;
- ``reset`` restores factory defaults.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

import structlog

from common.config import Settings
from common.store import KeyValueStore
from common.transport import ClassificationTransport

from .catalog import FEATURES, coerce_bool
from .credentials import ConfiguredFlag, CredentialValidator
from .decisions import FeatureDecisionEngine
from .models import FeatureSettings, NluSettings
from .registry import PostTypeRegistry, TaxonomyRegistry
from .resolver import ConfigResolver
from .sanitizer import SettingsNotice, SettingsSanitizer

log = structlog.get_logger(__name__)

DEFAULT_POST_TYPE = "post"
FACTORY_POST_TYPES = ("post", "page")
FACTORY_ENABLED_FEATURES = ("category", "keyword")


@dataclass(frozen=True)
class SaveResult:
    settings: NluSettings
    notices: list[SettingsNotice] = field(default_factory=list)


class NluSettingsService:
    def __init__(
        self,
        settings: Settings,
        store: KeyValueStore,
        transport: ClassificationTransport,
        post_types: PostTypeRegistry,
        taxonomies: TaxonomyRegistry,
    ):
        self.settings = settings
        self.store = store
        self.post_types = post_types
        self.taxonomies = taxonomies

        self.flag = ConfiguredFlag(store, settings.CONFIGURED_OPTION_NAME)
        self.resolver = ConfigResolver(store, settings)
        self.engine = FeatureDecisionEngine(self.resolver)
        self.validator = CredentialValidator(transport, self.flag, settings)
        self.sanitizer = SettingsSanitizer(self.resolver, self.validator, post_types)

    def save(self, proposed: Mapping[str, Any] | NluSettings) -> SaveResult:
        """Sanitize ``proposed`` and persist the result under the current-schema key."""
        sanitized = self.sanitizer.sanitize(proposed)
        self.store.set(self.settings.OPTION_NAME, sanitized.to_dict())
        notices = list(self.sanitizer.notices)
        log.info(
            "Saved NLU settings",
            option=self.settings.OPTION_NAME,
            notices=[notice.code for notice in notices],
        )
        return SaveResult(settings=sanitized, notices=notices)

    def supported_post_types(self) -> list[str]:
        """
        Post types whose content gets classified.

        Falls back to ``["post"]`` when none is enabled.
        """
        enabled = [
            str(name)
            for name, flag in self.resolver.group("post_types").items()
            if coerce_bool(flag)
        ]
        return enabled or [DEFAULT_POST_TYPE]

    def supported_taxonomies(self) -> dict[str, str]:
        return self.taxonomies.list()

    def is_configured(self) -> bool:
        return self.flag.is_set()

    def factory_defaults(self) -> NluSettings:
        """Factory settings, keeping whatever credentials are currently stored."""
        registered = [post_type.name for post_type in self.post_types.list_public()]
        post_types = {
            name: 1 if name in FACTORY_POST_TYPES else None for name in registered
        }
        for name in FACTORY_POST_TYPES:
            post_types.setdefault(name, 1)

        features = {
            name: FeatureSettings(
                enabled=int(name in FACTORY_ENABLED_FEATURES),
                threshold=descriptor.threshold_default,
                taxonomy=descriptor.taxonomy_default,
            )
            for name, descriptor in FEATURES.items()
        }
        return NluSettings(
            credentials=self.resolver.snapshot().credentials,
            post_types=post_types,
            features=features,
        )

    def reset(self) -> NluSettings:
        """Overwrite the current-schema settings with factory defaults."""
        defaults = self.factory_defaults()
        self.store.set(self.settings.OPTION_NAME, defaults.to_dict())
        log.info("Reset NLU settings to factory defaults", option=self.settings.OPTION_NAME)
        return defaults
