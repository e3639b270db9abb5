"""
NLU classification settings package.

This package contains:

- the fixed catalog of classification features
- the resolver that reads settings across storage generations
- the engine that turns settings into per-feature decisions
- credential validation and the settings sanitizer
- the service facade and command-line entry point
"""

from .catalog import FEATURES, FeatureDescriptor, coerce_bool, get_feature
from .credentials import ConfiguredFlag, CredentialValidator
from .decisions import FeatureDecisionEngine, ResolvedFeatureDecision
from .errors import AuthFailed, ConfigMissing, InvalidFeature, NluError, TransportError
from .models import Credentials, FeatureSettings, NluSettings
from .resolver import ConfigResolver
from .sanitizer import SettingsNotice, SettingsSanitizer
from .service import NluSettingsService, SaveResult

__all__ = [
    "AuthFailed",
    "ConfigMissing",
    "ConfigResolver",
    "ConfiguredFlag",
    "CredentialValidator",
    "Credentials",
    "FEATURES",
    "FeatureDecisionEngine",
    "FeatureDescriptor",
    "FeatureSettings",
    "InvalidFeature",
    "NluError",
    "NluSettings",
    "NluSettingsService",
    "ResolvedFeatureDecision",
    "SaveResult",
    "SettingsNotice",
    "SettingsSanitizer",
    "TransportError",
    "coerce_bool",
    "get_feature",
]
