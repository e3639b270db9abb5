"""
Configuration module for the NLU settings core.

This module centralizes the loading and validation of the process-level
configuration from environment variables. Per-site classification settings
(credentials, post types, feature toggles) live in the key-value store and
are resolved by :mod:`nlu.resolver`; the values here only describe where that
store lives and the built-in fallbacks used when nothing has been saved.
"""

import logging
import os
from typing import Literal

DEFAULT_PUBLIC_POST_TYPES = "post:Posts,page:Pages"
DEFAULT_TAXONOMIES = (
    "category:Category,"
    "post_tag:Tag,"
    "watson-category:Watson Category,"
    "watson-keyword:Watson Keyword,"
    "watson-entity:Watson Entity,"
    "watson-concept:Watson Concept"
)


class Settings:
    """
    A container for all configuration settings, loaded from environment variables.

    This class centralizes configuration, providing default values for optional
    settings and raising errors for invalid values.
    """

    # --- Storage ---
    SETTINGS_FILE: str
    OPTION_NAME: str
    LEGACY_OPTION_NAME: str
    CONFIGURED_OPTION_NAME: str

    # --- Credential fallbacks (used when nothing is stored) ---
    WATSON_URL: str
    WATSON_USERNAME: str
    WATSON_PASSWORD: str

    # --- NLU API ---
    WATSON_NLU_VERSION: str
    REQUEST_TIMEOUT: int

    # --- Host registries ---
    PUBLIC_POST_TYPES: list[tuple[str, str]]
    TAXONOMIES: dict[str, str]

    # --- Logging ---
    LOG_LEVEL: str
    LOG_FORMAT: Literal["console", "json"]

    def __init__(self):
        """
        Loads settings from environment variables and performs validation.
        """
        # --- Storage ---
        self.SETTINGS_FILE = os.getenv("SETTINGS_FILE", "classifai-settings.json")
        self.OPTION_NAME = os.getenv("OPTION_NAME", "classifai_watson_nlu")
        self.LEGACY_OPTION_NAME = os.getenv("LEGACY_OPTION_NAME", "classifai_settings")
        self.CONFIGURED_OPTION_NAME = os.getenv(
            "CONFIGURED_OPTION_NAME", "classifai_configured"
        )
        if len({self.OPTION_NAME, self.LEGACY_OPTION_NAME, self.CONFIGURED_OPTION_NAME}) != 3:
            raise ValueError(
                "OPTION_NAME, LEGACY_OPTION_NAME and CONFIGURED_OPTION_NAME must differ"
            )

        # --- Credential fallbacks ---
        self.WATSON_URL = os.getenv("WATSON_URL", "").strip()
        self.WATSON_USERNAME = os.getenv("WATSON_USERNAME", "").strip()
        self.WATSON_PASSWORD = os.getenv("WATSON_PASSWORD", "").strip()

        # --- NLU API ---
        self.WATSON_NLU_VERSION = os.getenv("WATSON_NLU_VERSION", "2017-02-27")
        self.REQUEST_TIMEOUT = self._get_int_env("REQUEST_TIMEOUT", 5)
        if self.REQUEST_TIMEOUT < 1:
            raise ValueError("REQUEST_TIMEOUT must be >= 1")

        # --- Host registries ---
        self.PUBLIC_POST_TYPES = _parse_named_list(
            os.getenv("PUBLIC_POST_TYPES", DEFAULT_PUBLIC_POST_TYPES)
        )
        self.TAXONOMIES = dict(
            _parse_named_list(os.getenv("TAXONOMIES", DEFAULT_TAXONOMIES))
        )

        # --- Logging ---
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").strip().upper()
        if not isinstance(logging.getLevelName(self.LOG_LEVEL), int):
            raise ValueError(f"LOG_LEVEL '{self.LOG_LEVEL}' is not a valid level name")
        self.LOG_FORMAT = os.getenv("LOG_FORMAT", "console").strip().lower()
        if self.LOG_FORMAT not in ("console", "json"):
            raise ValueError("LOG_FORMAT must be 'console' or 'json'")

    def _get_int_env(self, var_name: str, default: int) -> int:
        """
        Gets an integer environment variable, raising a readable error if it is malformed.
        """
        value = os.getenv(var_name)
        if value is None or not value.strip():
            return default
        try:
            return int(value)
        except ValueError:
            raise ValueError(
                f"Environment variable '{var_name}' must be an integer, got '{value}'."
            ) from None


def _parse_named_list(raw: str) -> list[tuple[str, str]]:
    """
    Parse ``name:Label,name2:Label 2`` into ordered ``(name, label)`` pairs.

    A missing label defaults to the name itself; blank entries are skipped.
    """
    pairs = []
    for chunk in raw.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        name, _, label = chunk.partition(":")
        name = name.strip()
        if not name:
            continue
        pairs.append((name, label.strip() or name))
    return pairs
