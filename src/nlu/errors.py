"""Exception types raised by the NLU settings core."""

from common.transport import TransportError


class NluError(Exception):
    """Base class for NLU settings errors."""


class ConfigMissing(NluError, LookupError):
    """
    A settings key has no value in any storage generation.

    Only raised internally by the resolver, which always turns it into the
    key's built-in default.
    """

    def __init__(self, group: str, key: str):
        super().__init__(f"No stored value for {group}.{key}")
        self.group = group
        self.key = key


class AuthFailed(NluError):
    """The credential probe against the NLU provider failed."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class InvalidFeature(NluError, ValueError):
    """A feature name outside the fixed catalog was requested."""

    def __init__(self, feature: object):
        super().__init__(f"Unknown classification feature: {feature!r}")
        self.feature = feature


__all__ = [
    "AuthFailed",
    "ConfigMissing",
    "InvalidFeature",
    "NluError",
    "TransportError",
]
