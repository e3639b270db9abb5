"""
Host registries for post types and taxonomies.

The host platform decides which content types exist and which taxonomies are
registered. The settings core only needs read access to both, through the
two small protocols below.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Protocol, Sequence


@dataclass(frozen=True)
class PostType:
    name: str
    label: str


class PostTypeRegistry(Protocol):
    def list_public(self) -> Sequence[PostType]:
        ...


class TaxonomyRegistry(Protocol):
    def list(self) -> dict[str, str]:
        ...


class StaticPostTypeRegistry:
    """A fixed, ordered list of public post types."""

    def __init__(self, post_types: Iterable[PostType | tuple[str, str]]):
        self._post_types = tuple(
            pt if isinstance(pt, PostType) else PostType(*pt) for pt in post_types
        )

    def list_public(self) -> Sequence[PostType]:
        return self._post_types


class StaticTaxonomyRegistry:
    """A fixed mapping of taxonomy name to singular label."""

    def __init__(self, taxonomies: dict[str, str]):
        self._taxonomies = dict(taxonomies)

    def list(self) -> dict[str, str]:
        return dict(self._taxonomies)
