"""Book assembled from its parts."""

from __future__ import annotations

from attrs import define, field

from .types import PartList


@define(slots=True, frozen=True)
class Book:
    """Book assembled from its parts.

    Attributes:
        title: Human readable book title.
        slug: URL-safe book name used in export links.
        parts: Ordered parts with their subsections.
    """

    title: str
    slug: str
    parts: PartList = field(factory=list, repr=False)
