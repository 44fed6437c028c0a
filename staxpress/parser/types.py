"""Common type aliases for parser structures."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .part import Part  # noqa: F401
    from .subsection import Subsection  # noqa: F401


SubsectionList = list["Subsection"]
PartList = list["Part"]
