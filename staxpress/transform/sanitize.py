"""Attribute sanitization pass."""

from __future__ import annotations

from bs4 import Tag

from ..allow_list import AllowList
from .markup import ClassList

# Prefix of attributes used by the source site's scripts only.
INTERNAL_PREFIX = "data-"


def sanitize_attributes(main: Tag, allow_list: AllowList) -> None:
    """Strip presentation cruft from every element below ``main``.

    Removes ``tabindex`` and ``data-*`` attributes, keeps only allow-listed
    class tokens and drops ids that are not allow-listed.
    """

    for element in main.find_all(True):
        for name in list(element.attrs):
            if name == "tabindex" or name.startswith(INTERNAL_PREFIX):
                del element[name]

        if "class" in element.attrs:
            ClassList(element).retain(allow_list.classes)

        if "id" in element.attrs and element["id"] not in allow_list.ids:
            del element["id"]
