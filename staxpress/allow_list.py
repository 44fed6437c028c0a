"""Attribute allow-list derived from a stylesheet."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import cssutils  # type: ignore[import-untyped]
from attrs import define, field

from .exceptions import AllowListError

logger = logging.getLogger(__name__)

# cssutils reports every unknown property; only real failures matter here.
cssutils.log.setLevel(logging.CRITICAL)

_SELECTOR_TOKEN = re.compile(r"([.#])([\w-]+)")


@define(slots=True, frozen=True)
class AllowList:
    """Class and id names that survive attribute sanitization.

    Attributes:
        classes: Permitted ``class`` tokens.
        ids: Permitted ``id`` values.
    """

    classes: frozenset[str] = field(converter=frozenset, factory=frozenset)
    ids: frozenset[str] = field(converter=frozenset, factory=frozenset)


def _selector_texts(rules: Iterable[Any]) -> Iterable[str]:  # noqa: ANN401
    """Yield selector strings from style rules, descending into ``@media``."""

    for rule in rules:
        if rule.type == rule.STYLE_RULE:
            for selector in rule.selectorList:
                yield selector.selectorText
        elif rule.type == rule.MEDIA_RULE:
            yield from _selector_texts(rule.cssRules)


def parse_allow_list(css_text: str) -> AllowList:
    """Collect every class and id token referenced by ``css_text`` selectors.

    Args:
        css_text: Stylesheet source.

    Returns:
        Allow-list built from the selector tokens.

    Raises:
        AllowListError: When the stylesheet contains no style rules.
    """

    sheet = cssutils.parseString(css_text)

    classes: set[str] = set()
    ids: set[str] = set()
    rule_count = 0
    for selector in _selector_texts(sheet.cssRules):
        rule_count += 1
        for prefix, name in _SELECTOR_TOKEN.findall(selector):
            if prefix == ".":
                classes.add(name)
            else:
                ids.add(name)

    if not rule_count:
        raise AllowListError("Stylesheet contains no style rules")

    return AllowList(classes=classes, ids=ids)


def load_allow_list(path: Path) -> AllowList:
    """Read ``path`` and derive the allow-list from it.

    Args:
        path: Location of the CSS file.

    Returns:
        The immutable allow-list shared by all jobs.

    Raises:
        AllowListError: When the file cannot be read or yields no rules.
    """

    try:
        css_text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise AllowListError(f"Cannot read stylesheet {path}: {exc}") from exc

    allow_list = parse_allow_list(css_text)
    logger.info(
        "Loaded %d classes and %d ids from %s",
        len(allow_list.classes),
        len(allow_list.ids),
        path,
    )
    return allow_list
