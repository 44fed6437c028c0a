"""Tree helpers shared by the content passes."""

from __future__ import annotations

from collections.abc import Iterator, Set

from bs4 import BeautifulSoup, Tag


class ClassList:
    """Token-set view over the ``class`` attribute of a tag.

    Writes go straight back to the tag; an empty token set removes the
    attribute instead of leaving ``class=""`` behind.
    """

    def __init__(self, tag: Tag) -> None:
        self._tag = tag

    def _tokens(self) -> list[str]:
        value = self._tag.get("class")
        if value is None:
            return []
        if isinstance(value, str):
            return value.split()
        return list(value)

    def _write(self, tokens: list[str]) -> None:
        if tokens:
            self._tag["class"] = tokens
        elif "class" in self._tag.attrs:
            del self._tag["class"]

    def __iter__(self) -> Iterator[str]:
        return iter(self._tokens())

    def __contains__(self, name: object) -> bool:
        return name in self._tokens()

    def __len__(self) -> int:
        return len(self._tokens())

    def add(self, *names: str) -> None:
        """Append ``names`` that are not present yet, keeping order."""

        tokens = self._tokens()
        for name in names:
            if name not in tokens:
                tokens.append(name)
        self._write(tokens)

    def retain(self, allowed: Set[str]) -> None:
        """Keep only tokens found in ``allowed``, in their original order."""

        self._write([t for t in self._tokens() if t in allowed])


def set_inner_html(tag: Tag, markup: str) -> None:
    """Replace the children of ``tag`` with nodes parsed from ``markup``."""

    tag.clear()
    fragment = BeautifulSoup(markup, "html.parser")
    for child in list(fragment.contents):
        tag.append(child.extract())


def textbox_header(soup: BeautifulSoup, label: str) -> Tag:
    """Build a ``textbox__header`` holding a ``textbox__title`` heading."""

    header = soup.new_tag("header")
    ClassList(header).add("textbox__header")
    title = soup.new_tag("h2")
    ClassList(title).add("textbox__title")
    title.string = label
    header.append(title)
    return header


def wrap_textbox(soup: BeautifulSoup, box: Tag, label: str | None) -> None:
    """Move the children of ``box`` into a textbox body behind a new header.

    Args:
        soup: Document owning ``box``; used to create elements.
        box: Callout element already stripped of its native header.
        label: Title for the new header; ``None`` omits the header.
    """

    content = soup.new_tag("div")
    ClassList(content).add("textbox__content")
    for child in list(box.contents):
        content.append(child.extract())

    if label is not None:
        box.append(textbox_header(soup, label))
    box.append(content)
