"""Callout-box restructuring passes.

Learning objectives, understanding checks and notes all end up with the same
Pressbooks textbox shape::

    <div class="... textbox textbox--<kind>">
      <header class="textbox__header">
        <h2 class="textbox__title">…</h2>
      </header>
      <div class="textbox__content">…original children…</div>
    </div>
"""

from __future__ import annotations

from bs4 import BeautifulSoup, Tag

from .markup import ClassList, wrap_textbox

LEARNING_OBJECTIVES_LABEL = "Learning Objectives"
CHECK_UNDERSTANDING_LABEL = "Check Your Understanding"
SOLUTION_LABEL = "Click for Solution"

# Classes carried by headers this module creates itself.
GENERATED_CLASSES = frozenset({"textbox__header", "textbox__title"})


def _native_header(box: Tag, name: str) -> Tag | None:
    """Return the source header of ``box``, ignoring generated ones."""

    def native(tag: Tag) -> bool:
        return tag.name == name and not GENERATED_CLASSES.intersection(
            ClassList(tag)
        )

    # Prefer a direct child; nested callouts may carry their own header.
    header = box.find(native, recursive=False)
    if header is not None:
        return header
    return box.find(native)


def restructure_learning_objectives(soup: BeautifulSoup, main: Tag) -> None:
    """Rebuild the learning objectives block as a textbox."""

    box = main.select_one(".learning-objectives")
    if box is None:
        return

    ClassList(box).add("textbox", "textbox--learning-objectives")
    header = _native_header(box, "h2")
    if header is not None:
        header.decompose()
    wrap_textbox(soup, box, LEARNING_OBJECTIVES_LABEL)


def restructure_check_understanding(soup: BeautifulSoup, main: Tag) -> None:
    """Rebuild every understanding check as an exercises textbox.

    The disclosure element always ends up with a "Click for Solution" summary.
    """

    for box in main.select('[data-element-type="check-understanding"]'):
        ClassList(box).add("textbox", "textbox--exercises")
        header = _native_header(box, "header")
        if header is not None:
            header.decompose()

        details = box.find("details")
        if details is not None:
            summary = details.find("summary")
            if summary is not None:
                summary.string = SOLUTION_LABEL
            else:
                summary = soup.new_tag("summary")
                summary.string = SOLUTION_LABEL
                details.insert(0, summary)

        wrap_textbox(soup, box, CHECK_UNDERSTANDING_LABEL)


def restructure_notes(soup: BeautifulSoup, main: Tag) -> None:
    """Rebuild every note as an examples textbox titled by its own header.

    The header text is read before the header leaves the tree.
    """

    for box in main.select('[data-type="note"]'):
        ClassList(box).add("textbox", "textbox--examples")

        label = None
        header = _native_header(box, "header")
        if header is not None:
            label = header.get_text(" ", strip=True)
            header.decompose()

        wrap_textbox(soup, box, label)
