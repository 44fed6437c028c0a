"""Tests for the table-of-contents parser."""

import pytest
from conftest import TOC_HTML, TOC_URL

from staxpress.exceptions import TocCapacityError
from staxpress.parser import (
    book_landing_url,
    book_metadata_from_url,
    parse_toc,
    slugify,
)
from staxpress.parser.utils import slug_from_url


def test_parse_toc_allocates_id_blocks() -> None:
    """Parts take multiples of 100 and subsections follow their part."""

    parts = parse_toc(TOC_HTML, base_url=TOC_URL)

    # Each part reserves a block of 100 ids.
    assert [p.id for p in parts] == [100, 200]
    assert [s.id for s in parts[0].subsections] == [101, 102]
    assert [s.id for s in parts[1].subsections] == [201]
    assert [s.order for s in parts[0].subsections] == [0, 1]


def test_parse_toc_reads_part_fields() -> None:
    """Number, title, slug and order come from the markers."""

    first, second = parse_toc(TOC_HTML, base_url=TOC_URL)

    assert first.number == "1"
    assert first.title == "Introduction: The Nature of Science"
    assert first.slug == "1"
    assert first.order == 0
    assert second.title == "Kinematics"
    assert second.order == 1


def test_parse_toc_resolves_subsection_links() -> None:
    """Relative links are resolved against the table-of-contents URL."""

    parts = parse_toc(TOC_HTML, base_url=TOC_URL)
    physics = parts[0].subsections[0]
    displacement = parts[1].subsections[0]

    assert physics.title == "1.1 Physics"
    assert physics.url == (
        "https://openstax.org/books/college-physics-2e/pages/1-1-physics"
    )
    assert physics.slug == "1-1-physics"
    assert displacement.url == (
        "https://openstax.org/books/college-physics-2e/pages/2-1-displacement"
    )
    assert physics.content == ""


def test_parse_toc_keeps_links_without_base_url() -> None:
    """Without a base URL hrefs are kept as written."""

    parts = parse_toc(TOC_HTML)

    assert parts[1].subsections[0].url == "2-1-displacement"


def test_parse_toc_missing_title_and_list() -> None:
    """A marker without siblings yields a titleless, empty part."""

    html = (
        '<div class="table-of-contents">'
        '<span class="os-number">Preface</span>'
        "</div>"
    )

    (part,) = parse_toc(html)

    assert part.title is None
    assert part.subsections == []
    assert part.slug == "preface"


def test_parse_toc_keeps_spaces_between_nested_elements() -> None:
    """Titles built from spans and inline markup keep their word breaks."""

    html = (
        '<div class="table-of-contents">'
        '<span class="os-number"><span>Chapter</span> <span>4</span></span>'
        '<span class="os-text">Dynamics: <em>Force</em> and Motion</span>'
        '<ul class="no-bullets">'
        '<li><a href="4-1"><span class="os-number">4.1</span>'
        '<span class="os-divider"> </span>'
        '<span class="os-text">Development of Force Concept</span></a></li>'
        "<li><a href=\"4-2\">Newton's <em>Second</em> Law</a></li>"
        "</ul>"
        "</div>"
    )

    (part,) = parse_toc(html)

    # Text from sibling elements is joined with single spaces.
    assert part.number == "Chapter 4"
    assert part.title == "Dynamics: Force and Motion"
    assert [s.title for s in part.subsections] == [
        "4.1 Development of Force Concept",
        "Newton's Second Law",
    ]


def test_parse_toc_ignores_nested_markers() -> None:
    """Only markers that are direct children start a part."""

    html = (
        '<div class="table-of-contents">'
        '<span class="os-number">1</span>'
        '<ul class="no-bullets"><li><a href="/a">'
        '<span class="os-number">1.1</span> A</a></li></ul>'
        "</div>"
    )

    parts = parse_toc(html)

    assert len(parts) == 1
    assert parts[0].subsections[0].title == "1.1A"


def test_parse_toc_rejects_full_id_block() -> None:
    """A part listing 100 subsections cannot fit its id block."""

    items = "".join(f'<li><a href="/p{i}">{i}</a></li>' for i in range(100))
    html = (
        '<div class="table-of-contents">'
        '<span class="os-number">1</span>'
        f'<ul class="no-bullets">{items}</ul>'
        "</div>"
    )

    with pytest.raises(TocCapacityError):
        parse_toc(html)


def test_parse_toc_accepts_99_subsections() -> None:
    """The largest block that fits ends just below the next part."""

    items = "".join(f'<li><a href="/p{i}">{i}</a></li>' for i in range(99))
    html = (
        '<div class="table-of-contents">'
        '<span class="os-number">1</span>'
        f'<ul class="no-bullets">{items}</ul>'
        "</div>"
    )

    (part,) = parse_toc(html)

    assert part.subsections[-1].id == 199


@pytest.mark.parametrize(
    "text, expected",
    [
        ("1", "1"),
        ("Chapter 1: Intro", "chapter-1-intro"),
        ("  Preface  ", "preface"),
        ("A -- B", "a-b"),
        ("", ""),
        ("Ünïcode & more", "n-code-more"),
    ],
)
def test_slugify(text: str, expected: str) -> None:
    """Non-alphanumeric runs collapse to single hyphens."""

    assert slugify(text) == expected


def test_slugify_is_idempotent() -> None:
    """Slugifying a slug leaves it unchanged."""

    for text in ["Chapter 1: Intro", "-x-", "1.1 Physics"]:
        once = slugify(text)
        assert slugify(once) == once


def test_slug_from_url_ignores_query_and_trailing_slash() -> None:
    """The last path segment is used, whatever follows it."""

    assert slug_from_url("https://x.org/pages/1-1-physics/?a=b#top") == (
        "1-1-physics"
    )
    assert slug_from_url("") == ""


def test_book_metadata_from_url() -> None:
    """Title words are capitalised except edition markers."""

    title, slug = book_metadata_from_url(TOC_URL)

    assert title == "College Physics 2e"
    assert slug == "college-physics-2e"


def test_book_metadata_falls_back_to_host() -> None:
    """URLs without a books segment use the host name."""

    title, slug = book_metadata_from_url("https://example.org/toc")

    assert slug == "example-org"
    assert title == "Example Org"


def test_book_landing_url() -> None:
    """The landing page keeps the host and book segment only."""

    assert book_landing_url(TOC_URL) == (
        "https://openstax.org/books/college-physics-2e/"
    )
    assert book_landing_url("https://example.org/toc") == (
        "https://example.org/"
    )
