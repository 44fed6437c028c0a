"""Parser package for textbook tables of contents."""

from .book import Book
from .parse_toc import parse_toc
from .part import Part
from .subsection import Subsection
from .utils import book_landing_url, book_metadata_from_url, slugify

__all__ = [
    "Book",
    "Part",
    "Subsection",
    "book_landing_url",
    "book_metadata_from_url",
    "parse_toc",
    "slugify",
]
