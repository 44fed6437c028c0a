"""Shared fixtures and sample markup for the test suite."""

from __future__ import annotations

import pytest

from staxpress.allow_list import AllowList, load_allow_list
from staxpress.config import DEFAULT_STYLESHEET
from staxpress.transform import Attribution

TOC_URL = "https://openstax.org/books/college-physics-2e/pages/1-introduction"

# Table of contents with two parts holding two and one subsections.
TOC_HTML = """
<nav class="table-of-contents">
  <span class="os-number">1</span>
  <span class="os-divider"> </span>
  <span class="os-text">Introduction: The Nature of Science</span>
  <ul class="no-bullets">
    <li><a href="/books/college-physics-2e/pages/1-1-physics">1.1 Physics</a>
    </li>
    <li><a href="/books/college-physics-2e/pages/1-2-units">1.2 Units</a></li>
  </ul>
  <span class="os-number">2</span>
  <span class="os-divider"> </span>
  <span class="os-text">Kinematics</span>
  <ul class="no-bullets">
    <li><a href="2-1-displacement">2.1 Displacement</a></li>
  </ul>
</nav>
"""

PAGE_HTML = """
<html>
  <body>
    <main class="page-content">
      <p id="auto-id1" class="os-raise-noindent x" data-type="para">
        Energy <math><msup><mi>x</mi><mn>2</mn></msup></math>
      </p>
    </main>
  </body>
</html>
"""


@pytest.fixture
def allow_list() -> AllowList:
    """Allow-list derived from the packaged stylesheet."""

    return load_allow_list(DEFAULT_STYLESHEET)


@pytest.fixture
def attribution() -> Attribution:
    """Attribution details for the sample book."""

    return Attribution(
        book_title="College Physics 2e",
        book_url="https://openstax.org/books/college-physics-2e/",
        publisher="OpenStax",
        license_url="https://creativecommons.org/licenses/by/4.0/",
        license_name="Creative Commons Attribution 4.0 International License",
    )
