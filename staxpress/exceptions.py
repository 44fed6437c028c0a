"""Exception hierarchy for the scrape-and-export pipeline."""

from __future__ import annotations


class StaxpressError(Exception):
    """Base error for predictable, actionable failures."""


class AllowListError(StaxpressError):
    """The stylesheet used to derive the attribute allow-list is unusable."""


class EngineLaunchError(StaxpressError):
    """The headless browser could not be started."""


class DiscoveryError(StaxpressError):
    """The table of contents could not be retrieved from the source page."""


class DiscoveryTimeout(DiscoveryError):
    """A table-of-contents wait exceeded its ceiling."""


class DiscoveryNavigationError(DiscoveryError):
    """Navigation to the source page failed."""


class TocCapacityError(StaxpressError):
    """A part lists more subsections than its id block can hold."""


class SubsectionError(StaxpressError):
    """Failure local to a single subsection.

    Attributes:
        url: Location of the subsection that failed.
    """

    def __init__(self, url: str, message: str) -> None:
        super().__init__(f"{url}: {message}")
        self.url = url


class SubsectionFetchTimeout(SubsectionError):
    """The subsection page did not arrive before the deadline."""


class SubsectionFetchError(SubsectionError):
    """The subsection page could not be retrieved."""


class SubsectionTransformError(SubsectionError):
    """The retrieved subsection page could not be restructured."""


class MathConversionError(StaxpressError):
    """A math fragment could not be converted to LaTeX."""


class JobRejected(StaxpressError):
    """Admission control refused a new job because all slots are busy.

    Attributes:
        retry_after: Suggested delay in seconds before retrying.
    """

    def __init__(self, retry_after: int) -> None:
        super().__init__("All scrape slots are busy")
        self.retry_after = retry_after
