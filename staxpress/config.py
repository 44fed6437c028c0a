"""Runtime settings read from ``STAXPRESS_*`` environment variables."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from attrs import define

# Stylesheet shipped with the package and used when none is configured.
DEFAULT_STYLESHEET = Path(__file__).parent / "data" / "default.css"

DEFAULT_SITE_URL = "https://example.pressbooks.pub/"
DEFAULT_LICENSE_URL = "https://creativecommons.org/licenses/by/4.0/"
DEFAULT_LICENSE_NAME = (
    "Creative Commons Attribution 4.0 International License"
)


@define(slots=True, frozen=True)
class Settings:
    """Immutable runtime configuration.

    Attributes:
        job_capacity: Whole-book jobs allowed to run at once.
        task_capacity: Subsection fetch/transform tasks allowed at once across
            all jobs.
        discovery_timeout: Ceiling in seconds for each table-of-contents wait.
        fetch_timeout: Ceiling in seconds for retrieving one subsection.
        retry_after: Delay in seconds suggested to rejected callers.
        stylesheet: CSS file from which the attribute allow-list is derived.
        site_url: Base URL of the destination Pressbooks network.
        publisher: Name credited in the attribution block.
        license_url: License link placed in the attribution block.
        license_name: License label placed in the attribution block.
    """

    job_capacity: int = 2
    task_capacity: int = 5
    discovery_timeout: float = 60.0
    fetch_timeout: float = 10.0
    retry_after: int = 30
    stylesheet: Path = DEFAULT_STYLESHEET
    site_url: str = DEFAULT_SITE_URL
    publisher: str = "OpenStax"
    license_url: str = DEFAULT_LICENSE_URL
    license_name: str = DEFAULT_LICENSE_NAME

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from ``STAXPRESS_*`` variables.

        Args:
            environ: Mapping to read instead of ``os.environ``.

        Returns:
            Settings with defaults for every unset variable.
        """

        env = os.environ if environ is None else environ
        default = cls()

        def get(name: str) -> str | None:
            return env.get(f"STAXPRESS_{name}") or None

        stylesheet = get("STYLESHEET")
        return cls(
            job_capacity=int(get("JOB_CAPACITY") or default.job_capacity),
            task_capacity=int(get("TASK_CAPACITY") or default.task_capacity),
            discovery_timeout=float(
                get("DISCOVERY_TIMEOUT") or default.discovery_timeout
            ),
            fetch_timeout=float(get("FETCH_TIMEOUT") or default.fetch_timeout),
            retry_after=int(get("RETRY_AFTER") or default.retry_after),
            stylesheet=Path(stylesheet) if stylesheet else default.stylesheet,
            site_url=get("SITE_URL") or default.site_url,
            publisher=get("PUBLISHER") or default.publisher,
            license_url=get("LICENSE_URL") or default.license_url,
            license_name=get("LICENSE_NAME") or default.license_name,
        )
