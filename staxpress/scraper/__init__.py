"""Browser discovery, subsection loading and job orchestration."""

from .engine import EngineManager
from .fetch import SubsectionResult, fetch_subsection, load_subsection
from .governor import ConcurrencyGovernor, Gate
from .pipeline import run_job, scrape_book

__all__ = [
    "ConcurrencyGovernor",
    "EngineManager",
    "Gate",
    "SubsectionResult",
    "fetch_subsection",
    "load_subsection",
    "run_job",
    "scrape_book",
]
