"""Command line interface for scraping textbooks."""

from __future__ import annotations

import asyncio
import logging
import signal
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Optional

import click
import yaml  # type: ignore[import-untyped]
from attrs import evolve
from dotenv import load_dotenv

from staxpress.allow_list import AllowList, load_allow_list
from staxpress.config import Settings
from staxpress.exceptions import StaxpressError
from staxpress.export import build_pressbooks_xml
from staxpress.json_utils import json_dumps, to_builtins
from staxpress.parser import Book
from staxpress.scraper import ConcurrencyGovernor, EngineManager, pipeline

logger = logging.getLogger(__name__)

try:
    __version__ = version("staxpress")
except PackageNotFoundError:
    __version__ = "0.0.1-dev"

# Mapping from format names to file extensions.
EXTENSIONS = {"xml": ".xml", "json": ".json", "yaml": ".yaml"}


@click.group()
@click.option("--debug/--no-debug", default=False)
@click.option("--trace/--no-trace", default=False)
@click.option(
    "--log-file",
    type=click.Path(file_okay=True, dir_okay=False),
    envvar="STAXPRESS_LOG_FILE",
)
@click.version_option(__version__, prog_name="staxpress")
def cli(debug: bool, trace: bool, log_file: Optional[str] = None) -> None:
    """Configure logging and load environment variables.

    Args:
        debug: Toggle debug logging.
        trace: Toggle trace logging.
        log_file: Optional path to the log file.
    """
    if trace:
        level = 1
    elif debug:
        level = logging.DEBUG
    else:
        level = logging.INFO

    logging.basicConfig(
        filename=log_file,
        level=level,
        format="[%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    if trace:
        logging.debug("Trace mode is on")
    if debug:
        logging.debug("Debug mode is on")
    load_dotenv()


def _cancel_on_sigterm() -> None:
    """Turn SIGTERM into cancellation of the running job."""

    loop = asyncio.get_running_loop()
    task = asyncio.current_task()
    if task is None:
        return
    try:
        loop.add_signal_handler(signal.SIGTERM, task.cancel)
    except (NotImplementedError, RuntimeError):
        # Unsupported on this platform or outside the main thread.
        logger.debug("SIGTERM handler not installed")


async def _scrape(
    url: str,
    settings: Settings,
    allow_list: AllowList,
    title: Optional[str],
) -> Book:
    """Run one job with a browser released on every exit path."""

    _cancel_on_sigterm()
    governor = ConcurrencyGovernor(
        settings.job_capacity, settings.task_capacity, settings.retry_after
    )

    async with EngineManager() as engine:
        async with governor.admit_job():
            return await pipeline.scrape_book(
                url,
                engine=engine,
                governor=governor,
                allow_list=allow_list,
                settings=settings,
                title=title,
            )


@cli.command()
@click.argument("url")
@click.option(
    "--title",
    default=None,
    help="Book title; derived from the URL by default.",
)
@click.option(
    "--stylesheet",
    type=click.Path(file_okay=True, dir_okay=False),
    default=None,
    help="CSS file defining the allowed classes and ids.",
)
@click.option(
    "--output",
    "output_path",
    type=click.Path(file_okay=True, dir_okay=True),
    default=None,
    help="Write output to FILE or DIRECTORY instead of the console.",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["xml", "json", "yaml"]),
    default="xml",
    help="Output format.",
)
def scrape(
    url: str,
    title: Optional[str] = None,
    stylesheet: Optional[str] = None,
    output_path: Optional[str] = None,
    output_format: str = "xml",
) -> None:
    """Scrape a textbook and export it for Pressbooks.

    Args:
        url: Table-of-contents page of the book.
        title: Book title overriding the one derived from ``url``.
        stylesheet: CSS file used instead of the configured one.
        output_path: Optional file or directory path for the output. If a
            directory is provided, the file name is generated from the book
            slug.
        output_format: ``xml`` for the import document, ``json`` or
            ``yaml`` for the book hierarchy.
    """

    settings = Settings.from_env()
    if stylesheet:
        settings = evolve(settings, stylesheet=Path(stylesheet))

    # Load the allow-list and run the job, reporting predictable failures.
    try:
        allow_list = load_allow_list(settings.stylesheet)
        book = asyncio.run(_scrape(url, settings, allow_list, title))
    except StaxpressError as exc:
        raise click.ClickException(str(exc)) from exc
    except asyncio.CancelledError as exc:
        raise click.Abort() from exc

    if output_format == "xml":
        content = build_pressbooks_xml(book, site_url=settings.site_url)
    elif output_format == "json":
        content = json_dumps(book, indent=True)
    else:
        content = yaml.safe_dump(
            to_builtins(book), allow_unicode=True, sort_keys=False
        )

    # Determine the output file path if one was provided. When the user
    # passes a directory, generate the file name from the book slug.
    if output_path:
        final_path = Path(output_path)
        if final_path.is_dir():
            final_path = final_path / f"{book.slug}{EXTENSIONS[output_format]}"
        final_path.write_text(content, encoding="utf-8")
        logger.info("Wrote %s", final_path)
    else:
        click.echo(content)
