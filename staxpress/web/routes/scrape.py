"""Scrape a textbook and return its Pressbooks import document."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Query, Request  # type: ignore[import-not-found]
from fastapi.responses import (  # type: ignore[import-not-found]
    JSONResponse,
    PlainTextResponse,
    Response,
)
from pydantic import BaseModel  # type: ignore[import-not-found]

from staxpress.exceptions import JobRejected
from staxpress.scraper import pipeline

logger = logging.getLogger(__name__)

router = APIRouter()

BUSY_MESSAGE = (
    "The server is currently busy processing a few other OpenStax books. "
    "Please retry in ~{seconds} seconds."
)


class ScrapeRequest(BaseModel):
    """Input payload for the scrape endpoint.

    Attributes:
        url: Table-of-contents page of the book.
        title: Book title overriding the one derived from ``url``.
    """

    url: str | None = None
    title: str | None = None


async def _scrape(
    request: Request, url: str | None, title: str | None
) -> Response:
    """Run one job and map its outcome to a response."""

    # Reject requests that do not name a book.
    if not url:
        return PlainTextResponse(
            "Missing url query parameter", status_code=400
        )

    state = request.app.state
    try:
        xml = await pipeline.run_job(
            url,
            engine=state.engine,
            governor=state.governor,
            allow_list=state.allow_list,
            settings=state.settings,
            title=title,
        )
    except JobRejected as exc:
        # Admission control refuses instead of queueing the job.
        return JSONResponse(
            {
                "queued": False,
                "message": BUSY_MESSAGE.format(seconds=exc.retry_after),
                "retryAfterSeconds": exc.retry_after,
            },
            status_code=429,
            headers={"Retry-After": str(exc.retry_after)},
        )
    except Exception:
        # The cause is logged only; clients get a generic message.
        logger.exception("Error scraping %s", url)
        return PlainTextResponse("Error scraping OpenStax", status_code=500)

    return JSONResponse({"xml": xml})


@router.get("/scrape-openstax")
async def scrape_openstax_get(
    request: Request,
    url: str | None = Query(default=None),
    title: str | None = Query(default=None),
) -> Response:
    """Scrape the book at ``url`` and return its export document.

    Args:
        request: Incoming request, used to reach the application state.
        url: Table-of-contents page of the book.
        title: Optional book title overriding the derived one.

    Returns:
        ``{"xml": ...}`` on success, 400 without ``url``, 429 when every job
        slot is busy and 500 on any other failure.
    """

    return await _scrape(request, url, title)


@router.post("/scrape-openstax")
async def scrape_openstax_post(
    request: Request, payload: ScrapeRequest
) -> Response:
    """Scrape a book named in a JSON body; responses match the GET form."""

    return await _scrape(request, payload.url, payload.title)
