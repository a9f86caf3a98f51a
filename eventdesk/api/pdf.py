"""PDF responses with client-disconnect cancellation."""

import asyncio
import logging
import threading
from datetime import datetime

from fastapi import Request, Response
from starlette.concurrency import run_in_threadpool

from eventdesk.config import get_settings
from eventdesk.services.pdf_renderer import ReportRenderer
from eventdesk.services.report_documents import ReportDocument

logger = logging.getLogger(__name__)

settings = get_settings()

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}

DISCONNECT_POLL_SECONDS = 0.1
CLIENT_CLOSED_REQUEST = 499


async def _watch_disconnect(request: Request, cancel_event: threading.Event) -> None:
    while not cancel_event.is_set():
        if await request.is_disconnected():
            logger.info(f"Client disconnected from {request.url.path}; stopping PDF output")
            cancel_event.set()
            return
        await asyncio.sleep(DISCONNECT_POLL_SECONDS)


async def render_pdf_response(
    request: Request,
    document: ReportDocument,
    now: datetime,
) -> Response:
    """
    Render ``document`` off the event loop and return it as an attachment.

    The whole PDF is built in memory before any header is sent, so a render
    failure still reaches the client as a JSON error. If the client goes away
    mid-render the renderer stops at the next row and nothing is written.
    """
    renderer = ReportRenderer(
        title=document.title,
        author=settings.PDF_AUTHOR,
        generated_at=now,
        subtitle=document.subtitle,
    )
    cancel_event = threading.Event()
    watcher = asyncio.create_task(_watch_disconnect(request, cancel_event))

    try:
        result = await run_in_threadpool(
            renderer.render,
            document.summary,
            document.sections,
            document.notes,
            cancel_event,
        )
    finally:
        watcher.cancel()

    if result.cancelled:
        return Response(status_code=CLIENT_CLOSED_REQUEST)

    headers = {
        "Content-Disposition": f"attachment; filename={document.filename}.pdf",
        **NO_CACHE_HEADERS,
    }
    return Response(content=result.content, media_type="application/pdf", headers=headers)
