from __future__ import annotations

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.responses import (
    HTMLResponse,
    JSONResponse,
    PlainTextResponse,
    RedirectResponse,
    Response,
)

from preview_edge.api.deps import get_log_service
from preview_edge.services.classifier import classify
from preview_edge.services.logs.service import LogService, build_log_entry
from preview_edge.services.preview.extractor import fetch_and_extract
from preview_edge.services.preview.renderer import build_preview_html
from preview_edge.services.resolver import first_values, normalize_path, resolve_target
from preview_edge.workers.fetcher import FetchError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["redirect"])

DEBUG_PATH = "/_debug"


@router.api_route(
    "/{path:path}",
    methods=["GET", "HEAD"],
    response_class=HTMLResponse,
    responses={
        302: {"description": "Redirect to the resolved target"},
        400: {"description": "No target could be resolved"},
    },
    summary="Redirect humans, serve a preview page to unfurl bots",
)
async def dispatch(
    request: Request,
    background_tasks: BackgroundTasks,
    service: LogService = Depends(get_log_service),
) -> Response:
    """Resolve the destination and answer with a redirect or a preview page.

    - **302** — human visitor, or the destination page could not be fetched
    - **200** — unfurl bot (or ``preview=1``): synthesized preview HTML,
      or the raw metadata as JSON on ``/_debug``
    - **400** — neither ``target`` nor a known short-link path
    """
    path = normalize_path(request.url.path)
    query = first_values(request.query_params.multi_items())
    target = resolve_target(path, query)
    if target is None:
        return PlainTextResponse("Missing ?target=…", status_code=400)

    headers = request.headers
    client_host = request.client.host if request.client else None
    background_tasks.add_task(
        service.record, build_log_entry(target, headers, client_host)
    )

    verdict = classify(
        headers.get("user-agent"),
        force_preview=query.get("preview") == "1",
    )
    if not verdict.is_bot:
        return RedirectResponse(target, status_code=302)

    try:
        meta = await fetch_and_extract(
            target,
            user_agent=headers.get("user-agent"),
            accept_language=headers.get("accept-language"),
        )
    except FetchError as exc:
        logger.warning("Preview fetch failed for %s, redirecting: %s", target, exc)
        return RedirectResponse(target, status_code=302)
    except Exception as exc:
        logger.exception("Preview extraction failed for %s, redirecting: %s", target, exc)
        return RedirectResponse(target, status_code=302)

    if path == DEBUG_PATH:
        return JSONResponse(meta.model_dump(by_alias=True))
    return HTMLResponse(
        build_preview_html(meta, target),
        media_type="text/html; charset=utf-8",
    )
