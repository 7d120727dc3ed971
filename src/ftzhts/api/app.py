from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from ftzhts import __version__
from ftzhts.api.routes_hts import get_reference_data
from ftzhts.api.routes_hts import router as hts_router
from ftzhts.hts.reference_data import ReferenceData, load_reference_data
from ftzhts.observability import RUN_ID_HEADER, log_event, redact_authorization, run_scope
from ftzhts.settings import get_settings

# -----------------------------------------------------------------------------
# App setup
# -----------------------------------------------------------------------------
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    try:
        app.state.reference_data = load_reference_data(settings.data_dir)
    except (OSError, ValueError):
        logger.exception("HTS reference data failed to load from %s", settings.data_dir)
        app.state.reference_data = None
    yield
    app.state.reference_data = None


app = FastAPI(title="FTZ HTS Lookup API", version=__version__, lifespan=lifespan)
# Cross-origin headers and preflights are answered by the /api/hts route itself.
app.include_router(hts_router)


@app.middleware("http")
async def attach_run_id(request: Request, call_next):
    path = request.url.path
    action = request.query_params.get("action")
    with run_scope(request.headers.get(RUN_ID_HEADER)) as run_id:
        log_event(
            "request.start",
            method=request.method,
            path=path,
            action=action,
            token=redact_authorization(request.headers.get("Authorization")),
        )
        response = await call_next(request)
        response.headers[RUN_ID_HEADER] = run_id
        log_event("request.end", path=path, action=action, status=response.status_code)
        return response


# -----------------------------------------------------------------------------
# Health
# -----------------------------------------------------------------------------
@app.get("/health")
def health(data: ReferenceData = Depends(get_reference_data)) -> JSONResponse:
    counts = data.table_counts()
    ok = all(counts.values())
    settings = get_settings()
    payload: Dict[str, Any] = {
        "ok": ok,
        "service": settings.service_name,
        "version": settings.version,
        "tables": counts,
    }
    return JSONResponse(status_code=200 if ok else 503, content=payload)
