"""Action-dispatched HTS endpoint.

Every HTS operation is served from ``/api/hts`` and selected with the
``action`` query parameter.  Each action is bound to exactly one HTTP method
and handler in :data:`ACTION_ROUTES`; ``refresh`` additionally requires a
bearer token.  All responses use the envelope::

    {"success": true, "data": ..., "meta": {...}}
    {"success": false, "error": "..."}
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse, Response
from pydantic import ValidationError

from ftzhts.api.security import verify_bearer_token
from ftzhts.hts.browse import DEFAULT_BROWSE_LIMIT, browse_hts
from ftzhts.hts.catalog import DEFAULT_POPULAR_LIMIT, list_countries, lookup_code, popular_codes
from ftzhts.hts.duty_rate import calculate_duty_rate
from ftzhts.hts.errors import BadRequestError, HTSError, MethodNotAllowedError
from ftzhts.hts.models import DutyRateRequestModel
from ftzhts.hts.reference_data import ReferenceData, load_reference_data
from ftzhts.hts.search import DEFAULT_SEARCH_LIMIT, search_hts
from ftzhts.hts.status import refresh_report, service_status
from ftzhts.observability import log_event
from ftzhts.settings import Settings, get_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["hts"])

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization, X-Run-ID",
    "Access-Control-Expose-Headers": "X-Run-ID",
}

Envelope = Dict[str, Any]


class HTSAction(str, Enum):
    COUNTRIES = "countries"
    POPULAR = "popular"
    STATUS = "status"
    SEARCH = "search"
    BROWSE = "browse"
    CODE = "code"
    DUTY_RATE = "duty-rate"
    REFRESH = "refresh"


AVAILABLE_ACTIONS = [action.value for action in HTSAction]


@dataclass(frozen=True)
class HTSRequest:
    """Transport-neutral view of one inbound request."""

    method: str
    params: Mapping[str, str]
    body: Mapping[str, Any]
    authorization: Optional[str]
    data: ReferenceData
    settings: Settings


def _ok(data: Any, meta: Optional[Dict[str, Any]] = None) -> Envelope:
    envelope: Envelope = {"success": True, "data": data}
    if meta is not None:
        envelope["meta"] = meta
    return envelope


def _int_param(params: Mapping[str, str], name: str, default: int) -> int:
    raw = params.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw.strip())
    except ValueError:
        raise BadRequestError(f"Invalid {name}: expected an integer, got '{raw}'") from None


# -----------------------------------------------------------------------------
# Action handlers
# -----------------------------------------------------------------------------
def _handle_countries(req: HTSRequest) -> Envelope:
    data, meta = list_countries(
        req.data,
        region=req.params.get("region"),
        trade_agreement_only=req.params.get("trade_agreement_only") == "true",
        search=req.params.get("search"),
    )
    return _ok(data, meta)


def _handle_popular(req: HTSRequest) -> Envelope:
    data, meta = popular_codes(
        req.data,
        limit=_int_param(req.params, "limit", DEFAULT_POPULAR_LIMIT),
        category=req.params.get("category"),
        usage_frequency=req.params.get("usage_frequency"),
        search=req.params.get("search"),
    )
    return _ok(data, meta)


def _handle_status(req: HTSRequest) -> Envelope:
    return _ok(service_status(req.data, req.settings))


def _handle_search(req: HTSRequest) -> Envelope:
    data, meta = search_hts(
        req.data,
        req.params.get("q"),
        search_type=req.params.get("type") or "description",
        limit=_int_param(req.params, "limit", DEFAULT_SEARCH_LIMIT),
        country_of_origin=req.params.get("countryOfOrigin"),
        category=req.params.get("category"),
    )
    return _ok(data, meta)


def _handle_browse(req: HTSRequest) -> Envelope:
    data, meta = browse_hts(
        req.data,
        offset=_int_param(req.params, "offset", 0),
        limit=_int_param(req.params, "limit", DEFAULT_BROWSE_LIMIT),
        include_headers=req.params.get("includeHeaders", "true") != "false",
        level=req.params.get("level"),
        chapter=req.params.get("chapter"),
        heading=req.params.get("heading"),
        subheading=req.params.get("subheading"),
    )
    return _ok(data, meta)


def _handle_code(req: HTSRequest) -> Envelope:
    return _ok(
        lookup_code(
            req.data,
            req.params.get("htsCode"),
            country_of_origin=req.params.get("countryOfOrigin"),
        )
    )


def _handle_duty_rate(req: HTSRequest) -> Envelope:
    try:
        body = DutyRateRequestModel.model_validate(req.body)
    except ValidationError:
        raise BadRequestError("htsCode and countryOfOrigin must be strings") from None
    result = calculate_duty_rate(req.data, body.hts_code, body.country_of_origin)
    return _ok(result.to_dict())


def _handle_refresh(req: HTSRequest) -> Envelope:
    log_event("hts.refresh", simulated=True)
    return _ok(refresh_report())


@dataclass(frozen=True)
class ActionRoute:
    method: str
    handler: Callable[[HTSRequest], Envelope]
    requires_auth: bool = False


ACTION_ROUTES: Dict[HTSAction, ActionRoute] = {
    HTSAction.COUNTRIES: ActionRoute("GET", _handle_countries),
    HTSAction.POPULAR: ActionRoute("GET", _handle_popular),
    HTSAction.STATUS: ActionRoute("GET", _handle_status),
    HTSAction.SEARCH: ActionRoute("GET", _handle_search),
    HTSAction.BROWSE: ActionRoute("GET", _handle_browse),
    HTSAction.CODE: ActionRoute("GET", _handle_code),
    HTSAction.DUTY_RATE: ActionRoute("POST", _handle_duty_rate),
    HTSAction.REFRESH: ActionRoute("POST", _handle_refresh, requires_auth=True),
}


def dispatch(action_name: Optional[str], req: HTSRequest) -> Envelope:
    """Route ``action_name`` to its handler, enforcing auth and method."""

    if not action_name:
        raise BadRequestError(
            "Action parameter is required. Available actions: " + ", ".join(AVAILABLE_ACTIONS),
            available_actions=AVAILABLE_ACTIONS,
        )
    try:
        action = HTSAction(action_name)
    except ValueError:
        raise BadRequestError(
            f"Unknown action: {action_name}. Available actions: " + ", ".join(AVAILABLE_ACTIONS),
            available_actions=AVAILABLE_ACTIONS,
        ) from None

    route = ACTION_ROUTES[action]
    if route.requires_auth:
        verify_bearer_token(req.authorization)
    if req.method != route.method:
        raise MethodNotAllowedError(req.method)
    return route.handler(req)


# -----------------------------------------------------------------------------
# HTTP binding
# -----------------------------------------------------------------------------
def get_reference_data(request: Request) -> ReferenceData:
    """Return the process-wide reference data, loading it on first use."""

    data: ReferenceData | None = getattr(request.app.state, "reference_data", None)
    if data is None:
        try:
            data = load_reference_data(get_settings().data_dir)
        except (OSError, ValueError) as exc:
            logger.exception("HTS reference data failed to load")
            raise HTTPException(status_code=503, detail="HTS reference data unavailable") from exc
        request.app.state.reference_data = data
    return data


async def _read_json_body(request: Request) -> Dict[str, Any]:
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        payload = json.loads(raw)
    except ValueError:
        raise BadRequestError("Request body must be valid JSON") from None
    if not isinstance(payload, dict):
        raise BadRequestError("Request body must be a JSON object")
    return payload


@router.api_route("/hts", methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"])
async def hts_endpoint(
    request: Request, data: ReferenceData = Depends(get_reference_data)
) -> Response:
    """Dispatch an HTS action and return the uniform JSON envelope."""

    if request.method == "OPTIONS":
        return Response(status_code=200, headers=CORS_HEADERS)

    action = request.query_params.get("action")
    try:
        wants_body = request.method == "POST" and action == HTSAction.DUTY_RATE.value
        body = await _read_json_body(request) if wants_body else {}
        hts_request = HTSRequest(
            method=request.method,
            params=request.query_params,
            body=body,
            authorization=request.headers.get("Authorization"),
            data=data,
            settings=get_settings(),
        )
        status_code, envelope = 200, dispatch(action, hts_request)
    except HTSError as exc:
        status_code, envelope = exc.status_code, exc.to_envelope()
    except Exception:
        logger.exception("HTS API error (action=%s)", action)
        status_code = 500
        envelope = {"success": False, "error": "Internal server error", "action": action}
    return JSONResponse(status_code=status_code, content=envelope, headers=CORS_HEADERS)
