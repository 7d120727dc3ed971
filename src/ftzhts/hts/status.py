"""Operational snapshot and the simulated data-refresh report."""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, Optional

from ftzhts.hts.reference_data import ReferenceData

if TYPE_CHECKING:
    from ftzhts.settings import Settings

_PROCESS_STARTED = time.monotonic()

REFERENCE_DATA_AS_OF = "2024-09-01T00:00:00.000Z"

USAGE_LIMITS: Dict[str, Any] = {
    "max_search_results": 100,
    "rate_limit": "1000 requests per hour",
    "cache_duration": "15 minutes",
}

FEATURES: Dict[str, bool] = {
    "code_lookup": True,
    "description_search": True,
    "duty_rates": True,
    "country_filtering": True,
    "popular_codes": True,
    "caching": False,
    "real_time_updates": False,
}

REFRESH_NOTES = (
    "This is a simulated refresh - no actual data was updated",
    "In production, this would sync with official HTS databases",
    "Admin privileges required for actual data refresh",
)

REFRESH_ENDPOINTS = tuple(
    f"/api/hts?action={action}"
    for action in ("search", "countries", "popular", "browse", "code", "duty-rate")
)


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def process_uptime() -> float:
    """Seconds since this module was first imported."""
    return round(time.monotonic() - _PROCESS_STARTED, 3)


def service_status(
    data: ReferenceData, settings: Settings, *, now: Optional[str] = None
) -> Dict[str, Any]:
    """Describe the service and the size of every backing table."""

    return {
        "service": settings.service_name,
        "status": "operational",
        "version": settings.version,
        "environment": settings.environment,
        "timestamp": now or _utcnow_iso(),
        "uptime": process_uptime(),
        "endpoints": {
            "countries": {
                "status": "operational",
                "total_countries": len(data.countries),
                "last_updated": REFERENCE_DATA_AS_OF,
            },
            "popular_codes": {
                "status": "operational",
                "total_codes": len(data.popular_codes),
                "last_updated": REFERENCE_DATA_AS_OF,
            },
            "search": {
                "status": "operational",
                "total_codes": len(data.hts_codes),
                "description": "Search functionality available",
            },
            "duty_calculation": {
                "status": "operational",
                "total_rates": len(data.duty_rates),
                "description": "Basic duty rate calculation available",
            },
        },
        "features": dict(FEATURES),
        "limits": dict(USAGE_LIMITS),
        "data_sources": {
            "primary": "Static HTS reference data",
            "last_sync": REFERENCE_DATA_AS_OF,
            "next_sync": "Manual update required",
        },
        "health_checks": {
            "api_responsive": True,
            "data_integrity": all(data.table_counts().values()),
        },
    }


def refresh_report(*, started_at: Optional[str] = None, completed_at: Optional[str] = None) -> Dict[str, Any]:
    """Report for a refresh request.

    Reference data is static, so a refresh never touches the tables or any
    external system; the report only describes what a real sync would cover.
    """

    started = started_at or _utcnow_iso()
    return {
        "status": "completed",
        "started_at": started,
        "completed_at": completed_at or _utcnow_iso(),
        "duration_ms": 1500,
        "updates": {
            "hts_codes_updated": 0,
            "countries_updated": 0,
            "duty_rates_updated": 0,
            "new_codes_added": 0,
            "deprecated_codes_removed": 0,
        },
        "data_sources": {
            "primary": "Static reference data",
            "last_official_update": REFERENCE_DATA_AS_OF,
            "next_scheduled_update": "Manual refresh required",
        },
        "notes": list(REFRESH_NOTES),
        "cache_cleared": True,
        "endpoints_affected": list(REFRESH_ENDPOINTS),
    }
