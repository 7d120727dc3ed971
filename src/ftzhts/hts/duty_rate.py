"""Duty rate resolution for an HTS code and country of origin.

The applicable rate is resolved in strict priority order:

    special_rates[country] -> special_rates["default"] -> general_rate

and the result is annotated with preferential / duty-free status, the
matching trade agreement and the compliance notes an importer needs.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, Optional

from ftzhts.hts.errors import BadRequestError, NotFoundError
from ftzhts.hts.models import DutyRateRecord, DutyRateResult
from ftzhts.hts.reference_data import ReferenceData

PREFERENTIAL_REQUIREMENTS = (
    "Certificate of origin required",
    "Must meet origin requirements",
)
DUTY_FREE_NOTE = "This product is duty-free from this country"
RATE_DISCLAIMER = "Rates subject to change - verify current status before entry"

# Coarse origin heuristic used to annotate search hits and code lookups
# when no duty-rate record is consulted.
_COUNTRY_AGREEMENT_HINTS: Dict[str, str] = {
    "CA": "Free",  # USMCA
    "MX": "Free",  # USMCA
    "CN": "Variable",
    "GB": "Standard",
    "DE": "Standard",
}


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def normalize_code(value: str) -> str:
    return value.strip().upper()


def is_duty_free(rate: str) -> bool:
    """``"Free"`` in any case, or the literal ``"0%"``."""
    return rate.lower() == "free" or rate == "0%"


def is_preferential(applicable_rate: str, general_rate: str) -> bool:
    return applicable_rate != general_rate and applicable_rate.lower() != general_rate.lower()


def resolve_applicable_rate(record: DutyRateRecord, country_code: str) -> str:
    return (
        record.special_rates.get(country_code)
        or record.special_rates.get("default")
        or record.general_rate
    )


def country_specific_rate(country_code: Optional[str]) -> Dict[str, str]:
    """Annotate a country with the coarse agreement heuristic.

    Canada and Mexico are treated as duty-free (USMCA); every other origin
    falls back to the tariff schedule.
    """

    agreement = _COUNTRY_AGREEMENT_HINTS.get((country_code or "").upper(), "Standard")
    duty_free = agreement == "Free"
    return {
        "applicable_rate": "0%" if duty_free else "See tariff schedule",
        "trade_agreement": agreement,
        "notes": "Duty-free under trade agreement" if duty_free else "Standard MFN rates apply",
    }


def calculate_duty_rate(
    data: ReferenceData,
    hts_code: Optional[str],
    country_of_origin: Optional[str],
    *,
    now: Optional[str] = None,
) -> DutyRateResult:
    """Resolve the duty rate for ``hts_code`` imported from ``country_of_origin``.

    Raises:
        BadRequestError: either input is missing or blank.
        NotFoundError: no duty-rate record exists for the code.
    """

    if not hts_code or not hts_code.strip():
        raise BadRequestError("HTS code is required")
    if not country_of_origin or not country_of_origin.strip():
        raise BadRequestError("Country of origin is required")

    code = normalize_code(hts_code)
    country = normalize_code(country_of_origin)

    record = data.duty_rate_record(code)
    if record is None:
        raise NotFoundError(f"Duty rate data not available for HTS code: {hts_code}")

    applicable = resolve_applicable_rate(record, country)
    agreement = data.trade_agreements.get(country)
    preferential = is_preferential(applicable, record.general_rate)
    duty_free = is_duty_free(applicable)

    result = DutyRateResult(
        hts_code=code,
        country_of_origin=country,
        general_rate=record.general_rate,
        applicable_rate=applicable,
        is_preferential=preferential,
        is_duty_free=duty_free,
        trade_agreement=agreement,
        calculation_date=now or _utcnow_iso(),
    )

    if preferential:
        if agreement:
            result.notes.append(f"Preferential rate available under {agreement}")
        else:
            result.notes.append("Preferential rate available under special rate provisions")
        result.requirements.extend(PREFERENTIAL_REQUIREMENTS)

    if duty_free:
        result.notes.append(DUTY_FREE_NOTE)

    result.notes.append(RATE_DISCLAIMER)
    return result
