"""Country list, popular-code ranking and single-code lookup."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from ftzhts.hts.duty_rate import country_specific_rate
from ftzhts.hts.errors import BadRequestError, NotFoundError
from ftzhts.hts.models import HTSEntry, PopularCode, strip_dots
from ftzhts.hts.reference_data import ReferenceData

Payload = Tuple[List[Dict[str, Any]], Dict[str, Any]]

DEFAULT_POPULAR_LIMIT = 20

FREQUENCY_RANK: Dict[str, int] = {"Very High": 3, "High": 2, "Medium": 1}

DUTY_FREE_GENERAL_NOTE = "This item is duty-free under general rates"
ADDITIONAL_DUTIES_NOTE = "Additional duties or restrictions may apply - verify current status"


def _distinct(values) -> List[Any]:
    """Unique values in first-seen order."""
    return list(dict.fromkeys(values))


# ---------------------------------------------------------------------------
# Countries
# ---------------------------------------------------------------------------
def list_countries(
    data: ReferenceData,
    region: Optional[str] = None,
    trade_agreement_only: bool = False,
    search: Optional[str] = None,
) -> Payload:
    countries = list(data.countries)

    if region:
        wanted = region.lower()
        countries = [c for c in countries if c.region.lower() == wanted]

    if trade_agreement_only:
        countries = [c for c in countries if c.trade_agreement is not None]

    if search:
        term = search.lower()
        countries = [c for c in countries if term in c.name.lower() or term in c.code.lower()]

    countries.sort(key=lambda c: c.name)

    meta = {
        "total": len(countries),
        "available_regions": _distinct(c.region for c in data.countries),
        "trade_agreements": _distinct(c.trade_agreement for c in data.countries if c.trade_agreement),
    }
    return [c.to_dict() for c in countries], meta


# ---------------------------------------------------------------------------
# Popular codes
# ---------------------------------------------------------------------------
def frequency_rank(usage_frequency: str) -> int:
    """Rank used for ordering; unrecognised frequencies (e.g. "Low") rank 0."""
    return FREQUENCY_RANK.get(usage_frequency, 0)


def popular_sort_key(code: PopularCode) -> Tuple[int, str]:
    return (-frequency_rank(code.usage_frequency), code.hts_code)


def popular_codes(
    data: ReferenceData,
    limit: int = DEFAULT_POPULAR_LIMIT,
    category: Optional[str] = None,
    usage_frequency: Optional[str] = None,
    search: Optional[str] = None,
) -> Payload:
    codes = list(data.popular_codes)

    if category:
        wanted = category.lower()
        codes = [c for c in codes if c.category.lower() == wanted]

    if usage_frequency:
        wanted = usage_frequency.lower()
        codes = [c for c in codes if c.usage_frequency.lower() == wanted]

    if search:
        term = search.lower()
        codes = [
            c
            for c in codes
            if term in c.hts_code or term in c.description.lower() or term in c.category.lower()
        ]

    codes.sort(key=popular_sort_key)

    if limit > 0:
        codes = codes[:limit]

    meta = {
        "total": len(codes),
        "available_categories": _distinct(c.category for c in data.popular_codes),
        "available_frequencies": _distinct(c.usage_frequency for c in data.popular_codes),
        "total_available": len(data.popular_codes),
    }
    return [c.to_dict() for c in codes], meta


# ---------------------------------------------------------------------------
# Code lookup
# ---------------------------------------------------------------------------
def find_entry(data: ReferenceData, hts_code: str) -> Optional[HTSEntry]:
    """First entry matching ``hts_code`` case-insensitively, with or without dots."""

    search_code = hts_code.lower()
    normalized = strip_dots(hts_code).lower()
    for entry in data.hts_codes:
        if entry.hts_code.lower() == search_code or entry.digits.lower() == normalized:
            return entry
    return None


def lookup_code(
    data: ReferenceData,
    hts_code: Optional[str],
    country_of_origin: Optional[str] = None,
    *,
    now: Optional[str] = None,
) -> Dict[str, Any]:
    if not hts_code:
        raise BadRequestError("HTS code is required (use ?htsCode=XXXX.XX.XXXX)")

    entry = find_entry(data, hts_code)
    if entry is None:
        raise NotFoundError(f"HTS code '{hts_code}' not found")

    notes: List[str] = []
    result: Dict[str, Any] = {
        **entry.to_dict(),
        "additional_duties": list(entry.additional_duties),
        "statistical_suffix": entry.statistical_suffix,
        "found": True,
        "lookup_date": now or datetime.now(timezone.utc).isoformat(),
        "notes": notes,
    }

    if country_of_origin:
        country = country_of_origin.strip().upper()
        info = {
            "country_code": country,
            "country_name": data.country_name(country),
            **country_specific_rate(country),
        }
        result["country_specific"] = info
        if info["applicable_rate"] != entry.general_rate:
            notes.append(f"Special rate applies for {country_of_origin}: {info['applicable_rate']}")

    if entry.general_rate == "0%":
        notes.append(DUTY_FREE_GENERAL_NOTE)

    if entry.additional_duties:
        notes.append(ADDITIONAL_DUTIES_NOTE)

    return result
