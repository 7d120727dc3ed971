"""HTS lookup and duty-rate resolution engine.

Pure functions over an immutable :class:`ReferenceData` bundle; the HTTP
layer in :mod:`ftzhts.api` only parses parameters and shapes envelopes.
"""
from .browse import browse_hts
from .catalog import list_countries, lookup_code, popular_codes
from .duty_rate import calculate_duty_rate, country_specific_rate, is_duty_free
from .reference_data import ReferenceData, default_reference_data, load_reference_data
from .search import search_hts
from .status import refresh_report, service_status

__all__ = [
    "ReferenceData",
    "default_reference_data",
    "load_reference_data",
    "list_countries",
    "popular_codes",
    "lookup_code",
    "search_hts",
    "browse_hts",
    "calculate_duty_rate",
    "country_specific_rate",
    "is_duty_free",
    "service_status",
    "refresh_report",
]
