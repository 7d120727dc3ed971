"""Free-text and code search over the HTS database.

Matching is a case-insensitive substring test:

* ``type="code"`` matches the HTS code with or without its dot separators;
  an exact (case-insensitive) code match ranks first.
* ``type="description"`` matches description or category; descriptions
  that *start* with the query rank first.

Remaining ties are broken by ascending HTS code.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from ftzhts.hts.duty_rate import country_specific_rate
from ftzhts.hts.models import HTSEntry, strip_dots
from ftzhts.hts.reference_data import ReferenceData

DEFAULT_SEARCH_LIMIT = 100
MIN_QUERY_LENGTH = 2

SEARCH_TYPES = ("code", "description")


def _matches_code(entry: HTSEntry, term: str) -> bool:
    code = entry.hts_code.lower()
    return term in code or strip_dots(term) in strip_dots(code)


def _matches_description(entry: HTSEntry, term: str) -> bool:
    return term in entry.description.lower() or term in entry.category.lower()


def _relevance_key(entry: HTSEntry, term: str, search_type: str) -> Tuple[bool, str]:
    if search_type == "code":
        top = entry.hts_code.lower() == term
    else:
        top = entry.description.lower().startswith(term)
    return (not top, entry.hts_code)


def search_hts(
    data: ReferenceData,
    query: Optional[str],
    search_type: str = "description",
    limit: int = DEFAULT_SEARCH_LIMIT,
    country_of_origin: Optional[str] = None,
    category: Optional[str] = None,
) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
    """Search the HTS database.

    Queries shorter than two characters (after trimming) return an empty
    result set rather than an error.
    """

    if not query or len(query.strip()) < MIN_QUERY_LENGTH:
        return [], {"total": 0, "search_term": query, "search_type": search_type}

    term = query.strip().lower()
    matcher = _matches_code if search_type == "code" else _matches_description
    hits = [entry for entry in data.hts_codes if matcher(entry, term)]

    if category:
        wanted = category.lower()
        hits = [entry for entry in hits if entry.category.lower() == wanted]

    hits.sort(key=lambda entry: _relevance_key(entry, term, search_type))

    if 0 < limit < len(hits):
        hits = hits[:limit]

    results: List[Dict[str, Any]] = []
    for entry in hits:
        row = entry.to_dict()
        if country_of_origin:
            row["country_specific_rate"] = country_specific_rate(country_of_origin)
        results.append(row)

    meta = {
        "total": len(results),
        "search_term": query,
        "search_type": search_type,
        "country_of_origin": country_of_origin,
        "available_categories": list(dict.fromkeys(e.category for e in data.hts_codes)),
        "total_database_entries": len(data.hts_codes),
    }
    return results, meta
