"""Read-only reference data store for the HTS service.

The tables ship as JSON seeds next to this module and are loaded once per
process into a :class:`ReferenceData` provider that handlers receive
explicitly.  Nothing in request handling mutates it.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ftzhts.hts.models import BrowseNode, Country, DutyRateRecord, HTSEntry, PopularCode

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path(__file__).resolve().parent / "data"


@dataclass(frozen=True)
class ReferenceData:
    """Immutable bundle of every static table the handlers consult."""

    countries: Tuple[Country, ...]
    popular_codes: Tuple[PopularCode, ...]
    hts_codes: Tuple[HTSEntry, ...]
    browse_nodes: Tuple[BrowseNode, ...]
    duty_rates: Mapping[str, DutyRateRecord]
    trade_agreements: Mapping[str, str]

    def country_name(self, code: str) -> str:
        """Resolve a country code to its name, falling back to the code."""
        for country in self.countries:
            if country.code == code:
                return country.name
        return code

    def duty_rate_record(self, hts_code: str) -> Optional[DutyRateRecord]:
        return self.duty_rates.get(hts_code)

    def table_counts(self) -> Dict[str, int]:
        return {
            "countries": len(self.countries),
            "popular_codes": len(self.popular_codes),
            "hts_codes": len(self.hts_codes),
            "browse_nodes": len(self.browse_nodes),
            "duty_rates": len(self.duty_rates),
            "trade_agreements": len(self.trade_agreements),
        }


# ---------------------------------------------------------------------------
# Loaders
# ---------------------------------------------------------------------------
def _read(path: Path) -> Dict[str, Any]:
    return json.loads(path.read_text(encoding="utf-8"))


def _parse_countries(records: List[Dict[str, Any]]) -> Tuple[Country, ...]:
    return tuple(
        Country(
            code=str(rec["code"]),
            name=str(rec["name"]),
            region=str(rec["region"]),
            trade_agreement=rec.get("trade_agreement"),
        )
        for rec in records
    )


def _parse_popular(records: List[Dict[str, Any]]) -> Tuple[PopularCode, ...]:
    return tuple(
        PopularCode(
            hts_code=str(rec["hts_code"]),
            description=str(rec["description"]),
            category=str(rec["category"]),
            usage_frequency=str(rec["usage_frequency"]),
            general_duty_rate=str(rec.get("general_duty_rate", "")),
            special_rate=str(rec.get("special_rate", "")),
        )
        for rec in records
    )


def _parse_hts_codes(records: List[Dict[str, Any]]) -> Tuple[HTSEntry, ...]:
    entries: List[HTSEntry] = []
    for rec in records:
        entry = HTSEntry(
            hts_code=str(rec["hts_code"]),
            description=str(rec["description"]),
            category=str(rec["category"]),
            chapter=str(rec["chapter"]),
            heading=str(rec["heading"]),
            subheading=str(rec["subheading"]),
            unit=str(rec.get("unit", "")),
            general_rate=str(rec["general_rate"]),
            special_rate=str(rec.get("special_rate", "")),
            additional_duties=tuple(rec.get("additional_duties") or ()),
        )
        if not (
            entry.heading.startswith(entry.chapter)
            and entry.subheading.startswith(entry.heading)
            and entry.digits.startswith(entry.subheading)
        ):
            raise ValueError(f"Inconsistent hierarchy for HTS code {entry.hts_code}")
        entries.append(entry)
    return tuple(entries)


def _parse_browse(records: List[Dict[str, Any]]) -> Tuple[BrowseNode, ...]:
    fields = BrowseNode.__dataclass_fields__
    return tuple(
        BrowseNode(**{key: value for key, value in rec.items() if key in fields})
        for rec in records
    )


def _parse_duty_rates(records: Dict[str, Dict[str, Any]]) -> Mapping[str, DutyRateRecord]:
    parsed = {
        str(code).strip().upper(): DutyRateRecord(
            general_rate=str(rec["general_rate"]),
            special_rates=MappingProxyType(
                {str(k): str(v) for k, v in (rec.get("special_rates") or {}).items()}
            ),
        )
        for code, rec in records.items()
    }
    return MappingProxyType(parsed)


def load_reference_data(data_dir: Path | None = None) -> ReferenceData:
    """Load every reference table from ``data_dir``."""

    root = Path(data_dir) if data_dir else DEFAULT_DATA_DIR
    duty_payload = _read(root / "duty_rates.json")

    data = ReferenceData(
        countries=_parse_countries(_read(root / "countries.json").get("countries", [])),
        popular_codes=_parse_popular(_read(root / "popular_codes.json").get("popular_codes", [])),
        hts_codes=_parse_hts_codes(_read(root / "hts_codes.json").get("hts_codes", [])),
        browse_nodes=_parse_browse(_read(root / "browse.json").get("nodes", [])),
        duty_rates=_parse_duty_rates(duty_payload.get("duty_rates", {})),
        trade_agreements=MappingProxyType(
            {str(k).upper(): str(v) for k, v in duty_payload.get("trade_agreements", {}).items()}
        ),
    )
    logger.info("Loaded HTS reference data from %s: %s", root, data.table_counts())
    return data


@lru_cache(maxsize=1)
def default_reference_data() -> ReferenceData:
    """Process-wide reference data loaded from the packaged seeds."""
    return load_reference_data(DEFAULT_DATA_DIR)
