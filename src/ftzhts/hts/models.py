"""Reference-data records and computed results for the HTS service."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


BROWSE_LEVELS: Tuple[str, ...] = ("chapter", "heading", "subheading", "tariff_line")


def strip_dots(code: str) -> str:
    return code.replace(".", "")


@dataclass(frozen=True)
class Country:
    """Country of origin with its U.S. trade agreement, if any."""

    code: str
    name: str
    region: str
    trade_agreement: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class HTSEntry:
    """A single tariff line from the HTS database."""

    hts_code: str           # Dotted code, e.g. "8471.30.0100"
    description: str
    category: str
    chapter: str            # 2-digit chapter
    heading: str            # 4-digit heading
    subheading: str         # 6-digit subheading
    unit: str
    general_rate: str       # "2.5%", "0%" or "Free"
    special_rate: str
    additional_duties: Tuple[str, ...] = ()

    @property
    def digits(self) -> str:
        return strip_dots(self.hts_code)

    @property
    def statistical_suffix(self) -> str:
        return self.digits[-4:]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hts_code": self.hts_code,
            "description": self.description,
            "category": self.category,
            "chapter": self.chapter,
            "heading": self.heading,
            "subheading": self.subheading,
            "unit": self.unit,
            "general_rate": self.general_rate,
            "special_rate": self.special_rate,
        }


@dataclass(frozen=True)
class PopularCode:
    """Frequently imported HTS code, ranked by usage frequency."""

    hts_code: str
    description: str
    category: str
    usage_frequency: str    # "Very High" | "High" | "Medium" | "Low"
    general_duty_rate: str
    special_rate: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class BrowseNode:
    """Node in the chapter -> heading -> subheading -> tariff line hierarchy.

    Parents are implied by the prefix fields (``chapter``, ``heading``,
    ``subheading``); headers carry ``code``/``title`` while tariff lines carry
    ``hts_code``/``description``.
    """

    type: str
    level: str
    code: Optional[str] = None
    hts_code: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    chapter: Optional[str] = None
    heading: Optional[str] = None
    subheading: Optional[str] = None
    unit: Optional[str] = None
    general_rate: Optional[str] = None
    special_rate: Optional[str] = None

    @property
    def sort_code(self) -> str:
        return self.hts_code or self.code or ""

    def to_dict(self) -> Dict[str, Any]:
        return {key: value for key, value in asdict(self).items() if value is not None}


@dataclass(frozen=True)
class DutyRateRecord:
    """General rate plus per-country special rates for one HTS code."""

    general_rate: str
    special_rates: Mapping[str, str] = field(default_factory=dict)


@dataclass
class DutyRateResult:
    """Outcome of a duty-rate calculation; built fresh per request."""

    hts_code: str
    country_of_origin: str
    general_rate: str
    applicable_rate: str
    is_preferential: bool
    is_duty_free: bool
    trade_agreement: Optional[str]
    calculation_date: str
    notes: List[str] = field(default_factory=list)
    requirements: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class DutyRateRequestModel(BaseModel):
    """Body of a ``duty-rate`` request.

    Both fields are optional at the schema level so the dispatcher can report
    which one is missing with the service's own error envelope.
    """

    hts_code: Optional[str] = Field(default=None, alias="htsCode")
    country_of_origin: Optional[str] = Field(default=None, alias="countryOfOrigin")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")
