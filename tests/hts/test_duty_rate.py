from __future__ import annotations

from types import MappingProxyType

import pytest

from ftzhts.hts.duty_rate import (
    DUTY_FREE_NOTE,
    PREFERENTIAL_REQUIREMENTS,
    RATE_DISCLAIMER,
    calculate_duty_rate,
    country_specific_rate,
    is_duty_free,
    is_preferential,
    resolve_applicable_rate,
)
from ftzhts.hts.errors import BadRequestError, NotFoundError
from ftzhts.hts.models import DutyRateRecord

USMCA = "USMCA (United States-Mexico-Canada Agreement)"


def test_resolution_prefers_country_then_default_then_general() -> None:
    record = DutyRateRecord("5%", MappingProxyType({"CA": "1%", "default": "3%"}))
    assert resolve_applicable_rate(record, "CA") == "1%"
    assert resolve_applicable_rate(record, "JP") == "3%"
    assert resolve_applicable_rate(DutyRateRecord("5%", MappingProxyType({})), "JP") == "5%"


def test_duty_free_recognises_free_in_any_case_and_zero_percent() -> None:
    for rate in ("Free", "FREE", "free", "0%"):
        assert is_duty_free(rate)
    for rate in ("0.0%", "0", "2.5%", ""):
        assert not is_duty_free(rate)


def test_preferential_comparison_ignores_case() -> None:
    assert not is_preferential("free", "Free")
    assert not is_preferential("2.5%", "2.5%")
    assert is_preferential("Free", "2.5%")


def test_mexican_processor_is_duty_free_under_usmca(reference_data) -> None:
    result = calculate_duty_rate(
        reference_data, "8542.31.0001", "MX", now="2024-01-01T00:00:00+00:00"
    )

    assert result.hts_code == "8542.31.0001"
    assert result.country_of_origin == "MX"
    assert result.general_rate == "2.5%"
    assert result.applicable_rate == "Free"
    assert result.is_preferential
    assert result.is_duty_free
    assert result.trade_agreement == USMCA
    assert result.calculation_date == "2024-01-01T00:00:00+00:00"
    assert result.notes == [
        f"Preferential rate available under {USMCA}",
        DUTY_FREE_NOTE,
        RATE_DISCLAIMER,
    ]
    assert result.requirements == list(PREFERENTIAL_REQUIREMENTS)


def test_inputs_are_trimmed_and_uppercased(reference_data) -> None:
    result = calculate_duty_rate(reference_data, "  8542.31.0001 ", " mx ")
    assert result.hts_code == "8542.31.0001"
    assert result.country_of_origin == "MX"
    assert result.applicable_rate == "Free"


def test_default_rate_matching_general_is_not_preferential(reference_data) -> None:
    result = calculate_duty_rate(reference_data, "8471.30.0100", "CN")

    assert result.applicable_rate == "0%"
    assert not result.is_preferential
    assert result.is_duty_free
    assert result.trade_agreement is None
    assert result.requirements == []
    assert result.notes == [DUTY_FREE_NOTE, RATE_DISCLAIMER]


def test_default_free_rate_without_agreement_uses_special_provisions_note(reference_data) -> None:
    result = calculate_duty_rate(reference_data, "9403.60.8081", "CN")

    assert result.general_rate == "0%"
    assert result.applicable_rate == "Free"
    assert result.is_preferential
    assert result.is_duty_free
    assert result.notes[0] == "Preferential rate available under special rate provisions"


def test_reduced_rate_is_preferential_but_not_free(reference_data) -> None:
    result = calculate_duty_rate(reference_data, "3926.90.9989", "CL")

    assert result.applicable_rate == "4.2%"
    assert result.is_preferential
    assert not result.is_duty_free
    assert result.trade_agreement == "US-Chile Free Trade Agreement"
    assert DUTY_FREE_NOTE not in result.notes
    assert result.notes[-1] == RATE_DISCLAIMER


def test_calculation_has_no_side_effects(reference_data) -> None:
    first = calculate_duty_rate(reference_data, "8542.31.0001", "MX", now="t")
    second = calculate_duty_rate(reference_data, "8542.31.0001", "MX", now="t")
    assert first.to_dict() == second.to_dict()
    assert reference_data.duty_rates["8542.31.0001"].special_rates["MX"] == "Free"


def test_missing_inputs_are_rejected(reference_data) -> None:
    with pytest.raises(BadRequestError, match="HTS code is required"):
        calculate_duty_rate(reference_data, "", "MX")
    with pytest.raises(BadRequestError, match="Country of origin is required"):
        calculate_duty_rate(reference_data, "8542.31.0001", "   ")


def test_unknown_code_is_not_found(reference_data) -> None:
    with pytest.raises(NotFoundError) as excinfo:
        calculate_duty_rate(reference_data, "0000.00.0000", "MX")
    assert excinfo.value.message == "Duty rate data not available for HTS code: 0000.00.0000"
    assert excinfo.value.status_code == 404


def test_uppercase_free_general_rate_from_custom_tables(tiny_data) -> None:
    result = calculate_duty_rate(tiny_data, "8999.20.0000", "FR")
    assert result.applicable_rate == "free"
    assert not result.is_preferential
    assert result.is_duty_free


def test_country_heuristic() -> None:
    assert country_specific_rate("ca") == {
        "applicable_rate": "0%",
        "trade_agreement": "Free",
        "notes": "Duty-free under trade agreement",
    }
    assert country_specific_rate("CN")["trade_agreement"] == "Variable"
    assert country_specific_rate("CN")["applicable_rate"] == "See tariff schedule"
    assert country_specific_rate("FR")["trade_agreement"] == "Standard"
    assert country_specific_rate(None)["notes"] == "Standard MFN rates apply"
