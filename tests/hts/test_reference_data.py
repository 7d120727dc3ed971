from __future__ import annotations

import json
import shutil

import pytest

from ftzhts.hts.reference_data import DEFAULT_DATA_DIR, load_reference_data


def test_packaged_tables_load(reference_data) -> None:
    counts = reference_data.table_counts()
    assert counts["hts_codes"] == 21
    assert counts["popular_codes"] == 20
    assert counts["browse_nodes"] == 23
    assert counts["duty_rates"] == 11
    assert all(counts.values())


def test_hts_hierarchy_prefixes_hold(reference_data) -> None:
    for entry in reference_data.hts_codes:
        assert entry.heading.startswith(entry.chapter)
        assert entry.subheading.startswith(entry.heading)
        assert entry.digits.startswith(entry.subheading)


def test_tables_are_read_only(reference_data) -> None:
    with pytest.raises(TypeError):
        reference_data.duty_rates["0000.00.0000"] = None  # type: ignore[index]
    with pytest.raises(TypeError):
        reference_data.trade_agreements["XX"] = "nothing"  # type: ignore[index]


def test_country_name_falls_back_to_code(reference_data) -> None:
    assert reference_data.country_name("MX") == "Mexico"
    assert reference_data.country_name("ZZ") == "ZZ"


def test_inconsistent_hierarchy_is_rejected(tmp_path) -> None:
    data_dir = tmp_path / "data"
    shutil.copytree(DEFAULT_DATA_DIR, data_dir)
    codes_path = data_dir / "hts_codes.json"
    payload = json.loads(codes_path.read_text(encoding="utf-8"))
    payload["hts_codes"][0]["heading"] = "9999"
    codes_path.write_text(json.dumps(payload), encoding="utf-8")

    with pytest.raises(ValueError, match="Inconsistent hierarchy"):
        load_reference_data(data_dir)


def test_duty_rate_keys_are_normalised(tmp_path) -> None:
    data_dir = tmp_path / "data"
    shutil.copytree(DEFAULT_DATA_DIR, data_dir)
    rates_path = data_dir / "duty_rates.json"
    rates_path.write_text(
        json.dumps(
            {
                "duty_rates": {" 1234.56.7890 ": {"general_rate": "3%", "special_rates": {}}},
                "trade_agreements": {"ca": "USMCA"},
            }
        ),
        encoding="utf-8",
    )

    data = load_reference_data(data_dir)
    assert data.duty_rate_record("1234.56.7890").general_rate == "3%"
    assert data.trade_agreements == {"CA": "USMCA"}
