from __future__ import annotations

from pathlib import Path

from ftzhts.hts.reference_data import DEFAULT_DATA_DIR
from ftzhts.settings import Settings, get_settings


def test_default_data_dir_is_the_packaged_seeds(monkeypatch):
    monkeypatch.delenv("FTZ_HTS_DATA_DIR", raising=False)
    assert Settings().data_dir == DEFAULT_DATA_DIR
    assert get_settings().data_dir == DEFAULT_DATA_DIR
    assert (DEFAULT_DATA_DIR / "hts_codes.json").is_file()


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("FTZ_HTS_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("FTZ_HTS_API_TOKENS", " alpha, ,beta ")
    monkeypatch.setenv("FTZ_HTS_LOG_LEVEL", "debug")

    settings = get_settings()
    assert settings.data_dir == Path(tmp_path)
    assert settings.api_tokens == frozenset({"alpha", "beta"})
    assert settings.log_level == "DEBUG"


def test_blank_token_list_falls_back_to_dev_token(monkeypatch):
    monkeypatch.setenv("FTZ_HTS_API_TOKENS", " , ")
    assert get_settings().api_tokens == frozenset({"dev-token"})
