"""Environment-driven configuration for the HTS lookup service."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, Optional

from ftzhts import __version__
from ftzhts.hts.reference_data import DEFAULT_DATA_DIR

DEFAULT_API_TOKEN = "dev-token"


def _parse_tokens(raw: str | None) -> FrozenSet[str]:
    if not raw:
        return frozenset()
    return frozenset(token.strip() for token in raw.split(",") if token.strip())


@dataclass(frozen=True)
class Settings:
    """Snapshot of the service configuration."""

    service_name: str = "HTS Lookup Service"
    version: str = __version__
    environment: str = "production"
    data_dir: Path = DEFAULT_DATA_DIR
    api_tokens: FrozenSet[str] = field(default_factory=lambda: frozenset({DEFAULT_API_TOKEN}))
    log_level: str = "INFO"


def get_settings() -> Settings:
    """Read the current settings from the environment.

    Values are read on every call so tests can reconfigure the service with
    ``monkeypatch.setenv`` without reloading modules.
    """

    tokens = _parse_tokens(os.getenv("FTZ_HTS_API_TOKENS")) or frozenset({DEFAULT_API_TOKEN})
    data_dir: Optional[str] = os.getenv("FTZ_HTS_DATA_DIR")
    return Settings(
        version=os.getenv("FTZ_HTS_VERSION", __version__),
        environment=os.getenv("FTZ_HTS_ENVIRONMENT", "production"),
        data_dir=Path(data_dir) if data_dir else DEFAULT_DATA_DIR,
        api_tokens=tokens,
        log_level=os.getenv("FTZ_HTS_LOG_LEVEL", "INFO").upper(),
    )
