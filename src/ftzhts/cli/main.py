"""Command-line interface for the FTZ HTS lookup service."""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

import click

from ..hts.catalog import lookup_code
from ..hts.duty_rate import calculate_duty_rate
from ..hts.errors import HTSError
from ..hts.reference_data import load_reference_data
from ..hts.search import DEFAULT_SEARCH_LIMIT, SEARCH_TYPES, search_hts
from ..settings import get_settings


def _emit(payload: Any) -> None:
    click.echo(json.dumps(payload, indent=2, sort_keys=True))


def _load():
    return load_reference_data(get_settings().data_dir)


@click.group()
def cli() -> None:
    """FTZ HTS lookup command suite."""


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True, help="Interface to bind.")
@click.option("--port", default=8000, show_default=True, type=int, help="Port to listen on.")
def serve(host: str, port: int) -> None:
    """Run the HTS API with uvicorn."""

    import uvicorn

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run("ftzhts.api.app:app", host=host, port=port, log_level=settings.log_level.lower())


@cli.command()
@click.argument("hts_code")
@click.option("--country", "country", default=None, help="ISO-2 country of origin.")
def lookup(hts_code: str, country: Optional[str]) -> None:
    """Look up a single HTS code (dots optional)."""

    try:
        _emit(lookup_code(_load(), hts_code, country_of_origin=country))
    except HTSError as exc:
        raise click.ClickException(exc.message) from exc


@cli.command()
@click.argument("query")
@click.option(
    "--type",
    "search_type",
    type=click.Choice(SEARCH_TYPES),
    default="description",
    show_default=True,
)
@click.option("--limit", default=DEFAULT_SEARCH_LIMIT, show_default=True, type=int)
@click.option("--country", "country", default=None, help="Annotate with a country-specific rate.")
@click.option("--category", default=None, help="Exact category filter.")
def search(
    query: str,
    search_type: str,
    limit: int,
    country: Optional[str],
    category: Optional[str],
) -> None:
    """Search HTS codes by description or code."""

    results, meta = search_hts(
        _load(),
        query,
        search_type=search_type,
        limit=limit,
        country_of_origin=country,
        category=category,
    )
    _emit({"data": results, "meta": meta})


@cli.command("duty-rate")
@click.argument("hts_code")
@click.argument("country")
def duty_rate(hts_code: str, country: str) -> None:
    """Resolve the applicable duty rate for HTS_CODE imported from COUNTRY."""

    try:
        result = calculate_duty_rate(_load(), hts_code, country)
    except HTSError as exc:
        raise click.ClickException(exc.message) from exc
    _emit(result.to_dict())


if __name__ == "__main__":
    cli()
