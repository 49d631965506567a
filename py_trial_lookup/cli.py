import asyncio
import json
import logging
from typing import Any, Dict

import httpx
import typer

from py_trial_lookup.config import Settings, load_config
from py_trial_lookup.enrichers.ctgov import ClinicalTrialsGovEnricher
from py_trial_lookup.errors import TrialLookupError
from py_trial_lookup.lookup import create_clinical_trial_lookup

# Basic structured logging setup
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = typer.Typer(help="Look up clinical trials matching a FHIR patient bundle.")


def load_bundle(bundle_file: str) -> Dict[str, Any]:
    """Loads a FHIR patient bundle from a JSON file."""
    with open(bundle_file, "r") as f:
        return json.load(f)


async def arun_lookup(
    bundle_file: str,
    config_file: str | None = "config.yaml",
    endpoint: str | None = None,
    auth_token: str | None = None,
    enrich: bool = False,
) -> Dict[str, Any]:
    """Runs a single lookup and returns the search set as FHIR JSON."""
    config = load_config(config_file)
    settings = Settings(**config)
    if endpoint:
        settings.endpoint = endpoint
    if auth_token:
        settings.auth_token = auth_token

    patient_bundle = load_bundle(bundle_file)

    try:
        async with httpx.AsyncClient(timeout=settings.request_timeout) as client:
            ctg_service = (
                ClinicalTrialsGovEnricher(client=client, base_url=settings.ctgov_base_url)
                if enrich
                else None
            )
            lookup = create_clinical_trial_lookup(settings, ctg_service, client=client)
            search_set = await lookup(patient_bundle)
    except Exception as e:
        logger.error("Lookup failed: %s", e, exc_info=True)
        raise

    logger.info("Found %d matching trials.", search_set.total)
    return search_set.to_fhir()


@app.callback()
def callback() -> None:
    """Clinical trial lookup tools."""


@app.command()
def match(
    bundle_file: str = typer.Argument(..., help="Path to a FHIR patient bundle (JSON)."),
    config_file: str = typer.Option("config.yaml", help="Path to YAML config file."),
    endpoint: str = typer.Option(None, help="Override the matching service endpoint."),
    auth_token: str = typer.Option(None, help="Override the matching service token."),
    enrich: bool = typer.Option(
        False, help="Fill in study details from ClinicalTrials.gov."
    ),
):
    """Sends a patient bundle to the matching service and prints the results."""
    try:
        result = asyncio.run(
            arun_lookup(
                bundle_file,
                config_file=config_file,
                endpoint=endpoint,
                auth_token=auth_token,
                enrich=enrich,
            )
        )
    except (TrialLookupError, httpx.HTTPError, OSError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    typer.echo(json.dumps(result, indent=2))


def main():
    app()


if __name__ == "__main__":
    main()
