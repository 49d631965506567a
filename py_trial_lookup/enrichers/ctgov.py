# Copyright 2025 Gowtham Rao <rao@ohdsi.org>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Provides an enricher that fills in study details from ClinicalTrials.gov."""

import logging
from typing import Any

import httpx

from py_trial_lookup.enrichers.base import ResearchStudyEnricher
from py_trial_lookup.models.fhir import CodeableConcept, Coding, ResearchStudy

CTGOV_STUDIES_URL = "https://clinicaltrials.gov/api/v2/studies"
USER_AGENT = "py-trial-lookup/0.1.0"
PHASE_CODING_SYSTEM_URL = "http://terminology.hl7.org/CodeSystem/research-study-phase"

# ClinicalTrials.gov phase lists mapped to FHIR research-study-phase codes.
PHASE_CODES: dict[tuple[str, ...], tuple[str, str]] = {
    ("NA",): ("n-a", "N/A"),
    ("EARLY_PHASE1",): ("early-phase-1", "Early Phase 1"),
    ("PHASE1",): ("phase-1", "Phase 1"),
    ("PHASE1", "PHASE2"): ("phase-1-phase-2", "Phase 1/Phase 2"),
    ("PHASE2",): ("phase-2", "Phase 2"),
    ("PHASE2", "PHASE3"): ("phase-2-phase-3", "Phase 2/Phase 3"),
    ("PHASE3",): ("phase-3", "Phase 3"),
    ("PHASE4",): ("phase-4", "Phase 4"),
}

logger = logging.getLogger(__name__)


def _section(data: Any, key: str) -> dict[str, Any]:
    """Returns ``data[key]`` when both are JSON objects, otherwise {}."""
    if not isinstance(data, dict):
        return {}
    value = data.get(key)
    return value if isinstance(value, dict) else {}


def _text(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None


def convert_phase(phases: Any) -> CodeableConcept | None:
    """Converts a ClinicalTrials.gov phase list to a FHIR phase concept."""
    if not phases:
        return None
    if not isinstance(phases, list) or not all(isinstance(p, str) for p in phases):
        logger.warning("Ignoring malformed ClinicalTrials.gov phases: %r", phases)
        return None
    mapped = PHASE_CODES.get(tuple(sorted(phases)))
    if mapped is None:
        logger.warning("Unknown ClinicalTrials.gov phases: %s", phases)
        return None
    code, display = mapped
    return CodeableConcept(
        coding=[Coding(system=PHASE_CODING_SYSTEM_URL, code=code, display=display)],
        text=display,
    )


def study_nct_id(ctgov_study: Any) -> str | None:
    """Returns the NCT id of a ClinicalTrials.gov study record, if present."""
    ident = _section(_section(ctgov_study, "protocolSection"), "identificationModule")
    return _text(ident.get("nctId"))


def apply_ctgov_study(study: ResearchStudy, ctgov_study: dict[str, Any]) -> None:
    """Copies details from a ClinicalTrials.gov study onto a ResearchStudy.

    Only fields that are still empty are filled in. Values of the wrong JSON
    type are ignored.
    """
    protocol = _section(ctgov_study, "protocolSection")
    ident = _section(protocol, "identificationModule")
    description = _section(protocol, "descriptionModule")
    design = _section(protocol, "designModule")
    conditions = _section(protocol, "conditionsModule").get("conditions")

    if study.title is None:
        study.title = _text(ident.get("officialTitle")) or _text(ident.get("briefTitle"))
    if study.description is None:
        study.description = _text(description.get("briefSummary"))
    if study.phase is None:
        study.phase = convert_phase(design.get("phases"))
    if study.condition is None and isinstance(conditions, list):
        texts = [condition for condition in conditions if _text(condition)]
        if texts:
            study.condition = [CodeableConcept(text=text) for text in texts]


class ClinicalTrialsGovEnricher(ResearchStudyEnricher):
    """Enricher that looks studies up on the ClinicalTrials.gov v2 API.

    Failures talking to ClinicalTrials.gov are logged and leave the studies
    as they were; the matching service result is still returned.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        base_url: str = CTGOV_STUDIES_URL,
        page_size: int = 100,
    ) -> None:
        """Initializes the enricher.

        Args:
            client: An httpx.AsyncClient for making requests. When omitted a
                    client is created for each update.
            base_url: The ClinicalTrials.gov studies endpoint.
            page_size: Maximum number of studies requested at once.
        """
        self.client = client
        self.base_url = base_url
        self.page_size = page_size

    async def _fetch_studies(
        self, client: httpx.AsyncClient, nct_ids: list[str]
    ) -> dict[str, dict[str, Any]]:
        """Fetches the given studies, keyed by NCT id."""
        found: dict[str, dict[str, Any]] = {}
        for start in range(0, len(nct_ids), self.page_size):
            chunk = nct_ids[start : start + self.page_size]
            response = await client.get(
                self.base_url,
                params={"filter.ids": ",".join(chunk), "pageSize": len(chunk)},
                headers={"Accept": "application/json", "User-Agent": USER_AGENT},
            )
            response.raise_for_status()
            payload = response.json()
            ctgov_studies = payload.get("studies") if isinstance(payload, dict) else None
            if not isinstance(ctgov_studies, list):
                logger.warning(
                    "Unexpected ClinicalTrials.gov response for %d studies", len(chunk)
                )
                continue
            for ctgov_study in ctgov_studies:
                nct_id = study_nct_id(ctgov_study)
                if nct_id:
                    found[nct_id] = ctgov_study
                else:
                    logger.warning("Skipping ClinicalTrials.gov record without an NCT id")
        return found

    async def update_research_studies(
        self, studies: list[ResearchStudy]
    ) -> list[ResearchStudy]:
        nct_ids = [study.nct_id for study in studies if study.nct_id]
        if not nct_ids:
            return studies

        try:
            if self.client is not None:
                found = await self._fetch_studies(self.client, nct_ids)
            else:
                async with httpx.AsyncClient(follow_redirects=True, timeout=30.0) as client:
                    found = await self._fetch_studies(client, nct_ids)
        except (httpx.RequestError, httpx.HTTPStatusError, ValueError) as e:
            logger.error("Failed to fetch studies from ClinicalTrials.gov: %s", e)
            return studies

        logger.info("Found %d of %d studies on ClinicalTrials.gov", len(found), len(nct_ids))
        for study in studies:
            ctgov_study = found.get(study.nct_id) if study.nct_id else None
            if ctgov_study:
                apply_ctgov_study(study, ctgov_study)
        return studies
