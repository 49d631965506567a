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
"""Converts a successful matching service response into a FHIR search set."""

import logging

from py_trial_lookup.enrichers.base import ResearchStudyEnricher
from py_trial_lookup.mapping import convert_to_research_study
from py_trial_lookup.models.fhir import ResearchStudy, SearchSet
from py_trial_lookup.models.responses import SuccessResponse

module_logger = logging.getLogger(__name__)


async def convert_response_to_search_set(
    response: SuccessResponse,
    ctg_service: ResearchStudyEnricher | None = None,
    logger: logging.Logger | None = None,
) -> SearchSet:
    """Converts a success response into a SearchSet.

    Identifiers that are not strings are logged and skipped; they never fail
    the batch. Study ids are assigned in order, counting only the identifiers
    that were mapped.

    Args:
        response: The validated success response.
        ctg_service: An optional enricher which is given the complete list of
                     mapped studies to update in place before the search set
                     is built.
        logger: Where diagnostics about skipped identifiers are written.
                Defaults to this module's logger.

    Returns:
        The search set containing one ResearchStudy per valid identifier.
    """
    log = logger or module_logger
    studies: list[ResearchStudy] = []
    for nct_id in response.trial_identifiers:
        if isinstance(nct_id, str):
            studies.append(convert_to_research_study(nct_id, len(studies)))
        else:
            log.error("Unable to parse trial from server: %r", nct_id)

    if ctg_service is not None:
        await ctg_service.update_research_studies(studies)

    return SearchSet.from_studies(studies)
