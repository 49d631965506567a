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
"""Creates the function used to look up clinical trials for a patient."""

import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

import httpx

from py_trial_lookup.dispatcher import send_query
from py_trial_lookup.enrichers.base import NullEnricher, ResearchStudyEnricher
from py_trial_lookup.errors import ConfigurationError
from py_trial_lookup.models.fhir import Bundle, SearchSet
from py_trial_lookup.query import TrialQuery

ClinicalTrialLookup = Callable[[Bundle], Awaitable[SearchSet]]


def _config_value(configuration: Any, key: str) -> Any:
    if isinstance(configuration, Mapping):
        return configuration.get(key)
    return getattr(configuration, key, None)


def create_clinical_trial_lookup(
    configuration: Any,
    ctg_service: ResearchStudyEnricher | None = None,
    *,
    client: httpx.AsyncClient | None = None,
    logger: logging.Logger | None = None,
) -> ClinicalTrialLookup:
    """Creates a new matching function using the given configuration.

    Args:
        configuration: A Settings object, or any object or mapping providing
                       ``endpoint`` and ``auth_token`` strings.
        ctg_service: An optional enricher which can update the returned
                     studies with information pulled from another source.
        client: An optional shared httpx.AsyncClient for the matching service.
        logger: An optional logger receiving the lookup's diagnostics, such
                as identifiers that could not be mapped.

    Raises:
        ConfigurationError: If ``endpoint`` or ``auth_token`` is missing or
                            not a string.
    """
    endpoint = _config_value(configuration, "endpoint")
    if not isinstance(endpoint, str):
        raise ConfigurationError("Missing endpoint in configuration")
    bearer_token = _config_value(configuration, "auth_token")
    if not isinstance(bearer_token, str):
        raise ConfigurationError("Missing auth_token in configuration")

    enricher = ctg_service if ctg_service is not None else NullEnricher()

    async def get_matching_clinical_trials(patient_bundle: Bundle) -> SearchSet:
        query = TrialQuery.from_bundle(patient_bundle)
        return await send_query(
            endpoint, query, bearer_token, enricher, client=client, logger=logger
        )

    return get_matching_clinical_trials
