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
"""Sends queries to the matching service and interprets its responses."""

import logging

import httpx

from py_trial_lookup.converter import convert_response_to_search_set
from py_trial_lookup.enrichers.base import ResearchStudyEnricher
from py_trial_lookup.errors import (
    HttpError,
    ParseError,
    ServiceError,
    UnrecognizedResponseError,
)
from py_trial_lookup.models.fhir import SearchSet
from py_trial_lookup.models.responses import (
    ErrorResponse,
    SuccessResponse,
    decode_response,
)
from py_trial_lookup.query import TrialQuery

module_logger = logging.getLogger(__name__)


async def _post_query(
    client: httpx.AsyncClient, endpoint: str, query: TrialQuery, bearer_token: str
) -> httpx.Response:
    return await client.post(
        endpoint,
        content=str(query),
        headers={
            "Content-Type": "application/json; charset=UTF-8",
            "Authorization": f"Bearer {bearer_token}",
        },
    )


async def handle_response(
    response: httpx.Response,
    ctg_service: ResearchStudyEnricher | None = None,
    logger: logging.Logger | None = None,
) -> SearchSet:
    """Turns a matching service response into a SearchSet or a typed error."""
    if response.status_code != 200:
        raise HttpError(
            f"Server returned {response.status_code} {response.reason_phrase}",
            response,
            response.text,
        )

    try:
        data = response.json()
    except ValueError as e:
        raise ParseError("Unable to parse response as JSON", response, str(e)) from e

    decoded = decode_response(data)
    if isinstance(decoded, SuccessResponse):
        return await convert_response_to_search_set(decoded, ctg_service, logger)
    if isinstance(decoded, ErrorResponse):
        raise ServiceError(
            f"Error from service: {decoded.error}", response, decoded.error
        )
    raise UnrecognizedResponseError(
        "Unable to parse response from server", response, data
    )


async def send_query(
    endpoint: str,
    query: TrialQuery,
    bearer_token: str,
    ctg_service: ResearchStudyEnricher | None = None,
    *,
    client: httpx.AsyncClient | None = None,
    logger: logging.Logger | None = None,
) -> SearchSet:
    """Sends a query to the matching service and converts the result.

    Network failures are raised exactly as httpx raises them; nothing is
    retried.

    Args:
        endpoint: The URL of the matching service endpoint.
        query: The query to send.
        bearer_token: Token sent in the Authorization header.
        ctg_service: Optional enricher applied to the matched studies.
        client: An httpx.AsyncClient to send the request with. When omitted a
                client without a timeout is created for this call only.
        logger: Where diagnostics are written. Defaults to this module's
                logger; it is also passed on to the response converter.

    Returns:
        The matched studies as a SearchSet.
    """
    log = logger or module_logger
    log.info("Sending query to %s", endpoint)
    if client is not None:
        response = await _post_query(client, endpoint, query, bearer_token)
    else:
        async with httpx.AsyncClient(timeout=None) as owned_client:
            response = await _post_query(owned_client, endpoint, query, bearer_token)
    log.debug("Received %d response from %s", response.status_code, endpoint)
    return await handle_response(response, ctg_service, logger)
