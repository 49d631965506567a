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

"""Builds the query sent to the matching service from a patient bundle.

The patient bundle is expected to carry the search filters as a FHIR
``Parameters`` resource, for example::

    {"resourceType": "Parameters",
     "parameter": [{"name": "zipCode", "valueString": "01730"},
                   {"name": "travelRadius", "valueString": "25"}]}
"""

import json
import logging
import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from py_trial_lookup.models.fhir import Bundle

logger = logging.getLogger(__name__)

# Parameter names in the bundle mapped to TrialQuery fields.
PARAMETER_FIELDS = {
    "zipCode": "zip_code",
    "travelRadius": "travel_radius",
    "phase": "phase",
    "recruitmentStatus": "recruitment_status",
}

VALUE_KEYS = ("valueString", "valueCode", "valueInteger", "valueDecimal")


def _parameter_value(parameter: dict[str, Any]) -> Any:
    for key in VALUE_KEYS:
        if key in parameter:
            return parameter[key]
    return None


def _parse_radius(value: Any) -> int | float | None:
    """Parses a travel radius, keeping whole numbers as integers."""
    if value is None or isinstance(value, bool):
        return None
    try:
        radius = float(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring travel radius that is not a number: %r", value)
        return None
    if not math.isfinite(radius):
        logger.warning("Ignoring travel radius that is not finite: %r", value)
        return None
    return int(radius) if radius.is_integer() else radius


def extract_parameters(patient_bundle: Bundle) -> dict[str, Any]:
    """Collects the known search parameters from a patient bundle.

    Entries that are not Parameters resources, and parameters with unknown
    names, are ignored. A later parameter overrides an earlier one with the
    same name.
    """
    found: dict[str, Any] = {}
    if not isinstance(patient_bundle, dict):
        return found

    entries = patient_bundle.get("entry")
    if not isinstance(entries, list):
        return found

    for entry in entries:
        resource = entry.get("resource") if isinstance(entry, dict) else None
        if not isinstance(resource, dict) or resource.get("resourceType") != "Parameters":
            continue
        parameters = resource.get("parameter")
        if not isinstance(parameters, list):
            continue
        for parameter in parameters:
            if not isinstance(parameter, dict) or not isinstance(parameter.get("name"), str):
                continue
            field = PARAMETER_FIELDS.get(parameter["name"])
            if field:
                found[field] = _parameter_value(parameter)

    if "travel_radius" in found:
        found["travel_radius"] = _parse_radius(found["travel_radius"])
    for field in ("zip_code", "phase", "recruitment_status"):
        if field in found and found[field] is not None:
            found[field] = str(found[field])
    return found


class TrialQuery(BaseModel):
    """A query for the matching service, built from a patient bundle."""

    model_config = ConfigDict(frozen=True)

    # US zip code
    zip_code: str | None = None
    # Distance in miles the patient is willing to travel
    travel_radius: int | float | None = None
    # A FHIR ResearchStudy phase
    phase: str | None = None
    # A FHIR ResearchStudy status
    recruitment_status: str | None = None
    # Not yet derived from the bundle; always sent empty.
    conditions: tuple[str, ...] = ()
    # Kept as given; keys are not validated.
    patient_bundle: dict[Any, Any] = Field(default_factory=dict, repr=False)

    @classmethod
    def from_bundle(cls, patient_bundle: Bundle) -> "TrialQuery":
        """Builds a query, treating anything but a JSON object as an empty bundle."""
        if not isinstance(patient_bundle, dict):
            logger.warning(
                "Patient bundle is not a JSON object: %s", type(patient_bundle).__name__
            )
            patient_bundle = {}
        return cls(patient_bundle=patient_bundle, **extract_parameters(patient_bundle))

    def to_query(self) -> dict[str, Any]:
        """Creates the JSON object sent to the server."""
        return {
            "zip": self.zip_code,
            "distance": self.travel_radius,
            "phase": self.phase,
            "status": self.recruitment_status,
            "conditions": list(self.conditions),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_query(), separators=(",", ":"))

    def __str__(self) -> str:
        return self.to_json()
