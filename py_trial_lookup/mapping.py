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
"""Maps trial identifiers returned by the matching service to FHIR resources."""

from py_trial_lookup.models.fhir import (
    CLINICAL_TRIAL_IDENTIFIER_CODING_SYSTEM_URL,
    Identifier,
    ResearchStudy,
)


def convert_to_research_study(nct_id: str, study_id: int) -> ResearchStudy:
    """
    Builds the ResearchStudy for a single matched trial.

    Args:
        nct_id: The trial identifier, e.g. "NCT12345678".
        study_id: The sequence number of the study within its search set.

    Returns:
        An active ResearchStudy carrying the identifier as its official
        ClinicalTrials.gov identifier.
    """
    return ResearchStudy(
        study_id=str(study_id),
        identifier=[
            Identifier(
                system=CLINICAL_TRIAL_IDENTIFIER_CODING_SYSTEM_URL,
                value=nct_id,
                use="official",
            )
        ],
        status="active",
    )
