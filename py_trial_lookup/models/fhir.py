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
"""Defines the Pydantic models for the FHIR resources the lookup produces."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

# Coding system for ClinicalTrials.gov (NCT) identifiers.
CLINICAL_TRIAL_IDENTIFIER_CODING_SYSTEM_URL = "http://clinicaltrials.gov/"

# A patient bundle is passed through as plain FHIR JSON.
Bundle = dict[str, Any]


class Coding(BaseModel):
    system: str | None = None
    code: str | None = None
    display: str | None = None


class CodeableConcept(BaseModel):
    coding: list[Coding] | None = None
    text: str | None = None


class Identifier(BaseModel):
    use: str | None = None
    system: str | None = None
    value: str | None = None


class ResearchStudy(BaseModel):
    """A FHIR R4 ResearchStudy describing one matched trial.

    Instances are mutable so enrichers can fill in details after mapping.
    """

    model_config = ConfigDict(populate_by_name=True)

    resource_type: Literal["ResearchStudy"] = Field(
        default="ResearchStudy", alias="resourceType"
    )
    # Named study_id to avoid shadowing the id builtin; serialized as "id".
    study_id: str | None = Field(default=None, alias="id")
    identifier: list[Identifier] = Field(default_factory=list)
    status: str | None = None
    title: str | None = None
    description: str | None = None
    phase: CodeableConcept | None = None
    condition: list[CodeableConcept] | None = None

    @property
    def nct_id(self) -> str | None:
        """The ClinicalTrials.gov identifier of this study, if it has one."""
        for identifier in self.identifier:
            if identifier.system == CLINICAL_TRIAL_IDENTIFIER_CODING_SYSTEM_URL:
                return identifier.value
        return None


class SearchInfo(BaseModel):
    mode: str | None = None
    score: float | None = None


class SearchSetEntry(BaseModel):
    resource: ResearchStudy
    search: SearchInfo = Field(default_factory=SearchInfo)


class SearchSet(BaseModel):
    """A FHIR searchset Bundle wrapping the matched studies in order."""

    model_config = ConfigDict(populate_by_name=True)

    resource_type: Literal["Bundle"] = Field(default="Bundle", alias="resourceType")
    type: Literal["searchset"] = "searchset"
    total: int = 0
    entry: list[SearchSetEntry] = Field(default_factory=list)

    @classmethod
    def from_studies(cls, studies: list[ResearchStudy]) -> "SearchSet":
        return cls(
            total=len(studies),
            entry=[SearchSetEntry(resource=study) for study in studies],
        )

    @property
    def studies(self) -> list[ResearchStudy]:
        return [entry.resource for entry in self.entry]

    def to_fhir(self) -> dict[str, Any]:
        """Dump the bundle as FHIR JSON (aliases applied, empty fields dropped)."""
        return self.model_dump(by_alias=True, exclude_none=True)
