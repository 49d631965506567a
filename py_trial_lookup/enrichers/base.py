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
from abc import ABC, abstractmethod

from py_trial_lookup.models.fhir import ResearchStudy


class ResearchStudyEnricher(ABC):
    """Abstract Base Class for services that add details to matched studies.

    An enricher receives the studies produced from a single matching service
    response and may look up additional information for them from another
    source. Enrichers may be shared between concurrent lookups, so any state
    they keep must be safe to use from several tasks.
    """

    @abstractmethod
    async def update_research_studies(
        self, studies: list[ResearchStudy]
    ) -> list[ResearchStudy]:
        """Updates the given studies in place.

        Args:
            studies: The mapped studies, in search set order.

        Returns:
            The same list that was passed in.
        """
        ...


class NullEnricher(ResearchStudyEnricher):
    """Enricher used when no backup service is configured."""

    async def update_research_studies(
        self, studies: list[ResearchStudy]
    ) -> list[ResearchStudy]:
        return studies
