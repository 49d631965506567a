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
"""Exceptions raised while looking up matching clinical trials."""

from typing import Any

import httpx

# Network failures are surfaced exactly as httpx raises them.
TransportError = httpx.RequestError


class TrialLookupError(Exception):
    """Base class for all errors raised by the lookup itself."""


class ConfigurationError(TrialLookupError, ValueError):
    """Raised before any I/O when the lookup configuration is incomplete."""


class APIError(TrialLookupError):
    """An error response (or unusable response) from the matching service.

    Attributes:
        response: The raw httpx response that triggered the error.
        body: Extra detail: the decode failure, the service's error message,
              or the response text, depending on the subclass.
    """

    def __init__(self, message: str, response: httpx.Response, body: str) -> None:
        super().__init__(message)
        self.response = response
        self.body = body


class ParseError(APIError):
    """The service answered 200 but the body was not valid JSON."""


class ServiceError(APIError):
    """The service explicitly reported an error."""


class HttpError(APIError):
    """The service answered with a non-200 status code."""

    @property
    def status_code(self) -> int:
        return self.response.status_code


class UnrecognizedResponseError(TrialLookupError):
    """The service answered 200 with JSON of an unknown shape."""

    def __init__(
        self,
        message: str,
        response: httpx.Response | None = None,
        data: Any = None,
    ) -> None:
        super().__init__(message)
        self.response = response
        self.data = data
