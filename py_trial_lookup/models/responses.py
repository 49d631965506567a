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
"""Pydantic models for the responses returned by the matching service.

A decoded response body is classified into exactly one of
:class:`SuccessResponse`, :class:`ErrorResponse` or
:class:`UnrecognizedResponse`. A success shape always wins over an error
shape when a body happens to satisfy both.
"""

from typing import Annotated, Any, Union

from pydantic import BaseModel, Field, StrictStr, TypeAdapter, ValidationError


class SuccessResponse(BaseModel):
    """A list of matching trial identifiers.

    Only the list itself is validated. Individual entries are checked when
    they are mapped, so one bad entry does not discard the whole response.
    """

    trial_identifiers: list[Any] = Field(alias="trialIdentifiers", strict=True)


class ErrorResponse(BaseModel):
    """An error reported by the matching service."""

    error: StrictStr


class UnrecognizedResponse(BaseModel):
    """Any decoded body that is neither a success nor an error response."""

    data: Any = None


MatcherResponse = Annotated[
    Union[SuccessResponse, ErrorResponse], Field(union_mode="left_to_right")
]

_response_adapter: TypeAdapter[SuccessResponse | ErrorResponse] = TypeAdapter(
    MatcherResponse
)


def decode_response(
    data: Any,
) -> SuccessResponse | ErrorResponse | UnrecognizedResponse:
    """Classify a decoded JSON value returned by the matching service."""
    try:
        return _response_adapter.validate_python(data)
    except ValidationError:
        return UnrecognizedResponse(data=data)


def is_success_response(data: Any) -> bool:
    """Return True if ``data`` has a ``trialIdentifiers`` list."""
    try:
        SuccessResponse.model_validate(data)
    except ValidationError:
        return False
    return True


def is_error_response(data: Any) -> bool:
    """Return True if ``data`` has a string ``error`` field."""
    try:
        ErrorResponse.model_validate(data)
    except ValidationError:
        return False
    return True
