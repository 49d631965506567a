import pytest

from py_trial_lookup.models.responses import (
    ErrorResponse,
    SuccessResponse,
    UnrecognizedResponse,
    decode_response,
    is_error_response,
    is_success_response,
)

pytestmark = pytest.mark.unit


@pytest.mark.parametrize("value", [None, True, "string", 42, {"invalid": True}])
def test_is_success_response_rejects_non_responses(value):
    """Tests that values without a trialIdentifiers list are not successes."""
    assert is_success_response(value) is False


def test_is_success_response_requires_a_list():
    """Tests that a string or object in place of the list is rejected."""
    assert is_success_response({"trialIdentifiers": "NCT12345678"}) is False
    assert is_success_response({"trialIdentifiers": {"0": "NCT12345678"}}) is False


def test_is_success_response_accepts_matching_objects():
    """Tests that any list of identifiers is accepted, even malformed ones."""
    assert is_success_response({"trialIdentifiers": []}) is True
    assert is_success_response({"trialIdentifiers": ["NCT12345678"]}) is True
    # A single invalid trial does not invalidate the whole list.
    assert is_success_response({"trialIdentifiers": [{"bad": True}]}) is True


@pytest.mark.parametrize("value", [None, True, "string", 42, {"invalid": True}])
def test_is_error_response_rejects_non_responses(value):
    """Tests that values without an error string are not error responses."""
    assert is_error_response(value) is False


def test_is_error_response_requires_a_string():
    """Tests that a non-string error field does not count."""
    assert is_error_response({"error": 500}) is False
    assert is_error_response({"error": None}) is False
    assert is_error_response({"error": "oops"}) is True


def test_decode_response_success():
    """Tests that a success body decodes to a SuccessResponse."""
    decoded = decode_response({"trialIdentifiers": ["NCT12345678", 7]})
    assert isinstance(decoded, SuccessResponse)
    assert decoded.trial_identifiers == ["NCT12345678", 7]


def test_decode_response_error():
    """Tests that an error body decodes to an ErrorResponse."""
    decoded = decode_response({"error": "Test error"})
    assert isinstance(decoded, ErrorResponse)
    assert decoded.error == "Test error"


def test_decode_response_prefers_success_over_error():
    """Tests that a body matching both shapes is treated as a success."""
    decoded = decode_response({"trialIdentifiers": [], "error": "ignored"})
    assert isinstance(decoded, SuccessResponse)


@pytest.mark.parametrize(
    "value",
    [
        None,
        [],
        "text",
        {"matchingTrials": []},
        {"error": 1},
        {"trial_identifiers": ["NCT12345678"]},
    ],
)
def test_decode_response_unrecognized(value):
    """Tests that unknown shapes keep the raw value."""
    decoded = decode_response(value)
    assert isinstance(decoded, UnrecognizedResponse)
    assert decoded.data == value


def test_success_response_only_accepts_the_wire_field_name():
    """Tests that the Python field name is not accepted in place of trialIdentifiers."""
    assert is_success_response({"trial_identifiers": ["NCT12345678"]}) is False
