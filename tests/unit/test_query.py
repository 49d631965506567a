import json

import pytest
from pydantic import ValidationError

from py_trial_lookup.query import TrialQuery, extract_parameters

pytestmark = pytest.mark.unit


def parameters_bundle(*parameters):
    """Builds a patient bundle holding a single Parameters resource."""
    return {
        "resourceType": "Bundle",
        "type": "collection",
        "entry": [
            {
                "resource": {
                    "resourceType": "Parameters",
                    "parameter": list(parameters),
                }
            }
        ],
    }


def test_converts_the_query_to_a_string():
    """Tests the wire format, including key order and the empty conditions."""
    bundle = parameters_bundle(
        {"name": "zipCode", "valueString": "01730"},
        {"name": "travelRadius", "valueString": "25"},
        {"name": "phase", "valueString": "phase-1"},
        {"name": "recruitmentStatus", "valueString": "approved"},
    )

    query = TrialQuery.from_bundle(bundle)

    assert str(query) == (
        '{"zip":"01730","distance":25,"phase":"phase-1","status":"approved","conditions":[]}'
    )
    assert query.to_json() == str(query)
    assert query.patient_bundle == bundle


def test_missing_fields_serialize_as_null():
    """Tests that an empty bundle still produces all five keys."""
    query = TrialQuery.from_bundle({"resourceType": "Bundle", "type": "batch", "entry": []})

    assert json.loads(str(query)) == {
        "zip": None,
        "distance": None,
        "phase": None,
        "status": None,
        "conditions": [],
    }
    assert list(query.to_query()) == ["zip", "distance", "phase", "status", "conditions"]


@pytest.mark.parametrize(
    "parameter, expected",
    [
        ({"name": "travelRadius", "valueString": "12.5"}, 12.5),
        ({"name": "travelRadius", "valueInteger": 40}, 40),
        ({"name": "travelRadius", "valueDecimal": 10.0}, 10),
        ({"name": "travelRadius", "valueString": "far"}, None),
        ({"name": "travelRadius", "valueString": "nan"}, None),
    ],
)
def test_travel_radius_parsing(parameter, expected):
    """Tests that the travel radius is read as a number where possible."""
    query = TrialQuery.from_bundle(parameters_bundle(parameter))
    assert query.travel_radius == expected
    if expected is not None:
        assert type(query.travel_radius) is type(expected)


def test_extract_parameters_ignores_unrelated_entries():
    """Tests that malformed entries and other resources are skipped."""
    bundle = {
        "resourceType": "Bundle",
        "entry": [
            "not an entry",
            {"resource": {"resourceType": "Patient", "id": "p1"}},
            {"resource": {"resourceType": "Parameters", "parameter": ["bad"]}},
            {
                "resource": {
                    "resourceType": "Parameters",
                    "parameter": [
                        {"name": "unknown", "valueString": "x"},
                        {"name": "zipCode", "valueString": "02139"},
                        {"name": "phase", "valueCode": "phase-2"},
                    ],
                }
            },
        ],
    }

    assert extract_parameters(bundle) == {"zip_code": "02139", "phase": "phase-2"}


def test_later_parameters_override_earlier_ones():
    bundle = parameters_bundle(
        {"name": "zipCode", "valueString": "01730"},
        {"name": "zipCode", "valueString": "02139"},
    )
    assert TrialQuery.from_bundle(bundle).zip_code == "02139"


def test_query_is_immutable():
    """Tests that a query cannot be changed after construction."""
    query = TrialQuery(zip_code="01730")
    with pytest.raises(ValidationError):
        query.zip_code = "02139"


@pytest.mark.parametrize(
    "bundle",
    [
        None,
        "not a bundle",
        ["entry"],
        {"entry": 5},
        {"entry": {"resource": {}}},
        {"entry": [{"resource": {"resourceType": "Parameters", "parameter": 5}}]},
        {
            "entry": [
                {
                    "resource": {
                        "resourceType": "Parameters",
                        "parameter": [{"name": ["zipCode"], "valueString": "01730"}],
                    }
                }
            ]
        },
    ],
)
def test_malformed_bundles_produce_an_empty_query(bundle):
    """Tests that malformed bundles are tolerated instead of raising."""
    query = TrialQuery.from_bundle(bundle)

    assert str(query) == (
        '{"zip":null,"distance":null,"phase":null,"status":null,"conditions":[]}'
    )
    if not isinstance(bundle, dict):
        assert query.patient_bundle == {}


def test_malformed_parameters_do_not_hide_valid_ones():
    """Tests that valid parameters are still read next to malformed ones."""
    bundle = {
        "entry": [
            {"resource": {"resourceType": "Parameters", "parameter": "bad"}},
            {
                "resource": {
                    "resourceType": "Parameters",
                    "parameter": [
                        {"name": {"nested": True}, "valueString": "x"},
                        {"name": "zipCode", "valueString": "01730"},
                    ],
                }
            },
        ]
    }

    assert extract_parameters(bundle) == {"zip_code": "01730"}
