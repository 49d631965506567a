from types import SimpleNamespace

import pytest

from py_trial_lookup.config import Settings
from py_trial_lookup.errors import ConfigurationError
from py_trial_lookup.lookup import create_clinical_trial_lookup

pytestmark = pytest.mark.unit


def test_creates_a_function_if_configured_properly():
    lookup = create_clinical_trial_lookup(
        {"endpoint": "http://www.example.com/", "auth_token": "token"}
    )
    assert callable(lookup)


def test_accepts_settings_objects():
    """Tests that attribute-style configuration is supported."""
    settings = Settings(endpoint="http://www.example.com/", auth_token="token")
    assert callable(create_clinical_trial_lookup(settings))
    assert callable(
        create_clinical_trial_lookup(
            SimpleNamespace(endpoint="http://www.example.com/", auth_token="token")
        )
    )


def test_raises_an_error_if_configuration_is_missing():
    """Tests the exact errors raised for incomplete configurations."""
    with pytest.raises(ConfigurationError, match="^Missing endpoint in configuration$"):
        create_clinical_trial_lookup({})
    with pytest.raises(ConfigurationError, match="^Missing auth_token in configuration$"):
        create_clinical_trial_lookup({"endpoint": "http://www.example.com/"})


@pytest.mark.parametrize(
    "configuration, message",
    [
        ({"endpoint": 42, "auth_token": "token"}, "Missing endpoint in configuration"),
        ({"endpoint": None, "auth_token": "token"}, "Missing endpoint in configuration"),
        (
            {"endpoint": "http://www.example.com/", "auth_token": b"token"},
            "Missing auth_token in configuration",
        ),
    ],
)
def test_raises_an_error_for_non_string_values(configuration, message):
    with pytest.raises(ConfigurationError, match=f"^{message}$"):
        create_clinical_trial_lookup(configuration)


def test_configuration_error_is_a_value_error():
    with pytest.raises(ValueError):
        create_clinical_trial_lookup(Settings(endpoint=None, auth_token=None))
