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
"""Manages the application's configuration using Pydantic."""

import logging
from typing import Any

import yaml
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Manages configuration for the trial lookup.

    Reads settings from environment variables with the prefix 'TRIAL_LOOKUP_'.
    The matching service settings are optional here so that a partially
    configured environment can still be loaded; they are enforced when the
    lookup is created.
    """

    model_config = SettingsConfigDict(env_prefix="TRIAL_LOOKUP_")

    # Matching service connection settings
    endpoint: str | None = None
    auth_token: str | None = None

    # Backup service used to fill in study details
    ctgov_base_url: str = "https://clinicaltrials.gov/api/v2/studies"

    # Only applied to clients created by the CLI; None disables the timeout.
    request_timeout: float | None = None


def load_config(config_file: str | None) -> dict[str, Any]:
    """Loads configuration from a YAML file."""
    if config_file:
        try:
            with open(config_file, "r") as f:
                return yaml.safe_load(f) or {}
        except FileNotFoundError:
            logger.warning("Config file not found: %s", config_file)
    return {}
