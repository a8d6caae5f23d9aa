"""
config.py
---------
Settings for the subscriber store, read from the environment.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

from .errors import ConfigurationError

DEFAULT_TABLE_NAME  = "TestSubscribers"
DEFAULT_SOURCE_PATH = "data/subscribers.json"

_TRUE_VALUES = ("1", "true", "yes", "on")

# ------------------------------------------------------------------
# Environment Helper
# ------------------------------------------------------------------

def _get_env(name: str, default: str | None = None) -> str:
    """Helper to fetch environment variables or raise an error."""
    value = os.environ.get(name)
    if not value:
        if default is not None:
            return default
        raise ConfigurationError(f"Required environment variable '{name}' is not set.")
    return value

# ------------------------------------------------------------------
# Settings
# ------------------------------------------------------------------

@dataclass(frozen=True)
class Settings:
    connection_string: str | None = None
    account_name:      str | None = None
    account_key:       str | None = None
    table_name:        str        = DEFAULT_TABLE_NAME
    source_path:       Path       = Path(DEFAULT_SOURCE_PATH)
    load_sample_data:  bool       = False

def load_settings(env_file: str | Path | None = None) -> Settings:
    """Builds ``Settings`` from the environment, after loading a ``.env`` file if one exists.

    Either ``AZURE_STORAGE_CONNECTION_STRING`` or both
    ``AZURE_STORAGE_ACCOUNT_NAME`` and ``AZURE_STORAGE_ACCOUNT_KEY`` must be set.
    """
    load_dotenv(env_file or find_dotenv(usecwd=True))

    connection_string = os.environ.get("AZURE_STORAGE_CONNECTION_STRING") or None
    account_name = account_key = None
    if not connection_string:
        try:
            account_name = _get_env("AZURE_STORAGE_ACCOUNT_NAME")
            account_key  = _get_env("AZURE_STORAGE_ACCOUNT_KEY")
        except ConfigurationError as e:
            raise ConfigurationError(
                "Connection string is not configured. Set AZURE_STORAGE_CONNECTION_STRING "
                "or AZURE_STORAGE_ACCOUNT_NAME and AZURE_STORAGE_ACCOUNT_KEY."
            ) from e

    load_sample_data = _get_env("SUBSCRIBER_LOAD_SAMPLE_DATA", "false").strip().lower() in _TRUE_VALUES

    return Settings(
        connection_string = connection_string,
        account_name      = account_name,
        account_key       = account_key,
        table_name        = _get_env("SUBSCRIBER_TABLE_NAME", DEFAULT_TABLE_NAME),
        source_path       = Path(_get_env("SUBSCRIBER_SOURCE_PATH", DEFAULT_SOURCE_PATH)),
        load_sample_data  = load_sample_data,
    )
