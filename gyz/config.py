"""Configuration management for gyz.

Reads the Gyazo access token and optional endpoint settings from the
environment.
"""

import os
from typing import Mapping

from .models import GyazoConfig


ACCESS_TOKEN_ENV = "GYAZO_ACCESS_TOKEN"
UPLOAD_URL_ENV = "GYAZO_UPLOAD_URL"
TIMEOUT_ENV = "GYAZO_TIMEOUT"


class ConfigError(Exception):
    """Raised when configuration is invalid or missing."""
    pass


def has_access_token(environ: Mapping[str, str] | None = None) -> bool:
    """Check whether an access token is available.

    Args:
        environ: Environment mapping (defaults to os.environ)

    Returns:
        True if the token variable is set and non-empty
    """
    if environ is None:
        environ = os.environ
    return bool(environ.get(ACCESS_TOKEN_ENV, "").strip())


def load_gyazo_config(environ: Mapping[str, str] | None = None) -> GyazoConfig:
    """Build the API configuration from environment variables.

    Args:
        environ: Environment mapping (defaults to os.environ)

    Returns:
        GyazoConfig with token, endpoint and timeout

    Raises:
        ConfigError: If the token is missing or the timeout is invalid
    """
    if environ is None:
        environ = os.environ

    token = environ.get(ACCESS_TOKEN_ENV, "").strip()
    if not token:
        raise ConfigError(f"environment variable {ACCESS_TOKEN_ENV} is not set")

    config = GyazoConfig(access_token=token)

    upload_url = environ.get(UPLOAD_URL_ENV, "").strip()
    if upload_url:
        config.upload_url = upload_url

    timeout = environ.get(TIMEOUT_ENV, "").strip()
    if timeout:
        try:
            config.timeout = float(timeout)
        except ValueError:
            raise ConfigError(f"{TIMEOUT_ENV} must be a number, got {timeout!r}")
        if config.timeout <= 0:
            raise ConfigError(f"{TIMEOUT_ENV} must be positive, got {timeout!r}")

    return config
