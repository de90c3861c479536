"""Configuration settings for the SkyScope backend."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from skyscope.errors import ConfigurationError

logger = logging.getLogger("skyscope.config")

OPENSKY_STATES_URL = "https://opensky-network.org/api/states/all"
OPENSKY_TOKEN_URL = (
    "https://auth.opensky-network.org/auth/realms/opensky-network"
    "/protocol/openid-connect/token"
)


def _get_bool(env_var: str, default: bool = False) -> bool:
    """Parse an environment variable into a boolean with a default."""

    value = os.getenv(env_var)
    if value is None:
        return default

    return value.lower() in {"1", "true", "yes", "on"}


@lru_cache(maxsize=1)
def _get_ssm_client():
    # Default to a region so client creation does not fail in environments
    # without AWS configuration.
    return boto3.client(
        "ssm",
        region_name=os.getenv("AWS_REGION") or os.getenv("AWS_DEFAULT_REGION") or "us-east-1",
    )


@lru_cache(maxsize=8)
def get_ssm_parameter(name: str) -> str:
    """Fetch a decrypted parameter from AWS SSM Parameter Store.

    Values are cached in-memory to avoid repeated SSM calls. Any failure to
    retrieve the parameter is reported as a ConfigurationError.
    """

    try:
        response = _get_ssm_client().get_parameter(Name=name, WithDecryption=True)
        value = response.get("Parameter", {}).get("Value")
    except (ClientError, BotoCoreError) as exc:
        logger.error("Failed to load %s from SSM: %s", name, exc)
        raise ConfigurationError(f"Unable to load {name} from SSM") from exc

    if not value:
        logger.error("Received empty value for %s from SSM", name)
        raise ConfigurationError(f"{name} not configured in SSM")

    return value


@dataclass
class Settings:
    """Application configuration loaded from environment variables."""

    skyscope_env: str = os.getenv("SKYSCOPE_ENV", "local")
    log_level: str = os.getenv("SKYSCOPE_LOG_LEVEL", "INFO")

    # OpenSky OAuth2 client credentials
    opensky_client_id: str | None = os.getenv("OPENSKY_CLIENT_ID")
    opensky_client_secret: str | None = os.getenv("OPENSKY_CLIENT_SECRET")
    opensky_ssm_prefix: str | None = os.getenv("OPENSKY_SSM_PREFIX")

    # OpenSky endpoints and transport behaviour
    opensky_states_url: str = os.getenv("OPENSKY_STATES_URL", OPENSKY_STATES_URL)
    opensky_token_url: str = os.getenv("OPENSKY_TOKEN_URL", OPENSKY_TOKEN_URL)
    opensky_timeout: float = float(os.getenv("OPENSKY_TIMEOUT", "10.0"))
    opensky_max_retries: int = int(os.getenv("OPENSKY_MAX_RETRIES", "2"))
    opensky_retry_base_delay: float = float(os.getenv("OPENSKY_RETRY_BASE_DELAY", "0.5"))

    # Token cache
    token_safety_margin: float = 30.0
    token_default_ttl: float = 1800.0

    # Regions and polling
    default_region: str = os.getenv("SKYSCOPE_DEFAULT_REGION", "calgary")
    poll_enabled: bool = _get_bool("SKYSCOPE_POLL_ENABLED")
    poll_interval: float = float(os.getenv("SKYSCOPE_POLL_INTERVAL", "30"))


settings = Settings()


def get_opensky_credentials() -> tuple[str, str]:
    """Return the OpenSky OAuth2 client id and secret.

    Environment values win. When either is missing and ``OPENSKY_SSM_PREFIX``
    is set, the missing value is read from ``<prefix>/client_id`` or
    ``<prefix>/client_secret`` in SSM.
    """

    client_id = settings.opensky_client_id
    client_secret = settings.opensky_client_secret

    if (not client_id or not client_secret) and settings.opensky_ssm_prefix:
        prefix = settings.opensky_ssm_prefix.rstrip("/")
        client_id = client_id or get_ssm_parameter(f"{prefix}/client_id")
        client_secret = client_secret or get_ssm_parameter(f"{prefix}/client_secret")

    if not client_id or not client_secret:
        raise ConfigurationError(
            "OpenSky credentials missing: set OPENSKY_CLIENT_ID and OPENSKY_CLIENT_SECRET"
        )

    return client_id, client_secret


__all__ = [
    "OPENSKY_STATES_URL",
    "OPENSKY_TOKEN_URL",
    "Settings",
    "get_opensky_credentials",
    "get_ssm_parameter",
    "settings",
]
