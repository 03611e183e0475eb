"""Configuration loading.

Settings come from YAML files then environment variables, later sources
overriding earlier ones:

    /etc/ovhctl/config.yaml
    ~/.ovhctl.yaml
    ./config.yaml
    OVHCTL_ENDPOINT, OVHCTL_APPLICATION_KEY, OVHCTL_APPLICATION_SECRET,
    OVHCTL_CONSUMER_KEY

When an explicit path is given (`ovhctl -c PATH`) only that file is read and
it must exist. Example file:

    ovh:
      endpoint: https://eu.api.ovh.com/1.0
      application-key: xxxxxxxxxxxxxxxx
      application-secret: xxxxxxxxxxxxxxxxxxxxxxxxxxxxxxxx
      consumer-key: xxxxxxxxxxxxxxxxxxxxxxxxxxxxxxxx
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from .errors import ConfigurationError
from .models import Credential

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "https://eu.api.ovh.com/1.0"

DEFAULT_CONFIG_PATHS = [
    "/etc/ovhctl/config.yaml",
    "~/.ovhctl.yaml",
    "config.yaml",
]

# Configuration key -> environment variable
ENV_VARS = {
    "endpoint": "OVHCTL_ENDPOINT",
    "application-key": "OVHCTL_APPLICATION_KEY",
    "application-secret": "OVHCTL_APPLICATION_SECRET",
    "consumer-key": "OVHCTL_CONSUMER_KEY",
}


@dataclass(frozen=True)
class Configuration:
    endpoint: str
    application_key: str
    application_secret: str
    consumer_key: Optional[str] = None
    sources: tuple = ()

    def credential(self) -> Credential:
        """Credential for signed calls; requires a consumer key."""
        if not self.consumer_key:
            raise ConfigurationError(
                "could not retrieve consumer key, please login to the ovh api "
                "by using 'ovhctl connect' before beginning"
            )
        return Credential(
            endpoint=self.endpoint,
            application_key=self.application_key,
            application_secret=self.application_secret,
            consumer_key=self.consumer_key,
        )


def _read_file(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except (OSError, IOError) as e:
        raise ConfigurationError(f"could not read configuration file '{path}', {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"could not parse configuration file '{path}', {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"configuration file '{path}' must contain a mapping")

    section = data.get("ovh", {})
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigurationError(f"section 'ovh' of '{path}' must be a mapping")
    return {str(k): v for k, v in section.items() if v is not None}


def load_configuration(
    path: Optional[str] = None,
    *,
    search_paths: Optional[List[str]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Configuration:
    """Resolve the configuration from files and environment."""
    environ = os.environ if environ is None else environ
    values: Dict[str, Any] = {"endpoint": DEFAULT_ENDPOINT}
    sources: List[str] = []

    if path:
        config_path = Path(path).expanduser()
        if not config_path.is_file():
            raise ConfigurationError(f"configuration file '{config_path}' not found")
        values.update(_read_file(config_path))
        sources.append(str(config_path))
    else:
        for candidate in DEFAULT_CONFIG_PATHS if search_paths is None else search_paths:
            config_path = Path(candidate).expanduser()
            if not config_path.is_file():
                continue
            values.update(_read_file(config_path))
            sources.append(str(config_path))
            logger.debug(f"Loaded configuration from {config_path}")

    for key, env_var in ENV_VARS.items():
        value = environ.get(env_var, "").strip()
        if value:
            values[key] = value
            sources.append(env_var)

    missing = [key for key in ("application-key", "application-secret") if not values.get(key)]
    if missing:
        raise ConfigurationError(
            f"missing configuration key(s) {', '.join('ovh.' + k for k in missing)}"
        )

    return Configuration(
        endpoint=str(values["endpoint"]).rstrip("/"),
        application_key=str(values["application-key"]),
        application_secret=str(values["application-secret"]),
        consumer_key=str(values["consumer-key"]) if values.get("consumer-key") else None,
        sources=tuple(sources),
    )
