"""User configuration and per-host GitLab credentials.

Configuration lives in ``~/.gl-peek`` as shell-style assignments:

.. code-block:: bash

    # For gitlab.com
    GITLAB_TOKEN="..."

    # For gitlab.fqdn.com
    GITLAB_TOKEN_GITLAB_FQDN_COM="..."

    # Define your editor of choice
    EDITOR="subl"

Values in the file take precedence over the process environment.
"""

import functools
import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import dotenv_values
from pydantic import BaseModel, ConfigDict

__all__ = [
    "CONFIG_ENV_VAR",
    "DEFAULT_HOST",
    "TOKEN_PREFIX",
    "Credentials",
    "GlPeekConfig",
    "find_config_file",
    "load_config",
    "resolve_credentials",
    "token_variable",
]

logger = logging.getLogger(__name__)

DEFAULT_HOST = "gitlab.com"
TOKEN_PREFIX = "GITLAB_TOKEN"

# Environment variable that overrides the configuration file location.
CONFIG_ENV_VAR = "GL_PEEK_CONFIG"

_NON_IDENTIFIER = re.compile(r"[^A-Z0-9_]")


@dataclass(frozen=True)
class Credentials:
    """Host to talk to and the bearer token to send; an empty token means anonymous access."""

    host: str
    token: str = field(default="", repr=False)


class GlPeekConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    # Configuration file the values were read from; ``None`` if it doesn't exist.
    path: Optional[Path] = None

    values: dict[str, str] = {}

    def get(self, name: str, default: str = "") -> str:
        """Look up ``name`` in the configuration file, then in the environment."""
        try:
            return self.values[name]
        except KeyError:
            return os.environ.get(name, default)

    @property
    def editor(self) -> str:
        return self.get("EDITOR")

    def token_for(self, host: str) -> str:
        return self.get(token_variable(host))

    def token_variables(self) -> list[str]:
        """Names of all token variables that are set, from either source."""
        names = set(self.values) | set(os.environ)
        return sorted(x for x in names if x == TOKEN_PREFIX or x.startswith(TOKEN_PREFIX + "_"))


def token_variable(host: str) -> str:
    """Name of the configuration variable holding the token for ``host``.

    Examples
    --------
    >>> token_variable("gitlab.com")
    'GITLAB_TOKEN'
    >>> token_variable("gitlab.fqdn.com")
    'GITLAB_TOKEN_GITLAB_FQDN_COM'
    """
    host = host.lower()
    if host == DEFAULT_HOST:
        return TOKEN_PREFIX
    suffix = _NON_IDENTIFIER.sub("_", host.upper())
    return f"{TOKEN_PREFIX}_{suffix}"


@functools.lru_cache
def find_config_file() -> Path:
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser().absolute()
    return Path.home() / ".gl-peek"


@functools.lru_cache
def load_config() -> GlPeekConfig:
    """Load the user configuration file.

    A missing file is not an error; it yields an empty configuration
    that still falls back to the environment.
    """
    path = find_config_file()
    if not path.is_file():
        logger.debug(f"No configuration file at {path}.")
        return GlPeekConfig()

    # Keys without a value (e.g. a bare ``EDITOR`` line) parse as ``None``.
    values = {k: v for k, v in dotenv_values(path).items() if v is not None}
    logger.debug(f"Loaded {len(values)} configuration values from {path}.")
    return GlPeekConfig(path=path, values=values)


def resolve_credentials(host: str, config: Optional[GlPeekConfig] = None) -> Credentials:
    """Determine the token to use for ``host``.

    Parameters
    ----------
    host
        GitLab host, e.g. ``gitlab.com``.
    config
        Configuration to read tokens from. Defaults to :func:`load_config`.

    Returns
    -------
    Credentials
        Token is empty if none is configured.
    """
    if config is None:
        config = load_config()
    token = config.token_for(host)
    if not token:
        logger.debug(f"No {token_variable(host)} configured; using anonymous access.")
    return Credentials(host=host, token=token)
