"""Runtime configuration read from ``CLISHAPE_*`` environment variables.

Rules
-----
* Only invocation policy lives here (allowlists, path redaction, the
  default timeout).  Rendering constants are module constants in
  :mod:`clishape.core.presentation` and never depend on configuration.
* Unset or empty variables mean "unrestricted".
* An invalid value is reported as a
  :class:`~clishape.exceptions.ConfigurationError`, never silently replaced.

Variables
---------
``CLISHAPE_ALLOWED_COMMANDS``
    Comma-separated allowlist applied to every tool.
``CLISHAPE_<TOOL>_ALLOWED_COMMANDS``
    Per-tool allowlist, e.g. ``CLISHAPE_DOCKER_ALLOWED_COMMANDS``.  Takes
    priority over the global list.
``CLISHAPE_ALLOWED_ROOTS``
    Comma-separated directories that working directories must fall under.
``CLISHAPE_SANITIZE_ALL_PATHS``
    ``true`` redacts every absolute path in error output, not only home
    directories.
``CLISHAPE_TIMEOUT_MS``
    Default runner timeout in milliseconds.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Annotated

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from clishape.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

ENV_PREFIX: str = "CLISHAPE_"
DEFAULT_TIMEOUT_MS: int = 180_000

CommandList = Annotated[tuple[str, ...] | None, NoDecode]
"""Comma-separated list in the environment, a tuple (or ``None``) in Python."""


class Settings(BaseSettings):
    """Effective invocation policy."""

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
    )

    allowed_commands: CommandList = None
    """Global command allowlist, or ``None`` when unrestricted."""

    docker_allowed_commands: CommandList = None
    compose_allowed_commands: CommandList = None
    git_allowed_commands: CommandList = None
    kubectl_allowed_commands: CommandList = None
    helm_allowed_commands: CommandList = None
    npm_allowed_commands: CommandList = None
    dotnet_allowed_commands: CommandList = None
    http_allowed_commands: CommandList = None

    allowed_roots: CommandList = None
    """Directories working directories must fall under, or ``None``."""

    sanitize_all_paths: bool = False
    """Redact every absolute path in error output."""

    timeout_ms: int = Field(default=DEFAULT_TIMEOUT_MS, gt=0)
    """Default timeout handed to the process runner."""

    @field_validator(
        "allowed_commands",
        "docker_allowed_commands",
        "compose_allowed_commands",
        "git_allowed_commands",
        "kubectl_allowed_commands",
        "helm_allowed_commands",
        "npm_allowed_commands",
        "dotnet_allowed_commands",
        "http_allowed_commands",
        "allowed_roots",
        mode="before",
    )
    @classmethod
    def _split_list(cls, value: object) -> object:
        if isinstance(value, str):
            value = value.split(",")
        if isinstance(value, (list, tuple)):
            items = tuple(str(part).strip() for part in value if str(part).strip())
            return items or None
        return value

    def allowed_commands_for(self, tool: str) -> tuple[str, ...] | None:
        """Return the allowlist that applies to *tool* (per-tool first)."""
        specific = getattr(self, f"{tool.lower()}_allowed_commands", None)
        if specific is not None:
            return specific
        return self.allowed_commands


def load_settings() -> Settings:
    """Build :class:`Settings` from the current environment.

    Raises
    ------
    ConfigurationError
        If a ``CLISHAPE_*`` variable cannot be converted.
    """
    try:
        return Settings()
    except ValidationError as exc:
        names = ", ".join(
            f"{ENV_PREFIX}{str(error['loc'][0]).upper()}" for error in exc.errors() if error["loc"]
        )
        logger.debug("Settings validation failed: %s", exc)
        raise ConfigurationError(
            f"Invalid configuration: {names or 'environment'}",
            hint="CLISHAPE_TIMEOUT_MS must be a positive integer; "
            "CLISHAPE_SANITIZE_ALL_PATHS must be true or false.",
        ) from exc


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide :class:`Settings` (cached)."""
    return load_settings()
