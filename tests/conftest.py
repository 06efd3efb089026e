"""Shared pytest fixtures and configuration for the clishape test suite.

Guidelines
----------
* No wrapped tool is ever executed; runners are mocked at the infra
  boundary.
* Core tests must be pure — no side effects.
* Tests must not depend on OS state or on ``CLISHAPE_*`` variables set
  in the developer's shell.
"""

from __future__ import annotations

import os
from collections.abc import Iterator

import pytest

from clishape.config import ENV_PREFIX, get_settings


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Drop ``CLISHAPE_*`` variables and the cached settings around each test."""
    for name in list(os.environ):
        if name.startswith(ENV_PREFIX):
            monkeypatch.delenv(name)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
