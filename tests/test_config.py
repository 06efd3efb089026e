"""Tests for environment-driven settings (config.py) and input limits."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from clishape.config import DEFAULT_TIMEOUT_MS, Settings, get_settings, load_settings
from clishape.exceptions import ConfigurationError, InputTooLongError
from clishape.utils.limits import SHORT_STRING_MAX, assert_max_length


class TestLoadSettings:
    def test_defaults(self) -> None:
        settings = load_settings()
        assert settings == Settings()
        assert settings.allowed_commands is None
        assert settings.allowed_roots is None
        assert settings.sanitize_all_paths is False
        assert settings.timeout_ms == DEFAULT_TIMEOUT_MS

    def test_lists_are_split_and_trimmed(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CLISHAPE_ALLOWED_COMMANDS", "docker, git ,,")
        monkeypatch.setenv("CLISHAPE_ALLOWED_ROOTS", "/srv/a,/srv/b")
        settings = load_settings()
        assert settings.allowed_commands == ("docker", "git")
        assert settings.allowed_roots == ("/srv/a", "/srv/b")

    @pytest.mark.parametrize("raw", [" , ", ""])
    def test_empty_value_means_unrestricted(self, monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
        monkeypatch.setenv("CLISHAPE_ALLOWED_COMMANDS", raw)
        assert load_settings().allowed_commands is None

    def test_per_tool_allowlist(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CLISHAPE_ALLOWED_COMMANDS", "docker")
        monkeypatch.setenv("CLISHAPE_HTTP_ALLOWED_COMMANDS", "curl")
        settings = load_settings()
        assert settings.allowed_commands_for("http") == ("curl",)
        assert settings.allowed_commands_for("HTTP") == ("curl",)
        assert settings.allowed_commands_for("git") == ("docker",)

    def test_lists_accept_python_sequences(self) -> None:
        settings = Settings(allowed_roots=["/srv/a", " "], git_allowed_commands=("git",))
        assert settings.allowed_roots == ("/srv/a",)
        assert settings.allowed_commands_for("git") == ("git",)

    @pytest.mark.parametrize(("raw", "expected"), [("true", True), ("1", True), ("YES", True), ("no", False)])
    def test_sanitize_flag(self, monkeypatch: pytest.MonkeyPatch, raw: str, expected: bool) -> None:
        monkeypatch.setenv("CLISHAPE_SANITIZE_ALL_PATHS", raw)
        assert load_settings().sanitize_all_paths is expected

    @pytest.mark.parametrize(("raw", "expected"), [("5000", 5000), ("", DEFAULT_TIMEOUT_MS)])
    def test_timeout(self, monkeypatch: pytest.MonkeyPatch, raw: str, expected: int) -> None:
        monkeypatch.setenv("CLISHAPE_TIMEOUT_MS", raw)
        assert load_settings().timeout_ms == expected

    @pytest.mark.parametrize(
        ("name", "raw"),
        [("CLISHAPE_TIMEOUT_MS", "abc"), ("CLISHAPE_TIMEOUT_MS", "-1"), ("CLISHAPE_SANITIZE_ALL_PATHS", "maybe")],
    )
    def test_invalid_value_is_a_configuration_error(
        self, monkeypatch: pytest.MonkeyPatch, name: str, raw: str,
    ) -> None:
        monkeypatch.setenv(name, raw)
        with pytest.raises(ConfigurationError, match=name) as exc_info:
            load_settings()
        assert exc_info.value.hint is not None

    def test_settings_are_frozen(self) -> None:
        settings = Settings()
        with pytest.raises(ValidationError):
            settings.timeout_ms = 1  # type: ignore[misc]

    def test_get_settings_is_cached(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CLISHAPE_TIMEOUT_MS", "1234")
        first = get_settings()
        monkeypatch.setenv("CLISHAPE_TIMEOUT_MS", "99")
        assert first.timeout_ms == 1234
        assert get_settings() is first


class TestLimits:
    def test_within_limit(self) -> None:
        assert_max_length("x" * SHORT_STRING_MAX, SHORT_STRING_MAX, "name")

    def test_over_limit(self) -> None:
        with pytest.raises(InputTooLongError) as exc_info:
            assert_max_length("x" * (SHORT_STRING_MAX + 1), SHORT_STRING_MAX, "name")
        assert exc_info.value.param_name == "name"
        assert "255" in str(exc_info.value)
