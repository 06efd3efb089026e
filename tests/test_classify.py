"""Tests for ordered error classification (core/classify.py)."""

from __future__ import annotations

from enum import Enum

import pytest

from clishape.core.classify import (
    FailureCategory,
    classify,
    classify_failure,
    first_error_line,
    rule,
    suggest_recovery,
)


class _Kind(str, Enum):
    ALREADY_CLOSED = "already-closed"
    NOT_FOUND = "not-found"
    UNKNOWN = "unknown"


_RULES = (
    rule(r"already closed", _Kind.ALREADY_CLOSED),
    rule(r"not found", _Kind.NOT_FOUND),
)


class TestClassify:
    def test_first_matching_rule_wins(self) -> None:
        text = "issue not found: it was already closed"
        assert classify(text, _RULES, _Kind.UNKNOWN) is _Kind.ALREADY_CLOSED

    def test_case_insensitive(self) -> None:
        assert classify("Resource NOT FOUND", _RULES, _Kind.UNKNOWN) is _Kind.NOT_FOUND

    def test_default_when_nothing_matches(self) -> None:
        assert classify("segfault", _RULES, _Kind.UNKNOWN) is _Kind.UNKNOWN


class TestFirstErrorLine:
    def test_prefers_error_lines(self) -> None:
        text = "Cloning...\nfatal: repository 'x' not found\nbye"
        assert first_error_line(text) == "fatal: repository 'x' not found"

    def test_falls_back_to_first_line(self) -> None:
        assert first_error_line("\n  something odd  \nmore") == "something odd"

    def test_fallback_for_empty(self) -> None:
        assert first_error_line("", fallback="Push failed") == "Push failed"


class TestFailureCategory:
    @pytest.mark.parametrize(
        ("text", "exit_code", "expected"),
        [
            ("anything", 124, FailureCategory.TIMEOUT),
            ("anything", 127, FailureCategory.COMMAND_NOT_FOUND),
            ("bash: kubectl: command not found", 1, FailureCategory.COMMAND_NOT_FOUND),
            ("HTTP 403 Forbidden", 1, FailureCategory.AUTHENTICATION_ERROR),
            ("open /var/lib/x: permission denied", 1, FailureCategory.PERMISSION_DENIED),
            ("Could not resolve host: github.com", 128, FailureCategory.NETWORK_ERROR),
            ('release "web" already exists', 1, FailureCategory.ALREADY_EXISTS),
            ("CONFLICT (content): Merge conflict in a.txt", 1, FailureCategory.CONFLICT),
            ("Error: file does not exist", 1, FailureCategory.NOT_FOUND),
            ("unknown flag: --bogus", 2, FailureCategory.INVALID_INPUT),
            ("it broke", 1, FailureCategory.COMMAND_FAILED),
        ],
    )
    def test_categories(self, text: str, exit_code: int, expected: FailureCategory) -> None:
        assert classify_failure(text, exit_code) is expected

    def test_every_category_has_a_suggestion(self) -> None:
        for category in FailureCategory:
            suggestion = suggest_recovery(category, "docker")
            assert suggestion
            assert "{command}" not in suggestion

    def test_suggestion_names_command(self) -> None:
        assert "helm" in suggest_recovery(FailureCategory.COMMAND_NOT_FOUND, "helm")
