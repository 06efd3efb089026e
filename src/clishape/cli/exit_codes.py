"""Process exit codes returned by ``clishape``.

``parse`` and ``run`` exit with :data:`GENERAL_ERROR` when the wrapped
tool's parsed result reports ``success=False``.  The structured result is
still printed, so callers can choose between the exit status and the
``error_type`` field.
"""

from __future__ import annotations

SUCCESS: int = 0
"""The command finished and, for ``parse``/``run``, the tool succeeded."""

GENERAL_ERROR: int = 1
"""A guard, policy or runner error, or a failed tool result."""

UNEXPECTED_ERROR: int = 2
"""An exception outside the :class:`~clishape.exceptions.ClishapeError` tree."""

KEYBOARD_INTERRUPT: int = 130
"""Interrupted with Ctrl+C (128 + SIGINT)."""
