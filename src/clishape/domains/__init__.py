"""One sub-package per wrapped CLI.

Every domain package exposes ``models`` (frozen result records),
``guards`` (argument validation and command-vector builders),
``parsers`` (raw output to records) and ``formatters`` (full and compact
renderings), and publishes its :class:`~clishape.core.actions.Action`
records as ``ACTIONS``.
"""

from __future__ import annotations

__all__: list[str] = []
