"""Infrastructure layer — external system integration.

This layer wraps all interaction with the operating system: starting
processes and probing PATH.  Every raw OS exception must be caught here
and re-raised as a :class:`~clishape.exceptions.ClishapeError` subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
* Must expose clean, typed interfaces consumed by the core layer.
"""

from clishape.infra.subprocess_runner import SubprocessRunner
from clishape.infra.tool_detector import ToolStatus, detect_tool, detect_tools, require_tool

__all__: list[str] = [
    "SubprocessRunner",
    "ToolStatus",
    "detect_tool",
    "detect_tools",
    "require_tool",
]
