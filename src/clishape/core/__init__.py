"""Core / service layer: guards, normalization and presentation.

Rules
-----
* No ``print()`` calls.
* No process execution; output arrives through a
  :class:`~clishape.core.protocols.ProcessRunner`.
* No imports from ``cli``, ``infra`` or ``domains``.
* Parsing is deterministic: the same captured output always yields the
  same record.
"""

from clishape.core.actions import Action, Context
from clishape.core.invocation_service import Invocation, InvocationService
from clishape.core.models import RawInvocationResult
from clishape.core.presentation import Presentation, Renderer
from clishape.core.protocols import ProcessRunner

__all__: list[str] = [
    "Action",
    "Context",
    "Invocation",
    "InvocationService",
    "Presentation",
    "ProcessRunner",
    "RawInvocationResult",
    "Renderer",
]
