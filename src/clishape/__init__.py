"""clishape — structured results from external command-line tools.

Screens caller input before it reaches a CLI, normalizes the CLI's
text/JSON output into frozen result records, and renders a full or
compact view of every result.
"""

from clishape.version import __version__

__all__: list[str] = ["__version__"]
