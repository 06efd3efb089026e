"""Lookup table of every registered ``(tool, action)`` pair."""

from __future__ import annotations

from collections.abc import Iterator, Mapping

from clishape.core.actions import Action
from clishape.domains import compose, docker, dotnet, git, helm, http, kubectl, npm
from clishape.exceptions import UnknownActionError

_DOMAINS = (docker, compose, git, kubectl, helm, npm, dotnet, http)

ACTIONS: Mapping[tuple[str, str], Action] = {
    (action.tool, action.name): action
    for domain in _DOMAINS
    for action in domain.ACTIONS
}


def iter_actions() -> Iterator[Action]:
    """Yield every registered action in registration order."""
    yield from ACTIONS.values()


def tools() -> list[str]:
    return list(dict.fromkeys(tool for tool, _ in ACTIONS))


def get_action(tool: str, name: str) -> Action:
    """Return the action registered for *tool* / *name*.

    Raises
    ------
    UnknownActionError
        When no such pair is registered; the hint lists what is.
    """
    try:
        return ACTIONS[(tool, name)]
    except KeyError:
        known = [n for t, n in ACTIONS if t == tool]
        if known:
            hint = f"Actions for {tool}: {', '.join(known)}"
        else:
            hint = f"Known tools: {', '.join(tools())}"
        raise UnknownActionError(f"No parser registered for '{tool} {name}'.", hint=hint) from None
