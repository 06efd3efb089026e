"""Parsers for ``git status``, ``git log``, ``git push`` and ``git pull``.

``status`` expects ``git status --porcelain=v1 --branch``; ``log``
expects the ``\\x1f``-delimited pretty format built by
:func:`clishape.domains.git.guards.build_log_args` and falls back to the
default ``commit <hash>`` layout.  ``push`` and ``pull`` read the
human-oriented output git prints on stderr/stdout.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from enum import Enum
from typing import TypeVar

from clishape.core.classify import ErrorRule, classify, first_error_line, rule
from clishape.core.normalize import grammar, scan_lines
from clishape.domains.git.models import (
    ChangedFile,
    Commit,
    GitErrorType,
    GitLog,
    GitPull,
    GitPush,
    GitStatus,
    ObjectStats,
    PushErrorType,
    StagedFile,
)

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)

FIELD_SEPARATOR: str = "\x1f"
"""Separator between fields of one ``git log`` line."""

_STAGED_STATUS: Mapping[str, str] = {
    "A": "added",
    "M": "modified",
    "D": "deleted",
    "R": "renamed",
    "C": "copied",
    "T": "modified",
}

_GIT_RULES: tuple[ErrorRule[GitErrorType], ...] = (
    rule(r"timed out", GitErrorType.TIMEOUT),
    rule(r"not a git repository", GitErrorType.NOT_A_REPOSITORY),
    rule(r"CONFLICT \(|merge conflict|unmerged files", GitErrorType.CONFLICT),
    rule(r"local changes to the following files would be overwritten|commit your changes or stash them", GitErrorType.LOCAL_CHANGES),
    rule(r"divergent branches|have diverged|not possible to fast-forward", GitErrorType.DIVERGED),
    rule(r"no tracking information|no upstream", GitErrorType.NO_TRACKING),
    rule(r"authentication failed|could not read username|permission denied \(publickey\)", GitErrorType.AUTH),
    rule(r"could not resolve host|unable to access|connection (?:refused|timed out)|could not read from remote", GitErrorType.NETWORK),
)

# A hook rejection also reads "[remote rejected]", and a missing
# repository is often reported together with "Permission denied", so the
# more specific kinds come first.
_PUSH_RULES: tuple[ErrorRule[PushErrorType], ...] = (
    rule(r"hook declined|pre-receive hook|pre-push hook", PushErrorType.HOOK_DECLINED),
    rule(r"has no upstream branch|no configured push destination|does not appear to be a git repository", PushErrorType.NO_UPSTREAM),
    rule(r"repository not found|repository '.*' not found", PushErrorType.REPOSITORY_NOT_FOUND),
    rule(r"permission denied|permission to .* denied|\b403\b|authentication failed", PushErrorType.PERMISSION_DENIED),
    rule(r"\[rejected\]|\[remote rejected\]|non-fast-forward|fetch first|failed to push some refs", PushErrorType.REJECTED),
)


def _failure(text: str, rules: tuple[ErrorRule[E], ...], default: E, fallback: str) -> tuple[E, str]:
    return classify(text, rules, default), first_error_line(text, fallback)


# ---------------------------------------------------------------------------
# status
# ---------------------------------------------------------------------------

_BRANCH_RE = re.compile(
    r"^(?P<branch>.+?)(?:\.\.\.(?P<upstream>\S+))?(?: \[(?P<track>[^\]]*)\])?$"
)
_AHEAD_RE = re.compile(r"ahead (\d+)")
_BEHIND_RE = re.compile(r"behind (\d+)")


def _parse_branch_line(line: str) -> tuple[str, str | None, int, int]:
    """Return ``(branch, upstream, ahead, behind)`` from a ``## ...`` line."""
    body = line[2:].strip()
    for prefix in ("No commits yet on ", "Initial commit on "):
        if body.startswith(prefix):
            return body[len(prefix):].strip() or "unknown", None, 0, 0
    if body.startswith("HEAD (no branch)"):
        return "HEAD", None, 0, 0

    match = _BRANCH_RE.match(body)
    if match is None:
        return body or "unknown", None, 0, 0
    track = match.group("track") or ""
    ahead = _AHEAD_RE.search(track)
    behind = _BEHIND_RE.search(track)
    return (
        match.group("branch"),
        match.group("upstream"),
        int(ahead.group(1)) if ahead else 0,
        int(behind.group(1)) if behind else 0,
    )


def parse_status(stdout: str, stderr: str, exit_code: int) -> GitStatus:
    """Parse ``git status --porcelain=v1 --branch``."""
    branch, upstream, ahead, behind = "unknown", None, 0, 0
    staged: list[StagedFile] = []
    modified: list[str] = []
    deleted: list[str] = []
    untracked: list[str] = []
    conflicts: list[str] = []

    for line in stdout.splitlines():
        if line.startswith("## "):
            branch, upstream, ahead, behind = _parse_branch_line(line)
            continue
        if len(line) < 4:
            continue
        index, worktree = line[0], line[1]
        path = line[3:].strip()

        if index == "U" or worktree == "U" or (index == worktree and index in "AD"):
            conflicts.append(path)
            continue
        if index == "?":
            untracked.append(path)
            continue
        if index in _STAGED_STATUS:
            old, _, new = path.rpartition(" -> ")
            staged.append(StagedFile(file=new, status=_STAGED_STATUS[index], old_file=old or None))
        if worktree == "M":
            modified.append(path.rpartition(" -> ")[2])
        elif worktree == "D":
            deleted.append(path.rpartition(" -> ")[2])

    fields = dict(
        branch=branch,
        upstream=upstream,
        ahead=ahead,
        behind=behind,
        staged=tuple(staged),
        modified=tuple(modified),
        deleted=tuple(deleted),
        untracked=tuple(untracked),
        conflicts=tuple(conflicts),
        clean=not (staged or modified or deleted or untracked or conflicts),
    )
    if exit_code != 0:
        error_type, message = _failure(f"{stdout}\n{stderr}", _GIT_RULES, GitErrorType.UNKNOWN, "git status failed")
        return GitStatus(success=False, error_type=error_type, error_message=message, **fields)
    return GitStatus(success=True, **fields)


# ---------------------------------------------------------------------------
# log
# ---------------------------------------------------------------------------

_COMMIT_HEADER = re.compile(r"^commit (?P<hash>[0-9a-f]{7,64})(?: \((?P<refs>.*)\))?\s*$")
_AUTHOR_LINE = re.compile(r"^Author:\s*(?P<author>.*?)\s*(?:<(?P<email>[^>]*)>)?\s*$")
_DATE_LINE = re.compile(r"^Date:\s*(?P<date>.*\S)\s*$")


def _parse_delimited_log(text: str) -> list[Commit]:
    commits: list[Commit] = []
    for line in text.splitlines():
        if FIELD_SEPARATOR not in line:
            continue
        parts = line.split(FIELD_SEPARATOR)
        if len(parts) < 7:
            logger.debug("Skipping short log record with %d fields", len(parts))
            continue
        hash_, short, author, email, date, refs = parts[:6]
        commits.append(
            Commit(
                hash=hash_,
                short_hash=short,
                author=author,
                email=email,
                date=date,
                refs=refs or None,
                message=FIELD_SEPARATOR.join(parts[6:]),
            )
        )
    return commits


def _parse_default_log(text: str) -> list[Commit]:
    """Read ``git log`` default output (``commit``/``Author:``/``Date:`` blocks)."""
    commits: list[Commit] = []
    current: dict[str, str] | None = None
    message: list[str] = []

    def flush() -> None:
        if current is None:
            return
        commits.append(
            Commit(
                hash=current["hash"],
                short_hash=current["hash"][:7],
                author=current.get("author", ""),
                email=current.get("email", ""),
                date=current.get("date", ""),
                refs=current.get("refs") or None,
                message="\n".join(message).strip(),
            )
        )

    for line in text.splitlines():
        header = _COMMIT_HEADER.match(line)
        if header is not None:
            flush()
            current = {"hash": header.group("hash"), "refs": header.group("refs") or ""}
            message = []
            continue
        if current is None:
            continue
        author = _AUTHOR_LINE.match(line)
        if author is not None and "author" not in current:
            current["author"] = author.group("author")
            current["email"] = author.group("email") or ""
            continue
        date = _DATE_LINE.match(line)
        if date is not None and "date" not in current:
            current["date"] = date.group("date")
            continue
        if line.startswith("    "):
            message.append(line[4:])
        elif not line.strip() and message:
            message.append("")
    flush()
    return commits


def parse_log(stdout: str, stderr: str, exit_code: int) -> GitLog:
    """Parse ``git log`` output into commits, newest first."""
    commits = _parse_delimited_log(stdout)
    if not commits:
        commits = _parse_default_log(stdout)

    if exit_code != 0:
        error_type, message = _failure(f"{stdout}\n{stderr}", _GIT_RULES, GitErrorType.UNKNOWN, "git log failed")
        return GitLog(
            success=False,
            commits=tuple(commits),
            total=len(commits),
            error_type=error_type,
            error_message=message,
        )
    return GitLog(success=True, commits=tuple(commits), total=len(commits))


# ---------------------------------------------------------------------------
# push
# ---------------------------------------------------------------------------

_PUSH_GRAMMARS = (
    grammar("new", r"^\s*\*\s+\[new (?:branch|tag|reference)\]\s+(?P<src>\S+)\s+->\s+(?P<dst>\S+)"),
    grammar("rejected", r"^\s*!\s+\[(?:remote )?rejected\]\s+(?P<src>\S+)\s+->\s+(?P<dst>\S+)(?:\s+\((?P<reason>[^)]*)\))?"),
    grammar("update", r"^\s*(?P<flag>[+ ]?)\s*(?P<range>[0-9a-f]{4,}\.\.\.?[0-9a-f]{4,})\s+(?P<src>\S+)\s+->\s+(?P<dst>\S+)(?P<rest>.*)$"),
    grammar("stats", r"Total (?P<total>\d+) \(delta (?P<delta>\d+)\), reused (?P<reused>\d+)(?: \(delta \d+\))?(?:, pack-reused (?P<pack>\d+))?"),
    grammar("hint", r"^hint:\s?(?P<text>.*)$"),
    grammar("up-to-date", r"^Everything up-to-date"),
)


def parse_push(stdout: str, stderr: str, exit_code: int, *, remote: str = "origin", branch: str = "") -> GitPush:
    """Parse ``git push`` output.

    *branch* may be empty; it is then resolved from the first ref update
    git reported.
    """
    text = f"{stdout}\n{stderr}"
    summary_lines: list[str] = []
    hints: list[str] = []
    created = forced = up_to_date = False
    rejected_ref: str | None = None
    object_stats: ObjectStats | None = None
    resolved_branch = branch

    for kind, match in scan_lines(text, _PUSH_GRAMMARS):
        if kind == "stats":
            object_stats = ObjectStats(
                total=int(match.group("total")),
                delta=int(match.group("delta")),
                reused=int(match.group("reused")),
                pack_reused=int(match.group("pack") or 0),
            )
        elif kind == "hint":
            if match.group("text").strip():
                hints.append(match.group("text").strip())
        elif kind == "up-to-date":
            up_to_date = True
            summary_lines.append("Everything up-to-date")
        else:
            summary_lines.append(match.group(0).strip())
            if not resolved_branch:
                resolved_branch = match.group("src")
            if kind == "new":
                created = True
            elif kind == "rejected":
                rejected_ref = match.group("dst")
            elif (
                match.group("flag") == "+"
                or "..." in match.group("range")
                or "forced update" in match.group("rest")
            ):
                forced = True

    fields = dict(
        remote=remote,
        branch=resolved_branch,
        summary="\n".join(summary_lines),
        created=created,
        forced=forced,
        up_to_date=up_to_date,
        object_stats=object_stats,
        rejected_ref=rejected_ref,
        hint=" ".join(hints) or None,
    )
    if exit_code != 0 or rejected_ref is not None:
        error_type, message = _failure(text, _PUSH_RULES, PushErrorType.UNKNOWN, "git push failed")
        return GitPush(success=False, error_type=error_type, error_message=message, **fields)
    return GitPush(success=True, **fields)


# ---------------------------------------------------------------------------
# pull
# ---------------------------------------------------------------------------

_PULL_GRAMMARS = (
    grammar("diffstat", r"^\s(?P<file>\S.*?)\s+\|\s+(?P<changes>\d+|Bin\b.*)"),
    grammar("summary", r"^\s*(?P<files>\d+) files? changed(?:, (?P<ins>\d+) insertions?\(\+\))?(?:, (?P<del>\d+) deletions?\(-\))?"),
    grammar("conflict", r"^CONFLICT \([^)]*\): .*?(?:Merge conflict in |deleted in \S+ and modified in \S+\. Version \S+ of )(?P<file>\S+)"),
    grammar("up-to-date", r"^Already up[ -]to[ -]date"),
    grammar("fast-forward", r"^Fast-forward\b"),
)


def parse_pull(stdout: str, stderr: str, exit_code: int) -> GitPull:
    """Parse ``git pull`` output.

    ``files_changed`` counts the itemized diffstat lines; the ``N files
    changed`` summary is used only when git printed no itemized lines.
    """
    text = f"{stdout}\n{stderr}"
    changed: list[ChangedFile] = []
    conflicts: list[str] = []
    summary_files = insertions = deletions = 0
    up_to_date = fast_forward = False

    for kind, match in scan_lines(text, _PULL_GRAMMARS):
        if kind == "diffstat":
            amount = match.group("changes")
            changed.append(ChangedFile(file=match.group("file"), changes=int(amount) if amount.isdigit() else 0))
        elif kind == "summary":
            summary_files = int(match.group("files"))
            insertions = int(match.group("ins") or 0)
            deletions = int(match.group("del") or 0)
        elif kind == "conflict":
            if match.group("file") not in conflicts:
                conflicts.append(match.group("file"))
        elif kind == "up-to-date":
            up_to_date = True
        else:
            fast_forward = True

    files_changed = len(changed) or summary_files
    if up_to_date:
        summary = "Already up to date"
    elif conflicts:
        summary = f"Pull stopped with {len(conflicts)} conflict(s)"
    else:
        summary = f"{files_changed} file(s) changed, {insertions} insertion(s), {deletions} deletion(s)"

    fields = dict(
        summary=summary,
        files_changed=files_changed,
        insertions=insertions,
        deletions=deletions,
        changed_files=tuple(changed),
        conflicts=tuple(conflicts),
        up_to_date=up_to_date,
        fast_forward=fast_forward,
    )
    if exit_code != 0 or conflicts:
        error_type, message = _failure(text, _GIT_RULES, GitErrorType.UNKNOWN, "git pull failed")
        return GitPull(success=False, error_type=error_type, error_message=message, **fields)
    return GitPull(success=True, **fields)
