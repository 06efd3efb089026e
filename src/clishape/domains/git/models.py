"""Result records for ``git`` actions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


# ---------------------------------------------------------------------------
# Error taxonomies
# ---------------------------------------------------------------------------

class GitErrorType(str, Enum):
    """Failures of ``status``, ``log`` and ``pull``."""

    NOT_A_REPOSITORY = "not-a-repository"
    CONFLICT = "conflict"
    LOCAL_CHANGES = "local-changes"
    DIVERGED = "diverged"
    NO_TRACKING = "no-tracking"
    AUTH = "auth"
    NETWORK = "network"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


class PushErrorType(str, Enum):
    REJECTED = "rejected"
    NO_UPSTREAM = "no-upstream"
    PERMISSION_DENIED = "permission-denied"
    REPOSITORY_NOT_FOUND = "repository-not-found"
    HOOK_DECLINED = "hook-declined"
    UNKNOWN = "unknown"


# ---------------------------------------------------------------------------
# git status
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class StagedFile:
    file: str
    status: str
    """``added``, ``modified``, ``deleted``, ``renamed`` or ``copied``."""

    old_file: str | None = None
    """Source path of a rename or copy."""


@dataclass(frozen=True, slots=True)
class GitStatus:
    success: bool
    branch: str
    upstream: str | None
    ahead: int
    behind: int
    staged: tuple[StagedFile, ...]
    modified: tuple[str, ...]
    deleted: tuple[str, ...]
    untracked: tuple[str, ...]
    conflicts: tuple[str, ...]
    clean: bool
    error_type: GitErrorType | None = None
    error_message: str | None = None


@dataclass(frozen=True, slots=True)
class GitStatusCompact:
    success: bool
    branch: str
    upstream: str | None
    ahead: int
    behind: int
    staged: tuple[str, ...]
    """Staged file paths only."""

    modified: tuple[str, ...]
    deleted: tuple[str, ...]
    untracked: tuple[str, ...]
    conflicts: tuple[str, ...]
    changed_files: int
    """Number of entries across all five lists before capping."""

    clean: bool
    error_type: GitErrorType | None = None
    error_message: str | None = None


# ---------------------------------------------------------------------------
# git log
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Commit:
    hash: str
    short_hash: str
    author: str
    email: str
    date: str
    refs: str | None
    message: str


@dataclass(frozen=True, slots=True)
class GitLog:
    success: bool
    commits: tuple[Commit, ...]
    total: int
    error_type: GitErrorType | None = None
    error_message: str | None = None


@dataclass(frozen=True, slots=True)
class CommitSummary:
    short_hash: str
    message: str
    """First line of the commit message."""


@dataclass(frozen=True, slots=True)
class GitLogCompact:
    success: bool
    commits: tuple[CommitSummary, ...]
    total: int
    error_type: GitErrorType | None = None
    error_message: str | None = None


# ---------------------------------------------------------------------------
# git push
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ObjectStats:
    """Numbers from ``Total N (delta D), reused R (delta X), pack-reused P``."""

    total: int
    delta: int
    reused: int
    pack_reused: int


@dataclass(frozen=True, slots=True)
class GitPush:
    success: bool
    remote: str
    branch: str
    summary: str
    created: bool
    """``True`` when the push created the remote branch."""

    forced: bool
    up_to_date: bool
    object_stats: ObjectStats | None
    rejected_ref: str | None
    hint: str | None
    """``hint:`` lines from git, joined into one paragraph."""

    error_type: PushErrorType | None = None
    error_message: str | None = None


@dataclass(frozen=True, slots=True)
class GitPushCompact:
    success: bool
    remote: str
    branch: str
    summary: str
    created: bool
    forced: bool
    up_to_date: bool
    rejected_ref: str | None
    hint: str | None
    error_type: PushErrorType | None = None
    error_message: str | None = None


# ---------------------------------------------------------------------------
# git pull
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ChangedFile:
    file: str
    changes: int
    """Changed line count from the diffstat (0 for binary files)."""


@dataclass(frozen=True, slots=True)
class GitPull:
    success: bool
    summary: str
    files_changed: int
    insertions: int
    deletions: int
    changed_files: tuple[ChangedFile, ...]
    conflicts: tuple[str, ...]
    up_to_date: bool
    fast_forward: bool
    error_type: GitErrorType | None = None
    error_message: str | None = None


@dataclass(frozen=True, slots=True)
class GitPullCompact:
    success: bool
    summary: str
    files_changed: int
    insertions: int
    deletions: int
    conflicts: tuple[str, ...]
    up_to_date: bool
    fast_forward: bool
    error_type: GitErrorType | None = None
    error_message: str | None = None
