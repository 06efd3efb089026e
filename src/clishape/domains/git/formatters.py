"""Full and compact renderings of ``git`` results."""

from __future__ import annotations

from clishape.core.presentation import Renderer, cap, failure_line, more_line, preview
from clishape.domains.git.models import (
    CommitSummary,
    GitLog,
    GitLogCompact,
    GitPull,
    GitPullCompact,
    GitPush,
    GitPushCompact,
    GitStatus,
    GitStatusCompact,
)


# ---------------------------------------------------------------------------
# status
# ---------------------------------------------------------------------------

def _branch_line(branch: str, upstream: str | None, ahead: int, behind: int) -> str:
    line = f"On branch {branch}"
    if upstream:
        line += f" (tracking {upstream})"
    if ahead or behind:
        line += f" [ahead {ahead}, behind {behind}]"
    return line


def format_status(data: GitStatus) -> str:
    if not data.success:
        return failure_line("git status", data.error_type, data.error_message)
    lines = [_branch_line(data.branch, data.upstream, data.ahead, data.behind)]
    if data.clean:
        lines.append("Working tree clean")
        return "\n".join(lines)
    for staged in data.staged:
        origin = f" (from {staged.old_file})" if staged.old_file else ""
        lines.append(f"  staged {staged.status}: {staged.file}{origin}")
    lines.extend(f"  modified: {path}" for path in data.modified)
    lines.extend(f"  deleted: {path}" for path in data.deleted)
    lines.extend(f"  untracked: {path}" for path in data.untracked)
    lines.extend(f"  conflict: {path}" for path in data.conflicts)
    return "\n".join(lines)


def compact_status(data: GitStatus) -> GitStatusCompact:
    return GitStatusCompact(
        success=data.success,
        branch=data.branch,
        upstream=data.upstream,
        ahead=data.ahead,
        behind=data.behind,
        staged=cap(s.file for s in data.staged),
        modified=cap(data.modified),
        deleted=cap(data.deleted),
        untracked=cap(data.untracked),
        conflicts=cap(data.conflicts),
        changed_files=(
            len(data.staged) + len(data.modified) + len(data.deleted)
            + len(data.untracked) + len(data.conflicts)
        ),
        clean=data.clean,
        error_type=data.error_type,
        error_message=preview(data.error_message),
    )


def format_status_compact(data: GitStatusCompact) -> str:
    if not data.success:
        return failure_line("git status", data.error_type, data.error_message)
    head = _branch_line(data.branch, data.upstream, data.ahead, data.behind)
    if data.clean:
        return f"{head}: clean"
    parts = [
        f"{label} {len(paths)}"
        for label, paths in (
            ("staged", data.staged),
            ("modified", data.modified),
            ("deleted", data.deleted),
            ("untracked", data.untracked),
            ("conflicts", data.conflicts),
        )
        if paths
    ]
    return f"{head}: {data.changed_files} changed ({', '.join(parts)})"


# ---------------------------------------------------------------------------
# log
# ---------------------------------------------------------------------------

def format_log(data: GitLog) -> str:
    if not data.success:
        return failure_line("git log", data.error_type, data.error_message)
    lines = [f"{data.total} commits"]
    for commit in data.commits:
        refs = f" ({commit.refs})" if commit.refs else ""
        subject = commit.message.splitlines()[0] if commit.message else ""
        lines.append(f"  {commit.short_hash}{refs} {subject} | {commit.author} <{commit.email}> {commit.date}")
    return "\n".join(lines)


def compact_log(data: GitLog) -> GitLogCompact:
    return GitLogCompact(
        success=data.success,
        commits=cap(
            CommitSummary(
                short_hash=c.short_hash,
                message=c.message.splitlines()[0] if c.message else "",
            )
            for c in data.commits
        ),
        total=data.total,
        error_type=data.error_type,
        error_message=preview(data.error_message),
    )


def format_log_compact(data: GitLogCompact) -> str:
    if not data.success:
        return failure_line("git log", data.error_type, data.error_message)
    lines = [f"{data.total} commits"]
    lines.extend(f"  {c.short_hash} {c.message}" for c in data.commits)
    extra = more_line(data.total, len(data.commits))
    if extra:
        lines.append(extra)
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# push
# ---------------------------------------------------------------------------

def _push_headline(success: bool, remote: str, branch: str, created: bool,
                   forced: bool, up_to_date: bool) -> str:
    target = f"{remote}/{branch}" if branch else remote
    if not success:
        return f"Push to {target} failed"
    if up_to_date:
        return f"Push to {target}: everything up-to-date"
    flags = [name for name, on in (("new branch", created), ("forced", forced)) if on]
    suffix = f" ({', '.join(flags)})" if flags else ""
    return f"Pushed to {target}{suffix}"


def format_push(data: GitPush) -> str:
    lines = [_push_headline(data.success, data.remote, data.branch, data.created,
                            data.forced, data.up_to_date)]
    if not data.success:
        lines[0] = failure_line(lines[0].removesuffix(" failed"), data.error_type, data.error_message)
    if data.rejected_ref:
        lines.append(f"  rejected: {data.rejected_ref}")
    lines.extend(f"  {line}" for line in data.summary.splitlines() if line)
    if data.object_stats is not None:
        stats = data.object_stats
        lines.append(
            f"  objects: {stats.total} (delta {stats.delta}), reused {stats.reused}, "
            f"pack-reused {stats.pack_reused}"
        )
    if data.hint:
        lines.append(f"  hint: {data.hint}")
    return "\n".join(lines)


def compact_push(data: GitPush) -> GitPushCompact:
    return GitPushCompact(
        success=data.success,
        remote=data.remote,
        branch=data.branch,
        summary=data.summary,
        created=data.created,
        forced=data.forced,
        up_to_date=data.up_to_date,
        rejected_ref=data.rejected_ref,
        hint=preview(data.hint),
        error_type=data.error_type,
        error_message=preview(data.error_message),
    )


def format_push_compact(data: GitPushCompact) -> str:
    line = _push_headline(data.success, data.remote, data.branch, data.created,
                          data.forced, data.up_to_date)
    if not data.success:
        if data.error_type is not None:
            line += f" [{data.error_type.value}]"
        if data.rejected_ref:
            line += f": {data.rejected_ref} rejected"
    return line


# ---------------------------------------------------------------------------
# pull
# ---------------------------------------------------------------------------

def format_pull(data: GitPull) -> str:
    if not data.success and not data.conflicts:
        return failure_line("git pull", data.error_type, data.error_message)
    lines = [data.summary]
    if data.fast_forward:
        lines[0] += " (fast-forward)"
    for changed in data.changed_files:
        lines.append(f"  {changed.file} | {changed.changes}")
    if data.changed_files or data.files_changed:
        lines.append(f"  +{data.insertions} -{data.deletions}")
    lines.extend(f"  conflict: {path}" for path in data.conflicts)
    return "\n".join(lines)


def compact_pull(data: GitPull) -> GitPullCompact:
    return GitPullCompact(
        success=data.success,
        summary=data.summary,
        files_changed=data.files_changed,
        insertions=data.insertions,
        deletions=data.deletions,
        conflicts=cap(data.conflicts),
        up_to_date=data.up_to_date,
        fast_forward=data.fast_forward,
        error_type=data.error_type,
        error_message=preview(data.error_message),
    )


def format_pull_compact(data: GitPullCompact) -> str:
    if not data.success and not data.conflicts:
        return failure_line("git pull", data.error_type, data.error_message)
    if data.up_to_date:
        return data.summary
    line = f"{data.summary} (+{data.insertions} -{data.deletions})"
    if data.conflicts:
        line += f"; conflicts: {', '.join(data.conflicts)}"
    return line


STATUS_RENDERER = Renderer(format_status, compact_status, format_status_compact)
LOG_RENDERER = Renderer(format_log, compact_log, format_log_compact)
PUSH_RENDERER = Renderer(format_push, compact_push, format_push_compact)
PULL_RENDERER = Renderer(format_pull, compact_pull, format_pull_compact)
