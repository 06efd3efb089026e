"""Tests for the ``git`` domain.

Fixtures are verbatim-shaped samples of what git 2.4x prints for each
command; no repository is touched.
"""

from __future__ import annotations

import pytest

from clishape.domains.git import formatters, guards, parsers
from clishape.domains.git.models import GitErrorType, ObjectStats, PushErrorType, StagedFile
from clishape.exceptions import FlagInjectionError, GuardError

SEP = parsers.FIELD_SEPARATOR


# ---------------------------------------------------------------------------
# status
# ---------------------------------------------------------------------------

class TestParseStatus:
    def test_full_porcelain(self) -> None:
        stdout = (
            "## main...origin/main [ahead 2, behind 1]\n"
            "M  staged.py\n"
            "MM both.py\n"
            " M worktree.py\n"
            " D gone.py\n"
            "A  added.py\n"
            "R  old.py -> new.py\n"
            "UU conflict.py\n"
            "AA both_added.py\n"
            "?? notes.txt\n"
        )
        result = parsers.parse_status(stdout, "", 0)

        assert result.success is True
        assert (result.branch, result.upstream, result.ahead, result.behind) == ("main", "origin/main", 2, 1)
        assert result.staged == (
            StagedFile(file="staged.py", status="modified"),
            StagedFile(file="both.py", status="modified"),
            StagedFile(file="added.py", status="added"),
            StagedFile(file="new.py", status="renamed", old_file="old.py"),
        )
        assert result.modified == ("both.py", "worktree.py")
        assert result.deleted == ("gone.py",)
        assert result.untracked == ("notes.txt",)
        assert result.conflicts == ("conflict.py", "both_added.py")
        assert result.clean is False

    def test_clean_without_upstream(self) -> None:
        result = parsers.parse_status("## feature/login\n", "", 0)
        assert result.branch == "feature/login"
        assert result.upstream is None
        assert result.clean is True

    @pytest.mark.parametrize(
        ("line", "branch"),
        [
            ("## No commits yet on main", "main"),
            ("## Initial commit on trunk", "trunk"),
            ("## HEAD (no branch)", "HEAD"),
        ],
    )
    def test_special_branch_lines(self, line: str, branch: str) -> None:
        assert parsers.parse_status(line, "", 0).branch == branch

    def test_not_a_repository(self) -> None:
        result = parsers.parse_status("", "fatal: not a git repository (or any of the parent directories): .git", 128)
        assert result.success is False
        assert result.error_type is GitErrorType.NOT_A_REPOSITORY
        assert result.error_message is not None
        assert result.error_message.startswith("fatal:")

    def test_compact_counts_changed_files(self) -> None:
        full = parsers.parse_status("## main\nM  a.py\n M b.py\n?? c.py\n", "", 0)
        compact = formatters.compact_status(full)
        assert compact.staged == ("a.py",)
        assert compact.changed_files == 3
        assert compact.branch == full.branch
        assert compact.clean is full.clean


# ---------------------------------------------------------------------------
# log
# ---------------------------------------------------------------------------

class TestParseLog:
    def test_delimited(self) -> None:
        stdout = "\n".join([
            SEP.join(["a" * 40, "aaaaaaa", "Ada", "ada@example.com", "2024-05-01T10:00:00+02:00", "HEAD -> main", "Add parser"]),
            SEP.join(["b" * 40, "bbbbbbb", "Bob", "bob@example.com", "2024-04-30T09:00:00+02:00", "", "Fix: handle x"]),
        ])
        result = parsers.parse_log(stdout, "", 0)
        assert result.total == 2
        first, second = result.commits
        assert first.refs == "HEAD -> main"
        assert first.message == "Add parser"
        assert second.refs is None
        assert second.author == "Bob"

    def test_message_containing_separator_is_kept(self) -> None:
        line = SEP.join(["c" * 40, "ccccccc", "C", "c@x", "2024-01-01", "", "part one", "part two"])
        result = parsers.parse_log(line, "", 0)
        assert result.commits[0].message == f"part one{SEP}part two"

    def test_default_layout_fallback(self) -> None:
        stdout = (
            "commit 0123456789abcdef0123456789abcdef01234567 (HEAD -> main, origin/main)\n"
            "Author: Ada Lovelace <ada@example.com>\n"
            "Date:   Wed May 1 10:00:00 2024 +0200\n"
            "\n"
            "    Add parser\n"
            "\n"
            "    Longer body.\n"
            "\n"
            "commit fedcba9876543210fedcba9876543210fedcba98\n"
            "Author: Bob <bob@example.com>\n"
            "Date:   Tue Apr 30 09:00:00 2024 +0200\n"
            "\n"
            "    Initial commit\n"
        )
        result = parsers.parse_log(stdout, "", 0)
        assert result.total == 2
        first = result.commits[0]
        assert first.short_hash == "0123456"
        assert first.author == "Ada Lovelace"
        assert first.email == "ada@example.com"
        assert first.refs == "HEAD -> main, origin/main"
        assert first.message == "Add parser\n\nLonger body."
        assert result.commits[1].message == "Initial commit"

    def test_empty_repository(self) -> None:
        result = parsers.parse_log("", "fatal: your current branch 'main' does not have any commits yet", 128)
        assert result.success is False
        assert result.error_type is GitErrorType.UNKNOWN
        assert result.total == 0

    def test_compact_caps_commits(self) -> None:
        stdout = "\n".join(
            SEP.join([f"{i:040x}", f"{i:07x}", "A", "a@x", "2024-01-01", "", f"commit {i}"]) for i in range(25)
        )
        full = parsers.parse_log(stdout, "", 0)
        compact = formatters.compact_log(full)
        assert compact.total == 25
        assert len(compact.commits) == 10
        assert compact.commits[0].message == "commit 0"


# ---------------------------------------------------------------------------
# push
# ---------------------------------------------------------------------------

class TestParsePush:
    def test_new_branch(self) -> None:
        stderr = (
            "Enumerating objects: 5, done.\n"
            "Total 3 (delta 1), reused 0 (delta 0), pack-reused 0\n"
            "To github.com:acme/app.git\n"
            " * [new branch]      feature/x -> feature/x\n"
            "branch 'feature/x' set up to track 'origin/feature/x'.\n"
        )
        result = parsers.parse_push("", stderr, 0)
        assert result.success is True
        assert result.created is True
        assert result.forced is False
        assert result.branch == "feature/x"
        assert result.object_stats == ObjectStats(total=3, delta=1, reused=0, pack_reused=0)
        assert result.summary == "* [new branch]      feature/x -> feature/x"

    def test_fast_forward_update(self) -> None:
        stderr = "To github.com:acme/app.git\n   1a2b3c4..5d6e7f8  main -> main\n"
        result = parsers.parse_push("", stderr, 0, branch="main")
        assert result.success is True
        assert result.forced is False
        assert result.created is False
        assert result.branch == "main"

    def test_forced_update(self) -> None:
        stderr = "To github.com:acme/app.git\n + 1a2b3c4...5d6e7f8 main -> main (forced update)\n"
        result = parsers.parse_push("", stderr, 0)
        assert result.forced is True

    def test_everything_up_to_date(self) -> None:
        result = parsers.parse_push("", "Everything up-to-date\n", 0)
        assert result.up_to_date is True
        assert result.summary == "Everything up-to-date"

    def test_rejected_non_fast_forward(self) -> None:
        stderr = (
            "To github.com:acme/app.git\n"
            " ! [rejected]        main -> main (fetch first)\n"
            "error: failed to push some refs to 'github.com:acme/app.git'\n"
            "hint: Updates were rejected because the remote contains work that you do not\n"
            "hint: have locally.\n"
        )
        result = parsers.parse_push("", stderr, 1)
        assert result.success is False
        assert result.error_type is PushErrorType.REJECTED
        assert result.rejected_ref == "main"
        assert result.hint == "Updates were rejected because the remote contains work that you do not have locally."
        assert result.error_message == "error: failed to push some refs to 'github.com:acme/app.git'"

    def test_rejected_ref_fails_even_with_zero_exit(self) -> None:
        result = parsers.parse_push("", " ! [rejected]        main -> main (non-fast-forward)\n", 0)
        assert result.success is False

    @pytest.mark.parametrize(
        ("stderr", "kind"),
        [
            (
                " ! [remote rejected] main -> main (pre-receive hook declined)\n"
                "error: failed to push some refs\n",
                PushErrorType.HOOK_DECLINED,
            ),
            (
                "fatal: The current branch topic has no upstream branch.\n",
                PushErrorType.NO_UPSTREAM,
            ),
            (
                "ERROR: Repository not found.\n"
                "fatal: Could not read from remote repository.\n",
                PushErrorType.REPOSITORY_NOT_FOUND,
            ),
            (
                "remote: Permission to acme/app.git denied to eve.\n"
                "fatal: unable to access 'https://github.com/acme/app.git/': The requested URL returned error: 403\n",
                PushErrorType.PERMISSION_DENIED,
            ),
            (
                "fatal: something unexpected\n",
                PushErrorType.UNKNOWN,
            ),
        ],
    )
    def test_error_taxonomy(self, stderr: str, kind: PushErrorType) -> None:
        result = parsers.parse_push("", stderr, 1)
        assert result.success is False
        assert result.error_type is kind

    def test_compact_keeps_summary_and_scalars(self) -> None:
        stderr = "To x\n * [new branch]      dev -> dev\n"
        full = parsers.parse_push("", stderr, 0, remote="upstream")
        compact = formatters.compact_push(full)
        assert compact.remote == "upstream"
        assert compact.summary == full.summary
        assert compact.created is True


# ---------------------------------------------------------------------------
# pull
# ---------------------------------------------------------------------------

class TestParsePull:
    def test_fast_forward_with_diffstat(self) -> None:
        stdout = (
            "Updating 1a2b3c4..5d6e7f8\n"
            "Fast-forward\n"
            " src/app.py   | 10 +++++++---\n"
            " README.md    |  2 +-\n"
            " logo.png     | Bin 0 -> 1024 bytes\n"
            " 3 files changed, 9 insertions(+), 4 deletions(-)\n"
        )
        result = parsers.parse_pull(stdout, "", 0)
        assert result.success is True
        assert result.fast_forward is True
        assert result.files_changed == 3
        assert [f.file for f in result.changed_files] == ["src/app.py", "README.md", "logo.png"]
        assert result.changed_files[0].changes == 10
        assert result.changed_files[2].changes == 0
        assert (result.insertions, result.deletions) == (9, 4)
        assert result.summary == "3 file(s) changed, 9 insertion(s), 4 deletion(s)"

    def test_summary_fallback(self) -> None:
        result = parsers.parse_pull(" 12 files changed, 40 insertions(+)\n", "", 0)
        assert result.files_changed == 12
        assert result.insertions == 40
        assert result.deletions == 0

    def test_already_up_to_date(self) -> None:
        result = parsers.parse_pull("Already up to date.\n", "", 0)
        assert result.up_to_date is True
        assert result.summary == "Already up to date"

    def test_conflicts(self) -> None:
        stdout = (
            "Auto-merging src/app.py\n"
            "CONFLICT (content): Merge conflict in src/app.py\n"
            "Automatic merge failed; fix conflicts and then commit the result.\n"
        )
        result = parsers.parse_pull(stdout, "", 1)
        assert result.success is False
        assert result.conflicts == ("src/app.py",)
        assert result.error_type is GitErrorType.CONFLICT
        assert result.summary == "Pull stopped with 1 conflict(s)"

    def test_local_changes(self) -> None:
        stderr = (
            "error: Your local changes to the following files would be overwritten by merge:\n"
            "\tsrc/app.py\n"
            "Please commit your changes or stash them before you merge.\n"
        )
        result = parsers.parse_pull("", stderr, 1)
        assert result.error_type is GitErrorType.LOCAL_CHANGES

    def test_diverged(self) -> None:
        result = parsers.parse_pull("", "fatal: Not possible to fast-forward, aborting.\n", 128)
        assert result.error_type is GitErrorType.DIVERGED


# ---------------------------------------------------------------------------
# Guards
# ---------------------------------------------------------------------------

class TestGitGuards:
    @pytest.mark.parametrize("ref", ["main", "feature/login", "release-1.2", "v1.0.0"])
    def test_valid_refs(self, ref: str) -> None:
        guards.validate_ref(ref)

    @pytest.mark.parametrize(
        "ref",
        ["", "@", "a..b", "with space", "x~1", "a^", "a:b", "a?b", "a*", "a[b", "a\\b",
         "a@{1}", "a//b", "/a", "a/", "a.", "a.lock", "a/.hidden"],
    )
    def test_invalid_refs(self, ref: str) -> None:
        with pytest.raises(GuardError):
            guards.validate_ref(ref)

    def test_flag_ref(self) -> None:
        with pytest.raises(FlagInjectionError):
            guards.validate_ref("--force")

    def test_push_args(self) -> None:
        assert guards.build_push_args("origin", "main", set_upstream=True) == [
            "push", "--set-upstream", "origin", "main",
        ]
        assert guards.build_push_args(force_with_lease=True) == ["push", "--force-with-lease", "origin"]

    def test_push_rejects_flag_remote(self) -> None:
        with pytest.raises(FlagInjectionError):
            guards.build_push_args("--mirror")

    def test_pull_args(self) -> None:
        assert guards.build_pull_args("origin", "main", rebase=True) == ["pull", "--rebase", "origin", "main"]
        assert guards.build_pull_args() == ["pull"]

    def test_log_args(self) -> None:
        args = guards.build_log_args(max_count=5, ref="main")
        assert args == ["log", f"--format={guards.LOG_FORMAT}", "--max-count=5", "main"]
        assert guards.LOG_FORMAT.count(SEP) == 6
