"""Tests for the status classifier and its strategy classes."""

from pathlib import Path
from typing import Optional

import pytest

from pygit_workstation import (
    FastForwardStrategy,
    NullOutputHandler,
    OperationResult,
    OperationType,
    RepoStatus,
    RequiresReviewStrategy,
    StatusClassifier,
    StatusConfig,
    StatusOrchestrator,
    StatusOutcome,
    StatusSignals,
    UpToDateStrategy,
    collect_signals,
    detail_lines,
)


class FakeWorkingCopy:
    """Fake working copy for testing classification."""

    def __init__(self, *, branch: str = "main", upstream: Optional[str] = "origin/main",
                 ahead: int = 0, behind: int = 0, stashed: int = 0, staged: int = 0,
                 untracked: int = 0, modified: int = 0, moved: int = 0):
        self._path = Path("/tmp/fake-repo")
        self._branch = branch
        self._upstream = upstream
        self.ahead = ahead
        self.behind = behind
        self.stashed = stashed
        self.staged = staged
        self.untracked = untracked
        self.modified = modified
        self.moved = moved
        self.refs: set[str] = set()
        self.timestamps: dict[str, int] = {}
        self.fetch_success = True
        self.pull_success = True
        self.calls: list[str] = []

    @property
    def path(self) -> Path:
        return self._path

    @property
    def current_branch(self) -> Optional[str]:
        return self._branch

    def upstream(self) -> Optional[str]:
        self.calls.append("upstream")
        return self._upstream

    def fetch(self, remote: str = "origin") -> OperationResult:
        self.calls.append(f"fetch {remote}")
        return OperationResult(self.fetch_success, OperationType.FETCH, "fetch")

    def rev_list_count(self, revision_range: str) -> int:
        self.calls.append(f"rev-list {revision_range}")
        return self.ahead if revision_range == "@{u}..HEAD" else self.behind

    def diff_name_status(self, cached: bool = False) -> list[str]:
        self.calls.append("diff")
        if cached:
            return [f"M\tstaged{i}" for i in range(self.staged)]
        return [f"R100\told{i}\tnew{i}" for i in range(self.moved)]

    def stash_list(self) -> list[str]:
        self.calls.append("stash")
        return [f"stash@{{{i}}}: WIP" for i in range(self.stashed)]

    def untracked_files(self) -> list[str]:
        return [f"new{i}.txt" for i in range(self.untracked)]

    def modified_files(self) -> list[str]:
        return [f"mod{i}.txt" for i in range(self.modified)]

    def ref_exists(self, ref: str) -> bool:
        return ref in self.refs

    def commit_timestamp(self, ref: str) -> Optional[int]:
        return self.timestamps.get(ref)

    def pull(self, fast_forward_only: bool = True) -> OperationResult:
        self.calls.append("pull")
        if self.pull_success:
            return OperationResult(True, OperationType.PULL, "Pulled")
        return OperationResult(False, OperationType.PULL, "Pull failed", RuntimeError("not possible to fast-forward"))


def _classify(repo: FakeWorkingCopy, **config) -> RepoStatus:
    classifier = StatusClassifier(NullOutputHandler(), StatusConfig(progress=False, **config))
    return classifier.classify(repo)


# --- StatusClassifier ---

class TestClassification:
    def test_behind_only_needs_pull(self):
        status = _classify(FakeWorkingCopy(behind=3))
        assert status.outcome == StatusOutcome.NEEDS_PULL
        assert status.signals.behind == 3

    def test_behind_only_pulled_in_pull_mode(self):
        repo = FakeWorkingCopy(behind=3)
        status = _classify(repo, pull=True)
        assert status.outcome == StatusOutcome.PULLED
        assert "pull" in repo.calls

    def test_needs_pull_does_not_pull(self):
        repo = FakeWorkingCopy(behind=3)
        _classify(repo)
        assert "pull" not in repo.calls

    def test_pull_failure_is_error(self):
        repo = FakeWorkingCopy(behind=1)
        repo.pull_success = False
        status = _classify(repo, pull=True)
        assert status.outcome == StatusOutcome.ERROR
        assert "fast-forward" in status.details

    def test_ahead_requires_review(self):
        status = _classify(FakeWorkingCopy(ahead=2))
        assert status.outcome == StatusOutcome.REQUIRES_REVIEW
        assert status.signals.pending_push == 2
        assert "2 pending push" in status.details

    def test_untracked_requires_review(self):
        status = _classify(FakeWorkingCopy(untracked=1))
        assert status.outcome == StatusOutcome.REQUIRES_REVIEW
        assert "1 untracked" in status.details

    @pytest.mark.parametrize("signal", ["stashed", "staged", "untracked", "modified", "moved"])
    def test_every_dirtiness_signal_requires_review(self, signal):
        repo = FakeWorkingCopy(behind=2, **{signal: 1})
        status = _classify(repo, pull=True)
        assert status.outcome == StatusOutcome.REQUIRES_REVIEW
        assert "pull" not in repo.calls

    def test_diverged_requires_review(self):
        status = _classify(FakeWorkingCopy(ahead=1, behind=1))
        assert status.outcome == StatusOutcome.REQUIRES_REVIEW
        assert status.signals.diverged is True
        assert "diverged" in status.details

    def test_clean(self):
        status = _classify(FakeWorkingCopy())
        assert status.outcome == StatusOutcome.CLEAN
        assert status.behind_main is False

    def test_missing_upstream_short_circuits(self):
        repo = FakeWorkingCopy(upstream=None, ahead=5, untracked=3)
        status = _classify(repo)
        assert status.outcome == StatusOutcome.ERROR
        assert status.signals is None
        assert repo.calls == ["upstream"]

    def test_fetch_failure_is_not_fatal(self):
        repo = FakeWorkingCopy(behind=1)
        repo.fetch_success = False
        status = _classify(repo)
        assert status.outcome == StatusOutcome.NEEDS_PULL

    def test_fetches_configured_remote(self):
        repo = FakeWorkingCopy()
        _classify(repo, remote_name="upstream")
        assert "fetch upstream" in repo.calls


# --- UpToDateStrategy: behind main branch ---

class TestBehindMain:
    def _feature_repo(self) -> FakeWorkingCopy:
        repo = FakeWorkingCopy(branch="feature/x", upstream="origin/feature/x")
        repo.timestamps["feature/x"] = 1000
        return repo

    def test_feature_older_than_origin_main(self):
        repo = self._feature_repo()
        repo.refs.add("refs/remotes/origin/main")
        repo.timestamps["origin/main"] = 2000
        status = _classify(repo)
        assert status.outcome == StatusOutcome.CLEAN_BUT_BEHIND_MAIN
        assert status.behind_main is True

    def test_feature_older_than_origin_master(self):
        repo = self._feature_repo()
        repo.refs.add("refs/remotes/origin/master")
        repo.timestamps["origin/master"] = 2000
        status = _classify(repo)
        assert status.outcome == StatusOutcome.CLEAN_BUT_BEHIND_MAIN

    def test_feature_newer_than_main_is_clean(self):
        repo = self._feature_repo()
        repo.refs.add("refs/remotes/origin/main")
        repo.timestamps["origin/main"] = 500
        assert _classify(repo).outcome == StatusOutcome.CLEAN

    def test_same_timestamp_is_clean(self):
        repo = self._feature_repo()
        repo.refs.add("refs/remotes/origin/main")
        repo.timestamps["origin/main"] = 1000
        assert _classify(repo).outcome == StatusOutcome.CLEAN

    def test_no_main_branch_falls_through_to_clean(self):
        repo = self._feature_repo()
        repo.timestamps["origin/main"] = 2000  # ref itself does not exist
        assert _classify(repo).outcome == StatusOutcome.CLEAN

    @pytest.mark.parametrize("branch", ["main", "master"])
    def test_main_branches_never_compared(self, branch):
        repo = FakeWorkingCopy(branch=branch)
        repo.refs.update({"refs/remotes/origin/main", "refs/remotes/origin/master"})
        repo.timestamps.update({branch: 1, "origin/main": 2000, "origin/master": 2000})
        assert _classify(repo).outcome == StatusOutcome.CLEAN


# --- Individual strategies ---

class TestStrategyMatching:
    def _make(self, cls, **config):
        return cls(FakeWorkingCopy(), NullOutputHandler(), StatusConfig(**config))

    def test_review_handles_unsafe(self):
        strategy = self._make(RequiresReviewStrategy)
        assert strategy.can_handle(StatusSignals(ahead=1)) is True
        assert strategy.can_handle(StatusSignals(behind=1)) is False

    def test_up_to_date_handles_safe_not_behind(self):
        strategy = self._make(UpToDateStrategy)
        assert strategy.can_handle(StatusSignals()) is True
        assert strategy.can_handle(StatusSignals(behind=1)) is False
        assert strategy.can_handle(StatusSignals(staged=1)) is False

    def test_fast_forward_handles_safe_behind(self):
        strategy = self._make(FastForwardStrategy)
        assert strategy.can_handle(StatusSignals(behind=4)) is True
        assert strategy.can_handle(StatusSignals(behind=4, modified=1)) is False
        assert strategy.can_handle(StatusSignals()) is False


# --- Signal collection and detail rows ---

class TestSignals:
    def test_collect_signals(self):
        repo = FakeWorkingCopy(branch="dev", ahead=1, behind=2, stashed=3, staged=4,
                               untracked=5, modified=6, moved=7)
        signals = collect_signals(repo)
        assert signals == StatusSignals(branch="dev", ahead=1, behind=2, stashed=3, staged=4,
                                        untracked=5, modified=6, moved=7)

    def test_clean_has_no_details_when_not_verbose(self):
        status = RepoStatus(Path("/r"), StatusOutcome.CLEAN, StatusSignals(branch="main"))
        assert detail_lines(status, verbose=False) == []

    def test_verbose_shows_every_signal(self):
        status = RepoStatus(Path("/r"), StatusOutcome.CLEAN, StatusSignals(branch="main"))
        labels = [label for label, _, _ in detail_lines(status, verbose=True)]
        assert labels[0] == "Branch:"
        assert "Commits ahead:" in labels
        assert "Commits behind:" in labels
        assert "Diverged:" in labels
        assert "Untracked files:" in labels
        assert "Pending push (commits):" in labels

    def test_review_shows_only_non_zero_signals(self):
        status = RepoStatus(Path("/r"), StatusOutcome.REQUIRES_REVIEW,
                            StatusSignals(branch="main", untracked=2))
        rows = detail_lines(status, verbose=False)
        assert rows == [("Untracked files:", "2", "error")]

    def test_missing_upstream_detail(self):
        status = RepoStatus(Path("/r"), StatusOutcome.ERROR, details="missing upstream")
        assert detail_lines(status, verbose=False) == [("Upstream:", "missing upstream", "error")]


class TestReport:
    def test_verbose_branch_row_is_highlighted(self, output):
        orchestrator = StatusOrchestrator(StatusConfig(verbose=True, progress=False), output)
        status = RepoStatus(Path("/r"), StatusOutcome.CLEAN, StatusSignals(branch="main"))
        orchestrator.report(status, "./r")

        assert output.messages[0] == ('info', "./r [CLEAN]", 0)
        level, message, indent = output.messages[1]
        assert level == 'highlight'
        assert message.startswith("Branch:")
        assert message.endswith("main")
        assert indent == 1

    def test_detail_rows_keep_their_level(self, output):
        orchestrator = StatusOrchestrator(StatusConfig(progress=False), output)
        status = RepoStatus(Path("/r"), StatusOutcome.REQUIRES_REVIEW,
                            StatusSignals(branch="main", untracked=2))
        orchestrator.report(status, "./r")

        assert [(level, indent) for level, _, indent in output.messages[1:]] == [('error', 1)]
