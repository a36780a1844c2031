"""Status strategies: one class per classification outcome."""

from __future__ import annotations

from abc import ABC, abstractmethod

from pygit_workstation.models import RepoStatus, StatusConfig, StatusOutcome, StatusSignals
from pygit_workstation.protocols import OutputHandler, WorkingCopy


def describe_signals(signals: StatusSignals) -> list[str]:
    """Human-readable list of every non-zero signal that blocks a safe pull."""
    parts = []
    if signals.ahead:
        parts.append(f"{signals.ahead} ahead")
    if signals.behind:
        parts.append(f"{signals.behind} behind")
    if signals.diverged:
        parts.append("diverged")
    for label, count in signals.dirtiness.items():
        if count:
            parts.append(f"{count} {label}")
    if signals.pending_push:
        parts.append(f"{signals.pending_push} pending push")
    return parts


class StatusStrategy(ABC):
    """Abstract strategy for classifying a working copy."""

    def __init__(self, repo: WorkingCopy, output: OutputHandler, config: StatusConfig):
        """Initialize with a working copy, output handler, and status configuration."""
        self.repo = repo
        self.output = output
        self.config = config

    @abstractmethod
    def can_handle(self, signals: StatusSignals) -> bool:
        """Return True if this strategy applies to the given signals."""
        pass

    @abstractmethod
    def classify(self, signals: StatusSignals) -> RepoStatus:
        """Produce the status record, performing the outcome's action if any."""
        pass


class RequiresReviewStrategy(StatusStrategy):
    """Anything that is not a plain, mergeable state needs a human."""

    def can_handle(self, signals: StatusSignals) -> bool:
        return not signals.is_safe_state

    def classify(self, signals: StatusSignals) -> RepoStatus:
        return RepoStatus(
            self.repo.path,
            StatusOutcome.REQUIRES_REVIEW,
            signals,
            details=', '.join(describe_signals(signals)),
        )


class UpToDateStrategy(StatusStrategy):
    """Safe and nothing to pull: clean, unless a feature branch lags behind the main branch."""

    def can_handle(self, signals: StatusSignals) -> bool:
        return signals.is_safe_state and signals.behind == 0

    def classify(self, signals: StatusSignals) -> RepoStatus:
        if self.is_behind_main(signals.branch):
            return RepoStatus(
                self.repo.path,
                StatusOutcome.CLEAN_BUT_BEHIND_MAIN,
                signals,
                behind_main=True,
                details=f"{signals.branch} is older than the main branch",
            )
        return RepoStatus(self.repo.path, StatusOutcome.CLEAN, signals)

    def is_behind_main(self, branch: str) -> bool:
        """True if branch's tip commit is strictly older than the tip of the remote main branch.

        Only applies off the main branches, and only against whichever remote main branch exists.
        """
        if not branch or branch in self.config.main_branches:
            return False
        remote = self.config.remote_name
        for main_branch in self.config.main_branches:
            if not self.repo.ref_exists(f"refs/remotes/{remote}/{main_branch}"):
                continue
            main_date = self.repo.commit_timestamp(f"{remote}/{main_branch}")
            branch_date = self.repo.commit_timestamp(branch)
            if main_date is not None and branch_date is not None and branch_date < main_date:
                return True
        return False


class FastForwardStrategy(StatusStrategy):
    """Safe and behind upstream: pull when asked to, otherwise report it."""

    def can_handle(self, signals: StatusSignals) -> bool:
        return signals.is_safe_state and signals.behind > 0

    def classify(self, signals: StatusSignals) -> RepoStatus:
        if not self.config.pull:
            return RepoStatus(
                self.repo.path,
                StatusOutcome.NEEDS_PULL,
                signals,
                details=f"{signals.behind} commits behind",
            )

        self.output.debug(f"Fast-forwarding {self.repo.path}")
        result = self.repo.pull(fast_forward_only=True)
        if result.success:
            return RepoStatus(
                self.repo.path,
                StatusOutcome.PULLED,
                signals,
                details=f"{signals.behind} commits pulled",
            )
        reason = str(result.error).strip() if result.error else result.message
        return RepoStatus(
            self.repo.path,
            StatusOutcome.ERROR,
            signals,
            details=f"Pull failed: {reason}",
        )
