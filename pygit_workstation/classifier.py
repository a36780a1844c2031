"""StatusClassifier: computes the synchronization state of a single working copy."""

from __future__ import annotations

import logging

from pygit_workstation.models import RepoStatus, StatusConfig, StatusOutcome, StatusSignals
from pygit_workstation.protocols import OutputHandler, WorkingCopy
from pygit_workstation.strategies import (
    FastForwardStrategy,
    RequiresReviewStrategy,
    StatusStrategy,
    UpToDateStrategy,
)

logger = logging.getLogger(__name__)

OUTCOME_LEVELS = {
    StatusOutcome.ERROR: 'error',
    StatusOutcome.REQUIRES_REVIEW: 'warning',
    StatusOutcome.CLEAN: 'info',
    StatusOutcome.CLEAN_BUT_BEHIND_MAIN: 'warning',
    StatusOutcome.NEEDS_PULL: 'success',
    StatusOutcome.PULLED: 'action',
}

DIRTINESS_LABELS = {
    'stashed': "Stash entries:",
    'staged': "Staged files:",
    'untracked': "Untracked files:",
    'modified': "Modified files:",
    'moved': "Moved files:",
}


def collect_signals(repo: WorkingCopy) -> StatusSignals:
    """Read branch, ahead/behind counts and dirtiness counts from a working copy."""
    return StatusSignals(
        branch=repo.current_branch or '',
        ahead=repo.rev_list_count('@{u}..HEAD'),
        behind=repo.rev_list_count('HEAD..@{u}'),
        stashed=len(repo.stash_list()),
        staged=len(repo.diff_name_status(cached=True)),
        untracked=len(repo.untracked_files()),
        modified=len(repo.modified_files()),
        moved=sum(1 for line in repo.diff_name_status() if line.startswith('R')),
    )


def detail_lines(status: RepoStatus, verbose: bool) -> list[tuple[str, str, str]]:
    """Detail rows (label, value, level) shown under a status line.

    Verbose mode shows every signal; otherwise only the non-zero ones of non-clean outcomes.
    """
    if status.signals is None:
        if status.outcome is StatusOutcome.ERROR:
            return [("Upstream:", status.details or "missing upstream", 'error')]
        return []
    if not verbose and status.outcome is StatusOutcome.CLEAN:
        return []

    signals = status.signals
    rows: list[tuple[str, str, str]] = []
    if verbose:
        rows.append(("Branch:", signals.branch, 'highlight'))
    if verbose or signals.ahead:
        rows.append(("Commits ahead:", str(signals.ahead), 'error' if signals.ahead else 'info'))
    if verbose or signals.behind:
        rows.append(("Commits behind:", str(signals.behind), 'success' if signals.behind else 'info'))
    if verbose or signals.diverged:
        rows.append(("Diverged:", "yes" if signals.diverged else "no", 'error' if signals.diverged else 'info'))
    for label, count in signals.dirtiness.items():
        if verbose or count:
            rows.append((DIRTINESS_LABELS[label], str(count), 'error' if count else 'info'))
    if verbose or signals.pending_push:
        rows.append(("Pending push (commits):", str(signals.pending_push),
                     'error' if signals.pending_push else 'info'))
    if status.behind_main:
        rows.append(("Branch behind main branch:", "yes", 'error'))
    if status.outcome is StatusOutcome.ERROR and status.details:
        rows.append(("Error:", status.details, 'error'))
    return rows


class StatusClassifier:
    """Responsible for classifying a single working copy"""

    def __init__(self, output: OutputHandler, config: StatusConfig):
        """Create a classifier writing to output with the given configuration."""
        self.output = output
        self.config = config

    def strategies_for(self, repo: WorkingCopy) -> list[StatusStrategy]:
        """Strategies in evaluation order; the first match wins."""
        return [
            RequiresReviewStrategy(repo, self.output, self.config),
            UpToDateStrategy(repo, self.output, self.config),
            FastForwardStrategy(repo, self.output, self.config),
        ]

    def classify(self, repo: WorkingCopy) -> RepoStatus:
        """Fetch, collect signals and classify. No upstream short-circuits to ERROR."""
        upstream = repo.upstream()
        if upstream is None:
            return RepoStatus(repo.path, StatusOutcome.ERROR, details="missing upstream")

        fetch_result = repo.fetch(self.config.remote_name)
        if not fetch_result.success:
            # classify against whatever was fetched last time
            logger.info("fetch failed for %s, using local view", repo.path)

        signals = collect_signals(repo)
        for strategy in self.strategies_for(repo):
            if strategy.can_handle(signals):
                return strategy.classify(signals)
        # can_handle covers every combination of is_safe_state and behind
        raise AssertionError(f"no strategy for {signals}")
