"""SummaryReporter: generates and displays the final report."""

from __future__ import annotations

from pygit_workstation.models import (
    ReconcileConfig,
    ReconcileResult,
    RepoStatus,
    StatusConfig,
    StatusOutcome,
    StatusResult,
)
from pygit_workstation.output import SECTION_WIDTH
from pygit_workstation.protocols import OutputHandler


class SummaryReporter:
    """Generates and displays summary reports"""

    def __init__(self, output: OutputHandler):
        """Create a reporter that writes to the given output handler."""
        self.output = output

    def _banner(self, title: str) -> None:
        self.output.section("╔" + "=" * SECTION_WIDTH + "╗")
        self.output.info("║" + title.center(SECTION_WIDTH) + "║")
        self.output.info("╚" + "=" * SECTION_WIDTH + "╝")
        self.output.info("")

    def print_reconcile_summary(self, result: ReconcileResult, config: ReconcileConfig):
        """Print what was cloned, configured and what failed."""
        self._banner("SUMMARY REPORT")
        self.output.info(f"Accounts processed: {result.accounts_processed}")
        self.output.info(f"Repositories cloned: {len(result.cloned)}")
        self.output.info(f"Repositories configured: {len(result.configured)}")
        if result.skipped:
            self.output.warning(f"Repositories skipped: {len(result.skipped)}")
        self.output.info("")

        if result.has_issues():
            self.output.warning("⚠️  ATTENTION REQUIRED")
            self.output.info("-" * SECTION_WIDTH)
            for issue in result.issues:
                target = f"{issue.account}/{issue.repo}" if issue.repo else issue.account
                self.output.info(f"  \U0001f4c1 {target}")
                self.output.info(f"     ↳ {issue.details}")
        else:
            self.output.success("✅ ALL REPOSITORIES MATCH THE DECLARATION")

        if config.dry_run:
            self.output.info("")
            self.output.info("\U0001f50d This was a DRY RUN - nothing was changed")

        self.output.info("")
        self.output.info("=" * SECTION_WIDTH)

    def print_status_summary(self, result: StatusResult, config: StatusConfig):
        """Print per-outcome counts and the repositories that need attention."""
        self._banner("SUMMARY REPORT")
        self.output.info(f"Total repositories analysed: {result.repos_processed}")
        if result.skipped_nested:
            self.output.info(f"Nested repositories skipped: {len(result.skipped_nested)}")
        self.output.info("")

        counts = result.counts()
        for outcome in StatusOutcome:
            if counts[outcome]:
                self.output.info(f"{outcome.label}: {counts[outcome]}")

        attention = result.by_outcome(StatusOutcome.ERROR) + result.by_outcome(StatusOutcome.REQUIRES_REVIEW)
        if attention:
            self.output.info("")
            self.output.warning("⚠️  ATTENTION REQUIRED")
            self.output.info("-" * SECTION_WIDTH)
            for status in attention:
                self._print_status(status)
        elif not result.by_outcome(StatusOutcome.NEEDS_PULL):
            self.output.info("")
            self.output.success("✅ ALL REPOSITORIES ARE IN SYNC!")

        if result.by_outcome(StatusOutcome.NEEDS_PULL) and not config.pull:
            self.output.info("")
            self.output.info("\U0001f4a1 Run with 'pull' to fast-forward the repositories that need it")

        self.output.info("")
        self.output.info("=" * SECTION_WIDTH)

    def _print_status(self, status: RepoStatus):
        self.output.info(f"  \U0001f4c1 {status.path}")
        self.output.info(f"     ↳ {status.outcome.label}: {status.details}")
