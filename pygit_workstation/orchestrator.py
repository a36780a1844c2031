"""StatusOrchestrator: discovers working copies and classifies them one by one."""

from __future__ import annotations

import logging
from pathlib import Path

from git import InvalidGitRepositoryError, NoSuchPathError
from tqdm import tqdm

from pygit_workstation.classifier import OUTCOME_LEVELS, StatusClassifier, detail_lines
from pygit_workstation.models import RepoStatus, StatusConfig, StatusOutcome, StatusResult
from pygit_workstation.output import format_detail
from pygit_workstation.protocols import OutputHandler
from pygit_workstation.repository import GitPythonWorkingCopy
from pygit_workstation.scanner import RepositoryScanner, is_inside_accepted

logger = logging.getLogger(__name__)


class StatusOrchestrator:
    """Main orchestrator of a status run"""

    def __init__(self, config: StatusConfig, output: OutputHandler):
        """Create an orchestrator with the given config and output handler."""
        self.config = config
        self.output = output
        self.scanner = RepositoryScanner(config.exclude_patterns)
        self.classifier = StatusClassifier(output, config)

    def run(self, search_dir: Path) -> StatusResult:
        """Discover working copies under search_dir and classify the outermost ones."""
        result = StatusResult()
        repos = list(self.scanner.find_repositories(search_dir))

        if not repos:
            self.output.warning(f"No git repositories found in {search_dir}")
            return result

        accepted: list[Path] = []
        with tqdm(total=len(repos), desc="Checking", unit="repo", leave=False,
                  disable=not self.config.progress) as pbar:
            for repo_path in repos:
                pbar.set_postfix_str(repo_path.name, refresh=True)
                if is_inside_accepted(repo_path, accepted):
                    logger.debug("skipping nested repository %s", repo_path)
                    result.skipped_nested.append(repo_path)
                else:
                    accepted.append(repo_path)
                    status = self._classify_single_repo(repo_path)
                    result.add(status)
                    self.report(status, self._display_name(repo_path, search_dir))
                pbar.update(1)

        return result

    def _classify_single_repo(self, repo_path: Path) -> RepoStatus:
        """Open a working copy and classify it, turning open errors into ERROR rows."""
        try:
            with GitPythonWorkingCopy(repo_path) as repo:
                return self.classifier.classify(repo)
        except (InvalidGitRepositoryError, NoSuchPathError):
            return RepoStatus(repo_path, StatusOutcome.ERROR, details="not a valid git repository")

    @staticmethod
    def _display_name(repo_path: Path, search_dir: Path) -> str:
        try:
            relative = repo_path.relative_to(search_dir)
        except ValueError:
            return str(repo_path)
        return search_dir.resolve().name if str(relative) == '.' else f"./{relative}"

    def report(self, status: RepoStatus, name: str) -> None:
        """Print the status line of one repository followed by its detail rows."""
        dashes = self.config.verbose or status.outcome is not StatusOutcome.CLEAN
        self.output.status(name, status.outcome.label, OUTCOME_LEVELS[status.outcome], dashes=dashes)
        for label, value, level in detail_lines(status, self.config.verbose):
            padded, text = format_detail(label, value)
            self.output.line(f"{padded}{text}", level, indent=1)
