"""Concrete GitPython-based working copy implementation."""

from __future__ import annotations

import logging
from pathlib import Path

from git import GitCommandError, Git, Repo

from pygit_workstation.models import OperationResult, OperationType

logger = logging.getLogger(__name__)


def _lines(output: str) -> list[str]:
    return [line for line in output.splitlines() if line.strip()]


class GitPythonWorkingCopy:
    """Concrete implementation using GitPython"""

    def __init__(self, repo_path: Path):
        """Open a git working copy at the given path."""
        self._path = repo_path
        self._repo = Repo(repo_path)
        self._logger = logging.getLogger(__name__)

    def close(self) -> None:
        """Release underlying git resources."""
        self._repo.close()

    def __enter__(self) -> GitPythonWorkingCopy:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def path(self) -> Path:
        """Path to the working tree root."""
        return self._path

    @property
    def current_branch(self) -> str | None:
        """Name of the checked-out branch ('HEAD' when detached), or None without commits."""
        try:
            return self._repo.git.rev_parse('--abbrev-ref', 'HEAD')
        except GitCommandError:
            return None

    def upstream(self) -> str | None:
        """Upstream of the current branch (e.g. 'origin/main'), or None if not configured."""
        try:
            return self._repo.git.rev_parse('--symbolic-full-name', '--abbrev-ref', '@{u}') or None
        except GitCommandError:
            return None

    def fetch(self, remote: str = 'origin') -> OperationResult:
        """Quietly fetch from a remote."""
        try:
            self._repo.git.fetch(remote, '--quiet')
            return OperationResult(True, OperationType.FETCH, f"Fetched from {remote}")
        except GitCommandError as e:
            self._logger.debug("fetch %s failed in %s: %s", remote, self._path, e.stderr)
            return OperationResult(False, OperationType.FETCH, "Fetch failed", e)

    def rev_list_count(self, revision_range: str) -> int:
        """Number of commits in a revision range such as '@{u}..HEAD' (0 on error)."""
        try:
            return int(self._repo.git.rev_list('--count', revision_range) or 0)
        except (GitCommandError, ValueError):
            return 0

    def diff_name_status(self, cached: bool = False) -> list[str]:
        """Lines of 'git diff --name-status' for the worktree or, with cached=True, the index."""
        args = ['--cached', '--name-status'] if cached else ['--name-status']
        try:
            return _lines(self._repo.git.diff(*args))
        except GitCommandError:
            return []

    def stash_list(self) -> list[str]:
        """Entries of the stash, most recent first."""
        try:
            return _lines(self._repo.git.stash('list'))
        except GitCommandError:
            return []

    def untracked_files(self) -> list[str]:
        """Untracked files not covered by ignore rules."""
        try:
            return _lines(self._repo.git.ls_files('--others', '--exclude-standard'))
        except GitCommandError:
            return []

    def modified_files(self) -> list[str]:
        """Tracked files modified in the worktree but not staged."""
        try:
            return _lines(self._repo.git.ls_files('-m'))
        except GitCommandError:
            return []

    def ref_exists(self, ref: str) -> bool:
        """Return True if a fully qualified ref (e.g. 'refs/remotes/origin/main') exists."""
        try:
            self._repo.git.show_ref('--verify', '--quiet', ref)
            return True
        except GitCommandError:
            return False

    def commit_timestamp(self, ref: str) -> int | None:
        """Committer timestamp (seconds since epoch) of the tip of ref."""
        try:
            return int(self._repo.git.log('-1', '--format=%ct', ref))
        except (GitCommandError, ValueError):
            return None

    def pull(self, fast_forward_only: bool = True) -> OperationResult:
        """Pull the upstream of the current branch, fast-forward only by default."""
        args = ['--ff-only', '--quiet'] if fast_forward_only else ['--quiet']
        try:
            self._repo.git.pull(*args)
            return OperationResult(True, OperationType.PULL, "Pulled")
        except GitCommandError as e:
            self._logger.warning("pull failed in %s: %s", self._path, e.stderr)
            return OperationResult(False, OperationType.PULL, "Pull failed", e)

    def config_get(self, key: str) -> str | None:
        """Read a local config value."""
        try:
            return self._repo.git.config('--local', '--get', key)
        except GitCommandError:
            return None

    def config_set(self, key: str, value: str) -> OperationResult:
        """Write a local config value."""
        try:
            self._repo.git.config(key, value)
            return OperationResult(True, OperationType.CONFIG, f"Set {key}")
        except GitCommandError as e:
            self._logger.warning("git config %s failed in %s: %s", key, self._path, e.stderr)
            return OperationResult(False, OperationType.CONFIG, f"Could not set {key}", e)

    def remote_url(self, name: str = 'origin', push: bool = False) -> str | None:
        """Fetch (or push) URL of a remote, or None if the remote does not exist."""
        args = ['get-url', '--push', name] if push else ['get-url', name]
        try:
            return self._repo.git.remote(*args)
        except GitCommandError:
            return None

    def remote_set_url(self, name: str, url: str, push: bool = False) -> OperationResult:
        """Set the fetch (or push) URL of a remote, adding the remote when missing."""
        try:
            if name not in [r.name for r in self._repo.remotes]:
                self._repo.git.remote('add', name, url)
            if push:
                self._repo.git.remote('set-url', '--push', name, url)
            else:
                self._repo.git.remote('set-url', name, url)
            kind = "push" if push else "fetch"
            return OperationResult(True, OperationType.REMOTE, f"Set {name} {kind} URL")
        except GitCommandError as e:
            self._logger.warning("git remote set-url %s failed in %s: %s", name, self._path, e.stderr)
            return OperationResult(False, OperationType.REMOTE, f"Could not set {name} URL", e)


def clone_repository(url: str, destination: Path) -> OperationResult:
    """Clone url into destination. Returns a failed result instead of raising."""
    try:
        repo = Repo.clone_from(url, str(destination))
        repo.close()
        return OperationResult(True, OperationType.CLONE, f"Cloned into {destination}")
    except GitCommandError as e:
        logger.warning("clone of %s failed: %s", url, e.stderr)
        return OperationResult(False, OperationType.CLONE, "Clone failed", e)


class GlobalGitConfig:
    """Writes user-level (--global) git configuration"""

    def __init__(self):
        self._git = Git()

    def get(self, key: str) -> str | None:
        try:
            return self._git.config('--global', '--get', key)
        except GitCommandError:
            return None

    def set(self, key: str, value: str) -> OperationResult:
        """Set a --global config value."""
        try:
            self._git.config('--global', key, value)
            return OperationResult(True, OperationType.CONFIG, f"Set global {key}")
        except GitCommandError as e:
            logger.warning("git config --global %s failed: %s", key, e.stderr)
            return OperationResult(False, OperationType.CONFIG, f"Could not set global {key}", e)
