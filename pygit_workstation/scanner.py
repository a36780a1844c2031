"""Repository scanner: finds git working copies under a directory."""

from __future__ import annotations

import os
from collections.abc import Iterable, Iterator
from pathlib import Path


def is_inside_accepted(repo_path: Path, accepted: Iterable[Path]) -> bool:
    """Return True if repo_path is one of, or lies below, an already accepted repository."""
    return any(repo_path == parent or repo_path.is_relative_to(parent) for parent in accepted)


def select_outermost(repo_paths: Iterable[Path]) -> tuple[list[Path], list[Path]]:
    """Split discovered paths into (accepted, nested).

    Paths must arrive parents first, as find_repositories yields them.
    """
    accepted: list[Path] = []
    nested: list[Path] = []
    for repo_path in repo_paths:
        if is_inside_accepted(repo_path, accepted):
            nested.append(repo_path)
        else:
            accepted.append(repo_path)
    return accepted, nested


class RepositoryScanner:
    """Responsible for finding git working copies"""

    def __init__(self, exclude_patterns: list[str] = None):
        """Create a scanner with optional substring-based exclude patterns."""
        self.exclude_patterns = exclude_patterns or []

    def find_repositories(self, search_dir: Path) -> Iterator[Path]:
        """Walk the whole tree depth-first in lexical order and yield every directory holding a .git directory.

        Nested working copies are yielded too, always after the repository that contains them.
        Symlinks are not followed.
        """
        seen_real_paths: set[str] = set()
        for dirpath, dirnames, _filenames in os.walk(search_dir, followlinks=False):
            current = Path(dirpath)

            if self._should_exclude(current):
                dirnames.clear()
                continue

            has_git_dir = '.git' in dirnames
            dirnames[:] = sorted(d for d in dirnames if d != '.git')

            if has_git_dir:
                real_path = str(current.resolve())
                if real_path not in seen_real_paths:
                    seen_real_paths.add(real_path)
                    yield current

    def _should_exclude(self, repo_path: Path) -> bool:
        """Return True if any exclude pattern is a substring of the path."""
        path_str = str(repo_path)
        return any(pattern in path_str for pattern in self.exclude_patterns)
