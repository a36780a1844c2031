"""Runtime environment detection and external program checks."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import sys
from pathlib import Path

from pygit_workstation.errors import MissingDependencyError

logger = logging.getLogger(__name__)

PROC_VERSION = Path('/proc/version')


def is_macos() -> bool:
    return sys.platform == 'darwin' or sys.platform.startswith('freebsd')


def is_wsl2(proc_version: Path = PROC_VERSION) -> bool:
    """Return True when running a Linux userland under Windows WSL."""
    try:
        content = proc_version.read_text(errors='ignore')
    except OSError:
        return False
    lowered = content.lower()
    return 'microsoft' in lowered or 'wsl' in lowered


def is_github_actions() -> bool:
    """Return True when running inside a GitHub Actions job (plain text output)."""
    return bool(os.environ.get('GITHUB_ACTIONS'))


def missing_programs(programs: list[str]) -> list[str]:
    """Return the programs from the list that are not on PATH."""
    return [program for program in programs if shutil.which(program) is None]


def install_hint(programs: list[str]) -> list[str]:
    """Lines suggesting how to install the given programs."""
    names = ' '.join(programs)
    return [
        " linux:",
        f"       sudo apt update && sudo apt install -y {names}",
        " macos:",
        f"       brew update && brew install {names}",
        " windows: from a WSL2 session",
        f"       sudo apt update && sudo apt install -y {names}",
    ]


def run_command(args: list[str], input_text: str | None = None,
                check: bool = False) -> subprocess.CompletedProcess:
    """Run an external program and capture its text output."""
    logger.debug("running: %s", ' '.join(args))
    return subprocess.run(
        args,
        input=input_text,
        capture_output=True,
        text=True,
        check=check,
    )


def require_programs(programs: list[str]) -> None:
    """Raise MissingDependencyError if any program is not on PATH."""
    missing = missing_programs(programs)
    if missing:
        raise MissingDependencyError(missing)
