"""SSH credential handling: key pairs, managed client config fragment, agent loading."""

from __future__ import annotations

import getpass
import logging
import socket
import subprocess
from dataclasses import dataclass
from pathlib import Path

from pygit_workstation.environment import run_command
from pygit_workstation.errors import StructuralDirectoryError
from pygit_workstation.models import Account, OperationResult, OperationType
from pygit_workstation.protocols import OutputHandler

logger = logging.getLogger(__name__)

FRAGMENT_NAME = 'git-config-repos.conf'
FRAGMENT_HEADER = (
    "# Managed by pygit-config-repos, regenerated on every run.\n"
    "# Edit the git-config-repos declaration instead of this file.\n"
)


@dataclass(frozen=True)
class SshHostEntry:
    """One Host stanza of the managed fragment"""
    alias: str
    hostname: str
    identity_file: Path

    def render(self) -> str:
        return (
            f"Host {self.alias}\n"
            f"    HostName {self.hostname}\n"
            f"    User git\n"
            f"    IdentityFile {self.identity_file}\n"
            f"    IdentitiesOnly yes\n"
        )


def key_comment(account: Account) -> str:
    """Comment embedded in generated keys: operator, host, account user and remote."""
    return f"{getpass.getuser()}@{socket.gethostname()} {account.username} {account.url}"


class SshKeyManager:
    """Generates per-account key pairs once and loads them into the agent"""

    def __init__(self, ssh_folder: Path):
        self.ssh_folder = ssh_folder

    def key_path(self, account: Account) -> Path:
        """Private key path, derived from the account's host alias."""
        return self.ssh_folder / f"id_{account.ssh_host}"

    def ensure_key(self, account: Account) -> OperationResult:
        """Generate the key pair if it does not exist yet. Keys are never rotated."""
        path = self.key_path(account)
        if path.exists():
            return OperationResult(True, OperationType.SSH_KEYGEN, f"Key {path.name} exists")
        try:
            run_command([
                'ssh-keygen', '-q',
                '-t', account.ssh_type,
                '-N', '',
                '-C', key_comment(account),
                '-f', str(path),
            ], check=True)
            return OperationResult(True, OperationType.SSH_KEYGEN, f"Generated {path.name}")
        except (subprocess.CalledProcessError, OSError) as e:
            logger.warning("ssh-keygen failed for %s: %s", path, e)
            return OperationResult(False, OperationType.SSH_KEYGEN, f"Could not generate {path.name}", e)

    def load_into_agent(self, account: Account) -> OperationResult:
        """Add the key to the running ssh-agent. Loading an already loaded key is harmless."""
        path = self.key_path(account)
        try:
            run_command(['ssh-add', str(path)], check=True)
            return OperationResult(True, OperationType.SSH_AGENT, f"Loaded {path.name}")
        except (subprocess.CalledProcessError, OSError) as e:
            logger.warning("ssh-add failed for %s: %s", path, e)
            return OperationResult(False, OperationType.SSH_AGENT, f"Could not load {path.name}", e)


class SshConfigWriter:
    """Owns the managed SSH config fragment and its Include hook"""

    def __init__(self, ssh_folder: Path):
        self.ssh_folder = ssh_folder

    @property
    def fragment_path(self) -> Path:
        return self.ssh_folder / FRAGMENT_NAME

    @property
    def main_config_path(self) -> Path:
        return self.ssh_folder / 'config'

    @property
    def include_line(self) -> str:
        return f"Include {self.fragment_path}"

    def render(self, entries: list[SshHostEntry]) -> str:
        return FRAGMENT_HEADER + ''.join("\n" + entry.render() for entry in entries)

    def write_fragment(self, entries: list[SshHostEntry]) -> OperationResult:
        """Regenerate the whole fragment from the given entries."""
        try:
            self.fragment_path.write_text(self.render(entries))
            self.fragment_path.chmod(0o600)
            return OperationResult(True, OperationType.SSH_CONFIG, f"Wrote {self.fragment_path}")
        except OSError as e:
            return OperationResult(False, OperationType.SSH_CONFIG, f"Could not write {self.fragment_path}", e)

    def has_include(self) -> bool:
        if not self.main_config_path.exists():
            return False
        for line in self.main_config_path.read_text().splitlines():
            parts = line.strip().split(None, 1)
            if len(parts) == 2 and parts[0].lower() == 'include' and parts[1].strip() == str(self.fragment_path):
                return True
        return False

    def ensure_include(self) -> OperationResult:
        """Insert the Include directive at the top of the user's ssh config, only if absent.

        Include must precede every Host block, otherwise it would only apply to the last one.
        """
        try:
            if self.has_include():
                return OperationResult(True, OperationType.SSH_CONFIG, "Include already present")
            existing = self.main_config_path.read_text() if self.main_config_path.exists() else ""
            content = f"{self.include_line}\n\n{existing}" if existing else f"{self.include_line}\n"
            self.main_config_path.write_text(content)
            self.main_config_path.chmod(0o600)
            return OperationResult(True, OperationType.SSH_CONFIG, f"Added include to {self.main_config_path}")
        except OSError as e:
            return OperationResult(False, OperationType.SSH_CONFIG, f"Could not update {self.main_config_path}", e)


class SshPreflight:
    """Per-account SSH preparation: key pair, Host stanza and agent loading"""

    def __init__(
        self,
        ssh_folder: Path,
        output: OutputHandler,
        keys: SshKeyManager | None = None,
        writer: SshConfigWriter | None = None,
    ):
        self.ssh_folder = ssh_folder
        self.output = output
        self.keys = keys or SshKeyManager(ssh_folder)
        self.writer = writer or SshConfigWriter(ssh_folder)
        self.entries: list[SshHostEntry] = []

    def prepare_folder(self) -> None:
        """Create the ssh folder (0700). Raises StructuralDirectoryError on failure."""
        try:
            self.ssh_folder.mkdir(mode=0o700, parents=True, exist_ok=True)
        except OSError as e:
            raise StructuralDirectoryError(self.ssh_folder, e) from e

    def ensure(self, account: Account) -> list[OperationResult]:
        """Ensure the account's key exists, register its Host stanza and load it into the agent."""
        results = []
        key_result = self.keys.ensure_key(account)
        results.append(key_result)
        level = 'success' if key_result.success else 'error'
        self.output.status(f"SSH key {account.ssh_host}: {key_result.message}",
                           'OK' if key_result.success else 'ERROR', level)
        if not key_result.success:
            return results

        self.entries.append(SshHostEntry(
            alias=account.ssh_host,
            hostname=account.ssh_hostname,
            identity_file=self.keys.key_path(account),
        ))

        agent_result = self.keys.load_into_agent(account)
        results.append(agent_result)
        if not agent_result.success:
            self.output.warning(f"⚠ {agent_result.message} (is ssh-agent running?)", indent=1)
        return results

    def finalize(self) -> list[OperationResult]:
        """Write the fragment with every registered stanza and hook it into the main config."""
        results = [self.writer.write_fragment(self.entries), self.writer.ensure_include()]
        for result in results:
            if result.success:
                self.output.debug(result.message)
            else:
                self.output.error(f"✗ {result.message}", indent=1)
        return results
