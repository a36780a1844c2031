"""HTTPS credential handling: platform store probes, git credential helper, pre-flight."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Callable

from pygit_workstation.environment import is_macos, is_wsl2, run_command
from pygit_workstation.models import Account, OperationResult, OperationType
from pygit_workstation.protocols import CredentialHelper, CredentialStoreProbe, OutputHandler

logger = logging.getLogger(__name__)


class KeychainProbe:
    """macOS login keychain, as populated by Git Credential Manager."""

    name = 'keychain'

    def has_credential(self, credential_url: str, username: str) -> bool:
        try:
            result = run_command([
                'security', 'find-generic-password',
                '-s', f'git:{credential_url}', '-a', username,
            ])
        except OSError as e:
            logger.warning("security not available: %s", e)
            return False
        return result.returncode == 0


class SecretServiceProbe:
    """freedesktop Secret Service (GNOME keyring, KWallet) via secret-tool."""

    name = 'secret-service'

    def has_credential(self, credential_url: str, username: str) -> bool:
        try:
            result = run_command([
                'secret-tool', 'search', '--all',
                'service', f'git:{credential_url}', 'account', username,
            ])
        except OSError as e:
            logger.warning("secret-tool not available: %s", e)
            return False
        output = result.stdout + result.stderr
        return result.returncode == 0 and credential_url in output


class WindowsCredentialManagerProbe:
    """Windows Credential Manager reached from WSL2 through cmdkey."""

    name = 'windows-credential-manager'

    def has_credential(self, credential_url: str, username: str) -> bool:
        try:
            result = run_command(['cmd.exe', '/c', 'cmdkey', f'/list:git:{credential_url}'])
        except OSError as e:
            logger.warning("cmd.exe not available: %s", e)
            return False
        return result.returncode == 0 and username in result.stdout


def select_credential_probe() -> CredentialStoreProbe:
    """Pick the credential store probe for the running platform."""
    if is_macos():
        return KeychainProbe()
    if is_wsl2():
        return WindowsCredentialManagerProbe()
    return SecretServiceProbe()


def parse_credential(text: str) -> dict[str, str]:
    """Parse git credential key=value lines."""
    credential = {}
    for line in text.splitlines():
        if '=' not in line:
            continue
        key, value = line.split('=', 1)
        credential[key.strip()] = value
    return credential


def format_credential(credential: dict[str, str]) -> str:
    """Serialize a credential for the git credential protocol (blank line terminated)."""
    return ''.join(f"{key}={value}\n" for key, value in credential.items()) + "\n"


class GitCredentialHelper:
    """Talks to the configured credential helper through 'git credential'."""

    def __init__(self, git_executable: str = 'git'):
        self.git_executable = git_executable

    def fill(self, credential_url: str, username: str) -> dict[str, str]:
        """Ask the helper for a credential, which may start an interactive login.

        Raises subprocess.CalledProcessError if the helper fails.
        """
        result = run_command(
            [self.git_executable, 'credential', 'fill'],
            input_text=format_credential({'url': credential_url, 'username': username}),
            check=True,
        )
        return parse_credential(result.stdout)

    def approve(self, credential: dict[str, str]) -> OperationResult:
        """Store a credential obtained from fill."""
        try:
            run_command(
                [self.git_executable, 'credential', 'approve'],
                input_text=format_credential(credential),
                check=True,
            )
            return OperationResult(True, OperationType.CREDENTIAL, "Credential stored")
        except (subprocess.CalledProcessError, OSError) as e:
            return OperationResult(False, OperationType.CREDENTIAL, "Credential approve failed", e)


class CredentialPreflight:
    """Makes sure the credential store holds an entry for an HTTPS account.

    When the entry is missing the operator is asked to get a browser ready and
    the helper's fill/approve round trip is performed. The prompt blocks until
    the operator confirms or interrupts the run.
    """

    def __init__(
        self,
        probe: CredentialStoreProbe,
        helper: CredentialHelper,
        output: OutputHandler,
        prompt: Callable[[str], str] = input,
    ):
        self.probe = probe
        self.helper = helper
        self.output = output
        self.prompt = prompt

    def ensure(self, account: Account) -> OperationResult:
        """Check the store and run the interactive handshake if needed."""
        url = account.credential_base_url
        message = f"Checking credentials of {account.key} > {account.username}"
        if self.probe.has_credential(url, account.username):
            self.output.status(message, 'OK', 'success')
            return OperationResult(True, OperationType.CREDENTIAL, "Credential already stored")

        self.output.status(message, 'WARNING', 'warning')
        self.prompt(f"Prepare your browser to authenticate {account.key} > {account.username} - (Enter/Ctrl-C). ")

        try:
            credential = self.helper.fill(url, account.username)
        except (subprocess.CalledProcessError, OSError) as e:
            self.output.error(f"✗ Credential helper failed for {account.key}", indent=1)
            return OperationResult(False, OperationType.CREDENTIAL, "Credential fill failed", e)

        if not credential.get('password'):
            self.output.info(f"{account.key}/{account.username} already has credentials in the store", indent=1)
            return OperationResult(True, OperationType.CREDENTIAL, "Nothing to store")

        result = self.helper.approve(credential)
        if result.success:
            self.output.status("    Adding credentials to the credential store", 'OK', 'success')
        else:
            self.output.status("    Adding credentials to the credential store", 'ERROR', 'error')
        return result
