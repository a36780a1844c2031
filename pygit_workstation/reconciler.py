"""RepositoryReconciler: converges the local checkout tree to the declaration."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from git import InvalidGitRepositoryError, NoSuchPathError
from tqdm import tqdm

from pygit_workstation.credentials import CredentialPreflight, GitCredentialHelper, select_credential_probe
from pygit_workstation.errors import StructuralDirectoryError
from pygit_workstation.models import (
    Account,
    CredentialType,
    Declaration,
    OperationResult,
    OperationType,
    ReconcileConfig,
    ReconcileIssue,
    ReconcileResult,
    RepoEntry,
)
from pygit_workstation.protocols import OutputHandler, WorkingCopy
from pygit_workstation.repository import GitPythonWorkingCopy, GlobalGitConfig, clone_repository
from pygit_workstation.ssh import SshPreflight

logger = logging.getLogger(__name__)


def resolve_target_path(root: Path, account: Account, repo: RepoEntry) -> Path:
    """Where a repository lives: absolute override, override relative to the account folder, or account/repo."""
    account_folder = root / account.folder
    if repo.folder:
        override = Path(repo.folder).expanduser()
        if override.is_absolute():
            return override
        return account_folder / override
    return account_folder / repo.key


def _repo_path_segment(account: Account, repo: RepoEntry) -> str:
    prefix = f"{account.url_path}/" if account.url_path else ""
    return f"{prefix}{repo.key}.git"


def clone_url(account: Account, repo: RepoEntry) -> str:
    """URL used for the initial clone: host alias for SSH, username-embedded URL for HTTPS."""
    if account.credential_type is CredentialType.SSH:
        return f"{account.ssh_host}:{_repo_path_segment(account, repo)}"
    return f"{account.scheme}://{account.username}@{account.host}/{_repo_path_segment(account, repo)}"


def declared_remote_url(account: Account, repo: RepoEntry) -> str:
    """URL stored as origin fetch and push URL. Never carries an embedded username."""
    if account.credential_type is CredentialType.SSH:
        return clone_url(account, repo)
    return f"{account.url}/{repo.key}.git"


def declared_identity(account: Account, repo: RepoEntry) -> tuple[str, str]:
    """Most specific (name, email): the repository's own values win over the account's."""
    return repo.name or account.name, repo.email or account.email


def ensure_directory(path: Path) -> None:
    """Create a structural directory. Raises StructuralDirectoryError on failure."""
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StructuralDirectoryError(path, e) from e


class RepositoryReconciler:
    """Responsible for bringing every declared repository to its declared state"""

    def __init__(
        self,
        declaration: Declaration,
        output: OutputHandler,
        config: ReconcileConfig,
        credential_preflight: CredentialPreflight | None = None,
        ssh_preflight: SshPreflight | None = None,
        global_git: GlobalGitConfig | None = None,
        cloner: Callable[[str, Path], OperationResult] = clone_repository,
        opener: Callable[[Path], WorkingCopy] = GitPythonWorkingCopy,
    ):
        self.declaration = declaration
        self.global_config = declaration.global_config
        self.output = output
        self.config = config
        self._credential_preflight = credential_preflight
        self._ssh_preflight = ssh_preflight
        self._global_git = global_git
        self.cloner = cloner
        self.opener = opener

    @property
    def credential_preflight(self) -> CredentialPreflight:
        if self._credential_preflight is None:
            self._credential_preflight = CredentialPreflight(
                select_credential_probe(), GitCredentialHelper(), self.output
            )
        return self._credential_preflight

    @property
    def ssh_preflight(self) -> SshPreflight:
        if self._ssh_preflight is None:
            self._ssh_preflight = SshPreflight(self.global_config.ssh.ssh_folder, self.output)
        return self._ssh_preflight

    @property
    def global_git(self) -> GlobalGitConfig:
        if self._global_git is None:
            self._global_git = GlobalGitConfig()
        return self._global_git

    def _accounts_with(self, credential_type: CredentialType) -> list[Account]:
        return [a for a in self.declaration.accounts if a.credential_type is credential_type]

    def run(self) -> ReconcileResult:
        """Run the whole reconciliation. Only structural directory failures raise."""
        result = ReconcileResult()
        root = self.global_config.root_folder

        self.output.status(f"Git folder: {root}", 'OK' if root.is_dir() else 'NEW', 'success')
        if not self.config.dry_run:
            ensure_directory(root)

        if self.global_config.https.enabled:
            self.configure_global_credentials(result)
        self.run_preflights(result)

        repos_total = sum(len(a.repos) for a in self.declaration.accounts)
        with tqdm(total=repos_total, desc="Configuring", unit="repo", leave=False,
                  disable=not self.config.progress) as pbar:
            for account in self.declaration.accounts:
                self.reconcile_account(account, result, pbar)
                result.accounts_processed += 1

        return result

    def configure_global_credentials(self, result: ReconcileResult) -> None:
        """Point git's global config at the credential helper and per-account provider settings."""
        https = self.global_config.https
        settings = [('credential.helper', https.helper)]
        if https.credential_store:
            settings.append(('credential.credentialStore', https.credential_store))
        for account in self._accounts_with(CredentialType.GCM):
            if account.gcm_provider:
                settings.append((f"credential.{account.credential_base_url}.provider", account.gcm_provider))
            if account.use_http_path:
                settings.append((f"credential.{account.credential_base_url}.useHttpPath", account.use_http_path))

        failed = False
        for key, value in settings:
            if self.global_git.get(key) == value:
                continue
            if self.config.dry_run:
                self.output.info(f"[DRY RUN] Would set global {key}={value}", indent=1)
                continue
            outcome = self.global_git.set(key, value)
            if not outcome.success:
                failed = True
                result.add_issue(ReconcileIssue('global', '', outcome.operation, outcome.message))
        self.output.status("Global git configuration", 'ERROR' if failed else 'OK',
                           'error' if failed else 'success')

    def run_preflights(self, result: ReconcileResult) -> None:
        """Credential pre-flight for every HTTPS account, key setup for every SSH account."""
        if self.config.dry_run:
            self.output.info("[DRY RUN] Skipping credential and SSH key checks")
            return

        for account in self._accounts_with(CredentialType.GCM):
            outcome = self.credential_preflight.ensure(account)
            if not outcome.success:
                result.add_issue(ReconcileIssue(account.key, '', outcome.operation, outcome.message))

        if not self.global_config.ssh.enabled:
            return
        # the fragment is rewritten even without SSH accounts so removed ones disappear
        self.ssh_preflight.prepare_folder()
        for account in self._accounts_with(CredentialType.SSH):
            for outcome in self.ssh_preflight.ensure(account):
                if not outcome.success:
                    result.add_issue(ReconcileIssue(account.key, '', outcome.operation, outcome.message))
        for outcome in self.ssh_preflight.finalize():
            if not outcome.success:
                result.add_issue(ReconcileIssue('ssh', '', outcome.operation, outcome.message))

    def reconcile_account(self, account: Account, result: ReconcileResult, pbar: tqdm | None = None) -> None:
        """Create the account folder and reconcile each of its repositories."""
        account_folder = self.global_config.root_folder / account.folder
        self.output.status(f"  {account.folder}", 'OK', 'success')
        if not self.config.dry_run:
            ensure_directory(account_folder)

        for repo in account.repos:
            if pbar is not None:
                pbar.set_postfix_str(repo.key, refresh=True)
            self.reconcile_repo(account, repo, result)
            if pbar is not None:
                pbar.update(1)

    def reconcile_repo(self, account: Account, repo: RepoEntry, result: ReconcileResult) -> None:
        """Clone the repository if missing, then converge its configuration."""
        path = resolve_target_path(self.global_config.root_folder, account, repo)

        if not path.exists():
            url = clone_url(account, repo)
            if self.config.dry_run:
                self.output.info(f"[DRY RUN] Would clone {url} into {path}", indent=2)
                return
            outcome = self.cloner(url, path)
            if not outcome.success:
                self.output.status(f"    ⬇ {path}", 'ERROR', 'error')
                result.add_issue(ReconcileIssue(account.key, repo.key, OperationType.CLONE, self._reason(outcome)))
                result.skipped.append(path)
                return
            self.output.status(f"    ⬇ {path}", 'OK', 'success')
            result.cloned.append(path)
        else:
            self.output.status(f"   - {path}", 'OK', 'success')

        try:
            working_copy = self.opener(path)
        except (InvalidGitRepositoryError, NoSuchPathError):
            self.output.error(f"✗ {path} exists but is not a git repository", indent=2)
            result.add_issue(ReconcileIssue(account.key, repo.key, OperationType.CONFIG,
                                            f"{path} is not a git repository"))
            result.skipped.append(path)
            return

        try:
            failures = self.converge(working_copy, account, repo)
        finally:
            close = getattr(working_copy, 'close', None)
            if close is not None:
                close()

        for outcome in failures:
            self.output.error(f"✗ {outcome.message}", indent=2)
            result.add_issue(ReconcileIssue(account.key, repo.key, outcome.operation, self._reason(outcome)))
        result.configured.append(path)

    def converge(self, working_copy: WorkingCopy, account: Account, repo: RepoEntry) -> list[OperationResult]:
        """Apply remote URLs, identity and credential hint. Returns the failed operations.

        Values already in place are left untouched, so repeated runs change nothing.
        """
        url = declared_remote_url(account, repo)
        name, email = declared_identity(account, repo)
        failures = []

        for push in (False, True):
            if working_copy.remote_url('origin', push=push) == url:
                continue
            kind = "push" if push else "fetch"
            if self.config.dry_run:
                self.output.info(f"[DRY RUN] Would set origin {kind} URL to {url}", indent=2)
                continue
            self.output.debug(f"{working_copy.path}: origin {kind} URL -> {url}")
            outcome = working_copy.remote_set_url('origin', url, push=push)
            if not outcome.success:
                failures.append(outcome)

        settings = [('user.name', name), ('user.email', email)]
        if account.credential_type is CredentialType.GCM:
            settings.append((f"credential.{account.credential_base_url}.username", account.username))
        for key, value in settings:
            if not value or working_copy.config_get(key) == value:
                continue
            if self.config.dry_run:
                self.output.info(f"[DRY RUN] Would set {key}={value}", indent=2)
                continue
            self.output.debug(f"{working_copy.path}: {key} -> {value}")
            outcome = working_copy.config_set(key, value)
            if not outcome.success:
                failures.append(outcome)
        return failures

    @staticmethod
    def _reason(outcome: OperationResult) -> str:
        if outcome.error is not None:
            stderr = getattr(outcome.error, 'stderr', '') or ''
            detail = stderr.strip() or str(outcome.error).strip()
            return f"{outcome.message}: {detail}"
        return outcome.message
