"""Domain models: enums, dataclasses, and configuration."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from pathlib import Path


class CredentialType(Enum):
    """Credential strategy of an account"""
    SSH = 'ssh'
    GCM = 'gcm'


class OperationType(Enum):
    """Types of external operations"""
    CLONE = auto()
    FETCH = auto()
    PULL = auto()
    CONFIG = auto()
    REMOTE = auto()
    CREDENTIAL = auto()
    SSH_KEYGEN = auto()
    SSH_AGENT = auto()
    SSH_CONFIG = auto()


class StatusOutcome(Enum):
    """Classification of a discovered working copy"""
    ERROR = 'ERROR'
    REQUIRES_REVIEW = 'REQUIRES REVIEW BEFORE PULL'
    CLEAN = 'CLEAN'
    CLEAN_BUT_BEHIND_MAIN = 'CLEAN BUT BEHIND MAIN BRANCH'
    NEEDS_PULL = 'NEEDS PULL'
    PULLED = 'PULLING THIS REPOSITORY'

    @property
    def label(self) -> str:
        return self.value


@dataclass(frozen=True)
class SshSettings:
    """Global SSH credential settings"""
    enabled: bool = False
    ssh_folder: Path = field(default_factory=lambda: Path.home() / '.ssh')


@dataclass(frozen=True)
class HttpsCredentialSettings:
    """Global HTTPS credential-helper settings"""
    enabled: bool = False
    helper: str = ''
    credential_store: str = ''


@dataclass(frozen=True)
class GlobalConfig:
    """Global section of the declaration"""
    root_folder: Path
    ssh: SshSettings = field(default_factory=SshSettings)
    https: HttpsCredentialSettings = field(default_factory=HttpsCredentialSettings)


@dataclass(frozen=True)
class RepoEntry:
    """A repository declared under an account"""
    key: str
    name: str = ''
    email: str = ''
    folder: str = ''
    credential_type: CredentialType | None = None


@dataclass(frozen=True)
class Account:
    """A Git hosting account and its repositories"""
    key: str
    url: str
    username: str
    folder: str
    credential_type: CredentialType
    name: str = ''
    email: str = ''
    gcm_provider: str = ''
    use_http_path: str = ''
    ssh_host: str = ''
    ssh_hostname: str = ''
    ssh_type: str = 'ed25519'
    repos: tuple[RepoEntry, ...] = ()

    @property
    def scheme(self) -> str:
        """URL scheme of the remote base URL (e.g. 'https')."""
        return self.url.split('://', 1)[0]

    @property
    def host(self) -> str:
        """Host portion of the remote base URL."""
        return self.url.split('://', 1)[1].split('/', 1)[0]

    @property
    def url_path(self) -> str:
        """User or organisation segment of the remote base URL."""
        rest = self.url.split('://', 1)[1]
        return rest.split('/', 1)[1].strip('/') if '/' in rest else ''

    @property
    def credential_base_url(self) -> str:
        """Scheme and host of the remote base URL, the key used by credential stores."""
        return f"{self.scheme}://{self.host}"


@dataclass(frozen=True)
class Declaration:
    """Validated declaration: global settings plus accounts"""
    global_config: GlobalConfig
    accounts: tuple[Account, ...] = ()
    source: Path | None = None


@dataclass(frozen=True)
class OperationResult:
    """Result of a single external operation"""
    success: bool
    operation: OperationType
    message: str
    error: Exception | None = None


@dataclass(frozen=True)
class ReconcileIssue:
    """Immutable per-item failure record"""
    account: str
    repo: str
    operation: OperationType
    details: str
    timestamp: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        target = f"{self.account}/{self.repo}" if self.repo else self.account
        return f"[{self.timestamp:%H:%M:%S}] {target} ({self.operation.name.lower()}): {self.details}"


@dataclass
class ReconcileResult:
    """Mutable result accumulator for a reconcile run"""
    accounts_processed: int = 0
    cloned: list[Path] = field(default_factory=list)
    configured: list[Path] = field(default_factory=list)
    skipped: list[Path] = field(default_factory=list)
    issues: list[ReconcileIssue] = field(default_factory=list)

    def add_issue(self, issue: ReconcileIssue) -> None:
        """Record a per-item failure."""
        self.issues.append(issue)

    def has_issues(self) -> bool:
        return len(self.issues) > 0


@dataclass
class StatusSignals:
    """Synchronization and dirtiness signals of a working copy"""
    branch: str = ''
    ahead: int = 0
    behind: int = 0
    stashed: int = 0
    staged: int = 0
    untracked: int = 0
    modified: int = 0
    moved: int = 0

    @property
    def diverged(self) -> bool:
        return self.ahead > 0 and self.behind > 0

    @property
    def pending_push(self) -> int:
        """Commits not yet pushed; the same quantity as ``ahead``."""
        return self.ahead

    @property
    def dirtiness(self) -> dict[str, int]:
        """Dirtiness counts keyed by label, in display order."""
        return {
            'stashed': self.stashed,
            'staged': self.staged,
            'untracked': self.untracked,
            'modified': self.modified,
            'moved': self.moved,
        }

    @property
    def is_safe_state(self) -> bool:
        """True when a fast-forward cannot lose or conflict with local work."""
        return (
            self.ahead == 0 and
            not self.diverged and
            self.stashed == 0 and
            self.staged == 0 and
            self.untracked == 0 and
            self.modified == 0 and
            self.moved == 0 and
            self.pending_push == 0
        )


@dataclass
class RepoStatus:
    """Classification record of one discovered repository"""
    path: Path
    outcome: StatusOutcome
    signals: StatusSignals | None = None
    behind_main: bool = False
    details: str = ''


@dataclass
class StatusResult:
    """Mutable result accumulator for a status run"""
    statuses: list[RepoStatus] = field(default_factory=list)
    skipped_nested: list[Path] = field(default_factory=list)

    @property
    def repos_processed(self) -> int:
        return len(self.statuses)

    def add(self, status: RepoStatus) -> None:
        self.statuses.append(status)

    def by_outcome(self, outcome: StatusOutcome) -> list[RepoStatus]:
        """Filter classified repositories by outcome."""
        return [s for s in self.statuses if s.outcome == outcome]

    def counts(self) -> Counter:
        return Counter(s.outcome for s in self.statuses)


@dataclass(frozen=True)
class ReconcileConfig:
    """Configuration for reconcile runs"""
    verbose: bool = False
    dry_run: bool = False
    progress: bool = True


@dataclass(frozen=True)
class StatusConfig:
    """Configuration for status runs"""
    verbose: bool = False
    pull: bool = False
    remote_name: str = 'origin'
    exclude_patterns: list[str] = field(default_factory=list)
    main_branches: tuple[str, ...] = ('main', 'master')
    progress: bool = True
