"""
pygit-workstation: Git workstation bootstrapping tools

pygit-config-repos clones and configures the repositories of a declaration
file; pygit-status-pull reports (and optionally fast-forwards) the
synchronization state of every working copy under a directory.
"""

from colorama import init as colorama_init

colorama_init(autoreset=True)

__version__ = "1.0.0"

# Re-export public API so `from pygit_workstation import X` keeps working.
from pygit_workstation.classifier import StatusClassifier, collect_signals, detail_lines  # noqa: E402
from pygit_workstation.cli import config_repos_main, status_pull_main  # noqa: E402
from pygit_workstation.config import (  # noqa: E402
    create_config_repos_parser,
    create_status_pull_parser,
    load_config_file,
    load_declaration,
    parse_declaration,
    resolve_status_targets,
)
from pygit_workstation.credentials import (  # noqa: E402
    CredentialPreflight,
    GitCredentialHelper,
    KeychainProbe,
    SecretServiceProbe,
    WindowsCredentialManagerProbe,
    select_credential_probe,
)
from pygit_workstation.errors import (  # noqa: E402
    ConfigError,
    MissingDependencyError,
    StructuralDirectoryError,
    WorkstationError,
)
from pygit_workstation.models import (  # noqa: E402
    Account,
    CredentialType,
    Declaration,
    GlobalConfig,
    HttpsCredentialSettings,
    OperationResult,
    OperationType,
    ReconcileConfig,
    ReconcileIssue,
    ReconcileResult,
    RepoEntry,
    RepoStatus,
    SshSettings,
    StatusConfig,
    StatusOutcome,
    StatusResult,
    StatusSignals,
)
from pygit_workstation.orchestrator import StatusOrchestrator  # noqa: E402
from pygit_workstation.output import (  # noqa: E402
    SECTION_WIDTH,
    ConsoleOutputHandler,
    NullOutputHandler,
    format_detail,
    format_status_line,
)
from pygit_workstation.protocols import (  # noqa: E402
    CredentialHelper,
    CredentialStoreProbe,
    OutputHandler,
    WorkingCopy,
)
from pygit_workstation.reconciler import (  # noqa: E402
    RepositoryReconciler,
    clone_url,
    declared_identity,
    declared_remote_url,
    resolve_target_path,
)
from pygit_workstation.reporter import SummaryReporter  # noqa: E402
from pygit_workstation.repository import GitPythonWorkingCopy, GlobalGitConfig, clone_repository  # noqa: E402
from pygit_workstation.scanner import RepositoryScanner, is_inside_accepted, select_outermost  # noqa: E402
from pygit_workstation.ssh import SshConfigWriter, SshHostEntry, SshKeyManager, SshPreflight  # noqa: E402
from pygit_workstation.strategies import (  # noqa: E402
    FastForwardStrategy,
    RequiresReviewStrategy,
    StatusStrategy,
    UpToDateStrategy,
)

__all__ = [
    "__version__",
    # Models
    "Account",
    "CredentialType",
    "Declaration",
    "GlobalConfig",
    "HttpsCredentialSettings",
    "OperationResult",
    "OperationType",
    "ReconcileConfig",
    "ReconcileIssue",
    "ReconcileResult",
    "RepoEntry",
    "RepoStatus",
    "SshSettings",
    "StatusConfig",
    "StatusOutcome",
    "StatusResult",
    "StatusSignals",
    # Errors
    "ConfigError",
    "MissingDependencyError",
    "StructuralDirectoryError",
    "WorkstationError",
    # Protocols
    "CredentialHelper",
    "CredentialStoreProbe",
    "OutputHandler",
    "WorkingCopy",
    # Implementations
    "GitPythonWorkingCopy",
    "GlobalGitConfig",
    "clone_repository",
    "ConsoleOutputHandler",
    "NullOutputHandler",
    "SECTION_WIDTH",
    "format_detail",
    "format_status_line",
    "KeychainProbe",
    "SecretServiceProbe",
    "WindowsCredentialManagerProbe",
    "select_credential_probe",
    "GitCredentialHelper",
    "CredentialPreflight",
    "SshConfigWriter",
    "SshHostEntry",
    "SshKeyManager",
    "SshPreflight",
    # Strategies
    "StatusStrategy",
    "RequiresReviewStrategy",
    "UpToDateStrategy",
    "FastForwardStrategy",
    # Services
    "RepositoryReconciler",
    "RepositoryScanner",
    "StatusClassifier",
    "StatusOrchestrator",
    "SummaryReporter",
    "clone_url",
    "collect_signals",
    "declared_identity",
    "declared_remote_url",
    "detail_lines",
    "is_inside_accepted",
    "resolve_target_path",
    "select_outermost",
    # Config / CLI
    "create_config_repos_parser",
    "create_status_pull_parser",
    "load_config_file",
    "load_declaration",
    "parse_declaration",
    "resolve_status_targets",
    "config_repos_main",
    "status_pull_main",
]
