"""Configuration: argument parsers and declaration loader."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

try:
    import tomllib
except ModuleNotFoundError:
    import tomli as tomllib  # type: ignore[no-redef]

from pygit_workstation.errors import ConfigError
from pygit_workstation.models import (
    Account,
    CredentialType,
    Declaration,
    GlobalConfig,
    HttpsCredentialSettings,
    RepoEntry,
    SshSettings,
)

DEFAULT_CONFIG_PATH = Path.home() / '.config' / 'git-config-repos' / 'git-config-repos.json'
DEFAULT_SSH_KEY_TYPE = 'ed25519'


def create_config_repos_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser of pygit-config-repos."""
    # Lazy import to avoid circular dependency with __init__.py
    from pygit_workstation import __version__

    parser = argparse.ArgumentParser(
        prog='pygit-config-repos',
        description="Clone and configure git repositories from a declaration file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                                   # Use ~/.config/git-config-repos/git-config-repos.json
  %(prog)s --config ~/repos.json --verbose   # Explicit declaration, verbose output
  %(prog)s --dry-run                         # Show what would be done
        """
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Verbose output')
    parser.add_argument('--config', type=str, default=str(DEFAULT_CONFIG_PATH),
                        help=f'Path to the declaration file (default: {DEFAULT_CONFIG_PATH})')
    parser.add_argument('--dry-run', action='store_true',
                        help='Report what would be done without changing anything')
    return parser


def create_status_pull_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser of pygit-status-pull."""
    from pygit_workstation import __version__

    parser = argparse.ArgumentParser(
        prog='pygit-status-pull',
        description="Report which git repositories under a directory need a pull",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                     # Analyse repositories under the current directory
  %(prog)s -v ~/dev            # Verbose analysis of ~/dev
  %(prog)s pull                # Pull automatically when it is safe
  %(prog)s ~/dev pull          # Same, for ~/dev
        """
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('targets', nargs='*', metavar='[pull] [DIRECTORY]',
                        help='"pull" to pull automatically when it is safe, '
                             'and the directory to search (default: current), in either order')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Verbose output')
    parser.add_argument('--pull', dest='pull', action='store_true',
                        help='Same as the "pull" action')
    parser.add_argument('--exclude', action='append', default=[],
                        help='Exclude pattern (can specify multiple)')
    parser.add_argument('--remote', default='origin',
                        help='Remote to fetch from (default: origin)')
    parser.add_argument('--no-wsl-git', dest='wsl_git', action='store_false',
                        help='Do not switch to git.exe under WSL2')
    return parser


def resolve_status_targets(targets: list[str], pull_flag: bool = False) -> tuple[bool, str]:
    """Split the positional arguments of pygit-status-pull into (pull, directory).

    The first "pull" is the action wherever it appears; a directory named pull
    has to be given as ./pull or after the action. Raises ValueError for more
    than one directory.
    """
    pull = pull_flag
    action_seen = False
    directories = []
    for target in targets:
        if target == 'pull' and not action_seen:
            pull = action_seen = True
        else:
            directories.append(target)
    if len(directories) > 1:
        raise ValueError(f"expected at most one directory, got {len(directories)}")
    return pull, directories[0] if directories else '.'


def load_config_file(path: Path) -> dict[str, Any]:
    """Read the declaration document (JSON, or TOML when the suffix is .toml).

    Raises ConfigError if it is missing or malformed.
    """
    if not path.is_file():
        raise ConfigError(path, [f"configuration file {path} does not exist"])
    try:
        if path.suffix == '.toml':
            with open(path, 'rb') as f:
                return tomllib.load(f)
        with open(path, encoding='utf-8') as f:
            return json.load(f)
    except (json.JSONDecodeError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(path, [f"syntax error: {e}"]) from e
    except OSError as e:
        raise ConfigError(path, [f"cannot read file: {e}"]) from e


def load_declaration(path: Path) -> Declaration:
    """Load and validate a declaration file."""
    return parse_declaration(load_config_file(path), source=path)


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ('true', 'yes', '1', 'on')
    return bool(value)


def _as_str(value: Any) -> str:
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value).strip()


def _expand(path: str) -> Path:
    return Path(path).expanduser()


class _Validator:
    """Collects every problem so that all of them are reported at once."""

    def __init__(self):
        self.problems: list[str] = []

    def add(self, problem: str) -> None:
        self.problems.append(problem)

    def mapping(self, data: Any, where: str) -> dict[str, Any]:
        if data is None:
            return {}
        if not isinstance(data, dict):
            self.add(f"{where} must be a mapping")
            return {}
        return data

    def required(self, data: dict[str, Any], key: str, where: str) -> str:
        value = _as_str(data.get(key))
        if not value:
            self.add(f"{where}: missing required key '{key}'")
        return value


def _parse_global(data: dict[str, Any], check: _Validator) -> GlobalConfig | None:
    folder = check.required(data, 'folder', 'global')

    ssh_data = check.mapping(data.get('credential_ssh'), 'global.credential_ssh')
    ssh_folder = _as_str(ssh_data.get('ssh_folder')) or '~/.ssh'
    ssh = SshSettings(enabled=_as_bool(ssh_data.get('enabled', False)), ssh_folder=_expand(ssh_folder))

    gcm_data = check.mapping(data.get('credential_gcm'), 'global.credential_gcm')
    https = HttpsCredentialSettings(
        enabled=_as_bool(gcm_data.get('enabled', False)),
        helper=_as_str(gcm_data.get('helper')),
        credential_store=_as_str(gcm_data.get('credentialStore')),
    )
    if https.enabled and not https.helper:
        check.add("global.credential_gcm: missing required key 'helper'")

    if not ssh.enabled and not https.enabled:
        check.add("global: at least one of credential_ssh or credential_gcm must be enabled")

    if not folder:
        return None
    root = _expand(folder)
    if not root.is_absolute():
        check.add(f"global.folder must be an absolute path, got '{folder}'")
    return GlobalConfig(root_folder=root, ssh=ssh, https=https)


def _account_strategy(key: str, data: dict[str, Any], ssh: SshSettings,
                      https: HttpsCredentialSettings, check: _Validator) -> CredentialType | None:
    if ssh.enabled and _as_str(data.get('ssh_host')):
        return CredentialType.SSH
    if https.enabled:
        return CredentialType.GCM
    check.add(f"accounts.{key}: missing required key 'ssh_host' (SSH is the only enabled credential)")
    return None


def _parse_repo(account_key: str, key: str, data: Any, strategy: CredentialType | None,
                check: _Validator) -> RepoEntry:
    where = f"accounts.{account_key}.repos.{key}"
    data = check.mapping(data, where)
    credential_type = None
    raw_type = _as_str(data.get('credential_type')).lower()
    if raw_type:
        try:
            credential_type = CredentialType(raw_type)
        except ValueError:
            check.add(f"{where}: credential_type must be 'ssh' or 'gcm', got '{raw_type}'")
        else:
            if strategy is not None and credential_type != strategy:
                check.add(
                    f"{where}: credential_type '{raw_type}' does not match the account's "
                    f"credential '{strategy.value}'"
                )
    return RepoEntry(
        key=key,
        name=_as_str(data.get('name')),
        email=_as_str(data.get('email')),
        folder=_as_str(data.get('folder')),
        credential_type=credential_type,
    )


def _parse_account(key: str, data: Any, global_config: GlobalConfig | None,
                   check: _Validator) -> Account | None:
    where = f"accounts.{key}"
    data = check.mapping(data, where)
    url = check.required(data, 'url', where).rstrip('/')
    username = check.required(data, 'username', where)
    folder = check.required(data, 'folder', where)

    if url:
        parts = urlsplit(url)
        if not parts.scheme or not parts.netloc:
            check.add(f"{where}: url '{url}' must include a scheme and a host")
    if folder and Path(folder).is_absolute():
        check.add(f"{where}: folder must be relative to global.folder, got '{folder}'")

    ssh = global_config.ssh if global_config else SshSettings()
    https = global_config.https if global_config else HttpsCredentialSettings()
    strategy = _account_strategy(key, data, ssh, https, check)
    if strategy is CredentialType.SSH and not _as_str(data.get('ssh_hostname')):
        check.add(f"{where}: missing required key 'ssh_hostname'")

    repos_data = check.mapping(data.get('repos'), f"{where}.repos")
    repos = tuple(
        _parse_repo(key, repo_key, repo_data, strategy, check)
        for repo_key, repo_data in repos_data.items()
    )

    if strategy is None or not (url and username and folder):
        return None
    return Account(
        key=key,
        url=url,
        username=username,
        folder=folder,
        credential_type=strategy,
        name=_as_str(data.get('name')),
        email=_as_str(data.get('email')),
        gcm_provider=_as_str(data.get('gcm_provider')),
        use_http_path=_as_str(data.get('gcm_useHttpPath')).lower(),
        ssh_host=_as_str(data.get('ssh_host')),
        ssh_hostname=_as_str(data.get('ssh_hostname')),
        ssh_type=_as_str(data.get('ssh_type')) or DEFAULT_SSH_KEY_TYPE,
        repos=repos,
    )


def parse_declaration(data: Any, source: Path | None = None) -> Declaration:
    """Validate a raw declaration document. All problems are reported together.

    Raises ConfigError if anything is wrong; nothing is touched on disk.
    """
    check = _Validator()
    data = check.mapping(data, 'document')
    if 'global' not in data:
        check.add("missing required section 'global'")
    if 'accounts' not in data:
        check.add("missing required section 'accounts'")

    global_config = _parse_global(check.mapping(data.get('global'), 'global'), check)

    accounts = []
    folders: dict[str, str] = {}
    for key, account_data in check.mapping(data.get('accounts'), 'accounts').items():
        account = _parse_account(key, account_data, global_config, check)
        if account is None:
            continue
        normalized = str(Path(account.folder))
        if normalized in folders:
            check.add(f"accounts.{key}: folder '{account.folder}' is already used by account '{folders[normalized]}'")
        else:
            folders[normalized] = key
        accounts.append(account)

    if check.problems or global_config is None:
        raise ConfigError(source, check.problems)
    return Declaration(global_config=global_config, accounts=tuple(accounts), source=source)
