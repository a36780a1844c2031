"""CLI entry points: pygit-config-repos and pygit-status-pull."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import git
from colorama import Fore, Style

from pygit_workstation.config import (
    create_config_repos_parser,
    create_status_pull_parser,
    load_declaration,
    resolve_status_targets,
)
from pygit_workstation.environment import install_hint, is_github_actions, is_wsl2, require_programs
from pygit_workstation.errors import ConfigError, MissingDependencyError, WorkstationError
from pygit_workstation.models import CredentialType, ReconcileConfig, StatusConfig
from pygit_workstation.orchestrator import StatusOrchestrator
from pygit_workstation.output import ConsoleOutputHandler
from pygit_workstation.reconciler import RepositoryReconciler
from pygit_workstation.reporter import SummaryReporter


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def _fail(message: str) -> None:
    print(f"{Fore.RED}Error: {message}{Style.RESET_ALL}")
    sys.exit(1)


def config_repos_main(argv: list[str] | None = None):
    """Entry point of pygit-config-repos"""
    parser = create_config_repos_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    config = ReconcileConfig(
        verbose=args.verbose,
        dry_run=args.dry_run,
        progress=not args.verbose and not is_github_actions(),
    )
    output = ConsoleOutputHandler(verbose=config.verbose, plain=is_github_actions())
    config_path = Path(args.config).expanduser()

    try:
        require_programs(['git'])
        declaration = load_declaration(config_path)
        output.status(f"* Config {config_path}", 'OK', 'success')

        if any(a.credential_type is CredentialType.SSH for a in declaration.accounts):
            require_programs(['ssh-keygen', 'ssh-add'])
        result = RepositoryReconciler(declaration, output, config).run()
        SummaryReporter(output).print_reconcile_summary(result, config)
        sys.exit(0)
    except KeyboardInterrupt:
        output.warning("\n\nInterrupted by user")
        sys.exit(130)
    except MissingDependencyError as e:
        for line in install_hint(e.programs):
            output.info(line)
        _fail(str(e))
    except ConfigError as e:
        output.status(f"* Config {config_path}", 'ERROR', 'error')
        for problem in e.problems:
            output.error(f"  - {problem}")
        sys.exit(1)
    except WorkstationError as e:
        output.error(f"\n{e}")
        sys.exit(1)
    except Exception as e:
        output.error(f"\nUnexpected error: {e}")
        if config.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


def status_pull_main(argv: list[str] | None = None):
    """Entry point of pygit-status-pull"""
    parser = create_status_pull_parser()
    args = parser.parse_args(argv)
    try:
        pull, directory = resolve_status_targets(args.targets, args.pull)
    except ValueError as e:
        parser.error(str(e))
    _configure_logging(args.verbose)

    config = StatusConfig(
        verbose=args.verbose,
        pull=pull,
        remote_name=args.remote,
        exclude_patterns=list(args.exclude),
        progress=not args.verbose and not is_github_actions(),
    )
    output = ConsoleOutputHandler(verbose=config.verbose, plain=is_github_actions())

    try:
        search_dir = Path(directory).resolve()
        if not search_dir.exists() or not search_dir.is_dir():
            _fail(f"Invalid directory '{search_dir}'")

        if args.wsl_git and is_wsl2():
            git.refresh('git.exe')

        output.info("")
        if config.pull:
            output.info("Analysing which git repositories need a pull.")
            output.info("Safe repositories are pulled automatically.")
        else:
            output.info("Analysing which git repositories need a pull")
        output.info("")

        result = StatusOrchestrator(config, output).run(search_dir)
        SummaryReporter(output).print_status_summary(result, config)
        sys.exit(0)
    except KeyboardInterrupt:
        output.warning("\n\nInterrupted by user")
        sys.exit(130)
    except Exception as e:
        output.error(f"\nUnexpected error: {e}")
        if config.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)
