"""CLI Main Entry Point"""

import dataclasses
import logging
import os
import sys

from gortex.config import Config, ConfigManager, VALID_PROVIDERS
from gortex.domain import is_conventional
from gortex.errors import GitError, LLMError
from gortex.git import DiffAnalysisContext, DiffProcessor, GitAnalyzer, ProcessorConfig
from gortex.output import (
    CHECK, RULE, Spinner, bold, colorize_commit_type, dim, info, print_error, print_success,
    print_warning, setup_logging, success, warning,
)
from gortex.service import CommitProposal, CommitService

from gortex.cli.args import parse_args
from gortex.cli.commands import display_config, run_install_completion, run_stats
from gortex.cli.utils import copy_to_clipboard, edit_message, prompt_manual_message

logger = logging.getLogger(__name__)

MAX_FILES_SHOWN = 8


def _display_file_list(analysis: DiffAnalysisContext, max_shown: int = MAX_FILES_SHOWN):
    """Show which files will be analyzed, collapsing long lists."""
    if not analysis.file_details:
        return
    print(bold("Staged changes:"))
    shown = analysis.file_details[:max_shown]
    remaining = len(analysis.file_details) - len(shown)
    for path, additions, deletions in shown:
        print(dim(f"  {path} (+{additions} -{deletions})"))
    if remaining > 0:
        print(dim(f"  ... and {remaining} more files"))
    if analysis.filtered_files > 0:
        print(dim(f"  {analysis.filtered_files} noise files filtered"))
    if analysis.truncated:
        print(dim("  diff truncated for the AI prompt"))


def _display_message(message: str):
    """Display commit message with horizontal rules and colored type."""
    colored = colorize_commit_type(message)
    lines = colored.split('\n')
    # Use raw message for width calculation (no ANSI codes)
    width = max((len(line) for line in message.split('\n')), default=40)
    print(f"\n{dim(RULE * width)}")
    print(bold(lines[0]))
    for line in lines[1:]:
        print(line)
    print(dim(RULE * width))


def _display_proposal(proposal: CommitProposal, verbose: bool = False):
    _display_message(proposal.formatted)
    print(dim(f"{proposal.provider} · confidence {proposal.confidence}%"))
    if verbose and proposal.reasoning:
        print(dim(f"Reasoning: {proposal.reasoning}"))


def _is_interactive() -> bool:
    return sys.stdin.isatty() and sys.stdout.isatty()


def _resolve_config(args, config: Config) -> Config:
    """Apply overrides. Precedence: CLI args > environment variables > config file."""
    provider = args.provider or os.environ.get('GORTEX_PROVIDER') or config.provider
    model = args.model or os.environ.get('GORTEX_MODEL') or config.model
    if provider not in VALID_PROVIDERS:
        raise LLMError(f"Unknown provider: {provider}. Use {', '.join(sorted(VALID_PROVIDERS))}.")
    logger.debug("Provider %s, model override %s", provider, model or "(none)")
    return dataclasses.replace(config, provider=provider, model=model)


def _analyze_staged_changes(analyzer: GitAnalyzer, config: Config) -> DiffAnalysisContext:
    processor = DiffProcessor(ProcessorConfig(max_diff_chars=config.max_diff_size))
    changes = analyzer.get_staged_changes()
    return processor.process(
        changes,
        branch=analyzer.current_branch(),
        recent_commits=analyzer.recent_log(),
        history=analyzer.log_messages(config.style_history) if config.style_history else None,
    )


def _generate_with_ai(service: CommitService, analysis: DiffAnalysisContext, is_interactive: bool):
    """One AI attempt. Returns a CommitProposal, or None after reporting the failure."""
    try:
        client = service.select_client()
        label = f"Analyzing {bold(str(len(analysis.files)))} files using {info(client.name)}..."
        with Spinner(label):
            proposal = service.generate(analysis, client, checked=True)
    except LLMError as e:
        print_error(str(e))
        return None

    if is_interactive:
        print(f"{label} {success('done!')}")
    return proposal


def _copy_and_report(message: str, no_copy: bool):
    """Copy message to clipboard and print result."""
    if no_copy:
        return
    copied, reason = copy_to_clipboard(message)
    if copied:
        print(f"{success(CHECK)} Copied to clipboard!")
    else:
        print(f"{warning('!')} Could not copy to clipboard{': ' + reason if reason else ''}")


def _confirm_message(service: CommitService, message: str) -> str | None:
    """
    Let the user accept, edit, retype or abandon the message.

    Returns the final text, or None when the user quits.
    """
    while True:
        try:
            action = input(f"\n{dim('(Enter) commit, (e)dit, (m)anual, (q)uit: ')}").strip().lower()
        except (KeyboardInterrupt, EOFError):
            print()
            return None

        if action == '':
            return message
        if action == 'q':
            return None
        if action == 'e':
            edited = edit_message(message)
            if edited:
                message = edited
                if not is_conventional(message):
                    print_warning("Edited message is not a conventional commit")
                _display_message(message)
        elif action == 'm':
            manual = prompt_manual_message(service)
            if manual is not None:
                message = manual.format()
                _display_message(message)


def _generate_commit_flow(args, config: Config) -> int:
    """Main commit flow. Returns exit code."""
    is_interactive = _is_interactive()

    try:
        analyzer = GitAnalyzer()
        analysis = _analyze_staged_changes(analyzer, config)
    except GitError as e:
        print_error(str(e))
        return 1

    if is_interactive:
        _display_file_list(analysis)

    service = CommitService(config)
    message = None

    if not args.manual:
        proposal = _generate_with_ai(service, analysis, is_interactive)
        if proposal is not None:
            if not is_interactive:
                # Pipe mode: output raw message and exit
                print(proposal.formatted)
                return 0
            _display_proposal(proposal, args.verbose)
            message = proposal.formatted

    if message is None:
        if not is_interactive:
            return 1
        if not args.manual:
            print(dim("Falling back to manual entry."))
        manual = prompt_manual_message(service)
        if manual is None:
            print(dim("Cancelled."))
            return 0
        message = manual.format()
        _display_message(message)

    message = _confirm_message(service, message)
    if message is None:
        print(dim("Cancelled."))
        return 0

    if args.dry_run:
        print(message)
        _copy_and_report(message, args.no_copy)
        return 0

    try:
        analyzer.create_commit(message)
    except GitError as e:
        print_error(str(e))
        _copy_and_report(message, args.no_copy)
        return 1

    print_success("Committed!")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    args = parse_args(argv)
    setup_logging(args.verbose)

    if args.install_completion:
        return run_install_completion()

    manager = ConfigManager()
    try:
        config = _resolve_config(args, manager.load())
    except LLMError as e:
        print_error(str(e))
        return 1

    if args.display_config:
        return display_config(config, manager.get_config_path())
    if args.stats is not None:
        return run_stats(args.stats)

    return _generate_commit_flow(args, config)
