"""CLI Commands"""

import os
import sys

from gortex.config import Config, PROVIDER_NAMES
from gortex.domain import analyze_commit_stats
from gortex.errors import GitError
from gortex.git import GitAnalyzer
from gortex.output import bold, dim, info, print_error, colorize_commit_type


def display_config(config: Config, config_path) -> int:
    """Display current configuration."""
    print(f"\n{bold('Current Configuration')}\n")

    if config_path:
        print(f"  {dim('Loaded from:')} {config_path}")
    else:
        print(f"  {dim('Loaded from:')} defaults (no .gortexrc found)")

    env_provider = os.environ.get('GORTEX_PROVIDER')
    env_model = os.environ.get('GORTEX_MODEL')
    if env_provider or env_model:
        print(f"  {dim('Environment overrides:')}")
        if env_provider:
            print(f"    GORTEX_PROVIDER={env_provider}")
        if env_model:
            print(f"    GORTEX_MODEL={env_model}")

    print()
    print(f"  {bold('Settings:')}")
    print(f"    provider:           {info(config.provider)}")
    print(f"    preference:         {info(', '.join(config.preference))}")
    print(f"    types:              {info(', '.join(config.types))}")
    print(f"    scopes:             {info(', '.join(config.scopes) or '(any)')}")
    print(f"    max_subject_length: {info(str(config.max_subject_length))}")
    print(f"    max_diff_size:      {info(str(config.max_diff_size))}")
    print(f"    style_history:      {info(str(config.style_history))}")

    for name in PROVIDER_NAMES:
        settings = config.settings_for(name)
        model = config.model or settings.model
        print(f"    {name + ':':<19} {info(model)} {dim(f'(timeout {settings.timeout}s)')}")

    print(f"\n  {dim('Config locations:')}")
    print("    Local:  .gortexrc (in current directory)")
    print("    Global: ~/.gortexrc\n")

    return 0


def run_stats(count: int) -> int:
    """Show how much of recent history follows conventional commits."""
    try:
        messages = GitAnalyzer().log_messages(count)
    except GitError as e:
        print_error(str(e))
        return 1

    stats = analyze_commit_stats(messages)
    print(f"\n{bold('Commit Statistics')} {dim(f'(last {stats.total} commits)')}\n")
    print(f"  Conventional:     {info(str(stats.conventional))} ({stats.percentage}%)")
    print(f"  Non-conventional: {info(str(stats.non_conventional))}")

    if stats.type_breakdown:
        print(f"\n  {bold('By type:')}")
        width = max(len(t) for t in stats.type_breakdown)
        for commit_type, n in stats.type_breakdown.items():
            padding = " " * (width - len(commit_type))
            print(f"    {colorize_commit_type(commit_type + ':')}{padding} {n}")
    print()
    return 0


def run_install_completion() -> int:
    """Install shell tab completion."""
    shell = os.environ.get('SHELL', '')
    line = 'eval "$(register-python-argcomplete gortex)"'

    print(f"\n{bold('Tab Completion Setup')}\n")

    if 'zsh' in shell or 'bash' in shell:
        rc_file = os.path.expanduser('~/.zshrc' if 'zsh' in shell else '~/.bashrc')
        print(f"Add this line to {dim(rc_file)}:\n")
        print(f"  {line}\n")
        print(f"Then run: {dim('source ' + rc_file)}")
    elif sys.platform == 'win32':
        print("For PowerShell, run:\n")
        print("  register-python-argcomplete --shell powershell gortex | Out-String | Invoke-Expression\n")
    else:
        print("Run one of these based on your shell:\n")
        print(f"  {dim('# Bash/Zsh')}")
        print(f"  {line}\n")
        print(f"  {dim('# Fish')}")
        print("  register-python-argcomplete --shell fish gortex | source")

    print(f"\n{dim('After setup, press TAB to autocomplete flags.')}")
    return 0
