"""
Gortex

Conventional-commit messages for staged git changes, with optional LLM help.
"""

__version__ = "1.0.0"

# Centralized commit types - single source of truth for defaults
# Used by: config (default allowed types), prompts, domain validation, cli
COMMIT_TYPES = {
    'feat': 'A new feature or capability',
    'fix': 'A bug fix',
    'docs': 'Documentation only changes',
    'style': 'Formatting, whitespace, no code change',
    'refactor': 'Code restructuring without behavior change',
    'perf': 'Performance improvement',
    'test': 'Adding or updating tests',
    'build': 'Build system or external dependency changes',
    'ci': 'CI/CD configuration changes',
    'chore': 'Maintenance tasks, dependencies, tooling',
    'revert': 'Reverts a previous commit',
}

COMMIT_TYPE_NAMES = list(COMMIT_TYPES.keys())

# Commit message limits
MAX_SUBJECT_LENGTH = 100
MIN_SUBJECT_LENGTH = 3
MIN_BODY_LENGTH = 10

# Context limits
MAX_DIFF_SIZE = 8000
RECENT_COMMITS_COUNT = 5
STYLE_HISTORY_COUNT = 50
