"""Commit Message Domain Package"""

from gortex.domain.values import CommitType, Scope, CommitSubject
from gortex.domain.message import (
    CommitMessage,
    CommitStats,
    ParsedCommit,
    ProjectStyle,
    analyze_commit_stats,
    analyze_project_style,
    create_from_ai_generated,
    create_from_user_input,
    is_conventional,
    parse_conventional_commit,
)

__all__ = [
    "CommitType",
    "Scope",
    "CommitSubject",
    "CommitMessage",
    "CommitStats",
    "ParsedCommit",
    "ProjectStyle",
    "analyze_commit_stats",
    "analyze_project_style",
    "create_from_ai_generated",
    "create_from_user_input",
    "is_conventional",
    "parse_conventional_commit",
]
