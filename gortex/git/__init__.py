"""Git Operations Package"""

from gortex.errors import GitError, NoChangesError
from gortex.git.analyzer import GitAnalyzer, FileChange, StagedChanges
from gortex.git.diff_processor import DiffProcessor, DiffAnalysisContext, ProcessorConfig, extract_symbols, truncate_diff

__all__ = [
    "GitAnalyzer",
    "GitError",
    "NoChangesError",
    "FileChange",
    "StagedChanges",
    "DiffProcessor",
    "DiffAnalysisContext",
    "ProcessorConfig",
    "extract_symbols",
    "truncate_diff",
]
