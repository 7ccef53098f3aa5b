"""Diff Processor - Shape staged changes into bounded LLM context."""

import logging
import re
from collections import Counter
from dataclasses import dataclass, field

from gortex import MAX_DIFF_SIZE
from gortex.domain import ProjectStyle, analyze_project_style
from gortex.errors import NoChangesError
from gortex.git.analyzer import FileChange, StagedChanges

logger = logging.getLogger(__name__)


def _count_lines(text: str) -> int:
    return text.count('\n') + 1 if text else 0


def truncate_diff(diff: str, max_chars: int = MAX_DIFF_SIZE) -> str:
    """
    Bound a diff to max_chars, keeping its head and its tail.

    The first and last max_chars // 2 characters survive, joined by a marker
    line saying how many lines were dropped. Unchanged when already short enough.
    """
    if len(diff) <= max_chars:
        return diff

    half = max_chars // 2
    head = diff[:half]
    tail = diff[len(diff) - half:]

    elided = _count_lines(diff) - _count_lines(head) - _count_lines(tail)
    marker = f"\n... [{max(elided, 0)} lines truncated] ...\n"

    logger.debug("Diff truncated from %d to %d chars (%d lines elided)", len(diff), max_chars, elided)
    return f"{head}{marker}{tail}"


# Declarations worth naming in the prompt, one pattern per language family
SYMBOL_PATTERNS = [
    re.compile(r'^\s*(?:async\s+)?def\s+(\w+)\s*\('),
    re.compile(r'^\s*(?:export\s+)?(?:default\s+)?(?:abstract\s+)?class\s+(\w+)'),
    re.compile(r'^\s*(?:export\s+)?(?:default\s+)?(?:async\s+)?function\*?\s+(\w+)\s*\('),
    re.compile(r'^\s*(?:export\s+)?(?:const|let|var)\s+(\w+)\s*=\s*(?:async\s+)?(?:function\b|\([^)]*\)\s*=>)'),
    re.compile(r'^\s*(?:export\s+)?(?:interface|type)\s+(\w+)'),
    re.compile(r'^\s*func\s+(?:\([^)]*\)\s*)?(\w+)\s*\('),
    re.compile(r'^\s*(?:pub(?:\([^)]*\))?\s+)?(?:fn|struct|enum|trait)\s+(\w+)'),
]

_DIFF_FILE_RE = re.compile(r'^diff --git a/(.+?) b/')
_TEST_PATH_RE = re.compile(r'(^|/)(tests?|__tests__|spec)/|(^|/)test_[^/]*$|[._-](test|spec)\.[^/]+$')


def extract_symbols(diff: str) -> list[str]:
    """
    Names of functions, classes and types declared on added lines.

    Test files are skipped. Names keep first-seen order without repeats.
    """
    symbols: list[str] = []
    current_file = ""

    for line in diff.split('\n'):
        match = _DIFF_FILE_RE.match(line)
        if match:
            current_file = match.group(1)
            continue
        if not current_file or _TEST_PATH_RE.search(current_file):
            continue
        if not line.startswith('+') or line.startswith('+++'):
            continue

        for pattern in SYMBOL_PATTERNS:
            found = pattern.match(line[1:])
            if found:
                if found.group(1) not in symbols:
                    symbols.append(found.group(1))
                break

    return symbols


@dataclass
class DiffAnalysisContext:
    """Everything the prompt needs about the current change. Built fresh per run."""
    branch: str
    files: list[str] = field(default_factory=list)
    recent_commits: list[str] = field(default_factory=list)
    diff: str = ""
    file_details: list[tuple[str, int, int]] = field(default_factory=list)
    filtered_files: int = 0
    truncated: bool = False
    symbols: list[str] = field(default_factory=list)
    style: ProjectStyle | None = None

    @property
    def total_files(self) -> int:
        return len(self.files) + self.filtered_files


@dataclass
class ProcessorConfig:
    """Tunable settings for diff processing."""
    max_diff_chars: int = MAX_DIFF_SIZE


class DiffProcessor:
    """Transforms raw staged changes into an LLM-ready DiffAnalysisContext."""

    NOISE_PATTERNS: list[str] = [
        r'package-lock\.json$', r'yarn\.lock$', r'pnpm-lock\.yaml$',
        r'poetry\.lock$', r'Cargo\.lock$', r'Gemfile\.lock$', r'composer\.lock$',
        r'uv\.lock$', r'Pipfile\.lock$',
        r'\.min\.js$', r'\.min\.css$', r'\.map$', r'\.pyc$', r'__pycache__',
        r'(^|/)dist/', r'(^|/)build/', r'\.egg-info/',
        r'node_modules/', r'(^|/)vendor/', r'(^|/)\.?venv/',
        r'\.DS_Store$',
    ]

    # Directories that hold the real modules one level down
    CONTAINER_DIRS = ('src', 'lib', 'app')

    def __init__(self, config: ProcessorConfig | None = None):
        self.config = config or ProcessorConfig()
        self._noise_re = [re.compile(p, re.IGNORECASE) for p in self.NOISE_PATTERNS]

    def is_noise(self, path: str) -> bool:
        return any(p.search(path) for p in self._noise_re)

    def process(
        self,
        changes: StagedChanges,
        branch: str,
        recent_commits: list[str] | None = None,
        history: list[str] | None = None,
    ) -> DiffAnalysisContext:
        """
        Main entry point: raw changes -> LLM-ready context.

        ``history`` holds full past commit messages; when given, the project's
        commit style is summarised from it.
        """
        relevant = [f for f in changes.files if not self.is_noise(f.path)]
        noise_count = len(changes.files) - len(relevant)

        if not relevant:
            if noise_count:
                raise NoChangesError(
                    "Only lock files or generated files are staged. Stage the real changes first."
                )
            raise NoChangesError("No staged changes. Run 'git add' first.")

        if not changes.diff.strip():
            raise NoChangesError("No changes detected in the staged files.")

        diff = truncate_diff(changes.diff, self.config.max_diff_chars)

        return DiffAnalysisContext(
            branch=branch,
            files=[f.path for f in relevant],
            recent_commits=list(recent_commits or []),
            diff=diff,
            file_details=[(f.path, f.additions, f.deletions) for f in relevant],
            filtered_files=noise_count,
            truncated=diff != changes.diff,
            symbols=extract_symbols(changes.diff),
            style=analyze_project_style(history) if history else None,
        )

    def detect_scope(self, paths: list[str]) -> str | None:
        """Most common module directory among paths, as a scope-safe token."""
        directories = [FileChange(path=p, additions=0, deletions=0).directory for p in paths]
        candidates = [self._to_scope(d) for d in directories if d]
        candidates = [c for c in candidates if c and c not in self.CONTAINER_DIRS]
        if not candidates:
            return None
        return Counter(candidates).most_common(1)[0][0]

    @staticmethod
    def _to_scope(name: str) -> str:
        token = re.sub(r'[^a-z0-9-]+', '-', name.lower().lstrip('.'))
        return token.strip('-')
