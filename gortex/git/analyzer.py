"""Git Analyzer - Thin wrapper over the git plumbing gortex needs."""

import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path

from gortex import RECENT_COMMITS_COUNT
from gortex.errors import GitError

logger = logging.getLogger(__name__)

# Separates messages in `git log` output; NUL never appears in commit text
_LOG_SEPARATOR = '\x00'


@dataclass
class FileChange:
    """Represents a single file's changes."""
    path: str
    additions: int
    deletions: int

    @property
    def total_changes(self) -> int:
        return self.additions + self.deletions

    @property
    def directory(self) -> str:
        """Top-level directory, looking inside src/lib/app containers. Empty for root files."""
        parts = Path(self.path).parts
        if len(parts) > 2 and parts[0] in ('src', 'lib', 'app'):
            return parts[1]
        return parts[0] if len(parts) > 1 else ''


@dataclass
class StagedChanges:
    """Complete picture of what's staged for commit."""
    files: list[FileChange] = field(default_factory=list)
    diff: str = ""

    @property
    def total_files(self) -> int:
        return len(self.files)

    @property
    def is_empty(self) -> bool:
        return len(self.files) == 0


class GitAnalyzer:
    """Reads staged changes and history, and creates the final commit."""

    def __init__(self, cwd: str | Path | None = None):
        self.cwd = cwd
        self._verify_git_available()
        self._verify_in_repo()

    def _run_git(self, *args: str, input: str | None = None) -> str:
        """Run a git command and return stdout."""
        logger.debug("git %s", " ".join(args))
        try:
            result = subprocess.run(
                ['git', *args],
                capture_output=True,
                text=True,
                check=True,
                encoding='utf-8',
                errors='replace',
                input=input,
                cwd=self.cwd,
            )
            return result.stdout
        except subprocess.CalledProcessError as e:
            raise GitError(f"Git command failed: git {' '.join(args)}\n{e.stderr}")
        except FileNotFoundError:
            raise GitError("Git is not installed or not in PATH")

    def _verify_git_available(self) -> None:
        """Fail fast if git isn't available."""
        try:
            self._run_git('--version')
        except GitError:
            raise GitError("Git is not installed or not in PATH")

    def _verify_in_repo(self) -> None:
        """Fail fast if we're not in a git repository."""
        try:
            self._run_git('rev-parse', '--git-dir')
        except GitError:
            raise GitError("Not inside a git repository")

    def status(self) -> list[FileChange]:
        """Staged files with line counts, from 'git diff --staged --numstat'."""
        output = self._run_git('diff', '--staged', '--numstat')

        if not output.strip():
            return []

        files = []
        for line in output.strip().split('\n'):
            parts = line.split('\t')
            if len(parts) >= 3:
                # Binary files report '-' for both counts
                additions = int(parts[0]) if parts[0] != '-' else 0
                deletions = int(parts[1]) if parts[1] != '-' else 0
                files.append(FileChange(path=parts[2], additions=additions, deletions=deletions))

        return files

    def diff(self, staged: bool = True, context_lines: int = 5) -> str:
        """Unified diff of the index (staged) or the working tree."""
        args = ['diff', '--no-color', f'-U{context_lines}']
        if staged:
            args.insert(1, '--staged')
        return self._run_git(*args)

    def current_branch(self) -> str:
        # Works on an unborn branch too, unlike rev-parse --abbrev-ref HEAD
        branch = self._run_git('branch', '--show-current').strip()
        return branch or 'HEAD'

    def recent_log(self, n: int = RECENT_COMMITS_COUNT) -> list[str]:
        """Subject lines of the last n commits. Empty for a repository without commits."""
        if not self._has_commits():
            return []
        output = self._run_git('log', f'-n{n}', '--pretty=format:%s')
        return [line for line in output.split('\n') if line.strip()]

    def log_messages(self, n: int) -> list[str]:
        """Full messages of the last n commits."""
        if not self._has_commits():
            return []
        output = self._run_git('log', f'-n{n}', f'--pretty=format:%B{_LOG_SEPARATOR}')
        return [m.strip() for m in output.split(_LOG_SEPARATOR) if m.strip()]

    def _has_commits(self) -> bool:
        try:
            self._run_git('rev-parse', '--verify', '--quiet', 'HEAD')
            return True
        except GitError:
            return False

    def get_staged_changes(self) -> StagedChanges:
        """Get staged changes only."""
        return StagedChanges(files=self.status(), diff=self.diff(staged=True))

    def create_commit(self, message: str) -> str:
        """Commit the index with ``message`` passed on stdin. Returns git's output."""
        return self._run_git('commit', '-F', '-', input=message)
