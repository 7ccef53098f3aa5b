"""CommitMessage entity and conventional-commit helpers."""

import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, Optional

from gortex import MAX_SUBJECT_LENGTH, MIN_BODY_LENGTH, MIN_SUBJECT_LENGTH
from gortex.domain.values import CommitSubject, CommitType, Scope
from gortex.errors import BodyTooShort

CONVENTIONAL_RE = re.compile(r'^(\w+)(?:\(([^)]+)\))?(!)?: (.+)$')


def _clean(text: Optional[str]) -> Optional[str]:
    if not isinstance(text, str):
        return None
    return text.strip() or None


@dataclass(frozen=True, eq=False)
class CommitMessage:
    """
    A complete conventional commit.

    Equality is structural: two messages are equal when they format to the
    same text.
    """
    type: CommitType
    subject: CommitSubject
    scope: Scope = field(default_factory=Scope.empty)
    body: Optional[str] = None
    breaking: bool = False
    breaking_change_description: Optional[str] = None

    def __post_init__(self):
        # Frozen: normalise through object.__setattr__ before anyone can see us
        object.__setattr__(self, 'scope', self.scope or Scope.empty())
        object.__setattr__(self, 'body', _clean(self.body))
        object.__setattr__(self, 'breaking', bool(self.breaking))
        object.__setattr__(self, 'breaking_change_description', _clean(self.breaking_change_description))

    @classmethod
    def create(
        cls,
        type: CommitType,
        subject: CommitSubject,
        scope: Optional[Scope] = None,
        body: Optional[str] = None,
        breaking: bool = False,
        breaking_change_description: Optional[str] = None,
        min_body_length: int = MIN_BODY_LENGTH,
    ) -> 'CommitMessage':
        cleaned_body = _clean(body)
        if cleaned_body is not None and len(cleaned_body) < min_body_length:
            raise BodyTooShort(
                f"Commit body too short ({len(cleaned_body)} chars). "
                f"Minimum {min_body_length} characters, or leave it empty.",
                field="body",
                value=body,
            )

        return cls(
            type=type,
            subject=subject,
            scope=scope or Scope.empty(),
            body=cleaned_body,
            breaking=breaking,
            breaking_change_description=breaking_change_description,
        )

    def format(self) -> str:
        """Render the exact text written as the git commit message."""
        header = str(self.type)
        if not self.scope.is_empty():
            header += f"({self.scope})"
        if self.breaking:
            header += "!"
        header += f": {self.subject}"

        sections = [header]
        if self.body:
            sections.append(self.body)
        if self.breaking and self.breaking_change_description:
            sections.append(f"BREAKING CHANGE: {self.breaking_change_description}")

        return "\n\n".join(sections)

    def __eq__(self, other) -> bool:
        if not isinstance(other, CommitMessage):
            return NotImplemented
        return self.format() == other.format()

    def __hash__(self) -> int:
        return hash(self.format())

    def __str__(self) -> str:
        return self.format()


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

def create_from_user_input(
    type: str,
    subject: str,
    scope: Optional[str] = None,
    body: Optional[str] = None,
    breaking: bool = False,
    breaking_description: Optional[str] = None,
    allowed_types: Optional[Iterable[str]] = None,
    max_subject_length: int = MAX_SUBJECT_LENGTH,
    min_body_length: int = MIN_BODY_LENGTH,
) -> CommitMessage:
    """Build a CommitMessage from raw strings, raising ValidationError on bad input."""
    return CommitMessage.create(
        type=CommitType.create(type, allowed_types),
        subject=CommitSubject.create(subject, max_subject_length),
        scope=Scope.create(scope),
        body=body,
        breaking=breaking,
        breaking_change_description=breaking_description,
        min_body_length=min_body_length,
    )


def create_from_ai_generated(
    result,
    allowed_types: Optional[Iterable[str]] = None,
    max_subject_length: int = MAX_SUBJECT_LENGTH,
    min_body_length: int = MIN_BODY_LENGTH,
) -> CommitMessage:
    """Build a CommitMessage from a provider's GenerationResult."""
    return create_from_user_input(
        type=result.type,
        subject=result.subject,
        scope=result.scope,
        body=result.body,
        breaking=result.breaking,
        breaking_description=result.breaking_description,
        allowed_types=allowed_types,
        max_subject_length=max_subject_length,
        min_body_length=min_body_length,
    )


# ---------------------------------------------------------------------------
# Parsing existing messages
# ---------------------------------------------------------------------------

@dataclass
class ParsedCommit:
    """Header fields recovered from a conventional commit message."""
    type: str
    subject: str
    scope: Optional[str] = None
    breaking: bool = False


def parse_conventional_commit(message: str) -> Optional[ParsedCommit]:
    """Parse the first line of ``message``. Returns None when it isn't conventional."""
    lines = (message or "").strip().split('\n')
    match = CONVENTIONAL_RE.match(lines[0])
    if not match:
        return None

    commit_type, scope, bang, subject = match.groups()
    subject = subject.strip()
    if len(subject) < MIN_SUBJECT_LENGTH:
        return None

    return ParsedCommit(
        type=commit_type,
        subject=subject,
        scope=scope or None,
        breaking=bang == "!",
    )


def is_conventional(message: str) -> bool:
    return parse_conventional_commit(message) is not None


@dataclass
class CommitStats:
    """Summary of how much of a history follows the convention."""
    total: int = 0
    conventional: int = 0
    type_breakdown: dict[str, int] = field(default_factory=dict)

    @property
    def non_conventional(self) -> int:
        return self.total - self.conventional

    @property
    def percentage(self) -> int:
        if self.total == 0:
            return 0
        return round(self.conventional / self.total * 100)


def analyze_commit_stats(messages: Iterable[str]) -> CommitStats:
    messages = list(messages)
    parsed = [p for p in (parse_conventional_commit(m) for m in messages) if p]
    breakdown = Counter(p.type for p in parsed)
    return CommitStats(
        total=len(messages),
        conventional=len(parsed),
        type_breakdown=dict(breakdown.most_common()),
    )


# ---------------------------------------------------------------------------
# Project style
# ---------------------------------------------------------------------------

DEFAULT_PREFERRED_TYPES = ("feat", "fix", "chore")
DEFAULT_SUBJECT_LENGTH = 50


@dataclass
class ProjectStyle:
    """How a repository usually writes its commit messages."""
    preferred_types: list[str] = field(default_factory=lambda: list(DEFAULT_PREFERRED_TYPES))
    common_scopes: list[str] = field(default_factory=list)
    avg_subject_length: int = DEFAULT_SUBJECT_LENGTH
    detail_level: str = "concise"  # or "detailed"
    convention_compliance: int = 0
    sample_size: int = 0


def _body_of(message: str) -> str:
    _, _, rest = message.strip().partition('\n')
    return rest.split("BREAKING CHANGE:")[0].strip()


def analyze_project_style(messages: Iterable[str]) -> ProjectStyle:
    """
    Summarise a commit history into a ProjectStyle.

    Types and scopes come from conventional commits only. Subject length,
    body usage and compliance are measured over every message. An empty
    history gives the defaults.
    """
    messages = [m for m in messages if m and m.strip()]
    if not messages:
        return ProjectStyle()

    parsed = [parse_conventional_commit(m) for m in messages]
    conventional = [p for p in parsed if p]

    subjects = [p.subject if p else m.strip().split('\n')[0].strip() for p, m in zip(parsed, messages)]
    with_body = sum(1 for m in messages if _body_of(m))

    types = [t for t, _ in Counter(p.type for p in conventional).most_common(3)]
    scopes = [s for s, _ in Counter(p.scope for p in conventional if p.scope).most_common(5)]

    return ProjectStyle(
        preferred_types=types or list(DEFAULT_PREFERRED_TYPES),
        common_scopes=scopes,
        avg_subject_length=round(sum(len(s) for s in subjects) / len(subjects)),
        detail_level="detailed" if with_body / len(messages) > 0.5 else "concise",
        convention_compliance=round(len(conventional) / len(messages) * 100),
        sample_size=len(messages),
    )
