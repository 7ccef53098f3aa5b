"""Value objects: CommitType, Scope, CommitSubject.

Each is immutable and validated when created through ``create()``.
"""

import re
from dataclasses import dataclass
from typing import Iterable, Optional

from gortex import COMMIT_TYPE_NAMES, MAX_SUBJECT_LENGTH, MIN_SUBJECT_LENGTH
from gortex.errors import (
    EmptySubject,
    InvalidCommitType,
    InvalidScopeFormat,
    SubjectMustBeLowercaseStart,
    SubjectMustBeSingleLine,
    SubjectMustNotEndWithPeriod,
    SubjectTooLong,
    SubjectTooShort,
)

SCOPE_PATTERN = re.compile(r'^[a-z0-9-]+$')


@dataclass(frozen=True)
class CommitType:
    """A conventional commit type token such as ``feat`` or ``fix``."""
    value: str

    @classmethod
    def create(cls, value: str, allowed: Optional[Iterable[str]] = None) -> 'CommitType':
        """Validate against ``allowed`` (the configured types) or the default list."""
        allowed = list(allowed) if allowed is not None else COMMIT_TYPE_NAMES
        if value not in allowed:
            raise InvalidCommitType(
                f'Invalid commit type: "{value}". Must be one of: {", ".join(allowed)}',
                field="type",
                value=value,
            )
        return cls(value)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Scope:
    """Optional area of the codebase a commit touches. ``value`` is None when empty."""
    value: Optional[str] = None

    @classmethod
    def create(cls, value: Optional[str] = None) -> 'Scope':
        if value is None or not value.strip():
            return cls.empty()

        trimmed = value.strip()
        if not SCOPE_PATTERN.match(trimmed):
            raise InvalidScopeFormat(
                f"Scope must contain only lowercase letters, numbers, and hyphens. Got: {trimmed!r}",
                field="scope",
                value=value,
            )
        return cls(trimmed)

    @classmethod
    def empty(cls) -> 'Scope':
        return cls(None)

    def is_empty(self) -> bool:
        return self.value is None

    def __str__(self) -> str:
        return self.value or ""


@dataclass(frozen=True)
class CommitSubject:
    """The short imperative description on the first line."""
    value: str

    @classmethod
    def create(cls, value: str, max_length: int = MAX_SUBJECT_LENGTH) -> 'CommitSubject':
        trimmed = (value or "").strip()
        length = len(trimmed)

        if length == 0:
            raise EmptySubject("Commit subject cannot be empty", field="subject", value=value)

        if "\n" in trimmed or "\r" in trimmed:
            raise SubjectMustBeSingleLine("Commit subject must be a single line", field="subject", value=value)

        if length < MIN_SUBJECT_LENGTH:
            raise SubjectTooShort(
                f"Commit subject too short ({length} chars). Minimum {MIN_SUBJECT_LENGTH} characters required.",
                field="subject",
                value=value,
            )

        if length > max_length:
            raise SubjectTooLong(
                f"Commit subject too long ({length} chars). Maximum {max_length} characters allowed.",
                field="subject",
                value=value,
            )

        if trimmed[0] != trimmed[0].lower():
            raise SubjectMustBeLowercaseStart(
                "Commit subject should start with a lowercase letter",
                field="subject",
                value=value,
            )

        # Periods inside the subject (v2.0) are fine, only the trailing one is not
        if trimmed.endswith('.'):
            raise SubjectMustNotEndWithPeriod(
                "Commit subject should not end with a period",
                field="subject",
                value=value,
            )

        return cls(trimmed)

    def __len__(self) -> int:
        return len(self.value)

    def __str__(self) -> str:
        return self.value
