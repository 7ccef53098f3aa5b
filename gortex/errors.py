"""Exception hierarchy shared by every layer."""


class GortexError(Exception):
    """Base class for all gortex errors."""
    pass


# ---------------------------------------------------------------------------
# Domain validation
# ---------------------------------------------------------------------------

class ValidationError(GortexError):
    """A value object or entity invariant was violated."""

    def __init__(self, message: str, field: str | None = None, value=None):
        super().__init__(message)
        self.field = field
        self.value = value


class InvalidCommitType(ValidationError):
    pass


class InvalidScopeFormat(ValidationError):
    pass


class EmptySubject(ValidationError):
    pass


class SubjectTooShort(ValidationError):
    pass


class SubjectTooLong(ValidationError):
    pass


class SubjectMustBeLowercaseStart(ValidationError):
    pass


class SubjectMustNotEndWithPeriod(ValidationError):
    pass


class SubjectMustBeSingleLine(ValidationError):
    pass


class BodyTooShort(ValidationError):
    pass


# ---------------------------------------------------------------------------
# LLM responses and providers
# ---------------------------------------------------------------------------

class InvalidAIResponse(GortexError):
    """LLM output could not be turned into a commit message."""
    pass


class MissingOrInvalidType(InvalidAIResponse):
    pass


class MissingOrInvalidSubject(InvalidAIResponse):
    pass


class LLMError(GortexError):
    """Raised when LLM operations fail."""

    def __init__(self, message: str, provider: str = ""):
        super().__init__(message)
        self.provider = provider


class ProviderUnavailable(LLMError):
    """The backend is unconfigured or unreachable. Never retried."""
    pass


class GenerationFailed(LLMError):
    """The backend answered with an error or with unusable content."""
    pass


# ---------------------------------------------------------------------------
# Git
# ---------------------------------------------------------------------------

class GitError(GortexError):
    """Raised when git operations fail."""
    pass


class NoChangesError(GitError):
    """Nothing relevant is staged."""
    pass
