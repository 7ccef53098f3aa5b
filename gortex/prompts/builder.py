"""Prompt Builder - Construct LLM prompts for commit message generation."""

from dataclasses import dataclass, field

from gortex import COMMIT_TYPES, COMMIT_TYPE_NAMES, MAX_SUBJECT_LENGTH, RECENT_COMMITS_COUNT
from gortex.domain import ProjectStyle

MAX_PROMPT_SYMBOLS = 10

# Fields the model must return, in the order they are documented to it
RESPONSE_FIELDS = (
    "type", "scope", "subject", "body",
    "breaking", "breakingDescription", "confidence", "reasoning",
)

_RESPONSE_EXAMPLE = """\
{
  "type": "feat",
  "scope": "auth",
  "subject": "add token refresh endpoint",
  "body": "Clients can renew an expiring session without logging in again.",
  "breaking": false,
  "breakingDescription": null,
  "confidence": 85,
  "reasoning": "New endpoint in the auth module adds a capability."
}"""


@dataclass
class GenerationContext:
    """Repository context handed to a provider alongside the diff."""
    files: list[str]
    branch: str
    available_types: list[str] = field(default_factory=lambda: list(COMMIT_TYPE_NAMES))
    available_scopes: list[str] | None = None
    recent_commits: list[str] | None = None
    modified_symbols: list[str] | None = None
    project_style: ProjectStyle | None = None


class PromptBuilder:
    """Renders the system and user prompts. Pure string templating, no I/O."""

    def __init__(self, max_subject_length: int = MAX_SUBJECT_LENGTH):
        self.max_subject_length = max_subject_length

    def build_system_prompt(self, available_types: list[str]) -> str:
        sections = [
            self._build_role_section(),
            self._build_format_section(),
            self._build_types_section(available_types),
            self._build_rules_section(),
            self._build_response_section(available_types),
        ]
        return "\n\n".join(sections)

    def build_user_prompt(self, diff: str, context: GenerationContext) -> str:
        parts = [
            "=== CONTEXT ===",
            f"Branch: {context.branch}",
            f"Changed files: {', '.join(context.files)}",
        ]

        if context.available_scopes:
            parts.append(f"Suggested scopes: {', '.join(context.available_scopes)}")

        if context.modified_symbols:
            parts.append(f"Modified symbols: {self._format_symbols(context.modified_symbols)}")

        if context.recent_commits:
            parts.extend(["", "=== RECENT COMMITS (for context) ==="])
            for i, commit in enumerate(context.recent_commits[:RECENT_COMMITS_COUNT], 1):
                parts.append(f"{i}. {commit}")

        if context.project_style:
            parts.extend(["", *self._build_style_section(context.project_style)])

        parts.extend([
            "",
            "=== CHANGES (git diff) ===",
            diff,
            "",
            "Analyze these changes and respond with the conventional commit JSON object "
            "described in the system instructions.",
        ])
        return "\n".join(parts)

    @staticmethod
    def _format_symbols(symbols: list[str]) -> str:
        shown = ", ".join(symbols[:MAX_PROMPT_SYMBOLS])
        extra = len(symbols) - MAX_PROMPT_SYMBOLS
        return f"{shown} (and {extra} more)" if extra > 0 else shown

    def _build_style_section(self, style: ProjectStyle) -> list[str]:
        detail = "bodies are usual" if style.detail_level == "detailed" else "a subject line alone is usual"
        lines = [
            f"=== PROJECT STYLE (last {style.sample_size} commits) ===",
            f"Preferred types: {', '.join(style.preferred_types)}",
        ]
        if style.common_scopes:
            lines.append(f"Common scopes: {', '.join(style.common_scopes)}")
        lines.extend([
            f"Average subject length: {style.avg_subject_length} characters",
            f"Detail level: {style.detail_level} ({detail})",
            f"Conventional commits: {style.convention_compliance}%",
            "Match this style where it fits the change.",
        ])
        return lines

    def _build_role_section(self) -> str:
        return """You are an expert in git and the Conventional Commits specification.

Your task: analyze code changes and produce one conventional commit message for them.
- The DIFF shows WHAT changed. The body, if any, explains WHY.
- Identify the PRIMARY purpose of the change and describe that."""

    def _build_format_section(self) -> str:
        return """<format>
<type>(<scope>): <subject>

[optional body]

[optional footer]
</format>"""

    def _build_types_section(self, available_types: list[str]) -> str:
        lines = [f"  - {t}: {COMMIT_TYPES[t]}" if t in COMMIT_TYPES else f"  - {t}" for t in available_types]
        return (
            "AVAILABLE TYPES (use ONLY these, spelled exactly):\n"
            + "\n".join(lines)
            + "\n\nNever use long forms or synonyms: \"feature\" is \"feat\", "
            "\"bugfix\" is \"fix\", \"refactoring\" is \"refactor\", \"documentation\" is \"docs\"."
        )

    def _build_rules_section(self) -> str:
        return f"""RULES:
1. "type" MUST be exactly one of the available types
2. "scope" is optional: one lowercase word naming the module or area (letters, digits, hyphens)
3. "subject" is imperative mood, starts with a LOWERCASE letter, has no trailing period, max {self.max_subject_length} characters
   - correct: "add user authentication"
   - wrong: "Add user authentication."
4. "body" is optional; when present it explains why, in at least one full sentence
5. A breaking change sets "breaking" to true, which adds "!" after type/scope,
   and describes the incompatibility in "breakingDescription" (rendered as a "BREAKING CHANGE:" footer)"""

    def _build_response_section(self, available_types: list[str]) -> str:
        fields = ", ".join(RESPONSE_FIELDS)
        return f"""RESPONSE FORMAT:
Respond with a single JSON object and nothing else, with exactly these fields: {fields}
- "type" (required): string, one of: {', '.join(available_types)}
- "subject" (required): string
- "breaking" (required): boolean
- "confidence" (required): integer 0-100
- "scope", "body", "breakingDescription", "reasoning": string or null

Example:
{_RESPONSE_EXAMPLE}"""


def build_system_prompt(available_types: list[str], max_subject_length: int = MAX_SUBJECT_LENGTH) -> str:
    return PromptBuilder(max_subject_length).build_system_prompt(available_types)


def build_user_prompt(diff: str, context: GenerationContext) -> str:
    return PromptBuilder().build_user_prompt(diff, context)
