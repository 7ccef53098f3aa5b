"""Commit Service - Orchestrates provider selection and message generation."""

import logging
from dataclasses import dataclass
from typing import Optional

from gortex.config import Config
from gortex.domain import CommitMessage, create_from_ai_generated, create_from_user_input
from gortex.errors import GenerationFailed, ValidationError
from gortex.git import DiffAnalysisContext, DiffProcessor
from gortex.llm import LLMClient, select_client
from gortex.prompts import GenerationContext

logger = logging.getLogger(__name__)


@dataclass
class CommitProposal:
    """A validated commit message plus what the provider said about it."""
    message: CommitMessage
    provider: str
    confidence: int
    reasoning: Optional[str] = None

    @property
    def formatted(self) -> str:
        return self.message.format()


class CommitService:
    """
    Turns a DiffAnalysisContext into a CommitProposal.

    The configured ``types`` list is the only source of allowed commit types:
    it is advertised in the prompt and enforced when the message is built.
    """

    def __init__(self, config: Config | None = None, processor: DiffProcessor | None = None):
        self.config = config or Config()
        self.processor = processor or DiffProcessor()

    def select_client(self, model: str | None = None) -> LLMClient:
        """First available provider. Raises ProviderUnavailable."""
        return select_client(self.config, model)

    def build_generation_context(self, analysis: DiffAnalysisContext) -> GenerationContext:
        scopes = list(self.config.scopes)
        if not scopes and self.config.detect_scope:
            detected = self.processor.detect_scope(analysis.files)
            if detected:
                scopes = [detected]

        return GenerationContext(
            files=analysis.files,
            branch=analysis.branch,
            available_types=list(self.config.types),
            available_scopes=scopes or None,
            recent_commits=analysis.recent_commits or None,
            modified_symbols=analysis.symbols or None,
            project_style=analysis.style,
        )

    def generate(
        self,
        analysis: DiffAnalysisContext,
        client: LLMClient | None = None,
        checked: bool = False,
    ) -> CommitProposal:
        """
        Run one generation attempt.

        Raises ProviderUnavailable when no backend can be reached and
        GenerationFailed when the backend's answer can't become a valid commit.
        Pass checked=True when ``client`` was just returned by select_client.
        """
        if client is None:
            client = self.select_client()
            checked = True
        context = self.build_generation_context(analysis)

        result = client.generate_commit_message(analysis.diff, context, check_available=not checked)

        try:
            message = create_from_ai_generated(
                result,
                allowed_types=self.config.types,
                max_subject_length=self.config.max_subject_length,
                min_body_length=self.config.min_body_length,
            )
        except ValidationError as e:
            logger.debug("%s proposal rejected: %s", client.name, e)
            raise GenerationFailed(f"{client.name} proposed an invalid commit: {e}", provider=client.name) from e

        return CommitProposal(
            message=message,
            provider=client.name,
            confidence=result.confidence,
            reasoning=result.reasoning,
        )

    def create_manual(
        self,
        type: str,
        subject: str,
        scope: Optional[str] = None,
        body: Optional[str] = None,
        breaking: bool = False,
        breaking_description: Optional[str] = None,
    ) -> CommitMessage:
        """Validate hand-typed fields with the configured rules. Raises ValidationError."""
        return create_from_user_input(
            type=type,
            subject=subject,
            scope=scope,
            body=body,
            breaking=breaking,
            breaking_description=breaking_description,
            allowed_types=self.config.types,
            max_subject_length=self.config.max_subject_length,
            min_body_length=self.config.min_body_length,
        )
