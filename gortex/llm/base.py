"""LLM Base Classes and Shared Code"""

import logging
from abc import ABC, abstractmethod

from gortex.config import Config
from gortex.errors import GenerationFailed, InvalidAIResponse, ProviderUnavailable, ValidationError
from gortex.llm.parser import GenerationResult, parse_response
from gortex.prompts import GenerationContext, PromptBuilder

logger = logging.getLogger(__name__)


class LLMClient(ABC):
    """
    Abstract base for LLM clients.

    One generation attempt runs: availability probe -> single request ->
    parse/validate. Any failure surfaces immediately; nothing is retried.
    """

    #: Registry key, matches the config section name
    key: str = ""

    def __init__(self, config: Config | None = None):
        self.config = config or Config()
        self.prompts = PromptBuilder(self.config.max_subject_length)

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable provider name."""
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """Cheap reachability probe with a short timeout. Never raises."""
        pass

    @abstractmethod
    def _complete(self, system_prompt: str, user_prompt: str) -> str:
        """Send one chat request and return the raw text. Raises GenerationFailed."""
        pass

    def generate_commit_message(
        self, diff: str, context: GenerationContext, check_available: bool = True,
    ) -> GenerationResult:
        """Skip the availability check with check_available=False when the caller just ran it."""
        if check_available and not self.is_available():
            raise ProviderUnavailable(f"{self.name} is not reachable", provider=self.name)

        system_prompt = self.prompts.build_system_prompt(context.available_types)
        user_prompt = self.prompts.build_user_prompt(diff, context)
        logger.debug(
            "%s: prompt sizes system=%d user=%d chars",
            self.name, len(system_prompt), len(user_prompt),
        )

        content = self._complete(system_prompt, user_prompt)
        logger.debug("%s: received %d chars", self.name, len(content))

        try:
            return parse_response(content, self.config.max_subject_length)
        except (InvalidAIResponse, ValidationError) as e:
            raise GenerationFailed(f"{self.name} returned an unusable response: {e}", provider=self.name) from e
