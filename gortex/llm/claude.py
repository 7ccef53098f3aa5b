"""Claude (Anthropic) LLM Client"""

import logging
import os

from gortex.config import Config
from gortex.errors import GenerationFailed, ProviderUnavailable
from gortex.llm.base import LLMClient

logger = logging.getLogger(__name__)


class ClaudeClient(LLMClient):
    """Claude API client. Requires ANTHROPIC_API_KEY or claude.api_key in .gortexrc"""

    key = "claude"
    PROBE_TIMEOUT = 5

    def __init__(self, config: Config | None = None, model: str | None = None):
        super().__init__(config)
        settings = self.config.claude
        self.api_key = settings.api_key or os.environ.get("ANTHROPIC_API_KEY")
        self.model = model or self.config.model or settings.model
        self.timeout = settings.timeout

        if not self.api_key:
            raise ProviderUnavailable(
                "No API key found. Set ANTHROPIC_API_KEY environment variable:\n"
                "  export ANTHROPIC_API_KEY='your-key-here'",
                provider="Claude",
            )

        try:
            from anthropic import Anthropic
        except ImportError:
            raise ProviderUnavailable(
                "Anthropic SDK not installed. Run:\n"
                "  pip install anthropic",
                provider="Claude",
            )
        # The SDK retries by default; a failed attempt must surface immediately
        self._client = Anthropic(api_key=self.api_key, timeout=self.timeout, max_retries=0)

    @property
    def name(self) -> str:
        return f"Claude ({self.model})"

    def is_available(self) -> bool:
        from anthropic import APIError

        try:
            self._client.models.list(limit=1, timeout=self.PROBE_TIMEOUT)
            return True
        except APIError as e:
            logger.debug("Claude probe failed: %s", e)
            return False

    def _complete(self, system_prompt: str, user_prompt: str) -> str:
        from anthropic import APIError, AuthenticationError

        try:
            response = self._client.messages.create(
                model=self.model,
                max_tokens=self.config.max_tokens,
                temperature=self.config.temperature,
                system=system_prompt,
                messages=[{"role": "user", "content": user_prompt}],
            )
        except AuthenticationError as e:
            raise GenerationFailed("Invalid API key. Check your ANTHROPIC_API_KEY.", provider=self.name) from e
        except APIError as e:
            raise GenerationFailed(f"Claude API error: {e.message}", provider=self.name) from e

        for block in response.content:
            if block.type == "text":
                return block.text
        return ""
