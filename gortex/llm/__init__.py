"""LLM Client Package"""

import logging

from gortex.config import Config
from gortex.errors import LLMError, ProviderUnavailable, GenerationFailed
from gortex.llm.base import LLMClient
from gortex.llm.parser import GenerationResult, extract_json, parse_json, validate_response, parse_response
from gortex.llm.claude import ClaudeClient
from gortex.llm.mistral import MistralClient
from gortex.llm.ollama import OllamaClient

logger = logging.getLogger(__name__)

PROVIDERS: dict[str, type[LLMClient]] = {
    "ollama": OllamaClient,
    "claude": ClaudeClient,
    "mistral": MistralClient,
}

NO_PROVIDER_HELP = (
    "No LLM provider available.\n\n"
    "Option 1 - Use Ollama (free, local):\n"
    "  1. Install: https://ollama.ai\n"
    "  2. Start: ollama serve\n"
    "  3. Pull: ollama pull mistral:7b\n\n"
    "Option 2 - Use a hosted API:\n"
    "  export ANTHROPIC_API_KEY='your-key-here'\n"
    "  export MISTRAL_API_KEY='your-key-here'"
)


def get_client(provider: str, config: Config | None = None, model: str | None = None) -> LLMClient:
    """Build the client for one named provider. Raises ProviderUnavailable if unconfigured."""
    if provider not in PROVIDERS:
        raise LLMError(f"Unknown provider: {provider}. Use {', '.join(PROVIDERS)} or 'auto'.")
    return PROVIDERS[provider](config=config, model=model)


def select_client(config: Config | None = None, model: str | None = None) -> LLMClient:
    """
    Return the first available client.

    With provider 'auto' the candidates are config.preference, probed one at a
    time in order; otherwise only the configured provider is tried.
    """
    config = config or Config()
    candidates = config.preference if config.provider == "auto" else [config.provider]

    last_error = None
    for name in candidates:
        try:
            client = get_client(name, config, model)
        except ProviderUnavailable as e:
            logger.debug("Skipping %s: %s", name, e)
            last_error = e
            continue

        if client.is_available():
            logger.debug("Selected provider %s", client.name)
            return client
        logger.debug("%s is not reachable", client.name)
        last_error = ProviderUnavailable(f"{client.name} is not reachable", provider=client.name)

    if config.provider != "auto" and last_error is not None:
        raise last_error
    raise ProviderUnavailable(NO_PROVIDER_HELP)


__all__ = [
    "LLMClient",
    "LLMError",
    "ProviderUnavailable",
    "GenerationFailed",
    "GenerationResult",
    "ClaudeClient",
    "MistralClient",
    "OllamaClient",
    "PROVIDERS",
    "get_client",
    "select_client",
    "extract_json",
    "parse_json",
    "validate_response",
    "parse_response",
]
