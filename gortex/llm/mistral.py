"""Mistral AI Client (chat-completions over HTTPS)"""

import http.client
import json
import logging
import os
import socket
import urllib.error
import urllib.request

from gortex.config import Config
from gortex.errors import GenerationFailed, ProviderUnavailable
from gortex.llm.base import LLMClient

logger = logging.getLogger(__name__)


class MistralClient(LLMClient):
    """Mistral API client. Requires MISTRAL_API_KEY or mistral.api_key in .gortexrc"""

    key = "mistral"
    PROBE_TIMEOUT = 5

    def __init__(self, config: Config | None = None, model: str | None = None):
        super().__init__(config)
        settings = self.config.mistral
        self.api_key = settings.api_key or os.environ.get("MISTRAL_API_KEY")
        self.model = model or self.config.model or settings.model
        self.base_url = settings.base_url.rstrip('/')
        self.timeout = settings.timeout

        if not self.api_key:
            raise ProviderUnavailable(
                "No API key found. Set MISTRAL_API_KEY environment variable:\n"
                "  export MISTRAL_API_KEY='your-key-here'",
                provider="Mistral",
            )

    @property
    def name(self) -> str:
        return f"Mistral ({self.model})"

    def _request(self, path: str, payload: dict | None = None, timeout: float | None = None) -> dict:
        headers = {"Authorization": f"Bearer {self.api_key}"}
        data = None
        if payload is not None:
            data = json.dumps(payload).encode('utf-8')
            headers["Content-Type"] = "application/json"

        req = urllib.request.Request(f"{self.base_url}{path}", data=data, headers=headers)
        with urllib.request.urlopen(req, timeout=timeout or self.timeout) as response:
            return json.loads(response.read().decode('utf-8'))

    def is_available(self) -> bool:
        try:
            data = self._request("/v1/models", timeout=self.PROBE_TIMEOUT)
        except (urllib.error.URLError, socket.timeout, http.client.HTTPException, OSError, ValueError) as e:
            logger.debug("Mistral probe failed: %s", e)
            return False

        if not isinstance(data, dict):
            logger.debug("Mistral /v1/models returned an unexpected payload: %.100r", data)
            return False
        return True

    def _complete(self, system_prompt: str, user_prompt: str) -> str:
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": self.config.temperature,
            "max_tokens": self.config.max_tokens,
            "response_format": {"type": "json_object"},
        }

        try:
            result = self._request("/v1/chat/completions", payload)
        except urllib.error.HTTPError as e:
            if e.code == 401:
                raise GenerationFailed("Invalid API key. Check your MISTRAL_API_KEY.", provider=self.name) from e
            raise GenerationFailed(f"Mistral API error ({e.code}): {e.reason}", provider=self.name) from e
        except urllib.error.URLError as e:
            raise GenerationFailed(f"Mistral request failed: {e.reason}", provider=self.name) from e
        except socket.timeout as e:
            raise GenerationFailed(f"Request timed out after {self.timeout}s", provider=self.name) from e
        except ValueError as e:
            raise GenerationFailed("Invalid response from Mistral", provider=self.name) from e
        except http.client.HTTPException as e:
            raise GenerationFailed(f"Incomplete response from Mistral: {e}", provider=self.name) from e
        except OSError as e:
            raise GenerationFailed(f"Connection to Mistral lost: {e}", provider=self.name) from e

        choices = result.get("choices") if isinstance(result, dict) else None
        if not choices:
            raise GenerationFailed("Mistral returned no choices", provider=self.name)

        first = choices[0] if isinstance(choices, list) else None
        message = first.get("message") if isinstance(first, dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str):
            raise GenerationFailed("Unexpected response shape from Mistral", provider=self.name)
        return content
