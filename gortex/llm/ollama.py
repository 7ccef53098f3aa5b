"""Ollama LLM Client for Local Models"""

import http.client
import json
import logging
import socket
import urllib.error
import urllib.request

from gortex.config import Config
from gortex.errors import GenerationFailed
from gortex.llm.base import LLMClient

logger = logging.getLogger(__name__)


class OllamaClient(LLMClient):
    """Ollama client for local models. Requires: ollama serve"""

    key = "ollama"
    PROBE_TIMEOUT = 5

    def __init__(self, config: Config | None = None, model: str | None = None):
        super().__init__(config)
        settings = self.config.ollama
        self.model = model or self.config.model or settings.model
        self.host = settings.base_url.rstrip('/')
        self.timeout = settings.timeout

    @property
    def name(self) -> str:
        return f"Ollama ({self.model})"

    def is_available(self) -> bool:
        """Check Ollama is running and has the model pulled."""
        try:
            req = urllib.request.Request(f"{self.host}/api/tags")
            with urllib.request.urlopen(req, timeout=self.PROBE_TIMEOUT) as response:
                data = json.loads(response.read().decode('utf-8'))
        except (urllib.error.URLError, socket.timeout, http.client.HTTPException, OSError, ValueError) as e:
            logger.debug("Ollama probe failed: %s", e)
            return False

        models = data.get('models') if isinstance(data, dict) else None
        if not isinstance(models, list):
            logger.debug("Ollama /api/tags returned an unexpected payload: %.100r", data)
            return False

        names = [m['name'] for m in models if isinstance(m, dict) and isinstance(m.get('name'), str)]
        available = any(self._same_model(n) for n in names)
        if not available:
            logger.debug("Ollama model %s not pulled (have: %s)", self.model, ", ".join(names))
        return available

    def _same_model(self, name: str) -> bool:
        # An untagged model matches any tag of that model
        if ':' in self.model:
            return name == self.model
        return name.split(':')[0] == self.model

    def _call_api(self, system_prompt: str, user_prompt: str) -> dict:
        """Make a single API call to Ollama."""
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "stream": False,
            "format": "json",
            "options": {
                "temperature": self.config.temperature,
                "num_predict": self.config.max_tokens,
            },
        }

        data = json.dumps(payload).encode('utf-8')
        req = urllib.request.Request(
            f"{self.host}/api/chat",
            data=data,
            headers={"Content-Type": "application/json"},
        )

        with urllib.request.urlopen(req, timeout=self.timeout) as response:
            return json.loads(response.read().decode('utf-8'))

    def _complete(self, system_prompt: str, user_prompt: str) -> str:
        try:
            result = self._call_api(system_prompt, user_prompt)
            content = result["message"]["content"]
        except urllib.error.HTTPError as e:
            # HTTPError must come before URLError (it's a subclass)
            if e.code == 404:
                raise GenerationFailed(f"Model '{self.model}' not found. Run: ollama pull {self.model}", provider=self.name) from e
            raise GenerationFailed(f"Ollama error ({e.code}): {e.reason}", provider=self.name) from e
        except urllib.error.URLError as e:
            if isinstance(e.reason, socket.timeout):
                raise GenerationFailed(f"Request timed out after {self.timeout}s", provider=self.name) from e
            raise GenerationFailed(f"Ollama request failed: {e.reason}", provider=self.name) from e
        except socket.timeout as e:
            raise GenerationFailed(f"Request timed out after {self.timeout}s", provider=self.name) from e
        except ValueError as e:
            raise GenerationFailed("Invalid response from Ollama", provider=self.name) from e
        except (KeyError, TypeError) as e:
            raise GenerationFailed(f"Unexpected response shape from Ollama: missing {e}", provider=self.name) from e
        except http.client.HTTPException as e:
            raise GenerationFailed(f"Incomplete response from Ollama: {e}", provider=self.name) from e
        except OSError as e:
            raise GenerationFailed(f"Connection to Ollama lost: {e}", provider=self.name) from e

        if not isinstance(content, str):
            raise GenerationFailed("Unexpected response shape from Ollama: content is not text", provider=self.name)
        return content
