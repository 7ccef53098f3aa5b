"""
Unit tests for LLM providers and provider selection.

HTTP providers run against a stubbed urllib.request.urlopen; the Claude
client gets a fake SDK client swapped in after construction.

Run with:
    pytest tests/test_providers.py -v
"""

import http.client
import json
import socket
import urllib.error
import urllib.request
from types import SimpleNamespace

import pytest

import gortex.llm as llm
from gortex.config import Config, ClaudeSettings, MistralSettings
from gortex.errors import GenerationFailed, InvalidAIResponse, LLMError, ProviderUnavailable
from gortex.llm import ClaudeClient, LLMClient, MistralClient, OllamaClient, get_client, select_client
from gortex.prompts import GenerationContext

GOOD_JSON = json.dumps({
    "type": "feat",
    "scope": "auth",
    "subject": "add login endpoint",
    "body": None,
    "breaking": False,
    "breakingDescription": None,
    "confidence": 90,
    "reasoning": "New endpoint in the auth module.",
})


@pytest.fixture
def context():
    return GenerationContext(files=["src/auth/login.py"], branch="main")


# ---------------------------------------------------------------------------
# urlopen stub
# ---------------------------------------------------------------------------

class FakeResponse:

    def __init__(self, payload):
        self._body = payload if isinstance(payload, bytes) else json.dumps(payload).encode('utf-8')

    def read(self):
        return self._body

    def __enter__(self):
        return self

    def __exit__(self, *args):
        return False


@pytest.fixture
def fake_urlopen(monkeypatch):
    """
    Install a urlopen stub. ``routes`` maps a URL path suffix to a payload,
    or to an exception instance to raise. Returns the list of requests made.
    """
    def _install(routes):
        requests = []

        def _urlopen(req, timeout=None):
            requests.append((req, timeout))
            for suffix, outcome in routes.items():
                if req.full_url.endswith(suffix):
                    if isinstance(outcome, BaseException):
                        raise outcome
                    return FakeResponse(outcome)
            raise urllib.error.URLError("connection refused")

        monkeypatch.setattr(urllib.request, "urlopen", _urlopen)
        return requests
    return _install


def _http_error(code, reason="error"):
    return urllib.error.HTTPError("http://test", code, reason, None, None)


# ---------------------------------------------------------------------------
# Ollama
# ---------------------------------------------------------------------------

class TestOllamaClient:

    TAGS = {"models": [{"name": "mistral:7b"}, {"name": "llama3:8b"}]}

    def test_defaults(self):
        client = OllamaClient()
        assert client.model == "mistral:7b"
        assert client.host == "http://localhost:11434"
        assert client.name == "Ollama (mistral:7b)"

    def test_model_override(self):
        assert OllamaClient(model="qwen2.5-coder:7b").model == "qwen2.5-coder:7b"
        assert OllamaClient(Config(model="llama3:8b")).model == "llama3:8b"

    def test_available_when_model_pulled(self, fake_urlopen):
        requests = fake_urlopen({"/api/tags": self.TAGS})
        assert OllamaClient().is_available()
        assert requests[0][1] == OllamaClient.PROBE_TIMEOUT

    def test_unavailable_when_model_missing(self, fake_urlopen):
        fake_urlopen({"/api/tags": {"models": [{"name": "llama3:8b"}]}})
        assert not OllamaClient().is_available()

    def test_unavailable_when_server_down(self, fake_urlopen):
        fake_urlopen({})
        assert not OllamaClient().is_available()

    def test_unavailable_on_timeout(self, fake_urlopen):
        fake_urlopen({"/api/tags": socket.timeout("timed out")})
        assert not OllamaClient().is_available()

    def test_unavailable_on_bad_status_line(self, fake_urlopen):
        fake_urlopen({"/api/tags": http.client.BadStatusLine("x")})
        assert not OllamaClient().is_available()

    @pytest.mark.parametrize("body", [b'[]', b'"ok"', b'{"models": {"name": "mistral:7b"}}', b'\xff\xfe'])
    def test_unavailable_on_unexpected_payload(self, fake_urlopen, body):
        fake_urlopen({"/api/tags": body})
        assert not OllamaClient().is_available()

    def test_non_dict_model_entries_skipped(self, fake_urlopen):
        fake_urlopen({"/api/tags": {"models": ["mistral:7b", None, {"name": "mistral:7b"}]}})
        assert OllamaClient().is_available()

    @pytest.mark.parametrize("model, pulled, expected", [
        ("mistral", ["mistral-nemo:12b"], False),
        ("mistral", ["mistral:latest"], True),
        ("mistral:7b", ["mistral:latest"], False),
        ("mistral:7b", ["mistral-nemo:7b"], False),
        ("llama3", ["llama3:8b", "qwen2.5-coder:7b"], True),
    ])
    def test_model_name_match(self, fake_urlopen, model, pulled, expected):
        fake_urlopen({"/api/tags": {"models": [{"name": n} for n in pulled]}})
        assert OllamaClient(model=model).is_available() is expected

    def test_generate(self, fake_urlopen, context):
        requests = fake_urlopen({
            "/api/tags": self.TAGS,
            "/api/chat": {"message": {"content": GOOD_JSON}},
        })
        result = OllamaClient().generate_commit_message("+login", context)

        assert (result.type, result.scope, result.subject) == ("feat", "auth", "add login endpoint")
        assert result.confidence == 90

        chat_req, timeout = requests[-1]
        payload = json.loads(chat_req.data)
        assert payload["model"] == "mistral:7b"
        assert payload["format"] == "json"
        assert payload["stream"] is False
        assert payload["options"] == {"temperature": 0.3, "num_predict": 500}
        assert [m["role"] for m in payload["messages"]] == ["system", "user"]
        assert "+login" in payload["messages"][1]["content"]
        assert timeout == 30

    def test_generate_when_unreachable(self, fake_urlopen, context):
        fake_urlopen({})
        with pytest.raises(ProviderUnavailable):
            OllamaClient().generate_commit_message("+x", context)

    def test_model_not_found(self, fake_urlopen, context):
        fake_urlopen({"/api/tags": self.TAGS, "/api/chat": _http_error(404, "Not Found")})
        with pytest.raises(GenerationFailed, match="ollama pull mistral:7b"):
            OllamaClient().generate_commit_message("+x", context)

    def test_server_error(self, fake_urlopen, context):
        fake_urlopen({"/api/tags": self.TAGS, "/api/chat": _http_error(500, "Internal Server Error")})
        with pytest.raises(GenerationFailed, match="500"):
            OllamaClient().generate_commit_message("+x", context)

    def test_unexpected_shape(self, fake_urlopen, context):
        fake_urlopen({"/api/tags": self.TAGS, "/api/chat": {"done": True}})
        with pytest.raises(GenerationFailed, match="Unexpected response shape"):
            OllamaClient().generate_commit_message("+x", context)

    def test_content_not_text(self, fake_urlopen, context):
        fake_urlopen({"/api/tags": self.TAGS, "/api/chat": {"message": {"content": 42}}})
        with pytest.raises(GenerationFailed, match="not text"):
            OllamaClient().generate_commit_message("+x", context)

    def test_list_body(self, fake_urlopen, context):
        fake_urlopen({"/api/tags": self.TAGS, "/api/chat": b'[]'})
        with pytest.raises(GenerationFailed, match="Unexpected response shape"):
            OllamaClient().generate_commit_message("+x", context)

    def test_prose_response(self, fake_urlopen, context):
        fake_urlopen({"/api/tags": self.TAGS, "/api/chat": {"message": {"content": "Sorry, I cannot help."}}})
        with pytest.raises(GenerationFailed) as exc_info:
            OllamaClient().generate_commit_message("+x", context)
        assert isinstance(exc_info.value.__cause__, InvalidAIResponse)

    def test_single_request_per_attempt(self, fake_urlopen, context):
        requests = fake_urlopen({"/api/tags": self.TAGS, "/api/chat": _http_error(503, "Busy")})
        with pytest.raises(GenerationFailed):
            OllamaClient().generate_commit_message("+x", context)
        assert [r.full_url.rsplit('/', 2)[-1] for r, _ in requests] == ["tags", "chat"]


# ---------------------------------------------------------------------------
# Mistral
# ---------------------------------------------------------------------------

@pytest.fixture
def mistral_config():
    return Config(mistral=MistralSettings(api_key="test-key"))


class TestMistralClient:

    def test_requires_key(self, monkeypatch):
        monkeypatch.delenv("MISTRAL_API_KEY", raising=False)
        with pytest.raises(ProviderUnavailable, match="MISTRAL_API_KEY"):
            MistralClient()

    def test_key_from_environment(self, monkeypatch):
        monkeypatch.setenv("MISTRAL_API_KEY", "env-key")
        assert MistralClient().api_key == "env-key"

    def test_available(self, fake_urlopen, mistral_config):
        requests = fake_urlopen({"/v1/models": {"data": []}})
        assert MistralClient(mistral_config).is_available()
        req, timeout = requests[0]
        assert req.get_header("Authorization") == "Bearer test-key"
        assert timeout == MistralClient.PROBE_TIMEOUT

    def test_unavailable_on_auth_failure(self, fake_urlopen, mistral_config):
        fake_urlopen({"/v1/models": _http_error(401, "Unauthorized")})
        assert not MistralClient(mistral_config).is_available()

    def test_unavailable_on_bad_status_line(self, fake_urlopen, mistral_config):
        fake_urlopen({"/v1/models": http.client.BadStatusLine("x")})
        assert not MistralClient(mistral_config).is_available()

    @pytest.mark.parametrize("body", [b'[]', b'null', b'not json'])
    def test_unavailable_on_unexpected_payload(self, fake_urlopen, mistral_config, body):
        fake_urlopen({"/v1/models": body})
        assert not MistralClient(mistral_config).is_available()

    def test_generate(self, fake_urlopen, mistral_config, context):
        requests = fake_urlopen({
            "/v1/models": {"data": []},
            "/v1/chat/completions": {"choices": [{"message": {"content": GOOD_JSON}}]},
        })
        result = MistralClient(mistral_config).generate_commit_message("+login", context)
        assert result.subject == "add login endpoint"

        payload = json.loads(requests[-1][0].data)
        assert payload["model"] == "mistral-small-latest"
        assert payload["response_format"] == {"type": "json_object"}
        assert payload["max_tokens"] == 500

    def test_invalid_key(self, fake_urlopen, mistral_config, context):
        fake_urlopen({"/v1/models": {"data": []}, "/v1/chat/completions": _http_error(401, "Unauthorized")})
        with pytest.raises(GenerationFailed, match="Invalid API key"):
            MistralClient(mistral_config).generate_commit_message("+x", context)

    def test_no_choices(self, fake_urlopen, mistral_config, context):
        fake_urlopen({"/v1/models": {"data": []}, "/v1/chat/completions": {"choices": []}})
        with pytest.raises(GenerationFailed, match="no choices"):
            MistralClient(mistral_config).generate_commit_message("+x", context)

    @pytest.mark.parametrize("body", [b'[]', b'"done"', b'{"choices": {"message": "x"}}'])
    def test_completion_not_an_object(self, fake_urlopen, mistral_config, context, body):
        fake_urlopen({"/v1/models": {"data": []}, "/v1/chat/completions": body})
        with pytest.raises(GenerationFailed):
            MistralClient(mistral_config).generate_commit_message("+x", context)

    @pytest.mark.parametrize("choice", ["text", None, {"message": "text"}, {"message": {"content": None}}])
    def test_malformed_choice(self, fake_urlopen, mistral_config, context, choice):
        fake_urlopen({"/v1/models": {"data": []}, "/v1/chat/completions": {"choices": [choice]}})
        with pytest.raises(GenerationFailed, match="Unexpected response shape"):
            MistralClient(mistral_config).generate_commit_message("+x", context)

    def test_bad_status_line_on_completion(self, fake_urlopen, mistral_config, context):
        fake_urlopen({"/v1/models": {"data": []}, "/v1/chat/completions": http.client.BadStatusLine("x")})
        with pytest.raises(GenerationFailed, match="Incomplete response"):
            MistralClient(mistral_config).generate_commit_message("+x", context)


# ---------------------------------------------------------------------------
# Claude
# ---------------------------------------------------------------------------

class FakeAnthropic:
    """Mimics the parts of anthropic.Anthropic the client uses."""

    def __init__(self, text=GOOD_JSON):
        self.created = []
        self.models = SimpleNamespace(list=lambda **kwargs: [])
        self.messages = SimpleNamespace(create=self._create)
        self._text = text

    def _create(self, **kwargs):
        self.created.append(kwargs)
        return SimpleNamespace(content=[SimpleNamespace(type="text", text=self._text)])


@pytest.fixture
def claude_client():
    client = ClaudeClient(Config(claude=ClaudeSettings(api_key="test-key")))
    client._client = FakeAnthropic()
    return client


class TestClaudeClient:

    def test_requires_key(self, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        with pytest.raises(ProviderUnavailable, match="ANTHROPIC_API_KEY"):
            ClaudeClient()

    def test_sdk_retries_disabled(self):
        client = ClaudeClient(Config(claude=ClaudeSettings(api_key="test-key")))
        assert client._client.max_retries == 0

    def test_name(self, claude_client):
        assert claude_client.name == "Claude (claude-sonnet-4-20250514)"

    def test_available(self, claude_client):
        assert claude_client.is_available()

    def test_generate(self, claude_client, context):
        result = claude_client.generate_commit_message("+login", context)
        assert result.type == "feat"

        call = claude_client._client.created[0]
        assert call["model"] == "claude-sonnet-4-20250514"
        assert call["max_tokens"] == 500
        assert "AVAILABLE TYPES" in call["system"]
        assert call["messages"][0]["role"] == "user"

    def test_prose_response(self, claude_client, context):
        claude_client._client = FakeAnthropic(text="Sorry, I cannot help.")
        with pytest.raises(GenerationFailed):
            claude_client.generate_commit_message("+x", context)


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------

class ProbeLog:
    calls: list = []


def _fake_provider(provider_key, available=True, configured=True):
    class _Fake(LLMClient):
        key = provider_key

        def __init__(self, config=None, model=None):
            if not configured:
                raise ProviderUnavailable(f"{provider_key} has no API key", provider=provider_key)
            super().__init__(config)

        @property
        def name(self):
            return provider_key

        def is_available(self):
            ProbeLog.calls.append(provider_key)
            return available

        def _complete(self, system_prompt, user_prompt):
            return GOOD_JSON

    return _Fake


@pytest.fixture
def providers(monkeypatch):
    ProbeLog.calls = []

    def _install(**overrides):
        for name, options in overrides.items():
            monkeypatch.setitem(llm.PROVIDERS, name, _fake_provider(name, **options))
        return ProbeLog.calls
    return _install


class TestSelectClient:

    def test_first_available_in_preference_order(self, providers):
        probes = providers(
            ollama={"available": False},
            claude={"available": True},
            mistral={"available": True},
        )
        client = select_client(Config())
        assert client.name == "claude"
        assert probes == ["ollama", "claude"]

    def test_custom_preference(self, providers):
        providers(ollama={}, claude={}, mistral={})
        assert select_client(Config(preference=["mistral", "ollama"])).name == "mistral"

    def test_unconfigured_provider_skipped(self, providers):
        probes = providers(
            ollama={"available": False},
            claude={"configured": False},
            mistral={"available": True},
        )
        assert select_client(Config()).name == "mistral"
        assert probes == ["ollama", "mistral"]

    def test_none_available(self, providers):
        providers(
            ollama={"available": False},
            claude={"configured": False},
            mistral={"available": False},
        )
        with pytest.raises(ProviderUnavailable, match="No LLM provider available"):
            select_client(Config())

    def test_explicit_provider_only(self, providers):
        probes = providers(ollama={"available": True}, claude={"available": False}, mistral={})
        with pytest.raises(ProviderUnavailable, match="claude is not reachable"):
            select_client(Config(provider="claude"))
        assert probes == ["claude"]

    def test_explicit_provider_unconfigured(self, providers):
        providers(ollama={}, claude={"configured": False}, mistral={})
        with pytest.raises(ProviderUnavailable, match="no API key"):
            select_client(Config(provider="claude"))

    def test_unknown_provider(self):
        with pytest.raises(LLMError, match="Unknown provider"):
            get_client("openai")
