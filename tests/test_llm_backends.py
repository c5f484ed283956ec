"""Tests for the OpenAI and Ollama generation backends and the factory."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import openai
import pytest

from recipe_rag.core.config import Settings
from recipe_rag.errors import BackendUnavailableError
from recipe_rag.services import llm
from recipe_rag.services.llm import (
    OllamaGenerationBackend,
    OpenAIGenerationBackend,
    create_generation_backend,
)


class TestOllamaGenerationBackend:
    @pytest.fixture
    def backend(self):
        return OllamaGenerationBackend(host="http://test:11434", model="gemma2:2b", timeout=5)

    @pytest.mark.asyncio
    async def test_generate_text(self, backend):
        mock_response = MagicMock()
        mock_response.json.return_value = {"response": "  Boil the pasta.  ", "done": True}
        mock_response.raise_for_status.return_value = None

        with patch.object(backend.client, "post", return_value=mock_response) as mock_post:
            text = await backend.generate_text("prompt", temperature=0.7, max_tokens=1500)

        assert text == "Boil the pasta."
        args, kwargs = mock_post.call_args
        assert args[0] == "/api/generate"
        assert kwargs["json"] == {
            "model": "gemma2:2b",
            "prompt": "prompt",
            "stream": False,
            "options": {"temperature": 0.7, "num_predict": 1500},
        }

    @pytest.mark.asyncio
    async def test_connection_error(self, backend):
        with patch.object(backend.client, "post", side_effect=httpx.ConnectError("refused")):
            with pytest.raises(BackendUnavailableError, match="Failed to reach Ollama"):
                await backend.generate_text("prompt", temperature=0.7, max_tokens=10)

    @pytest.mark.asyncio
    async def test_http_status_error(self, backend):
        request = httpx.Request("POST", "http://test:11434/api/generate")
        mock_response = MagicMock()
        mock_response.raise_for_status.side_effect = httpx.HTTPStatusError(
            "server error", request=request, response=httpx.Response(500, request=request),
        )

        with patch.object(backend.client, "post", return_value=mock_response):
            with pytest.raises(BackendUnavailableError, match="Ollama API error"):
                await backend.generate_text("prompt", temperature=0.7, max_tokens=10)

    @pytest.mark.asyncio
    async def test_context_manager_closes_client(self, backend):
        with patch.object(backend.client, "aclose", new_callable=AsyncMock) as mock_close:
            async with backend:
                pass
        mock_close.assert_awaited_once()


class TestOpenAIGenerationBackend:
    def _client(self, **create_kwargs):
        client = MagicMock()
        client.chat.completions.create = AsyncMock(**create_kwargs)
        return client

    @pytest.mark.asyncio
    async def test_generate_text(self):
        choice = MagicMock()
        choice.message.content = "  Sear the steak.  "
        client = self._client(return_value=MagicMock(choices=[choice]))
        backend = OpenAIGenerationBackend(model="gpt-4o-mini", client=client)

        text = await backend.generate_text("prompt", temperature=0.3, max_tokens=500)

        assert text == "Sear the steak."
        kwargs = client.chat.completions.create.await_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["messages"] == [{"role": "user", "content": "prompt"}]
        assert kwargs["temperature"] == 0.3
        assert kwargs["max_tokens"] == 500

    @pytest.mark.asyncio
    async def test_api_error_is_wrapped(self):
        error = openai.APIConnectionError(request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions"))
        backend = OpenAIGenerationBackend(model="gpt-4o-mini", client=self._client(side_effect=error))

        with pytest.raises(BackendUnavailableError):
            await backend.generate_text("prompt", temperature=0.7, max_tokens=10)

    @pytest.mark.asyncio
    async def test_empty_choices(self):
        backend = OpenAIGenerationBackend(model="m", client=self._client(return_value=MagicMock(choices=[])))
        assert await backend.generate_text("prompt", temperature=0.7, max_tokens=10) == ""


class TestOpenAIClientSingleton:
    def test_missing_key(self, monkeypatch):
        llm.reset_openai_client()
        monkeypatch.setattr(llm.settings, "openai_api_key", None)
        with pytest.raises(BackendUnavailableError, match="OPENAI_API_KEY"):
            llm.get_openai_client()

    def test_client_is_cached(self):
        llm.reset_openai_client()
        try:
            first = llm.get_openai_client(api_key="test-key")
            assert llm.get_openai_client() is first
        finally:
            llm.reset_openai_client()


class TestCreateGenerationBackend:
    def test_ollama(self):
        cfg = Settings(_env_file=None, llm_backend="ollama", ollama_host="http://test:11434", ollama_model="llama3.2")
        backend = create_generation_backend(cfg)
        assert isinstance(backend, OllamaGenerationBackend)
        assert backend.host == "http://test:11434"
        assert backend.model_name == "llama3.2"

    def test_openai(self):
        cfg = Settings(_env_file=None, llm_backend="OpenAI", openai_api_key="test-key", openai_model="gpt-4o")
        llm.reset_openai_client()
        try:
            backend = create_generation_backend(cfg)
            again = create_generation_backend(cfg)

            assert isinstance(backend, OpenAIGenerationBackend)
            assert backend.model_name == "gpt-4o"
            assert backend.client is llm.get_openai_client()
            assert again.client is backend.client
        finally:
            llm.reset_openai_client()

    def test_openai_without_key(self):
        cfg = Settings(_env_file=None, llm_backend="openai", openai_api_key=None)
        with pytest.raises(BackendUnavailableError, match="API key is required"):
            create_generation_backend(cfg)

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="Unsupported llm_backend"):
            create_generation_backend(Settings(_env_file=None, llm_backend="carrier-pigeon"))
