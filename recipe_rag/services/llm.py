"""
Text-generation backends.

Two concrete backends share the ``generate_text`` shape the pipeline
expects:
  - OpenAIGenerationBackend: chat completions through a module-level
    AsyncOpenAI singleton
  - OllamaGenerationBackend: a local Ollama server over HTTP

Transport and API errors are re-raised as BackendUnavailableError so
the pipeline only has to know one exception type.
"""

from __future__ import annotations

import threading
from typing import Any

import httpx
from openai import AsyncOpenAI, OpenAIError

from recipe_rag.core.config import Settings, settings
from recipe_rag.errors import BackendUnavailableError
from recipe_rag.utils.logging import get_logger

logger = get_logger("recipe_rag.services.llm")


# ── Singleton OpenAI client ─────────────────────────────────────────
_client_lock = threading.Lock()
_client_instance: AsyncOpenAI | None = None


def get_openai_client(api_key: str | None = None) -> AsyncOpenAI:
    """
    Return a module-level AsyncOpenAI client singleton.

    Raises BackendUnavailableError when the API key is missing.
    """
    global _client_instance
    if _client_instance is not None:
        return _client_instance

    with _client_lock:
        if _client_instance is not None:
            return _client_instance

        key = api_key or settings.openai_api_key
        if not key:
            raise BackendUnavailableError("OpenAI API key not configured (OPENAI_API_KEY).")

        _client_instance = AsyncOpenAI(api_key=key)
        logger.info("OpenAI client singleton initialized.")
        return _client_instance


def reset_openai_client() -> None:
    """Drop the cached client (used by tests and on key rotation)."""
    global _client_instance
    with _client_lock:
        _client_instance = None


# ── OpenAI ──────────────────────────────────────────────────────────
class OpenAIGenerationBackend:
    """Chat-completions backend; one user message per prompt."""

    def __init__(self, model: str | None = None, client: AsyncOpenAI | None = None):
        self.model_name = model or settings.openai_model
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = get_openai_client()
        return self._client

    async def generate_text(self, prompt: str, *, temperature: float, max_tokens: int) -> str:
        try:
            resp = await self.client.chat.completions.create(
                model=self.model_name,
                messages=[{"role": "user", "content": prompt}],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except OpenAIError as e:
            logger.warning("[LLM] OpenAI call failed (model=%s): %s", self.model_name, e)
            raise BackendUnavailableError(f"OpenAI request failed: {e}") from e

        content = resp.choices[0].message.content if resp.choices else None
        return (content or "").strip()


# ── Ollama ──────────────────────────────────────────────────────────
class OllamaGenerationBackend:
    """Non-streaming ``/api/generate`` calls against a local Ollama server."""

    def __init__(
        self,
        host: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.host = host or settings.ollama_host
        self.model_name = model or settings.ollama_model
        self.client = client or httpx.AsyncClient(
            base_url=self.host,
            timeout=timeout or settings.generation_timeout_s,
        )

    async def generate_text(self, prompt: str, *, temperature: float, max_tokens: int) -> str:
        payload: dict[str, Any] = {
            "model": self.model_name,
            "prompt": prompt,
            "stream": False,
            "options": {"temperature": temperature, "num_predict": max_tokens},
        }
        try:
            response = await self.client.post("/api/generate", json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.warning(
                "[LLM] Ollama HTTP %s (model=%s, host=%s)",
                e.response.status_code, self.model_name, self.host,
            )
            raise BackendUnavailableError(f"Ollama API error: {e}") from e
        except httpx.HTTPError as e:
            logger.warning("[LLM] Ollama request failed (host=%s): %s", self.host, e)
            raise BackendUnavailableError(f"Failed to reach Ollama: {e}") from e

        return str(data.get("response", "")).strip()

    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> "OllamaGenerationBackend":
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.aclose()


# ── Factory ─────────────────────────────────────────────────────────
def create_generation_backend(
    cfg: Settings | None = None,
) -> OpenAIGenerationBackend | OllamaGenerationBackend:
    """Build the backend named by ``llm_backend``."""
    cfg = cfg or settings
    backend = (cfg.llm_backend or "").lower()

    if backend == "openai":
        if not cfg.openai_api_key:
            raise BackendUnavailableError("OpenAI API key is required for the openai backend.")
        return OpenAIGenerationBackend(
            model=cfg.openai_model,
            client=get_openai_client(cfg.openai_api_key),
        )
    if backend == "ollama":
        return OllamaGenerationBackend(
            host=cfg.ollama_host,
            model=cfg.ollama_model,
            timeout=cfg.generation_timeout_s,
        )
    raise ValueError(f"Unsupported llm_backend: {cfg.llm_backend!r}")
