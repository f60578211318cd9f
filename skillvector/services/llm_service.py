"""Language-model gateway: one narrow `complete(system, user)` contract over OpenAI or Ollama."""

from abc import ABC, abstractmethod
from typing import Optional

import httpx
from openai import AsyncOpenAI

from skillvector.config import LLM_PRIORITY, Settings
from skillvector.errors import ProviderError
from skillvector.utils.logger import get_logger

logger = get_logger(__name__)


class LLMService(ABC):
    """Abstract text-completion provider."""

    name: str = "llm"

    @abstractmethod
    async def complete(self, system_prompt: str, user_prompt: str, temperature: float = 0.1) -> str:
        """Return the model's text answer. Raises ProviderError on any failure."""
        ...


class OpenAIChatService(LLMService):
    """OpenAI chat completions (e.g. gpt-4o-mini)."""

    name = "openai"

    def __init__(self, api_key: str, model: str, timeout: float = 30.0) -> None:
        self._model = model
        self._client = AsyncOpenAI(api_key=api_key, timeout=timeout)

    async def complete(self, system_prompt: str, user_prompt: str, temperature: float = 0.1) -> str:
        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=temperature,
            )
        except Exception as e:
            raise ProviderError(self.name, str(e)) from e
        choice = response.choices[0] if response.choices else None
        if not choice or not choice.message or not choice.message.content:
            raise ProviderError(self.name, "empty completion")
        return choice.message.content


class OllamaChatService(LLMService):
    """Local Ollama server via /api/generate (non-streaming)."""

    name = "ollama"

    def __init__(self, base_url: str, model: str, timeout: float = 30.0) -> None:
        self._base_url = base_url.rstrip("/")
        self._model = model
        self._timeout = timeout

    async def complete(self, system_prompt: str, user_prompt: str, temperature: float = 0.1) -> str:
        body = {
            "model": self._model,
            "system": system_prompt,
            "prompt": user_prompt,
            "stream": False,
            "options": {"temperature": temperature},
        }
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(f"{self._base_url}/api/generate", json=body)
                resp.raise_for_status()
                data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            raise ProviderError(self.name, str(e)) from e
        text = (data or {}).get("response")
        if not text:
            raise ProviderError(self.name, "empty completion")
        return text


def _usable(provider: str, settings: Settings) -> bool:
    if provider == "openai":
        return bool(settings.openai_api_key)
    if provider == "ollama":
        return bool(settings.ollama_base_url)
    return False


def _build(provider: str, settings: Settings) -> LLMService:
    if provider == "openai":
        return OpenAIChatService(
            settings.openai_api_key, settings.openai_model, settings.provider_timeout_seconds
        )
    if provider == "ollama":
        return OllamaChatService(
            settings.ollama_base_url, settings.ollama_model, settings.provider_timeout_seconds
        )
    raise ValueError(f"Unknown LLM provider: {provider}")


def get_llm_service(settings: Settings, provider: Optional[str] = None) -> Optional[LLMService]:
    """
    Bind the language-model provider once. An explicit provider (argument or
    LLM_PROVIDER) wins; otherwise the first credentialed entry of LLM_PRIORITY.
    Returns None when nothing is configured; callers then use their fallbacks.
    """
    forced = (provider or settings.llm_provider or "").strip().lower()
    if forced:
        if not _usable(forced, settings):
            logger.warning("LLM provider %s forced but not configured", forced)
        return _build(forced, settings)
    for candidate in LLM_PRIORITY:
        if _usable(candidate, settings):
            logger.info("Using %s language model", candidate)
            return _build(candidate, settings)
    logger.warning("No language model configured; filter extraction and summaries will use fallbacks")
    return None
