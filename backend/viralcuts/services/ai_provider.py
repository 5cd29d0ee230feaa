"""
AI Provider abstraction with Groq primary and OpenAI fallback.

Moment proposals are plain JSON chat completions, so both backends speak the
same request shape. Groq is tried first for speed; OpenAI is the fallback.
"""
import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

import httpx
from openai import OpenAI

from viralcuts.core.config import settings
from viralcuts.core.errors import AIProviderError

logger = logging.getLogger(__name__)

Messages = List[Dict[str, str]]


class ProviderName(str, Enum):
    GROQ = "groq"
    OPENAI = "openai"


@dataclass
class AIResponse:
    """Standardized AI response across providers."""
    content: str
    provider: ProviderName
    model: str
    tokens_used: int


class ChatProvider:
    """Base for OpenAI-compatible chat completion backends."""

    name: ProviderName

    def __init__(self, api_key: str, timeout: float):
        self.api_key = api_key
        self.timeout = timeout
        self._client = None

    def resolve_model(self, model: str) -> str:
        return model

    def build_payload(
        self,
        messages: Messages,
        model: str,
        temperature: float,
        json_mode: bool
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": self.resolve_model(model),
            "messages": messages,
            "temperature": temperature,
        }
        if json_mode:
            payload["response_format"] = {"type": "json_object"}
        return payload

    def complete(self, payload: Dict[str, Any]) -> AIResponse:
        raise NotImplementedError

    def generate(
        self,
        messages: Messages,
        model: str,
        temperature: float = 0.5,
        json_mode: bool = False
    ) -> AIResponse:
        return self.complete(self.build_payload(messages, model, temperature, json_mode))


class GroqProvider(ChatProvider):
    """Groq over raw HTTP."""

    name = ProviderName.GROQ
    BASE_URL = "https://api.groq.com/openai/v1"
    DEFAULT_MODEL = "llama-3.3-70b-versatile"

    # Our model names -> Groq equivalents
    MODEL_MAP = {
        "gpt-4o-mini": "llama-3.3-70b-versatile",
        "gpt-3.5-turbo": "llama-3.1-8b-instant",
    }

    def __init__(self, api_key: str, timeout: float = 120.0):
        super().__init__(api_key, timeout)

    @property
    def client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(
                base_url=self.BASE_URL,
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout
            )
        return self._client

    def resolve_model(self, model: str) -> str:
        return self.MODEL_MAP.get(model, self.DEFAULT_MODEL)

    def complete(self, payload: Dict[str, Any]) -> AIResponse:
        try:
            response = self.client.post("/chat/completions", json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise AIProviderError(f"Groq API error: {e.response.status_code} - {e.response.text}")
        except httpx.HTTPError as e:
            raise AIProviderError(f"Groq request failed: {e}")
        except ValueError as e:
            raise AIProviderError(f"Groq returned a non-JSON body: {e}")

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            raise AIProviderError("Groq response has no message content")

        usage = data.get("usage") or {}
        return AIResponse(
            content=content,
            provider=self.name,
            model=payload["model"],
            tokens_used=usage.get("total_tokens", 0)
        )


class OpenAIProvider(ChatProvider):
    """OpenAI through the official SDK."""

    name = ProviderName.OPENAI

    def __init__(self, api_key: str, timeout: float = 60.0):
        super().__init__(api_key, timeout)

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            self._client = OpenAI(api_key=self.api_key, timeout=self.timeout)
        return self._client

    def complete(self, payload: Dict[str, Any]) -> AIResponse:
        try:
            response = self.client.chat.completions.create(**payload)
        except Exception as e:
            raise AIProviderError(f"OpenAI request failed: {e}")

        return AIResponse(
            content=response.choices[0].message.content or "",
            provider=self.name,
            model=payload["model"],
            tokens_used=response.usage.total_tokens if response.usage else 0
        )


class AIProvider:
    """
    Chat completions with automatic fallback.

    Each configured backend is tried in order until one answers. Backends
    without an API key are skipped.
    """

    def __init__(
        self,
        groq_api_key: Optional[str] = None,
        openai_api_key: Optional[str] = None,
        timeout: Optional[float] = None
    ):
        self.groq_api_key = groq_api_key or settings.GROQ_API_KEY
        self.openai_api_key = openai_api_key or settings.OPENAI_API_KEY
        self.timeout = timeout or settings.OPENAI_REQUEST_TIMEOUT_SEC

        self._groq = None
        self._openai = None

    @property
    def groq(self) -> Optional[GroqProvider]:
        if self._groq is None and self.groq_api_key:
            self._groq = GroqProvider(self.groq_api_key, timeout=self.timeout)
        return self._groq

    @property
    def openai(self) -> Optional[OpenAIProvider]:
        if self._openai is None and self.openai_api_key:
            self._openai = OpenAIProvider(self.openai_api_key, timeout=self.timeout)
        return self._openai

    def provider_chain(self, prefer_provider: Optional[ProviderName] = None) -> List[ChatProvider]:
        """Configured backends in the order they should be tried."""
        chain = [p for p in (self.groq, self.openai) if p is not None]
        if prefer_provider is not None:
            chain.sort(key=lambda p: p.name != prefer_provider)
        return chain

    def generate(
        self,
        messages: Messages,
        model: str,
        temperature: float = 0.5,
        json_mode: bool = False,
        prefer_provider: Optional[ProviderName] = None
    ) -> AIResponse:
        """
        Generate a completion, falling back to the next backend on failure.

        Raises:
            AIProviderError: If no backend is configured or all of them fail
        """
        chain = self.provider_chain(prefer_provider)
        if not chain:
            raise AIProviderError("No AI providers configured. Set GROQ_API_KEY or OPENAI_API_KEY.")

        errors = []
        for provider in chain:
            try:
                result = provider.generate(
                    messages=messages,
                    model=model,
                    temperature=temperature,
                    json_mode=json_mode
                )
            except AIProviderError as e:
                logger.warning(f"[AI] {provider.name.value} failed: {e}")
                errors.append(e)
                continue

            logger.info(f"[AI] {provider.name.value} answered ({result.model}, {result.tokens_used} tokens)")
            return result

        raise AIProviderError(f"All providers failed. Last error: {errors[-1]}")

    def generate_json(self, messages: Messages, model: str, temperature: float = 0.5) -> Any:
        """Generate in JSON mode and parse the body."""
        response = self.generate(
            messages=messages,
            model=model,
            temperature=temperature,
            json_mode=True
        )
        return parse_json_content(response.content)


def parse_json_content(content: str) -> Any:
    """Parse JSON from model output, tolerating a markdown code fence."""
    text = (content or "").strip()

    if text.startswith("```"):
        text = text.split("```")[1]
        if text.startswith("json"):
            text = text[len("json"):]
        text = text.strip()

    return json.loads(text)
