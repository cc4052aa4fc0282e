# backend/tubemaster/clients/chat_client.py

import asyncio
import logging
from typing import Any, Dict, List, Optional

import requests

from ..config import Settings
from ..errors import ConfigurationError, MalformedOutputError, TransportError
from ..sanitizer import strip_reasoning

log = logging.getLogger("tubemaster")

Message = Dict[str, Any]


def _error_message(response: requests.Response) -> str:
    """Best-effort extraction of a provider error message from a failed response."""
    try:
        body = response.json()
    except ValueError:
        return (response.text or response.reason or "").strip()[:500]

    if isinstance(body, dict):
        err = body.get("error")
        if isinstance(err, dict) and err.get("message"):
            return str(err["message"])
        if isinstance(err, str):
            return err
        if body.get("message"):
            return str(body["message"])
    return str(body)[:500]


class ChatCompletionClient:
    """
    Minimal client for OpenAI-compatible /chat/completions endpoints.

    One POST per call, no retries. The blocking request runs in a worker
    thread so callers can await it.
    """

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str],
        model: str,
        *,
        provider_name: str = "chat",
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        extra_headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        if not api_key:
            raise ConfigurationError(f"{provider_name} API key is missing.")
        self.url = base_url.rstrip("/") + "/chat/completions"
        self.api_key = api_key
        self.model = model
        self.provider_name = provider_name
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.extra_headers = dict(extra_headers or {})
        self.timeout = timeout
        self.session = session or requests.Session()

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        headers.update(self.extra_headers)
        return headers

    def build_payload(self, messages: List[Message], json_mode: bool) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"model": self.model, "messages": messages}
        if json_mode:
            payload["response_format"] = {"type": "json_object"}
        if self.temperature is not None:
            payload["temperature"] = self.temperature
        if self.max_tokens is not None:
            payload["max_tokens"] = self.max_tokens
        return payload

    def _post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = self.session.post(
                self.url,
                headers=self._headers(),
                json=payload,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            log.error("%s request failed: %s", self.provider_name, e)
            raise TransportError(f"{self.provider_name} request failed: {e}") from e

        if not response.ok:
            message = _error_message(response)
            log.error("%s API error (%s): %s", self.provider_name, response.status_code, message[:200])
            raise TransportError(
                f"{self.provider_name} API error: {message}", status=response.status_code
            )

        try:
            return response.json()
        except ValueError as e:
            raise MalformedOutputError(
                f"{self.provider_name} returned a non-JSON body", raw=response.text
            ) from e

    async def complete(self, messages: List[Message], *, json_mode: bool = True) -> str:
        """Send one chat request and return the first choice's text content."""
        payload = self.build_payload(messages, json_mode)
        data = await asyncio.to_thread(self._post, payload)
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise MalformedOutputError(
                f"{self.provider_name} response has no message content", raw=str(data)
            ) from e
        if content is None:
            raise MalformedOutputError(f"{self.provider_name} returned empty content")
        return strip_reasoning(str(content)).strip()

    async def complete_text(
        self, system_prompt: str, user_prompt: str, *, json_mode: bool = True
    ) -> str:
        return await self.complete(
            [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            json_mode=json_mode,
        )


def openrouter_client(
    settings: Settings, session: Optional[requests.Session] = None
) -> ChatCompletionClient:
    """Vision-capable client (OpenRouter)."""
    return ChatCompletionClient(
        settings.openrouter_base_url,
        settings.require("openrouter_api_key"),
        settings.vision_model,
        provider_name="OpenRouter",
        temperature=settings.vision_temperature,
        extra_headers={"HTTP-Referer": settings.app_referer, "X-Title": settings.app_title},
        timeout=settings.request_timeout_seconds,
        session=session,
    )


def groq_client(
    settings: Settings, session: Optional[requests.Session] = None
) -> ChatCompletionClient:
    """Text client (Groq)."""
    return ChatCompletionClient(
        settings.groq_base_url,
        settings.require("groq_api_key"),
        settings.text_model,
        provider_name="Groq",
        temperature=settings.text_temperature,
        max_tokens=settings.text_max_tokens,
        timeout=settings.request_timeout_seconds,
        session=session,
    )
