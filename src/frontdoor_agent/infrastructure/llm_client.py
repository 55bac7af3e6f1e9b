"""LLM client: Protocol + httpx implementation + mock for tests."""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol, Sequence, TypeVar, runtime_checkable

import httpx
from pydantic import BaseModel, ValidationError

from frontdoor_agent.domain.errors import LLMError, StructuredOutputError
from frontdoor_agent.domain.state import Message

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


@runtime_checkable
class LLMClient(Protocol):
    """Protocol for chat completion. Implement with httpx or mock for tests."""

    async def complete(self, messages: Sequence[Message]) -> str:
        """Send role-tagged messages, return the assistant reply text. Raises LLMError."""
        ...

    async def complete_structured(self, messages: Sequence[Message], schema: type[T]) -> T:
        """
        Send messages and ask for a reply shaped like ``schema``.
        Raises StructuredOutputError if the reply does not validate.
        """
        ...


def _strip_code_fence(raw: str) -> str:
    raw = raw.strip()
    if raw.startswith("```"):
        lines = raw.split("\n")
        if lines[0].startswith("```"):
            lines = lines[1:]
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        raw = "\n".join(lines)
    return raw


def parse_structured(raw: str, schema: type[T]) -> T:
    """Parse model text (optionally fenced JSON) into ``schema``."""
    text = _strip_code_fence(raw)
    try:
        return schema.model_validate(json.loads(text))
    except (json.JSONDecodeError, ValidationError) as e:
        raise StructuredOutputError(f"Reply does not match {schema.__name__}: {e}") from e


def _wire_messages(messages: Sequence[Message]) -> list[dict[str, str]]:
    return [{"role": m.role, "content": m.content} for m in messages]


class HttpLLMClient:
    """Async httpx-based LLM client. Expects OpenAI-compatible chat API."""

    def __init__(
        self,
        base_url: str,
        model: str = "gpt-4o-mini",
        api_key: str | None = None,
        temperature: float | None = None,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._model = model
        self._api_key = api_key
        self._temperature = temperature
        self._timeout = timeout
        self._transport = transport

    async def _chat(self, messages: Sequence[Message], **extra: Any) -> str:
        payload: dict[str, Any] = {"model": self._model, "messages": _wire_messages(messages)}
        if self._temperature is not None:
            payload["temperature"] = self._temperature
        payload.update(extra)
        headers = {}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                r = await client.post(
                    f"{self._base_url}/v1/chat/completions",
                    json=payload,
                    headers=headers or None,
                )
                r.raise_for_status()
                data = r.json()
        except (httpx.HTTPError, ValueError) as e:
            raise LLMError(f"Chat completion failed: {e}") from e

        choices = data.get("choices", [])
        if not choices:
            raise LLMError("Chat completion returned no choices")
        return (choices[0].get("message") or {}).get("content", "") or ""

    async def complete(self, messages: Sequence[Message]) -> str:
        return await self._chat(messages)

    async def complete_structured(self, messages: Sequence[Message], schema: type[T]) -> T:
        response_format = {
            "type": "json_schema",
            "json_schema": {"name": schema.__name__, "schema": schema.model_json_schema()},
        }
        raw = await self._chat(messages, response_format=response_format)
        logger.debug("Structured reply for %s: %s", schema.__name__, raw)
        return parse_structured(raw, schema)


class MockLLMClient:
    """
    Implements LLMClient with scripted responses for tests. No network.

    Responses are consumed in call order, whichever method is called. An
    Exception instance is raised instead of returned; a dict or JSON string
    is validated into the requested schema for structured calls.
    """

    def __init__(self, responses: list[Any] | None = None) -> None:
        self.responses = list(responses) if responses else []
        self.call_count = 0
        self.calls: list[tuple[str, list[Message]]] = []

    def _next(self, kind: str, messages: Sequence[Message]) -> Any:
        self.calls.append((kind, list(messages)))
        if self.call_count < len(self.responses):
            out = self.responses[self.call_count]
        else:
            out = None
        self.call_count += 1
        if isinstance(out, Exception):
            raise out
        return out

    async def complete(self, messages: Sequence[Message]) -> str:
        out = self._next("complete", messages)
        if out is None:
            return "I didn't understand. Could you rephrase?"
        if not isinstance(out, str):
            return json.dumps(out)
        return out

    async def complete_structured(self, messages: Sequence[Message], schema: type[T]) -> T:
        out = self._next("structured", messages)
        if out is None:
            raise StructuredOutputError(f"No scripted response for {schema.__name__}")
        if isinstance(out, schema):
            return out
        if isinstance(out, str):
            return parse_structured(out, schema)
        try:
            return schema.model_validate(out)
        except ValidationError as e:
            raise StructuredOutputError(str(e)) from e
