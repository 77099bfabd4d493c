"""
Text-generation collaborator via the official OpenAI-compatible client (xAI Grok by default).
Every call has a bounded timeout; failures raise and are absorbed by the caller. No retries here.
"""

from typing import Callable

from openai import OpenAI

from vetmatch.config import (
    LLM_API_KEY,
    LLM_BASE_URL,
    LLM_MAX_TOKENS,
    LLM_MODEL_ID,
    LLM_TEMPERATURE,
    LLM_TIMEOUT_SEC,
)

# (messages, system_prompt) -> assistant text
TextGenerator = Callable[[list[dict], str], str]

_client: OpenAI | None = None


class LLMUnavailableError(RuntimeError):
    """No API key configured, or the call produced no text."""


def _get_client() -> OpenAI:
    global _client
    if _client is None:
        if not LLM_API_KEY:
            raise LLMUnavailableError("GROK_API_KEY is not set; text generation is unavailable.")
        _client = OpenAI(
            api_key=LLM_API_KEY,
            base_url=LLM_BASE_URL,
            max_retries=0,
        )
    return _client


def _build_messages(messages: list[dict], system_prompt: str | None) -> list[dict]:
    """Build messages: optional system first, then conversation (system entries from callers dropped)."""
    full_messages: list[dict] = []
    if system_prompt:
        full_messages.append({"role": "system", "content": system_prompt})
    for m in messages:
        role = m.get("role", "user")
        if role not in ("user", "assistant"):
            continue
        content = m.get("content", "")
        if isinstance(content, list):
            content = content[0].get("text", "") if content else ""
        full_messages.append({"role": role, "content": str(content)})
    return full_messages


def invoke_llm(
    messages: list[dict],
    system_prompt: str | None = None,
    *,
    model_id: str | None = None,
    timeout_sec: float | None = None,
    temperature: float | None = None,
    max_tokens: int | None = None,
) -> str:
    """
    Call the chat completions endpoint. Returns the assistant text, stripped.
    messages: list of {"role": "user"|"assistant", "content": "..."}
    Raises LLMUnavailableError for a missing key or empty completion; SDK errors propagate.
    """
    client = _get_client()
    response = client.chat.completions.create(
        model=model_id or LLM_MODEL_ID,
        messages=_build_messages(messages, system_prompt),
        temperature=temperature if temperature is not None else LLM_TEMPERATURE,
        max_tokens=max_tokens or LLM_MAX_TOKENS,
        timeout=timeout_sec if timeout_sec is not None else LLM_TIMEOUT_SEC,
        stream=False,
    )
    content = (response.choices[0].message.content or "").strip() if response.choices else ""
    if not content:
        raise LLMUnavailableError("Empty completion from text-generation API.")
    return content


def generate_text(messages: list[dict], system_prompt: str) -> str:
    """Default TextGenerator for the triage engine."""
    return invoke_llm(messages, system_prompt)
