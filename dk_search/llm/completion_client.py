# dk_search/llm/completion_client.py

"""Text-completion collaborator used for AI query expansion.

The rest of the package only depends on :class:`CompletionClient`;
:class:`OpenRouterClient` is the production implementation, talking to
OpenRouter through its OpenAI-compatible API.
"""

import logging
from typing import Protocol

from openai import OpenAI, OpenAIError

from dk_search.config.settings import Settings
from dk_search.exceptions import CompletionError

logger = logging.getLogger("dk_search.llm")


class CompletionClient(Protocol):
    """Anything that turns a prompt into a text reply."""

    def complete(
        self,
        prompt: str,
        *,
        system: str | None = None,
        max_tokens: int = Settings.LLM_MAX_TOKENS,
        temperature: float = Settings.LLM_TEMPERATURE,
    ) -> str:
        """Return the reply text or raise :class:`CompletionError`."""
        ...


class OpenRouterClient:
    """OpenRouter chat-completions client built on the ``openai`` SDK."""

    def __init__(
        self,
        api_key: str,
        model: str = Settings.OPENROUTER_MODEL,
        base_url: str = Settings.OPENROUTER_BASE_URL,
        timeout: float = Settings.LLM_TIMEOUT,
    ) -> None:
        if not api_key:
            raise ValueError("OpenRouter API key is empty")
        self.model = model
        # Retries would stretch the timeout budget; a failed call
        # falls back to rule-based expansion instead.
        self._client = OpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=0,
            default_headers={"X-Title": "dk_search"},
        )

    def complete(
        self,
        prompt: str,
        *,
        system: str | None = None,
        max_tokens: int = Settings.LLM_MAX_TOKENS,
        temperature: float = Settings.LLM_TEMPERATURE,
    ) -> str:
        """Send one chat completion request and return its text."""
        messages: list[dict[str, str]] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        try:
            response = self._client.chat.completions.create(
                model=self.model,
                messages=messages,  # type: ignore[arg-type]
                max_tokens=max_tokens,
                temperature=temperature,
            )
        except OpenAIError as exc:
            raise CompletionError(
                f"OpenRouter request failed: {exc}"
            ) from exc

        if not response.choices:
            raise CompletionError("OpenRouter returned no choices")
        content = response.choices[0].message.content or ""
        if not content.strip():
            raise CompletionError("OpenRouter returned an empty reply")
        logger.debug(
            "Completion from %s (%d chars)", self.model, len(content)
        )
        return content


def build_completion_client() -> CompletionClient | None:
    """Return a configured client, or ``None`` without credentials."""
    api_key = Settings.OPENROUTER_API_KEY
    if not api_key:
        logger.info(
            "OPENROUTER_API_KEY not set, AI query expansion disabled"
        )
        return None
    return OpenRouterClient(api_key=api_key)
