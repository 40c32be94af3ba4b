"""AI-generated company blurbs with pluggable provider backends."""

from __future__ import annotations

import logging
import os
import re
from typing import Protocol, runtime_checkable

from finz.core.config import SummaryConfig
from finz.core.exceptions import LLMError
from finz.core.models import LLMProvider

logger = logging.getLogger(__name__)

# --- Prompt Template ---

SUMMARY_PROMPT_TEMPLATE = """You are a company profile assistant for a personal finance dashboard.
Using the company information below, write a summary of exactly 3 lines.
Output only the 3 plain-text lines, with no other commentary.

Ticker: {symbol}
Company: {company_name}
Market: {market}
Industry: {industry}

Keep each line concise, between 25 and 45 characters."""

UNKNOWN = "Not available"
BULLET = "• "
BULLET_COUNT = 3

_LEADING_MARKER = re.compile(r"^[-•\d.\s]+")

_API_KEY_ENV: dict[LLMProvider, str] = {
    LLMProvider.ANTHROPIC: "ANTHROPIC_API_KEY",
    LLMProvider.OPENAI: "OPENAI_API_KEY",
}


# --- Provider Protocol ---


@runtime_checkable
class SummaryProviderBackend(Protocol):
    """Protocol for text-generation API backends."""

    @property
    def name(self) -> str: ...

    async def query(self, prompt: str) -> str: ...


# --- Provider Implementations ---


class AnthropicAPIProvider:
    """Summary provider using the Anthropic Messages API.

    Authentication: explicit key or ANTHROPIC_API_KEY environment variable.
    """

    def __init__(self, config: SummaryConfig, api_key: str) -> None:
        import anthropic

        self._client = anthropic.AsyncAnthropic(
            api_key=api_key,
            timeout=config.timeout_seconds,
        )
        self._config = config

    @property
    def name(self) -> str:
        return "anthropic"

    async def query(self, prompt: str) -> str:
        import anthropic

        try:
            message = await self._client.messages.create(
                model=self._config.model,
                max_tokens=self._config.max_tokens,
                temperature=self._config.temperature,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIStatusError as e:
            raise LLMError(
                f"Anthropic API error: {e.message}",
                context={"provider": self.name, "status_code": e.status_code},
            ) from e
        except anthropic.APIConnectionError as e:
            raise LLMError(
                f"Anthropic connection error: {e}",
                context={"provider": self.name},
            ) from e
        except anthropic.APIError as e:
            raise LLMError(
                f"Anthropic error: {e}",
                context={"provider": self.name},
            ) from e

        return "\n".join(
            block.text
            for block in message.content
            if getattr(block, "type", None) == "text" and block.text
        ).strip()


class OpenAIAPIProvider:
    """Summary provider using the OpenAI Chat Completions API.

    Requires: pip install finz-dashboard[openai]
    Authentication: explicit key or OPENAI_API_KEY environment variable.
    """

    def __init__(self, config: SummaryConfig, api_key: str) -> None:
        try:
            import openai
        except ImportError:
            raise LLMError(
                "openai package not installed. "
                "Install with: pip install finz-dashboard[openai]",
                context={"provider": "openai"},
            )
        self._client = openai.AsyncOpenAI(
            api_key=api_key,
            timeout=config.timeout_seconds,
        )
        self._config = config

    @property
    def name(self) -> str:
        return "openai"

    async def query(self, prompt: str) -> str:
        import openai

        try:
            response = await self._client.chat.completions.create(
                model=self._config.model,
                max_tokens=self._config.max_tokens,
                temperature=self._config.temperature,
                messages=[{"role": "user", "content": prompt}],
            )
        except openai.APIStatusError as e:
            raise LLMError(
                f"OpenAI API error: {e.message}",
                context={"provider": self.name, "status_code": e.status_code},
            ) from e
        except openai.APIConnectionError as e:
            raise LLMError(
                f"OpenAI connection error: {e}",
                context={"provider": self.name},
            ) from e
        except openai.APIError as e:
            raise LLMError(
                f"OpenAI error: {e}",
                context={"provider": self.name},
            ) from e

        if not response.choices:
            raise LLMError(
                "OpenAI response had no choices",
                context={"provider": self.name},
            )
        return (response.choices[0].message.content or "").strip()


# --- Provider Factory ---


def resolve_api_key(config: SummaryConfig) -> str | None:
    """Explicit config key, else the provider's conventional env var."""
    return config.api_key or os.environ.get(_API_KEY_ENV[config.provider]) or None


def create_provider(config: SummaryConfig) -> SummaryProviderBackend | None:
    """Create a provider backend, or None when summaries are off or unkeyed."""
    if not config.enabled:
        return None
    api_key = resolve_api_key(config)
    if api_key is None:
        logger.info("No API key for %s; company blurbs use the fallback", config.provider)
        return None

    if config.provider == LLMProvider.ANTHROPIC:
        return AnthropicAPIProvider(config, api_key)
    elif config.provider == LLMProvider.OPENAI:
        return OpenAIAPIProvider(config, api_key)
    raise LLMError(
        f"Unknown summary provider: {config.provider}",
        context={"provider": str(config.provider)},
    )


# --- Response Parsing ---


def normalize_bullets(text: str) -> list[str]:
    """Turn free-form model output into at most 3 ``• ``-prefixed lines.

    Leading bullet/number markers are stripped, blank lines dropped, and
    duplicates removed keeping first occurrence.
    """
    unique: list[str] = []
    for raw_line in text.splitlines():
        line = _LEADING_MARKER.sub("", raw_line).strip()
        if line and line not in unique:
            unique.append(line)
    return [f"{BULLET}{line}" for line in unique[:BULLET_COUNT]]


# --- Summarizer ---


class CompanySummarizer:
    """Asks a text-generation provider for a 3-line company blurb.

    A failed or short answer yields None; callers substitute a fallback.
    No retries.
    """

    def __init__(self, provider: SummaryProviderBackend | None) -> None:
        self._provider = provider

    @classmethod
    def from_config(cls, config: SummaryConfig) -> CompanySummarizer:
        return cls(create_provider(config))

    @property
    def enabled(self) -> bool:
        return self._provider is not None

    async def summarize(
        self,
        symbol: str,
        company_name: str | None,
        market: str | None,
        industry: str | None,
    ) -> list[str] | None:
        if self._provider is None:
            return None

        prompt = SUMMARY_PROMPT_TEMPLATE.format(
            symbol=symbol,
            company_name=company_name or UNKNOWN,
            market=market or UNKNOWN,
            industry=industry or UNKNOWN,
        )
        try:
            text = await self._provider.query(prompt)
        except LLMError as e:
            logger.warning("Summary generation failed for %s: %s", symbol, e)
            return None

        bullets = normalize_bullets(text)
        if len(bullets) < BULLET_COUNT:
            logger.warning(
                "Summary for %s had %d usable lines, need %d",
                symbol, len(bullets), BULLET_COUNT,
            )
            return None
        return bullets
