"""Company profiles: market detection, AI blurbs, templated fallback."""

from finz.profiles.service import ProfileService, build_fallback_bullets, detect_market
from finz.profiles.summarizer import (
    AnthropicAPIProvider,
    CompanySummarizer,
    OpenAIAPIProvider,
    SummaryProviderBackend,
    create_provider,
    normalize_bullets,
)

__all__ = [
    "AnthropicAPIProvider",
    "CompanySummarizer",
    "OpenAIAPIProvider",
    "ProfileService",
    "SummaryProviderBackend",
    "build_fallback_bullets",
    "create_provider",
    "detect_market",
    "normalize_bullets",
]
