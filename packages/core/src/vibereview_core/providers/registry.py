"""Provider lookup by configured name."""

from __future__ import annotations

from vibereview_core.providers.anthropic import AnthropicReviewModel
from vibereview_core.providers.base import BaseReviewModel
from vibereview_core.providers.openai import OpenAIReviewModel

PROVIDERS: dict[str, type[BaseReviewModel]] = {
    "anthropic": AnthropicReviewModel,
    "openai": OpenAIReviewModel,
}


def create_review_model(provider: str, api_key: str, model: str | None = None) -> BaseReviewModel:
    try:
        cls = PROVIDERS[provider]
    except KeyError:
        raise ValueError(f"Unknown model provider: {provider!r}. Choose one of: {', '.join(sorted(PROVIDERS))}.")
    return cls(api_key=api_key, model=model)
