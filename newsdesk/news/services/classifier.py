"""
Category mapping and breaking-news detection for incoming articles
"""

import re
from typing import Dict, List, Optional, Pattern, Sequence, Tuple

import structlog

from ...config import Settings
from ...exceptions import LLMServiceError
from ...services.llm_service import LLMProvider, LLMService

logger = structlog.get_logger(__name__)

# Checked in order, first hit wins
DEFAULT_CATEGORY_KEYWORDS: List[Tuple[str, List[str]]] = [
    ("India", ["india", "indian", "delhi", "mumbai", "modi", "government", "parliament"]),
    ("World", ["usa", "china", "russia", "uk", "europe", "world", "international", "ukraine"]),
    ("Business", ["market", "stock", "rupee", "economy", "business", "startup", "finance", "sensex", "nifty"]),
    ("Sports", ["cricket", "football", "match", "ipl", "sports", "tournament", "olympics"]),
    ("Health", ["health", "hospital", "disease", "covid", "medical", "doctor", "vaccine"]),
    ("Technology", ["ai", "technology", "tech", "mobile", "app", "software", "internet", "smartphone"]),
]

CLASSIFICATION_SYSTEM_PROMPT = (
    "You sort news headlines into sections of a news app. "
    "Answer with exactly one section name from the list you are given and nothing else."
)


def _keyword_pattern(keywords: Sequence[str]) -> Pattern:
    alternatives = "|".join(re.escape(k.lower()) for k in sorted(keywords, key=len, reverse=True))
    return re.compile(rf"\b(?:{alternatives})s?\b", re.IGNORECASE)


class KeywordClassifier:
    """Maps an article to the first category whose keywords appear in its title or summary"""

    def __init__(
        self,
        categories: Sequence[str],
        default_category: str,
        rules: Optional[List[Tuple[str, List[str]]]] = None,
    ):
        self.categories = list(categories)
        self.default_category = default_category
        rules = rules if rules is not None else DEFAULT_CATEGORY_KEYWORDS
        self.rules: List[Tuple[str, Pattern]] = [
            (category, _keyword_pattern(keywords))
            for category, keywords in rules
            if category in self.categories and keywords
        ]

    def classify(self, title: str, summary: str = "") -> str:
        text = f"{summary} {title}"
        for category, pattern in self.rules:
            if pattern.search(text):
                return category
        return self.default_category


class LLMClassifier:
    """Asks an LLM to pick a category, falling back to keyword rules on any failure"""

    def __init__(
        self,
        llm_service: LLMService,
        fallback: KeywordClassifier,
        preferred_provider: Optional[LLMProvider] = None,
    ):
        self.llm_service = llm_service
        self.fallback = fallback
        self.preferred_provider = preferred_provider
        self._lookup: Dict[str, str] = {c.lower(): c for c in fallback.categories}

    def classify(self, title: str, summary: str = "") -> str:
        user_prompt = (
            f"Sections: {', '.join(self.fallback.categories)}\n\n"
            f"Headline: {title}\n"
            f"Summary: {summary[:500]}\n\n"
            "Section:"
        )
        try:
            answer = self.llm_service.generate_with_fallback(
                system_prompt=CLASSIFICATION_SYSTEM_PROMPT,
                user_prompt=user_prompt,
                preferred_provider=self.preferred_provider,
            )
        except LLMServiceError as e:
            logger.warning("LLM classification failed, using keyword rules", error=str(e))
            return self.fallback.classify(title, summary)

        category = self._match_category(answer)
        if category is None:
            logger.info("LLM returned an unknown category", answer=answer[:50])
            return self.fallback.classify(title, summary)
        return category

    def _match_category(self, answer: str) -> Optional[str]:
        cleaned = re.sub(r"[^\w\s]", "", answer or "").strip().lower()
        if cleaned in self._lookup:
            return self._lookup[cleaned]
        first_word = cleaned.split()[0] if cleaned else ""
        return self._lookup.get(first_word)


class BreakingNewsDetector:
    """Flags breaking stories from headline markers or from how many outlets carry them"""

    def __init__(self, keywords: Sequence[str], source_threshold: int = 3):
        self.pattern = _keyword_pattern(keywords) if keywords else None
        self.source_threshold = source_threshold

    def is_breaking(self, title: str, summary: str = "") -> bool:
        if self.pattern is None:
            return False
        return bool(self.pattern.search(title) or self.pattern.search(summary[:200]))

    def reaches_source_threshold(self, source_count: int) -> bool:
        return self.source_threshold > 0 and source_count >= self.source_threshold


def build_classifier(settings: Settings, llm_service: Optional[LLMService] = None):
    """Keyword rules by default, LLM classification when enabled and a provider is configured"""
    keyword_classifier = KeywordClassifier(settings.categories, settings.default_category)

    if not settings.ai_classification_enabled:
        return keyword_classifier

    llm_service = llm_service or LLMService(
        openai_api_key=settings.openai_api_key,
        anthropic_api_key=settings.anthropic_api_key,
        google_api_key=settings.google_api_key,
        openai_model_name=settings.openai_model_name,
        anthropic_model_name=settings.anthropic_model_name,
        google_model_name=settings.google_model_name,
    )
    if not llm_service.get_available_providers():
        logger.warning("AI classification enabled but no LLM provider is configured, using keyword rules")
        return keyword_classifier

    preferred = None
    if settings.preferred_llm_provider:
        try:
            preferred = LLMProvider(settings.preferred_llm_provider.lower())
        except ValueError:
            logger.warning("Unknown preferred LLM provider", provider=settings.preferred_llm_provider)

    return LLMClassifier(llm_service, keyword_classifier, preferred_provider=preferred)
