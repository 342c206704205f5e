"""
Near-duplicate detection using Jaccard similarity over normalized title tokens.

The same story reported by several outlets usually shares most of its headline
words, so two titles whose token sets overlap above the threshold are treated
as one story and merged.
"""

import unicodedata
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import FrozenSet, Iterable, List, Optional

import structlog
from sqlalchemy.orm import Session

from ...models.news_article import NewsArticle
from ...utils.date_utils import utcnow

logger = structlog.get_logger(__name__)

STOPWORDS = frozenset({
    "a", "an", "the", "and", "or", "but", "in", "on", "at", "to", "for",
    "of", "with", "is", "are", "was", "were", "be", "been", "has", "have",
    "had", "it", "its", "this", "that", "by", "from", "as", "after", "over",
    "into", "amid", "says", "said", "will", "can", "about", "up", "out",
    "new", "how", "why", "what", "who", "live", "updates", "breaking", "news",
    # Hindi postpositions and auxiliaries
    "का", "की", "के", "को", "में", "से", "ने", "पर", "है", "हैं", "और", "भी",
})

# Letters, combining marks (Devanagari vowel signs) and digits make up a word
WORD_CATEGORIES = ("L", "M", "N")


def _words(text: str) -> List[str]:
    text = unicodedata.normalize("NFKC", text)
    return "".join(ch if unicodedata.category(ch)[0] in WORD_CATEGORIES else " " for ch in text).split()


def normalize_title(title: str) -> FrozenSet[str]:
    """Lowercase, split into words, drop stopwords and single characters"""
    tokens = _words((title or "").lower())
    return frozenset(t for t in tokens if len(t) > 1 and t not in STOPWORDS)


def jaccard(set_a: Iterable[str], set_b: Iterable[str]) -> float:
    """|A ∩ B| / |A ∪ B|, 0.0 when both sets are empty"""
    a, b = set(set_a), set(set_b)
    if not a and not b:
        return 0.0
    return len(a & b) / len(a | b)


@dataclass
class WindowEntry:
    article_id: int
    language: str
    tokens: FrozenSet[str]
    created_at: datetime


@dataclass
class DuplicateMatch:
    article_id: int
    score: float


class NearDuplicateIndex:
    """
    In-memory window of recent articles compared against each incoming one.
    Entries are kept newest first, so equal scores resolve to the newer article.
    """

    def __init__(self, threshold: float = 0.6, max_size: int = 200):
        self.threshold = threshold
        self.max_size = max_size
        self.entries: List[WindowEntry] = []

    @classmethod
    def load(
        cls,
        db: Session,
        threshold: float = 0.6,
        window_hours: int = 48,
        max_size: int = 200,
    ) -> "NearDuplicateIndex":
        index = cls(threshold=threshold, max_size=max_size)
        since = utcnow() - timedelta(hours=window_hours)

        recent = db.query(NewsArticle).filter(
            NewsArticle.created_at >= since
        ).order_by(NewsArticle.created_at.desc(), NewsArticle.id.desc()).limit(max_size).all()

        for article in recent:
            tokens = frozenset(article.title_tokens) if article.title_tokens else normalize_title(article.title)
            index.entries.append(WindowEntry(article.id, article.language, tokens, article.created_at))

        logger.info("Loaded near-duplicate window", articles=len(index.entries), window_hours=window_hours)
        return index

    def find_match(self, tokens: FrozenSet[str], language: str) -> Optional[DuplicateMatch]:
        if not tokens:
            return None

        best: Optional[DuplicateMatch] = None
        for entry in self.entries:
            if entry.language != language:
                continue
            score = jaccard(tokens, entry.tokens)
            if score >= self.threshold and (best is None or score > best.score):
                best = DuplicateMatch(entry.article_id, score)
        return best

    def add(self, article_id: int, language: str, tokens: FrozenSet[str], created_at: Optional[datetime] = None):
        self.entries.insert(0, WindowEntry(article_id, language, tokens, created_at or utcnow()))
        if len(self.entries) > self.max_size:
            self.entries.pop()

    def __len__(self) -> int:
        return len(self.entries)
