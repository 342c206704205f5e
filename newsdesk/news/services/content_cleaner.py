"""
Content cleaning utilities for news articles
Handles HTML removal, whitespace normalization and summary trimming
"""

import html
import re
from typing import Optional

import structlog
from bs4 import BeautifulSoup

logger = structlog.get_logger(__name__)

ELLIPSIS = "..."
SENTENCE_END = re.compile(r'[.!?](?=\s|$)')


class ContentCleaner:
    """Utility class for cleaning feed titles and summaries"""

    @staticmethod
    def clean_html_content(content: Optional[str]) -> str:
        """
        Clean HTML content by removing tags and collapsing whitespace

        Args:
            content: Raw HTML (or plain text) string

        Returns:
            Plain text on a single line
        """
        if not content:
            return ""

        if '<' not in content:
            return ContentCleaner._normalize_whitespace(html.unescape(content))

        try:
            soup = BeautifulSoup(content, 'html.parser')

            for tag in soup(['script', 'style', 'iframe', 'figure', 'img']):
                tag.decompose()

            text = soup.get_text(separator=' ')
            return ContentCleaner._normalize_whitespace(text)

        except Exception as e:
            logger.warning("Error cleaning HTML content", error=str(e))
            return ContentCleaner._simple_html_removal(content)

    @staticmethod
    def _simple_html_removal(content: str) -> str:
        """Simple fallback HTML tag removal"""
        text = re.sub(r'<[^>]+>', ' ', content)
        text = html.unescape(text)
        return ContentCleaner._normalize_whitespace(text)

    @staticmethod
    def _normalize_whitespace(text: str) -> str:
        return re.sub(r'\s+', ' ', text).strip()

    @staticmethod
    def clean_title(title: Optional[str], source: Optional[str] = None) -> str:
        """Decode entities, collapse whitespace and drop a trailing ' - Source' attribution"""
        text = ContentCleaner._normalize_whitespace(html.unescape(title or ""))
        if source:
            suffix = f" - {source}"
            if text.endswith(suffix) and len(text) > len(suffix):
                text = text[:-len(suffix)].rstrip()
        return text

    @staticmethod
    def trim_summary(text: str, max_length: int = 300) -> str:
        """
        Trim a summary to max_length characters.

        Cuts after the last full sentence when one ends in the second half of the
        allowance, otherwise at the last word boundary followed by an ellipsis.
        """
        if not text or len(text) <= max_length:
            return text or ""

        window = text[:max_length]

        sentence_ends = [m.end() for m in SENTENCE_END.finditer(window)]
        if sentence_ends and sentence_ends[-1] >= max_length // 2:
            return window[:sentence_ends[-1]].strip()

        cut = text[:max_length - len(ELLIPSIS)]
        if ' ' in cut:
            cut = cut[:cut.rindex(' ')]
        return cut.rstrip(' ,;:-') + ELLIPSIS

    @staticmethod
    def build_summary(raw_summary: Optional[str], max_length: int = 300) -> str:
        """Clean a feed description and trim it for storage"""
        return ContentCleaner.trim_summary(ContentCleaner.clean_html_content(raw_summary), max_length)
