from datetime import timedelta

import pytest

from newsdesk.news.services.deduplicator import NearDuplicateIndex, jaccard, normalize_title
from newsdesk.utils.date_utils import utcnow


class TestNormalizeTitle:
    def test_lowercases_and_drops_stopwords(self):
        tokens = normalize_title("The Prime Minister Visits Delhi for the Summit")
        assert tokens == {"prime", "minister", "visits", "delhi", "summit"}

    def test_strips_punctuation_and_single_characters(self):
        tokens = normalize_title("Rupee falls: 5 things to know, a recap!")
        assert "rupee" in tokens
        assert "recap!" not in tokens
        assert "5" not in tokens
        assert "a" not in tokens

    def test_keeps_devanagari_words_whole(self):
        assert normalize_title("भारत ने मैच जीता") == {"भारत", "मैच", "जीता"}
        assert normalize_title("भारत की हार") == {"भारत", "हार"}

    def test_empty_title(self):
        assert normalize_title("") == frozenset()
        assert normalize_title(None) == frozenset()


class TestJaccard:
    def test_identical_sets(self):
        assert jaccard({"a1", "b2"}, {"a1", "b2"}) == 1.0

    def test_partial_overlap(self):
        assert jaccard({"india", "wins", "series"}, {"india", "wins", "match"}) == pytest.approx(2 / 4)

    def test_disjoint_sets(self):
        assert jaccard({"one"}, {"two"}) == 0.0

    def test_both_empty_is_zero(self):
        assert jaccard(set(), set()) == 0.0


class TestNearDuplicateIndex:
    def test_finds_match_above_threshold(self):
        index = NearDuplicateIndex(threshold=0.6)
        index.add(1, "en", normalize_title("India wins cricket series against Australia"))

        match = index.find_match(normalize_title("India wins cricket series against Australia in thriller"), "en")

        assert match is not None
        assert match.article_id == 1
        assert match.score == pytest.approx(6 / 7)

    def test_unrelated_hindi_headlines_do_not_match(self):
        index = NearDuplicateIndex(threshold=0.6)
        index.add(1, "hi", normalize_title("भारत की हार"))

        assert index.find_match(normalize_title("भारत ने मैच जीता"), "hi") is None

    def test_matching_hindi_headlines_merge(self):
        index = NearDuplicateIndex(threshold=0.6)
        index.add(1, "hi", normalize_title("भारत ने ऑस्ट्रेलिया से सीरीज जीती"))

        match = index.find_match(normalize_title("भारत ने ऑस्ट्रेलिया से रोमांचक सीरीज जीती"), "hi")

        assert match is not None
        assert match.score == pytest.approx(4 / 5)

    def test_ignores_other_languages(self):
        index = NearDuplicateIndex(threshold=0.6)
        index.add(1, "en", normalize_title("India wins cricket series against Australia"))

        assert index.find_match(normalize_title("India wins cricket series against Australia"), "hi") is None

    def test_below_threshold_is_not_a_match(self):
        index = NearDuplicateIndex(threshold=0.6)
        index.add(1, "en", normalize_title("Stock market closes higher on bank rally"))

        assert index.find_match(normalize_title("Bank strike announced for Monday"), "en") is None

    def test_best_score_wins_and_ties_go_to_newer(self):
        index = NearDuplicateIndex(threshold=0.5)
        tokens = normalize_title("Heavy rain floods Mumbai streets")
        index.add(1, "en", tokens)
        index.add(2, "en", tokens)
        index.add(3, "en", normalize_title("Heavy rain Mumbai"))

        match = index.find_match(tokens, "en")

        assert match.article_id == 2
        assert match.score == 1.0

    def test_window_is_capped(self):
        index = NearDuplicateIndex(threshold=0.6, max_size=2)
        index.add(1, "en", normalize_title("first story about elections"))
        index.add(2, "en", normalize_title("second story about budget"))
        index.add(3, "en", normalize_title("third story about cricket"))

        assert len(index) == 2
        assert index.find_match(normalize_title("first story about elections"), "en") is None

    def test_empty_tokens_never_match(self):
        index = NearDuplicateIndex(threshold=0.6)
        index.add(1, "en", frozenset())
        assert index.find_match(frozenset(), "en") is None

    def test_load_only_includes_recent_articles(self, test_db, make_article):
        recent = make_article("Election results declared in Bihar", hours_ago=2)
        make_article("Old story about monsoon arrival", hours_ago=72)

        index = NearDuplicateIndex.load(test_db, threshold=0.6, window_hours=48, max_size=10)

        assert [entry.article_id for entry in index.entries] == [recent.id]
        assert index.entries[0].created_at <= utcnow()
        assert index.entries[0].created_at > utcnow() - timedelta(hours=3)
