"""
Tests for sentence similarity strategies.
"""

import pytest

from policywatch.similarity import (
    SUBSTRING_SIMILARITY,
    bigram_set,
    get_similarity,
    jaccard,
    phrase_weighted,
    unigram_jaccard,
    unigram_set,
)


class TestJaccard:

    def test_basic(self):
        assert jaccard({"a", "b"}, {"b", "c"}) == pytest.approx(1 / 3)

    def test_empty_default(self):
        assert jaccard(set(), set()) == 0.0
        assert jaccard(set(), set(), empty=1.0) == 1.0


class TestTokens:

    def test_unigrams_keep_words_of_four_or_more(self):
        assert unigram_set("Ads must not promote gambling") == {"must", "promote", "gambling"}

    def test_bigrams_use_all_words(self):
        assert bigram_set("ads must not") == {("ads", "must"), ("must", "not")}


class TestStrategies:

    def test_unigram_identical(self):
        assert unigram_jaccard("Sellers must verify identity", "sellers MUST verify identity") == 1.0

    def test_phrase_weighted_substring(self):
        a = "advertisers must verify identity"
        b = "all advertisers must verify identity before launch"
        assert phrase_weighted(a, b) == SUBSTRING_SIMILARITY

    def test_phrase_weighted_whitespace_insensitive(self):
        assert phrase_weighted("ads  must\nnot run", "ads must not run") == SUBSTRING_SIMILARITY

    def test_phrase_weighted_never_below_unigram(self):
        a = "gambling promote must services"
        b = "services must promote gambling"
        assert phrase_weighted(a, b) >= unigram_jaccard(a, b)
        assert phrase_weighted(a, b) == pytest.approx(1.0)

    def test_phrase_weighted_blend(self):
        a = "merchants must display shipping costs clearly"
        b = "merchants must display return costs clearly"
        words = unigram_jaccard(a, b)
        phrases = jaccard(bigram_set(a), bigram_set(b))
        assert phrase_weighted(a, b) == pytest.approx(max(0.7 * phrases + 0.3 * words, words))

    def test_unrelated_sentences_score_low(self):
        assert phrase_weighted("alcohol ads need a license", "shipping costs shown at checkout") < 0.2


class TestRegistry:

    def test_lookup(self):
        assert get_similarity("unigram") is unigram_jaccard
        assert get_similarity("phrase_weighted") is phrase_weighted

    def test_unknown_strategy(self):
        with pytest.raises(ValueError, match="Unknown similarity strategy"):
            get_similarity("cosine")
