"""
Tests for relevance scoring, suggestion ranking and term expansion.
"""

import pytest

from storefront.search import config
from storefront.search.dictionary import KeywordTables
from storefront.search.scoring import (
    calculate_relevance_score,
    expand_search_terms,
    generate_suggestions,
    rank_candidates,
    token_coverage,
)

EMPTY_TABLES = KeywordTables(product_keywords=(), brand_keywords=(), category_keywords=(), domain_terms=())


class TestCalculateRelevanceScore:
    def test_exact_match_scores_every_signal(self):
        # exact 200+220, prefix 80+90, contains 60+70, coverage 100,
        # word prefix 30, product 20, brand 15, short 10
        assert calculate_relevance_score("Arduino", "Arduino") == 895

    @pytest.mark.parametrize("text", ["x", "Widget", "USB-C hub", "a" * 80])
    def test_exact_match_contributes_at_least_200(self, text):
        assert calculate_relevance_score(text, text) >= config.EXACT_MATCH_WEIGHT

    def test_is_deterministic(self):
        first = calculate_relevance_score("Raspberry Pi 4 Model B", "pi model")
        assert all(calculate_relevance_score("Raspberry Pi 4 Model B", "pi model") == first for _ in range(5))

    def test_partial_token_coverage(self):
        # coverage 1/2 -> 50, short candidate 10
        assert calculate_relevance_score("Blue Widget Large", "widget red") == 60

    def test_coverage_rounds_half_up(self):
        # 1 of 8 query tokens -> 12.5 -> 13, short candidate 10
        assert calculate_relevance_score("qa", "qa qb qc qd qe qf qg qh") == 23

    def test_word_prefix_bonus_fires_per_word(self):
        # prefix 80+90, contains 60+70, coverage 100, three words x 30, short 10
        assert calculate_relevance_score("ab abc abd", "ab") == 500

    def test_keyword_table_bonuses(self):
        tables = KeywordTables(
            product_keywords=("sensor",), brand_keywords=("acme",), category_keywords=("tools",), domain_terms=()
        )
        base = calculate_relevance_score("acme sensor tools", "zz", EMPTY_TABLES)
        boosted = calculate_relevance_score("acme sensor tools", "zz", tables)
        assert boosted - base == 20 + 15 + 10

    def test_domain_terms_stack_per_distinct_term(self):
        # module keyword 20; lora, rf, transceiver, transceiver module,
        # rf transceiver, rf transceiver module -> 6 x 25
        assert calculate_relevance_score("LoRa RF Transceiver Module", "zz") == 170

    def test_domain_term_counted_once_per_term(self):
        tables = KeywordTables(product_keywords=(), brand_keywords=(), category_keywords=(), domain_terms=("lora",))
        assert calculate_relevance_score("lora lora lora", "zz", tables) == 10 + 25

    @pytest.mark.parametrize("length, expected", [(19, 10), (20, 0), (60, 0), (64, 0), (65, -1), (70, -2), (200, -20)])
    def test_length_heuristics(self, length, expected):
        assert calculate_relevance_score("y" * length, "zz", EMPTY_TABLES) == expected

    def test_empty_inputs_do_not_raise(self):
        assert isinstance(calculate_relevance_score("", ""), int)
        assert isinstance(calculate_relevance_score("anything", ""), int)
        assert isinstance(calculate_relevance_score("", "anything"), int)


class TestTokenCoverage:
    def test_counts_against_query_tokens(self):
        assert token_coverage("arduino uno r3", "arduino nano") == 0.5

    def test_repeated_query_tokens_each_count(self):
        assert token_coverage("arduino", "arduino arduino nano") == pytest.approx(2 / 3)

    def test_empty_query_has_zero_coverage(self):
        assert token_coverage("arduino", "") == 0.0


class TestGenerateSuggestions:
    def test_misspelled_query_ranks_best_partial_match_first(self):
        candidates = ["Arduino Uno R3", "Raspberry Pi 4", "USB Cable"]
        suggestions = generate_suggestions(candidates, "ardino", 8)
        assert suggestions[0] == "Arduino Uno R3"
        assert suggestions == ["Arduino Uno R3", "Raspberry Pi 4", "USB Cable"]

    def test_prefix_query(self):
        suggestions = generate_suggestions(["USB Cable", "Servo Motor", "Arduino Nano"], "ardu")
        assert suggestions[0] == "Arduino Nano"

    @pytest.mark.parametrize("query", ["", "a", "-a-", "!!", "  "])
    def test_short_queries_return_nothing(self, query):
        assert generate_suggestions(["Arduino", "a", "aa"], query) == []

    def test_non_positive_scores_are_dropped(self):
        assert generate_suggestions(["y" * 70], "zz") == []

    def test_truncates_to_max_results(self):
        candidates = [f"sensor {i}" for i in range(20)]
        assert len(generate_suggestions(candidates, "sensor", max_results=5)) == 5

    def test_ties_keep_input_order(self):
        assert generate_suggestions(["sensor b", "sensor a"], "sensor") == ["sensor b", "sensor a"]

    def test_rank_candidates_with_text_accessor(self):
        items = [{"id": 1, "text": "USB Cable"}, {"id": 2, "text": "Arduino Uno"}]
        ranked = rank_candidates(items, "arduino", text=lambda item: item["text"])
        assert ranked[0][0]["id"] == 2
        assert ranked[0][1] > ranked[1][1]


class TestExpandSearchTerms:
    def test_board_variants(self):
        assert expand_search_terms(["board"]) == {"board", "module", "shield", "boards"}

    def test_module_variants_and_singular(self):
        assert expand_search_terms(["modules"]) == {"modules", "boards", "shields", "module"}

    def test_order_independent(self):
        assert expand_search_terms(["relay", "board"]) == expand_search_terms(["board", "relay"])

    def test_empty(self):
        assert expand_search_terms([]) == set()
