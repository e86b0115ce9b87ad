"""Tests for intent boosts, the relevance floor and ranking order."""

import pytest

from codebase_agent.core.ranking import (
    INTENT_BOOST,
    adjusted_score,
    analyze_query_intent,
    filter_and_rank,
)
from conftest import make_hit


class TestAdjustedScore:
    def test_setup_question_boosts_package_manifest(self):
        manifest = make_hit("pkg", 0.6, file_path="package.json", file_name="package.json",
                            file_type="json", chunk_type="configuration")

        assert adjusted_score(manifest, "How do I set up this project?") == pytest.approx(0.6 * INTENT_BOOST)

    def test_setup_question_boosts_documentation(self):
        doc = make_hit("doc", 0.5, chunk_type="documentation", file_name="INSTALL.md")

        assert adjusted_score(doc, "how to install") == pytest.approx(0.75)

    def test_api_rule_matches_routes_path(self):
        hit = make_hit("r", 1.0, file_path="src/routes/users.js")

        assert adjusted_score(hit, "Which endpoint lists users?") == pytest.approx(1.5)

    def test_boosts_compound_across_rules(self):
        hit = make_hit("r", 1.0, file_path="src/routes/auth.js", chunk_type="route")

        # api (route chunk) and auth (path) both fire
        assert adjusted_score(hit, "What is the login API?") == pytest.approx(INTENT_BOOST ** 2)

    def test_no_keyword_means_no_boost(self):
        hit = make_hit("x", 0.8, chunk_type="class", file_path="models/user.py")

        assert adjusted_score(hit, "what does this do") == pytest.approx(0.8)

    def test_keyword_matching_is_case_insensitive(self):
        hit = make_hit("m", 1.0, chunk_type="class")

        assert adjusted_score(hit, "Explain the DATABASE layer") == pytest.approx(1.5)


class TestFilterAndRank:
    def test_setup_question_ranks_configuration_first(self):
        hits = [
            make_hit("code-a", 0.9),
            make_hit("code-b", 0.8),
            make_hit("pkg", 0.7, file_path="package.json", file_name="package.json",
                     file_type="json", chunk_type="configuration"),
        ]

        ranked = filter_and_rank(hits, "How do I set up this project?")

        assert ranked[0].id == "pkg"
        assert ranked[0].adjusted_score == pytest.approx(0.7 * INTENT_BOOST)
        assert ranked[0].adjusted_score > ranked[0].score

    def test_floor_is_exclusive(self):
        hits = [make_hit("at-floor", 0.3), make_hit("above", 0.31), make_hit("below", 0.1)]

        ranked = filter_and_rank(hits, "what does this do", relevance_floor=0.3)

        assert [r.id for r in ranked] == ["above"]

    def test_boost_can_lift_a_hit_over_the_floor(self):
        hits = [make_hit("doc", 0.25, chunk_type="documentation")]

        ranked = filter_and_rank(hits, "setup steps", relevance_floor=0.3)

        assert [r.id for r in ranked] == ["doc"]

    def test_ties_keep_candidate_order(self):
        hits = [make_hit(f"h{i}", 0.5) for i in range(4)]

        ranked = filter_and_rank(hits, "what does this do")

        assert [r.id for r in ranked] == ["h0", "h1", "h2", "h3"]
        assert [r.rank_index for r in ranked] == [0, 1, 2, 3]

    def test_limit_caps_results(self):
        hits = [make_hit(f"h{i}", 1.0 - i * 0.01) for i in range(12)]

        ranked = filter_and_rank(hits, "anything", limit=8)

        assert len(ranked) == 8
        assert ranked[-1].id == "h7"

    def test_empty_candidates(self):
        assert filter_and_rank([], "anything") == []


@pytest.mark.parametrize(
    "query,intent",
    [
        ("How do I set up this project?", "setup"),
        ("Give me an overview of the architecture", "architecture"),
        ("Which API endpoint creates orders?", "api"),
        ("Where is the schema defined?", "database"),
        ("How are permissions checked?", "authentication"),
        ("How do we deploy with docker?", "deployment"),
        ("How do I run the unit tests?", "testing"),
        ("Why do I get this error?", "troubleshooting"),
        ("hello there", "general"),
    ],
)
def test_analyze_query_intent(query, intent):
    assert analyze_query_intent(query) == intent
