import pytest

from conftest import make_profile
from peerlink.matching.engine import base_score, compute_compatibility, rank_peers, score_peer
from peerlink.matching.rules import determine_recommendation_type, generate_reasons
from peerlink.models import CompatibilityBreakdown, RecommendationType


def test_base_score_uses_fixed_weights():
    c = CompatibilityBreakdown(
        symptom_overlap=1.0,
        interest_alignment=0.0,
        communication_match=0.0,
        experience_match=0.0,
        activity_match=0.0,
    )
    assert base_score(c) == pytest.approx(35.0)

    full = CompatibilityBreakdown(1.0, 1.0, 1.0, 1.0, 1.0)
    assert base_score(full) == pytest.approx(100.0)


def test_score_peer_worked_example():
    user = make_profile(
        "a",
        symptoms=["itching", "fatigue"],
        interests=["Research participation", "Diet changes"],
        support_types=["Practical advice"],
        communication_style="daily",
        experience_level="newly_diagnosed",
        engagement_score=50,
    )
    match = make_profile(
        "b",
        symptoms=["itching", "brain fog", "fatigue"],
        interests=["Research participation"],
        support_types=["Practical advice"],
        communication_style="daily",
        experience_level="long_term",
        engagement_score=10,
        response_rate=0.8,
    )

    scored = score_peer(user, match)

    assert scored.compatibility.symptom_overlap == pytest.approx(2 / 3)
    assert scored.compatibility.interest_alignment == 0.5
    assert scored.compatibility.communication_match == 1.0
    assert scored.compatibility.experience_match == 0.4
    assert scored.compatibility.activity_match == pytest.approx(0.6)
    assert scored.score == pytest.approx(62.8333, abs=1e-3)
    assert scored.recommendation_type == RecommendationType.MENTOR
    assert scored.reasons == [
        "High symptom overlap (67%)",
        "Compatible communication preferences",
        "Shared support focus: Practical advice",
    ]


def test_sub_scores_and_base_score_stay_in_range():
    user = make_profile("a", symptoms=["x"], interests=["i"], engagement_score=0)
    others = [
        make_profile("b"),
        make_profile("c", symptoms=["x"], interests=["i"], engagement_score=100),
        make_profile("d", symptoms=["y", "z"], experience_level="long_term", engagement_score=300),
    ]
    for other in others:
        c = compute_compatibility(user, other)
        for value in (c.symptom_overlap, c.interest_alignment, c.communication_match,
                      c.experience_match, c.activity_match):
            assert 0.0 <= value <= 1.0
        assert 0.0 <= base_score(c) <= 100.0


def test_classifier_urgent_support_wins():
    user = make_profile("a", support_types=["Emotional support"], experience_level="newly_diagnosed")
    match = make_profile("b", experience_level="long_term")
    assert determine_recommendation_type(user, match) == RecommendationType.URGENT_SUPPORT

    crisis = make_profile("a", support_types=["Crisis support"])
    assert determine_recommendation_type(crisis, match) == RecommendationType.URGENT_SUPPORT


def test_classifier_mentor_precedes_research_partner():
    user = make_profile(
        "a", experience_level="newly_diagnosed", interests=["Research participation"]
    )
    match = make_profile(
        "b", experience_level="long_term", interests=["Research participation"]
    )
    assert determine_recommendation_type(user, match) == RecommendationType.MENTOR


def test_classifier_research_partner_requires_both():
    user = make_profile("a", interests=["Research participation"])
    both = make_profile("b", interests=["Research participation"])
    only_user = make_profile("c", interests=["Diet changes"])
    assert determine_recommendation_type(user, both) == RecommendationType.RESEARCH_PARTNER
    assert determine_recommendation_type(user, only_user) == RecommendationType.PEER_BUDDY


def test_classifier_mentor_is_directional():
    user = make_profile("a", experience_level="long_term")
    match = make_profile("b", experience_level="newly_diagnosed")
    assert determine_recommendation_type(user, match) == RecommendationType.PEER_BUDDY


def test_reasons_capped_at_four_in_priority_order():
    user = make_profile("a", support_types=["Practical advice", "Research updates"])
    match = make_profile("b", support_types=["Research updates", "Practical advice"], response_rate=0.95)
    c = CompatibilityBreakdown(
        symptom_overlap=0.8,
        interest_alignment=0.75,
        communication_match=1.0,
        experience_match=1.0,
        activity_match=1.0,
    )
    reasons = generate_reasons(user, match, c)
    assert reasons == [
        "High symptom overlap (80%)",
        "Shared interests and coping strategies",
        "Compatible communication preferences",
        "Similar experience level",
    ]


def test_reasons_thresholds_are_strict():
    user = make_profile("a")
    match = make_profile("b", response_rate=0.8)
    c = CompatibilityBreakdown(
        symptom_overlap=0.6,
        interest_alignment=0.5,
        communication_match=0.5,
        experience_match=0.7,
        activity_match=1.0,
    )
    assert generate_reasons(user, match, c) == []


def test_reasons_use_first_shared_support_type_in_requester_order():
    user = make_profile("a", support_types=["Research updates", "Practical advice"])
    match = make_profile("b", support_types=["Practical advice", "Research updates"])
    c = CompatibilityBreakdown(0.0, 0.0, 0.5, 0.5, 1.0)
    assert generate_reasons(user, match, c) == ["Shared support focus: Research updates"]


def test_percentage_rounds_half_up():
    user = make_profile("a")
    match = make_profile("b")
    c = CompatibilityBreakdown(0.625, 0.0, 0.5, 0.5, 1.0)
    assert generate_reasons(user, match, c)[0] == "High symptom overlap (63%)"


def test_rank_peers_sorted_and_stable_for_ties():
    user = make_profile("a", symptoms=["x", "y"])
    candidates = [
        make_profile("tie-1"),
        make_profile("best", symptoms=["x", "y"]),
        make_profile("tie-2"),
    ]
    ranked = rank_peers(user, candidates, top_n=3)
    assert [r.match.user_id for r in ranked] == ["best", "tie-1", "tie-2"]
