"""
tests/test_progression.py — Journey Progression Rules
=======================================================
Five stages. Four edges. Four gates. Undefined pairs fail loudly.
"""

import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from liberation_engine import (
    PROGRESSION_RULES,
    UnknownTransitionError,
    assess_next_stage_readiness,
    assess_readiness,
    find_rule,
    readiness_gates,
    require_rule,
)
from liberation_engine.progression import next_stage
from liberation_engine.types import CommunityConnection, JourneyContext, JourneyStage


STRONG = {
    "creator_sovereignty": 0.9,
    "anti_oppression_validation": True,
    "black_queer_empowerment": 0.9,
    "community_protection": 0.9,
    "cultural_authenticity": 0.9,
}


def _all_requirements(rule):
    return list(rule.empowerment_requirements)


# ═══════════════════════════════════════════
# RULE TABLE
# ═══════════════════════════════════════════

def test_four_forward_edges():
    assert len(PROGRESSION_RULES) == 4
    for (f, t) in PROGRESSION_RULES:
        assert t.order == f.order + 1


@pytest.mark.parametrize("f,t", [
    ("crisis", "stabilization"),
    ("stabilization", "growth"),
    ("growth", "community_healing"),
    ("community_healing", "advocacy"),
])
def test_find_rule_defined(f, t):
    rule = find_rule(f, t)
    assert rule is not None
    assert rule.from_stage.value == f
    assert rule.to_stage.value == t
    assert len(rule.empowerment_requirements) == 3


@pytest.mark.parametrize("f,t", [
    ("crisis", "growth"),
    ("advocacy", "growth"),
    ("growth", "growth"),
    ("advocacy", "liberation"),
    ("nonsense", "crisis"),
])
def test_find_rule_undefined(f, t):
    assert find_rule(f, t) is None


def test_require_rule_raises():
    with pytest.raises(UnknownTransitionError) as exc:
        require_rule("crisis", "growth")
    assert exc.value.from_stage == "crisis"
    assert exc.value.to_stage == "growth"
    assert str(exc.value) == "No liberation journey progression rule found: crisis -> growth"


def test_next_stage():
    assert next_stage(JourneyStage.CRISIS) is JourneyStage.STABILIZATION
    assert next_stage(JourneyStage.ADVOCACY) is None


@pytest.mark.parametrize("key", list(PROGRESSION_RULES))
def test_every_rule_is_self_consistent(key):
    """Each rule's own criteria clear the rule bar; no rule is a dead end."""
    rule = PROGRESSION_RULES[key]
    report = readiness_gates(rule, None, STRONG, True, _all_requirements(rule))
    assert report["gates"]["rule_self_consistent"] is True
    assert report["rule_criteria_score"] >= 0.7


def test_crisis_rule_criteria_score():
    rule = find_rule("crisis", "stabilization")
    report = readiness_gates(rule, None, STRONG, True, _all_requirements(rule))
    assert report["rule_criteria_score"] == pytest.approx(0.7825)


# ═══════════════════════════════════════════
# READINESS GATES
# ═══════════════════════════════════════════

def test_all_gates_pass():
    rule = find_rule("crisis", "stabilization")
    assert assess_readiness(rule, None, STRONG, True, _all_requirements(rule)) is True


def test_community_validation_required():
    rule = find_rule("crisis", "stabilization")
    report = readiness_gates(rule, None, STRONG, False, _all_requirements(rule))
    assert report["ready"] is False
    assert report["gates"]["community_validated"] is False


def test_community_validation_not_required():
    """stabilization -> growth does not ask the community."""
    rule = find_rule("stabilization", "growth")
    assert assess_readiness(rule, None, STRONG, False, _all_requirements(rule)) is True


def test_missing_requirements():
    rule = find_rule("growth", "community_healing")
    report = readiness_gates(rule, None, STRONG, True, ["healing_knowledge"])
    assert report["ready"] is False
    assert report["missing_requirements"] == ["peer_support_capacity", "community_trust"]


def test_weak_user_values():
    rule = find_rule("stabilization", "growth")
    weak = dict(STRONG, creator_sovereignty=0.5, black_queer_empowerment=0.5,
                community_protection=0.5, cultural_authenticity=0.5)
    report = readiness_gates(rule, None, weak, True, _all_requirements(rule))
    assert report["user_values_score"] == pytest.approx(0.25)
    assert report["gates"]["user_values_sufficient"] is False
    assert report["ready"] is False


def test_missing_values_never_pass():
    rule = find_rule("stabilization", "growth")
    assert assess_readiness(rule, None, None, True, _all_requirements(rule)) is False


# ═══════════════════════════════════════════
# NEXT-STAGE HEURISTIC
# ═══════════════════════════════════════════

CRISIS_CTX = JourneyContext(stage=JourneyStage.CRISIS)


@pytest.mark.parametrize("count,ready", [(1, False), (3, False), (4, True), (6, True)])
def test_crisis_needs_more_than_three_observations(count, ready):
    assert assess_next_stage_readiness(["crisis"] * count, CRISIS_CTX) is ready


def test_stabilization_after_growth_is_resilience():
    ctx = JourneyContext(stage=JourneyStage.STABILIZATION)
    assert assess_next_stage_readiness(["growth", "stabilization"], ctx) is True


def test_organizing_at_advocacy_has_nowhere_to_go():
    ctx = JourneyContext(stage=JourneyStage.ADVOCACY, community_connection=CommunityConnection.ORGANIZING)
    assert assess_next_stage_readiness(["advocacy"], ctx) is False


def test_organizing_below_advocacy_is_ready():
    ctx = JourneyContext(stage=JourneyStage.GROWTH, community_connection=CommunityConnection.ORGANIZING)
    assert assess_next_stage_readiness(["growth"], ctx) is True


@pytest.mark.parametrize("completed", [5, None, "safety_planning", {"safety_planning": True}])
def test_malformed_requirements_count_as_none_done(completed):
    """Anything but a list of names leaves every requirement outstanding."""
    rule = find_rule("crisis", "stabilization")
    report = readiness_gates(rule, None, STRONG, True, completed)
    assert report["ready"] is False
    assert report["missing_requirements"] == _all_requirements(rule)
