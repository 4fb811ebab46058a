# liberation_engine/progression.py
# Journey progression rule engine.
# Five stages. Four edges. No skipping.
#
# A transition is permitted only when all four gates pass:
#   G1 rule self-consistency  rule criteria score >= rule_criteria_min_score
#   G2 user values            user values score   >= user_values_min_score
#   G3 community validation   caller signal, only where the rule asks for it
#   G4 requirements           every empowerment requirement completed
#
# Undefined stage pairs are rejected loudly. Never fail open.
#
# The next-stage heuristic at the bottom is advisory only.
# It never authorizes a transition.

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Tuple

from .errors import UnknownTransitionError
from .policy import DEFAULT_POLICY, LiberationPolicy, ValidationMode
from .types import (
    STAGE_ORDER,
    CommunityConnection,
    JourneyContext,
    JourneyStage,
    LiberationValues,
    ProgressionRule,
    coerce_items,
)
from .values_validator import validate

log = logging.getLogger(__name__)

PROGRESSION_VERSION = "progression-v1.0"

# More crisis observations than this, current one included, before
# stabilization is suggested.
CRISIS_OBSERVATIONS_BEFORE_READY = 3


def _rule(
    from_stage: JourneyStage,
    to_stage: JourneyStage,
    criteria: Tuple[float, float, float, float],
    requirements: Tuple[str, ...],
    community_validation: bool,
) -> ProgressionRule:
    sovereignty, empowerment, protection, authenticity = criteria
    return ProgressionRule(
        from_stage=from_stage,
        to_stage=to_stage,
        liberation_criteria=LiberationValues(
            creator_sovereignty=sovereignty,
            anti_oppression_validation=True,
            black_queer_empowerment=empowerment,
            community_protection=protection,
            cultural_authenticity=authenticity,
        ),
        empowerment_requirements=requirements,
        community_validation=community_validation,
    )


# criteria: (sovereignty, empowerment, protection, authenticity)
PROGRESSION_RULES: Mapping[Tuple[JourneyStage, JourneyStage], ProgressionRule] = MappingProxyType({
    (r.from_stage, r.to_stage): r for r in (
        _rule(
            JourneyStage.CRISIS, JourneyStage.STABILIZATION,
            (0.75, 0.60, 0.80, 0.70),
            ("safety_planning", "resource_connection", "community_support"),
            True,
        ),
        _rule(
            JourneyStage.STABILIZATION, JourneyStage.GROWTH,
            (0.75, 0.70, 0.75, 0.75),
            ("skill_development", "peer_connection", "resource_stability"),
            False,
        ),
        _rule(
            JourneyStage.GROWTH, JourneyStage.COMMUNITY_HEALING,
            (0.75, 0.80, 0.80, 0.80),
            ("peer_support_capacity", "healing_knowledge", "community_trust"),
            True,
        ),
        _rule(
            JourneyStage.COMMUNITY_HEALING, JourneyStage.ADVOCACY,
            (0.80, 0.90, 0.85, 0.85),
            ("leadership_skills", "system_analysis", "movement_connection"),
            True,
        ),
    )
})


def next_stage(stage: JourneyStage) -> Optional[JourneyStage]:
    i = STAGE_ORDER.index(stage)
    return STAGE_ORDER[i + 1] if i + 1 < len(STAGE_ORDER) else None


def find_rule(from_stage: Any, to_stage: Any) -> Optional[ProgressionRule]:
    f = JourneyStage.parse(from_stage)
    t = JourneyStage.parse(to_stage)
    if f is None or t is None:
        return None
    return PROGRESSION_RULES.get((f, t))


def require_rule(from_stage: Any, to_stage: Any) -> ProgressionRule:
    """find_rule, but an undefined pair is an error."""
    rule = find_rule(from_stage, to_stage)
    if rule is None:
        log.warning("rejected undefined transition %s -> %s", from_stage, to_stage)
        raise UnknownTransitionError(from_stage, to_stage)
    return rule


# ═══════════════════════════════════════════════════════════
# READINESS (authoritative)
# ═══════════════════════════════════════════════════════════

def readiness_gates(
    rule: ProgressionRule,
    context: Optional[JourneyContext],
    values: Any,
    community_validated: bool = False,
    completed_requirements: Iterable[str] = (),
    policy: Optional[LiberationPolicy] = None,
) -> Dict[str, Any]:
    """
    Evaluate the four gates for one transition.
    `context` is accepted for callers that carry it; no gate reads it.
    """
    p = policy or DEFAULT_POLICY
    rule_check = validate(rule.liberation_criteria, ValidationMode.CRITICAL_ONLY, p.weights, p)
    user_check = validate(values, ValidationMode.CRITICAL_ONLY, p.weights, p)

    done = {str(r) for r in coerce_items(completed_requirements)}
    missing = [r for r in rule.empowerment_requirements if r not in done]

    gates = {
        "rule_self_consistent": rule_check.empowerment_score >= p.rule_criteria_min_score,
        "user_values_sufficient": user_check.empowerment_score >= p.user_values_min_score,
        "community_validated": bool(community_validated) if rule.community_validation else True,
        "requirements_met": not missing,
    }
    return {
        "ready": all(gates.values()),
        "gates": gates,
        "rule_criteria_score": rule_check.empowerment_score,
        "user_values_score": user_check.empowerment_score,
        "missing_requirements": missing,
    }


def assess_readiness(
    rule: ProgressionRule,
    context: Optional[JourneyContext],
    values: Any,
    community_validated: bool = False,
    completed_requirements: Iterable[str] = (),
    policy: Optional[LiberationPolicy] = None,
) -> bool:
    return readiness_gates(
        rule, context, values, community_validated, completed_requirements, policy
    )["ready"]


# ═══════════════════════════════════════════════════════════
# NEXT-STAGE HEURISTIC (advisory)
# ═══════════════════════════════════════════════════════════

def assess_next_stage_readiness(history: Sequence[Any], context: JourneyContext) -> bool:
    """
    Might this user be ready to move on?
    `history` already includes the current observation.
    Stabilization after having reached growth counts as resilience.
    """
    stages = [JourneyStage.parse(s) for s in (history or ())]
    current = context.stage

    if current is JourneyStage.CRISIS:
        return stages.count(JourneyStage.CRISIS) > CRISIS_OBSERVATIONS_BEFORE_READY
    if current is JourneyStage.STABILIZATION and JourneyStage.GROWTH in stages:
        return True
    if context.community_connection is CommunityConnection.ORGANIZING:
        return current is not JourneyStage.ADVOCACY
    return True
