# liberation_engine/community_logic.py
# Community business logic.
# Interaction protection, journey progression, democratic participation.
# Validator mode: CRITICAL_ONLY. Weight profile: default.

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .aggregator import build_result, clamp
from .policy import DEFAULT_POLICY, LiberationPolicy, ValidationMode
from .progression import readiness_gates, require_rule
from .types import (
    STAGE_ORDER,
    BusinessLogicOperationResult,
    JourneyContext,
    JourneyStage,
    LiberationValues,
    coerce_items,
)
from .values_validator import validate

log = logging.getLogger(__name__)

COMMUNITY_LOGIC_VERSION = "community-logic-v1.0"

VULNERABLE_STAGES = frozenset({JourneyStage.CRISIS, JourneyStage.STABILIZATION})

STAGE_IMPACT_MULTIPLIERS: Mapping[JourneyStage, float] = MappingProxyType({
    JourneyStage.CRISIS: 0.8,
    JourneyStage.STABILIZATION: 0.7,
    JourneyStage.GROWTH: 0.9,
    JourneyStage.COMMUNITY_HEALING: 1.0,
    JourneyStage.ADVOCACY: 1.0,
})

STAGE_OPPORTUNITIES: Mapping[JourneyStage, Tuple[str, ...]] = MappingProxyType({
    JourneyStage.CRISIS: ("peer_support_connection", "resource_navigation", "safety_planning"),
    JourneyStage.STABILIZATION: ("skill_building", "community_integration", "resource_development"),
    JourneyStage.GROWTH: ("leadership_development", "peer_mentoring", "advocacy_training"),
    JourneyStage.COMMUNITY_HEALING: ("healing_facilitation", "community_support", "knowledge_sharing"),
    JourneyStage.ADVOCACY: ("movement_leadership", "system_change", "community_organizing"),
})

# Community benefit of arriving at each stage.
PROGRESSION_BENEFIT: Mapping[JourneyStage, float] = MappingProxyType({
    JourneyStage.STABILIZATION: 0.6,
    JourneyStage.GROWTH: 0.7,
    JourneyStage.COMMUNITY_HEALING: 0.9,
    JourneyStage.ADVOCACY: 1.0,
})

BASE_ACCESSIBILITY = 0.8
ACCESSIBILITY_MEASURES = (
    "screen_reader_support",
    "multiple_language_options",
    "flexible_participation_formats",
)
MIN_PARTICIPATION_SCORE = 0.6
MIN_PARTICIPATION_ALIGNMENT = 0.7


@dataclass(frozen=True)
class CommunityInteractionRule:
    id: str
    name: str
    description: str
    applicable_stages: Tuple[JourneyStage, ...]
    liberation_requirements: LiberationValues
    protection_mechanisms: Tuple[str, ...]
    empowerment_actions: Tuple[str, ...]


DEFAULT_COMMUNITY_RULES: Tuple[CommunityInteractionRule, ...] = (
    CommunityInteractionRule(
        id="anti_oppression_protection",
        name="Anti-Oppression Community Protection",
        description="Prevents interactions that perpetuate oppression",
        applicable_stages=STAGE_ORDER,
        liberation_requirements=LiberationValues(0.75, True, 0.6, 0.8, 0.7),
        protection_mechanisms=("content_review", "community_notification", "support_escalation"),
        empowerment_actions=("peer_support", "resource_connection", "healing_space_access"),
    ),
    CommunityInteractionRule(
        id="creator_sovereignty_protection",
        name="Creator Sovereignty Protection",
        description="Ensures creator rights and economic empowerment",
        applicable_stages=(JourneyStage.GROWTH, JourneyStage.COMMUNITY_HEALING, JourneyStage.ADVOCACY),
        liberation_requirements=LiberationValues(0.75, True, 0.7, 0.75, 0.75),
        protection_mechanisms=("attribution_verification", "revenue_protection", "rights_enforcement"),
        empowerment_actions=("revenue_sharing", "attribution_amplification", "platform_promotion"),
    ),
)

COMMUNITY_RULES: Mapping[str, Tuple[CommunityInteractionRule, ...]] = MappingProxyType({
    "default": DEFAULT_COMMUNITY_RULES,
})

_DIMENSIONS = (
    "creator_sovereignty",
    "black_queer_empowerment",
    "community_protection",
    "cultural_authenticity",
)


def rules_for(community_id: Optional[str]) -> Tuple[CommunityInteractionRule, ...]:
    if not isinstance(community_id, str) or not community_id:
        return DEFAULT_COMMUNITY_RULES
    return COMMUNITY_RULES.get(community_id, DEFAULT_COMMUNITY_RULES)


def rule_shortfalls(rule: CommunityInteractionRule, values: LiberationValues) -> List[str]:
    """Dimensions where the member falls below the rule's requirements."""
    short: List[str] = []
    req = rule.liberation_requirements
    if req.anti_oppression_validation and not values.anti_oppression_validation:
        short.append("anti_oppression_validation")
    for name in _DIMENSIONS:
        need = getattr(req, name)
        have = getattr(values, name)
        if need is not None and (have is None or have < need):
            short.append(name)
    return short


def empowerment_opportunities(stage: JourneyStage, values: LiberationValues) -> List[str]:
    opps = list(STAGE_OPPORTUNITIES.get(stage, ()))
    if values.number("black_queer_empowerment") >= 0.8:
        opps += ["cultural_celebration", "visibility_amplification"]
    if values.number("creator_sovereignty") >= 0.8:
        opps += ["economic_empowerment", "revenue_sharing_optimization"]
    return opps


def interaction_liberation_impact(stage: JourneyStage, values: LiberationValues, allowed: bool) -> float:
    if not allowed:
        return 0.2
    impact = 0.5
    impact += values.number("black_queer_empowerment") * 0.3
    impact += values.number("community_protection") * 0.2
    impact *= STAGE_IMPACT_MULTIPLIERS.get(stage, 0.6)
    return min(impact, 1.0)


def _values(values: Any) -> LiberationValues:
    return LiberationValues.from_mapping(values)


def _sovereign(values: LiberationValues, p: LiberationPolicy) -> bool:
    cs = values.creator_sovereignty
    return cs is not None and cs >= p.min_creator_sovereignty


# ═══════════════════════════════════════════════════════════
# INTERACTIONS
# ═══════════════════════════════════════════════════════════

def validate_community_interaction(
    member_id: str,
    community_id: Optional[str],
    interaction_type: str,
    context: Any,
    values: Any,
    policy: Optional[LiberationPolicy] = None,
) -> BusinessLogicOperationResult:
    p = policy or DEFAULT_POLICY
    ctx = JourneyContext.from_mapping(context)
    vals = _values(values)
    validation = validate(vals, ValidationMode.CRITICAL_ONLY, p.weights, p)

    allow = True
    measures: List[str] = []
    reasons: List[str] = []
    for rule in rules_for(community_id):
        if ctx.stage not in rule.applicable_stages:
            continue
        measures.extend(rule.protection_mechanisms)
        short = rule_shortfalls(rule, vals)
        if short:
            allow = False
            reasons.append(f"Violated community rule: {rule.name} - requirements not met: {', '.join(short)}")

    if ctx.stage in VULNERABLE_STAGES:
        measures.append("vulnerable_stage_extra_protection")
        measures.append("community_support_notification")

    opportunities = empowerment_opportunities(ctx.stage, vals)
    impact = interaction_liberation_impact(ctx.stage, vals, allow)
    allowed = allow and validation.is_valid

    if not allow:
        reasons.insert(0, "Community protection mechanisms activated")
    if not validation.is_valid:
        reasons.append("Liberation values validation failed")
    if validation.violations:
        reasons.append(f"Liberation violations: {len(validation.violations)}")

    benefit = 0.5 + (0.3 if allowed else 0.0) + 0.1 * len(opportunities) + impact * 0.2

    recs: List[str] = []
    if not allowed:
        recs.append("Review community guidelines and liberation principles")
        recs.append("Engage with community support resources")
    if opportunities:
        recs.append(f"Explore empowerment opportunities: {', '.join(opportunities[:2])}")
    recs.append("Connect with peer support and community resources")

    data = {
        "member_id": member_id,
        "community_id": community_id if isinstance(community_id, str) and community_id else "default",
        "interaction_type": interaction_type,
        "stage": ctx.stage.value,
        "allow": allowed,
        "reasoning": "; ".join(reasons) or "Liberation values aligned, community protection satisfied",
        "protection_measures": measures,
        "empowerment_opportunities": opportunities,
        "liberation_impact": impact,
    }
    return build_result(
        "community_interaction", allowed, data, validation,
        empowerment_impact=impact,
        community_benefit=min(benefit, 1.0),
        sovereignty_compliance=_sovereign(vals, p),
        recommendations=recs,
    )


# ═══════════════════════════════════════════════════════════
# JOURNEY PROGRESSION
# ═══════════════════════════════════════════════════════════

def process_journey_progression(
    user_id: str,
    current_stage: Any,
    target_stage: Any,
    context: Any,
    values: Any,
    community_validated: bool = False,
    completed_requirements: Iterable[str] = (),
    policy: Optional[LiberationPolicy] = None,
) -> BusinessLogicOperationResult:
    """
    Authoritative transition check.
    Raises UnknownTransitionError for any pair with no rule.
    """
    p = policy or DEFAULT_POLICY
    rule = require_rule(current_stage, target_stage)
    ctx = JourneyContext.from_mapping(context)
    vals = _values(values)
    validation = validate(vals, ValidationMode.CRITICAL_ONLY, p.weights, p)

    readiness = readiness_gates(rule, ctx, vals, community_validated, completed_requirements, p)
    gates = readiness["gates"]
    allowed = readiness["ready"] and validation.is_valid
    log.info(
        "journey progression user=%s %s->%s allowed=%s gates=%s",
        user_id, rule.from_stage.value, rule.to_stage.value, allowed, gates,
    )

    recs: List[str] = []
    if not (gates["rule_self_consistent"] and gates["user_values_sufficient"]):
        recs.append("Build liberation values alignment through community engagement")
    if readiness["missing_requirements"]:
        recs.append(f"Develop empowerment requirements: {', '.join(readiness['missing_requirements'][:2])}")
    if rule.community_validation and not gates["community_validated"]:
        recs.append("Engage with community for validation and support")
    recs.append("Continue community participation and peer support")

    empowerment_impact = (
        vals.number("black_queer_empowerment") * 0.4
        + vals.number("community_protection") * 0.3
        + vals.number("cultural_authenticity") * 0.3
    )

    data: Dict[str, Any] = {
        "user_id": user_id,
        "allowed": allowed,
        "rule": rule.to_dict(),
        "readiness": {
            "gates": gates,
            "rule_criteria_score": readiness["rule_criteria_score"],
            "user_values_score": readiness["user_values_score"],
            "missing_requirements": readiness["missing_requirements"],
        },
    }
    return build_result(
        "journey_progression", allowed, data, validation,
        empowerment_impact=empowerment_impact,
        community_benefit=PROGRESSION_BENEFIT.get(rule.to_stage, 0.5),
        sovereignty_compliance=_sovereign(vals, p),
        recommendations=recs,
    )


# ═══════════════════════════════════════════════════════════
# DEMOCRATIC PARTICIPATION
# ═══════════════════════════════════════════════════════════

def accessibility_measures(community_context: Any) -> List[str]:
    measures = list(ACCESSIBILITY_MEASURES)
    if isinstance(community_context, Mapping):
        for need in coerce_items(community_context.get("accessibility_needs")):
            item = f"{str(need).strip().lower().replace(' ', '_')}_support"
            if item not in measures:
                measures.append(item)
    return measures


def validate_democratic_participation(
    participant_id: str,
    participation_type: str,
    community_context: Any,
    values: Any,
    policy: Optional[LiberationPolicy] = None,
) -> BusinessLogicOperationResult:
    p = policy or DEFAULT_POLICY
    vals = _values(values)
    validation = validate(vals, ValidationMode.CRITICAL_ONLY, p.weights, p)

    em = vals.number("black_queer_empowerment")
    pr = vals.number("community_protection")
    au = vals.number("cultural_authenticity")

    participation_score = em * 0.4 + pr * 0.3 + au * 0.3
    empowerment_level = participation_score * em
    alignment = (em + pr + au) / 3
    measures = accessibility_measures(community_context)
    accessibility = clamp(BASE_ACCESSIBILITY + 0.05 * (len(measures) - len(ACCESSIBILITY_MEASURES)))

    is_valid = (
        participation_score >= MIN_PARTICIPATION_SCORE
        and alignment >= MIN_PARTICIPATION_ALIGNMENT
        and validation.is_valid
    )

    recs: List[str] = []
    if participation_score < 0.7:
        recs.append("Enhance participation quality through community engagement")
    if alignment < 0.8:
        recs.append("Align participation with liberation values and community goals")
    recs.append("Utilize accessibility measures for inclusive participation")

    data = {
        "participant_id": participant_id,
        "participation_type": participation_type,
        "is_valid": is_valid,
        "participation_score": participation_score,
        "empowerment_level": empowerment_level,
        "accessibility_score": accessibility,
        "accessibility_measures": measures,
        "liberation_alignment": alignment,
    }
    return build_result(
        "democratic_participation", is_valid, data, validation,
        empowerment_impact=empowerment_level,
        community_benefit=empowerment_level * alignment,
        sovereignty_compliance=_sovereign(vals, p),
        recommendations=recs,
    )
