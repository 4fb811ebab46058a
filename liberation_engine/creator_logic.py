# liberation_engine/creator_logic.py
# Creator business logic.
# Revenue split, attribution rights, economic empowerment.
# Validator mode: CRITICAL_ONLY. Weight profile: default.
#
# Revenue rules:
#   creator share = revenue x creator sovereignty
#   creator sovereignty >= policy floor (75%)
#   platform share <= 1 - floor (25%)
#   creator share < 50% of revenue is an economic-justice violation

from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Mapping, Optional

from .aggregator import build_result
from .patterns import VIOLATION_REMEDIES
from .policy import DEFAULT_POLICY, LiberationPolicy, ValidationMode
from .types import (
    BusinessLogicOperationResult,
    LiberationValues,
    Severity,
    Violation,
    ViolationType,
)
from .values_validator import validate

log = logging.getLogger(__name__)

CREATOR_LOGIC_VERSION = "creator-logic-v1.0"

ECONOMIC_JUSTICE_FLOOR = 0.5
PLATFORM_SHARE_TOLERANCE = 1e-9

MODIFICATION_TYPES = ("edit", "remix", "derivative", "commercial_use")
# Modification types that touch the creator's narrative.
NARRATIVE_CONTROLLED_TYPES = frozenset({"edit", "remix", "commercial_use"})
MODIFICATION_BASE_REVENUE = 1000.0

# Earnings at which the earnings component of progress saturates.
EARNINGS_SCALE = 10000.0


def _amount(raw: Any, name: str) -> float:
    """Non-negative money amount; anything else counts as zero."""
    if isinstance(raw, bool) or raw is None:
        return 0.0
    try:
        num = float(raw)
    except (TypeError, ValueError):
        log.warning("non-numeric %s=%r treated as 0", name, raw)
        return 0.0
    if math.isnan(num) or math.isinf(num) or num < 0:
        log.warning("invalid %s=%r treated as 0", name, raw)
        return 0.0
    return num


def _pct(x: float) -> str:
    return f"{x * 100:.1f}%"


def sovereignty_split(total_revenue: float, values: LiberationValues, policy: LiberationPolicy) -> Dict[str, Any]:
    share = values.number("creator_sovereignty")
    creator_share = total_revenue * share
    platform_share = total_revenue - creator_share
    compliant = values.creator_sovereignty is not None and share >= policy.min_creator_sovereignty

    issues: List[str] = []
    if not compliant:
        issues.append(
            f"Creator sovereignty {_pct(share)} below required {_pct(policy.min_creator_sovereignty)} minimum"
        )
        issues.append("Liberation values violated: Creator economic empowerment not met")
    if total_revenue > 0 and (1.0 - share) > policy.max_platform_share + PLATFORM_SHARE_TOLERANCE:
        issues.append(f"Platform share {_pct(1.0 - share)} exceeds maximum {_pct(policy.max_platform_share)}")
    if total_revenue > 0 and share < ECONOMIC_JUSTICE_FLOOR:
        issues.append("Economic justice violation: Creator receiving less than 50% of value created")

    return {
        "total_revenue": total_revenue,
        "creator_share": creator_share,
        "creator_percentage": share,
        "platform_share": platform_share,
        "is_compliant": compliant,
        "violations": issues,
    }


def _sovereignty_violations(issues: List[str]) -> List[Violation]:
    return [
        Violation(
            type=ViolationType.CREATOR_SOVEREIGNTY,
            severity=Severity.CRITICAL,
            description=issue,
            remedy=VIOLATION_REMEDIES[ViolationType.CREATOR_SOVEREIGNTY],
        )
        for issue in issues
    ]


# ═══════════════════════════════════════════════════════════
# SOVEREIGNTY
# ═══════════════════════════════════════════════════════════

def calculate_creator_sovereignty(
    total_revenue: Any,
    creator_id: str,
    content_id: str,
    values: Any,
    policy: Optional[LiberationPolicy] = None,
) -> BusinessLogicOperationResult:
    p = policy or DEFAULT_POLICY
    vals = LiberationValues.from_mapping(values)
    validation = validate(vals, ValidationMode.CRITICAL_ONLY, p.weights, p)
    revenue = _amount(total_revenue, "total_revenue")
    calc = sovereignty_split(revenue, vals, p)
    compliant = calc["is_compliant"]
    share = calc["creator_percentage"]

    impact = 0.5 + (0.3 if compliant else 0.0)
    impact += (share - 0.5) * 0.4
    impact += vals.number("black_queer_empowerment") * 0.2
    impact = min(max(impact, 0.0), 1.0)

    benefit = min(0.4 + (0.4 if compliant else 0.0) + share * 0.2, 1.0)

    recs: List[str] = []
    if not compliant:
        recs.append("Increase creator revenue share to minimum 75% to meet liberation standards")
        recs.append("Review platform fee structure to ensure creator economic empowerment")
    if calc["violations"]:
        recs.append("Address sovereignty violations to align with liberation values")
    if share < 0.8:
        recs.append("Consider increasing creator share above 80% for enhanced empowerment")
    recs.append("Monitor creator sovereignty metrics regularly for liberation compliance")

    data = dict(calc, creator_id=creator_id, content_id=content_id)
    return build_result(
        "creator_sovereignty",
        compliant and validation.is_valid,
        data, validation,
        empowerment_impact=impact,
        community_benefit=benefit,
        sovereignty_compliance=compliant,
        recommendations=recs,
        violations=list(validation.violations) + _sovereignty_violations(calc["violations"]),
    )


# ═══════════════════════════════════════════════════════════
# ATTRIBUTION
# ═══════════════════════════════════════════════════════════

def narrative_control(mod_type: str, values: LiberationValues) -> bool:
    if values.number("cultural_authenticity") < 0.7:
        return False
    if not values.anti_oppression_validation:
        return False
    if mod_type in NARRATIVE_CONTROLLED_TYPES:
        return values.number("black_queer_empowerment") >= 0.7
    return True


def modification_rights(values: LiberationValues, has_narrative_control: bool) -> str:
    if not has_narrative_control or not values.anti_oppression_validation:
        return "none"
    cs = values.number("creator_sovereignty")
    if cs >= 0.8 and values.number("cultural_authenticity") >= 0.8:
        return "full"
    if cs >= 0.75:
        return "limited"
    return "none"


def cultural_rights(values: LiberationValues) -> List[str]:
    rights: List[str] = []
    if values.number("cultural_authenticity") >= 0.7:
        rights += ["cultural_authenticity_protection", "community_cultural_validation"]
    if values.number("black_queer_empowerment") >= 0.8:
        rights += ["black_queer_representation_rights", "community_cultural_celebration"]
    if values.anti_oppression_validation:
        rights += ["cultural_appropriation_protection", "community_cultural_sovereignty"]
    return rights


def enforce_creator_attribution_rights(
    creator_id: str,
    content_id: str,
    request: Optional[Mapping[str, Any]],
    values: Any,
    policy: Optional[LiberationPolicy] = None,
) -> BusinessLogicOperationResult:
    """
    Decide what a modification request may do with a creator's work.
    Attribution is always required.
    """
    p = policy or DEFAULT_POLICY
    req = request if isinstance(request, Mapping) else {}
    vals = LiberationValues.from_mapping(values)
    validation = validate(vals, ValidationMode.CRITICAL_ONLY, p.weights, p)

    mod_type = str(req.get("type") or "edit").strip().lower()
    if mod_type not in MODIFICATION_TYPES:
        log.warning("unknown modification type %r treated as edit", mod_type)
        mod_type = "edit"

    control = narrative_control(mod_type, vals)
    rights = modification_rights(vals, control)

    if req.get("expected_revenue") is not None:
        revenue = _amount(req.get("expected_revenue"), "expected_revenue")
    else:
        revenue = MODIFICATION_BASE_REVENUE * (2 if mod_type == "commercial_use" else 1)
    economic = sovereignty_split(revenue, vals, p)
    culture = cultural_rights(vals)

    attribution_required = True
    compliant = attribution_required and control and economic["is_compliant"]

    impact = 0.5 + 0.15
    if control:
        impact += 0.2
    if rights == "full":
        impact += 0.15
    if economic["is_compliant"]:
        impact += 0.1

    benefit = 0.4 + 0.1 * len(culture)
    if economic["is_compliant"]:
        benefit += 0.2
    if control:
        benefit += 0.2

    recs: List[str] = []
    if not compliant:
        recs.append("Ensure creator attribution requirements are met")
        recs.append("Protect creator narrative control and cultural rights")
    if not economic["is_compliant"]:
        recs.append("Increase creator economic rights to meet sovereignty standards")
    if rights == "none":
        recs.append("Review modification rights to ensure creator empowerment")
    recs.append("Maintain cultural authenticity and community validation")

    data = {
        "creator_id": creator_id,
        "content_id": content_id,
        "modification_type": mod_type,
        "requester_id": req.get("requester_id") or req.get("requesterId"),
        "attribution_required": attribution_required,
        "narrative_control": control,
        "modification_rights": rights,
        "economic_rights": economic,
        "cultural_rights": culture,
    }
    return build_result(
        "creator_attribution",
        compliant and validation.is_valid,
        data, validation,
        empowerment_impact=min(impact, 1.0),
        community_benefit=min(benefit, 1.0),
        sovereignty_compliance=economic["is_compliant"],
        recommendations=recs,
    )


# ═══════════════════════════════════════════════════════════
# ECONOMIC EMPOWERMENT
# ═══════════════════════════════════════════════════════════

def sovereignty_gaps(values: LiberationValues, policy: LiberationPolicy) -> List[str]:
    gaps: List[str] = []
    cs = values.creator_sovereignty
    if cs is None or cs < policy.min_creator_sovereignty:
        gaps.append(
            f"Creator sovereignty {_pct(values.number('creator_sovereignty'))} below required "
            f"{_pct(policy.min_creator_sovereignty)}"
        )
    if not values.anti_oppression_validation:
        gaps.append("Anti-oppression validation not enabled for creator protection")
    em = values.black_queer_empowerment
    if em is None or em < policy.min_empowerment:
        gaps.append("Black queer empowerment below minimum threshold for creator liberation")
    return gaps


def track_economic_empowerment(
    creator_id: str,
    total_earnings: Any,
    values: Any,
    policy: Optional[LiberationPolicy] = None,
) -> BusinessLogicOperationResult:
    """Earnings come from the caller; nothing is looked up here."""
    p = policy or DEFAULT_POLICY
    vals = LiberationValues.from_mapping(values)
    validation = validate(vals, ValidationMode.CRITICAL_ONLY, p.weights, p)
    earnings = _amount(total_earnings, "total_earnings")

    cs = vals.number("creator_sovereignty")
    em = vals.number("black_queer_empowerment")

    liberation_impact = 0.5
    if earnings > 1000:
        liberation_impact += min(earnings / EARNINGS_SCALE, 0.3)
    liberation_impact += cs * 0.2 + em * 0.2
    liberation_impact = min(liberation_impact, 1.0)

    benefit = 0.4
    if earnings > 500:
        benefit += min(earnings / 5000, 0.3)
    benefit += em * 0.15 + vals.number("community_protection") * 0.15
    benefit = min(benefit, 1.0)

    values_progress = (cs + em + vals.number("cultural_authenticity")) / 3
    progress = min(earnings / EARNINGS_SCALE, 1.0) * 0.4 + liberation_impact * 0.3 + values_progress * 0.3

    gaps = sovereignty_gaps(vals, p)

    recs: List[str] = []
    if gaps:
        recs.append("Address sovereignty violations to ensure creator liberation")
        recs.append("Increase creator revenue share to meet 75% minimum requirement")
    if progress < 0.7:
        recs.append("Focus on increasing empowerment progress through skills development")
        recs.append("Engage with community support and mentorship programs")
    if earnings < 1000:
        recs.append("Explore additional revenue streams and platform monetization")
        recs.append("Connect with community resources for economic development")
    recs.append("Continue tracking liberation metrics for sustained empowerment")

    data = {
        "creator_id": creator_id,
        "total_earnings": earnings,
        "liberation_impact": liberation_impact,
        "community_benefit": benefit,
        "empowerment_progress": progress,
        "sovereignty_violations": gaps,
    }
    return build_result(
        "economic_empowerment",
        not gaps and validation.is_valid,
        data, validation,
        empowerment_impact=progress,
        community_benefit=benefit,
        sovereignty_compliance=not gaps,
        recommendations=recs,
    )
