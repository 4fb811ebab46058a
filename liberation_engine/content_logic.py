# liberation_engine/content_logic.py
# Content business logic.
# Anti-oppression, cultural authenticity, community consent, overall quality.
# Validator mode: STRICT. Weight profile: content.
# Pure functions over caller-supplied dicts. No I/O.

from __future__ import annotations

from typing import Any, List, Mapping, Optional, Sequence

from .aggregator import build_result, clamp
from .oppression_scanner import scan
from .patterns import (
    COMMUNITY_TERMS,
    COMMUNITY_VOICE_INDICATORS,
    EXTRACTION_TERMS,
    HARM_RISK_TERMS,
    JOY_TERMS,
    LIBERATION_TERMS,
    MISREPRESENTATION_TERMS,
    REPRESENTATION_NEGATIVE,
    REPRESENTATION_POSITIVE,
    RESOURCE_TERMS,
    SENSITIVE_INFO_TERMS,
    STEREOTYPE_PATTERNS,
    contains_any,
    matched,
)
from .policy import CONTENT_WEIGHTS, DEFAULT_POLICY, LiberationPolicy, ValidationMode
from .types import BusinessLogicOperationResult, LiberationValues, OppressionIndicator, coerce_items
from .values_validator import validate

CONTENT_LOGIC_VERSION = "content-logic-v1.0"

# Sovereignty assumed for content creators when no revenue split is in play.
CONTENT_CREATOR_SOVEREIGNTY = 0.8
CONTENT_PROTECTION = 0.9
MIN_LIBERATION_ALIGNMENT = 0.7
MIN_QUALITY_SCORE = 0.7


def _get(data: Any, *keys: str, default: Any = None) -> Any:
    if not isinstance(data, Mapping):
        return default
    for k in keys:
        if k in data:
            return data[k]
    return default


def _text(content: Any) -> str:
    t = _get(content, "text", default="")
    return t.lower() if isinstance(t, str) else ""


def _list(value: Any) -> List[str]:
    if isinstance(value, (list, tuple)):
        return [str(v).lower() for v in value]
    return []


# ═══════════════════════════════════════════════════════════
# TEXT SIGNALS
# ═══════════════════════════════════════════════════════════

def promotes_liberation(content: Any) -> bool:
    return contains_any(_text(content), LIBERATION_TERMS)


def strengthens_community(content: Any) -> bool:
    return contains_any(_text(content), COMMUNITY_TERMS)


def provides_resources(content: Any) -> bool:
    return contains_any(_text(content), RESOURCE_TERMS)


def celebrates_joy(content: Any) -> bool:
    return contains_any(_text(content), JOY_TERMS)


def risks_community_harm(content: Any) -> bool:
    return contains_any(_text(content), HARM_RISK_TERMS)


def extracts_from_community(content: Any) -> bool:
    return contains_any(_text(content), EXTRACTION_TERMS) and not promotes_liberation(content)


def contains_sensitive_information(content: Any) -> bool:
    return contains_any(_text(content), SENSITIVE_INFO_TERMS)


def risks_misrepresentation(content: Any) -> bool:
    return contains_any(_text(content), MISREPRESENTATION_TERMS)


def has_community_voices(content: Any) -> bool:
    return contains_any(_text(content), COMMUNITY_VOICE_INDICATORS)


def stereotype_patterns(content: Any) -> List[str]:
    return [f"Detected stereotype pattern: {p}" for p in matched(_text(content), STEREOTYPE_PATTERNS)]


def representation_score(content: Any) -> float:
    """+0.1 per positive representation term, -0.2 per negative one."""
    t = _text(content)
    score = 0.1 * len(matched(t, REPRESENTATION_POSITIVE))
    score -= 0.2 * len(matched(t, REPRESENTATION_NEGATIVE))
    return clamp(score)


def cultural_elements_score(content: Any) -> float:
    t = _text(content)
    if not t.strip():
        return 0.0
    return clamp(0.5 + 0.1 * len(matched(t, REPRESENTATION_POSITIVE)))


def cultural_authenticity_score(
    content: Any,
    creator_profile: Optional[Mapping[str, Any]] = None,
    community_context: Optional[Mapping[str, Any]] = None,
) -> float:
    score = 0.5
    if _get(creator_profile, "identifies_as_black_queer", "identifiesAsBlackQueer", default=False) is True:
        score += 0.3
    if _get(community_context, "community_validated", "communityValidated", default=False) is True:
        score += 0.2
    score += cultural_elements_score(content) * 0.3
    if not stereotype_patterns(content):
        score += 0.1
    if promotes_liberation(content):
        score += 0.1
    return min(score, 1.0)


def detect_cultural_appropriation(content: Any, creator_profile: Optional[Mapping[str, Any]]) -> bool:
    """
    Declared cultural elements must belong to the creator's background
    unless the community consented to their use.
    """
    elements = _list(_get(content, "cultural_elements", "culturalElements"))
    if not elements:
        return False
    if _get(creator_profile, "community_consent", "communityConsent", default=False) is True:
        return False
    background = set(_list(_get(creator_profile, "cultural_background", "culturalBackground")))
    return any(e not in background for e in elements)


def liberation_alignment(content: Any, indicators: Sequence[OppressionIndicator]) -> float:
    alignment = 0.7 - 0.2 * len(indicators)
    if promotes_liberation(content):
        alignment += 0.2
    if has_community_voices(content):
        alignment += 0.1
    return clamp(alignment)


def community_consent(content: Any, community: Optional[Mapping[str, Any]]) -> bool:
    if _get(community, "explicit_consent", "explicitConsent", default=False) is True:
        return True
    if _get(community, "community_created", "communityCreated", default=False) is True:
        return True
    if _get(community, "community_validated", "communityValidated", default=False) is True:
        return True
    # Harmful exposure without explicit consent is the only refusal.
    return not risks_community_harm(content)


def community_impact(content: Any) -> float:
    impact = 0.0
    if promotes_liberation(content):
        impact += 0.4
    if strengthens_community(content):
        impact += 0.3
    if provides_resources(content):
        impact += 0.2
    if celebrates_joy(content):
        impact += 0.1
    if risks_community_harm(content):
        impact -= 0.5
    if stereotype_patterns(content):
        impact -= 0.3
    if extracts_from_community(content):
        impact -= 0.2
    return round(impact, 10)


def community_vulnerabilities(
    content: Any, community: Optional[Mapping[str, Any]], potential_impacts: Sequence[Any] = ()
) -> List[str]:
    found: List[str] = []
    if _get(community, "faces_systemic_oppression", "facesSystemicOppression", default=False) is True:
        found.append("Community faces ongoing systemic oppression")
    if _get(community, "experiences_violence", "experiencesViolence", default=False) is True:
        found.append("Community experiences targeted violence")
    if contains_sensitive_information(content):
        found.append("Content contains sensitive community information")
    if risks_misrepresentation(content):
        found.append("Risk of community misrepresentation")
    for impact in coerce_items(potential_impacts):
        if isinstance(impact, str) and impact.strip():
            found.append(f"Potential impact flagged: {impact.strip()}")
    return found


def protection_measures(vulnerabilities: Sequence[str], impact: float, content: Any) -> List[str]:
    measures: List[str] = []
    if vulnerabilities:
        measures.append("Enhanced community review process")
        measures.append("Trauma-informed content guidelines application")
    if impact < 0:
        measures.append("Community harm mitigation protocols")
        measures.append("Liberation-centered content revision required")
    if risks_community_harm(content) or contains_sensitive_information(content):
        measures.append("Ongoing community oversight and feedback")
    return measures


# ═══════════════════════════════════════════════════════════
# OPERATIONS
# ═══════════════════════════════════════════════════════════

def validate_anti_oppression(
    content_id: str,
    content: Mapping[str, Any],
    context: Optional[Mapping[str, Any]] = None,
    policy: Optional[LiberationPolicy] = None,
) -> BusinessLogicOperationResult:
    p = policy or DEFAULT_POLICY
    authenticity = cultural_authenticity_score(content, {}, {})
    values = LiberationValues(
        creator_sovereignty=CONTENT_CREATOR_SOVEREIGNTY,
        anti_oppression_validation=True,
        black_queer_empowerment=representation_score(content),
        community_protection=CONTENT_PROTECTION,
        cultural_authenticity=authenticity,
    )
    validation = validate(values, ValidationMode.STRICT, CONTENT_WEIGHTS, p)

    indicators = scan(_get(content, "text", default=""))
    alignment = liberation_alignment(content, indicators)
    consent = community_consent(content, context or {})
    is_valid = validation.is_valid and not indicators and alignment >= MIN_LIBERATION_ALIGNMENT and consent

    benefit = alignment * 0.5
    if consent:
        benefit += 0.3
    if authenticity > 0.7:
        benefit += 0.2

    recs: List[str] = []
    if not is_valid:
        recs.append("Remove all oppressive content elements immediately")
        recs.append("Center liberation values in content messaging")
    if indicators:
        recs.append("Address specific oppression indicators identified")
    if not consent:
        recs.append("Obtain explicit community consent before publication")

    data = {
        "content_id": content_id,
        "is_valid": is_valid,
        "oppression_indicators": [i.to_dict() for i in indicators],
        "cultural_authenticity": authenticity,
        "community_consent": consent,
        "liberation_alignment": alignment,
    }
    return build_result(
        "content_validation", is_valid, data, validation,
        empowerment_impact=alignment,
        community_benefit=min(benefit, 1.0),
        sovereignty_compliance=True,
        recommendations=recs,
    )


def verify_cultural_authenticity(
    content_id: str,
    content: Mapping[str, Any],
    creator_profile: Optional[Mapping[str, Any]] = None,
    community_context: Optional[Mapping[str, Any]] = None,
    policy: Optional[LiberationPolicy] = None,
) -> BusinessLogicOperationResult:
    p = policy or DEFAULT_POLICY
    authenticity = cultural_authenticity_score(content, creator_profile, community_context)
    appropriation = detect_cultural_appropriation(content, creator_profile)
    voices = has_community_voices(content)
    representation = representation_score(content)
    stereotypes = stereotype_patterns(content)

    validation = validate(
        LiberationValues(
            creator_sovereignty=CONTENT_CREATOR_SOVEREIGNTY,
            anti_oppression_validation=not appropriation,
            black_queer_empowerment=representation,
            community_protection=0.9 if voices else 0.6,
            cultural_authenticity=authenticity,
        ),
        ValidationMode.STRICT, CONTENT_WEIGHTS, p,
    )

    benefit = authenticity * 0.4 + representation * 0.3
    if voices:
        benefit += 0.2
    if not appropriation:
        benefit += 0.1

    recs: List[str] = []
    if appropriation:
        recs.append("Remove culturally appropriative elements immediately")
        recs.append("Consult community members from affected cultures")
    if not voices:
        recs.append("Include authentic community voices and perspectives")
    if representation < 0.7:
        recs.append("Strengthen Black queer representation and avoid stereotypes")

    data = {
        "content_id": content_id,
        "authenticity_score": authenticity,
        "cultural_appropriation": appropriation,
        "community_voices": voices,
        "black_queer_representation": representation,
        "stereotype_analysis": stereotypes,
    }
    return build_result(
        "cultural_authenticity",
        validation.is_valid and authenticity >= p.min_cultural_authenticity,
        data, validation,
        empowerment_impact=representation,
        community_benefit=min(benefit, 1.0),
        sovereignty_compliance=not appropriation,
        recommendations=recs,
    )


def validate_community_consent(
    content_id: str,
    content: Mapping[str, Any],
    community: Optional[Mapping[str, Any]] = None,
    potential_impacts: Sequence[Any] = (),
    policy: Optional[LiberationPolicy] = None,
) -> BusinessLogicOperationResult:
    p = policy or DEFAULT_POLICY
    consent = community_consent(content, community)
    impact = community_impact(content)
    vulnerabilities = community_vulnerabilities(content, community, potential_impacts)
    measures = protection_measures(vulnerabilities, impact, content)

    validation = validate(
        LiberationValues(
            creator_sovereignty=CONTENT_CREATOR_SOVEREIGNTY,
            anti_oppression_validation=impact >= 0,
            black_queer_empowerment=representation_score(content),
            community_protection=0.9 if measures else 0.7,
            cultural_authenticity=0.8,
        ),
        ValidationMode.STRICT, CONTENT_WEIGHTS, p,
    )

    recs: List[str] = []
    if not consent:
        recs.append("Obtain explicit community consent before proceeding")
        recs.append("Implement community consultation process")
    if impact < 0:
        recs.append("Mitigate negative community impacts")
        recs.append("Redesign content to benefit rather than harm community")
    if vulnerabilities:
        recs.append("Address community vulnerabilities with enhanced protection")

    data = {
        "content_id": content_id,
        "consent_obtained": consent,
        "community_impact": impact,
        "vulnerability_assessment": vulnerabilities,
        "protection_measures": measures,
    }
    return build_result(
        "community_consent",
        validation.is_valid and consent and impact >= 0,
        data, validation,
        empowerment_impact=max(impact, 0.0),
        community_benefit=impact,
        sovereignty_compliance=consent,
        recommendations=recs,
    )


def assess_content_quality(
    content_id: str,
    content: Mapping[str, Any],
    creator_profile: Optional[Mapping[str, Any]] = None,
    community_context: Optional[Mapping[str, Any]] = None,
    policy: Optional[LiberationPolicy] = None,
) -> BusinessLogicOperationResult:
    """
    Runs the three content checks and folds them into one score:
    mean of liberation alignment, empowerment potential and community value.
    """
    p = policy or DEFAULT_POLICY
    ao = validate_anti_oppression(content_id, content, community_context, p)
    au = verify_cultural_authenticity(content_id, content, creator_profile, community_context, p)
    co = validate_community_consent(content_id, content, community_context, (), p)

    alignment = (
        ao.data["liberation_alignment"] * 0.4
        + au.data["authenticity_score"] * 0.3
        + (1.0 if co.data["consent_obtained"] else 0.0) * 0.3
    )

    potential = 0.5
    if ao.data["is_valid"]:
        potential += 0.2
    potential += au.data["black_queer_representation"] * 0.2
    if au.data["community_voices"]:
        potential += 0.1
    potential = min(potential, 1.0)

    community_value = (ao.community_benefit + au.community_benefit + co.community_benefit) / 3
    overall = (alignment + potential + community_value) / 3

    validation = validate(
        LiberationValues(
            creator_sovereignty=CONTENT_CREATOR_SOVEREIGNTY,
            anti_oppression_validation=ao.success,
            black_queer_empowerment=potential,
            community_protection=clamp(community_value),
            cultural_authenticity=au.data["authenticity_score"],
        ),
        ValidationMode.STRICT, CONTENT_WEIGHTS, p,
    )

    recs: List[str] = []
    if not ao.success:
        recs.append("Priority: Address anti-oppression validation failures")
    if not au.success:
        recs.append("Priority: Improve cultural authenticity and representation")
    if not co.success:
        recs.append("Priority: Secure proper community consent and protection")
    if alignment < 0.8:
        recs.append("Strengthen overall liberation alignment in content")
    if potential < 0.7:
        recs.append("Increase empowerment potential through community-centered content")

    data = {
        "content_id": content_id,
        "overall_score": overall,
        "liberation_alignment": alignment,
        "empowerment_potential": potential,
        "community_value": community_value,
        "components": {
            "content_validation": ao.success,
            "cultural_authenticity": au.success,
            "community_consent": co.success,
        },
    }
    return build_result(
        "content_quality",
        validation.is_valid and overall >= MIN_QUALITY_SCORE,
        data, validation,
        empowerment_impact=potential,
        community_benefit=community_value,
        sovereignty_compliance=not au.data["cultural_appropriation"],
        recommendations=recs,
    )
