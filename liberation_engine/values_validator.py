# liberation_engine/values_validator.py
# Liberation values validator.
# Five dimensions, five thresholds, one score.
# Deterministic. Never raises. Missing or malformed input fails closed.
#
# Order of evaluation is fixed:
#   1. creator sovereignty   (critical)
#   2. anti-oppression       (critical)
#   3. empowerment           (critical below the floor, else major)
#   4. community protection  (major)
#   5. cultural authenticity (minor)
#
# A passing dimension earns weight x value. A failing one earns nothing.

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional, Sequence, Union

from .patterns import VIOLATION_GUIDANCE, VIOLATION_REMEDIES
from .policy import DEFAULT_POLICY, DEFAULT_WEIGHTS, LiberationPolicy, ValidationMode, WeightProfile
from .types import (
    LiberationValidationResult,
    LiberationValues,
    Severity,
    Violation,
    ViolationType,
)

log = logging.getLogger(__name__)

VALIDATOR_VERSION = "values-validator-v1.0"

_NUMERIC_FIELDS = (
    "creator_sovereignty",
    "black_queer_empowerment",
    "community_protection",
    "cultural_authenticity",
)


def _pct(threshold: float) -> str:
    return f"{threshold * 100:.0f}%"


def _shown(value: Optional[float]) -> str:
    return "missing or malformed" if value is None else f"{value:.2f}"


def _passes(value: Optional[float], threshold: float) -> bool:
    return value is not None and value >= threshold


def _violation(vtype: ViolationType, severity: Severity, description: str) -> Violation:
    return Violation(
        type=vtype,
        severity=severity,
        description=description,
        remedy=VIOLATION_REMEDIES[vtype],
    )


def recommendations_for(violations: Sequence[Violation]) -> List[str]:
    """
    One recommendation per violation category, first occurrence wins.
    Pairs the category guidance with that violation's own remedy.
    """
    seen = set()
    out: List[str] = []
    for v in violations:
        if v.type in seen:
            continue
        seen.add(v.type)
        out.append(f"{VIOLATION_GUIDANCE[v.type]}: {v.remedy}")
    return out


def decide_validity(violations: Sequence[Violation], mode: ValidationMode) -> bool:
    if mode is ValidationMode.CRITICAL_ONLY:
        return not any(v.is_critical for v in violations)
    return len(violations) == 0


def validate(
    values: Union[LiberationValues, Mapping[str, Any], None],
    mode: ValidationMode = ValidationMode.STRICT,
    weights: WeightProfile = DEFAULT_WEIGHTS,
    policy: Optional[LiberationPolicy] = None,
) -> LiberationValidationResult:
    """
    Score a liberation values record against the policy thresholds.

    Accepts a LiberationValues or a plain mapping (camelCase or snake_case).
    `mode` decides whether any violation or only a critical one invalidates.
    """
    p = policy or DEFAULT_POLICY
    vals = LiberationValues.from_mapping(values)
    violations: List[Violation] = []
    score = 0.0

    missing = [
        name for name in _NUMERIC_FIELDS if getattr(vals, name) is None
    ]
    if missing:
        log.warning("failing closed on missing or malformed fields: %s", missing)

    # 1. Creator sovereignty
    cs = vals.creator_sovereignty
    if _passes(cs, p.min_creator_sovereignty):
        score += weights.creator_sovereignty * cs
    else:
        violations.append(_violation(
            ViolationType.CREATOR_SOVEREIGNTY,
            Severity.CRITICAL,
            f"Creator sovereignty {_shown(cs)} below required {_pct(p.min_creator_sovereignty)} minimum",
        ))

    # 2. Anti-oppression
    if vals.anti_oppression_validation:
        score += weights.anti_oppression
    else:
        violations.append(_violation(
            ViolationType.ANTI_OPPRESSION,
            Severity.CRITICAL,
            "Anti-oppression validation failed or not enabled",
        ))

    # 3. Empowerment
    em = vals.black_queer_empowerment
    if _passes(em, p.min_empowerment):
        score += weights.empowerment * em
    else:
        below_floor = em is None or em < p.critical_empowerment_floor
        violations.append(_violation(
            ViolationType.EMPOWERMENT,
            Severity.CRITICAL if below_floor else Severity.MAJOR,
            f"Black queer empowerment score {_shown(em)} below required {_pct(p.min_empowerment)} minimum",
        ))

    # 4. Community protection
    pr = vals.community_protection
    if _passes(pr, p.min_community_protection):
        score += weights.protection * pr
    else:
        violations.append(_violation(
            ViolationType.PROTECTION,
            Severity.MAJOR,
            f"Community protection {_shown(pr)} below required {_pct(p.min_community_protection)} minimum",
        ))

    # 5. Cultural authenticity
    au = vals.cultural_authenticity
    if _passes(au, p.min_cultural_authenticity):
        score += weights.authenticity * au
    else:
        violations.append(_violation(
            ViolationType.AUTHENTICITY,
            Severity.MINOR,
            f"Cultural authenticity {_shown(au)} below required {_pct(p.min_cultural_authenticity)} minimum",
        ))

    is_valid = decide_validity(violations, mode)
    log.debug(
        "values validated mode=%s profile=%s valid=%s violations=%s score=%.4f",
        mode.value, weights.name, is_valid, [v.type.value for v in violations], score,
    )

    return LiberationValidationResult(
        is_valid=is_valid,
        violations=tuple(violations),
        empowerment_score=score,
        recommendations=tuple(recommendations_for(violations)),
        mode=mode.value,
    )
