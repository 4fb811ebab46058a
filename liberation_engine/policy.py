# liberation_engine/policy.py
# Liberation policy surface.
# Every threshold and weight the engine applies lives here.
# Algorithms read policy; they never hard-code it.
#
# Conflict resolution for env overrides: unparseable values fall back
# to the published default. Nothing here is negotiated at runtime.

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Optional

log = logging.getLogger(__name__)

POLICY_VERSION = "liberation-policy-v1.0"


class ValidationMode(str, Enum):
    """How a validation result decides isValid."""
    STRICT = "strict"                # any violation invalidates
    CRITICAL_ONLY = "critical_only"  # only critical violations invalidate

    @classmethod
    def parse(cls, raw: Optional[str], default: "ValidationMode") -> "ValidationMode":
        if not raw:
            return default
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return default


# ═══════════════════════════════════════════════════════════
# WEIGHT PROFILES
# ═══════════════════════════════════════════════════════════

@dataclass(frozen=True)
class WeightProfile:
    """Per-dimension weights applied to passing dimensions."""
    name: str
    creator_sovereignty: float
    anti_oppression: float
    empowerment: float
    protection: float
    authenticity: float

    def total(self) -> float:
        return (
            self.creator_sovereignty + self.anti_oppression + self.empowerment
            + self.protection + self.authenticity
        )

    def to_dict(self) -> Dict[str, float]:
        return {
            "creator_sovereignty": self.creator_sovereignty,
            "anti_oppression": self.anti_oppression,
            "empowerment": self.empowerment,
            "protection": self.protection,
            "authenticity": self.authenticity,
        }


# Community, creator and progression operations.
DEFAULT_WEIGHTS = WeightProfile(
    name="default",
    creator_sovereignty=0.25,
    anti_oppression=0.25,
    empowerment=0.20,
    protection=0.15,
    authenticity=0.15,
)

# Content operations: anti-oppression and empowerment dominate.
CONTENT_WEIGHTS = WeightProfile(
    name="content",
    creator_sovereignty=0.20,
    anti_oppression=0.30,
    empowerment=0.30,
    protection=0.15,
    authenticity=0.05,
)

WEIGHT_PROFILES: Dict[str, WeightProfile] = {
    DEFAULT_WEIGHTS.name: DEFAULT_WEIGHTS,
    CONTENT_WEIGHTS.name: CONTENT_WEIGHTS,
}


def get_weight_profile(name: Optional[str]) -> WeightProfile:
    if not name:
        return DEFAULT_WEIGHTS
    return WEIGHT_PROFILES.get(str(name).strip().lower(), DEFAULT_WEIGHTS)


# ═══════════════════════════════════════════════════════════
# THRESHOLDS
# ═══════════════════════════════════════════════════════════

@dataclass(frozen=True)
class LiberationPolicy:
    min_creator_sovereignty: float = 0.75
    min_empowerment: float = 0.60
    min_community_protection: float = 0.70
    min_cultural_authenticity: float = 0.65
    # Empowerment below this floor escalates from major to critical.
    critical_empowerment_floor: float = 0.30

    # Readiness bars. Kept separate on purpose: a transition's own
    # criteria must clear a higher bar than the user asking to take it.
    rule_criteria_min_score: float = 0.70
    user_values_min_score: float = 0.60

    history_cap: int = 20
    weights: WeightProfile = field(default=DEFAULT_WEIGHTS)

    @property
    def max_platform_share(self) -> float:
        return round(1.0 - self.min_creator_sovereignty, 10)

    def to_dict(self) -> Dict[str, object]:
        return {
            "version": POLICY_VERSION,
            "min_creator_sovereignty": self.min_creator_sovereignty,
            "min_empowerment": self.min_empowerment,
            "min_community_protection": self.min_community_protection,
            "min_cultural_authenticity": self.min_cultural_authenticity,
            "critical_empowerment_floor": self.critical_empowerment_floor,
            "rule_criteria_min_score": self.rule_criteria_min_score,
            "user_values_min_score": self.user_values_min_score,
            "history_cap": self.history_cap,
            "weights": {name: p.to_dict() for name, p in WEIGHT_PROFILES.items()},
        }


DEFAULT_POLICY = LiberationPolicy()

# env name -> policy field
_ENV_OVERRIDES = {
    "LIBERATION_MIN_CREATOR_SOVEREIGNTY": "min_creator_sovereignty",
    "LIBERATION_MIN_EMPOWERMENT": "min_empowerment",
    "LIBERATION_MIN_COMMUNITY_PROTECTION": "min_community_protection",
    "LIBERATION_MIN_CULTURAL_AUTHENTICITY": "min_cultural_authenticity",
    "LIBERATION_CRITICAL_EMPOWERMENT_FLOOR": "critical_empowerment_floor",
    "LIBERATION_RULE_CRITERIA_MIN_SCORE": "rule_criteria_min_score",
    "LIBERATION_USER_VALUES_MIN_SCORE": "user_values_min_score",
}


def _env_float(name: str) -> Optional[float]:
    val = os.getenv(name)
    if val is None or not val.strip():
        return None
    try:
        num = float(val)
    except ValueError:
        log.warning("ignoring non-numeric policy override %s=%r", name, val)
        return None
    if not 0.0 <= num <= 1.0:
        log.warning("ignoring out-of-range policy override %s=%r", name, val)
        return None
    return num


def load_policy() -> LiberationPolicy:
    """
    Published policy plus optional environment overrides.
    Overrides must be numbers in [0, 1]; anything else is ignored.
    """
    changes: Dict[str, object] = {}
    for env_name, attr in _ENV_OVERRIDES.items():
        num = _env_float(env_name)
        if num is not None:
            changes[attr] = num

    cap = os.getenv("JOURNEY_HISTORY_CAP")
    if cap:
        try:
            if int(cap) > 0:
                changes["history_cap"] = int(cap)
        except ValueError:
            log.warning("ignoring non-integer JOURNEY_HISTORY_CAP=%r", cap)

    if not changes:
        return DEFAULT_POLICY
    log.info("policy overrides applied: %s", sorted(changes))
    return replace(DEFAULT_POLICY, **changes)
