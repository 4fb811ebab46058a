# liberation_engine/types.py
# Records passed between the engine's components.
# Immutable where the engine produces them; coercing where callers supply them.

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

_TRUTHY = ("1", "true", "yes", "on")


def coerce_unit(value: Any) -> Optional[float]:
    """
    Coerce a caller-supplied score to a float in [0, 1].
    Returns None for anything missing or malformed, which the
    validator treats as failing its threshold.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        num = float(value)
    elif isinstance(value, str):
        try:
            num = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isnan(num) or math.isinf(num):
        return None
    if num < 0.0 or num > 1.0:
        return None
    return num


def coerce_flag(value: Any) -> bool:
    """Only an explicit true counts as true."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY
    return False


def coerce_items(value: Any) -> Tuple[Any, ...]:
    """Caller-supplied list field. Anything but a list, tuple or set is empty."""
    if isinstance(value, (list, tuple, set, frozenset)):
        return tuple(value)
    return ()


def _pick(data: Mapping[str, Any], *keys: str) -> Any:
    for k in keys:
        if k in data:
            return data[k]
    return None


# ═══════════════════════════════════════════════════════════
# LIBERATION VALUES
# ═══════════════════════════════════════════════════════════

@dataclass(frozen=True)
class LiberationValues:
    creator_sovereignty: Optional[float] = None
    anti_oppression_validation: bool = False
    black_queer_empowerment: Optional[float] = None
    community_protection: Optional[float] = None
    cultural_authenticity: Optional[float] = None

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "LiberationValues":
        """Accepts camelCase or snake_case keys. Never raises."""
        if isinstance(data, LiberationValues):
            return data
        if not isinstance(data, Mapping):
            return cls()
        return cls(
            creator_sovereignty=coerce_unit(_pick(data, "creator_sovereignty", "creatorSovereignty")),
            anti_oppression_validation=coerce_flag(
                _pick(data, "anti_oppression_validation", "antiOppressionValidation")
            ),
            black_queer_empowerment=coerce_unit(
                _pick(data, "black_queer_empowerment", "blackQueerEmpowerment", "empowerment")
            ),
            community_protection=coerce_unit(_pick(data, "community_protection", "communityProtection")),
            cultural_authenticity=coerce_unit(_pick(data, "cultural_authenticity", "culturalAuthenticity")),
        )

    @classmethod
    def of(
        cls,
        creator_sovereignty: Any,
        anti_oppression_validation: Any,
        black_queer_empowerment: Any,
        community_protection: Any,
        cultural_authenticity: Any,
    ) -> "LiberationValues":
        return cls(
            creator_sovereignty=coerce_unit(creator_sovereignty),
            anti_oppression_validation=coerce_flag(anti_oppression_validation),
            black_queer_empowerment=coerce_unit(black_queer_empowerment),
            community_protection=coerce_unit(community_protection),
            cultural_authenticity=coerce_unit(cultural_authenticity),
        )

    def number(self, name: str) -> float:
        """Field value for arithmetic helpers; missing counts as zero."""
        val = getattr(self, name)
        return float(val) if val is not None else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "creator_sovereignty": self.creator_sovereignty,
            "anti_oppression_validation": self.anti_oppression_validation,
            "black_queer_empowerment": self.black_queer_empowerment,
            "community_protection": self.community_protection,
            "cultural_authenticity": self.cultural_authenticity,
        }


# ═══════════════════════════════════════════════════════════
# VIOLATIONS
# ═══════════════════════════════════════════════════════════

class ViolationType(str, Enum):
    CREATOR_SOVEREIGNTY = "creator_sovereignty"
    ANTI_OPPRESSION = "anti_oppression"
    EMPOWERMENT = "empowerment"
    PROTECTION = "protection"
    AUTHENTICITY = "authenticity"


class Severity(str, Enum):
    CRITICAL = "critical"
    MAJOR = "major"
    MINOR = "minor"


@dataclass(frozen=True)
class Violation:
    type: ViolationType
    severity: Severity
    description: str
    remedy: str

    @property
    def is_critical(self) -> bool:
        return self.severity is Severity.CRITICAL

    def to_dict(self) -> Dict[str, str]:
        return {
            "type": self.type.value,
            "severity": self.severity.value,
            "description": self.description,
            "remedy": self.remedy,
        }


@dataclass(frozen=True)
class LiberationValidationResult:
    is_valid: bool
    violations: Tuple[Violation, ...]
    empowerment_score: float
    recommendations: Tuple[str, ...]
    mode: str = "strict"

    @property
    def critical_violations(self) -> List[Violation]:
        return [v for v in self.violations if v.is_critical]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "mode": self.mode,
            "violations": [v.to_dict() for v in self.violations],
            "empowerment_score": round(self.empowerment_score, 6),
            "recommendations": list(self.recommendations),
        }


# ═══════════════════════════════════════════════════════════
# JOURNEY
# ═══════════════════════════════════════════════════════════

class JourneyStage(str, Enum):
    CRISIS = "crisis"
    STABILIZATION = "stabilization"
    GROWTH = "growth"
    COMMUNITY_HEALING = "community_healing"
    ADVOCACY = "advocacy"

    @property
    def order(self) -> int:
        return STAGE_ORDER.index(self)

    @classmethod
    def parse(cls, raw: Any) -> Optional["JourneyStage"]:
        if isinstance(raw, JourneyStage):
            return raw
        if not isinstance(raw, str):
            return None
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return None


# Canonical progression axis, most support first.
STAGE_ORDER: Tuple[JourneyStage, ...] = (
    JourneyStage.CRISIS,
    JourneyStage.STABILIZATION,
    JourneyStage.GROWTH,
    JourneyStage.COMMUNITY_HEALING,
    JourneyStage.ADVOCACY,
)


def parse_history(raw: Any) -> List[JourneyStage]:
    """Drop anything that is not a known stage; keep order."""
    if not isinstance(raw, (list, tuple)):
        return []
    stages = []
    for item in raw:
        stage = JourneyStage.parse(item)
        if stage is not None:
            stages.append(stage)
    return stages


class EmotionalState(str, Enum):
    CRISIS = "crisis"
    STRESSED = "stressed"
    EXCITED = "excited"
    JOYFUL = "joyful"
    UNCERTAIN = "uncertain"
    CALM = "calm"


class UrgencyLevel(str, Enum):
    EMERGENCY = "emergency"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class CommunityConnection(str, Enum):
    ISOLATED = "isolated"
    EXPLORING = "exploring"
    CONNECTED = "connected"
    NETWORKED = "networked"
    ORGANIZING = "organizing"


class ResourcePreference(str, Enum):
    PHONE = "phone"
    ONLINE = "online"
    IN_PERSON = "in_person"
    FLEXIBLE = "flexible"


def _parse_enum(enum_cls, raw: Any, default):
    if isinstance(raw, enum_cls):
        return raw
    if isinstance(raw, str):
        try:
            return enum_cls(raw.strip().lower())
        except ValueError:
            return default
    return default


@dataclass(frozen=True)
class JourneyContext:
    stage: JourneyStage = JourneyStage.CRISIS
    emotional_state: EmotionalState = EmotionalState.CALM
    urgency_level: UrgencyLevel = UrgencyLevel.LOW
    location: str = "unknown"
    community_connection: CommunityConnection = CommunityConnection.EXPLORING
    first_time: bool = True
    returning_user: bool = False
    resource_access_preference: ResourcePreference = ResourcePreference.FLEXIBLE
    previous_stages: Tuple[JourneyStage, ...] = ()

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "JourneyContext":
        """Caller-built context. Unknown values fall back to the defaults."""
        if isinstance(data, JourneyContext):
            return data
        if not isinstance(data, Mapping):
            return cls()
        history = tuple(parse_history(_pick(data, "previous_stages", "previousStages")))
        stage = JourneyStage.parse(_pick(data, "stage", "current_stage", "currentStage"))
        location = _pick(data, "location")
        return cls(
            stage=stage or JourneyStage.CRISIS,
            emotional_state=_parse_enum(
                EmotionalState, _pick(data, "emotional_state", "emotionalState"), EmotionalState.CALM
            ),
            urgency_level=_parse_enum(
                UrgencyLevel, _pick(data, "urgency_level", "urgencyLevel"), UrgencyLevel.LOW
            ),
            location=location.strip().lower() if isinstance(location, str) and location.strip() else "unknown",
            community_connection=_parse_enum(
                CommunityConnection,
                _pick(data, "community_connection", "communityConnection"),
                CommunityConnection.EXPLORING,
            ),
            first_time=not history,
            returning_user=bool(history),
            resource_access_preference=_parse_enum(
                ResourcePreference,
                _pick(data, "resource_access_preference", "resourceAccessPreference"),
                ResourcePreference.FLEXIBLE,
            ),
            previous_stages=history,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stage": self.stage.value,
            "emotional_state": self.emotional_state.value,
            "urgency_level": self.urgency_level.value,
            "location": self.location,
            "community_connection": self.community_connection.value,
            "first_time": self.first_time,
            "returning_user": self.returning_user,
            "resource_access_preference": self.resource_access_preference.value,
            "previous_stages": [s.value for s in self.previous_stages],
        }


@dataclass(frozen=True)
class ProgressionRule:
    from_stage: JourneyStage
    to_stage: JourneyStage
    liberation_criteria: LiberationValues
    empowerment_requirements: Tuple[str, ...]
    community_validation: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "from_stage": self.from_stage.value,
            "to_stage": self.to_stage.value,
            "liberation_criteria": self.liberation_criteria.to_dict(),
            "empowerment_requirements": list(self.empowerment_requirements),
            "community_validation": self.community_validation,
        }


# ═══════════════════════════════════════════════════════════
# SCANNING
# ═══════════════════════════════════════════════════════════

class IndicatorSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass(frozen=True)
class OppressionIndicator:
    type: str
    severity: IndicatorSeverity
    description: str
    location: str
    remedy: str
    pattern: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "type": self.type,
            "severity": self.severity.value,
            "description": self.description,
            "location": self.location,
            "remedy": self.remedy,
            "pattern": self.pattern,
        }


# ═══════════════════════════════════════════════════════════
# ENVELOPE
# ═══════════════════════════════════════════════════════════

@dataclass
class BusinessLogicOperationResult:
    success: bool
    data: Dict[str, Any]
    liberation_validation: LiberationValidationResult
    empowerment_impact: float
    community_benefit: float
    sovereignty_compliance: bool
    recommendations: List[str] = field(default_factory=list)
    violations: List[Violation] = field(default_factory=list)
    operation: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "operation": self.operation,
            "success": self.success,
            "data": self.data,
            "liberation_validation": self.liberation_validation.to_dict(),
            "empowerment_impact": round(self.empowerment_impact, 6),
            "community_benefit": round(self.community_benefit, 6),
            "sovereignty_compliance": self.sovereignty_compliance,
            "recommendations": list(self.recommendations),
            "violations": [v.to_dict() for v in self.violations],
        }


def stages_to_values(stages: Sequence[JourneyStage]) -> List[str]:
    return [s.value for s in stages]
