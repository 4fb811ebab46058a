# liberation_engine/stage_classifier.py
# Journey stage classifier.
# Free text + stage history -> JourneyContext.
# Deterministic. Pattern-based. Never raises.
#
# Stage score = sum of fixed increments for matched phrases
#             + continuity bonus if the stage equals the last history entry.
# Emergency keywords force crisis.
# Highest score wins; ties go to the earlier stage (more support, not less).

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .patterns import (
    CONNECTION_MARKERS,
    CONTINUITY_BONUS,
    EMERGENCY_OVERRIDE_KEYWORDS,
    EMERGENCY_URGENCY_WORDS,
    EMOTIONAL_MARKER_WEIGHT,
    EMOTIONAL_STATE_MARKERS,
    HIGH_URGENCY_WORDS,
    KEYWORD_WEIGHT,
    MEDIUM_URGENCY_WORDS,
    RESOURCE_MARKERS,
    RURAL_MARKERS,
    STAGE_EMOTIONAL_MARKERS,
    STAGE_KEYWORDS,
    STAGE_URGENCY_WORDS,
    UK_CITIES,
    URGENCY_WORD_WEIGHT,
    contains_any,
    matched,
)
from .types import (
    STAGE_ORDER,
    CommunityConnection,
    EmotionalState,
    JourneyContext,
    JourneyStage,
    ResourcePreference,
    UrgencyLevel,
    parse_history,
)

log = logging.getLogger(__name__)

CLASSIFIER_VERSION = "stage-classifier-v1.0"

UNKNOWN_LOCATION = "unknown"
RURAL_LOCATION = "rural"
OTHER_URBAN_LOCATION = "other_urban"


def _norm(text: Any) -> str:
    return text.lower().strip() if isinstance(text, str) else ""


def _profile_get(profile: Any, *keys: str) -> Any:
    if not isinstance(profile, Mapping):
        return None
    for k in keys:
        if k in profile:
            return profile[k]
    return None


# ═══════════════════════════════════════════════════════════
# STAGE SCORING
# ═══════════════════════════════════════════════════════════

def score_stages(text: str, history: Sequence[JourneyStage] = ()) -> Dict[str, Any]:
    """
    Per-stage scores with the phrases that produced them.
    `text` is expected lowercased.
    """
    last = history[-1] if history else None
    scores: Dict[JourneyStage, float] = {}
    hits: Dict[JourneyStage, List[str]] = {}

    for stage in STAGE_ORDER:
        kw = matched(text, STAGE_KEYWORDS.get(stage, ()))
        em = matched(text, STAGE_EMOTIONAL_MARKERS.get(stage, ()))
        ur = matched(text, STAGE_URGENCY_WORDS.get(stage, ()))
        score = (
            len(kw) * KEYWORD_WEIGHT
            + len(em) * EMOTIONAL_MARKER_WEIGHT
            + len(ur) * URGENCY_WORD_WEIGHT
        )
        if stage is last:
            score += CONTINUITY_BONUS
        scores[stage] = score
        hits[stage] = list(kw + em + ur)

    return {
        "scores": scores,
        "matched": hits,
        "emergency": matched(text, EMERGENCY_OVERRIDE_KEYWORDS),
        "continuity_stage": last,
    }


def pick_stage(scores: Mapping[JourneyStage, float]) -> JourneyStage:
    """Highest score; strict comparison keeps the earlier stage on ties."""
    best = STAGE_ORDER[0]
    best_score = scores.get(best, 0.0)
    for stage in STAGE_ORDER[1:]:
        s = scores.get(stage, 0.0)
        if s > best_score:
            best, best_score = stage, s
    return best


# ═══════════════════════════════════════════════════════════
# SUB-CLASSIFIERS
# ═══════════════════════════════════════════════════════════

def detect_emotional_state(text: Any) -> EmotionalState:
    t = _norm(text)
    for state, markers in EMOTIONAL_STATE_MARKERS:
        if contains_any(t, markers):
            return state
    return EmotionalState.CALM


def detect_urgency_level(text: Any, stage: Optional[JourneyStage] = None) -> UrgencyLevel:
    t = _norm(text)
    if contains_any(t, EMERGENCY_URGENCY_WORDS):
        return UrgencyLevel.EMERGENCY
    if not t:
        return UrgencyLevel.LOW
    if stage is JourneyStage.CRISIS:
        return UrgencyLevel.HIGH
    if contains_any(t, HIGH_URGENCY_WORDS):
        return UrgencyLevel.HIGH
    if contains_any(t, MEDIUM_URGENCY_WORDS):
        return UrgencyLevel.MEDIUM
    return UrgencyLevel.LOW


def _match_place(t: str) -> Optional[str]:
    for city in UK_CITIES:
        if city in t:
            return city
    if contains_any(t, RURAL_MARKERS):
        return RURAL_LOCATION
    return None


def detect_location(text: Any, location_hint: Any = None) -> str:
    """
    Profile hint first, then the message itself.
    A hint that names no known place is still somewhere urban.
    """
    hint = _norm(location_hint)
    if hint:
        return _match_place(hint) or OTHER_URBAN_LOCATION
    return _match_place(_norm(text)) or UNKNOWN_LOCATION


def detect_community_connection(text: Any) -> CommunityConnection:
    t = _norm(text)
    for tier, markers in CONNECTION_MARKERS:
        if contains_any(t, markers):
            return tier
    return CommunityConnection.EXPLORING


def detect_resource_preference(text: Any, preferred: Any = None) -> ResourcePreference:
    t = _norm(text)
    for pref, markers in RESOURCE_MARKERS:
        if contains_any(t, markers):
            return pref
    if isinstance(preferred, str):
        try:
            return ResourcePreference(preferred.strip().lower())
        except ValueError:
            pass
    return ResourcePreference.FLEXIBLE


# ═══════════════════════════════════════════════════════════
# ENTRY POINTS
# ═══════════════════════════════════════════════════════════

def _classify(text: Any, history: Any) -> Tuple[str, List[JourneyStage], Dict[str, Any], JourneyStage]:
    t = _norm(text)
    hist = parse_history(history)
    detail = score_stages(t, hist)
    if detail["emergency"]:
        stage = JourneyStage.CRISIS
    else:
        stage = pick_stage(detail["scores"])
    return t, hist, detail, stage


def detect_stage(
    text: Any,
    history: Any = (),
    profile: Optional[Mapping[str, Any]] = None,
) -> JourneyContext:
    """
    Classify one conversational turn.
    `history` is the user's stage history, oldest first.
    """
    t, hist, detail, stage = _classify(text, history)
    log.debug("stage detected=%s emergency=%s history_len=%d", stage.value, bool(detail["emergency"]), len(hist))

    return JourneyContext(
        stage=stage,
        emotional_state=detect_emotional_state(t),
        urgency_level=detect_urgency_level(t, stage),
        location=detect_location(t, _profile_get(profile, "location")),
        community_connection=detect_community_connection(t),
        first_time=len(hist) == 0,
        returning_user=len(hist) > 0,
        resource_access_preference=detect_resource_preference(
            t, _profile_get(profile, "resource_access_preference", "resourceAccessPreference")
        ),
        previous_stages=tuple(hist),
    )


def explain_stage(text: Any, history: Any = ()) -> Dict[str, Any]:
    """Scores and matched phrases behind a classification."""
    _, hist, detail, stage = _classify(text, history)
    cont = detail["continuity_stage"]
    return {
        "version": CLASSIFIER_VERSION,
        "stage": stage.value,
        "emergency_override": list(detail["emergency"]),
        "continuity_stage": cont.value if cont else None,
        "scores": {s.value: round(v, 4) for s, v in detail["scores"].items()},
        "matched": {s.value: m for s, m in detail["matched"].items() if m},
    }
