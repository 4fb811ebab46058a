# liberation_engine/journey.py
# One conversational turn through the journey pipeline.
#   history read -> classify -> atomic append -> advisory readiness

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, Mapping, Optional

from .history_store import HistoryStore, InMemoryHistoryStore
from .policy import DEFAULT_POLICY, LiberationPolicy
from .progression import assess_next_stage_readiness, find_rule, next_stage
from .stage_classifier import detect_location, detect_stage
from .types import (
    CommunityConnection,
    EmotionalState,
    JourneyContext,
    JourneyStage,
    ResourcePreference,
    UrgencyLevel,
    stages_to_values,
)

log = logging.getLogger(__name__)

JOURNEY_VERSION = "journey-v1.0"

_default_store: Optional[HistoryStore] = None
_default_store_lock = threading.Lock()


def default_store() -> HistoryStore:
    """Process-wide store, created once even when first called from many threads."""
    global _default_store
    with _default_store_lock:
        if _default_store is None:
            _default_store = InMemoryHistoryStore()
        return _default_store


def observe_turn(
    user_id: str,
    text: Any,
    profile: Optional[Mapping[str, Any]] = None,
    store: Optional[HistoryStore] = None,
    policy: Optional[LiberationPolicy] = None,
) -> Dict[str, Any]:
    """
    Classify a message against the user's stored history and record the result.
    `ready_for_next_stage` is advisory; only process_journey_progression
    can permit a transition.
    """
    p = policy or DEFAULT_POLICY
    s = store or default_store()
    prior = s.get(user_id)
    context = detect_stage(text, prior, profile)
    history = s.append_bounded(user_id, context.stage, p.history_cap)
    ready = assess_next_stage_readiness(history, context)

    suggested = next_stage(context.stage) if ready else None
    rule = find_rule(context.stage, suggested) if suggested else None
    log.debug("journey turn user=%s stage=%s ready=%s", user_id, context.stage.value, ready)

    return {
        "version": JOURNEY_VERSION,
        "user_id": user_id,
        "context": context.to_dict(),
        "history": stages_to_values(history),
        "ready_for_next_stage": ready,
        "suggested_next_stage": suggested.value if suggested else None,
        "next_stage_requirements": list(rule.empowerment_requirements) if rule else [],
        "community_validation_required": rule.community_validation if rule else False,
    }


def emergency_context(profile: Optional[Mapping[str, Any]] = None) -> JourneyContext:
    """Context used when a caller must skip classification and escalate."""
    location = profile.get("location") if isinstance(profile, Mapping) else None
    return JourneyContext(
        stage=JourneyStage.CRISIS,
        emotional_state=EmotionalState.CRISIS,
        urgency_level=UrgencyLevel.EMERGENCY,
        location=detect_location("", location),
        community_connection=CommunityConnection.ISOLATED,
        first_time=True,
        returning_user=False,
        resource_access_preference=ResourcePreference.PHONE,
    )
