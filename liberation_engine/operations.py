# liberation_engine/operations.py
# Operation registry.
# Operation name + plain payload dict -> BusinessLogicOperationResult.
# Unknown names raise; transitions with no rule raise (from progression).

from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from .aggregator import BatchBusinessLogicResult, aggregate_batch
from .community_logic import (
    process_journey_progression,
    validate_community_interaction,
    validate_democratic_participation,
)
from .content_logic import (
    assess_content_quality,
    validate_anti_oppression,
    validate_community_consent,
    verify_cultural_authenticity,
)
from .creator_logic import (
    calculate_creator_sovereignty,
    enforce_creator_attribution_rights,
    track_economic_empowerment,
)
from .errors import UnknownOperationError
from .policy import LiberationPolicy
from .types import BusinessLogicOperationResult

Handler = Callable[[Mapping[str, Any], Optional[LiberationPolicy]], BusinessLogicOperationResult]


def _g(payload: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for k in keys:
        if k in payload and payload[k] is not None:
            return payload[k]
    return default


def _values(payload: Mapping[str, Any]) -> Any:
    return _g(payload, "values", "liberation_values", "liberationValues", default={})


def _community_interaction(payload, policy):
    return validate_community_interaction(
        _g(payload, "member_id", "memberId", default=""),
        _g(payload, "community_id", "communityId", default="default"),
        _g(payload, "interaction_type", "interactionType", default="general"),
        _g(payload, "context", "journey_context", "journeyContext", default={}),
        _values(payload),
        policy,
    )


def _journey_progression(payload, policy):
    return process_journey_progression(
        _g(payload, "user_id", "userId", default=""),
        _g(payload, "current_stage", "currentStage"),
        _g(payload, "target_stage", "targetStage"),
        _g(payload, "context", "journey_context", "journeyContext", default={}),
        _values(payload),
        community_validated=_g(payload, "community_validated", "communityValidated", default=False) is True,
        completed_requirements=_g(payload, "completed_requirements", "completedRequirements", default=()),
        policy=policy,
    )


def _democratic_participation(payload, policy):
    return validate_democratic_participation(
        _g(payload, "participant_id", "participantId", default=""),
        _g(payload, "participation_type", "participationType", default="vote"),
        _g(payload, "community_context", "communityContext", default={}),
        _values(payload),
        policy,
    )


def _creator_sovereignty(payload, policy):
    return calculate_creator_sovereignty(
        _g(payload, "total_revenue", "totalRevenue", default=0),
        _g(payload, "creator_id", "creatorId", default=""),
        _g(payload, "content_id", "contentId", default=""),
        _values(payload),
        policy,
    )


def _creator_attribution(payload, policy):
    return enforce_creator_attribution_rights(
        _g(payload, "creator_id", "creatorId", default=""),
        _g(payload, "content_id", "contentId", default=""),
        _g(payload, "modification_request", "modificationRequest", default={}),
        _values(payload),
        policy,
    )


def _economic_empowerment(payload, policy):
    return track_economic_empowerment(
        _g(payload, "creator_id", "creatorId", default=""),
        _g(payload, "total_earnings", "totalEarnings", default=0),
        _values(payload),
        policy,
    )


def _content(payload: Mapping[str, Any]) -> Mapping[str, Any]:
    content = _g(payload, "content", "content_data", "contentData")
    if isinstance(content, Mapping):
        return content
    return {"text": _g(payload, "text", default="")}


def _content_validation(payload, policy):
    return validate_anti_oppression(
        _g(payload, "content_id", "contentId", default=""),
        _content(payload),
        _g(payload, "context", "liberation_context", "liberationContext", default={}),
        policy,
    )


def _cultural_authenticity(payload, policy):
    return verify_cultural_authenticity(
        _g(payload, "content_id", "contentId", default=""),
        _content(payload),
        _g(payload, "creator_profile", "creatorProfile", default={}),
        _g(payload, "community_context", "communityContext", default={}),
        policy,
    )


def _community_consent(payload, policy):
    return validate_community_consent(
        _g(payload, "content_id", "contentId", default=""),
        _content(payload),
        _g(payload, "community", "community_data", "communityData", default={}),
        _g(payload, "potential_impacts", "potentialImpacts", default=()),
        policy,
    )


def _content_quality(payload, policy):
    return assess_content_quality(
        _g(payload, "content_id", "contentId", default=""),
        _content(payload),
        _g(payload, "creator_profile", "creatorProfile", default={}),
        _g(payload, "community_context", "communityContext", default={}),
        policy,
    )


OPERATIONS: Dict[str, Handler] = {
    "community_interaction": _community_interaction,
    "journey_progression": _journey_progression,
    "democratic_participation": _democratic_participation,
    "creator_sovereignty": _creator_sovereignty,
    "creator_attribution": _creator_attribution,
    "economic_empowerment": _economic_empowerment,
    "content_validation": _content_validation,
    "cultural_authenticity": _cultural_authenticity,
    "community_consent": _community_consent,
    "content_quality": _content_quality,
}


def dispatch(
    operation: Optional[str],
    payload: Optional[Mapping[str, Any]],
    policy: Optional[LiberationPolicy] = None,
) -> BusinessLogicOperationResult:
    name = operation.strip().lower() if isinstance(operation, str) else ""
    handler = OPERATIONS.get(name)
    if handler is None:
        raise UnknownOperationError(operation)
    return handler(payload if isinstance(payload, Mapping) else {}, policy)


def dispatch_batch(
    requests: Sequence[Mapping[str, Any]],
    policy: Optional[LiberationPolicy] = None,
) -> BatchBusinessLogicResult:
    """
    Each request is {"operation": ..., "payload": {...}}.
    Any error aborts the whole batch.
    """
    results: List[BusinessLogicOperationResult] = []
    for req in requests:
        req = req if isinstance(req, Mapping) else {}
        results.append(dispatch(req.get("operation"), req.get("payload") or {}, policy))
    return aggregate_batch(results)
