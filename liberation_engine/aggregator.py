# liberation_engine/aggregator.py
# Result envelope + batch aggregation.
#
# Envelope recommendations: operation messages first, then the
# validator's own, in that order, no dedup.

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from .types import BusinessLogicOperationResult, LiberationValidationResult, Violation

AGGREGATOR_VERSION = "aggregator-v1.0"

# Systemic recommendation triggers (shares of the batch).
FAILURE_SHARE_TRIGGER = 0.2
LOW_EMPOWERMENT_SHARE_TRIGGER = 0.3
SOVEREIGNTY_GAP_SHARE_TRIGGER = 0.1
LOW_EMPOWERMENT_SCORE = 0.6

MONITORING_NOTE = "Continue monitoring liberation metrics and community impact"


def clamp(x: float, lo: float = 0.0, hi: float = 1.0) -> float:
    return max(lo, min(hi, x))


def build_result(
    operation: str,
    success: bool,
    data: Dict[str, Any],
    validation: LiberationValidationResult,
    empowerment_impact: float,
    community_benefit: float,
    sovereignty_compliance: bool,
    recommendations: Sequence[str] = (),
    violations: Optional[Sequence[Violation]] = None,
) -> BusinessLogicOperationResult:
    """
    `success` is the operation's own verdict; callers may make it
    stricter than validation.is_valid.
    `violations` defaults to the validator's.
    """
    recs = list(recommendations) + list(validation.recommendations)
    viols = list(validation.violations) if violations is None else list(violations)
    return BusinessLogicOperationResult(
        success=bool(success),
        data=data,
        liberation_validation=validation,
        empowerment_impact=float(empowerment_impact),
        community_benefit=float(community_benefit),
        sovereignty_compliance=bool(sovereignty_compliance),
        recommendations=recs,
        violations=viols,
        operation=operation,
    )


@dataclass
class BatchBusinessLogicResult:
    results: List[BusinessLogicOperationResult]
    total: int
    succeeded: int
    failed: int
    average_empowerment_score: float
    average_empowerment_impact: float
    average_community_benefit: float
    systemic_recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": AGGREGATOR_VERSION,
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "average_empowerment_score": round(self.average_empowerment_score, 6),
            "average_empowerment_impact": round(self.average_empowerment_impact, 6),
            "average_community_benefit": round(self.average_community_benefit, 6),
            "systemic_recommendations": list(self.systemic_recommendations),
            "results": [r.to_dict() for r in self.results],
        }


def systemic_recommendations(results: Sequence[BusinessLogicOperationResult]) -> List[str]:
    n = len(results)
    recs: List[str] = []
    if n:
        failed = sum(1 for r in results if not r.success)
        low = sum(
            1 for r in results
            if r.liberation_validation.empowerment_score < LOW_EMPOWERMENT_SCORE
        )
        gaps = sum(1 for r in results if not r.sovereignty_compliance)
        if failed / n > FAILURE_SHARE_TRIGGER:
            recs.append("Review liberation values alignment across operations")
        if low / n > LOW_EMPOWERMENT_SHARE_TRIGGER:
            recs.append("Focus on improving Black queer empowerment across platform")
        if gaps / n > SOVEREIGNTY_GAP_SHARE_TRIGGER:
            recs.append("Address creator sovereignty compliance issues systematically")
    recs.append(MONITORING_NOTE)
    return recs


def aggregate_batch(results: Sequence[BusinessLogicOperationResult]) -> BatchBusinessLogicResult:
    """Averages over every supplied result, failed ones included."""
    items = list(results)
    n = len(items)

    def _avg(values: List[float]) -> float:
        return sum(values) / n if n else 0.0

    return BatchBusinessLogicResult(
        results=items,
        total=n,
        succeeded=sum(1 for r in items if r.success),
        failed=sum(1 for r in items if not r.success),
        average_empowerment_score=_avg([r.liberation_validation.empowerment_score for r in items]),
        average_empowerment_impact=_avg([r.empowerment_impact for r in items]),
        average_community_benefit=_avg([r.community_benefit for r in items]),
        systemic_recommendations=systemic_recommendations(items),
    )
