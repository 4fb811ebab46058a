from .policy import (
    CONTENT_WEIGHTS,
    DEFAULT_POLICY,
    DEFAULT_WEIGHTS,
    LiberationPolicy,
    ValidationMode,
    WeightProfile,
    load_policy,
)
from .types import (
    BusinessLogicOperationResult,
    JourneyContext,
    JourneyStage,
    LiberationValidationResult,
    LiberationValues,
    OppressionIndicator,
    ProgressionRule,
    Violation,
)
from .errors import LiberationEngineError, UnknownOperationError, UnknownTransitionError
from .feature_flags import get_flags
from .trace import TraceLogger, new_trace_context

# Core computations
from .values_validator import validate
from .oppression_scanner import scan, scan_report
from .stage_classifier import detect_stage, explain_stage
from .progression import (
    PROGRESSION_RULES,
    assess_next_stage_readiness,
    assess_readiness,
    find_rule,
    readiness_gates,
    require_rule,
)
from .history_store import InMemoryHistoryStore, RedisHistoryStore, build_history_store
from .aggregator import aggregate_batch, build_result

# Business logic
from .journey import emergency_context, observe_turn
from .operations import OPERATIONS, dispatch, dispatch_batch
