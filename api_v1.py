"""
Liberation Engine — Public API v1
POST /api/v1/values/validate     — five-dimension values validation
POST /api/v1/content/scan        — oppression pattern scan
POST /api/v1/journey/detect      — stage classification (stateless)
POST /api/v1/journey/observe     — stage classification + history append
POST /api/v1/journey/readiness   — rule-gated transition check
POST /api/v1/operations/<name>   — one business logic operation
POST /api/v1/operations/batch    — many operations + aggregate
GET  /api/v1/policy              — published thresholds and weights
"""
import time

from flask import Blueprint, current_app, jsonify, request

from liberation_engine import (
    DEFAULT_POLICY,
    OPERATIONS,
    TraceLogger,
    UnknownOperationError,
    UnknownTransitionError,
    ValidationMode,
    detect_stage,
    dispatch,
    dispatch_batch,
    emergency_context,
    explain_stage,
    get_flags,
    new_trace_context,
    observe_turn,
    scan_report,
    validate,
)
from liberation_engine.history_store import build_history_store
from liberation_engine.policy import get_weight_profile, load_policy
from liberation_engine.types import parse_history

api_v1 = Blueprint("api_v1", __name__)

MAX_TEXT_CHARS = 50000
MAX_BATCH = 100


def _policy():
    return current_app.config.get("LIBERATION_POLICY") or DEFAULT_POLICY


def _history_store():
    return current_app.extensions["liberation_history"]


def _trace(kind, payload):
    if not get_flags()["TRACE_ENABLED"]:
        return
    current_app.extensions["liberation_tracer"].record(kind, payload, new_trace_context())


def _json_body():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return None
    return payload


def _bad_body():
    return jsonify({
        "error": "Request body must be a JSON object",
        "hint": "Send Content-Type: application/json with an object body",
    }), 400


def _text_field(payload):
    text = payload.get("text", "")
    if not isinstance(text, str):
        return None, (jsonify({"error": "'text' must be a string"}), 400)
    if len(text) > MAX_TEXT_CHARS:
        return None, (jsonify({"error": "Text exceeds 50,000 character limit"}), 400)
    return text, None


# ═══════════════════════════════════════
# VALUES + SCANNING
# ═══════════════════════════════════════

@api_v1.route("/api/v1/values/validate", methods=["POST"])
def api_validate_values():
    """Validate a liberation values record. mode: strict | critical_only."""
    payload = _json_body()
    if payload is None:
        return _bad_body()

    mode = ValidationMode.parse(payload.get("mode"), ValidationMode.STRICT)
    weights = get_weight_profile(payload.get("profile"))
    result = validate(payload.get("values") or {}, mode, weights, _policy())

    body = {"status": "ok", "profile": weights.name, "validation": result.to_dict()}
    _trace("values_validate", body)
    return jsonify(body)


@api_v1.route("/api/v1/content/scan", methods=["POST"])
def api_scan_content():
    payload = _json_body()
    if payload is None:
        return _bad_body()
    text, err = _text_field(payload)
    if err:
        return err

    body = {"status": "ok", "scan": scan_report(text)}
    _trace("content_scan", body)
    return jsonify(body)


# ═══════════════════════════════════════
# JOURNEY
# ═══════════════════════════════════════

@api_v1.route("/api/v1/journey/detect", methods=["POST"])
def api_journey_detect():
    """Stateless: caller supplies the history."""
    payload = _json_body()
    if payload is None:
        return _bad_body()
    text, err = _text_field(payload)
    if err:
        return err

    history = parse_history(payload.get("history"))
    profile = payload.get("profile") if isinstance(payload.get("profile"), dict) else {}
    if payload.get("emergency") is True:
        context = emergency_context(profile)
    else:
        context = detect_stage(text, history, profile)

    body = {
        "status": "ok",
        "context": context.to_dict(),
        "explanation": explain_stage(text, history),
    }
    return jsonify(body)


@api_v1.route("/api/v1/journey/observe", methods=["POST"])
def api_journey_observe():
    """Stateful: history comes from the configured store."""
    payload = _json_body()
    if payload is None:
        return _bad_body()
    user_id = str(payload.get("user_id") or "").strip()
    if not user_id:
        return jsonify({"error": "Missing 'user_id' field in request body"}), 400
    text, err = _text_field(payload)
    if err:
        return err

    profile = payload.get("profile") if isinstance(payload.get("profile"), dict) else {}
    result = observe_turn(user_id, text, profile, _history_store(), _policy())
    body = dict(result, status="ok")
    _trace("journey_observe", body)
    return jsonify(body)


@api_v1.route("/api/v1/journey/readiness", methods=["POST"])
def api_journey_readiness():
    payload = _json_body()
    if payload is None:
        return _bad_body()
    return _run_operation("journey_progression", payload)


# ═══════════════════════════════════════
# BUSINESS LOGIC OPERATIONS
# ═══════════════════════════════════════

def _run_operation(name, payload):
    t0 = time.time()
    try:
        result = dispatch(name, payload, _policy())
    except UnknownOperationError as e:
        return jsonify({
            "error": str(e),
            "hint": f"Known operations: {', '.join(sorted(OPERATIONS))}",
        }), 404
    except UnknownTransitionError as e:
        return jsonify({
            "error": str(e),
            "from_stage": e.from_stage,
            "to_stage": e.to_stage,
            "hint": "Transitions only move one stage forward along the journey",
        }), 409

    body = result.to_dict()
    body["meta"] = {"latency_ms": int((time.time() - t0) * 1000)}
    _trace(f"operation:{name}", body)
    return jsonify(body)


@api_v1.route("/api/v1/operations/batch", methods=["POST"])
def api_operations_batch():
    payload = _json_body()
    if payload is None:
        return _bad_body()
    requests_ = payload.get("requests")
    if not isinstance(requests_, list) or not requests_:
        return jsonify({"error": "'requests' must be a non-empty list"}), 400
    if len(requests_) > MAX_BATCH:
        return jsonify({"error": f"Batch exceeds {MAX_BATCH} operations"}), 400

    try:
        batch = dispatch_batch(requests_, _policy())
    except UnknownOperationError as e:
        return jsonify({"error": str(e)}), 404
    except UnknownTransitionError as e:
        return jsonify({"error": str(e)}), 409

    body = batch.to_dict()
    _trace("operations_batch", {k: v for k, v in body.items() if k != "results"})
    return jsonify(body)


@api_v1.route("/api/v1/operations/<operation>", methods=["POST"])
def api_operation(operation):
    payload = _json_body()
    if payload is None:
        return _bad_body()
    return _run_operation(operation, payload)


@api_v1.route("/api/v1/policy", methods=["GET"])
def api_policy():
    """Published thresholds and weights, for audit."""
    return jsonify({"status": "ok", "policy": _policy().to_dict()})


def init_api(app):
    """Policy, history store and tracer are built once here, before any request."""
    app.config.setdefault("LIBERATION_POLICY", load_policy())
    app.extensions.setdefault("liberation_history", build_history_store())
    app.extensions.setdefault("liberation_tracer", TraceLogger())
    app.register_blueprint(api_v1)
