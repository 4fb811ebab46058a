"""
tests/test_policy.py — Policy, Flags, Trace
=============================================
Environment overrides, backend switches, JSONL decision trace.
"""

import json
import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from liberation_engine import DEFAULT_POLICY, TraceLogger, ValidationMode, get_flags, load_policy
from liberation_engine.policy import _ENV_OVERRIDES, CONTENT_WEIGHTS, DEFAULT_WEIGHTS, get_weight_profile


# ═══════════════════════════════════════════
# POLICY
# ═══════════════════════════════════════════

def test_published_defaults():
    assert DEFAULT_POLICY.min_creator_sovereignty == 0.75
    assert DEFAULT_POLICY.max_platform_share == 0.25
    assert DEFAULT_POLICY.rule_criteria_min_score == 0.70
    assert DEFAULT_POLICY.user_values_min_score == 0.60
    assert DEFAULT_POLICY.history_cap == 20


def test_published_policy_only_carries_thresholds_in_use():
    assert set(DEFAULT_POLICY.to_dict()) == {
        "version", "min_creator_sovereignty", "min_empowerment", "min_community_protection",
        "min_cultural_authenticity", "critical_empowerment_floor", "rule_criteria_min_score",
        "user_values_min_score", "history_cap", "weights",
    }
    assert not hasattr(DEFAULT_POLICY, "max_oppression_tolerance")


@pytest.mark.parametrize("profile", [DEFAULT_WEIGHTS, CONTENT_WEIGHTS])
def test_weight_profiles_sum_to_one(profile):
    assert profile.total() == pytest.approx(1.0)


def test_weight_profile_lookup():
    assert get_weight_profile("CONTENT") is CONTENT_WEIGHTS
    assert get_weight_profile("unknown") is DEFAULT_WEIGHTS
    assert get_weight_profile(None) is DEFAULT_WEIGHTS


def test_mode_parse():
    assert ValidationMode.parse("critical_only", ValidationMode.STRICT) is ValidationMode.CRITICAL_ONLY
    assert ValidationMode.parse("whatever", ValidationMode.STRICT) is ValidationMode.STRICT
    assert ValidationMode.parse(None, ValidationMode.CRITICAL_ONLY) is ValidationMode.CRITICAL_ONLY


def test_no_overrides_returns_default(monkeypatch):
    for name in list(_ENV_OVERRIDES) + ["JOURNEY_HISTORY_CAP"]:
        monkeypatch.delenv(name, raising=False)
    assert load_policy() is DEFAULT_POLICY


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("LIBERATION_MIN_CREATOR_SOVEREIGNTY", "0.8")
    monkeypatch.setenv("JOURNEY_HISTORY_CAP", "50")
    p = load_policy()
    assert p.min_creator_sovereignty == 0.8
    assert p.max_platform_share == pytest.approx(0.2)
    assert p.history_cap == 50
    assert p.min_empowerment == DEFAULT_POLICY.min_empowerment


@pytest.mark.parametrize("raw", ["abc", "1.5", "-0.2", "  "])
def test_bad_overrides_ignored(monkeypatch, raw):
    monkeypatch.setenv("LIBERATION_MIN_EMPOWERMENT", raw)
    monkeypatch.setenv("JOURNEY_HISTORY_CAP", "many")
    p = load_policy()
    assert p.min_empowerment == 0.60
    assert p.history_cap == 20


# ═══════════════════════════════════════════
# FLAGS
# ═══════════════════════════════════════════

def test_flag_defaults(monkeypatch):
    for name in ("TRACE_ENABLED", "HISTORY_BACKEND", "JOURNEY_HISTORY_TTL_SECONDS"):
        monkeypatch.delenv(name, raising=False)
    flags = get_flags()
    assert flags["TRACE_ENABLED"] is True
    assert flags["HISTORY_BACKEND"] == "memory"
    assert flags["JOURNEY_HISTORY_TTL_SECONDS"] == 0


def test_flag_overrides(monkeypatch):
    monkeypatch.setenv("TRACE_ENABLED", "off")
    monkeypatch.setenv("HISTORY_BACKEND", " Redis ")
    monkeypatch.setenv("JOURNEY_HISTORY_TTL_SECONDS", "3600")
    flags = get_flags()
    assert flags["TRACE_ENABLED"] is False
    assert flags["HISTORY_BACKEND"] == "redis"
    assert flags["JOURNEY_HISTORY_TTL_SECONDS"] == 3600


# ═══════════════════════════════════════════
# TRACE
# ═══════════════════════════════════════════

def test_trace_writes_jsonl(tmp_path):
    tracer = TraceLogger(log_dir=str(tmp_path / "logs"))
    tracer.record("values_validate", {"is_valid": True})
    tracer.record("content_scan", {"clean": False})

    lines = (tmp_path / "logs" / "liberation_trace.jsonl").read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    first = json.loads(lines[0])
    assert first["kind"] == "values_validate"
    assert first["result"] == {"is_valid": True}
    assert "request_id" in first and "timestamp" in first


def test_trace_failure_never_raises(tmp_path):
    """A trace dir that cannot be created must not break the caller."""
    blocker = tmp_path / "file"
    blocker.write_text("x")
    tracer = TraceLogger(log_dir=str(blocker / "sub"))
    entry = tracer.record("x", {"ok": True})
    assert entry["kind"] == "x"
