"""
tests/test_values_validator.py — Liberation Values Validator
=============================================================
Five dimensions, fixed order, fail-closed.

Tests:
  - Passing records score weight x value per dimension
  - Severity ladder (critical / major / minor)
  - STRICT vs CRITICAL_ONLY validity
  - Missing and malformed input fails closed
  - One recommendation per violation category
"""

import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from liberation_engine import CONTENT_WEIGHTS, DEFAULT_WEIGHTS, LiberationValues, ValidationMode, validate
from liberation_engine.policy import LiberationPolicy
from liberation_engine.types import Severity, ViolationType


STRONG = {
    "creator_sovereignty": 0.8,
    "anti_oppression_validation": True,
    "black_queer_empowerment": 0.7,
    "community_protection": 0.8,
    "cultural_authenticity": 0.7,
}


def _with(**changes):
    vals = dict(STRONG)
    vals.update(changes)
    return vals


# ═══════════════════════════════════════════
# SCORING
# ═══════════════════════════════════════════

def test_all_dimensions_pass():
    """Every dimension above threshold: valid, no violations, weighted score."""
    r = validate(STRONG)
    assert r.is_valid is True
    assert r.violations == ()
    assert r.recommendations == ()
    assert r.empowerment_score == pytest.approx(0.2 + 0.25 + 0.14 + 0.12 + 0.105)


@pytest.mark.parametrize("mode", list(ValidationMode))
def test_content_profile_sovereignty_failure(mode):
    """Sovereignty 0.5 under content weights: one critical violation, invalid in every mode, score 0.72."""
    values = LiberationValues.of(0.5, True, 0.8, 0.9, 0.9)
    r = validate(values, mode, CONTENT_WEIGHTS)
    assert r.is_valid is False
    assert len(r.violations) == 1
    v = r.violations[0]
    assert v.type is ViolationType.CREATOR_SOVEREIGNTY
    assert v.severity is Severity.CRITICAL
    assert r.empowerment_score == pytest.approx(0.72)


def test_threshold_is_inclusive():
    """A value exactly at its threshold passes."""
    r = validate(_with(creator_sovereignty=0.75))
    assert r.is_valid is True


def test_score_is_bounded_by_weight_total():
    perfect = LiberationValues.of(1, True, 1, 1, 1)
    assert validate(perfect).empowerment_score == pytest.approx(DEFAULT_WEIGHTS.total())
    assert validate(perfect, weights=CONTENT_WEIGHTS).empowerment_score == pytest.approx(1.0)


# ═══════════════════════════════════════════
# SEVERITY + MODES
# ═══════════════════════════════════════════

def test_empowerment_below_minimum_is_major():
    r = validate(_with(black_queer_empowerment=0.5))
    assert [v.severity for v in r.violations] == [Severity.MAJOR]


def test_empowerment_below_floor_is_critical():
    r = validate(_with(black_queer_empowerment=0.2))
    assert [v.severity for v in r.violations] == [Severity.CRITICAL]


@pytest.mark.parametrize("field,severity", [
    ("community_protection", Severity.MAJOR),
    ("cultural_authenticity", Severity.MINOR),
])
def test_non_critical_dimensions(field, severity):
    r = validate(_with(**{field: 0.1}))
    assert len(r.violations) == 1
    assert r.violations[0].severity is severity


def test_critical_only_tolerates_major_and_minor():
    """CRITICAL_ONLY: major + minor violations still leave the record valid."""
    vals = _with(black_queer_empowerment=0.5, community_protection=0.1, cultural_authenticity=0.1)
    assert validate(vals, ValidationMode.STRICT).is_valid is False
    r = validate(vals, ValidationMode.CRITICAL_ONLY)
    assert r.is_valid is True
    assert len(r.violations) == 3
    assert r.mode == "critical_only"


def test_critical_only_rejects_critical():
    r = validate(_with(anti_oppression_validation=False), ValidationMode.CRITICAL_ONLY)
    assert r.is_valid is False
    assert r.critical_violations[0].type is ViolationType.ANTI_OPPRESSION


def test_violation_order_is_fixed():
    r = validate({})
    assert [v.type for v in r.violations] == [
        ViolationType.CREATOR_SOVEREIGNTY,
        ViolationType.ANTI_OPPRESSION,
        ViolationType.EMPOWERMENT,
        ViolationType.PROTECTION,
        ViolationType.AUTHENTICITY,
    ]


# ═══════════════════════════════════════════
# FAIL-CLOSED INPUT
# ═══════════════════════════════════════════

@pytest.mark.parametrize("raw", [None, {}, "not a record", 42])
def test_missing_record_fails_closed(raw):
    """Nothing supplied: invalid, zero score, missing empowerment is critical."""
    r = validate(raw)
    assert r.is_valid is False
    assert r.empowerment_score == 0.0
    empowerment = [v for v in r.violations if v.type is ViolationType.EMPOWERMENT][0]
    assert empowerment.severity is Severity.CRITICAL
    assert "missing or malformed" in empowerment.description


@pytest.mark.parametrize("bad", [1.5, -0.1, float("nan"), True, "abc", [0.9]])
def test_malformed_values_fail_closed(bad):
    r = validate(_with(creator_sovereignty=bad))
    assert r.is_valid is False
    assert r.violations[0].type is ViolationType.CREATOR_SOVEREIGNTY


def test_anti_oppression_needs_explicit_true():
    r = validate(_with(anti_oppression_validation="maybe"))
    assert r.violations[0].type is ViolationType.ANTI_OPPRESSION


def test_camel_case_keys():
    r = validate({
        "creatorSovereignty": 0.8,
        "antiOppressionValidation": True,
        "blackQueerEmpowerment": 0.7,
        "communityProtection": 0.8,
        "culturalAuthenticity": 0.7,
    })
    assert r.is_valid is True


def test_numeric_strings_are_accepted():
    r = validate(_with(creator_sovereignty="0.9"))
    assert r.is_valid is True


# ═══════════════════════════════════════════
# DESCRIPTIONS + RECOMMENDATIONS
# ═══════════════════════════════════════════

def test_description_names_value_and_threshold():
    r = validate(_with(creator_sovereignty=0.5))
    assert r.violations[0].description == "Creator sovereignty 0.50 below required 75% minimum"


def test_recommendations_one_per_category():
    r = validate({})
    assert len(r.recommendations) == 5
    assert r.recommendations[0].startswith("Protect creator sovereignty: ")


def test_custom_policy_thresholds():
    lenient = LiberationPolicy(min_creator_sovereignty=0.5)
    assert validate(_with(creator_sovereignty=0.55), policy=lenient).is_valid is True
    assert validate(_with(creator_sovereignty=0.55)).is_valid is False


def test_to_dict_is_json_ready():
    d = validate(_with(cultural_authenticity=0.1)).to_dict()
    assert d["is_valid"] is False
    assert d["mode"] == "strict"
    assert d["violations"][0]["type"] == "authenticity"
    assert d["violations"][0]["severity"] == "minor"
