"""
tests/test_stage_classifier.py — Journey Stage Classifier
===========================================================
Free text + history -> JourneyContext. Deterministic, never raises.

Tests:
  - Stage scoring, ties, continuity bonus, emergency override
  - Empty-input defaults
  - Emotional state, urgency, location, connection, resource preference
"""

import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from liberation_engine import detect_stage, explain_stage
from liberation_engine.stage_classifier import (
    detect_community_connection,
    detect_emotional_state,
    detect_location,
    detect_resource_preference,
    detect_urgency_level,
    pick_stage,
)
from liberation_engine.types import (
    CommunityConnection,
    EmotionalState,
    JourneyStage,
    ResourcePreference,
    UrgencyLevel,
)


# ═══════════════════════════════════════════
# STAGE SELECTION
# ═══════════════════════════════════════════

@pytest.mark.parametrize("text,stage", [
    ("I was evicted last night", JourneyStage.CRISIS),
    ("I have a therapist and a routine now", JourneyStage.STABILIZATION),
    ("I want to learn and find training courses", JourneyStage.GROWTH),
    ("I found a healing circle and peer support", JourneyStage.COMMUNITY_HEALING),
    ("I want to organize a protest for justice", JourneyStage.ADVOCACY),
])
def test_detects_stage(text, stage):
    assert detect_stage(text).stage is stage


def test_empty_text_defaults():
    """No signal at all: every dimension takes its documented default."""
    ctx = detect_stage("")
    assert ctx.stage is JourneyStage.CRISIS
    assert ctx.emotional_state is EmotionalState.CALM
    assert ctx.urgency_level is UrgencyLevel.LOW
    assert ctx.location == "unknown"
    assert ctx.community_connection is CommunityConnection.EXPLORING
    assert ctx.resource_access_preference is ResourcePreference.FLEXIBLE
    assert ctx.first_time is True
    assert ctx.returning_user is False


@pytest.mark.parametrize("text", [None, 12, ["crisis"]])
def test_non_text_never_raises(text):
    assert detect_stage(text).stage is JourneyStage.CRISIS


def test_tie_goes_to_earlier_stage():
    """One crisis keyword vs one stabilization keyword: crisis wins."""
    text = "I'm homeless and need housing support"
    scores = explain_stage(text)["scores"]
    assert scores["crisis"] == scores["stabilization"]
    assert detect_stage(text).stage is JourneyStage.CRISIS


def test_pick_stage_strict_comparison():
    scores = {s: 1.0 for s in JourneyStage}
    assert pick_stage(scores) is JourneyStage.CRISIS


def test_continuity_breaks_tie():
    """A tied turn stays with the user's last recorded stage."""
    text = "I'm in recovery and thinking about my career"
    assert detect_stage(text).stage is JourneyStage.STABILIZATION
    assert detect_stage(text, ["growth"]).stage is JourneyStage.GROWTH


def test_continuity_never_beats_real_signal():
    ctx = detect_stage("I was evicted", ["advocacy"])
    assert ctx.stage is JourneyStage.CRISIS


def test_emergency_override():
    """Emergency keywords force crisis even against a strong advocacy signal."""
    text = "I organize a campaign for justice but tonight I need 999"
    explanation = explain_stage(text)
    assert explanation["scores"]["advocacy"] > explanation["scores"]["crisis"]
    assert explanation["emergency_override"] == ["999"]
    assert detect_stage(text).stage is JourneyStage.CRISIS


def test_deterministic():
    text = "Feeling hopeful, want to learn, maybe join a support group"
    assert detect_stage(text, ["stabilization"]) == detect_stage(text, ["stabilization"])


def test_history_is_cleaned():
    ctx = detect_stage("", ["bogus", "growth", 7])
    assert ctx.previous_stages == (JourneyStage.GROWTH,)
    assert ctx.returning_user is True
    assert ctx.first_time is False


def test_explain_lists_matched_phrases():
    explanation = explain_stage("want to learn about training")
    assert explanation["stage"] == "growth"
    assert set(explanation["matched"]["growth"]) == {"want to learn", "training"}
    assert explanation["continuity_stage"] is None


# ═══════════════════════════════════════════
# SUB-CLASSIFIERS
# ═══════════════════════════════════════════

@pytest.mark.parametrize("text,state", [
    ("I feel hopeless", EmotionalState.CRISIS),
    ("so stressed about rent", EmotionalState.STRESSED),
    ("really excited", EmotionalState.EXCITED),
    ("what a wonderful day", EmotionalState.JOYFUL),
    ("I'm confused", EmotionalState.UNCERTAIN),
    ("just checking in", EmotionalState.CALM),
])
def test_emotional_state(text, state):
    assert detect_emotional_state(text) is state


def test_urgency_emergency_words():
    assert detect_urgency_level("call an ambulance") is UrgencyLevel.EMERGENCY


def test_urgency_crisis_stage_is_high():
    ctx = detect_stage("I feel hopeless")
    assert ctx.stage is JourneyStage.CRISIS
    assert ctx.urgency_level is UrgencyLevel.HIGH


@pytest.mark.parametrize("text,level", [
    ("I need this today", UrgencyLevel.HIGH),
    ("sometime this week", UrgencyLevel.MEDIUM),
    ("no rush", UrgencyLevel.LOW),
])
def test_urgency_words(text, level):
    assert detect_urgency_level(text, JourneyStage.GROWTH) is level


def test_empty_text_urgency_is_low():
    assert detect_urgency_level("", JourneyStage.CRISIS) is UrgencyLevel.LOW


@pytest.mark.parametrize("text,hint,location", [
    ("I live in Manchester", None, "manchester"),
    ("out in a small village", None, "rural"),
    ("nowhere in particular", None, "unknown"),
    ("I live in Leeds", "Bristol", "bristol"),
    ("", "Somewhere Else", "other_urban"),
])
def test_location(text, hint, location):
    assert detect_location(text, hint) == location


@pytest.mark.parametrize("text,tier", [
    ("I have no friends", CommunityConnection.ISOLATED),
    ("I feel so alone", CommunityConnection.ISOLATED),
    ("I'm leading a campaign", CommunityConnection.ORGANIZING),
    ("meeting people slowly", CommunityConnection.CONNECTED),
    ("I'm new here", CommunityConnection.EXPLORING),
    ("my friends help a lot", CommunityConnection.NETWORKED),
    ("", CommunityConnection.EXPLORING),
])
def test_community_connection(text, tier):
    assert detect_community_connection(text) is tier


@pytest.mark.parametrize("text,preferred,pref", [
    ("can you call me", None, ResourcePreference.PHONE),
    ("is there an app for this", None, ResourcePreference.ONLINE),
    ("I'd rather meet face to face", None, ResourcePreference.IN_PERSON),
    ("", "in_person", ResourcePreference.IN_PERSON),
    ("", "carrier pigeon", ResourcePreference.FLEXIBLE),
])
def test_resource_preference(text, preferred, pref):
    assert detect_resource_preference(text, preferred) is pref


def test_profile_feeds_context():
    ctx = detect_stage("", profile={"location": "Glasgow", "resource_access_preference": "phone"})
    assert ctx.location == "glasgow"
    assert ctx.resource_access_preference is ResourcePreference.PHONE
