# liberation_engine/patterns.py
# Pattern catalog. Static, read-only, built once at import.
# Every classification the engine makes traces back to a phrase in here.
# Matching is case-insensitive substring. No stemming. No inference.

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Tuple

from .types import (
    CommunityConnection,
    EmotionalState,
    JourneyStage,
    ResourcePreference,
    ViolationType,
)

PATTERNS_VERSION = "patterns-v1.0"


def _freeze(table: dict) -> Mapping:
    return MappingProxyType({k: tuple(v) for k, v in table.items()})


# ═══════════════════════════════════════════════════════════
# OPPRESSION CATEGORIES
# ═══════════════════════════════════════════════════════════

OPPRESSION_PATTERNS: Mapping[str, Tuple[str, ...]] = _freeze({
    "racism": [
        "racial slur", "colorblind", "reverse racism", "race card",
        "ghetto", "thug", "all lives matter", "post-racial",
    ],
    "transphobia": [
        "biological sex", "real woman", "real man", "transgenderism",
        "gender ideology", "mutilation", "just a phase",
        "bathroom predator", "rapid onset",
    ],
    "homophobia": [
        "lifestyle choice", "homosexual agenda", "unnatural",
        "deviant", "recruiting", "special rights",
    ],
    "classism": [
        "lazy poor", "welfare queen", "bootstraps", "deserving poor",
        "ghetto culture", "poverty mindset",
    ],
    "ableism": [
        "crazy", "insane", "lame", "retarded",
        "wheelchair bound", "suffering from",
    ],
    "sexism": [
        "bossy", "hysterical", "shrill",
        "gold digger", "asking for it",
    ],
})

HIGH_SEVERITY_CATEGORIES = frozenset({"racism", "transphobia", "homophobia"})

# A phrase containing any of these is critical whatever its category.
CRITICAL_KEYWORDS: Tuple[str, ...] = ("slur", "violence", "threat", "dehumanizing")

OPPRESSION_REMEDIES: Mapping[str, str] = MappingProxyType({
    "racism": "Remove racist language and replace with respectful, anti-racist alternatives",
    "transphobia": "Remove transphobic content and center trans-affirming language",
    "homophobia": "Replace homophobic content with LGBTQ+-affirming messaging",
    "classism": "Remove classist assumptions and include class-diverse perspectives",
    "ableism": "Replace ableist language with disability-inclusive alternatives",
    "sexism": "Remove sexist content and promote gender equity",
})

GENERIC_OPPRESSION_REMEDY = "Remove oppressive content and center liberation values"

CONTEXT_WINDOW = 50  # chars each side of the first match


# ═══════════════════════════════════════════════════════════
# VIOLATION GUIDANCE
# ═══════════════════════════════════════════════════════════

VIOLATION_GUIDANCE: Mapping[ViolationType, str] = MappingProxyType({
    ViolationType.CREATOR_SOVEREIGNTY: "Protect creator sovereignty",
    ViolationType.ANTI_OPPRESSION: "Restore anti-oppression validation",
    ViolationType.EMPOWERMENT: "Center Black queer empowerment",
    ViolationType.PROTECTION: "Strengthen community protection",
    ViolationType.AUTHENTICITY: "Improve cultural authenticity",
})

VIOLATION_REMEDIES: Mapping[ViolationType, str] = MappingProxyType({
    ViolationType.CREATOR_SOVEREIGNTY: "Increase creator revenue share to meet liberation standards",
    ViolationType.ANTI_OPPRESSION: "Remove oppressive elements and enable anti-oppression validation",
    ViolationType.EMPOWERMENT: "Center Black queer voices, experiences, and liberation",
    ViolationType.PROTECTION: "Strengthen community protection measures and consent protocols",
    ViolationType.AUTHENTICITY: "Increase authentic cultural representation and community voice",
})


# ═══════════════════════════════════════════════════════════
# JOURNEY STAGE INDICATORS
# ═══════════════════════════════════════════════════════════

# Increment per matched phrase, by phrase group.
KEYWORD_WEIGHT = 2.0
EMOTIONAL_MARKER_WEIGHT = 1.5
URGENCY_WORD_WEIGHT = 3.0

# Smaller than any single phrase, so one real signal always beats it.
CONTINUITY_BONUS = 0.5

STAGE_KEYWORDS: Mapping[JourneyStage, Tuple[str, ...]] = _freeze({
    JourneyStage.CRISIS: [
        "emergency", "urgent", "crisis", "need help now", "immediate", "desperate",
        "suicidal", "self-harm", "cant cope", "can't cope", "breaking down",
        "emergency room", "hospital", "police", "ambulance", "danger", "unsafe",
        "threat", "diagnosed", "evicted", "kicked out", "homeless",
        "overdose", "cutting", "pills", "end it all",
    ],
    JourneyStage.STABILIZATION: [
        "getting support", "finding resources", "need information",
        "looking for help", "therapist", "counselling", "support group",
        "medication", "treatment", "regular support", "ongoing help",
        "housing support", "benefits", "social services",
        "recovery", "stable", "routine", "structure",
    ],
    JourneyStage.GROWTH: [
        "want to learn", "how can i", "planning to", "interested in",
        "developing", "improving", "skill building", "education",
        "career", "goals", "future", "next steps", "opportunities",
        "workshops", "training", "courses", "mentor", "coaching",
    ],
    JourneyStage.COMMUNITY_HEALING: [
        "community support", "group therapy", "healing space", "peer support",
        "healing circle", "community healing", "collective",
        "together", "shared experience", "mentoring", "giving back",
        "healing trauma", "community care", "mutual aid",
    ],
    JourneyStage.ADVOCACY: [
        "want to help others", "organize", "organise", "campaign",
        "activism", "advocacy", "policy", "system change", "justice",
        "rights", "discrimination", "inequality", "reform", "movement",
        "protest", "petition", "lobby", "volunteer",
    ],
})

STAGE_EMOTIONAL_MARKERS: Mapping[JourneyStage, Tuple[str, ...]] = _freeze({
    JourneyStage.CRISIS: [
        "terrified", "panicking", "overwhelmed", "hopeless",
        "scared", "alone", "trapped", "numb", "breaking",
    ],
    JourneyStage.STABILIZATION: [
        "anxious but coping", "cautiously hopeful", "tired but trying",
        "overwhelmed but managing", "seeking stability", "need routine",
    ],
    JourneyStage.GROWTH: [
        "motivated", "curious", "hopeful", "ambitious", "ready to grow",
        "excited about future", "confident",
    ],
    JourneyStage.COMMUNITY_HEALING: [
        "ready to connect", "wanting community", "healing together",
        "sharing experience", "supporting others", "feeling connected",
    ],
    JourneyStage.ADVOCACY: [
        "empowered", "determined", "passionate", "committed",
        "ready to fight", "angry at injustice", "motivated to change",
    ],
})

# Only crisis carries urgency words.
STAGE_URGENCY_WORDS: Mapping[JourneyStage, Tuple[str, ...]] = _freeze({
    JourneyStage.CRISIS: [
        "right now", "immediately", "asap", "this minute",
        "cant wait", "can't wait", "help me",
    ],
})

# Forces the crisis stage regardless of scores.
EMERGENCY_OVERRIDE_KEYWORDS: Tuple[str, ...] = (
    "suicide", "kill myself", "end it all", "overdose", "emergency", "999", "911",
)


# ═══════════════════════════════════════════════════════════
# SUB-CLASSIFIERS
# ═══════════════════════════════════════════════════════════

# First match wins, in this order.
EMOTIONAL_STATE_MARKERS: Tuple[Tuple[EmotionalState, Tuple[str, ...]], ...] = (
    (EmotionalState.CRISIS, ("suicidal", "desperate", "hopeless", "breaking")),
    (EmotionalState.STRESSED, ("stressed", "anxious", "overwhelmed", "panic", "worried")),
    (EmotionalState.EXCITED, ("excited", "happy", "motivated", "determined", "hopeful")),
    (EmotionalState.JOYFUL, ("joy", "celebration", "amazing", "wonderful", "fantastic")),
    (EmotionalState.UNCERTAIN, ("unsure", "confused", "lost", "dont know", "don't know", "uncertain")),
)

EMERGENCY_URGENCY_WORDS: Tuple[str, ...] = ("emergency", "999", "ambulance", "suicide", "overdose")
HIGH_URGENCY_WORDS: Tuple[str, ...] = ("urgent", "asap", "immediately", "right now", "today")
MEDIUM_URGENCY_WORDS: Tuple[str, ...] = ("soon", "this week", "within days", "quickly")

UK_CITIES: Tuple[str, ...] = (
    "london", "manchester", "birmingham", "leeds", "glasgow", "cardiff",
    "belfast", "bristol", "liverpool", "sheffield", "nottingham", "brighton",
)
RURAL_MARKERS: Tuple[str, ...] = ("rural", "countryside", "village", "small town")

# Narrow tiers are checked before the broad ones so "no friends"
# never reads as networked and "finding community" reads as exploring.
CONNECTION_MARKERS: Tuple[Tuple[CommunityConnection, Tuple[str, ...]], ...] = (
    (CommunityConnection.ORGANIZING, ("organizing", "organising", "leading", "campaign", "activist", "advocate")),
    (CommunityConnection.ISOLATED, ("alone", "isolated", "no one", "nobody", "by myself", "no friends")),
    (CommunityConnection.CONNECTED, ("some friends", "few people", "getting involved", "meeting people")),
    (CommunityConnection.EXPLORING, ("looking for", "want to meet", "finding community", "new here")),
    (CommunityConnection.NETWORKED, ("community", "friends", "network", "support group", "involved")),
)

RESOURCE_MARKERS: Tuple[Tuple[ResourcePreference, Tuple[str, ...]], ...] = (
    (ResourcePreference.PHONE, ("phone", "call me", "a call", "talk to someone", "speak to")),
    (ResourcePreference.ONLINE, ("online", "website", "digital", "an app", "the app", "chat")),
    (ResourcePreference.IN_PERSON, ("in person", "face to face", "meet up", "visit", "go to")),
)


# ═══════════════════════════════════════════════════════════
# LIBERATION ALIGNMENT (content helpers)
# ═══════════════════════════════════════════════════════════

LIBERATION_TERMS: Tuple[str, ...] = ("liberation", "freedom", "empowerment", "justice", "equity")
COMMUNITY_TERMS: Tuple[str, ...] = ("community", "solidarity", "support", "together", "collective")
RESOURCE_TERMS: Tuple[str, ...] = ("resources", "tools", "support", "help", "guidance")
JOY_TERMS: Tuple[str, ...] = ("joy", "celebration", "pride", "love", "beautiful", "amazing")
HARM_RISK_TERMS: Tuple[str, ...] = ("expose", "outing", "out them", "private information", "vulnerable")
EXTRACTION_TERMS: Tuple[str, ...] = ("profit", "monetize", "monetise", "exploit")
SENSITIVE_INFO_TERMS: Tuple[str, ...] = ("location", "real name", "workplace", "home address")
MISREPRESENTATION_TERMS: Tuple[str, ...] = ("generalization", "all of them", "they always", "they never")

COMMUNITY_VOICE_INDICATORS: Tuple[str, ...] = (
    "community says", "our experience", "we believe",
    "from our perspective", "in our community",
    "as a member of", "our voices", "we deserve",
)

REPRESENTATION_POSITIVE: Tuple[str, ...] = (
    "black queer", "black lgbtq", "liberation", "empowerment",
    "authentic", "community", "healing", "joy", "celebration",
)
REPRESENTATION_NEGATIVE: Tuple[str, ...] = ("stereotype", "tokenism", "fetishization")

STEREOTYPE_PATTERNS: Tuple[str, ...] = (
    "angry black woman",
    "sassy gay friend",
    "tragic queer",
    "hypersexualized",
    "one-dimensional representation",
)


def contains_any(text: str, phrases: Tuple[str, ...]) -> bool:
    return any(p in text for p in phrases)


def matched(text: str, phrases: Tuple[str, ...]) -> Tuple[str, ...]:
    return tuple(p for p in phrases if p in text)
