# liberation_engine/oppression_scanner.py
# Oppression pattern scanner.
# Category tables in, categorized indicators out.
# Deterministic. Idempotent. No inference.
#
# Severity ladder (first hit wins):
#   critical  phrase itself carries a critical keyword
#   high      category is in the high-severity set
#   high      phrase occurs more than 3 times
#   medium    phrase occurs more than once
#   low       otherwise

from __future__ import annotations

from typing import Any, Dict, List, Optional

from .patterns import (
    CONTEXT_WINDOW,
    CRITICAL_KEYWORDS,
    GENERIC_OPPRESSION_REMEDY,
    HIGH_SEVERITY_CATEGORIES,
    OPPRESSION_PATTERNS,
    OPPRESSION_REMEDIES,
)
from .types import IndicatorSeverity, OppressionIndicator

SCANNER_VERSION = "oppression-scanner-v1.0"


def assess_severity(phrase: str, text: str, category: str) -> IndicatorSeverity:
    if any(k in phrase for k in CRITICAL_KEYWORDS):
        return IndicatorSeverity.CRITICAL
    if category in HIGH_SEVERITY_CATEGORIES:
        return IndicatorSeverity.HIGH
    occurrences = text.count(phrase)
    if occurrences > 3:
        return IndicatorSeverity.HIGH
    if occurrences > 1:
        return IndicatorSeverity.MEDIUM
    return IndicatorSeverity.LOW


def context_window(phrase: str, text: str, width: int = CONTEXT_WINDOW) -> str:
    idx = text.find(phrase)
    if idx < 0:
        return ""
    start = max(0, idx - width)
    end = min(len(text), idx + len(phrase) + width)
    return text[start:end]


def remedy_for(category: str) -> str:
    return OPPRESSION_REMEDIES.get(category, GENERIC_OPPRESSION_REMEDY)


def scan(text: Optional[str]) -> List[OppressionIndicator]:
    """
    One indicator per catalog phrase found in the text.
    The same phrase appearing many times is still one indicator;
    its count only feeds severity.
    """
    t = (text or "").lower() if isinstance(text, str) else ""
    if not t.strip():
        return []

    indicators: List[OppressionIndicator] = []
    for category, phrases in OPPRESSION_PATTERNS.items():
        for phrase in phrases:
            if phrase not in t:
                continue
            indicators.append(OppressionIndicator(
                type=category,
                severity=assess_severity(phrase, t, category),
                description=f'Detected {category} pattern: "{phrase}"',
                location=context_window(phrase, t),
                remedy=remedy_for(category),
                pattern=phrase,
            ))
    return indicators


def scan_report(text: Optional[str]) -> Dict[str, Any]:
    indicators = scan(text)
    by_severity: Dict[str, int] = {s.value: 0 for s in IndicatorSeverity}
    for ind in indicators:
        by_severity[ind.severity.value] += 1
    return {
        "version": SCANNER_VERSION,
        "clean": not indicators,
        "indicator_count": len(indicators),
        "by_severity": by_severity,
        "categories": sorted({i.type for i in indicators}),
        "indicators": [i.to_dict() for i in indicators],
    }
