"""
RegenPW - Password Strength Analyzer

Scores any password (generated or not) on a 0-100 scale:
- Length           (max 20)
- Class variety    (max 20)
- Shannon entropy  (max 20)
- Diversity        (max 20)
- Class balance    (max 20)
minus penalties for sequences, adjacent repeats, common patterns,
excess repetition and low diversity.

Purely descriptive: nothing here feeds back into derivation.
"""

import math
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List

from .mapper import character_distribution, max_repetitions

COMMON_PATTERNS = (
    re.compile(r"(.)\1{2,}"),
    re.compile(r"123|234|345|456|567|678|789|890"),
    re.compile(
        r"abc|bcd|cde|def|efg|fgh|ghi|hij|ijk|jkl|klm|lmn|mno|nop|opq|pqr|qrs|rst|stu|tuv|uvw|vwx|wxy|xyz",
        re.IGNORECASE,
    ),
    re.compile(r"qwerty|asdf|zxcv", re.IGNORECASE),
)

STRENGTH_LEVELS = (
    (90, "Very Strong"),
    (75, "Strong"),
    (60, "Good"),
    (45, "Fair"),
    (25, "Weak"),
)


@dataclass(frozen=True)
class DiversityMetrics:
    total_unique_characters: int
    max_repetitions: int
    average_repetitions: float
    diversity_ratio: float
    repetition_score: int
    variety_score: int


@dataclass(frozen=True)
class RepetitionViolation:
    character: str
    count: int
    max_allowed: int


@dataclass(frozen=True)
class RepetitionAnalysis:
    has_excessive_repetition: bool
    max_allowed_repetitions: int
    repetition_violations: List[RepetitionViolation]
    repetition_quality: str


@dataclass(frozen=True)
class PasswordAnalysis:
    length: int
    character_counts: Dict[str, int]
    character_distribution: Dict[str, float]
    character_diversity: DiversityMetrics
    repetition_analysis: RepetitionAnalysis
    strength_score: int
    strength_level: str
    entropy: float
    has_sequential_chars: bool
    has_repeated_chars: bool
    suggestions: List[str] = field(default_factory=list)


def _js_round(value: float) -> int:
    return math.floor(value + 0.5)


# =============================================================================
# Metrics
# =============================================================================

def count_character_types(password: str) -> Dict[str, int]:
    counts = character_distribution(password)
    counts["total"] = len(password)
    return counts


def calculate_character_distribution(counts: Dict[str, int]) -> Dict[str, float]:
    """Percentage of each class, two decimals."""
    total = counts["total"]
    if total == 0:
        return {"uppercase": 0.0, "lowercase": 0.0, "numbers": 0.0, "symbols": 0.0}
    return {
        name: round(counts[name] / total * 100, 2)
        for name in ("uppercase", "lowercase", "numbers", "symbols")
    }


def analyze_character_diversity(password: str) -> DiversityMetrics:
    if not password:
        return DiversityMetrics(0, 0, 0.0, 0.0, 0, 0)

    counts = Counter(password)
    unique = len(counts)
    worst = max(counts.values())
    ratio = unique / len(password)

    allowed = max_repetitions(len(password))
    if worst <= allowed:
        repetition_score = 100
    else:
        repetition_score = max(0, 100 - (worst - allowed) * 20)

    return DiversityMetrics(
        total_unique_characters=unique,
        max_repetitions=worst,
        average_repetitions=_js_round(len(password) / unique * 100) / 100,
        diversity_ratio=_js_round(ratio * 1000) / 1000,
        repetition_score=repetition_score,
        variety_score=_js_round(ratio * 100),
    )


def analyze_repetition_pattern(password: str) -> RepetitionAnalysis:
    counts = Counter(password)
    allowed = max_repetitions(len(password))
    violations = [
        RepetitionViolation(char, count, allowed)
        for char, count in counts.items() if count > allowed
    ]
    worst = max(counts.values(), default=0)

    if worst <= max(1, allowed - 1):
        quality = "Excellent"
    elif worst <= allowed:
        quality = "Good"
    elif worst <= allowed + 1:
        quality = "Fair"
    else:
        quality = "Poor"

    return RepetitionAnalysis(
        has_excessive_repetition=bool(violations),
        max_allowed_repetitions=allowed,
        repetition_violations=violations,
        repetition_quality=quality,
    )


def calculate_entropy(password: str) -> float:
    """Shannon entropy in bits per character."""
    if not password:
        return 0.0
    length = len(password)
    entropy = 0.0
    for frequency in Counter(password).values():
        p = frequency / length
        entropy -= p * math.log2(p)
    return round(entropy, 2)


def has_sequential_characters(password: str) -> bool:
    """True for three ascending code points in a row ("abc", "123")."""
    for a, b, c in zip(password, password[1:], password[2:]):
        if ord(b) == ord(a) + 1 and ord(c) == ord(b) + 1:
            return True
    return False


def has_repeated_characters(password: str) -> bool:
    """True when two adjacent characters are identical."""
    return any(a == b for a, b in zip(password, password[1:]))


def has_common_patterns(password: str) -> bool:
    return any(pattern.search(password) for pattern in COMMON_PATTERNS)


def calculate_balance_score(counts: Dict[str, int]) -> int:
    total = counts["total"]
    if total == 0:
        return 20

    ideal = total / 4
    deviations = [abs(counts[name] - ideal) for name in ("uppercase", "lowercase", "numbers", "symbols")]
    avg_deviation = sum(deviations) / 4
    return _js_round((1 - avg_deviation / ideal) * 20)


def calculate_strength_score(
    password: str,
    counts: Dict[str, int],
    entropy: float,
    diversity: DiversityMetrics,
) -> int:
    score = 0.0
    score += min(len(password) * 1.5, 20)

    types_used = sum(1 for name in ("uppercase", "lowercase", "numbers", "symbols") if counts[name] > 0)
    score += types_used / 4 * 20

    score += min(entropy * 4, 20)
    score += (diversity.variety_score * 0.6 + diversity.repetition_score * 0.4) * 0.2
    score += calculate_balance_score(counts)

    penalties = 0.0
    if has_sequential_characters(password):
        penalties += 5
    if has_repeated_characters(password):
        penalties += 3
    if has_common_patterns(password):
        penalties += 10
    if diversity.repetition_score < 80:
        penalties += (80 - diversity.repetition_score) * 0.1
    if diversity.diversity_ratio < 0.6:
        penalties += (0.6 - diversity.diversity_ratio) * 20

    score = max(0.0, score - penalties)
    return min(100, _js_round(score))


def get_strength_level(score: int) -> str:
    for threshold, level in STRENGTH_LEVELS:
        if score >= threshold:
            return level
    return "Very Weak"


def _suggestions(password, counts, score, diversity, repetition) -> List[str]:
    if score >= 90:
        return ["Excellent! Your password is very strong with good character diversity."]

    suggestions = []
    if len(password) < 12:
        suggestions.append("Consider using a longer password (12+ characters) for better security")

    for name, label in (("uppercase", "uppercase letters"), ("lowercase", "lowercase letters"),
                        ("numbers", "numbers"), ("symbols", "symbols")):
        if counts[name] == 0:
            suggestions.append(f"Add {label} for better security")

    if diversity.diversity_ratio < 0.6:
        suggestions.append(
            f"Increase character variety - only {diversity.total_unique_characters} "
            f"unique characters out of {len(password)} total"
        )
    if diversity.variety_score < 70:
        suggestions.append("Use more diverse characters to avoid predictable patterns")

    if repetition.has_excessive_repetition:
        n = len(repetition.repetition_violations)
        suggestions.append(
            f"Reduce character repetition - {n} character{'s' if n > 1 else ''} "
            f"exceed{'s' if n == 1 else ''} recommended limits"
        )
    if repetition.repetition_quality == "Poor":
        suggestions.append("Consider spreading repeated characters throughout the password")

    if has_sequential_characters(password):
        suggestions.append("Avoid sequential characters (e.g., abc, 123) for better security")
    if has_repeated_characters(password):
        suggestions.append("Avoid adjacent identical characters (e.g., aa, 11)")
    if has_common_patterns(password):
        suggestions.append("Avoid common patterns and keyboard sequences")

    if calculate_balance_score(counts) < 15:
        suggestions.append("Balance the distribution of character types for optimal security")

    if not suggestions:
        suggestions.append("Your password could be stronger with more character variety and better distribution")
    return suggestions


# =============================================================================
# Entry Point
# =============================================================================

def analyze_password(password: str) -> PasswordAnalysis:
    """
    Full strength analysis of `password`.

    Raises:
        TypeError: password is not a string
    """
    if not isinstance(password, str):
        raise TypeError("Password must be a string")

    counts = count_character_types(password)
    diversity = analyze_character_diversity(password)
    repetition = analyze_repetition_pattern(password)
    entropy = calculate_entropy(password)
    score = calculate_strength_score(password, counts, entropy, diversity)

    return PasswordAnalysis(
        length=len(password),
        character_counts=counts,
        character_distribution=calculate_character_distribution(counts),
        character_diversity=diversity,
        repetition_analysis=repetition,
        strength_score=score,
        strength_level=get_strength_level(score),
        entropy=entropy,
        has_sequential_chars=has_sequential_characters(password),
        has_repeated_chars=has_repeated_characters(password),
        suggestions=_suggestions(password, counts, score, diversity, repetition),
    )
