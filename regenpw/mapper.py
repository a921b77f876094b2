"""
RegenPW - Password Mapper

Maps a hex digest onto a password of a requested length.

Pipeline (all randomness comes from HashStream over the digest):
    1. Target distribution: how many characters each class gets
    2. Placement pass: each class slot searches for a free position and
       picks a character under the repetition budget
    3. Fill pass: any position still empty gets a weight-biased class
    4. Fisher-Yates shuffle to remove placement-order bias

Every seed constant, every draw and the order of draws is part of the
algorithm version. Reordering two draws changes every password.
"""

import logging
import math
from collections import Counter
from dataclasses import asdict, dataclass
from typing import Dict, List, Optional, Sequence, Set

from .config import CLASS_NAMES, DEFAULT_CONFIG, DistributionConfig, GeneratorConfig, PasswordOptions
from .errors import InvalidConfiguration, InvalidInput

logger = logging.getLogger(__name__)


# =============================================================================
# Deterministic Stream
# =============================================================================

class HashStream:
    """
    Pseudo-random draws read straight out of a hex digest.

    Each draw reads three hex digits starting at (offset + seed) and
    advances offset by 3, whatever the seed. The seed only moves the read
    window; it never changes how far the cursor moves.
    """

    DIGITS_PER_DRAW = 3

    def __init__(self, digest: str):
        if not digest:
            raise InvalidInput("Digest cannot be empty")
        self.digest = digest
        self.offset = 0

    def next(self, seed: int = 0) -> int:
        """Return the next draw (1..4095); never returns 0."""
        size = len(self.digest)
        start = self.offset + seed
        chunk = "".join(self.digest[(start + k) % size] for k in range(self.DIGITS_PER_DRAW))
        self.offset = (self.offset + self.DIGITS_PER_DRAW) % size

        try:
            value = int(chunk, 16)
        except ValueError:
            value = 0
        return value or 1


# =============================================================================
# Distribution and Repetition Math
# =============================================================================

def max_repetitions(length: int) -> int:
    """How many times a single character may appear in a password of `length`."""
    if length <= 8:
        return 2
    if length <= 16:
        return max(2, length // 6)
    if length <= 32:
        return max(2, length // 8)
    return max(3, length // 10)


def target_distribution(
    active: Sequence[str],
    length: int,
    distribution: DistributionConfig = DistributionConfig(),
) -> Dict[str, int]:
    """
    Number of characters per class, summing exactly to `length`.

    Weighted profiles only apply with all four classes active; otherwise the
    length is split evenly. The rounding remainder goes to the first active
    class holding the largest count. No active classes means all of them,
    as in PasswordMapper.
    """
    if not active:
        active = CLASS_NAMES
    targets = {name: 0 for name in CLASS_NAMES}

    weights = distribution.weights_for(length) if len(active) == len(CLASS_NAMES) else None
    if weights is not None:
        for name in active:
            targets[name] = math.floor(length * getattr(weights, name))
    else:
        share = length // len(active)
        for name in active:
            targets[name] = share

    remainder = length - sum(targets.values())
    if remainder > 0:
        largest = max(active, key=lambda name: targets[name])
        targets[largest] += remainder

    return targets


def select_character(
    pool: Sequence[str],
    usage: Dict[str, int],
    budget: int,
    stream: HashStream,
    seed: int,
) -> str:
    """
    Pick a character from `pool`, preferring ones still under `budget`.

    When every candidate is saturated, pick among the least-used ones
    instead (so selection never stalls; the budget may then be exceeded).
    """
    under_budget = [c for c in pool if usage.get(c, 0) < budget]
    if under_budget:
        return under_budget[stream.next(seed) % len(under_budget)]

    least = min(usage.get(c, 0) for c in pool)
    least_used = [c for c in pool if usage.get(c, 0) == least]
    return least_used[stream.next(seed + 1000) % len(least_used)]


def fill_weights(active: Sequence[str], length: int) -> List[int]:
    """Fill-pass weight per active class: symbols 3 and numbers 2 from length 32."""
    weights = []
    for name in active:
        if name == "symbols" and length >= 32:
            weights.append(3)
        elif name == "numbers" and length >= 32:
            weights.append(2)
        else:
            weights.append(1)
    return weights


def pick_weighted_class(active: Sequence[str], weights: Sequence[int], value: int) -> str:
    """
    Class for a draw `value` in [0, sum(weights)).

    Weights are subtracted in order; the first class that brings the
    remainder to zero or below wins.
    """
    remaining = value
    for name, weight in zip(active, weights):
        remaining -= weight
        if remaining <= 0:
            return name
    return active[0]


# =============================================================================
# Output Metrics
# =============================================================================

@dataclass(frozen=True)
class CharacterDiversity:
    total_unique_characters: int
    max_repetitions: int
    average_repetitions: float
    diversity_ratio: float

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)


def _round_half_up(value: float, places: int) -> float:
    scale = 10 ** places
    return math.floor(value * scale + 0.5) / scale


def classify_character(char: str) -> str:
    """Class of a single character, by ASCII range; anything else is a symbol."""
    if "A" <= char <= "Z":
        return "uppercase"
    if "a" <= char <= "z":
        return "lowercase"
    if "0" <= char <= "9":
        return "numbers"
    return "symbols"


def character_distribution(password: str) -> Dict[str, int]:
    """Count characters of each class actually present in `password`."""
    counts = {name: 0 for name in CLASS_NAMES}
    for char in password:
        counts[classify_character(char)] += 1
    return counts


def character_diversity(password: str) -> CharacterDiversity:
    """Unique count, worst repetition, mean repetition and unique/length ratio."""
    if not password:
        return CharacterDiversity(0, 0, 0.0, 0.0)

    counts = Counter(password)
    unique = len(counts)
    return CharacterDiversity(
        total_unique_characters=unique,
        max_repetitions=max(counts.values()),
        average_repetitions=_round_half_up(sum(counts.values()) / unique, 2),
        diversity_ratio=_round_half_up(unique / len(password), 3),
    )


# =============================================================================
# Mapper
# =============================================================================

@dataclass(frozen=True)
class MappingResult:
    password: str
    target_distribution: Dict[str, int]
    character_distribution: Dict[str, int]
    character_diversity: CharacterDiversity


class PasswordMapper:
    """
    Deterministic digest -> password mapping.

    Usage:
        mapper = PasswordMapper()
        result = mapper.map(digest, 16)
        result.password
    """

    def __init__(self, config: GeneratorConfig = DEFAULT_CONFIG):
        self.config = config

    def _pool(self, class_name: str) -> List[str]:
        pool = list(self.config.character_sets.pool(class_name))
        if not pool:
            raise InvalidConfiguration(f"Character pool '{class_name}' cannot be empty")
        return pool

    def _active_classes(self, options: PasswordOptions) -> Sequence[str]:
        if not isinstance(options, PasswordOptions):
            raise InvalidConfiguration("Options must be a PasswordOptions instance")

        active = options.active_classes()
        if not active:
            logger.warning("No character class enabled; falling back to all classes")
            active = CLASS_NAMES
        return active

    def map(
        self,
        digest: str,
        length: int,
        options: Optional[PasswordOptions] = None,
    ) -> MappingResult:
        """
        Build the password for `digest`.

        Args:
            digest: Hex digest from DigestDeriver
            length: Number of characters to produce
            options: Enabled classes; None uses the configured defaults

        Returns:
            MappingResult with password, target and actual class counts,
            and diversity metrics

        Raises:
            InvalidInput: empty digest or non-positive length
            InvalidConfiguration: malformed options or empty pool
        """
        if isinstance(length, bool) or not isinstance(length, int) or length < 1:
            raise InvalidInput("Password length must be a positive integer")

        active = self._active_classes(options if options is not None else self.config.options)
        stream = HashStream(digest)

        password: List[Optional[str]] = [None] * length
        targets = target_distribution(active, length, self.config.distribution)
        budget = max_repetitions(length)
        usage: Dict[str, int] = {}

        logger.debug("Mapping digest: length=%d, classes=%s, budget=%d", length, ",".join(active), budget)

        used = self._place(password, active, targets, stream, usage, budget)
        self._fill(password, active, used, stream, usage, budget)
        self._shuffle(password, stream)

        result = "".join(password)
        return MappingResult(
            password=result,
            target_distribution=targets,
            character_distribution=character_distribution(result),
            character_diversity=character_diversity(result),
        )

    def _place(self, password, active, targets, stream, usage, budget) -> Set[int]:
        """Placement pass: put each class's target count at hash-chosen free positions."""
        length = len(password)
        max_attempts = length * 2
        used: Set[int] = set()

        for name in active:
            pool = self._pool(name)
            # Class seed is the code point of the class name's first letter
            class_seed = ord(name[0])

            for slot in range(targets[name]):
                attempts = 0
                while True:
                    position = stream.next(class_seed * 1000 + slot * 100 + attempts) % length
                    attempts += 1
                    if position not in used or attempts >= max_attempts:
                        break

                if attempts >= max_attempts:
                    position = next((j for j in range(length) if j not in used), position)

                if position in used:
                    continue

                used.add(position)
                char = select_character(pool, usage, budget, stream, class_seed * 2000 + slot * 300)
                password[position] = char
                usage[char] = usage.get(char, 0) + 1

        return used

    def _fill(self, password, active, used, stream, usage, budget) -> None:
        """Fill pass: weight-biased class choice for every empty position."""
        length = len(password)
        weights = fill_weights(active, length)
        total_weight = sum(weights)

        for i in range(length):
            if i in used:
                continue

            chosen = pick_weighted_class(active, weights, stream.next(i * 500) % total_weight)
            char = select_character(self._pool(chosen), usage, budget, stream, i * 600)
            password[i] = char
            usage[char] = usage.get(char, 0) + 1

    @staticmethod
    def _shuffle(password, stream) -> None:
        """Fisher-Yates, from the last index down to 1."""
        for i in range(len(password) - 1, 0, -1):
            j = stream.next(i * 400) % (i + 1)
            password[i], password[j] = password[j], password[i]


def map_to_password(
    digest: str,
    length: int,
    options: Optional[PasswordOptions] = None,
    config: GeneratorConfig = DEFAULT_CONFIG,
) -> str:
    """Convenience wrapper: map a digest and return only the password."""
    return PasswordMapper(config).map(digest, length, options).password
